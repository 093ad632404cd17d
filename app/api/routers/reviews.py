# app/api/routers/reviews.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.errors import NotFoundError
from app.domain.schemas import ReviewIn, ReviewUpdateIn, ReviewOut, RatingStatsOut
from app.services.review_service import ReviewService

router = APIRouter(prefix="/reviews", tags=["reviews"])


def get_service(db: Session = Depends(get_db)):
    return ReviewService(db)


@router.post("", response_model=ReviewOut, status_code=201)
def create_review(
    payload: ReviewIn,
    user_id: str = Query(...),
    svc: ReviewService = Depends(get_service),
):
    try:
        return svc.create(user_id, payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=List[ReviewOut])
def list_reviews(svc: ReviewService = Depends(get_service)):
    return svc.find_all()


@router.get("/product/{product_id}", response_model=List[ReviewOut])
def product_reviews(product_id: str, svc: ReviewService = Depends(get_service)):
    return svc.find_by_product(product_id)


@router.get("/product/{product_id}/stats", response_model=RatingStatsOut)
def product_rating_stats(product_id: str, svc: ReviewService = Depends(get_service)):
    return svc.get_product_rating_stats(product_id)


@router.get("/user/{user_id}", response_model=List[ReviewOut])
def user_reviews(user_id: str, svc: ReviewService = Depends(get_service)):
    return svc.find_by_user(user_id)


@router.get("/{review_id}", response_model=ReviewOut)
def get_review(review_id: str, svc: ReviewService = Depends(get_service)):
    try:
        return svc.find_one(review_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/{review_id}", response_model=ReviewOut)
def update_review(
    review_id: str,
    payload: ReviewUpdateIn,
    user_id: str = Query(...),
    svc: ReviewService = Depends(get_service),
):
    try:
        return svc.update(user_id, review_id, payload)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{review_id}", status_code=204)
def delete_review(
    review_id: str,
    user_id: str = Query(...),
    svc: ReviewService = Depends(get_service),
):
    try:
        svc.remove(user_id, review_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=204)
