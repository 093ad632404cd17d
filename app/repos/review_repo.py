# app/repos/review_repo.py
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.data.models.review import ReviewModel


class ReviewRepo:
    def __init__(self, db: Session):
        self.db = db

    def add(self, review: ReviewModel) -> ReviewModel:
        self.db.add(review)
        self.db.commit()
        self.db.refresh(review)
        return review

    def get(self, review_id: str) -> ReviewModel | None:
        return self.db.get(ReviewModel, review_id)

    def find_by_user_and_product(self, user_id: str, product_id: str) -> ReviewModel | None:
        return self.db.execute(
            select(ReviewModel).where(
                ReviewModel.user_id == user_id,
                ReviewModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def find_all(self, **filters) -> List[ReviewModel]:
        stmt = select(ReviewModel).order_by(ReviewModel.created_at.desc())
        for column, value in filters.items():
            stmt = stmt.where(getattr(ReviewModel, column) == value)
        return list(self.db.execute(stmt).scalars())

    def ratings_for_product(self, product_id: str) -> List[int]:
        return list(
            self.db.execute(
                select(ReviewModel.rating).where(ReviewModel.product_id == product_id)
            ).scalars()
        )

    def save(self, review: ReviewModel) -> ReviewModel:
        self.db.commit()
        self.db.refresh(review)
        return review

    def delete(self, review: ReviewModel) -> None:
        self.db.delete(review)
        self.db.commit()

    def rollback(self):
        self.db.rollback()
