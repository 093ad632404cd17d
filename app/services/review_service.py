# app/services/review_service.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.data.models.review import ReviewModel
from app.domain.errors import NotFoundError, InvalidArgumentError, ForbiddenError
from app.domain.schemas import ReviewIn, ReviewUpdateIn
from app.repos.review_repo import ReviewRepo
from app.utils.logging import get_logger

logger = get_logger(__name__)


class ReviewService:
    def __init__(self, db: Session):
        self.repo = ReviewRepo(db)

    def create(self, user_id: str, data: ReviewIn) -> ReviewModel:
        if self.repo.find_by_user_and_product(user_id, data.product_id):
            raise InvalidArgumentError(
                "You have already reviewed this product. Please update your existing review instead."
            )

        review = ReviewModel(
            user_id=user_id,
            product_id=data.product_id,
            rating=data.rating,
            content=data.content,
        )
        try:
            created = self.repo.add(review)
        except IntegrityError:
            #dwa rownolegle create, drugi trafia w unique
            self.repo.rollback()
            raise InvalidArgumentError("You have already reviewed this product.")

        logger.info(f"Review {created.review_id} of {data.product_id} created by {user_id}")
        return created

    def find_all(self) -> List[ReviewModel]:
        return self.repo.find_all()

    def find_by_product(self, product_id: str) -> List[ReviewModel]:
        return self.repo.find_all(product_id=product_id)

    def find_by_user(self, user_id: str) -> List[ReviewModel]:
        return self.repo.find_all(user_id=user_id)

    def find_one(self, review_id: str) -> ReviewModel:
        review = self.repo.get(review_id)
        if review is None:
            raise NotFoundError(f"Review with ID {review_id} not found")
        return review

    def update(self, user_id: str, review_id: str, data: ReviewUpdateIn) -> ReviewModel:
        review = self.find_one(review_id)
        if review.user_id != user_id:
            raise ForbiddenError("You can only update your own reviews")

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(review, field, value)
        return self.repo.save(review)

    def remove(self, user_id: str, review_id: str) -> None:
        review = self.find_one(review_id)
        if review.user_id != user_id:
            raise ForbiddenError("You can only delete your own reviews")

        self.repo.delete(review)
        logger.info(f"Review {review_id} deleted by {user_id}")

    def get_product_rating_stats(self, product_id: str) -> Dict[str, Any]:
        """
        Srednia (1 miejsce po przecinku, half-up), liczba recenzji
        i rozklad ocen 1..5 (zawsze piec kubelkow, takze pustych).
        """
        ratings = self.repo.ratings_for_product(product_id)
        total = len(ratings)

        average = Decimal("0")
        if total:
            average = (Decimal(sum(ratings)) / Decimal(total)).quantize(
                Decimal("0.1"), rounding=ROUND_HALF_UP
            )

        distribution = [
            {"rating": rating, "count": sum(1 for r in ratings if int(r) == rating)}
            for rating in range(1, 6)
        ]

        return {
            "average_rating": float(average),
            "total_reviews": total,
            "rating_distribution": distribution,
        }
