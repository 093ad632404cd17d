# app/services/inventory_service.py
from sqlalchemy.orm import Session

from app.data.models.inventory import InventoryModel
from app.domain.errors import NotFoundError, InvalidArgumentError
from app.domain.schemas import ReserveResult, StockOut
from app.repos.inventory_repo import InventoryRepo
from app.utils.logging import get_logger

logger = get_logger(__name__)


def _to_stock(row: InventoryModel) -> StockOut:
    return StockOut(
        product_id=row.product_id,
        quantity=row.quantity,
        reserved=row.reserved,
        available=row.quantity - row.reserved,
        updated_at=row.updated_at,
    )


class InventoryService:
    """
    Rezerwacje stanu magazynowego.
    reserve zmniejsza dostepna ilosc bez ruszania stanu fizycznego,
    commit_reservation dopiero zdejmuje towar ze stanu (po zamowieniu).
    """

    def __init__(self, db: Session):
        self.repo = InventoryRepo(db)

    def reserve_stock(self, product_id: str, quantity: int) -> ReserveResult:
        if quantity <= 0:
            raise InvalidArgumentError("Quantity must be greater than 0")

        row = self.repo.get(product_id)
        if not row:
            logger.warning(f"Reserve {quantity} of {product_id} refused: product not stocked")
            return ReserveResult(success=False, reason="Product is not stocked", available=0)

        rowcount = self.repo.try_reserve(product_id, quantity)
        self.repo.commit()

        if rowcount == 0:
            #ktos zabral towar, podajemy aktualny stan
            self.repo.refresh(row)
            available = row.quantity - row.reserved
            logger.warning(
                f"Reserve {quantity} of {product_id} refused, available: {available}"
            )
            return ReserveResult(
                success=False,
                reason="Insufficient stock",
                available=available,
            )

        self.repo.refresh(row)
        logger.info(f"Reserved {quantity} of {product_id}, reserved now {row.reserved}")
        return ReserveResult(success=True, available=row.quantity - row.reserved)

    def release_reservation(self, product_id: str, quantity: int) -> None:
        if quantity <= 0:
            return

        rowcount = self.repo.release(product_id, quantity)
        self.repo.commit()

        if rowcount == 0:
            logger.warning(f"Release {quantity} of {product_id}: product not stocked, ignored")
            return

        logger.info(f"Released {quantity} of {product_id}")

    def commit_reservation(self, product_id: str, quantity: int) -> StockOut:
        row = self.repo.get(product_id)
        if not row:
            raise NotFoundError(f"Product with ID {product_id} is not stocked")

        rowcount = self.repo.commit_sale(product_id, quantity)
        if rowcount == 0:
            self.repo.rollback()
            raise InvalidArgumentError(
                f"Cannot commit {quantity} units of {product_id}, only {row.reserved} reserved"
            )

        self.repo.commit()
        self.repo.refresh(row)
        logger.info(f"Committed {quantity} of {product_id}, stock now {row.quantity}")
        return _to_stock(row)

    def get_stock(self, product_id: str) -> StockOut:
        row = self.repo.get(product_id)
        if not row:
            raise NotFoundError(f"Product with ID {product_id} is not stocked")
        return _to_stock(row)

    def set_stock(self, product_id: str, quantity: int) -> StockOut:
        if quantity < 0:
            raise InvalidArgumentError("Stock quantity cannot be negative")

        row = self.repo.get(product_id)
        if not row:
            created = self.repo.add(InventoryModel(product_id=product_id, quantity=quantity, reserved=0))
            logger.info(f"Stocked new product {product_id} with {quantity}")
            return _to_stock(created)

        if quantity < row.reserved:
            raise InvalidArgumentError(
                f"Stock of {product_id} cannot drop below reserved amount {row.reserved}"
            )

        row.quantity = quantity
        self.repo.commit()
        self.repo.refresh(row)
        logger.info(f"Stock of {product_id} set to {quantity}")
        return _to_stock(row)
