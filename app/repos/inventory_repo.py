# app/repos/inventory_repo.py
from datetime import datetime, timezone

from sqlalchemy import update, case
from sqlalchemy.orm import Session

from app.data.models.inventory import InventoryModel


class InventoryRepo:
    """
    Dostep do tabeli inventory.
    Rezerwacja i zwolnienie to pojedyncze warunkowe UPDATE,
    baza robi read-modify-write atomowo na jednym wierszu.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: str) -> InventoryModel | None:
        return self.db.get(InventoryModel, product_id)

    def add(self, row: InventoryModel) -> InventoryModel:
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def try_reserve(self, product_id: str, quantity: int) -> int:
        #UPDATE inventory SET reserved = reserved + 2 WHERE product_id = 'P1' AND quantity - reserved >= 2
        stmt = (
            update(InventoryModel)
            .where(
                InventoryModel.product_id == product_id,
                InventoryModel.quantity - InventoryModel.reserved >= quantity,
            )
            .values(
                reserved=InventoryModel.reserved + quantity,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        return result.rowcount

    def release(self, product_id: str, quantity: int) -> int:
        #nigdy ponizej zera
        stmt = (
            update(InventoryModel)
            .where(InventoryModel.product_id == product_id)
            .values(
                reserved=case(
                    (InventoryModel.reserved >= quantity, InventoryModel.reserved - quantity),
                    else_=0,
                ),
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        return result.rowcount

    def commit_sale(self, product_id: str, quantity: int) -> int:
        #rezerwacja -> sprzedaz, schodzi stan fizyczny i rezerwacja
        stmt = (
            update(InventoryModel)
            .where(
                InventoryModel.product_id == product_id,
                InventoryModel.reserved >= quantity,
            )
            .values(
                quantity=InventoryModel.quantity - quantity,
                reserved=InventoryModel.reserved - quantity,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()

    def refresh(self, row: InventoryModel):
        self.db.refresh(row)
