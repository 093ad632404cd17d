from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint

from app.data.database import Base


class InventoryModel(Base):
    __tablename__ = "inventory"

    product_id = Column(String, primary_key=True)

    quantity = Column(Integer, nullable=False, default=0)  # stan fizyczny
    reserved = Column(Integer, nullable=False, default=0)  # trzymane przez koszyki
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint("reserved >= 0", name="ck_inventory_reserved_non_negative"),
        CheckConstraint("reserved <= quantity", name="ck_inventory_reserved_le_quantity"),
    )
