from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey

from app.data.database import Base


class StaffModel(Base):
    __tablename__ = "staff"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    active = Column(Boolean, nullable=False, default=True)


class ShippingLogModel(Base):
    __tablename__ = "shipping_logs"

    id = Column(Integer, primary_key=True)
    order_code = Column(String, nullable=False, unique=True, index=True)  # kod przesylki GHN

    status = Column(String, nullable=False, default="ready_to_pick")
    status_text = Column(String, nullable=True)
    staff_id = Column(Integer, ForeignKey("staff.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
