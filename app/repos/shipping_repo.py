# app/repos/shipping_repo.py
from datetime import datetime, timezone
from typing import List

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.data.models.shipping import ShippingLogModel, StaffModel


class ShippingRepo:
    def __init__(self, db: Session):
        self.db = db

    def add(self, log: ShippingLogModel) -> ShippingLogModel:
        self.db.add(log)
        self.db.commit()
        self.db.refresh(log)
        return log

    def get_by_order_code(self, order_code: str) -> ShippingLogModel | None:
        return self.db.execute(
            select(ShippingLogModel).where(ShippingLogModel.order_code == order_code)
        ).scalar_one_or_none()

    def update_status(self, order_code: str, status: str, status_text: str | None) -> int:
        #ten sam status drugi raz nie zmienia nic
        stmt = (
            update(ShippingLogModel)
            .where(
                ShippingLogModel.order_code == order_code,
                ShippingLogModel.status != status,
            )
            .values(status=status, status_text=status_text, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        self.db.commit()
        return result.rowcount

    def unassigned_created_before(self, cutoff: datetime) -> List[ShippingLogModel]:
        return list(
            self.db.execute(
                select(ShippingLogModel)
                .where(
                    ShippingLogModel.staff_id.is_(None),
                    ShippingLogModel.created_at < cutoff,
                )
                .order_by(ShippingLogModel.created_at)
            ).scalars()
        )

    def active_staff(self) -> List[StaffModel]:
        return list(
            self.db.execute(select(StaffModel).where(StaffModel.active.is_(True))).scalars()
        )

    def assign(self, log_id: int, staff_id: int) -> int:
        #nie nadpisujemy przydzialu zrobionego w miedzyczasie recznie
        stmt = (
            update(ShippingLogModel)
            .where(ShippingLogModel.id == log_id, ShippingLogModel.staff_id.is_(None))
            .values(staff_id=staff_id, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount

    def commit(self):
        self.db.commit()
