# app/data/seed.py
from app.data.database import SessionLocal
from app.services.inventory_service import InventoryService

#stany dla produktow z product_service (dev mock)
DEV_STOCK = {"P1": 50, "P2": 20, "P3": 5}


def seed():
    db = SessionLocal()
    try:
        svc = InventoryService(db)
        for product_id, quantity in DEV_STOCK.items():
            svc.set_stock(product_id, quantity)
    finally:
        db.close()


if __name__ == "__main__":
    seed()
