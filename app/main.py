# app/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from app.api.routers import carts, health, inventory, notifications, payments, reviews, shipping
from app.data.database import Base, engine
from app.data.redis_client import create_redis
from app.services.notification_service import ConnectionRegistry
from app.utils.logging import get_logger

#import modeli przed create_all zeby byly w Base.metadata
from app.data import models as _models  # noqa: F401

logger = get_logger(__name__)


def init_db():
    logger.info(f"Initializing database, tables: {list(Base.metadata.tables.keys())}")
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    app.state.redis = create_redis()
    app.state.connections = ConnectionRegistry()
    logger.info("Cart service started")

    yield

    await app.state.connections.close_all()
    app.state.redis.close()
    logger.info("Cart service stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Cart Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.include_router(health.router)
    app.include_router(carts.router)
    app.include_router(inventory.router)
    app.include_router(notifications.router)
    app.include_router(payments.router)
    app.include_router(reviews.router)
    app.include_router(shipping.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
