# app/data/redis_client.py
import redis
from fastapi import Request

from app.utils.settings import REDIS_URL


def create_redis(url: str | None = None) -> redis.Redis:
    return redis.Redis.from_url(url or REDIS_URL, decode_responses=True)


def get_redis(request: Request) -> redis.Redis:
    #klient (i pula polaczen) tworzony raz w lifespan
    return request.app.state.redis
