# app/utils/retry.py
from tenacity import (
    retry,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
    wait_random,
    retry_if_exception,
    retry_if_exception_type,
)
import requests
import redis

from app.domain.errors import CartLockBusy


def is_transient_http_error(e: BaseException) -> bool:
    """Siec, timeout albo 5xx. Pozostale 4xx to blad wywolujacego, ponawianie nic nie da."""
    if isinstance(e, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(e, requests.HTTPError):
        response = e.response
        return response is not None and response.status_code >= 500
    return False


def http_retry():
    #404 leci od razu jako NotFoundError
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception(is_transient_http_error),
    )


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )


def lock_wait(max_wait: float):
    #czekamy na zwolnienie locka koszyka, krotkie losowe odstepy zeby watki sie nie zderzaly
    return retry(
        reraise=True,
        stop=stop_after_delay(max_wait),
        wait=wait_random(min=0.01, max=0.05),
        retry=retry_if_exception_type(CartLockBusy),
    )
