# storefront/utils/retry.py
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
import requests
import redis

from storefront.domain.errors import ConflictError
from storefront.utils.settings import ORDER_CONFLICT_RETRIES


def http_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type(requests.RequestException),
    )


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )


def conflict_retry():
    # optimistic CAS miss: the whole unit of work is rerun on a fresh read
    return retry(
        reraise=True,
        stop=stop_after_attempt(ORDER_CONFLICT_RETRIES),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=0.5),
        retry=retry_if_exception_type(ConflictError),
    )
