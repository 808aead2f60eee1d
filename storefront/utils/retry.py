# storefront/utils/retry.py
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception, retry_if_exception_type, before_sleep_log
import logging

import requests
import redis

from storefront.utils.settings import RETRY_ATTEMPTS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _retrying(condition, multiplier: float, max_wait: float):
    # reraise: po ostatniej probie wylatuje oryginalny wyjatek, nie RetryError
    return retry(
        reraise=True,
        stop=stop_after_attempt(RETRY_ATTEMPTS),
        wait=wait_exponential(multiplier=multiplier, min=multiplier, max=max_wait),
        retry=condition,
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )


def is_transient_http_error(exc: BaseException) -> bool:
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(exc, requests.HTTPError):
        # 4xx to blad zapytania, ponowienie nic nie zmieni
        return exc.response is not None and exc.response.status_code >= 500
    return False


def http_retry():
    """Katalog po HTTP: bledy polaczenia, timeouty i 5xx."""
    return _retrying(retry_if_exception(is_transient_http_error), multiplier=0.3, max_wait=3)


def redis_retry():
    return _retrying(retry_if_exception_type(redis.RedisError), multiplier=0.2, max_wait=2)
