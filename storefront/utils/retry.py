# storefront/utils/retry.py
import logging

from tenacity import before_sleep_log, retry, stop_after_attempt, wait_exponential, retry_if_exception_type
import requests
import redis

from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def http_retry():
    #only transport failures, an HTTP error response is an answer not a glitch
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )


def redis_retry():
    # a ResponseError (wrong type, bad command) fails the same way every time
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        retry=retry_if_exception_type((redis.ConnectionError, redis.TimeoutError)),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
