# storefront/api/deps.py
from functools import wraps

from fastapi import Request

from storefront.container import Storefront


def get_storefront(request: Request) -> Storefront:
    return request.app.state.storefront


def locked(endpoint):
    """
    Run a sync endpoint while holding the storefront lock, so the session
    watchdog cannot log out between two reads of the same request.
    The endpoint must take the storefront as `sf`.
    """

    @wraps(endpoint)
    def wrapper(*args, **kwargs):
        with kwargs["sf"].lock:
            return endpoint(*args, **kwargs)

    return wrapper
