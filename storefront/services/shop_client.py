# storefront/services/shop_client.py
from typing import Callable

import requests
from pydantic import BaseModel, ValidationError

from storefront.domain.errors import ApiError, ConflictError
from storefront.domain.schemas import AuthResponse, CustomerProfile, OrderDto, OrderRequest
from storefront.utils.retry import http_retry
from storefront.utils.settings import SHOP_API_URL, HTTP_TIMEOUT
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class ShopClient:
    """
    HTTP client of the shop API (auth, orders, customers).
    Non-2xx responses are raised as ApiError, 409 as ConflictError.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: int = HTTP_TIMEOUT,
        token_provider: Callable[[], str | None] | None = None,
        session: requests.Session | None = None,
    ):
        self.base_url = (base_url or SHOP_API_URL).rstrip("/")
        self.timeout = timeout
        self.token_provider = token_provider
        self.http = session or requests.Session()

    def _headers(self) -> dict:
        token = self.token_provider() if self.token_provider else None
        return {"Authorization": f"Bearer {token}"} if token else {}

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.info(f"ShopClient {method} {url}")

        resp = self.http.request(method, url, headers=self._headers(), timeout=self.timeout, **kwargs)

        if resp.status_code == 409:
            raise ConflictError(resp.text)
        if not resp.ok:
            raise ApiError(resp.status_code, resp.text)
        return resp

    @staticmethod
    def _parse(model: type[BaseModel], resp: requests.Response):
        # a 2xx we cannot read is still a failed call for the caller
        try:
            return model.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Unexpected {model.__name__} payload from shop API: {e}")
            raise ApiError(resp.status_code, f"Malformed {model.__name__} response")

    @http_retry()
    def login(self, email: str, password: str) -> AuthResponse:
        resp = self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        return self._parse(AuthResponse, resp)

    # not retried, a replayed POST could create the order twice
    def place_order(self, order: OrderRequest) -> OrderDto:
        resp = self._request("POST", "/api/order", json=order.model_dump(mode="json", by_alias=True))
        return self._parse(OrderDto, resp)

    @http_retry()
    def update_customer(self, customer_id: int, profile: CustomerProfile) -> None:
        self._request("PUT", f"/api/customer/{customer_id}", json=profile.model_dump(mode="json"))

    @http_retry()
    def get_customer_by_email(self, email: str) -> CustomerProfile:
        resp = self._request("GET", f"/api/customer/email/{email}")
        return self._parse(CustomerProfile, resp)
