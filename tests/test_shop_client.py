"""Tests for the shop API client."""

from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
import requests

from storefront.domain.errors import ApiError, ConflictError
from storefront.domain.schemas import (
    CreateCustomerDto,
    CreateOrderDto,
    CreateOrderEntryDto,
    CustomerProfile,
    OrderRequest,
)
from storefront.services.shop_client import ShopClient


def _response(status=200, payload=None, text=""):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 400
    resp.text = text
    resp.json.return_value = payload
    return resp


def _client(*responses, token=None):
    http = MagicMock()
    http.request.side_effect = list(responses)
    client = ShopClient(base_url="http://shop.test/", token_provider=lambda: token, session=http)
    return client, http


def _order_request():
    return OrderRequest(
        customer=CreateCustomerDto(name="Pam", email="pam@dunder.com"),
        order=CreateOrderDto(
            order_date=datetime(2026, 10, 19, tzinfo=timezone.utc),
            total_amount=Decimal("42.50"),
        ),
        order_entries=[CreateOrderEntryDto(product_id=3, quantity=2)],
    )


class TestPlaceOrder:
    def test_posts_camel_case_payload(self):
        client, http = _client(_response(201, {"id": 9, "deliveryDate": "2026-10-22", "totalAmount": 42.5}))

        order = client.place_order(_order_request())

        method, url = http.request.call_args.args
        body = http.request.call_args.kwargs["json"]
        assert (method, url) == ("POST", "http://shop.test/api/order")
        assert body["orderEntries"] == [{"productId": 3, "quantity": 2}]
        assert body["order"]["totalAmount"] == "42.50"
        assert order.id == 9
        assert order.delivery_date == "2026-10-22"
        assert order.total_amount == Decimal("42.5")

    def test_conflict(self):
        client, _ = _client(_response(409, text="Email exists"))
        with pytest.raises(ConflictError) as exc:
            client.place_order(_order_request())
        assert exc.value.status_code == 409

    def test_server_error(self):
        client, _ = _client(_response(500, text="boom"))
        with pytest.raises(ApiError) as exc:
            client.place_order(_order_request())
        assert exc.value.status_code == 500

    def test_not_retried_on_connection_error(self):
        client, http = _client(requests.ConnectionError("down"), _response(201, {"id": 1}))
        with pytest.raises(requests.ConnectionError):
            client.place_order(_order_request())
        assert http.request.call_count == 1

    def test_order_without_id_is_api_error(self):
        client, _ = _client(_response(200, {"orderDate": "2026-10-19T00:00:00Z", "totalAmount": 120.0}))
        with pytest.raises(ApiError) as exc:
            client.place_order(_order_request())
        assert exc.value.status_code == 200

    def test_non_json_body_is_api_error(self):
        resp = _response(200, text="<html>gateway</html>")
        resp.json.side_effect = ValueError("Expecting value")
        client, _ = _client(resp)
        with pytest.raises(ApiError):
            client.place_order(_order_request())


class TestLogin:
    def test_login_returns_role_and_token(self):
        client, http = _client(_response(200, {"email": "a@b.com", "roleType": "Admin", "token": "t"}))
        resp = client.login("a@b.com", "pw")
        assert resp.role_type == "Admin"
        assert resp.token == "t"
        assert http.request.call_args.kwargs["json"] == {"email": "a@b.com", "password": "pw"}

    def test_login_retries_connection_errors(self):
        client, http = _client(requests.ConnectionError("blip"), _response(200, {"email": "a@b.com"}))
        assert client.login("a@b.com", "pw").email == "a@b.com"
        assert http.request.call_count == 2

    def test_unauthorized_is_not_retried(self):
        client, http = _client(_response(401, text="nope"))
        with pytest.raises(ApiError):
            client.login("a@b.com", "bad")
        assert http.request.call_count == 1


class TestCustomers:
    def test_bearer_token_attached(self):
        client, http = _client(_response(204), token="tok")
        client.update_customer(4, CustomerProfile(id=4, name="Pam"))
        assert http.request.call_args.kwargs["headers"] == {"Authorization": "Bearer tok"}
        assert http.request.call_args.args == ("PUT", "http://shop.test/api/customer/4")

    def test_no_token_no_header(self):
        client, http = _client(_response(204))
        client.update_customer(4, CustomerProfile(id=4, name="Pam"))
        assert http.request.call_args.kwargs["headers"] == {}

    def test_get_by_email(self):
        client, _ = _client(_response(200, {"id": 4, "name": "Pam", "address": None, "phone": None, "email": "pam@dunder.com", "orders": []}))
        profile = client.get_customer_by_email("pam@dunder.com")
        assert profile == CustomerProfile(id=4, name="Pam", email="pam@dunder.com")
