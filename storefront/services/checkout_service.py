# storefront/services/checkout_service.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List

import requests

from storefront.domain.errors import ApiError, ConflictError
from storefront.domain.schemas import (
    EMPTY_SHIPPING_OPTION,
    AuthState,
    CheckoutTotals,
    CreateCustomerDto,
    CreateOrderDto,
    CreateOrderEntryDto,
    LoginForm,
    Notification,
    OrderConfirmation,
    OrderRequest,
    PaymentDetails,
    ShippingOption,
    ShippingQuote,
)
from storefront.services.basket_service import BasketService
from storefront.services.profile_service import CONFLICT_MESSAGE, ProfileStore
from storefront.services.session_service import SessionService
from storefront.services.shipping_catalog import ShippingCatalog
from storefront.services.shop_client import ShopClient
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

STEP_LOGIN = 1
STEP_SHIPPING = 2
STEP_PAYMENT = 3
STEP_CONFIRMATION = 4
STEP_RECEIPT = 5

STEP_NAMES = {
    STEP_LOGIN: "Login",
    STEP_SHIPPING: "Shipping",
    STEP_PAYMENT: "Payment",
    STEP_CONFIRMATION: "Confirmation",
    STEP_RECEIPT: "Receipt",
}

# required fields per step and the message shown when one is empty
STEP_FIELDS = {
    STEP_LOGIN: {
        "email": "Email is required",
        "password": "Password is required",
    },
    STEP_SHIPPING: {
        "name": "Name is required",
        "address": "Address is required",
        "phone": "Phone number is required",
    },
    STEP_PAYMENT: {
        "card_number": "Card number is required",
        "expiration_date": "Expiration date is required",
        "cvv": "CVV is required",
    },
}

ORDER_STATUS_PENDING = "Pending"
GENERIC_ORDER_ERROR = "Error placing order. Please try again."


def shipping_cost(subtotal: Decimal, option: ShippingOption) -> Decimal:
    if subtotal >= option.free_shipping_requirement:
        return Decimal("0.00")
    return option.price


class CheckoutController:
    """
    Checkout wizard: Login -> Shipping -> Payment -> Confirmation -> Receipt.

    Lives as long as the checkout screen. It owns only the transient form,
    validation and receipt state; basket, session and profile are read from
    their own stores on every use.
    """

    def __init__(
        self,
        basket_service: BasketService,
        session: SessionService,
        profile: ProfileStore,
        shipping_catalog: ShippingCatalog,
        shop_client: ShopClient,
        notifier=None,
    ):
        self.basket_service = basket_service
        self.session = session
        self.profile = profile
        self.shipping_catalog = shipping_catalog
        self.shop_client = shop_client
        self.notifier = notifier

        self._reset_state()
        self._disconnect = session.changed.connect(self._on_session_changed)

    def _reset_state(self) -> None:
        self.current_step = STEP_SHIPPING if self.session.state.is_logged_in else STEP_LOGIN
        self.login_form = LoginForm()
        self.payment = PaymentDetails()
        self.errors: Dict[str, str] = {f: "" for fields in STEP_FIELDS.values() for f in fields}
        self.selected_shipping: ShippingOption = EMPTY_SHIPPING_OPTION
        self.confirmation: OrderConfirmation | None = None
        self.notifications: List[Notification] = []

    def reset(self) -> None:
        self._reset_state()

    def close(self) -> None:
        self._disconnect()

    @property
    def step_name(self) -> str:
        return STEP_NAMES[self.current_step]

    def _on_session_changed(self, state: AuthState) -> None:
        # external override, not a user transition
        self.current_step = STEP_SHIPPING if state.is_logged_in else STEP_LOGIN
        logger.info(f"Login state changed, checkout moved to {self.step_name}")

    #form input
    def set_login(self, email: str | None = None, password: str | None = None) -> None:
        if email is not None:
            self.profile.update(email=email)
            self.login_form = self.login_form.model_copy(update={"email": email})
        if password is not None:
            self.login_form = self.login_form.model_copy(update={"password": password})

    def set_address(self, name: str | None = None, address: str | None = None, phone: str | None = None) -> None:
        fields = {k: v for k, v in {"name": name, "address": address, "phone": phone}.items() if v is not None}
        if fields:
            self.profile.update(**fields)

    def set_payment(self, **fields) -> None:
        self.payment = self.payment.model_copy(update={k: v for k, v in fields.items() if v is not None})

    def select_shipping(self, option_id: int) -> ShippingOption:
        option = self.shipping_catalog.get(option_id)
        if option is None:
            raise ValueError(f"Unknown shipping option {option_id}")
        self.selected_shipping = option
        return option

    #validation
    def _field_values(self) -> Dict[str, str]:
        customer = self.profile.get()
        return {
            "email": customer.email,
            "password": self.login_form.password,
            "name": customer.name,
            "address": customer.address,
            "phone": customer.phone,
            "card_number": self.payment.card_number,
            "expiration_date": self.payment.expiration_date,
            "cvv": self.payment.cvv,
        }

    def validate(self, step: int) -> bool:
        required = STEP_FIELDS.get(step)
        if not required:
            return True

        values = self._field_values()
        for field, message in required.items():
            self.errors[field] = "" if values[field] else message

        return all(not self.errors[field] for field in required)

    #transitions
    def next_step(self) -> bool:
        if self.current_step == STEP_CONFIRMATION:
            return self.place_order()

        if self.current_step == STEP_RECEIPT:
            return False

        if not self.validate(self.current_step):
            logger.info(f"Checkout step {self.step_name} has missing fields")
            return False

        self.current_step += 1
        return True

    def prev_step(self) -> bool:
        if self.current_step not in (STEP_SHIPPING, STEP_PAYMENT, STEP_CONFIRMATION):
            return False
        self.current_step -= 1
        return True

    def logout(self) -> None:
        self.session.logout()
        self.profile.clear()
        self.login_form = LoginForm()

    #totals
    def totals(self) -> CheckoutTotals:
        subtotal = self.basket_service.total(self.basket_service.load())
        cost = shipping_cost(subtotal, self.selected_shipping)
        return CheckoutTotals(subtotal=subtotal, shipping_cost=cost, total=subtotal + cost)

    def shipping_quotes(self) -> List[ShippingQuote]:
        """Every catalog option with its cost for the current basket."""
        subtotal = self.basket_service.total(self.basket_service.load())
        return [
            ShippingQuote(
                **option.model_dump(),
                shipping_cost=shipping_cost(subtotal, option),
                remaining_for_free=max(option.free_shipping_requirement - subtotal, Decimal("0.00")),
            )
            for option in self.shipping_catalog.list_options()
        ]

    #order
    def build_order_request(self) -> OrderRequest:
        customer = self.profile.get()
        basket = self.basket_service.load()

        return OrderRequest(
            customer=CreateCustomerDto(
                name=customer.name,
                address=customer.address,
                phone=customer.phone,
                email=customer.email,
            ),
            order=CreateOrderDto(
                order_date=datetime.now(timezone.utc),
                delivery_date=None,
                status=ORDER_STATUS_PENDING,
                total_amount=self.totals().total,
            ),
            order_entries=[
                CreateOrderEntryDto(product_id=i.product_id, quantity=i.quantity)
                for i in basket
                if i.quantity > 0
            ],
        )

    def place_order(self) -> bool:
        if self.current_step != STEP_CONFIRMATION:
            raise ValueError("Order can only be placed from the confirmation step")

        request = self.build_order_request()

        try:
            order = self.shop_client.place_order(request)
        except ConflictError:
            logger.info("Order rejected by the shop API, e-mail already exists")
            self.notifications.append(Notification(level="error", message=CONFLICT_MESSAGE))
            return False
        except (ApiError, requests.RequestException) as e:
            logger.error(f"Order submission failed: {e}")
            self.notifications.append(Notification(level="error", message=GENERIC_ORDER_ERROR))
            return False

        self.on_order_placed(
            OrderConfirmation(
                order_id=order.id,
                delivery_date=order.delivery_date,
                total_amount=order.total_amount,
            )
        )
        return True

    def on_order_placed(self, confirmation: OrderConfirmation) -> None:
        self.confirmation = confirmation
        self.current_step = STEP_RECEIPT
        self.basket_service.clear(self.basket_service.load())
        self.notifications.append(Notification(level="success", message="Order placed successfully!"))

        logger.info(f"Order {confirmation.order_id} placed, total {confirmation.total_amount}")

        if self.notifier is not None:
            email = self.profile.get().email
            try:
                self.notifier.send_order_confirmation(email, confirmation)
            except Exception as e:
                logger.warning(f"Could not queue confirmation for order {confirmation.order_id}: {e}")

    def pop_notifications(self) -> List[Notification]:
        notes, self.notifications = self.notifications, []
        return notes
