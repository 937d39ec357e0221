# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import List, Literal
from decimal import Decimal
from datetime import datetime


class BasketItem(BaseModel):
    """Line in the basket, unique by product_id."""

    product_id: int
    # no lower bound, update_quantity keeps 0 rows in memory until the next load
    quantity: int
    price: Decimal = Field(..., ge=0)
    name: str = ""


class BasketItemIn(BaseModel):
    """Schema for adding a product to the basket."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, gt=0)
    price: Decimal = Field(..., ge=0)
    name: str = ""


class QuantityIn(BaseModel):
    quantity: int
    price: Decimal = Field(Decimal("0"), ge=0)
    name: str = ""


class BasketOut(BaseModel):
    items: List[BasketItem]
    total: Decimal


class AuthState(BaseModel):
    email: str = ""
    is_logged_in: bool = False
    # only ever set from the auth endpoint response
    role: str | None = None


class LoginIn(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class SessionOut(BaseModel):
    email: str
    is_logged_in: bool
    is_admin: bool
    has_admin_role: bool


class CustomerProfile(BaseModel):
    id: int = 0
    name: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""

    @field_validator("name", "address", "phone", "email", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return "" if v is None else v


class ShippingOption(BaseModel):
    id: int
    name: str
    price: Decimal = Field(..., ge=0)
    free_shipping_requirement: Decimal = Field(..., ge=0)
    delivery_time: str = ""


EMPTY_SHIPPING_OPTION = ShippingOption(
    id=0,
    name="",
    price=Decimal("0"),
    free_shipping_requirement=Decimal("0"),
)


# an option priced against the current basket
class ShippingQuote(ShippingOption):
    shipping_cost: Decimal
    remaining_for_free: Decimal


class PaymentDetails(BaseModel):
    card_number: str = ""
    expiration_date: str = ""
    cvv: str = ""


class LoginForm(BaseModel):
    email: str = ""
    password: str = ""


class LoginFormIn(BaseModel):
    email: str | None = None
    password: str | None = None


class PaymentIn(BaseModel):
    card_number: str | None = None
    expiration_date: str | None = None
    cvv: str | None = None


class AddressIn(BaseModel):
    name: str | None = None
    address: str | None = None
    phone: str | None = None


class CheckoutTotals(BaseModel):
    subtotal: Decimal
    shipping_cost: Decimal
    total: Decimal


class OrderConfirmation(BaseModel):
    order_id: int
    delivery_date: str | None = None
    total_amount: Decimal


class Notification(BaseModel):
    level: Literal["success", "error"]
    message: str


class CheckoutOut(BaseModel):
    current_step: int
    step_name: str
    errors: dict[str, str]
    customer: CustomerProfile
    payment: PaymentDetails
    selected_shipping: ShippingOption
    totals: CheckoutTotals
    confirmation: OrderConfirmation | None = None
    notifications: List[Notification] = []


class ProfileSaveOut(BaseModel):
    profile: CustomerProfile
    notification: Notification
    errors: dict[str, str] = {}


# wire DTOs of the shop API, camelCase on the wire


class _ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CreateCustomerDto(_ApiModel):
    name: str
    address: str | None = None
    phone: str | None = None
    email: str | None = None


class CreateOrderDto(_ApiModel):
    order_date: datetime = Field(..., alias="orderDate")
    delivery_date: str | None = Field(None, alias="deliveryDate")
    status: str = "Pending"
    total_amount: Decimal = Field(..., alias="totalAmount")


class CreateOrderEntryDto(_ApiModel):
    product_id: int = Field(..., alias="productId")
    quantity: int


class OrderRequest(_ApiModel):
    customer: CreateCustomerDto
    order: CreateOrderDto
    order_entries: List[CreateOrderEntryDto] = Field(..., alias="orderEntries")


class OrderDto(_ApiModel):
    id: int
    delivery_date: str | None = Field(None, alias="deliveryDate")
    total_amount: Decimal = Field(Decimal("0"), alias="totalAmount")
    status: str | None = None


class AuthResponse(_ApiModel):
    email: str | None = None
    role_type: str | None = Field(None, alias="roleType")
    token: str | None = None