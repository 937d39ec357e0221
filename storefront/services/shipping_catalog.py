# storefront/services/shipping_catalog.py
from decimal import Decimal
from typing import List

from storefront.domain.schemas import ShippingOption

DEFAULT_OPTIONS = [
    ShippingOption(
        id=1,
        name="Standard Shipping",
        price=Decimal("5.99"),
        free_shipping_requirement=Decimal("50.00"),
        delivery_time="5-7 business days",
    ),
    ShippingOption(
        id=2,
        name="Express Shipping",
        price=Decimal("14.99"),
        free_shipping_requirement=Decimal("150.00"),
        delivery_time="1-2 business days",
    ),
]


class ShippingCatalog:
    """Read-only list of shipping options."""

    def __init__(self, options: List[ShippingOption] | None = None):
        self._options = list(options if options is not None else DEFAULT_OPTIONS)

    def list_options(self) -> List[ShippingOption]:
        return [o.model_copy() for o in self._options]

    def get(self, option_id: int) -> ShippingOption | None:
        return next((o.model_copy() for o in self._options if o.id == option_id), None)
