# storefront/services/basket_service.py
from decimal import Decimal
from typing import Callable, List

from pydantic import ValidationError

from storefront.domain.schemas import BasketItem
from storefront.repos.storage_repo import Storage
from storefront.utils.clock import now_ms
from storefront.utils.settings import BASKET_TTL_MS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

BASKET_STORAGE_KEY = "basket_data"
BASKET_EXPIRY_KEY = "basket_expiry"


class BasketService:
    """
    Basket kept in client-local storage with a sliding expiry.
    Operations take the current basket and return a new list, the argument is
    never mutated. Every mutation ends with persist().
    """

    def __init__(
        self,
        storage: Storage,
        clock: Callable[[], int] = now_ms,
        ttl_ms: int = BASKET_TTL_MS,
    ):
        self.storage = storage
        self.clock = clock
        self.ttl_ms = ttl_ms

    #query
    @staticmethod
    def total(basket: List[BasketItem]) -> Decimal:
        return sum((i.price * i.quantity for i in basket), Decimal("0.00"))

    def is_expired(self) -> bool:
        expiry = self.storage.read(BASKET_EXPIRY_KEY)
        if not isinstance(expiry, int):
            return True
        return self.clock() > expiry

    def load(self) -> List[BasketItem]:
        saved = self.storage.read(BASKET_STORAGE_KEY)

        if saved and not self.is_expired():
            try:
                return [BasketItem.model_validate(row) for row in saved]
            except (TypeError, ValidationError) as e:
                logger.warning(f"Stored basket is corrupt, dropping it: {e}")

        #absent, expired or broken - wipe both keys
        return self.clear([])

    #commands
    def add(self, basket: List[BasketItem], item: BasketItem) -> List[BasketItem]:
        existing = next((i for i in basket if i.product_id == item.product_id), None)

        if existing:
            logger.info(
                f"Product {item.product_id} already in basket, quantity "
                f"{existing.quantity} -> {existing.quantity + item.quantity}"
            )
            # price stays as it was when the product first went in
            updated = [
                i.model_copy(update={"quantity": i.quantity + item.quantity, "name": item.name})
                if i.product_id == item.product_id
                else i
                for i in basket
            ]
        else:
            logger.info(f"Adding product {item.product_id} to basket")
            updated = [*basket, item.model_copy()]

        self.persist(updated)
        return updated

    def update_quantity(
        self,
        basket: List[BasketItem],
        product_id: int,
        new_quantity: int,
        price: Decimal,
        name: str,
    ) -> List[BasketItem]:
        updated = [i.model_copy() for i in basket]
        existing = next((i for i in updated if i.product_id == product_id), None)

        if existing:
            existing.quantity = new_quantity
        else:
            updated.append(
                BasketItem(product_id=product_id, quantity=new_quantity, price=price, name=name)
            )

        logger.info(f"Quantity of product {product_id} set to {new_quantity}")

        # caller keeps the 0 rows to render the removal, storage never does
        self.persist([i for i in updated if i.quantity > 0])
        return updated

    def remove(self, basket: List[BasketItem], product_id: int) -> List[BasketItem]:
        return self.update_quantity(basket, product_id, 0, Decimal("0"), "")

    def clear(self, basket: List[BasketItem]) -> List[BasketItem]:
        if basket:
            logger.info(f"Clearing basket with {len(basket)} items")
        self.storage.remove(BASKET_STORAGE_KEY)
        self.storage.remove(BASKET_EXPIRY_KEY)
        return []

    def persist(self, basket: List[BasketItem]) -> None:
        if basket:
            self.storage.write(
                BASKET_STORAGE_KEY,
                [i.model_dump(mode="json") for i in basket],
            )
            self.storage.write(BASKET_EXPIRY_KEY, self.clock() + self.ttl_ms)
        else:
            self.storage.remove(BASKET_STORAGE_KEY)
            self.storage.remove(BASKET_EXPIRY_KEY)
