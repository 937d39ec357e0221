# storefront/container.py
import threading
from typing import Callable

from storefront.data.database import Base, SessionLocal, engine
from storefront.repos.redis_storage import RedisStorage
from storefront.repos.storage_repo import SqlStorage, Storage
from storefront.services.basket_service import BasketService
from storefront.services.checkout_service import CheckoutController
from storefront.services.notification_service import NotificationService
from storefront.services.profile_service import ProfileService, ProfileStore
from storefront.services.session_service import TOKEN_STORAGE_KEY, SessionService
from storefront.services.shipping_catalog import ShippingCatalog
from storefront.services.shop_client import ShopClient
from storefront.services.watchdog import RecurringTimer, TimerFactory
from storefront.utils.clock import now_ms
from storefront.utils.settings import STORAGE_BACKEND
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def build_storage(backend: str = STORAGE_BACKEND) -> Storage:
    if backend == "redis":
        logger.info("Using redis local storage")
        return RedisStorage()

    if backend != "sql":
        raise ValueError(f"Unknown storage backend {backend!r}")

    #import models before create_all so they are in Base.metadata
    import storefront.data.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info(f"Using sql local storage, tables: {list(Base.metadata.tables.keys())}")
    return SqlStorage(SessionLocal)


class Storefront:
    """
    Wires the stores together for one shopper.
    Stores are passed in explicitly, nothing here is a module-level singleton.
    """

    def __init__(
        self,
        storage: Storage,
        shop_client: ShopClient | None = None,
        shipping_catalog: ShippingCatalog | None = None,
        notifier=None,
        clock: Callable[[], int] = now_ms,
        timer_factory: TimerFactory = RecurringTimer,
    ):
        self.storage = storage
        # one shopper, one lock: request handlers and the session watchdog take turns
        self.lock = threading.RLock()
        self.shop_client = shop_client or ShopClient(
            token_provider=lambda: storage.read(TOKEN_STORAGE_KEY),
        )
        self.shipping = shipping_catalog or ShippingCatalog()

        self.basket = BasketService(storage, clock=clock)
        self.session = SessionService(
            storage,
            clock=clock,
            timer_factory=timer_factory,
            shop_client=self.shop_client,
            lock=self.lock,
        )
        self.profile_store = ProfileStore(storage)
        self.profile_store.bind_session_end(self.session.ended)
        self.profiles = ProfileService(self.profile_store, self.shop_client)

        # profile must already listen, an expired record logs out here
        self.session.restore_on_startup()

        self.checkout = CheckoutController(
            basket_service=self.basket,
            session=self.session,
            profile=self.profile_store,
            shipping_catalog=self.shipping,
            shop_client=self.shop_client,
            notifier=notifier,
        )

    @classmethod
    def from_settings(cls) -> "Storefront":
        return cls(build_storage(), notifier=NotificationService())

    def close(self) -> None:
        self.checkout.close()
        self.session.stop()
