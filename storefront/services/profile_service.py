# storefront/services/profile_service.py
import re
from typing import Callable, Dict, List

import requests
from pydantic import ValidationError

from storefront.domain.errors import ApiError, ConflictError
from storefront.domain.schemas import CustomerProfile, Notification
from storefront.repos.storage_repo import Storage
from storefront.services.events import Signal
from storefront.services.shop_client import ShopClient
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

PROFILE_STORAGE_KEY = "customerData"

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERNS = (re.compile(r"^\d{3}-\d{3}-\d{4}$"), re.compile(r"^\d{8}$"))
MAX_FIELD_LENGTH = 100

CONFLICT_MESSAGE = "This email already exists. Please use a different email."


class ProfileStore:
    """Current customer's profile, kept in local storage until the session ends."""

    def __init__(self, storage: Storage):
        self.storage = storage
        self._listeners: List[Callable[[CustomerProfile], None]] = []
        self._profile = self._load()

    def _load(self) -> CustomerProfile:
        raw = self.storage.read(PROFILE_STORAGE_KEY)
        if raw is None:
            return CustomerProfile()
        try:
            return CustomerProfile.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Stored profile is corrupt, ignoring it: {e}")
            return CustomerProfile()

    def get(self) -> CustomerProfile:
        return self._profile.model_copy()

    def set(self, profile: CustomerProfile) -> CustomerProfile:
        self._profile = profile.model_copy()
        self.storage.write(PROFILE_STORAGE_KEY, self._profile.model_dump(mode="json"))
        self._notify()
        return self.get()

    def update(self, **fields) -> CustomerProfile:
        return self.set(self._profile.model_copy(update=fields))

    def clear(self) -> None:
        self._profile = CustomerProfile()
        self.storage.remove(PROFILE_STORAGE_KEY)
        self._notify()

    def subscribe(self, listener: Callable[[CustomerProfile], None]) -> None:
        self._listeners.append(listener)

    def bind_session_end(self, ended: Signal) -> None:
        ended.connect(lambda **_: self.clear())

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.get())


class ProfileService:
    """Profile page use cases: validate, save, load after login."""

    def __init__(self, store: ProfileStore, shop_client: ShopClient):
        self.store = store
        self.shop_client = shop_client

    @staticmethod
    def validate(form: CustomerProfile) -> Dict[str, str]:
        errors: Dict[str, str] = {}

        if not form.name:
            errors["name"] = "Name is required."
        elif len(form.name) > MAX_FIELD_LENGTH:
            errors["name"] = "Name cannot be more than 100 characters."

        if not form.email:
            errors["email"] = "Email is required."
        elif not EMAIL_PATTERN.match(form.email):
            errors["email"] = "Email is not valid."

        if not form.address:
            errors["address"] = "Address is required."
        elif len(form.address) > MAX_FIELD_LENGTH:
            errors["address"] = "Address cannot be more than 100 characters."

        if not form.phone:
            errors["phone"] = "Phone number is required."
        elif not any(p.match(form.phone) for p in PHONE_PATTERNS):
            errors["phone"] = "Phone number must be in the format xxx-xxx-xxxx or 8 digits."

        return errors

    def save(self, form: CustomerProfile) -> tuple[Notification, Dict[str, str]]:
        errors = self.validate(form)
        if errors:
            return Notification(level="error", message="Please complete all required fields to proceed."), errors

        current = self.store.get()
        # the form never carries the id, it belongs to the stored customer
        form = form.model_copy(update={"id": current.id})

        try:
            self.shop_client.update_customer(current.id, form)
        except ConflictError:
            logger.info(f"Profile update for customer {current.id} rejected, e-mail taken")
            return Notification(level="error", message=CONFLICT_MESSAGE), {}
        except (ApiError, requests.RequestException) as e:
            logger.error(f"Profile update for customer {current.id} failed: {e}")
            return Notification(level="error", message="Error saving profile changes. Please try again."), {}

        self.store.set(form)
        logger.info(f"Profile of customer {current.id} saved")
        return Notification(level="success", message="Profile changes saved successfully!"), {}

    def load_for(self, email: str) -> CustomerProfile:
        try:
            profile = self.shop_client.get_customer_by_email(email)
        except (ApiError, requests.RequestException) as e:
            logger.warning(f"Could not load customer {email}: {e}")
            return self.store.get()
        return self.store.set(profile)
