# storefront/services/session_service.py
import threading
from typing import Callable, Iterable

from storefront.domain.schemas import AuthState
from storefront.repos.storage_repo import Storage
from storefront.services.events import Signal
from storefront.services.watchdog import RecurringTimer, TimerFactory, TimerHandle
from storefront.utils.clock import now_ms
from storefront.utils.settings import ADMIN_EMAILS, SESSION_CHECK_INTERVAL_SECONDS, SESSION_TTL_MS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

AUTH_STORAGE_KEY = "authData"
TOKEN_STORAGE_KEY = "token"
ADMIN_ROLE = "admin"


class SessionService:
    """
    Login state with a client-side expiry.

    -login persists authData with expirationTime = now + ttl and starts the watchdog
    -the watchdog re-reads authData every interval and logs out once it is past
    -logout removes authData and token, then fires `ended` (profile listens)
    -`changed` fires on every login/logout with the new AuthState
    """

    def __init__(
        self,
        storage: Storage,
        clock: Callable[[], int] = now_ms,
        timer_factory: TimerFactory = RecurringTimer,
        ttl_ms: int = SESSION_TTL_MS,
        check_interval: float = SESSION_CHECK_INTERVAL_SECONDS,
        admin_emails: Iterable[str] = ADMIN_EMAILS,
        shop_client=None,
        lock=None,
    ):
        self.storage = storage
        self.clock = clock
        self.timer_factory = timer_factory
        self.ttl_ms = ttl_ms
        self.check_interval = check_interval
        self.admin_emails = list(admin_emails)
        self.shop_client = shop_client

        self.state = AuthState()
        self.changed = Signal("session.changed")
        self.ended = Signal("session.ended")

        self._watchdog: TimerHandle | None = None
        # shared with the request handlers so a tick never lands mid-request
        self._lock = lock or threading.RLock()

    #commands
    def login(self, email: str, role: str | None = None) -> AuthState:
        with self._lock:
            expiration_time = self.clock() + self.ttl_ms
            self.storage.write(
                AUTH_STORAGE_KEY,
                {
                    "email": email,
                    "isLoggedIn": True,
                    "expirationTime": expiration_time,
                    "role": role,
                },
            )
            self.state = AuthState(email=email, is_logged_in=True, role=role)
            self._start_watchdog()

        logger.info(f"User {email} logged in, session valid until {expiration_time}")
        self.changed.send(state=self.state)
        return self.state

    def authenticate(self, email: str, password: str) -> AuthState:
        """
        Log in against the shop API. The role used for authorization comes from
        the response, never from the e-mail.
        """
        if self.shop_client is None:
            raise RuntimeError("No shop client configured for authentication")

        resp = self.shop_client.login(email, password)

        if resp.token:
            self.storage.write(TOKEN_STORAGE_KEY, resp.token)

        return self.login(resp.email or email, role=resp.role_type)

    def logout(self) -> AuthState:
        with self._lock:
            was_logged_in = self.state.is_logged_in
            self._stop_watchdog()
            self.storage.remove(AUTH_STORAGE_KEY)
            self.storage.remove(TOKEN_STORAGE_KEY)
            self.state = AuthState()

        if was_logged_in:
            logger.info("User logged out")

        self.ended.send()
        self.changed.send(state=self.state)
        return self.state

    def restore_on_startup(self) -> AuthState | None:
        record = self._read_record()
        if record is None:
            return None

        if self.clock() < record["expirationTime"]:
            with self._lock:
                self.state = AuthState(
                    email=record.get("email") or "",
                    is_logged_in=bool(record.get("isLoggedIn")),
                    role=record.get("role"),
                )
                if self.state.is_logged_in:
                    self._start_watchdog()
            logger.info(f"Restored session of {self.state.email}")
            return self.state

        logger.info("Stored session has expired, logging out")
        self.logout()
        return None

    def check_expiry(self) -> bool:
        """
        One watchdog tick. Returns True if the session was ended.

        The whole tick, including the logout signals, runs under the lock.
        """
        with self._lock:
            record = self._read_record()

            if record is None:
                # logged out somewhere else, nothing left to watch
                self._stop_watchdog()
                return False

            if self.clock() > record["expirationTime"]:
                logger.info("Session expired, user logged out")
                self.logout()
                return True

            return False

    def stop(self) -> None:
        """Stop the watchdog, the stored session is left alone."""
        with self._lock:
            self._stop_watchdog()

    #queries
    def is_admin(self, email: str) -> bool:
        # prefix match is a UI hint only, see has_admin_role
        starts_with_admin = email.lower().startswith("admin")
        in_admin_list = email in self.admin_emails
        return starts_with_admin or in_admin_list

    def check_admin_status(self, state: AuthState | None = None) -> bool:
        state = state or self.state
        return state.is_logged_in and self.is_admin(state.email)

    @staticmethod
    def has_admin_role(state: AuthState) -> bool:
        return state.is_logged_in and (state.role or "").lower() == ADMIN_ROLE

    @property
    def watchdog_active(self) -> bool:
        return self._watchdog is not None

    #internals
    def _read_record(self) -> dict | None:
        record = self.storage.read(AUTH_STORAGE_KEY)
        if not isinstance(record, dict) or not isinstance(record.get("expirationTime"), int):
            return None
        return record

    def _start_watchdog(self) -> None:
        # one watchdog per service, a new login replaces the old timer
        self._stop_watchdog()
        self._watchdog = self.timer_factory(self.check_interval, self.check_expiry)

    def _stop_watchdog(self) -> None:
        if self._watchdog is not None:
            self._watchdog.cancel()
            self._watchdog = None
