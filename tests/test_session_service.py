"""Tests for the session/auth store and its expiry watchdog."""

import threading
from unittest.mock import MagicMock

import pytest

from storefront.domain.schemas import AuthResponse, AuthState
from storefront.services.session_service import (
    AUTH_STORAGE_KEY,
    TOKEN_STORAGE_KEY,
    SessionService,
)

HOUR_MS = 3_600_000
ADMINS = ["David.Wallace@Dunder.com", "admin@Dunder.com"]


@pytest.fixture()
def sessions(storage, clock, timers):
    return SessionService(storage, clock=clock, timer_factory=timers, admin_emails=ADMINS)


class TestLogin:
    def test_login_sets_state(self, sessions):
        state = sessions.login("a@b.com")
        assert state == AuthState(email="a@b.com", is_logged_in=True)
        assert sessions.state.is_logged_in

    def test_login_persists_record_with_expiry(self, sessions, storage, clock):
        sessions.login("a@b.com")
        record = storage.read(AUTH_STORAGE_KEY)
        assert record["email"] == "a@b.com"
        assert record["isLoggedIn"] is True
        assert record["expirationTime"] == clock.now + HOUR_MS

    def test_login_starts_minute_watchdog(self, sessions, timers):
        sessions.login("a@b.com")
        assert len(timers.active) == 1
        assert timers.active[0].interval == 60

    def test_second_login_replaces_watchdog(self, sessions, timers):
        sessions.login("a@b.com")
        sessions.login("c@d.com")
        assert len(timers.timers) == 2
        assert len(timers.active) == 1
        assert timers.timers[0].cancelled

    def test_login_notifies_subscribers(self, sessions):
        seen = []
        sessions.changed.connect(lambda state: seen.append(state))
        sessions.login("a@b.com")
        assert seen == [AuthState(email="a@b.com", is_logged_in=True)]


class TestLogout:
    def test_logout_removes_record_and_token(self, sessions, storage):
        sessions.login("a@b.com")
        storage.write(TOKEN_STORAGE_KEY, "secret")

        state = sessions.logout()

        assert state == AuthState()
        assert storage.read(AUTH_STORAGE_KEY) is None
        assert storage.read(TOKEN_STORAGE_KEY) is None

    def test_logout_stops_watchdog(self, sessions, timers):
        sessions.login("a@b.com")
        sessions.logout()
        assert timers.active == []
        assert not sessions.watchdog_active

    def test_logout_fires_ended(self, sessions):
        ended = []
        sessions.ended.connect(lambda: ended.append(True))
        sessions.login("a@b.com")
        sessions.logout()
        assert ended == [True]

    def test_repeated_logout_is_harmless(self, sessions):
        sessions.login("a@b.com")
        sessions.logout()
        assert sessions.logout() == AuthState()


class TestWatchdog:
    def test_tick_before_expiry_keeps_session(self, sessions, timers, clock):
        sessions.login("a@b.com")
        clock.advance(HOUR_MS - 1)
        timers.active[0].fire()
        assert sessions.state.is_logged_in
        assert len(timers.active) == 1

    def test_tick_after_expiry_logs_out(self, sessions, timers, clock, storage):
        sessions.login("a@b.com")
        watchdog = timers.active[0]
        clock.advance(HOUR_MS + 1)

        watchdog.fire()

        assert sessions.state == AuthState()
        assert storage.read(AUTH_STORAGE_KEY) is None
        assert watchdog.cancelled

    def test_tick_without_record_stops_itself(self, sessions, timers, storage):
        sessions.login("a@b.com")
        storage.remove(AUTH_STORAGE_KEY)
        assert sessions.check_expiry() is False
        assert timers.active == []

    def test_tick_reads_persisted_record(self, sessions, timers, clock, storage):
        sessions.login("a@b.com")
        record = storage.read(AUTH_STORAGE_KEY)
        storage.write(AUTH_STORAGE_KEY, {**record, "expirationTime": clock.now - 1})
        assert sessions.check_expiry() is True
        assert not sessions.state.is_logged_in

    def test_tick_waits_for_shared_lock(self, storage, clock, timers):
        lock = threading.RLock()
        sessions = SessionService(storage, clock=clock, timer_factory=timers, lock=lock)
        sessions.login("a@b.com")
        clock.advance(HOUR_MS + 1)
        ended = []
        sessions.ended.connect(lambda: ended.append(True))

        with lock:
            tick = threading.Thread(target=sessions.check_expiry)
            tick.start()
            tick.join(timeout=0.2)
            # a request holding the lock still sees a consistent session
            assert tick.is_alive()
            assert sessions.state.is_logged_in
            assert ended == []

        tick.join(timeout=5)
        assert not tick.is_alive()
        assert not sessions.state.is_logged_in
        assert ended == [True]


class TestRestoreOnStartup:
    def _new_service(self, storage, clock, timers):
        return SessionService(storage, clock=clock, timer_factory=timers, admin_emails=ADMINS)

    def test_restores_unexpired_session(self, sessions, storage, clock, timers):
        sessions.login("a@b.com")
        restored = self._new_service(storage, clock, timers).restore_on_startup()
        assert restored == AuthState(email="a@b.com", is_logged_in=True)

    def test_restore_starts_watchdog(self, sessions, storage, clock, timers):
        sessions.login("a@b.com")
        fresh = self._new_service(storage, clock, timers)
        fresh.restore_on_startup()
        assert fresh.watchdog_active

    def test_expired_session_logs_out(self, sessions, storage, clock, timers):
        sessions.login("a@b.com")
        storage.write(TOKEN_STORAGE_KEY, "secret")
        clock.advance(HOUR_MS + 1)

        fresh = self._new_service(storage, clock, timers)
        assert fresh.restore_on_startup() is None
        assert storage.read(AUTH_STORAGE_KEY) is None
        assert storage.read(TOKEN_STORAGE_KEY) is None
        assert fresh.state == AuthState()

    def test_nothing_stored(self, sessions):
        assert sessions.restore_on_startup() is None
        assert sessions.state == AuthState()

    def test_after_logout_restore_is_anonymous(self, sessions, storage, clock, timers):
        sessions.login("a@b.com")
        sessions.logout()
        fresh = self._new_service(storage, clock, timers)
        assert fresh.restore_on_startup() is None
        assert fresh.state == AuthState()


class TestAdminChecks:
    def test_prefix_match_is_case_insensitive(self, sessions):
        assert sessions.is_admin("Admin@Dunder.com")
        assert sessions.is_admin("ADMINISTRATOR@example.com")

    def test_exact_list_match(self, sessions):
        assert sessions.is_admin("David.Wallace@Dunder.com")

    def test_list_match_is_case_sensitive(self, sessions):
        assert not sessions.is_admin("david.wallace@dunder.com")

    def test_regular_user(self, sessions):
        assert not sessions.is_admin("jim.halpert@dunder.com")

    def test_check_admin_status_needs_login(self, sessions):
        assert not sessions.check_admin_status(AuthState(email="admin@Dunder.com"))
        assert sessions.check_admin_status(AuthState(email="admin@Dunder.com", is_logged_in=True))

    def test_role_decides_authorization(self, sessions):
        # an admin-looking e-mail without the role is not authorized
        sessions.login("admin@Dunder.com", role="Customer")
        assert sessions.is_admin(sessions.state.email)
        assert not sessions.has_admin_role(sessions.state)

        sessions.login("jim.halpert@dunder.com", role="Admin")
        assert sessions.has_admin_role(sessions.state)


class TestAuthenticate:
    def test_authenticate_stores_token_and_role(self, storage, clock, timers):
        client = MagicMock()
        client.login.return_value = AuthResponse(email="a@b.com", roleType="Admin", token="tok-1")
        sessions = SessionService(storage, clock=clock, timer_factory=timers, shop_client=client)

        state = sessions.authenticate("a@b.com", "pw")

        client.login.assert_called_once_with("a@b.com", "pw")
        assert state.is_logged_in
        assert state.role == "Admin"
        assert storage.read(TOKEN_STORAGE_KEY) == "tok-1"

    def test_authenticate_without_client(self, sessions):
        with pytest.raises(RuntimeError):
            sessions.authenticate("a@b.com", "pw")
