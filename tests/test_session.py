"""Unit tests for auth/session.py -- register / login / refresh / logout flows.

Runs SessionService against a real in-memory EmployeeStore, a TokenIssuer on
a FakeClock and a fresh InMemoryRefreshTokenRegistry per test.

Covers:
- register then login returns a token pair; wrong password / unknown user fail
- missing fields on register and login; a missing refresh token is simply unregistered
- duplicate usernames and store failures surface as StoreError without driver text
- refresh requires a registered token; it never rotates the refresh token
- logout revokes every refresh token of the user and is idempotent
- expired access/refresh tokens map to the right errors
- a refresh racing a logout resolves to one of the two orderings
"""

import threading

import pytest
from sqlalchemy.exc import OperationalError

from auth.errors import (
    Forbidden,
    InvalidOrExpired,
    InvalidPassword,
    MissingFields,
    NotFound,
    NotRegistered,
    StoreError,
    Unauthenticated,
)
from auth.models import Identity
from auth.registry import InMemoryRefreshTokenRegistry
from auth.session import SessionService, authenticate_access_token
from auth.tokens import TokenIssuer
from employees.store import EmployeeStore


@pytest.fixture
def store():
    s = EmployeeStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def issuer(clock) -> TokenIssuer:
    return TokenIssuer("a" * 40, "r" * 40, clock=clock)


@pytest.fixture
def registry() -> InMemoryRefreshTokenRegistry:
    return InMemoryRefreshTokenRegistry()


@pytest.fixture
def sessions(store, issuer, registry) -> SessionService:
    return SessionService(credentials=store, issuer=issuer, registry=registry)


# ---------------------------------------------------------------------------
# Register / login
# ---------------------------------------------------------------------------


class TestRegisterLogin:
    def test_register_then_login(self, sessions, issuer, registry):
        credential = sessions.register("alice", "pw1")
        assert credential.id > 0
        assert credential.password_hash != "pw1"

        pair = sessions.login("alice", "pw1")
        assert issuer.verify_access(pair.token) == Identity(id=credential.id, username="alice")
        assert issuer.verify_refresh(pair.refresh_token) == Identity(id=credential.id, username="alice")
        assert registry.is_live(pair.refresh_token)

    def test_register_issues_no_token(self, sessions, registry):
        sessions.register("alice", "pw1")
        assert len(registry) == 0

    def test_ids_come_from_the_store(self, sessions):
        first = sessions.register("alice", "pw1")
        second = sessions.register("bob", "pw2")
        assert first.id != second.id

    def test_wrong_password(self, sessions):
        sessions.register("alice", "pw1")
        with pytest.raises(InvalidPassword):
            sessions.login("alice", "wrong")

    def test_unknown_user(self, sessions):
        with pytest.raises(NotFound):
            sessions.login("nobody", "pw1")

    @pytest.mark.parametrize("username, password", [(None, "pw"), ("alice", None), ("", "pw"), ("alice", ""), (None, None)])
    def test_missing_fields(self, sessions, username, password):
        with pytest.raises(MissingFields):
            sessions.register(username, password)
        with pytest.raises(MissingFields):
            sessions.login(username, password)

    def test_duplicate_username(self, sessions):
        sessions.register("alice", "pw1")
        with pytest.raises(StoreError) as excinfo:
            sessions.register("alice", "pw2")
        assert excinfo.value.code == "username_taken"
        assert excinfo.value.status_code == 409

    def test_store_failure_hides_driver_text(self, issuer, registry):
        class BrokenStore:
            def insert(self, username, password_hash):
                raise OperationalError("INSERT INTO employees", {}, Exception("disk I/O error at /var/db"))

            def find_by_username(self, username):
                raise OperationalError("SELECT", {}, Exception("connection refused"))

        sessions = SessionService(credentials=BrokenStore(), issuer=issuer, registry=registry)
        with pytest.raises(StoreError) as excinfo:
            sessions.register("alice", "pw1")
        assert excinfo.value.status_code == 500
        assert "disk" not in excinfo.value.message

        with pytest.raises(StoreError) as excinfo:
            sessions.login("alice", "pw1")
        assert "refused" not in excinfo.value.message


# ---------------------------------------------------------------------------
# Refresh
# ---------------------------------------------------------------------------


class TestRefresh:
    def test_refresh_issues_new_access_token(self, sessions, issuer, clock):
        sessions.register("alice", "pw1")
        pair = sessions.login("alice", "pw1")

        clock.advance(minutes=6)
        new_token = sessions.refresh_access(pair.refresh_token)
        assert new_token != pair.token
        assert issuer.verify_access(new_token).username == "alice"

    def test_refresh_token_is_reusable(self, sessions, registry):
        sessions.register("alice", "pw1")
        pair = sessions.login("alice", "pw1")
        for _ in range(3):
            sessions.refresh_access(pair.refresh_token)
        assert registry.is_live(pair.refresh_token)

    def test_unregistered_but_validly_signed_token_rejected(self, sessions, issuer):
        credential = sessions.register("alice", "pw1")
        stray = issuer.issue_refresh(credential.identity).token
        issuer.verify_refresh(stray)  # signature is fine
        with pytest.raises(NotRegistered):
            sessions.refresh_access(stray)

    def test_registered_but_expired_token(self, sessions, clock):
        sessions.register("alice", "pw1")
        pair = sessions.login("alice", "pw1")
        clock.advance(hours=1, seconds=1)
        with pytest.raises(InvalidOrExpired):
            sessions.refresh_access(pair.refresh_token)

    def test_registered_but_forged_token(self, sessions, registry, clock):
        credential = sessions.register("alice", "pw1")
        forged = TokenIssuer("x" * 40, "y" * 40, clock=clock).issue_refresh(credential.identity)
        registry.register(forged.token, credential.id, forged.expires_at)
        with pytest.raises(InvalidOrExpired):
            sessions.refresh_access(forged.token)

    def test_access_token_cannot_refresh(self, sessions, registry):
        credential = sessions.register("alice", "pw1")
        pair = sessions.login("alice", "pw1")
        registry.register(pair.token, credential.id, sessions.issuer.clock())
        with pytest.raises(InvalidOrExpired):
            sessions.refresh_access(pair.token)

    @pytest.mark.parametrize("token", [None, ""])
    def test_missing_refresh_token_is_not_registered(self, sessions, token):
        with pytest.raises(NotRegistered):
            sessions.refresh_access(token)


# ---------------------------------------------------------------------------
# Logout
# ---------------------------------------------------------------------------


class TestLogout:
    def test_logout_then_refresh_fails(self, sessions):
        sessions.register("alice", "pw1")
        pair = sessions.login("alice", "pw1")
        assert sessions.logout(pair.token) == 1
        with pytest.raises(NotRegistered):
            sessions.refresh_access(pair.refresh_token)

    def test_logout_revokes_every_session_of_the_user(self, sessions, registry):
        sessions.register("alice", "pw1")
        first = sessions.login("alice", "pw1")
        second = sessions.login("alice", "pw1")
        assert sessions.logout(first.token) == 2
        assert not registry.is_live(first.refresh_token)
        assert not registry.is_live(second.refresh_token)

    def test_logout_leaves_other_users_alone(self, sessions, registry):
        sessions.register("alice", "pw1")
        sessions.register("bob", "pw2")
        alice = sessions.login("alice", "pw1")
        bob = sessions.login("bob", "pw2")
        sessions.logout(alice.token)
        assert registry.is_live(bob.refresh_token)

    def test_logout_is_idempotent(self, sessions):
        sessions.register("alice", "pw1")
        pair = sessions.login("alice", "pw1")
        sessions.logout(pair.token)
        assert sessions.logout(pair.token) == 0

    def test_logout_without_token(self, sessions):
        with pytest.raises(Unauthenticated):
            sessions.logout(None)

    def test_logout_with_invalid_token(self, sessions):
        with pytest.raises(Forbidden):
            sessions.logout("garbage.token.value")

    def test_logout_with_expired_token(self, sessions, clock):
        sessions.register("alice", "pw1")
        pair = sessions.login("alice", "pw1")
        clock.advance(minutes=6)
        with pytest.raises(Unauthenticated) as excinfo:
            sessions.logout(pair.token)
        assert excinfo.value.code == "token_expired"


# ---------------------------------------------------------------------------
# Access token checks shared with the HTTP dependency
# ---------------------------------------------------------------------------


class TestAuthenticateAccessToken:
    def test_missing_and_expired_share_status_not_message(self, issuer, clock):
        token = issuer.issue_access(Identity(id=1, username="alice")).token
        clock.advance(minutes=10)

        with pytest.raises(Unauthenticated) as missing:
            authenticate_access_token(issuer, None)
        with pytest.raises(Unauthenticated) as expired:
            authenticate_access_token(issuer, token)

        assert missing.value.status_code == expired.value.status_code == 401
        assert missing.value.message != expired.value.message

    def test_refresh_token_is_forbidden_as_access(self, issuer):
        refresh = issuer.issue_refresh(Identity(id=1, username="alice")).token
        with pytest.raises(Forbidden):
            authenticate_access_token(issuer, refresh)


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------


def test_concurrent_refresh_and_logout_resolve_cleanly(sessions, issuer, registry):
    """A refresh racing a logout either succeeds before the revoke or fails NotRegistered."""
    sessions.register("alice", "pw1")

    for _ in range(20):
        pair = sessions.login("alice", "pw1")
        barrier = threading.Barrier(2)
        outcome: dict = {}

        def do_refresh() -> None:
            barrier.wait()
            try:
                outcome["refresh"] = sessions.refresh_access(pair.refresh_token)
            except NotRegistered as exc:
                outcome["refresh"] = exc

        def do_logout() -> None:
            barrier.wait()
            outcome["logout"] = sessions.logout(pair.token)

        threads = [threading.Thread(target=do_refresh), threading.Thread(target=do_logout)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outcome["logout"] == 1
        assert not registry.is_live(pair.refresh_token)
        if isinstance(outcome["refresh"], str):
            assert issuer.verify_access(outcome["refresh"]).username == "alice"
        else:
            assert isinstance(outcome["refresh"], NotRegistered)
        assert len(registry) == 0
