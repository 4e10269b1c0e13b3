"""
auth/session.py -- Register / login / refresh / logout flows.

SessionService composes the credential store, password hasher, token issuer
and refresh registry. Every flow either returns its result or raises an
AuthError subclass; the caller observes the outcome before continuing.

Per-user session states:

    Anonymous --login--> Authenticated --(access exp)--> Expired
    Expired --refresh--> Authenticated
    Authenticated --logout--> Anonymous

Security:
  [C1] login() always runs one bcrypt verify, against DUMMY_HASH when the
       username is unknown, so timing does not reveal existing usernames.
  Refresh tokens are reused, never rotated: refresh_access() leaves the
       registry untouched.
  Store failures are logged with their cause and re-raised as StoreError
       without the driver's message.

Layer rule: no imports from api/ or employees/.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.errors import (
    Forbidden,
    InvalidOrExpired,
    InvalidPassword,
    MissingFields,
    NotFound,
    NotRegistered,
    StoreError,
    TokenExpired,
    TokenInvalid,
    Unauthenticated,
)
from auth.models import Credential, Identity, TokenPair
from auth.passwords import DUMMY_HASH, hash_password, verify_password
from auth.registry import RefreshTokenRegistry
from auth.store import CredentialStore
from auth.tokens import TokenIssuer

logger = logging.getLogger("emprecords.auth")

_EXPIRED_MESSAGE = "Token expired. Please refresh your token or log in again."


def authenticate_access_token(issuer: TokenIssuer, token: str | None) -> Identity:
    """Map an access token to an Identity or raise the matching AuthError.

    Shared by the bearer dependency and logout():
      missing -> Unauthenticated (401, "Token not found.")
      expired -> Unauthenticated (401, token_expired)
      invalid -> Forbidden (403)
    """
    if not token:
        raise Unauthenticated()
    try:
        return issuer.verify_access(token)
    except TokenExpired as exc:
        raise Unauthenticated(_EXPIRED_MESSAGE, code="token_expired") from exc
    except TokenInvalid as exc:
        raise Forbidden() from exc


class SessionService:
    """The four session flows, bound to one store/issuer/registry triple."""

    def __init__(self, credentials: CredentialStore, issuer: TokenIssuer, registry: RefreshTokenRegistry) -> None:
        self.credentials = credentials
        self.issuer = issuer
        self.registry = registry

    def register(self, username: str | None, password: str | None) -> Credential:
        """Create an account. No token is issued; the user logs in separately."""
        if not username or not password:
            raise MissingFields()
        password_hash = hash_password(password)
        try:
            user_id = self.credentials.insert(username, password_hash)
        except IntegrityError as exc:
            logger.info("Registration rejected for %r: username taken", username)
            raise StoreError("Username already exists.", code="username_taken", status_code=409) from exc
        except SQLAlchemyError as exc:
            logger.error("Registration failed for %r: %s", username, exc)
            raise StoreError() from exc
        logger.info("Registered user %r (id=%d)", username, user_id)
        return Credential(id=user_id, username=username, password_hash=password_hash)

    def login(self, username: str | None, password: str | None) -> TokenPair:
        """Verify credentials, issue an access/refresh pair, register the refresh token."""
        if not username or not password:
            raise MissingFields()
        try:
            credential = self.credentials.find_by_username(username)
        except SQLAlchemyError as exc:
            logger.error("Credential lookup failed for %r: %s", username, exc)
            raise StoreError("Could not read the account.") from exc

        if credential is None:
            verify_password(password, DUMMY_HASH)  # [C1]
            logger.info("Login failed for %r: unknown user", username)
            raise NotFound()
        if not verify_password(password, credential.password_hash):
            logger.info("Login failed for %r: bad password", username)
            raise InvalidPassword()

        identity = credential.identity
        access = self.issuer.issue_access(identity)
        refresh = self.issuer.issue_refresh(identity)
        self.registry.register(refresh.token, identity.id, refresh.expires_at)
        logger.info("User %r logged in (id=%d)", identity.username, identity.id)
        return TokenPair(token=access.token, refresh_token=refresh.token)

    def refresh_access(self, refresh_token: str | None) -> str:
        """Exchange a live refresh token for a new access token.

        The registry is consulted before the signature: an unknown token is
        NotRegistered even if it is perfectly signed. A missing or empty
        token is never registered, so it is NotRegistered too.
        """
        if not refresh_token or not self.registry.is_live(refresh_token):
            raise NotRegistered()
        try:
            identity = self.issuer.verify_refresh(refresh_token)
        except (TokenExpired, TokenInvalid) as exc:
            raise InvalidOrExpired() from exc
        logger.debug("Access token refreshed for user id=%d", identity.id)
        return self.issuer.issue_access(identity).token

    def logout(self, access_token: str | None) -> int:
        """Revoke every refresh token of the caller. Idempotent.

        Returns how many registry entries were removed (0 is still success).
        """
        identity = authenticate_access_token(self.issuer, access_token)
        revoked = self.registry.revoke_by_user_id(identity.id)
        logger.info("User %r logged out (%d refresh token(s) revoked)", identity.username, revoked)
        return revoked
