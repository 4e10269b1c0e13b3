"""
auth/tokens.py -- JWT issuance and verification for access and refresh tokens.

Security design decisions:
  JWT: python-jose with HS256. Both token kinds carry id, username, type,
       jti, iat and exp. Access and refresh tokens are signed with DIFFERENT
       secrets and carry a "type" claim, so neither kind verifies as the
       other.

  Expiry: checked here against the issuer's clock rather than inside
       jose.jwt.decode, so verification is a pure function of
       (token, secret, clock) and tests can move time forward without
       sleeping.

  Registry: the issuer never consults the refresh registry. Revocation is
       the session layer's concern (auth/session.py).

  Secrets: supplied once via TokenIssuer.from_settings(get_settings()) at
       application startup.

Layer rule: no imports from api/ or employees/. Import from core/ is allowed.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from auth.errors import TokenExpired, TokenInvalid
from auth.models import Identity, IssuedToken
from core.config import Settings

_ALGORITHM = "HS256"

ACCESS = "access"
REFRESH = "refresh"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer:
    """Signs and verifies access/refresh JWTs.

    Usage:
        issuer = TokenIssuer.from_settings(get_settings())
        access = issuer.issue_access(Identity(id=7, username="alice"))
        identity = issuer.verify_access(access.token)
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta = timedelta(minutes=5),
        refresh_ttl: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.clock = clock

    @classmethod
    def from_settings(cls, settings: Settings, clock: Callable[[], datetime] = _utcnow) -> "TokenIssuer":
        return cls(
            access_secret=settings.access_token_secret,
            refresh_secret=settings.refresh_token_secret,
            access_ttl=timedelta(seconds=settings.access_token_expire_seconds),
            refresh_ttl=timedelta(seconds=settings.refresh_token_expire_seconds),
            clock=clock,
        )

    # ------------------------------------------------------------------
    # Issue
    # ------------------------------------------------------------------

    def issue_access(self, identity: Identity) -> IssuedToken:
        """Sign a short-lived access token (default 5 minutes)."""
        return self._issue(identity, self.access_secret, self.access_ttl, ACCESS)

    def issue_refresh(self, identity: Identity) -> IssuedToken:
        """Sign a refresh token (default 1 hour) with the refresh secret."""
        return self._issue(identity, self.refresh_secret, self.refresh_ttl, REFRESH)

    def _issue(self, identity: Identity, secret: str, ttl: timedelta, token_type: str) -> IssuedToken:
        issued_at = self.clock()
        expires_at = issued_at + ttl
        payload = {
            "id": identity.id,
            "username": identity.username,
            "type": token_type,
            "jti": uuid.uuid4().hex,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return IssuedToken(token=jwt.encode(payload, secret, algorithm=_ALGORITHM), expires_at=expires_at)

    # ------------------------------------------------------------------
    # Verify
    # ------------------------------------------------------------------

    def verify_access(self, token: str) -> Identity:
        return self.verify(token, self.access_secret, ACCESS)

    def verify_refresh(self, token: str) -> Identity:
        return self.verify(token, self.refresh_secret, REFRESH)

    def verify(self, token: str, secret: str, expected_type: str) -> Identity:
        """Check signature, claims and expiry; return the embedded Identity.

        Raises TokenInvalid for anything wrong with the token itself
        (signature, structure, claims, type) and TokenExpired when an
        otherwise valid token is past its exp. Signature is checked first,
        so a forged token that also happens to be expired is TokenInvalid.
        """
        try:
            payload = jwt.decode(token, secret, algorithms=[_ALGORITHM], options={"verify_exp": False})
        except JWTError as exc:
            raise TokenInvalid(str(exc)) from exc

        user_id = payload.get("id")
        username = payload.get("username")
        exp = payload.get("exp")
        if payload.get("type") != expected_type:
            raise TokenInvalid("wrong token type")
        if not isinstance(user_id, int) or not isinstance(username, str) or not isinstance(exp, int):
            raise TokenInvalid("missing or malformed claims")

        if self.clock().timestamp() >= exp:
            raise TokenExpired("token expired")
        return Identity(id=user_id, username=username)
