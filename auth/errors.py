"""
auth/errors.py -- Error taxonomy for the authentication and session flows.

Every failure a session flow can produce is an AuthError subclass carrying a
machine-readable code, the HTTP status it maps to, and a client-safe message.
The API layer renders them all through one exception handler into the
standard {"error": {...}} envelope, so route handlers never build error
responses by hand.

All of these are terminal for the current request: nothing in auth/ catches
and retries them.

Layer rule: no imports from api/ or employees/.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for every auth/session failure."""

    code: str = "auth_error"
    status_code: int = 400
    message: str = "Authentication error."

    def __init__(self, message: str | None = None, *, code: str | None = None, status_code: int | None = None) -> None:
        if message is not None:
            self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class MissingFields(AuthError):
    code = "missing_fields"
    status_code = 400
    message = "Username and password are required."


class NotFound(AuthError):
    code = "user_not_found"
    status_code = 404
    message = "User not found."


class InvalidPassword(AuthError):
    code = "invalid_password"
    status_code = 401
    message = "Invalid password."


class StoreError(AuthError):
    """The credential store refused or failed a write.

    The underlying exception is chained (raise ... from exc) for logging;
    its text is never copied into message.
    """

    code = "store_error"
    status_code = 500
    message = "Could not save the account."


class Unauthenticated(AuthError):
    """No usable access token: missing header, or token expired."""

    code = "unauthenticated"
    status_code = 401
    message = "Token not found."


class Forbidden(AuthError):
    """Access token present but malformed or signed with the wrong key."""

    code = "forbidden"
    status_code = 403
    message = "Invalid token."


class NotRegistered(AuthError):
    """Refresh token is not (or no longer) in the refresh registry."""

    code = "refresh_not_registered"
    status_code = 403
    message = "Refresh token not found or revoked."


class InvalidOrExpired(AuthError):
    """Refresh token failed signature or expiry verification."""

    code = "refresh_invalid"
    status_code = 403
    message = "Invalid or expired refresh token."


# ---------------------------------------------------------------------------
# Token verification outcomes (raised by TokenIssuer, never sent to clients)
# ---------------------------------------------------------------------------


class TokenError(Exception):
    """Base for raw token verification failures."""


class TokenExpired(TokenError):
    """Signature is valid but the exp claim has passed."""


class TokenInvalid(TokenError):
    """Bad signature, malformed token, missing claims or wrong token type."""
