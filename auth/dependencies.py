"""
auth/dependencies.py -- FastAPI Depends() helpers for bearer authentication.

Protected routes take `identity: Identity = Depends(get_current_identity)`.
The dependency reads `Authorization: Bearer <token>`, verifies it with the
application's TokenIssuer and stores the result on request.state.identity.

Failures raise AuthError subclasses (rendered by the api/ exception handler):
  no header / not Bearer / empty token -> 401 unauthenticated
  expired                              -> 401 token_expired
  bad signature / malformed            -> 403 forbidden

Access tokens are not revocable: the refresh registry is never consulted.

Layer rule: no imports from api/ or employees/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.models import Identity
from auth.session import authenticate_access_token
from auth.tokens import TokenIssuer


def bearer_token(request: Request) -> str | None:
    """Return the token from an `Authorization: Bearer <token>` header, or None."""
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    return auth_header[7:].strip() or None


def get_current_identity(request: Request) -> Identity:
    """Require a valid access token. Raises Unauthenticated or Forbidden.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(identity: Identity = Depends(get_current_identity)): ...
    """
    issuer: TokenIssuer = request.app.state.token_issuer
    identity = authenticate_access_token(issuer, bearer_token(request))
    request.state.identity = identity
    return identity
