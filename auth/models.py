"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores, the token
issuer and the session flows do the work; these only own the shape.

Layer rule: no imports from api/ or employees/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Identity:
    """The {id, username} payload embedded in every access and refresh token."""

    id: int
    username: str


@dataclass
class Credential:
    """A stored login record as seen by the auth layer.

    Created once at registration and never modified by auth/. The record
    store owns the row; password_hash is a bcrypt string.
    """

    id: int
    username: str
    password_hash: str

    @property
    def identity(self) -> Identity:
        return Identity(id=self.id, username=self.username)


@dataclass(frozen=True)
class IssuedToken:
    """A freshly signed JWT together with its expiry instant (UTC)."""

    token: str
    expires_at: datetime


@dataclass(frozen=True)
class TokenPair:
    """What a successful login hands back to the caller."""

    token: str
    refresh_token: str
