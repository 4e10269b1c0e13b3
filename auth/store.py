"""
auth/store.py -- Credential store port.

auth/ does not own a table. Credentials live in whatever record store the
application wires in (employees/store.py in this service); the session flows
depend only on this protocol.

Contract:
  insert() assigns the numeric id itself (autoincrement / sequence) and
  returns it. A duplicate username raises sqlalchemy.exc.IntegrityError; any
  other persistence failure raises a sqlalchemy.exc.SQLAlchemyError.
  SessionService translates both into StoreError.

Layer rule: no imports from api/ or employees/.
"""

from __future__ import annotations

from typing import Protocol

from auth.models import Credential


class CredentialStore(Protocol):
    def insert(self, username: str, password_hash: str) -> int:
        """Persist a new credential and return its assigned id."""

    def find_by_username(self, username: str) -> Credential | None:
        """Exact (case-sensitive) username lookup."""
