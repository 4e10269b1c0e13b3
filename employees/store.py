"""
employees/store.py -- SQLAlchemy-backed persistence for employee records.

Uses SQLAlchemy Core (not ORM) so the dataclasses in employees/models.py and
auth/models.py remain the authoritative domain representation. Swapping
SQLite for PostgreSQL is a connection string change, not a rewrite.

Pattern: Repository + Data Mapper. EmployeeStore is the repository;
_row_to_employee / _row_to_credential are the mappers. Route handlers never
touch SQL directly.

EmployeeStore also satisfies auth.store.CredentialStore (insert /
find_by_username): a registered account IS an employee row, so the auth layer
writes credentials into the same table the profile routes read.

Identity numbers come from the table's autoincrement primary key, never from
the caller.

Security: all queries use bound parameters. No f-strings in SQL. Column names
accepted by update_employee() are checked against PROFILE_FIELDS before any
statement is built.

Usage:
    store = EmployeeStore()                                # SQLite default
    store = EmployeeStore("postgresql://user:pw@host/db")  # PostgreSQL
    user_id = store.insert("alice", hash_password("pw1"))
    store.update_employee(user_id, department="Finance")
    store.close()
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Float, Integer, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Engine

from auth.models import Credential
from core.config import get_settings
from employees.models import Employee

logger = logging.getLogger("emprecords.employees")

# Columns a caller may write through update_employee(). id, username,
# hashed_password and created_at are owned by registration.
PROFILE_FIELDS: tuple[str, ...] = (
    "first_name",
    "last_name",
    "email",
    "phone_number",
    "date_of_birth",
    "gender",
    "address",
    "city",
    "state",
    "country",
    "zip_code",
    "department",
    "job_title",
    "salary",
    "hire_date",
    "profile_picture",
)

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_employees = Table(
    "employees",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("first_name", String(100)),
    Column("last_name", String(100)),
    Column("email", String(255)),
    Column("phone_number", String(30)),
    Column("date_of_birth", String(10)),  # YYYY-MM-DD
    Column("gender", String(10)),
    Column("address", Text),
    Column("city", String(100)),
    Column("state", String(100)),
    Column("country", String(100)),
    Column("zip_code", String(20)),
    Column("department", String(100)),
    Column("job_title", String(100)),
    Column("salary", Float),
    Column("hire_date", String(10)),  # YYYY-MM-DD
    Column("profile_picture", Text),
    Column("created_at", String(32), nullable=False),
)


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers do not block during writes.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class EmployeeStore:
    """Repository for employee rows and the credentials they carry."""

    def __init__(self, db_url: Optional[str] = None) -> None:
        db_url = db_url or get_settings().database_url
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)

    def close(self) -> None:
        self.engine.dispose()

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    # ------------------------------------------------------------------
    # Credentials (auth.store.CredentialStore)
    # ------------------------------------------------------------------

    def insert(self, username: str, password_hash: str) -> int:
        """Insert a new account row and return its assigned id.

        Raises sqlalchemy.exc.IntegrityError if the username already exists.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _employees.insert().values(
                    username=username,
                    hashed_password=password_hash,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def find_by_username(self, username: str) -> Optional[Credential]:
        """Exact (case-sensitive) lookup. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(
                _employees.select().where(_employees.c.username == username)
            ).fetchone()
        return _row_to_credential(row) if row is not None else None

    # ------------------------------------------------------------------
    # Employee records
    # ------------------------------------------------------------------

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        with self.engine.connect() as conn:
            row = conn.execute(_employees.select().where(_employees.c.id == employee_id)).fetchone()
        return _row_to_employee(row) if row is not None else None

    def list_employees(self) -> list[Employee]:
        """Return every employee ordered by id."""
        with self.engine.connect() as conn:
            rows = conn.execute(_employees.select().order_by(_employees.c.id)).fetchall()
        return [_row_to_employee(r) for r in rows]

    def update_employee(self, employee_id: int, **fields) -> bool:
        """Write the given profile fields. Returns False if no row matched.

        Only names in PROFILE_FIELDS are accepted; anything else raises
        ValueError before a statement is built.
        """
        unknown = set(fields) - set(PROFILE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown employee fields: {', '.join(sorted(unknown))}")
        if not fields:
            return self.get_employee(employee_id) is not None
        with self.engine.connect() as conn:
            result = conn.execute(_employees.update().where(_employees.c.id == employee_id).values(**fields))
            conn.commit()
        return result.rowcount > 0

    def delete_employee(self, employee_id: int) -> bool:
        """Permanently delete an employee row. Returns False if not found."""
        with self.engine.connect() as conn:
            result = conn.execute(_employees.delete().where(_employees.c.id == employee_id))
            conn.commit()
        if result.rowcount > 0:
            logger.info("Deleted employee id=%d", employee_id)
        return result.rowcount > 0


# ---------------------------------------------------------------------------
# Mappers
# ---------------------------------------------------------------------------


def _row_to_credential(row) -> Credential:
    return Credential(id=row.id, username=row.username, password_hash=row.hashed_password)


def _row_to_employee(row) -> Employee:
    return Employee(
        id=row.id,
        username=row.username,
        created_at=row.created_at,
        **{name: getattr(row, name) for name in PROFILE_FIELDS},
    )
