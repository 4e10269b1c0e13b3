"""
auth/passwords.py -- bcrypt password hashing.

bcrypt is used directly (no passlib wrapper). The cost factor is read once at
module load from Settings.bcrypt_rounds (minimum 10) and a fresh salt is
generated per call by bcrypt.gensalt().

verify_password() never raises: a malformed or truncated hash simply fails
verification. bcrypt.checkpw compares in constant time.

Layer rule: no imports from api/ or employees/.
"""

from __future__ import annotations

import bcrypt

from core.config import get_settings

_ROUNDS = get_settings().bcrypt_rounds

# bcrypt only reads the first 72 bytes; newer releases raise instead of
# truncating, so both helpers truncate explicitly.
_MAX_BYTES = 72


def _encode(plain: str) -> bytes:
    return plain.encode("utf-8")[:_MAX_BYTES]


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password."""
    return bcrypt.hashpw(_encode(plain), bcrypt.gensalt(rounds=_ROUNDS)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(_encode(plain), hashed.encode("utf-8"))
    except Exception:
        return False


# Timing equalization dummy hash [C1].
# Login always runs one bcrypt verify, against this hash when the username
# does not exist, so response time does not reveal which usernames exist.
DUMMY_HASH: str = hash_password("emprecords_timing_dummy")
