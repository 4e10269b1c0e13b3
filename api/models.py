"""
API request and response models for EmpRecords REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
employees/models.py, which own the internal domain representation. Route
handlers map between the two.

Wire names follow the public contract: login returns {token, refreshToken}
and refresh-token accepts {refreshToken}. The Python side uses snake_case
with an alias; populate_by_name lets both spellings in.
"""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# bcrypt reads at most 72 bytes of a password.
_MAX_PASSWORD = 72


# ---------------------------------------------------------------------------
# Auth -- request models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/login.

    Both fields are optional at the schema level so an absent or empty value
    is reported as missing_fields (400) by the session flow rather than as a
    generic 422.
    """

    username: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=_MAX_PASSWORD)


class RegisterRequest(LoginRequest):
    """Request body for POST /api/v1/register. Same shape as login."""


class RefreshRequest(BaseModel):
    """Request body for POST /api/v1/refresh-token."""

    model_config = ConfigDict(populate_by_name=True)

    refresh_token: Optional[str] = Field(default=None, alias="refreshToken")


# ---------------------------------------------------------------------------
# Auth -- response models
# ---------------------------------------------------------------------------


class RegisterResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    id: int


class LoginResponse(BaseModel):
    """Access + refresh token pair returned by a successful login."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    token: str
    refresh_token: str = Field(alias="refreshToken")


class RefreshResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Employees
# ---------------------------------------------------------------------------


class GenderEnum(str, Enum):
    male = "male"
    female = "female"
    other = "other"


class EmployeeUpdate(BaseModel):
    """Request body for PUT/PATCH /api/v1/employees.

    PUT writes every field (absent ones become null) except profile_picture,
    which is kept when not supplied. PATCH writes only the fields present in
    the body.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    first_name: Optional[str] = Field(default=None, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    email: Optional[str] = Field(default=None, max_length=255)
    phone_number: Optional[str] = Field(default=None, max_length=30)
    date_of_birth: Optional[date] = None
    gender: Optional[GenderEnum] = None
    address: Optional[str] = Field(default=None, max_length=500)
    city: Optional[str] = Field(default=None, max_length=100)
    state: Optional[str] = Field(default=None, max_length=100)
    country: Optional[str] = Field(default=None, max_length=100)
    zip_code: Optional[str] = Field(default=None, max_length=20)
    department: Optional[str] = Field(default=None, max_length=100)
    job_title: Optional[str] = Field(default=None, max_length=100)
    salary: Optional[float] = Field(default=None, ge=0)
    hire_date: Optional[date] = None
    profile_picture: Optional[str] = Field(default=None, max_length=500)


class EmployeeResponse(BaseModel):
    """One employee record. Never includes the password hash."""

    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    zip_code: Optional[str] = None
    department: Optional[str] = None
    job_title: Optional[str] = None
    salary: Optional[float] = None
    hire_date: Optional[str] = None
    profile_picture: Optional[str] = None
    created_at: str = ""
