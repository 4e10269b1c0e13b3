"""
employees/models.py -- Domain dataclass for an employee record.

Pure data container with zero logic. All persistence lives in
employees/store.py. The password hash is deliberately not a field here:
employee reads never carry it. Credentials are mapped separately to
auth.models.Credential.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Employee:
    """One row of the employees table, minus the password hash.

    id is assigned by the store on registration. Dates are ISO 8601
    strings (YYYY-MM-DD); created_at is a full ISO timestamp set on insert.
    profile_picture is a plain reference string; files are not stored.
    """

    id: int
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None  # "male" | "female" | "other"
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
