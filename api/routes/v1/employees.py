"""
api/routes/v1/employees.py -- Employee record routes for the EmpRecords REST API.

Routes (in registration order to avoid FastAPI path capture conflicts):
  GET    /employees/all   -- list every employee
  GET    /employees       -- the caller's own record
  PUT    /employees       -- replace the caller's profile fields
  PATCH  /employees       -- update only the supplied profile fields
  DELETE /employees       -- delete the caller's record and revoke its refresh tokens

Every route requires a Bearer access token. The record id always comes from
the token identity, never from the body, so one employee cannot edit or
delete another's row.
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Request

from api.models import EmployeeResponse, EmployeeUpdate, MessageResponse
from auth.dependencies import get_current_identity
from auth.models import Identity
from auth.registry import RefreshTokenRegistry
from employees.models import Employee
from employees.store import EmployeeStore

router = APIRouter()


@router.get("/employees/all", response_model=list[EmployeeResponse])
def list_employees(
    request: Request,
    identity: Identity = Depends(get_current_identity),
) -> list[EmployeeResponse]:
    """Return every employee record ordered by id."""
    store: EmployeeStore = request.app.state.employee_store
    return [_to_response(e) for e in store.list_employees()]


@router.get("/employees", response_model=EmployeeResponse)
def get_employee(
    request: Request,
    identity: Identity = Depends(get_current_identity),
) -> EmployeeResponse:
    """Return the authenticated employee's record."""
    store: EmployeeStore = request.app.state.employee_store
    return _to_response(_require(store.get_employee(identity.id)))


@router.put("/employees", response_model=EmployeeResponse)
def replace_employee(
    request: Request,
    body: EmployeeUpdate,
    identity: Identity = Depends(get_current_identity),
) -> EmployeeResponse:
    """Write every profile field. profile_picture is kept unless supplied."""
    store: EmployeeStore = request.app.state.employee_store
    fields = body.model_dump(mode="json", exclude={"profile_picture"})
    if body.profile_picture is not None:
        fields["profile_picture"] = body.profile_picture
    if not store.update_employee(identity.id, **fields):
        _require(None)
    return _to_response(_require(store.get_employee(identity.id)))


@router.patch("/employees", response_model=EmployeeResponse)
def patch_employee(
    request: Request,
    body: EmployeeUpdate,
    identity: Identity = Depends(get_current_identity),
) -> EmployeeResponse:
    """Write only the fields present in the request body."""
    store: EmployeeStore = request.app.state.employee_store
    fields = body.model_dump(mode="json", exclude_unset=True)
    if not fields:
        raise HTTPException(
            status_code=400,
            detail={"code": "no_changes", "message": "No valid fields to update."},
        )
    if not store.update_employee(identity.id, **fields):
        _require(None)
    return _to_response(_require(store.get_employee(identity.id)))


@router.delete("/employees", response_model=MessageResponse)
def delete_employee(
    request: Request,
    identity: Identity = Depends(get_current_identity),
) -> MessageResponse:
    """Delete the caller's record. Their refresh tokens die with it."""
    store: EmployeeStore = request.app.state.employee_store
    registry: RefreshTokenRegistry = request.app.state.registry
    if not store.delete_employee(identity.id):
        _require(None)
    registry.revoke_by_user_id(identity.id)
    return MessageResponse(message="Employee deleted successfully")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _require(employee: Employee | None) -> Employee:
    if employee is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "Employee not found."},
        )
    return employee


def _to_response(employee: Employee) -> EmployeeResponse:
    return EmployeeResponse(**asdict(employee))
