# src/db/crud.py
from __future__ import annotations

import re
import time
from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple

from db.models import ROLES, Account, Department, Employee, Request, RequestItem
from db.store import save
from utils.errors import (
    AccessDenial,
    ConflictError,
    ReferentialError,
    ValidationError,
)
from utils.state import AppState

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LEN = 6


def _clean(val: Optional[str]) -> str:
    return (val or "").strip()


def _require_fields(**fields: str) -> None:
    missing = [k.replace("_", " ") for k, v in fields.items() if not _clean(v)]
    if missing:
        raise ValidationError(f"Required: {', '.join(missing)}.")


def _check_email(email: str) -> str:
    email = _clean(email).lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError("Enter a valid email address.")
    return email


def _check_password(password: str) -> str:
    if len(password or "") < MIN_PASSWORD_LEN:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LEN} characters."
        )
    return password


def _check_role(role: str) -> str:
    if role not in ROLES:
        raise ValidationError(f"Role must be one of: {', '.join(ROLES)}.")
    return role


def _check_date(val: str) -> str:
    val = _clean(val)
    try:
        date.fromisoformat(val)
    except ValueError:
        raise ValidationError("Hire date must be YYYY-MM-DD.") from None
    return val


def _to_int(val, what: str) -> int:
    try:
        return int(val)
    except (TypeError, ValueError):
        raise ValidationError(f"{what} must be a whole number.") from None


def _require_session(state: AppState) -> Account:
    if state.account is None:
        raise AccessDenial("You must log in first.")
    return state.account


def _require_admin(state: AppState) -> Account:
    account = _require_session(state)
    if account.role != "admin":
        raise AccessDenial("Access denied. Admins only.")
    return account


# ---------------------------
# Accounts
# ---------------------------


async def register(
    state: AppState, first_name: str, last_name: str, email: str, password: str
) -> Account:
    """Self-registration. New accounts are plain users and start unverified."""
    _require_fields(
        first_name=first_name, last_name=last_name, email=email, password=password
    )
    email = _check_email(email)
    _check_password(password)
    if state.store.find_account(email):
        raise ConflictError("Email already registered.")

    account = Account(
        _clean(first_name), _clean(last_name), email, password, "user", False
    )
    state.store.accounts.append(account)
    await save(state.store)
    return account


async def verify_email(state: AppState, email: str) -> Account:
    """Simulated click on the verification link."""
    account = state.store.find_account(_clean(email))
    if account is None:
        raise ValidationError("No account registered with that email.")
    account.verified = True
    await save(state.store)
    return account


async def update_profile(state: AppState, first_name: str, last_name: str) -> Account:
    account = _require_session(state)
    _require_fields(first_name=first_name, last_name=last_name)
    account.first_name = _clean(first_name)
    account.last_name = _clean(last_name)
    await save(state.store)
    state.session_updated()
    return account


async def reset_password(state: AppState, email: str, new_password: str) -> Account:
    """Admins may reset anyone; other users only themselves."""
    current = _require_session(state)
    account = state.store.find_account(_clean(email))
    if account is None:
        raise ValidationError("No account registered with that email.")
    if account is not current and current.role != "admin":
        raise AccessDenial("Access denied. Admins only.")
    account.password = _check_password(new_password)
    await save(state.store)
    return account


async def create_account(
    state: AppState,
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    role: str = "user",
    verified: bool = False,
) -> Account:
    _require_admin(state)
    _require_fields(
        first_name=first_name, last_name=last_name, email=email, password=password
    )
    email = _check_email(email)
    _check_password(password)
    _check_role(role)
    if state.store.find_account(email):
        raise ConflictError("Email already registered.")

    account = Account(
        _clean(first_name), _clean(last_name), email, password, role, bool(verified)
    )
    state.store.accounts.append(account)
    await save(state.store)
    return account


async def update_account(
    state: AppState,
    email: str,
    first_name: str,
    last_name: str,
    role: str,
    verified: bool,
    password: Optional[str] = None,
) -> Account:
    """
    Email is the key and is never changed. Blank password keeps the old one.
    The session account must stay a verified admin.
    """
    current = _require_admin(state)
    account = state.store.find_account(_clean(email))
    if account is None:
        raise ValidationError("No account registered with that email.")
    _require_fields(first_name=first_name, last_name=last_name)
    _check_role(role)
    if password:
        _check_password(password)
    if account is current and (role != "admin" or not verified):
        raise ConflictError("You cannot demote or unverify your own account.")

    account.first_name = _clean(first_name)
    account.last_name = _clean(last_name)
    account.role = role
    account.verified = bool(verified)
    if password:
        account.password = password
    await save(state.store)
    if account is current:
        state.session_updated()
    return account


async def delete_account(state: AppState, email: str) -> None:
    current = _require_admin(state)
    account = state.store.find_account(_clean(email))
    if account is None:
        raise ValidationError("No account registered with that email.")
    if account is current:
        raise ConflictError("You cannot delete your own account.")
    state.store.accounts.remove(account)
    await save(state.store)


# ---------------------------
# Departments
# ---------------------------


def _next_department_id(state: AppState) -> int:
    return max((d.id for d in state.store.departments), default=0) + 1


async def create_department(
    state: AppState, name: str, description: str = ""
) -> Department:
    _require_admin(state)
    _require_fields(name=name)
    dept = Department(_next_department_id(state), _clean(name), _clean(description))
    state.store.departments.append(dept)
    await save(state.store)
    return dept


async def update_department(
    state: AppState, dept_id, name: str, description: str = ""
) -> Department:
    _require_admin(state)
    dept = state.store.find_department(_to_int(dept_id, "Department id"))
    if dept is None:
        raise ValidationError(f"Department {dept_id} not found.")
    _require_fields(name=name)
    dept.name = _clean(name)
    dept.description = _clean(description)
    await save(state.store)
    return dept


async def delete_department(state: AppState, dept_id) -> None:
    _require_admin(state)
    dept = state.store.find_department(_to_int(dept_id, "Department id"))
    if dept is None:
        raise ValidationError(f"Department {dept_id} not found.")
    if any(e.dept_id == dept.id for e in state.store.employees):
        raise ReferentialError(
            f"Department '{dept.name}' still has employees assigned."
        )
    state.store.departments.remove(dept)
    await save(state.store)


# ---------------------------
# Employees
# ---------------------------


def _check_employee_refs(state: AppState, user_email: str, dept_id) -> Tuple[str, int]:
    account = state.store.find_account(_clean(user_email))
    if account is None:
        raise ReferentialError(f"No account registered with email {user_email}.")
    dept_id = _to_int(dept_id, "Department id")
    if state.store.find_department(dept_id) is None:
        raise ReferentialError(f"Department {dept_id} not found.")
    return account.email, dept_id


async def create_employee(
    state: AppState,
    employee_id: str,
    user_email: str,
    position: str,
    dept_id,
    hire_date: str,
) -> Employee:
    _require_admin(state)
    _require_fields(
        employee_id=employee_id,
        user_email=user_email,
        position=position,
        hire_date=hire_date,
    )
    employee_id = _clean(employee_id)
    if state.store.find_employee(employee_id):
        raise ConflictError(f"Employee id {employee_id} already exists.")
    user_email, dept_id = _check_employee_refs(state, user_email, dept_id)
    hire_date = _check_date(hire_date)

    emp = Employee(employee_id, user_email, _clean(position), dept_id, hire_date)
    state.store.employees.append(emp)
    await save(state.store)
    return emp


async def update_employee(
    state: AppState,
    employee_id: str,
    user_email: str,
    position: str,
    dept_id,
    hire_date: str,
) -> Employee:
    _require_admin(state)
    emp = state.store.find_employee(_clean(employee_id))
    if emp is None:
        raise ValidationError(f"Employee {employee_id} not found.")
    _require_fields(user_email=user_email, position=position, hire_date=hire_date)
    user_email, dept_id = _check_employee_refs(state, user_email, dept_id)
    hire_date = _check_date(hire_date)

    emp.user_email = user_email
    emp.position = _clean(position)
    emp.dept_id = dept_id
    emp.hire_date = hire_date
    await save(state.store)
    return emp


async def delete_employee(state: AppState, employee_id: str) -> None:
    _require_admin(state)
    emp = state.store.find_employee(_clean(employee_id))
    if emp is None:
        raise ValidationError(f"Employee {employee_id} not found.")
    state.store.employees.remove(emp)
    await save(state.store)


# ---------------------------
# Requests
# ---------------------------


def _next_request_id(state: AppState) -> int:
    now_ms = int(time.time() * 1000)
    last = max((r.id for r in state.store.requests), default=0)
    return max(now_ms, last + 1)


async def create_request(
    state: AppState,
    req_type: str,
    items: Iterable[Tuple[str, object]],
    when: Optional[datetime] = None,
) -> Request:
    """New Pending request owned by the session account."""
    account = _require_session(state)
    _require_fields(type=req_type)

    parsed: List[RequestItem] = []
    for name, qty in items:
        name = _clean(name)
        if not name:
            raise ValidationError("Every item needs a name.")
        qty = _to_int(qty, f"Quantity of {name}")
        if qty <= 0:
            raise ValidationError(f"Quantity of {name} must be greater than 0.")
        parsed.append(RequestItem(name, qty))
    if not parsed:
        raise ValidationError("Add at least one item.")

    when = when or datetime.now()
    req = Request(
        id=_next_request_id(state),
        type=_clean(req_type),
        items=parsed,
        status="Pending",
        date=when.isoformat(timespec="seconds"),
        employee_email=account.email,
    )
    state.store.requests.append(req)
    await save(state.store)
    return req


def list_requests(state: AppState) -> List[Request]:
    """Admins see every request, others only their own; newest first."""
    account = _require_session(state)
    reqs = state.store.requests
    if account.role != "admin":
        reqs = [r for r in reqs if r.employee_email == account.email]
    return sorted(reqs, key=lambda r: r.id, reverse=True)
