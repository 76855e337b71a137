# provide dataclass models and their storage document shape

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from utils.errors import StorageCorruption

ROLES = ("user", "admin")
STATUSES = ("Pending", "Approved", "Rejected")


def _require(doc: Any, key: str, kind: type) -> Any:
    if not isinstance(doc, dict) or key not in doc:
        raise StorageCorruption(f"missing field '{key}'")
    value = doc[key]
    # bool is a subclass of int, never accept it as a number
    if kind is int and isinstance(value, bool):
        raise StorageCorruption(f"field '{key}' must be int")
    if not isinstance(value, kind):
        raise StorageCorruption(f"field '{key}' must be {kind.__name__}")
    return value


@dataclass
class Account:
    first_name: str
    last_name: str
    email: str
    password: str  # plaintext, demo only
    role: str  # "user" or "admin"
    verified: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "password": self.password,
            "role": self.role,
            "verified": self.verified,
        }

    @classmethod
    def from_dict(cls, doc: Any) -> Account:
        role = _require(doc, "role", str)
        if role not in ROLES:
            raise StorageCorruption(f"unknown role '{role}'")
        return cls(
            first_name=_require(doc, "firstName", str),
            last_name=_require(doc, "lastName", str),
            email=_require(doc, "email", str),
            password=_require(doc, "password", str),
            role=role,
            verified=_require(doc, "verified", bool),
        )


@dataclass
class Department:
    id: int
    name: str
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "description": self.description}

    @classmethod
    def from_dict(cls, doc: Any) -> Department:
        return cls(
            id=_require(doc, "id", int),
            name=_require(doc, "name", str),
            description=_require(doc, "description", str),
        )


@dataclass
class Employee:
    employee_id: str
    user_email: str
    position: str
    dept_id: int
    hire_date: str  # YYYY-MM-DD

    def to_dict(self) -> Dict[str, Any]:
        return {
            "employeeId": self.employee_id,
            "userEmail": self.user_email,
            "position": self.position,
            "deptId": self.dept_id,
            "hireDate": self.hire_date,
        }

    @classmethod
    def from_dict(cls, doc: Any) -> Employee:
        return cls(
            employee_id=_require(doc, "employeeId", str),
            user_email=_require(doc, "userEmail", str),
            position=_require(doc, "position", str),
            dept_id=_require(doc, "deptId", int),
            hire_date=_require(doc, "hireDate", str),
        )


@dataclass
class RequestItem:
    name: str
    qty: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "qty": self.qty}

    @classmethod
    def from_dict(cls, doc: Any) -> RequestItem:
        qty = _require(doc, "qty", int)
        if qty <= 0:
            raise StorageCorruption("item qty must be positive")
        return cls(name=_require(doc, "name", str), qty=qty)


@dataclass
class Request:
    id: int  # epoch millis at creation
    type: str
    items: List[RequestItem]
    status: str
    date: str  # ISO timestamp
    employee_email: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "items": [i.to_dict() for i in self.items],
            "status": self.status,
            "date": self.date,
            "employeeEmail": self.employee_email,
        }

    @classmethod
    def from_dict(cls, doc: Any) -> Request:
        status = _require(doc, "status", str)
        if status not in STATUSES:
            raise StorageCorruption(f"unknown status '{status}'")
        return cls(
            id=_require(doc, "id", int),
            type=_require(doc, "type", str),
            items=[RequestItem.from_dict(i) for i in _require(doc, "items", list)],
            status=status,
            date=_require(doc, "date", str),
            employee_email=_require(doc, "employeeEmail", str),
        )


@dataclass
class Store:
    """
    The whole persisted data set. Saved and loaded as one document.
    """

    accounts: List[Account] = field(default_factory=list)
    departments: List[Department] = field(default_factory=list)
    employees: List[Employee] = field(default_factory=list)
    requests: List[Request] = field(default_factory=list)

    def find_account(self, email: str) -> Account | None:
        email = email.strip().lower()
        return next((a for a in self.accounts if a.email.lower() == email), None)

    def find_department(self, dept_id: int) -> Department | None:
        return next((d for d in self.departments if d.id == dept_id), None)

    def find_employee(self, employee_id: str) -> Employee | None:
        return next((e for e in self.employees if e.employee_id == employee_id), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accounts": [a.to_dict() for a in self.accounts],
            "departments": [d.to_dict() for d in self.departments],
            "employees": [e.to_dict() for e in self.employees],
            "requests": [r.to_dict() for r in self.requests],
        }

    @classmethod
    def from_dict(cls, doc: Any) -> Store:
        """Strict decode; raises StorageCorruption on any structural mismatch."""
        return cls(
            accounts=[Account.from_dict(a) for a in _require(doc, "accounts", list)],
            departments=[
                Department.from_dict(d) for d in _require(doc, "departments", list)
            ],
            employees=[Employee.from_dict(e) for e in _require(doc, "employees", list)],
            requests=[Request.from_dict(r) for r in _require(doc, "requests", list)],
        )
