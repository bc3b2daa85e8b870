from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role, StaffType


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Plain data object; no DB access here.
    """

    user_id: int
    full_name: str
    email: str
    password_hash: str
    role: Role
    division: Optional[str] = None
    staff_type: Optional[StaffType] = None
    designation: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class Actor:
    """Identity of whoever performs an operation, passed explicitly into services."""

    user_id: int
    role: Role
    full_name: str = ""
