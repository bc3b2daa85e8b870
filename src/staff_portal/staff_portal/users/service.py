from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import optional_text, require_min_length, require_non_empty
from ..core.enums import Role, StaffType
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from .division_repository import DivisionRepository
from .model import Actor, User
from .repository import UserRepository

logger = logging.getLogger(__name__)

# Roles that must belong to a division; HOD and Admin are system-wide.
DIVISION_ROLES = {Role.STAFF, Role.DIVISION_CC, Role.DIVISIONAL_HEAD}
USER_ADMIN_ROLES = {Role.ADMIN, Role.HOD}
DIRECTORY_ROLES = {Role.DIVISION_CC, Role.DIVISIONAL_HEAD, Role.HOD, Role.ADMIN}


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    full_name: str
    email: str
    role: Role
    division: Optional[str]

    @property
    def actor(self) -> Actor:
        return Actor(user_id=self.user_id, role=self.role, full_name=self.full_name)


@dataclass(frozen=True)
class DivisionPersonnel:
    """Who can recommend, approve and act for an applicant of a division."""

    division: str
    recommenders: list[User] = field(default_factory=list)
    approvers: list[User] = field(default_factory=list)
    acting_officers: list[User] = field(default_factory=list)

    def recommender_ids(self) -> set[int]:
        return {u.user_id for u in self.recommenders}

    def approver_ids(self) -> set[int]:
        return {u.user_id for u in self.approvers}

    def acting_officer(self, user_id: int) -> Optional[User]:
        for u in self.acting_officers:
            if u.user_id == user_id:
                return u
        return None


def resolve_division_personnel(users: UserRepository, *, division: str, applicant_id: int) -> DivisionPersonnel:
    """Recommenders are the division's CCs; approvers its Divisional Heads plus every HOD;
    acting officers are the division's other Staff."""
    members = list(users.list_by_division(division))
    hods = [u for u in users.list_by_role(Role.HOD) if u.user_id not in {m.user_id for m in members}]

    return DivisionPersonnel(
        division=division,
        recommenders=[u for u in members if u.role == Role.DIVISION_CC],
        approvers=[u for u in members if u.role in {Role.DIVISIONAL_HEAD, Role.HOD}] + hods,
        acting_officers=[u for u in members if u.role == Role.STAFF and u.user_id != int(applicant_id)],
    )


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionUser:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password)
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            logger.info("Failed login for user_id=%s", user.user_id)
            raise AuthenticationError("Invalid email or password")

        return SessionUser(
            user_id=user.user_id,
            full_name=user.full_name,
            email=user.email,
            role=user.role,
            division=user.division,
        )


class UserService:
    """Use case: manage users and divisions (admin)."""

    def __init__(self, users: UserRepository, divisions: DivisionRepository):
        self._users = users
        self._divisions = divisions

    def _check_division(self, role: Role, division: Optional[str]) -> Optional[str]:
        division = optional_text(division)
        if role in DIVISION_ROLES and not division:
            raise ValidationError(f"A division is required for role {role.value}")
        if division and not self._divisions.get_by_name(division):
            raise ValidationError(f"Unknown division: {division}")
        return division

    def create_account(
        self,
        *,
        actor: Actor,
        full_name: str,
        email: str,
        password: str,
        role: Role,
        division: Optional[str] = None,
        staff_type: Optional[StaffType] = None,
        designation: Optional[str] = None,
    ) -> int:
        if actor.role not in USER_ADMIN_ROLES:
            raise AuthorizationError("You do not have permission to create accounts")

        full_name = require_non_empty(full_name, "Full name")
        email = require_non_empty(email, "Email").lower()
        require_min_length(password, "Password", 6)
        if "@" not in email:
            raise ValidationError("Email is not valid")

        if self._users.get_by_email(email):
            raise ValidationError("An account with this email already exists")

        if role == Role.ADMIN and actor.role != Role.ADMIN:
            raise AuthorizationError("Only an Admin can create Admin accounts")

        division = self._check_division(role, division)
        user_id = self._users.create_user(
            full_name=full_name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            division=division,
            staff_type=staff_type,
            designation=optional_text(designation),
        )
        logger.info("User %s created account user_id=%s role=%s", actor.user_id, user_id, role.value)
        return user_id

    def update_user(
        self,
        *,
        actor: Actor,
        user_id: int,
        full_name: str,
        role: Role,
        division: Optional[str] = None,
        staff_type: Optional[StaffType] = None,
        designation: Optional[str] = None,
    ) -> None:
        if actor.role not in USER_ADMIN_ROLES:
            raise AuthorizationError("You do not have permission to edit accounts")

        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User does not exist")
        if actor.role != Role.ADMIN and Role.ADMIN in {user.role, role}:
            raise AuthorizationError("Only an Admin can edit Admin accounts")

        ok = self._users.update_profile(
            int(user_id),
            full_name=require_non_empty(full_name, "Full name"),
            role=role,
            division=self._check_division(role, division),
            staff_type=staff_type,
            designation=optional_text(designation),
        )
        if not ok:
            raise ValidationError("Updating the account failed")
        logger.info("User %s updated account user_id=%s role=%s", actor.user_id, user_id, role.value)

    def delete_user(self, *, actor: Actor, user_id: int) -> None:
        """Remove the account row; login identity lives on the same row so both go together."""
        if actor.role not in USER_ADMIN_ROLES:
            raise AuthorizationError("Only Admin/HOD can delete users")
        if int(user_id) == actor.user_id:
            raise ValidationError("You cannot delete your own account")

        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User does not exist")
        if user.role == Role.ADMIN and actor.role != Role.ADMIN:
            raise AuthorizationError("Only an Admin can delete Admin accounts")

        if not self._users.delete_by_id(int(user_id)):
            raise ValidationError("Deleting the user failed")
        logger.info("User %s deleted user_id=%s", actor.user_id, user_id)

    def list_admin_view(self):
        return self._users.list_admin_view()

    def get_user(self, *, actor: Actor, user_id: int) -> User:
        if actor.role not in USER_ADMIN_ROLES:
            raise AuthorizationError("You do not have permission to edit accounts")
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User does not exist")
        return user

    def staff_directory(
        self,
        *,
        actor: Actor,
        division: Optional[str] = None,
        role: Optional[Role] = None,
        search: Optional[str] = None,
    ) -> list[User]:
        """Active users visible to the actor, sorted by name.

        Division CCs and Divisional Heads only see their own division; Admin
        and HOD may pick one, or see everyone including the system-wide roles.
        """
        if actor.role not in DIRECTORY_ROLES:
            raise AuthorizationError(
                "You need Division CC, Divisional Head, HOD or Admin access to view the staff directory"
            )

        if actor.role in USER_ADMIN_ROLES:
            division = optional_text(division)
            if division:
                users = list(self._users.list_by_division(division))
            else:
                users = [u for d in self._divisions.list_all() for u in self._users.list_by_division(d.name)]
                users += list(self._users.list_by_role(Role.HOD)) + list(self._users.list_by_role(Role.ADMIN))
        else:
            me = self._users.get_by_id(actor.user_id)
            if not me or not me.division:
                raise ValidationError("Your account is not assigned to a division")
            users = list(self._users.list_by_division(me.division))

        unique = {u.user_id: u for u in users}.values()
        if role is not None:
            unique = [u for u in unique if u.role == role]
        needle = (search or "").strip().lower()
        if needle:
            unique = [
                u
                for u in unique
                if any(needle in (v or "").lower() for v in (u.full_name, u.email, u.designation, u.role.value))
            ]
        return sorted(unique, key=lambda u: u.full_name.lower())

    def list_divisions(self):
        return self._divisions.list_all()

    def create_division(self, *, actor: Actor, name: str, description: str = "") -> int:
        if actor.role != Role.ADMIN:
            raise AuthorizationError("Only an Admin can create divisions")
        name = require_non_empty(name, "Division name")
        if self._divisions.get_by_name(name):
            raise ValidationError("Division already exists")
        return self._divisions.create(name=name, description=optional_text(description))

    def division_personnel(self, *, applicant_id: int) -> DivisionPersonnel:
        applicant = self._users.get_by_id(int(applicant_id))
        if not applicant:
            raise NotFoundError("User does not exist")
        if not applicant.division:
            raise ValidationError("Your account is not assigned to a division")
        return resolve_division_personnel(self._users, division=applicant.division, applicant_id=applicant.user_id)
