from __future__ import annotations

import logging
import uuid
from typing import Optional

from werkzeug.security import check_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from ..store.bootstrap import hash_password
from ..store.store import AttendanceStore
from .model import User

logger = logging.getLogger(__name__)


class AuthService:
    """Use case: log in / out of this storage profile.

    Roles are advisory: ``require_role`` lets a view refuse to render, nothing more.
    """

    def __init__(self, store: AttendanceStore):
        self._store = store

    def login(self, email: str, password: str) -> User:
        if not self._store.is_initialized():
            self._store.initialize()

        user = self._store.users.get_by_email(email or "")
        if not user:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password, password)
        except Exception:
            # e.g. plain-text passwords written by older clients
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        # Login only affects this profile's session keys; it is never broadcast.
        self._store.start_session(user.id)
        logger.info(f"User {user.id} logged in as {user.role.value}")
        return user

    def logout(self) -> bool:
        return self._store.end_session()

    def current_user(self) -> Optional[User]:
        return self._store.current_user()

    def require_role(self, role: Role) -> User:
        user = self.current_user()
        if not user:
            raise AuthenticationError("Not logged in")
        if user.role != Role(role):
            raise AuthorizationError("You do not have access to this dashboard")
        return user


class UserService:
    """Use case: manage accounts (admin screens)."""

    def __init__(self, store: AttendanceStore, *, password_method: Optional[str] = None):
        self._store = store
        self._password_method = password_method

    def create_account(
        self,
        *,
        name: str,
        email: str,
        password: str,
        role: Role,
        user_id: Optional[str] = None,
        **profile,
    ) -> User:
        name = require_non_empty(name, "Name")
        email = require_non_empty(email, "Email")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._store.users.get_by_email(email):
            raise ValidationError("Email is already registered")

        role = Role(role)
        user = User(
            id=user_id or f"{role.value}_{uuid.uuid4().hex[:8]}",
            name=name,
            email=email,
            password=hash_password(password, method=self._password_method),
            role=role,
            **profile,
        )
        self._store.users.add(user).unwrap()
        return user

    def delete_user(self, *, current_role: Role, user_id: str) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("You do not have permission")

        user = self._store.users.get_by_id(user_id)
        if not user:
            raise ValidationError("User does not exist")
        if user.role == Role.ADMIN:
            raise ValidationError("Admin accounts cannot be deleted")

        self._store.users.delete(user_id).unwrap()
