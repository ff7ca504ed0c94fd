"""User accounts"""

import hashlib
import logging
import secrets
from typing import Any, Dict, Optional

from rahnu_gateway.domain.exceptions import ConflictError, ValidationError
from rahnu_gateway.domain.models import User, UserRole
from rahnu_gateway.services.common import Service, parse_enum

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 200_000


def hash_password(password: str, salt: Optional[str] = None) -> str:
    """Salted PBKDF2-SHA256, encoded as iterations$salt$digest"""
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"{PBKDF2_ITERATIONS}${salt}${digest.hex()}"


class UserService(Service):
    def get_user(self, user_id: int) -> User:
        return self.storage.users.get(user_id)

    def get_user_by_username(self, username: str):
        return self.storage.users.find_one(username=username)

    def create_user(self, fields: Dict[str, Any]) -> User:
        """Register a user; the plain password is replaced by its hash"""
        fields = dict(fields)
        password = fields.pop("password", None)
        if not password:
            raise ValidationError("password is required", ["password"])
        fields["password_hash"] = hash_password(password)
        fields["role"] = parse_enum(UserRole, fields.get("role", UserRole.CUSTOMER), "role")

        with self.storage.transaction():
            if self.storage.users.find_one(username=fields.get("username")) is not None:
                raise ConflictError(f"Username '{fields.get('username')}' already exists")
            user = self.storage.users.create(fields)

        logger.info("User created", extra={"user_id": user.id, "role": user.role.value})
        return user


def seed_admin_user(service: UserService, password: Optional[str] = None) -> None:
    """Create the default back-office account when the store has none"""
    if service.get_user_by_username("admin") is not None:
        return
    if password is None:
        password = secrets.token_urlsafe(12)
        logger.warning("Seeding admin user with a generated password; set ADMIN_PASSWORD to choose one")
    service.create_user(
        {
            "username": "admin",
            "password": password,
            "full_name": "Admin User",
            "email": "admin@ar-rahnu.com.my",
            "role": UserRole.ADMIN,
        }
    )
