from typing import Tuple
import logging
import uuid

from ..core.exceptions import AuthenticationError, ConflictError, NotFoundError
from ..core.security import (
    Identity, TokenService, get_password_hash, verify_password
)
from ..core.timeutils import utcnow
from ..models.user import User
from ..schemas.auth import UserLogin, UserRegister
from ..storage.base import Storage

logger = logging.getLogger(__name__)


def identity_for(user: User) -> Identity:
    return Identity(
        id=user.id,
        email=user.email,
        role=user.role,
        specialization=user.specialization,
    )


class AuthService:
    def __init__(self, storage: Storage, token_service: TokenService):
        self.storage = storage
        self.token_service = token_service

    def register_user(self, user_data: UserRegister) -> Tuple[User, str]:
        """Register a new user and issue their first token."""
        email = user_data.email.lower()

        # Check if user already exists
        if self.storage.get_user_by_email(email):
            raise ConflictError("User already exists")

        new_user = User(
            id=str(uuid.uuid4()),
            name=user_data.name,
            email=email,
            password_hash=get_password_hash(user_data.password),
            role=user_data.role,
            specialization=user_data.specialization,
            created_at=utcnow(),
        )
        user = self.storage.create_user(new_user)
        logger.info(f"Registered {user.role.value} {user.id}")

        return user, self.token_service.issue(identity_for(user))

    def authenticate_user(self, login_data: UserLogin) -> Tuple[User, str]:
        """Authenticate user and return a token."""
        user = self.storage.get_user_by_email(login_data.email.strip().lower())

        if not user or not verify_password(login_data.password, user.password_hash):
            logger.info("Failed login attempt")
            raise AuthenticationError("Invalid credentials", error_code="INVALID_CREDENTIALS")

        logger.info(f"User {user.id} logged in")
        return user, self.token_service.issue(identity_for(user))

    def get_user(self, user_id: str) -> User:
        user = self.storage.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user
