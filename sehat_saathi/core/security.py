from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional
from enum import Enum
import logging

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .config import settings
from .exceptions import (
    AuthorizationError, ConfigurationError, TokenExpired, TokenMalformed
)

logger = logging.getLogger(__name__)

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class UserRole(str, Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"


class Identity(BaseModel):
    """The authenticated caller, as carried by the bearer token."""
    id: str
    email: str
    role: UserRole
    specialization: Optional[str] = None


class TokenClaims(Identity):
    iat: int
    exp: int
    iss: str
    aud: str

    def to_identity(self) -> Identity:
        return Identity(
            id=self.id,
            email=self.email,
            role=self.role,
            specialization=self.specialization,
        )


# Password utilities
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Generate password hash."""
    return pwd_context.hash(password)


# JWT utilities
class TokenService:
    """
    Issues and verifies stateless HS256 bearer tokens.

    Nothing is stored server side: the token itself carries the caller's
    id, email, role and specialization, so a role or specialization change
    only becomes visible once a new token is issued.
    """

    def __init__(
        self,
        secret: Optional[str],
        algorithm: str = "HS256",
        issuer: str = "sehat-saathi",
        audience: str = "sehat-saathi-users",
        expires_minutes: int = 60 * 24 * 7,
    ):
        if not secret:
            raise ConfigurationError("JWT_SECRET environment variable is required")
        self.secret = secret
        self.algorithm = algorithm
        self.issuer = issuer
        self.audience = audience
        self.default_ttl = timedelta(minutes=expires_minutes)

    @classmethod
    def from_settings(cls) -> "TokenService":
        return cls(
            secret=settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
            issuer=settings.JWT_ISSUER,
            audience=settings.JWT_AUDIENCE,
            expires_minutes=settings.JWT_EXPIRE_MINUTES,
        )

    def issue(self, identity: Identity, ttl: Optional[timedelta] = None) -> str:
        """Create a signed token for ``identity`` valid for ``ttl``."""
        now = datetime.now(timezone.utc)
        expire = now + (ttl if ttl is not None else self.default_ttl)

        to_encode = {
            "id": identity.id,
            "email": identity.email,
            "role": UserRole(identity.role).value,
            "iat": now,
            "exp": expire,
            "iss": self.issuer,
            "aud": self.audience,
        }
        if identity.specialization:
            to_encode["specialization"] = identity.specialization

        return jwt.encode(to_encode, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Verify and decode a token, raising TokenExpired or TokenMalformed."""
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
            )
        except ExpiredSignatureError as exc:
            raise TokenExpired("Token has expired") from exc
        except JWTError as exc:
            raise TokenMalformed("Invalid token") from exc

        try:
            return TokenClaims(**payload)
        except PydanticValidationError as exc:
            raise TokenMalformed("Invalid token payload") from exc


def extract_token_from_header(header_value: Optional[str]) -> Optional[str]:
    """Accept ``Bearer <token>`` or a bare token; anything else yields None."""
    if not header_value:
        return None

    parts = header_value.strip().split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    if len(parts) == 1 and parts[0].lower() != "bearer":
        return parts[0]
    return None


# Role and ownership predicates
def ensure_role(identity: Identity, allowed_roles: Iterable[UserRole]) -> Identity:
    roles = {UserRole(role) for role in allowed_roles}
    if identity.role not in roles:
        logger.warning(
            f"Role check failed for user {identity.id}: "
            f"{identity.role.value} not in {sorted(r.value for r in roles)}"
        )
        raise AuthorizationError(
            "Insufficient permissions",
            error_code="INSUFFICIENT_PERMISSIONS",
        )
    return identity


def ensure_ownership(
    identity: Identity,
    resource_owner_id: Optional[str],
    detail: str = "Access denied: Can only access your own resources",
) -> Identity:
    if resource_owner_id is None or identity.id != resource_owner_id:
        logger.warning(f"Ownership check failed for user {identity.id}")
        raise AuthorizationError(detail, error_code="ACCESS_DENIED")
    return identity
