from fastapi import Depends, Request
from sqlalchemy.orm import Session
from typing import AsyncGenerator, Optional
from functools import lru_cache
from datetime import timedelta

import httpx

from ..core.config import settings
from ..core.database import get_db
from ..core.exceptions import AuthenticationError, TokenExpired, TokenMalformed
from ..core.security import (
    Identity, TokenService, UserRole, ensure_role, extract_token_from_header
)
from ..services.appointment_service import AppointmentService
from ..services.auth_service import AuthService
from ..services.chat_service import AIChatService
from ..services.pharmacy_service import PharmacyService
from ..services.prescription_service import PrescriptionService
from ..storage.base import Storage
from ..storage.memory import MemoryStorage
from ..storage.sql import SQLStorage

memory_storage = MemoryStorage()


@lru_cache
def get_token_service() -> TokenService:
    """Token service built once from settings; raises ConfigurationError without a secret."""
    return TokenService.from_settings()


def get_storage(db: Session = Depends(get_db)) -> Storage:
    if settings.STORAGE_BACKEND == "memory":
        return memory_storage
    return SQLStorage(db)


def authenticate_request(
    authorization: Optional[str],
    token_service: TokenService,
) -> Identity:
    """Resolve an Authorization header value to the caller's identity."""
    token = extract_token_from_header(authorization)
    if not token:
        raise AuthenticationError("Access token is required", error_code="MISSING_TOKEN")

    try:
        claims = token_service.verify(token)
    except TokenExpired:
        raise AuthenticationError("Token has expired", error_code="TOKEN_EXPIRED")
    except TokenMalformed:
        raise AuthenticationError("Invalid token", error_code="INVALID_TOKEN")

    return claims.to_identity()


async def require_auth(
    request: Request,
    token_service: TokenService = Depends(get_token_service),
) -> Identity:
    """Extract and verify the bearer token, attaching the identity to the request."""
    identity = authenticate_request(request.headers.get("Authorization"), token_service)
    request.state.identity = identity
    return identity


# Optional authentication (for public endpoints that may benefit from user context)
async def optional_auth(
    request: Request,
    token_service: TokenService = Depends(get_token_service),
) -> Optional[Identity]:
    """Get current identity if authenticated, None otherwise."""
    try:
        identity = authenticate_request(request.headers.get("Authorization"), token_service)
    except AuthenticationError:
        identity = None
    request.state.identity = identity
    return identity


# Role-based access control dependencies
def role_required(*allowed_roles: UserRole):
    """Create a dependency that authenticates and then requires one of the roles."""
    async def role_checker(
        identity: Identity = Depends(require_auth)
    ) -> Identity:
        return ensure_role(identity, allowed_roles)

    return role_checker


get_doctor_identity = role_required(UserRole.DOCTOR)


# Service dependencies
def get_auth_service(
    storage: Storage = Depends(get_storage),
    token_service: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(storage, token_service)


def get_appointment_service(storage: Storage = Depends(get_storage)) -> AppointmentService:
    return AppointmentService(storage, clock_skew=timedelta(seconds=settings.CLOCK_SKEW_SECONDS))


def get_prescription_service(storage: Storage = Depends(get_storage)) -> PrescriptionService:
    return PrescriptionService(storage)


def get_pharmacy_service(storage: Storage = Depends(get_storage)) -> PharmacyService:
    return PharmacyService(storage)


async def get_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    async with httpx.AsyncClient(timeout=settings.AI_TIMEOUT_SECONDS) as client:
        yield client


def get_chat_service(client: httpx.AsyncClient = Depends(get_http_client)) -> AIChatService:
    return AIChatService(
        client,
        api_key=settings.GEMINI_API_KEY,
        model=settings.AI_MODEL,
        api_url=settings.AI_API_URL,
    )
