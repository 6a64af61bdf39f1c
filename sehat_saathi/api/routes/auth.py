from fastapi import APIRouter, Depends, status

from ...api.deps import get_auth_service, require_auth
from ...core.security import Identity
from ...services.auth_service import AuthService
from ...schemas.auth import AuthResponse, UserLogin, UserRegister, UserResponse

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserRegister,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Register a new user."""
    user, token = auth_service.register_user(user_data)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post("/login", response_model=AuthResponse)
def login(
    login_data: UserLogin,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Authenticate user and return an access token."""
    user, token = auth_service.authenticate_user(login_data)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    identity: Identity = Depends(require_auth),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Get current user information."""
    return UserResponse.model_validate(auth_service.get_user(identity.id))
