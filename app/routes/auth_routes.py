from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.permissions import permissions_for_role
from app.core.security import create_access_token
from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.services.auth_service import AuthService
from app.schemas.auth_schemas import (
    RegisterRequest,
    LoginRequest,
    TokenResponse,
    CurrentUserResponse,
)
from app.schemas.user_schemas import UserResponse

router = APIRouter()


def _token_response(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(user.id, user.organization_id),
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """
    Register a new organization.

    - Creates the organization and its first user as ADMIN
    - Returns a bearer token for the new admin
    """
    service = AuthService(db)
    return _token_response(service.register(data))


@router.post("/login", response_model=TokenResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """Exchange email + password for a bearer token"""
    service = AuthService(db)
    return _token_response(service.login(data))


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(user: User = Depends(get_current_user)):
    """Get the authenticated user and the permissions of their role"""
    return CurrentUserResponse(
        user=UserResponse.model_validate(user),
        permissions=sorted(permissions_for_role(user.role), key=lambda p: p.value),
    )
