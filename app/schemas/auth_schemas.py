from pydantic import BaseModel, Field
from app.core.permissions import Permission
from app.schemas.user_schemas import UserResponse


class RegisterRequest(BaseModel):
    """Register a new organization together with its first admin"""

    organization_name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=2, max_length=100, pattern=r"^[a-z0-9][a-z0-9-]*$")
    username: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=8, max_length=128)


class LoginRequest(BaseModel):
    """Email + password login"""

    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class TokenResponse(BaseModel):
    """Bearer token issued on register, login and invitation accept"""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class CurrentUserResponse(BaseModel):
    """Authenticated user with the permissions of their role"""

    user: UserResponse
    permissions: list[Permission]
