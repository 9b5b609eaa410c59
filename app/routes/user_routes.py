from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.permissions import Permission
from app.database import get_db
from app.dependencies import require_permission
from app.models.access_context import AccessContext
from app.services.user_service import UserService
from app.schemas.user_schemas import UserResponse, UserListResponse, UserUpdate

router = APIRouter()


@router.get("", response_model=UserListResponse)
async def list_users(
    context: AccessContext = Depends(require_permission(Permission.MANAGE_USERS)),
    db: Session = Depends(get_db),
):
    """
    List users the caller can manage.

    - **Requires MANAGE_USERS**
    - Admins see the whole organization, managers see their units
    """
    service = UserService(db)
    users = service.list_users(context)
    return UserListResponse(users=users, total=len(users))


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    data: UserUpdate,
    context: AccessContext = Depends(require_permission(Permission.MANAGE_USERS)),
    db: Session = Depends(get_db),
):
    """
    Change a user's role or home business unit.

    - **Requires MANAGE_USERS**
    - Cannot change yourself
    - Only admins can grant admin roles or modify admins
    - Non-admins can only assign units within their own scope
    """
    service = UserService(db)
    return service.update_user(user_id, data, context)


@router.delete("/{user_id}", response_model=UserResponse)
async def archive_user(
    user_id: int,
    context: AccessContext = Depends(require_permission(Permission.MANAGE_USERS)),
    db: Session = Depends(get_db),
):
    """
    Archive a user. Archived users can no longer log in.

    - **Requires MANAGE_USERS**
    - Cannot archive yourself
    """
    service = UserService(db)
    return service.archive_user(user_id, context)
