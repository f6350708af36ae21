from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reports.core.database import get_db
from lecture_reports.core.exceptions import ValidationError
from lecture_reports.models.user import User, UserRole
from lecture_reports.modules.auth.dependencies import get_current_admin, require_roles
from lecture_reports.schemas.user import RoleUpdate, StatusUpdate, UserListItem
from lecture_reports.services.analytics_service import get_analytics_service
from lecture_reports.services.audit_service import log_action
from lecture_reports.utils.responses import success_response

router = APIRouter()


@router.get("")
async def list_users(
    role: Optional[str] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.ADMIN, UserRole.PRL))
):
    """Users newest first, optionally filtered by role or name/email"""
    users = await get_analytics_service(db).list_users(role=role, search=search)
    return success_response([UserListItem.model_validate(u).model_dump() for u in users])


@router.put("/{user_id}/role")
async def update_user_role(
    user_id: int,
    data: RoleUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    user, previous_role = await get_analytics_service(db).update_role(user_id, data.role)
    await log_action(
        db, current_user.id, "user_role_changed", "users", user_id,
        details={"from": previous_role, "to": user.role}, request=request
    )
    payload = UserListItem.model_validate(user).model_dump()
    await db.commit()
    return success_response(payload, "User role updated successfully")


@router.patch("/{user_id}/status")
async def update_user_status(
    user_id: int,
    data: StatusUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin)
):
    """Activate or deactivate an account"""
    if user_id == current_user.id and not data.is_active:
        raise ValidationError("You cannot deactivate your own account", field="is_active")

    user = await get_analytics_service(db).update_status(user_id, data.is_active)
    await log_action(
        db, current_user.id, "user_activated" if data.is_active else "user_deactivated",
        "users", user_id, request=request
    )
    payload = UserListItem.model_validate(user).model_dump()
    await db.commit()
    return success_response(payload, "User status updated successfully")
