from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional

from lecture_reports.core.database import get_db
from lecture_reports.core.security import ACCESS, decode_token
from lecture_reports.core.logging_config import set_user_id
from lecture_reports.models.user import REVIEWER_ROLES, User, UserRole

# auto_error=False so a missing header gets our own 401 instead of HTTPBearer's 403
security = HTTPBearer(auto_error=False)

_ROLE_PLURALS = {
    UserRole.STUDENT.value: "Students",
    UserRole.LECTURER.value: "Lecturers",
    UserRole.PRL.value: "PRL",
    UserRole.PL.value: "PL",
    UserRole.ADMIN.value: "Admins",
}


def describe_roles(roles) -> str:
    """'Admins, PRL, and PL' style list used in 403 messages"""
    names = [_ROLE_PLURALS[UserRole(r).value] for r in roles]
    if len(names) == 1:
        return names[0]
    if len(names) == 2:
        return f"{names[0]} and {names[1]}"
    return f"{', '.join(names[:-1])}, and {names[-1]}"


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user"""

    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication token required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_token(credentials.credentials, expected_type=ACCESS)

    result = await db.execute(
        select(User).where(User.id == int(payload["sub"]))
    )
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )

    # Picked up by the rate limiter key and the log formatters
    request.state.user_id = user.id
    set_user_id(str(user.id))

    return user


def require_roles(*roles: UserRole):
    """
    Dependency factory gating a route to the given roles.

    Usage:
        @router.post("")
        async def create_report(current_user: User = Depends(require_roles(UserRole.LECTURER))):
            ...
    """
    message = f"Access denied. {describe_roles(roles)} only."

    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if not current_user.has_role(*roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=message
            )
        return current_user

    return role_checker


get_current_admin = require_roles(UserRole.ADMIN)
get_current_lecturer = require_roles(UserRole.LECTURER)
get_current_student = require_roles(UserRole.STUDENT)
get_current_reviewer = require_roles(*REVIEWER_ROLES)
