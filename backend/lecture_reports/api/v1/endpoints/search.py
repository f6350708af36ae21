from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reports.core.database import get_db
from lecture_reports.models.user import User
from lecture_reports.modules.auth.dependencies import get_current_user
from lecture_reports.services.analytics_service import get_analytics_service
from lecture_reports.utils.responses import success_response

router = APIRouter()


@router.get("")
async def search(
    q: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Search courses, lecturers and classes"""
    results = await get_analytics_service(db).search(q)
    return success_response(results)
