from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reports.core.database import get_db
from lecture_reports.models.user import User
from lecture_reports.modules.auth.dependencies import get_current_reviewer
from lecture_reports.services.analytics_service import get_analytics_service
from lecture_reports.utils.responses import success_response

router = APIRouter()


@router.get("/overview")
async def analytics_overview(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_reviewer)
):
    """System-wide counts and averages"""
    overview = await get_analytics_service(db).overview()
    return success_response(overview)


@router.get("/trends")
async def analytics_trends(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_reviewer)
):
    """Reports per day over the last 30 days"""
    trends = await get_analytics_service(db).trends()
    return success_response(trends)
