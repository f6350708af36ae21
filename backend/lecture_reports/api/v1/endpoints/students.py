from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reports.core.database import get_db
from lecture_reports.models.user import User
from lecture_reports.modules.auth.dependencies import get_current_student
from lecture_reports.services.analytics_service import get_analytics_service
from lecture_reports.utils.responses import success_response

router = APIRouter()


@router.get("/attendance")
async def student_attendance(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_student)
):
    """Reports of the classes the student is enrolled in, latest lecture first"""
    rows = await get_analytics_service(db).student_attendance(current_user.id)
    return success_response(rows)


@router.get("/stats")
async def student_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_student)
):
    stats = await get_analytics_service(db).student_stats(current_user.id)
    return success_response(stats)


@router.get("/performance")
async def student_performance(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_student)
):
    rows = await get_analytics_service(db).student_performance(current_user.id)
    return success_response(rows)
