from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reports.core.database import get_db
from lecture_reports.models.user import User
from lecture_reports.modules.auth.dependencies import get_current_user
from lecture_reports.services.academic_service import get_academic_service
from lecture_reports.utils.responses import success_response

router = APIRouter()


@router.get("")
async def list_lecturers(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Lecturers with report count, courses taught and average rating"""
    lecturers = await get_academic_service(db).list_lecturers()
    return success_response(lecturers)
