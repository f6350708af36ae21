from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reports.core.database import get_db
from lecture_reports.models.user import User
from lecture_reports.modules.auth.dependencies import get_current_user
from lecture_reports.schemas.academic import FacultyResponse
from lecture_reports.services.academic_service import get_academic_service
from lecture_reports.utils.responses import success_response

router = APIRouter()


@router.get("")
async def list_faculties(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """All faculties ordered by name"""
    faculties = await get_academic_service(db).list_faculties()
    return success_response([FacultyResponse.model_validate(f).model_dump() for f in faculties])
