from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reports.core.database import get_db
from lecture_reports.models.user import User, UserRole
from lecture_reports.modules.auth.dependencies import get_current_user, get_current_reviewer, require_roles
from lecture_reports.schemas.academic import CourseCreate
from lecture_reports.services.academic_service import get_academic_service
from lecture_reports.services.audit_service import log_action
from lecture_reports.utils.responses import success_response

router = APIRouter()


def _course_data(course) -> dict:
    return {
        "id": course.id,
        "code": course.code,
        "name": course.name,
        "faculty_id": course.faculty_id,
        "total_registered": course.total_registered,
        "description": course.description,
    }


@router.get("")
async def list_courses(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """All courses with their faculty name"""
    courses = await get_academic_service(db).list_courses()
    return success_response(courses)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_course(
    data: CourseCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_reviewer)
):
    course = await get_academic_service(db).create_course(data)
    payload = _course_data(course)
    await db.commit()
    return success_response(payload, "Course created successfully")


@router.put("/{course_id}")
async def update_course(
    course_id: int,
    data: CourseCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_reviewer)
):
    course = await get_academic_service(db).update_course(course_id, data)
    payload = _course_data(course)
    await db.commit()
    return success_response(payload, "Course updated successfully")


@router.delete("/{course_id}")
async def delete_course(
    course_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.PL, UserRole.ADMIN))
):
    """Delete a course that no report references"""
    course = await get_academic_service(db).delete_course(course_id)
    await log_action(
        db, current_user.id, "course_deleted", "courses", course_id,
        details={"code": course.code}, request=request
    )
    await db.commit()
    return success_response({"id": course_id}, "Course deleted successfully")
