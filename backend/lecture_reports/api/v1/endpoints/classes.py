from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reports.core.database import get_db
from lecture_reports.models.user import User
from lecture_reports.modules.auth.dependencies import (
    get_current_user,
    get_current_lecturer,
    get_current_reviewer,
)
from lecture_reports.schemas.academic import ClassCreate, EnrollmentCreate
from lecture_reports.services.academic_service import get_academic_service
from lecture_reports.services.audit_service import log_action
from lecture_reports.utils.responses import success_response

router = APIRouter()


def _class_data(cls) -> dict:
    return {
        "id": cls.id,
        "class_name": cls.class_name,
        "course_id": cls.course_id,
        "lecturer_id": cls.lecturer_id,
        "venue": cls.venue,
        "scheduled_time": cls.scheduled_time,
        "day_of_week": cls.day_of_week,
    }


@router.get("/classes")
async def list_classes(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    classes = await get_academic_service(db).list_classes()
    return success_response(classes)


@router.get("/programs/{program_code}/classes")
async def list_program_classes(
    program_code: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Classes whose code contains the program code (case-insensitive)"""
    classes = await get_academic_service(db).list_classes(program_code=program_code)
    return success_response(classes)


@router.get("/my-classes")
async def list_my_classes(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_lecturer)
):
    classes = await get_academic_service(db).list_classes(lecturer_id=current_user.id)
    return success_response(classes)


@router.post("/classes", status_code=status.HTTP_201_CREATED)
async def create_class(
    data: ClassCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_reviewer)
):
    cls = await get_academic_service(db).create_class(data)
    payload = _class_data(cls)
    await db.commit()
    return success_response(payload, "Class created successfully")


@router.put("/classes/{class_id}")
async def update_class(
    class_id: int,
    data: ClassCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_reviewer)
):
    cls = await get_academic_service(db).update_class(class_id, data)
    payload = _class_data(cls)
    await db.commit()
    return success_response(payload, "Class updated successfully")


@router.delete("/classes/{class_id}")
async def delete_class(
    class_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_reviewer)
):
    cls = await get_academic_service(db).delete_class(class_id)
    await log_action(
        db, current_user.id, "class_deleted", "classes", class_id,
        details={"class_name": cls.class_name}, request=request
    )
    await db.commit()
    return success_response({"id": class_id}, "Class deleted successfully")


# ============================================
# Enrollments
# ============================================

@router.get("/classes/{class_id}/enrollments")
async def list_enrollments(
    class_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_reviewer)
):
    students = await get_academic_service(db).list_enrolled_students(class_id)
    return success_response(students)


@router.post("/classes/{class_id}/enrollments", status_code=status.HTTP_201_CREATED)
async def enroll_student(
    class_id: int,
    data: EnrollmentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_reviewer)
):
    enrollment = await get_academic_service(db).enroll_student(class_id, data.student_id)
    payload = {"id": enrollment.id, "class_id": class_id, "student_id": data.student_id}
    await db.commit()
    return success_response(payload, "Student enrolled successfully")


@router.delete("/classes/{class_id}/enrollments/{student_id}")
async def unenroll_student(
    class_id: int,
    student_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_reviewer)
):
    await get_academic_service(db).unenroll_student(class_id, student_id)
    await db.commit()
    return success_response({"class_id": class_id, "student_id": student_id}, "Student removed from class")
