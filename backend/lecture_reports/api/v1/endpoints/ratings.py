from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reports.core.database import get_db
from lecture_reports.models.user import User
from lecture_reports.modules.auth.dependencies import (
    get_current_user,
    get_current_lecturer,
    get_current_student,
)
from lecture_reports.schemas.rating import RatingCreate
from lecture_reports.services.rating_service import get_rating_service
from lecture_reports.utils.responses import success_response

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_rating(
    data: RatingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_student)
):
    """Rate a lecturer for a course (Students only, once per rating type)"""
    rating = await get_rating_service(db).create_rating(data, current_user)
    payload = {"id": rating.id, "rating": rating.rating, "rating_type": rating.rating_type}
    await db.commit()
    return success_response(payload, "Rating submitted successfully")


@router.get("")
async def list_ratings(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    ratings = await get_rating_service(db).list_recent()
    return success_response(ratings)


@router.get("/my-ratings")
async def my_ratings(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_student)
):
    ratings = await get_rating_service(db).list_by_student(current_user.id)
    return success_response(ratings)


@router.get("/lecturer")
async def lecturer_ratings(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_lecturer)
):
    """Ratings received by the calling lecturer"""
    ratings = await get_rating_service(db).list_for_lecturer(current_user.id)
    return success_response(ratings)


@router.get("/lecturer/{lecturer_id}/stats")
async def lecturer_rating_stats(
    lecturer_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    stats = await get_rating_service(db).lecturer_stats(lecturer_id)
    return success_response(stats)


@router.get("/course/{course_id}/stats")
async def course_rating_stats(
    course_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    stats = await get_rating_service(db).course_stats(course_id)
    return success_response(stats)
