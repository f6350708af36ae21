"""
Rating Service
Student ratings of lecturers and the per-lecturer / per-course breakdowns
"""

from typing import Dict, Any, List
from sqlalchemy import select, func, case, literal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from lecture_reports.core.config import settings
from lecture_reports.core.exceptions import (
    ConflictError,
    CourseNotFoundError,
    LecturerNotFoundError,
    ValidationError,
)
from lecture_reports.core.logging_config import logger
from lecture_reports.models.academic import Course
from lecture_reports.models.rating import Rating, RatingType
from lecture_reports.models.user import User, UserRole
from lecture_reports.schemas.rating import RatingCreate

Student = aliased(User, name="student")
Lecturer = aliased(User, name="lecturer")

MAX_COMMENT_LENGTH = 500
RECENT_COMMENTS = 10


def _full_name(alias):
    return alias.first_name + literal(" ") + alias.last_name


def _star_count(stars: int):
    return func.count(case((Rating.rating == stars, 1)))


def _round(value) -> float:
    return round(float(value), 2) if value is not None else 0


def rating_detail_query():
    return (
        select(
            Rating,
            _full_name(Lecturer).label("lecturer_name"),
            _full_name(Student).label("student_name"),
            Course.name.label("course_name"),
            Course.code.label("course_code"),
        )
        .join(Lecturer, Rating.lecturer_id == Lecturer.id)
        .join(Student, Rating.student_id == Student.id)
        .join(Course, Rating.course_id == Course.id)
    )


def serialize_rating(row) -> Dict[str, Any]:
    rating: Rating = row[0]
    return {
        "id": rating.id,
        "student_id": rating.student_id,
        "student_name": row.student_name,
        "lecturer_id": rating.lecturer_id,
        "lecturer_name": row.lecturer_name,
        "course_id": rating.course_id,
        "course_name": row.course_name,
        "course_code": row.course_code,
        "rating": rating.rating,
        "rating_type": rating.rating_type,
        "comment": rating.comment,
        "created_at": rating.created_at,
    }


def validate_rating(data: RatingCreate) -> None:
    if data.rating < 1 or data.rating > 5:
        raise ValidationError("Rating must be between 1 and 5", field="rating")
    if data.rating_type not in RatingType.values():
        raise ValidationError("Invalid rating type", field="rating_type")
    if data.comment and len(data.comment) > MAX_COMMENT_LENGTH:
        raise ValidationError(
            f"Comment must be less than {MAX_COMMENT_LENGTH} characters",
            field="comment"
        )


class RatingService:
    """Service for lecturer ratings"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_rating(self, data: RatingCreate, student: User) -> Rating:
        validate_rating(data)

        lecturer = await self.db.get(User, data.lecturer_id)
        if not lecturer or not lecturer.has_role(UserRole.LECTURER):
            raise LecturerNotFoundError(data.lecturer_id)
        if not await self.db.get(Course, data.course_id):
            raise CourseNotFoundError(data.course_id)

        existing = await self.db.execute(
            select(Rating.id).where(
                Rating.student_id == student.id,
                Rating.lecturer_id == data.lecturer_id,
                Rating.course_id == data.course_id,
                Rating.rating_type == data.rating_type,
            )
        )
        if existing.scalars().first() is not None:
            raise ConflictError(
                "You have already rated this lecturer for this course and rating type",
                resource_type="Rating"
            )

        rating = Rating(
            student_id=student.id,
            lecturer_id=data.lecturer_id,
            course_id=data.course_id,
            rating=data.rating,
            rating_type=data.rating_type,
            comment=data.comment or None,
        )
        self.db.add(rating)
        await self.db.flush()

        logger.info(
            f"[Ratings] Student {student.id} rated lecturer {data.lecturer_id} "
            f"{data.rating}/5 ({data.rating_type})"
        )
        return rating

    async def _list(self, *criteria, limit: int = None) -> List[Dict[str, Any]]:
        query = rating_detail_query()
        if criteria:
            query = query.where(*criteria)
        query = query.order_by(Rating.created_at.desc(), Rating.id.desc())
        if limit:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return [serialize_rating(row) for row in result.all()]

    async def list_recent(self) -> List[Dict[str, Any]]:
        return await self._list(limit=settings.RATING_LIST_LIMIT)

    async def list_by_student(self, student_id: int) -> List[Dict[str, Any]]:
        return await self._list(Rating.student_id == student_id)

    async def list_for_lecturer(self, lecturer_id: int) -> List[Dict[str, Any]]:
        return await self._list(Rating.lecturer_id == lecturer_id)

    async def lecturer_stats(self, lecturer_id: int) -> Dict[str, Any]:
        breakdown = await self.db.execute(
            select(
                Rating.rating_type,
                func.count(Rating.id).label("total_ratings"),
                func.avg(Rating.rating).label("average_rating"),
                _star_count(5).label("five_star"),
                _star_count(4).label("four_star"),
                _star_count(3).label("three_star"),
                _star_count(2).label("two_star"),
                _star_count(1).label("one_star"),
            )
            .where(Rating.lecturer_id == lecturer_id)
            .group_by(Rating.rating_type)
            .order_by(Rating.rating_type)
        )
        by_type = [
            {
                "rating_type": row.rating_type,
                "total_ratings": row.total_ratings,
                "average_rating": _round(row.average_rating),
                "five_star": row.five_star,
                "four_star": row.four_star,
                "three_star": row.three_star,
                "two_star": row.two_star,
                "one_star": row.one_star,
            }
            for row in breakdown.all()
        ]

        overall_avg, overall_count = (await self.db.execute(
            select(func.avg(Rating.rating), func.count(Rating.id)).where(Rating.lecturer_id == lecturer_id)
        )).one()

        comments = await self.db.execute(
            select(
                Rating.comment,
                Rating.rating,
                Rating.created_at,
                Course.name.label("course_name"),
                _full_name(Student).label("student_name"),
            )
            .join(Course, Rating.course_id == Course.id)
            .join(Student, Rating.student_id == Student.id)
            .where(Rating.lecturer_id == lecturer_id, Rating.comment.is_not(None), Rating.comment != "")
            .order_by(Rating.created_at.desc(), Rating.id.desc())
            .limit(RECENT_COMMENTS)
        )

        return {
            "by_type": by_type,
            "overall": {
                "overall_rating": _round(overall_avg),
                "total_ratings": overall_count or 0,
            },
            "recent_comments": [dict(row._mapping) for row in comments.all()],
        }

    async def course_stats(self, course_id: int) -> List[Dict[str, Any]]:
        result = await self.db.execute(
            select(
                Rating.rating_type,
                Rating.lecturer_id,
                _full_name(Lecturer).label("lecturer_name"),
                func.count(Rating.id).label("total_ratings"),
                func.avg(Rating.rating).label("average_rating"),
            )
            .join(Lecturer, Rating.lecturer_id == Lecturer.id)
            .where(Rating.course_id == course_id)
            .group_by(Rating.rating_type, Rating.lecturer_id, Lecturer.first_name, Lecturer.last_name)
            .order_by(Rating.rating_type, Rating.lecturer_id)
        )
        return [
            {
                "rating_type": row.rating_type,
                "lecturer_id": row.lecturer_id,
                "lecturer_name": row.lecturer_name,
                "total_ratings": row.total_ratings,
                "average_rating": _round(row.average_rating),
            }
            for row in result.all()
        ]


def get_rating_service(db: AsyncSession) -> RatingService:
    return RatingService(db)
