"""
Analytics Service
System-wide overview and trends, student attendance views, global search
and the user directory.
"""

from datetime import datetime, timedelta
from typing import List, Dict, Any, Optional, Tuple
from sqlalchemy import select, func, or_, literal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from lecture_reports.core.config import settings
from lecture_reports.core.exceptions import UserNotFoundError, ValidationError
from lecture_reports.models.academic import Course, Enrollment, LectureClass
from lecture_reports.models.rating import Rating
from lecture_reports.models.report import Report
from lecture_reports.models.user import User, UserRole
from lecture_reports.services.report_service import attendance_percentage_expr

Lecturer = aliased(User, name="lecturer")

TREND_DAYS = 30
SEARCH_LIMIT = 10
MIN_SEARCH_LENGTH = 2


def _round(value) -> float:
    return round(float(value), 2) if value is not None else 0


class AnalyticsService:
    """Aggregate views over reports and ratings, plus user administration"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count(self, query) -> int:
        return (await self.db.execute(query)).scalar() or 0

    # =====================================================
    # OVERVIEW & TRENDS
    # =====================================================

    async def overview(self) -> Dict[str, Any]:
        def users_with(role: UserRole):
            return select(func.count(User.id)).where(User.role == role.value)

        avg_attendance = (await self.db.execute(select(func.avg(attendance_percentage_expr())))).scalar()
        avg_rating = (await self.db.execute(select(func.avg(Rating.rating)))).scalar()

        return {
            "total_students": await self._count(users_with(UserRole.STUDENT)),
            "total_lecturers": await self._count(users_with(UserRole.LECTURER)),
            "total_courses": await self._count(select(func.count(Course.id))),
            "total_reports": await self._count(select(func.count(Report.id))),
            "total_ratings": await self._count(select(func.count(Rating.id))),
            "total_classes": await self._count(select(func.count(LectureClass.id))),
            "avg_attendance": _round(avg_attendance),
            "avg_rating": _round(avg_rating),
        }

    async def trends(self, days: int = TREND_DAYS) -> List[Dict[str, Any]]:
        since = datetime.utcnow() - timedelta(days=days)
        day = func.date(Report.created_at).label("date")
        result = await self.db.execute(
            select(
                day,
                func.count(Report.id).label("reports_count"),
                func.avg(attendance_percentage_expr()).label("daily_attendance"),
            )
            .where(Report.created_at >= since)
            .group_by(day)
            .order_by(day)
        )
        return [
            {
                "date": str(row.date),
                "reports_count": row.reports_count,
                "daily_attendance": _round(row.daily_attendance),
            }
            for row in result.all()
        ]

    # =====================================================
    # STUDENTS
    # =====================================================

    def _enrolled_reports(self, student_id: int):
        """Criterion matching reports of classes the student is enrolled in"""
        enrolled = (
            select(LectureClass.id, LectureClass.class_name)
            .join(Enrollment, Enrollment.class_id == LectureClass.id)
            .where(Enrollment.student_id == student_id)
            .subquery()
        )
        return or_(
            Report.class_id.in_(select(enrolled.c.id)),
            func.upper(Report.class_name).in_(select(func.upper(enrolled.c.class_name))),
        )

    async def student_attendance(self, student_id: int) -> List[Dict[str, Any]]:
        result = await self.db.execute(
            select(
                Report.id,
                Report.class_name,
                Report.course_code,
                Course.name.label("course_name"),
                (Lecturer.first_name + literal(" ") + Lecturer.last_name).label("lecturer_name"),
                Report.week_of_reporting,
                Report.lecture_date,
                Report.topic,
                Report.actual_present,
                Report.total_registered,
                attendance_percentage_expr().label("attendance_percentage"),
            )
            .join(Course, Report.course_id == Course.id)
            .join(Lecturer, Report.lecturer_id == Lecturer.id)
            .where(self._enrolled_reports(student_id))
            .order_by(Report.lecture_date.desc(), Report.id.desc())
            .limit(settings.REPORT_LIST_LIMIT)
        )
        rows = []
        for row in result.all():
            item = dict(row._mapping)
            item["attendance_percentage"] = _round(row.attendance_percentage)
            rows.append(item)
        return rows

    async def student_stats(self, student_id: int) -> Dict[str, Any]:
        total_courses, total_classes = (await self.db.execute(
            select(
                func.count(func.distinct(LectureClass.course_id)),
                func.count(func.distinct(LectureClass.id)),
            )
            .join(Enrollment, Enrollment.class_id == LectureClass.id)
            .where(Enrollment.student_id == student_id)
        )).one()

        overall_attendance, lecturers_count = (await self.db.execute(
            select(
                func.avg(attendance_percentage_expr()),
                func.count(func.distinct(Report.lecturer_id)),
            ).where(self._enrolled_reports(student_id))
        )).one()

        return {
            "total_courses": total_courses or 0,
            "total_classes": total_classes or 0,
            "overall_attendance": _round(overall_attendance),
            "lecturers_count": lecturers_count or 0,
        }

    async def student_performance(self, student_id: int) -> List[Dict[str, Any]]:
        rate = func.avg(attendance_percentage_expr())
        result = await self.db.execute(
            select(
                Course.code.label("course_code"),
                Course.name.label("course_name"),
                (Lecturer.first_name + literal(" ") + Lecturer.last_name).label("lecturer_name"),
                func.count(Report.id).label("classes_count"),
                rate.label("attendance_rate"),
            )
            .join(Course, Report.course_id == Course.id)
            .join(Lecturer, Report.lecturer_id == Lecturer.id)
            .where(self._enrolled_reports(student_id))
            .group_by(Course.code, Course.name, Lecturer.first_name, Lecturer.last_name)
            .order_by(rate.desc())
        )
        return [
            {
                "course_code": row.course_code,
                "course_name": row.course_name,
                "lecturer_name": row.lecturer_name,
                "classes_count": row.classes_count,
                "attendance_rate": _round(row.attendance_rate),
            }
            for row in result.all()
        ]

    # =====================================================
    # SEARCH
    # =====================================================

    async def search(self, q: Optional[str]) -> Dict[str, List[Dict[str, Any]]]:
        term = (q or "").strip()
        if len(term) < MIN_SEARCH_LENGTH:
            raise ValidationError(
                f"Search query must be at least {MIN_SEARCH_LENGTH} characters",
                field="q"
            )

        courses = await self.db.execute(
            select(Course.id, Course.code, Course.name)
            .where(or_(
                Course.code.icontains(term, autoescape=True),
                Course.name.icontains(term, autoescape=True),
            ))
            .order_by(Course.name)
            .limit(SEARCH_LIMIT)
        )
        lecturers = await self.db.execute(
            select(User.id, User.first_name, User.last_name, User.email)
            .where(
                User.role == UserRole.LECTURER.value,
                or_(
                    User.first_name.icontains(term, autoescape=True),
                    User.last_name.icontains(term, autoescape=True),
                    User.email.icontains(term, autoescape=True),
                ),
            )
            .order_by(User.first_name, User.last_name)
            .limit(SEARCH_LIMIT)
        )
        classes = await self.db.execute(
            select(LectureClass.id, LectureClass.class_name, Course.name.label("course_name"))
            .join(Course, LectureClass.course_id == Course.id)
            .where(LectureClass.class_name.icontains(term, autoescape=True))
            .order_by(LectureClass.class_name)
            .limit(SEARCH_LIMIT)
        )

        return {
            "courses": [dict(row._mapping) for row in courses.all()],
            "lecturers": [dict(row._mapping) for row in lecturers.all()],
            "classes": [dict(row._mapping) for row in classes.all()],
        }

    # =====================================================
    # USERS
    # =====================================================

    async def list_users(self, role: Optional[str] = None, search: Optional[str] = None) -> List[User]:
        query = select(User)
        if role:
            query = query.where(User.role == role)
        if search:
            term = search.strip()
            query = query.where(or_(
                User.first_name.icontains(term, autoescape=True),
                User.last_name.icontains(term, autoescape=True),
                User.email.icontains(term, autoescape=True),
            ))
        result = await self.db.execute(query.order_by(User.created_at.desc(), User.id.desc()))
        return list(result.scalars().all())

    async def get_user(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if not user:
            raise UserNotFoundError(user_id)
        return user

    async def update_role(self, user_id: int, role: Optional[str]) -> Tuple[User, str]:
        """Change a user's role; returns the user and the role it replaced"""
        if role not in UserRole.values():
            raise ValidationError("Invalid role specified", field="role")
        user = await self.get_user(user_id)
        previous_role = user.role
        user.role = role
        user.updated_at = datetime.utcnow()
        await self.db.flush()
        return user, previous_role

    async def update_status(self, user_id: int, is_active: bool) -> User:
        user = await self.get_user(user_id)
        user.is_active = is_active
        user.updated_at = datetime.utcnow()
        await self.db.flush()
        return user


def get_analytics_service(db: AsyncSession) -> AnalyticsService:
    return AnalyticsService(db)
