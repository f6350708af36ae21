"""
Report Service
Lecture report submission, listing, statistics and the reviewer feedback workflow
"""

from datetime import datetime
from typing import Optional, Dict, Any, List
from sqlalchemy import select, func, case, literal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from lecture_reports.core.config import settings
from lecture_reports.core.exceptions import (
    AuthorizationError,
    CourseNotFoundError,
    FacultyNotFoundError,
    ReportLockedError,
    ReportNotFoundError,
    ValidationError,
)
from lecture_reports.core.logging_config import logger
from lecture_reports.models.academic import Course, Faculty, LectureClass
from lecture_reports.models.report import Report, ReportStatus
from lecture_reports.models.user import User, UserRole
from lecture_reports.schemas.report import ReportCreate, ReportUpdate
from lecture_reports.services.notification_service import NotificationService
from lecture_reports.services.report_validation import (
    parse_week,
    validate_attendance,
    validate_class_name,
    validate_lecture_date,
)
from lecture_reports.utils.pagination import paginate

Lecturer = aliased(User, name="lecturer")
Reviewer = aliased(User, name="reviewer")


def attendance_percentage_expr():
    """SQL expression: actual_present / total_registered * 100, NULL when nobody is registered"""
    return case(
        (Report.total_registered > 0, Report.actual_present * 100.0 / Report.total_registered),
        else_=None,
    )


def report_detail_query():
    """Reports joined with faculty, course, lecturer and reviewer names"""
    return (
        select(
            Report,
            Faculty.name.label("faculty_name"),
            Course.name.label("course_name"),
            (Lecturer.first_name + literal(" ") + Lecturer.last_name).label("lecturer_name"),
            Reviewer.first_name.label("feedback_by_first_name"),
            Reviewer.last_name.label("feedback_by_last_name"),
            Reviewer.role.label("feedback_by_role"),
        )
        .join(Course, Report.course_id == Course.id)
        .join(Lecturer, Report.lecturer_id == Lecturer.id)
        .outerjoin(Faculty, Report.faculty_id == Faculty.id)
        .outerjoin(Reviewer, Report.feedback_by == Reviewer.id)
    )


def serialize_report(row) -> Dict[str, Any]:
    """Flatten a report_detail_query row into the API shape"""
    report: Report = row[0]
    return {
        "id": report.id,
        "faculty_id": report.faculty_id,
        "faculty_name": row.faculty_name,
        "class_id": report.class_id,
        "class_name": report.class_name,
        "course_id": report.course_id,
        "course_code": report.course_code,
        "course_name": row.course_name,
        "lecturer_id": report.lecturer_id,
        "lecturer_name": row.lecturer_name,
        "week_of_reporting": report.week_of_reporting,
        "lecture_date": report.lecture_date,
        "actual_present": report.actual_present,
        "total_registered": report.total_registered,
        "attendance_rate": report.attendance_rate,
        "venue": report.venue,
        "scheduled_time": report.scheduled_time,
        "topic": report.topic,
        "learning_outcomes": report.learning_outcomes,
        "recommendations": report.recommendations,
        "feedback": report.feedback,
        "feedback_at": report.feedback_at,
        "feedback_by": report.feedback_by,
        "feedback_by_first_name": row.feedback_by_first_name,
        "feedback_by_last_name": row.feedback_by_last_name,
        "status": report.status.value,
        "created_at": report.created_at,
        "updated_at": report.updated_at,
    }


class ReportService:
    """Service for lecture report operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    # =====================================================
    # LOOKUPS
    # =====================================================

    async def _get_course(self, course_id: int) -> Course:
        course = await self.db.get(Course, course_id)
        if not course:
            raise CourseNotFoundError(course_id)
        return course

    async def _find_class_id(self, class_name: str) -> Optional[int]:
        result = await self.db.execute(
            select(LectureClass.id).where(func.upper(LectureClass.class_name) == class_name)
        )
        return result.scalars().first()

    async def get_report_model(self, report_id: int) -> Report:
        report = await self.db.get(Report, report_id)
        if not report:
            raise ReportNotFoundError(report_id)
        return report

    def _scope(self, query, user: User):
        """Lecturers only ever see their own reports"""
        if user.has_role(UserRole.LECTURER):
            query = query.where(Report.lecturer_id == user.id)
        return query

    # =====================================================
    # CREATE / UPDATE / DELETE
    # =====================================================

    async def create_report(self, data: ReportCreate, lecturer: User) -> Report:
        """Validate and store a new report for `lecturer`"""
        class_name = validate_class_name(data.class_name)
        week = parse_week(data.week_of_reporting)
        validate_lecture_date(data.lecture_date)

        course = await self._get_course(data.course_id)
        total_registered = data.total_registered
        if total_registered is None:
            total_registered = course.total_registered or 0
        validate_attendance(data.actual_present, total_registered)

        if data.faculty_id is not None and not await self.db.get(Faculty, data.faculty_id):
            raise FacultyNotFoundError(data.faculty_id)

        report = Report(
            faculty_id=data.faculty_id or course.faculty_id,
            class_id=await self._find_class_id(class_name),
            class_name=class_name,
            course_id=course.id,
            course_code=course.code,
            lecturer_id=lecturer.id,
            week_of_reporting=week,
            lecture_date=data.lecture_date,
            actual_present=data.actual_present,
            total_registered=total_registered,
            venue=data.venue,
            scheduled_time=data.scheduled_time,
            topic=data.topic or "",
            learning_outcomes=data.learning_outcomes or "",
            recommendations=data.recommendations,
        )
        self.db.add(report)
        await self.db.flush()

        await NotificationService(self.db).notify_role(
            UserRole.PRL,
            "New lecture report",
            f"{lecturer.full_name or lecturer.email} submitted week {week} report for {class_name}",
        )

        logger.log_report_event("created", report.id, class_name=class_name, lecturer_id=lecturer.id)
        return report

    async def update_report(self, report_id: int, data: ReportUpdate, user: User) -> Report:
        """Owning lecturer edits a report that has not been reviewed yet"""
        report = await self.get_report_model(report_id)
        if report.lecturer_id != user.id:
            raise AuthorizationError("You can only edit your own reports")
        if report.status == ReportStatus.REVIEWED:
            raise ReportLockedError(report_id)

        changes = data.model_dump(exclude_unset=True)
        for required in ("lecture_date", "course_id", "actual_present", "total_registered"):
            if required in changes and changes[required] is None:
                raise ValidationError(f"{required.replace('_', ' ').capitalize()} cannot be empty", field=required)

        # Validate everything before touching the instance
        if "class_name" in changes:
            changes["class_name"] = validate_class_name(changes["class_name"])
        if "week_of_reporting" in changes:
            changes["week_of_reporting"] = parse_week(changes["week_of_reporting"])
        if "lecture_date" in changes:
            validate_lecture_date(changes["lecture_date"])
        course = None
        if "course_id" in changes:
            course = await self._get_course(changes["course_id"])
        validate_attendance(
            changes.get("actual_present", report.actual_present),
            changes.get("total_registered", report.total_registered),
        )

        if "class_name" in changes:
            report.class_id = await self._find_class_id(changes["class_name"])
        if course is not None:
            report.course_code = course.code
            report.faculty_id = course.faculty_id or report.faculty_id
        for field, value in changes.items():
            setattr(report, field, value)
        report.updated_at = datetime.utcnow()
        await self.db.flush()

        logger.log_report_event("updated", report.id, fields=sorted(data.model_dump(exclude_unset=True)))
        return report

    async def delete_report(self, report_id: int, user: User) -> Report:
        """Admins delete any report; lecturers only their own pending ones"""
        report = await self.get_report_model(report_id)
        if not user.has_role(UserRole.ADMIN):
            if report.lecturer_id != user.id:
                raise AuthorizationError("You can only delete your own reports")
            if report.status == ReportStatus.REVIEWED:
                raise ReportLockedError(report_id)

        await self.db.delete(report)
        await self.db.flush()
        logger.log_report_event("deleted", report_id, deleted_by=user.id)
        return report

    # =====================================================
    # READS
    # =====================================================

    async def list_reports(
        self,
        user: User,
        page: int = 1,
        page_size: int = settings.REPORT_LIST_LIMIT,
        course_id: Optional[int] = None,
        week: Optional[int] = None,
        status: Optional[ReportStatus] = None,
    ) -> Dict[str, Any]:
        query = self._scope(report_detail_query(), user)
        if course_id is not None:
            query = query.where(Report.course_id == course_id)
        if week is not None:
            query = query.where(Report.week_of_reporting == week)
        if status == ReportStatus.PENDING:
            query = query.where(Report.feedback.is_(None))
        elif status == ReportStatus.REVIEWED:
            query = query.where(Report.feedback.is_not(None))

        query = query.order_by(Report.created_at.desc(), Report.id.desc())
        page_data = await paginate(self.db, query, page, page_size, scalars=False)
        page_data["items"] = [serialize_report(row) for row in page_data["items"]]
        return page_data

    async def get_report(self, report_id: int, user: User) -> Dict[str, Any]:
        query = self._scope(report_detail_query().where(Report.id == report_id), user)
        row = (await self.db.execute(query)).first()
        if row is None:
            raise ReportNotFoundError(report_id)
        return serialize_report(row)

    async def export_rows(self, user: User) -> List[Dict[str, Any]]:
        """Every report visible to `user`, newest first, for spreadsheet export"""
        query = self._scope(report_detail_query(), user).order_by(Report.created_at.desc(), Report.id.desc())
        result = await self.db.execute(query)
        return [serialize_report(row) for row in result.all()]

    async def get_stats(self, user: User) -> Dict[str, Any]:
        query = select(
            func.count(Report.id),
            func.avg(attendance_percentage_expr()),
            func.count(func.distinct(Report.lecturer_id)),
            func.count(func.distinct(Report.course_id)),
        )
        query = self._scope(query, user)
        total, avg_attendance, lecturers, courses = (await self.db.execute(query)).one()
        return {
            "total_reports": total or 0,
            "avg_attendance": round(float(avg_attendance), 2) if avg_attendance is not None else 0,
            "active_lecturers": lecturers or 0,
            "courses_covered": courses or 0,
        }

    # =====================================================
    # FEEDBACK WORKFLOW
    # =====================================================

    async def add_feedback(self, report_id: int, feedback: str, reviewer: User) -> Report:
        """Attach (or revise) reviewer feedback; moves the report to reviewed"""
        text = (feedback or "").strip()
        if not text:
            raise ValidationError("Feedback is required", field="feedback")

        report = await self.get_report_model(report_id)
        previously_reviewed = report.status == ReportStatus.REVIEWED

        report.feedback = text
        report.feedback_by = reviewer.id
        report.feedback_at = datetime.utcnow()
        await self.db.flush()

        await NotificationService(self.db).notify(
            report.lecturer_id,
            "Feedback received",
            f"{reviewer.full_name or reviewer.email} ({reviewer.role}) "
            f"{'updated feedback on' if previously_reviewed else 'reviewed'} "
            f"your week {report.week_of_reporting} report for {report.class_name}",
            type="success",
        )

        logger.log_report_event(
            "feedback_updated" if previously_reviewed else "reviewed",
            report.id,
            reviewer_id=reviewer.id,
        )
        return report

    async def get_feedback(self, report_id: int, user: User) -> List[Dict[str, Any]]:
        query = (
            select(
                Report.id,
                Report.feedback,
                Report.feedback_at,
                Report.lecturer_id,
                (Reviewer.first_name + literal(" ") + Reviewer.last_name).label("reviewer_name"),
                Reviewer.role.label("reviewer_role"),
            )
            .outerjoin(Reviewer, Report.feedback_by == Reviewer.id)
            .where(Report.id == report_id)
        )
        row = (await self.db.execute(self._scope(query, user))).first()
        if row is None:
            raise ReportNotFoundError(report_id)
        if not row.feedback:
            return []
        return [{
            "report_id": row.id,
            "feedback": row.feedback,
            "feedback_at": row.feedback_at,
            "reviewer_name": row.reviewer_name,
            "reviewer_role": row.reviewer_role,
        }]


def get_report_service(db: AsyncSession) -> ReportService:
    return ReportService(db)
