"""
Academic Structure Service
Faculties, courses, classes, enrollments and the lecturer directory
"""

from typing import List, Dict, Any, Optional
from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from lecture_reports.core.exceptions import (
    ClassNotFoundError,
    ConflictError,
    CourseNotFoundError,
    FacultyNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from lecture_reports.core.logging_config import logger
from lecture_reports.models.academic import Course, Enrollment, Faculty, LectureClass
from lecture_reports.models.rating import Rating
from lecture_reports.models.report import Report
from lecture_reports.models.user import User, UserRole
from lecture_reports.schemas.academic import ClassCreate, CourseCreate

Instructor = aliased(User, name="instructor")


def class_detail_query():
    """Classes joined with course, faculty, instructor and enrollment count"""
    enrolled = (
        select(func.count(Enrollment.id))
        .where(Enrollment.class_id == LectureClass.id)
        .correlate(LectureClass)
        .scalar_subquery()
    )
    return (
        select(
            LectureClass,
            Course.name.label("course_name"),
            Course.code.label("course_code"),
            Faculty.name.label("faculty_name"),
            Instructor.first_name.label("instructor_first_name"),
            Instructor.last_name.label("instructor_last_name"),
            enrolled.label("enrolled_students"),
        )
        .join(Course, LectureClass.course_id == Course.id)
        .outerjoin(Faculty, Course.faculty_id == Faculty.id)
        .outerjoin(Instructor, LectureClass.lecturer_id == Instructor.id)
    )


def serialize_class(row) -> Dict[str, Any]:
    cls: LectureClass = row[0]
    if row.instructor_first_name is not None:
        instructor_name = f"{row.instructor_first_name} {row.instructor_last_name}".strip()
    else:
        instructor_name = "TBA"
    return {
        "id": cls.id,
        "code": cls.class_name,
        "name": cls.class_name,
        "class_name": cls.class_name,
        "course_id": cls.course_id,
        "course_name": row.course_name,
        "course_code": row.course_code,
        "faculty_name": row.faculty_name,
        "instructor_id": cls.lecturer_id,
        "instructor_name": instructor_name,
        "venue": cls.venue,
        "scheduled_time": cls.scheduled_time,
        "day_of_week": cls.day_of_week,
        "enrolled_students": row.enrolled_students or 0,
        "status": "active" if cls.is_active else "inactive",
        "created_at": cls.created_at,
    }


class AcademicService:
    """Service for faculties, courses, classes and enrollments"""

    def __init__(self, db: AsyncSession):
        self.db = db

    # =====================================================
    # FACULTIES & COURSES
    # =====================================================

    async def list_faculties(self) -> List[Faculty]:
        result = await self.db.execute(select(Faculty).order_by(Faculty.name))
        return list(result.scalars().all())

    async def list_courses(self) -> List[Dict[str, Any]]:
        result = await self.db.execute(
            select(Course, Faculty.name.label("faculty_name"))
            .outerjoin(Faculty, Course.faculty_id == Faculty.id)
            .order_by(Course.name)
        )
        return [
            {
                "id": course.id,
                "code": course.code,
                "course_name": course.name,
                "name": course.name,
                "description": course.description,
                "faculty_id": course.faculty_id,
                "faculty_name": faculty_name,
                "total_registered": course.total_registered,
                "is_active": course.is_active,
            }
            for course, faculty_name in result.all()
        ]

    async def get_course(self, course_id: int) -> Course:
        course = await self.db.get(Course, course_id)
        if not course:
            raise CourseNotFoundError(course_id)
        return course

    async def _ensure_course_code_free(self, code: str, exclude_id: Optional[int] = None) -> None:
        query = select(Course.id).where(func.upper(Course.code) == code.upper())
        if exclude_id is not None:
            query = query.where(Course.id != exclude_id)
        if (await self.db.execute(query)).scalars().first() is not None:
            raise ConflictError("Course code already exists", resource_type="Course")

    async def _ensure_faculty(self, faculty_id: int) -> None:
        if not await self.db.get(Faculty, faculty_id):
            raise FacultyNotFoundError(faculty_id)

    async def create_course(self, data: CourseCreate) -> Course:
        code = data.code.strip().upper()
        await self._ensure_faculty(data.faculty_id)
        await self._ensure_course_code_free(code)

        course = Course(
            name=data.name.strip(),
            code=code,
            faculty_id=data.faculty_id,
            total_registered=data.total_registered,
            description=data.description,
        )
        self.db.add(course)
        await self.db.flush()
        logger.info(f"[Courses] Created course {course.code}")
        return course

    async def update_course(self, course_id: int, data: CourseCreate) -> Course:
        course = await self.get_course(course_id)
        code = data.code.strip().upper()
        await self._ensure_faculty(data.faculty_id)
        await self._ensure_course_code_free(code, exclude_id=course_id)

        course.name = data.name.strip()
        course.code = code
        course.faculty_id = data.faculty_id
        course.total_registered = data.total_registered
        if data.description is not None:
            course.description = data.description
        await self.db.flush()
        return course

    async def delete_course(self, course_id: int) -> Course:
        course = await self.get_course(course_id)
        reports = await self.db.execute(select(func.count(Report.id)).where(Report.course_id == course_id))
        if reports.scalar():
            raise ConflictError("Cannot delete course with existing reports", resource_type="Course")

        await self.db.delete(course)
        await self.db.flush()
        logger.info(f"[Courses] Deleted course {course.code}")
        return course

    # =====================================================
    # LECTURERS
    # =====================================================

    async def list_lecturers(self) -> List[Dict[str, Any]]:
        total_reports = (
            select(func.count(Report.id))
            .where(Report.lecturer_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        courses_taught = (
            select(func.count(func.distinct(LectureClass.course_id)))
            .where(LectureClass.lecturer_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        avg_rating = (
            select(func.avg(Rating.rating))
            .where(Rating.lecturer_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        result = await self.db.execute(
            select(
                User.id,
                User.first_name,
                User.last_name,
                User.email,
                total_reports.label("total_reports"),
                courses_taught.label("courses_taught"),
                avg_rating.label("avg_rating"),
            )
            .where(User.role == UserRole.LECTURER.value)
            .order_by(User.first_name, User.last_name)
        )
        return [
            {
                "id": row.id,
                "first_name": row.first_name,
                "last_name": row.last_name,
                "email": row.email,
                "total_reports": row.total_reports or 0,
                "courses_taught": row.courses_taught or 0,
                "avg_rating": round(float(row.avg_rating), 2) if row.avg_rating is not None else 0,
            }
            for row in result.all()
        ]

    # =====================================================
    # CLASSES
    # =====================================================

    async def list_classes(
        self,
        program_code: Optional[str] = None,
        lecturer_id: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        query = class_detail_query()
        if program_code:
            query = query.where(LectureClass.class_name.icontains(program_code, autoescape=True))
        if lecturer_id is not None:
            query = query.where(LectureClass.lecturer_id == lecturer_id)
        result = await self.db.execute(query.order_by(LectureClass.class_name))
        return [serialize_class(row) for row in result.all()]

    async def get_class(self, class_id: int) -> LectureClass:
        cls = await self.db.get(LectureClass, class_id)
        if not cls:
            raise ClassNotFoundError(class_id)
        return cls

    async def _validate_class(self, data: ClassCreate, exclude_id: Optional[int] = None) -> str:
        class_name = (data.class_name or "").strip()
        if len(class_name) < 2:
            raise ValidationError("Class name must be at least 2 characters long", field="class_name")

        await self.get_course(data.course_id)

        if data.lecturer_id is not None:
            lecturer = await self.db.get(User, data.lecturer_id)
            if not lecturer or not lecturer.has_role(UserRole.LECTURER):
                raise ValidationError("Assigned lecturer must be a Lecturer", field="lecturer_id")

        query = select(LectureClass.id).where(func.upper(LectureClass.class_name) == class_name.upper())
        if exclude_id is not None:
            query = query.where(LectureClass.id != exclude_id)
        if (await self.db.execute(query)).scalars().first() is not None:
            raise ConflictError("Class name already exists", resource_type="Class")

        return class_name.upper()

    async def create_class(self, data: ClassCreate) -> LectureClass:
        class_name = await self._validate_class(data)
        cls = LectureClass(
            class_name=class_name,
            course_id=data.course_id,
            lecturer_id=data.lecturer_id,
            venue=data.venue,
            scheduled_time=data.scheduled_time,
            day_of_week=data.day_of_week,
        )
        self.db.add(cls)
        await self.db.flush()
        logger.info(f"[Classes] Created class {cls.class_name}")
        return cls

    async def update_class(self, class_id: int, data: ClassCreate) -> LectureClass:
        cls = await self.get_class(class_id)
        class_name = await self._validate_class(data, exclude_id=class_id)

        cls.class_name = class_name
        cls.course_id = data.course_id
        cls.lecturer_id = data.lecturer_id
        cls.venue = data.venue
        cls.scheduled_time = data.scheduled_time
        cls.day_of_week = data.day_of_week
        await self.db.flush()
        return cls

    async def delete_class(self, class_id: int) -> LectureClass:
        cls = await self.get_class(class_id)
        reports = await self.db.execute(
            select(func.count(Report.id)).where(
                or_(Report.class_id == class_id, func.upper(Report.class_name) == cls.class_name.upper())
            )
        )
        if reports.scalar():
            raise ConflictError("Cannot delete class with existing reports", resource_type="Class")

        await self.db.delete(cls)
        await self.db.flush()
        logger.info(f"[Classes] Deleted class {cls.class_name}")
        return cls

    # =====================================================
    # ENROLLMENTS
    # =====================================================

    async def enroll_student(self, class_id: int, student_id: int) -> Enrollment:
        await self.get_class(class_id)
        student = await self.db.get(User, student_id)
        if not student or not student.has_role(UserRole.STUDENT):
            raise UserNotFoundError(student_id)

        existing = await self.db.execute(
            select(Enrollment.id).where(Enrollment.class_id == class_id, Enrollment.student_id == student_id)
        )
        if existing.scalars().first() is not None:
            raise ConflictError("Student is already enrolled in this class", resource_type="Enrollment")

        enrollment = Enrollment(class_id=class_id, student_id=student_id)
        self.db.add(enrollment)
        await self.db.flush()
        return enrollment

    async def unenroll_student(self, class_id: int, student_id: int) -> None:
        result = await self.db.execute(
            select(Enrollment).where(Enrollment.class_id == class_id, Enrollment.student_id == student_id)
        )
        enrollment = result.scalar_one_or_none()
        if not enrollment:
            raise UserNotFoundError(student_id)
        await self.db.delete(enrollment)
        await self.db.flush()

    async def list_enrolled_students(self, class_id: int) -> List[Dict[str, Any]]:
        await self.get_class(class_id)
        result = await self.db.execute(
            select(User.id, User.first_name, User.last_name, User.email, Enrollment.enrolled_at)
            .join(Enrollment, Enrollment.student_id == User.id)
            .where(Enrollment.class_id == class_id)
            .order_by(User.last_name, User.first_name)
        )
        return [dict(row._mapping) for row in result.all()]


def get_academic_service(db: AsyncSession) -> AcademicService:
    return AcademicService(db)
