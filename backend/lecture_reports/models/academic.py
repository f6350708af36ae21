from sqlalchemy import (
    Column, String, Boolean, DateTime, Integer, Text, Time, ForeignKey,
    CheckConstraint, UniqueConstraint,
)
from datetime import datetime

from lecture_reports.core.database import Base


class Faculty(Base):
    """Faculty (school) that owns courses"""
    __tablename__ = "faculties"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    code = Column(String(20), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Faculty {self.code}>"


class Course(Base):
    """Course offered by a faculty"""
    __tablename__ = "courses"
    __table_args__ = (
        CheckConstraint("total_registered >= 0", name="ck_courses_total_registered"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    faculty_id = Column(Integer, ForeignKey("faculties.id", ondelete="SET NULL"), nullable=True, index=True)
    code = Column(String(20), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    total_registered = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Course {self.code}>"


class LectureClass(Base):
    """A scheduled section of a course, identified by its class code (e.g. BSCSEM1-A)"""
    __tablename__ = "classes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    lecturer_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    class_name = Column(String(100), unique=True, nullable=False, index=True)
    venue = Column(String(255), nullable=True)
    scheduled_time = Column(Time, nullable=True)
    day_of_week = Column(String(20), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<LectureClass {self.class_name}>"


class Enrollment(Base):
    """Student membership of a class"""
    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("class_id", "student_id", name="uq_enrollments_class_student"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    enrolled_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Enrollment class={self.class_id} student={self.student_id}>"
