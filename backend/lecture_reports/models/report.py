from sqlalchemy import (
    Column, String, DateTime, Date, Integer, Text, Time, ForeignKey, CheckConstraint,
)
from datetime import datetime
import enum

from lecture_reports.core.config import settings
from lecture_reports.core.database import Base


class ReportStatus(str, enum.Enum):
    """Review state of a report, derived from whether feedback exists"""
    PENDING = "pending"
    REVIEWED = "reviewed"


class Report(Base):
    """A lecturer's weekly record of a lecture session"""
    __tablename__ = "reports"
    __table_args__ = (
        CheckConstraint(f"week_of_reporting BETWEEN 1 AND {settings.MAX_WEEK}", name="ck_reports_week"),
        CheckConstraint("actual_present >= 0", name="ck_reports_actual_present"),
        CheckConstraint("total_registered >= 0", name="ck_reports_total_registered"),
        CheckConstraint("actual_present <= total_registered", name="ck_reports_present_le_registered"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    faculty_id = Column(Integer, ForeignKey("faculties.id", ondelete="SET NULL"), nullable=True, index=True)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="SET NULL"), nullable=True, index=True)
    class_name = Column(String(100), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    course_code = Column(String(20), nullable=False)
    lecturer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    week_of_reporting = Column(Integer, nullable=False)
    lecture_date = Column(Date, nullable=False)
    actual_present = Column(Integer, nullable=False, default=0)
    total_registered = Column(Integer, nullable=False, default=0)
    venue = Column(String(255), nullable=True)
    scheduled_time = Column(Time, nullable=True)
    topic = Column(Text, nullable=True)
    learning_outcomes = Column(Text, nullable=True)
    recommendations = Column(Text, nullable=True)

    # Reviewer feedback
    feedback = Column(Text, nullable=True)
    feedback_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    feedback_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def status(self) -> ReportStatus:
        return ReportStatus.REVIEWED if self.feedback else ReportStatus.PENDING

    @property
    def attendance_rate(self) -> float:
        if not self.total_registered:
            return 0.0
        return round(self.actual_present / self.total_registered * 100, 2)

    def __repr__(self):
        return f"<Report {self.id} {self.class_name} week {self.week_of_reporting}>"
