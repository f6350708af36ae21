from sqlalchemy import (
    Column, String, DateTime, Integer, ForeignKey, CheckConstraint, UniqueConstraint,
)
from datetime import datetime
import enum

from lecture_reports.core.database import Base


class RatingType(str, enum.Enum):
    """Aspect of teaching a rating applies to"""
    TEACHING = "teaching"
    SUBJECT_KNOWLEDGE = "subject_knowledge"
    COMMUNICATION = "communication"
    PUNCTUALITY = "punctuality"
    OVERALL = "overall"

    @classmethod
    def values(cls):
        return [t.value for t in cls]


class Rating(Base):
    """Student rating of a lecturer for a course"""
    __tablename__ = "ratings"
    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_ratings_rating"),
        UniqueConstraint(
            "student_id", "lecturer_id", "course_id", "rating_type",
            name="uq_ratings_student_lecturer_course_type",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    lecturer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    rating_type = Column(String(30), nullable=False, default=RatingType.OVERALL.value)
    comment = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<Rating {self.rating} ({self.rating_type}) for {self.lecturer_id}>"
