# Re-export all models for convenient imports
from lecture_reports.models.user import User, UserRole, Role, ROLE_DESCRIPTIONS, REVIEWER_ROLES
from lecture_reports.models.academic import Faculty, Course, LectureClass, Enrollment
from lecture_reports.models.report import Report, ReportStatus
from lecture_reports.models.rating import Rating, RatingType
from lecture_reports.models.notification import Notification
from lecture_reports.models.audit_log import AuditLog

__all__ = [
    # Users
    "User",
    "UserRole",
    "Role",
    "ROLE_DESCRIPTIONS",
    "REVIEWER_ROLES",
    # Academic structure
    "Faculty",
    "Course",
    "LectureClass",
    "Enrollment",
    # Reports
    "Report",
    "ReportStatus",
    # Ratings
    "Rating",
    "RatingType",
    # Admin
    "Notification",
    "AuditLog",
]
