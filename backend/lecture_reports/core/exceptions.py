"""
Custom Exceptions for Lecture Reports
=====================================

Raise these from services and endpoints instead of building HTTP errors by
hand. The handlers registered in ``main.py`` turn them into the standard
JSON envelope with the matching status code.

Usage:
    from lecture_reports.core.exceptions import CourseNotFoundError, ValidationError

    if not course:
        raise CourseNotFoundError(course_id)

    if actual_present < 0:
        raise ValidationError("Actual present cannot be negative", field="actual_present")
"""

from typing import Optional, Any, Dict

from lecture_reports.utils.responses import error_body


class LectureReportsError(Exception):
    """Base exception for all Lecture Reports errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(LectureReportsError):
    """User authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTH_FAILED")


class InvalidCredentialsError(AuthenticationError):
    """Email/password pair did not match"""

    status_code = 400

    def __init__(self):
        super().__init__("Invalid credentials")
        self.code = "INVALID_CREDENTIALS"


class AuthorizationError(LectureReportsError):
    """User not authorized for this action"""

    status_code = 403

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="NOT_AUTHORIZED")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(LectureReportsError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: Any):
        super().__init__(
            f"{resource_type} not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class ReportNotFoundError(ResourceNotFoundError):
    def __init__(self, report_id: Any):
        super().__init__("Report", report_id)


class CourseNotFoundError(ResourceNotFoundError):
    def __init__(self, course_id: Any):
        super().__init__("Course", course_id)


class FacultyNotFoundError(ResourceNotFoundError):
    def __init__(self, faculty_id: Any):
        super().__init__("Faculty", faculty_id)


class ClassNotFoundError(ResourceNotFoundError):
    def __init__(self, class_id: Any):
        super().__init__("Class", class_id)


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, user_id: Any):
        super().__init__("User", user_id)


class LecturerNotFoundError(ResourceNotFoundError):
    def __init__(self, lecturer_id: Any):
        super().__init__("Lecturer", lecturer_id)


class NotificationNotFoundError(ResourceNotFoundError):
    def __init__(self, notification_id: Any):
        super().__init__("Notification", notification_id)


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(LectureReportsError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class ConflictError(LectureReportsError):
    """Duplicate record, or a delete blocked by dependent rows"""

    status_code = 400

    def __init__(self, message: str, resource_type: Optional[str] = None):
        details = {"resource_type": resource_type} if resource_type else {}
        super().__init__(message, code="CONFLICT", details=details)


class ReportLockedError(LectureReportsError):
    """Report already carries reviewer feedback"""

    status_code = 409

    def __init__(self, report_id: Any):
        super().__init__(
            "Report has already been reviewed and can no longer be edited",
            code="REPORT_LOCKED",
            details={"report_id": report_id}
        )


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: LectureReportsError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return error_body(error.message, error.code, error.details)
