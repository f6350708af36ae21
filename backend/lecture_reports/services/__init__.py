from lecture_reports.services.report_service import ReportService, get_report_service
from lecture_reports.services.rating_service import RatingService, get_rating_service
from lecture_reports.services.academic_service import AcademicService, get_academic_service
from lecture_reports.services.analytics_service import AnalyticsService, get_analytics_service
from lecture_reports.services.notification_service import NotificationService
from lecture_reports.services.audit_service import log_action

__all__ = [
    "ReportService",
    "get_report_service",
    "RatingService",
    "get_rating_service",
    "AcademicService",
    "get_academic_service",
    "AnalyticsService",
    "get_analytics_service",
    "NotificationService",
    "log_action",
]
