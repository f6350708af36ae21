# Pydantic schemas
from lecture_reports.schemas.auth import (
    UserRegister,
    UserLogin,
    RefreshTokenRequest,
    UserResponse,
    AuthResponse,
)
from lecture_reports.schemas.academic import (
    FacultyResponse,
    CourseCreate,
    ClassCreate,
    EnrollmentCreate,
)
from lecture_reports.schemas.report import ReportCreate, ReportUpdate, FeedbackCreate
from lecture_reports.schemas.rating import RatingCreate
from lecture_reports.schemas.user import (
    RoleUpdate,
    StatusUpdate,
    UserListItem,
    NotificationResponse,
)
