from fastapi import APIRouter
from lecture_reports.api.v1.endpoints import (
    auth,
    faculties,
    courses,
    lecturers,
    classes,
    reports,
    ratings,
    students,
    analytics,
    users,
    search,
    notifications,
    health,
)

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(faculties.router, prefix="/faculties", tags=["Faculties"])
api_router.include_router(courses.router, prefix="/courses", tags=["Courses"])
api_router.include_router(lecturers.router, prefix="/lecturers", tags=["Lecturers"])
# Mounted without a prefix: /classes, /my-classes and /programs/{code}/classes
api_router.include_router(classes.router, tags=["Classes"])
api_router.include_router(reports.router, prefix="/reports", tags=["Reports"])
api_router.include_router(ratings.router, prefix="/ratings", tags=["Ratings"])
api_router.include_router(students.router, prefix="/students", tags=["Students"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["Analytics"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(search.router, prefix="/search", tags=["Search"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
