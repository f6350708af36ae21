"""
Lecture report endpoints: submission, listing, statistics, export and the
reviewer feedback workflow.
"""
import io
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reports.core.config import settings
from lecture_reports.core.database import get_db
from lecture_reports.models.report import ReportStatus
from lecture_reports.models.user import User, UserRole
from lecture_reports.modules.auth.dependencies import (
    get_current_user,
    get_current_lecturer,
    get_current_reviewer,
    require_roles,
)
from lecture_reports.schemas.report import ReportCreate, ReportUpdate, FeedbackCreate
from lecture_reports.services.audit_service import log_action
from lecture_reports.services.export_service import XLSX_MEDIA_TYPE, build_reports_workbook, export_filename
from lecture_reports.services.report_service import get_report_service
from lecture_reports.utils.responses import success_response

router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_report(
    data: ReportCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_lecturer)
):
    """Submit a weekly lecture report (Lecturers only)"""
    report = await get_report_service(db).create_report(data, current_user)
    payload = {"id": report.id, "class_name": report.class_name}
    await db.commit()
    return success_response(payload, "Report submitted successfully")


@router.get("")
async def list_reports(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.REPORT_LIST_LIMIT, ge=1, le=100),
    course_id: Optional[int] = None,
    week: Optional[int] = Query(None, ge=1, le=settings.MAX_WEEK),
    report_status: Optional[ReportStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Reports newest first. Lecturers only see their own."""
    reports = await get_report_service(db).list_reports(
        current_user,
        page=page,
        page_size=page_size,
        course_id=course_id,
        week=week,
        status=report_status,
    )
    return success_response(reports)


@router.get("/stats")
async def report_stats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    stats = await get_report_service(db).get_stats(current_user)
    return success_response(stats)


@router.get("/export")
async def export_reports(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(
        require_roles(UserRole.PRL, UserRole.PL, UserRole.ADMIN, UserRole.LECTURER)
    )
):
    """Download reports as an Excel workbook"""
    rows = await get_report_service(db).export_rows(current_user)
    content = build_reports_workbook(rows)
    return StreamingResponse(
        io.BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={export_filename()}"}
    )


@router.get("/{report_id}")
async def get_report(
    report_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    report = await get_report_service(db).get_report(report_id, current_user)
    return success_response(report)


@router.put("/{report_id}")
async def update_report(
    report_id: int,
    data: ReportUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_lecturer)
):
    """Edit a pending report. Reviewed reports are locked."""
    report = await get_report_service(db).update_report(report_id, data, current_user)
    payload = {"id": report.id, "class_name": report.class_name}
    await db.commit()
    return success_response(payload, "Report updated successfully")


@router.delete("/{report_id}")
async def delete_report(
    report_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.LECTURER, UserRole.ADMIN))
):
    report = await get_report_service(db).delete_report(report_id, current_user)
    await log_action(
        db, current_user.id, "report_deleted", "reports", report_id,
        details={"class_name": report.class_name, "lecturer_id": report.lecturer_id},
        request=request
    )
    await db.commit()
    return success_response({"id": report_id}, "Report deleted successfully")


# ============================================
# Feedback workflow
# ============================================

@router.post("/{report_id}/feedback")
async def add_feedback(
    report_id: int,
    data: FeedbackCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_reviewer)
):
    """Attach reviewer feedback; the report becomes reviewed"""
    report = await get_report_service(db).add_feedback(report_id, data.feedback, current_user)
    await log_action(
        db, current_user.id, "report_feedback", "reports", report_id,
        details={"reviewer_role": current_user.role}, request=request
    )
    payload = {"id": report.id, "status": report.status.value, "feedback_at": report.feedback_at}
    await db.commit()
    return success_response(payload, "Feedback added successfully")


@router.get("/{report_id}/feedback")
async def get_feedback(
    report_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    feedback = await get_report_service(db).get_feedback(report_id, current_user)
    return success_response(feedback)
