"""
Tests for lecture report submission, listing and the feedback workflow
"""
import io
from datetime import date, timedelta

import pytest
from httpx import AsyncClient
from openpyxl import load_workbook
from sqlalchemy import select

from lecture_reports.models import AuditLog, Notification, Report


class TestCreateReport:

    async def test_create_report(self, client: AsyncClient, lecturer_headers, report_data, prl_user, db_session):
        response = await client.post("/api/v1/reports", json=report_data(), headers=lecturer_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Report submitted successfully"
        assert body["data"]["class_name"] == "BSCSEM1-A"

        # PRLs are told about new reports
        result = await db_session.execute(select(Notification).where(Notification.user_id == prl_user.id))
        assert len(result.scalars().all()) == 1

    async def test_week_text_and_default_registered(self, client: AsyncClient, lecturer_headers, report_data, course, db_session):
        payload = report_data(week_of_reporting="Week 7", actual_present=30)
        del payload["total_registered"]

        response = await client.post("/api/v1/reports", json=payload, headers=lecturer_headers)

        assert response.status_code == 201
        report = await db_session.get(Report, response.json()["data"]["id"])
        assert report.week_of_reporting == 7
        assert report.total_registered == course.total_registered
        assert report.course_code == "DIWA2110"
        assert report.faculty_id == course.faculty_id

    async def test_links_existing_class(self, client: AsyncClient, lecturer_headers, report_data, lecture_class, db_session):
        response = await client.post("/api/v1/reports", json=report_data(), headers=lecturer_headers)

        report = await db_session.get(Report, response.json()["data"]["id"])
        assert report.class_id == lecture_class.id

    @pytest.mark.parametrize("overrides,message", [
        ({"class_name": "bad name"}, "Class name must be in format: ProgramCodeYear-Group (e.g., BSCSEM1-A, BSCITY2-B)"),
        ({"week_of_reporting": 60}, "Week must be a number between 1 and 52"),
        ({"actual_present": 50, "total_registered": 45}, "Actual present cannot exceed total registered"),
        ({"actual_present": -1}, "Actual present cannot be negative"),
        ({"lecture_date": (date.today() + timedelta(days=2)).isoformat()}, "Lecture date cannot be in the future"),
    ])
    async def test_business_rules(self, client: AsyncClient, lecturer_headers, report_data, overrides, message):
        response = await client.post("/api/v1/reports", json=report_data(**overrides), headers=lecturer_headers)

        assert response.status_code == 400
        assert response.json()["message"] == message

    async def test_oversized_week_text(self, client: AsyncClient, lecturer_headers, report_data):
        payload = report_data(week_of_reporting="Week " + "9" * 5000)

        response = await client.post("/api/v1/reports", json=payload, headers=lecturer_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Week must be a number between 1 and 52"

    async def test_class_name_longer_than_column(self, client: AsyncClient, lecturer_headers, report_data):
        payload = report_data(class_name="BSC" + "A" * 140 + "-A")

        response = await client.post("/api/v1/reports", json=payload, headers=lecturer_headers)

        assert response.status_code == 422

    async def test_unknown_course(self, client: AsyncClient, lecturer_headers, report_data):
        response = await client.post("/api/v1/reports", json=report_data(course_id=9999), headers=lecturer_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Course not found"

    async def test_missing_field(self, client: AsyncClient, lecturer_headers, report_data):
        payload = report_data()
        del payload["lecture_date"]

        response = await client.post("/api/v1/reports", json=payload, headers=lecturer_headers)

        assert response.status_code == 422

    async def test_students_cannot_submit(self, client: AsyncClient, student_headers, report_data):
        response = await client.post("/api/v1/reports", json=report_data(), headers=student_headers)

        assert response.status_code == 403
        assert response.json()["message"] == "Access denied. Lecturers only."

    async def test_requires_auth(self, client: AsyncClient, report_data):
        response = await client.post("/api/v1/reports", json=report_data())

        assert response.status_code == 401


class TestListReports:

    async def test_lecturer_sees_own_reports(self, client: AsyncClient, report, lecturer_headers, other_lecturer, auth_headers):
        own = await client.get("/api/v1/reports", headers=lecturer_headers)
        other = await client.get("/api/v1/reports", headers=auth_headers(other_lecturer))

        assert own.json()["data"]["total"] == 1
        item = own.json()["data"]["items"][0]
        assert item["id"] == report.id
        assert item["course_name"] == "Web Application Development"
        assert item["faculty_name"] == "Faculty of Information Communication Technology"
        assert item["attendance_rate"] == 80.0
        assert item["status"] == "pending"
        assert other.json()["data"]["total"] == 0

    async def test_reviewer_sees_all(self, client: AsyncClient, report, prl_headers):
        response = await client.get("/api/v1/reports", headers=prl_headers)

        assert response.status_code == 200
        assert response.json()["data"]["total"] == 1

    async def test_filters(self, client: AsyncClient, report, prl_headers):
        by_week = await client.get("/api/v1/reports", params={"week": 6}, headers=prl_headers)
        other_week = await client.get("/api/v1/reports", params={"week": 7}, headers=prl_headers)
        reviewed = await client.get("/api/v1/reports", params={"status": "reviewed"}, headers=prl_headers)
        pending = await client.get("/api/v1/reports", params={"status": "pending"}, headers=prl_headers)

        assert by_week.json()["data"]["total"] == 1
        assert other_week.json()["data"]["total"] == 0
        assert reviewed.json()["data"]["total"] == 0
        assert pending.json()["data"]["total"] == 1

    async def test_week_filter_bounded_by_max_week(self, client: AsyncClient, prl_headers):
        response = await client.get("/api/v1/reports", params={"week": 53}, headers=prl_headers)

        assert response.status_code == 422

    async def test_get_report(self, client: AsyncClient, report, lecturer, lecturer_headers):
        response = await client.get(f"/api/v1/reports/{report.id}", headers=lecturer_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["topic"] == "Python Functions and Modules"
        assert data["lecturer_name"] == f"{lecturer.first_name} {lecturer.last_name}"

    async def test_get_other_lecturers_report(self, client: AsyncClient, report, other_lecturer, auth_headers):
        response = await client.get(f"/api/v1/reports/{report.id}", headers=auth_headers(other_lecturer))

        assert response.status_code == 404

    async def test_stats(self, client: AsyncClient, report, prl_headers):
        response = await client.get("/api/v1/reports/stats", headers=prl_headers)

        assert response.json()["data"] == {
            "total_reports": 1,
            "avg_attendance": 80.0,
            "active_lecturers": 1,
            "courses_covered": 1,
        }


class TestUpdateAndDelete:

    async def test_update_pending_report(self, client: AsyncClient, report, lecturer_headers, db_session):
        response = await client.put(
            f"/api/v1/reports/{report.id}",
            json={"topic": "Decorators", "actual_present": 45},
            headers=lecturer_headers
        )

        assert response.status_code == 200
        await db_session.refresh(report)
        assert report.topic == "Decorators"
        assert report.actual_present == 45

    async def test_update_revalidates(self, client: AsyncClient, report, lecturer_headers):
        response = await client.put(
            f"/api/v1/reports/{report.id}",
            json={"actual_present": 60},
            headers=lecturer_headers
        )

        assert response.status_code == 400

    async def test_update_others_report_forbidden(self, client: AsyncClient, report, other_lecturer, auth_headers):
        response = await client.put(
            f"/api/v1/reports/{report.id}",
            json={"topic": "Hijack"},
            headers=auth_headers(other_lecturer)
        )

        assert response.status_code == 403

    async def test_reviewed_report_is_locked(self, client: AsyncClient, report, lecturer_headers, prl_headers):
        await client.post(f"/api/v1/reports/{report.id}/feedback", json={"feedback": "Well done"}, headers=prl_headers)

        update = await client.put(f"/api/v1/reports/{report.id}", json={"topic": "Late edit"}, headers=lecturer_headers)
        delete = await client.delete(f"/api/v1/reports/{report.id}", headers=lecturer_headers)

        assert update.status_code == 409
        assert delete.status_code == 409

    async def test_delete_own_report(self, client: AsyncClient, report, lecturer, lecturer_headers, db_session):
        report_id = report.id
        response = await client.delete(f"/api/v1/reports/{report_id}", headers=lecturer_headers)

        assert response.status_code == 200
        result = await db_session.execute(select(Report).where(Report.id == report_id))
        assert result.scalar_one_or_none() is None

        audit = await db_session.execute(select(AuditLog).where(AuditLog.action == "report_deleted"))
        entry = audit.scalar_one()
        assert entry.user_id == lecturer.id
        assert entry.record_id == report_id

    async def test_admin_deletes_reviewed_report(self, client: AsyncClient, report, prl_headers, admin_headers, db_session):
        report_id = report.id
        await client.post(f"/api/v1/reports/{report_id}/feedback", json={"feedback": "Reviewed"}, headers=prl_headers)

        response = await client.delete(f"/api/v1/reports/{report_id}", headers=admin_headers)

        assert response.status_code == 200
        result = await db_session.execute(select(Report).where(Report.id == report_id))
        assert result.scalar_one_or_none() is None

    async def test_prl_cannot_delete(self, client: AsyncClient, report, prl_headers):
        response = await client.delete(f"/api/v1/reports/{report.id}", headers=prl_headers)

        assert response.status_code == 403

    async def test_delete_missing_report(self, client: AsyncClient, admin_headers):
        response = await client.delete("/api/v1/reports/9999", headers=admin_headers)

        assert response.status_code == 404


class TestFeedback:

    async def test_add_feedback(self, client: AsyncClient, report, prl_user, prl_headers, lecturer_headers, db_session):
        response = await client.post(
            f"/api/v1/reports/{report.id}/feedback",
            json={"feedback": "  Good coverage of the topic  "},
            headers=prl_headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "reviewed"

        await db_session.refresh(report)
        assert report.feedback == "Good coverage of the topic"
        assert report.feedback_by == prl_user.id

        feedback = await client.get(f"/api/v1/reports/{report.id}/feedback", headers=lecturer_headers)
        entries = feedback.json()["data"]
        assert len(entries) == 1
        assert entries[0]["reviewer_role"] == "PRL"

        notifications = await db_session.execute(
            select(Notification).where(Notification.user_id == report.lecturer_id)
        )
        assert notifications.scalars().first().title == "Feedback received"

    async def test_feedback_can_be_revised(self, client: AsyncClient, report, prl_headers, db_session):
        await client.post(f"/api/v1/reports/{report.id}/feedback", json={"feedback": "First"}, headers=prl_headers)
        response = await client.post(f"/api/v1/reports/{report.id}/feedback", json={"feedback": "Second"}, headers=prl_headers)

        assert response.status_code == 200
        await db_session.refresh(report)
        assert report.feedback == "Second"

    async def test_blank_feedback_rejected(self, client: AsyncClient, report, prl_headers):
        response = await client.post(f"/api/v1/reports/{report.id}/feedback", json={"feedback": "   "}, headers=prl_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Feedback is required"

    async def test_lecturer_cannot_give_feedback(self, client: AsyncClient, report, lecturer_headers):
        response = await client.post(f"/api/v1/reports/{report.id}/feedback", json={"feedback": "Self review"}, headers=lecturer_headers)

        assert response.status_code == 403

    async def test_no_feedback_yet(self, client: AsyncClient, report, lecturer_headers):
        response = await client.get(f"/api/v1/reports/{report.id}/feedback", headers=lecturer_headers)

        assert response.json()["data"] == []

    async def test_feedback_on_missing_report(self, client: AsyncClient, prl_headers):
        response = await client.post("/api/v1/reports/9999/feedback", json={"feedback": "Anyone there?"}, headers=prl_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Report not found"

    async def test_other_lecturer_cannot_read_feedback(self, client: AsyncClient, report, prl_headers, other_lecturer, auth_headers):
        await client.post(f"/api/v1/reports/{report.id}/feedback", json={"feedback": "Private note"}, headers=prl_headers)

        response = await client.get(f"/api/v1/reports/{report.id}/feedback", headers=auth_headers(other_lecturer))

        assert response.status_code == 404


class TestExport:

    async def test_export_xlsx(self, client: AsyncClient, report, prl_headers):
        response = await client.get("/api/v1/reports/export", headers=prl_headers)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert "lecture_reports_" in response.headers["content-disposition"]
        assert response.content[:2] == b"PK"

    async def test_lecturer_exports_only_own_reports(self, client: AsyncClient, report, course, other_lecturer, auth_headers, lecturer_headers, prl_headers, db_session):
        other_report = Report(
            faculty_id=course.faculty_id,
            class_name="BSCSEM1-B",
            course_id=course.id,
            course_code=course.code,
            lecturer_id=other_lecturer.id,
            week_of_reporting=7,
            lecture_date=date.today() - timedelta(days=1),
            actual_present=20,
            total_registered=30,
        )
        db_session.add(other_report)
        await db_session.commit()

        own = await client.get("/api/v1/reports/export", headers=lecturer_headers)
        other = await client.get("/api/v1/reports/export", headers=auth_headers(other_lecturer))
        everyone = await client.get("/api/v1/reports/export", headers=prl_headers)

        def report_ids(response):
            ws = load_workbook(io.BytesIO(response.content)).active
            return sorted(row[0] for row in ws.iter_rows(min_row=2, values_only=True))

        assert report_ids(own) == [report.id]
        assert report_ids(other) == [other_report.id]
        assert report_ids(everyone) == sorted([report.id, other_report.id])

    async def test_export_escapes_formula_text(self, client: AsyncClient, report, prl_headers, db_session):
        report.topic = '=HYPERLINK("http://evil.example","click")'
        await db_session.commit()

        response = await client.get("/api/v1/reports/export", headers=prl_headers)

        cell = load_workbook(io.BytesIO(response.content)).active["K2"]
        assert cell.data_type == "s"
        assert cell.value == '\'=HYPERLINK("http://evil.example","click")'

    async def test_students_cannot_export(self, client: AsyncClient, student_headers):
        response = await client.get("/api/v1/reports/export", headers=student_headers)

        assert response.status_code == 403
