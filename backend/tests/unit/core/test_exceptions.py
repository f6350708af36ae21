"""
Tests for the exception hierarchy and the error envelope
"""
from lecture_reports.core.exceptions import (
    ConflictError,
    InvalidCredentialsError,
    ReportLockedError,
    ReportNotFoundError,
    ValidationError,
    error_response,
)


def test_not_found_carries_resource_details():
    exc = ReportNotFoundError(42)
    assert exc.status_code == 404
    assert exc.message == "Report not found"
    assert exc.code == "REPORT_NOT_FOUND"
    assert exc.details == {"resource_type": "Report", "resource_id": 42}


def test_validation_error_field():
    exc = ValidationError("Rating must be between 1 and 5", field="rating")
    assert exc.status_code == 400
    assert exc.details == {"field": "rating"}


def test_status_codes():
    assert InvalidCredentialsError().status_code == 400
    assert InvalidCredentialsError().message == "Invalid credentials"
    assert ConflictError("Course code already exists").status_code == 400
    assert ReportLockedError(1).status_code == 409


def test_error_envelope():
    body = error_response(ValidationError("Feedback is required", field="feedback"))
    assert body["success"] is False
    assert body["message"] == "Feedback is required"
    assert body["detail"] == "Feedback is required"
    assert body["error"] == {
        "code": "VALIDATION_ERROR",
        "message": "Feedback is required",
        "details": {"field": "feedback"},
    }
    assert body["timestamp"].endswith("Z")
