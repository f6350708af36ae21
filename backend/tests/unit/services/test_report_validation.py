"""
Tests for report business rules
"""
from datetime import date, timedelta

import pytest

from lecture_reports.core.exceptions import ValidationError
from lecture_reports.services.report_validation import (
    CLASS_NAME_MESSAGE,
    WEEK_MESSAGE,
    parse_week,
    validate_attendance,
    validate_class_name,
    validate_lecture_date,
)


class TestClassName:

    @pytest.mark.parametrize("name", ["BSCSEM1-A", "BSCITY2-B", "DIWA2110-A", "BSCSEM1-Group1"])
    def test_valid(self, name):
        assert validate_class_name(name) == name.upper()

    @pytest.mark.parametrize("name", ["", "BSC SEM1", "bscsem1-a", "AB1-A", "BSCSEM1", "BSCSEM1-", "BSCSEM1-\u00e9"])
    def test_invalid(self, name):
        with pytest.raises(ValidationError) as exc_info:
            validate_class_name(name)
        assert exc_info.value.message == CLASS_NAME_MESSAGE
        assert exc_info.value.details == {"field": "class_name"}


class TestWeek:

    @pytest.mark.parametrize("week,expected", [
        (1, 1),
        (52, 52),
        ("6", 6),
        ("Week 6", 6),
        ("week 12 (catch-up)", 12),
        ("0" * 5000 + "6", 6),
    ])
    def test_valid(self, week, expected):
        assert parse_week(week) == expected

    @pytest.mark.parametrize("week", [0, 53, -1, "Week", "", None, True, "Week " + "9" * 5000, "100"])
    def test_invalid(self, week):
        with pytest.raises(ValidationError) as exc_info:
            parse_week(week)
        assert exc_info.value.message == WEEK_MESSAGE


class TestLectureDate:

    def test_today_allowed(self):
        today = date(2024, 3, 15)
        assert validate_lecture_date(today, today=today) == today

    def test_past_allowed(self):
        assert validate_lecture_date(date.today() - timedelta(days=30))

    def test_future_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_lecture_date(date(2024, 3, 16), today=date(2024, 3, 15))
        assert exc_info.value.message == "Lecture date cannot be in the future"


class TestAttendance:

    def test_full_house(self):
        validate_attendance(45, 45)

    def test_zero_registered_zero_present(self):
        validate_attendance(0, 0)

    @pytest.mark.parametrize("present,registered,message", [
        (-1, 10, "Actual present cannot be negative"),
        (5, -1, "Total registered cannot be negative"),
        (46, 45, "Actual present cannot exceed total registered"),
    ])
    def test_invalid(self, present, registered, message):
        with pytest.raises(ValidationError) as exc_info:
            validate_attendance(present, registered)
        assert exc_info.value.message == message
