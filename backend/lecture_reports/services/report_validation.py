"""
Report Validation
Business rules for lecture report submissions.

Each check raises ValidationError (HTTP 400) with the message shown to the
lecturer; shape errors (missing fields, wrong types) are left to pydantic.
"""

import re
from datetime import date
from typing import Optional, Union

from lecture_reports.core.config import settings
from lecture_reports.core.exceptions import ValidationError

# ProgramCodeYear-Group, e.g. BSCSEM1-A, BSCITY2-B
CLASS_NAME_PATTERN = re.compile(r"^[A-Z]{3,}[A-Z0-9]*-\w+$", re.ASCII)
CLASS_NAME_MESSAGE = "Class name must be in format: ProgramCodeYear-Group (e.g., BSCSEM1-A, BSCITY2-B)"
WEEK_MESSAGE = f"Week must be a number between 1 and {settings.MAX_WEEK}"

_DIGITS = re.compile(r"\d+", re.ASCII)
_MAX_WEEK_DIGITS = len(str(settings.MAX_WEEK))


def validate_class_name(class_name: str) -> str:
    """Check the class code format and return it upper-cased for storage"""
    if not class_name or not CLASS_NAME_PATTERN.match(class_name):
        raise ValidationError(CLASS_NAME_MESSAGE, field="class_name")
    return class_name.upper()


def parse_week(week: Union[int, str, None]) -> int:
    """
    Normalise week_of_reporting to an int in 1..MAX_WEEK.

    Strings use their first run of digits, so "Week 6" and "6" both give 6.
    """
    if week is None or isinstance(week, bool):
        raise ValidationError(WEEK_MESSAGE, field="week_of_reporting")

    if isinstance(week, str):
        match = _DIGITS.search(week)
        digits = match.group().lstrip("0") if match else ""
        if not match or len(digits) > _MAX_WEEK_DIGITS:
            raise ValidationError(WEEK_MESSAGE, field="week_of_reporting")
        number = int(digits or "0")
    else:
        number = int(week)

    if number < 1 or number > settings.MAX_WEEK:
        raise ValidationError(WEEK_MESSAGE, field="week_of_reporting")
    return number


def validate_lecture_date(lecture_date: date, today: Optional[date] = None) -> date:
    today = today or date.today()
    if lecture_date > today:
        raise ValidationError("Lecture date cannot be in the future", field="lecture_date")
    return lecture_date


def validate_attendance(actual_present: int, total_registered: int) -> None:
    if actual_present < 0:
        raise ValidationError("Actual present cannot be negative", field="actual_present")
    if total_registered < 0:
        raise ValidationError("Total registered cannot be negative", field="total_registered")
    if actual_present > total_registered:
        raise ValidationError(
            "Actual present cannot exceed total registered",
            field="actual_present"
        )
