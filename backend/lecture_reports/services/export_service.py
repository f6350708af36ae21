"""
Excel export of lecture reports.
"""
import io
from datetime import date, datetime
from typing import Any, Dict, Iterable

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# (header, report field, column width)
REPORT_COLUMNS = [
    ("Report ID", "id", 10),
    ("Course Code", "course_code", 15),
    ("Course Name", "course_name", 30),
    ("Lecturer", "lecturer_name", 25),
    ("Week", "week_of_reporting", 8),
    ("Lecture Date", "lecture_date", 15),
    ("Students Present", "actual_present", 16),
    ("Total Registered", "total_registered", 16),
    ("Attendance Rate", "attendance_rate", 16),
    ("Venue", "venue", 20),
    ("Topic", "topic", 40),
    ("Learning Outcomes", "learning_outcomes", 40),
    ("Recommendations", "recommendations", 40),
    ("Feedback", "feedback", 40),
    ("Created At", "created_at", 20),
]

# Text starting with these is evaluated by spreadsheet apps as a formula
FORMULA_PREFIXES = ("=", "+", "-", "@", "\t", "\r")


def _cell_value(field: str, value: Any) -> Any:
    if value is None:
        return ""
    if field == "attendance_rate":
        return f"{value}%"
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        value = ILLEGAL_CHARACTERS_RE.sub("", value)
        if value.startswith(FORMULA_PREFIXES):
            return f"'{value}"
    return value


def build_reports_workbook(reports: Iterable[Dict[str, Any]]) -> bytes:
    """Render serialized reports into an .xlsx file and return its bytes"""
    wb = Workbook()
    ws = wb.active
    ws.title = "Lecture Reports"

    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")

    for col, (header, _, width) in enumerate(REPORT_COLUMNS, start=1):
        cell = ws.cell(row=1, column=col, value=header)
        cell.font = header_font
        cell.fill = header_fill
        ws.column_dimensions[get_column_letter(col)].width = width

    for row, report in enumerate(reports, start=2):
        for col, (_, field, _) in enumerate(REPORT_COLUMNS, start=1):
            ws.cell(row=row, column=col, value=_cell_value(field, report.get(field)))

    ws.freeze_panes = "A2"

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


def export_filename(today: date = None) -> str:
    today = today or date.today()
    return f"lecture_reports_{today.isoformat()}.xlsx"
