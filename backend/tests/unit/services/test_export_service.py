"""
Tests for the Excel export
"""
import io
from datetime import date, datetime

from openpyxl import load_workbook

from lecture_reports.services.export_service import (
    REPORT_COLUMNS,
    build_reports_workbook,
    export_filename,
)


def _report(**overrides):
    report = {
        "id": 1,
        "course_code": "DIWA2110",
        "course_name": "Web Application Development",
        "lecturer_name": "Thabo Borotho",
        "week_of_reporting": 6,
        "lecture_date": date(2024, 3, 15),
        "actual_present": 38,
        "total_registered": 45,
        "attendance_rate": 84.44,
        "venue": "Lab 101",
        "topic": "React Components",
        "learning_outcomes": "Reusable components",
        "recommendations": None,
        "feedback": None,
        "created_at": datetime(2024, 3, 15, 14, 30),
    }
    report.update(overrides)
    return report


def test_header_row():
    wb = load_workbook(io.BytesIO(build_reports_workbook([])))
    ws = wb.active
    assert ws.title == "Lecture Reports"
    assert [cell.value for cell in ws[1]] == [header for header, _, _ in REPORT_COLUMNS]
    assert ws["A1"].font.bold
    assert ws.freeze_panes == "A2"
    assert ws.max_row == 1


def test_report_rows():
    content = build_reports_workbook([_report(), _report(id=2, feedback="Good work")])
    ws = load_workbook(io.BytesIO(content)).active

    assert ws.max_row == 3
    row = {header: cell.value for (header, _, _), cell in zip(REPORT_COLUMNS, ws[2])}
    assert row["Report ID"] == 1
    assert row["Lecture Date"] == "2024-03-15"
    assert row["Attendance Rate"] == "84.44%"
    assert row["Created At"] == "2024-03-15 14:30"
    assert row["Recommendations"] is None or row["Recommendations"] == ""
    assert ws.cell(row=3, column=14).value == "Good work"


def test_formula_text_is_written_as_text():
    content = build_reports_workbook([_report(
        topic='=HYPERLINK("http://evil.example","click")',
        venue="@SUM(A1)",
        learning_outcomes="-2+3",
        recommendations="+cmd",
    )])
    ws = load_workbook(io.BytesIO(content)).active

    for column in (10, 11, 12, 13):
        cell = ws.cell(row=2, column=column)
        assert cell.data_type == "s"
        assert cell.value.startswith("'")
    assert ws.cell(row=2, column=11).value == '\'=HYPERLINK("http://evil.example","click")'


def test_control_characters_are_dropped():
    content = build_reports_workbook([_report(topic="Intro\x00 to\x07 SQL")])
    ws = load_workbook(io.BytesIO(content)).active

    assert ws.cell(row=2, column=11).value == "Intro to SQL"


def test_export_filename():
    assert export_filename(date(2024, 3, 15)) == "lecture_reports_2024-03-15.xlsx"
