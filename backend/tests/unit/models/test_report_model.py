"""
Tests for report table constraints
"""
from lecture_reports.core.config import settings
from lecture_reports.models import Report


def test_week_constraint_follows_max_week():
    constraints = {c.name: str(c.sqltext) for c in Report.__table__.constraints if c.name}

    assert constraints["ck_reports_week"] == f"week_of_reporting BETWEEN 1 AND {settings.MAX_WEEK}"
