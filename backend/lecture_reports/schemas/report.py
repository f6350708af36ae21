from pydantic import BaseModel, Field
from typing import Optional, Union
from datetime import date, time


class ReportCreate(BaseModel):
    """Report submission. Business rules (class code format, week range,
    attendance, date) are enforced by the report validation service so that
    they surface as 400s with their own messages."""
    class_name: str = Field(..., max_length=100)
    week_of_reporting: Union[int, str]
    lecture_date: date
    course_id: int
    actual_present: int
    total_registered: Optional[int] = None
    faculty_id: Optional[int] = None
    venue: Optional[str] = Field(None, max_length=255)
    scheduled_time: Optional[time] = None
    topic: Optional[str] = None
    learning_outcomes: Optional[str] = None
    recommendations: Optional[str] = None


class ReportUpdate(BaseModel):
    class_name: Optional[str] = Field(None, max_length=100)
    week_of_reporting: Optional[Union[int, str]] = None
    lecture_date: Optional[date] = None
    course_id: Optional[int] = None
    actual_present: Optional[int] = None
    total_registered: Optional[int] = None
    venue: Optional[str] = Field(None, max_length=255)
    scheduled_time: Optional[time] = None
    topic: Optional[str] = None
    learning_outcomes: Optional[str] = None
    recommendations: Optional[str] = None


class FeedbackCreate(BaseModel):
    feedback: str = Field(..., max_length=5000)
