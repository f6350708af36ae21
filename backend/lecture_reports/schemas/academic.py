from pydantic import BaseModel, Field
from typing import Optional
from datetime import time


class FacultyResponse(BaseModel):
    id: int
    name: str
    code: str

    class Config:
        from_attributes = True


class CourseCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=20)
    faculty_id: int
    total_registered: int = Field(..., ge=0)
    description: Optional[str] = None


class ClassCreate(BaseModel):
    class_name: str = Field(..., max_length=100)
    course_id: int
    lecturer_id: Optional[int] = None
    venue: Optional[str] = Field(None, max_length=255)
    scheduled_time: Optional[time] = None
    day_of_week: Optional[str] = Field(None, max_length=20)


class EnrollmentCreate(BaseModel):
    student_id: int
