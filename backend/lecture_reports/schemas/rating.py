from pydantic import BaseModel
from typing import Optional


class RatingCreate(BaseModel):
    lecturer_id: int
    course_id: int
    rating: int
    rating_type: str
    comment: Optional[str] = None
