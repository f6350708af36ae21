from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class RoleUpdate(BaseModel):
    role: Optional[str] = None


class StatusUpdate(BaseModel):
    is_active: bool


class UserListItem(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    role: str
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationResponse(BaseModel):
    id: int
    title: str
    message: str
    type: str
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True
