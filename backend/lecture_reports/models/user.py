from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text, ForeignKey
from datetime import datetime
import enum

from lecture_reports.core.database import Base


class UserRole(str, enum.Enum):
    """User roles"""
    STUDENT = "Student"
    LECTURER = "Lecturer"
    PRL = "PRL"  # Principal Lecturer
    PL = "PL"  # Program Leader
    ADMIN = "Admin"

    @classmethod
    def values(cls):
        return [role.value for role in cls]


ROLE_DESCRIPTIONS = {
    UserRole.STUDENT: "Student user",
    UserRole.LECTURER: "Lecturer user",
    UserRole.PRL: "Principal Lecturer",
    UserRole.PL: "Program Leader",
    UserRole.ADMIN: "System Administrator",
}

# Roles allowed to review reports and manage courses/classes
REVIEWER_ROLES = (UserRole.ADMIN, UserRole.PRL, UserRole.PL)


class Role(Base):
    """Role lookup table, referenced by users.role"""
    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Role {self.name}>"


class User(Base):
    """User model"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    role = Column(String(50), ForeignKey("roles.name", onupdate="CASCADE"), nullable=False, index=True)
    first_name = Column(String(100), nullable=False, default="")
    last_name = Column(String(100), nullable=False, default="")
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def has_role(self, *roles) -> bool:
        return self.role in {UserRole(r).value for r in roles}

    def __repr__(self):
        return f"<User {self.email}>"
