from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, JSON
from sqlalchemy.dialects.postgresql import JSONB
from datetime import datetime

from lecture_reports.core.database import Base


class AuditLog(Base):
    """Audit log for tracking privileged actions"""
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # Action details
    action = Column(String(100), nullable=False)  # e.g. 'role_changed', 'report_deleted', 'feedback_added'
    table_name = Column(String(50), nullable=False)  # e.g. 'users', 'reports', 'courses'
    record_id = Column(Integer, nullable=True)

    # Change details
    details = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)

    # Request metadata
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog {self.action} by {self.user_id}>"
