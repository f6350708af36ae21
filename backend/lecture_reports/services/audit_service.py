"""
Audit trail for privileged actions (role changes, deletions, feedback).
"""

from typing import Optional, Dict, Any
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from lecture_reports.models.audit_log import AuditLog
from lecture_reports.core.logging_config import logger


async def log_action(
    db: AsyncSession,
    user_id: Optional[int],
    action: str,
    table_name: str,
    record_id: Optional[int] = None,
    details: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None
) -> AuditLog:
    """Record an action in audit_logs. The caller's transaction commits it."""
    entry = AuditLog(
        user_id=user_id,
        action=action,
        table_name=table_name,
        record_id=record_id,
        details=details,
        ip_address=request.client.host if request and request.client else None,
        user_agent=request.headers.get("user-agent") if request else None
    )
    db.add(entry)
    await db.flush()

    logger.info(
        f"[Audit] {action} on {table_name}#{record_id} by user {user_id}",
        extra={
            "event_type": "audit",
            "audit_action": action,
            "audit_table": table_name,
            "audit_record_id": record_id,
        }
    )
    return entry
