"""
Response envelope helpers.

Every JSON body the API returns has the shape
``{"success", "message", "data", "timestamp"}``.
"""
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder


def utc_timestamp() -> str:
    return datetime.utcnow().isoformat() + "Z"


def success_response(data: Any = None, message: str = "Success") -> Dict[str, Any]:
    return {
        "success": True,
        "message": message,
        "data": jsonable_encoder(data),
        "timestamp": utc_timestamp(),
    }


def error_body(message: str, code: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "success": False,
        "message": message,
        "detail": message,
        "error": {"code": code, "message": message, "details": details or {}},
        "timestamp": utc_timestamp(),
    }
