"""
ClubHQ API Response Utilities
Standardized response format and error handling
"""
from fastapi import Request
from fastapi.responses import JSONResponse
from typing import Any, Dict, List, Optional
from datetime import datetime

from .errors import ClubError
from .logging_config import api_logger


def _timestamp() -> str:
    return datetime.utcnow().isoformat() + "Z"


# ============================================================
# SUCCESS RESPONSES
# ============================================================

def success(data: Any = None, message: Optional[str] = None, meta: Optional[Dict] = None) -> Dict:
    """Create success response"""
    response = {
        "ok": True,
        "timestamp": _timestamp(),
    }

    if data is not None:
        response["data"] = data

    if message:
        response["message"] = message

    if meta:
        response["meta"] = meta

    return response


def deleted(message: str = "Deleted successfully") -> Dict:
    """200 Deleted response"""
    return success(message=message)


def paginated(items: List, total: int, page: int = 1, per_page: int = 20) -> Dict:
    """Paginated list response"""
    return {
        "ok": True,
        "data": items,
        "pagination": {
            "total": total,
            "page": page,
            "per_page": per_page,
            "total_pages": (total + per_page - 1) // per_page,
            "has_next": page * per_page < total,
            "has_prev": page > 1,
        },
        "timestamp": _timestamp(),
    }


# ============================================================
# ERROR RESPONSES
# ============================================================

def error_response(
    status_code: int,
    message: str,
    error_code: str,
    details: Optional[Dict] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        headers=headers,
        content={
            "ok": False,
            "error": message,
            "error_code": error_code,
            "details": details or {},
            "timestamp": _timestamp(),
        }
    )


async def club_exception_handler(request: Request, exc: ClubError) -> JSONResponse:
    """Global handler turning domain errors into the error envelope"""
    context = dict(
        status_code=exc.status_code,
        error_code=exc.error_code,
        path=request.url.path,
    )
    if exc.status_code >= 500:
        api_logger.error(f"API Error: {exc.message}", error=exc, **context)
    else:
        api_logger.warning(f"API Error: {exc.message}", **context)

    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return error_response(exc.status_code, exc.message, exc.error_code, exc.details, headers=headers)
