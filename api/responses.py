"""
Standardized API response envelope.
Every endpoint answers {"result": "SUCCESS" | "ERROR", "data": ..., "error": ...}.
"""

from typing import Any, Optional
from fastapi.encoders import jsonable_encoder

RESULT_SUCCESS = "SUCCESS"
RESULT_ERROR = "ERROR"


def success_response(data: Any = None) -> dict:
    """Create a standardized success response"""
    return {
        "result": RESULT_SUCCESS,
        "data": jsonable_encoder(data),
        "error": None,
    }


def error_response(code: str, message: str, data: Optional[Any] = None) -> dict:
    """Create a standardized error response"""
    return {
        "result": RESULT_ERROR,
        "data": None,
        "error": {
            "code": code,
            "message": message,
            "data": jsonable_encoder(data),
        },
    }
