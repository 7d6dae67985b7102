"""
Response utility functions for standardized API responses.
"""
from typing import Tuple, Dict, Any
from attendance_tracker.schemas.models import OperationResult

# Controller error codes that are not failures of the remote side
_LOCAL_STATUS = {
    "VALIDATION_ERROR": 400,
    "STALE_RESPONSE": 409,
    "INTERNAL_ERROR": 500,
}

def success_response(message: str = "Success", data: Dict[str, Any] = None, status_code: int = 200) -> Tuple[Dict[str, Any], int]:
    """
    Standard Success Response.
    """
    response = {
        "success": True,
        "message": message,
        "data": data or {}
    }
    return response, status_code

def error_response(message: str, status_code: int = 500, code: str = "ERROR", error_details: Any = None) -> Tuple[Dict[str, Any], int]:
    """
    Standard Error Response.
    """
    response = {
        "success": False,
        "error": {
            "code": code,
            "message": message
        }
    }
    if error_details:
        response["error"]["details"] = error_details

    return response, status_code

def result_response(result: OperationResult, data: Dict[str, Any] = None) -> Tuple[Dict[str, Any], int]:
    """
    Convert a controller OperationResult into an envelope.
    Failures from the webhook map to 502.
    """
    if result.ok:
        return success_response(result.message or "Success", data)

    status_code = _LOCAL_STATUS.get(result.error_code, 502)
    return error_response(result.message, status_code, code=result.error_code or "ERROR", error_details=data)
