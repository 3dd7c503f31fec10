"""Map service results to HTTP responses"""

from fastapi import HTTPException

STATUS_CODES = {
    "not_found": 404,
    "conflict": 409,
    "validation": 400,
    "error": 500,
}


def unwrap(result: dict) -> dict:
    """
    Return a successful service result unchanged.

    Raises:
        HTTPException: With the status mapped from the result's code and the
            user-facing error message as detail
    """
    if result.get("success"):
        return result
    status_code = STATUS_CODES.get(result.get("code", "error"), 500)
    raise HTTPException(status_code=status_code, detail=result.get("error", "Request failed"))
