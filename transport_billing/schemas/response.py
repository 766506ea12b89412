from pydantic import BaseModel
from typing import Any, List, Optional


class ErrorResponse(BaseModel):
    """
    Standard error response structure.
    """
    error: str
    code: str
    details: Optional[Any] = None


class FieldError(BaseModel):
    """
    One backend validation error, passed through for form-level display.
    """
    msg: str = ""
    param: Optional[str] = None


class ApiResponse(BaseModel):
    """
    Normalized backend response. Every gateway call returns one of these,
    failures included.
    """
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    errors: Optional[List[FieldError]] = None
    message: Optional[str] = None

    @classmethod
    def failure(cls, error: str, errors: Optional[List[Any]] = None) -> "ApiResponse":
        return cls(success=False, error=error, errors=errors)
