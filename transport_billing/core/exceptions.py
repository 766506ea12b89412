from typing import Optional, Any


class TransportBillingError(Exception):
    """
    Base exception for the transport billing app.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ResourceNotFoundError(TransportBillingError):
    """
    Raised when a requested entry or user is not found.
    """
    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)


class AuthenticationError(TransportBillingError):
    """
    Raised when authentication fails.
    """
    def __init__(self, message: str = "Authentication failed", details: Optional[Any] = None):
        super().__init__(message, code="AUTHENTICATION_FAILED", status_code=401, details=details)


class ValidationError(TransportBillingError):
    """
    Raised when input validation fails. ``details`` carries the
    backend's field errors untouched.
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=422, details=details)


class ExternalServiceError(TransportBillingError):
    """
    Raised when the backend API reports a failure.
    """
    def __init__(self, message: str = "External service error", details: Optional[Any] = None):
        super().__init__(message, code="EXTERNAL_SERVICE_ERROR", status_code=502, details=details)


class StorageError(TransportBillingError):
    """
    Raised when the local key-value store cannot be read or written.
    """
    def __init__(self, message: str = "Local storage error", details: Optional[Any] = None):
        super().__init__(message, code="STORAGE_ERROR", status_code=500, details=details)


class NavigationRequired(Exception):
    """
    Raised by a route guard inside a request handler; the registered
    handler turns it into a redirect. ``clear_cookie`` holds
    ``delete_cookie`` arguments for a cookie the redirect must drop.
    """
    def __init__(self, target: str, status_code: int = 307, clear_cookie: Optional[dict] = None):
        self.target = target
        self.status_code = status_code
        self.clear_cookie = clear_cookie
        super().__init__(target)
