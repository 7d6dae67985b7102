"""
Custom Exceptions for the Application.
Every failure surfaced to the page derives from AppError.
"""

class AppError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: dict = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

class ValidationError(AppError):
    """Raised when a local precondition fails (empty session, empty roster, missing filter)."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=400, details=details)

class NetworkError(AppError):
    """Raised on transport failures or non-success HTTP statuses."""
    def __init__(self, message: str, status: int = None, details: dict = None):
        super().__init__(message, code="NETWORK_ERROR", status_code=502, details=details)
        self.status = status

class RemoteError(AppError):
    """Raised when a well-formed response signals a logical failure."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, code="REMOTE_ERROR", status_code=502, details=details)

class ParseError(AppError):
    """Raised when a response body does not have the expected shape."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, code="PARSE_ERROR", status_code=502, details=details)

class SubmissionError(AppError):
    """Raised when the webhook rejects an attendance submission."""
    def __init__(self, message: str, status: int = None, details: dict = None):
        super().__init__(message, code="SUBMISSION_ERROR", status_code=502, details=details)
        self.status = status

class ExternalServiceError(AppError):
    """Raised when an external service (the generative search API) fails."""
    def __init__(self, message: str, service_name: str, details: dict = None):
        super().__init__(f"{service_name} Error: {message}", code=f"{service_name.upper()}_ERROR", status_code=502, details=details)
