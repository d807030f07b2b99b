from typing import Optional, Any

class SmsInspectorError(Exception):
    """
    Base exception for SMS Inspector.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

class ResourceNotFoundError(SmsInspectorError):
    """
    Raised when a requested resource is not found.
    """
    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)

class AuthenticationError(SmsInspectorError):
    """
    Raised when authentication fails or the session is missing.
    """
    def __init__(self, message: str = "Authentication failed", details: Optional[Any] = None):
        super().__init__(message, code="AUTHENTICATION_FAILED", status_code=401, details=details)

class PermissionDeniedError(SmsInspectorError):
    """
    Raised when an authenticated user may not perform an action.
    """
    def __init__(self, message: str = "Permission denied", details: Optional[Any] = None):
        super().__init__(message, code="PERMISSION_DENIED", status_code=403, details=details)

class ValidationError(SmsInspectorError):
    """
    Raised when input validation fails.
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=422, details=details)

class ConflictError(SmsInspectorError):
    """
    Raised when a write would duplicate an existing record.
    """
    def __init__(self, message: str = "Resource already exists", details: Optional[Any] = None):
        super().__init__(message, code="CONFLICT", status_code=409, details=details)

class FeatureDisabledError(SmsInspectorError):
    """
    Raised when an admin feature flag turns an action off.
    """
    def __init__(self, message: str = "This feature is disabled", details: Optional[Any] = None):
        super().__init__(message, code="FEATURE_DISABLED", status_code=403, details=details)

class ExternalServiceError(SmsInspectorError):
    """
    Raised when an external service (Premiumy, the LLM) fails.
    """
    def __init__(self, message: str = "External service error", details: Optional[Any] = None):
        super().__init__(message, code="EXTERNAL_SERVICE_ERROR", status_code=502, details=details)

class ProxyTestError(SmsInspectorError):
    """
    Raised when a proxy does not pass the connectivity test.
    """
    def __init__(self, message: str = "Proxy test failed", details: Optional[Any] = None):
        super().__init__(message, code="PROXY_TEST_FAILED", status_code=400, details=details)

class ConfigurationError(SmsInspectorError):
    """
    Raised when a required admin setting (e.g., the API key) is missing.
    """
    def __init__(self, message: str = "Service is not configured", details: Optional[Any] = None):
        super().__init__(message, code="NOT_CONFIGURED", status_code=503, details=details)
