"""Custom exception classes for the application"""

from typing import Optional, Dict, Any


class BaseAPIException(Exception):
    """Base exception for all API errors"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# Authentication Errors
class AuthenticationError(BaseAPIException):
    """Credentials or token rejected"""
    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, status_code=401)


class InvalidCredentialsError(AuthenticationError):
    """Invalid email or password"""
    def __init__(self):
        super().__init__("Invalid credentials")


class OAuthAccountError(AuthenticationError):
    """Password login attempted on an OAuth-only account"""
    def __init__(self):
        super().__init__(
            "This account uses OAuth. Please sign in with your OAuth provider."
        )


class InactiveAccountError(AuthenticationError):
    """Account has been deactivated"""
    def __init__(self):
        super().__init__("Account is not active")


class InvalidRefreshTokenError(AuthenticationError):
    """Refresh token unknown, revoked, expired or owned by an inactive user"""
    def __init__(self):
        super().__init__("Invalid refresh token")


# Authorization Errors
class AuthorizationError(BaseAPIException):
    """Insufficient permissions"""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message, status_code=403)


# Resource Errors
class ResourceNotFoundError(BaseAPIException):
    """Resource not found"""
    def __init__(self, resource: str):
        super().__init__(f"{resource} not found", status_code=404)


class ConflictError(BaseAPIException):
    """Unique key already taken"""
    def __init__(self, message: str = "Resource already exists"):
        super().__init__(message, status_code=409)


class DuplicateEmailError(ConflictError):
    """Email already registered"""
    def __init__(self):
        super().__init__("User with this email already exists")


# Validation Errors
class ValidationError(BaseAPIException):
    """Validation error"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=422, details=details)


class RateLimitExceededError(BaseAPIException):
    """Rate limit exceeded"""
    def __init__(self, message: str = "Rate limit exceeded. Please try again later.", retry_after: int = 0):
        details = {"retry_after": retry_after} if retry_after else None
        super().__init__(message, status_code=429, details=details)


# Configuration Errors
class InvalidConfigurationError(ValueError):
    """Configuration value cannot be interpreted (raised at startup, not per request)"""
