"""
Custom Exception Classes for the SocialBu Client

This module defines the exception hierarchy raised by the client. Every error
carries a closed ``kind`` tag so callers can match on it, plus the HTTP context
(status code, response body and originating request) when the failure came
from an HTTP exchange.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorKind(str, Enum):
    """Closed set of error categories exposed on every SocialBuError."""
    GENERIC = "generic"
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    RATE_LIMIT = "rate_limit"
    SERVER = "server"
    MEDIA_UPLOAD = "media_upload"
    CONFIGURATION = "configuration"


class UploadStep(str, Enum):
    """The three sequential steps of the media upload pipeline."""
    SIGNED_URL = "signed_url"
    S3_UPLOAD = "s3_upload"
    CONFIRMATION = "confirmation"


class SocialBuError(Exception):
    """Base exception for all SocialBu client errors."""

    kind = ErrorKind.GENERIC

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        response: Optional[Dict[str, Any]] = None,
        request: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response = response
        self.request = request

    def context(self) -> Dict[str, Any]:
        """
        Return debugging context for logging.

        Only the non-empty items among status_code, response and request
        are included.
        """
        candidates = {
            "status_code": self.status_code,
            "response": self.response,
            "request": self.request,
        }
        return {key: value for key, value in candidates.items() if value}


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(SocialBuError):
    """Raised when configuration validation fails or required settings are missing."""

    kind = ErrorKind.CONFIGURATION


# =============================================================================
# HTTP Errors
# =============================================================================

class AuthenticationError(SocialBuError):
    """Raised when the API rejects the bearer token (HTTP 401)."""

    kind = ErrorKind.AUTHENTICATION

    def __init__(self, message: str = "Unauthenticated.", response=None, request=None):
        super().__init__(message, 401, response, request)


class NotFoundError(SocialBuError):
    """Raised when the requested resource does not exist (HTTP 404)."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str = "Resource not found.", response=None, request=None):
        super().__init__(message, 404, response, request)


class ValidationError(SocialBuError):
    """
    Raised for local required-field or capability failures, and for HTTP 422.

    Attributes:
        errors: Mapping of field name to a list of messages for that field.
    """

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str = "Validation failed.",
        errors: Optional[Dict[str, List[str]]] = None,
        response=None,
        request=None,
    ):
        super().__init__(message, 422, response, request)
        self.errors = errors or {}

    def context(self) -> Dict[str, Any]:
        context = super().context()
        context["errors"] = self.errors
        return context


class RateLimitError(SocialBuError):
    """Raised when the API rate limit is hit (HTTP 429)."""

    kind = ErrorKind.RATE_LIMIT

    def __init__(
        self,
        message: str = "Rate limit exceeded.",
        retry_after: Optional[int] = None,
        response=None,
        request=None,
    ):
        super().__init__(message, 429, response, request)
        self.retry_after = retry_after

    def context(self) -> Dict[str, Any]:
        context = super().context()
        context["retry_after"] = self.retry_after
        return context


class ServerError(SocialBuError):
    """Raised when the API fails with a 5xx status."""

    kind = ErrorKind.SERVER


# =============================================================================
# Media Upload Errors
# =============================================================================

_STEP_MESSAGES = {
    UploadStep.SIGNED_URL: "Failed to get signed URL for media upload.",
    UploadStep.S3_UPLOAD: "Failed to upload media to storage.",
    UploadStep.CONFIRMATION: "Failed to confirm media upload.",
}


class MediaUploadError(SocialBuError):
    """Raised when one of the media upload pipeline steps fails."""

    kind = ErrorKind.MEDIA_UPLOAD

    def __init__(
        self,
        message: str,
        step: UploadStep,
        status_code: int = 0,
        response=None,
        request=None,
    ):
        super().__init__(message, status_code, response, request)
        self.step = UploadStep(step)

    @classmethod
    def at_step(cls, step: UploadStep, cause: Exception) -> "MediaUploadError":
        """
        Wrap an underlying failure as a step-tagged upload error.

        HTTP context is copied from the cause when it is itself a SocialBuError.
        The caller is expected to chain the cause with ``raise ... from``.
        """
        step = UploadStep(step)
        if isinstance(cause, SocialBuError):
            return cls(
                _STEP_MESSAGES[step],
                step,
                cause.status_code,
                cause.response,
                cause.request,
            )
        return cls(_STEP_MESSAGES[step], step)

    def context(self) -> Dict[str, Any]:
        context = super().context()
        context["step"] = self.step.value
        return context
