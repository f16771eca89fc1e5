"""Typed exception hierarchy for Resume Builder stores and services.

Stores and services raise these exceptions instead of printing to console.
Callers (CLI, API) catch and present them appropriately.
"""


class ResumeBuilderError(Exception):
    """Base exception for all Resume Builder errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class ValidationError(ResumeBuilderError):
    """Raised when input validation fails (missing or too-short input)."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, {"field": field})
        self.field = field


class AuthenticationError(ResumeBuilderError):
    """Raised when the session is missing, expired or rejected."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class SubscriptionRequiredError(ResumeBuilderError):
    """Raised when a feature needs a Pro subscription."""

    def __init__(self, feature: str):
        super().__init__(
            f"Feature requires a Pro subscription: {feature}", {"feature": feature}
        )
        self.feature = feature


class UsageLimitError(ResumeBuilderError):
    """Raised when a free-tier monthly limit has been reached."""

    def __init__(self, feature: str, limit: int):
        super().__init__(
            f"Monthly limit reached for {feature} ({limit})",
            {"feature": feature, "limit": limit},
        )
        self.feature = feature
        self.limit = limit


class GenerationFailedError(ResumeBuilderError):
    """Raised when AI generation (resume, cover letter, etc.) fails."""

    def __init__(self, operation: str, reason: str | None = None):
        msg = f"{operation} failed"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, {"operation": operation, "reason": reason})
        self.operation = operation
        self.reason = reason


class GenerationInProgressError(ResumeBuilderError):
    """Raised when a generation is requested while another is running."""

    def __init__(self):
        super().__init__("A generation is already in progress")


class BackendError(ResumeBuilderError):
    """Raised when a backend-as-a-service call (RPC, table, auth) fails."""

    def __init__(self, operation: str, reason: str | None = None):
        msg = f"Backend call failed: {operation}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg, {"operation": operation, "reason": reason})
        self.operation = operation


class ProfileNotFoundError(ResumeBuilderError):
    """Raised when no subscription profile exists for a user."""

    def __init__(self, user_id: str):
        super().__init__(f"Profile not found for user: {user_id}", {"user_id": user_id})
        self.user_id = user_id


class ResumeNotFoundError(ResumeBuilderError):
    """Raised when a saved résumé or version does not exist for the caller."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource} not found: {resource_id}", {resource: resource_id})
        self.resource_id = resource_id


class WebhookError(ResumeBuilderError):
    """Raised when a payment webhook cannot be verified or parsed."""


class ConfigurationError(ResumeBuilderError):
    """Raised when a required setting (API key, secret) is missing."""


class ExportFailedError(ResumeBuilderError):
    """Raised when a document cannot be written to disk."""

    def __init__(self, fmt: str, reason: str | None = None):
        msg = f"Export to {fmt} failed"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, {"format": fmt, "reason": reason})
        self.format = fmt
