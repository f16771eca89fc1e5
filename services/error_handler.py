"""Central error reporting: error codes, user messages and severities.

Exceptions are mapped to a catalogued code first by type, then by looking
for known phrases in the message. Each report is logged at a level
matching its severity and kept in a bounded in-memory history.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .exceptions import (
    AuthenticationError,
    BackendError,
    ExportFailedError,
    GenerationFailedError,
    SubscriptionRequiredError,
    UsageLimitError,
    ValidationError,
    WebhookError,
)

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


ERROR_CATALOGUE: dict[str, tuple[str, Severity]] = {
    # Authentication
    "AUTH_FAILED": ("Authentication failed. Please sign in again.", Severity.MEDIUM),
    "AUTH_EXPIRED": ("Your session has expired. Please sign in again.", Severity.LOW),
    "AUTH_REQUIRED": ("Please sign in to continue.", Severity.LOW),
    # Resume generation
    "RESUME_GENERATION_FAILED": (
        "Resume generation failed. Please check your inputs and try again.",
        Severity.HIGH,
    ),
    "RESUME_API_TIMEOUT": (
        "Resume generation is taking longer than expected. Please try again.",
        Severity.MEDIUM,
    ),
    "RESUME_INVALID_INPUT": (
        "Please check your resume content and job description are properly formatted.",
        Severity.LOW,
    ),
    "RESUME_QUOTA_EXCEEDED": (
        "You've reached your monthly resume generation limit. Consider upgrading your plan.",
        Severity.MEDIUM,
    ),
    # API
    "API_RATE_LIMITED": ("Too many requests. Please wait a moment and try again.", Severity.MEDIUM),
    "API_SERVER_ERROR": ("Server error occurred. Please try again in a few minutes.", Severity.HIGH),
    "API_NETWORK_ERROR": ("Network error. Please check your connection and try again.", Severity.MEDIUM),
    # Files and export
    "EXPORT_FAILED": ("Failed to export resume. Please try again.", Severity.MEDIUM),
    "FILE_TOO_LARGE": ("File size too large. Please use a smaller file.", Severity.LOW),
    "FILE_INVALID_FORMAT": ("Invalid file format. Please use a supported format.", Severity.LOW),
    # Subscription
    "SUBSCRIPTION_REQUIRED": (
        "This feature requires a Pro subscription. Would you like to upgrade?",
        Severity.LOW,
    ),
    "PAYMENT_FAILED": ("Payment processing failed. Please check your payment details.", Severity.MEDIUM),
    # Generic
    "UNKNOWN_ERROR": ("An unexpected error occurred. Please try again.", Severity.MEDIUM),
    "VALIDATION_ERROR": ("Please check your input and try again.", Severity.LOW),
}

RETRYABLE_CODES = frozenset(
    {
        "API_NETWORK_ERROR",
        "API_RATE_LIMITED",
        "API_SERVER_ERROR",
        "RESUME_API_TIMEOUT",
        "RESUME_GENERATION_FAILED",
    }
)

TOAST_DURATION_MS = {
    Severity.CRITICAL: 8000,
    Severity.HIGH: 6000,
    Severity.MEDIUM: 4000,
    Severity.LOW: 3000,
}

# Checked in order; the first phrase found wins.
_MESSAGE_PATTERNS: list[tuple[tuple[str, ...], str]] = [
    (("auth", "unauthorized"), "AUTH_FAILED"),
    (("network", "fetch", "connection"), "API_NETWORK_ERROR"),
    (("timeout", "timed out"), "RESUME_API_TIMEOUT"),
    (("rate limit", "too many"), "API_RATE_LIMITED"),
    (("validation", "invalid"), "VALIDATION_ERROR"),
    (("quota", "limit"), "RESUME_QUOTA_EXCEEDED"),
]

_TYPE_CODES: list[tuple[type[Exception], str]] = [
    (AuthenticationError, "AUTH_FAILED"),
    (SubscriptionRequiredError, "SUBSCRIPTION_REQUIRED"),
    (UsageLimitError, "RESUME_QUOTA_EXCEEDED"),
    (ValidationError, "VALIDATION_ERROR"),
    (GenerationFailedError, "RESUME_GENERATION_FAILED"),
    (WebhookError, "PAYMENT_FAILED"),
    (ExportFailedError, "EXPORT_FAILED"),
    (BackendError, "API_SERVER_ERROR"),
    (TimeoutError, "RESUME_API_TIMEOUT"),
    (ConnectionError, "API_NETWORK_ERROR"),
]


@dataclass
class AppError:
    """A reported error with its catalogue entry resolved."""

    code: str
    message: str
    user_message: str
    severity: Severity
    context: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    original_error: BaseException | None = None

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "user_message": self.user_message,
            "severity": self.severity.value,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }


def toast_duration(severity: Severity) -> int:
    """How long (ms) a notification for this severity stays visible."""
    return TOAST_DURATION_MS[severity]


def is_retryable(code: str) -> bool:
    """Whether callers should offer a retry action for this code."""
    return code in RETRYABLE_CODES


def infer_error_code(error: BaseException) -> str:
    """Map an exception to a catalogue code."""
    for error_type, code in _TYPE_CODES:
        if isinstance(error, error_type):
            return code

    message = str(error).lower()
    for phrases, code in _MESSAGE_PATTERNS:
        if any(phrase in message for phrase in phrases):
            return code
    return "UNKNOWN_ERROR"


class ErrorHandler:
    """Creates, logs and remembers application errors."""

    def __init__(self, max_reports: int = 100):
        self.max_reports = max_reports
        self._reports: list[AppError] = []

    def create_error(
        self,
        code: str,
        original_error: BaseException | None = None,
        context: dict | None = None,
    ) -> AppError:
        """Build an AppError for a code. Unknown codes use the generic entry."""
        user_message, severity = ERROR_CATALOGUE.get(code, ERROR_CATALOGUE["UNKNOWN_ERROR"])
        return AppError(
            code=code,
            message=str(original_error) if original_error else f"Error code: {code}",
            user_message=user_message,
            severity=severity,
            context=dict(context or {}),
            original_error=original_error,
        )

    def handle_error(
        self, error: AppError | BaseException | str, context: dict | None = None
    ) -> AppError:
        """Resolve, log and record an error.

        Args:
            error: An AppError, an exception, or a catalogue code / message.
            context: Extra data stored with the report.

        Returns:
            The recorded AppError.
        """
        if isinstance(error, AppError):
            app_error = error
        elif isinstance(error, BaseException):
            app_error = self.create_error(infer_error_code(error), error, context)
        elif error in ERROR_CATALOGUE:
            app_error = self.create_error(error, None, context)
        else:
            app_error = self.create_error("UNKNOWN_ERROR", Exception(error), context)

        self._log(app_error)
        self._reports.append(app_error)
        if len(self._reports) > self.max_reports:
            self._reports = self._reports[-self.max_reports:]
        return app_error

    def get_error_stats(self) -> dict:
        """Totals by severity and code, plus the ten most recent reports."""
        return {
            "total": len(self._reports),
            "by_severity": dict(Counter(e.severity.value for e in self._reports)),
            "by_code": dict(Counter(e.code for e in self._reports)),
            "recent": [e.to_dict() for e in self._reports[-10:]],
        }

    def clear_errors(self) -> None:
        self._reports = []

    @staticmethod
    def _log(error: AppError) -> None:
        if error.severity == Severity.CRITICAL:
            logger.critical("%s: %s", error.code, error.message, exc_info=error.original_error)
        elif error.severity == Severity.HIGH:
            logger.error("%s: %s", error.code, error.message)
        elif error.severity == Severity.MEDIUM:
            logger.warning("%s: %s", error.code, error.message)
        else:
            logger.info("%s: %s", error.code, error.message)
