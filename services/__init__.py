"""Resume Builder services - framework-agnostic business logic layer.

Services wrap skills and the backend client and return structured data
(Pydantic models). No Rich imports, no console output. Callers handle
presentation.
"""

from .base_service import BaseService
from .exceptions import (
    ResumeBuilderError,
    ValidationError,
    AuthenticationError,
    SubscriptionRequiredError,
    UsageLimitError,
    GenerationFailedError,
    GenerationInProgressError,
    BackendError,
    ProfileNotFoundError,
    ResumeNotFoundError,
    WebhookError,
    ConfigurationError,
    ExportFailedError,
)
from .admin_service import AdminService
from .billing_service import BillingService
from .error_handler import ErrorHandler
from .export_service import ExportService
from .generation_service import GenerationService
from .version_service import VersionService

__all__ = [
    # Base
    "BaseService",
    # Services
    "AdminService",
    "BillingService",
    "ErrorHandler",
    "ExportService",
    "GenerationService",
    "VersionService",
    # Exceptions
    "ResumeBuilderError",
    "ValidationError",
    "AuthenticationError",
    "SubscriptionRequiredError",
    "UsageLimitError",
    "GenerationFailedError",
    "GenerationInProgressError",
    "BackendError",
    "ProfileNotFoundError",
    "ResumeNotFoundError",
    "WebhookError",
    "ConfigurationError",
    "ExportFailedError",
]
