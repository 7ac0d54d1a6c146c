"""Error taxonomy for backends and workflows."""
from enum import Enum
from typing import Optional


class TailoringError(Exception):
    """Base class for all tailoring errors."""


class BackendErrorReason(str, Enum):
    MISSING_API_KEY = "missing-api-key"
    HTTP_ERROR = "http-error"
    MALFORMED_RESPONSE = "malformed-response"
    SCHEMA_VIOLATION = "schema-violation"
    POLLING_TIMEOUT = "polling-timeout"


class BackendError(TailoringError):
    reason = BackendErrorReason.HTTP_ERROR

    def __init__(self, message: str, *, reason: Optional[BackendErrorReason] = None, backend: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if reason is not None:
            self.reason = reason
        self.backend = backend

    def __str__(self) -> str:
        prefix = f"{self.backend}: " if self.backend else ""
        return f"{prefix}[{self.reason.value}] {self.message}"


class ConfigurationError(BackendError):
    """Credentials or endpoint missing; the backend is unusable."""
    reason = BackendErrorReason.MISSING_API_KEY


class TransportError(BackendError):
    reason = BackendErrorReason.HTTP_ERROR


class SchemaError(BackendError):
    """Response could not be parsed or failed validation."""
    reason = BackendErrorReason.SCHEMA_VIOLATION


class PollingTimeoutError(BackendError):
    reason = BackendErrorReason.POLLING_TIMEOUT


class WorkflowTimeoutError(TailoringError):
    def __init__(self, message: str = "Workflow timeout"):
        super().__init__(message)


class WorkflowCancelledError(TailoringError):
    def __init__(self, message: str = "Workflow cancelled by user"):
        super().__init__(message)
