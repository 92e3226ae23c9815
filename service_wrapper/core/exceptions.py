"""Exception classes for service-wrapper.

Includes:
- Configuration errors raised synchronously by ``init`` and setters
- Handler lifecycle errors
- Rejection and cancellation errors surfaced from ``ClientHandler.fire``
"""

from datetime import UTC, datetime
from typing import Any


class ServiceWrapperException(Exception):
    """Base exception for all service-wrapper errors."""

    def __init__(self, detail: str, error_code: str = "INTERNAL_ERROR"):
        self.detail = detail
        self.error_code = error_code
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(detail)

    def to_dict(self):
        """Convert exception to a dictionary for logs and error payloads."""
        return {
            "error": self.error_code,
            "detail": self.detail,
            "timestamp": self.timestamp,
        }


# =============================================================================
# CONFIGURATION EXCEPTIONS
# =============================================================================


class ConfigurationError(ServiceWrapperException):
    """Raised when ``init`` receives invalid options."""

    def __init__(self, detail: str, error_code: str = "CONFIGURATION_ERROR"):
        super().__init__(detail=detail, error_code=error_code)


class InvalidClientError(ConfigurationError):
    """Raised when the client is missing or not callable."""

    def __init__(self, detail: str = "Client must be a callable"):
        super().__init__(detail=detail, error_code="INVALID_CLIENT")


class InvalidHookError(ConfigurationError):
    """Raised for an unknown hook name or a non-callable hook."""

    def __init__(self, hook_name: Any, reason: str = "unknown hook"):
        self.hook_name = hook_name
        super().__init__(
            detail=f"Invalid hook {hook_name!r}: {reason}",
            error_code="INVALID_HOOK",
        )


# =============================================================================
# OPERATION EXCEPTIONS
# =============================================================================


class HandlerStateError(ServiceWrapperException):
    """Raised when an operation is used outside its allowed state."""

    def __init__(self, handler_id: str | None, state: str, action: str):
        self.handler_id = handler_id
        self.state = state
        super().__init__(
            detail=f"Cannot {action} service {handler_id or '<unqueued>'} in state {state}",
            error_code="INVALID_STATE",
        )


class ServiceRejected(ServiceWrapperException):
    """Raised from ``fire`` when the rejection payload is not an exception.

    ``payload`` holds whatever the BEFORE_REJECT hook returned, usually the
    client result that failed validation.
    """

    def __init__(self, payload: Any, handler_id: str | None = None):
        self.payload = payload
        self.handler_id = handler_id
        super().__init__(
            detail=f"Service {handler_id or '<unqueued>'} rejected",
            error_code="SERVICE_REJECTED",
        )

    def to_dict(self):
        base = super().to_dict()
        base["payload"] = repr(self.payload)
        return base


class ServiceCancelled(ServiceWrapperException):
    """Raised from ``fire`` when the operation was cancelled before admission."""

    def __init__(self, handler_id: str | None, error_code: str = "SERVICE_CANCELLED"):
        self.handler_id = handler_id
        super().__init__(
            detail=f"Service {handler_id} cancelled before admission",
            error_code=error_code,
        )


class AdmissionCancelled(ServiceCancelled):
    """Set on an admission waiter when its queue entry is cancelled."""

    def __init__(self, entry_id: str):
        super().__init__(handler_id=entry_id, error_code="ADMISSION_CANCELLED")
