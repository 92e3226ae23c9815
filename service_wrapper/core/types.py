"""
Canonical Type Definitions
===========================

Shared enums for the admission queue and the operation handler.

This module defines:
- Hook: lifecycle hook names
- EntryStatus: admission status of a queue entry
- HandlerState: lifecycle state of a single operation
"""

from enum import StrEnum

__all__ = [
    "EntryStatus",
    "HandlerState",
    "Hook",
]

class Hook(StrEnum):
    """Lifecycle hooks a caller can intercept.

    Only UPDATE_CONFIG, BEFORE_RESOLVE and BEFORE_REJECT have their
    return value used; the others are side-effect only.
    """

    BEFORE_FIRE = "before.fire"
    BEFORE_RESOLVE = "before.resolve"
    BEFORE_REJECT = "before.reject"
    AFTER_SUCCESS = "after.success"
    AFTER_FAIL = "after.fail"
    UPDATE_CONFIG = "update.service-config"

class EntryStatus(StrEnum):
    """Admission status of a queue entry."""

    PENDING = "pending"  # Waiting for its turn
    PARALLEL = "parallel"  # Exempt from ordering, about to fire
    FIRED = "fired"  # Admission granted

class HandlerState(StrEnum):
    """Lifecycle of a ClientHandler.

    CREATED → QUEUED → ADMITTED → INVOKING → SUCCEEDED | FAILED
    QUEUED → CANCELLED
    """

    CREATED = "created"
    QUEUED = "queued"
    ADMITTED = "admitted"
    INVOKING = "invoking"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (HandlerState.SUCCEEDED, HandlerState.FAILED, HandlerState.CANCELLED)
