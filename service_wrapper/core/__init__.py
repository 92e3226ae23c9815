"""
Core Layer — Types, Options and Errors
======================================

Shared by every other layer; imports nothing else from the package.
"""

from service_wrapper.core.config import FireOptions, WrapperOptions
from service_wrapper.core.exceptions import (
    AdmissionCancelled,
    ConfigurationError,
    HandlerStateError,
    InvalidClientError,
    InvalidHookError,
    ServiceCancelled,
    ServiceRejected,
    ServiceWrapperException,
)
from service_wrapper.core.singleton import LazySingleton
from service_wrapper.core.types import EntryStatus, HandlerState, Hook

__all__ = [
    "AdmissionCancelled",
    "ConfigurationError",
    "EntryStatus",
    "FireOptions",
    "HandlerState",
    "HandlerStateError",
    "Hook",
    "InvalidClientError",
    "InvalidHookError",
    "LazySingleton",
    "ServiceCancelled",
    "ServiceRejected",
    "ServiceWrapperException",
    "WrapperOptions",
]
