"""
service-wrapper — ordered admission for asynchronous client calls.

Usage:
    import httpx
    from service_wrapper import ClientHandler, Hook, init

    client = httpx.AsyncClient()
    init(client=client.get, queue=True).set_hook(
        Hook.BEFORE_RESOLVE, lambda response, _: response.json()
    )

    users = await ClientHandler("https://reqres.in/api/users").fire()
    report = await ClientHandler("https://reqres.in/api/unknown").fire(parallel=True)
"""

from service_wrapper.core import (
    AdmissionCancelled,
    ConfigurationError,
    EntryStatus,
    FireOptions,
    HandlerState,
    HandlerStateError,
    Hook,
    InvalidClientError,
    InvalidHookError,
    ServiceCancelled,
    ServiceRejected,
    ServiceWrapperException,
    WrapperOptions,
)
from service_wrapper.runtime import (
    AdmissionQueue,
    ClientHandler,
    HookTable,
    ServiceWrapper,
    always_succeed,
    get_admission_queue,
    get_service_wrapper,
    http_status_ok,
    init,
)
from service_wrapper.telemetry import get_logger, setup_logging

HOOKS = Hook

__version__ = "1.0.0"

__all__ = [
    "HOOKS",
    "AdmissionCancelled",
    "AdmissionQueue",
    "ClientHandler",
    "ConfigurationError",
    "EntryStatus",
    "FireOptions",
    "HandlerState",
    "HandlerStateError",
    "Hook",
    "HookTable",
    "InvalidClientError",
    "InvalidHookError",
    "ServiceCancelled",
    "ServiceRejected",
    "ServiceWrapper",
    "ServiceWrapperException",
    "WrapperOptions",
    "always_succeed",
    "get_admission_queue",
    "get_logger",
    "get_service_wrapper",
    "http_status_ok",
    "init",
    "setup_logging",
]
