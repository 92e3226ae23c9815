"""
Runtime Layer — Admission and Service Lifecycle
===============================================

Provides:
  - AdmissionQueue: FIFO admission with parallel bypass and cancellation
  - HookTable: two-level lifecycle hooks
  - ServiceWrapper: global client, queue and hook defaults
  - ClientHandler: one queued call of the client

Depends on: core, telemetry
"""

from service_wrapper.runtime.handler import ClientHandler
from service_wrapper.runtime.hooks import HookTable, always_succeed, http_status_ok
from service_wrapper.runtime.queue import (
    AdmissionQueue,
    QueueEntry,
    get_admission_queue,
    reset_admission_queue,
)
from service_wrapper.runtime.wrapper import (
    ServiceWrapper,
    get_service_wrapper,
    init,
    reset_service_wrapper,
)

__all__ = [
    "AdmissionQueue",
    "ClientHandler",
    "HookTable",
    "QueueEntry",
    "ServiceWrapper",
    "always_succeed",
    "get_admission_queue",
    "get_service_wrapper",
    "http_status_ok",
    "init",
    "reset_admission_queue",
    "reset_service_wrapper",
]
