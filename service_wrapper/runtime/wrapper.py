"""
ServiceWrapper — Global Configuration
=====================================

Holds what every ClientHandler falls back to:
  - the client callable
  - the admission queue (None when ordering is disabled)
  - the global hook table and validation predicate
  - the default parallel flag for fires that do not set one

Usage:
    from service_wrapper import Hook, init

    init(client=httpx.AsyncClient().get, queue=True)
    get_service_wrapper().set_hook(Hook.BEFORE_RESOLVE, lambda res, _: res.json())
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from service_wrapper.core.config import WrapperOptions
from service_wrapper.core.exceptions import ConfigurationError, InvalidClientError
from service_wrapper.core.singleton import LazySingleton
from service_wrapper.core.types import Hook
from service_wrapper.runtime.hooks import (
    DEFAULT_HOOKS,
    HookFn,
    HookTable,
    Predicate,
    always_succeed,
    call_maybe_async,
)
from service_wrapper.runtime.queue import AdmissionQueue, get_admission_queue
from service_wrapper.telemetry import get_logger

logger = get_logger(__name__)

class ServiceWrapper:
    """
    Process-wide defaults for ClientHandlers.

    ``queue_provider`` supplies the queue attached by ``init(queue=True)``;
    pass ``AdmissionQueue`` to get a private queue per wrapper.
    """

    HOOKS = Hook

    def __init__(
        self,
        *,
        queue_provider: Callable[[], AdmissionQueue] = get_admission_queue,
    ) -> None:
        self.client: Callable[..., Any] | None = None
        self.queue: AdmissionQueue | None = None
        self.default_parallel_status = False
        self._queue_provider = queue_provider
        self._hooks = HookTable(DEFAULT_HOOKS)
        self._resolve_validation: Predicate = always_succeed

    # ── Configuration ─────────────────────────────────────────────

    def init(
        self, options: WrapperOptions | Mapping[str, Any] | None = None, **kwargs: Any
    ) -> ServiceWrapper:
        """
        Apply ``init`` options.

        Accepts a mapping (snake_case or camelCase keys), a WrapperOptions, or
        keyword arguments. Raises ConfigurationError for anything else and
        InvalidClientError for a non-callable client.
        """
        if options is None:
            data: dict[str, Any] = {}
        elif isinstance(options, WrapperOptions):
            data = options.model_dump()
        elif isinstance(options, Mapping):
            data = dict(options)
        else:
            raise ConfigurationError(
                f"Invalid options passed: expected a mapping, got {type(options).__name__}"
            )
        data.update(kwargs)

        try:
            parsed = WrapperOptions.model_validate(data)
        except ValidationError as exc:
            if any(err["loc"][:1] == ("client",) for err in exc.errors()):
                raise InvalidClientError("Invalid client passed. Client must be a callable") from exc
            raise ConfigurationError(f"Invalid options passed: {exc}") from exc

        if parsed.client is not None:
            self.set_client(parsed.client)

        if parsed.queue:
            self.queue = self._queue_provider()
            self.queue.trace = parsed.queue_logs
        else:
            self.queue = None

        if parsed.default_parallel_status is not None:
            self.default_parallel_status = parsed.default_parallel_status

        logger.info(
            "service_wrapper_initialized",
            queue_enabled=self.queue is not None,
            queue_logs=parsed.queue_logs,
            default_parallel=self.default_parallel_status,
        )
        return self

    def set_client(self, client: Callable[..., Any]) -> ServiceWrapper:
        if not callable(client):
            raise InvalidClientError("Invalid client passed. Client must be a callable")
        self.client = client
        return self

    # ── Hooks ─────────────────────────────────────────────────────

    @property
    def hooks(self) -> HookTable:
        return self._hooks

    def set_hook(self, hook_name: Hook | str, fn: HookFn) -> ServiceWrapper:
        self._hooks.set(hook_name, fn)
        return self

    async def exec_hook(self, hook_name: Hook | str, *args: Any) -> Any:
        """Run the global hook, or return None if none is set."""
        fn = self._hooks.get(hook_name)
        if fn is None:
            return None
        return await call_maybe_async(fn, *args)

    def set_resolve_validation(self, fn: Predicate) -> ServiceWrapper:
        if not callable(fn):
            raise ConfigurationError("Resolve validation must be a callable")
        self._resolve_validation = fn
        return self

    async def resolve_validation(self, result: Any) -> bool:
        return bool(await call_maybe_async(self._resolve_validation, result))

    # ── Queue passthroughs (no-ops when ordering is disabled) ─────

    def add_to_queue(self, custom_id: str | None = None) -> str | None:
        if self.queue is None:
            return None
        return self.queue.register(custom_id)

    def check_queue_status(
        self, entry_id: str | None, parallel: bool = False
    ) -> asyncio.Future[None] | None:
        if self.queue is None or entry_id is None:
            return None
        return self.queue.request_admission(entry_id, parallel)

    def remove_from_queue(self, entry_id: str | None) -> bool:
        if self.queue is None or entry_id is None:
            return False
        return self.queue.unregister(entry_id)

    def cancel_service(self, entry_id: str | None) -> bool:
        if self.queue is None or entry_id is None:
            return False
        return self.queue.cancel(entry_id)

    def __repr__(self) -> str:
        return (
            f"ServiceWrapper(client={getattr(self.client, '__name__', self.client)!r}, "
            f"queue={self.queue!r}, default_parallel={self.default_parallel_status})"
        )

# ── Singleton ──────────────────────────────────────────────────────

_default_wrapper: LazySingleton[ServiceWrapper] = LazySingleton(
    ServiceWrapper, name="ServiceWrapper"
)

def get_service_wrapper() -> ServiceWrapper:
    """Process-wide wrapper used by handlers built without ``wrapper=``."""
    return _default_wrapper.get()

def reset_service_wrapper() -> None:
    _default_wrapper.reset()

def init(options: WrapperOptions | Mapping[str, Any] | None = None, **kwargs: Any) -> ServiceWrapper:
    """Configure the process-wide wrapper."""
    return get_service_wrapper().init(options, **kwargs)
