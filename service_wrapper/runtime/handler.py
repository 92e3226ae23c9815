"""
ClientHandler — One Queued Service Call
========================================

Runs a single call of the wrapper's client through the admission queue:

  fire() → register → UPDATE_CONFIG → wait for admission → BEFORE_FIRE
         → client(*args) → validate
         → AFTER_SUCCESS + BEFORE_RESOLVE   (returned)
         | AFTER_FAIL + BEFORE_REJECT       (raised)
         → unregister

``unregister`` runs exactly once after admission whatever the outcome, so a
failing service never stalls the ones queued behind it.

Usage:
    handler = ClientHandler("https://reqres.in/api/users")
    users = await handler.fire(parallel=False)
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from service_wrapper.core.config import FireOptions
from service_wrapper.core.exceptions import (
    AdmissionCancelled,
    ConfigurationError,
    HandlerStateError,
    InvalidClientError,
    ServiceCancelled,
    ServiceRejected,
)
from service_wrapper.core.types import HandlerState, Hook
from service_wrapper.runtime.hooks import HookFn, HookTable, Predicate, call_maybe_async
from service_wrapper.runtime.wrapper import ServiceWrapper, get_service_wrapper
from service_wrapper.telemetry import get_logger, request_context

logger = get_logger(__name__)

class ClientHandler:
    """
    A single service call.

    Positional arguments are handed to the client when the service is
    admitted (after the UPDATE_CONFIG hook has had a chance to rewrite
    them). ``wrapper`` defaults to the process-wide ServiceWrapper.
    """

    def __init__(self, *args: Any, wrapper: ServiceWrapper | None = None) -> None:
        self._wrapper = wrapper or get_service_wrapper()
        self._client = self._wrapper.client

        if self._client is None or not callable(self._client):
            raise InvalidClientError("Service client must be a callable")

        self._args: tuple[Any, ...] = args
        self._hooks = HookTable()
        self._resolve_validation: Predicate | None = None
        self._id: str | None = None
        self._fire_options: FireOptions | None = None
        self._state = HandlerState.CREATED

    # ── Properties ────────────────────────────────────────────────

    @property
    def id(self) -> str | None:
        return self._id

    @property
    def state(self) -> HandlerState:
        return self._state

    @property
    def args(self) -> tuple[Any, ...]:
        return self._args

    @property
    def fire_options(self) -> FireOptions | None:
        return self._fire_options

    @property
    def hooks(self) -> HookTable:
        return self._hooks

    # ── Configuration ─────────────────────────────────────────────

    def set_client(self, client: Callable[..., Any]) -> ClientHandler:
        if not callable(client):
            raise InvalidClientError("Invalid client passed. Client must be a callable")
        self._client = client
        return self

    def set_hook(self, hook_name: Hook | str, fn: HookFn) -> ClientHandler:
        self._hooks.set(hook_name, fn)
        return self

    async def exec_hook(self, hook_name: Hook | str, *args: Any) -> Any:
        """Run the instance hook, else the wrapper's, else do nothing."""
        fn = self._hooks.get(hook_name)
        if fn is None:
            return await self._wrapper.exec_hook(hook_name, *args)
        return await call_maybe_async(fn, *args)

    def set_resolve_validation(self, fn: Predicate) -> ClientHandler:
        if not callable(fn):
            raise ConfigurationError("Resolve validation must be a callable")
        self._resolve_validation = fn
        return self

    async def resolve_validation(self, result: Any) -> bool:
        if self._resolve_validation is None:
            return await self._wrapper.resolve_validation(result)
        return bool(await call_maybe_async(self._resolve_validation, result))

    # ── Lifecycle ─────────────────────────────────────────────────

    def cancel(self) -> bool:
        """
        Drop the service from the queue if it is still waiting.

        Only queued, non-parallel services can be cancelled; a successful
        cancel makes the pending ``fire()`` raise ServiceCancelled.
        """
        if self._state is not HandlerState.QUEUED or self._fire_options is None:
            return False
        if self._fire_options.parallel:
            return False
        return self._wrapper.cancel_service(self._id)

    async def fire(
        self, options: FireOptions | Mapping[str, Any] | None = None, **overrides: Any
    ) -> Any:
        """
        Queue the service, call the client once admitted and return the
        BEFORE_RESOLVE value.

        Options: ``parallel`` (skip ordering; defaults to the wrapper's
        ``default_parallel_status``) and ``id`` (custom queue id). Extra keys
        are passed to hooks untouched.

        Raises:
            HandlerStateError: the service was already fired
            ServiceCancelled: ``cancel()`` succeeded before admission
            ServiceRejected: BEFORE_REJECT returned a non-exception payload
            Exception: whatever exception BEFORE_REJECT returned, by default
                the client's own error
        """
        if self._state is not HandlerState.CREATED:
            raise HandlerStateError(self._id, self._state.value, "fire")

        opts = self._build_fire_options(options, overrides)
        self._fire_options = opts
        self._id = self._wrapper.add_to_queue(opts.id)
        self._state = HandlerState.QUEUED

        try:
            await self._update_args()

            admission = self._wrapper.check_queue_status(self._id, bool(opts.parallel))
            if admission is not None:
                await admission
        except AdmissionCancelled as exc:
            if exc.handler_id != self._id:
                self._abandon_slot()
                raise
            self._state = HandlerState.CANCELLED
            logger.info("service_cancelled", request_id=self._id)
            raise ServiceCancelled(self._id) from None
        except BaseException:
            self._abandon_slot()
            raise

        self._state = HandlerState.ADMITTED
        try:
            return await self._run(opts)
        finally:
            self._wrapper.remove_from_queue(self._id)

    async def _update_args(self) -> None:
        # A tuple is the new argument list, anything else the single argument.
        if self._hooks.get(Hook.UPDATE_CONFIG) is None and (
            self._wrapper.hooks.get(Hook.UPDATE_CONFIG) is None
        ):
            return
        updated = await self.exec_hook(Hook.UPDATE_CONFIG, *self._args)
        self._args = updated if isinstance(updated, tuple) else (updated,)

    def _abandon_slot(self) -> None:
        # Never admitted; give the slot back.
        self._wrapper.remove_from_queue(self._id)
        self._state = HandlerState.FAILED
        logger.warning("service_abandoned_before_admission", request_id=self._id)

    async def _run(self, opts: FireOptions) -> Any:
        try:
            await self.exec_hook(Hook.BEFORE_FIRE, opts)

            self._state = HandlerState.INVOKING
            logger.debug("service_invoking", request_id=self._id, parallel=opts.parallel)
            with request_context(self._id):
                result = await call_maybe_async(self._client, *self._args)

            if await self.resolve_validation(result):
                await self.exec_hook(Hook.AFTER_SUCCESS, result, opts)
                value = await self.exec_hook(Hook.BEFORE_RESOLVE, result, opts)
                self._state = HandlerState.SUCCEEDED
                logger.debug("service_succeeded", request_id=self._id)
                return value

            failure: Any = result
            logger.info("service_validation_failed", request_id=self._id)
        except Exception as exc:
            failure = exc
            logger.info(
                "service_call_failed",
                request_id=self._id,
                error_type=type(exc).__name__,
            )

        self._state = HandlerState.FAILED
        await self.exec_hook(Hook.AFTER_FAIL, failure, opts)
        rejection = await self.exec_hook(Hook.BEFORE_REJECT, failure, opts)
        if isinstance(rejection, BaseException):
            raise rejection
        raise ServiceRejected(rejection, handler_id=self._id)

    def _build_fire_options(
        self, options: FireOptions | Mapping[str, Any] | None, overrides: Mapping[str, Any]
    ) -> FireOptions:
        if options is None:
            data: dict[str, Any] = {}
        elif isinstance(options, FireOptions):
            data = options.model_dump()
        elif isinstance(options, Mapping):
            data = dict(options)
        else:
            raise ConfigurationError(
                f"Invalid fire options: expected a mapping, got {type(options).__name__}"
            )
        data.update(overrides)
        try:
            parsed = FireOptions.model_validate(data)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid fire options: {exc}") from exc
        return parsed.with_default_parallel(self._wrapper.default_parallel_status)

    def __repr__(self) -> str:
        return f"ClientHandler(id={self._id!r}, state={self._state.value})"
