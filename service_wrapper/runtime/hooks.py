"""
Hook Table — Lifecycle Interception
====================================

One callback per hook name, last write wins. A ServiceWrapper owns the
global table (created with identity defaults for UPDATE_CONFIG,
BEFORE_RESOLVE and BEFORE_REJECT); every ClientHandler owns an override
table that is consulted first.

Hooks and validation predicates may be plain functions or coroutines.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from service_wrapper.core.exceptions import InvalidHookError
from service_wrapper.core.types import Hook

HookFn = Callable[..., Any]
Predicate = Callable[[Any], bool | Awaitable[bool]]

def coerce_hook(name: Hook | str) -> Hook:
    """Accept a Hook, its value (``"before.fire"``) or its name (``"BEFORE_FIRE"``)."""
    if isinstance(name, Hook):
        return name
    if isinstance(name, str):
        try:
            return Hook(name)
        except ValueError:
            if name in Hook.__members__:
                return Hook[name]
    raise InvalidHookError(name)

async def call_maybe_async(fn: Callable[..., Any], *args: Any) -> Any:
    """Call ``fn`` and await the result if it is awaitable."""
    result = fn(*args)
    if inspect.isawaitable(result):
        result = await result
    return result

# ── Defaults ───────────────────────────────────────────────────────

def passthrough(value: Any, *_: Any) -> Any:
    """Default BEFORE_RESOLVE / BEFORE_REJECT: hand the value on unchanged."""
    return value

def passthrough_args(*args: Any) -> tuple[Any, ...]:
    """Default UPDATE_CONFIG: keep the call arguments."""
    return args

DEFAULT_HOOKS: Mapping[Hook, HookFn] = {
    Hook.UPDATE_CONFIG: passthrough_args,
    Hook.BEFORE_RESOLVE: passthrough,
    Hook.BEFORE_REJECT: passthrough,
}

def always_succeed(result: Any) -> bool:
    """Default validation: any result the client returns is a success."""
    return True

def http_status_ok(result: Any) -> bool:
    """
    Validation for HTTP-style results: success iff the status is 200.

    Looks at ``status_code`` (httpx, requests), then ``status`` (aiohttp,
    superagent-like objects), then a ``"status"`` mapping key.
    """
    status = getattr(result, "status_code", None)
    if status is None:
        status = getattr(result, "status", None)
    if status is None and isinstance(result, Mapping):
        status = result.get("status")
    return status == 200

# ── Hook Table ─────────────────────────────────────────────────────

class HookTable:
    """Single-callback-per-name hook storage."""

    __slots__ = ("_hooks",)

    def __init__(self, defaults: Mapping[Hook, HookFn] | None = None) -> None:
        self._hooks: dict[Hook, HookFn] = dict(defaults or {})

    def set(self, name: Hook | str, fn: HookFn) -> None:
        hook = coerce_hook(name)
        if not callable(fn):
            raise InvalidHookError(name, reason="callback must be callable")
        self._hooks[hook] = fn

    def get(self, name: Hook | str) -> HookFn | None:
        return self._hooks.get(coerce_hook(name))

    def remove(self, name: Hook | str) -> bool:
        return self._hooks.pop(coerce_hook(name), None) is not None

    def __contains__(self, name: object) -> bool:
        try:
            return coerce_hook(name) in self._hooks  # type: ignore[arg-type]
        except InvalidHookError:
            return False

    def __len__(self) -> int:
        return len(self._hooks)

    def __repr__(self) -> str:
        return f"HookTable({sorted(h.value for h in self._hooks)})"
