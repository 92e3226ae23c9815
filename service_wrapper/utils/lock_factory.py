"""
Lock factory for the admission queue.

The queue guards its entry mapping with a lock created here so tests (or
embedders running a single event loop) can swap in a cheaper lock.

Usage:
    from service_wrapper.utils.lock_factory import create_lock

    self._lock = create_lock()

    # In tests:
    from service_wrapper.utils import lock_factory
    lock_factory.set_factory(lock_factory.NoOpLock)
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

_factory: Callable[[], Any] = threading.Lock

def create_lock() -> Any:
    """Create a lock using the current factory (``threading.Lock`` by default)."""
    return _factory()

def set_factory(factory: Callable[[], Any]) -> None:
    """Override the lock factory for queues created afterwards."""
    global _factory
    _factory = factory

def reset_factory() -> None:
    """Restore ``threading.Lock`` as the factory."""
    global _factory
    _factory = threading.Lock

class NoOpLock:
    """Lock that never blocks. Only safe when one thread touches the queue."""

    def acquire(self, blocking: bool = True, timeout: float = -1) -> bool:
        return True

    def release(self) -> None:
        pass

    def __enter__(self) -> NoOpLock:
        return self

    def __exit__(self, *args: object) -> None:
        pass
