"""
Lazy Singleton Holder
=====================

Process-wide default instances (the admission queue) are created lazily on
first use and can be reset between tests.
"""

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

class LazySingleton(Generic[T]):
    """
    Lock-free lazy singleton using the benign-race pattern.

    Relies on the GIL for atomic pointer assignment. At worst two callers
    build an instance and only one is kept, which is harmless for the
    cheap in-memory objects held here.

    Usage:
        _queue = LazySingleton(AdmissionQueue, name="AdmissionQueue")
        queue = _queue.get()
    """

    def __init__(self, factory: Callable[[], T], name: str = "singleton"):
        self._instance: T | None = None
        self._factory = factory
        self._name = name

    def get(self) -> T:
        """Get or create the instance."""
        if self._instance is not None:
            return self._instance
        self._instance = self._factory()
        logger.debug("[Singleton] Created: %s", self._name)
        return self._instance

    def get_or_none(self) -> T | None:
        """Get the instance if already created, else None."""
        return self._instance

    def is_initialized(self) -> bool:
        return self._instance is not None

    def reset(self) -> None:
        """Drop the instance; the next ``get`` builds a fresh one."""
        self._instance = None
        logger.debug("[Singleton] %s reset", self._name)

    def __repr__(self) -> str:
        status = "initialized" if self.is_initialized() else "not initialized"
        return f"LazySingleton({self._name}, {status})"
