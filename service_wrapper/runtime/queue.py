"""
Admission Queue — FIFO Admission for Queued Services
=====================================================

Decides when each registered service may start calling its client:
  - Sequential entries are admitted one at a time, in registration order
  - Parallel entries are admitted as soon as they ask
  - Pending entries can be cancelled before they are admitted

Design:
  - Insertion-ordered dict of id → QueueEntry; the first key is the head
  - Admission is a single-shot asyncio future per entry
  - A sequential entry is admitted either when it asks while being the head,
    or when ``unregister`` of the previous holder makes it the head
  - Parallel entries are not skipped by the head check: a parallel entry at
    the head holds back the next sequential entry until it is unregistered

Usage:
    queue = AdmissionQueue()
    entry_id = queue.register()
    await queue.request_admission(entry_id)
    try:
        await call()
    finally:
        queue.unregister(entry_id)
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any

from service_wrapper.core.exceptions import AdmissionCancelled
from service_wrapper.core.singleton import LazySingleton
from service_wrapper.core.types import EntryStatus
from service_wrapper.telemetry import get_logger
from service_wrapper.utils.lock_factory import create_lock

logger = get_logger(__name__)

@dataclass
class QueueEntry:
    """Bookkeeping for one registered service."""

    id: str
    status: EntryStatus | None = None
    waiter: asyncio.Future[None] | None = field(default=None, repr=False)
    parallel: bool = False
    registered_at: float = field(default_factory=time.monotonic)

    @property
    def age_ms(self) -> float:
        return (time.monotonic() - self.registered_at) * 1000

def _settle(waiter: asyncio.Future[None], exc: BaseException | None = None) -> None:
    """Resolve (or fail) an admission waiter from any thread."""

    def apply() -> None:
        if waiter.done():
            return
        if exc is None:
            waiter.set_result(None)
        else:
            waiter.set_exception(exc)

    if waiter.done():
        return
    loop = waiter.get_loop()
    try:
        running = asyncio.get_running_loop()
    except RuntimeError:
        running = None
    if running is loop:
        apply()
    else:
        loop.call_soon_threadsafe(apply)

class AdmissionQueue:
    """
    Process-local admission queue.

    All mutation of the entry mapping happens under one lock, so the FIFO
    and one-sequential-admission-at-a-time rules hold even if callers sit
    on different threads. Waiters must all belong to one event loop.
    """

    def __init__(self, *, trace: bool = False) -> None:
        self._entries: dict[str, QueueEntry] = {}
        self._lock = create_lock()
        self._count = 0
        self.trace = trace
        self._total_registered = 0
        self._total_admitted = 0
        self._total_cancelled = 0
        self._total_removed = 0

    def _log(self, event: str, **kwargs: Any) -> None:
        logger.log(logging.INFO if self.trace else logging.DEBUG, event, **kwargs)

    def _generate_id(self) -> str:
        # Not checked against earlier generated ids; uniqueness is probabilistic.
        self._count += 1
        return f"{self._count}__{uuid.uuid4().hex[:6]}"

    # ── Public contract ───────────────────────────────────────────

    def register(self, custom_id: str | None = None) -> str:
        """
        Add an entry at the tail and return its id.

        ``custom_id`` is used as-is unless it is empty or already taken, in
        which case a fresh id is generated.
        """
        with self._lock:
            entry_id = custom_id
            if not entry_id or entry_id in self._entries:
                entry_id = self._generate_id()
            self._entries[entry_id] = QueueEntry(id=entry_id)
            self._total_registered += 1
            self._log(
                "queue_entry_added",
                request_id=entry_id,
                custom=entry_id == custom_id,
                depth=len(self._entries),
            )
        return entry_id

    def request_admission(self, entry_id: str, parallel: bool = False) -> asyncio.Future[None]:
        """
        Return a future that resolves when ``entry_id`` may run.

        Parallel entries are admitted immediately. Sequential entries are
        admitted now if they are the head, otherwise by a later
        ``unregister``. An unknown id is registered at the tail first.
        Must be called from inside a running event loop.
        """
        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        with self._lock:
            entry = self._entries.get(entry_id)
            if entry is None:
                entry = self._entries[entry_id] = QueueEntry(id=entry_id)
                self._total_registered += 1
            entry.waiter = waiter
            entry.parallel = parallel
            entry.status = EntryStatus.PENDING

            if parallel:
                entry.status = EntryStatus.PARALLEL
                self._fire(entry)
            elif next(iter(self._entries)) == entry_id:
                self._fire(entry)
            else:
                self._log(
                    "queue_entry_waiting",
                    request_id=entry_id,
                    position=list(self._entries).index(entry_id),
                )
        return waiter

    def unregister(self, entry_id: str) -> bool:
        """
        Remove ``entry_id`` and admit the new head if it is pending.

        This is the only place queued sequential entries get admitted.
        Returns whether an entry was actually removed.
        """
        with self._lock:
            removed = self._entries.pop(entry_id, None)
            if removed is not None:
                self._total_removed += 1
                self._log(
                    "queue_entry_removed",
                    request_id=entry_id,
                    age_ms=round(removed.age_ms, 2),
                    depth=len(self._entries),
                )

            head = next(iter(self._entries.values()), None)
            if head is not None and head.status is EntryStatus.PENDING:
                self._fire(head)
        return removed is not None

    def cancel(self, entry_id: str) -> bool:
        """
        Remove a pending entry that has not been admitted yet.

        Returns False for unknown ids and for entries that are already
        admitted or have not asked for admission. The entry's waiter fails
        with ``AdmissionCancelled`` so nobody stays suspended on it.
        """
        with self._lock:
            entry = self._entries.get(entry_id)
            if entry is None or entry.status is not EntryStatus.PENDING:
                return False
            del self._entries[entry_id]
            self._total_cancelled += 1
            self._log("queue_entry_cancelled", request_id=entry_id, depth=len(self._entries))
            if entry.waiter is not None:
                _settle(entry.waiter, AdmissionCancelled(entry_id))
        return True

    def _fire(self, entry: QueueEntry) -> None:
        # Caller holds the lock.
        self._log(
            "queue_entry_fired",
            request_id=entry.id,
            kind=entry.status.value if entry.status else "unset",
            wait_ms=round(entry.age_ms, 2),
        )
        entry.status = EntryStatus.FIRED
        self._total_admitted += 1
        if entry.waiter is not None:
            _settle(entry.waiter)

    # ── Introspection ─────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._entries

    def status(self, entry_id: str) -> EntryStatus | None:
        """Status of ``entry_id``; None if unknown or not yet requesting admission."""
        entry = self._entries.get(entry_id)
        return entry.status if entry else None

    def ids(self) -> list[str]:
        """Registered ids in admission order."""
        with self._lock:
            return list(self._entries)

    @property
    def head(self) -> str | None:
        return next(iter(self._entries), None)

    @property
    def is_empty(self) -> bool:
        return not self._entries

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            statuses = [e.status for e in self._entries.values()]
        return {
            "depth": len(statuses),
            "pending": statuses.count(EntryStatus.PENDING),
            "fired": statuses.count(EntryStatus.FIRED),
            "total_registered": self._total_registered,
            "total_admitted": self._total_admitted,
            "total_cancelled": self._total_cancelled,
            "total_removed": self._total_removed,
        }

    def __repr__(self) -> str:
        return f"AdmissionQueue(depth={len(self._entries)}, head={self.head!r})"

# ── Singleton ──────────────────────────────────────────────────────

_default_queue: LazySingleton[AdmissionQueue] = LazySingleton(
    AdmissionQueue, name="AdmissionQueue"
)

def get_admission_queue() -> AdmissionQueue:
    """Process-wide queue, created on first use."""
    return _default_queue.get()

def reset_admission_queue() -> None:
    """Forget the process-wide queue; the next call builds a new one."""
    _default_queue.reset()
