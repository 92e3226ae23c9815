"""Shared fixtures: isolated queues and wrappers, and fake clients."""

import asyncio

import pytest

from service_wrapper.runtime.queue import AdmissionQueue, reset_admission_queue
from service_wrapper.runtime.wrapper import ServiceWrapper, reset_service_wrapper
from service_wrapper.utils import lock_factory


class GatedClient:
    """Client whose calls block until the test releases them by key."""

    def __init__(self):
        self.calls = []
        self._gates = {}

    def _gate(self, key):
        if key not in self._gates:
            self._gates[key] = asyncio.Event()
        return self._gates[key]

    def release(self, key):
        self._gate(key).set()

    async def __call__(self, key, *rest):
        self.calls.append((key, *rest))
        await self._gate(key).wait()
        return {"status": 200, "key": key}


class TimedClient:
    """Client that records start/end events and answers after a fixed delay."""

    def __init__(self, delay=0.02):
        self.delay = delay
        self.events = []

    async def __call__(self, key, *rest):
        self.events.append(("start", key))
        await asyncio.sleep(self.delay)
        self.events.append(("end", key))
        return {"status": 200, "key": key, "args": (key, *rest)}


async def settle(rounds=10):
    """Let every ready task run until it blocks."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture(autouse=True)
def _reset_process_defaults():
    yield
    reset_admission_queue()
    reset_service_wrapper()
    lock_factory.reset_factory()


@pytest.fixture
def queue():
    return AdmissionQueue()


@pytest.fixture
def wrapper(queue):
    return ServiceWrapper(queue_provider=lambda: queue)


@pytest.fixture
def gated_client():
    return GatedClient()


@pytest.fixture
def timed_client():
    return TimedClient()


@pytest.fixture
def drain():
    return settle
