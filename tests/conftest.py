import itertools

import pytest

from backend import RoomRegistry
from expiry import ExpiryScheduler
from signaling import RoomStateMachine

_ids = itertools.count(1)


class FakeConnection:
    """Records everything sent to it instead of writing to a socket."""

    def __init__(self, name=None):
        self.connection_id = name or f"conn-{next(_ids)}"
        self.sent = []
        self.open = True

    @property
    def is_open(self):
        return self.open

    def send(self, message):
        self.sent.append(message)

    def mark_closed(self):
        self.open = False

    def types(self):
        return [m["type"] for m in self.sent]


@pytest.fixture
def make_connection():
    return FakeConnection


@pytest.fixture
def registry():
    return RoomRegistry()


@pytest.fixture
def scheduler():
    return ExpiryScheduler(timeout=0.05)


@pytest.fixture
def rooms(registry, scheduler):
    machine = RoomStateMachine(registry, scheduler)
    yield machine
    scheduler.cancel_all()
