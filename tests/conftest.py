"""
Shared fakes for telemetry client tests.
"""

import json
import socket

import pytest


class FakeTimer:
    def __init__(self, due_ms, seq, callback):
        self.due_ms = due_ms
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Controllable scheduler; time only moves on advance()."""

    def __init__(self):
        self.now_ms = 0
        self.timers = []
        self._seq = 0

    def call_later(self, delay, callback):
        self._seq += 1
        timer = FakeTimer(self.now_ms + round(delay * 1000), self._seq, callback)
        self.timers.append(timer)
        return timer

    def pending(self):
        return [t for t in self.timers if not t.cancelled]

    def advance(self, ms):
        """Move time forward, firing due timers in order (including new ones)."""
        target = self.now_ms + ms
        while True:
            due = [t for t in self.pending() if t.due_ms <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.due_ms, t.seq))
            self.timers.remove(timer)
            self.now_ms = timer.due_ms
            timer.callback()
        self.now_ms = target


class FakeTransport:
    def __init__(self, url, on_open, on_message, on_close):
        self.url = url
        self.on_open = on_open
        self.on_message = on_message
        self.on_close = on_close
        self.sent = []
        self.closed = False
        self.fail_sends = False

    def send(self, text):
        if self.fail_sends:
            raise ConnectionError("broken pipe")
        self.sent.append(text)

    def close(self):
        self.closed = True

    # Server-side controls
    def open(self):
        self.on_open()

    def receive(self, message):
        self.on_message(message if isinstance(message, str) else json.dumps(message))

    def drop(self):
        self.on_close()

    def sent_events(self):
        return [json.loads(text) for text in self.sent]


class FakeTransportFactory:
    def __init__(self):
        self.transports = []

    def __call__(self, url, on_open, on_message, on_close):
        transport = FakeTransport(url, on_open, on_message, on_close)
        self.transports.append(transport)
        return transport

    @property
    def latest(self):
        return self.transports[-1]


class FakePage:
    def __init__(self, origin="http://localhost:3333"):
        self.origin = origin
        self.reloads = 0

    def reload(self):
        self.reloads += 1


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def clock(scheduler):
    """Epoch clock that follows the fake scheduler."""
    base = 1_700_000_000_000
    return lambda: base + scheduler.now_ms


@pytest.fixture
def transports():
    return FakeTransportFactory()


@pytest.fixture
def page():
    return FakePage()


@pytest.fixture
def free_port():
    """A localhost TCP port nothing is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]
