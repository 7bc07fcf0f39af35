"""Shared fixtures: a fake clock and a scripted in-memory transport.

The scripted transport releases reply bytes in bursts at given times on the
fake clock, so engine timing can be tested without real delays or serial
hardware.
"""

from typing import List, Optional, Tuple

import pytest

from bluefruit_at.config import ConfigManager
from bluefruit_at.core.transport import ByteTransport


class FakeClock:
    """Monotonic clock that only moves when sleep() is called."""

    def __init__(self, start: float = 100.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class ScriptedTransport(ByteTransport):
    """Transport that answers each written line with timed byte bursts.

    ``replies`` is a queue with one reply per write_line() call. Each reply
    is a list of (delay_seconds, text) bursts; a burst becomes readable once
    ``delay_seconds`` have passed on the clock since the write. Writing a
    new line discards anything left unread.
    """

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.port = "SCRIPTED"
        self.written: List[str] = []
        self.replies: List[List[Tuple[float, str]]] = []
        self._pending: List[Tuple[float, int]] = []

    def queue_reply(self, *bursts) -> None:
        """Queue a reply: plain strings arrive at once, tuples are (delay, text)."""
        normalized = []
        for burst in bursts:
            if isinstance(burst, tuple):
                normalized.append(burst)
            else:
                normalized.append((0.0, burst))
        self.replies.append(normalized)

    def write_line(self, text: str) -> int:
        self.written.append(text)
        self._pending = []
        if self.replies:
            start = self.clock()
            for delay, chunk in self.replies.pop(0):
                for byte in chunk.encode("latin-1"):
                    self._pending.append((start + delay, byte))
        return len(text) + 1

    def _ready(self) -> List[Tuple[float, int]]:
        now = self.clock()
        ready = []
        for at, byte in self._pending:
            if at > now:
                break
            ready.append((at, byte))
        return ready

    def bytes_available(self) -> int:
        return len(self._ready())

    def read_byte(self) -> int:
        if not self._ready():
            raise AssertionError("read_byte() called with no bytes available")
        _, byte = self._pending.pop(0)
        return byte

    def leftover(self) -> Optional[str]:
        """Bytes queued but never read, as text."""
        return bytes(b for _, b in self._pending).decode("latin-1")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def transport(clock):
    return ScriptedTransport(clock)


@pytest.fixture(autouse=True)
def reset_config_manager():
    """Keep the configuration singleton from leaking between tests."""
    ConfigManager.reset()
    yield
    ConfigManager.reset()
