"""Entropy used to break repeated ties.

WARNING: this is deliberately weak, environment-derived randomness. The
value is a hash of a clock reading, a "beacon" value and the caller's
identity, so anyone who controls or can observe those inputs can predict
or steer the pick. It is not a cryptographically secure RNG and must not
be treated as one.
"""

import hashlib
import time
from typing import Callable, Optional, Protocol


def mix(timestamp: int, beacon: int, caller: str) -> int:
    """Hash the three inputs (Fiat-Shamir style, '|' separated) into an int."""
    h = hashlib.sha256()
    for e in (timestamp, beacon, caller):
        h.update(str(e).encode("utf-8"))
        h.update(b"|")
    return int.from_bytes(h.digest(), "big")


class EntropySource(Protocol):
    def random_int(self, caller: str) -> int:
        ...


class HostEntropy:
    """Clock plus a beacon callable, both read at draw time.

    The default beacon is the monotonic clock in nanoseconds, which is as
    predictable as the wall clock. Inject something better if you have it.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], float]] = None,
        beacon: Optional[Callable[[], int]] = None,
    ):
        self._clock = clock or time.time
        self._beacon = beacon or time.monotonic_ns

    def random_int(self, caller: str) -> int:
        return mix(int(self._clock()), int(self._beacon()), caller)


class FixedEntropy:
    """Deterministic source for tests and replays."""

    def __init__(self, timestamp: int = 0, beacon: int = 0):
        self.timestamp = timestamp
        self.beacon = beacon
        self.draws = 0

    def random_int(self, caller: str) -> int:
        self.draws += 1
        return mix(self.timestamp, self.beacon, caller)
