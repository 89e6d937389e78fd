"""
rate.py - Versioned Global Rate Cell

Holds the protocol-wide rate offered to new entrants. The cell has a
single mutation path, lower(), which only accepts values at or below the
current rate. Every accepted update bumps the version and is kept in the
history so the rate's whole lifetime can be audited.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Tuple

from .core import RateIncreaseRejected, validate_amount


@dataclass(frozen=True, slots=True)
class RateChange:
    """Record of an accepted global rate update."""
    old_rate: int
    new_rate: int
    version: int
    timestamp: int


class RateCell:
    """
    Single non-increasing rate value.

    Example:
        cell = RateCell(5 * 10**10)
        cell.lower(4 * 10**10, timestamp=100)   # ok, version 1
        cell.lower(6 * 10**10, timestamp=200)   # raises RateIncreaseRejected
    """

    def __init__(self, initial_rate: int):
        validate_amount(initial_rate, "initial_rate")
        self._value = initial_rate
        self._version = 0
        self._history: List[RateChange] = []

    @property
    def value(self) -> int:
        return self._value

    @property
    def version(self) -> int:
        """Number of accepted updates since creation."""
        return self._version

    @property
    def history(self) -> Tuple[RateChange, ...]:
        return tuple(self._history)

    def lower(self, new_rate: int, timestamp: int = 0) -> RateChange:
        """
        Set the rate to new_rate, which must not exceed the current value.

        Setting the same value is accepted and still recorded.

        Raises:
            ValueError: If new_rate is not a non-negative int.
            RateIncreaseRejected: If new_rate > current value.
        """
        validate_amount(new_rate, "new_rate")
        if new_rate > self._value:
            raise RateIncreaseRejected(self._value, new_rate)
        change = RateChange(
            old_rate=self._value,
            new_rate=new_rate,
            version=self._version + 1,
            timestamp=timestamp,
        )
        self._value = new_rate
        self._version = change.version
        self._history.append(change)
        return change

    def snapshot(self) -> Tuple[int, int, int]:
        return (self._value, self._version, len(self._history))

    def restore(self, snap: Tuple[int, int, int]) -> None:
        self._value, self._version, history_length = snap
        del self._history[history_length:]

    def clone(self) -> RateCell:
        cloned = RateCell(self._value)
        cloned._version = self._version
        cloned._history = list(self._history)
        return cloned

    def __repr__(self) -> str:
        return f"RateCell(value={self._value}, version={self._version})"
