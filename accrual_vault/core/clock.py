"""Clock — источники времени для ledger (секунды, int).

- SystemClock: wall-clock UTC секунды
- ManualClock: ручное управление временем (симуляции, тесты)
"""

import time
from typing import Protocol


class Clock(Protocol):
    """Источник текущего времени в целых секундах."""

    def now(self) -> int:
        ...


class SystemClock:
    """Wall-clock время (Unix timestamp, секунды)."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """Часы с ручным продвижением времени.

    Время монотонно: advance() принимает только неотрицательные шаги.
    """

    def __init__(self, start: int = 0):
        if start < 0:
            raise ValueError(f"start must be non-negative, got {start}")
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        """Сдвиг времени вперёд. Возвращает новое время."""
        if seconds < 0:
            raise ValueError(f"Cannot move clock backwards by {seconds}s")
        self._now += seconds
        return self._now

    def set(self, timestamp: int) -> None:
        """Установка абсолютного времени (не раньше текущего)."""
        if timestamp < self._now:
            raise ValueError(f"Cannot set clock to {timestamp} < current {self._now}")
        self._now = timestamp
