"""RateGovernor — политика глобальной ставки.

Правила:
- Ставка только снижается (или остаётся прежней): new_rate ≤ current_rate.
  Держатели с закреплённой ставкой защищены от неожиданного размытия.
- Ставка всегда в [min_rate, max_rate].

Значение текущей ставки хранится в LedgerState (единое состояние ledger);
governor проверяет изменения и ведёт историю принятых ставок.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from accrual_vault.config import LedgerConfig
from accrual_vault.core.errors import RateIncreaseError, RateOutOfBoundsError
from accrual_vault.core.math.fixed_point import validate_int

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateChangeRecord:
    """Принятое изменение ставки."""

    old_rate: int
    new_rate: int
    caller: str
    timestamp: int


class RateGovernor:
    """Проверка и учёт изменений глобальной ставки."""

    def __init__(self, config: Optional[LedgerConfig] = None):
        self.config = config or LedgerConfig()
        self._history: list[RateChangeRecord] = []

    @property
    def min_rate(self) -> int:
        return self.config.min_rate

    @property
    def max_rate(self) -> int:
        return self.config.max_rate

    @property
    def history(self) -> list[RateChangeRecord]:
        return list(self._history)

    def check_bounds(self, rate: int) -> int:
        """Проверка rate ∈ [min_rate, max_rate].

        Raises:
            RateOutOfBoundsError
        """
        validate_int(rate, "rate")
        if not self.min_rate <= rate <= self.max_rate:
            raise RateOutOfBoundsError(rate, self.min_rate, self.max_rate)
        return rate

    def check_change(self, current_rate: int, new_rate: int) -> int:
        """Проверка изменения ставки.

        Порядок: монотонность, затем границы.

        Raises:
            RateIncreaseError: new_rate > current_rate
            RateOutOfBoundsError: new_rate вне [min_rate, max_rate]
        """
        validate_int(new_rate, "new_rate")
        if new_rate > current_rate:
            raise RateIncreaseError(current_rate, new_rate)
        return self.check_bounds(new_rate)

    def drain_history(self) -> list[RateChangeRecord]:
        """Выдача истории изменений с очисткой."""
        drained, self._history = self._history, []
        return drained

    def record(self, old_rate: int, new_rate: int, caller: str, timestamp: int) -> RateChangeRecord:
        entry = RateChangeRecord(old_rate, new_rate, caller, timestamp)
        self._history.append(entry)
        logger.info("global rate %d -> %d by %s at %d", old_rate, new_rate, caller, timestamp)
        return entry
