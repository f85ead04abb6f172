"""ReentrancyGuard — scoped non-reentrant acquisition.

Один guard разделяется ledger и vault. Пока любая guarded операция
выполняется, повторный вход в любую guarded точку отклоняется
(ReentrancyError). Guard освобождается на каждом пути выхода
(context manager).

Составная операция vault (redeem/deposit) открывает окно delegate() на
время своей effects-фазы: внутри окна допускается ровно один вложенный
уровень (ledger mint/burn). Payout выполняется после закрытия окна,
поэтому внешний код, вызванный при payout, не может войти ни в vault,
ни в ledger.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from accrual_vault.core.errors import ReentrancyError

logger = logging.getLogger(__name__)


class GuardScope:
    """Активная acquisition guard'а."""

    def __init__(self, guard: "ReentrancyGuard", entry_point: str):
        self._guard = guard
        self.entry_point = entry_point

    @contextmanager
    def delegate(self) -> Iterator[None]:
        """Окно, в котором разрешён один вложенный guarded вызов."""
        if self._guard._delegated_by is not None:
            raise RuntimeError(f"{self.entry_point}: delegate window already open")
        self._guard._delegated_by = self
        try:
            yield
        finally:
            self._guard._delegated_by = None


class ReentrancyGuard:
    """Mutual exclusion для guarded entry points (single-threaded)."""

    def __init__(self):
        self._stack: list[GuardScope] = []
        self._delegated_by: Optional[GuardScope] = None

    @property
    def locked(self) -> bool:
        return bool(self._stack)

    @property
    def active_entry_point(self) -> Optional[str]:
        return self._stack[-1].entry_point if self._stack else None

    def _can_enter(self) -> bool:
        if not self._stack:
            return True
        # Вложенный вход только из открытого delegate окна текущего владельца
        return self._delegated_by is self._stack[-1]

    @contextmanager
    def acquire(self, entry_point: str) -> Iterator[GuardScope]:
        """Захват guard'а на время операции.

        Raises:
            ReentrancyError: guard уже захвачен без delegate окна
        """
        if not self._can_enter():
            active = self.active_entry_point or "?"
            logger.warning("reentrancy rejected: %s during %s", entry_point, active)
            raise ReentrancyError(entry_point, active)

        scope = GuardScope(self, entry_point)
        self._stack.append(scope)
        try:
            yield scope
        finally:
            self._stack.pop()
