"""BaseAsset — in-memory учёт базового актива, которым обеспечен vault.

Получатель может зарегистрировать receive hook: внешний код, который
вызывается во время перевода (аналог передачи управления получателю при
выплате). Если hook поднимает исключение, перевод откатывается и
поднимается AssetTransferError.
"""

import logging
from typing import Callable, Optional

from accrual_vault.core.errors import AssetTransferError
from accrual_vault.core.math.fixed_point import validate_non_negative_int

logger = logging.getLogger(__name__)

ReceiveHook = Callable[[str, int], None]


class BaseAsset:
    """Балансы базового актива по identity."""

    def __init__(self, symbol: str = "BASE", balances: Optional[dict[str, int]] = None):
        self.symbol = symbol
        self._balances: dict[str, int] = {}
        self._hooks: dict[str, ReceiveHook] = {}
        for holder, amount in (balances or {}).items():
            self.credit(holder, amount)

    def balance_of(self, holder: str) -> int:
        return self._balances.get(holder, 0)

    def total_supply(self) -> int:
        return sum(self._balances.values())

    def credit(self, holder: str, amount: int) -> None:
        """Зачисление актива извне системы (faucet / начальное распределение)."""
        validate_non_negative_int(amount, "amount")
        self._balances[holder] = self.balance_of(holder) + amount

    def register_receive_hook(self, holder: str, hook: ReceiveHook) -> None:
        self._hooks[holder] = hook

    def remove_receive_hook(self, holder: str) -> None:
        self._hooks.pop(holder, None)

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        """Перевод amount от sender к recipient, затем receive hook получателя.

        Raises:
            AssetTransferError: недостаточно средств или hook получателя упал
        """
        validate_non_negative_int(amount, "amount")
        available = self.balance_of(sender)
        if available < amount:
            raise AssetTransferError(
                f"{self.symbol}: {sender!r} has {available}, cannot send {amount}"
            )

        snapshot = dict(self._balances)
        self._balances[sender] = available - amount
        self._balances[recipient] = self.balance_of(recipient) + amount

        hook = self._hooks.get(recipient)
        if hook is None:
            return
        try:
            hook(sender, amount)
        except Exception as exc:
            self._balances = snapshot
            logger.warning("%s: receive hook of %s failed: %s", self.symbol, recipient, exc)
            raise AssetTransferError(
                f"{self.symbol}: receive hook of {recipient!r} rejected {amount}"
            ) from exc

    def checkpoint(self) -> dict[str, int]:
        return dict(self._balances)

    def rollback(self, balances: dict[str, int]) -> None:
        self._balances = dict(balances)
