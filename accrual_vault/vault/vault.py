"""Vault — обмен базового актива на единицы ledger 1:1 и обратно.

Порядок проверок redeem:
1. Reentrancy guard (общий с ledger)
2. Pause flag
3. ALL → текущий virtual balance caller'а
4. amount > 0
5. balance_of(caller) ≥ amount   → InsufficientTokenBalanceError(requested, available)
6. reserve ≥ amount              → InsufficientReserveError(requested, available)
7. Effects: liability -= min(liability, amount); ledger.burn
8. Interaction: выплата базового актива (после закрытия delegate окна guard'а)

Burn выполняется до выплаты: внешний код получателя видит уже
финализированный ledger и не может повторно войти ни в одну guarded точку.
Любая ошибка откатывает ledger, vault, базовый актив и журнал событий.

total_liability — приближение обязательств (principal без процентов).
Проценты пре-фондируются через deposit_rewards; reserve ≥ liability +
проценты не является инвариантом.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from accrual_vault.config import VaultConfig
from accrual_vault.core.contracts import validate_vault_state
from accrual_vault.core.domain.account import AmountSentinel, is_valid_address
from accrual_vault.core.domain.events import (
    Deposited,
    EventLog,
    ExcessWithdrawn,
    Redeemed,
    RewardsDeposited,
)
from accrual_vault.core.domain.vault_state import VaultState
from accrual_vault.core.errors import (
    AssetTransferError,
    ExcessExceededError,
    InsufficientReserveError,
    InsufficientTokenBalanceError,
    InvalidAddressError,
    PayoutFailedError,
    ZeroAmountError,
)
from accrual_vault.core.math.fixed_point import validate_int
from accrual_vault.gatekeeper.capability_gate import (
    Capability,
    CapabilityGate,
    CapabilityGatekeeper,
)
from accrual_vault.ledger.interest_ledger import Amount, InterestLedger
from accrual_vault.vault.base_asset import BaseAsset

logger = logging.getLogger(__name__)


class Vault:
    """Collateral vault поверх InterestLedger.

    Vault должен обладать MINT_BURN capability в ledger (по своему address).
    """

    def __init__(
        self,
        ledger: InterestLedger,
        asset: BaseAsset,
        gate: CapabilityGate,
        config: Optional[VaultConfig] = None,
        state: Optional[VaultState] = None,
    ):
        self.config = config or VaultConfig()
        self._ledger = ledger
        self._asset = asset
        self._gatekeeper = CapabilityGatekeeper(gate)
        self._guard = ledger.guard
        self._clock = ledger.clock
        self._state = state or VaultState()

    # -------------------------------------------------------------------------
    # Read path
    # -------------------------------------------------------------------------

    @property
    def address(self) -> str:
        return self.config.address

    @property
    def ledger(self) -> InterestLedger:
        return self._ledger

    @property
    def asset(self) -> BaseAsset:
        return self._asset

    @property
    def events(self) -> EventLog:
        return self._ledger.events

    @property
    def state(self) -> VaultState:
        return self._state

    @property
    def total_liability(self) -> int:
        return self._state.total_liability

    def reserve(self) -> int:
        """Фактический баланс базового актива на адресе vault."""
        return self._asset.balance_of(self.address)

    def get_excess_funds(self) -> int:
        """max(0, reserve - total_liability)."""
        return max(0, self.reserve() - self._state.total_liability)

    def is_fully_collateralized(self) -> bool:
        return self.reserve() >= self._state.total_liability

    def preview_deposit(self, amount: int) -> int:
        """Единицы ledger за amount базового актива (курс 1:1)."""
        return validate_int(amount, "amount")

    def preview_redeem(self, amount: int) -> int:
        """Базовый актив за amount единиц ledger (курс 1:1)."""
        return validate_int(amount, "amount")

    # -------------------------------------------------------------------------
    # User operations
    # -------------------------------------------------------------------------

    def deposit(self, caller: str, amount: int) -> int:
        """Депозит базового актива, mint единиц ledger 1:1.

        Returns:
            Выпущенные единицы ledger

        Raises:
            PausedError, InvalidAddressError, ZeroAmountError
            AssetTransferError: у caller недостаточно базового актива
        """
        with self._guard.acquire("deposit") as scope:
            self._gatekeeper.require("deposit", caller)
            self._require_address("deposit", caller)
            self._require_amount("deposit", amount)

            units = self.preview_deposit(amount)
            with self._atomic():
                self._asset.transfer(caller, self.address, amount)
                self._state = VaultState(total_liability=self._state.total_liability + amount)
                with scope.delegate():
                    self._ledger.mint(self.address, caller, units)
                self.events.emit(
                    Deposited(user=caller, asset_in=amount, units_out=units, timestamp=self._clock.now())
                )

        logger.info("deposit: %s deposited %d, liability=%d", caller, amount, self.total_liability)
        return units

    def redeem(self, caller: str, amount: Amount) -> int:
        """Обмен единиц ledger на базовый актив 1:1.

        ALL разрешается в текущий virtual balance caller'а.

        Returns:
            Выплаченный базовый актив

        Raises:
            PausedError, InvalidAddressError, ZeroAmountError
            InsufficientTokenBalanceError: balance_of(caller) < amount
            InsufficientReserveError: reserve < amount
            PayoutFailedError: выплата не удалась (операция откатывается)
        """
        with self._guard.acquire("redeem") as scope:
            self._gatekeeper.require("redeem", caller)
            self._require_address("redeem", caller)

            available = self._ledger.balance_of(caller)
            if amount == AmountSentinel.ALL:
                amount = available
            self._require_amount("redeem", amount)

            if available < amount:
                raise InsufficientTokenBalanceError(amount, available)

            reserve = self.reserve()
            if reserve < amount:
                logger.warning(
                    "redeem rejected: %s requested %d, reserve %d", caller, amount, reserve
                )
                raise InsufficientReserveError(amount, reserve)

            payout = self.preview_redeem(amount)
            with self._atomic():
                liability = self._state.total_liability
                self._state = VaultState(total_liability=liability - min(liability, amount))
                with scope.delegate():
                    self._ledger.burn(self.address, caller, amount)
                self._pay(caller, payout)
                self.events.emit(
                    Redeemed(user=caller, units_in=amount, asset_out=payout, timestamp=self._clock.now())
                )

        logger.info("redeem: %s redeemed %d, liability=%d", caller, amount, self.total_liability)
        return payout

    # -------------------------------------------------------------------------
    # Administrator operations
    # -------------------------------------------------------------------------

    def deposit_rewards(self, caller: str, amount: int) -> None:
        """Пополнение резерва без увеличения liability (пре-фондирование процентов).

        Raises:
            UnauthorizedError, ZeroAmountError, AssetTransferError
        """
        with self._guard.acquire("deposit_rewards"):
            self._gatekeeper.require(
                "deposit_rewards", caller, Capability.ADMINISTRATOR, check_pause=False
            )
            self._require_amount("deposit_rewards", amount)

            with self._atomic():
                self._asset.transfer(caller, self.address, amount)
                self.events.emit(
                    RewardsDeposited(caller=caller, amount=amount, timestamp=self._clock.now())
                )

        logger.info("rewards: %s added %d, reserve=%d", caller, amount, self.reserve())

    def emergency_withdraw_excess(self, caller: str, amount: int) -> None:
        """Вывод излишка резерва (не более reserve - liability) administrator'у.

        Raises:
            UnauthorizedError, ZeroAmountError
            ExcessExceededError: amount > reserve - liability
            PayoutFailedError: выплата не удалась
        """
        with self._guard.acquire("emergency_withdraw_excess"):
            self._gatekeeper.require(
                "emergency_withdraw_excess", caller, Capability.ADMINISTRATOR, check_pause=False
            )
            self._require_amount("emergency_withdraw_excess", amount)

            excess = self.get_excess_funds()
            if amount > excess:
                raise ExcessExceededError(amount, excess)

            with self._atomic():
                self._pay(caller, amount)
                self.events.emit(
                    ExcessWithdrawn(caller=caller, amount=amount, timestamp=self._clock.now())
                )

        logger.warning("excess withdrawn: %d by %s, reserve=%d", amount, caller, self.reserve())

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def export_state(self) -> dict[str, Any]:
        """Persisted layout vault (проверенный vault_state.json)."""
        data = self._state.model_dump(mode="json")
        validate_vault_state(data)
        return data

    @classmethod
    def from_state(
        cls,
        data: dict[str, Any],
        ledger: InterestLedger,
        asset: BaseAsset,
        gate: CapabilityGate,
        config: Optional[VaultConfig] = None,
    ) -> "Vault":
        validate_vault_state(data)
        return cls(ledger, asset, gate, config=config, state=VaultState.model_validate(data))

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @contextmanager
    def _atomic(self) -> Iterator[None]:
        """Откат ledger, vault, базового актива и журнала при любой ошибке."""
        ledger_checkpoint = self._ledger.checkpoint()
        asset_checkpoint = self._asset.checkpoint()
        vault_checkpoint = self._state
        mark = self.events.mark()
        try:
            yield
        except Exception:
            self._ledger.rollback(ledger_checkpoint)
            self._asset.rollback(asset_checkpoint)
            self._state = vault_checkpoint
            self.events.truncate(mark)
            raise

    def _pay(self, recipient: str, amount: int) -> None:
        try:
            self._asset.transfer(self.address, recipient, amount)
        except AssetTransferError as exc:
            logger.warning("payout of %d to %s failed: %s", amount, recipient, exc)
            raise PayoutFailedError(recipient, amount) from exc

    @staticmethod
    def _require_amount(operation: str, amount: int) -> None:
        validate_int(amount, "amount")
        if amount <= 0:
            raise ZeroAmountError(operation)

    @staticmethod
    def _require_address(operation: str, address: Optional[str]) -> None:
        if not is_valid_address(address):
            raise InvalidAddressError(operation, address)
