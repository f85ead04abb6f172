"""InterestLedger — ledger с ленивым линейным начислением процентов.

Каждый аккаунт хранит nominal balance, закреплённую ставку и timestamp
последнего settlement. Virtual balance восстанавливается на лету:

    virtual = nominal × (PRECISION + rate × (now - last_settlement_time)) // PRECISION

Settlement материализует virtual balance в nominal balance (и в
total_nominal_supply) перед любой операцией, меняющей баланс аккаунта.

Операции:
- mint(caller, to, amount): settle(to) → rate pin → +nominal
- burn(caller, from, amount|ALL): settle(from) → -nominal (ставка не меняется)
- transfer(sender, recipient, amount|ALL): settle обеих сторон (если > 0 или
  получатель инициализирован) → перенос
- transfer_from / approve: то же через allowance
- settle(account): материализация процентов
- set_global_rate(caller, rate): только снижение, в пределах [MIN_RATE, MAX_RATE]

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. total_nominal_supply == Σ nominal_balance
2. virtual_balance ≥ nominal_balance
3. Каждая операция либо коммитится целиком, либо не меняет ничего
   (изменения собираются в черновике и заменяют LedgerState одним присваиванием)
4. Settlement — один проход без вызова mint, рекурсия невозможна

Получатель transfer с нулевым балансом не получает ставку: его баланс не
растёт, пока ему отдельно не будет выполнен mint. Опустошённый аккаунт
сохраняет прежнюю ставку, но его timestamp сдвигается к моменту transfer.
"""

import logging
from typing import Any, Optional, Union

from accrual_vault.config import LedgerConfig
from accrual_vault.core.clock import Clock, SystemClock
from accrual_vault.core.contracts import validate_ledger_state
from accrual_vault.core.domain.account import (
    Account,
    AmountSentinel,
    LedgerState,
    is_valid_address,
)
from accrual_vault.core.domain.events import (
    Approved,
    Burned,
    EventLog,
    InterestSettled,
    LedgerEvent,
    Minted,
    RateChanged,
    Transferred,
)
from accrual_vault.core.errors import (
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InvalidAddressError,
    ZeroAmountError,
)
from accrual_vault.core.math.fixed_point import validate_int, validate_non_negative_int
from accrual_vault.gatekeeper.capability_gate import (
    Capability,
    CapabilityGate,
    CapabilityGatekeeper,
)
from accrual_vault.gatekeeper.reentrancy import ReentrancyGuard
from accrual_vault.ledger.rate_governor import RateGovernor

logger = logging.getLogger(__name__)

Amount = Union[int, AmountSentinel]


# =============================================================================
# DRAFT
# =============================================================================


class _Draft:
    """Изменения одной операции поверх LedgerState.

    Хранит только затронутые аккаунты и allowances; commit сливает их в
    новый снапшот, остальные записи переходят в него без изменений.
    """

    def __init__(self, state: LedgerState):
        self._base = state
        self.accounts: dict[str, Account] = {}
        self.total_nominal_supply = state.total_nominal_supply
        self.global_interest_rate = state.global_interest_rate
        self.allowances: dict[str, dict[str, int]] = {}
        self.events: list[LedgerEvent] = []

    def account(self, identity: str) -> Account:
        if identity in self.accounts:
            return self.accounts[identity]
        return self._base.account(identity)

    def put(self, identity: str, account: Account) -> None:
        self.accounts[identity] = account

    def set_allowance(self, owner: str, spender: str, amount: int) -> None:
        if owner not in self.allowances:
            self.allowances[owner] = dict(self._base.allowances.get(owner, {}))
        self.allowances[owner][spender] = amount

    def to_state(self) -> LedgerState:
        accounts = self._base.accounts
        if self.accounts:
            accounts = {**accounts, **self.accounts}
        allowances = self._base.allowances
        if self.allowances:
            allowances = {**allowances, **self.allowances}
        # Записи уже прошли валидацию при создании
        return LedgerState.model_construct(
            accounts=accounts,
            total_nominal_supply=self.total_nominal_supply,
            global_interest_rate=self.global_interest_rate,
            allowances=allowances,
        )


# =============================================================================
# INTEREST LEDGER
# =============================================================================


class InterestLedger:
    """Ledger с ленивым начислением процентов.

    Зависимости инжектируются: CapabilityGate (авторизация и пауза),
    Clock (текущее время), ReentrancyGuard (общий с vault), EventLog.
    """

    def __init__(
        self,
        gate: CapabilityGate,
        clock: Optional[Clock] = None,
        config: Optional[LedgerConfig] = None,
        guard: Optional[ReentrancyGuard] = None,
        events: Optional[EventLog] = None,
        state: Optional[LedgerState] = None,
    ):
        self.config = config or LedgerConfig()
        self.rate_governor = RateGovernor(self.config)
        self.events = events if events is not None else EventLog()
        self._gatekeeper = CapabilityGatekeeper(gate)
        self._clock = clock or SystemClock()
        self._guard = guard or ReentrancyGuard()

        if state is None:
            state = LedgerState(global_interest_rate=self.config.initial_rate)
        self.rate_governor.check_bounds(state.global_interest_rate)
        self._check_conservation(state)
        self._state = state

    # -------------------------------------------------------------------------
    # Read path
    # -------------------------------------------------------------------------

    @property
    def state(self) -> LedgerState:
        return self._state

    @property
    def guard(self) -> ReentrancyGuard:
        return self._guard

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def global_interest_rate(self) -> int:
        return self._state.global_interest_rate

    @property
    def total_nominal_supply(self) -> int:
        return self._state.total_nominal_supply

    def balance_of(self, account: str) -> int:
        """Virtual balance: nominal + начисленные, но не урегулированные проценты."""
        return self._state.account(account).virtual_balance(
            self._clock.now(), self.config.precision
        )

    def principal_balance_of(self, account: str) -> int:
        """Nominal balance (без неурегулированных процентов)."""
        return self._state.account(account).nominal_balance

    def pending_interest_of(self, account: str) -> int:
        return self.balance_of(account) - self.principal_balance_of(account)

    def interest_rate_of(self, account: str) -> int:
        return self._state.account(account).interest_rate

    def last_settlement_time_of(self, account: str) -> Optional[int]:
        return self._state.account(account).last_settlement_time

    def allowance(self, owner: str, spender: str) -> int:
        return self._state.allowance(owner, spender)

    def accounts(self) -> dict[str, Account]:
        return dict(self._state.accounts)

    def accrued_total_supply(self) -> int:
        """Σ virtual balance по всем аккаунтам."""
        now = self._clock.now()
        return sum(
            acc.virtual_balance(now, self.config.precision)
            for acc in self._state.accounts.values()
        )

    def check_conservation(self) -> bool:
        """total_nominal_supply == Σ nominal_balance."""
        return self._state.total_nominal_supply == self._state.nominal_sum()

    # -------------------------------------------------------------------------
    # Ledger operations
    # -------------------------------------------------------------------------

    def settle(self, account: str) -> int:
        """Материализация начисленных процентов аккаунта.

        Неинициализированный аккаунт только получает timestamp.

        Returns:
            Сумма материализованных процентов (0 если ничего не начислено)
        """
        with self._guard.acquire("settle"):
            self._require_address("settle", account)
            draft = _Draft(self._state)
            interest = self._settle(draft, account, self._clock.now())
            self._commit(draft)
        return interest

    def mint(self, caller: str, to: str, amount: int) -> None:
        """Выпуск amount единиц на аккаунт to.

        Сначала settle(to): начисленные проценты фиксируются до того, как
        ставка будет перезакреплена на текущую глобальную. Новая ставка
        не применяется ретроактивно.

        Raises:
            UnauthorizedError: caller без MINT_BURN
            PausedError: система на паузе
            InvalidAddressError: to невалиден
            ZeroAmountError: amount == 0
        """
        with self._guard.acquire("mint"):
            self._gatekeeper.require("mint", caller, Capability.MINT_BURN)
            self._require_address("mint", to)
            self._require_amount("mint", amount)

            now = self._clock.now()
            draft = _Draft(self._state)
            self._settle(draft, to, now)

            account = draft.account(to)
            draft.put(
                to,
                account.model_copy(
                    update={
                        "nominal_balance": account.nominal_balance + amount,
                        "interest_rate": draft.global_interest_rate,
                    }
                ),
            )
            draft.total_nominal_supply += amount
            draft.events.append(Minted(to=to, amount=amount, caller=caller))
            self._commit(draft)

        logger.info("minted %d to %s (rate=%d) by %s", amount, to, draft.global_interest_rate, caller)

    def burn(self, caller: str, from_account: str, amount: Amount) -> int:
        """Сжигание amount единиц с аккаунта from_account.

        ALL разрешается в текущий virtual balance. Settlement выполняется
        до проверки баланса, поэтому начисленные проценты доступны для burn.
        Ставка аккаунта не меняется.

        Returns:
            Фактически сожжённая сумма

        Raises:
            UnauthorizedError, PausedError, InvalidAddressError, ZeroAmountError
            InsufficientBalanceError: nominal balance после settlement < amount
        """
        with self._guard.acquire("burn"):
            self._gatekeeper.require("burn", caller, Capability.MINT_BURN)
            self._require_address("burn", from_account)
            amount = self._resolve_amount(from_account, amount)
            self._require_amount("burn", amount)

            draft = _Draft(self._state)
            self._settle(draft, from_account, self._clock.now())

            account = draft.account(from_account)
            if account.nominal_balance < amount:
                raise InsufficientBalanceError(amount, account.nominal_balance)

            draft.put(
                from_account,
                account.model_copy(update={"nominal_balance": account.nominal_balance - amount}),
            )
            draft.total_nominal_supply -= amount
            draft.events.append(Burned(from_account=from_account, amount=amount, caller=caller))
            self._commit(draft)

        logger.info("burned %d from %s by %s", amount, from_account, caller)
        return amount

    def transfer(self, sender: str, recipient: str, amount: Amount) -> int:
        """Перенос nominal единиц от sender к recipient.

        Обе стороны урегулируются, если держат > 0; у инициализированного
        recipient с нулевым балансом только сдвигается timestamp. Ставки не
        меняются: recipient с нулевым балансом не получает ставку через transfer.

        Returns:
            Перенесённая сумма

        Raises:
            PausedError, InvalidAddressError, ZeroAmountError
            InsufficientBalanceError: баланс sender < amount
        """
        with self._guard.acquire("transfer"):
            self._gatekeeper.require("transfer", sender)
            self._require_address("transfer", sender)
            self._require_address("transfer", recipient)
            amount = self._resolve_amount(sender, amount)
            self._require_amount("transfer", amount)

            draft = _Draft(self._state)
            self._move(draft, sender, recipient, amount)
            self._commit(draft)

        logger.info("transferred %d from %s to %s", amount, sender, recipient)
        return amount

    def approve(self, owner: str, spender: str, amount: int) -> None:
        """Разрешение spender'у переносить до amount единиц owner'а."""
        with self._guard.acquire("approve"):
            self._gatekeeper.require("approve", owner)
            self._require_address("approve", owner)
            self._require_address("approve", spender)
            validate_non_negative_int(amount, "amount")

            draft = _Draft(self._state)
            draft.set_allowance(owner, spender, amount)
            draft.events.append(Approved(owner=owner, spender=spender, amount=amount))
            self._commit(draft)

        logger.debug("approved %s to spend %d of %s", spender, amount, owner)

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: Amount) -> int:
        """Перенос от owner к recipient за счёт allowance spender'а.

        Raises:
            InsufficientAllowanceError: allowance < amount
            (и ошибки transfer)
        """
        with self._guard.acquire("transfer_from"):
            self._gatekeeper.require("transfer_from", spender)
            self._require_address("transfer_from", owner)
            self._require_address("transfer_from", recipient)
            amount = self._resolve_amount(owner, amount)
            self._require_amount("transfer_from", amount)

            allowed = self._state.allowance(owner, spender)
            if allowed < amount:
                raise InsufficientAllowanceError(amount, allowed)

            draft = _Draft(self._state)
            self._move(draft, owner, recipient, amount)
            draft.set_allowance(owner, spender, allowed - amount)
            self._commit(draft)

        logger.info("transferred %d from %s to %s via %s", amount, owner, recipient, spender)
        return amount

    def set_global_rate(self, caller: str, new_rate: int) -> None:
        """Изменение глобальной ставки (только administrator, только снижение).

        Уже закреплённые ставки аккаунтов не меняются; новая ставка
        применяется при следующем mint.

        Raises:
            UnauthorizedError: caller не administrator
            RateIncreaseError: new_rate > текущей
            RateOutOfBoundsError: new_rate вне [min_rate, max_rate]
        """
        with self._guard.acquire("set_global_rate"):
            self._gatekeeper.require(
                "set_global_rate", caller, Capability.ADMINISTRATOR, check_pause=False
            )
            old_rate = self._state.global_interest_rate
            self.rate_governor.check_change(old_rate, new_rate)

            now = self._clock.now()
            draft = _Draft(self._state)
            draft.global_interest_rate = new_rate
            draft.events.append(
                RateChanged(old_rate=old_rate, new_rate=new_rate, caller=caller, timestamp=now)
            )
            self._commit(draft)
            self.rate_governor.record(old_rate, new_rate, caller, now)

    # -------------------------------------------------------------------------
    # Checkpoint / persistence
    # -------------------------------------------------------------------------

    def checkpoint(self) -> LedgerState:
        """Снапшот для отката составной операции (vault)."""
        return self._state

    def rollback(self, state: LedgerState) -> None:
        """Восстановление снапшота, полученного из checkpoint().

        Raises:
            ValueError: в снапшоте нарушен conservation инвариант
        """
        self._check_conservation(state)
        logger.debug("ledger rolled back")
        self._state = state

    def export_state(self) -> dict[str, Any]:
        """Persisted layout ledger (JSON-совместимый dict, проверенный схемой)."""
        data = self._state.model_dump(mode="json")
        validate_ledger_state(data)
        return data

    @classmethod
    def from_state(
        cls,
        data: dict[str, Any],
        gate: CapabilityGate,
        clock: Optional[Clock] = None,
        config: Optional[LedgerConfig] = None,
        guard: Optional[ReentrancyGuard] = None,
        events: Optional[EventLog] = None,
    ) -> "InterestLedger":
        """Восстановление ledger из persisted layout.

        Raises:
            jsonschema.ValidationError: данные не соответствуют ledger_state.json
            ValueError: нарушен conservation инвариант
            RateOutOfBoundsError: ставка вне границ конфигурации
        """
        validate_ledger_state(data)
        state = LedgerState.model_validate(data)
        return cls(gate, clock=clock, config=config, guard=guard, events=events, state=state)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _settle(self, draft: _Draft, identity: str, now: int) -> int:
        """Один проход settlement в черновике. Mint path не используется."""
        account = draft.account(identity)
        if not account.is_initialized:
            draft.put(identity, account.model_copy(update={"last_settlement_time": now}))
            return 0

        virtual = account.virtual_balance(now, self.config.precision)
        interest = virtual - account.nominal_balance
        if interest > 0:
            draft.total_nominal_supply += interest
            draft.events.append(
                InterestSettled(
                    account=identity, amount=interest, new_balance=virtual, timestamp=now
                )
            )
            logger.debug("settled %d interest for %s", interest, identity)

        draft.put(
            identity,
            account.model_copy(update={"nominal_balance": virtual, "last_settlement_time": now}),
        )
        return interest

    def _move(self, draft: _Draft, sender: str, recipient: str, amount: int) -> None:
        now = self._clock.now()
        if draft.account(sender).nominal_balance > 0:
            self._settle(draft, sender, now)
        target = draft.account(recipient)
        # Опустошённый аккаунт начинает отсчёт заново: пришедшие единицы не
        # получают проценты за время, когда баланс был нулевым
        if target.nominal_balance > 0 or target.is_initialized:
            self._settle(draft, recipient, now)

        source = draft.account(sender)
        if source.nominal_balance < amount:
            raise InsufficientBalanceError(amount, source.nominal_balance)
        draft.put(sender, source.model_copy(update={"nominal_balance": source.nominal_balance - amount}))

        target = draft.account(recipient)
        draft.put(recipient, target.model_copy(update={"nominal_balance": target.nominal_balance + amount}))
        draft.events.append(Transferred(sender=sender, recipient=recipient, amount=amount))

    @staticmethod
    def _check_conservation(state: LedgerState) -> None:
        total = state.nominal_sum()
        if total != state.total_nominal_supply:
            raise ValueError(
                f"total_nominal_supply={state.total_nominal_supply} != Σ nominal_balance={total}"
            )

    def _commit(self, draft: _Draft) -> None:
        self._state = draft.to_state()
        for event in draft.events:
            self.events.emit(event)

    def _resolve_amount(self, account: str, amount: Amount) -> int:
        if amount == AmountSentinel.ALL:
            return self.balance_of(account)
        return validate_int(amount, "amount")

    @staticmethod
    def _require_amount(operation: str, amount: int) -> None:
        validate_int(amount, "amount")
        if amount <= 0:
            raise ZeroAmountError(operation)

    @staticmethod
    def _require_address(operation: str, address: Optional[str]) -> None:
        if not is_valid_address(address):
            raise InvalidAddressError(operation, address)
