"""
Тесты для доменных моделей: Account, LedgerState, VaultState, события

Проверяет:
1. Создание и валидацию моделей Pydantic
2. Lifecycle аккаунта (UNINITIALIZED → ACTIVE)
3. Immutability (frozen=True)
4. Сериализацию в persisted layout
5. EventLog: порядок, фильтрация, усечение
6. Адреса и sentinel ALL
"""

import pytest
from pydantic import ValidationError

from accrual_vault.core.domain import (
    ALL,
    ZERO_ADDRESS,
    Account,
    AmountSentinel,
    Burned,
    EventLog,
    InterestSettled,
    LedgerState,
    Minted,
    VaultState,
    is_valid_address,
)
from accrual_vault.core.math import PRECISION

RATE = 6 * 10**10


# =============================================================================
# ACCOUNT TESTS
# =============================================================================


class TestAccount:
    """Тесты для модели Account"""

    def test_default_is_uninitialized(self):
        account = Account()

        assert account.nominal_balance == 0
        assert account.interest_rate == 0
        assert account.last_settlement_time is None
        assert not account.is_initialized

    def test_uninitialized_does_not_accrue(self):
        account = Account(nominal_balance=10 * PRECISION, interest_rate=RATE)
        assert account.virtual_balance(10**9) == 10 * PRECISION

    def test_virtual_balance(self):
        account = Account(nominal_balance=10 * PRECISION, interest_rate=RATE, last_settlement_time=0)

        assert account.is_initialized
        assert account.virtual_balance(2_592_000) == 11_555_200_000_000_000_000

    def test_negative_balance_rejected(self):
        with pytest.raises(ValidationError):
            Account(nominal_balance=-1)

    def test_negative_rate_rejected(self):
        with pytest.raises(ValidationError):
            Account(interest_rate=-1)

    def test_immutability(self):
        account = Account()
        with pytest.raises(ValidationError):
            account.nominal_balance = 5

    def test_model_copy_update(self):
        account = Account(nominal_balance=5, interest_rate=RATE, last_settlement_time=10)
        updated = account.model_copy(update={"nominal_balance": 7})

        assert updated.nominal_balance == 7
        assert updated.interest_rate == RATE
        assert account.nominal_balance == 5


# =============================================================================
# LEDGER STATE TESTS
# =============================================================================


class TestLedgerState:
    """Тесты для модели LedgerState"""

    @pytest.fixture
    def state(self) -> LedgerState:
        return LedgerState(
            accounts={
                "alice": Account(nominal_balance=30, interest_rate=RATE, last_settlement_time=100),
                "bob": Account(nominal_balance=12),
            },
            total_nominal_supply=42,
            global_interest_rate=RATE,
            allowances={"alice": {"carol": 5}},
        )

    def test_account_lookup(self, state):
        assert state.account("alice").nominal_balance == 30
        assert state.account("nobody") == Account()

    def test_allowance_lookup(self, state):
        assert state.allowance("alice", "carol") == 5
        assert state.allowance("alice", "bob") == 0
        assert state.allowance("bob", "alice") == 0

    def test_nominal_sum(self, state):
        assert state.nominal_sum() == state.total_nominal_supply == 42

    def test_global_rate_required(self):
        with pytest.raises(ValidationError):
            LedgerState()

    def test_serialization_layout(self, state):
        data = state.model_dump(mode="json")

        assert set(data) == {"accounts", "total_nominal_supply", "global_interest_rate", "allowances"}
        assert data["accounts"]["bob"] == {
            "nominal_balance": 12,
            "interest_rate": 0,
            "last_settlement_time": None,
        }
        assert LedgerState.model_validate(data) == state

    def test_immutability(self, state):
        with pytest.raises(ValidationError):
            state.total_nominal_supply = 0


class TestVaultState:
    """Тесты для модели VaultState"""

    def test_default(self):
        assert VaultState().total_liability == 0

    def test_negative_liability_rejected(self):
        with pytest.raises(ValidationError):
            VaultState(total_liability=-1)


# =============================================================================
# EVENTS
# =============================================================================


class TestEventLog:
    """Тесты EventLog и событий"""

    def test_emit_and_filter(self):
        log = EventLog()
        log.emit(Minted(to="alice", amount=5, caller="minter"))
        log.emit(Burned(from_account="alice", amount=2, caller="minter"))
        log.emit(Minted(to="bob", amount=1, caller="minter"))

        assert len(log) == 3
        assert [e.to for e in log.of_type(Minted)] == ["alice", "bob"]
        assert log.last(Burned).amount == 2
        assert log.last().to == "bob"
        assert log.last(InterestSettled) is None

    def test_mark_and_truncate(self):
        log = EventLog()
        log.emit(Minted(to="alice", amount=5, caller="minter"))
        mark = log.mark()
        log.emit(Burned(from_account="alice", amount=2, caller="minter"))

        log.truncate(mark)

        assert list(log) == [Minted(to="alice", amount=5, caller="minter")]

    def test_drain_empties_log(self):
        log = EventLog()
        log.emit(Minted(to="alice", amount=5, caller="minter"))
        log.emit(Burned(from_account="alice", amount=2, caller="minter"))

        drained = log.drain()

        assert [e.event_type for e in drained] == ["minted", "burned"]
        assert len(log) == 0
        assert log.mark() == 0
        log.emit(Minted(to="bob", amount=1, caller="minter"))
        assert log.last().to == "bob"

    def test_to_record(self):
        record = Burned(from_account="alice", amount=2, caller="minter").to_record()
        assert record == {
            "event_type": "burned",
            "from_account": "alice",
            "amount": 2,
            "caller": "minter",
        }

    def test_zero_amount_event_rejected(self):
        with pytest.raises(ValidationError):
            Minted(to="alice", amount=0, caller="minter")


# =============================================================================
# ADDRESSES / SENTINEL
# =============================================================================


class TestAddressesAndSentinel:
    """Тесты адресов и ALL"""

    @pytest.mark.parametrize("address", ["", ZERO_ADDRESS, None])
    def test_invalid_addresses(self, address):
        assert not is_valid_address(address)

    def test_valid_address(self):
        assert is_valid_address("alice")
        assert is_valid_address("0x" + "0" * 39 + "1")

    def test_all_sentinel(self):
        assert ALL is AmountSentinel.ALL
        assert ALL == "ALL"
        assert ALL != 0
