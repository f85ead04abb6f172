"""
Account / LedgerState — модели состояния ledger

Immutable Pydantic модели. Ledger хранит один LedgerState и заменяет его
целиком при commit операции (model_copy), что даёт all-or-nothing семантику:
промежуточное состояние никогда не становится видимым.

Persisted layout (contracts/schema/ledger_state.json):
- accounts: identity → {nominal_balance, interest_rate, last_settlement_time}
- total_nominal_supply, global_interest_rate
- allowances: owner → spender → amount
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from accrual_vault.core.math.fixed_point import PRECISION, virtual_balance


# =============================================================================
# ACCOUNT
# =============================================================================


class Account(BaseModel):
    """
    Учётная запись держателя.

    Lifecycle: UNINITIALIZED (last_settlement_time=None) → ACTIVE при первом
    settlement. Терминального состояния нет: аккаунт с нулевым балансом
    сохраняет устаревшие ставку и timestamp.
    """

    nominal_balance: int = Field(
        default=0, ge=0, description="Сохранённый баланс без неурегулированных процентов"
    )
    interest_rate: int = Field(
        default=0, ge=0, description="Ставка, закреплённая при последнем mint"
    )
    last_settlement_time: Optional[int] = Field(
        default=None, ge=0, description="Timestamp последнего settlement (None — не инициализирован)"
    )

    model_config = {"frozen": True}

    @property
    def is_initialized(self) -> bool:
        return self.last_settlement_time is not None

    def virtual_balance(self, now: int, precision: int = PRECISION) -> int:
        """Nominal balance + проценты, начисленные к моменту now."""
        return virtual_balance(
            self.nominal_balance,
            self.interest_rate,
            self.last_settlement_time,
            now,
            precision,
        )


# =============================================================================
# LEDGER STATE
# =============================================================================


class LedgerState(BaseModel):
    """
    Снапшот состояния ledger.

    Инвариант: total_nominal_supply == Σ accounts[*].nominal_balance.
    """

    accounts: dict[str, Account] = Field(
        default_factory=dict, description="Таблица аккаунтов по identity"
    )
    total_nominal_supply: int = Field(
        default=0, ge=0, description="Сумма всех nominal balance"
    )
    global_interest_rate: int = Field(..., ge=0, description="Текущая глобальная ставка")
    allowances: dict[str, dict[str, int]] = Field(
        default_factory=dict, description="owner → spender → разрешённая сумма"
    )

    model_config = {"frozen": True}

    def account(self, identity: str) -> Account:
        """Аккаунт по identity (пустой UNINITIALIZED, если не существует)."""
        return self.accounts.get(identity, Account())

    def allowance(self, owner: str, spender: str) -> int:
        return self.allowances.get(owner, {}).get(spender, 0)

    def nominal_sum(self) -> int:
        """Σ nominal_balance по всем аккаунтам (для проверки conservation)."""
        return sum(acc.nominal_balance for acc in self.accounts.values())


# =============================================================================
# ADDRESSES
# =============================================================================

# Нулевой адрес: не может владеть балансом
ZERO_ADDRESS = "0x" + "0" * 40


def is_valid_address(address: Optional[str]) -> bool:
    """Адрес валиден, если это непустая строка и не ZERO_ADDRESS."""
    return isinstance(address, str) and bool(address) and address != ZERO_ADDRESS


class AmountSentinel(str, Enum):
    """Специальные значения суммы.

    ALL — «весь текущий virtual balance», разрешается в момент вызова.
    """

    ALL = "ALL"


ALL = AmountSentinel.ALL
