"""Конфигурация ledger и vault.

Frozen dataclasses с проверкой границ в __post_init__. Загрузка из окружения
и bootstrap-последовательность — ответственность вызывающей стороны.
"""

from dataclasses import dataclass

from accrual_vault.core.math.fixed_point import (
    DEFAULT_INTEREST_RATE,
    MAX_RATE,
    MIN_RATE,
    PRECISION,
)


@dataclass(frozen=True)
class LedgerConfig:
    """Конфигурация InterestLedger / RateGovernor.

    - initial_rate: стартовая глобальная ставка (за секунду, масштаб precision)
    - min_rate / max_rate: допустимый диапазон ставки
    - precision: fixed-point масштаб
    """

    initial_rate: int = DEFAULT_INTEREST_RATE
    min_rate: int = MIN_RATE
    max_rate: int = MAX_RATE
    precision: int = PRECISION

    def __post_init__(self):
        if self.precision <= 0:
            raise ValueError(f"precision must be positive, got {self.precision}")
        if self.min_rate < 0:
            raise ValueError(f"min_rate must be non-negative, got {self.min_rate}")
        if self.min_rate > self.max_rate:
            raise ValueError(
                f"min_rate={self.min_rate} must not exceed max_rate={self.max_rate}"
            )
        if not self.min_rate <= self.initial_rate <= self.max_rate:
            raise ValueError(
                f"initial_rate={self.initial_rate} outside "
                f"[{self.min_rate}, {self.max_rate}]"
            )


@dataclass(frozen=True)
class VaultConfig:
    """Конфигурация Vault.

    address — identity vault: держит резерв base asset и получает
    mint/burn capability в ledger.
    """

    address: str = "vault"

    def __post_init__(self):
        if not self.address:
            raise ValueError("vault address must be non-empty")
