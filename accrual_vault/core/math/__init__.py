"""
Core math modules для accrual-vault

Целочисленная fixed-point арифметика линейного начисления.
"""

# Fixed-point accrual
from accrual_vault.core.math.fixed_point import (
    # Constants
    DEFAULT_INTEREST_RATE,
    MAX_RATE,
    MIN_RATE,
    PRECISION,
    SECONDS_PER_YEAR,
    # Accrual
    accrual_multiplier,
    elapsed_seconds,
    pending_interest,
    rate_to_apr,
    virtual_balance,
    # Validation
    validate_int,
    validate_non_negative_int,
)

__all__ = [
    # Fixed-point: Constants
    "DEFAULT_INTEREST_RATE",
    "MAX_RATE",
    "MIN_RATE",
    "PRECISION",
    "SECONDS_PER_YEAR",
    # Fixed-point: Accrual
    "accrual_multiplier",
    "elapsed_seconds",
    "pending_interest",
    "rate_to_apr",
    "virtual_balance",
    # Fixed-point: Validation
    "validate_int",
    "validate_non_negative_int",
]
