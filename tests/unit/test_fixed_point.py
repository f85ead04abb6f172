"""
Тесты для Fixed-Point Accrual Math

Проверяемые инварианты:
1. multiplier ≥ PRECISION
2. virtual_balance ≥ nominal_balance, floor-округление
3. Неинициализированный аккаунт / нулевой баланс не растут
4. Монотонность начисления по времени
5. Только int на входе
"""

import pytest

from accrual_vault.core.math import (
    DEFAULT_INTEREST_RATE,
    MAX_RATE,
    MIN_RATE,
    PRECISION,
    SECONDS_PER_YEAR,
    accrual_multiplier,
    elapsed_seconds,
    pending_interest,
    rate_to_apr,
    validate_int,
    validate_non_negative_int,
    virtual_balance,
)

RATE = 6 * 10**10
THIRTY_DAYS = 2_592_000


# =============================================================================
# ТЕСТЫ: Константы
# =============================================================================


class TestConstants:
    """Согласованность fixed-point констант."""

    def test_precision_is_1e18(self):
        assert PRECISION == 10**18

    def test_default_rate_within_bounds(self):
        assert MIN_RATE <= DEFAULT_INTEREST_RATE <= MAX_RATE


# =============================================================================
# ТЕСТЫ: Multiplier
# =============================================================================


class TestAccrualMultiplier:
    """Тесты accrual_multiplier."""

    def test_zero_rate_is_identity(self):
        assert accrual_multiplier(0, 1_000_000) == PRECISION

    def test_zero_elapsed_is_identity(self):
        assert accrual_multiplier(RATE, 0) == PRECISION

    def test_linear_in_time(self):
        """multiplier = PRECISION + rate × elapsed."""
        assert accrual_multiplier(RATE, THIRTY_DAYS) == 1_155_520_000_000_000_000
        m1 = accrual_multiplier(RATE, 100) - PRECISION
        m2 = accrual_multiplier(RATE, 200) - PRECISION
        assert m2 == 2 * m1

    def test_custom_precision(self):
        assert accrual_multiplier(5, 10, precision=1000) == 1050

    def test_negative_inputs_rejected(self):
        with pytest.raises(ValueError):
            accrual_multiplier(-1, 10)
        with pytest.raises(ValueError):
            accrual_multiplier(1, -10)


# =============================================================================
# ТЕСТЫ: Virtual Balance
# =============================================================================


class TestVirtualBalance:
    """Тесты virtual_balance и pending_interest."""

    def test_thirty_days_at_fixed_rate(self):
        """10 единиц, 30 дней при 6e10 → 10 + 10 × 6e10 × 2592000 / 1e18."""
        nominal = 10 * PRECISION
        expected = nominal + nominal * RATE * THIRTY_DAYS // PRECISION
        assert virtual_balance(nominal, RATE, 0, THIRTY_DAYS) == expected
        assert expected == 11_555_200_000_000_000_000

    def test_uninitialized_account_does_not_grow(self):
        assert virtual_balance(500, RATE, None, 10**9) == 500

    def test_zero_nominal_stays_zero(self):
        assert virtual_balance(0, RATE, 0, 10**9) == 0

    def test_floor_rounding(self):
        """3 × 1.1 = 3.3 → 3 (floor)."""
        assert virtual_balance(3, 10**17, 0, 1) == 3

    def test_never_below_nominal(self):
        for nominal in (1, 7, 10**6, 10**20):
            for elapsed in (0, 1, 59, THIRTY_DAYS):
                assert virtual_balance(nominal, RATE, 0, elapsed) >= nominal

    def test_non_decreasing_over_time(self):
        nominal = 123_456_789 * PRECISION
        balances = [virtual_balance(nominal, RATE, 1000, 1000 + t) for t in range(0, 100_000, 997)]
        assert balances == sorted(balances)

    def test_pending_interest(self):
        nominal = 10 * PRECISION
        assert pending_interest(nominal, RATE, 0, THIRTY_DAYS) == 1_555_200_000_000_000_000
        assert pending_interest(nominal, RATE, None, THIRTY_DAYS) == 0

    def test_clock_backwards_rejected(self):
        with pytest.raises(ValueError, match="backwards"):
            virtual_balance(10, RATE, 100, 50)


# =============================================================================
# ТЕСТЫ: Утилиты и валидация
# =============================================================================


class TestHelpers:
    """Тесты elapsed_seconds, rate_to_apr и валидаторов."""

    def test_elapsed_seconds(self):
        assert elapsed_seconds(100, 40) == 60
        assert elapsed_seconds(100, None) == 0
        assert elapsed_seconds(100, 100) == 0

    def test_rate_to_apr(self):
        assert rate_to_apr(0) == 0.0
        assert rate_to_apr(PRECISION // SECONDS_PER_YEAR) == pytest.approx(1.0, rel=1e-9)

    def test_validate_int_rejects_float_and_bool(self):
        with pytest.raises(TypeError):
            validate_int(1.5)
        with pytest.raises(TypeError):
            validate_int(True)
        assert validate_int(7) == 7

    def test_validate_non_negative_int(self):
        assert validate_non_negative_int(0) == 0
        with pytest.raises(ValueError, match="non-negative"):
            validate_non_negative_int(-1, "amount")
