"""
Fixed-Point Accrual Math — линейное начисление процентов

Модуль обеспечивает целочисленную арифметику для ledger:
- Fixed-point масштаб PRECISION (1e18)
- Multiplier по ставке и прошедшему времени
- Virtual balance из nominal balance и multiplier
- Проверки входных значений (неотрицательность, целочисленность)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Все значения — int (минимальные единицы), float не допускается
2. multiplier ≥ PRECISION (начисление никогда не отрицательно)
3. virtual_balance ≥ nominal_balance
4. Округление — всегда floor (в пользу системы, не держателя)

ФОРМУЛЫ:
    multiplier = PRECISION + rate × elapsed_seconds
    virtual_balance = nominal_balance × multiplier // PRECISION

Начисление линейное (simple interest), без экспоненты. Ошибка относительно
сложного процента растёт с rate × elapsed, но ограничена и воспроизводима.
"""

from typing import Final, Optional

# =============================================================================
# FIXED-POINT ПАРАМЕТРЫ
# =============================================================================

# Масштаб fixed-point: 1.0 == PRECISION
PRECISION: Final[int] = 10**18

# Ставка по умолчанию (за секунду, в масштабе PRECISION)
DEFAULT_INTEREST_RATE: Final[int] = 5 * 10**10

# Границы глобальной ставки
MIN_RATE: Final[int] = 0
MAX_RATE: Final[int] = 10**11

# Секунд в году (для справочных конверсий в APR)
SECONDS_PER_YEAR: Final[int] = 365 * 24 * 60 * 60


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_int(value: int, name: str = "value") -> int:
    """
    Проверка, что значение — int (bool не допускается).

    Raises:
        TypeError: если value не int
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be int, got {type(value).__name__}")
    return value


def validate_non_negative_int(value: int, name: str = "value") -> int:
    """
    Проверка целого неотрицательного значения.

    Raises:
        TypeError: если value не int
        ValueError: если value < 0
    """
    validate_int(value, name)
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    return value


# =============================================================================
# MULTIPLIER И VIRTUAL BALANCE
# =============================================================================


def elapsed_seconds(now: int, last_settlement_time: Optional[int]) -> int:
    """
    Прошедшее время с момента последнего settlement.

    Для неинициализированного аккаунта (None) возвращает 0.
    Часы не могут идти назад относительно сохранённого timestamp.

    Examples:
        >>> elapsed_seconds(100, 40)
        60
        >>> elapsed_seconds(100, None)
        0
    """
    if last_settlement_time is None:
        return 0
    if now < last_settlement_time:
        raise ValueError(
            f"Clock went backwards: now={now} < last_settlement_time={last_settlement_time}"
        )
    return now - last_settlement_time


def accrual_multiplier(
    interest_rate: int,
    elapsed: int,
    precision: int = PRECISION,
) -> int:
    """
    Fixed-point multiplier линейного начисления.

    multiplier = precision + interest_rate × elapsed

    Args:
        interest_rate: Ставка за секунду в масштабе precision
        elapsed: Прошедшие секунды
        precision: Fixed-point масштаб

    Returns:
        Multiplier ≥ precision

    Examples:
        >>> accrual_multiplier(0, 1000)
        1000000000000000000
        >>> accrual_multiplier(10**9, 10, precision=10**18)
        1000000010000000000
    """
    validate_non_negative_int(interest_rate, "interest_rate")
    validate_non_negative_int(elapsed, "elapsed")
    return precision + interest_rate * elapsed


def virtual_balance(
    nominal_balance: int,
    interest_rate: int,
    last_settlement_time: Optional[int],
    now: int,
    precision: int = PRECISION,
) -> int:
    """
    Virtual balance: nominal balance + проценты с последнего settlement.

    Если аккаунт не инициализирован или nominal_balance == 0,
    multiplier равен precision (рост отсутствует).

    Args:
        nominal_balance: Сохранённый баланс (минимальные единицы)
        interest_rate: Закреплённая ставка аккаунта
        last_settlement_time: Timestamp последнего settlement (None — не инициализирован)
        now: Текущее время (секунды)
        precision: Fixed-point масштаб

    Returns:
        virtual_balance ≥ nominal_balance

    Examples:
        >>> virtual_balance(10, 0, 0, 100)
        10
        >>> virtual_balance(10**18, 10**10, 0, 100)
        1000001000000000000
        >>> virtual_balance(500, 10**12, None, 100)
        500
    """
    validate_non_negative_int(nominal_balance, "nominal_balance")
    if last_settlement_time is None or nominal_balance == 0:
        return nominal_balance

    multiplier = accrual_multiplier(
        interest_rate, elapsed_seconds(now, last_settlement_time), precision
    )
    return nominal_balance * multiplier // precision


def pending_interest(
    nominal_balance: int,
    interest_rate: int,
    last_settlement_time: Optional[int],
    now: int,
    precision: int = PRECISION,
) -> int:
    """Проценты, которые будут материализованы при settlement (≥ 0)."""
    return (
        virtual_balance(nominal_balance, interest_rate, last_settlement_time, now, precision)
        - nominal_balance
    )


def rate_to_apr(interest_rate: int, precision: int = PRECISION) -> float:
    """
    Справочная конверсия ставки за секунду в годовую (simple APR).

    Только для отчётов и логов; в расчётах баланса не используется.

    Examples:
        >>> round(rate_to_apr(10**18 // SECONDS_PER_YEAR), 6)
        1.0
    """
    validate_non_negative_int(interest_rate, "interest_rate")
    return interest_rate * SECONDS_PER_YEAR / precision
