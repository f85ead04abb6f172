"""
Errors — таксономия ошибок ledger и vault

Категории:
1. Validation — нулевой адрес / нулевая сумма
2. Authorization — нет capability, система на паузе
3. State — недостаточный баланс / резерв / allowance, нарушение ставки
4. Payout — перевод base asset получателю не удался
5. Concurrency — повторный вход (reentrancy)

Каждая ошибка прерывает операцию целиком, без частичных изменений состояния.
Повторы внутри системы не выполняются.
"""

from typing import Optional


class LedgerError(Exception):
    """
    Базовая ошибка accrual-vault.

    Атрибут kind — стабильный идентификатор категории для вызывающей стороны.
    """

    kind: str = "ledger_error"


# =============================================================================
# VALIDATION
# =============================================================================


class ZeroAmountError(LedgerError):
    """Сумма операции равна нулю (или sentinel разрешился в ноль)."""

    kind = "zero_amount"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"{operation}: amount must be greater than zero")


class InvalidAddressError(LedgerError):
    """Пустой или нулевой адрес."""

    kind = "invalid_address"

    def __init__(self, operation: str, address: Optional[str]):
        self.operation = operation
        self.address = address
        super().__init__(f"{operation}: invalid address {address!r}")


# =============================================================================
# AUTHORIZATION
# =============================================================================


class UnauthorizedError(LedgerError):
    """Caller не имеет требуемой capability (mint_burn / administrator)."""

    kind = "unauthorized"

    def __init__(self, caller: str, capability: str):
        self.caller = caller
        self.capability = capability
        super().__init__(f"Caller {caller!r} lacks capability {capability!r}")


class PausedError(LedgerError):
    """Система на паузе: state-changing операции запрещены."""

    kind = "paused"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"{operation}: system is paused")


# =============================================================================
# STATE
# =============================================================================


class _ShortfallError(LedgerError):
    """Запрошено больше, чем доступно. Несёт (requested, available)."""

    label = "balance"

    def __init__(self, requested: int, available: int):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient {self.label}: requested={requested}, available={available}"
        )


class InsufficientBalanceError(_ShortfallError):
    """Nominal balance (после settlement) меньше суммы burn/transfer."""

    kind = "insufficient_balance"
    label = "balance"


class InsufficientTokenBalanceError(_ShortfallError):
    """Virtual balance держателя меньше суммы redeem."""

    kind = "insufficient_token_balance"
    label = "token balance"


class InsufficientReserveError(_ShortfallError):
    """
    Резерв vault меньше запрошенной суммы redeem.

    Центральный solvency gate: requested / available позволяют
    диагностировать условие без воспроизведения состояния.
    """

    kind = "insufficient_reserve"
    label = "vault reserve"


class InsufficientAllowanceError(_ShortfallError):
    """Allowance spender'а меньше суммы transfer_from."""

    kind = "insufficient_allowance"
    label = "allowance"


class ExcessExceededError(_ShortfallError):
    """Emergency withdrawal превышает reserve - liability."""

    kind = "excess_exceeded"
    label = "excess funds"


class RateIncreaseError(LedgerError):
    """Попытка повысить глобальную ставку (ставка может только снижаться)."""

    kind = "rate_increase_attempted"

    def __init__(self, current_rate: int, requested_rate: int):
        self.current_rate = current_rate
        self.requested_rate = requested_rate
        super().__init__(
            f"Interest rate can only decrease: current={current_rate}, "
            f"requested={requested_rate}"
        )


class RateOutOfBoundsError(LedgerError):
    """Ставка вне [min_rate, max_rate]."""

    kind = "rate_out_of_bounds"

    def __init__(self, requested_rate: int, min_rate: int, max_rate: int):
        self.requested_rate = requested_rate
        self.min_rate = min_rate
        self.max_rate = max_rate
        super().__init__(
            f"Interest rate {requested_rate} outside [{min_rate}, {max_rate}]"
        )


# =============================================================================
# PAYOUT
# =============================================================================


class AssetTransferError(LedgerError):
    """Перевод base asset не выполнен (баланс или hook получателя)."""

    kind = "asset_transfer_failed"


class PayoutFailedError(LedgerError):
    """Выплата base asset при redeem/withdraw не удалась; операция откатывается."""

    kind = "payout_failed"

    def __init__(self, recipient: str, amount: int):
        self.recipient = recipient
        self.amount = amount
        super().__init__(f"Payout of {amount} to {recipient!r} failed")


# =============================================================================
# CONCURRENCY
# =============================================================================


class ReentrancyError(LedgerError):
    """Повторный вход в guarded entry point во время выполнения другого."""

    kind = "reentrancy"

    def __init__(self, entry_point: str, active: str):
        self.entry_point = entry_point
        self.active = active
        super().__init__(
            f"Reentrant call to {entry_point!r} while {active!r} is in progress"
        )
