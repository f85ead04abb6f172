"""Ledger — начисление процентов и управление глобальной ставкой.

- RateGovernor: границы и монотонное снижение ставки
- InterestLedger: nominal/virtual balances, settlement, mint/burn/transfer
"""

from .interest_ledger import Amount, InterestLedger
from .rate_governor import RateChangeRecord, RateGovernor

__all__ = [
    "Amount",
    "InterestLedger",
    "RateChangeRecord",
    "RateGovernor",
]
