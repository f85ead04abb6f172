"""
Domain models and value objects.

Contains ledger and vault state models and the event records they emit.
"""

from accrual_vault.core.domain.account import (
    ALL,
    ZERO_ADDRESS,
    Account,
    AmountSentinel,
    LedgerState,
    is_valid_address,
)
from accrual_vault.core.domain.events import (
    Approved,
    Burned,
    Deposited,
    EventLog,
    ExcessWithdrawn,
    InterestSettled,
    LedgerEvent,
    Minted,
    RateChanged,
    Redeemed,
    RewardsDeposited,
    Transferred,
)
from accrual_vault.core.domain.vault_state import VaultState

__all__ = [
    # State models
    "ALL",
    "AmountSentinel",
    "ZERO_ADDRESS",
    "is_valid_address",
    "Account",
    "LedgerState",
    "VaultState",
    # Events
    "LedgerEvent",
    "EventLog",
    "RateChanged",
    "InterestSettled",
    "Minted",
    "Burned",
    "Transferred",
    "Approved",
    "Deposited",
    "Redeemed",
    "ExcessWithdrawn",
    "RewardsDeposited",
]
