"""
accrual-vault — interest-accruing ledger with a 1:1 collateral vault.

Packages:
- accrual_vault.core        : math, domain models, errors, clock, contracts
- accrual_vault.gatekeeper  : capability gate and reentrancy guard
- accrual_vault.ledger      : rate governor and interest ledger
- accrual_vault.vault       : base asset and vault
"""

__version__ = "0.1.0"
