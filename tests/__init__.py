"""
Test suite for accrual-vault

Contains:
- tests/unit/          : Unit tests for ledger, vault, gates and contracts
"""
