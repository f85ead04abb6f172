"""
Core domain models, mathematical primitives, and invariants.

This module contains the foundational building blocks shared by the ledger
and the vault: fixed-point math, state models, errors, and time sources.
"""
