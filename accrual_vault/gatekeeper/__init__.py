"""Gatekeeper — допуск операций ledger и vault.

- CapabilityGate: авторизация mint/burn, administrator, pause flag
- CapabilityGatekeeper: оценка допуска и структурированные ошибки
- ReentrancyGuard: scoped non-reentrant acquisition
"""

from .capability_gate import (
    Capability,
    CapabilityGate,
    CapabilityGatekeeper,
    GateResult,
    StaticCapabilityGate,
)
from .reentrancy import GuardScope, ReentrancyGuard

__all__ = [
    "Capability",
    "CapabilityGate",
    "CapabilityGatekeeper",
    "GateResult",
    "StaticCapabilityGate",
    "GuardScope",
    "ReentrancyGuard",
]
