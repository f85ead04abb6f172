"""CapabilityGate — граница авторизации и паузы для ledger и vault.

Core потребляет ровно три предиката:
- can_mint_burn(caller)
- is_paused()
- is_administrator(caller)

StaticCapabilityGate — in-memory реализация (administrator, mint/burn grants,
pause flag). CapabilityGatekeeper превращает ответы предикатов в результат
допуска (entry_allowed / block_reason) и поднимает структурированную ошибку
при блокировке.

Порядок проверок в require():
1. Capability caller'а (mint_burn / administrator)
2. Pause flag (для операций, которые им гейтятся)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from accrual_vault.core.errors import PausedError, UnauthorizedError

logger = logging.getLogger(__name__)


class Capability(str, Enum):
    """Требование операции к caller'у."""

    NONE = "NONE"
    MINT_BURN = "MINT_BURN"
    ADMINISTRATOR = "ADMINISTRATOR"


class CapabilityGate(Protocol):
    """Внешний коллаборатор: ответы на вопросы авторизации и паузы."""

    def can_mint_burn(self, caller: str) -> bool:
        ...

    def is_paused(self) -> bool:
        ...

    def is_administrator(self, caller: str) -> bool:
        ...


# =============================================================================
# STATIC GATE
# =============================================================================


class StaticCapabilityGate:
    """In-memory CapabilityGate.

    Единственный administrator управляет grants и pause flag.
    """

    def __init__(self, administrator: str, mint_burn_holders: Optional[set[str]] = None):
        if not administrator:
            raise ValueError("administrator must be non-empty")
        self._administrator = administrator
        self._mint_burn_holders: set[str] = set(mint_burn_holders or ())
        self._paused = False

    @property
    def administrator(self) -> str:
        return self._administrator

    # Предикаты CapabilityGate

    def can_mint_burn(self, caller: str) -> bool:
        return caller in self._mint_burn_holders

    def is_paused(self) -> bool:
        return self._paused

    def is_administrator(self, caller: str) -> bool:
        return caller == self._administrator

    # Administrator операции

    def grant_mint_burn(self, caller: str, account: str) -> None:
        self._require_administrator(caller)
        if not account:
            raise ValueError("account must be non-empty")
        self._mint_burn_holders.add(account)
        logger.info("mint/burn capability granted to %s by %s", account, caller)

    def revoke_mint_burn(self, caller: str, account: str) -> None:
        self._require_administrator(caller)
        self._mint_burn_holders.discard(account)
        logger.info("mint/burn capability revoked from %s by %s", account, caller)

    def pause(self, caller: str) -> None:
        self._require_administrator(caller)
        self._paused = True
        logger.warning("system paused by %s", caller)

    def unpause(self, caller: str) -> None:
        self._require_administrator(caller)
        self._paused = False
        logger.info("system unpaused by %s", caller)

    def _require_administrator(self, caller: str) -> None:
        if not self.is_administrator(caller):
            raise UnauthorizedError(caller, Capability.ADMINISTRATOR.value)


# =============================================================================
# GATEKEEPER
# =============================================================================


@dataclass(frozen=True)
class GateResult:
    """Результат проверки допуска операции."""

    entry_allowed: bool
    block_reason: str

    # Входные параметры для диагностики
    operation: str
    caller: Optional[str]
    capability: Capability
    check_pause: bool

    # Детали
    details: str


class CapabilityGatekeeper:
    """Оценка допуска операций через CapabilityGate."""

    def __init__(self, gate: CapabilityGate):
        self._gate = gate

    @property
    def gate(self) -> CapabilityGate:
        return self._gate

    def evaluate(
        self,
        operation: str,
        caller: Optional[str] = None,
        capability: Capability = Capability.NONE,
        check_pause: bool = True,
    ) -> GateResult:
        """Оценка допуска.

        Args:
            operation: имя операции (для диагностики)
            caller: identity вызывающего
            capability: требуемая capability
            check_pause: True если операция блокируется паузой

        Returns:
            GateResult с решением о допуске
        """
        def result(allowed: bool, reason: str, details: str) -> GateResult:
            return GateResult(
                entry_allowed=allowed,
                block_reason=reason,
                operation=operation,
                caller=caller,
                capability=capability,
                check_pause=check_pause,
                details=details,
            )

        # 1. Capability
        if capability == Capability.MINT_BURN and not self._gate.can_mint_burn(caller):
            return result(False, "unauthorized", f"{caller!r} lacks MINT_BURN for {operation}")

        if capability == Capability.ADMINISTRATOR and not self._gate.is_administrator(caller):
            return result(False, "unauthorized", f"{caller!r} is not administrator for {operation}")

        # 2. Pause
        if check_pause and self._gate.is_paused():
            return result(False, "paused", f"{operation} blocked: system paused")

        return result(True, "", f"PASS: {operation}, capability={capability.value}")

    def require(
        self,
        operation: str,
        caller: Optional[str] = None,
        capability: Capability = Capability.NONE,
        check_pause: bool = True,
    ) -> GateResult:
        """evaluate() + ошибка при блокировке.

        Raises:
            UnauthorizedError: caller не имеет capability
            PausedError: система на паузе
        """
        gate_result = self.evaluate(operation, caller, capability, check_pause)
        if gate_result.entry_allowed:
            return gate_result

        logger.debug("gate blocked %s: %s", operation, gate_result.details)
        if gate_result.block_reason == "paused":
            raise PausedError(operation)
        raise UnauthorizedError(str(caller), capability.value)
