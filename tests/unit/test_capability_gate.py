"""Unit тесты для CapabilityGate / CapabilityGatekeeper.

Coverage:
- StaticCapabilityGate предикаты и administrator операции
- Gatekeeper: порядок проверок (capability → pause)
- require(): структурированные ошибки
- Операции без проверки паузы
"""

import dataclasses

import pytest

from accrual_vault.core.errors import PausedError, UnauthorizedError
from accrual_vault.gatekeeper import (
    Capability,
    CapabilityGatekeeper,
    GateResult,
    StaticCapabilityGate,
)

ADMIN = "admin"
MINTER = "minter"
ALICE = "alice"


@pytest.fixture
def gate():
    """Fixture для in-memory gate."""
    return StaticCapabilityGate(ADMIN, {MINTER})


@pytest.fixture
def gatekeeper(gate):
    return CapabilityGatekeeper(gate)


# =============================================================================
# STATIC GATE
# =============================================================================


def test_static_gate_predicates(gate):
    assert gate.can_mint_burn(MINTER)
    assert not gate.can_mint_burn(ALICE)
    assert gate.is_administrator(ADMIN)
    assert not gate.is_administrator(MINTER)
    assert not gate.is_paused()
    assert gate.administrator == ADMIN


def test_static_gate_requires_administrator_identity():
    with pytest.raises(ValueError):
        StaticCapabilityGate("")


def test_grant_and_revoke_mint_burn(gate):
    gate.grant_mint_burn(ADMIN, ALICE)
    assert gate.can_mint_burn(ALICE)

    gate.revoke_mint_burn(ADMIN, ALICE)
    assert not gate.can_mint_burn(ALICE)

    # Повторный revoke не ошибка
    gate.revoke_mint_burn(ADMIN, ALICE)


def test_grant_requires_administrator(gate):
    with pytest.raises(UnauthorizedError) as exc_info:
        gate.grant_mint_burn(MINTER, ALICE)
    assert exc_info.value.capability == Capability.ADMINISTRATOR.value
    assert not gate.can_mint_burn(ALICE)


def test_pause_and_unpause(gate):
    gate.pause(ADMIN)
    assert gate.is_paused()
    gate.unpause(ADMIN)
    assert not gate.is_paused()


def test_pause_requires_administrator(gate):
    with pytest.raises(UnauthorizedError):
        gate.pause(ALICE)
    assert not gate.is_paused()


# =============================================================================
# GATEKEEPER: PASS SCENARIOS
# =============================================================================


def test_gatekeeper_pass_no_capability(gatekeeper):
    """PASS: операция без capability, система не на паузе."""
    result = gatekeeper.evaluate("transfer", ALICE)

    assert result.entry_allowed is True
    assert result.block_reason == ""
    assert result.operation == "transfer"
    assert "PASS" in result.details


def test_gatekeeper_pass_mint_burn(gatekeeper):
    result = gatekeeper.evaluate("mint", MINTER, Capability.MINT_BURN)
    assert result.entry_allowed is True
    assert result.capability == Capability.MINT_BURN


def test_gatekeeper_pass_admin_while_paused(gatekeeper, gate):
    """PASS: administrator операция без проверки паузы."""
    gate.pause(ADMIN)
    result = gatekeeper.evaluate(
        "set_global_rate", ADMIN, Capability.ADMINISTRATOR, check_pause=False
    )
    assert result.entry_allowed is True


# =============================================================================
# GATEKEEPER: BLOCK SCENARIOS
# =============================================================================


def test_gatekeeper_block_missing_mint_burn(gatekeeper):
    result = gatekeeper.evaluate("mint", ALICE, Capability.MINT_BURN)

    assert result.entry_allowed is False
    assert result.block_reason == "unauthorized"
    assert "MINT_BURN" in result.details


def test_gatekeeper_block_not_administrator(gatekeeper):
    result = gatekeeper.evaluate("set_global_rate", MINTER, Capability.ADMINISTRATOR)
    assert result.block_reason == "unauthorized"


def test_gatekeeper_block_paused(gatekeeper, gate):
    gate.pause(ADMIN)
    result = gatekeeper.evaluate("transfer", ALICE)

    assert result.entry_allowed is False
    assert result.block_reason == "paused"


def test_gatekeeper_priority_capability_over_pause(gatekeeper, gate):
    """Capability проверяется до паузы."""
    gate.pause(ADMIN)
    result = gatekeeper.evaluate("mint", ALICE, Capability.MINT_BURN)
    assert result.block_reason == "unauthorized"


# =============================================================================
# REQUIRE
# =============================================================================


def test_require_raises_unauthorized(gatekeeper):
    with pytest.raises(UnauthorizedError) as exc_info:
        gatekeeper.require("burn", ALICE, Capability.MINT_BURN)

    assert exc_info.value.caller == ALICE
    assert exc_info.value.capability == "MINT_BURN"
    assert exc_info.value.kind == "unauthorized"


def test_require_raises_paused(gatekeeper, gate):
    gate.pause(ADMIN)
    with pytest.raises(PausedError) as exc_info:
        gatekeeper.require("deposit", ALICE)
    assert exc_info.value.operation == "deposit"


def test_require_returns_result(gatekeeper):
    result = gatekeeper.require("mint", MINTER, Capability.MINT_BURN)
    assert isinstance(result, GateResult)
    assert result.entry_allowed


def test_gate_result_immutability(gatekeeper):
    """Проверка immutability GateResult (frozen=True)."""
    result = gatekeeper.evaluate("transfer", ALICE)

    with pytest.raises(dataclasses.FrozenInstanceError):
        result.entry_allowed = False
