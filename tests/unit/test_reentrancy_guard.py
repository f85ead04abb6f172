"""Unit тесты для ReentrancyGuard.

Coverage:
- Освобождение guard'а на каждом пути выхода
- Отклонение повторного входа
- delegate окно: ровно один вложенный уровень
"""

import pytest

from accrual_vault.core.errors import ReentrancyError
from accrual_vault.gatekeeper import ReentrancyGuard


@pytest.fixture
def guard():
    return ReentrancyGuard()


def test_acquire_and_release(guard):
    assert not guard.locked
    with guard.acquire("redeem") as scope:
        assert guard.locked
        assert guard.active_entry_point == "redeem"
        assert scope.entry_point == "redeem"
    assert not guard.locked
    assert guard.active_entry_point is None


def test_released_on_exception(guard):
    with pytest.raises(ValueError):
        with guard.acquire("redeem"):
            raise ValueError("boom")
    assert not guard.locked


def test_nested_entry_rejected(guard):
    with guard.acquire("redeem"):
        with pytest.raises(ReentrancyError) as exc_info:
            with guard.acquire("deposit"):
                pass
        # Отклонённая попытка не освобождает внешний guard
        assert guard.active_entry_point == "redeem"

    assert exc_info.value.entry_point == "deposit"
    assert exc_info.value.active == "redeem"
    assert not guard.locked


def test_delegate_allows_one_nested_level(guard):
    with guard.acquire("redeem") as scope:
        with scope.delegate():
            with guard.acquire("burn"):
                assert guard.active_entry_point == "burn"
                # Вложенный вызов сам не может делегировать дальше
                with pytest.raises(ReentrancyError):
                    with guard.acquire("settle"):
                        pass
            assert guard.active_entry_point == "redeem"


def test_delegate_window_closes(guard):
    with guard.acquire("redeem") as scope:
        with scope.delegate():
            pass
        with pytest.raises(ReentrancyError):
            with guard.acquire("transfer"):
                pass


def test_delegate_window_closes_on_exception(guard):
    with guard.acquire("deposit") as scope:
        with pytest.raises(RuntimeError, match="mint failed"):
            with scope.delegate():
                raise RuntimeError("mint failed")
        with pytest.raises(ReentrancyError):
            with guard.acquire("mint"):
                pass


def test_delegate_cannot_be_nested(guard):
    with guard.acquire("redeem") as scope:
        with scope.delegate():
            with pytest.raises(RuntimeError, match="already open"):
                with scope.delegate():
                    pass
