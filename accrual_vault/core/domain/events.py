"""
Events — записи событий ledger и vault

Immutable Pydantic модели для observability и проверок в тестах.
EventLog собирает события в порядке commit; при откате операции vault
усекает журнал до отметки, сделанной до начала операции.
"""

import logging
from typing import ClassVar, Iterator, Optional, Type, TypeVar

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


# =============================================================================
# BASE EVENT
# =============================================================================


class LedgerEvent(BaseModel):
    """Базовое событие. event_type — стабильное имя для сериализации."""

    event_type: ClassVar[str] = "event"

    model_config = {"frozen": True}

    def to_record(self) -> dict:
        """Плоская запись события (event_type + поля)."""
        return {"event_type": self.event_type, **self.model_dump(mode="json")}


# =============================================================================
# LEDGER EVENTS
# =============================================================================


class RateChanged(LedgerEvent):
    event_type: ClassVar[str] = "rate_changed"

    old_rate: int = Field(..., ge=0)
    new_rate: int = Field(..., ge=0)
    caller: str
    timestamp: int = Field(..., ge=0)


class InterestSettled(LedgerEvent):
    """Материализация начисленных процентов в nominal balance."""

    event_type: ClassVar[str] = "interest_settled"

    account: str
    amount: int = Field(..., gt=0)
    new_balance: int = Field(..., ge=0)
    timestamp: int = Field(..., ge=0)


class Minted(LedgerEvent):
    event_type: ClassVar[str] = "minted"

    to: str
    amount: int = Field(..., gt=0)
    caller: str


class Burned(LedgerEvent):
    event_type: ClassVar[str] = "burned"

    from_account: str
    amount: int = Field(..., gt=0)
    caller: str


class Transferred(LedgerEvent):
    event_type: ClassVar[str] = "transferred"

    sender: str
    recipient: str
    amount: int = Field(..., gt=0)


class Approved(LedgerEvent):
    event_type: ClassVar[str] = "approved"

    owner: str
    spender: str
    amount: int = Field(..., ge=0)


# =============================================================================
# VAULT EVENTS
# =============================================================================


class Deposited(LedgerEvent):
    event_type: ClassVar[str] = "deposited"

    user: str
    asset_in: int = Field(..., gt=0)
    units_out: int = Field(..., gt=0)
    timestamp: int = Field(..., ge=0)


class Redeemed(LedgerEvent):
    event_type: ClassVar[str] = "redeemed"

    user: str
    units_in: int = Field(..., gt=0)
    asset_out: int = Field(..., gt=0)
    timestamp: int = Field(..., ge=0)


class ExcessWithdrawn(LedgerEvent):
    event_type: ClassVar[str] = "excess_withdrawn"

    caller: str
    amount: int = Field(..., gt=0)
    timestamp: int = Field(..., ge=0)


class RewardsDeposited(LedgerEvent):
    event_type: ClassVar[str] = "rewards_deposited"

    caller: str
    amount: int = Field(..., gt=0)
    timestamp: int = Field(..., ge=0)


# =============================================================================
# EVENT LOG
# =============================================================================


E = TypeVar("E", bound=LedgerEvent)


class EventLog:
    """Журнал событий в порядке commit."""

    def __init__(self):
        self._events: list[LedgerEvent] = []

    def emit(self, event: LedgerEvent) -> None:
        self._events.append(event)
        logger.debug("event %s: %s", event.event_type, event.model_dump())

    def mark(self) -> int:
        """Отметка текущей длины журнала (для отката)."""
        return len(self._events)

    def truncate(self, mark: int) -> None:
        """Удаление событий после отметки mark."""
        del self._events[mark:]

    def drain(self) -> list[LedgerEvent]:
        """Выдача накопленных событий с очисткой журнала.

        Вызывается между операциями: отметки mark(), сделанные до drain,
        после него недействительны.
        """
        drained, self._events = self._events, []
        return drained

    def of_type(self, event_cls: Type[E]) -> list[E]:
        return [e for e in self._events if isinstance(e, event_cls)]

    def last(self, event_cls: Optional[Type[E]] = None) -> Optional[LedgerEvent]:
        events = self._events if event_cls is None else self.of_type(event_cls)
        return events[-1] if events else None

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[LedgerEvent]:
        return iter(self._events)
