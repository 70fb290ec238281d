# fifo_gains/domain/events.py
from dataclasses import dataclass, field, KW_ONLY
from datetime import datetime
from decimal import Decimal
import uuid
from typing import Optional

from .enums import EventKind
from .errors import InvalidEventError


@dataclass(frozen=True)
class LedgerEvent:
    """
    A normalized acquisition or disposal, as delivered by the ingestion side.

    gross_value is the total fiat value of the event: the cost for an acquisition,
    the proceeds for a disposal.
    """
    asset: str
    kind: EventKind
    quantity: Decimal
    gross_value: Decimal
    timestamp: datetime

    _: KW_ONLY
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    description: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.asset, str) or not self.asset.strip():
            raise InvalidEventError(f"LedgerEvent.asset must be a non-empty string, got {self.asset!r}", event_id=self.event_id)
        if not isinstance(self.kind, EventKind):
            raise InvalidEventError(f"LedgerEvent.kind must be an EventKind, got {type(self.kind).__name__}", event_id=self.event_id)
        if not isinstance(self.quantity, Decimal) or not self.quantity.is_finite() or self.quantity <= Decimal(0):
            raise InvalidEventError(f"LedgerEvent.quantity must be a positive finite Decimal, got {self.quantity!r}", event_id=self.event_id)
        if not isinstance(self.gross_value, Decimal) or not self.gross_value.is_finite() or self.gross_value < Decimal(0):
            raise InvalidEventError(f"LedgerEvent.gross_value must be a non-negative finite Decimal, got {self.gross_value!r}", event_id=self.event_id)
        if self.timestamp is None:
            raise InvalidEventError("LedgerEvent.timestamp is missing.", event_id=self.event_id)
        if not isinstance(self.timestamp, datetime):
            raise InvalidEventError(f"LedgerEvent.timestamp must be a datetime, got {type(self.timestamp).__name__}", event_id=self.event_id)
        if not self.event_id:
            raise InvalidEventError("LedgerEvent.event_id cannot be empty.")

    @property
    def is_acquisition(self) -> bool:
        return self.kind == EventKind.ACQUISITION

    @property
    def is_disposal(self) -> bool:
        return self.kind == EventKind.DISPOSAL
