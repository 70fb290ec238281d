# fifo_gains/domain/errors.py
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .results import MatchedPortion


class LotEngineError(Exception):
    """Base class for every error the lot engine surfaces to its caller."""


class InvalidEventError(LotEngineError, ValueError):
    """Malformed input (non-positive quantity, negative value, missing timestamp, ...)."""

    def __init__(self, reason: str, *, event_index: Optional[int] = None, event_id: Optional[str] = None):
        self.reason = reason
        self.event_index = event_index
        self.event_id = event_id
        location = ""
        if event_index is not None:
            location = f" (event index {event_index}"
            location += f", event {event_id})" if event_id else ")"
        super().__init__(f"{reason}{location}")


class OutOfOrderEventError(LotEngineError, ValueError):
    def __init__(self, asset: str, event_index: int, *,
                 timestamp: Optional[datetime] = None,
                 previous_timestamp: Optional[datetime] = None):
        self.asset = asset
        self.event_index = event_index
        self.timestamp = timestamp
        self.previous_timestamp = previous_timestamp
        super().__init__(
            f"Event at index {event_index} for asset {asset} has timestamp {timestamp} "
            f"which precedes the previously processed event of that asset ({previous_timestamp})."
        )


class InsufficientLotsError(LotEngineError):
    """
    A disposal asks for more quantity than the open lots of its asset hold.
    The unmatched remainder is reported; it is never truncated or zero-filled.
    """

    def __init__(self, asset: str, unmatched_quantity: Decimal, *,
                 disposal_event_id: Optional[str] = None,
                 requested_quantity: Optional[Decimal] = None,
                 matched_portions: Tuple["MatchedPortion", ...] = (),
                 event_index: Optional[int] = None):
        self.asset = asset
        self.unmatched_quantity = unmatched_quantity
        self.disposal_event_id = disposal_event_id
        self.requested_quantity = requested_quantity
        self.matched_portions = tuple(matched_portions)
        self.event_index = event_index
        super().__init__(
            f"Insufficient open lots for disposal {disposal_event_id} of asset {asset}: "
            f"requested {requested_quantity}, unmatched {unmatched_quantity}."
        )
