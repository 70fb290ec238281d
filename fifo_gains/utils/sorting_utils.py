# fifo_gains/utils/sorting_utils.py
import logging
from datetime import datetime
from typing import List, Sequence, Tuple

from fifo_gains.domain.events import LedgerEvent

logger = logging.getLogger(__name__)


def get_event_sort_key(event: LedgerEvent, input_position: int) -> Tuple[datetime, int]:
    """
    Primary key: event timestamp. Secondary key: position in the input, so events
    sharing a timestamp keep the order the ledger delivered them in.
    """
    if event.timestamp is None:
        raise ValueError(f"Event {event.event_id} has no timestamp. Cannot generate sort key.")
    return (event.timestamp, input_position)


def sort_events_chronologically(events: Sequence[LedgerEvent]) -> List[LedgerEvent]:
    """
    Caller-side ordering helper. The calculation session never sorts on its own;
    this is only applied when the caller explicitly asks for it.
    """
    indexed = list(enumerate(events))
    try:
        indexed.sort(key=lambda item: get_event_sort_key(item[1], item[0]))
    except TypeError as e:
        raise ValueError(f"Cannot sort events chronologically, timestamps are not mutually comparable: {e}") from e
    moved = sum(1 for new_position, (old_position, _) in enumerate(indexed) if new_position != old_position)
    if moved:
        logger.info(f"Chronological sort moved {moved} of {len(indexed)} events.")
    return [event for _, event in indexed]
