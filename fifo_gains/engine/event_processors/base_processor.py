# fifo_gains/engine/event_processors/base_processor.py
from abc import ABC, abstractmethod
from typing import List, Optional

from fifo_gains.domain.events import LedgerEvent
from fifo_gains.domain.results import MatchedPortion
from fifo_gains.engine.lot_store import LotStore


class EventProcessor(ABC):
    """Handles one kind of ledger event against the lot store of a session."""

    @abstractmethod
    def process(self, event: LedgerEvent, lot_store: LotStore, event_index: Optional[int] = None) -> List[MatchedPortion]:
        """Applies the event; returns the matched portions it realized (empty for events that realize nothing)."""
        pass
