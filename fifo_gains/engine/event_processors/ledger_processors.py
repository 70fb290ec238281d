# fifo_gains/engine/event_processors/ledger_processors.py
import logging
from decimal import Context
from typing import List, Optional

from fifo_gains.domain.events import LedgerEvent
from fifo_gains.domain.lots import TaxLot
from fifo_gains.domain.results import MatchedPortion
from fifo_gains.engine.fifo_matcher import FifoMatcher
from fifo_gains.engine.lot_store import LotStore
from .base_processor import EventProcessor

logger = logging.getLogger(__name__)


class AcquisitionProcessor(EventProcessor):
    """Opens a new lot at the tail of the asset's queue."""

    def __init__(self, ctx: Context):
        self.ctx = ctx

    def process(self, event: LedgerEvent, lot_store: LotStore, event_index: Optional[int] = None) -> List[MatchedPortion]:
        if not event.is_acquisition:
            raise ValueError(f"AcquisitionProcessor received {event.kind.name} event {event.event_id}.")
        lot = TaxLot.from_acquisition(event, self.ctx)
        lot_store.add_lot(lot)
        logger.debug(f"Opened lot {lot.lot_id}: {lot.original_quantity} {lot.asset} @ {lot.unit_cost_basis} acquired {lot.acquired_at}.")
        return []


class DisposalProcessor(EventProcessor):
    def __init__(self, matcher: FifoMatcher):
        self.matcher = matcher

    def process(self, event: LedgerEvent, lot_store: LotStore, event_index: Optional[int] = None) -> List[MatchedPortion]:
        if not event.is_disposal:
            raise ValueError(f"DisposalProcessor received {event.kind.name} event {event.event_id}.")
        return self.matcher.match(event, lot_store, event_index=event_index)
