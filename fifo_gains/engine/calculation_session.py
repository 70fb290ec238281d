# fifo_gains/engine/calculation_session.py
import logging
from datetime import datetime
from decimal import Context
from typing import Dict, List, Mapping, Optional, Sequence

from fifo_gains.domain.enums import EventKind
from fifo_gains.domain.errors import InvalidEventError, OutOfOrderEventError
from fifo_gains.domain.events import LedgerEvent
from fifo_gains.domain.lots import TaxLot
from fifo_gains.domain.results import MatchedPortion, ReportingPeriod, SessionResult
from fifo_gains.engine.event_processors import AcquisitionProcessor, DisposalProcessor, EventProcessor
from fifo_gains.engine.fifo_matcher import FifoMatcher
from fifo_gains.engine.lot_store import LotStore
from fifo_gains.engine.period_aggregator import PeriodAggregator
import fifo_gains.config as global_config

logger = logging.getLogger(__name__)


class CalculationSession:
    """
    Runs one reporting period over an ordered batch of ledger events.

    1. Validates the whole batch (types, period bounds, per-asset ordering) before
       touching any lot.
    2. Seeds a private lot store from copies of the carried-over snapshots.
    3. Dispatches every event to the processor for its kind.
    4. Folds the matched portions into a PeriodSummary.
    5. Exports the still-open lots (next period's carry-over) and the lots closed
       during the run.

    The caller's carried-over snapshot is never mutated, so a run that raises
    leaves the caller exactly where it was and can be retried as a whole.
    """

    def __init__(self,
                 period: Optional[ReportingPeriod] = None,
                 carried_over: Optional[Mapping[str, Sequence[TaxLot]]] = None,
                 *,
                 strict_ordering: bool = global_config.STRICT_EVENT_ORDERING,
                 internal_calculation_precision: int = global_config.INTERNAL_CALCULATION_PRECISION,
                 decimal_rounding_mode: str = global_config.DECIMAL_ROUNDING_MODE,
                 long_term_threshold_days: int = global_config.LONG_TERM_HOLDING_THRESHOLD_DAYS):
        self.period = period
        self.carried_over = carried_over or {}
        self.strict_ordering = strict_ordering
        self.ctx = Context(prec=internal_calculation_precision, rounding=decimal_rounding_mode)

        matcher = FifoMatcher(internal_calculation_precision, decimal_rounding_mode, long_term_threshold_days)
        self.aggregator = PeriodAggregator(internal_calculation_precision, decimal_rounding_mode)
        self.event_processor_map: Dict[EventKind, EventProcessor] = {
            EventKind.ACQUISITION: AcquisitionProcessor(self.ctx),
            EventKind.DISPOSAL: DisposalProcessor(matcher),
        }

    def _latest_carried_acquisitions(self) -> Dict[str, datetime]:
        latest: Dict[str, datetime] = {}
        for asset, lots in self.carried_over.items():
            if not lots:
                continue
            try:
                latest[asset] = max(lot.acquired_at for lot in lots)
            except TypeError as e:
                raise InvalidEventError(f"Carried-over lots of {asset} mix naive and timezone-aware acquisition times: {e}") from e
        return latest

    def validate(self, events: Sequence[LedgerEvent], event_indices: Optional[Sequence[int]] = None) -> None:
        """
        Checks the whole batch (types, period bounds, per-asset ordering) without
        touching any lot. Raises the first InvalidEventError or OutOfOrderEventError.
        """
        if event_indices is None:
            event_indices = range(len(events))
        # Carried-over lots count as already processed acquisitions.
        last_timestamp_by_asset: Dict[str, datetime] = self._latest_carried_acquisitions()
        for event, event_index in zip(events, event_indices):
            if not isinstance(event, LedgerEvent):
                raise InvalidEventError(f"Expected a LedgerEvent, got {type(event).__name__}", event_index=event_index)

            if self.period is not None:
                try:
                    inside = self.period.contains(event.timestamp)
                except TypeError as e:
                    raise InvalidEventError(
                        f"Timestamp {event.timestamp} is not comparable with period {self.period.label} bounds: {e}",
                        event_index=event_index, event_id=event.event_id,
                    ) from e
                if not inside:
                    raise InvalidEventError(
                        f"Timestamp {event.timestamp} lies outside reporting period {self.period.label} "
                        f"({self.period.start} - {self.period.end})",
                        event_index=event_index, event_id=event.event_id,
                    )

            previous = last_timestamp_by_asset.get(event.asset)
            if previous is not None:
                try:
                    out_of_order = event.timestamp < previous
                except TypeError as e:
                    raise InvalidEventError(
                        f"Timestamp {event.timestamp} is not comparable with the previous {event.asset} timestamp {previous}: {e}",
                        event_index=event_index, event_id=event.event_id,
                    ) from e
                if out_of_order:
                    if self.strict_ordering:
                        logger.error(f"Out-of-order event {event.event_id} for asset {event.asset} at index {event_index}.")
                        raise OutOfOrderEventError(event.asset, event_index, timestamp=event.timestamp, previous_timestamp=previous)
                    logger.warning(
                        f"Event {event.event_id} for asset {event.asset} at index {event_index} ({event.timestamp}) "
                        f"precedes the previous event of that asset ({previous}). Processing in the given order."
                    )
            last_timestamp_by_asset[event.asset] = event.timestamp

    def run(self, events: Sequence[LedgerEvent], event_indices: Optional[Sequence[int]] = None) -> SessionResult:
        events = list(events)
        if event_indices is None:
            event_indices = list(range(len(events)))
        elif len(event_indices) != len(events):
            raise ValueError(f"Got {len(event_indices)} event indices for {len(events)} events.")

        label = self.period.label if self.period else "unbounded"
        logger.info(f"Starting calculation session for period {label} with {len(events)} events "
                    f"and carried-over lots for {len(self.carried_over)} assets.")

        self.validate(events, event_indices)

        lot_store = LotStore.from_snapshots(self.carried_over)
        matched_portions: List[MatchedPortion] = []

        for event, event_index in zip(events, event_indices):
            processor = self.event_processor_map.get(event.kind)
            if processor is None:
                raise InvalidEventError(f"No processor for event kind {event.kind}", event_index=event_index, event_id=event.event_id)
            logger.debug(f"Dispatching event {event.event_id} ({event.kind.name} {event.quantity} {event.asset}) to {type(processor).__name__}")
            matched_portions.extend(processor.process(event, lot_store, event_index))

        summary = self.aggregator.fold(matched_portions, self.period)
        result = SessionResult(
            summary=summary,
            carryover=lot_store.snapshots(),
            closed_lots=lot_store.all_closed_lots(),
            period=self.period,
        )
        logger.info(f"Calculation session for period {label} finished: {len(matched_portions)} matched portions, "
                    f"net gain/loss {summary.net_gain_loss}, open lots carried over for {len(result.carryover)} assets.")
        return result
