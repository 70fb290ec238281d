# fifo_gains/engine/partitioned_runner.py
import logging
import math
from concurrent import futures
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from fifo_gains.domain.errors import InvalidEventError
from fifo_gains.domain.events import LedgerEvent
from fifo_gains.domain.lots import TaxLot
from fifo_gains.domain.results import ReportingPeriod, SessionResult
from fifo_gains.engine.calculation_session import CalculationSession
from fifo_gains.engine.period_aggregator import PeriodAggregator
import fifo_gains.config as global_config

logger = logging.getLogger(__name__)


def partition_events_by_asset(events: Sequence[LedgerEvent]) -> Dict[str, Tuple[List[LedgerEvent], List[int]]]:
    """Splits the batch per asset, keeping each event's position in the original batch."""
    partitions: Dict[str, Tuple[List[LedgerEvent], List[int]]] = {}
    for event_index, event in enumerate(events):
        if not isinstance(event, LedgerEvent):
            raise InvalidEventError(f"Expected a LedgerEvent, got {type(event).__name__}", event_index=event_index)
        asset_events, asset_indices = partitions.setdefault(event.asset, ([], []))
        asset_events.append(event)
        asset_indices.append(event_index)
    return partitions


def _error_position(error: BaseException) -> float:
    event_index = getattr(error, "event_index", None)
    return event_index if event_index is not None else math.inf


def run_partitioned_session(events: Sequence[LedgerEvent],
                            period: Optional[ReportingPeriod] = None,
                            carried_over: Optional[Mapping[str, Sequence[TaxLot]]] = None,
                            *,
                            max_workers: int = global_config.PARTITION_MAX_WORKERS,
                            timeout: Optional[float] = global_config.SESSION_TIMEOUT_SECONDS,
                            strict_ordering: bool = global_config.STRICT_EVENT_ORDERING,
                            internal_calculation_precision: int = global_config.INTERNAL_CALCULATION_PRECISION,
                            decimal_rounding_mode: str = global_config.DECIMAL_ROUNDING_MODE,
                            long_term_threshold_days: int = global_config.LONG_TERM_HOLDING_THRESHOLD_DAYS) -> SessionResult:
    """
    Runs one CalculationSession per asset on a thread pool and merges the results.
    Assets share no lots, so no locking is needed; the merged summary equals the
    one a single sequential session produces over the same batch.

    The whole batch is validated before fanning out, so input errors surface
    exactly as in a sequential run. If a partition then fails nothing is returned
    and the error raised by the event with the lowest index is re-raised. If the
    whole unit of work does not finish within `timeout` seconds,
    concurrent.futures.TimeoutError is raised.
    """
    events = list(events)
    carried_over = carried_over or {}
    session_options = dict(
        strict_ordering=strict_ordering,
        internal_calculation_precision=internal_calculation_precision,
        decimal_rounding_mode=decimal_rounding_mode,
        long_term_threshold_days=long_term_threshold_days,
    )
    CalculationSession(period, carried_over, **session_options).validate(events)
    partitions = partition_events_by_asset(events)
    all_assets = sorted(set(partitions) | set(carried_over))

    logger.info(f"Running partitioned session over {len(all_assets)} assets "
                f"({len(events)} events, max_workers={max_workers}, timeout={timeout}).")

    def run_asset(asset: str) -> SessionResult:
        asset_events, asset_indices = partitions.get(asset, ([], []))
        asset_carryover = {asset: carried_over[asset]} if asset in carried_over else {}
        session = CalculationSession(period, asset_carryover, **session_options)
        return session.run(asset_events, asset_indices)

    executor = futures.ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="fifo-partition")
    try:
        future_to_asset = {executor.submit(run_asset, asset): asset for asset in all_assets}
        done, not_done = futures.wait(future_to_asset, timeout=timeout)
        if not_done:
            pending = sorted(future_to_asset[f] for f in not_done)
            logger.error(f"Partitioned session timed out after {timeout}s; unfinished assets: {pending}")
            raise futures.TimeoutError(f"Partitioned session did not finish within {timeout} seconds (unfinished assets: {pending}).")

        errors = [f.exception() for f in done if f.exception() is not None]
        if errors:
            first_error = min(errors, key=_error_position)
            logger.error(f"{len(errors)} asset partition(s) failed; raising the earliest: {first_error}")
            raise first_error

        results: Dict[str, SessionResult] = {future_to_asset[f]: f.result() for f in done}
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    aggregator = PeriodAggregator(internal_calculation_precision, decimal_rounding_mode)
    summary = aggregator.merge((results[asset].summary for asset in all_assets), period)

    carryover: Dict[str, List[TaxLot]] = {}
    closed_lots: Dict[str, List[TaxLot]] = {}
    for asset in all_assets:
        carryover.update(results[asset].carryover)
        closed_lots.update(results[asset].closed_lots)

    logger.info(f"Partitioned session finished: net gain/loss {summary.net_gain_loss}.")
    return SessionResult(summary=summary, carryover=carryover, closed_lots=closed_lots, period=period)
