# fifo_gains/pipeline_runner.py
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import fifo_gains.config as config

from fifo_gains.domain.errors import LotEngineError
from fifo_gains.domain.events import LedgerEvent
from fifo_gains.domain.lots import TaxLot
from fifo_gains.domain.results import ReportingPeriod, SessionResult
from fifo_gains.engine.calculation_session import CalculationSession
from fifo_gains.engine.partitioned_runner import run_partitioned_session
from fifo_gains.parsers.ledger_parser import parse_ledger_events_csv
from fifo_gains.parsers.snapshot_io import load_carryover, save_carryover
from fifo_gains.utils.sorting_utils import sort_events_chronologically

logger = logging.getLogger(__name__)

class ProcessingOutput:
    """
    Encapsulates the results of one period run through the pipeline.
    """
    def __init__(self,
                 session_result: SessionResult,
                 events: List[LedgerEvent],
                 carried_over_in: Dict[str, List[TaxLot]],
                 carryover_out_path: Optional[str] = None):
        self.session_result = session_result
        self.events = events
        self.carried_over_in = carried_over_in
        self.carryover_out_path = carryover_out_path

    @property
    def summary(self):
        return self.session_result.summary

    @property
    def carryover(self) -> Dict[str, List[TaxLot]]:
        return self.session_result.carryover


def run_session(events: Sequence[LedgerEvent],
                period: Optional[ReportingPeriod] = None,
                carried_over: Optional[Mapping[str, Sequence[TaxLot]]] = None,
                *,
                strict_ordering: bool = config.STRICT_EVENT_ORDERING,
                sort_events: bool = False,
                parallel: bool = False,
                max_workers: int = config.PARTITION_MAX_WORKERS,
                timeout: Optional[float] = config.SESSION_TIMEOUT_SECONDS) -> SessionResult:
    """Runs one period over in-memory events, sequentially or partitioned per asset."""
    events = sort_events_chronologically(events) if sort_events else list(events)
    if parallel:
        return run_partitioned_session(
            events, period, carried_over,
            max_workers=max_workers, timeout=timeout, strict_ordering=strict_ordering,
        )
    session = CalculationSession(period, carried_over, strict_ordering=strict_ordering)
    return session.run(events)


def run_period_pipeline(
    events_file_path: str,
    carryover_in_path: Optional[str] = None,
    carryover_out_path: Optional[str] = None,
    period: Optional[ReportingPeriod] = None,
    *,
    strict_ordering: bool = config.STRICT_EVENT_ORDERING,
    sort_events: bool = False,
    parallel: bool = False,
    max_workers: int = config.PARTITION_MAX_WORKERS,
    timeout: Optional[float] = config.SESSION_TIMEOUT_SECONDS,
) -> ProcessingOutput:
    """
    Loads the ledger CSV and the optional carry-over file, runs the period and, only
    when the run succeeded, writes the new carry-over file.
    """
    logger.info(f"Loading ledger events from {events_file_path}...")
    try:
        events = parse_ledger_events_csv(events_file_path)
    except (LotEngineError, OSError) as e:
        logger.critical(f"Loading ledger events failed: {e}. Check input data.")
        raise

    carried_over: Dict[str, List[TaxLot]] = {}
    if carryover_in_path:
        try:
            carried_over = load_carryover(carryover_in_path)
        except (ValueError, OSError) as e:
            logger.critical(f"Loading carry-over lots from {carryover_in_path} failed: {e}.")
            raise

    label = period.label if period else "unbounded"
    logger.info(f"Running calculation for period {label} ({'partitioned' if parallel else 'sequential'})...")
    try:
        session_result = run_session(
            events, period, carried_over,
            strict_ordering=strict_ordering, sort_events=sort_events,
            parallel=parallel, max_workers=max_workers, timeout=timeout,
        )
    except LotEngineError as e:
        logger.critical(f"Calculation for period {label} failed: {e}. No carry-over written.")
        raise

    if carryover_out_path:
        save_carryover(session_result.carryover, carryover_out_path)

    return ProcessingOutput(
        session_result=session_result,
        events=events,
        carried_over_in=carried_over,
        carryover_out_path=carryover_out_path,
    )


def run_consecutive_periods(
    period_inputs: Sequence[Tuple[Optional[ReportingPeriod], Sequence[LedgerEvent]]],
    initial_carryover: Optional[Mapping[str, Sequence[TaxLot]]] = None,
    **options: Any,
) -> List[SessionResult]:
    """
    Runs periods one after the other, handing each period's open lots to the next.
    Period N is complete before period N+1 starts; a failure stops the chain and
    the results of the periods already completed are not returned.
    """
    carryover: Optional[Mapping[str, Sequence[TaxLot]]] = initial_carryover
    results: List[SessionResult] = []
    for period, events in period_inputs:
        result = run_session(events, period, carryover, **options)
        results.append(result)
        carryover = result.carryover
    logger.info(f"Completed {len(results)} consecutive periods.")
    return results
