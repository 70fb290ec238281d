# fifo_gains/__init__.py
from fifo_gains.domain import (
    EventKind, HoldingTerm, LotStatus,
    LotEngineError, InvalidEventError, OutOfOrderEventError, InsufficientLotsError,
    LedgerEvent, TaxLot, MatchedPortion, DisposalDetail, PeriodSummary, ReportingPeriod, SessionResult,
)
from fifo_gains.engine.calculation_session import CalculationSession
from fifo_gains.engine.partitioned_runner import run_partitioned_session

__version__ = "1.0.0"
