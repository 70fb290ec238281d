# fifo_gains/domain/__init__.py
from .enums import EventKind, HoldingTerm, LotStatus
from .errors import LotEngineError, InvalidEventError, OutOfOrderEventError, InsufficientLotsError
from .events import LedgerEvent
from .lots import TaxLot
from .results import MatchedPortion, DisposalDetail, PeriodSummary, ReportingPeriod, SessionResult
