# fifo_gains/domain/enums.py
from enum import Enum, auto

class EventKind(Enum):
    ACQUISITION = auto()
    DISPOSAL = auto()

class HoldingTerm(Enum):
    """Holding-period classification of a matched portion."""
    SHORT = auto()
    LONG = auto()

class LotStatus(Enum):
    OPEN = auto()
    PARTIALLY_CONSUMED = auto()
    CLOSED = auto() # remaining quantity is zero; kept for audit only
