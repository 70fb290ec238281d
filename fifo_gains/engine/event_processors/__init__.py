from .base_processor import EventProcessor
from .ledger_processors import AcquisitionProcessor, DisposalProcessor

__all__ = ["EventProcessor", "AcquisitionProcessor", "DisposalProcessor"]
