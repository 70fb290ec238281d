# fifo_gains/domain/results.py
from dataclasses import dataclass, field, KW_ONLY
from datetime import date, datetime, time
from decimal import Decimal, Context
from typing import Dict, List, Optional, Tuple

import logging

from .enums import HoldingTerm
from .lots import TaxLot
from fifo_gains import config as global_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportingPeriod:
    label: str
    start: Optional[datetime] = None # inclusive
    end: Optional[datetime] = None   # inclusive

    def __post_init__(self):
        if self.start is not None and self.end is not None and self.end < self.start:
            raise ValueError(f"ReportingPeriod {self.label}: end {self.end} precedes start {self.start}")

    @classmethod
    def for_tax_year(cls, year: int, tzinfo=None) -> "ReportingPeriod":
        return cls(
            label=str(year),
            start=datetime(year, 1, 1, tzinfo=tzinfo),
            end=datetime.combine(date(year, 12, 31), time.max, tzinfo=tzinfo),
        )

    def contains(self, timestamp: datetime) -> bool:
        if self.start is not None and timestamp < self.start:
            return False
        if self.end is not None and timestamp > self.end:
            return False
        return True


@dataclass(frozen=True)
class MatchedPortion:
    disposal_event_id: str
    lot_id: str
    asset: str
    matched_quantity: Decimal
    allocated_proceeds: Decimal
    allocated_cost_basis: Decimal
    gain_loss: Decimal
    term: HoldingTerm
    holding_days: int

    _: KW_ONLY
    acquired_at: Optional[datetime] = None
    disposed_at: Optional[datetime] = None
    event_index: Optional[int] = None # position of the disposal in the period's event list

    def __post_init__(self):
        if not isinstance(self.term, HoldingTerm):
            raise TypeError(f"MatchedPortion.term must be a HoldingTerm, got {type(self.term)}")
        if not isinstance(self.matched_quantity, Decimal) or self.matched_quantity <= Decimal(0):
            raise ValueError(f"MatchedPortion.matched_quantity must be a positive Decimal, got {self.matched_quantity}")

    @property
    def is_long_term(self) -> bool:
        return self.term == HoldingTerm.LONG


@dataclass(frozen=True)
class DisposalDetail:
    disposal_event_id: str
    asset: str
    disposed_at: Optional[datetime]
    quantity: Decimal
    proceeds: Decimal
    cost_basis: Decimal
    gain_loss: Decimal
    portions: Tuple[MatchedPortion, ...]


@dataclass(frozen=True)
class PeriodSummary:
    short_term_gains: Decimal
    long_term_gains: Decimal
    short_term_losses: Decimal
    long_term_losses: Decimal
    total_gains: Decimal
    total_losses: Decimal
    net_gain_loss: Decimal
    total_cost_basis: Decimal
    total_proceeds: Decimal
    matched_portions: Tuple[MatchedPortion, ...] = ()

    _: KW_ONLY
    period: Optional[ReportingPeriod] = None

    def assets(self) -> List[str]:
        return sorted({portion.asset for portion in self.matched_portions})

    def disposal_details(self) -> List[DisposalDetail]:
        """Groups matched portions per disposal, keeping disposal-processing order."""
        ctx = Context(prec=global_config.INTERNAL_CALCULATION_PRECISION, rounding=global_config.DECIMAL_ROUNDING_MODE)
        grouped: Dict[str, List[MatchedPortion]] = {}
        for portion in self.matched_portions:
            grouped.setdefault(portion.disposal_event_id, []).append(portion)

        details: List[DisposalDetail] = []
        for disposal_id, portions in grouped.items():
            quantity = Decimal(0)
            proceeds = Decimal(0)
            cost_basis = Decimal(0)
            gain_loss = Decimal(0)
            for portion in portions:
                quantity = ctx.add(quantity, portion.matched_quantity)
                proceeds = ctx.add(proceeds, portion.allocated_proceeds)
                cost_basis = ctx.add(cost_basis, portion.allocated_cost_basis)
                gain_loss = ctx.add(gain_loss, portion.gain_loss)
            details.append(DisposalDetail(
                disposal_event_id=disposal_id, asset=portions[0].asset,
                disposed_at=portions[0].disposed_at, quantity=quantity,
                proceeds=proceeds, cost_basis=cost_basis, gain_loss=gain_loss,
                portions=tuple(portions),
            ))
        return details


@dataclass
class SessionResult:
    summary: PeriodSummary
    carryover: Dict[str, List[TaxLot]] = field(default_factory=dict) # open lots per asset, FIFO order
    closed_lots: Dict[str, List[TaxLot]] = field(default_factory=dict) # lots closed during the run, for audit
    period: Optional[ReportingPeriod] = None

    def open_quantity(self, asset: str) -> Decimal:
        return sum((lot.remaining_quantity for lot in self.carryover.get(asset, [])), Decimal(0))
