# fifo_gains/domain/lots.py
import dataclasses
from dataclasses import dataclass, KW_ONLY
from datetime import datetime
from decimal import Decimal, Context
from typing import Optional

from .enums import LotStatus
from .events import LedgerEvent


@dataclass
class TaxLot:
    lot_id: str
    asset: str
    original_quantity: Decimal
    remaining_quantity: Decimal
    unit_cost_basis: Decimal # Fixed at creation, never recomputed
    acquired_at: datetime

    _: KW_ONLY
    source_event_id: Optional[str] = None

    def __post_init__(self):
        if not self.lot_id:
            raise ValueError("TaxLot requires a non-empty lot_id.")
        if not isinstance(self.asset, str) or not self.asset:
            raise ValueError(f"TaxLot {self.lot_id}: asset must be a non-empty string, got {self.asset!r}")
        if not isinstance(self.original_quantity, Decimal) or not self.original_quantity.is_finite() or self.original_quantity <= Decimal(0):
            raise ValueError(f"TaxLot {self.lot_id}: original_quantity must be a positive finite Decimal: {self.original_quantity!r}")
        if not isinstance(self.remaining_quantity, Decimal) or not self.remaining_quantity.is_finite() or self.remaining_quantity < Decimal(0):
            raise ValueError(f"TaxLot {self.lot_id}: remaining_quantity must be a non-negative finite Decimal: {self.remaining_quantity!r}")
        if self.remaining_quantity > self.original_quantity:
            raise ValueError(f"TaxLot {self.lot_id}: remaining_quantity {self.remaining_quantity} exceeds original_quantity {self.original_quantity}")
        if not isinstance(self.unit_cost_basis, Decimal) or not self.unit_cost_basis.is_finite() or self.unit_cost_basis < Decimal(0):
            raise ValueError(f"TaxLot {self.lot_id}: unit_cost_basis must be a non-negative finite Decimal: {self.unit_cost_basis!r}")
        if not isinstance(self.acquired_at, datetime):
            raise ValueError(f"TaxLot {self.lot_id}: acquired_at must be a datetime, got {type(self.acquired_at).__name__}")

    @classmethod
    def from_acquisition(cls, event: LedgerEvent, ctx: Context) -> "TaxLot":
        if not event.is_acquisition:
            raise ValueError(f"Cannot open a lot from {event.kind.name} event {event.event_id}.")
        return cls(
            lot_id=f"lot-{event.event_id}",
            asset=event.asset,
            original_quantity=event.quantity,
            remaining_quantity=event.quantity,
            unit_cost_basis=ctx.divide(event.gross_value, event.quantity),
            acquired_at=event.timestamp,
            source_event_id=event.event_id,
        )

    @property
    def closed(self) -> bool:
        return self.remaining_quantity == Decimal(0)

    @property
    def status(self) -> LotStatus:
        if self.closed:
            return LotStatus.CLOSED
        if self.remaining_quantity < self.original_quantity:
            return LotStatus.PARTIALLY_CONSUMED
        return LotStatus.OPEN

    @property
    def cost_basis(self) -> Decimal:
        return self.unit_cost_basis * self.original_quantity

    @property
    def remaining_cost_basis(self) -> Decimal:
        return self.unit_cost_basis * self.remaining_quantity

    def consume(self, quantity: Decimal, ctx: Context) -> None:
        if quantity <= Decimal(0):
            raise ValueError(f"TaxLot {self.lot_id}: consumed quantity must be positive, got {quantity}")
        if quantity > self.remaining_quantity:
            raise ValueError(f"TaxLot {self.lot_id}: cannot consume {quantity}, only {self.remaining_quantity} remaining")
        self.remaining_quantity = ctx.subtract(self.remaining_quantity, quantity)

    def copy(self) -> "TaxLot":
        return dataclasses.replace(self)
