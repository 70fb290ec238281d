# fifo_gains/parsers/raw_models.py
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from fifo_gains.domain.enums import EventKind
from fifo_gains.domain.events import LedgerEvent
from fifo_gains.domain.lots import TaxLot
from fifo_gains.utils.type_utils import safe_decimal, parse_timestamp


def _parse_decimal(v: Any) -> Any:
    if v is None or (isinstance(v, str) and not v.strip()):
        return None
    parsed = safe_decimal(v)
    if parsed is None:
        raise ValueError(f"not a decimal number: {v!r}")
    return parsed


def _parse_timestamp(v: Any) -> Any:
    if v is None or (isinstance(v, str) and not v.strip()):
        return None
    parsed = parse_timestamp(v)
    if parsed is None:
        raise ValueError(f"not an ISO 8601 timestamp: {v!r}")
    return parsed


class RawBaseRecord(BaseModel):
    model_config = ConfigDict(extra='ignore', str_strip_whitespace=True)


class RawLedgerRecord(RawBaseRecord):
    # Normalized ledger columns, snake_case or PascalCase headers
    event_id: Optional[str] = Field(None, validation_alias=AliasChoices("event_id", "EventId"))
    asset: str = Field(validation_alias=AliasChoices("asset", "Asset"))
    kind: EventKind = Field(validation_alias=AliasChoices("kind", "Kind"))
    quantity: Decimal = Field(validation_alias=AliasChoices("quantity", "Quantity"))
    gross_value: Decimal = Field(validation_alias=AliasChoices("gross_value", "GrossValue"))
    timestamp: datetime = Field(validation_alias=AliasChoices("timestamp", "Timestamp"))
    description: Optional[str] = Field(None, validation_alias=AliasChoices("description", "Description"))

    @field_validator('quantity', 'gross_value', mode='before')
    @classmethod
    def parse_decimal_fields(cls, v: Any) -> Any:
        return _parse_decimal(v)

    @field_validator('timestamp', mode='before')
    @classmethod
    def parse_timestamp_field(cls, v: Any) -> Any:
        return _parse_timestamp(v)

    @field_validator('kind', mode='before')
    @classmethod
    def parse_kind(cls, v: Any) -> Any:
        if isinstance(v, EventKind):
            return v
        name = str(v or "").strip().upper()
        if name not in EventKind.__members__:
            raise ValueError(f"kind must be one of {', '.join(EventKind.__members__)}, got {v!r}")
        return EventKind[name]

    @field_validator('event_id', 'description', mode='before')
    @classmethod
    def empty_string_to_none(cls, v: Any) -> Optional[str]:
        if v is None or str(v).strip() == "":
            return None
        return str(v).strip()

    def to_ledger_event(self, default_event_id: Optional[str] = None) -> LedgerEvent:
        """
        Raises InvalidEventError when the values violate LedgerEvent's constraints.
        default_event_id is used when the row carries no event_id of its own.
        """
        optional_fields = {"description": self.description}
        event_id = self.event_id or default_event_id
        if event_id:
            optional_fields["event_id"] = event_id
        return LedgerEvent(
            asset=self.asset,
            kind=self.kind,
            quantity=self.quantity,
            gross_value=self.gross_value,
            timestamp=self.timestamp,
            **optional_fields,
        )


class RawTaxLotRecord(RawBaseRecord):
    lot_id: str
    asset: str
    original_quantity: Decimal
    remaining_quantity: Decimal
    unit_cost_basis: Decimal
    acquired_at: datetime
    source_event_id: Optional[str] = None

    @field_validator('original_quantity', 'remaining_quantity', 'unit_cost_basis', mode='before')
    @classmethod
    def parse_decimal_fields(cls, v: Any) -> Any:
        return _parse_decimal(v)

    @field_validator('acquired_at', mode='before')
    @classmethod
    def parse_acquired_at(cls, v: Any) -> Any:
        return _parse_timestamp(v)

    @classmethod
    def from_tax_lot(cls, lot: TaxLot) -> "RawTaxLotRecord":
        return cls(
            lot_id=lot.lot_id, asset=lot.asset,
            original_quantity=lot.original_quantity, remaining_quantity=lot.remaining_quantity,
            unit_cost_basis=lot.unit_cost_basis, acquired_at=lot.acquired_at,
            source_event_id=lot.source_event_id,
        )

    def to_tax_lot(self) -> TaxLot:
        return TaxLot(
            lot_id=self.lot_id, asset=self.asset,
            original_quantity=self.original_quantity, remaining_quantity=self.remaining_quantity,
            unit_cost_basis=self.unit_cost_basis, acquired_at=self.acquired_at,
            source_event_id=self.source_event_id,
        )

    def to_json_dict(self) -> dict:
        # Decimals as strings so no digit is lost to float conversion
        return {
            "lot_id": self.lot_id,
            "asset": self.asset,
            "original_quantity": str(self.original_quantity),
            "remaining_quantity": str(self.remaining_quantity),
            "unit_cost_basis": str(self.unit_cost_basis),
            "acquired_at": self.acquired_at.isoformat(),
            "source_event_id": self.source_event_id,
        }
