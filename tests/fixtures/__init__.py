"""
Test Fixtures Module

YAML-based scenario specs (fifo_scenarios.yaml) parsed into dataclass specs.
Each scenario lists the ledger events of one calculation session and the
matched portions, period totals and open lots it must produce.

Use load_yaml_spec() to read a file and parse_scenarios() to turn it into
ScenarioSpec objects for pytest.mark.parametrize.
"""

from pathlib import Path
from typing import Any, Dict, List
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
import yaml

from fifo_gains.domain.enums import EventKind, HoldingTerm
from fifo_gains.domain.events import LedgerEvent


FIXTURES_DIR = Path(__file__).parent


@dataclass
class EventSpec:
    """Parsed ledger event from YAML spec."""
    id: str
    asset: str
    kind: str
    qty: Decimal
    value: Decimal
    timestamp: str

    def to_ledger_event(self) -> LedgerEvent:
        return LedgerEvent(
            asset=self.asset,
            kind=EventKind[self.kind],
            quantity=self.qty,
            gross_value=self.value,
            timestamp=datetime.fromisoformat(self.timestamp),
            event_id=self.id,
        )


@dataclass
class ExpectedPortionSpec:
    lot_id: str
    qty: Decimal
    cost: Decimal
    proceeds: Decimal
    gain_loss: Decimal
    term: HoldingTerm
    holding_days: int


@dataclass
class ExpectedOpenLotSpec:
    asset: str
    lot_id: str
    remaining: Decimal
    unit_cost: Decimal


@dataclass
class ScenarioSpec:
    """A single scenario parsed from YAML."""
    id: str
    description: str
    events: List[EventSpec]
    expected_portions: List[ExpectedPortionSpec]
    expected_totals: Dict[str, Decimal]
    expected_open_lots: List[ExpectedOpenLotSpec] = field(default_factory=list)

    def ledger_events(self) -> List[LedgerEvent]:
        return [event.to_ledger_event() for event in self.events]


def _decimal_constructor(loader: yaml.SafeLoader, node: yaml.ScalarNode) -> Decimal:
    """YAML constructor for Decimal values."""
    value = loader.construct_scalar(node)
    return Decimal(str(value))


def _parse_event(event_dict: Dict) -> EventSpec:
    return EventSpec(
        id=str(event_dict["id"]),
        asset=event_dict["asset"],
        kind=event_dict["kind"],
        qty=Decimal(str(event_dict["qty"])),
        value=Decimal(str(event_dict["value"])),
        timestamp=str(event_dict["timestamp"]),
    )


def _parse_portion(portion_dict: Dict) -> ExpectedPortionSpec:
    return ExpectedPortionSpec(
        lot_id=portion_dict["lot_id"],
        qty=Decimal(str(portion_dict["qty"])),
        cost=Decimal(str(portion_dict["cost"])),
        proceeds=Decimal(str(portion_dict["proceeds"])),
        gain_loss=Decimal(str(portion_dict["gain_loss"])),
        term=HoldingTerm[portion_dict["term"]],
        holding_days=int(portion_dict["holding_days"]),
    )


def _parse_open_lot(lot_dict: Dict) -> ExpectedOpenLotSpec:
    return ExpectedOpenLotSpec(
        asset=lot_dict["asset"],
        lot_id=lot_dict["lot_id"],
        remaining=Decimal(str(lot_dict["remaining"])),
        unit_cost=Decimal(str(lot_dict["unit_cost"])),
    )


def load_yaml_spec(filename: str) -> Dict[str, Any]:
    """
    Load a YAML test specification file.

    Args:
        filename: Name of the YAML file in the fixtures directory

    Returns:
        Parsed YAML content as a dictionary
    """
    filepath = FIXTURES_DIR / filename

    # Register Decimal constructor for numeric values
    yaml.add_constructor("!decimal", _decimal_constructor, Loader=yaml.SafeLoader)

    with open(filepath, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def parse_scenarios(spec_data: Dict[str, Any]) -> List[ScenarioSpec]:
    scenarios = []
    for test_dict in spec_data.get("tests", []):
        expected = test_dict.get("expected", {})
        scenarios.append(ScenarioSpec(
            id=test_dict["id"],
            description=test_dict["description"],
            events=[_parse_event(e) for e in test_dict.get("events", [])],
            expected_portions=[_parse_portion(p) for p in expected.get("portions", [])],
            expected_totals={k: Decimal(str(v)) for k, v in expected.get("totals", {}).items()},
            expected_open_lots=[_parse_open_lot(l) for l in expected.get("open_lots", []) or []],
        ))
    return scenarios


def get_fifo_scenarios() -> List[ScenarioSpec]:
    """Load and parse the core FIFO scenario specifications."""
    return parse_scenarios(load_yaml_spec("fifo_scenarios.yaml"))
