"""
Test Group: Boundary Parsing

Normalized ledger CSV rows into LedgerEvents and carry-over JSON snapshots
into TaxLots, with exact decimal preservation.
"""

import os
import pytest
from datetime import datetime
from decimal import Decimal

from fifo_gains.domain.enums import EventKind
from fifo_gains.domain.errors import InvalidEventError
from fifo_gains.engine.calculation_session import CalculationSession
from fifo_gains.parsers.ledger_parser import parse_ledger_events_csv, parse_ledger_records
from fifo_gains.parsers.raw_models import RawLedgerRecord, RawTaxLotRecord
from fifo_gains.parsers.snapshot_io import (
    carryover_from_json_dict, carryover_to_json_dict, load_carryover, save_carryover,
)
from tests.support.builders import make_lot


CSV_HEADER = "event_id,asset,kind,quantity,gross_value,timestamp,description\n"


def write_csv(directory, body, name="events.csv"):
    path = os.path.join(directory, name)
    with open(path, "w", encoding="utf-8") as f:
        f.write(CSV_HEADER + body)
    return path


class TestLedgerRecords:

    def test_valid_row(self):
        events = parse_ledger_records([{
            "event_id": "E1", "asset": "XYZ", "kind": "acquisition",
            "quantity": "0.12345678", "gross_value": "1,234.56", "timestamp": "2023-05-01T10:15:00+02:00",
        }])
        event = events[0]
        assert event.event_id == "E1"
        assert event.kind == EventKind.ACQUISITION
        assert event.quantity == Decimal("0.12345678")
        assert event.gross_value == Decimal("1234.56")
        assert event.timestamp.utcoffset().total_seconds() == 7200

    def test_date_only_timestamp_is_midnight(self):
        event = parse_ledger_records([{
            "asset": "XYZ", "kind": "DISPOSAL", "quantity": "1", "gross_value": "5", "timestamp": "2023-05-01",
        }])[0]
        assert event.timestamp == datetime(2023, 5, 1)

    def test_missing_event_id_derived_from_row_number(self):
        events = parse_ledger_records([
            {"event_id": "E1", "asset": "XYZ", "kind": "ACQUISITION", "quantity": "1", "gross_value": "5", "timestamp": "2023-05-01"},
            {"event_id": "", "asset": "XYZ", "kind": "DISPOSAL", "quantity": "1", "gross_value": "5", "timestamp": "2023-05-02"},
        ], first_row_number=2)
        assert [e.event_id for e in events] == ["E1", "row-3"]

    def test_reloading_file_without_ids_gives_equal_results(self, temp_data_dir):
        path = write_csv(temp_data_dir, ",XYZ,ACQUISITION,3,30,2023-01-01,\n"
                                        ",XYZ,DISPOSAL,2,50,2023-03-01,\n")
        first = CalculationSession().run(parse_ledger_events_csv(path))
        second = CalculationSession().run(parse_ledger_events_csv(path))

        assert first.summary == second.summary
        assert first.carryover == second.carryover
        assert first.carryover["XYZ"][0].lot_id == "lot-row-2"
        assert first.summary.matched_portions[0].disposal_event_id == "row-3"

    def test_pascal_case_headers(self):
        record = RawLedgerRecord.model_validate({
            "Asset": "XYZ", "Kind": "DISPOSAL", "Quantity": "2", "GrossValue": "10", "Timestamp": "2023-01-01",
        })
        assert record.asset == "XYZ"
        assert record.gross_value == Decimal("10")

    @pytest.mark.parametrize(
        "overrides",
        [
            {"kind": "TRANSFER"},
            {"quantity": "abc"},
            {"quantity": ""},
            {"timestamp": "not a date"},
            {"quantity": "0"},
            {"quantity": "-1"},
            {"gross_value": "-5"},
            {"asset": ""},
        ],
        ids=["unknown_kind", "bad_quantity", "empty_quantity", "bad_timestamp",
             "zero_quantity", "negative_quantity", "negative_value", "empty_asset"],
    )
    def test_invalid_row_names_row(self, overrides):
        good = {"asset": "XYZ", "kind": "ACQUISITION", "quantity": "1", "gross_value": "5", "timestamp": "2023-01-01"}
        row = dict(good, **overrides)
        with pytest.raises(InvalidEventError) as exc_info:
            parse_ledger_records([good, row], first_row_number=2)
        assert "row 3" in str(exc_info.value)
        assert exc_info.value.event_index == 1


class TestLedgerCsv:

    def test_parse_csv_keeps_row_order(self, temp_data_dir):
        path = write_csv(temp_data_dir,
                         "A1,XYZ,ACQUISITION,2,100,2022-01-01T00:00:00,first buy\n"
                         "D1,XYZ,DISPOSAL,1,80,2022-03-01T00:00:00,\n")
        events = parse_ledger_events_csv(path)
        assert [e.event_id for e in events] == ["A1", "D1"]
        assert events[0].description == "first buy"
        assert events[1].description is None

    def test_missing_file(self, temp_data_dir):
        with pytest.raises(FileNotFoundError):
            parse_ledger_events_csv(os.path.join(temp_data_dir, "missing.csv"))


class TestCarryoverSnapshots:

    def test_round_trip_is_lossless(self, temp_data_dir):
        lot = make_lot("lot-A2", "3", "70.0000000000000000000000001", "2022-01-11T00:00:00", remaining="0.333333333333")
        aware_lot = make_lot("lot-B1", "1", "10", "2022-01-11T08:00:00+00:00", asset="ABC")
        path = os.path.join(temp_data_dir, "cache", "open_lots.json")

        save_carryover({"XYZ": [lot], "ABC": [aware_lot]}, path)
        loaded = load_carryover(path)

        assert loaded == {"ABC": [aware_lot], "XYZ": [lot]}
        assert str(loaded["XYZ"][0].unit_cost_basis) == "70.0000000000000000000000001"
        assert loaded["ABC"][0].acquired_at.tzinfo is not None

    def test_decimals_stored_as_strings(self):
        data = carryover_to_json_dict({"XYZ": [make_lot("L1", "1.5", "0.1", "2022-01-01T00:00:00")]})
        raw_lot = data["lots"]["XYZ"][0]
        assert data["format_version"] == 1
        assert raw_lot["original_quantity"] == "1.5"
        assert raw_lot["unit_cost_basis"] == "0.1"
        assert raw_lot["acquired_at"] == "2022-01-01T00:00:00"

    def test_unsupported_version(self):
        with pytest.raises(ValueError):
            carryover_from_json_dict({"format_version": 99, "lots": {}})

    @pytest.mark.parametrize("document", [[], ["XYZ"], "lots", None], ids=["empty_list", "list", "string", "null"])
    def test_top_level_must_be_an_object(self, document):
        with pytest.raises(ValueError):
            carryover_from_json_dict(document)

    def test_json_list_file_rejected(self, temp_data_dir):
        path = os.path.join(temp_data_dir, "list.json")
        with open(path, "w", encoding="utf-8") as f:
            f.write("[]")
        with pytest.raises(ValueError):
            load_carryover(path)

    def test_lot_under_wrong_asset(self):
        raw = RawTaxLotRecord.from_tax_lot(make_lot("L1", "1", "1", "2022-01-01T00:00:00", asset="AAA")).to_json_dict()
        with pytest.raises(ValueError):
            carryover_from_json_dict({"format_version": 1, "lots": {"BBB": [raw]}})

    def test_invalid_lot_fields(self):
        raw = RawTaxLotRecord.from_tax_lot(make_lot("L1", "1", "1", "2022-01-01T00:00:00")).to_json_dict()
        raw["remaining_quantity"] = "2"
        with pytest.raises(ValueError):
            carryover_from_json_dict({"format_version": 1, "lots": {"XYZ": [raw]}})

    def test_corrupt_json(self, temp_data_dir):
        path = os.path.join(temp_data_dir, "broken.json")
        with open(path, "w", encoding="utf-8") as f:
            f.write("{not json")
        with pytest.raises(ValueError):
            load_carryover(path)
