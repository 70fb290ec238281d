# fifo_gains/parsers/ledger_parser.py
import csv
import logging
from typing import Any, Iterable, List, Mapping

from pydantic import ValidationError

from fifo_gains.domain.errors import InvalidEventError
from fifo_gains.domain.events import LedgerEvent
from .raw_models import RawLedgerRecord

logger = logging.getLogger(__name__)


def parse_ledger_records(rows: Iterable[Mapping[str, Any]], first_row_number: int = 1) -> List[LedgerEvent]:
    """
    Converts already-normalized ledger rows into LedgerEvents, keeping row order.
    The first invalid row aborts the whole load with InvalidEventError naming the row.
    Rows without an event_id get "row-<row number>", so reloading the same file
    yields the same ids.
    """
    events: List[LedgerEvent] = []
    for i, row_dict in enumerate(rows):
        row_number = first_row_number + i
        try:
            raw_record = RawLedgerRecord.model_validate(dict(row_dict))
            events.append(raw_record.to_ledger_event(default_event_id=f"row-{row_number}"))
        except ValidationError as e:
            problems = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
            logger.error(f"Validation error in ledger row {row_number}: {row_dict}. Error: {problems}")
            raise InvalidEventError(f"Ledger row {row_number} is invalid: {problems}", event_index=i) from e
        except InvalidEventError as e:
            logger.error(f"Invalid ledger event in row {row_number}: {row_dict}. Error: {e.reason}")
            raise InvalidEventError(f"Ledger row {row_number} is invalid: {e.reason}", event_index=i, event_id=e.event_id) from e
    return events


def parse_ledger_events_csv(file_path: str, encoding='utf-8-sig') -> List[LedgerEvent]:
    with open(file_path, mode='r', encoding=encoding, newline='') as csvfile:
        reader = csv.DictReader(csvfile)
        # Row 1 is the header
        events = parse_ledger_records(reader, first_row_number=2)
    logger.info(f"Loaded {len(events)} ledger events from {file_path}.")
    return events
