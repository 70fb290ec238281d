# fifo_gains/utils/type_utils.py
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from datetime import datetime, date

from dateutil import parser as dateutil_parser


def safe_decimal(value: Any, default: Optional[Decimal] = None, raise_error: bool = False) -> Optional[Decimal]:
    """
    Safely converts a value to a Decimal.
    Handles None, empty strings and strings with thousands separators ("1,234.56").
    Floats go through str() so the shortest repr is kept rather than the binary expansion.
    If raise_error is True, re-raises InvalidOperation instead of returning default.
    """
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        if raise_error:
            raise InvalidOperation(f"Refusing to convert bool {value!r} to Decimal")
        return default
    if isinstance(value, (int, float)):
        return Decimal(str(value))

    s_value = str(value).strip().replace('_', '')
    if not s_value:
        return default

    if '.' in s_value and ',' in s_value:
        s_value = s_value.replace(',', '')
    try:
        return Decimal(s_value)
    except InvalidOperation as e:
        if raise_error:
            raise e
        return default


def parse_timestamp(value: Any, default: Optional[datetime] = None) -> Optional[datetime]:
    """
    Parses an ISO 8601 timestamp (or anything dateutil understands) into a datetime.
    A bare date means midnight of that day. Timezone information is kept as given.
    """
    if value is None:
        return default
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    s_value = str(value).strip()
    if not s_value:
        return default
    try:
        return datetime.fromisoformat(s_value)
    except ValueError:
        pass
    try:
        return dateutil_parser.isoparse(s_value)
    except ValueError:
        pass
    try:
        return dateutil_parser.parse(s_value)
    except (ValueError, OverflowError):
        return default
