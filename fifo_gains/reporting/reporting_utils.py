# fifo_gains/reporting/reporting_utils.py
import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

import fifo_gains.config as config


logger = logging.getLogger(__name__)

def _q(val: Optional[Decimal | int | str]) -> Decimal:
    """Quantize a monetary amount for display. Engine values are never rounded, only their presentation."""
    if val is None:
        return Decimal('0.00')
    if not isinstance(val, Decimal):
        try:
            val = Decimal(str(val))
        except InvalidOperation:
            logger.error(f"Could not convert value '{val}' of type {type(val)} to Decimal in _q. Returning 0.00.")
            return Decimal('0.00')
    return val.quantize(config.OUTPUT_PRECISION_AMOUNTS, rounding=ROUND_HALF_UP)

def _q_qty(val: Optional[Decimal | int | str]) -> Decimal:
    """Quantize a quantity for display."""
    if val is None:
        return Decimal('0').quantize(config.PRECISION_QUANTITY, rounding=ROUND_HALF_UP)
    if not isinstance(val, Decimal):
        try:
            val = Decimal(str(val))
        except InvalidOperation:
            logger.error(f"Could not convert value '{val}' of type {type(val)} to Decimal in _q_qty. Returning zero.")
            return Decimal('0').quantize(config.PRECISION_QUANTITY, rounding=ROUND_HALF_UP)
    return val.quantize(config.PRECISION_QUANTITY, rounding=ROUND_HALF_UP)
