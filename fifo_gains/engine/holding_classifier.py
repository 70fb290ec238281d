# fifo_gains/engine/holding_classifier.py
import logging
from datetime import datetime, timedelta

from fifo_gains.domain.enums import HoldingTerm
from fifo_gains.domain.errors import InvalidEventError
import fifo_gains.config as global_config

logger = logging.getLogger(__name__)


def _elapsed(acquired_at: datetime, disposed_at: datetime) -> timedelta:
    try:
        return disposed_at - acquired_at
    except TypeError as e:
        raise InvalidEventError(
            f"Cannot compute holding period between {acquired_at!r} and {disposed_at!r}: {e}"
        ) from e


def holding_period_days(acquired_at: datetime, disposed_at: datetime) -> int:
    """Whole days elapsed between acquisition and disposal, for reporting."""
    return _elapsed(acquired_at, disposed_at).days


def classify_holding_term(acquired_at: datetime, disposed_at: datetime,
                          threshold_days: int = global_config.LONG_TERM_HOLDING_THRESHOLD_DAYS) -> HoldingTerm:
    """
    LONG when the elapsed time is strictly longer than threshold_days days.
    Exactly 365 days is SHORT; any time beyond it (365 days and one second,
    365.5 days) is LONG. Partial days count, so the result does not depend on
    the time of day of either timestamp.
    """
    elapsed = _elapsed(acquired_at, disposed_at)
    if elapsed < timedelta(0):
        logger.warning(f"Disposal at {disposed_at} precedes acquisition at {acquired_at} ({elapsed}). Classifying as short-term.")
    return HoldingTerm.LONG if elapsed > timedelta(days=threshold_days) else HoldingTerm.SHORT
