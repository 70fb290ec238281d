# fifo_gains/engine/fifo_matcher.py
import logging
from datetime import datetime
from decimal import Decimal, Context
from typing import List, Optional

from fifo_gains.domain.enums import EventKind
from fifo_gains.domain.errors import InsufficientLotsError
from fifo_gains.domain.events import LedgerEvent
from fifo_gains.domain.results import MatchedPortion
from fifo_gains.engine.holding_classifier import classify_holding_term, holding_period_days
from fifo_gains.engine.lot_store import LotStore
import fifo_gains.config as global_config

logger = logging.getLogger(__name__)


class FifoMatcher:
    """Consumes open lots oldest-first to cover a disposal, splitting the last lot when needed."""

    def __init__(self,
                 internal_calculation_precision: int = global_config.INTERNAL_CALCULATION_PRECISION,
                 decimal_rounding_mode: str = global_config.DECIMAL_ROUNDING_MODE,
                 long_term_threshold_days: int = global_config.LONG_TERM_HOLDING_THRESHOLD_DAYS):
        self.ctx = Context(prec=internal_calculation_precision, rounding=decimal_rounding_mode)
        self.long_term_threshold_days = long_term_threshold_days

    def match(self, disposal: LedgerEvent, lot_store: LotStore, event_index: Optional[int] = None) -> List[MatchedPortion]:
        if disposal.kind != EventKind.DISPOSAL:
            raise ValueError(f"FifoMatcher can only match DISPOSAL events, got {disposal.kind.name} ({disposal.event_id}).")

        asset = disposal.asset
        quantity_to_match = disposal.quantity
        unit_proceeds = self.ctx.divide(disposal.gross_value, disposal.quantity)
        remaining_to_match = quantity_to_match
        portions: List[MatchedPortion] = []

        while remaining_to_match > Decimal(0):
            current_lot = lot_store.peek_oldest(asset)
            if current_lot is None:
                logger.error(
                    f"Disposal {disposal.event_id} of {quantity_to_match} {asset}: open lots exhausted, "
                    f"{remaining_to_match} unmatched."
                )
                raise InsufficientLotsError(
                    asset, remaining_to_match,
                    disposal_event_id=disposal.event_id,
                    requested_quantity=quantity_to_match,
                    matched_portions=tuple(portions),
                    event_index=event_index,
                )

            matched_quantity = min(remaining_to_match, current_lot.remaining_quantity)
            allocated_cost_basis = self.ctx.multiply(current_lot.unit_cost_basis, matched_quantity)
            allocated_proceeds = self.ctx.multiply(unit_proceeds, matched_quantity)
            gain_loss = self.ctx.subtract(allocated_proceeds, allocated_cost_basis)

            current_lot.consume(matched_quantity, self.ctx)
            remaining_to_match = self.ctx.subtract(remaining_to_match, matched_quantity)

            term = classify_holding_term(current_lot.acquired_at, disposal.timestamp, self.long_term_threshold_days)
            portions.append(MatchedPortion(
                disposal_event_id=disposal.event_id,
                lot_id=current_lot.lot_id,
                asset=asset,
                matched_quantity=matched_quantity,
                allocated_proceeds=allocated_proceeds,
                allocated_cost_basis=allocated_cost_basis,
                gain_loss=gain_loss,
                term=term,
                holding_days=holding_period_days(current_lot.acquired_at, disposal.timestamp),
                acquired_at=current_lot.acquired_at,
                disposed_at=disposal.timestamp,
                event_index=event_index,
            ))
            logger.debug(
                f"Disposal {disposal.event_id}: matched {matched_quantity} {asset} from lot {current_lot.lot_id} "
                f"(cost {allocated_cost_basis}, proceeds {allocated_proceeds}, {term.name})."
            )
            lot_store.remove_if_fully_consumed(asset)

        return portions


def zero_cost_basis_acquisition(error: InsufficientLotsError, acquired_at: datetime) -> LedgerEvent:
    """
    Builds the explicit fallback for an under-collateralized disposal: an acquisition
    of the unmatched quantity at zero cost. The caller decides whether to insert it
    ahead of the disposal and resubmit; the matcher never does this on its own.
    """
    logger.warning(
        f"Creating zero-cost fallback acquisition of {error.unmatched_quantity} {error.asset} "
        f"at {acquired_at} for disposal {error.disposal_event_id}."
    )
    fallback_id = f"ZERO_COST_FALLBACK_{error.disposal_event_id or error.asset}"
    return LedgerEvent(
        asset=error.asset,
        kind=EventKind.ACQUISITION,
        quantity=error.unmatched_quantity,
        gross_value=Decimal(0),
        timestamp=acquired_at,
        event_id=fallback_id,
        description="Zero cost basis fallback for unmatched disposal quantity",
    )
