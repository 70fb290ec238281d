# fifo_gains/engine/period_aggregator.py
import logging
from decimal import Decimal, Context
from typing import Dict, Iterable, List, Optional

from fifo_gains.domain.enums import HoldingTerm
from fifo_gains.domain.results import MatchedPortion, PeriodSummary, ReportingPeriod
import fifo_gains.config as global_config

logger = logging.getLogger(__name__)


class PeriodAggregator:
    def __init__(self,
                 internal_calculation_precision: int = global_config.INTERNAL_CALCULATION_PRECISION,
                 decimal_rounding_mode: str = global_config.DECIMAL_ROUNDING_MODE):
        self.ctx = Context(prec=internal_calculation_precision, rounding=decimal_rounding_mode)

    def fold(self, portions: Iterable[MatchedPortion], period: Optional[ReportingPeriod] = None) -> PeriodSummary:
        """
        Routes every portion into exactly one term/sign bucket. A zero result counts
        as a loss of 0. Totals are plain sums over the portions in arrival order.
        """
        detail = tuple(portions)

        short_term_gains = self.ctx.create_decimal(Decimal('0'))
        long_term_gains = self.ctx.create_decimal(Decimal('0'))
        short_term_losses = self.ctx.create_decimal(Decimal('0'))
        long_term_losses = self.ctx.create_decimal(Decimal('0'))
        net_gain_loss = self.ctx.create_decimal(Decimal('0'))
        total_cost_basis = self.ctx.create_decimal(Decimal('0'))
        total_proceeds = self.ctx.create_decimal(Decimal('0'))

        for portion in detail:
            gain_loss = portion.gain_loss
            if portion.term == HoldingTerm.LONG:
                if gain_loss > Decimal('0'):
                    long_term_gains = self.ctx.add(long_term_gains, gain_loss)
                else:
                    long_term_losses = self.ctx.add(long_term_losses, gain_loss.copy_abs())
            else:
                if gain_loss > Decimal('0'):
                    short_term_gains = self.ctx.add(short_term_gains, gain_loss)
                else:
                    short_term_losses = self.ctx.add(short_term_losses, gain_loss.copy_abs())

            net_gain_loss = self.ctx.add(net_gain_loss, gain_loss)
            total_cost_basis = self.ctx.add(total_cost_basis, portion.allocated_cost_basis)
            total_proceeds = self.ctx.add(total_proceeds, portion.allocated_proceeds)

        total_gains = self.ctx.add(short_term_gains, long_term_gains)
        total_losses = self.ctx.add(short_term_losses, long_term_losses)

        label = period.label if period else "unbounded"
        logger.debug(f"Folded {len(detail)} matched portions for period {label}: net {net_gain_loss}.")

        return PeriodSummary(
            short_term_gains=short_term_gains,
            long_term_gains=long_term_gains,
            short_term_losses=short_term_losses,
            long_term_losses=long_term_losses,
            total_gains=total_gains,
            total_losses=total_losses,
            net_gain_loss=net_gain_loss,
            total_cost_basis=total_cost_basis,
            total_proceeds=total_proceeds,
            matched_portions=detail,
            period=period,
        )

    def merge(self, summaries: Iterable[PeriodSummary], period: Optional[ReportingPeriod] = None) -> PeriodSummary:
        """
        Fan-in of per-asset summaries. Portions are put back into input order by
        event_index (stable, so portions of one disposal keep their FIFO order) and
        re-folded, which makes the result independent of the order summaries arrive in.
        """
        all_portions: List[MatchedPortion] = []
        for summary in summaries:
            all_portions.extend(summary.matched_portions)
        if any(portion.event_index is None for portion in all_portions):
            raise ValueError("Cannot merge summaries containing matched portions without an event_index.")
        all_portions.sort(key=lambda portion: portion.event_index)
        return self.fold(all_portions, period)

    def by_asset(self, summary: PeriodSummary) -> Dict[str, PeriodSummary]:
        grouped: Dict[str, List[MatchedPortion]] = {}
        for portion in summary.matched_portions:
            grouped.setdefault(portion.asset, []).append(portion)
        return {asset: self.fold(grouped[asset], summary.period) for asset in sorted(grouped)}
