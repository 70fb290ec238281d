# fifo_gains/reporting/console_reporter.py
import logging
from typing import Optional

from fifo_gains.domain.results import SessionResult
from fifo_gains.engine.period_aggregator import PeriodAggregator
from fifo_gains.reporting.reporting_utils import _q, _q_qty


logger = logging.getLogger(__name__)


def generate_console_period_report(result: SessionResult, show_details: bool = False):
    summary = result.summary
    label = result.period.label if result.period else "unbounded period"
    logger.info(f"Generating console realized gains summary for {label}...")

    print(f"\n--- Realized Gains Summary for {label} ---")
    print(f"  Matched portions: {len(summary.matched_portions)}")
    print(f"  Total proceeds:         {_q(summary.total_proceeds)}")
    print(f"  Total cost basis:       {_q(summary.total_cost_basis)}")
    print("\n  Short-term")
    print(f"    Gains:                {_q(summary.short_term_gains)}")
    print(f"    Losses:               {_q(summary.short_term_losses)}")
    print("  Long-term")
    print(f"    Gains:                {_q(summary.long_term_gains)}")
    print(f"    Losses:               {_q(summary.long_term_losses)}")
    print(f"\n  Total gains:            {_q(summary.total_gains)}")
    print(f"  Total losses:           {_q(summary.total_losses)}")
    print(f"  Net gain/loss:          {_q(summary.net_gain_loss)}")

    per_asset = PeriodAggregator().by_asset(summary)
    if per_asset:
        print("\n  Per asset (net gain/loss):")
        for asset, asset_summary in per_asset.items():
            print(f"    {asset:<12} {_q(asset_summary.net_gain_loss):>16}")

    if show_details:
        print("\n  Disposals:")
        for detail in summary.disposal_details():
            disposed = detail.disposed_at.isoformat() if detail.disposed_at else "N/A"
            print(f"    {disposed}  {detail.asset:<8} qty {_q_qty(detail.quantity)}  proceeds {_q(detail.proceeds)}  "
                  f"cost {_q(detail.cost_basis)}  gain/loss {_q(detail.gain_loss)}  [{detail.disposal_event_id}]")
            for portion in detail.portions:
                print(f"      <- {portion.lot_id}: qty {_q_qty(portion.matched_quantity)}, {portion.term.name} "
                      f"({portion.holding_days} days), gain/loss {_q(portion.gain_loss)}")

    generate_open_lots_report(result)
    print("--- End of Realized Gains Summary ---")


def generate_open_lots_report(result: SessionResult, asset: Optional[str] = None):
    assets = [asset] if asset else sorted(result.carryover)
    print("\n  Open lots carried forward:")
    if not any(result.carryover.get(a) for a in assets):
        print("    (none)")
        return
    for current_asset in assets:
        lots = result.carryover.get(current_asset, [])
        if not lots:
            continue
        print(f"    {current_asset}: {_q_qty(result.open_quantity(current_asset))} open")
        for lot in lots:
            print(f"      {lot.lot_id}: {_q_qty(lot.remaining_quantity)} of {_q_qty(lot.original_quantity)} "
                  f"@ {_q(lot.unit_cost_basis)} acquired {lot.acquired_at.isoformat()} ({lot.status.name})")
