# fifo_gains/main.py
import logging
import sys
from decimal import getcontext

import fifo_gains.config as config
from fifo_gains.cli import parse_arguments
from fifo_gains.domain.errors import LotEngineError
from fifo_gains.domain.results import ReportingPeriod
from fifo_gains.pipeline_runner import run_period_pipeline, ProcessingOutput
from fifo_gains.reporting.console_reporter import generate_console_period_report

logger = logging.getLogger(__name__)


def setup_decimal_context():
    """Sets the global decimal precision and rounding mode."""
    getcontext().prec = config.INTERNAL_CALCULATION_PRECISION
    valid_rounding_modes = ["ROUND_CEILING", "ROUND_DOWN", "ROUND_FLOOR", "ROUND_HALF_DOWN",
                            "ROUND_HALF_EVEN", "ROUND_HALF_UP", "ROUND_UP", "ROUND_05UP"]
    rounding_mode_to_set = config.DECIMAL_ROUNDING_MODE
    if rounding_mode_to_set not in valid_rounding_modes:
        logger.warning(f"Invalid DECIMAL_ROUNDING_MODE '{rounding_mode_to_set}' in config. Using ROUND_HALF_UP as fallback.")
        rounding_mode_to_set = "ROUND_HALF_UP"

    getcontext().rounding = rounding_mode_to_set
    logger.info(f"Global decimal precision set to {getcontext().prec}, rounding mode to {getcontext().rounding}.")


def main_application(argv=None):
    """
    Main application entry point.
    Parses arguments, runs the period and prints the summary.
    """
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    args = parse_arguments(argv)
    setup_decimal_context()

    logger.info("Starting FIFO Realized Gains Engine...")
    period = None if args.no_period_bounds else ReportingPeriod.for_tax_year(args.year)

    try:
        processing_results: ProcessingOutput = run_period_pipeline(
            events_file_path=args.events,
            carryover_in_path=args.carryover_in,
            carryover_out_path=args.carryover_out,
            period=period,
            strict_ordering=args.strict,
            sort_events=args.sort_events,
            parallel=args.parallel,
            max_workers=args.max_workers,
            timeout=args.timeout,
        )
    except LotEngineError as e:
        logger.critical(f"Calculation rejected the input: {e}. Exiting.")
        sys.exit(2)
    except Exception as e:
        logger.critical(f"Processing pipeline failed: {e}. Exiting.", exc_info=True)
        sys.exit(1)

    generate_console_period_report(processing_results.session_result, show_details=args.show_details)
    logger.info("FIFO Realized Gains Engine finished.")


if __name__ == "__main__":
    main_application()
