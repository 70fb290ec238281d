# fifo_gains/cli.py
import argparse
import fifo_gains.config as config # For default paths and settings

def parse_arguments(argv=None):
    """Parses command line arguments for the application."""
    parser = argparse.ArgumentParser(description="FIFO Realized Gains Engine")

    # File paths
    parser.add_argument("--events", default=config.EVENTS_FILE_PATH, help="Path to the normalized ledger events CSV file.")
    parser.add_argument("--carryover-in", default=None, help="Path to the carry-over JSON with open lots from the previous period.")
    parser.add_argument("--carryover-out", default=config.CARRYOVER_FILE_PATH, help="Path to write the carry-over JSON for the next period.")

    # Period
    parser.add_argument("--year", type=int, default=config.REPORTING_YEAR, help="Tax year to process. Events outside it are rejected.")
    parser.add_argument("--no-period-bounds", action="store_true", help="Do not restrict events to the tax year.")

    # Operational modes
    parser.add_argument("--strict", action="store_true", default=None, help="Reject out-of-order events. Overrides config if set.")
    parser.add_argument("--no-strict", dest="strict", action="store_false", help="Log out-of-order events and process them as given. Overrides config if set.")
    parser.add_argument("--sort-events", action="store_true", help="Sort events chronologically before processing.")
    parser.add_argument("--parallel", action="store_true", help="Process assets in parallel on a thread pool.")
    parser.add_argument("--max-workers", type=int, default=config.PARTITION_MAX_WORKERS, help="Thread pool size for --parallel.")
    parser.add_argument("--timeout", type=float, default=config.SESSION_TIMEOUT_SECONDS, help="Abort the run after this many seconds.")

    # Reporting options
    parser.add_argument("--show-details", action="store_true", help="Print every disposal with its matched lots.")

    args = parser.parse_args(argv)

    # If neither --strict nor --no-strict is given, fall back to config.
    if args.strict is None:
        args.strict = config.STRICT_EVENT_ORDERING

    return args
