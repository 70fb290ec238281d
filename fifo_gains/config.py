# fifo_gains/config.py

from decimal import Decimal

# Normalized ledger input and carry-over state used by the CLI
EVENTS_FILE_PATH = "data/ledger_events.csv"
CARRYOVER_FILE_PATH = "cache/open_lots.json"

# Reporting period (tax year) processed by default
REPORTING_YEAR = 2024

# Numerical precision
INTERNAL_CALCULATION_PRECISION = 28
DECIMAL_ROUNDING_MODE = "ROUND_HALF_UP" # Python's decimal module uses strings like 'ROUND_HALF_UP', 'ROUND_HALF_EVEN'

# Output/reporting precisions (display only, never applied to stored amounts)
OUTPUT_PRECISION_AMOUNTS: Decimal = Decimal("0.01")
PRECISION_QUANTITY: Decimal = Decimal("0.00000001")

# Holding period: elapsed whole days strictly greater than this value is long-term
LONG_TERM_HOLDING_THRESHOLD_DAYS: int = 365

# Reject events whose timestamp precedes the previous event of the same asset
STRICT_EVENT_ORDERING: bool = True

# Per-asset fan-out
PARTITION_MAX_WORKERS: int = 4
SESSION_TIMEOUT_SECONDS: float | None = None

# Carry-over JSON layout version
CARRYOVER_FORMAT_VERSION: int = 1
