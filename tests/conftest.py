# tests/conftest.py
import pytest
import tempfile
import os
from decimal import getcontext, ROUND_HALF_UP

from fifo_gains import config as app_config
from tests.support.builders import make_event


@pytest.fixture(scope="session", autouse=True)
def set_decimal_precision_session_wide():
    """
    Set global decimal precision and rounding for all tests in the session.
    This mirrors the setup in main.setup_decimal_context.
    """
    prec = app_config.INTERNAL_CALCULATION_PRECISION
    rounding_mode_str = app_config.DECIMAL_ROUNDING_MODE

    getcontext().prec = prec

    valid_rounding_modes = ["ROUND_CEILING", "ROUND_DOWN", "ROUND_FLOOR", "ROUND_HALF_DOWN",
                            "ROUND_HALF_EVEN", "ROUND_HALF_UP", "ROUND_UP", "ROUND_05UP"]
    if rounding_mode_str in valid_rounding_modes:
        getcontext().rounding = rounding_mode_str # type: ignore
    else:
        print(f"Warning: Invalid DECIMAL_ROUNDING_MODE '{rounding_mode_str}'. Using ROUND_HALF_UP for tests.")
        getcontext().rounding = ROUND_HALF_UP # type: ignore


@pytest.fixture
def temp_data_dir():
    """
    Creates a temporary directory for test input/output files.
    Yields the path to this directory.
    Cleans up the directory after the test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        cache_subdir = os.path.join(tmpdir, "cache")
        os.makedirs(cache_subdir, exist_ok=True)
        yield tmpdir


@pytest.fixture
def scenario_events():
    """Two acquisitions and one disposal of XYZ: $560 long-term gain, 1 unit @ $70 left open."""
    return [
        make_event("A1", "ACQUISITION", "2", "100", "2022-01-01T00:00:00"),
        make_event("A2", "ACQUISITION", "3", "210", "2022-01-11T00:00:00"),
        make_event("D1", "DISPOSAL", "4", "800", "2023-02-05T00:00:00"),
    ]
