"""
Test Support Module

Builders for ledger events and tax lots used across the test modules.
"""

from tests.support.builders import make_event, make_lot

__all__ = ["make_event", "make_lot"]
