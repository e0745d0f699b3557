"""Test fixtures for costing engine testing."""

from .records import COAL_PRICE, BASE_TIME, ts, make_order, make_labor

__all__ = ['COAL_PRICE', 'BASE_TIME', 'ts', 'make_order', 'make_labor']
