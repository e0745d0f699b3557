"""Tests for the record data models."""

import pytest

from costnet.errors import CostCategoryError
from costnet.models import (
    COST_CATEGORY_TABLE,
    COST_CATEGORY_TABLE_VERSION,
    Costs,
    CostCategory,
    Effort,
    EffortTime,
    LaborSpan,
    Order,
    ProcessStatus,
    Product,
    ProductEntry,
)
from tests.fixtures.records import make_labor, make_order, ts


class TestEffort:
    """Tests for Effort unit conversion."""

    @pytest.mark.parametrize("time, quantity, hours", [
        (EffortTime.SECONDS, 7200.0, 2.0),
        (EffortTime.MINUTES, 30.0, 0.5),
        (EffortTime.HOURS, 3.0, 3.0),
        (EffortTime.DAYS, 1.0, 24.0),
        (EffortTime.WEEKS, 1.0, 168.0),
    ])
    def test_hours(self, time, quantity, hours):
        """Effort converts to hours."""
        assert Effort(time=time, quantity=quantity).hours() == pytest.approx(hours)

    def test_product_effort_hours(self, gadget):
        """Products expose effort in hours."""
        assert gadget.effort_hours == 2.0
        assert Product(id="p", company_id="c").effort_hours == 1.0


class TestLaborSpan:
    """Tests for LaborSpan."""

    def test_hours_and_costs(self):
        """A closed span costs its hours under its occupation."""
        span = make_labor("l-1", "acme", hours=2.5, occupation="Welder")
        assert span.is_closed()
        assert span.hours == pytest.approx(2.5)
        assert span.costs().labor == {"Welder": pytest.approx(2.5)}

    def test_open_span(self):
        """An open span has no hours."""
        span = LaborSpan(id="l-1", company_id="acme", occupation="Builder", start=ts(0))
        assert not span.is_closed()
        assert span.hours == 0.0
        assert "open" in str(span)

    def test_end_before_start_rejected(self):
        """Clock-out before clock-in is invalid."""
        with pytest.raises(ValueError):
            LaborSpan(id="l-1", company_id="acme", occupation="Builder", start=ts(2), end=ts(1))


class TestOrder:
    """Tests for Order and ProductEntry."""

    def test_line_costs(self):
        """Line costs are per-unit costs times quantity."""
        entry = ProductEntry(product_id="Coal", quantity=4.0, costs=Costs(products={"Coal": 2.5}))
        assert entry.line_costs().products == {"Coal": 10.0}

    def test_finalized(self):
        """Only completed orders are finalized."""
        assert make_order("o", "a", "b", []).is_finalized()
        for status in ProcessStatus:
            if status != ProcessStatus.COMPLETED:
                assert not make_order("o", "a", "b", [], status=status).is_finalized()

    def test_category_from_string(self):
        """Orders accept stored category strings."""
        order = Order(
            id="o",
            company_id_from="a",
            company_id_to="b",
            cost_category="Inventory",
            created=ts(0),
            updated=ts(1),
        )
        assert order.cost_category == CostCategory.INVENTORY
        assert order.cost_category.encode() == "Inventory"

    def test_negative_quantity_rejected(self):
        """Quantities cannot be negative."""
        with pytest.raises(ValueError):
            ProductEntry(product_id="Coal", quantity=-1.0)


class TestCostCategory:
    """Tests for CostCategory parsing."""

    def test_parse_known(self):
        """Every table entry parses back to its category."""
        for value, category in COST_CATEGORY_TABLE.items():
            assert CostCategory.parse(value) == category
            assert CostCategory.parse(category.encode()) == category

    def test_parse_unknown(self):
        """Unknown categories raise with the table version in context."""
        with pytest.raises(CostCategoryError) as exc_info:
            CostCategory.parse("Capital")
        assert exc_info.value.context["table_version"] == COST_CATEGORY_TABLE_VERSION

    def test_parse_missing(self):
        """Missing categories raise."""
        with pytest.raises(CostCategoryError):
            CostCategory.parse(None)
        with pytest.raises(CostCategoryError):
            CostCategory.parse("")
