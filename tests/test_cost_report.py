"""Tests for cost allocation reporting."""

import pytest

from costnet.analysis import costs_to_dataframe, summarize_allocation
from costnet.costs import CostCalculator
from costnet.models import Costs
from tests.fixtures.records import make_order


class TestCostsToDataframe:
    """Tests for costs_to_dataframe."""

    def test_columns_and_values(self):
        """One row per product, prefixed columns, missing entries zero."""
        df = costs_to_dataframe({
            "Widget": Costs(labor={"Builder": 1.0}, products={"Coal": 31.25}),
            "Gadget": Costs(labor={"Builder": 2.0, "Clerk": 0.5}),
        })
        assert list(df["product_id"]) == ["Gadget", "Widget"]
        assert list(df.columns) == [
            "product_id", "labor:Builder", "labor:Clerk", "products:Coal", "total",
        ]
        widget = df[df["product_id"] == "Widget"].iloc[0]
        assert widget["labor:Clerk"] == 0.0
        assert widget["products:Coal"] == pytest.approx(31.25)
        assert widget["total"] == pytest.approx(32.25)

    def test_empty(self):
        """No products gives an empty frame with the fixed columns."""
        df = costs_to_dataframe({})
        assert df.empty
        assert list(df.columns) == ["product_id", "total"]


class TestSummarizeAllocation:
    """Tests for summarize_allocation."""

    def test_summary(self, widget, coal_purchase, builder_shift):
        """The summary reports the variant and a zero residual."""
        sale = make_order("o-s1", "shop", "acme", [("Widget", 8.0, None)], start=1.0, end=3.0)
        result = CostCalculator().calculate(
            "acme", {"Widget": widget}, None, [sale], [coal_purchase], [builder_shift]
        )
        summary = summarize_allocation(result)

        assert summary["variant"] == "raw"
        assert summary["fallback_reason"] == "no aggregates stored"
        assert summary["products"] == 1
        assert summary["units_produced"] == 8.0
        assert summary["input_costs"]["products"] == {"Coal": 250.0}
        for value in summary["residual"]["labor"].values():
            assert value == pytest.approx(0.0, abs=1e-9)
        for value in summary["residual"]["products"].values():
            assert value == pytest.approx(0.0, abs=1e-9)
