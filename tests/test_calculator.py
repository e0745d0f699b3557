"""Tests for the raw cost allocation variant and the shared apportionment.

Scenario used throughout: acme buys 100 coal at 2.5 each as inventory, a
Builder works an eight hour shift, and acme sells widgets (one hour of effort
and one coal each).
"""

import pytest

from costnet.config import DivisionPolicy
from costnet.costs import (
    AllocationInputs,
    allocate_costs,
    calculate_costs,
    collect_raw_inputs,
    elapsed_hours,
)
from costnet.errors import DivideByZeroError, MissingProductError
from costnet.models import Costs, CostCategory, Product, ProductInput
from tests.fixtures.records import COAL_PRICE, make_labor, make_order


def widget_sale(order_id="o-sale", quantity=8.0, start=1.0, end=3.0):
    """A customer buys widgets from acme."""
    return make_order(order_id, "shop", "acme", [("Widget", quantity, None)], start=start, end=end)


@pytest.fixture
def iron_purchase():
    """acme buys 10 iron at 4.0 each as inventory."""
    return make_order(
        "o-iron", "acme", "smelter",
        [("Iron", 10.0, Costs(products={"Iron": 4.0}))],
        start=0.5, end=1.0,
        category=CostCategory.INVENTORY,
    )


@pytest.fixture
def gadget_with_iron(gadget):
    """Gadget consuming one iron per unit."""
    return gadget.model_copy(update={"inputs": [ProductInput(product_id="Iron")]})


class TestWidgetScenario:
    """End-to-end numbers for the single-product scenario."""

    def test_unit_costs(self, widget, coal_purchase, builder_shift):
        """Each widget carries one Builder hour and 1/8 of the coal spend."""
        costs = calculate_costs(
            orders_incoming=[widget_sale()],
            orders_outgoing=[coal_purchase],
            labor=[builder_shift],
            products={"Widget": widget},
        )
        assert set(costs) == {"Widget"}
        assert costs["Widget"].get_labor("Builder") == pytest.approx(1.0)
        assert costs["Widget"].get("Coal") == pytest.approx(100 * COAL_PRICE / 8)

    def test_strict_policy_same_result(self, widget, coal_purchase, builder_shift):
        """A well-formed scenario never divides by zero."""
        costs = calculate_costs(
            [widget_sale()], [coal_purchase], [builder_shift], {"Widget": widget},
            policy=DivisionPolicy.STRICT,
        )
        assert costs["Widget"].get_labor("Builder") == pytest.approx(1.0)

    def test_split_sales_same_result(self, widget, coal_purchase, builder_shift):
        """Splitting the sale across orders changes nothing."""
        costs = calculate_costs(
            [widget_sale("o-1", 4.0), widget_sale("o-2", 4.0, start=2.0, end=4.0)],
            [coal_purchase],
            [builder_shift],
            {"Widget": widget},
        )
        assert costs["Widget"].get("Coal") == pytest.approx(31.25)


class TestMultiProduct:
    """Apportionment across products."""

    @pytest.fixture
    def inputs(self, coal_purchase, iron_purchase):
        """Orders and labor for a two-product company."""
        rent = make_order("o-rent", "acme", "landlord", [("Rent", 1.0, Costs(labor={"Agent": 3.0}))])
        return {
            "orders_incoming": [
                widget_sale(quantity=8.0),
                make_order("o-g", "shop", "acme", [("Gadget", 4.0, None)], start=2.0, end=5.0),
            ],
            "orders_outgoing": [coal_purchase, iron_purchase, rent],
            "labor": [make_labor("l-1", "acme", hours=12.0)],
        }

    def test_shares(self, inputs, widget, gadget_with_iron):
        """Capacity-weighted labor and input-weighted materials."""
        costs = calculate_costs(
            products={"Widget": widget, "Gadget": gadget_with_iron}, **inputs
        )
        # equal capacity use: 8 x 1h vs 4 x 2h
        assert costs["Widget"].get_labor("Builder") == pytest.approx(6.0 / 8)
        assert costs["Gadget"].get_labor("Builder") == pytest.approx(6.0 / 4)
        assert costs["Widget"].get("Coal") == pytest.approx(250.0 / 8)
        assert costs["Widget"].get("Iron") == pytest.approx(0.0)
        assert costs["Gadget"].get("Iron") == pytest.approx(40.0 / 4)
        assert costs["Gadget"].get("Coal") == pytest.approx(0.0)

    def test_conservation(self, inputs, widget, gadget_with_iron):
        """Allocated costs x units produced add back up to O + I."""
        products = {"Widget": widget, "Gadget": gadget_with_iron}
        raw = collect_raw_inputs(products=products, **inputs)
        costs = allocate_costs(products, raw)

        allocated = Costs.sum(costs[pid] * raw.produced[pid] for pid in sorted(costs))
        expected = raw.operating_costs + raw.input_costs
        for key in expected.labor:
            assert allocated.get_labor(key) == pytest.approx(expected.get_labor(key))
        for key in expected.products:
            assert allocated.get(key) == pytest.approx(expected.get(key))

    def test_determinism(self, inputs, widget, gadget_with_iron):
        """Catalog ordering does not change the result."""
        first = calculate_costs(products={"Widget": widget, "Gadget": gadget_with_iron}, **inputs)
        second = calculate_costs(products={"Gadget": gadget_with_iron, "Widget": widget}, **inputs)
        assert first == second


class TestEdgeCases:
    """Zero production, defaults and failures."""

    def test_unsold_product_costs_nothing(self, widget, gadget, coal_purchase, builder_shift):
        """A catalog product with no sales gets zero costs."""
        costs = calculate_costs(
            [widget_sale()], [coal_purchase], [builder_shift],
            {"Widget": widget, "Gadget": gadget},
        )
        assert costs["Gadget"] == Costs()
        assert costs["Widget"].get_labor("Builder") == pytest.approx(1.0)

    def test_no_sales_defaults_to_one_unit(self, widget, gadget):
        """Without sales every catalog product is costed at one unit."""
        costs = calculate_costs(
            [], [], [make_labor("l-1", "acme", hours=9.0)],
            {"Widget": widget, "Gadget": gadget},
        )
        assert costs["Widget"].get_labor("Builder") == pytest.approx(3.0)
        assert costs["Gadget"].get_labor("Builder") == pytest.approx(6.0)

    def test_no_inventory_no_input_costs(self, widget, builder_shift):
        """Without inventory purchases products carry only operating costs."""
        costs = calculate_costs([widget_sale()], [], [builder_shift], {"Widget": widget})
        assert costs["Widget"].products == {}

    def test_sold_product_missing_from_catalog(self, widget):
        """Selling a product outside the catalog raises MissingProductError."""
        sale = make_order("o-1", "shop", "acme", [("Mystery", 1.0, None)])
        with pytest.raises(MissingProductError) as exc_info:
            calculate_costs([sale], [], [], {"Widget": widget})
        assert "Mystery" in str(exc_info.value)

    def test_zero_effort_strict_raises(self):
        """A zero-effort product divides by zero under the strict policy."""
        free = Product(id="Free", company_id="acme", effort={"quantity": 0.0})
        sale = make_order("o-1", "shop", "acme", [("Free", 1.0, None)])
        with pytest.raises(DivideByZeroError):
            calculate_costs([sale], [], [make_labor("l-1", "acme", 2.0)], {"Free": free},
                            policy=DivisionPolicy.STRICT)

    def test_zero_effort_lenient(self):
        """Under the lenient policy a zero-effort product gets no operating share."""
        free = Product(id="Free", company_id="acme", effort={"quantity": 0.0})
        sale = make_order("o-1", "shop", "acme", [("Free", 1.0, None)])
        costs = calculate_costs([sale], [], [make_labor("l-1", "acme", 2.0)], {"Free": free},
                                policy=DivisionPolicy.LENIENT)
        assert costs["Free"].get_labor("Builder") == 0.0

    def test_empty_catalog(self):
        """A company with no products and no sales gets nothing."""
        assert calculate_costs([], [], [], {}) == {}


class TestRawInputs:
    """Tests for collect_raw_inputs and elapsed_hours."""

    def test_elapsed_hours(self):
        """Elapsed time spans the earliest start to the latest end."""
        orders = [
            make_order("a", "x", "y", [], start=0.0, end=2.0),
            make_order("b", "x", "y", [], start=1.0, end=3.0),
        ]
        assert elapsed_hours(orders) == pytest.approx(3.0)

    def test_elapsed_hours_floor(self):
        """Elapsed time is never below one hour."""
        assert elapsed_hours([]) == 1.0
        assert elapsed_hours([make_order("a", "x", "y", [], start=0.0, end=0.25)]) == 1.0

    def test_categories(self, coal_purchase, builder_shift):
        """Inventory purchases are inputs; labor and other purchases are operating."""
        rent = make_order("o-rent", "acme", "landlord", [("Rent", 2.0, Costs(labor={"Agent": 1.5}))])
        raw = collect_raw_inputs([], [coal_purchase, rent], [builder_shift], {})
        assert raw.operating_costs.labor == {"Agent": 3.0, "Builder": 8.0}
        assert raw.input_costs.products == {"Coal": 250.0}
        assert raw.avg_input_costs["Coal"].get("Coal") == pytest.approx(250.0)

    def test_average_input_per_line(self):
        """Average input cost is per order line, not per unit."""
        orders = [
            make_order("a", "acme", "mine", [("Coal", 10.0, Costs(products={"Coal": 1.0}))],
                       category=CostCategory.INVENTORY),
            make_order("b", "acme", "mine", [("Coal", 30.0, Costs(products={"Coal": 1.0}))],
                       category=CostCategory.INVENTORY),
        ]
        raw = collect_raw_inputs([], orders, [], {})
        assert raw.avg_input_costs["Coal"].get("Coal") == pytest.approx(20.0)

    def test_resource_quantity_tracked(self):
        """Resource purchases track the quantity bought."""
        order = make_order(
            "o-1", "acme", "mine", [("Ore", 100.0, Costs(labor={"Miner": 0.5}))],
            category=CostCategory.INVENTORY,
        )
        raw = collect_raw_inputs([], [order], [], {}, is_resource=lambda pid: pid == "Ore")
        assert raw.input_costs.get("Ore") == pytest.approx(100.0)
        assert raw.input_costs.get_labor("Miner") == pytest.approx(50.0)

    def test_allocation_inputs_str(self):
        """String representation summarizes the sums."""
        text = str(AllocationInputs(elapsed_hours=2.0, produced={"Widget": 8.0}))
        assert "2.0h" in text
        assert "1 products" in text
