"""Pytest configuration and shared fixtures."""

import pytest

from costnet.config import CostingConfig, DivisionPolicy, set_division_policy
from costnet.engine import CostingEngine, InMemoryCostingStorage
from costnet.models import (
    Costs,
    CostCategory,
    CostTagEntry,
    Product,
    ProductInput,
)
from tests.fixtures.records import COAL_PRICE, make_labor, make_order


@pytest.fixture(autouse=True)
def reset_division_policy():
    """Every test starts with the default (lenient) global policy."""
    set_division_policy(DivisionPolicy.LENIENT)
    yield
    set_division_policy(DivisionPolicy.LENIENT)


@pytest.fixture
def coal():
    """Coal, sold by the mine."""
    return Product(id="Coal", company_id="mine", name="Coal")


@pytest.fixture
def widget():
    """Widget: one hour of effort and one unit of coal per unit."""
    return Product(
        id="Widget",
        company_id="acme",
        name="Widget",
        inputs=[ProductInput(product_id="Coal", quantity=1.0)],
    )


@pytest.fixture
def gadget():
    """Gadget: two hours of effort, no inputs."""
    return Product(
        id="Gadget",
        company_id="acme",
        name="Gadget",
        effort={"time": "hours", "quantity": 2.0},
    )


@pytest.fixture
def coal_unit_costs():
    """Per-unit costs of coal."""
    return Costs(products={"Coal": COAL_PRICE})


@pytest.fixture
def coal_purchase(coal_unit_costs):
    """acme buys 100 coal from the mine as inventory."""
    return make_order(
        "o-coal",
        buyer="acme",
        seller="mine",
        lines=[("Coal", 100.0, coal_unit_costs)],
        start=0.0,
        end=2.0,
        category=CostCategory.INVENTORY,
        cost_tags=[CostTagEntry(id="materials")],
    )


@pytest.fixture
def builder_shift():
    """Eight hour Builder shift at acme."""
    return make_labor("l-1", "acme", hours=8.0, start=0.0, cost_tags=[CostTagEntry(id="shop")])


@pytest.fixture
def storage(coal, widget):
    """In-memory storage with the coal and widget catalog."""
    storage = InMemoryCostingStorage()
    storage.add_product(coal)
    storage.add_product(widget)
    return storage


@pytest.fixture
def engine(storage):
    """Engine over the shared storage with default configuration."""
    return CostingEngine(storage, CostingConfig())
