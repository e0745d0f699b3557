"""Per-unit product costing for a multi-party production network.

Companies buy inputs, employ labor, and sell products to each other. This
package folds those transactions into rolling aggregates and apportions a
company's operating and input costs onto each product it makes.
"""

__version__ = "0.3.0"
