"""
Pricing module - knapsack subproblems that generate new patterns.

Given dual prices p from the master, the pricing problem finds the
pattern a* minimising the reduced cost 1 - sum_i p[i] * a[i] over all
patterns that fit the roll. A negative optimum identifies an improving
column; a non-negative optimum proves the master LP optimal.

This module provides:
- PricingProblem: Abstract base class
- HiGHSKnapsackPricing: Integer program solved by HiGHS (default)
- DPKnapsackPricing: Dynamic programming for integral widths
- PricingConfig, PricingSolution, PricingStatus

Usage:
------
    >>> from colgen.pricing import HiGHSKnapsackPricing
    >>> pricing = HiGHSKnapsackPricing(instance)
    >>> pricing.set_dual_values(master.get_dual_values())
    >>> solution = pricing.solve()
    >>> if solution.has_negative_reduced_cost():
    ...     master.add_column(pool.add(solution.column))
"""

from colgen.pricing.base import (
    PricingConfig,
    PricingProblem,
    PricingSolution,
    PricingStatus,
)
from colgen.pricing.dp import DPKnapsackPricing
from colgen.pricing.knapsack import HiGHSKnapsackPricing

PRICING_METHODS = {
    'highs': HiGHSKnapsackPricing,
    'dp': DPKnapsackPricing,
}

__all__ = [
    'PricingProblem',
    'PricingConfig',
    'PricingSolution',
    'PricingStatus',
    'HiGHSKnapsackPricing',
    'DPKnapsackPricing',
    'PRICING_METHODS',
]
