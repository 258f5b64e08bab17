"""
Knapsack pricing by dynamic programming.

Exact alternative to the HiGHS knapsack for instances whose roll width and
item widths are whole numbers. Each item type is split into "virtual items"
of 1, 2, 4, ... copies (binary decomposition of floor(W / w[i])), which turns
the bounded knapsack into a 0-1 knapsack over capacities 0..W.
"""

import logging
from typing import List, Optional, Tuple

import numpy as np

from colgen.core.instance import CuttingStockInstance
from colgen.exceptions import ConfigurationError
from colgen.pricing.base import PricingConfig, PricingProblem

logger = logging.getLogger(__name__)

# Minimum gain for a virtual item to replace the current best value
_VALUE_EPS = 1e-12


class DPKnapsackPricing(PricingProblem):
    """
    Pricing subproblem solved by dynamic programming over capacities.

    Memory is one boolean row of length W + 1 per virtual item, which is
    what makes exact backtracking possible.

    Raises:
        ConfigurationError: If the roll width or an item width is fractional
    """

    def __init__(
        self,
        instance: CuttingStockInstance,
        config: Optional[PricingConfig] = None,
    ):
        if not instance.has_integral_widths:
            raise ConfigurationError(
                "DPKnapsackPricing needs integral roll and item widths; "
                "use HiGHSKnapsackPricing instead"
            )
        super().__init__(instance, config)

        self._capacity = int(instance.roll_width)
        self._widths = [int(w) for w in instance.widths]

    def _virtual_items(self) -> List[Tuple[int, int, float, int]]:
        """(item, size, value, copies) for each item with a positive dual."""
        virtual_items = []

        for i in range(self.num_items):
            value = self._dual_values[i]
            size = self._widths[i]
            max_copies = self._instance.max_copies(i)

            if value <= 0 or max_copies <= 0:
                continue

            # e.g. max_copies=13 -> virtual items with 1, 2, 4, 6 copies
            copies_left = max_copies
            k = 1
            while copies_left > 0:
                take = min(k, copies_left)
                virtual_items.append((i, size * take, value * take, take))
                copies_left -= take
                k *= 2

        return virtual_items

    def _solve_impl(self) -> List[int]:
        """Solve the 0-1 knapsack over virtual items and backtrack."""
        pattern = [0] * self.num_items
        virtual_items = self._virtual_items()
        if not virtual_items:
            return pattern

        W = self._capacity

        # dp[c] = best dual value using capacity at most c
        dp = np.zeros(W + 1, dtype=np.float64)
        take = np.zeros((len(virtual_items), W + 1), dtype=bool)

        for k, (_, size, value, _) in enumerate(virtual_items):
            if size > W:
                continue
            candidate = dp[:W + 1 - size] + value
            improved = candidate > dp[size:] + _VALUE_EPS
            take[k, size:] = improved
            dp[size:] = np.where(improved, candidate, dp[size:])

        c = W
        for k in range(len(virtual_items) - 1, -1, -1):
            if take[k, c]:
                item, size, _, copies = virtual_items[k]
                pattern[item] += copies
                c -= size

        logger.debug("DP knapsack value %.6f over %d virtual items", dp[W], len(virtual_items))
        return pattern
