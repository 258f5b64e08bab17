"""
Knapsack pricing with HiGHS.

The integer program is built once:

    min  1 - sum_i p[i] * a[i]
    s.t. sum_i w[i] * a[i] <= W
         0 <= a[i] <= floor(W / w[i]), integer

and only its column costs change between iterations (-p[i] for item i).
The constant 1 is carried as the objective offset, so the solver's
objective value is the reduced cost itself.
"""

import logging
from typing import List, Optional

import numpy as np

from colgen.config import config
from colgen.core.instance import CuttingStockInstance
from colgen.exceptions import SolverError
from colgen.master.highs import (
    HIGHS_AVAILABLE,
    configure_highs,
    map_highs_status,
    status_detail,
)
from colgen.master.solution import SolutionStatus, raise_for_status
from colgen.pricing.base import PricingConfig, PricingProblem

if HIGHS_AVAILABLE:
    import highspy

logger = logging.getLogger(__name__)


class HiGHSKnapsackPricing(PricingProblem):
    """
    Pricing subproblem solved as an integer program by HiGHS.

    The MIP gap is taken from config.tolerances['mip_gap'] (0 by default),
    so every solve is proven globally optimal.

    Example:
        >>> pricing = HiGHSKnapsackPricing(instance)
        >>> solution = pricing.solve([1.0, 1.0, 1.0, 1.0, 1.0])
        >>> solution.pattern
        (4, 0, 0, 0, 0)
        >>> solution.best_reduced_cost
        -3.0
    """

    def __init__(
        self,
        instance: CuttingStockInstance,
        config: Optional[PricingConfig] = None,
    ):
        if not HIGHS_AVAILABLE:
            raise ImportError(
                "HiGHS is not available. Install it with: pip install highspy"
            )
        super().__init__(instance, config)

        self._highs: Optional[highspy.Highs] = None
        self._col_indices = np.arange(instance.num_items, dtype=np.int32)
        self._build_model()

    def _build_model(self) -> None:
        """Build the knapsack model with zero costs."""
        instance = self._instance
        cfg = self._config

        self._highs = highspy.Highs()
        configure_highs(
            self._highs,
            cfg.verbosity,
            cfg.time_limit if cfg.time_limit is not None else config.time_limit,
        )
        self._highs.setOptionValue('mip_rel_gap', config.get_tolerance('mip_gap'))
        self._highs.changeObjectiveSense(highspy.ObjSense.kMinimize)
        self._highs.changeObjectiveOffset(cfg.column_cost)

        empty_idx = np.array([], dtype=np.int32)
        empty_val = np.array([], dtype=np.float64)
        for i in range(instance.num_items):
            self._highs.addCol(0.0, 0.0, float(instance.max_copies(i)), 0, empty_idx, empty_val)
            self._highs.changeColIntegrality(i, highspy.HighsVarType.kInteger)

        widths = np.array(instance.widths, dtype=np.float64)
        self._highs.addRow(
            -highspy.kHighsInf,
            float(instance.roll_width),
            instance.num_items,
            self._col_indices,
            widths,
        )

    def _on_duals_updated(self) -> None:
        """Re-parameterise the objective: cost of a[i] is -p[i]."""
        costs = np.array(
            [-self._dual_values[i] for i in range(self.num_items)],
            dtype=np.float64,
        )
        self._highs.changeColsCost(self.num_items, self._col_indices, costs)

    def _solve_impl(self) -> List[float]:
        """Solve the knapsack MIP."""
        self._highs.run()

        model_status = self._highs.getModelStatus()
        status = map_highs_status(model_status)
        detail = status_detail(self._highs, model_status)

        if status in (
            SolutionStatus.INFEASIBLE,
            SolutionStatus.INF_OR_UNBOUNDED,
            SolutionStatus.UNBOUNDED,
        ):
            # a = 0 is always feasible and a <= max_copies bounds the model
            raise SolverError(f"pricing knapsack reported {status.name}", detail=detail)
        raise_for_status(status, "pricing", detail)

        sol = self._highs.getSolution()
        return list(sol.col_value)[:self.num_items]

    def set_time_limit(self, seconds: Optional[float]) -> None:
        """Set the per-solve time limit (None = no limit)."""
        self._config.time_limit = seconds
        self._highs.setOptionValue(
            'time_limit', float(seconds) if seconds is not None else highspy.kHighsInf
        )
