"""
Pricing problem abstract base class.

This module defines the interface that all pricing subproblem solvers must
implement. Users can either:
1. Use the provided HiGHSKnapsackPricing (default, integer program)
2. Use DPKnapsackPricing for integral widths
3. Implement their own by subclassing PricingProblem

The pricing problem for cutting stock searches every feasible pattern for
the one with the most negative reduced cost:

    min  1 - sum_i p[i] * a[i]
    s.t. sum_i w[i] * a[i] <= W
         a[i] >= 0 integer

The feasible region is finite and contains a = 0, so the problem is always
feasible and bounded; only a solver fault can make it fail.

Customization Guide:
-------------------
To create a custom pricing solver:

1. Subclass PricingProblem
2. Implement _solve_impl returning the optimal pattern
3. Optionally override _on_duals_updated to re-parameterise a cached model
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

from colgen.core.column import Column
from colgen.core.instance import CuttingStockInstance
from colgen.exceptions import ConfigurationError, SolverError, StaleDualsError

logger = logging.getLogger(__name__)


class PricingStatus(Enum):
    """
    Status of the pricing problem solution.
    """
    COLUMNS_FOUND = auto()    # Optimal pattern has negative reduced cost
    NO_COLUMNS = auto()       # Optimal pattern proves no improving column exists


@dataclass
class PricingSolution:
    """
    Result of solving the pricing problem.

    Attributes:
        status: Solution status
        pattern: Optimal pattern a*
        best_reduced_cost: 1 - sum_i p[i] * a*[i]
        column: Column for a*, None when a* is the empty pattern
        solve_time: Time spent solving in seconds
    """
    status: PricingStatus
    pattern: Tuple[int, ...]
    best_reduced_cost: float
    column: Optional[Column] = None
    solve_time: float = 0.0

    def has_negative_reduced_cost(self, tolerance: float = 1e-6) -> bool:
        """Check if the optimal pattern improves the master (rc < -tolerance)."""
        return self.best_reduced_cost < -tolerance

    @property
    def columns(self) -> List[Column]:
        """Columns found (zero or one)."""
        return [self.column] if self.column is not None else []

    def summary(self) -> str:
        """Return a human-readable summary."""
        return "\n".join([
            "PricingSolution:",
            f"  Status: {self.status.name}",
            f"  Pattern: {list(self.pattern)}",
            f"  Reduced cost: {self.best_reduced_cost:.6f}",
            f"  Solve time: {self.solve_time:.3f}s",
        ])

    def __repr__(self) -> str:
        return (
            f"PricingSolution({self.status.name}, pattern={list(self.pattern)}, "
            f"rc={self.best_reduced_cost:.4f})"
        )


@dataclass
class PricingConfig:
    """
    Configuration for pricing problem solving.

    Attributes:
        reduced_cost_threshold: Patterns with RC below this are reported as columns
        time_limit: Maximum time per solve in seconds (None = no limit)
        verbosity: Solver output level (0 = silent)
        column_cost: Objective coefficient of a generated column
    """
    reduced_cost_threshold: float = -1e-6
    time_limit: Optional[float] = None
    verbosity: int = 0
    column_cost: float = 1.0

    def __post_init__(self):
        if self.reduced_cost_threshold > 0:
            raise ConfigurationError("reduced_cost_threshold must not be positive")
        if self.time_limit is not None and self.time_limit <= 0:
            raise ConfigurationError("time_limit must be positive")


DualValues = Union[Mapping[int, float], Sequence[float]]


class PricingProblem(ABC):
    """
    Abstract base class for pricing subproblem solvers.

    Lifecycle:
    ---------
    1. Create: pricing = HiGHSKnapsackPricing(instance)
    2. Set duals: pricing.set_dual_values(duals)
    3. Solve: solution = pricing.solve()
    4. Update duals and repeat

    The base class checks every pattern returned by _solve_impl (integer,
    non-negative, fits the roll) and recomputes the reduced cost from it,
    so subclasses only need to return the pattern.

    Attributes:
        instance: The cutting stock instance
        config: Pricing configuration
    """

    def __init__(
        self,
        instance: CuttingStockInstance,
        config: Optional[PricingConfig] = None,
    ):
        self._instance = instance
        self._config = config or PricingConfig()

        # Dual values (item -> p), None until set
        self._dual_values: Optional[Dict[int, float]] = None

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def instance(self) -> CuttingStockInstance:
        return self._instance

    @property
    def config(self) -> PricingConfig:
        """Pricing configuration."""
        return self._config

    @property
    def dual_values(self) -> Dict[int, float]:
        """Current dual values."""
        return dict(self._dual_values or {})

    @property
    def num_items(self) -> int:
        return self._instance.num_items

    # =========================================================================
    # Public API
    # =========================================================================

    def set_dual_values(self, dual_values: DualValues) -> None:
        """
        Set dual values from the master problem.

        Args:
            dual_values: Mapping item -> p[i], or a sequence ordered by item

        Raises:
            ConfigurationError: If an item has no dual value
        """
        if isinstance(dual_values, Mapping):
            duals = {int(i): float(p) for i, p in dual_values.items()}
        else:
            duals = {i: float(p) for i, p in enumerate(dual_values)}

        missing = [i for i in range(self.num_items) if i not in duals]
        if missing:
            raise ConfigurationError(f"Missing dual values for items {missing}")

        self._dual_values = duals
        self._on_duals_updated()

    def solve(self, dual_values: Optional[DualValues] = None) -> PricingSolution:
        """
        Solve the pricing problem to global optimality.

        Args:
            dual_values: Optional duals, shortcut for set_dual_values()

        Returns:
            PricingSolution with the optimal pattern and its reduced cost

        Raises:
            StaleDualsError: If no dual values were set
            SolverError: If the solver fails or returns an invalid pattern
        """
        if dual_values is not None:
            self.set_dual_values(dual_values)
        if self._dual_values is None:
            raise StaleDualsError("set_dual_values() must be called before solve()")

        self._before_solve()

        start_time = time.time()
        raw_pattern = self._solve_impl()
        solve_time = time.time() - start_time

        pattern = self._check_pattern(raw_pattern)
        reduced_cost = self.compute_reduced_cost(pattern)

        column = None
        if any(pattern):
            column = Column(
                pattern=pattern,
                cost=self._config.column_cost,
                reduced_cost=reduced_cost,
            )

        if column is not None and reduced_cost < self._config.reduced_cost_threshold:
            status = PricingStatus.COLUMNS_FOUND
        else:
            status = PricingStatus.NO_COLUMNS

        solution = PricingSolution(
            status=status,
            pattern=pattern,
            best_reduced_cost=reduced_cost,
            column=column,
            solve_time=solve_time,
        )
        logger.debug("Pricing: pattern=%s rc=%.6f", list(pattern), reduced_cost)

        return self._after_solve(solution)

    def compute_reduced_cost(self, pattern: Sequence[int]) -> float:
        """
        Reduced cost of a pattern under the current duals.

        rc = c - sum_i p[i] * a[i]
        """
        duals = self._dual_values or {}
        return self._config.column_cost - sum(
            duals.get(i, 0.0) * a for i, a in enumerate(pattern)
        )

    # =========================================================================
    # Abstract Methods
    # =========================================================================

    @abstractmethod
    def _solve_impl(self) -> Sequence[float]:
        """
        Solve the knapsack for the current duals.

        Returns:
            Optimal pattern (one count per item type)
        """

    # =========================================================================
    # Hooks (override for custom behavior)
    # =========================================================================

    def _on_duals_updated(self) -> None:
        """Hook called when dual values are updated."""

    def _before_solve(self) -> None:
        """Hook called before solving."""

    def _after_solve(self, solution: PricingSolution) -> PricingSolution:
        """Hook called after solving."""
        return solution

    # =========================================================================
    # Internal Methods
    # =========================================================================

    def _check_pattern(self, raw_pattern: Sequence[float], tol: float = 1e-6) -> Tuple[int, ...]:
        """Round a solver pattern to integers and verify it is a valid column."""
        if len(raw_pattern) != self.num_items:
            raise SolverError(
                f"Pricing returned {len(raw_pattern)} entries for {self.num_items} items"
            )

        pattern = []
        for i, value in enumerate(raw_pattern):
            rounded = int(round(value))
            if abs(value - rounded) > tol or rounded < 0:
                raise SolverError(f"Pricing returned non-integral entry a[{i}] = {value}")
            pattern.append(rounded)

        used = sum(w * a for w, a in zip(self._instance.widths, pattern))
        if used > self._instance.roll_width + tol:
            raise SolverError(
                f"Pricing returned pattern {pattern} using {used} > {self._instance.roll_width}"
            )

        return tuple(pattern)

    def summary(self) -> str:
        """Return a human-readable summary."""
        lines = [
            f"PricingProblem ({self.__class__.__name__})",
            f"  Items: {self.num_items}",
            f"  Roll width: {self._instance.roll_width}",
            f"  Duals set: {self._dual_values is not None}",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(items={self.num_items})"
