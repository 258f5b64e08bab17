"""
Column generation solution module.

This module defines the data structures for representing the results
of the column generation algorithm.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Tuple

from colgen.core.column import Column


class CGStatus(Enum):
    """
    Outcome of the column generation algorithm.

    Only OPTIMAL is a proof of LP optimality. The other finished outcomes
    still carry the incumbent master solution.
    """
    OPTIMAL = auto()           # Pricing proved no improving column exists
    NOT_CONVERGED = auto()     # Iteration cap reached (or stopped by a callback)
    TIME_LIMIT = auto()        # Overall time limit reached
    STALLED = auto()           # Pricing repeated a column already in the master
    NOT_SOLVED = auto()        # Not yet solved


class LoopState(Enum):
    """
    States of the column generation loop.

    INIT -> MASTER_SOLVED -> PRICED -> CONVERGED
                                    -> AUGMENTING -> MASTER_SOLVED
    """
    INIT = auto()
    MASTER_SOLVED = auto()
    PRICED = auto()
    AUGMENTING = auto()
    CONVERGED = auto()
    NOT_CONVERGED = auto()
    STALLED = auto()
    FAILED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in (
            LoopState.CONVERGED,
            LoopState.NOT_CONVERGED,
            LoopState.STALLED,
            LoopState.FAILED,
        )


@dataclass
class CGIteration:
    """
    Information about a single column generation iteration.

    Attributes:
        iteration: Iteration number (1-based)
        master_objective: Master LP objective at this iteration
        dual_values: Duals p used for pricing, ordered by item
        best_reduced_cost: Optimal pricing value
        pattern: Optimal pricing pattern a*
        column_added: Id of the column added, None if nothing was added
        master_time: Time spent on the master solve
        pricing_time: Time spent on pricing
        total_columns: Columns in the master after this iteration
    """
    iteration: int
    master_objective: float
    dual_values: List[float]
    best_reduced_cost: float
    pattern: Tuple[int, ...]
    column_added: Optional[int]
    master_time: float
    pricing_time: float
    total_columns: int


@dataclass
class CGSolution:
    """
    Result of the column generation algorithm.

    Attributes:
        status: Solution status
        objective_value: Final master LP objective
        column_values: x_j for every generated column (column_id -> value)
        columns: Every generated column in generation order, with value set
        iterations: Number of pricing rounds
        final_reduced_cost: Reduced cost of the last pricing solve
        dual_values: Duals of the final master solve
        ip_objective: Objective of the integer re-solve (if requested)
        ip_column_values: Integer column values (if requested)
        lower_bound: L2 lower bound on the integer number of rolls
        total_time: Total solve time
        master_time: Time spent on master problems
        pricing_time: Time spent on pricing problems
        iteration_history: History of each iteration

    Example:
        >>> solution = solve_cutting_stock(instance)
        >>> if solution.is_optimal:
        ...     print(f"Rolls (LP): {solution.objective_value}")
        ...     for pattern, x in solution.patterns:
        ...         print(f"  {pattern} x {x:.2f}")
    """
    status: CGStatus = CGStatus.NOT_SOLVED
    objective_value: Optional[float] = None
    column_values: Dict[int, float] = field(default_factory=dict)
    columns: List[Column] = field(default_factory=list)

    iterations: int = 0
    final_reduced_cost: Optional[float] = None
    dual_values: Dict[int, float] = field(default_factory=dict)

    # Integer re-solve over the generated columns
    ip_objective: Optional[float] = None
    ip_column_values: Dict[int, float] = field(default_factory=dict)

    lower_bound: Optional[float] = None

    # Statistics
    total_time: float = 0.0
    master_time: float = 0.0
    pricing_time: float = 0.0

    iteration_history: List[CGIteration] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def is_optimal(self) -> bool:
        """Check if the LP optimum is proven."""
        return self.status == CGStatus.OPTIMAL

    @property
    def has_solution(self) -> bool:
        """Check if an incumbent master solution is available."""
        return self.objective_value is not None

    @property
    def total_columns(self) -> int:
        return len(self.columns)

    @property
    def generated_columns(self) -> List[Column]:
        """Columns added by pricing (starter columns excluded)."""
        return [col for col in self.columns if not col.get_attribute('initial', False)]

    @property
    def active_columns(self) -> List[Column]:
        """Columns with positive value in the final master solution."""
        return [col for col in self.columns if col.is_in_solution]

    @property
    def patterns(self) -> List[Tuple[Tuple[int, ...], float]]:
        """(pattern, x) for the active columns."""
        return [(col.pattern, col.value) for col in self.active_columns]

    @property
    def ip_patterns(self) -> List[Tuple[Tuple[int, ...], int]]:
        """(pattern, count) for the integer re-solve, if it was run."""
        by_id = {col.column_id: col for col in self.columns}
        return [
            (by_id[col_id].pattern, int(round(value)))
            for col_id, value in self.ip_column_values.items()
            if value > 0.5 and col_id in by_id
        ]

    # =========================================================================
    # Methods
    # =========================================================================

    def get_convergence_history(self) -> List[float]:
        """Master objective at each iteration."""
        return [it.master_objective for it in self.iteration_history]

    def summary(self) -> str:
        """Return a human-readable summary."""
        lines = [
            "Column Generation Solution:",
            f"  Status: {self.status.name}",
        ]

        if self.objective_value is not None:
            lines.append(f"  Objective: {self.objective_value:.6f}")

        if self.final_reduced_cost is not None:
            lines.append(f"  Final reduced cost: {self.final_reduced_cost:.6f}")

        if self.ip_objective is not None:
            lines.append(f"  IP Objective: {self.ip_objective:.6f}")

        if self.lower_bound is not None:
            lines.append(f"  Lower bound (L2): {self.lower_bound}")

        lines.extend([
            "",
            f"  Iterations: {self.iterations}",
            f"  Total columns: {self.total_columns}",
            f"  Active columns: {len(self.active_columns)}",
            "",
            f"  Total time: {self.total_time:.3f}s",
            f"  Master time: {self.master_time:.3f}s",
            f"  Pricing time: {self.pricing_time:.3f}s",
        ])

        return "\n".join(lines)

    def __repr__(self) -> str:
        obj_str = f", obj={self.objective_value:.4f}" if self.objective_value is not None else ""
        return f"CGSolution({self.status.name}{obj_str}, iter={self.iterations})"
