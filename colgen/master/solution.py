"""
Master problem solution module.

This module defines the data structures for representing solutions
from the master problem solver.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional

from colgen.exceptions import InfeasibleError, SolverError, SolverTimeout


class SolutionStatus(Enum):
    """
    Status reported by the external solver.

    Shared by the master problem and the pricing subproblem.
    """
    OPTIMAL = auto()           # Optimal solution found
    INFEASIBLE = auto()        # Problem is infeasible
    UNBOUNDED = auto()         # Problem is unbounded
    INF_OR_UNBOUNDED = auto()  # Infeasible or unbounded (solver couldn't determine)
    TIME_LIMIT = auto()        # Time limit reached
    ITERATION_LIMIT = auto()   # Iteration limit reached
    NOT_SOLVED = auto()        # Solve not called yet
    ERROR = auto()             # Solver error occurred


@dataclass
class MasterSolution:
    """
    Result of solving the restricted master problem.

    Attributes:
        status: Solution status (OPTIMAL, INFEASIBLE, etc.)
        objective_value: Objective function value (None if not solved)
        column_values: Mapping from column_id to its value x_j
        dual_values: Mapping from item index to dual value p[i]
        solve_time: Time spent solving in seconds
        iterations: Number of simplex iterations
        num_columns: Number of columns in the model when solved
        is_integer_solve: True when produced by solve_ip()
        status_detail: Raw solver status text (None if not reported)

    Example:
        >>> solution = master.solve()
        >>> solution.objective_value
        131.0
        >>> solution.dual_vector()
        [1.0, 1.0, 1.0, 1.0, 1.0]
    """
    status: SolutionStatus = SolutionStatus.NOT_SOLVED
    objective_value: Optional[float] = None

    # Primal solution: column_id -> x_j (every column, zeros included)
    column_values: Dict[int, float] = field(default_factory=dict)

    # Dual solution: item index -> p[i]
    dual_values: Dict[int, float] = field(default_factory=dict)

    solve_time: float = 0.0
    iterations: int = 0
    num_columns: int = 0
    is_integer_solve: bool = False
    status_detail: Optional[str] = None

    # =========================================================================
    # Convenience Properties
    # =========================================================================

    @property
    def is_optimal(self) -> bool:
        """Check if solution is optimal."""
        return self.status == SolutionStatus.OPTIMAL

    @property
    def has_solution(self) -> bool:
        """Check if a solution is available."""
        return self.is_optimal and self.objective_value is not None

    @property
    def is_integer(self) -> bool:
        """Check if all column values are (nearly) integer."""
        tol = 1e-6
        return all(abs(v - round(v)) <= tol for v in self.column_values.values())

    # =========================================================================
    # Methods
    # =========================================================================

    def dual_vector(self) -> List[float]:
        """Duals ordered by item index."""
        return [self.dual_values[i] for i in sorted(self.dual_values)]

    def get_dual(self, item: int, default: float = 0.0) -> float:
        """Get dual value for a specific item."""
        return self.dual_values.get(item, default)

    def get_active_columns(self, tol: float = 1e-6) -> List[int]:
        """Column ids with value > tol."""
        return [
            col_id for col_id, value in self.column_values.items()
            if value > tol
        ]

    def summary(self) -> str:
        """Return a human-readable summary of the solution."""
        lines = [
            "MasterSolution:",
            f"  Status: {self.status.name}",
        ]

        if self.objective_value is not None:
            lines.append(f"  Objective: {self.objective_value:.6f}")

        active = self.get_active_columns()
        lines.extend([
            f"  Active columns: {len(active)} / {self.num_columns}",
            f"  Solve time: {self.solve_time:.3f}s",
            f"  Iterations: {self.iterations}",
        ])

        return "\n".join(lines)

    def __repr__(self) -> str:
        obj_str = f", obj={self.objective_value:.4f}" if self.objective_value is not None else ""
        return f"MasterSolution({self.status.name}{obj_str})"


def raise_for_status(
    status: SolutionStatus,
    component: str,
    detail: Optional[str] = None,
) -> None:
    """
    Translate a non-optimal solver status into the matching exception.

    Args:
        status: Status reported by the solver
        component: Name used in the error message (e.g. "master", "pricing")
        detail: Raw solver status text

    Raises:
        InfeasibleError: On an infeasible model
        SolverTimeout: When the per-solve time limit was hit
        SolverError: On every other non-optimal status
    """
    if status == SolutionStatus.OPTIMAL:
        return

    detail = detail or status.name
    # costs are non-negative: INF_OR_UNBOUNDED is infeasible
    if status in (SolutionStatus.INFEASIBLE, SolutionStatus.INF_OR_UNBOUNDED):
        raise InfeasibleError(f"{component} problem is infeasible ({detail})")
    if status == SolutionStatus.TIME_LIMIT:
        raise SolverTimeout(f"{component} solve exceeded its time limit", detail=detail)
    raise SolverError(f"{component} solve failed with status {status.name}", detail=detail)
