"""
Restricted master problem abstract base class.

This module defines the interface that all master problem solvers must implement.
Users can either:
1. Use the provided HiGHSMasterProblem (default implementation)
2. Implement their own by subclassing MasterProblem

The restricted master problem (RMP) for cutting stock is:

    min  sum_j c_j * x_j
    s.t. sum_j a_j[i] * x_j = b[i]    for every item type i
         x_j >= 0

where each column a_j is a cutting pattern. The row set is fixed for the
life of the model; only columns are appended.

Design Philosophy:
-----------------
- Columns are added incrementally: one variable plus its non-zeros,
  never a rebuild of the constraint system
- A row index (item -> [(column_id, coefficient)]) mirrors the solver
  matrix and is updated in place on every addition
- Duals are only valid right after a successful solve; any model change
  invalidates them

Customization Guide:
-------------------
To plug in another LP solver:

1. Subclass MasterProblem
2. Implement _build_model, _add_column_impl, _solve_lp_impl, _solve_ip_impl
3. Optionally override hooks for custom behavior
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Tuple

from colgen.core.column import Column
from colgen.core.instance import CuttingStockInstance
from colgen.exceptions import ConfigurationError, StaleDualsError
from colgen.master.solution import MasterSolution, raise_for_status

logger = logging.getLogger(__name__)


class MasterProblem(ABC):
    """
    Abstract base class for restricted master problem solvers.

    Lifecycle:
    ---------
    1. Create: master = HiGHSMasterProblem.from_instance(instance)
    2. Solve LP: solution = master.solve()
    3. Get duals for pricing: duals = master.get_dual_values()
    4. Add new columns from pricing: master.add_column(new_col)
    5. Repeat 2-4 until no negative reduced cost columns
    6. Optionally re-solve with integer variables: master.solve_ip()

    Attributes:
        demands: Right-hand side b of the demand rows
        item_names: Row names, used for reporting only
    """

    def __init__(
        self,
        demands: Sequence[float],
        item_names: Optional[Sequence[str]] = None,
    ):
        """
        Initialize the master problem with empty demand rows.

        Args:
            demands: Right-hand side of each equality row

        Raises:
            ConfigurationError: If there are no rows
        """
        if len(demands) == 0:
            raise ConfigurationError("master problem needs at least one demand row")

        self._demands: Tuple[float, ...] = tuple(float(b) for b in demands)
        self._item_names = (
            tuple(item_names) if item_names is not None
            else tuple(f"item_{i}" for i in range(len(demands)))
        )

        # Column tracking
        self._columns: List[Column] = []
        self._column_id_to_index: Dict[int, int] = {}

        # Row index: item -> [(column_id, coefficient)]
        self._rows: Dict[int, List[Tuple[int, float]]] = {
            i: [] for i in range(len(self._demands))
        }

        # Duals of the latest successful LP solve (None = stale)
        self._duals: Optional[Dict[int, float]] = None
        self._last_solution: Optional[MasterSolution] = None

        self._build_model()

    @classmethod
    def from_instance(cls, instance: CuttingStockInstance, **kwargs) -> 'MasterProblem':
        """
        Build the starter RMP for an instance.

        One equality row per item type and one identity column per item
        type (cost 1, cuts one piece of that item). The identity columns
        make x = b feasible, so the starter RMP always has a solution.

        Args:
            instance: Validated cutting stock instance
            **kwargs: Passed to the subclass constructor

        Returns:
            Master problem holding the starter columns (ids 0..m-1)
        """
        instance.validate()
        master = cls(instance.demands, item_names=instance.item_names, **kwargs)
        master.add_columns(initial_columns(instance))
        return master

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def num_columns(self) -> int:
        """Number of columns currently in the master problem."""
        return len(self._columns)

    @property
    def num_constraints(self) -> int:
        """Number of demand rows."""
        return len(self._demands)

    @property
    def demands(self) -> Tuple[float, ...]:
        """Right-hand side of the demand rows."""
        return self._demands

    @property
    def item_names(self) -> Tuple[str, ...]:
        return self._item_names

    @property
    def columns(self) -> List[Column]:
        """List of columns in the master problem."""
        return self._columns.copy()

    @property
    def has_valid_duals(self) -> bool:
        """True between a successful LP solve and the next model change."""
        return self._duals is not None

    @property
    def last_solution(self) -> Optional[MasterSolution]:
        return self._last_solution

    # =========================================================================
    # Abstract Methods (MUST be implemented by subclasses)
    # =========================================================================

    @abstractmethod
    def _build_model(self) -> None:
        """
        Build the solver model: objective sense and one empty equality
        row per demand. Called once from __init__.
        """

    @abstractmethod
    def _add_column_impl(
        self,
        column: Column,
        cost: float,
        lower: float,
        upper: float,
        nonzeros: List[Tuple[int, float]],
    ) -> int:
        """
        Append one variable to the solver model.

        Args:
            column: The column being added
            cost: Objective coefficient
            lower: Variable lower bound
            upper: Variable upper bound
            nonzeros: (row, coefficient) pairs for the variable

        Returns:
            The index of the column in the solver model
        """

    @abstractmethod
    def _solve_lp_impl(self) -> MasterSolution:
        """Solve the LP relaxation and return primals and duals."""

    @abstractmethod
    def _solve_ip_impl(self) -> MasterSolution:
        """Solve with integer variables over the current columns."""

    # =========================================================================
    # Public API - Column Management
    # =========================================================================

    def add_column(
        self,
        column: Column,
        cost: Optional[float] = None,
        lower: float = 0.0,
        upper: float = float('inf'),
    ) -> int:
        """
        Append one column to the master problem.

        Adds exactly one variable with objective coefficient ``cost`` and
        coefficient ``a[i]`` in row ``i`` for each non-zero entry. Existing
        rows and variables are left unchanged. Invalidates the duals.

        Args:
            column: The column to add (must have column_id set)
            cost: Objective coefficient (defaults to column.cost)
            lower: Variable lower bound
            upper: Variable upper bound

        Returns:
            Index of the column in the master problem

        Raises:
            ValueError: If the column has no id or its id is already used
            ConfigurationError: If the pattern length or bounds are invalid
        """
        if column.column_id is None:
            raise ValueError("Column must have column_id set before adding to master")
        if column.column_id in self._column_id_to_index:
            raise ValueError(f"Column {column.column_id} already in master")
        if column.num_items != self.num_constraints:
            raise ConfigurationError(
                f"Pattern has {column.num_items} entries, master has "
                f"{self.num_constraints} rows"
            )
        if lower < 0 or upper < lower:
            raise ConfigurationError(f"Invalid bounds [{lower}, {upper}] for column")

        if cost is None:
            cost = column.cost

        nonzeros = [(i, float(a)) for i, a in column.nonzeros()]

        solver_idx = self._add_column_impl(column, float(cost), lower, upper, nonzeros)

        idx = len(self._columns)
        self._columns.append(column)
        self._column_id_to_index[column.column_id] = idx

        for row, coeff in nonzeros:
            self._rows[row].append((column.column_id, coeff))

        self._duals = None
        self._on_column_added(column, idx, solver_idx)

        return idx

    def add_columns(self, columns: Sequence[Column]) -> List[int]:
        """Add multiple columns to the master problem."""
        return [self.add_column(col) for col in columns]

    def get_column(self, column_id: int) -> Optional[Column]:
        """Get a column by its ID, or None if not found."""
        idx = self._column_id_to_index.get(column_id)
        if idx is None:
            return None
        return self._columns[idx]

    def get_row(self, item: int) -> List[Tuple[int, float]]:
        """
        Non-zero entries of a demand row.

        Returns:
            (column_id, coefficient) pairs in insertion order
        """
        if item not in self._rows:
            raise IndexError(f"Row {item} out of range")
        return list(self._rows[item])

    # =========================================================================
    # Public API - Solving
    # =========================================================================

    def solve(self) -> MasterSolution:
        """
        Solve the LP relaxation.

        Returns:
            Optimal MasterSolution with primals and duals

        Raises:
            InfeasibleError: If no x >= 0 satisfies the demand rows
            SolverTimeout: If the per-solve time limit was exceeded
            SolverError: On any other solver failure
        """
        self._before_solve_lp()

        solution = self._solve_lp_impl()
        self._last_solution = solution
        raise_for_status(solution.status, "master", solution.status_detail)

        self._duals = dict(solution.dual_values)
        logger.debug(
            "Master LP solved: obj=%.6f, columns=%d",
            solution.objective_value, self.num_columns,
        )

        return self._after_solve_lp(solution)

    solve_lp = solve

    def solve_ip(self) -> MasterSolution:
        """
        Re-solve with integer variables over the current columns.

        This only restricts the master to the generated patterns; it does
        not price inside a search tree. The model is returned to continuous
        variables afterwards, and the duals are invalidated.

        Returns:
            Optimal MasterSolution with integer column values
        """
        try:
            solution = self._solve_ip_impl()
        finally:
            self._duals = None
        raise_for_status(solution.status, "integer master", solution.status_detail)
        return solution

    # =========================================================================
    # Public API - Dual Values
    # =========================================================================

    def get_dual_values(self) -> Dict[int, float]:
        """
        Dual values of the latest successful LP solve.

        Returns:
            Mapping from item index to dual value p[i]

        Raises:
            StaleDualsError: If the model changed since the last solve
        """
        if self._duals is None:
            raise StaleDualsError(
                "Dual values are not available: solve() the master after "
                "adding columns"
            )
        return dict(self._duals)

    # =========================================================================
    # Hooks (override for custom behavior)
    # =========================================================================

    def _on_column_added(self, column: Column, index: int, solver_index: int) -> None:
        """Hook called after a column is added."""

    def _before_solve_lp(self) -> None:
        """Hook called before solving LP."""

    def _after_solve_lp(self, solution: MasterSolution) -> MasterSolution:
        """Hook called after a successful LP solve."""
        return solution

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def compute_reduced_cost(self, column: Column, dual_values: Dict[int, float]) -> float:
        """
        Compute the reduced cost of a column.

        reduced_cost = c_j - sum_i (p_i * a_j[i])
        """
        dual_sum = sum(
            dual_values.get(item, 0.0) * count
            for item, count in column.nonzeros()
        )
        return column.cost - dual_sum

    def row_activity(self, column_values: Dict[int, float]) -> List[float]:
        """
        Left-hand side of every demand row for the given column values.

        Args:
            column_values: Mapping from column_id to x_j

        Returns:
            sum_j a_j[i] * x_j for each row i
        """
        return [
            sum(coeff * column_values.get(col_id, 0.0) for col_id, coeff in self._rows[i])
            for i in range(self.num_constraints)
        ]

    def is_feasible(self, column_values: Dict[int, float], tol: float = 1e-6) -> bool:
        """Check x >= 0 and every demand row within tolerance."""
        if any(v < -tol for v in column_values.values()):
            return False
        activity = self.row_activity(column_values)
        return all(abs(lhs - b) <= tol * max(1.0, abs(b)) for lhs, b in zip(activity, self._demands))

    def summary(self) -> str:
        """Return a human-readable summary."""
        nnz = sum(len(entries) for entries in self._rows.values())
        lines = [
            f"MasterProblem ({self.__class__.__name__})",
            f"  Columns: {self.num_columns}",
            f"  Constraints: {self.num_constraints}",
            f"  Non-zeros: {nnz}",
            f"  Duals valid: {self.has_valid_duals}",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"columns={self.num_columns}, "
            f"constraints={self.num_constraints})"
        )


def initial_columns(instance: CuttingStockInstance) -> List[Column]:
    """
    Identity starter columns: pattern e_i for each item type i.

    Each fits the roll because w[i] <= W, and x_i = b[i] satisfies every
    demand row exactly.
    """
    return [
        Column.identity(i, instance.num_items, column_id=i, attributes={'initial': True})
        for i in range(instance.num_items)
    ]
