"""
HiGHS implementation of the restricted master problem.

This module provides a ready-to-use master problem solver using HiGHS,
a high-performance open-source LP/MIP solver, through the highspy bindings.

The model is built once (objective sense and empty demand rows) and then
only grows: every add_column is a single Highs.addCol call carrying the
column's non-zeros, so the work per addition is proportional to the
pattern length, not to the size of the model.

Usage:
    >>> from colgen.master import HiGHSMasterProblem
    >>> master = HiGHSMasterProblem.from_instance(instance)
    >>> solution = master.solve()
    >>> duals = master.get_dual_values()
"""

import logging
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

try:
    import highspy
    HIGHS_AVAILABLE = True
except ImportError:
    HIGHS_AVAILABLE = False

from colgen.config import config
from colgen.core.column import Column
from colgen.master.base import MasterProblem
from colgen.master.solution import MasterSolution, SolutionStatus

logger = logging.getLogger(__name__)


def map_highs_status(status) -> SolutionStatus:
    """Map HiGHS model status to our SolutionStatus."""
    if not HIGHS_AVAILABLE:
        return SolutionStatus.ERROR

    status_map = {
        highspy.HighsModelStatus.kNotset: SolutionStatus.NOT_SOLVED,
        highspy.HighsModelStatus.kLoadError: SolutionStatus.ERROR,
        highspy.HighsModelStatus.kModelError: SolutionStatus.ERROR,
        highspy.HighsModelStatus.kPresolveError: SolutionStatus.ERROR,
        highspy.HighsModelStatus.kSolveError: SolutionStatus.ERROR,
        highspy.HighsModelStatus.kPostsolveError: SolutionStatus.ERROR,
        highspy.HighsModelStatus.kModelEmpty: SolutionStatus.ERROR,
        highspy.HighsModelStatus.kOptimal: SolutionStatus.OPTIMAL,
        highspy.HighsModelStatus.kInfeasible: SolutionStatus.INFEASIBLE,
        highspy.HighsModelStatus.kUnbounded: SolutionStatus.UNBOUNDED,
        highspy.HighsModelStatus.kUnboundedOrInfeasible: SolutionStatus.INF_OR_UNBOUNDED,
        highspy.HighsModelStatus.kTimeLimit: SolutionStatus.TIME_LIMIT,
        highspy.HighsModelStatus.kIterationLimit: SolutionStatus.ITERATION_LIMIT,
    }

    return status_map.get(status, SolutionStatus.ERROR)


def configure_highs(
    highs: 'highspy.Highs',
    verbosity: int = 0,
    time_limit: Optional[float] = None,
) -> None:
    """Apply output, threading and time limit options to a Highs instance."""
    highs.setOptionValue('output_flag', verbosity > 0)
    highs.setOptionValue('log_to_console', verbosity > 0)
    highs.setOptionValue('threads', config.num_threads)
    if time_limit is not None:
        highs.setOptionValue('time_limit', float(time_limit))


def status_detail(highs: 'highspy.Highs', status) -> str:
    """Human-readable HiGHS model status."""
    try:
        return highs.modelStatusToString(status)
    except AttributeError:
        return str(status)


class HiGHSMasterProblem(MasterProblem):
    """
    Restricted master problem solved with HiGHS.

    Features:
    - LP solving with row duals for pricing
    - Incremental column addition (one addCol per column)
    - Integer re-solve over the generated columns
    - Per-solve time limit

    Example:
        >>> master = HiGHSMasterProblem.from_instance(instance, time_limit=10.0)
        >>> solution = master.solve()
        >>> print(f"Objective: {solution.objective_value}")
        >>> for item, p in master.get_dual_values().items():
        ...     print(f"  p[{item}] = {p}")

    Attributes:
        time_limit: Maximum time per solve in seconds (None = no limit)
        verbosity: HiGHS output level (0 = silent, 1 = normal)
    """

    def __init__(
        self,
        demands: Sequence[float],
        item_names: Optional[Sequence[str]] = None,
        time_limit: Optional[float] = None,
        verbosity: int = 0,
    ):
        """
        Initialize the HiGHS master problem.

        Args:
            demands: Right-hand side of each demand row
            item_names: Row names
            time_limit: Maximum time per solve in seconds (default: config.time_limit)
            verbosity: HiGHS output level (0 = silent)

        Raises:
            ImportError: If highspy is not installed
        """
        if not HIGHS_AVAILABLE:
            raise ImportError(
                "HiGHS is not available. Install it with: pip install highspy"
            )

        self._time_limit = time_limit if time_limit is not None else config.time_limit
        self._verbosity = verbosity

        # HiGHS model (created in _build_model)
        self._highs: Optional[highspy.Highs] = None

        # column_id -> solver column index
        self._column_to_solver_idx: Dict[int, int] = {}

        super().__init__(demands, item_names=item_names)

    # =========================================================================
    # Abstract Method Implementations
    # =========================================================================

    def _build_model(self) -> None:
        """Build the HiGHS model with empty equality rows."""
        self._highs = highspy.Highs()
        configure_highs(self._highs, self._verbosity, self._time_limit)

        self._highs.changeObjectiveSense(highspy.ObjSense.kMinimize)

        # sum_j a_j[i] * x_j = b[i], no columns yet
        empty_idx = np.array([], dtype=np.int32)
        empty_val = np.array([], dtype=np.float64)
        for b in self._demands:
            self._highs.addRow(b, b, 0, empty_idx, empty_val)

    def _add_column_impl(
        self,
        column: Column,
        cost: float,
        lower: float,
        upper: float,
        nonzeros: List[Tuple[int, float]],
    ) -> int:
        """Add a column to the HiGHS model."""
        indices = np.array([row for row, _ in nonzeros], dtype=np.int32)
        values = np.array([coeff for _, coeff in nonzeros], dtype=np.float64)

        if upper == float('inf'):
            upper = highspy.kHighsInf

        self._highs.addCol(cost, lower, upper, len(indices), indices, values)

        solver_idx = self._highs.getNumCol() - 1
        self._column_to_solver_idx[column.column_id] = solver_idx

        return solver_idx

    def _solve_lp_impl(self) -> MasterSolution:
        """Solve the LP relaxation."""
        start_time = time.time()

        self._highs.run()

        solve_time = time.time() - start_time
        model_status = self._highs.getModelStatus()
        status = map_highs_status(model_status)

        info = self._highs.getInfo()
        solution = MasterSolution(
            status=status,
            solve_time=solve_time,
            iterations=info.simplex_iteration_count,
            num_columns=self.num_columns,
            status_detail=status_detail(self._highs, model_status),
        )

        if status != SolutionStatus.OPTIMAL:
            logger.debug("Master LP status: %s", solution.status_detail)
            return solution

        solution.objective_value = info.objective_function_value

        sol = self._highs.getSolution()
        for col_id, solver_idx in self._column_to_solver_idx.items():
            solution.column_values[col_id] = sol.col_value[solver_idx]

        for i in range(self.num_constraints):
            solution.dual_values[i] = sol.row_dual[i]

        return solution

    def _solve_ip_impl(self) -> MasterSolution:
        """Solve as integer program, then restore continuous variables."""
        start_time = time.time()
        num_cols = self._highs.getNumCol()

        for i in range(num_cols):
            self._highs.changeColIntegrality(i, highspy.HighsVarType.kInteger)
        self._highs.setOptionValue('mip_rel_gap', config.get_tolerance('mip_gap'))

        try:
            self._highs.run()

            model_status = self._highs.getModelStatus()
            status = map_highs_status(model_status)
            info = self._highs.getInfo()

            solution = MasterSolution(
                status=status,
                solve_time=time.time() - start_time,
                iterations=info.simplex_iteration_count,
                num_columns=self.num_columns,
                is_integer_solve=True,
                status_detail=status_detail(self._highs, model_status),
            )

            if status == SolutionStatus.OPTIMAL:
                solution.objective_value = info.objective_function_value
                sol = self._highs.getSolution()
                for col_id, solver_idx in self._column_to_solver_idx.items():
                    solution.column_values[col_id] = float(round(sol.col_value[solver_idx]))
            else:
                logger.debug("Master IP status: %s", solution.status_detail)
        finally:
            for i in range(num_cols):
                self._highs.changeColIntegrality(i, highspy.HighsVarType.kContinuous)

        return solution

    # =========================================================================
    # HiGHS-specific Methods
    # =========================================================================

    def set_time_limit(self, seconds: Optional[float]) -> None:
        """
        Set the per-solve time limit.

        Args:
            seconds: Maximum solve time in seconds (None = no limit)
        """
        self._time_limit = seconds
        self._highs.setOptionValue(
            'time_limit', float(seconds) if seconds is not None else highspy.kHighsInf
        )

    def set_verbosity(self, level: int) -> None:
        """Set the HiGHS output level (0 = silent)."""
        self._verbosity = level
        self._highs.setOptionValue('output_flag', level > 0)
        self._highs.setOptionValue('log_to_console', level > 0)

    def get_model_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the solver model.

        Returns:
            Dictionary with model statistics
        """
        return {
            'num_columns': self._highs.getNumCol(),
            'num_rows': self._highs.getNumRow(),
            'num_nonzeros': self._highs.getNumNz(),
        }
