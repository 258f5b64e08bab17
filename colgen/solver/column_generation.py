"""
Column Generation controller.

This module implements the column generation algorithm that coordinates
the restricted master problem and the pricing subproblem.

Algorithm Overview:
------------------
1. Build the starter master (one identity pattern per item type)
2. Solve the master LP
3. Extract dual values
4. Solve the pricing knapsack with those duals
5. If its optimal reduced cost is >= -tolerance, the master LP is optimal
   for the full (unenumerated) problem: stop
6. Otherwise add the optimal pattern as a new column and go to step 2

The loop is strictly sequential: each pricing solve needs the duals of
the previous master solve, and each master solve needs the column of the
previous pricing solve.

References:
----------
- Gilmore, P. C., & Gomory, R. E. (1961). A linear programming approach
  to the cutting-stock problem. Operations Research, 9(6), 849-859.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from colgen.config import config as global_config
from colgen.core.column import ColumnPool
from colgen.core.instance import CuttingStockInstance
from colgen.exceptions import ColumnGenerationError, ConfigurationError
from colgen.master import HiGHSMasterProblem, MasterProblem, MasterSolution, initial_columns
from colgen.pricing import PRICING_METHODS, PricingConfig, PricingProblem
from colgen.solver.solution import CGIteration, CGSolution, CGStatus, LoopState

logger = logging.getLogger(__name__)


@dataclass
class CGConfig:
    """
    Configuration for the column generation algorithm.

    Attributes:
        max_iterations: Maximum pricing rounds (0 = unlimited)
        max_time: Maximum total time in seconds (0 = unlimited)
        optimality_tolerance: Converged when best RC >= -tolerance
            (default: config.tolerances['reduced_cost'])
        time_limit: Per-solve time limit for master and pricing (None = no limit)
        pricing: Pricing method ('highs' or 'dp')
        solve_ip: Re-solve the master with integer variables after convergence
        stop_on_stall: Stop when pricing repeats a column already in the master
        verbose: Log progress at INFO level and enable solver output
    """
    max_iterations: int = 0
    max_time: float = 0.0
    optimality_tolerance: float = field(
        default_factory=lambda: global_config.get_tolerance('reduced_cost')
    )
    time_limit: Optional[float] = None
    pricing: str = 'highs'
    solve_ip: bool = False
    stop_on_stall: bool = True
    verbose: bool = False

    def __post_init__(self):
        if self.max_iterations is None:
            self.max_iterations = 0
        if self.max_iterations < 0:
            raise ConfigurationError("max_iterations must be >= 0")
        if self.max_time < 0:
            raise ConfigurationError("max_time must be >= 0")
        if self.optimality_tolerance < 0:
            raise ConfigurationError("optimality_tolerance must be >= 0")
        if self.time_limit is not None and self.time_limit <= 0:
            raise ConfigurationError("time_limit must be positive")
        if self.pricing not in PRICING_METHODS:
            raise ConfigurationError(
                f"Unknown pricing method {self.pricing!r}; "
                f"expected one of {sorted(PRICING_METHODS)}"
            )


# Type alias for callback functions
CGCallback = Callable[['ColumnGeneration', CGIteration], bool]


class ColumnGeneration:
    """
    Column generation algorithm controller.

    Owns the master problem, the pricing problem, the column pool and the
    dual vector. Failures from either component (InfeasibleError,
    SolverError, SolverTimeout) abort the loop and propagate unchanged.

    Example:
        >>> from colgen.solver import ColumnGeneration, CGConfig
        >>> cg = ColumnGeneration(instance, CGConfig(max_iterations=100))
        >>> solution = cg.solve()
        >>> print(f"Optimal value: {solution.objective_value}")
        >>> cg.state
        <LoopState.CONVERGED: 5>

    Callbacks:
        >>> def my_callback(cg, iteration):
        ...     print(f"Iteration {iteration.iteration}: obj={iteration.master_objective}")
        ...     return True  # Continue solving
        >>> cg.add_callback(my_callback)
    """

    def __init__(
        self,
        instance: CuttingStockInstance,
        config: Optional[CGConfig] = None,
    ):
        """
        Initialize the column generation controller.

        Args:
            instance: The instance to solve
            config: Configuration options (uses defaults if not provided)
        """
        instance.validate()
        self._instance = instance
        self._config = config or CGConfig()

        # Components (created lazily or can be set externally)
        self._master: Optional[MasterProblem] = None
        self._pricing: Optional[PricingProblem] = None

        self._column_pool = ColumnPool()
        self._callbacks: List[CGCallback] = []

        self._state = LoopState.INIT
        self._state_history: List[LoopState] = [LoopState.INIT]
        self._solution: Optional[CGSolution] = None

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def instance(self) -> CuttingStockInstance:
        return self._instance

    @property
    def config(self) -> CGConfig:
        """Configuration options."""
        return self._config

    @property
    def master(self) -> Optional[MasterProblem]:
        return self._master

    @property
    def pricing(self) -> Optional[PricingProblem]:
        return self._pricing

    @property
    def column_pool(self) -> ColumnPool:
        """Every column the master has seen, in generation order."""
        return self._column_pool

    @property
    def state(self) -> LoopState:
        """Current state of the loop."""
        return self._state

    @property
    def state_history(self) -> List[LoopState]:
        """Every state the loop has passed through."""
        return list(self._state_history)

    @property
    def solution(self) -> Optional[CGSolution]:
        """The solution (None if not yet solved)."""
        return self._solution

    # =========================================================================
    # Configuration
    # =========================================================================

    def set_master(self, master: MasterProblem) -> None:
        """Use a custom master problem (starter columns are added if it has none)."""
        if master.num_constraints != self._instance.num_items:
            raise ConfigurationError(
                f"Master has {master.num_constraints} rows, instance has "
                f"{self._instance.num_items} item types"
            )
        self._master = master

    def set_pricing(self, pricing: PricingProblem) -> None:
        """Use a custom pricing problem."""
        self._pricing = pricing

    def add_callback(self, callback: CGCallback) -> None:
        """
        Add a callback function.

        Callbacks are called after each iteration with the ColumnGeneration
        instance and iteration info. Return False to stop the algorithm.
        """
        self._callbacks.append(callback)

    # =========================================================================
    # Main Algorithm
    # =========================================================================

    def solve(self) -> CGSolution:
        """
        Run the column generation algorithm.

        Returns:
            CGSolution with results and statistics

        Raises:
            ConfigurationError: Malformed instance or configuration
            InfeasibleError: The master became infeasible
            SolverError: A solver call failed (SolverTimeout on time limit)
        """
        if self._state != LoopState.INIT:
            raise RuntimeError("ColumnGeneration.solve() can only run once; call reset() first")

        start_time = time.time()

        try:
            self._initialize()
            solution = self._run_column_generation(start_time)

            if self._config.solve_ip and solution.has_solution:
                self._solve_ip(solution)
        except ColumnGenerationError as e:
            logger.error("Column generation failed: %s", e)
            self._transition(LoopState.FAILED)
            raise

        solution.total_time = time.time() - start_time
        self._solution = solution

        return solution

    def _initialize(self) -> None:
        """Create master and pricing if not already set."""
        verbosity = 1 if self._config.verbose else 0

        if self._master is None:
            self._master = HiGHSMasterProblem.from_instance(
                self._instance,
                time_limit=self._config.time_limit,
                verbosity=verbosity,
            )
        elif self._master.num_columns == 0:
            self._master.add_columns(initial_columns(self._instance))

        for col in self._master.columns:
            self._column_pool.add(col)

        if self._pricing is None:
            pricing_cls = PRICING_METHODS[self._config.pricing]
            self._pricing = pricing_cls(
                self._instance,
                PricingConfig(
                    reduced_cost_threshold=-self._config.optimality_tolerance,
                    time_limit=self._config.time_limit,
                    verbosity=verbosity,
                ),
            )

    def _run_column_generation(self, start_time: float) -> CGSolution:
        """
        Run the master -> price -> augment loop.

        Args:
            start_time: Algorithm start time

        Returns:
            CGSolution with LP results
        """
        cfg = self._config
        log = logger.info if cfg.verbose else logger.debug
        tol = cfg.optimality_tolerance

        iteration_history: List[CGIteration] = []
        total_master_time = 0.0
        total_pricing_time = 0.0

        # INIT -> MASTER_SOLVED
        master_solution, master_time = self._solve_master()
        total_master_time += master_time
        log("Initial master: obj=%.6f, columns=%d",
            master_solution.objective_value, self._master.num_columns)

        iteration = 0
        status = CGStatus.NOT_SOLVED
        last_rc: Optional[float] = None

        while True:
            if cfg.max_iterations > 0 and iteration >= cfg.max_iterations:
                status = CGStatus.NOT_CONVERGED
                self._transition(LoopState.NOT_CONVERGED)
                logger.warning(
                    "Stopping: iteration limit %d reached without convergence "
                    "(last rc=%s)", cfg.max_iterations, last_rc,
                )
                break

            if cfg.max_time > 0 and time.time() - start_time >= cfg.max_time:
                status = CGStatus.TIME_LIMIT
                self._transition(LoopState.NOT_CONVERGED)
                logger.warning("Stopping: time limit %.1fs reached", cfg.max_time)
                break

            iteration += 1
            master_obj = master_solution.objective_value

            # MASTER_SOLVED: read duals, then price
            duals = self._master.get_dual_values()
            pricing_start = time.time()
            self._pricing.set_dual_values(duals)
            pricing_solution = self._pricing.solve()
            pricing_time = time.time() - pricing_start
            total_pricing_time += pricing_time
            self._transition(LoopState.PRICED)

            last_rc = pricing_solution.best_reduced_cost
            iter_info = CGIteration(
                iteration=iteration,
                master_objective=master_obj,
                dual_values=[duals[i] for i in range(self._instance.num_items)],
                best_reduced_cost=last_rc,
                pattern=pricing_solution.pattern,
                column_added=None,
                master_time=master_time,
                pricing_time=pricing_time,
                total_columns=self._master.num_columns,
            )
            iteration_history.append(iter_info)

            if last_rc >= -tol:
                status = CGStatus.OPTIMAL
                self._transition(LoopState.CONVERGED)
                log("Iteration %d: obj=%.6f, rc=%.6g >= -%g. LP optimal.",
                    iteration, master_obj, last_rc, tol)
                self._invoke_callbacks(iter_info)
                break

            column = pricing_solution.column
            existing = self._column_pool.find(column.pattern)
            if existing is not None:
                logger.warning(
                    "Iteration %d: pricing repeated pattern %s (column %d) with rc=%.6g",
                    iteration, list(column.pattern), existing.column_id, last_rc,
                )
                if cfg.stop_on_stall:
                    status = CGStatus.STALLED
                    self._transition(LoopState.STALLED)
                    break

            # AUGMENTING -> MASTER_SOLVED
            self._transition(LoopState.AUGMENTING)
            column = self._column_pool.add(column)
            self._master.add_column(column)
            iter_info.column_added = column.column_id
            iter_info.total_columns = self._master.num_columns

            master_solution, master_time = self._solve_master()
            total_master_time += master_time

            new_obj = master_solution.objective_value
            if new_obj > master_obj + 1e-7 * max(1.0, abs(master_obj)):
                logger.warning(
                    "Iteration %d: master objective increased %.9f -> %.9f",
                    iteration, master_obj, new_obj,
                )

            log("Iteration %d: obj=%.6f, rc=%.6f, pattern=%s, columns=%d",
                iteration, new_obj, last_rc, list(column.pattern), self._master.num_columns)

            if not self._invoke_callbacks(iter_info):
                status = CGStatus.NOT_CONVERGED
                self._transition(LoopState.NOT_CONVERGED)
                log("Stopped by callback after iteration %d", iteration)
                break

        return self._build_solution(
            status=status,
            master_solution=master_solution,
            final_reduced_cost=last_rc,
            iteration_history=iteration_history,
            total_master_time=total_master_time,
            total_pricing_time=total_pricing_time,
        )

    def _solve_master(self):
        """Solve the master LP; returns (solution, seconds)."""
        master_start = time.time()
        solution = self._master.solve()
        elapsed = time.time() - master_start
        self._transition(LoopState.MASTER_SOLVED)
        return solution, elapsed

    def _solve_ip(self, solution: CGSolution) -> None:
        """Re-solve the master with integer variables over the generated columns."""
        log = logger.info if self._config.verbose else logger.debug
        log("Solving integer master over %d columns", self._master.num_columns)

        ip_start = time.time()
        ip_solution = self._master.solve_ip()
        solution.master_time += time.time() - ip_start

        solution.ip_objective = ip_solution.objective_value
        solution.ip_column_values = {
            col_id: value
            for col_id, value in ip_solution.column_values.items()
            if value > 0.5
        }
        log("Integer master: %s rolls", ip_solution.objective_value)

    def _build_solution(
        self,
        status: CGStatus,
        master_solution: MasterSolution,
        final_reduced_cost: Optional[float],
        iteration_history: List[CGIteration],
        total_master_time: float,
        total_pricing_time: float,
    ) -> CGSolution:
        """Build the CGSolution from the last master solve."""
        column_values = {
            col.column_id: master_solution.column_values.get(col.column_id, 0.0)
            for col in self._column_pool
        }
        columns = [col.with_value(column_values[col.column_id]) for col in self._column_pool]

        return CGSolution(
            status=status,
            objective_value=master_solution.objective_value,
            column_values=column_values,
            columns=columns,
            iterations=len(iteration_history),
            final_reduced_cost=final_reduced_cost,
            dual_values=dict(master_solution.dual_values),
            lower_bound=self._instance.l2_lower_bound(),
            master_time=total_master_time,
            pricing_time=total_pricing_time,
            iteration_history=iteration_history,
            metadata={'pricing': type(self._pricing).__name__},
        )

    def _transition(self, state: LoopState) -> None:
        logger.debug("Loop state %s -> %s", self._state.name, state.name)
        self._state = state
        self._state_history.append(state)

    def _invoke_callbacks(self, iteration: CGIteration) -> bool:
        """Invoke all callbacks; False means stop."""
        for callback in self._callbacks:
            if not callback(self, iteration):
                return False
        return True

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def get_iteration_history(self) -> List[CGIteration]:
        """History of all iterations of the last solve."""
        if self._solution is None:
            return []
        return self._solution.iteration_history

    def reset(self) -> None:
        """
        Reset the solver for a new solve.

        Clears all state but keeps configuration and callbacks. The master
        and pricing problems are recreated on the next solve().
        """
        self._column_pool = ColumnPool()
        self._master = None
        self._pricing = None
        self._solution = None
        self._state = LoopState.INIT
        self._state_history = [LoopState.INIT]

    def summary(self) -> str:
        """Return a human-readable summary."""
        lines = [
            f"ColumnGeneration: {self._instance!r}",
            "  Config:",
            f"    Max iterations: {self._config.max_iterations or 'unlimited'}",
            f"    Tolerance: {self._config.optimality_tolerance}",
            f"    Pricing: {self._config.pricing}",
            f"  State: {self._state.name}",
        ]

        if self._solution is not None:
            lines.extend(["", self._solution.summary()])

        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"ColumnGeneration(items={self._instance.num_items}, state={self._state.name})"
