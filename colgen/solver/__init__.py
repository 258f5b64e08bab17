"""
Solver module - the column generation loop.

This module provides the controller that alternates between the restricted
master problem and the pricing knapsack until no improving pattern exists.

This module provides:
- ColumnGeneration: Main algorithm controller
- CGConfig: Configuration options
- CGSolution: Solution data structure
- CGStatus: Outcome of a run
- CGIteration: Per-iteration information
- LoopState: States of the loop

Usage:
------
Basic usage:

    >>> from colgen.solver import ColumnGeneration, CGConfig
    >>> cg = ColumnGeneration(instance, CGConfig(max_iterations=100))
    >>> solution = cg.solve()
    >>> if solution.is_optimal:
    ...     print(f"LP bound: {solution.objective_value}")

With custom components:

    >>> from colgen.pricing import DPKnapsackPricing
    >>> cg = ColumnGeneration(instance)
    >>> cg.set_pricing(DPKnapsackPricing(instance))
    >>> solution = cg.solve()

With callbacks for monitoring:

    >>> def progress_callback(cg, iteration):
    ...     print(f"Iter {iteration.iteration}: rc={iteration.best_reduced_cost:.4f}")
    ...     return iteration.iteration < 50  # Stop after 50 iterations
    >>> cg.add_callback(progress_callback)

Outcomes:
--------
- OPTIMAL: pricing proved rc >= -tolerance
- NOT_CONVERGED: max_iterations reached or a callback stopped the run
- TIME_LIMIT: max_time reached
- STALLED: pricing returned a pattern already in the master
Solver faults are raised (InfeasibleError, SolverError, SolverTimeout).
"""

from colgen.solver.solution import CGIteration, CGSolution, CGStatus, LoopState
from colgen.solver.column_generation import CGCallback, CGConfig, ColumnGeneration

__all__ = [
    # Main class
    'ColumnGeneration',

    # Configuration
    'CGConfig',
    'CGCallback',

    # Solution
    'CGSolution',
    'CGStatus',
    'CGIteration',
    'LoopState',
]
