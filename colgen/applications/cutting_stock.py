"""
Cutting Stock Problem via Column Generation.

Given rolls of width W and demands b[i] for pieces of width w[i], find the
minimum (fractional) number of rolls whose cutting patterns meet every
demand exactly.

Mathematical Formulation:
------------------------
Master Problem:
    min  sum_j x_j                    (number of rolls)
    s.t. sum_j a_j[i] * x_j = b[i]    (meet demand for item i)
         x_j >= 0

Pricing Subproblem (Integer Knapsack):
    min  1 - sum_i p[i] * a[i]
    s.t. sum_i w[i] * a[i] <= W
         a[i] >= 0 integer

A pattern improves the master if its reduced cost is below -tolerance.

Usage:
------
    from colgen.applications import solve_cutting_stock

    solution = solve_cutting_stock(100, demands=[45, 38, 25, 11, 12],
                                   widths=[22, 42, 52, 53, 78])
    print(f"LP bound: {solution.objective_value}")   # 57.25
    for pattern, x in solution.patterns:
        print(f"  {pattern} x {x:.2f}")
"""

import dataclasses
import logging
from typing import Optional, Sequence, Union

from colgen.core.instance import CuttingStockInstance
from colgen.exceptions import ConfigurationError
from colgen.solver import CGConfig, CGSolution, ColumnGeneration

logger = logging.getLogger(__name__)


def solve_cutting_stock(
    instance: Union[CuttingStockInstance, float],
    demands: Optional[Sequence[float]] = None,
    widths: Optional[Sequence[float]] = None,
    tolerance: Optional[float] = None,
    max_iterations: Optional[int] = None,
    time_limit: Optional[float] = None,
    pricing: Optional[str] = None,
    solve_ip: Optional[bool] = None,
    verbose: Optional[bool] = None,
    config: Optional[CGConfig] = None,
) -> CGSolution:
    """
    Solve the LP relaxation of a cutting stock problem by column generation.

    Args:
        instance: A CuttingStockInstance, or the roll width W
        demands: Demands b (only when instance is a roll width)
        widths: Piece widths w (only when instance is a roll width)
        tolerance: Convergence tolerance eps
            (default: config.tolerances['reduced_cost'], 1e-6 unless changed)
        max_iterations: Iteration cap (None = unlimited)
        time_limit: Per-solve time limit in seconds (None = no limit)
        pricing: 'highs' (default) or 'dp'
        solve_ip: Re-solve the final master with integer variables
        verbose: Log iteration progress at INFO level
        config: Base configuration; explicit arguments override its fields

    Returns:
        CGSolution with the final master objective, every generated column
        with its value, and the final reduced cost

    Raises:
        ConfigurationError: Malformed instance or options
        InfeasibleError: The master became infeasible
        SolverError: A solver call failed (SolverTimeout on time limit)
    """
    if not isinstance(instance, CuttingStockInstance):
        if demands is None or widths is None:
            raise ConfigurationError("demands and widths are required with a roll width")
        instance = CuttingStockInstance(roll_width=instance, demands=demands, widths=widths)
    elif demands is not None or widths is not None:
        raise ConfigurationError("demands and widths must not be given with an instance")

    overrides = {
        'optimality_tolerance': tolerance,
        'max_iterations': max_iterations,
        'time_limit': time_limit,
        'pricing': pricing,
        'solve_ip': solve_ip,
        'verbose': verbose,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}

    cg_config = dataclasses.replace(config or CGConfig(), **overrides)

    logger.debug("Solving %r with %s", instance, cg_config)
    return ColumnGeneration(instance, cg_config).solve()
