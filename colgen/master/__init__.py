"""
Master problem module - the restricted master LP over generated patterns.

The restricted master problem for cutting stock is:

    min  sum_j x_j
    s.t. sum_j a_j[i] * x_j = b[i]   for each item type i
         x_j >= 0

This module provides:
- MasterProblem: Abstract base class for custom implementations
- HiGHSMasterProblem: Default implementation using HiGHS
- MasterSolution: Solution data structure
- SolutionStatus: Enum for solver status

Usage:
------
    >>> from colgen.master import HiGHSMasterProblem
    >>> master = HiGHSMasterProblem.from_instance(instance)
    >>> solution = master.solve()
    >>> duals = master.get_dual_values()
    >>> master.add_column(new_column)   # duals are now stale
    >>> solution = master.solve()

Customization Points:
--------------------
1. Required methods (must implement):
   - _build_model(): Build the solver model
   - _add_column_impl(): Append one variable with its non-zeros
   - _solve_lp_impl(): Solve LP relaxation
   - _solve_ip_impl(): Solve with integer variables

2. Hooks (override to customize behavior):
   - _on_column_added(): Called after adding a column
   - _before_solve_lp(): Called before LP solve
   - _after_solve_lp(): Called after a successful LP solve
"""

from colgen.master.solution import MasterSolution, SolutionStatus, raise_for_status
from colgen.master.base import MasterProblem, initial_columns
from colgen.master.highs import HIGHS_AVAILABLE, HiGHSMasterProblem


__all__ = [
    # Solution
    'MasterSolution',
    'SolutionStatus',
    'raise_for_status',

    # Base class
    'MasterProblem',
    'initial_columns',

    # HiGHS implementation
    'HiGHSMasterProblem',
    'HIGHS_AVAILABLE',
]
