"""
Human-readable reports for column generation results.

Pattern naming (``Pattern[4,0,0,0,0]``) is a presentation concern and is
kept here; the solver identifies columns only by id and pattern tuple.
"""

from typing import List, Optional, Sequence

from colgen.core.column import Column
from colgen.core.instance import CuttingStockInstance
from colgen.solver.solution import CGIteration, CGSolution


def pattern_name(pattern: Sequence[int]) -> str:
    """Display name of a pattern, e.g. ``Pattern[4,0,0,0,0]``."""
    return "Pattern[" + ",".join(str(int(a)) for a in pattern) + "]"


def format_pattern(
    pattern: Sequence[int],
    instance: Optional[CuttingStockInstance] = None,
) -> str:
    """
    Describe the pieces a pattern cuts.

    >>> format_pattern((4, 0, 1))
    '4 x item 0 + 1 x item 2'
    """
    parts = []
    for i, count in enumerate(pattern):
        if count <= 0:
            continue
        if instance is not None:
            label = f"{instance.item_names[i]} (w={instance.widths[i]})"
        else:
            label = f"item {i}"
        parts.append(f"{count} x {label}")
    return " + ".join(parts) if parts else "(empty)"


def format_iterations(history: List[CGIteration]) -> str:
    """Table of the iteration history."""
    lines = [f"{'Iter':>5} {'Objective':>15} {'Reduced cost':>14} {'Columns':>8}  Pattern"]
    for it in history:
        lines.append(
            f"{it.iteration:>5} {it.master_objective:>15.6f} {it.best_reduced_cost:>14.6f} "
            f"{it.total_columns:>8}  {pattern_name(it.pattern)}"
        )
    return "\n".join(lines)


def format_columns(
    columns: Sequence[Column],
    instance: Optional[CuttingStockInstance] = None,
) -> str:
    """Table of columns with their values."""
    lines = [f"{'Id':>4} {'Value':>12}  {'Pattern':<24} Pieces"]
    for col in columns:
        value = col.value if col.value is not None else 0.0
        lines.append(
            f"{col.column_id:>4} {value:>12.6f}  {pattern_name(col.pattern):<24} "
            f"{format_pattern(col.pattern, instance)}"
        )
    return "\n".join(lines)


def format_solution(
    solution: CGSolution,
    instance: Optional[CuttingStockInstance] = None,
    show_all: bool = False,
    show_iterations: bool = False,
) -> str:
    """
    Full report of a column generation run.

    Args:
        solution: Result of solve_cutting_stock() or ColumnGeneration.solve()
        instance: Instance, used to label pieces by width or name
        show_all: List every generated column, not only the active ones
        show_iterations: Append the iteration table
    """
    lines = [solution.summary(), ""]

    columns = solution.columns if show_all else solution.active_columns
    title = "All columns:" if show_all else "Active columns:"
    lines.extend([title, format_columns(columns, instance)])

    if solution.ip_objective is not None:
        lines.extend(["", f"Integer solution ({solution.ip_objective:g} rolls):"])
        for pattern, count in solution.ip_patterns:
            lines.append(f"  {count:>5} x {pattern_name(pattern)}")

    if show_iterations and solution.iteration_history:
        lines.extend(["", "Iterations:", format_iterations(solution.iteration_history)])

    return "\n".join(lines)
