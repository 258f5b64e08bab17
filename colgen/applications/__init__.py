"""
Ready-to-use solve functions.

Usage:
------
    from colgen.applications import CuttingStockInstance, solve_cutting_stock
    instance = CuttingStockInstance(roll_width=100, demands=[10, 20], widths=[45, 36])
    solution = solve_cutting_stock(instance)
"""

from colgen.applications.cutting_stock import solve_cutting_stock
from colgen.core.instance import CuttingStockInstance

__all__ = [
    'CuttingStockInstance',
    'solve_cutting_stock',
]
