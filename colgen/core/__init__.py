"""
Core data structures for colgen.

- CuttingStockInstance: validated instance data (W, b, w)
- Column: an immutable cutting pattern
- ColumnPool: ordered registry of generated columns
"""

from colgen.core.column import Column, ColumnPool
from colgen.core.instance import CuttingStockInstance

__all__ = [
    'Column',
    'ColumnPool',
    'CuttingStockInstance',
]
