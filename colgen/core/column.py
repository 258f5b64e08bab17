"""
Column module - represents a cutting pattern in the column generation framework.

In column generation, a "column" is a feasible solution to the pricing
subproblem. For cutting stock, a column is a pattern: how many pieces of
each item type are cut from one roll.

This module provides:
- Column: The pattern vector plus cost and solver values
- ColumnPool: Ordered registry of every generated column

Design Notes:
------------
- Columns are immutable once created (hashable for use in sets and dicts)
- Equality and hashing use the pattern vector only, so the same pattern
  produced twice is recognised regardless of id or reduced cost
- The reduced cost is computed during pricing, stored for convenience

Column Lifecycle:
----------------
1. Created by the pricing subproblem (knapsack finds a pattern with negative reduced cost)
2. Registered in the column pool (receives an id)
3. Added to the master problem (becomes a variable)
4. Never deleted: the working set only grows
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class Column:
    """
    A cutting pattern (one variable of the master problem).

    Attributes:
        pattern: Number of pieces of each item type cut from one roll
        cost: Objective coefficient (rolls consumed, 1 by default)
        column_id: Optional unique identifier
        reduced_cost: Reduced cost (set during pricing)
        value: Value in the solution (set after solving master)
        attributes: Additional attributes (e.g. 'initial' for starter columns)

    Example:
        >>> column = Column(pattern=(4, 0, 0, 0, 0))
        >>> column.count(0)
        4
        >>> column.covered_items
        frozenset({0})
    """
    pattern: Tuple[int, ...]
    cost: float = 1.0
    column_id: Optional[int] = None
    reduced_cost: Optional[float] = None
    value: Optional[float] = None
    attributes: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Normalise the pattern to a tuple of ints."""
        # frozen dataclass doesn't allow assignment, use object.__setattr__
        pattern = tuple(int(round(a)) for a in self.pattern)
        if any(a < 0 for a in pattern):
            raise ValueError(f"Pattern entries must be non-negative: {pattern}")
        object.__setattr__(self, 'pattern', pattern)
        if not isinstance(self.attributes, dict):
            object.__setattr__(self, 'attributes', dict(self.attributes))

    @classmethod
    def identity(cls, item: int, num_items: int, **kwargs) -> 'Column':
        """Pattern that cuts exactly one piece of ``item``."""
        pattern = [0] * num_items
        pattern[item] = 1
        return cls(pattern=tuple(pattern), **kwargs)

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def num_items(self) -> int:
        """Length of the pattern vector."""
        return len(self.pattern)

    @property
    def covered_items(self) -> frozenset:
        """Item indices with a positive count."""
        return frozenset(i for i, a in enumerate(self.pattern) if a > 0)

    @property
    def is_empty(self) -> bool:
        """True for the all-zero pattern."""
        return not any(self.pattern)

    @property
    def is_in_solution(self) -> bool:
        """Check if this column is part of the solution (value > 0)."""
        return self.value is not None and self.value > 1e-6

    # =========================================================================
    # Methods
    # =========================================================================

    def count(self, item: int) -> int:
        """Number of pieces of ``item`` in the pattern."""
        return self.pattern[item]

    def covers_item(self, item: int) -> bool:
        """Check if the pattern cuts at least one piece of ``item``."""
        return 0 <= item < len(self.pattern) and self.pattern[item] > 0

    def nonzeros(self) -> List[Tuple[int, int]]:
        """(item, count) pairs for the non-zero entries."""
        return [(i, a) for i, a in enumerate(self.pattern) if a > 0]

    def used_width(self, widths: Sequence[float]) -> float:
        """Total width consumed from the roll."""
        return sum(w * a for w, a in zip(widths, self.pattern))

    def fits(self, widths: Sequence[float], roll_width: float, tol: float = 1e-9) -> bool:
        """Check the knapsack condition sum(w[i] * a[i]) <= W."""
        return len(widths) == len(self.pattern) and self.used_width(widths) <= roll_width + tol

    def get_attribute(self, key: str, default: Any = None) -> Any:
        """Get an attribute value."""
        return self.attributes.get(key, default)

    def with_reduced_cost(self, reduced_cost: float) -> 'Column':
        """Create a copy with reduced_cost set."""
        return Column(
            pattern=self.pattern,
            cost=self.cost,
            column_id=self.column_id,
            reduced_cost=reduced_cost,
            value=self.value,
            attributes=self.attributes,
        )

    def with_value(self, value: float) -> 'Column':
        """Create a copy with value set."""
        return Column(
            pattern=self.pattern,
            cost=self.cost,
            column_id=self.column_id,
            reduced_cost=self.reduced_cost,
            value=value,
            attributes=self.attributes,
        )

    def with_id(self, column_id: int) -> 'Column':
        """Create a copy with column_id set."""
        return Column(
            pattern=self.pattern,
            cost=self.cost,
            column_id=column_id,
            reduced_cost=self.reduced_cost,
            value=self.value,
            attributes=self.attributes,
        )

    def __hash__(self) -> int:
        """Hash based on the pattern vector."""
        return hash(self.pattern)

    def __eq__(self, other: object) -> bool:
        """Equality based on the pattern vector."""
        if not isinstance(other, Column):
            return NotImplemented
        return self.pattern == other.pattern

    def __repr__(self) -> str:
        id_str = f"#{self.column_id} " if self.column_id is not None else ""
        value_str = f", value={self.value:.4f}" if self.value is not None else ""
        rc_str = f", rc={self.reduced_cost:.4f}" if self.reduced_cost is not None else ""
        return f"Column({id_str}{list(self.pattern)}, cost={self.cost:.2f}{value_str}{rc_str})"


# =============================================================================
# Column Pool
# =============================================================================


class ColumnPool:
    """
    Container for storing and managing generated columns.

    The ColumnPool provides:
    - Id assignment in generation order
    - Lookup by column_id
    - Lookup by pattern (used to detect repeated columns)

    Example:
        >>> pool = ColumnPool()
        >>> col = pool.add(Column(pattern=(1, 0)))
        >>> col.column_id
        0
        >>> pool.find((1, 0)) is col
        True
    """

    def __init__(self):
        """Create an empty column pool."""
        self._columns: List[Column] = []
        self._id_to_index: Dict[int, int] = {}
        self._pattern_to_index: Dict[Tuple[int, ...], int] = {}
        self._next_id: int = 0

    @property
    def size(self) -> int:
        """Number of columns in the pool."""
        return len(self._columns)

    def add(self, column: Column) -> Column:
        """
        Add a column to the pool.

        If the column doesn't have an ID, one is assigned.

        Args:
            column: Column to add

        Returns:
            Column with ID assigned
        """
        if column.column_id is None:
            column = column.with_id(self._next_id)
        if column.column_id in self._id_to_index:
            raise ValueError(f"Column id {column.column_id} already in pool")
        self._next_id = max(self._next_id, column.column_id + 1)

        index = len(self._columns)
        self._columns.append(column)
        self._id_to_index[column.column_id] = index
        self._pattern_to_index.setdefault(column.pattern, index)

        return column

    def get(self, column_id: int) -> Optional[Column]:
        """Get a column by ID, or None if not found."""
        index = self._id_to_index.get(column_id)
        if index is None:
            return None
        return self._columns[index]

    def find(self, pattern: Sequence[int]) -> Optional[Column]:
        """Get the first column with this pattern, or None."""
        index = self._pattern_to_index.get(tuple(pattern))
        if index is None:
            return None
        return self._columns[index]

    def __contains__(self, column: object) -> bool:
        if not isinstance(column, Column):
            return False
        return column.pattern in self._pattern_to_index

    def all_columns(self) -> List[Column]:
        """Get all columns in generation order."""
        return self._columns.copy()

    def columns_covering(self, item: int) -> List[Column]:
        """Get columns that cut at least one piece of ``item``."""
        return [col for col in self._columns if col.covers_item(item)]

    def clear(self) -> None:
        """Remove all columns from the pool."""
        self._columns.clear()
        self._id_to_index.clear()
        self._pattern_to_index.clear()
        self._next_id = 0

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[Column]:
        return iter(self._columns)

    def __repr__(self) -> str:
        return f"ColumnPool(size={self.size})"
