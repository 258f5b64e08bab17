"""
Cutting stock instance data.

An instance is the immutable input of the column generation loop:

- roll_width  W     capacity of one raw roll
- demands     b[i]  pieces of item type i that must be produced
- widths      w[i]  width of one piece of item type i

Validation happens here, before any model is built, so a malformed
instance surfaces as ConfigurationError and never reaches the solver.
"""

import math
import os
from dataclasses import dataclass
from typing import List, Optional, Sequence

from colgen.exceptions import ConfigurationError


@dataclass(frozen=True)
class CuttingStockInstance:
    """
    A Cutting Stock Problem instance.

    Attributes:
        roll_width: Width of each roll (capacity W)
        demands: Number of pieces needed per item type (b)
        widths: Width of each item type (w)
        item_names: Optional names for items
        name: Optional instance name

    Example:
        >>> instance = CuttingStockInstance(
        ...     roll_width=100,
        ...     demands=[45, 38, 25, 11, 12],
        ...     widths=[22, 42, 52, 53, 78],
        ... )
        >>> instance.num_items
        5
    """
    roll_width: float
    demands: Sequence[float]
    widths: Sequence[float]
    item_names: Optional[Sequence[str]] = None
    name: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'demands', tuple(self.demands))
        object.__setattr__(self, 'widths', tuple(self.widths))

        if self.item_names is None:
            names = tuple(f"item_{i}" for i in range(len(self.widths)))
        else:
            names = tuple(self.item_names)
        object.__setattr__(self, 'item_names', names)

        self.validate()

    def validate(self) -> None:
        """
        Check the instance invariants.

        Raises:
            ConfigurationError: If the instance is malformed
        """
        if not _is_finite_number(self.roll_width) or self.roll_width <= 0:
            raise ConfigurationError(
                f"roll_width must be a positive number, got {self.roll_width!r}"
            )
        if len(self.widths) == 0:
            raise ConfigurationError("instance has no item types")
        if len(self.demands) != len(self.widths):
            raise ConfigurationError(
                f"demands and widths must have same length "
                f"({len(self.demands)} != {len(self.widths)})"
            )
        if len(self.item_names) != len(self.widths):
            raise ConfigurationError("item_names must have same length as widths")

        for i, (b, w) in enumerate(zip(self.demands, self.widths)):
            if not _is_finite_number(b) or b <= 0:
                raise ConfigurationError(f"demand of item {i} must be positive, got {b!r}")
            if not _is_finite_number(w) or w <= 0:
                raise ConfigurationError(f"width of item {i} must be positive, got {w!r}")
            if w > self.roll_width:
                raise ConfigurationError(
                    f"width of item {i} ({w}) exceeds roll width {self.roll_width}; "
                    f"no pattern can ever cut it"
                )

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def num_items(self) -> int:
        """Number of item types (m)."""
        return len(self.widths)

    @property
    def total_demand(self) -> float:
        """Total number of pieces demanded."""
        return sum(self.demands)

    @property
    def has_integral_widths(self) -> bool:
        """True when W and every w[i] are whole numbers."""
        values = (self.roll_width,) + tuple(self.widths)
        return all(float(v).is_integer() for v in values)

    def max_copies(self, item: int) -> int:
        """Maximum copies of an item that fit in one roll."""
        return int(math.floor(self.roll_width / self.widths[item] + 1e-9))

    def l2_lower_bound(self) -> int:
        """
        Continuous (L2) lower bound on the integer number of rolls.

        L2 = ceil(sum_i w[i] * b[i] / W)
        """
        total_area = sum(w * b for w, b in zip(self.widths, self.demands))
        return int(math.ceil(total_area / self.roll_width - 1e-9))

    # =========================================================================
    # Loading
    # =========================================================================

    @classmethod
    def from_bpplib(cls, filepath: str) -> 'CuttingStockInstance':
        """
        Load a cutting stock instance from BPPLIB format.

        BPPLIB format (for CSP):
            Line 1: Number of item types
            Line 2: Roll/bin capacity
            Lines 3+: width<whitespace>demand for each item type

        Args:
            filepath: Path to the BPPLIB .txt file

        Raises:
            ConfigurationError: If the file cannot be parsed
        """
        name = os.path.splitext(os.path.basename(filepath))[0]

        with open(filepath, 'r') as f:
            lines = [line.strip() for line in f if line.strip()]

        try:
            num_types = int(lines[0])
            capacity = float(lines[1])

            widths: List[float] = []
            demands: List[float] = []
            for line in lines[2:2 + num_types]:
                parts = line.split()
                widths.append(float(parts[0]))
                demands.append(float(parts[1]))
        except (IndexError, ValueError) as e:
            raise ConfigurationError(f"Malformed BPPLIB file {filepath}: {e}") from e

        if len(widths) != num_types:
            raise ConfigurationError(
                f"Malformed BPPLIB file {filepath}: expected {num_types} item lines, "
                f"found {len(widths)}"
            )

        return cls(
            roll_width=_as_int_if_whole(capacity),
            demands=[_as_int_if_whole(b) for b in demands],
            widths=[_as_int_if_whole(w) for w in widths],
            name=name,
        )

    def __repr__(self) -> str:
        name = f"{self.name!r}, " if self.name else ""
        return (
            f"CuttingStockInstance({name}W={self.roll_width}, "
            f"items={self.num_items}, demand={self.total_demand})"
        )


def _is_finite_number(value) -> bool:
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def _as_int_if_whole(value: float):
    return int(value) if float(value).is_integer() else value
