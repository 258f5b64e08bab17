"""
Exception hierarchy for colgen.

Every failure raised by the column generation engine derives from
ColumnGenerationError, so callers can catch the whole family at the
single entry point. Non-convergence is not an exception: it is reported
as CGStatus.NOT_CONVERGED on the returned solution.
"""

from typing import Optional


class ColumnGenerationError(Exception):
    """Base class for all colgen errors."""


class ConfigurationError(ColumnGenerationError, ValueError):
    """Malformed instance data or configuration, detected before any solve."""


class InfeasibleError(ColumnGenerationError):
    """The restricted master problem has no feasible solution."""


class SolverError(ColumnGenerationError):
    """
    The external solver failed.

    Attributes:
        detail: Solver status text as reported by HiGHS
    """

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.detail = detail


class SolverTimeout(SolverError):
    """A single solver call exceeded its time limit."""


class StaleDualsError(ColumnGenerationError):
    """Dual values were requested after the master model changed."""
