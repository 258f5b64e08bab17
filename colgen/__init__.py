"""
colgen: column generation for the cutting stock problem.

Solves the LP relaxation of the cutting stock problem by alternating a
restricted master LP over known patterns with an integer knapsack that
prices new patterns, both solved with HiGHS.
"""

__version__ = "0.1.0"

# Configuration
from colgen.config import ColgenConfig, config, setup_logging

# Errors
from colgen.exceptions import (
    ColumnGenerationError,
    ConfigurationError,
    InfeasibleError,
    SolverError,
    SolverTimeout,
    StaleDualsError,
)

# Core classes
from colgen.core.column import Column, ColumnPool
from colgen.core.instance import CuttingStockInstance

# Master problem
from colgen.master import (
    HIGHS_AVAILABLE,
    HiGHSMasterProblem,
    MasterProblem,
    MasterSolution,
    SolutionStatus,
)

# Pricing problem
from colgen.pricing import (
    DPKnapsackPricing,
    HiGHSKnapsackPricing,
    PricingConfig,
    PricingProblem,
    PricingSolution,
    PricingStatus,
)

# Column generation solver
from colgen.solver import (
    CGConfig,
    CGIteration,
    CGSolution,
    CGStatus,
    ColumnGeneration,
    LoopState,
)

from colgen.applications import solve_cutting_stock

__all__ = [
    # Version
    '__version__',

    # Configuration
    'ColgenConfig',
    'config',
    'setup_logging',

    # Errors
    'ColumnGenerationError',
    'ConfigurationError',
    'InfeasibleError',
    'SolverError',
    'SolverTimeout',
    'StaleDualsError',

    # Core
    'Column',
    'ColumnPool',
    'CuttingStockInstance',

    # Master
    'MasterProblem',
    'MasterSolution',
    'SolutionStatus',
    'HiGHSMasterProblem',
    'HIGHS_AVAILABLE',

    # Pricing
    'PricingProblem',
    'PricingConfig',
    'PricingSolution',
    'PricingStatus',
    'HiGHSKnapsackPricing',
    'DPKnapsackPricing',

    # Solver
    'ColumnGeneration',
    'CGConfig',
    'CGSolution',
    'CGStatus',
    'CGIteration',
    'LoopState',

    # Applications
    'solve_cutting_stock',
]
