"""
Command line interface.

    colgen --width 100 --demands 45 38 25 11 12 --widths 22 42 52 53 78
    colgen --bpplib data/N1C1W1_A.txt --pricing dp --solve-ip
"""

import argparse
import logging
import sys
from typing import List, Optional

from colgen.applications.cutting_stock import solve_cutting_stock
from colgen.config import setup_logging
from colgen.core.instance import CuttingStockInstance
from colgen.exceptions import ColumnGenerationError
from colgen.pricing import PRICING_METHODS
from colgen.report import format_solution

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='colgen',
        description='Solve the cutting stock LP relaxation by column generation',
    )

    source = parser.add_argument_group('instance')
    source.add_argument('--width', type=float, help='Roll width W')
    source.add_argument('--demands', type=float, nargs='+', help='Demand of each item type')
    source.add_argument('--widths', type=float, nargs='+', help='Width of each item type')
    source.add_argument('--bpplib', help='Read the instance from a BPPLIB CSP file')

    parser.add_argument('--tolerance', type=float, default=None,
                        help='Stop when the best reduced cost is >= -tolerance '
                             '(default: the configured reduced_cost tolerance)')
    parser.add_argument('--max-iterations', type=int, default=None,
                        help='Iteration cap (default: unlimited)')
    parser.add_argument('--time-limit', type=float, default=None,
                        help='Per-solve time limit in seconds')
    parser.add_argument('--pricing', choices=sorted(PRICING_METHODS), default='highs',
                        help='Pricing method')
    parser.add_argument('--solve-ip', action='store_true',
                        help='Re-solve the final master with integer variables')
    parser.add_argument('--all-columns', action='store_true',
                        help='List every generated column')
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose output')
    parser.add_argument('--log-file', help='Also write the log to this file')
    return parser


def _load_instance(args: argparse.Namespace, parser: argparse.ArgumentParser) -> CuttingStockInstance:
    if args.bpplib:
        if args.width is not None or args.demands or args.widths:
            parser.error('--bpplib cannot be combined with --width/--demands/--widths')
        return CuttingStockInstance.from_bpplib(args.bpplib)

    if args.width is None or not args.demands or not args.widths:
        parser.error('give --width, --demands and --widths, or --bpplib')

    def whole(values):
        return [int(v) if v.is_integer() else v for v in values]

    return CuttingStockInstance(
        roll_width=whole([args.width])[0],
        demands=whole(args.demands),
        widths=whole(args.widths),
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging('INFO' if args.verbose else None, args.log_file)

    try:
        instance = _load_instance(args, parser)
        solution = solve_cutting_stock(
            instance,
            tolerance=args.tolerance,
            max_iterations=args.max_iterations,
            time_limit=args.time_limit,
            pricing=args.pricing,
            solve_ip=args.solve_ip,
            verbose=args.verbose,
        )
    except ColumnGenerationError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 1
    except OSError as e:
        logger.error("Cannot read instance: %s", e)
        return 1

    print(format_solution(
        solution,
        instance,
        show_all=args.all_columns,
        show_iterations=args.verbose,
    ))
    return 0 if solution.is_optimal else 2


if __name__ == '__main__':
    sys.exit(main())
