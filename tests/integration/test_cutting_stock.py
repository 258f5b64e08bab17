"""
Integration tests for the cutting stock entry point.

These tests run the full column generation pipeline through
solve_cutting_stock() and the command line interface.
"""

import logging

import pytest

from colgen import solve_cutting_stock
from colgen.cli import main
from colgen.config import config as colgen_config
from colgen.core.instance import CuttingStockInstance
from colgen.exceptions import ColumnGenerationError, ConfigurationError
from colgen.master import HIGHS_AVAILABLE
from colgen.report import format_solution, pattern_name
from colgen.solver import CGConfig, CGStatus, ColumnGeneration

pytestmark = pytest.mark.skipif(not HIGHS_AVAILABLE, reason="HiGHS not installed")


class TestSolveCuttingStock:
    """End-to-end tests for solve_cutting_stock()."""

    def test_worked_example_from_raw_data(self):
        solution = solve_cutting_stock(
            100,
            demands=[45, 38, 25, 11, 12],
            widths=[22, 42, 52, 53, 78],
        )

        assert solution.status == CGStatus.OPTIMAL
        assert solution.objective_value == pytest.approx(57.25)
        assert solution.lower_bound == 55

    def test_worked_example_from_instance(self, worked_instance):
        solution = solve_cutting_stock(worked_instance, tolerance=1e-6)
        assert solution.objective_value == pytest.approx(57.25)
        assert solution.final_reduced_cost >= -1e-6

    def test_config_and_overrides(self, worked_instance):
        base = CGConfig(max_iterations=1, pricing='dp')
        solution = solve_cutting_stock(worked_instance, config=base, max_iterations=None)
        assert solution.status == CGStatus.NOT_CONVERGED
        assert solution.metadata['pricing'] == 'DPKnapsackPricing'

        solution = solve_cutting_stock(worked_instance, config=base, max_iterations=0)
        assert solution.is_optimal

    def test_global_tolerance_is_default(self, worked_instance, monkeypatch):
        monkeypatch.setitem(colgen_config.tolerances, 'reduced_cost', 0.5)

        solution = solve_cutting_stock(worked_instance)
        direct = ColumnGeneration(worked_instance).solve()

        assert solution.iterations == direct.iterations
        assert solution.objective_value == pytest.approx(direct.objective_value)
        assert solution.objective_value > 57.25 + 1e-6
        assert solution.final_reduced_cost >= -0.5

        exact = solve_cutting_stock(worked_instance, tolerance=1e-6)
        assert exact.objective_value == pytest.approx(57.25)

    def test_small_instance_exact_patterns(self, small_instance):
        solution = solve_cutting_stock(small_instance, solve_ip=True)

        # 10*5 + 10*3 + 10*2 = 100 = 10 full rolls
        assert solution.objective_value == pytest.approx(10.0)
        assert solution.ip_objective >= 10.0 - 1e-6
        for pattern, _ in solution.patterns:
            assert sum(w * a for w, a in zip(small_instance.widths, pattern)) == 10

        produced = [0, 0, 0]
        for pattern, count in solution.ip_patterns:
            for i, a in enumerate(pattern):
                produced[i] += a * count
        assert produced == [10, 10, 10]

    def test_single_item_type(self):
        solution = solve_cutting_stock(100, demands=[10], widths=[30])
        assert solution.objective_value == pytest.approx(10 / 3)
        assert solution.patterns[0][0] == (3,)

    def test_fractional_widths(self):
        solution = solve_cutting_stock(10.0, demands=[8, 6], widths=[2.5, 3.3])
        assert solution.is_optimal
        for col in solution.columns:
            assert col.used_width([2.5, 3.3]) <= 10.0 + 1e-9

    @pytest.mark.parametrize("kwargs", [
        dict(demands=[1, 2], widths=[10]),
        dict(demands=[1], widths=[150]),
        dict(demands=[-3], widths=[10]),
        dict(demands=None, widths=[10]),
    ])
    def test_malformed_input(self, kwargs):
        with pytest.raises(ConfigurationError):
            solve_cutting_stock(100, **kwargs)

    def test_instance_with_extra_data(self, worked_instance):
        with pytest.raises(ConfigurationError):
            solve_cutting_stock(worked_instance, demands=[1, 2, 3, 4, 5])

    def test_errors_share_base_class(self):
        with pytest.raises(ColumnGenerationError):
            solve_cutting_stock(100, demands=[1], widths=[1], pricing='nope')

    @pytest.mark.slow
    def test_larger_instance(self):
        instance = CuttingStockInstance(
            roll_width=100,
            demands=[97, 610, 395, 211],
            widths=[45, 36, 31, 14],
        )
        solution = solve_cutting_stock(instance, solve_ip=True)

        assert solution.is_optimal
        assert solution.objective_value >= instance.l2_lower_bound() - 1e-6
        assert solution.ip_objective >= solution.objective_value - 1e-6


class TestReport:
    """Tests for the human-readable report."""

    def test_pattern_name(self):
        assert pattern_name((4, 0, 0, 0, 0)) == "Pattern[4,0,0,0,0]"

    def test_format_solution(self, worked_instance):
        solution = solve_cutting_stock(worked_instance, solve_ip=True)
        text = format_solution(solution, worked_instance, show_all=True, show_iterations=True)

        assert "OPTIMAL" in text
        assert "57.25" in text
        assert "Pattern[4,0,0,0,0]" in text
        assert "item_0 (w=22)" in text
        assert "Integer solution" in text
        assert "Iterations:" in text


class TestCLI:
    """Tests for the colgen command."""

    @pytest.fixture(autouse=True)
    def restore_logging(self):
        logger = logging.getLogger("colgen")
        handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
        yield
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        for handler in handlers:
            logger.addHandler(handler)
        logger.setLevel(level)
        logger.propagate = propagate

    def test_inline_instance(self, capsys):
        code = main([
            '--width', '100',
            '--demands', '45', '38', '25', '11', '12',
            '--widths', '22', '42', '52', '53', '78',
        ])
        out = capsys.readouterr().out

        assert code == 0
        assert "57.25" in out

    def test_bpplib_instance(self, bpplib_file, capsys):
        code = main(['--bpplib', str(bpplib_file), '--pricing', 'dp', '--all-columns'])
        out = capsys.readouterr().out

        assert code == 0
        assert "Pattern[1,0,0,0,0]" in out

    def test_not_converged_exit_code(self, capsys):
        code = main([
            '--width', '100',
            '--demands', '45', '38', '25', '11', '12',
            '--widths', '22', '42', '52', '53', '78',
            '--max-iterations', '1',
        ])
        assert code == 2
        assert "NOT_CONVERGED" in capsys.readouterr().out

    def test_tolerance_defaults_to_global_config(self, capsys, monkeypatch):
        monkeypatch.setitem(colgen_config.tolerances, 'reduced_cost', 0.5)
        args = [
            '--width', '100',
            '--demands', '45', '38', '25', '11', '12',
            '--widths', '22', '42', '52', '53', '78',
        ]

        assert main(args) == 0
        assert "57.25" not in capsys.readouterr().out

        assert main(args + ['--tolerance', '1e-6']) == 0
        assert "57.25" in capsys.readouterr().out

    def test_malformed_instance(self):
        assert main(['--width', '10', '--demands', '1', '--widths', '20']) == 1

    def test_missing_file(self, tmp_path):
        assert main(['--bpplib', str(tmp_path / 'missing.txt')]) == 1

    def test_missing_arguments(self):
        with pytest.raises(SystemExit):
            main(['--width', '100'])
