"""
Tests for the column generation controller.

This module tests:
- CGConfig validation
- CGSolution helpers
- ColumnGeneration state machine, stopping rules and failure propagation
"""

import dataclasses

import pytest

from colgen.config import config as colgen_config
from colgen.core.column import Column
from colgen.exceptions import ConfigurationError, SolverTimeout
from colgen.master import HIGHS_AVAILABLE, HiGHSMasterProblem
from colgen.pricing import DPKnapsackPricing, PricingProblem
from colgen.solver import (
    CGConfig,
    CGIteration,
    CGSolution,
    CGStatus,
    ColumnGeneration,
    LoopState,
)


class RepeatingPricing(PricingProblem):
    """Always returns the same pattern and reports it as improving."""

    def __init__(self, instance, pattern):
        super().__init__(instance)
        self.pattern = pattern

    def _solve_impl(self):
        return self.pattern

    def _after_solve(self, solution):
        return dataclasses.replace(solution, best_reduced_cost=-1.0)


class TimingOutPricing(PricingProblem):
    """Pricing whose solver always hits its time limit."""

    def _solve_impl(self):
        raise SolverTimeout("pricing solve exceeded its time limit", detail="Time limit reached")


# =============================================================================
# Test CGConfig
# =============================================================================

class TestCGConfig:
    """Tests for CGConfig."""

    def test_defaults(self):
        config = CGConfig()
        assert config.max_iterations == 0
        assert config.optimality_tolerance == 1e-6
        assert config.pricing == 'highs'
        assert config.stop_on_stall

    def test_default_tolerance_follows_global_config(self, monkeypatch):
        monkeypatch.setitem(colgen_config.tolerances, 'reduced_cost', 0.5)
        assert CGConfig().optimality_tolerance == 0.5
        assert CGConfig(optimality_tolerance=1e-3).optimality_tolerance == 1e-3

    def test_none_iterations_means_unlimited(self):
        assert CGConfig(max_iterations=None).max_iterations == 0

    @pytest.mark.parametrize("kwargs", [
        dict(max_iterations=-1),
        dict(max_time=-1.0),
        dict(optimality_tolerance=-1e-6),
        dict(time_limit=0.0),
        dict(pricing='simplex'),
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigurationError):
            CGConfig(**kwargs)


# =============================================================================
# Test CGSolution
# =============================================================================

class TestCGSolution:
    """Tests for CGSolution."""

    def test_default(self):
        solution = CGSolution()
        assert solution.status == CGStatus.NOT_SOLVED
        assert not solution.is_optimal
        assert not solution.has_solution

    def test_column_views(self):
        columns = [
            Column(pattern=(1, 0), column_id=0, value=0.0, attributes={'initial': True}),
            Column(pattern=(0, 1), column_id=1, value=3.0, attributes={'initial': True}),
            Column(pattern=(2, 0), column_id=2, value=1.5),
        ]
        solution = CGSolution(
            status=CGStatus.OPTIMAL,
            objective_value=4.5,
            columns=columns,
            ip_column_values={1: 3.0, 2: 2.0},
        )
        assert solution.is_optimal
        assert solution.total_columns == 3
        assert [c.column_id for c in solution.generated_columns] == [2]
        assert [c.column_id for c in solution.active_columns] == [1, 2]
        assert solution.patterns == [((0, 1), 3.0), ((2, 0), 1.5)]
        assert solution.ip_patterns == [((0, 1), 3), ((2, 0), 2)]

    def test_convergence_history(self):
        history = [
            CGIteration(1, 131.0, [1.0], -3.0, (4,), 5, 0.0, 0.0, 6),
            CGIteration(2, 97.25, [0.25], 0.0, (4,), None, 0.0, 0.0, 6),
        ]
        solution = CGSolution(iteration_history=history)
        assert solution.get_convergence_history() == [131.0, 97.25]

    def test_loop_state_terminal(self):
        assert LoopState.CONVERGED.is_terminal
        assert LoopState.FAILED.is_terminal
        assert not LoopState.MASTER_SOLVED.is_terminal
        assert not LoopState.AUGMENTING.is_terminal


# =============================================================================
# Test ColumnGeneration
# =============================================================================

@pytest.mark.skipif(not HIGHS_AVAILABLE, reason="HiGHS not installed")
class TestColumnGeneration:
    """Tests for the ColumnGeneration controller."""

    def test_converges_on_worked_example(self, worked_instance):
        cg = ColumnGeneration(worked_instance)
        solution = cg.solve()

        assert solution.status == CGStatus.OPTIMAL
        assert cg.state == LoopState.CONVERGED
        assert solution.objective_value == pytest.approx(57.25)
        assert solution.final_reduced_cost >= -1e-6

        first = solution.iteration_history[0]
        assert first.master_objective == pytest.approx(131.0)
        assert first.dual_values == pytest.approx([1.0] * 5)
        assert first.best_reduced_cost == pytest.approx(-3.0)
        assert first.pattern == (4, 0, 0, 0, 0)
        assert first.column_added == 5

    def test_state_sequence(self, worked_instance):
        cg = ColumnGeneration(worked_instance)
        cg.solve()
        states = cg.state_history

        assert states[:3] == [LoopState.INIT, LoopState.MASTER_SOLVED, LoopState.PRICED]
        assert states[-2:] == [LoopState.PRICED, LoopState.CONVERGED]
        for prev, curr in zip(states, states[1:]):
            if curr == LoopState.AUGMENTING:
                assert prev == LoopState.PRICED
            if prev == LoopState.AUGMENTING:
                assert curr == LoopState.MASTER_SOLVED

    def test_objective_non_increasing(self, worked_instance):
        solution = ColumnGeneration(worked_instance).solve()
        history = solution.get_convergence_history()

        assert history[1] < history[0]
        for prev, curr in zip(history, history[1:]):
            assert curr <= prev + 1e-7

    def test_columns_are_valid_patterns(self, worked_instance):
        solution = ColumnGeneration(worked_instance).solve()

        assert solution.total_columns == 5 + solution.iterations - 1
        for col in solution.columns:
            assert all(isinstance(a, int) and a >= 0 for a in col.pattern)
            assert col.fits(worked_instance.widths, worked_instance.roll_width)
            assert col.value is not None

        activity = [
            sum(col.pattern[i] * col.value for col in solution.columns)
            for i in range(worked_instance.num_items)
        ]
        assert activity == pytest.approx(list(worked_instance.demands))

    def test_max_iterations_not_converged(self, worked_instance):
        cg = ColumnGeneration(worked_instance, CGConfig(max_iterations=1))
        solution = cg.solve()

        assert solution.status == CGStatus.NOT_CONVERGED
        assert cg.state == LoopState.NOT_CONVERGED
        assert solution.iterations == 1
        assert solution.has_solution
        assert solution.objective_value == pytest.approx(97.25)
        assert solution.final_reduced_cost == pytest.approx(-3.0)

    def test_callback_can_stop(self, worked_instance):
        seen = []

        def stop_after_two(cg, iteration):
            seen.append(iteration.iteration)
            return iteration.iteration < 2

        cg = ColumnGeneration(worked_instance)
        cg.add_callback(stop_after_two)
        solution = cg.solve()

        assert seen == [1, 2]
        assert solution.status == CGStatus.NOT_CONVERGED

    def test_stall_detected(self, worked_instance):
        cg = ColumnGeneration(worked_instance)
        cg.set_pricing(RepeatingPricing(worked_instance, [4, 0, 0, 0, 0]))
        solution = cg.solve()

        assert solution.status == CGStatus.STALLED
        assert cg.state == LoopState.STALLED
        assert solution.iterations == 2
        assert solution.total_columns == 6
        assert solution.iteration_history[-1].column_added is None

    def test_stall_ignored_runs_to_iteration_limit(self, worked_instance):
        config = CGConfig(max_iterations=3, stop_on_stall=False)
        cg = ColumnGeneration(worked_instance, config)
        cg.set_pricing(RepeatingPricing(worked_instance, [4, 0, 0, 0, 0]))
        solution = cg.solve()

        assert solution.status == CGStatus.NOT_CONVERGED
        assert solution.total_columns == 8

    def test_solver_timeout_propagates(self, worked_instance):
        cg = ColumnGeneration(worked_instance)
        cg.set_pricing(TimingOutPricing(worked_instance))

        with pytest.raises(SolverTimeout) as exc_info:
            cg.solve()
        assert exc_info.value.detail == "Time limit reached"
        assert cg.state == LoopState.FAILED
        assert cg.solution is None

    def test_dp_pricing(self, worked_instance):
        solution = ColumnGeneration(worked_instance, CGConfig(pricing='dp')).solve()
        assert solution.is_optimal
        assert solution.objective_value == pytest.approx(57.25)
        assert solution.metadata['pricing'] == 'DPKnapsackPricing'

    def test_custom_master_without_columns(self, worked_instance):
        cg = ColumnGeneration(worked_instance)
        cg.set_master(HiGHSMasterProblem(worked_instance.demands))
        cg.set_pricing(DPKnapsackPricing(worked_instance))
        solution = cg.solve()
        assert solution.objective_value == pytest.approx(57.25)

    def test_custom_master_wrong_size(self, worked_instance):
        cg = ColumnGeneration(worked_instance)
        with pytest.raises(ConfigurationError):
            cg.set_master(HiGHSMasterProblem([1.0, 2.0]))

    def test_solve_ip(self, worked_instance):
        solution = ColumnGeneration(worked_instance, CGConfig(solve_ip=True)).solve()

        assert solution.ip_objective is not None
        assert solution.ip_objective >= 58 - 1e-6
        assert solution.ip_objective >= solution.lower_bound
        produced = [0] * worked_instance.num_items
        for pattern, count in solution.ip_patterns:
            for i, a in enumerate(pattern):
                produced[i] += a * count
        assert produced == list(worked_instance.demands)

    def test_solve_twice_requires_reset(self, worked_instance):
        cg = ColumnGeneration(worked_instance)
        first = cg.solve()
        with pytest.raises(RuntimeError):
            cg.solve()

        cg.reset()
        assert cg.state == LoopState.INIT
        second = cg.solve()
        assert second.objective_value == pytest.approx(first.objective_value)

    def test_summary_and_repr(self, worked_instance):
        cg = ColumnGeneration(worked_instance)
        cg.solve()
        assert "CONVERGED" in cg.summary()
        assert "Objective" in cg.summary()
        assert repr(cg) == "ColumnGeneration(items=5, state=CONVERGED)"

    def test_global_tolerance_stops_early(self, worked_instance, monkeypatch):
        monkeypatch.setitem(colgen_config.tolerances, 'reduced_cost', 0.5)

        cg = ColumnGeneration(worked_instance)
        solution = cg.solve()

        assert cg.config.optimality_tolerance == 0.5
        assert solution.status == CGStatus.OPTIMAL
        assert solution.final_reduced_cost >= -0.5
        assert solution.objective_value > 57.25 + 1e-6

    def test_get_iteration_history(self, worked_instance):
        cg = ColumnGeneration(worked_instance)
        assert cg.get_iteration_history() == []

        solution = cg.solve()
        history = cg.get_iteration_history()

        assert history == solution.iteration_history
        assert [it.iteration for it in history] == list(range(1, len(history) + 1))
        assert history[-1].column_added is None
