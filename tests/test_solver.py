"""Tests for the fixed-point and busy-window solvers."""

import unittest
from fractions import Fraction

from rtakit.arrival import Periodic, Sporadic
from rtakit.bound import Bounded, Inconclusive, InconclusiveReason, Unbounded, max_bound
from rtakit.config import AnalysisConfig
from rtakit.demand import Aggregate, RequestBoundFunction
from rtakit.solver import (
    BusyWindowSolver,
    FixedPointSolver,
    bound_response_time,
    offsets_below,
    solve_busy_window,
    solve_response_time,
)
from rtakit.supply import Dedicated, Periodic as PeriodicSupply
from rtakit.time import InvalidInputError, divide_with_ceil


class TestSolveResponseTime(unittest.TestCase):
    """Fixed-point search R = C + I(R)."""

    def test_single_task_dedicated(self):
        self.assertEqual(solve_response_time(3, lambda r: 0), Bounded(3))

    def test_two_fixed_priority_tasks(self):
        # R0=3 -> I(3)=2 -> R1=5 -> I(5)=2 -> R2=5
        seen = []

        def interference(r):
            seen.append(r)
            return divide_with_ceil(r, 5) * 2

        self.assertEqual(solve_response_time(3, interference), Bounded(5))
        self.assertEqual(seen, [3, 5])

    def test_fixed_point_soundness(self):
        interference = lambda r: divide_with_ceil(r, 7) * 2 + divide_with_ceil(r, 11) * 3
        result = solve_response_time(4, interference)
        self.assertIsInstance(result, Bounded)
        self.assertEqual(4 + interference(result.value), result.value)

    def test_divergence_with_deadline(self):
        self.assertEqual(solve_response_time(1, lambda r: r + 1, deadline=50), Unbounded())

    def test_ceiling_without_deadline(self):
        seen = []

        def interference(r):
            seen.append(r)
            return r + 1

        result = solve_response_time(1, interference, ceiling=100)
        self.assertIsInstance(result, Inconclusive)
        self.assertEqual(result.reason, InconclusiveReason.CEILING_EXCEEDED)
        self.assertTrue(all(r <= 100 for r in seen))

    def test_deadline_takes_precedence_over_ceiling(self):
        self.assertEqual(solve_response_time(1, lambda r: r + 1, deadline=1000, ceiling=100), Unbounded())

    def test_cost_exceeding_deadline(self):
        self.assertEqual(solve_response_time(5, lambda r: 0, deadline=4), Unbounded())

    def test_converges_exactly_at_deadline(self):
        self.assertEqual(solve_response_time(3, lambda r: 2, deadline=5), Bounded(5))

    def test_initial_lower_bound(self):
        seen = []

        def interference(r):
            seen.append(r)
            return divide_with_ceil(r, 5) * 2

        self.assertEqual(solve_response_time(3, interference, initial=5), Bounded(5))
        self.assertEqual(seen, [5])

    def test_initial_below_cost_is_raised(self):
        self.assertEqual(solve_response_time(3, lambda r: 0, initial=1), Bounded(3))

    def test_fraction_quantities(self):
        interference = lambda r: divide_with_ceil(r, Fraction(5, 2)) * Fraction(1, 2)
        self.assertEqual(solve_response_time(Fraction(3, 2), interference), Bounded(2))

    def test_decreasing_iterate_detected(self):
        result = solve_response_time(1, lambda r: 5 if r < 3 else 0)
        self.assertIsInstance(result, Inconclusive)
        self.assertEqual(result.reason, InconclusiveReason.NON_MONOTONIC)

    def test_iteration_limit(self):
        result = solve_response_time(1, lambda r: r, ceiling=10**9, max_iterations=10)
        self.assertIsInstance(result, Inconclusive)
        self.assertEqual(result.reason, InconclusiveReason.ITERATION_LIMIT)

    def test_interference_reporting_unbounded(self):
        self.assertEqual(solve_response_time(1, lambda r: Unbounded()), Unbounded())

    def test_deterministic(self):
        interference = lambda r: divide_with_ceil(r, 4) * 3
        self.assertEqual(solve_response_time(2, interference), solve_response_time(2, interference))

    def test_invalid_inputs(self):
        with self.assertRaises(InvalidInputError):
            solve_response_time(-1, lambda r: 0)
        with self.assertRaises(InvalidInputError):
            solve_response_time(1.5, lambda r: 0)
        with self.assertRaises(InvalidInputError):
            solve_response_time(1, lambda r: 0, deadline=-3)
        with self.assertRaises(InvalidInputError):
            solve_response_time(1, "not callable")
        with self.assertRaises(InvalidInputError):
            solve_response_time(1, lambda r: 0, max_iterations=0)

    def test_invalid_interference_value(self):
        with self.assertRaises(InvalidInputError):
            solve_response_time(1, lambda r: 0.5)
        with self.assertRaises(InvalidInputError):
            solve_response_time(1, lambda r: -1)

    def test_solver_object_from_config(self):
        solver = FixedPointSolver.from_config(AnalysisConfig(ceiling=100, max_iterations=500))
        self.assertEqual(solver.ceiling, 100)
        result = solver.solve(1, lambda r: r + 1)
        self.assertEqual(result.reason, InconclusiveReason.CEILING_EXCEEDED)
        self.assertEqual(solver.solve(3, lambda r: divide_with_ceil(r, 5) * 2), Bounded(5))


class TestSolveBusyWindow(unittest.TestCase):
    """Least L with supply(L) >= demand(L)."""

    def test_single_job_covers_window(self):
        self.assertEqual(solve_busy_window(lambda t: divide_with_ceil(t, 10) * 3), Bounded(3))

    def test_rbf_demand(self):
        demand = Aggregate([
            RequestBoundFunction(Periodic(4), 1),
            RequestBoundFunction(Periodic(6), 2),
        ])
        # 3 -> 3
        self.assertEqual(solve_busy_window(demand), Bounded(3))

    def test_overload_is_unbounded(self):
        demand = Aggregate([
            RequestBoundFunction(Sporadic(2), 1),
            RequestBoundFunction(Sporadic(3), 2),
        ])
        self.assertEqual(solve_busy_window(demand, ceiling=1000), Unbounded())

    def test_full_utilization_closes(self):
        demand = RequestBoundFunction(Periodic(5), 5)
        self.assertEqual(solve_busy_window(demand, ceiling=1000), Bounded(5))

    def test_periodic_supply(self):
        # one job of cost 2 on a 3-out-of-5 resource: 2 units need 6 ticks
        demand = RequestBoundFunction(Periodic(100), 2)
        self.assertEqual(solve_busy_window(demand, PeriodicSupply(3, 5)), Bounded(6))

    def test_callable_supply(self):
        half_speed = lambda t: t // 2
        self.assertEqual(solve_busy_window(lambda t: 3 if t > 0 else 0, half_speed), Bounded(6))

    def test_empty_demand(self):
        self.assertEqual(solve_busy_window(lambda t: 0), Bounded(0))

    def test_iteration_limit(self):
        demand = RequestBoundFunction(Periodic(10), 9)
        result = solve_busy_window(demand, ceiling=10**6, max_iterations=1)
        self.assertIsInstance(result, Inconclusive)
        self.assertEqual(result.reason, InconclusiveReason.ITERATION_LIMIT)

    def test_invalid_demand(self):
        with self.assertRaises(InvalidInputError):
            solve_busy_window(42)
        with self.assertRaises(InvalidInputError):
            solve_busy_window(lambda t: -1)

    def test_invalid_supply_value(self):
        with self.assertRaises(InvalidInputError):
            solve_busy_window(lambda t: 10 if t > 0 else 0, lambda t: t * 0.3, ceiling=1000)

    def test_invalid_service_time(self):
        class FloatSupply(Dedicated):
            def service_time(self, demand, limit=None):
                return float(demand)

        with self.assertRaises(InvalidInputError):
            solve_busy_window(lambda t: 3 if t > 0 else 0, FloatSupply(), ceiling=1000)

    def test_initial_must_be_positive(self):
        demand = lambda t: divide_with_ceil(t, 10) * 3
        with self.assertRaises(InvalidInputError):
            solve_busy_window(demand, ceiling=1000, initial=0)
        with self.assertRaises(InvalidInputError):
            solve_busy_window(demand, ceiling=1000, initial=-1)
        self.assertEqual(solve_busy_window(demand, ceiling=1000, initial=2), Bounded(3))

    def test_sub_tick_window_needs_lower_initial(self):
        quarter, half = Fraction(1, 4), Fraction(1, 2)
        demand = lambda t: 0 if t == 0 else (quarter if t <= half else half)
        self.assertEqual(solve_busy_window(demand), Bounded(half))
        self.assertEqual(solve_busy_window(demand, initial=quarter), Bounded(quarter))

    def test_solver_object_uses_horizon(self):
        solver = BusyWindowSolver.from_config(AnalysisConfig(horizon=50))
        self.assertEqual(solver.ceiling, 50)
        demand = Aggregate([
            RequestBoundFunction(Sporadic(2), 1),
            RequestBoundFunction(Sporadic(3), 2),
        ])
        self.assertEqual(solver.solve(demand), Unbounded())


class TestBoundResponseTime(unittest.TestCase):
    """Offset-based analysis over the busy window."""

    def test_offsets_below(self):
        rbf = RequestBoundFunction(Sporadic(10), 3)
        self.assertEqual(list(offsets_below(rbf, 35)), [0, 10, 20, 30])

    def test_matches_classic_rta(self):
        high = RequestBoundFunction(Sporadic(5), 2)
        low = RequestBoundFunction(Sporadic(20), 3)
        result = bound_response_time(
            None, low,
            lambda delta: high(delta) + low(delta),
            lambda offset, af: low(offset + 1) + high(af),
        )
        self.assertEqual(result, Bounded(5))

    def test_busy_window_divergence(self):
        rbf = RequestBoundFunction(Sporadic(2), 3)
        result = bound_response_time(None, rbf, rbf, lambda offset, af: rbf(offset + 1), ceiling=100)
        self.assertEqual(result, Unbounded())

    def test_custom_search_space(self):
        rbf = RequestBoundFunction(Sporadic(10), 3)
        result = bound_response_time(
            None, rbf, rbf, lambda offset, af: rbf(offset + 1),
            search_space=lambda bw: [],
        )
        self.assertEqual(result, Bounded(0))


class TestMaxBound(unittest.TestCase):

    def test_max_of_finite(self):
        self.assertEqual(max_bound([Bounded(3), Bounded(7), Bounded(5)]), Bounded(7))

    def test_first_non_finite_wins(self):
        inconclusive = Inconclusive(InconclusiveReason.ITERATION_LIMIT)
        self.assertEqual(max_bound([Bounded(3), inconclusive, Unbounded()]), inconclusive)

    def test_stops_at_first_non_finite(self):
        def results():
            yield Unbounded()
            raise AssertionError("max_bound kept iterating")

        self.assertEqual(max_bound(results()), Unbounded())

    def test_empty(self):
        self.assertEqual(max_bound([]), Bounded(0))
        self.assertEqual(max_bound([], empty=Unbounded()), Unbounded())

    def test_value_or(self):
        self.assertEqual(Bounded(4).value_or(None), 4)
        self.assertIsNone(Unbounded().value_or(None))
        self.assertTrue(Bounded(4).is_bounded)
        self.assertFalse(Inconclusive(InconclusiveReason.NON_MONOTONIC).is_bounded)


if __name__ == "__main__":
    unittest.main()
