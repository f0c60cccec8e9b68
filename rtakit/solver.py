"""Fixed-point and busy-window solvers.

Two iterative searches underlie every response-time analysis:

Response time (fixed-point) search:
    R^(0)   = C
    R^(k+1) = C + I(R^(k))

where C is the cost of the job under analysis and I a non-decreasing
interference function. The iteration stops when
    1. R^(k+1) = R^(k)       -> Bounded(R^(k))
    2. R^(k+1) > D           -> Unbounded (deadline provably missed)
    3. R^(k+1) > K           -> Inconclusive (safety ceiling hit, no deadline)

Busy-window search:
    least L >= L^(0) with supply(L) >= demand(L)

solved by L^(k+1) = service_time(demand(L^(k))) from L^(0), one tick unless
the caller starts lower. If the iterate
exceeds the ceiling, long-run demand exceeds long-run supply and the result
is Unbounded.

Because I, demand and supply are non-decreasing, both sequences are
non-decreasing and reach the least fixed point if one exists below the
ceiling. A caller-supplied function that violates monotonicity is caught by
the ceiling, the iteration cap, or a decreasing iterate; it never produces a
silently wrong finite answer.
"""

import logging
from dataclasses import dataclass
from itertools import takewhile
from typing import Callable, Iterable, Iterator, Optional

from rtakit.bound import Bound, Bounded, Inconclusive, InconclusiveReason, Unbounded, max_bound
from rtakit.config import DEFAULT_CEILING, DEFAULT_MAX_ITERATIONS, AnalysisConfig
from rtakit.demand import WorkloadDemand, as_demand, step_offsets
from rtakit.supply import Dedicated, SupplyBound, as_supply
from rtakit.time import EPSILON, InvalidInputError, Time, check_time

logger = logging.getLogger(__name__)


def _check_iterations(max_iterations: int) -> int:
    if isinstance(max_iterations, bool) or not isinstance(max_iterations, int) or max_iterations <= 0:
        raise InvalidInputError(f"max_iterations must be a positive integer, got {max_iterations!r}")
    return max_iterations


def solve_response_time(
    cost: Time,
    interference: Callable[[Time], Time],
    deadline: Optional[Time] = None,
    ceiling: Time = DEFAULT_CEILING,
    initial: Optional[Time] = None,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> Bound:
    """Find the least R with R = cost + interference(R).

    Args:
        cost: Execution cost of the job under analysis.
        interference: Non-decreasing function of the candidate response time.
                      It may return ``Unbounded`` or ``Inconclusive`` to
                      report that no finite interference bound exists; that
                      result is passed through unchanged.
        deadline: If given, stop with ``Unbounded`` as soon as a candidate
                  exceeds it.
        ceiling: Safety ceiling used when no deadline is given; a candidate
                 above it yields ``Inconclusive(CEILING_EXCEEDED)``.
        initial: Optional lower bound on the response time to start from.
                 Values below ``cost`` are raised to ``cost``.
        max_iterations: Circuit breaker on the number of iterations.

    Returns:
        ``Bounded(R)``, ``Unbounded()`` or ``Inconclusive(reason)``.

    Raises:
        InvalidInputError: If a time argument is negative or not exact, or if
                           ``interference`` returns such a value.
    """
    check_time(cost, "cost")
    if deadline is not None:
        check_time(deadline, "deadline")
    check_time(ceiling, "ceiling")
    _check_iterations(max_iterations)
    if not callable(interference):
        raise InvalidInputError(f"interference must be callable, got {interference!r}")

    r = cost if initial is None else max(cost, check_time(initial, "initial"))
    if deadline is not None and r > deadline:
        logger.debug("cost %s already exceeds deadline %s", r, deadline)
        return Unbounded()

    for iteration in range(max_iterations):
        delay = interference(r)
        if isinstance(delay, (Unbounded, Inconclusive)):
            logger.debug("interference model reported %s at candidate %s", delay, r)
            return delay
        r_next = cost + check_time(delay, "interference")
        if deadline is not None and r_next > deadline:
            logger.debug("candidate %s exceeds deadline %s after %d iterations", r_next, deadline, iteration + 1)
            return Unbounded()
        if r_next == r:
            logger.debug("converged to %s after %d iterations", r, iteration + 1)
            return Bounded(r)
        if deadline is None and r_next > ceiling:
            logger.debug("candidate %s exceeds ceiling %s", r_next, ceiling)
            return Inconclusive(
                InconclusiveReason.CEILING_EXCEEDED,
                f"candidate {r_next} exceeds ceiling {ceiling}",
            )
        if r_next < r:
            return Inconclusive(
                InconclusiveReason.NON_MONOTONIC,
                f"iterate decreased from {r} to {r_next}",
            )
        r = r_next

    return Inconclusive(
        InconclusiveReason.ITERATION_LIMIT,
        f"no fixed point after {max_iterations} iterations (last candidate {r})",
    )


def solve_busy_window(
    demand,
    supply=None,
    ceiling: Time = DEFAULT_CEILING,
    initial: Optional[Time] = None,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> Bound:
    """Find the least interval length L >= initial with supply(L) >= demand(L).

    The search starts at ``initial``, one tick by default, so with integer
    demand the result is the least such L. A demand curve that closes at a
    sub-tick Fraction is reported at the first candidate reached from
    ``initial``, which is still a valid busy window; pass a smaller
    ``initial`` to search below one tick.

    Args:
        demand: A ``WorkloadDemand`` or a non-decreasing callable.
        supply: A ``SupplyBound`` or callable; defaults to a dedicated processor.
        ceiling: Divergence limit. If no solution exists up to it, the
                 result is ``Unbounded``.
        initial: Positive lower bound to start from; defaults to one tick.
        max_iterations: Circuit breaker on the number of iterations.

    Returns:
        ``Bounded(L)``, ``Unbounded()`` or ``Inconclusive(reason)``.

    Raises:
        InvalidInputError: If ``initial`` is not positive, or if ``demand``
                           or ``supply`` returns a value that is not an exact
                           non-negative time.
    """
    demand = as_demand(demand)
    supply = Dedicated() if supply is None else as_supply(supply)
    check_time(ceiling, "ceiling")
    _check_iterations(max_iterations)
    window = EPSILON if initial is None else check_time(initial, "initial")
    if window <= 0:
        raise InvalidInputError(f"initial must be positive, got {initial!r}")

    for iteration in range(max_iterations):
        needed = check_time(demand(window), "demand")
        window_next = supply.service_time(needed, ceiling)
        if window_next is None:
            logger.debug("demand %s cannot be served within ceiling %s", needed, ceiling)
            return Unbounded()
        check_time(window_next, "service time")
        if window_next <= window:
            if window_next < window and supply(window_next) < demand(window_next):
                return Inconclusive(
                    InconclusiveReason.NON_MONOTONIC,
                    f"demand at {window_next} exceeds supply after shrinking from {window}",
                )
            logger.debug("busy window of length %s after %d iterations", window_next, iteration + 1)
            return Bounded(window_next)
        window = window_next

    return Inconclusive(
        InconclusiveReason.ITERATION_LIMIT,
        f"busy window not closed after {max_iterations} iterations (last candidate {window})",
    )


def offsets_below(demand: WorkloadDemand, limit: Time) -> Iterator[int]:
    """Yield the step offsets of ``demand`` strictly below ``limit``."""
    return takewhile(lambda offset: offset < limit, step_offsets(demand, until=limit))


def bound_response_time(
    supply,
    demand: WorkloadDemand,
    busy_window_demand,
    offset_demand: Callable[[int, Time], Time],
    ceiling: Time = DEFAULT_CEILING,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    remaining_cost: Time = 0,
    search_space: Optional[Callable[[Time], Iterable[int]]] = None,
) -> Bound:
    """Offset-based response-time analysis over a busy window.

    First bound the busy window L with ``busy_window_demand``. Then, for
    each offset A in the search space, find the least ``AF`` with
    ``supply(AF) >= offset_demand(A, AF)``; the response time for that offset
    is ``AF - A + remaining_cost``. The result is the maximum over all
    offsets, or the first non-finite result.

    Args:
        supply: Resource supply; None means a dedicated processor.
        demand: Demand of the task under analysis; its step offsets below L
                form the default search space.
        busy_window_demand: Demand of all work that keeps the resource busy.
        offset_demand: ``(A, AF) -> demand`` for a job arriving at offset A.
        ceiling: Divergence limit for every search.
        max_iterations: Iteration cap for every search.
        remaining_cost: Cost executed after the job can no longer be preempted.
        search_space: Maps L to the offsets to check, overriding the default.
    """
    supply = Dedicated() if supply is None else as_supply(supply)
    demand = as_demand(demand)
    busy_window = solve_busy_window(busy_window_demand, supply, ceiling, max_iterations=max_iterations)
    if not isinstance(busy_window, Bounded):
        return busy_window

    def rta(offset: int) -> Bound:
        result = solve_busy_window(
            lambda af: offset_demand(offset, af), supply, ceiling, max_iterations=max_iterations
        )
        if not isinstance(result, Bounded):
            return result
        return Bounded(max(result.value - offset, 0) + remaining_cost)

    if search_space is None:
        offsets = offsets_below(demand, busy_window.value)
    else:
        offsets = search_space(busy_window.value)
    return max_bound(rta(offset) for offset in offsets)


@dataclass(frozen=True)
class FixedPointSolver:
    """Response-time solver with explicitly configured limits."""

    ceiling: Time = DEFAULT_CEILING
    max_iterations: int = DEFAULT_MAX_ITERATIONS

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> "FixedPointSolver":
        return cls(ceiling=config.ceiling, max_iterations=config.max_iterations)

    def solve(
        self,
        cost: Time,
        interference: Callable[[Time], Time],
        deadline: Optional[Time] = None,
        initial: Optional[Time] = None,
    ) -> Bound:
        return solve_response_time(cost, interference, deadline, self.ceiling, initial, self.max_iterations)


@dataclass(frozen=True)
class BusyWindowSolver:
    """Busy-window solver with explicitly configured limits."""

    ceiling: Time = DEFAULT_CEILING
    max_iterations: int = DEFAULT_MAX_ITERATIONS

    @classmethod
    def from_config(cls, config: AnalysisConfig) -> "BusyWindowSolver":
        return cls(ceiling=config.horizon, max_iterations=config.max_iterations)

    def solve(self, demand, supply: Optional[SupplyBound] = None, initial: Optional[Time] = None) -> Bound:
        return solve_busy_window(demand, supply, self.ceiling, initial, self.max_iterations)
