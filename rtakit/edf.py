"""Response-time analyses for earliest-deadline-first scheduling.

Based on the abstract RTA of Bozhko & Brandenburg (ECRTS 2020) on a
dedicated uniprocessor. A job of another task can only interfere with the
job under analysis (arriving at offset A) if its absolute deadline is not
later, so other tasks contribute their demand over a window shortened by the
difference of the relative deadlines. The search space contains the steps of
the task under analysis plus the steps of every other task shifted by that
difference.
"""

import heapq
import logging
from dataclasses import dataclass
from itertools import groupby, takewhile
from typing import Iterator, Optional, Sequence

from rtakit.arrival import ArrivalBound
from rtakit.bound import Bound
from rtakit.config import DEFAULT_CEILING, DEFAULT_MAX_ITERATIONS
from rtakit.demand import RequestBoundFunction, step_offsets
from rtakit.solver import bound_response_time, offsets_below
from rtakit.time import EPSILON, InvalidInputError, check_positive_ticks, check_ticks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EdfTask:
    """A sporadic task scheduled by EDF.

    Attributes:
        wcet: Worst-case execution time of each job.
        arrivals: Arrival model.
        deadline: Relative deadline.
        max_np_segment: Longest non-preemptive segment; only used by the
                        limited-preemptive analysis. Defaults to ``wcet``.
        last_np_segment: Length of the final non-preemptive segment; only
                         used by the limited-preemptive analysis. Defaults
                         to ``max_np_segment``.
    """

    wcet: int
    arrivals: ArrivalBound
    deadline: int
    max_np_segment: Optional[int] = None
    last_np_segment: Optional[int] = None

    def __post_init__(self) -> None:
        check_positive_ticks(self.wcet, "wcet")
        check_ticks(self.deadline, "deadline")
        if not isinstance(self.arrivals, ArrivalBound):
            raise InvalidInputError(f"expected an ArrivalBound, got {self.arrivals!r}")
        for name in ("max_np_segment", "last_np_segment"):
            value = getattr(self, name)
            if value is not None and check_positive_ticks(value, name) > self.wcet:
                raise InvalidInputError(f"{name} ({value}) exceeds wcet ({self.wcet})")

    @property
    def rbf(self) -> RequestBoundFunction:
        return RequestBoundFunction(self.arrivals, self.wcet)

    @property
    def np_segment(self) -> int:
        return self.wcet if self.max_np_segment is None else self.max_np_segment

    @property
    def final_np_segment(self) -> int:
        return self.np_segment if self.last_np_segment is None else self.last_np_segment


def _search_space(tua: EdfTask, tua_rbf, others, other_rbfs, limit) -> Iterator[int]:
    def shifted(ot: EdfTask, rbf) -> Iterator[int]:
        offsets = (max(a + ot.deadline - tua.deadline, 0) for a in step_offsets(rbf))
        return takewhile(lambda a: a < limit, offsets)

    merged = heapq.merge(
        offsets_below(tua_rbf, limit),
        *(shifted(ot, rbf) for ot, rbf in zip(others, other_rbfs)),
    )
    return (offset for offset, _ in groupby(merged))


def _rta(tua: EdfTask, others: Sequence[EdfTask], rem_cost: int, blocking, limit, max_iterations) -> Bound:
    others = tuple(others)
    tua_rbf = tua.rbf
    other_rbfs = [ot.rbf for ot in others]

    def busy_window_demand(delta):
        return tua_rbf(delta) + sum(rbf(delta) for rbf in other_rbfs)

    def offset_demand(offset, af):
        tua_demand = tua_rbf(offset + EPSILON) - rem_cost
        hep_workload = sum(
            rbf(min(af, max(offset + EPSILON + tua.deadline - ot.deadline, 0)))
            for ot, rbf in zip(others, other_rbfs)
        )
        return blocking(offset) + tua_demand + hep_workload

    result = bound_response_time(
        None, tua_rbf, busy_window_demand, offset_demand,
        ceiling=limit, max_iterations=max_iterations, remaining_cost=rem_cost,
        search_space=lambda bw: _search_space(tua, tua_rbf, others, other_rbfs, bw),
    )
    logger.debug("EDF RTA (wcet=%s, deadline=%s): %s", tua.wcet, tua.deadline, result)
    return result


def _lower_priority_blocking(tua: EdfTask, others: Sequence[EdfTask], segment):
    """Blocking by jobs whose deadline is later than that of a job arriving at A."""
    def blocking(offset: int) -> int:
        return max(
            (
                max(segment(ot) - EPSILON, 0)
                for ot in others
                if ot.deadline > tua.deadline + offset and ot.rbf(EPSILON) > 0
            ),
            default=0,
        )
    return blocking


def fully_preemptive_rta(
    tua: EdfTask,
    others: Sequence[EdfTask],
    limit: int = DEFAULT_CEILING,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> Bound:
    """Bound the response time of ``tua`` under fully preemptive EDF.

    Args:
        tua: The task under analysis.
        others: Every other task on the processor.
        limit: Divergence limit.
        max_iterations: Iteration cap of each fixed-point search.
    """
    return _rta(tua, others, 0, lambda offset: 0, limit, max_iterations)


def fully_nonpreemptive_rta(
    tua: EdfTask,
    others: Sequence[EdfTask],
    limit: int = DEFAULT_CEILING,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> Bound:
    """Bound the response time of ``tua`` under non-preemptive EDF.

    A job runs to completion once started, so only its first tick is exposed
    to interference, and any job with a later deadline that started just
    before may block it.
    """
    rem_cost = tua.wcet - EPSILON
    blocking = _lower_priority_blocking(tua, tuple(others), lambda ot: ot.wcet)
    return _rta(tua, others, rem_cost, blocking, limit, max_iterations)


def limited_preemptive_rta(
    tua: EdfTask,
    others: Sequence[EdfTask],
    limit: int = DEFAULT_CEILING,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> Bound:
    """Bound the response time of ``tua`` under EDF with fixed preemption points.

    Uses ``tua.final_np_segment`` for the run-to-completion threshold and the
    ``np_segment`` of other tasks for blocking.
    """
    run_to_completion_threshold = tua.wcet - (tua.final_np_segment - EPSILON)
    rem_cost = tua.wcet - run_to_completion_threshold
    blocking = _lower_priority_blocking(tua, tuple(others), lambda ot: ot.np_segment)
    return _rta(tua, others, rem_cost, blocking, limit, max_iterations)
