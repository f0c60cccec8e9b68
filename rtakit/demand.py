"""Workload demand: worst-case cumulative processing demand over an interval.

A ``WorkloadDemand`` maps an interval length ``delta`` to the maximum amount
of processor service that a workload may request in any interval of that
length. Implementations must return 0 for ``delta == 0`` and be
non-decreasing in ``delta``; the solvers rely on both properties.

The canonical instance is the request-bound function (RBF) of a task, which
multiplies the number of arrivals by the per-job cost.
"""

import heapq
from abc import ABC, abstractmethod
from itertools import count, groupby
from typing import Callable, Iterable, Iterator, Optional, Tuple, Union

from rtakit.arrival import ArrivalBound
from rtakit.time import EPSILON, InvalidInputError, Time
from rtakit.wcet import JobCostModel, Scalar


class WorkloadDemand(ABC):
    """Interface of all demand models."""

    @abstractmethod
    def demand(self, delta: Time) -> Time:
        """Bound the total service needed in any interval of length ``delta``."""

    def steps(self, until: Optional[int] = None) -> Iterator[int]:
        """Yield, in increasing order, every ``delta`` at which demand increases.

        That is, every ``delta`` with ``demand(delta - EPSILON) < demand(delta)``.
        The default probes every tick and stops after ``until``, if given;
        models that know their steps may ignore ``until``.
        """
        previous = self.demand(0)
        for delta in count(EPSILON):
            if until is not None and delta > until:
                return
            current = self.demand(delta)
            if current > previous:
                yield delta
            previous = current

    def __call__(self, delta: Time) -> Time:
        return self.demand(delta)


class RequestBoundFunction(WorkloadDemand):
    """Demand of a task: cost of the maximum number of jobs arriving in ``delta``.

    Args:
        arrivals: The task's arrival model.
        wcet: Per-job cost model, or a plain integer WCET.
    """

    def __init__(self, arrivals: ArrivalBound, wcet: Union[JobCostModel, int]):
        if not isinstance(arrivals, ArrivalBound):
            raise InvalidInputError(f"expected an ArrivalBound, got {arrivals!r}")
        self.arrivals = arrivals
        self.wcet = wcet if isinstance(wcet, JobCostModel) else Scalar(wcet)

    def demand(self, delta: Time) -> Time:
        return self.wcet.cost_of_jobs(self.arrivals.number_arrivals(delta))

    def steps(self, until: Optional[int] = None) -> Iterator[int]:
        return self.arrivals.steps()

    def __repr__(self) -> str:
        return f"RequestBoundFunction({self.arrivals!r}, {self.wcet!r})"


class Aggregate(WorkloadDemand):
    """Total demand of several independent sources (e.g. all higher-priority tasks)."""

    def __init__(self, components: Iterable[WorkloadDemand]):
        self.components: Tuple[WorkloadDemand, ...] = tuple(as_demand(c) for c in components)

    def demand(self, delta: Time) -> Time:
        return sum((c.demand(delta) for c in self.components), 0)

    def steps(self, until: Optional[int] = None) -> Iterator[int]:
        merged = heapq.merge(*(c.steps(until) for c in self.components))
        return (step for step, _ in groupby(merged))

    def __len__(self) -> int:
        return len(self.components)

    def __repr__(self) -> str:
        return f"Aggregate({list(self.components)!r})"


class FunctionDemand(WorkloadDemand):
    """Adapter turning a plain callable into a ``WorkloadDemand``."""

    def __init__(self, fn: Callable[[Time], Time]):
        self.fn = fn

    def demand(self, delta: Time) -> Time:
        return self.fn(delta)


def as_demand(obj) -> WorkloadDemand:
    """Accept a ``WorkloadDemand`` or any callable of one time argument."""
    if isinstance(obj, WorkloadDemand):
        return obj
    if callable(obj):
        return FunctionDemand(obj)
    raise InvalidInputError(f"expected a WorkloadDemand or callable, got {obj!r}")


def step_offsets(demand: WorkloadDemand, until: Optional[int] = None) -> Iterator[int]:
    """Yield the offsets ``A`` at which the demand curve steps.

    ``A`` is an arrival time relative to the start of a busy window, so the
    closed interval ``[0, A]`` has length ``A + EPSILON``. The first offset
    yielded is always 0 for a workload that releases any job at all.
    """
    return (step - EPSILON for step in demand.steps(until))


def total_demand(workload) -> WorkloadDemand:
    """Accept a single demand (or callable) or an iterable of them."""
    if isinstance(workload, WorkloadDemand) or callable(workload):
        return as_demand(workload)
    return Aggregate(workload)
