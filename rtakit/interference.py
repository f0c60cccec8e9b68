"""Interference models: competing work that delays a job of interest.

An ``InterferenceModel`` is a non-decreasing function of the candidate
response time R, to be passed to ``solve_response_time``. The variants
here are reference bindings of common policies; callers may pass any
callable instead.
"""

from abc import ABC, abstractmethod
from typing import Optional

from rtakit.bound import Bound, Bounded, Inconclusive, InconclusiveReason
from rtakit.config import DEFAULT_CEILING, DEFAULT_MAX_ITERATIONS
from rtakit.demand import WorkloadDemand, total_demand
from rtakit.fifo import max_backlog_delay
from rtakit.supply import SupplyBound, as_supply
from rtakit.time import Time, check_time


class InterferenceModel(ABC):
    """Interface of all interference models."""

    blocking: Time = 0

    @abstractmethod
    def interference(self, response_time: Time):
        """Bound the competing work within a window of length ``response_time``."""

    def __call__(self, response_time: Time):
        return self.interference(response_time)


class FixedPriorityPreemptive(InterferenceModel):
    """Sum of the demand of all higher- or equal-priority contenders."""

    def __init__(self, contenders):
        self.contenders: WorkloadDemand = total_demand(contenders)

    def interference(self, response_time: Time) -> Time:
        return self.contenders(response_time)

    def __repr__(self) -> str:
        return f"FixedPriorityPreemptive({self.contenders!r})"


class FixedPriorityNonPreemptive(FixedPriorityPreemptive):
    """As the preemptive case, plus blocking by one lower-priority job.

    The blocking term is added once and does not grow with R.
    """

    def __init__(self, contenders, blocking: Time):
        super().__init__(contenders)
        self.blocking = check_time(blocking, "blocking")

    def interference(self, response_time: Time) -> Time:
        return self.blocking + self.contenders(response_time)

    def __repr__(self) -> str:
        return f"FixedPriorityNonPreemptive({self.contenders!r}, blocking={self.blocking})"


class FifoBacklog(InterferenceModel):
    """Work queued ahead of a job under FIFO scheduling.

    The delay is the maximum backlog over the busy window of the whole
    workload, which does not depend on R. ``cost`` is the execution cost of
    the job of interest and is excluded from the result, so that the
    fixed point ``cost + interference`` equals the FIFO response-time bound.
    If the busy window does not close within ``ceiling`` the model returns
    ``Unbounded``, which the solver passes on to the caller.
    """

    def __init__(
        self,
        workload,
        ceiling: Time = DEFAULT_CEILING,
        cost: Time = 0,
        supply: Optional[SupplyBound] = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ):
        self.workload: WorkloadDemand = total_demand(workload)
        self.ceiling = check_time(ceiling, "ceiling")
        self.cost = check_time(cost, "cost")
        self.supply = supply
        self.max_iterations = max_iterations
        self.backlog: Bound = max_backlog_delay(self.workload, self.supply, self.ceiling, max_iterations)

    def interference(self, response_time: Time):
        backlog = self.backlog
        if not isinstance(backlog, Bounded):
            return backlog
        return max(backlog.value - self.cost, 0)

    def __repr__(self) -> str:
        return f"FifoBacklog({self.workload!r}, ceiling={self.ceiling}, cost={self.cost})"


class ReservationBased(InterferenceModel):
    """Contender demand filtered through the supply of a shared reservation.

    To finish ``cost + contenders(R)`` units of work the job needs an
    interval of length ``supply.service_time(cost + contenders(R))``; the
    interference is that length minus the job's own cost, i.e. the
    contenders' demand plus the replenishment gaps of the reservation.
    """

    def __init__(self, contenders, supply, cost: Time, ceiling: Time = DEFAULT_CEILING):
        self.contenders: WorkloadDemand = total_demand(contenders)
        self.supply: SupplyBound = as_supply(supply)
        self.cost = check_time(cost, "cost")
        self.ceiling = check_time(ceiling, "ceiling")

    def interference(self, response_time: Time):
        needed = self.cost + self.contenders(response_time)
        window = self.supply.service_time(needed, self.ceiling)
        if window is None:
            return Inconclusive(
                InconclusiveReason.CEILING_EXCEEDED,
                f"supply cannot deliver {needed} within {self.ceiling}",
            )
        return max(window - self.cost, 0)

    def __repr__(self) -> str:
        return f"ReservationBased({self.contenders!r}, {self.supply!r}, cost={self.cost})"
