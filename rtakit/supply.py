"""Supply bounds: guaranteed processing capacity over an interval.

A ``SupplyBound`` maps an interval length ``delta`` to the minimum amount of
service a resource is guaranteed to provide in any interval of that length.
``supply(0)`` must be 0 and the function must be non-decreasing.

``service_time`` is the inverse: the length of the shortest interval that is
guaranteed to deliver a given amount of service.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from rtakit.config import DEFAULT_CEILING
from rtakit.time import EPSILON, InvalidInputError, Time, check_positive_ticks, check_ticks, check_time


class SupplyBound(ABC):
    """Interface of all supply models."""

    @abstractmethod
    def supply(self, delta: Time) -> Time:
        """Bound the minimum service provided in any interval of length ``delta``."""

    def service_time(self, demand: Time, limit: Optional[Time] = None) -> Optional[Time]:
        """Bound the interval length needed to receive ``demand`` units of service.

        The default implementation starts at ``demand`` and repeatedly jumps
        ahead by the service still missing (at least one tick). With integer
        ticks the result is the least such interval length; otherwise it is a
        sound upper bound on it. A supply that levels off below ``demand``
        never delivers it, so the search always stops at a finite limit.

        Args:
            demand: Amount of service required.
            limit: Give up once the candidate interval exceeds this length;
                   defaults to ``DEFAULT_CEILING``.

        Returns:
            The interval length, or None if it would exceed ``limit``.

        Raises:
            InvalidInputError: If ``supply`` returns something other than a
                               time quantity.
        """
        if limit is None:
            limit = DEFAULT_CEILING
        t = demand
        while t <= limit:
            provided = check_time(self.supply(t), "supply")
            if provided >= demand:
                return t
            t += max(demand - provided, EPSILON)
        return None

    def __call__(self, delta: Time) -> Time:
        return self.supply(delta)


def _within(t: Time, limit: Optional[Time]) -> Optional[Time]:
    if limit is not None and t > limit:
        return None
    return t


class Dedicated(SupplyBound):
    """A processor that is available 100% of the time."""

    def supply(self, delta: Time) -> Time:
        return delta

    def service_time(self, demand: Time, limit: Optional[Time] = None) -> Optional[Time]:
        return _within(demand, limit)

    def __repr__(self) -> str:
        return "Dedicated()"


class Periodic(SupplyBound):
    """The periodic resource model of Shin & Lee (RTSS 2003).

    The client is guaranteed ``budget`` ticks of service every ``period``
    ticks, placed anywhere within each period.
    """

    def __init__(self, budget: int, period: int):
        check_positive_ticks(budget, "budget")
        check_positive_ticks(period, "period")
        if budget > period:
            raise InvalidInputError(f"budget ({budget}) cannot exceed period ({period})")
        self.budget = budget
        self.period = period

    def supply(self, delta: Time) -> Time:
        slack = self.period - self.budget
        if slack > delta:
            return 0
        # worst case: budget at the start of the first period, at the end of the next
        full_periods = (delta - slack) // self.period
        x = slack + slack + self.period * full_periods
        fractional = delta - x if x < delta else 0
        return self.budget * full_periods + fractional

    def service_time(self, demand: Time, limit: Optional[Time] = None) -> Optional[Time]:
        if demand == 0:
            return 0
        slack = self.period - self.budget
        full_periods = demand // self.budget
        full_budget = self.budget * full_periods
        fractional = slack + demand - full_budget if full_budget < demand else 0
        return _within(slack + self.period * full_periods + fractional, limit)

    def __repr__(self) -> str:
        return f"Periodic(budget={self.budget}, period={self.period})"


class Constrained(SupplyBound):
    """A periodic resource whose budget is supplied within a constrained deadline.

    ``budget`` ticks are provided every ``period`` ticks, always within the
    first ``deadline`` ticks of each period (``budget <= deadline <= period``).
    """

    def __init__(self, budget: int, deadline: int, period: int):
        check_positive_ticks(budget, "budget")
        check_ticks(deadline, "deadline")
        check_ticks(period, "period")
        if not budget <= deadline <= period:
            raise InvalidInputError(
                f"need budget <= deadline <= period, got {budget}, {deadline}, {period}"
            )
        self.budget = budget
        self.deadline = deadline
        self.period = period

    def supply(self, delta: Time) -> Time:
        shift = self.period - self.budget
        if shift > delta:
            return 0
        full_periods = (delta - shift) // self.period
        x = shift + full_periods * self.period + self.deadline - self.budget
        fractional = min(self.budget, delta - x) if x < delta else 0
        return full_periods * self.budget + fractional

    def service_time(self, demand: Time, limit: Optional[Time] = None) -> Optional[Time]:
        if demand == 0:
            return 0
        full_periods = demand // self.budget
        full_budget = full_periods * self.budget
        if full_budget < demand:
            fractional = demand - full_budget + self.period - self.budget
        else:
            fractional = 0
        t = self.deadline - self.budget + full_periods * self.period + fractional
        return _within(t, limit)

    def __repr__(self) -> str:
        return f"Constrained(budget={self.budget}, deadline={self.deadline}, period={self.period})"


class BlockingReduced(SupplyBound):
    """A supply from which a fixed blocking term has been removed.

    Models a resource that may be unavailable for up to ``blocking`` ticks
    (e.g. a lower-priority non-preemptive section) before serving the client.
    """

    def __init__(self, base: SupplyBound, blocking: Time):
        self.base = as_supply(base)
        self.blocking = check_time(blocking, "blocking")

    def supply(self, delta: Time) -> Time:
        return max(0, self.base.supply(delta) - self.blocking)

    def service_time(self, demand: Time, limit: Optional[Time] = None) -> Optional[Time]:
        if demand == 0:
            return 0
        return self.base.service_time(demand + self.blocking, limit)

    def __repr__(self) -> str:
        return f"BlockingReduced({self.base!r}, blocking={self.blocking})"


class FunctionSupply(SupplyBound):
    """Adapter turning a plain callable into a ``SupplyBound``."""

    def __init__(self, fn: Callable[[Time], Time]):
        self.fn = fn

    def supply(self, delta: Time) -> Time:
        return check_time(self.fn(delta), "supply")


def as_supply(obj) -> SupplyBound:
    """Accept a ``SupplyBound`` or any callable of one time argument."""
    if isinstance(obj, SupplyBound):
        return obj
    if callable(obj):
        return FunctionSupply(obj)
    raise InvalidInputError(f"expected a SupplyBound or callable, got {obj!r}")
