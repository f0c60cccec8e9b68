"""Arrival models: upper bounds on the number of job releases in an interval.

Every model implements ``ArrivalBound``: ``number_arrivals(delta)`` bounds
the number of jobs released in *any* interval of length ``delta`` ticks, and
``steps()`` yields, in increasing order, the interval lengths at which that
bound increases. All quantities are integer ticks.
"""

import heapq
from abc import ABC, abstractmethod
from bisect import bisect_left
from collections import deque
from dataclasses import dataclass
from itertools import count, groupby, islice
from typing import Iterable, Iterator, List, Sequence, Tuple

from rtakit.time import EPSILON, InvalidInputError, check_positive_ticks, check_ticks, divide_with_ceil


class ArrivalBound(ABC):
    """Interface of all arrival models."""

    @abstractmethod
    def number_arrivals(self, delta: int) -> int:
        """Bound the number of jobs released in any interval of length ``delta``."""

    def steps(self) -> Iterator[int]:
        """Yield every ``delta`` with ``number_arrivals(delta - 1) < number_arrivals(delta)``.

        The default implementation probes every tick, which is slow; models
        should override it.
        """
        return self.brute_force_steps()

    def brute_force_steps(self) -> Iterator[int]:
        previous = self.number_arrivals(0)
        for delta in count(1):
            current = self.number_arrivals(delta)
            if current > previous:
                yield delta
            previous = current

    @abstractmethod
    def with_jitter(self, jitter: int) -> "ArrivalBound":
        """Return a copy of the model that accounts for added release jitter."""


@dataclass(frozen=True)
class Never(ArrivalBound):
    """A source that never releases any job."""

    def number_arrivals(self, delta: int) -> int:
        return 0

    def steps(self) -> Iterator[int]:
        return iter(())

    def with_jitter(self, jitter: int) -> "Never":
        return self


@dataclass(frozen=True)
class Sporadic(ArrivalBound):
    """Sporadic arrivals with a minimum inter-arrival time and release jitter.

    The *arrival* of a job is the instant it is triggered; its *release* is
    when it becomes ready, at most ``jitter`` ticks later.

    Attributes:
        min_inter_arrival: Minimum separation of two arrivals (ticks).
        jitter: Maximum release jitter (ticks).
    """

    min_inter_arrival: int
    jitter: int = 0

    def __post_init__(self) -> None:
        check_positive_ticks(self.min_inter_arrival, "min_inter_arrival")
        check_ticks(self.jitter, "jitter")

    def number_arrivals(self, delta: int) -> int:
        if delta <= 0:
            return 0
        return divide_with_ceil(delta + self.jitter, self.min_inter_arrival)

    def steps(self) -> Iterator[int]:
        yield EPSILON
        for j in count(1):
            if self.min_inter_arrival * j > self.jitter:
                yield self.min_inter_arrival * j + EPSILON - self.jitter

    def with_jitter(self, jitter: int) -> "Sporadic":
        return Sporadic(self.min_inter_arrival, self.jitter + check_ticks(jitter, "jitter"))


@dataclass(frozen=True)
class Periodic(ArrivalBound):
    """Jitter-free periodic arrivals (Liu & Layland)."""

    period: int

    def __post_init__(self) -> None:
        check_positive_ticks(self.period, "period")

    def number_arrivals(self, delta: int) -> int:
        if delta <= 0:
            return 0
        return divide_with_ceil(delta, self.period)

    def steps(self) -> Iterator[int]:
        return (j * self.period + EPSILON for j in count(0))

    def with_jitter(self, jitter: int) -> Sporadic:
        return Sporadic(self.period, jitter)


class Propagated(ArrivalBound):
    """Arrivals induced by a precedence relation.

    If each activation of a producer triggers one activation of a consumer,
    and the producer's response time varies by at most
    ``response_time_jitter``, the consumer's activations are bounded by the
    producer's arrival model shifted by that jitter.
    """

    def __init__(self, input_model: ArrivalBound, response_time_jitter: int):
        self.input_model = input_model
        self.response_time_jitter = check_ticks(response_time_jitter, "response_time_jitter")

    def number_arrivals(self, delta: int) -> int:
        if delta <= 0:
            return 0
        return self.input_model.number_arrivals(delta + self.response_time_jitter)

    def steps(self) -> Iterator[int]:
        yield EPSILON
        for step in self.input_model.steps():
            if step > self.response_time_jitter + EPSILON:
                yield step - self.response_time_jitter

    def with_jitter(self, jitter: int) -> "Propagated":
        return Propagated(self.input_model, self.response_time_jitter + check_ticks(jitter, "jitter"))


class Aggregated(ArrivalBound):
    """The combined arrivals of several independent sources."""

    def __init__(self, components: Iterable[ArrivalBound]):
        self.components: Tuple[ArrivalBound, ...] = tuple(components)

    def number_arrivals(self, delta: int) -> int:
        return sum(c.number_arrivals(delta) for c in self.components)

    def steps(self) -> Iterator[int]:
        merged = heapq.merge(*(c.steps() for c in self.components))
        return (step for step, _ in groupby(merged))

    def with_jitter(self, jitter: int) -> "Aggregated":
        return Aggregated(c.with_jitter(jitter) for c in self.components)


def sum_of(components: Iterable[ArrivalBound]) -> Aggregated:
    return Aggregated(components)


def delta_min_iter(ab: ArrivalBound) -> Iterator[Tuple[int, int]]:
    """Yield ``(n, dmin(n))`` for n = 2, 3, ...

    ``dmin(n)`` is the minimum distance between the first and the last of
    any ``n`` consecutive arrivals implied by ``ab``.
    """
    next_count = 2
    for step in ab.steps():
        n = ab.number_arrivals(step)
        while next_count <= n:
            yield next_count, step - EPSILON
            next_count += 1


class Curve(ArrivalBound):
    """An arbitrary arrival curve given by a delta-min prefix.

    ``delta_min_prefix[i]`` is the minimum distance between the first and the
    last job of any ``i + 2`` consecutive arrivals (the trivial entries for
    zero and one job are not stored). Intervals longer than the prefix are
    bounded by subadditivity.
    """

    def __init__(self, delta_min_prefix: Sequence[int]):
        if not delta_min_prefix:
            raise InvalidInputError("delta-min prefix must not be empty")
        distances: List[int] = []
        for d in delta_min_prefix:
            check_ticks(d, "delta-min distance")
            # the delta-min function must be monotonic
            distances.append(max(d, distances[-1]) if distances else d)
        if distances[-1] == 0:
            raise InvalidInputError("delta-min prefix must contain a positive distance")
        self.min_distances: Tuple[int, ...] = tuple(distances)

    @classmethod
    def from_arrival_bound(cls, ab: ArrivalBound, up_to_njobs: int) -> "Curve":
        """Infer a delta-min prefix covering at least ``up_to_njobs`` arrivals."""
        prefix = [
            dmin for n, dmin in islice(delta_min_iter(ab), max(up_to_njobs - 1, 1))
        ]
        return cls(prefix)

    @classmethod
    def from_arrival_bound_until(cls, ab: ArrivalBound, horizon: int) -> "Curve":
        """Infer a delta-min prefix covering all arrivals up to ``horizon``."""
        prefix = []
        for n, dmin in delta_min_iter(ab):
            if dmin > horizon and len(prefix) >= 2:
                break
            prefix.append(dmin)
        return cls(prefix)

    @classmethod
    def from_trace(cls, arrival_times: Iterable[int], prefix_jobs: int) -> "Curve":
        """Infer a delta-min prefix from observed arrival times.

        Args:
            arrival_times: Non-decreasing arrival instants.
            prefix_jobs: Number of delta-min entries to learn.

        Raises:
            InvalidInputError: If the trace is not sorted or has fewer than two arrivals.
        """
        distances: List[int] = []
        window: deque = deque(maxlen=prefix_jobs)
        for t in arrival_times:
            if window and t < window[-1]:
                raise InvalidInputError("arrival times must be non-decreasing")
            # compare with the (i + 1)-th preceding arrival
            for i, earlier in enumerate(reversed(window)):
                gap = t - earlier
                if len(distances) <= i:
                    distances.append(gap)
                else:
                    distances[i] = min(distances[i], gap)
            window.append(t)
        if not distances:
            raise InvalidInputError("trace must contain at least two arrivals")
        return cls(distances)

    @property
    def largest_known_distance(self) -> int:
        return self.min_distances[-1]

    def min_distance(self, n: int) -> int:
        """Lower-bound the length of an interval in which ``n`` jobs arrive (no extrapolation)."""
        if n <= 1:
            return 0
        return self.min_distances[min(n - 2, len(self.min_distances) - 1)]

    def _lookup(self, delta: int) -> int:
        # number of jobs fitting in an interval no longer than the prefix
        if delta == 0:
            return 0
        return 1 + bisect_left(self.min_distances, delta)

    def number_arrivals(self, delta: int) -> int:
        if delta <= 0:
            return 0
        full, tail = divmod(delta, self.largest_known_distance)
        return full * len(self.min_distances) + self._lookup(tail)

    def steps(self) -> Iterator[int]:
        span = self.largest_known_distance
        offsets = sorted({EPSILON, span} | {d + EPSILON for d in self.min_distances if d + EPSILON < span})
        last = 0
        for block in count(0):
            for offset in offsets:
                delta = block * span + offset
                if delta > last and self.number_arrivals(delta - EPSILON) < self.number_arrivals(delta):
                    last = delta
                    yield delta

    def extrapolate(self, horizon: int) -> "Curve":
        """Return a curve whose prefix covers intervals up to ``horizon``.

        New entries follow from superadditivity of the delta-min function:
        ``dmin(a + b - 1) >= dmin(a) + dmin(b)``. Prefixes with a single entry
        are returned unchanged, since they already describe a periodic process.
        """
        d = list(self.min_distances)
        if len(d) < 2:
            return self
        while d[-1] < horizon:
            n = len(d)
            d.append(max(d[k] + d[n - k - 1] for k in range(n // 2 + 1)))
        return Curve(d)

    def with_jitter(self, jitter: int) -> Propagated:
        return Propagated(self, jitter)

    def __eq__(self, other) -> bool:
        return isinstance(other, Curve) and self.min_distances == other.min_distances

    def __hash__(self) -> int:
        return hash(self.min_distances)

    def __repr__(self) -> str:
        return f"Curve({list(self.min_distances)})"
