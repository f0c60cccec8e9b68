"""Result values produced by the solvers.

A solver call yields exactly one of:

- ``Bounded(value)``: a proven finite response-time or busy-window bound.
- ``Unbounded()``: proven divergence, i.e. the workload is unschedulable
  against the given deadline or resource.
- ``Inconclusive(reason)``: the analysis hit a safety ceiling or detected a
  misbehaving caller-supplied function. This is *not* a proof of either
  schedulability or unschedulability.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Union

from rtakit.time import Time


class InconclusiveReason(Enum):
    """Why an analysis could not reach a verdict."""

    CEILING_EXCEEDED = "ceiling exceeded"
    ITERATION_LIMIT = "iteration limit reached"
    NON_MONOTONIC = "non-monotonic iterate"


@dataclass(frozen=True)
class Bounded:
    """A proven finite bound."""

    value: Time

    @property
    def is_bounded(self) -> bool:
        return True

    def value_or(self, default):
        return self.value

    def __str__(self) -> str:
        return f"Bounded({self.value})"


@dataclass(frozen=True)
class Unbounded:
    """Proof that no finite bound exists below the analysed limit."""

    @property
    def is_bounded(self) -> bool:
        return False

    def value_or(self, default):
        return default

    def __str__(self) -> str:
        return "Unbounded"


@dataclass(frozen=True)
class Inconclusive:
    """The analysis stopped without a verdict."""

    reason: InconclusiveReason
    detail: str = ""

    @property
    def is_bounded(self) -> bool:
        return False

    def value_or(self, default):
        return default

    def __str__(self) -> str:
        if self.detail:
            return f"Inconclusive({self.reason.value}: {self.detail})"
        return f"Inconclusive({self.reason.value})"


Bound = Union[Bounded, Unbounded, Inconclusive]


def max_bound(bounds: Iterable[Bound], empty: Optional[Bound] = None) -> Bound:
    """Combine per-offset results into a single bound.

    Returns the maximum finite bound if every element is ``Bounded``, or the
    first non-finite result encountered otherwise. Iteration stops at the
    first non-finite result.

    Args:
        bounds: The results to combine.
        empty: What to return when ``bounds`` is empty. Defaults to
               ``Bounded(0)``: with no demand steps, there is nothing to wait for.
    """
    best = None
    for b in bounds:
        if not isinstance(b, Bounded):
            return b
        if best is None or b.value > best.value:
            best = b
    if best is None:
        return empty if empty is not None else Bounded(0)
    return best
