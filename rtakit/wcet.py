"""Job cost models: worst-case execution demand of consecutive jobs."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence, Tuple

from rtakit.time import InvalidInputError, check_ticks


class JobCostModel(ABC):
    """Maximum execution cost of any sequence of consecutive jobs."""

    @abstractmethod
    def cost_of_jobs(self, n: int) -> int:
        """Maximum cumulative cost of any ``n`` consecutive jobs."""


@dataclass(frozen=True)
class Scalar(JobCostModel):
    """A single WCET bound that applies to every job."""

    wcet: int

    def __post_init__(self) -> None:
        check_ticks(self.wcet, "wcet")

    def cost_of_jobs(self, n: int) -> int:
        return self.wcet * n


@dataclass(frozen=True)
class Multiframe(JobCostModel):
    """The multi-frame model: consecutive jobs cycle through a list of WCETs.

    ``cost_of_jobs(n)`` takes the worst window of ``n`` consecutive frames
    over every starting frame, so the bound holds regardless of which frame
    the first job in the interval belongs to.
    """

    costs: Tuple[int, ...]

    def __init__(self, costs: Sequence[int]):
        if not costs:
            raise InvalidInputError("multiframe model needs at least one frame")
        for c in costs:
            check_ticks(c, "frame cost")
        object.__setattr__(self, "costs", tuple(costs))

    def cost_of_jobs(self, n: int) -> int:
        frames = len(self.costs)
        full, rest = divmod(n, frames)
        doubled = self.costs * 2
        tail = max(sum(doubled[start:start + rest]) for start in range(frames)) if rest else 0
        return full * sum(self.costs) + tail
