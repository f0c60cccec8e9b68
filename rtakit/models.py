"""Sporadic task model for fixed-priority schedulability checks."""

from dataclasses import dataclass, field
from fractions import Fraction
from typing import List, Optional

from rtakit.arrival import Sporadic
from rtakit.demand import RequestBoundFunction
from rtakit.time import InvalidInputError, Time, check_time, divide_with_ceil


@dataclass(frozen=True)
class Task:
    """A periodic or sporadic task with exact (int or Fraction) parameters.

    Attributes:
        C: Worst-case execution time (WCET).
        T: Period (or minimum inter-arrival time).
        D: Relative deadline (defaults to T if not specified).
        name: Optional task identifier.
        priority: Task priority (lower value = higher priority).
                  If not set, will be assigned by TaskSet based on Rate Monotonic.
        J: Maximum release jitter.
        B: Maximum blocking by lower-priority tasks.
    """
    C: Time
    T: Time
    D: Optional[Time] = None
    name: str = ""
    priority: Optional[int] = None
    J: Time = 0
    B: Time = 0

    def __post_init__(self) -> None:
        for attr in ("C", "T", "J", "B"):
            try:
                check_time(getattr(self, attr), f"{attr}")
            except InvalidInputError as e:
                raise InvalidInputError(f"Task {self.name}: {e}") from e
        if self.C <= 0:
            raise InvalidInputError(f"Task {self.name}: C must be positive, got {self.C}")
        if self.T <= 0:
            raise InvalidInputError(f"Task {self.name}: T must be positive, got {self.T}")
        if self.C > self.T:
            raise InvalidInputError(f"Task {self.name}: C ({self.C}) cannot exceed T ({self.T})")

        if self.D is None:
            object.__setattr__(self, "D", self.T)
        else:
            check_time(self.D, "D")
            if self.D <= 0:
                raise InvalidInputError(f"Task {self.name}: D must be positive, got {self.D}")
            if self.D > self.T:
                raise InvalidInputError(f"Task {self.name}: D ({self.D}) cannot exceed T ({self.T})")

        if self.C > self.D:
            raise InvalidInputError(f"Task {self.name}: C ({self.C}) cannot exceed D ({self.D})")
        if self.J > self.D:
            raise InvalidInputError(f"Task {self.name}: J ({self.J}) cannot exceed D ({self.D})")

    @property
    def utilization(self):
        """Return the utilization of this task (C/T), exact."""
        return Fraction(self.C) / Fraction(self.T)

    def request_bound(self, delta: Time) -> Time:
        """Maximum demand of the task in any window of length ``delta``."""
        if delta <= 0:
            return 0
        return divide_with_ceil(delta + self.J, self.T) * self.C

    def to_rbf(self) -> RequestBoundFunction:
        """The task's demand as a tick-based request-bound function.

        Raises:
            InvalidInputError: If C, T or J is not an integer number of ticks.
        """
        return RequestBoundFunction(Sporadic(self.T, self.J), self.C)

    def __str__(self) -> str:
        name_str = f"{self.name}: " if self.name else ""
        return f"Task({name_str}C={self.C}, T={self.T}, D={self.D}, prio={self.priority})"


@dataclass
class TaskSet:
    """A set of tasks with priority assignment.

    Attributes:
        tasks: List of tasks in the set.
    """
    tasks: List[Task] = field(default_factory=list)
    _sorted: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.tasks:
            return
        if all(t.priority is not None for t in self.tasks):
            return
        if all(t.priority is None for t in self.tasks):
            self._assign_rate_monotonic_priorities()
            return
        raise InvalidInputError("Either all tasks must have priorities set, or none should.")

    def _assign_rate_monotonic_priorities(self) -> None:
        """Shorter period = higher priority; ties keep their input order."""
        sorted_tasks = sorted(self.tasks, key=lambda t: t.T)
        self.tasks = [
            Task(
                C=task.C,
                T=task.T,
                D=task.D,
                name=task.name if task.name else f"τ{i+1}",
                priority=i,
                J=task.J,
                B=task.B,
            )
            for i, task in enumerate(sorted_tasks)
        ]
        self._sorted = True

    def get_sorted_tasks(self) -> List[Task]:
        """Return tasks sorted by priority (highest priority first)."""
        if not self._sorted:
            self.tasks.sort(key=lambda t: t.priority)
            self._sorted = True
        return self.tasks

    def get_higher_priority_tasks(self, task: Task) -> List[Task]:
        """Return all tasks with higher priority than the given task."""
        if task.priority is None:
            raise InvalidInputError(f"Task {task.name} has no priority assigned")
        return [t for t in self.get_sorted_tasks() if t.priority < task.priority]

    @property
    def total_utilization(self):
        return sum((t.utilization for t in self.tasks), 0)

    def __len__(self) -> int:
        return len(self.tasks)

    def __iter__(self):
        return iter(self.tasks)

    def __getitem__(self, index: int) -> Task:
        return self.tasks[index]
