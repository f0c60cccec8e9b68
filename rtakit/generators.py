"""Task set generators for testing and experiments.

Generated tasks use integer ticks. Periods and deadlines are rounded down
and execution times rounded up, so the integer task set is never easier to
schedule than the real-valued one it was drawn from.
"""

import math
import random
from typing import List, Optional

from rtakit.models import Task, TaskSet
from rtakit.time import InvalidInputError, to_ticks_down, to_ticks_up


def uunifast(n: int, u_total: float, seed: Optional[int] = None) -> List[float]:
    """Generate task utilizations using the UUniFast algorithm.

    UUniFast generates uniformly distributed task utilizations that sum to
    the target total utilization.

    Reference:
    Bini, E., & Buttazzo, G. C. (2005). Measuring the performance of schedulability tests.
    Real-Time Systems, 30(1-2), 129-154.

    Args:
        n: Number of tasks.
        u_total: Target total utilization.
        seed: Optional random seed for reproducibility.

    Returns:
        List of n utilization values that sum to approximately u_total.

    Raises:
        InvalidInputError: If n <= 0 or u_total < 0.
    """
    if n <= 0:
        raise InvalidInputError("Number of tasks must be positive")
    if u_total < 0:
        raise InvalidInputError("Target utilization must be non-negative")

    rng = random.Random(seed)

    utilizations = []
    sum_u = u_total
    for i in range(1, n):
        next_sum_u = sum_u * (rng.random() ** (1.0 / (n - i)))
        utilizations.append(sum_u - next_sum_u)
        sum_u = next_sum_u
    utilizations.append(sum_u)

    return utilizations


def generate_taskset(
    n: int,
    target_utilization: float,
    period_min: int = 10,
    period_max: int = 1000,
    deadline_factor_min: float = 1.0,
    deadline_factor_max: float = 1.0,
    seed: Optional[int] = None,
) -> TaskSet:
    """Generate a random task set with Rate Monotonic priorities.

    Periods are drawn log-uniformly from ``[period_min, period_max]``;
    execution times follow from UUniFast utilizations. Every task gets at
    least one tick of execution time and C is capped at T, so the actual
    utilization may deviate slightly from the target.

    Args:
        n: Number of tasks to generate.
        target_utilization: Target total utilization.
        period_min: Minimum task period (ticks).
        period_max: Maximum task period (ticks).
        deadline_factor_min: Minimum ratio D/T (1.0 means D=T).
        deadline_factor_max: Maximum ratio D/T (1.0 means D=T).
        seed: Random seed for reproducibility.

    Returns:
        A TaskSet with n tasks.

    Raises:
        InvalidInputError: If parameters are invalid.
    """
    if period_min <= 0 or period_max <= 0 or period_min > period_max:
        raise InvalidInputError("Invalid period range")
    if deadline_factor_min <= 0 or deadline_factor_max < deadline_factor_min:
        raise InvalidInputError("Invalid deadline factor range")
    if deadline_factor_max > 1.0:
        raise InvalidInputError("Deadline factor cannot exceed 1.0 (D must be <= T)")

    rng = random.Random(seed)
    utilizations = uunifast(n, target_utilization, seed=seed)

    log_min = math.log(period_min)
    log_max = math.log(period_max)
    tasks = []
    for i, u in enumerate(utilizations):
        T = max(to_ticks_down(math.exp(rng.uniform(log_min, log_max))), 1)
        C = min(max(to_ticks_up(u * T), 1), T)

        if deadline_factor_min == deadline_factor_max:
            deadline_factor = deadline_factor_min
        else:
            deadline_factor = rng.uniform(deadline_factor_min, deadline_factor_max)
        D = min(max(to_ticks_down(T * deadline_factor), C), T)

        tasks.append(Task(C=C, T=T, D=D, name=f"τ{i+1}"))

    return TaskSet(tasks=tasks)
