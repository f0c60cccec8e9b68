"""Classic response-time analysis for fixed-priority preemptive scheduling.

Implements the iterative RTA of Joseph & Pandya / Audsley et al. on top of
the generic fixed-point solver:

    w^(k+1) = C_i + B_i + sum_{j in hp(i)} ceil((w^(k) + J_j) / T_j) * C_j
    R_i     = w + J_i

where:
    - C_i, T_i, D_i are WCET, period and deadline of task i
    - J_j is the release jitter of task j
    - B_i is the blocking by lower-priority tasks
    - hp(i) is the set of tasks with higher priority than task i

The iteration starts with w^(0) = C_i and stops at convergence or once
w + J_i exceeds D_i. All quantities are exact, so the result never depends
on floating-point rounding.
"""

import logging
from typing import Dict, List, Optional, Tuple

from rtakit.bound import Bound, Bounded
from rtakit.config import AnalysisConfig
from rtakit.interference import FixedPriorityNonPreemptive, FixedPriorityPreemptive
from rtakit.models import Task, TaskSet
from rtakit.solver import FixedPointSolver

logger = logging.getLogger(__name__)


def compute_response_time(
    task: Task,
    higher_priority_tasks: List[Task],
    config: Optional[AnalysisConfig] = None,
) -> Bound:
    """Compute the worst-case response time of a task.

    Args:
        task: The task to analyze.
        higher_priority_tasks: Tasks with higher priority than ``task``.
        config: Solver limits; defaults to ``AnalysisConfig()``.

    Returns:
        ``Bounded(R)`` with ``R <= D``, ``Unbounded()`` if the deadline is
        missed, or ``Inconclusive`` if a solver limit was hit first.
    """
    config = config or AnalysisConfig()
    contenders = [t.request_bound for t in higher_priority_tasks]
    if task.B:
        interference = FixedPriorityNonPreemptive(contenders, task.B)
    else:
        interference = FixedPriorityPreemptive(contenders)

    solver = FixedPointSolver.from_config(config)
    result = solver.solve(task.C, interference, deadline=task.D - task.J)
    if isinstance(result, Bounded) and task.J:
        result = Bounded(result.value + task.J)
    logger.debug("response time of %s: %s", task, result)
    return result


def is_schedulable(
    task: Task,
    higher_priority_tasks: List[Task],
    config: Optional[AnalysisConfig] = None,
) -> bool:
    """Check if a task provably meets its deadline.

    ``Inconclusive`` results count as not schedulable.
    """
    return isinstance(compute_response_time(task, higher_priority_tasks, config), Bounded)


def analyze_taskset(
    taskset: TaskSet,
    config: Optional[AnalysisConfig] = None,
) -> Tuple[bool, Dict[str, Bound]]:
    """Analyze the schedulability of an entire task set.

    Tasks are analyzed in priority order (highest priority first). A task
    set is schedulable if every task is.

    Args:
        taskset: The task set to analyze.
        config: Solver limits shared by all tasks.

    Returns:
        A tuple of (schedulable, response_times) where response_times maps
        task names to their ``Bound``.
    """
    response_times: Dict[str, Bound] = {}
    all_schedulable = True

    for task in taskset.get_sorted_tasks():
        hp_tasks = taskset.get_higher_priority_tasks(task)
        rt = compute_response_time(task, hp_tasks, config)

        task_name = task.name if task.name else f"Task_prio_{task.priority}"
        response_times[task_name] = rt
        if not isinstance(rt, Bounded):
            all_schedulable = False

    return all_schedulable, response_times
