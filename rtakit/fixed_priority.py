"""Response-time analyses for fixed-priority scheduling on a dedicated uniprocessor.

All analyses follow the abstract, busy-window based RTA of Bozhko &
Brandenburg (ECRTS 2020): bound the length L of the longest busy window,
then solve one fixed point per arrival offset A < L at which the demand of
the task under analysis steps, and report the largest result.

``interference`` is the demand of all higher- or equal-priority tasks,
given either as a single ``WorkloadDemand`` or as an iterable of them.
Blocking bounds are the caller's responsibility: typically the largest
non-preemptive section of any lower-priority task minus one tick.
"""

import logging

from rtakit.arrival import ArrivalBound
from rtakit.bound import Bound
from rtakit.config import DEFAULT_CEILING, DEFAULT_MAX_ITERATIONS
from rtakit.demand import RequestBoundFunction, total_demand
from rtakit.solver import bound_response_time
from rtakit.time import EPSILON, InvalidInputError, check_positive_ticks, check_ticks

logger = logging.getLogger(__name__)


def _rta(interference, wcet, arrivals, blocking, rem_cost, limit, max_iterations) -> Bound:
    interference = total_demand(interference)
    tua = RequestBoundFunction(arrivals, wcet)

    def busy_window_demand(delta):
        return blocking + interference(delta) + tua(delta)

    def offset_demand(offset, af):
        # own work released in [0, offset], minus what runs non-preemptively
        tua_demand = tua(offset + EPSILON) - rem_cost
        return blocking + tua_demand + interference(af)

    result = bound_response_time(
        None, tua, busy_window_demand, offset_demand,
        ceiling=limit, max_iterations=max_iterations, remaining_cost=rem_cost,
    )
    logger.debug("fixed-priority RTA (wcet=%s, blocking=%s): %s", wcet, blocking, result)
    return result


def fully_preemptive_rta(
    interference,
    wcet: int,
    arrivals: ArrivalBound,
    limit: int = DEFAULT_CEILING,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> Bound:
    """Bound the response time of a fully preemptive task.

    Args:
        interference: Demand of all higher-priority tasks.
        wcet: WCET of the task under analysis.
        arrivals: Arrival model of the task under analysis.
        limit: Divergence limit; busy windows longer than this are
               reported as ``Unbounded``.
        max_iterations: Iteration cap of each fixed-point search.
    """
    check_positive_ticks(wcet, "wcet")
    return _rta(interference, wcet, arrivals, 0, 0, limit, max_iterations)


def limited_preemptive_rta(
    interference,
    wcet: int,
    arrivals: ArrivalBound,
    last_np_segment: int,
    blocking: int,
    limit: int = DEFAULT_CEILING,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> Bound:
    """Bound the response time of a task with fixed preemption points.

    Once the final non-preemptive segment of a job has started, it runs to
    completion, so only the first ``wcet - (last_np_segment - 1)`` ticks
    are exposed to interference.

    Args:
        interference: Demand of all higher-priority tasks.
        wcet: WCET of the task under analysis.
        arrivals: Arrival model of the task under analysis.
        last_np_segment: Length of the final non-preemptive segment.
        blocking: Maximum blocking due to lower-priority tasks.
        limit: Divergence limit.
        max_iterations: Iteration cap of each fixed-point search.
    """
    check_positive_ticks(wcet, "wcet")
    check_positive_ticks(last_np_segment, "last_np_segment")
    check_ticks(blocking, "blocking")
    if last_np_segment > wcet:
        raise InvalidInputError(
            f"last non-preemptive segment ({last_np_segment}) exceeds wcet ({wcet})"
        )
    run_to_completion_threshold = wcet - (last_np_segment - EPSILON)
    rem_cost = wcet - run_to_completion_threshold
    return _rta(interference, wcet, arrivals, blocking, rem_cost, limit, max_iterations)


def fully_nonpreemptive_rta(
    interference,
    wcet: int,
    arrivals: ArrivalBound,
    blocking: int,
    limit: int = DEFAULT_CEILING,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> Bound:
    """Bound the response time of a non-preemptive task.

    A special case of ``limited_preemptive_rta`` where the whole job is a
    single non-preemptive segment.
    """
    return limited_preemptive_rta(interference, wcet, arrivals, wcet, blocking, limit, max_iterations)


def floating_nonpreemptive_rta(
    interference,
    wcet: int,
    arrivals: ArrivalBound,
    blocking: int,
    limit: int = DEFAULT_CEILING,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> Bound:
    """Bound the response time of a task with floating non-preemptive regions.

    With floating regions there is no known final segment, so nothing can
    be excluded from interference; lower-priority regions still block.
    """
    check_positive_ticks(wcet, "wcet")
    check_ticks(blocking, "blocking")
    return _rta(interference, wcet, arrivals, blocking, 0, limit, max_iterations)
