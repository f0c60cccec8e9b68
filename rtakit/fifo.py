"""Response-time analysis for FIFO scheduling.

Under FIFO, a job waits for everything that arrived before it (and, in the
worst case, at the same instant). Priority ordering plays no role; the bound
follows from the backlog accumulated over the busy window of the aggregate
workload.
"""

import logging

from rtakit.bound import Bound, Bounded, Unbounded, max_bound
from rtakit.config import DEFAULT_CEILING, DEFAULT_MAX_ITERATIONS
from rtakit.demand import total_demand
from rtakit.solver import offsets_below, solve_busy_window
from rtakit.supply import Dedicated, as_supply
from rtakit.time import EPSILON

logger = logging.getLogger(__name__)


def max_backlog_delay(workload, supply=None, limit=DEFAULT_CEILING, max_iterations=DEFAULT_MAX_ITERATIONS) -> Bound:
    """Bound the time a job waits for all work queued ahead of it (itself included).

    For each arrival offset A in the busy window, all demand released in
    ``[0, A]`` must be served before the job at A completes, so the delay
    is ``service_time(demand(A + 1)) - A``.

    Args:
        workload: Demand of all tasks sharing the FIFO queue, as a single
                  ``WorkloadDemand`` or an iterable of them.
        supply: Supply of the shared resource; defaults to a dedicated processor.
        limit: Divergence limit of the busy-window search.
        max_iterations: Iteration cap of the busy-window search.

    Returns:
        The maximum delay over the busy window, ``Unbounded`` if the busy
        window does not close within ``limit``.
    """
    workload = total_demand(workload)
    supply = Dedicated() if supply is None else as_supply(supply)
    busy_window = solve_busy_window(workload, supply, limit, max_iterations=max_iterations)
    if not isinstance(busy_window, Bounded):
        return busy_window

    def delay(offset: int) -> Bound:
        completion = supply.service_time(workload(offset + EPSILON), limit)
        if completion is None:
            return Unbounded()
        return Bounded(max(completion - offset, 0))

    return max_bound(delay(offset) for offset in offsets_below(workload, busy_window.value))


def fifo_rta(workload, supply=None, limit=DEFAULT_CEILING, max_iterations=DEFAULT_MAX_ITERATIONS) -> Bound:
    """Bound the response time of any task served in FIFO order.

    The bound is the same for every task sharing the queue.
    """
    result = max_backlog_delay(workload, supply, limit, max_iterations)
    logger.debug("FIFO RTA: %s", result)
    return result
