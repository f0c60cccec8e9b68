"""rtakit: generic response-time analysis toolkit.

This package provides the numeric core of response-time analysis (a
fixed-point solver and a busy-window solver over exact time quantities),
the demand, supply and interference abstractions they operate on, and
reference analyses for fixed-priority, FIFO and EDF scheduling.
"""

from rtakit.bound import Bound, Bounded, Inconclusive, InconclusiveReason, Unbounded, max_bound
from rtakit.config import AnalysisConfig, load_config
from rtakit.demand import Aggregate, RequestBoundFunction, WorkloadDemand
from rtakit.interference import (
    FifoBacklog,
    FixedPriorityNonPreemptive,
    FixedPriorityPreemptive,
    InterferenceModel,
    ReservationBased,
)
from rtakit.models import Task, TaskSet
from rtakit.analysis import analyze_taskset, compute_response_time, is_schedulable
from rtakit.solver import (
    BusyWindowSolver,
    FixedPointSolver,
    bound_response_time,
    solve_busy_window,
    solve_response_time,
)
from rtakit.supply import SupplyBound
from rtakit.time import EPSILON, InvalidInputError

__version__ = "0.2.0"
__all__ = [
    "Bound",
    "Bounded",
    "Unbounded",
    "Inconclusive",
    "InconclusiveReason",
    "max_bound",
    "AnalysisConfig",
    "load_config",
    "WorkloadDemand",
    "RequestBoundFunction",
    "Aggregate",
    "SupplyBound",
    "InterferenceModel",
    "FixedPriorityPreemptive",
    "FixedPriorityNonPreemptive",
    "FifoBacklog",
    "ReservationBased",
    "solve_response_time",
    "solve_busy_window",
    "bound_response_time",
    "FixedPointSolver",
    "BusyWindowSolver",
    "Task",
    "TaskSet",
    "compute_response_time",
    "is_schedulable",
    "analyze_taskset",
    "EPSILON",
    "InvalidInputError",
]
