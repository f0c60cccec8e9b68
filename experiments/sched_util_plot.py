"""Schedulability vs Utilisation Experiment.

Generates random integer-tick task sets at various utilisation levels using
UUniFast, bounds every response time with the fixed-point solver, and plots
the share of task sets proven schedulable. Inconclusive results count as
not schedulable. Solver limits are read from ``analysis.yaml`` when present.
"""

import logging
import os
from pathlib import Path
from typing import Optional

try:
    import matplotlib
    matplotlib.use('Agg')  # Non-interactive backend
    import matplotlib.pyplot as plt
    MATPLOTLIB_AVAILABLE = True
except ImportError:
    MATPLOTLIB_AVAILABLE = False

from rtakit.analysis import analyze_taskset
from rtakit.bound import Inconclusive
from rtakit.config import AnalysisConfig, load_config
from rtakit.generators import generate_taskset

logger = logging.getLogger(__name__)


def run_schedulability_experiment(
    utilisation_points: list,
    num_task_sets_per_point: int = 100,
    num_tasks: int = 5,
    min_period: int = 10,
    max_period: int = 1000,
    seed: int = 42,
    config: Optional[AnalysisConfig] = None,
) -> dict:
    """Run schedulability experiment across utilisation levels.

    Args:
        utilisation_points: Utilisation values to test (e.g. [0.1, 0.2, ..., 0.9]).
        num_task_sets_per_point: Number of random task sets per utilisation.
        num_tasks: Number of tasks per task set.
        min_period: Minimum task period (ticks).
        max_period: Maximum task period (ticks).
        seed: Base random seed (varied per task set).
        config: Solver limits passed to every analysis.

    Returns:
        Dictionary mapping utilisation -> schedulability ratio.
    """
    results = {}

    for u_total in utilisation_points:
        schedulable_count = 0
        inconclusive_count = 0

        for i in range(num_task_sets_per_point):
            task_set_seed = seed + int(u_total * 1000) + i
            taskset = generate_taskset(
                n=num_tasks,
                target_utilization=u_total,
                period_min=min_period,
                period_max=max_period,
                seed=task_set_seed,
            )

            schedulable, bounds = analyze_taskset(taskset, config)
            if schedulable:
                schedulable_count += 1
            inconclusive_count += sum(1 for b in bounds.values() if isinstance(b, Inconclusive))

        if inconclusive_count:
            logger.warning("U = %.2f: %d inconclusive task bounds", u_total, inconclusive_count)
        results[u_total] = schedulable_count / num_task_sets_per_point
        logger.info("U = %.2f: %.3f schedulable", u_total, results[u_total])

    return results


def plot_schedulability_vs_utilisation(
    results: dict,
    output_path: str = "results/schedulability_vs_utilisation.png",
) -> None:
    """Plot schedulability ratio vs utilisation.

    Args:
        results: Dictionary mapping utilisation -> schedulability ratio.
        output_path: Path to save the plot.
    """
    if not MATPLOTLIB_AVAILABLE:
        raise ImportError("matplotlib is required for plotting")

    Path(output_path).parent.mkdir(parents=True, exist_ok=True)

    utilisations = sorted(results.keys())
    schedulability_ratios = [results[u] for u in utilisations]

    plt.figure(figsize=(10, 6))
    plt.plot(utilisations, schedulability_ratios, 'bo-', linewidth=2, markersize=8)
    plt.xlabel('Total Utilisation', fontsize=12)
    plt.ylabel('Schedulability Ratio', fontsize=12)
    plt.title('Schedulability vs Utilisation (exact-tick RTA)', fontsize=14)
    plt.grid(True, alpha=0.3)
    plt.xlim(0, 1.0)
    plt.ylim(0, 1.05)

    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close()

    logger.info("Plot saved to %s", output_path)


def main():
    """Run the full schedulability vs utilisation experiment."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config_path = os.environ.get("RTAKIT_CONFIG", "analysis.yaml")
    config = load_config(config_path) if os.path.exists(config_path) else AnalysisConfig()
    logger.info("Running schedulability vs utilisation experiment with %s", config)

    utilisation_points = [u / 10.0 for u in range(1, 10)]
    results = run_schedulability_experiment(
        utilisation_points=utilisation_points,
        num_task_sets_per_point=150,
        num_tasks=5,
        min_period=10,
        max_period=1000,
        seed=42,
        config=config,
    )

    plot_schedulability_vs_utilisation(results)
    logger.info("Experiment complete")


if __name__ == "__main__":
    main()
