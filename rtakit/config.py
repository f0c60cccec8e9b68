"""Analysis configuration.

Every analysis call receives its limits explicitly; there is no global
configuration. ``AnalysisConfig`` bundles the limits so that collaborators
(experiment scripts, task-set drivers) can keep them in a YAML file:

.. code-block:: yaml

    analysis:
      ceiling: 1000000        # largest candidate bound before giving up
      max_iterations: 100000  # largest number of fixed-point iterations
      horizon: 1000000        # divergence limit of the policy analyses
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

import yaml

from rtakit.time import InvalidInputError, check_time

DEFAULT_CEILING = 10**6
DEFAULT_MAX_ITERATIONS = 10**5


@dataclass(frozen=True)
class AnalysisConfig:
    """Limits applied to a single analysis call.

    Attributes:
        ceiling: Safety ceiling for candidate response times. Exceeding it
                 without a deadline yields ``Inconclusive``.
        max_iterations: Circuit breaker on the number of iterations.
        horizon: Divergence limit used for busy-window searches.
    """
    ceiling: int = DEFAULT_CEILING
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    horizon: int = DEFAULT_CEILING

    def __post_init__(self) -> None:
        check_time(self.ceiling, "ceiling")
        check_time(self.horizon, "horizon")
        if isinstance(self.max_iterations, bool) or not isinstance(self.max_iterations, int):
            raise InvalidInputError(f"max_iterations must be an integer, got {self.max_iterations!r}")
        if self.max_iterations <= 0:
            raise InvalidInputError(f"max_iterations must be positive, got {self.max_iterations}")

    def with_overrides(self, **overrides: Any) -> "AnalysisConfig":
        """Return a copy with the given (non-None) fields replaced."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def config_from_dict(data: Optional[Dict[str, Any]]) -> AnalysisConfig:
    """Build an ``AnalysisConfig`` from a mapping, e.g. parsed YAML.

    Accepts either the bare field mapping or one nested under an
    ``analysis`` key. Unknown keys are rejected.
    """
    if not data:
        return AnalysisConfig()
    if "analysis" in data:
        data = data["analysis"] or {}
    if not isinstance(data, dict):
        raise InvalidInputError(f"analysis configuration must be a mapping, got {data!r}")
    known = {f.name for f in fields(AnalysisConfig)}
    unknown = set(data) - known
    if unknown:
        raise InvalidInputError(f"unknown configuration keys: {', '.join(sorted(unknown))}")
    return AnalysisConfig(**data)


def load_config(path: str = "analysis.yaml") -> AnalysisConfig:
    """Load analysis limits from a YAML file."""
    with open(path, "r", encoding="utf-8") as f:
        return config_from_dict(yaml.safe_load(f))
