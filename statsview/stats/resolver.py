"""
Metric resolution for the stats endpoint.

Looks up requested stat names in the stats registry and records, per name,
either its current value or the registry's failure message.
"""

from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, Tuple

from statsview.exceptions import StatNotFoundError
from statsview.logging_config import get_logger

logger = get_logger(__name__)


class StatsSource(Protocol):
    """Registry reads the resolver depends on."""

    def read_all_values(self) -> List[Tuple[str, int]]:
        ...

    def read_value(self, name: str) -> int:
        ...


@dataclass(frozen=True)
class MetricSample:
    """
    One resolved stat.

    Exactly one of ``value`` and ``error`` is set.
    """
    name: str
    value: Optional[int] = None
    error: Optional[str] = None

    def __post_init__(self):
        if (self.value is None) == (self.error is None):
            raise ValueError(
                f"MetricSample {self.name!r} needs exactly one of value or error"
            )

    @classmethod
    def of_value(cls, name: str, value: int) -> "MetricSample":
        return cls(name=name, value=int(value))

    @classmethod
    def of_error(cls, name: str, error: str) -> "MetricSample":
        return cls(name=name, error=error)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def display_value(self):
        """The value, or the error message for failed lookups."""
        return self.error if self.is_error else self.value


def resolve_samples(metric_filter: Sequence[str], registry: StatsSource) -> List[MetricSample]:
    """
    Resolve stat names against the registry.

    With an empty filter every registered stat is returned in registry order.
    Otherwise each name is looked up once, in filter order; a failed lookup
    becomes an error sample and does not stop the remaining lookups.

    Args:
        metric_filter: Requested stat names (empty means all)
        registry: Stats registry to read from

    Returns:
        One MetricSample per requested name, or per registered stat
    """
    if not metric_filter:
        return [MetricSample.of_value(name, value) for name, value in registry.read_all_values()]

    samples = []
    for name in metric_filter:
        try:
            samples.append(MetricSample.of_value(name, registry.read_value(name)))
        except StatNotFoundError as e:
            logger.debug(f"Stat lookup failed for {name}: {e}")
            samples.append(MetricSample.of_error(name, str(e)))
    return samples
