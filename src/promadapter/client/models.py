"""
Data models for series returned by a Prometheus-compatible backend.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

# A backend-specific series selector or query, e.g. '{namespace!=""}'.
Selector = str


@dataclass(frozen=True, eq=False)
class Series:
    """A named time series and its labels. Never mutated by promadapter."""

    name: str
    labels: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", MappingProxyType(dict(self.labels)))

    def __hash__(self) -> int:
        return hash((self.name, frozenset(self.labels.items())))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Series):
            return NotImplemented
        return self.name == other.name and dict(self.labels) == dict(other.labels)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "labels": dict(self.labels)}

    @classmethod
    def from_api(cls, payload: Mapping[str, str]) -> Series:
        """Build a series from one entry of the ``/api/v1/series`` response."""
        labels = {key: value for key, value in payload.items() if key != "__name__"}
        return cls(name=payload.get("__name__", ""), labels=labels)
