"""Survey rows, axis descriptors and display modes."""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum
from typing import Optional

# Pseudo-region meaning "no filter" / "region unknown"
WORLD = "World"

# Canonical axis labels (single source of truth for titles)
AXIS_LABELS: dict[str, str] = {
    "score": "Happiness score",
    "gdp": "GDP per capita",
    "social": "Social support",
    "life": "Healthy life expectancy",
    "freedom": "Freedom of choice",
    "generosity": "Generosity",
    "corruption": "Perceived corruption",
}

METRIC_KEYS: tuple[str, ...] = tuple(AXIS_LABELS)


class DisplayMode(StrEnum):
    """How values are placed along each axis."""
    RAW = "raw"
    NORMALIZED = "normalized"  # unit fraction rescaled to a shared 0-10 scale


@dataclass(frozen=True)
class AxisDescriptor:
    key: str
    label: str


DEFAULT_AXES: tuple[AxisDescriptor, ...] = tuple(
    AxisDescriptor(key, AXIS_LABELS[key])
    for key in ("score", "generosity", "gdp", "social", "life", "freedom", "corruption")
)


def is_finite(value: Optional[float]) -> bool:
    """True for a real, finite number. ``None`` is the missing marker."""
    return value is not None and math.isfinite(value)


@dataclass(frozen=True)
class Row:
    """
    One survey entry of a single year.

    Metrics are either a finite float or ``None`` (missing). Never NaN.
    """
    country: str
    region: str = WORLD
    score: Optional[float] = None
    gdp: Optional[float] = None
    social: Optional[float] = None
    life: Optional[float] = None
    freedom: Optional[float] = None
    generosity: Optional[float] = None
    corruption: Optional[float] = None

    def value(self, key: str) -> Optional[float]:
        """Metric by axis key; unknown keys read as missing."""
        if key not in AXIS_LABELS:
            return None
        return getattr(self, key)

    def is_complete(self, keys: tuple[str, ...] = METRIC_KEYS) -> bool:
        return all(is_finite(self.value(k)) for k in keys)
