# ephysdat/core/timeseries.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from .exceptions import InvalidTimeSeries


def _validate_pair(t: np.ndarray, v: np.ndarray) -> None:
    if t.ndim != 1:
        raise InvalidTimeSeries(f"`time` must be 1D, got shape {t.shape}")
    if v.ndim != 1:
        raise InvalidTimeSeries(f"`values` must be 1D, got shape {v.shape}")
    if t.size != v.size:
        raise InvalidTimeSeries(
            f"`time` and `values` must have same length, got {t.size} vs {v.size}"
        )

    if t.size > 0:
        if not np.isfinite(t).all():
            raise InvalidTimeSeries("`time` contains non-finite values (NaN/Inf).")
        if np.any(np.diff(t) < 0):
            raise InvalidTimeSeries("`time` must be monotonic non-decreasing.")


@dataclass(frozen=True, slots=True)
class TimeSeries:
    """One auxiliary channel's samples paired with its reconstructed time map (seconds)."""

    time: np.ndarray = field(repr=False)
    values: np.ndarray = field(repr=False)
    unit: str | None = None
    name: str | None = None
    attrs: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        t = np.asarray(self.time, dtype=np.float64)
        v = np.asarray(self.values)
        _validate_pair(t, v)

        if self.attrs is None:
            object.__setattr__(self, "attrs", {})
        elif not isinstance(self.attrs, dict):
            raise InvalidTimeSeries("`attrs` must be a dict.")

        object.__setattr__(self, "time", t)
        object.__setattr__(self, "values", v)

    @property
    def n(self) -> int:
        return int(self.time.size)
