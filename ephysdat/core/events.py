# ephysdat/core/events.py
from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .exceptions import InvalidEventLog


@dataclass(frozen=True, slots=True)
class EventLog:
    """Strobed digital events (timestamp, value) plus recording start/stop markers.

    Persisted verbatim; nothing in the pipeline modifies it.
    """
    timestamps: np.ndarray = field(repr=False)
    values: np.ndarray = field(repr=False)
    start: np.ndarray = field(default_factory=lambda: np.empty(0), repr=False)
    stop: np.ndarray = field(default_factory=lambda: np.empty(0), repr=False)

    def __post_init__(self) -> None:
        ts = np.asarray(self.timestamps, dtype=np.float64).ravel()
        vals = np.asarray(self.values).ravel()
        if ts.size != vals.size:
            raise InvalidEventLog(
                f"`timestamps` and `values` must have same length, got {ts.size} vs {vals.size}"
            )
        if vals.size and not np.issubdtype(vals.dtype, np.integer):
            if not np.all(np.mod(vals, 1) == 0):
                raise InvalidEventLog("Strobed event values must be integers.")
        object.__setattr__(self, "timestamps", ts)
        object.__setattr__(self, "values", vals.astype(np.int64))
        object.__setattr__(self, "start", np.asarray(self.start, dtype=np.float64).ravel())
        object.__setattr__(self, "stop", np.asarray(self.stop, dtype=np.float64).ravel())

    @classmethod
    def empty(cls) -> "EventLog":
        return cls(timestamps=np.empty(0), values=np.empty(0, dtype=np.int64))

    def __len__(self) -> int:
        return int(self.timestamps.size)
