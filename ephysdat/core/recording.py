# ephysdat/core/recording.py
from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .exceptions import InvalidRecording


SAMPLE_DTYPE = np.dtype(np.int16)


@dataclass(frozen=True, slots=True)
class SampleRecording:
    """
    The primary signal: a [n_channels, n_samples] int16 sample matrix plus
    its per-sample time map (seconds).

    The time map always has exactly one entry per sample column; every
    transform returns a new SampleRecording rather than resizing in place.
    """
    samples: np.ndarray = field(repr=False)
    time: np.ndarray = field(repr=False)

    def __post_init__(self) -> None:
        s = np.asarray(self.samples)
        t = np.asarray(self.time, dtype=np.float64)

        if s.ndim != 2:
            raise InvalidRecording(f"`samples` must be 2D [channels, samples], got shape {s.shape}")
        if s.dtype != SAMPLE_DTYPE:
            raise InvalidRecording(f"`samples` must be int16, got {s.dtype}")
        if t.ndim != 1:
            raise InvalidRecording(f"`time` must be 1D, got shape {t.shape}")
        if t.size != s.shape[1]:
            raise InvalidRecording(
                f"time map has {t.size} entries but the sample matrix has {s.shape[1]} columns"
            )

        object.__setattr__(self, "samples", s)
        object.__setattr__(self, "time", t)

    @property
    def n_channels(self) -> int:
        return int(self.samples.shape[0])

    @property
    def n_samples(self) -> int:
        return int(self.samples.shape[1])

    def with_samples(self, samples: np.ndarray) -> "SampleRecording":
        """Same time map, new sample values of identical shape."""
        return SampleRecording(samples=samples, time=self.time)

    def drop_columns(self, bad: np.ndarray) -> "SampleRecording":
        """Remove the flagged sample columns from the matrix and the time map together."""
        bad = np.asarray(bad, dtype=bool)
        if bad.shape != (self.n_samples,):
            raise InvalidRecording(
                f"column mask must have shape ({self.n_samples},), got {bad.shape}"
            )
        keep = ~bad
        return SampleRecording(samples=self.samples[:, keep], time=self.time[keep])
