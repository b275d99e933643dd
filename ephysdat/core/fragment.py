# ephysdat/core/fragment.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from .exceptions import MalformedFragmentSequence


@dataclass(frozen=True, slots=True)
class Fragment:
    """
    A contiguous run of samples within one continuous-recording stream.

    - start_time: time of the first sample, in seconds
    - sample_count: number of samples in the run
    - sample_rate: sampling rate of the run, in Hz

    Consecutive fragments are contiguous in sample-index space but may be
    separated by arbitrary gaps in time.
    """
    start_time: float
    sample_count: int
    sample_rate: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "start_time", float(self.start_time))
        object.__setattr__(self, "sample_count", int(self.sample_count))
        object.__setattr__(self, "sample_rate", float(self.sample_rate))

    @property
    def duration(self) -> float:
        return self.sample_count / self.sample_rate

    @property
    def t_end(self) -> float:
        """Time of the last sample in the run."""
        return self.start_time + (self.sample_count - 1) / self.sample_rate


def fragments_from_arrays(
    start_times: Sequence[float],
    sample_counts: Sequence[int],
    sample_rate: float,
) -> list[Fragment]:
    """Zip per-fragment start times and counts sharing one sampling rate."""
    starts = np.asarray(start_times, dtype=np.float64).ravel()
    counts = np.asarray(sample_counts).ravel()
    if starts.size != counts.size:
        raise MalformedFragmentSequence(
            f"Got {starts.size} fragment start times but {counts.size} sample counts."
        )
    return [
        Fragment(start_time=s, sample_count=c, sample_rate=sample_rate)
        for s, c in zip(starts.tolist(), counts.tolist())
    ]


def total_samples(fragments: Iterable[Fragment]) -> int:
    return int(sum(f.sample_count for f in fragments))


def build_time_map(fragments: Iterable[Fragment]) -> np.ndarray:
    """Flatten a fragment sequence into a dense per-sample timestamp vector.

    Sample ``k`` of fragment ``i`` is stamped ``start_time[i] + k / sample_rate[i]``
    and lands at global index ``sum(sample_count[:i]) + k``.

    Raises
    ------
    MalformedFragmentSequence
        If any fragment has a non-positive sample count or sampling rate, or
        starts before the last sample of the fragment preceding it.
    """
    frags = list(fragments)

    for i, f in enumerate(frags):
        if not isinstance(f, Fragment):
            raise MalformedFragmentSequence(f"Fragment {i} is not a Fragment instance.")
        if f.sample_count <= 0:
            raise MalformedFragmentSequence(
                f"Fragment {i} has sample_count={f.sample_count}; must be > 0."
            )
        if not np.isfinite(f.sample_rate) or f.sample_rate <= 0:
            raise MalformedFragmentSequence(
                f"Fragment {i} has sample_rate={f.sample_rate}; must be > 0."
            )
        if not np.isfinite(f.start_time):
            raise MalformedFragmentSequence(f"Fragment {i} has a non-finite start_time.")
        if i > 0 and f.start_time < frags[i - 1].t_end:
            raise MalformedFragmentSequence(
                f"Fragment {i} starts at {f.start_time}s, before fragment {i - 1} "
                f"ends at {frags[i - 1].t_end}s."
            )

    if not frags:
        return np.empty(0, dtype=np.float64)

    counts = np.array([f.sample_count for f in frags], dtype=np.int64)
    starts = np.array([f.start_time for f in frags], dtype=np.float64)
    rates = np.array([f.sample_rate for f in frags], dtype=np.float64)

    offsets = np.concatenate(([0], np.cumsum(counts)[:-1]))
    owner = np.repeat(np.arange(counts.size), counts)
    local = np.arange(int(counts.sum()), dtype=np.int64) - offsets[owner]

    return starts[owner] + local / rates[owner]
