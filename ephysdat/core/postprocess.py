# ephysdat/core/postprocess.py
"""
Transforms on an assembled SampleRecording.

Both transforms return a new SampleRecording; the time map always follows
the sample matrix column for column.

- common_average_reference: subtract the cross-channel mean of every column
- remove_artifacts: drop columns whose median absolute value is an outlier
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from .exceptions import InvalidRecording
from .recording import SampleRecording, SAMPLE_DTYPE


logger = logging.getLogger(__name__)

DEFAULT_SD_THRESHOLD = 3.5

_INT16_MIN = np.iinfo(SAMPLE_DTYPE).min
_INT16_MAX = np.iinfo(SAMPLE_DTYPE).max


def round_half_away(x: np.ndarray) -> np.ndarray:
    """Round to the nearest integer, ties away from zero."""
    x = np.asarray(x, dtype=np.float64)
    return np.sign(x) * np.floor(np.abs(x) + 0.5)


def saturate_int16(x: np.ndarray) -> np.ndarray:
    return np.clip(x, _INT16_MIN, _INT16_MAX).astype(SAMPLE_DTYPE)


def column_mean(samples: np.ndarray) -> np.ndarray:
    """Per-column mean across channels, rounded to int16."""
    return saturate_int16(round_half_away(np.mean(samples, axis=0, dtype=np.float64)))


def common_average_reference(recording: SampleRecording) -> SampleRecording:
    if recording.n_channels == 0:
        raise InvalidRecording("Cannot reference a recording without channels.")

    mean = column_mean(recording.samples)
    referenced = recording.samples.astype(np.int32) - mean.astype(np.int32)[np.newaxis, :]
    return recording.with_samples(saturate_int16(referenced))


@dataclass(frozen=True, slots=True)
class ArtifactReport:
    """Outcome of artifact removal, including what a caller needs to plot it."""
    n_removed: int
    n_total: int
    threshold: float
    sd_threshold: float
    median_abs: np.ndarray = field(repr=False)
    bad: np.ndarray = field(repr=False)

    @property
    def percent_removed(self) -> float:
        return 0.0 if self.n_total == 0 else 100.0 * self.n_removed / self.n_total


def median_abs_per_column(samples: np.ndarray) -> np.ndarray:
    # float64 so that |int16 min| does not wrap
    return np.median(np.abs(samples.astype(np.float64)), axis=0)


def find_artifact_columns(
    samples: np.ndarray,
    sd_threshold: float = DEFAULT_SD_THRESHOLD,
) -> tuple[np.ndarray, np.ndarray, float]:
    """Flag columns whose median absolute value exceeds `sd_threshold` standard deviations.

    The standard deviation is that of the per-column median-absolute series
    over the whole recording (one global threshold).

    Returns
    -------
    bad, median_abs, threshold
    """
    med_abs = median_abs_per_column(samples)
    if med_abs.size < 2:
        return np.zeros(med_abs.size, dtype=bool), med_abs, float("inf")

    threshold = sd_threshold * float(np.std(med_abs, ddof=1))
    return med_abs > threshold, med_abs, threshold


def remove_artifacts(
    recording: SampleRecording,
    sd_threshold: float = DEFAULT_SD_THRESHOLD,
) -> tuple[SampleRecording, ArtifactReport]:
    if recording.n_channels == 0:
        raise InvalidRecording("Cannot remove artifacts from a recording without channels.")

    bad, med_abs, threshold = find_artifact_columns(recording.samples, sd_threshold)
    cleaned = recording.drop_columns(bad)

    report = ArtifactReport(
        n_removed=int(bad.sum()),
        n_total=int(bad.size),
        threshold=threshold,
        sd_threshold=float(sd_threshold),
        median_abs=med_abs,
        bad=bad,
    )
    logger.info(
        "removed %d of %d samples (%0.3f percent)",
        report.n_removed, report.n_total, report.percent_removed,
    )
    return cleaned, report
