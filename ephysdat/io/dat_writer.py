"""Flat binary sample files.

Layout: raw little-endian int16, channel-major / sample-minor. Channel 0's
full run of samples comes first, then channel 1's, and so on. There is no
header. Readers that expect interleaved (sample-major) data must transpose.
"""
from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from ephysdat.core import InvalidRecording, SAMPLE_DTYPE


logger = logging.getLogger(__name__)

DAT_DTYPE = np.dtype("<i2")


def dat_path_for(output_folder: str | Path, dataset_name: str) -> Path:
    return Path(output_folder) / f"{dataset_name}.dat"


def write_dat(path: str | Path, samples: np.ndarray) -> Path:
    """Write a [n_channels, n_samples] int16 matrix to `path`.

    Any existing file at `path` is deleted first; the new file is then
    filled one channel at a time in append mode.
    """
    path = Path(path)
    samples = np.asarray(samples)
    if samples.ndim != 2:
        raise InvalidRecording(f"samples must be 2D [channels, samples], got shape {samples.shape}")
    if samples.dtype != SAMPLE_DTYPE:
        raise InvalidRecording(f"samples must be int16, got {samples.dtype}")

    if path.exists():
        logger.debug("removing existing %s", path)
        path.unlink()

    with open(path, "ab") as fh:
        for row in samples:
            fh.write(np.ascontiguousarray(row, dtype=DAT_DTYPE).tobytes())

    logger.info(
        "wrote %d channels x %d samples to %s", samples.shape[0], samples.shape[1], path
    )
    return path


def read_dat(path: str | Path, n_channels: int) -> np.ndarray:
    """Read a channel-major .dat file back into a [n_channels, n_samples] matrix."""
    if n_channels <= 0:
        raise ValueError("n_channels must be > 0")

    flat = np.fromfile(Path(path), dtype=DAT_DTYPE)
    if flat.size % n_channels:
        raise InvalidRecording(
            f"{path} holds {flat.size} samples, not a multiple of {n_channels} channels"
        )
    return flat.reshape(n_channels, -1).astype(SAMPLE_DTYPE, copy=False)
