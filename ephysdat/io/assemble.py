"""Pull channel data out of a decoder and assemble it into core objects.

- assemble_samples: selected channels -> int16 sample matrix (one row per channel)
- read_auxiliary_stream: analog-input / LFP channels -> AuxiliaryStream
- read_event_log: strobed events + start/stop markers -> EventLog

Channel reads are strictly sequential, one full channel at a time.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Sequence

import numpy as np

from ephysdat.core import (
    AuxiliaryStream,
    ChannelNotFound,
    ChannelReadFailure,
    ChannelSelection,
    EventLog,
    Fragment,
    MismatchedChannelLength,
    NoChannelsSelected,
    SampleRecording,
    SAMPLE_DTYPE,
    build_time_map,
)
from ephysdat.core.postprocess import round_half_away, saturate_int16
from ephysdat.io.decoder import Decoder, RawChannelData


logger = logging.getLogger(__name__)

# value every sample takes when a vendor read fails
READ_FAILURE_SENTINEL = -1


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    """Emitted after each channel read; purely advisory."""
    channel_index: int
    n_channels: int
    channel: int | str
    percent: float


ProgressCallback = Callable[[ProgressEvent], None]


@dataclass
class AssembledSamples:
    samples: np.ndarray = field(repr=False)
    sample_rate: float
    fragments: list[Fragment] = field(default_factory=list, repr=False)

    def to_recording(self) -> SampleRecording:
        """Pair the matrix with the time map rebuilt from the first channel's fragments."""
        time_map = build_time_map(self.fragments)
        n_samples = self.samples.shape[1]
        if time_map.size != n_samples:
            raise MismatchedChannelLength("time map", n_samples, time_map.size)
        return SampleRecording(samples=self.samples, time=time_map)


def to_int16(values: np.ndarray) -> np.ndarray:
    """Convert decoder values to int16, rounding ties away from zero and saturating."""
    values = np.asarray(values)
    if values.dtype == SAMPLE_DTYPE:
        return values
    if np.issubdtype(values.dtype, np.integer):
        return saturate_int16(values)
    return saturate_int16(round_half_away(values))


def is_degenerate(values: np.ndarray) -> bool:
    return values.size == 0 or bool(np.all(values == READ_FAILURE_SENTINEL))


def _read(decoder: Decoder, channel: int | str) -> RawChannelData:
    try:
        return decoder.read_channel_samples(channel)
    except ChannelNotFound as e:
        raise ChannelReadFailure(channel, "channel not present in source") from e


def assemble_samples(
    decoder: Decoder,
    selection: ChannelSelection,
    on_progress: ProgressCallback | None = None,
) -> AssembledSamples:
    """Read every selected channel, in selection order, into row i of the matrix.

    The first channel fixes the number of samples.

    Raises
    ------
    ChannelReadFailure
        If a channel is missing or its read is degenerate.
    MismatchedChannelLength
        If a channel's sample count differs from the first channel's.
    """
    n_channels = len(selection)
    if n_channels == 0:
        raise NoChannelsSelected("Nothing to assemble: the channel selection is empty.")

    samples: np.ndarray | None = None
    first: RawChannelData | None = None
    t_start = time.perf_counter()

    for i, number in enumerate(selection.channel_numbers):
        raw = _read(decoder, number)
        values = np.asarray(raw.values).ravel()

        if is_degenerate(values):
            raise ChannelReadFailure(number)

        if samples is None:
            first = raw
            samples = np.zeros((n_channels, values.size), dtype=SAMPLE_DTYPE)
        elif values.size != samples.shape[1]:
            raise MismatchedChannelLength(number, samples.shape[1], values.size)

        samples[i, :] = to_int16(values)

        logger.info(
            "%0.1fs: read channel #%d (%d of %d)",
            time.perf_counter() - t_start, number, i + 1, n_channels,
        )
        if on_progress is not None:
            on_progress(
                ProgressEvent(
                    channel_index=i,
                    n_channels=n_channels,
                    channel=number,
                    percent=100.0 * (i + 1) / n_channels,
                )
            )

    logger.debug("first channel has %d fragments", len(first.fragments))
    return AssembledSamples(samples=samples, sample_rate=first.sample_rate, fragments=first.fragments)


def read_auxiliary_stream(
    decoder: Decoder,
    name: str,
    channels: Sequence[str],
) -> AuxiliaryStream:
    """Read auxiliary channels sharing one acquisition stream.

    The stream's time map is rebuilt from the first channel's fragments;
    every channel must have that many samples.
    """
    t_start = time.perf_counter()
    values: dict[str, np.ndarray] = {}
    time_map: np.ndarray | None = None

    for ch_name in channels:
        raw = _read(decoder, ch_name)
        v = np.asarray(raw.values).ravel()
        if time_map is None:
            time_map = build_time_map(raw.fragments)
            logger.debug("%s: %d fragments at %g Hz", name, len(raw.fragments), raw.sample_rate)
        if v.size != time_map.size:
            raise MismatchedChannelLength(ch_name, time_map.size, v.size)
        values[ch_name] = v

    stream = AuxiliaryStream.from_arrays(
        name,
        time_map if time_map is not None else np.empty(0),
        values,
        sources={ch: f"{decoder.file_type}:{ch}" for ch in values},
    )
    logger.info(
        "extracted %d %s channels in %0.1fs", len(stream), name, time.perf_counter() - t_start
    )
    return stream


def read_event_log(decoder: Decoder) -> EventLog:
    timestamps, values = decoder.read_digital_events()
    return EventLog(
        timestamps=timestamps,
        values=values,
        start=decoder.read_start_stop_markers("start"),
        stop=decoder.read_start_stop_markers("stop"),
    )
