from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List

from neo.rawio import PlexonRawIO  # vendor decoding for .plx files
import numpy as np

from ephysdat.core import ChannelInfo, ChannelNotFound, Fragment, fragments_from_arrays
from ephysdat.io.decoder import RawChannelData


logger = logging.getLogger(__name__)

# Plexon reserves these event channel numbers
STROBED_EVENT_CHANNEL = 257
START_EVENT_CHANNEL = 258
STOP_EVENT_CHANNEL = 259

_MARKER_CHANNELS = {"start": START_EVENT_CHANNEL, "stop": STOP_EVENT_CHANNEL}


def merge_contiguous_blocks(
    ticks: np.ndarray,
    counts: np.ndarray,
    ticks_per_sample: float,
) -> tuple[np.ndarray, np.ndarray]:
    """Merge data blocks into fragments.

    A block continues the current fragment when its first timestamp falls
    within half a sample of where the previous block ended. Empty blocks
    are dropped.

    Parameters
    ----------
    ticks:
        Block start timestamps, in ticks of the file's global clock.
    counts:
        Number of samples in each block.
    ticks_per_sample:
        Global clock frequency divided by the channel's sampling rate.

    Returns
    -------
    fragment_ticks, fragment_counts
    """
    ticks = np.asarray(ticks, dtype=np.int64)
    counts = np.asarray(counts, dtype=np.int64)

    keep = counts > 0
    ticks, counts = ticks[keep], counts[keep]
    if ticks.size == 0:
        return ticks, counts

    expected = ticks[:-1] + counts[:-1] * ticks_per_sample
    new_run = np.ones(ticks.size, dtype=bool)
    new_run[1:] = np.abs(ticks[1:] - expected) > 0.5 * ticks_per_sample

    starts = np.flatnonzero(new_run)
    return ticks[starts], np.add.reduceat(counts, starts)


class PlexonDecoder:
    """Decoder for Plexon ``.plx`` files, backed by neo's PlexonRawIO.

    Sample reads go through the public rawio API. Fragment boundaries come
    from the per-channel data block index PlexonRawIO builds while parsing
    the header, since the public API presents every channel as one gapless
    signal.
    """

    file_type = "plx"
    # analog inputs routed through the four topmost FP channels
    default_ai_channels = ("FP29", "FP30", "FP31", "FP32")
    default_lfp_channels = tuple(f"FP{i:02d}" for i in range(1, 25))

    def __init__(self, path: str | Path, progress_bar: bool = False):
        self.path = Path(path)
        self._rawio = PlexonRawIO(filename=str(self.path), progress_bar=progress_bar)
        self._rawio.parse_header()

        header = self._rawio.header
        self._signal_channels = header["signal_channels"]
        self._signal_streams = header["signal_streams"]
        self._event_channels = header["event_channels"]
        self._numbers = np.array([int(i) for i in self._signal_channels["id"]], dtype=np.int64)
        self._global_rate = float(self._rawio._global_ssampling_rate)

        logger.debug(
            "Parsed %s: %d signal channels, %d event channels",
            self.path.name, self._numbers.size, len(self._event_channels),
        )

    # ------------------------------------------------------------------
    # Channel lookup
    # ------------------------------------------------------------------
    def _header_index(self, channel: int | str) -> int:
        if isinstance(channel, str):
            matches = np.flatnonzero(self._signal_channels["name"] == channel)
        else:
            matches = np.flatnonzero(self._numbers == int(channel))
        if matches.size == 0:
            raise ChannelNotFound(channel)
        return int(matches[0])

    def _stream_location(self, header_index: int) -> tuple[int, int]:
        """(stream index, channel index within that stream)"""
        stream_id = self._signal_channels["stream_id"][header_index]
        stream_index = int(np.flatnonzero(self._signal_streams["id"] == stream_id)[0])
        in_stream = np.flatnonzero(self._signal_channels["stream_id"] == stream_id)
        return stream_index, int(np.flatnonzero(in_stream == header_index)[0])

    def _event_index(self, number: int) -> int | None:
        for i, chan_id in enumerate(self._event_channels["id"]):
            if int(chan_id) == number:
                return i
        return None

    def _fragments(self, number: int, sample_rate: float) -> list[Fragment]:
        blocks = self._rawio._data_blocks[5][number]
        ticks, counts = merge_contiguous_blocks(
            blocks["timestamp"],
            blocks["size"] // 2,
            self._global_rate / sample_rate,
        )
        return fragments_from_arrays(ticks / self._global_rate, counts, sample_rate)

    # ------------------------------------------------------------------
    # Decoder protocol implementation
    # ------------------------------------------------------------------
    def list_continuous_channels(self) -> List[ChannelInfo]:
        counts = self.channel_sample_counts()
        return [
            ChannelInfo(number=int(n), name=str(name), sample_count=counts.get(int(n), 0))
            for n, name in zip(self._numbers, self._signal_channels["name"])
        ]

    def channel_sample_counts(self) -> dict[int, int]:
        return {
            int(chan_id): int(blocks["size"].sum() // 2)
            for chan_id, blocks in self._rawio._data_blocks[5].items()
        }

    def read_channel_samples(self, channel: int | str) -> RawChannelData:
        idx = self._header_index(channel)
        stream_index, in_stream = self._stream_location(idx)

        raw = self._rawio.get_analogsignal_chunk(
            block_index=0,
            seg_index=0,
            i_start=None,
            i_stop=None,
            stream_index=stream_index,
            channel_indexes=[in_stream],
        )
        sample_rate = float(self._signal_channels["sampling_rate"][idx])
        return RawChannelData(
            values=np.asarray(raw[:, 0]),
            sample_rate=sample_rate,
            fragments=self._fragments(int(self._numbers[idx]), sample_rate),
        )

    def read_digital_events(self) -> tuple[np.ndarray, np.ndarray]:
        ev_index = self._event_index(STROBED_EVENT_CHANNEL)
        if ev_index is None:
            logger.warning("%s has no strobed event channel", self.path.name)
            return np.empty(0), np.empty(0, dtype=np.int64)

        timestamps, _, labels = self._rawio.get_event_timestamps(
            block_index=0, seg_index=0, event_channel_index=ev_index
        )
        times = self._rawio.rescale_event_timestamp(
            timestamps, dtype="float64", event_channel_index=ev_index
        )
        return np.asarray(times), np.asarray(labels).astype(np.int64)

    def read_start_stop_markers(self, kind: str) -> np.ndarray:
        if kind not in _MARKER_CHANNELS:
            raise ValueError("kind must be one of: start, stop")

        ev_index = self._event_index(_MARKER_CHANNELS[kind])
        if ev_index is None:
            return np.empty(0)

        timestamps, _, _ = self._rawio.get_event_timestamps(
            block_index=0, seg_index=0, event_channel_index=ev_index
        )
        return np.asarray(
            self._rawio.rescale_event_timestamp(
                timestamps, dtype="float64", event_channel_index=ev_index
            )
        )

    def file_info(self) -> dict[str, Any] | None:
        annotations = self._rawio.raw_annotations["blocks"][0]
        return {
            "rec_datetime": str(annotations.get("rec_datetime")),
            "plexon_version": int(annotations.get("plexon_version", 0)),
            "global_sampling_rate": self._global_rate,
        }
