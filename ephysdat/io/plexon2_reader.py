from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List

from neo.rawio import Plexon2RawIO  # vendor decoding for .pl2 files through Plexon's PL2 reader
import numpy as np

from ephysdat.core import ChannelInfo, ChannelNotFound, ChannelReadFailure, fragments_from_arrays
from ephysdat.io.decoder import RawChannelData
from ephysdat.io.plexon_reader import merge_contiguous_blocks


logger = logging.getLogger(__name__)

STROBED_EVENT_CHANNEL_NAME = "Strobed"


class Plexon2Decoder:
    """Decoder for Plexon ``.pl2`` files, backed by neo's Plexon2RawIO.

    neo downloads Plexon's PL2FileReader DLL on first use. Outside Windows
    the DLL runs under wine through ``zugbruecke`` (the ``pl2`` extra).

    PL2 analog channels carry no single vendor number, so channels are
    numbered by their 1-based position among the enabled analog channels.
    Samples and fragment boundaries both come from one call into the PL2
    reader; fragment timestamps share the event clock, which starts at the
    recording start time.

    Recording start/stop markers are the segment bounds neo derives from the
    file info block.
    """

    file_type = "pl2"
    # OmniPlex digital systems record analog inputs on dedicated channels
    default_ai_channels = ("AI01", "AI02", "AI03", "AI04")
    default_lfp_channels = tuple(f"FP{i:02d}" for i in range(1, 25))

    def __init__(self, path: str | Path, pl2_dll_file_path: str | Path | None = None):
        self.path = Path(path)
        self._rawio = Plexon2RawIO(filename=str(self.path), pl2_dll_file_path=pl2_dll_file_path)
        self._rawio.parse_header()

        header = self._rawio.header
        self._signal_channels = header["signal_channels"]
        self._event_channels = header["event_channels"]
        self._numbers = np.arange(1, len(self._signal_channels) + 1, dtype=np.int64)

        self._reader = self._rawio.pl2reader
        file_info = self._reader.pl2_file_info
        self._tick_rate = float(file_info.m_TimestampFrequency)
        self._start_ticks = int(file_info.m_StartRecordingTime)

        logger.debug(
            "Parsed %s: %d analog channels, %d event channels",
            self.path.name, self._numbers.size, len(self._event_channels),
        )

    def _header_index(self, channel: int | str) -> int:
        if isinstance(channel, str):
            matches = np.flatnonzero(self._signal_channels["name"] == channel)
        else:
            matches = np.flatnonzero(self._numbers == int(channel))
        if matches.size == 0:
            raise ChannelNotFound(channel)
        return int(matches[0])

    def _event_index(self, name: str) -> int | None:
        matches = np.flatnonzero(self._event_channels["name"] == name)
        return int(matches[0]) if matches.size else None

    def list_continuous_channels(self) -> List[ChannelInfo]:
        counts = self.channel_sample_counts()
        return [
            ChannelInfo(number=int(n), name=str(name), sample_count=counts[int(n)])
            for n, name in zip(self._numbers, self._signal_channels["name"])
        ]

    def channel_sample_counts(self) -> dict[int, int]:
        return {
            int(n): int(self._reader.pl2_get_analog_channel_info_by_name(str(name)).m_NumberOfValues)
            for n, name in zip(self._numbers, self._signal_channels["name"])
        }

    def read_channel_samples(self, channel: int | str) -> RawChannelData:
        idx = self._header_index(channel)
        name = str(self._signal_channels["name"][idx])

        data = self._reader.pl2_get_analog_channel_data_by_name(name)
        if data is None:
            raise ChannelReadFailure(channel, "PL2 reader returned no data")
        fragment_ticks, fragment_counts, values = data

        sample_rate = float(self._signal_channels["sampling_rate"][idx])
        # fragment arrays are sized to the channel's maximum fragment count;
        # unused slots have a zero count and are dropped by the merge
        ticks, counts = merge_contiguous_blocks(
            np.asarray(fragment_ticks, dtype=np.int64) + self._start_ticks,
            fragment_counts,
            self._tick_rate / sample_rate,
        )
        return RawChannelData(
            values=np.asarray(values),
            sample_rate=sample_rate,
            fragments=fragments_from_arrays(ticks / self._tick_rate, counts, sample_rate),
        )

    def read_digital_events(self) -> tuple[np.ndarray, np.ndarray]:
        ev_index = self._event_index(STROBED_EVENT_CHANNEL_NAME)
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
        if kind == "start":
            return np.array([self._rawio.segment_t_start(0, 0)], dtype=np.float64)
        if kind == "stop":
            return np.array([self._rawio.segment_t_stop(0, 0)], dtype=np.float64)
        raise ValueError("kind must be one of: start, stop")

    def file_info(self) -> dict[str, Any] | None:
        annotations = self._rawio.raw_annotations["blocks"][0]
        software = annotations.get("m_CreatorSoftwareName", b"")
        if isinstance(software, bytes):
            software = software.decode(errors="replace")
        return {
            "rec_datetime": str(annotations.get("m_CreatorDateTime")),
            "creator_software": software,
            "timestamp_frequency": self._tick_rate,
        }
