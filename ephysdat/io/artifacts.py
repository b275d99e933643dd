"""Persist everything a conversion run produces besides the .dat file.

Files written to the output folder:
- convert_info.json      run metadata (provenance, channel mapping, options)
- samps_to_secs_map.npy  primary time map, one float64 per retained sample
- strobed_events.npz     timestamps, values, start, stop
- ai_channels.npz        time, names, values (rows = channels)
- fp_channels.npz        same layout, LFP channels

Each file is an independent write: if one fails, the files written
before it remain on disk.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Mapping

import numpy as np

from ephysdat.core import (
    AuxiliaryStream,
    CoreError,
    EventLog,
    RunMetadata,
)


logger = logging.getLogger(__name__)

METADATA_FILE = "convert_info.json"
TIME_MAP_FILE = "samps_to_secs_map.npy"
EVENTS_FILE = "strobed_events.npz"
STREAM_FILES = {
    "ai": "ai_channels.npz",
    "lfp": "fp_channels.npz",
}


@dataclass(frozen=True, slots=True)
class ArtifactBundle:
    """
    Everything persisted next to the .dat file for one run.

    - dict-like access over auxiliary streams: bundle["ai"]
    """
    metadata: RunMetadata
    time_map: np.ndarray = field(repr=False)
    events: EventLog = field(repr=False)
    streams: Mapping[str, AuxiliaryStream] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.metadata, RunMetadata):
            raise CoreError("ArtifactBundle.metadata must be a RunMetadata instance.")
        if not isinstance(self.events, EventLog):
            raise CoreError("ArtifactBundle.events must be an EventLog instance.")

        normalized: dict[str, AuxiliaryStream] = {}
        for key, stream in self.streams.items():
            if key not in STREAM_FILES:
                raise CoreError(f"Unknown stream '{key}' (expected one of {sorted(STREAM_FILES)}).")
            if not isinstance(stream, AuxiliaryStream):
                raise CoreError("ArtifactBundle.streams values must be AuxiliaryStream instances.")
            normalized[key] = stream

        object.__setattr__(self, "time_map", np.asarray(self.time_map, dtype=np.float64))
        object.__setattr__(self, "streams", normalized)

    # ---- dict-like API ----
    def __len__(self) -> int:
        return len(self.streams)

    def __iter__(self) -> Iterator[str]:
        return iter(self.streams)

    def __contains__(self, name: object) -> bool:
        return name in self.streams

    def __getitem__(self, name: str) -> AuxiliaryStream:
        return self.streams[name]

    def keys(self) -> Iterable[str]:
        return self.streams.keys()


def save_stream(path: str | Path, stream: AuxiliaryStream) -> Path:
    path = Path(path)
    with open(path, "wb") as fh:
        np.savez(
            fh,
            time=stream.time,
            names=np.array(list(stream.keys()), dtype=str),
            values=stream.values_matrix(),
        )
    return path


def save_artifacts(output_folder: str | Path, bundle: ArtifactBundle) -> dict[str, Path]:
    """Write the bundle into `output_folder`; returns the written paths by kind."""
    folder = Path(output_folder)
    folder.mkdir(parents=True, exist_ok=True)
    written: dict[str, Path] = {}

    meta_path = folder / METADATA_FILE
    meta_path.write_text(json.dumps(bundle.metadata.to_dict(), indent=2))
    written["metadata"] = meta_path

    time_path = folder / TIME_MAP_FILE
    np.save(time_path, bundle.time_map)
    written["time_map"] = time_path

    events_path = folder / EVENTS_FILE
    with open(events_path, "wb") as fh:
        np.savez(
            fh,
            timestamps=bundle.events.timestamps,
            values=bundle.events.values,
            start=bundle.events.start,
            stop=bundle.events.stop,
        )
    written["events"] = events_path

    for key, stream in bundle.streams.items():
        written[key] = save_stream(folder / STREAM_FILES[key], stream)

    for kind, path in written.items():
        logger.debug("saved %s to %s", kind, path)
    logger.info("saved %d artifact files to %s", len(written), folder)
    return written


def load_metadata(output_folder: str | Path) -> RunMetadata:
    data = json.loads((Path(output_folder) / METADATA_FILE).read_text())
    return RunMetadata.from_dict(data)


def load_time_map(output_folder: str | Path) -> np.ndarray:
    return np.load(Path(output_folder) / TIME_MAP_FILE)


def load_event_log(output_folder: str | Path) -> EventLog:
    with np.load(Path(output_folder) / EVENTS_FILE) as data:
        return EventLog(
            timestamps=data["timestamps"],
            values=data["values"],
            start=data["start"],
            stop=data["stop"],
        )


def load_stream(output_folder: str | Path, key: str) -> AuxiliaryStream:
    if key not in STREAM_FILES:
        raise CoreError(f"Unknown stream '{key}' (expected one of {sorted(STREAM_FILES)}).")
    with np.load(Path(output_folder) / STREAM_FILES[key]) as data:
        names = [str(n) for n in data["names"]]
        values = data["values"]
        return AuxiliaryStream.from_arrays(
            key,
            data["time"],
            {n: values[i] for i, n in enumerate(names)},
        )
