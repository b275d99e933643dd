# ephysdat/core/stream.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Mapping

import numpy as np

from .exceptions import ChannelNotFound, InvalidStream
from .channel import Channel
from .metadata import ChannelMeta
from .timeseries import TimeSeries


@dataclass(frozen=True, slots=True)
class AuxiliaryStream:
    """
    A group of auxiliary channels (analog inputs, LFP) read from the same
    acquisition stream and sharing one reconstructed time map.

    The stream's time map is independent from the primary sample matrix:
    its sampling rate and fragmentation may differ.

    - dict-like access: stream["FP29"]
    - rows of values_matrix() follow channel insertion order
    """
    name: str
    time: np.ndarray = field(repr=False)
    channels: Mapping[str, Channel] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidStream("AuxiliaryStream.name must be a non-empty string.")
        if not isinstance(self.channels, Mapping):
            raise InvalidStream("AuxiliaryStream.channels must be a mapping (e.g., dict).")

        t = np.asarray(self.time, dtype=np.float64)
        if t.ndim != 1:
            raise InvalidStream(f"AuxiliaryStream.time must be 1D, got shape {t.shape}")

        normalized: dict[str, Channel] = {}
        for key, ch in self.channels.items():
            if not isinstance(ch, Channel):
                raise InvalidStream("AuxiliaryStream.channels values must be Channel instances.")
            if ch.name != key:
                raise InvalidStream(
                    f"Channel name mismatch: key '{key}' but Channel.name is '{ch.name}'."
                )
            if ch.n != t.size:
                raise InvalidStream(
                    f"Channel '{key}' has {ch.n} samples but the stream time map has {t.size}."
                )
            normalized[key] = ch

        object.__setattr__(self, "time", t)
        object.__setattr__(self, "channels", normalized)

    @classmethod
    def from_arrays(
        cls,
        name: str,
        time: np.ndarray,
        values: Mapping[str, np.ndarray],
        *,
        sources: Mapping[str, str] | None = None,
        unit: str | None = None,
    ) -> "AuxiliaryStream":
        """Build a stream whose channels all share `time`."""
        t = np.asarray(time, dtype=np.float64)
        sources = sources or {}
        channels = {}
        for ch_name, v in values.items():
            channels[ch_name] = Channel(
                name=ch_name,
                series=TimeSeries(time=t, values=v, unit=unit, name=ch_name),
                meta=ChannelMeta(unit=unit, source=sources.get(ch_name)),
            )
        return cls(name=name, time=t, channels=channels)

    # ---- dict-like API ----
    def __len__(self) -> int:
        return len(self.channels)

    def __iter__(self) -> Iterator[str]:
        return iter(self.channels)

    def __contains__(self, name: object) -> bool:
        return name in self.channels

    def __getitem__(self, name: str) -> Channel:
        try:
            return self.channels[name]
        except KeyError as e:
            raise ChannelNotFound(name) from e

    def keys(self) -> Iterable[str]:
        return self.channels.keys()

    @property
    def n_samples(self) -> int:
        return int(self.time.size)

    def values_matrix(self) -> np.ndarray:
        """Channel values stacked as rows, in channel order."""
        if not self.channels:
            return np.empty((0, self.n_samples))
        return np.vstack([ch.values for ch in self.channels.values()])
