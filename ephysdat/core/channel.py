# ephysdat/core/channel.py

from __future__ import annotations

from dataclasses import dataclass, field

from .timeseries import TimeSeries
from .exceptions import InvalidChannel
from .metadata import ChannelMeta

import numpy as np


@dataclass(slots=True, frozen=True)
class Channel:
    """An auxiliary channel (analog input or LFP): name + TimeSeries + metadata."""
    name: str
    series: TimeSeries
    meta: ChannelMeta = field(default_factory=ChannelMeta)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidChannel("Channel.name must be a non-empty string.")

        if not isinstance(self.series, TimeSeries):
            raise InvalidChannel("Channel.series must be a TimeSeries instance.")

        if not isinstance(self.meta, ChannelMeta):
            raise InvalidChannel("Channel.meta must be a ChannelMeta instance.")

        # unit recorded on the samples wins when the metadata has none
        if self.meta.unit is None and self.series.unit is not None:
            meta = self.meta.copy()
            object.__setattr__(meta, "unit", self.series.unit)
            object.__setattr__(self, "meta", meta)

    @property
    def time(self) -> np.ndarray:
        return self.series.time

    @property
    def values(self) -> np.ndarray:
        return self.series.values

    @property
    def unit(self) -> str | None:
        return self.meta.unit

    @property
    def n(self) -> int:
        return self.series.n
