# test/conftest.py
from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import pytest

from ephysdat.core import ChannelInfo, ChannelNotFound, Fragment
from ephysdat.io.decoder import RawChannelData


@dataclass
class FakeChannel:
    number: int
    name: str
    values: np.ndarray
    sample_rate: float
    fragments: list[Fragment] = field(default_factory=list)


class FakeDecoder:
    """In-memory decoder following the Decoder protocol."""

    file_type = "fake"
    default_ai_channels = ("AI01", "AI02")
    default_lfp_channels = ("FP01", "FP02")

    def __init__(self, channels, events=None, start=(), stop=()):
        self._channels = {c.number: c for c in channels}
        self._events = events if events is not None else (np.empty(0), np.empty(0, dtype=np.int64))
        self._markers = {"start": np.asarray(start, dtype=float), "stop": np.asarray(stop, dtype=float)}
        self.reads: list = []

    def list_continuous_channels(self):
        return [ChannelInfo(c.number, c.name, c.values.size) for c in self._channels.values()]

    def channel_sample_counts(self):
        return {c.number: int(c.values.size) for c in self._channels.values()}

    def read_channel_samples(self, channel):
        self.reads.append(channel)
        for c in self._channels.values():
            if c.number == channel or c.name == channel:
                return RawChannelData(values=c.values, sample_rate=c.sample_rate, fragments=c.fragments)
        raise ChannelNotFound(channel)

    def read_digital_events(self):
        return self._events

    def read_start_stop_markers(self, kind):
        return self._markers[kind]

    def file_info(self):
        return {"source": "memory"}


def make_channel(number, name, values, rate=1000.0, starts=(0.0,), counts=None):
    values = np.asarray(values)
    if counts is None:
        counts = (values.size,)
    fragments = [Fragment(s, c, rate) for s, c in zip(starts, counts) if c > 0]
    return FakeChannel(number=number, name=name, values=values, sample_rate=rate, fragments=fragments)


def make_recording_decoder(n_spike=3, n_samples=20, seed=0):
    """Spike channels SPKC01.. with two fragments, plus AI, FP and one empty slot."""
    rng = np.random.default_rng(seed)
    first = n_samples // 2
    counts = (first, n_samples - first)
    starts = (0.0, 5.0)

    channels = []
    for i in range(n_spike):
        channels.append(
            make_channel(
                65 + i,
                f"SPKC{i + 1:02d}",
                rng.integers(-50, 50, size=n_samples).astype(np.int16),
                rate=1000.0,
                starts=starts,
                counts=counts,
            )
        )
    # spike-named slot without samples
    channels.append(make_channel(65 + n_spike, f"SPKC{n_spike + 1:02d}", np.empty(0, dtype=np.int16)))

    for i, name in enumerate(("AI01", "AI02")):
        channels.append(make_channel(200 + i, name, np.arange(6, dtype=np.int16) + i, rate=100.0,
                                     starts=(0.0, 5.0), counts=(4, 2)))
    for i, name in enumerate(("FP01", "FP02")):
        channels.append(make_channel(i + 1, name, np.arange(4, dtype=np.int16) * (i + 1), rate=50.0))

    events = (np.array([0.5, 1.5, 5.2]), np.array([10, 20, 30]))
    return FakeDecoder(channels, events=events, start=[0.0], stop=[5.5])


@pytest.fixture
def decoder():
    return make_recording_decoder()
