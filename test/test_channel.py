# test/test_channel.py
import numpy as np
import pytest

from ephysdat.core.timeseries import TimeSeries
from ephysdat.core.channel import Channel
from ephysdat.core import ChannelMeta, InvalidChannel


def test_channel_basic_accessors():
    ts = TimeSeries(time=np.array([0.0, 1.0]), values=np.array([10.0, 20.0]), unit="mV")
    ch = Channel(name="FP29", series=ts)

    assert ch.name == "FP29"
    assert ch.n == 2
    assert np.array_equal(ch.time, [0.0, 1.0])
    assert ch.unit == "mV"
    assert np.allclose(ch.values, [10.0, 20.0])


def test_channel_rejects_empty_name():
    ts = TimeSeries(time=np.array([0.0]), values=np.array([1.0]))
    with pytest.raises(InvalidChannel):
        Channel(name="   ", series=ts)


def test_channel_rejects_raw_arrays_as_series():
    with pytest.raises(InvalidChannel):
        Channel(name="FP01", series=np.array([1.0, 2.0]))


def test_channel_unit_precedence_meta_over_series():
    ts = TimeSeries(time=np.array([0.0, 1.0]), values=np.array([1.0, 2.0]), unit="A")
    ch = Channel(
        name="x",
        series=ts,
        meta=ChannelMeta(unit="B", description="desc"),
    )
    assert ch.unit == "B"


def test_channel_inherits_unit_from_series_when_meta_unit_none():
    ts = TimeSeries(time=np.array([0.0, 1.0]), values=np.array([1.0, 2.0]), unit="uV")
    meta = ChannelMeta(unit=None, source="plx:FP01", attrs={"k": 1})
    ch = Channel(name="FP01", series=ts, meta=meta)

    assert ch.unit == "uV"
    assert ch.meta.source == "plx:FP01"
    assert ch.meta.attrs == {"k": 1}
    assert ch.meta.attrs is not meta.attrs  # copied in __post_init__


def test_channel_meta_rejects_non_dict_attrs():
    with pytest.raises(InvalidChannel):
        ChannelMeta(attrs=["not", "a", "dict"])


