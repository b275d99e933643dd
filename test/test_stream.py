# test/test_stream.py
import numpy as np
import pytest

from ephysdat.core import (
    AuxiliaryStream,
    Channel,
    ChannelNotFound,
    InvalidStream,
    TimeSeries,
)


def _ch(name, t, v, unit=None):
    return Channel(name=name, series=TimeSeries(time=np.asarray(t), values=np.asarray(v), unit=unit))


def _stream():
    t = np.array([0.0, 0.01, 0.02, 5.0])
    return AuxiliaryStream.from_arrays(
        "ai",
        t,
        {"FP29": np.array([1, 2, 3, 4]), "FP30": np.array([5, 6, 7, 8])},
        sources={"FP29": "plx:FP29"},
    )


def test_from_arrays_shares_time_map():
    s = _stream()
    assert len(s) == 2
    assert s.n_samples == 4
    assert s.time[0] == 0.0 and s.time[-1] == 5.0
    assert np.array_equal(s["FP29"].time, s.time)
    assert s["FP29"].meta.source == "plx:FP29"
    assert s["FP30"].meta.source is None


def test_dict_like_api():
    s = _stream()
    assert list(s) == ["FP29", "FP30"]
    assert "FP30" in s
    assert "FP31" not in s
    assert list(s.keys()) == ["FP29", "FP30"]


def test_getitem_missing_raises_channel_not_found():
    s = _stream()
    with pytest.raises(ChannelNotFound):
        s["FP31"]
    with pytest.raises(KeyError):
        s["FP31"]


def test_values_matrix_rows_follow_channel_order():
    m = _stream().values_matrix()
    assert m.shape == (2, 4)
    assert np.array_equal(m[1], [5, 6, 7, 8])


def test_values_matrix_of_empty_stream():
    s = AuxiliaryStream(name="lfp", time=np.array([0.0, 1.0]))
    assert s.values_matrix().shape == (0, 2)


def test_rejects_key_name_mismatch():
    t = [0.0, 1.0]
    with pytest.raises(InvalidStream):
        AuxiliaryStream(name="ai", time=t, channels={"FP29": _ch("FP30", t, [1, 2])})


def test_rejects_channel_longer_than_time_map():
    with pytest.raises(InvalidStream):
        AuxiliaryStream(
            name="ai",
            time=[0.0, 1.0],
            channels={"FP29": _ch("FP29", [0.0, 1.0, 2.0], [1, 2, 3])},
        )


def test_rejects_blank_name():
    with pytest.raises(InvalidStream):
        AuxiliaryStream(name=" ", time=[])


