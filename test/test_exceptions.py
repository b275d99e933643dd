# test/test_exceptions.py
import pytest

from ephysdat.core import (
    CoreError,
    InvalidTimeSeries,
    InvalidChannel,
    InvalidStream,
    InvalidEventLog,
    InvalidRecording,
    InvalidOptions,
    MalformedFragmentSequence,
    ChannelNotFound,
    UnsupportedFormat,
    NoChannelsSelected,
    ChannelReadFailure,
    MismatchedChannelLength,
)


def test_exception_inheritance_validation():
    for exc in (
        InvalidTimeSeries,
        InvalidChannel,
        InvalidStream,
        InvalidEventLog,
        InvalidRecording,
        InvalidOptions,
        MalformedFragmentSequence,
    ):
        assert issubclass(exc, CoreError)


def test_exception_inheritance_pipeline():
    for exc in (UnsupportedFormat, NoChannelsSelected, ChannelReadFailure, MismatchedChannelLength):
        assert issubclass(exc, CoreError)


def test_exception_inheritance_lookup_keyerror():
    assert issubclass(ChannelNotFound, KeyError)
    assert issubclass(ChannelNotFound, CoreError)


def test_lookup_errors_can_be_raised_and_caught_as_keyerror():
    with pytest.raises(KeyError):
        raise ChannelNotFound("FP29")


def test_channel_read_failure_carries_channel():
    e = ChannelReadFailure(65)
    assert e.channel == 65
    assert e.reason == "degenerate read"
    assert "65" in str(e)

    e = ChannelReadFailure("FP29", "channel not present in source")
    assert "not present" in str(e)


def test_mismatched_length_carries_counts():
    e = MismatchedChannelLength(66, expected=100, actual=98)
    assert (e.channel, e.expected, e.actual) == (66, 100, 98)
    assert "98" in str(e) and "100" in str(e)
