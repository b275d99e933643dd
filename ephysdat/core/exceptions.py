# ephysdat/core/exceptions.py
from __future__ import annotations


class CoreError(Exception):
    """Base error for all ephysdat exceptions."""


# ---- Validation / construction errors ----
class InvalidTimeSeries(CoreError):
    """Raised when a TimeSeries is constructed with invalid inputs."""


class InvalidChannel(CoreError):
    """Raised when a Channel / ChannelMeta is constructed with invalid inputs."""


class InvalidStream(CoreError):
    """Raised when an AuxiliaryStream is constructed with invalid inputs."""


class InvalidEventLog(CoreError):
    """Raised when an EventLog is constructed with invalid inputs."""


class InvalidRecording(CoreError):
    """Raised when a sample matrix and its time map do not line up."""


class InvalidOptions(CoreError):
    """Raised when conversion options are rejected at the boundary."""


class MalformedFragmentSequence(CoreError):
    """Raised when fragment metadata has a non-positive count or rate, or fragments are out of order."""


# ---- Lookup errors (also behave like KeyError for dict-like APIs) ----
class ChannelNotFound(CoreError, KeyError):
    """Raised when a requested channel is not present."""


# ---- Pipeline errors ----
class UnsupportedFormat(CoreError):
    """Raised when no decoder is registered for a source file type."""


class NoChannelsSelected(CoreError):
    """Raised when channel selection yields an empty set."""


class ChannelReadFailure(CoreError):
    """Raised when the decoder returns a degenerate read for a channel."""

    def __init__(self, channel, reason: str = "degenerate read") -> None:
        self.channel = channel
        self.reason = reason
        super().__init__(f"Reading channel {channel!r} failed: {reason}")


class MismatchedChannelLength(CoreError):
    """Raised when a channel's sample count differs from the first channel's."""

    def __init__(self, channel, expected: int, actual: int) -> None:
        self.channel = channel
        self.expected = int(expected)
        self.actual = int(actual)
        super().__init__(
            f"Channel {channel!r} has {self.actual} samples, expected {self.expected}"
        )
