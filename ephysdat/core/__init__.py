"""
Core domain objects for ephysdat.

This module defines the format-agnostic data model and transforms:
- Fragment / build_time_map: fragment list -> dense per-sample time map
- SampleRecording: int16 sample matrix + its aligned time map
- TimeSeries / Channel / AuxiliaryStream: analog-input and LFP data
- EventLog: strobed events and start/stop markers
- ConversionOptions / RunMetadata: run configuration and provenance
- select_channels: choosing the channels that form the sample matrix
- common_average_reference / remove_artifacts: post-processing

The core layer is independent from vendor decoders and storage.
"""

from .fragment import Fragment, build_time_map, fragments_from_arrays, total_samples
from .timeseries import TimeSeries
from .channel import Channel
from .stream import AuxiliaryStream
from .recording import SampleRecording, SAMPLE_DTYPE
from .events import EventLog
from .metadata import ChannelMeta, RunMetadata
from .options import ConversionOptions
from .selection import ChannelInfo, ChannelSelection, select_channels
from .postprocess import (
    ArtifactReport,
    common_average_reference,
    remove_artifacts,
)
from .exceptions import (
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


__all__ = [
    # timeline
    "Fragment",
    "build_time_map",
    "fragments_from_arrays",
    "total_samples",

    # domain objects
    "TimeSeries",
    "Channel",
    "AuxiliaryStream",
    "SampleRecording",
    "SAMPLE_DTYPE",
    "EventLog",

    # configuration / provenance
    "ChannelMeta",
    "RunMetadata",
    "ConversionOptions",

    # selection
    "ChannelInfo",
    "ChannelSelection",
    "select_channels",

    # post-processing
    "ArtifactReport",
    "common_average_reference",
    "remove_artifacts",

    # exceptions
    "CoreError",
    "InvalidTimeSeries",
    "InvalidChannel",
    "InvalidStream",
    "InvalidEventLog",
    "InvalidRecording",
    "InvalidOptions",
    "MalformedFragmentSequence",
    "ChannelNotFound",
    "UnsupportedFormat",
    "NoChannelsSelected",
    "ChannelReadFailure",
    "MismatchedChannelLength",
]
