"""
I/O layer for ephysdat: vendor decoders, assembly, and on-disk artifacts.

Vendor SDKs are only imported when a decoder for their format is opened.
"""

from .decoder import Decoder, RawChannelData, open_decoder, register_decoder, supported_extensions
from .assemble import ProgressEvent, assemble_samples, read_auxiliary_stream, read_event_log
from .dat_writer import read_dat, write_dat
from .artifacts import (
    ArtifactBundle,
    save_artifacts,
    load_event_log,
    load_metadata,
    load_stream,
    load_time_map,
)
from .convert import ConversionResult, convert_raw_to_dat, run_conversion


__all__ = [
    # decoders
    "Decoder",
    "RawChannelData",
    "open_decoder",
    "register_decoder",
    "supported_extensions",

    # assembly
    "ProgressEvent",
    "assemble_samples",
    "read_auxiliary_stream",
    "read_event_log",

    # persistence
    "read_dat",
    "write_dat",
    "ArtifactBundle",
    "save_artifacts",
    "load_event_log",
    "load_metadata",
    "load_stream",
    "load_time_map",

    # entry points
    "ConversionResult",
    "convert_raw_to_dat",
    "run_conversion",
]
