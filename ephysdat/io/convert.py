from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import numpy as np

from ephysdat.core import (
    ArtifactReport,
    AuxiliaryStream,
    ConversionOptions,
    EventLog,
    RunMetadata,
    SampleRecording,
    common_average_reference,
    remove_artifacts,
    select_channels,
)
from ephysdat.io.artifacts import ArtifactBundle, save_artifacts
from ephysdat.io.assemble import (
    ProgressCallback,
    assemble_samples,
    read_auxiliary_stream,
    read_event_log,
)
from ephysdat.io.dat_writer import dat_path_for, write_dat
from ephysdat.io.decoder import Decoder, open_decoder


logger = logging.getLogger(__name__)


@dataclass
class ConversionResult:
    recording: SampleRecording = field(repr=False)
    dat_path: Path
    metadata: RunMetadata = field(repr=False)
    events: EventLog = field(repr=False)
    streams: dict[str, AuxiliaryStream] = field(default_factory=dict, repr=False)
    artifact_report: ArtifactReport | None = field(default=None, repr=False)
    artifact_paths: dict[str, Path] = field(default_factory=dict, repr=False)

    @property
    def samples(self) -> np.ndarray:
        return self.recording.samples

    @property
    def time_map(self) -> np.ndarray:
        return self.recording.time


def _coerce_options(options: ConversionOptions | Mapping[str, Any] | None) -> ConversionOptions:
    if options is None:
        return ConversionOptions()
    if isinstance(options, ConversionOptions):
        return options
    return ConversionOptions.from_mapping(options)


def postprocess(
    recording: SampleRecording,
    options: ConversionOptions,
) -> tuple[SampleRecording, ArtifactReport | None]:
    """Common-average referencing, then artifact removal, each if enabled."""
    if options.common_average_referencing:
        logger.info("Performing common average subtraction...")
        recording = common_average_reference(recording)

    report = None
    if options.remove_artifacts:
        logger.info("Removing artifacts...")
        recording, report = remove_artifacts(recording, options.artifact_sd_threshold)

    return recording, report


def run_conversion(
    raw_path: str | Path,
    options: ConversionOptions | Mapping[str, Any] | None = None,
    *,
    decoder: Decoder | None = None,
    on_progress: ProgressCallback | None = None,
) -> ConversionResult:
    """Convert one raw recording into a .dat file plus its artifact files.

    Parameters
    ----------
    raw_path:
        Source recording. Its extension picks the decoder unless `decoder`
        is given.
    options:
        ConversionOptions, or a plain mapping of option names to values.
    decoder:
        Decoder bound to `raw_path`; skips extension dispatch.
    on_progress:
        Called with a ProgressEvent after every channel read.
    """
    raw_path = Path(raw_path)
    options = _coerce_options(options)
    if decoder is None:
        decoder = open_decoder(raw_path)

    dataset_name = raw_path.stem
    t_start = time.perf_counter()
    logger.info("Performing conversion of %s", dataset_name)

    if options.plot_probe_voltage or options.remove_artifacts_visualize:
        logger.warning(
            "Plotting options are accepted but no figures are produced; "
            "the artifact report carries the data to plot."
        )

    selection = select_channels(
        decoder.list_continuous_channels(),
        decoder.channel_sample_counts(),
        options.specific_channels,
        options.spike_channel_markers,
    )

    output_folder = options.resolve_output_folder(raw_path)
    output_folder.mkdir(parents=True, exist_ok=True)

    recording = assemble_samples(decoder, selection, on_progress).to_recording()
    events = read_event_log(decoder)

    streams: dict[str, AuxiliaryStream] = {}
    if options.extract_ai:
        streams["ai"] = read_auxiliary_stream(
            decoder, "ai", options.ai_channels or decoder.default_ai_channels
        )
    if options.extract_lfp:
        streams["lfp"] = read_auxiliary_stream(
            decoder, "lfp", options.lfp_channels or decoder.default_lfp_channels
        )

    recording, report = postprocess(recording, options)

    dat_path = write_dat(dat_path_for(output_folder, dataset_name), recording.samples)

    metadata = RunMetadata.create(
        raw_path,
        decoder.file_type,
        selection.channel_numbers,
        selection.channel_names,
        options.to_dict(),
        decoder_index=decoder.file_info(),
        postprocessing={
            "common_average_referencing": options.common_average_referencing,
            "artifacts": None if report is None else {
                "n_removed": report.n_removed,
                "n_total": report.n_total,
                "percent_removed": report.percent_removed,
                "threshold": report.threshold,
            },
        },
    )
    bundle = ArtifactBundle(
        metadata=metadata,
        time_map=recording.time,
        events=events,
        streams=streams,
    )
    paths = save_artifacts(output_folder, bundle)

    logger.info("%0.1fs: CONVERSION COMPLETE", time.perf_counter() - t_start)
    return ConversionResult(
        recording=recording,
        dat_path=dat_path,
        metadata=metadata,
        events=events,
        streams=streams,
        artifact_report=report,
        artifact_paths=paths,
    )


def convert_raw_to_dat(
    raw_path: str | Path,
    options: ConversionOptions | Mapping[str, Any] | None = None,
    *,
    decoder: Decoder | None = None,
    on_progress: ProgressCallback | None = None,
) -> tuple[np.ndarray, Path]:
    """Run a conversion and return (sample matrix, .dat path)."""
    result = run_conversion(raw_path, options, decoder=decoder, on_progress=on_progress)
    return result.samples, result.dat_path
