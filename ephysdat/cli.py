"""Command-line front end: ``ephysdat-convert RAW_PATH [options]``."""
from __future__ import annotations

import argparse
import logging
import sys

from tqdm import tqdm

from ephysdat.core import ConversionOptions, CoreError
from ephysdat.io.assemble import ProgressEvent
from ephysdat.io.convert import run_conversion


logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ephysdat-convert",
        description="Convert a raw ephys recording into a channel-major int16 .dat file.",
    )
    parser.add_argument("raw_path", help="raw recording file (.plx or .pl2)")
    parser.add_argument("--output-folder", default=None,
                        help="destination folder (default: 'converted' next to the raw file)")
    parser.add_argument("--car", action="store_true", dest="common_average_referencing",
                        help="subtract the cross-channel mean from every sample")
    parser.add_argument("--remove-artifacts", action="store_true",
                        help="drop samples whose median absolute value is an outlier")
    parser.add_argument("--artifact-sd-threshold", type=float, default=3.5)
    parser.add_argument("--channels", type=int, nargs="+", default=None, dest="specific_channels",
                        help="explicit vendor channel numbers (default: heuristic selection)")
    parser.add_argument("--extract-lfp", action="store_true")
    parser.add_argument("--no-ai", action="store_false", dest="extract_ai",
                        help="skip analog-input extraction")
    parser.add_argument("--plot-probe-voltage", action="store_true",
                        help="accepted for compatibility; no figures are drawn")
    parser.add_argument("--remove-artifacts-visualize", action="store_true",
                        help="accepted for compatibility; no figures are drawn")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


class _ProgressBar:
    """Feeds ProgressEvents into a tqdm bar created on the first event."""

    def __init__(self) -> None:
        self._bar: tqdm | None = None

    def __call__(self, event: ProgressEvent) -> None:
        if self._bar is None:
            self._bar = tqdm(total=event.n_channels, desc="Converting channels", unit="ch")
        self._bar.update(1)

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format=LOG_FORMAT)

    progress = _ProgressBar()
    try:
        options = ConversionOptions(
            output_folder=args.output_folder,
            common_average_referencing=args.common_average_referencing,
            remove_artifacts=args.remove_artifacts,
            artifact_sd_threshold=args.artifact_sd_threshold,
            specific_channels=args.specific_channels,
            extract_lfp=args.extract_lfp,
            extract_ai=args.extract_ai,
            plot_probe_voltage=args.plot_probe_voltage,
            remove_artifacts_visualize=args.remove_artifacts_visualize,
        )
        result = run_conversion(args.raw_path, options, on_progress=progress)
    except CoreError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 1
    finally:
        progress.close()

    print(result.dat_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
