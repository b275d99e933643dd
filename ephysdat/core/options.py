# ephysdat/core/options.py
from __future__ import annotations

from dataclasses import dataclass, fields
from numbers import Integral
from pathlib import Path
import re
from typing import Any, Mapping

from .exceptions import InvalidOptions


DEFAULT_OUTPUT_SUBFOLDER = "converted"
DEFAULT_SPIKE_CHANNEL_MARKERS = ("SPKC", "CSPK")

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

_BOOL_FIELDS = (
    "common_average_referencing",
    "remove_artifacts",
    "remove_artifacts_visualize",
    "plot_probe_voltage",
    "extract_lfp",
    "extract_ai",
)


def _snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def _as_name_tuple(value: Any, field_name: str) -> tuple[str, ...] | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = (value,)
    names = tuple(value)
    if not names or not all(isinstance(n, str) and n.strip() for n in names):
        raise InvalidOptions(f"{field_name} must be a non-empty sequence of non-empty strings.")
    return names


@dataclass(frozen=True, slots=True)
class ConversionOptions:
    """
    Everything a conversion run can be told to do, validated once.

    - output_folder: destination folder; None means "<raw folder>/converted"
    - specific_channels: explicit vendor channel numbers; None means heuristic selection
    - ai_channels / lfp_channels: None means the decoder's defaults
    """
    output_folder: Path | None = None
    common_average_referencing: bool = False
    remove_artifacts: bool = False
    remove_artifacts_visualize: bool = False
    specific_channels: tuple[int, ...] | None = None
    plot_probe_voltage: bool = False
    extract_lfp: bool = False
    extract_ai: bool = True
    spike_channel_markers: tuple[str, ...] = DEFAULT_SPIKE_CHANNEL_MARKERS
    ai_channels: tuple[str, ...] | None = None
    lfp_channels: tuple[str, ...] | None = None
    artifact_sd_threshold: float = 3.5

    def __post_init__(self) -> None:
        for name in _BOOL_FIELDS:
            if not isinstance(getattr(self, name), bool):
                raise InvalidOptions(f"{name} must be a bool.")

        if self.output_folder is not None:
            if not isinstance(self.output_folder, (str, Path)):
                raise InvalidOptions("output_folder must be a path.")
            object.__setattr__(self, "output_folder", Path(self.output_folder))

        # `False` is the legacy spelling of "no explicit channels"
        if self.specific_channels is False:
            object.__setattr__(self, "specific_channels", None)

        if self.specific_channels is not None:
            channels = (
                (self.specific_channels,)
                if isinstance(self.specific_channels, Integral)
                else tuple(self.specific_channels)
            )
            if not channels:
                raise InvalidOptions("specific_channels must not be empty; use None for heuristic selection.")
            if not all(isinstance(c, Integral) and not isinstance(c, bool) for c in channels):
                raise InvalidOptions("specific_channels must contain integer channel numbers.")
            channels = tuple(int(c) for c in channels)
            if len(set(channels)) != len(channels):
                raise InvalidOptions("specific_channels must not repeat a channel.")
            object.__setattr__(self, "specific_channels", channels)

        markers = _as_name_tuple(self.spike_channel_markers, "spike_channel_markers")
        if markers is None:
            raise InvalidOptions("spike_channel_markers must not be None.")
        object.__setattr__(self, "spike_channel_markers", markers)
        object.__setattr__(self, "ai_channels", _as_name_tuple(self.ai_channels, "ai_channels"))
        object.__setattr__(self, "lfp_channels", _as_name_tuple(self.lfp_channels, "lfp_channels"))

        try:
            threshold = float(self.artifact_sd_threshold)
        except (TypeError, ValueError) as e:
            raise InvalidOptions("artifact_sd_threshold must be a number.") from e
        if not threshold > 0:
            raise InvalidOptions("artifact_sd_threshold must be > 0.")
        object.__setattr__(self, "artifact_sd_threshold", threshold)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ConversionOptions":
        """Build options from a plain mapping, rejecting unknown keys.

        Legacy camelCase keys (``commonAverageReferencing``, ``specificChannels``,
        ...) are accepted and mapped onto the snake_case fields.
        """
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        unknown = []
        for key, value in data.items():
            name = _snake_case(key)
            if name not in known:
                unknown.append(key)
            elif name in kwargs:
                raise InvalidOptions(f"Option {name} given more than once (as {key!r}).")
            else:
                kwargs[name] = value
        if unknown:
            raise InvalidOptions(f"Unknown option(s): {', '.join(sorted(unknown))}")
        return cls(**kwargs)

    def resolve_output_folder(self, raw_path: str | Path) -> Path:
        if self.output_folder is not None:
            return self.output_folder
        return Path(raw_path).parent / DEFAULT_OUTPUT_SUBFOLDER

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Path):
                value = str(value)
            elif isinstance(value, tuple):
                value = list(value)
            out[f.name] = value
        return out

