# ephysdat/core/metadata.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Sequence

from .exceptions import InvalidChannel, CoreError


RUN_TIMESTAMP_FORMAT = "%Y%m%dT%H%M"


@dataclass(frozen=True, slots=True)
class ChannelMeta:
    """
    Metadata attached to an auxiliary Channel.

    - unit: physical unit of the values, if known
    - description: human-friendly description
    - source: origin inside the raw file (e.g. "plx:FP29")
    - attrs: arbitrary additional fields
    """
    unit: str | None = None
    description: str | None = None
    source: str | None = None
    attrs: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if self.attrs is None:
            object.__setattr__(self, "attrs", {})
        elif not isinstance(self.attrs, dict):
            raise InvalidChannel("ChannelMeta.attrs must be a dict.")

    def copy(self) -> "ChannelMeta":
        return ChannelMeta(
            unit=self.unit,
            description=self.description,
            source=self.source,
            attrs=self.attrs.copy(),
        )


@dataclass(frozen=True, slots=True)
class RunMetadata:
    """
    Provenance of one conversion run. Created once, written once.
    """
    dataset_name: str
    raw_full_path: str
    raw_file_type: str
    channel_numbers: tuple[int, ...]
    channel_names: tuple[str | None, ...]
    options: dict[str, Any] = field(default_factory=dict, repr=False)
    created: str = ""
    decoder_index: dict[str, Any] | None = field(default=None, repr=False)
    postprocessing: dict[str, Any] | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.dataset_name, str) or not self.dataset_name.strip():
            raise CoreError("RunMetadata.dataset_name must be a non-empty string.")
        object.__setattr__(self, "channel_numbers", tuple(int(c) for c in self.channel_numbers))
        object.__setattr__(self, "channel_names", tuple(self.channel_names))
        if len(self.channel_names) != len(self.channel_numbers):
            raise CoreError("RunMetadata.channel_names must pair up with channel_numbers.")
        if not isinstance(self.options, dict):
            raise CoreError("RunMetadata.options must be a dict.")

    @classmethod
    def create(
        cls,
        raw_path: str | Path,
        raw_file_type: str,
        channel_numbers: Sequence[int],
        channel_names: Sequence[str | None],
        options: dict[str, Any],
        decoder_index: dict[str, Any] | None = None,
        postprocessing: dict[str, Any] | None = None,
        now: datetime | None = None,
    ) -> "RunMetadata":
        raw_path = Path(raw_path)
        stamp = (now or datetime.now()).strftime(RUN_TIMESTAMP_FORMAT)
        return cls(
            dataset_name=raw_path.stem,
            raw_full_path=str(raw_path),
            raw_file_type=raw_file_type,
            channel_numbers=tuple(channel_numbers),
            channel_names=tuple(channel_names),
            options=dict(options),
            created=stamp,
            decoder_index=decoder_index,
            postprocessing=postprocessing,
        )

    @property
    def raw_folder(self) -> str:
        return str(Path(self.raw_full_path).parent)

    @property
    def raw_file(self) -> str:
        return Path(self.raw_full_path).name

    def to_dict(self) -> dict[str, Any]:
        return {
            "dataset_name": self.dataset_name,
            "raw_folder": self.raw_folder,
            "raw_file": self.raw_file,
            "raw_full_path": self.raw_full_path,
            "raw_file_type": self.raw_file_type,
            "channel_numbers": list(self.channel_numbers),
            "channel_names": list(self.channel_names),
            "options": dict(self.options),
            "created": self.created,
            "decoder_index": self.decoder_index,
            "postprocessing": self.postprocessing,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RunMetadata":
        return cls(
            dataset_name=data["dataset_name"],
            raw_full_path=data["raw_full_path"],
            raw_file_type=data["raw_file_type"],
            channel_numbers=tuple(data.get("channel_numbers", ())),
            channel_names=tuple(data.get("channel_names", ())),
            options=dict(data.get("options", {})),
            created=data.get("created", ""),
            decoder_index=data.get("decoder_index"),
            postprocessing=data.get("postprocessing"),
        )
