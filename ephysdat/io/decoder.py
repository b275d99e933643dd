from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Protocol

import numpy as np

from ephysdat.core import ChannelInfo, Fragment, UnsupportedFormat, total_samples


@dataclass
class RawChannelData:
    """
    One channel as returned by a decoder: its samples, the ADC sampling
    rate and the fragments the samples were recorded in.

    ``values.size`` equals the summed fragment sample counts.
    """

    values: np.ndarray = field(repr=False)
    sample_rate: float
    fragments: list[Fragment] = field(default_factory=list, repr=False)

    @property
    def n_samples(self) -> int:
        return int(np.asarray(self.values).size)

    @property
    def fragment_samples(self) -> int:
        return total_samples(self.fragments)


class Decoder(Protocol):
    """Protocol for vendor file decoders.

    A decoder is bound to one raw file. Channel arguments accept either a
    vendor channel number or a channel name.
    """

    file_type: str
    default_ai_channels: tuple[str, ...]
    default_lfp_channels: tuple[str, ...]

    def list_continuous_channels(self) -> List[ChannelInfo]:
        ...

    def channel_sample_counts(self) -> dict[int, int]:
        ...

    def read_channel_samples(self, channel: int | str) -> RawChannelData:
        ...

    def read_digital_events(self) -> tuple[np.ndarray, np.ndarray]:
        """Strobed events as (timestamps in seconds, integer values)."""
        ...

    def read_start_stop_markers(self, kind: str) -> np.ndarray:
        """Timestamps of recording start (kind="start") or stop (kind="stop") markers."""
        ...

    def file_info(self) -> dict[str, Any] | None:
        ...


DecoderFactory = Callable[[str], Decoder]


def _open_plexon(path: str) -> Decoder:
    from ephysdat.io.plexon_reader import PlexonDecoder

    return PlexonDecoder(path)


def _open_plexon2(path: str) -> Decoder:
    from ephysdat.io.plexon2_reader import Plexon2Decoder

    return Plexon2Decoder(path)


_DECODERS: dict[str, DecoderFactory] = {
    ".plx": _open_plexon,
    ".pl2": _open_plexon2,
}


def register_decoder(extension: str, factory: DecoderFactory, *, overwrite: bool = False) -> None:
    """Make `open_decoder` hand files ending in `extension` to `factory`."""
    ext = extension.lower()
    if not ext.startswith("."):
        ext = "." + ext
    if ext in _DECODERS and not overwrite:
        raise ValueError(f"A decoder is already registered for '{ext}' (overwrite=False).")
    _DECODERS[ext] = factory


def supported_extensions() -> list[str]:
    return sorted(_DECODERS)


def open_decoder(path: str | Path) -> Decoder:
    """Pick the decoder variant for `path` from its extension.

    Raises
    ------
    UnsupportedFormat
        If no decoder handles the extension. Nothing is read or written.
    """
    ext = Path(path).suffix.lower()
    try:
        factory = _DECODERS[ext]
    except KeyError as e:
        raise UnsupportedFormat(
            f"No decoder for '{ext or Path(path).name}' files "
            f"(supported: {', '.join(supported_extensions())})"
        ) from e
    return factory(str(path))
