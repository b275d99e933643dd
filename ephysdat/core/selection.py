# ephysdat/core/selection.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from .exceptions import NoChannelsSelected, InvalidChannel
from .options import DEFAULT_SPIKE_CHANNEL_MARKERS


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ChannelInfo:
    """One continuous acquisition channel as listed by a decoder."""
    number: int
    name: str
    sample_count: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            raise InvalidChannel("ChannelInfo.name must be a string.")
        object.__setattr__(self, "number", int(self.number))
        if self.sample_count is not None:
            object.__setattr__(self, "sample_count", int(self.sample_count))


@dataclass(frozen=True, slots=True)
class ChannelSelection:
    """
    Selected channels in selection order.

    channel_numbers[i] is the vendor channel number that becomes row i of
    the sample matrix; channel_names[i] is its name when the decoder lists it.
    """
    channel_numbers: tuple[int, ...]
    channel_names: tuple[str | None, ...]
    mode: str

    def __len__(self) -> int:
        return len(self.channel_numbers)

    def __iter__(self):
        return iter(self.channel_numbers)

    def mapping(self) -> dict[int, int]:
        """Matrix row -> vendor channel number."""
        return dict(enumerate(self.channel_numbers))


def matches_spike_marker(name: str, markers: Iterable[str] = DEFAULT_SPIKE_CHANNEL_MARKERS) -> bool:
    # case-sensitive substring containment
    return any(marker in name for marker in markers)


def select_channels(
    channels: Sequence[ChannelInfo],
    sample_counts: Mapping[int, int],
    specific_channels: Sequence[int] | None = None,
    markers: Iterable[str] = DEFAULT_SPIKE_CHANNEL_MARKERS,
) -> ChannelSelection:
    """Decide which acquisition channels make up the sample matrix.

    Explicit mode (``specific_channels`` given) takes the channel numbers
    verbatim. Heuristic mode keeps, in listing order, the channels whose
    name contains one of ``markers`` AND whose sample count is nonzero.

    Raises
    ------
    NoChannelsSelected
        If the resulting selection is empty.
    """
    names_by_number = {c.number: c.name for c in channels}

    if specific_channels is not None:
        numbers = tuple(int(c) for c in specific_channels)
        mode = "explicit"
    else:
        markers = tuple(markers)
        numbers = tuple(
            c.number
            for c in channels
            if matches_spike_marker(c.name, markers) and sample_counts.get(c.number, 0) > 0
        )
        mode = "heuristic"

    if not numbers:
        raise NoChannelsSelected(
            f"No channels selected ({mode} mode, {len(channels)} channels listed)."
        )

    selection = ChannelSelection(
        channel_numbers=numbers,
        channel_names=tuple(names_by_number.get(n) for n in numbers),
        mode=mode,
    )
    logger.info("Selected %d channels (%s): %s", len(selection), mode, list(numbers))
    return selection
