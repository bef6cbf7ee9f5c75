"""Time ranges in which cultures were present at a place.

A texel maps raw attribute names ``<culture>;<year>`` to a byte giving
the culture's influence in that year.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Tuple

from voxelscape.spatial_attributes import normalize_culture_byte, split_attribute_name

logger = logging.getLogger(__name__)

INT32_MIN = -(2 ** 31)


@dataclass(frozen=True)
class CultureTimeRange:
    """Years between which a culture had influence."""

    begin: int = 0
    end: int = 0


@dataclass(frozen=True)
class CultureData:
    """A culture's name and the ranges of years it was present."""

    name: str
    time_ranges: Tuple[CultureTimeRange, ...] = ()


def build_time_ranges(per_year_values: Iterable[Tuple[int, float]]) -> Tuple[CultureTimeRange, ...]:
    """Turn ``(year, influence)`` samples into ranges of presence.

    A range begins at the year sampled before the first positive value
    (or the smallest 32-bit integer) and ends at the first year with no
    influence, or at the last sampled year.
    """
    values = sorted(per_year_values, key=lambda item: item[0])
    ranges: List[CultureTimeRange] = []
    previous_year = INT32_MIN
    in_range = False
    begin = 0
    last = len(values) - 1

    def close(end: int) -> None:
        ranges[-1] = CultureTimeRange(begin, end)

    for position, (year, value) in enumerate(values):
        if value > 0 and not in_range:
            in_range = True
            begin = previous_year
            ranges.append(CultureTimeRange(begin, 0))
        elif in_range and value == 0:
            in_range = False
            close(year)
        elif in_range and position == last:
            close(year)
        previous_year = year
    return tuple(ranges)


def combine_culture_data(texel: Mapping[str, int]) -> List[CultureData]:
    """Time ranges of every culture found in ``texel``, in order of first appearance."""
    if not texel:
        logger.error("There are no attributes to sample")
        return []

    per_culture: Dict[str, List[Tuple[int, float]]] = {}
    for raw_name, raw_value in texel.items():
        value = normalize_culture_byte(raw_value)
        name, year = split_attribute_name(raw_name)
        per_culture.setdefault(name, []).append((year, value))

    return [
        CultureData(name=name, time_ranges=build_time_ranges(samples))
        for name, samples in per_culture.items()
    ]