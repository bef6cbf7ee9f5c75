"""World spatial attributes named ``<name>;<year>`` and sampling across years.

A texel is a mapping from raw attribute name to its value at one place.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Mapping, Set, Tuple, Union

logger = logging.getLogger(__name__)

Number = Union[int, float]

BYTE_MAX = 255
_INT_MIN = -(2 ** 31)
_INT_MAX = 2 ** 31 - 1
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def split_attribute_name(raw_name: str) -> Tuple[str, int]:
    """Split ``name;year`` into the name and the year."""
    name, sep, year_text = raw_name.partition(";")
    if not sep:
        raise ValueError(
            f"Attribute {raw_name} cannot be split, because it's not a valid World Data Attribute"
        )
    year = _atoi(year_text)
    if year == 0 and year_text != "0":
        raise ValueError(f"Invalid year format: {year_text!r}")
    return name, year


def normalize_culture_byte(value: int) -> float:
    """Map a byte to [0, 1]."""
    if not 0 <= value <= BYTE_MAX:
        raise ValueError(f"byte value out of range: {value}")
    return float(value) / float(BYTE_MAX)


def attribute_names_excluding_year(attribute_names: Iterable[str]) -> Set[str]:
    """The distinct attribute names with the year part dropped."""
    names = set()
    for raw in attribute_names:
        name, sep, _ = raw.partition(";")
        if not sep:
            raise ValueError(f"Invalid attribute name has been found in WorldSpatialData ({raw})")
        names.add(name)
    return names


def sample_year(texel: Mapping[str, Number], attribute_name: str, year: float) -> Number:
    """Value of ``attribute_name`` at ``year``, interpolated between the nearest years.

    Outside the stored years the nearest one is used. Integer values are
    interpolated and then truncated back to an integer.
    """
    if not texel:
        logger.error("There are no attributes to sample")
        return 0

    left_name = right_name = None
    left_year, right_year = _INT_MIN, _INT_MAX
    for raw in texel:
        name, attr_year = split_attribute_name(raw)
        if name != attribute_name:
            continue
        if attr_year == year:
            return texel[raw]
        if attr_year < year:
            if attr_year > left_year:
                left_year, left_name = attr_year, raw
        elif attr_year < right_year:
            right_year, right_name = attr_year, raw

    if left_name is None and right_name is None:
        raise LookupError(f"no attribute named {attribute_name!r}")
    if left_name is None:
        return texel[right_name]  # type: ignore[index]
    if right_name is None:
        return texel[left_name]

    left, right = texel[left_name], texel[right_name]
    alpha = (year - float(left_year)) / float(right_year - left_year)
    result = left + (right - left) * alpha
    if isinstance(left, int) and isinstance(right, int):
        return int(result)
    return result


def sample_byte_normalized(texel: Mapping[str, int], attribute_name: str, year: float) -> float:
    """Sample a byte attribute at ``year`` and map it to [0, 1]."""
    return normalize_culture_byte(int(sample_year(texel, attribute_name, year)))