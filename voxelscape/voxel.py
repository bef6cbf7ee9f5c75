"""Packed voxels and the fixed-size voxel array that makes up one chunk."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, List, Sequence, Tuple, Union

Coords = Tuple[int, int, int]
Dimensions = Union[int, Sequence[int]]

# Size of a chunk in world units; every chunk is a cube.
CHUNK_SIZE = 200.0
HALF_CHUNK_SIZE = CHUNK_SIZE / 2.0

# Voxels per chunk along one axis.
CHUNK_RESOLUTION = 1 << 4

BITS_FOR_MATERIAL_ID = 3
MATERIAL_ID_NUM = 2 << (BITS_FOR_MATERIAL_ID - 1)


def _dims(dimensions: Dimensions) -> Coords:
    if isinstance(dimensions, int):
        return (dimensions, dimensions, dimensions)
    dx, dy, dz = dimensions
    return (int(dx), int(dy), int(dz))


def is_grid_position_valid(position: Sequence[int], dimensions: Dimensions) -> bool:
    """Whether ``position`` lies inside a grid of the given dimensions."""
    x, y, z = position
    dx, dy, dz = _dims(dimensions)
    return 0 <= x < dx and 0 <= y < dy and 0 <= z < dz


def index_to_grid_position(index: int, dimensions: Dimensions) -> Coords:
    """Convert a flat index (X fastest, then Y, then Z) to grid coordinates."""
    dx, dy, dz = _dims(dimensions)
    if not 0 <= index < dx * dy * dz:
        raise IndexError(f"grid index out of range: {index}")
    return (index % dx, index // dx % dy, index // (dx * dy) % dz)


def grid_position_to_index(position: Sequence[int], dimensions: Dimensions) -> int:
    """Convert grid coordinates to a flat index (X fastest, then Y, then Z)."""
    if not is_grid_position_valid(position, dimensions):
        raise IndexError(f"grid position out of range: {tuple(position)}")
    x, y, z = position
    dx, dy, _ = _dims(dimensions)
    return x + y * dx + z * dx * dy


@dataclass(frozen=True)
class Voxel:
    """A single voxel: whether it is solid and its local material id."""

    solid: bool = False
    local_material: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.local_material < MATERIAL_ID_NUM:
            raise ValueError(
                f"local material must be in [0, {MATERIAL_ID_NUM}), got {self.local_material}"
            )
        object.__setattr__(self, "solid", bool(self.solid))


_EMPTY = Voxel()


class VoxelArray:
    """A cube of ``RESOLUTION``^3 voxels stored in X-fastest order."""

    RESOLUTION = CHUNK_RESOLUTION
    ELEMENT_COUNT = RESOLUTION ** 3
    DIMENSIONS: Coords = (RESOLUTION, RESOLUTION, RESOLUTION)

    def __init__(self) -> None:
        self._voxels: List[Voxel] = [_EMPTY] * self.ELEMENT_COUNT

    def clear(self) -> None:
        """Reset every voxel to the empty default."""
        self._voxels = [_EMPTY] * self.ELEMENT_COUNT

    def fill(self, voxel: Voxel) -> None:
        """Set every voxel to ``voxel``."""
        self._voxels = [voxel] * self.ELEMENT_COUNT

    def fill_test_cube(self, offset: Sequence[int] = (0, 0, 0)) -> None:
        """Mark a small cube in the middle third (shifted by ``offset``) as solid."""
        low = self.RESOLUTION * 1 // 3
        high = self.RESOLUTION * 2 // 3
        ox, oy, oz = offset
        for index, (x, y, z), voxel in self.iterate():
            solid = (
                low < x - ox < high
                and low < y - oy < high
                and low < z - oz < high
            )
            self._voxels[index] = Voxel(solid, voxel.local_material)

    def is_uniformly_solid(self) -> bool:
        """True when every voxel is solid, or every voxel is empty."""
        first = self._voxels[0].solid
        return all(v.solid == first for v in self._voxels)

    def get(self, index: int) -> Voxel:
        if not self.is_valid_index(index):
            raise IndexError(f"voxel index out of range: {index}")
        return self._voxels[index]

    def get_at_coords(self, coords: Sequence[int]) -> Voxel:
        return self._voxels[self.coords_to_index(coords)]

    def set_at_coords(self, coords: Sequence[int], voxel: Voxel) -> None:
        self._voxels[self.coords_to_index(coords)] = voxel

    def __getitem__(self, index: int) -> Voxel:
        return self.get(index)

    def __setitem__(self, index: int, voxel: Voxel) -> None:
        if not self.is_valid_index(index):
            raise IndexError(f"voxel index out of range: {index}")
        self._voxels[index] = voxel

    def __len__(self) -> int:
        return self.ELEMENT_COUNT

    def __iter__(self) -> Iterator[Voxel]:
        return iter(list(self._voxels))

    def iterate(self) -> Iterator[Tuple[int, Coords, Voxel]]:
        """Yield ``(index, coords, voxel)`` for every voxel, Z outermost."""
        res = self.RESOLUTION
        index = 0
        for z in range(res):
            for y in range(res):
                for x in range(res):
                    yield index, (x, y, z), self._voxels[index]
                    index += 1

    def op(self, other: "VoxelArray", operation: Callable[[Voxel, Voxel], Voxel]) -> "VoxelArray":
        """Replace each voxel with ``operation(own, other)``; returns self."""
        if len(other) != len(self):
            raise ValueError("voxel arrays differ in size")
        self._voxels = [operation(a, b) for a, b in zip(self._voxels, other._voxels)]
        return self

    def union(self, other: "VoxelArray") -> "VoxelArray":
        """Take the other voxel wherever it is solid."""
        return self.op(other, lambda a, b: b if b.solid else a)

    def difference(self, other: "VoxelArray") -> "VoxelArray":
        """Empty every voxel where the other array is solid."""
        return self.op(other, lambda a, b: _EMPTY if b.solid else a)

    def intersect(self, other: "VoxelArray") -> "VoxelArray":
        """Keep voxels solid in both arrays; empty the rest."""
        return self.op(other, lambda a, b: a if a.solid and b.solid else _EMPTY)

    @staticmethod
    def is_valid_index(index: int) -> bool:
        return 0 <= index < VoxelArray.ELEMENT_COUNT

    @staticmethod
    def index_to_coords(index: int) -> Coords:
        return index_to_grid_position(index, VoxelArray.RESOLUTION)

    @staticmethod
    def coords_to_index(coords: Sequence[int]) -> int:
        return grid_position_to_index(coords, VoxelArray.RESOLUTION)