"""Voxel chunks and the grid of chunks that covers a box in world space.

Global voxel coordinates address a voxel in the whole grid; a voxel
address splits them into the coordinates of a chunk and the local
coordinates of the voxel inside that chunk.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

from voxelscape.voxel import (
    CHUNK_RESOLUTION,
    CHUNK_SIZE,
    HALF_CHUNK_SIZE,
    Coords,
    Voxel,
    VoxelArray,
    grid_position_to_index,
    index_to_grid_position,
    is_grid_position_valid,
)

logger = logging.getLogger(__name__)

Vec3 = Tuple[float, float, float]
Quat = Tuple[float, float, float, float]

INDEX_NONE = -1
ARTIFACT_MATERIAL = 0b111
DEFAULT_ARTIFACT_RADIUS = 100.0
_SMALL_NUMBER = 1.0e-8


def _tdiv(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def _tmod(a: int, b: int) -> int:
    """Remainder with the sign of the dividend."""
    return a - _tdiv(a, b) * b


def _vec(values: Sequence[float]) -> Vec3:
    x, y, z = values
    return (float(x), float(y), float(z))


def _ivec(values: Sequence[int]) -> Coords:
    x, y, z = values
    return (int(x), int(y), int(z))


@dataclass(frozen=True)
class ChunkBounds:
    """World-space cube of a chunk: its centre and half the side length."""

    origin: Vec3
    extent: float

    def box(self) -> Tuple[Vec3, Vec3]:
        """Minimum and maximum corners of the chunk's box."""
        e = self.extent
        ox, oy, oz = self.origin
        return (ox - e, oy - e, oz - e), (ox + e, oy + e, oz + e)


@dataclass(frozen=True)
class TransformData:
    """What is needed to turn voxel coordinates of one chunk into world space."""

    root_center: Vec3
    root_extent: float
    voxel_size: float


@dataclass(frozen=True)
class VoxelLayer:
    """Everything at or below ``plane_max_z`` becomes solid with this material."""

    plane_max_z: float = 0.0
    local_material_index: int = 0


def _cross(a: Vec3, b: Vec3) -> Vec3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def _rotate(q: Quat, v: Vec3) -> Vec3:
    qv = (q[0], q[1], q[2])
    w = q[3]
    t = tuple(2.0 * c for c in _cross(qv, v))
    u = _cross(qv, t)  # type: ignore[arg-type]
    return tuple(v[i] + w * t[i] + u[i] for i in range(3))  # type: ignore[return-value]


@dataclass(frozen=True)
class GridTransform:
    """Translation, rotation (unit quaternion x, y, z, w) and per-axis scale."""

    translation: Vec3 = (0.0, 0.0, 0.0)
    rotation: Quat = (0.0, 0.0, 0.0, 1.0)
    scale: Vec3 = (1.0, 1.0, 1.0)

    def transform_position(self, position: Sequence[float]) -> Vec3:
        """Scale, then rotate, then translate ``position``."""
        scaled = tuple(p * s for p, s in zip(_vec(position), self.scale))
        rotated = _rotate(self.rotation, scaled)  # type: ignore[arg-type]
        return tuple(r + t for r, t in zip(rotated, self.translation))  # type: ignore[return-value]

    def inverse_transform_position(self, position: Sequence[float]) -> Vec3:
        """Undo :meth:`transform_position`; zero scale axes map to zero."""
        moved = tuple(p - t for p, t in zip(_vec(position), self.translation))
        x, y, z, w = self.rotation
        unrotated = _rotate((-x, -y, -z, w), moved)  # type: ignore[arg-type]
        return tuple(
            0.0 if abs(s) <= _SMALL_NUMBER else u / s
            for u, s in zip(unrotated, self.scale)
        )  # type: ignore[return-value]


@dataclass(frozen=True)
class GridInitializer:
    """Parameters for :meth:`VoxelGrid.initialize`."""

    transform: GridTransform = field(default_factory=GridTransform)
    box_extent: Vec3 = (0.0, 0.0, 0.0)
    fill_surface_z: float = 0.0
    layers: Tuple[VoxelLayer, ...] = ()
    artifact_locations: Tuple[Vec3, ...] = ()
    artifact_radii: Tuple[float, ...] = ()


@dataclass(frozen=True)
class VoxelAddress:
    """Coordinates of a chunk in the grid and of a voxel inside that chunk."""

    chunk_coords: Coords
    voxel_coords: Coords


def coords_to_world(coords: Sequence[int], transform_data: TransformData) -> Vec3:
    """World position of the centre of the voxel at ``coords``."""
    size = transform_data.voxel_size
    offset = transform_data.root_extent - size / 2.0
    return tuple(
        center + c * size - offset
        for center, c in zip(transform_data.root_center, coords)
    )  # type: ignore[return-value]


def world_to_coords(position: Sequence[float], transform_data: TransformData) -> Coords:
    """Voxel coordinates containing ``position`` (truncated toward zero)."""
    size = transform_data.voxel_size
    ext = transform_data.root_extent
    return tuple(
        int((p - (center - ext)) / size)
        for p, center in zip(_vec(position), transform_data.root_center)
    )  # type: ignore[return-value]


def _warn_if_negative(global_coords: Coords) -> None:
    if min(global_coords) < 0:
        logger.warning("Negative global coords will cause unpredictable results.")


def voxel_address_from_global_coords(global_coords: Sequence[int]) -> VoxelAddress:
    """Split non-negative global coordinates into a voxel address."""
    g = _ivec(global_coords)
    _warn_if_negative(g)
    return VoxelAddress(
        tuple(_tdiv(c, CHUNK_RESOLUTION) for c in g),  # type: ignore[arg-type]
        tuple(_tmod(c, CHUNK_RESOLUTION) for c in g),  # type: ignore[arg-type]
    )


def chunk_coords_from_signed_global_coords(global_coords: Sequence[int]) -> Coords:
    """Chunk coordinates of possibly negative global coordinates."""
    res = CHUNK_RESOLUTION
    return tuple(
        _tdiv(c - (res - 1), res) if c < 0 else _tdiv(c, res)
        for c in _ivec(global_coords)
    )  # type: ignore[return-value]


def voxel_address_from_signed_global_coords(global_coords: Sequence[int]) -> VoxelAddress:
    """Split possibly negative global coordinates into a voxel address."""
    g = _ivec(global_coords)
    chunk = chunk_coords_from_signed_global_coords(g)
    res = CHUNK_RESOLUTION
    voxel = tuple(_tmod(c + (abs(k) + 1) * res, res) for c, k in zip(g, chunk))
    return VoxelAddress(chunk, voxel)  # type: ignore[arg-type]


def global_coords_from_voxel_address(address: VoxelAddress) -> Coords:
    """Join a voxel address back into global coordinates."""
    return tuple(
        k * CHUNK_RESOLUTION + v
        for k, v in zip(address.chunk_coords, address.voxel_coords)
    )  # type: ignore[return-value]


def chunk_coords_from_global_coords(global_coords: Sequence[int]) -> Coords:
    """Chunk coordinates of non-negative global coordinates."""
    g = _ivec(global_coords)
    _warn_if_negative(g)
    return tuple(_tdiv(c, CHUNK_RESOLUTION) for c in g)  # type: ignore[return-value]


class VoxelChunk:
    """One cube of voxels placed in the world by its bounds."""

    RESOLUTION = VoxelArray.RESOLUTION

    def __init__(self, bounds: ChunkBounds) -> None:
        self.bounds = bounds
        self.voxels = VoxelArray()

    def clear(self) -> None:
        self.voxels.clear()

    def fill_test(self) -> None:
        """Fill with a small test cube that has a shifted cube cut out of it."""
        self.voxels.clear()
        test_array = VoxelArray()
        test_array.fill(Voxel(True, 0))
        self.voxels.union(test_array)
        self.voxels.clear()
        test_array.fill_test_cube()
        self.voxels.union(test_array)
        test_array.fill_test_cube((5, 5, 5))
        self.voxels.difference(test_array)

    def fill_surface(self, surface_z: float) -> None:
        """Make every voxel at or below world height ``surface_z`` solid."""
        transform_data = self.make_transform_data()
        self.voxels.clear()
        for index, coords, _ in self.voxels.iterate():
            solid = coords_to_world(coords, transform_data)[2] <= surface_z
            self.voxels[index] = Voxel(solid, 0)

    def fill_layered(self, layers: Sequence[VoxelLayer]) -> None:
        """Fill from layers; where layers overlap the lowest plane wins."""
        transform_data = self.make_transform_data()
        ordered = sorted(layers, key=lambda layer: layer.plane_max_z, reverse=True)
        self.voxels.clear()
        heights = [
            (index, coords_to_world(coords, transform_data)[2])
            for index, coords, _ in self.voxels.iterate()
        ]
        for layer in ordered:
            solid_voxel = Voxel(True, layer.local_material_index)
            for index, z in heights:
                if z <= layer.plane_max_z:
                    self.voxels[index] = solid_voxel

    def make_transform_data(self) -> TransformData:
        extent = self.bounds.extent
        return TransformData(
            root_center=_vec(self.bounds.origin),
            root_extent=extent,
            voxel_size=(extent * 2.0) / self.RESOLUTION,
        )

    def coords_to_world(self, coords: Sequence[int]) -> Vec3:
        return coords_to_world(coords, self.make_transform_data())

    def world_to_coords(self, position: Sequence[float]) -> Coords:
        return world_to_coords(position, self.make_transform_data())

    @staticmethod
    def are_coords_valid(coords: Sequence[int]) -> bool:
        return is_grid_position_valid(coords, VoxelChunk.RESOLUTION)


class VoxelGrid:
    """A box of chunks, stored in X-fastest order."""

    def __init__(self) -> None:
        self._transform = GridTransform()
        self._chunks: List[VoxelChunk] = []
        self._dimensions: Coords = (0, 0, 0)
        self._extent: Vec3 = (0.0, 0.0, 0.0)

    @property
    def transform(self) -> GridTransform:
        return self._transform

    @property
    def chunks(self) -> Tuple[VoxelChunk, ...]:
        return tuple(self._chunks)

    @property
    def dimensions_in_chunks(self) -> Coords:
        return self._dimensions

    @property
    def dimensions_in_voxels(self) -> Coords:
        return tuple(d * CHUNK_RESOLUTION for d in self._dimensions)  # type: ignore[return-value]

    @property
    def extent(self) -> Vec3:
        return self._extent

    @property
    def chunk_count(self) -> int:
        return len(self._chunks)

    def initialize(self, initializer: GridInitializer) -> None:
        """Build the chunks covering the initializer's box and fill them."""
        self._transform = initializer.transform
        self._extent = _vec(initializer.box_extent)
        self._dimensions = tuple(
            math.ceil(e * 2.0 / CHUNK_SIZE) for e in self._extent
        )  # type: ignore[assignment]

        dx, dy, dz = self._dimensions
        self._chunks = [
            VoxelChunk(self.chunk_world_bounds_from_grid_coords((x, y, z)))
            for z in range(dz)
            for y in range(dy)
            for x in range(dx)
        ]

        if initializer.layers:
            for chunk in self._chunks:
                chunk.fill_layered(initializer.layers)
                self._mark_artifacts(chunk, initializer)
        else:
            for chunk in self._chunks:
                chunk.fill_surface(initializer.fill_surface_z)

    @staticmethod
    def _mark_artifacts(chunk: VoxelChunk, initializer: GridInitializer) -> None:
        if not initializer.artifact_locations:
            return
        radii = initializer.artifact_radii
        artifacts = [
            (_vec(location), radii[i] if i < len(radii) else DEFAULT_ARTIFACT_RADIUS)
            for i, location in enumerate(initializer.artifact_locations)
        ]
        transform_data = chunk.make_transform_data()
        for index, coords, voxel in chunk.voxels.iterate():
            world = coords_to_world(coords, transform_data)
            for location, radius in artifacts:
                distance_sq = sum((a - w) ** 2 for a, w in zip(location, world))
                if distance_sq < radius * radius:
                    chunk.voxels[index] = Voxel(voxel.solid, ARTIFACT_MATERIAL)
                    break

    def iterate_chunks(self) -> Iterator[Tuple[int, VoxelChunk]]:
        """Yield ``(index, chunk)`` for every chunk."""
        return iter(list(enumerate(self._chunks)))

    def chunk_world_bounds_from_index(self, index: int) -> ChunkBounds:
        return self.chunk_world_bounds_from_grid_coords(self.index_to_coords(index))

    def chunk_world_bounds_from_grid_coords(self, grid_coords: Sequence[int]) -> ChunkBounds:
        relative = tuple(
            c * int(CHUNK_SIZE) + HALF_CHUNK_SIZE - e
            for c, e in zip(_ivec(grid_coords), self._extent)
        )
        origin = self._transform.transform_position(relative)
        return ChunkBounds(origin, HALF_CHUNK_SIZE)

    def chunk_index_from_world_position(self, position: Sequence[float]) -> int:
        local = self._transform.inverse_transform_position(position)
        return self.chunk_index_from_local_position(local)

    def chunk_index_from_local_position(self, position: Sequence[float]) -> int:
        return self.coords_to_index(self.grid_coords_from_local_position(position))

    def grid_coords_from_local_position(self, position: Sequence[float]) -> Coords:
        return tuple(
            int(min(max(p + e, 0.0), e * 2.0) / CHUNK_SIZE)
            for p, e in zip(_vec(position), self._extent)
        )  # type: ignore[return-value]

    def index_to_coords(self, index: int) -> Coords:
        if not 0 <= index < self.chunk_count:
            raise IndexError(f"chunk index out of range: {index}")
        return index_to_grid_position(index, self._dimensions)

    def coords_to_index(self, coords: Sequence[int]) -> int:
        if not self.are_coords_valid(coords):
            raise IndexError(f"chunk coords out of range: {tuple(coords)}")
        return grid_position_to_index(coords, self._dimensions)

    def are_coords_valid(self, coords: Sequence[int]) -> bool:
        return is_grid_position_valid(coords, self._dimensions)

    def chunk_neighbor_indices(self, index: int) -> Tuple[int, ...]:
        """Indices of the 26 surrounding chunks, ``-1`` where there is none."""
        x, y, z = self.index_to_coords(index)
        neighbors = []
        for oz in (-1, 0, 1):
            for oy in (-1, 0, 1):
                for ox in (-1, 0, 1):
                    if ox == oy == oz == 0:
                        continue
                    coords = (x + ox, y + oy, z + oz)
                    neighbors.append(
                        self.coords_to_index(coords) if self.are_coords_valid(coords) else INDEX_NONE
                    )
        return tuple(neighbors)

    def get_chunk_by_index(self, index: int) -> Optional[VoxelChunk]:
        if not 0 <= index < len(self._chunks):
            return None
        return self._chunks[index]

    def chunk_at(self, index: int) -> VoxelChunk:
        if not 0 <= index < len(self._chunks):
            raise IndexError(f"A chunk with index {index} does not exist.")
        return self._chunks[index]

    def find_chunk_by_coords(self, coords: Sequence[int]) -> Optional[VoxelChunk]:
        if not self.are_coords_valid(coords):
            return None
        return self.chunk_at(self.coords_to_index(coords))

    def voxel_address_from_global_coords_checked(self, global_coords: Sequence[int]) -> VoxelAddress:
        address = voxel_address_from_global_coords(global_coords)
        if not self.are_coords_valid(address.chunk_coords):
            raise ValueError(f"global coords outside the grid: {tuple(global_coords)}")
        return address

    def global_coords_from_voxel_address_checked(self, address: VoxelAddress) -> Coords:
        global_coords = global_coords_from_voxel_address(address)
        if not is_grid_position_valid(global_coords, self.dimensions_in_voxels):
            raise ValueError(f"voxel address outside the grid: {address}")
        return global_coords

    def resolve_address(self, address: VoxelAddress) -> Optional[Voxel]:
        """The voxel at ``address``, or None when it lies outside the grid."""
        if not self.are_coords_valid(address.chunk_coords):
            return None
        chunk = self.chunk_at(self.coords_to_index(address.chunk_coords))
        if not chunk.are_coords_valid(address.voxel_coords):
            return None
        return chunk.voxels.get_at_coords(address.voxel_coords)