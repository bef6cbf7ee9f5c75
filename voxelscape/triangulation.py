"""Marching cubes triangulation of voxel chunks and whole voxel grids.

Each cell spans eight voxels. The cells on a chunk's positive borders
read the voxels they need from the neighbouring chunks in +X, +Y and +Z.
A cell that needs a neighbour which does not exist is skipped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from voxelscape.grid import TransformData, VoxelChunk, VoxelGrid, coords_to_world
from voxelscape.marching_cubes import GridCell, Triangle, Vec3, triangulate_cell
from voxelscape.voxel import MATERIAL_ID_NUM, Voxel, VoxelArray

NEIGHBOR_COUNT = 8

# Corner offsets of a cell, in the corner order the cube tables expect.
_CELL_CORNER_OFFSETS: Tuple[Tuple[int, int, int], ...] = (
    (0, 0, 0),
    (1, 0, 0),
    (1, 1, 0),
    (0, 1, 0),
    (0, 0, 1),
    (1, 0, 1),
    (1, 1, 1),
    (0, 1, 1),
)


@dataclass(frozen=True)
class ChunkNeighbors:
    """The chunks at positive offsets, indexed by a bit per axis.

    Bit 0 stands for X, bit 1 for Y and bit 2 for Z, so index 3 is the
    XY neighbour. Index 0 would be the chunk itself and is never valid.
    """

    chunks: Tuple[Optional[VoxelChunk], ...] = (None,) * NEIGHBOR_COUNT

    def __post_init__(self) -> None:
        chunks = tuple(self.chunks)
        if len(chunks) != NEIGHBOR_COUNT:
            raise ValueError(f"expected {NEIGHBOR_COUNT} neighbor slots, got {len(chunks)}")
        object.__setattr__(self, "chunks", (None,) + chunks[1:])

    def __getitem__(self, index: int) -> Optional[VoxelChunk]:
        if not 0 < index < NEIGHBOR_COUNT:
            raise IndexError(f"neighbor index out of range: {index}")
        return self.chunks[index]


@dataclass
class MarchingCubesMesh:
    """Vertices and triangles; triangle indices refer to ``vertices``."""

    vertices: List[Vec3] = field(default_factory=list)
    triangles: List[Triangle] = field(default_factory=list)

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.triangles)


def neighbors_of_chunk(grid: VoxelGrid, chunk_index: int) -> ChunkNeighbors:
    """Collect the seven positive-offset neighbours of a chunk."""
    x, y, z = grid.index_to_coords(chunk_index)
    dx, dy, dz = grid.dimensions_in_chunks
    chunks: List[Optional[VoxelChunk]] = [None]
    for n in range(1, NEIGHBOR_COUNT):
        coords = (x + (n & 1), y + ((n >> 1) & 1), z + ((n >> 2) & 1))
        if coords[0] >= dx or coords[1] >= dy or coords[2] >= dz:
            chunks.append(None)
        else:
            chunks.append(grid.get_chunk_by_index(grid.coords_to_index(coords)))
    return ChunkNeighbors(tuple(chunks))


def _neighbor_index(coords: Sequence[int], dims: Sequence[int]) -> int:
    return sum(1 << axis for axis in range(3) if coords[axis] >= dims[axis])


def _resolve_voxel(
    voxel_array: VoxelArray, neighbors: ChunkNeighbors, coords: Sequence[int]
) -> Optional[Voxel]:
    dims = VoxelArray.DIMENSIONS
    index = _neighbor_index(coords, dims)
    if index == 0:
        return voxel_array.get_at_coords(coords)
    neighbor = neighbors[index]
    if neighbor is None:
        return None
    local = tuple(c % d for c, d in zip(coords, dims))
    return neighbor.voxels.get_at_coords(local)


def is_array_uniformly_solid_with_neighbors(
    voxel_array: VoxelArray, neighbors: ChunkNeighbors
) -> bool:
    """Whether the array plus its one-voxel border from neighbours has one solidity."""
    first = voxel_array[0].solid
    dx, dy, dz = VoxelArray.DIMENSIONS
    for z in range(dz + 1):
        for y in range(dy + 1):
            for x in range(dx + 1):
                voxel = _resolve_voxel(voxel_array, neighbors, (x, y, z))
                if voxel is not None and voxel.solid != first:
                    return False
    return True


def _best_material(voxels: Sequence[Voxel]) -> int:
    occurrences = [0] * MATERIAL_ID_NUM
    for voxel in voxels:
        occurrences[voxel.local_material] += 1
    best, best_count = 0, 0
    for material, count in enumerate(occurrences):
        if count > best_count:
            best, best_count = material, count
    return best


def triangulate_voxel_array(
    voxel_array: VoxelArray, transform_data: TransformData, neighbors: ChunkNeighbors
) -> MarchingCubesMesh:
    """Triangulate one voxel array with marching cubes.

    Each triangle carries the material that occurs most often among its
    cell's corners.
    """
    mesh = MarchingCubesMesh()
    if is_array_uniformly_solid_with_neighbors(voxel_array, neighbors):
        return mesh

    dx, dy, dz = VoxelArray.DIMENSIONS
    for z in range(dz):
        for y in range(dy):
            for x in range(dx):
                corners = [(x + ox, y + oy, z + oz) for ox, oy, oz in _CELL_CORNER_OFFSETS]
                voxels = [_resolve_voxel(voxel_array, neighbors, c) for c in corners]
                if any(v is None for v in voxels):
                    continue
                cell = GridCell(
                    positions=tuple(coords_to_world(c, transform_data) for c in corners),
                    values=tuple(-1.0 if v.solid else 1.0 for v in voxels),  # type: ignore[union-attr]
                )
                cell_mesh = triangulate_cell(cell)
                if cell_mesh is None:
                    continue
                material = _best_material(voxels)  # type: ignore[arg-type]
                base = len(mesh.vertices)
                mesh.vertices.extend(cell_mesh.vertices)
                mesh.triangles.extend(
                    Triangle(t.a + base, t.b + base, t.c + base, material)
                    for t in cell_mesh.triangles
                )
    return mesh


def triangulate_chunk(chunk: VoxelChunk, neighbors: ChunkNeighbors) -> MarchingCubesMesh:
    """Triangulate a chunk in world space."""
    return triangulate_voxel_array(chunk.voxels, chunk.make_transform_data(), neighbors)


def triangulate_grid(grid: VoxelGrid) -> MarchingCubesMesh:
    """Triangulate every chunk of the grid into one combined mesh."""
    combined = MarchingCubesMesh()
    for index, chunk in grid.iterate_chunks():
        mesh = triangulate_chunk(chunk, neighbors_of_chunk(grid, index))
        offset = len(combined.vertices)
        combined.vertices.extend(mesh.vertices)
        combined.triangles.extend(t.offset(offset) for t in mesh.triangles)
    return combined