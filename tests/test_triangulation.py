import pytest

from voxelscape.grid import GridInitializer, TransformData, VoxelGrid
from voxelscape.triangulation import (
    ChunkNeighbors,
    MarchingCubesMesh,
    is_array_uniformly_solid_with_neighbors,
    neighbors_of_chunk,
    triangulate_chunk,
    triangulate_grid,
    triangulate_voxel_array,
)
from voxelscape.voxel import Voxel, VoxelArray


def make_grid(box_extent, surface_z=0.0):
    grid = VoxelGrid()
    grid.initialize(GridInitializer(box_extent=box_extent, fill_surface_z=surface_z))
    return grid


def assert_indices_valid(mesh: MarchingCubesMesh):
    for t in mesh.triangles:
        for i in t.as_tuple():
            assert 0 <= i < mesh.vertex_count


def test_neighbor_zero_index_is_rejected():
    with pytest.raises(IndexError):
        ChunkNeighbors()[0]
    with pytest.raises(IndexError):
        ChunkNeighbors()[8]


def test_neighbors_wrong_length_rejected():
    with pytest.raises(ValueError):
        ChunkNeighbors((None,) * 3)


def test_neighbors_of_chunk_in_x_row():
    grid = make_grid((200.0, 100.0, 100.0))
    neighbors = neighbors_of_chunk(grid, 0)
    assert neighbors[1] is grid.chunk_at(1)
    assert all(neighbors[i] is None for i in range(2, 8))
    last = neighbors_of_chunk(grid, 1)
    assert all(last[i] is None for i in range(1, 8))


def test_uniform_empty_array_produces_nothing():
    array = VoxelArray()
    assert is_array_uniformly_solid_with_neighbors(array, ChunkNeighbors())
    mesh = triangulate_voxel_array(array, TransformData((0.0, 0.0, 0.0), 100.0, 12.5), ChunkNeighbors())
    assert mesh.vertex_count == 0
    assert mesh.triangle_count == 0


def test_non_uniform_array_detected():
    array = VoxelArray()
    array.set_at_coords((3, 3, 3), Voxel(True, 0))
    assert not is_array_uniformly_solid_with_neighbors(array, ChunkNeighbors())


def test_neighbor_breaks_uniformity():
    grid = make_grid((200.0, 100.0, 100.0), surface_z=-1000.0)
    grid.chunk_at(1).voxels.set_at_coords((0, 5, 5), Voxel(True, 0))
    assert not is_array_uniformly_solid_with_neighbors(
        grid.chunk_at(0).voxels, neighbors_of_chunk(grid, 0)
    )
    assert is_array_uniformly_solid_with_neighbors(grid.chunk_at(0).voxels, ChunkNeighbors())


def test_flat_surface_single_chunk():
    grid = make_grid((100.0, 100.0, 100.0), surface_z=0.0)
    mesh = triangulate_chunk(grid.chunk_at(0), neighbors_of_chunk(grid, 0))
    assert mesh.triangle_count > 0
    assert mesh.vertex_count == 2 * mesh.triangle_count
    assert all(v[2] == pytest.approx(0.0) for v in mesh.vertices)
    assert_indices_valid(mesh)


def test_cube_materials_follow_corner_majority():
    array = VoxelArray()
    for index, (x, y, z), _ in array.iterate():
        array[index] = Voxel(z < 4, 5)
    mesh = triangulate_voxel_array(array, TransformData((0.0, 0.0, 0.0), 100.0, 12.5), ChunkNeighbors())
    assert mesh.triangle_count > 0
    assert {t.material_index for t in mesh.triangles} == {5}


def test_grid_combines_chunk_meshes():
    grid = make_grid((200.0, 100.0, 100.0), surface_z=0.0)
    combined = triangulate_grid(grid)
    parts = [triangulate_chunk(c, neighbors_of_chunk(grid, i)) for i, c in grid.iterate_chunks()]
    assert combined.vertex_count == sum(p.vertex_count for p in parts)
    assert combined.triangle_count == sum(p.triangle_count for p in parts)
    assert_indices_valid(combined)
    first = parts[0]
    second_start = first.vertex_count
    assert combined.triangles[first.triangle_count].a == parts[1].triangles[0].a + second_start


def test_border_cells_use_neighbor():
    grid = make_grid((200.0, 100.0, 100.0), surface_z=0.0)
    with_neighbor = triangulate_chunk(grid.chunk_at(0), neighbors_of_chunk(grid, 0))
    alone = triangulate_chunk(grid.chunk_at(0), ChunkNeighbors())
    assert with_neighbor.triangle_count > alone.triangle_count