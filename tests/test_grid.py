import math

import pytest

from voxelscape.grid import (
    ARTIFACT_MATERIAL,
    INDEX_NONE,
    ChunkBounds,
    GridInitializer,
    GridTransform,
    VoxelAddress,
    VoxelChunk,
    VoxelGrid,
    VoxelLayer,
    chunk_coords_from_global_coords,
    chunk_coords_from_signed_global_coords,
    coords_to_world,
    global_coords_from_voxel_address,
    voxel_address_from_global_coords,
    voxel_address_from_signed_global_coords,
    world_to_coords,
)
from voxelscape.voxel import CHUNK_RESOLUTION, CHUNK_SIZE, HALF_CHUNK_SIZE


def make_chunk(origin=(0.0, 0.0, 0.0)):
    return VoxelChunk(ChunkBounds(origin, HALF_CHUNK_SIZE))


def make_grid(extent=(CHUNK_SIZE, CHUNK_SIZE, CHUNK_SIZE), transform=None, **kwargs):
    grid = VoxelGrid()
    grid.initialize(
        GridInitializer(transform=transform or GridTransform(), box_extent=extent, **kwargs)
    )
    return grid


@pytest.mark.parametrize("g", [(0, 0, 0), (15, 16, 17), (31, 5, 100)])
def test_voxel_address_round_trip(g):
    address = voxel_address_from_global_coords(g)
    assert global_coords_from_voxel_address(address) == g
    assert all(0 <= v < CHUNK_RESOLUTION for v in address.voxel_coords)
    assert address.chunk_coords == chunk_coords_from_global_coords(g)


@pytest.mark.parametrize("g", [(-1, -16, -17), (-33, 0, 40), (5, -100, -2)])
def test_signed_voxel_address_round_trip(g):
    address = voxel_address_from_signed_global_coords(g)
    assert global_coords_from_voxel_address(address) == g
    assert all(0 <= v < CHUNK_RESOLUTION for v in address.voxel_coords)


@pytest.mark.parametrize("g", [(-1, -16, -17), (0, 15, 16), (-200, 7, -31)])
def test_signed_chunk_coords_bracket_global(g):
    chunk = chunk_coords_from_signed_global_coords(g)
    for k, c in zip(chunk, g):
        assert k * CHUNK_RESOLUTION <= c < (k + 1) * CHUNK_RESOLUTION


def test_signed_matches_unsigned_for_non_negative():
    g = (3, 20, 47)
    assert voxel_address_from_signed_global_coords(g) == voxel_address_from_global_coords(g)


def test_transform_data_voxel_size():
    data = make_chunk((10.0, 20.0, 30.0)).make_transform_data()
    assert data.voxel_size * CHUNK_RESOLUTION == pytest.approx(2 * HALF_CHUNK_SIZE)
    assert data.root_center == (10.0, 20.0, 30.0)


@pytest.mark.parametrize("coords", [(0, 0, 0), (15, 15, 15), (3, 9, 12)])
def test_coords_world_round_trip(coords):
    chunk = make_chunk((50.0, -70.0, 300.0))
    data = chunk.make_transform_data()
    assert world_to_coords(coords_to_world(coords, data), data) == coords
    assert chunk.world_to_coords(chunk.coords_to_world(coords)) == coords


def test_world_positions_lie_inside_chunk_box():
    chunk = make_chunk((5.0, 6.0, 7.0))
    lo, hi = chunk.bounds.box()
    for coords in [(0, 0, 0), (15, 15, 15)]:
        p = chunk.coords_to_world(coords)
        assert all(l < c < h for l, c, h in zip(lo, p, hi))


def test_box_spans_twice_extent():
    lo, hi = ChunkBounds((1.0, 2.0, 3.0), 4.0).box()
    assert tuple(h - l for l, h in zip(lo, hi)) == (8.0, 8.0, 8.0)


def test_are_coords_valid():
    assert VoxelChunk.are_coords_valid((0, 15, 7))
    assert not VoxelChunk.are_coords_valid((16, 0, 0))
    assert not VoxelChunk.are_coords_valid((0, -1, 0))


def test_fill_surface_extremes():
    chunk = make_chunk()
    chunk.fill_surface(-1000.0)
    assert chunk.voxels.is_uniformly_solid()
    assert not chunk.voxels.get(0).solid
    chunk.fill_surface(1000.0)
    assert chunk.voxels.is_uniformly_solid()
    assert chunk.voxels.get(0).solid


def test_fill_surface_through_middle():
    chunk = make_chunk()
    chunk.fill_surface(0.0)
    assert not chunk.voxels.is_uniformly_solid()
    assert chunk.voxels.get_at_coords((4, 4, 0)).solid
    assert not chunk.voxels.get_at_coords((4, 4, 15)).solid


def test_fill_layered_lowest_layer_wins():
    layers = [VoxelLayer(0.0, 1), VoxelLayer(-50.0, 2)]
    chunk = make_chunk()
    chunk.fill_layered(layers)
    bottom = chunk.voxels.get_at_coords((0, 0, 0))
    middle = chunk.voxels.get_at_coords((0, 0, 7))
    top = chunk.voxels.get_at_coords((0, 0, 15))
    assert bottom.solid and bottom.local_material == 2
    assert middle.solid and middle.local_material == 1
    assert not top.solid

    reversed_chunk = make_chunk()
    reversed_chunk.fill_layered(list(reversed(layers)))
    assert list(reversed_chunk.voxels) == list(chunk.voxels)


def test_fill_test_cube_shape():
    chunk = make_chunk()
    chunk.fill_test()
    assert chunk.voxels.get_at_coords((6, 6, 6)).solid
    assert not chunk.voxels.get_at_coords((12, 12, 12)).solid
    assert sum(v.solid for v in chunk.voxels) == 64


def test_clear_empties_chunk():
    chunk = make_chunk()
    chunk.fill_surface(1000.0)
    chunk.clear()
    assert not any(v.solid for v in chunk.voxels)


def test_initialize_dimensions():
    grid = make_grid((CHUNK_SIZE, HALF_CHUNK_SIZE, CHUNK_SIZE))
    assert grid.dimensions_in_chunks == (2, 1, 2)
    assert grid.chunk_count == math.prod(grid.dimensions_in_chunks)
    assert grid.dimensions_in_voxels == tuple(
        d * CHUNK_RESOLUTION for d in grid.dimensions_in_chunks
    )


def test_index_coords_round_trip():
    grid = make_grid()
    for index, chunk in grid.iterate_chunks():
        assert grid.coords_to_index(grid.index_to_coords(index)) == index
        assert grid.chunk_at(index) is chunk


def test_out_of_range_indices():
    grid = make_grid()
    with pytest.raises(IndexError):
        grid.index_to_coords(grid.chunk_count)
    with pytest.raises(IndexError):
        grid.coords_to_index((2, 0, 0))
    with pytest.raises(IndexError):
        grid.chunk_at(-1)
    assert grid.get_chunk_by_index(grid.chunk_count) is None
    assert grid.find_chunk_by_coords((0, 0, -1)) is None


def test_neighbor_indices_of_corner_chunk():
    grid = make_grid()
    neighbors = grid.chunk_neighbor_indices(0)
    assert len(neighbors) == 26
    valid = {n for n in neighbors if n != INDEX_NONE}
    assert valid == set(range(grid.chunk_count)) - {0}


def test_chunk_bounds_cover_grid_extent():
    grid = make_grid()
    boxes = [grid.chunk_world_bounds_from_index(i).box() for i in range(grid.chunk_count)]
    for axis, e in enumerate(grid.extent):
        assert min(b[0][axis] for b in boxes) == pytest.approx(-e)
        assert max(b[1][axis] for b in boxes) == pytest.approx(e)


def test_chunk_index_from_world_position_finds_own_chunk():
    transform = GridTransform(translation=(1000.0, -500.0, 30.0))
    grid = make_grid(transform=transform)
    for index in range(grid.chunk_count):
        origin = grid.chunk_world_bounds_from_index(index).origin
        assert grid.chunk_index_from_world_position(origin) == index


def test_grid_transform_round_trip():
    half = math.sqrt(0.5)
    transform = GridTransform((1.0, 2.0, 3.0), (0.0, 0.0, half, half), (2.0, 0.5, 3.0))
    p = (4.0, -5.0, 6.0)
    back = transform.inverse_transform_position(transform.transform_position(p))
    assert back == pytest.approx(p)


def test_resolve_address():
    grid = make_grid()
    address = VoxelAddress((1, 0, 1), (3, 4, 5))
    chunk = grid.find_chunk_by_coords((1, 0, 1))
    assert grid.resolve_address(address) == chunk.voxels.get_at_coords((3, 4, 5))
    assert grid.resolve_address(VoxelAddress((2, 0, 0), (0, 0, 0))) is None
    assert grid.resolve_address(VoxelAddress((0, 0, 0), (16, 0, 0))) is None


def test_checked_conversions():
    grid = make_grid()
    g = (20, 3, 31)
    address = grid.voxel_address_from_global_coords_checked(g)
    assert grid.global_coords_from_voxel_address_checked(address) == g
    with pytest.raises(ValueError):
        grid.voxel_address_from_global_coords_checked((32, 0, 0))
    with pytest.raises(ValueError):
        grid.global_coords_from_voxel_address_checked(VoxelAddress((2, 0, 0), (0, 0, 0)))


def test_artifacts_mark_material():
    chunk_probe = None
    grid = make_grid(layers=(VoxelLayer(1000.0, 1),))
    chunk_probe = grid.chunk_at(0)
    target = chunk_probe.coords_to_world((8, 8, 8))
    grid = make_grid(
        layers=(VoxelLayer(1000.0, 1),),
        artifact_locations=(target,),
        artifact_radii=(1.0,),
    )
    chunk = grid.chunk_at(0)
    assert chunk.voxels.get_at_coords((8, 8, 8)).local_material == ARTIFACT_MATERIAL
    assert chunk.voxels.get_at_coords((0, 0, 0)).local_material == 1
    assert chunk.voxels.get_at_coords((8, 8, 8)).solid