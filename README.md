# voxelscape

A pure-Python toolkit for chunked voxel worlds, marching-cubes meshing and a few
pieces of world data that go with them.

## Modules

- **`voxelscape.voxel`**: `Voxel` (solid flag and a 3-bit local material) and
  `VoxelArray`, a 16×16×16 cube of voxels stored X-fastest. Arrays can be cleared,
  filled, combined with `union`, `difference` and `intersect` (or any `op`), walked
  with `iterate()`, and checked with `is_uniformly_solid()`. The helpers
  `index_to_grid_position`, `grid_position_to_index` and `is_grid_position_valid`
  convert between flat indices and coordinates.
- **`voxelscape.grid`**: `VoxelChunk` and `VoxelGrid`. `VoxelGrid.initialize` takes a
  `GridInitializer` (a `GridTransform`, a `box_extent`, and either a `fill_surface_z`
  height or a tuple of `VoxelLayer`s plus optional artifact locations and radii) and
  builds the 200-unit chunks that cover the box. The grid converts between world
  positions, chunk indices, chunk coordinates, global voxel coordinates and
  `VoxelAddress`es, and `resolve_address` returns the voxel at an address or `None`.
- **`voxelscape.marching_cubes`**: the classic edge and triangle tables and
  `triangulate_cell`, which turns a `GridCell` (eight corner positions and values,
  negative meaning inside) into a `CellMesh`, or returns `None` when the cell does not
  cross the surface. Vertices sit at edge midpoints.
- **`voxelscape.triangulation`**: marching cubes over voxel data.
  `triangulate_chunk(chunk, neighbors)` reads the +X/+Y/+Z `ChunkNeighbors` to close
  the chunk's borders; `triangulate_grid(grid)` meshes every chunk into one
  `MarchingCubesMesh`. Each triangle carries the most common material of its cell.
- **`voxelscape.spatial_attributes`**: attributes named `"name;year"`.
  `split_attribute_name`, `attribute_names_excluding_year`, `normalize_culture_byte`,
  and `sample_year(texel, name, year)`, which interpolates linearly between the
  nearest stored years and clamps to the outermost ones. A texel is any mapping from
  raw attribute name to value.
- **`voxelscape.culture`**: `build_time_ranges` turns `(year, influence)` samples into
  `CultureTimeRange`s, and `combine_culture_data(texel)` returns a `CultureData` per
  culture found in a texel of byte values.
- **`voxelscape.clock`**: `Clock` holds an in-game `datetime` that moves forward by
  `time_per_tick` on every `tick()`. `start()` runs a background daemon timer that
  ticks every `tick_interval` seconds (1 by default) unless `set_paused()` is in
  effect; starting twice raises `RuntimeError`. `skip_time(delta)` and
  `skip_to(target)` jump the time; `on_tick` and `on_time_skip` register callbacks.

## Installation

```
pip install .
```

Only the standard library is needed. To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

```python
from voxelscape.grid import GridInitializer, VoxelGrid
from voxelscape.triangulation import triangulate_grid

grid = VoxelGrid()
grid.initialize(GridInitializer(box_extent=(200.0, 200.0, 200.0), fill_surface_z=0.0))

mesh = triangulate_grid(grid)
print(mesh.vertex_count, mesh.triangle_count)
```

```python
from voxelscape.spatial_attributes import sample_year
from voxelscape.culture import combine_culture_data

texel = {"rome;-500": 0, "rome;0": 255, "rome;500": 0}
print(sample_year(texel, "rome", -250))   # 127
print(combine_culture_data(texel))
```

```python
from datetime import datetime, timedelta
from voxelscape.clock import Clock

clock = Clock(datetime(1920, 1, 1), timedelta(minutes=1))
clock.on_tick(print)
clock.tick()
clock.skip_time(timedelta(hours=3))
```

## What it does not do

The package produces meshes as Python lists of vertices and triangles; it does not
render them, write them to mesh files, or smooth them. Spatial attribute sampling
works on a texel mapping that the caller supplies: there is no storage or loading
of spatial data buffers, and no conversion from latitude and longitude to texel
positions. There is no command-line program.