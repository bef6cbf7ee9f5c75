"""Chunked voxel grids, marching-cubes meshing, year-keyed attribute sampling, culture ranges and a game clock."""

__version__ = "0.1.0"