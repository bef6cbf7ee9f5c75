[build-system]
requires = ["setuptools>=61.0"]
build-backend = "setuptools.build_meta"

[project]
name = "voxelscape"
version = "0.1.0"
description = "Chunked voxel grids with marching-cubes meshing, year-keyed spatial attribute sampling, culture time ranges and a game clock."
requires-python = ">=3.10"
dependencies = []
keywords = ["voxel", "marching-cubes", "mesh", "isosurface", "terrain", "chunks"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: 3D Modeling",
    "Topic :: Games/Entertainment",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.setuptools.packages.find]
include = ["voxelscape*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
