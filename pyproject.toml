[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "roadroute"
version = "0.1.0"
description = "Road network routing toolkit: customizable contraction hierarchies, nearest-node lookup, polylines and graph utilities"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "routing",
    "shortest-path",
    "contraction-hierarchy",
    "cch",
    "road-network",
    "polyline",
    "gis",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: GIS",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["roadroute"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
