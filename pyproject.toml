[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "s2ndvi"
version = "0.1.0"
description = "Extract Sentinel-2 archives, discover spectral bands and compute scaled NDVI rasters"
requires-python = ">=3.10"
keywords = ["sentinel-2", "ndvi", "remote sensing", "raster", "geotiff"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: GIS",
]
dependencies = [
    "numpy",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
s2ndvi = "s2ndvi.processor:main"

[tool.hatch.build.targets.wheel]
packages = ["s2ndvi"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
