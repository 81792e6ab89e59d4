"""Discovering Sentinel-2 band files inside an extracted product."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_IMG_DATA = "IMG_DATA"
_EXTENSIONS = (".jp2", ".tif")
_RESOLUTIONS = (("/R10m/", "10m"), ("/R20m/", "20m"), ("/R60m/", "60m"))
_DIGITS = "0123456789"


def resolution_of(path: PathLike) -> str:
    """Return '10m', '20m' or '60m' from the path's R..m directory, or ''."""
    text = Path(path).as_posix() if isinstance(path, Path) else str(path).replace(os.sep, "/")
    for marker, resolution in _RESOLUTIONS:
        if marker in text:
            return resolution
    return ""


def band_name_from_filename(filename: str) -> Optional[str]:
    """Return the band name (B02, B8A, ...) following '_B' in filename, or None."""
    position = filename.find("_B")
    if position == -1 or position + 1 >= len(filename):
        return None
    rest = filename[position + 1:]
    if rest.startswith("B8A"):
        return "B8A"
    if len(rest) >= 3 and rest[0] == "B" and rest[1] in _DIGITS and rest[2] in _DIGITS:
        return rest[:3]
    return None


def _is_better(new: str, existing: str) -> bool:
    if new == "10m":
        return existing != "10m"
    if new == "20m":
        return existing == "60m"
    return False


def find_band_files(extracted_dir: PathLike) -> dict[str, str]:
    """Map band names to band files under extracted_dir, preferring finer resolution."""
    root = Path(extracted_dir)
    found: dict[str, str] = {}
    if not root.is_dir():
        logger.error("extracted directory does not exist or is not a directory: %s", root)
        return found

    def on_error(exc: OSError) -> None:
        logger.error("filesystem error during band discovery: %s", exc)

    for directory, subdirs, files in os.walk(root, onerror=on_error):
        subdirs.sort()
        for filename in sorted(files):
            path = Path(directory) / filename
            if not path.is_file():
                continue
            posix = path.as_posix()
            if not posix.endswith(_EXTENSIONS) or _IMG_DATA not in posix:
                continue
            band = band_name_from_filename(filename)
            if band is None:
                continue
            resolution = resolution_of(posix)
            if band not in found or _is_better(resolution, resolution_of(found[band])):
                found[band] = str(path)
                logger.debug("found band %s (%s): %s", band, resolution, path)
            else:
                logger.debug("skipping band %s (%s): better resolution already found", band, resolution)

    if not found:
        logger.warning("no Sentinel-2 band files (.jp2 or .tif) found in: %s", root)
    return dict(sorted(found.items()))