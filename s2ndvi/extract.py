"""Unpacking Sentinel-2 product archives into a temporary directory."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import time
import zipfile
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_SAFE_SUFFIX = ".SAFE"


class ExtractionError(Exception):
    """An archive could not be unpacked or its .SAFE root not found."""


def create_temp_dir() -> str:
    """Create a fresh directory under the system temp dir and return its path."""
    path = Path(tempfile.gettempdir()) / f"s2_extract_{time.time_ns()}"
    try:
        path.mkdir(parents=True)
    except OSError as exc:
        raise ExtractionError(f"Failed to create temporary directory: {path}") from exc
    logger.debug("temporary directory created: %s", path)
    return str(path)


def _safe_root_from_entry(entry_path: str, zip_path: PathLike, dest_dir: str) -> str:
    marker = _SAFE_SUFFIX + "/"
    position = entry_path.find(marker)
    if position != -1:
        return entry_path[: position + len(_SAFE_SUFFIX)]
    expected = Path(zip_path).stem
    if not expected.endswith(_SAFE_SUFFIX):
        expected += _SAFE_SUFFIX
    inferred = f"{dest_dir}/{expected}"
    logger.debug("inferred .SAFE path as fallback: %s", inferred)
    return inferred


def _check_inside(dest_dir: str, target: str, name: str) -> None:
    root = os.path.realpath(dest_dir)
    resolved = os.path.realpath(target)
    if os.path.commonpath([root, resolved]) != root:
        raise ExtractionError(f"archive entry escapes the destination: {name}")


def extract_archive(zip_path: PathLike, dest_dir: PathLike) -> str:
    """Extract zip_path into dest_dir and return the path of its .SAFE root.

    The root is taken from the first entry's path; when that holds no
    ``.SAFE/`` component it is inferred from the archive's file name.
    """
    dest = str(dest_dir)
    logger.info("extracting '%s' to '%s'", zip_path, dest)
    try:
        archive = zipfile.ZipFile(zip_path)
    except (OSError, zipfile.BadZipFile) as exc:
        raise ExtractionError("Failed to open zip file.") from exc

    safe_root = ""
    with archive:
        for info in archive.infolist():
            target = os.path.join(dest, info.filename)
            _check_inside(dest, target, info.filename)
            if info.filename.endswith("/"):
                os.makedirs(target, exist_ok=True)
                logger.debug("created directory: %s", target)
            else:
                os.makedirs(os.path.dirname(target) or dest, exist_ok=True)
                try:
                    with archive.open(info) as source, open(target, "wb") as sink:
                        shutil.copyfileobj(source, sink)
                except (OSError, zipfile.BadZipFile, EOFError) as exc:
                    raise ExtractionError(
                        f"Error reading from zip file: {info.filename}"
                    ) from exc
                logger.debug("extracted file: %s", target)

            if not safe_root:
                safe_root = _safe_root_from_entry(target, zip_path, dest)

    logger.info("extraction complete")
    if not safe_root or not os.path.isdir(safe_root):
        raise ExtractionError("Failed to find extracted .SAFE directory.")
    return safe_root