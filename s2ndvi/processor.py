"""The processing pipeline: unpack a product, find its bands, run an operation."""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Optional, Union

from .bands import find_band_files
from .extract import ExtractionError, create_temp_dir, extract_archive
from .ndvi import NdviOperation
from .operation import Operation, OperationError, normalize_name
from .raster import RasterError, read_band

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_USAGE = """\
Usage: {prog} <zip_file_path> <output_tiff_path> <operation> [operation_args...]
Operations and their arguments:
  NDVI <NIR_band_name> <RED_band_name> (e.g., B08 B04)
Example: {prog} S2A_MSIL2A_...zip output_ndvi.tif NDVI B08 B04"""


def _describe_band(name: str, path: str) -> list[str]:
    try:
        band = read_band(path)
    except RasterError:
        return [f"  [ERROR] Could not open {path} for details."]

    lines = [
        f"  Band: {name}",
        f"    Path: {path}",
        f"    Dimensions: {band.width}x{band.height}",
        f"    Data Type: {band.data_type or 'Unknown'}",
    ]
    if band.nodata is not None:
        lines.append(f"    NoData Value: {band.nodata:g}")
    if band.projection:
        lines.append(f"    Projection (CRS): {band.projection}")
    else:
        lines.append("    Projection (CRS): Not available or empty.")
    if band.geotransform is not None:
        values = ", ".join(f"{v:g}" for v in band.geotransform)
        lines.append(
            "    GeoTransform (OriginX, PixelSizeX, RotX, OriginY, RotY, PixelSizeY):"
        )
        lines.append(f"      ({values})")
    else:
        lines.append("    GeoTransform: Not available.")
    return lines


def format_band_details(band_paths: Mapping[str, PathLike]) -> str:
    """Return a readable report on each band: size, type, no-data and georeferencing."""
    if not band_paths:
        return "No bands found to display details."
    lines: list[str] = []
    for name, path in band_paths.items():
        lines.extend(_describe_band(name, str(path)))
    return "\n".join(lines)


class S2Processor:
    """Runs registered operations on the bands of a Sentinel-2 product archive."""

    def __init__(self) -> None:
        self.operations: dict[str, Operation] = {}
        self.band_paths: dict[str, str] = {}

    def register_operation(self, operation: Operation) -> None:
        """Register operation under its upper-cased name, replacing any earlier one."""
        key = normalize_name(operation.name)
        self.operations[key] = operation
        logger.debug("operation '%s' registered", key)

    def is_operation_registered(self, name: str) -> bool:
        return normalize_name(name) in self.operations

    def process(
        self,
        zip_path: PathLike,
        output_path: PathLike,
        operation_name: str,
        operation_args: Sequence[str],
    ) -> None:
        """Extract zip_path, discover its bands and run the named operation.

        Raises ExtractionError if the archive cannot be unpacked and
        OperationError if no bands are found, the operation is unknown
        or the operation itself fails.
        """
        logger.info("input ZIP: %s", zip_path)
        logger.info("output TIFF: %s", output_path)
        logger.info("operation: %s", operation_name)

        extracted = extract_archive(zip_path, create_temp_dir())
        logger.info("zip extraction complete; extracted to: %s", extracted)

        self.band_paths = find_band_files(extracted)
        if not self.band_paths:
            raise OperationError(
                "No Sentinel-2 bands found in the extracted directory."
            )
        logger.info("band discovery complete; found %d bands", len(self.band_paths))
        logger.info("discovered band details:\n%s", format_band_details(self.band_paths))

        key = normalize_name(operation_name)
        operation = self.operations.get(key)
        if operation is None:
            available = " ".join(self.operations)
            raise OperationError(
                f"Unknown or unsupported operation: '{operation_name}'. "
                f"Available operations: {available}"
            )
        logger.info("executing operation: %s", key)
        operation.execute(self.band_paths, list(operation_args), output_path)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line entry point; returns the process exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    prog = Path(sys.argv[0]).name if sys.argv and sys.argv[0] else "s2ndvi"
    if len(args) < 3:
        print(_USAGE.format(prog=prog), file=sys.stderr)
        return 1

    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    zip_path, output_path, operation_name, *operation_args = args

    processor = S2Processor()
    processor.register_operation(NdviOperation())

    try:
        processor.process(zip_path, output_path, operation_name, operation_args)
    except (ExtractionError, OperationError) as exc:
        logger.error("%s", exc)
        logger.info("program finished with status: FAILURE")
        return 1
    logger.info("program finished with status: SUCCESS")
    return 0


if __name__ == "__main__":
    sys.exit(main())