"""The NDVI operation: a scaled vegetation index from NIR and red bands."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Union

import numpy as np

from .operation import Operation, OperationError
from .raster import RasterError, read_band, write_output_tiff

logger = logging.getLogger(__name__)

_OFFSET = np.float32(2000.0)


def compute_ndvi(nir: np.ndarray, red: np.ndarray) -> np.ndarray:
    """Compute NDVI scaled to 0..255 as float32.

    Pixels where nir + red is zero, either value is NaN or negative become 0.
    Elsewhere the index (nir - red) / (nir + red - 2000) is clipped to 0..1
    and scaled to 1 + index * 250.
    """
    nir = np.asarray(nir, dtype=np.float32)
    red = np.asarray(red, dtype=np.float32)
    if nir.shape != red.shape:
        raise ValueError(f"band shapes differ: {nir.shape} vs {red.shape}")

    invalid = (
        ((nir + red) == 0)
        | np.isnan(nir)
        | np.isnan(red)
        | (red < 0)
        | (nir < 0)
    )
    with np.errstate(divide="ignore", invalid="ignore"):
        raw = (nir - red) / (nir + red - _OFFSET)
    clipped = np.where(np.isnan(raw), np.float32(0.0), np.clip(raw, 0.0, 1.0))
    scaled = np.clip(np.float32(1.0) + clipped * np.float32(250.0), 0.0, 255.0)
    return np.where(invalid, np.float32(0.0), scaled).astype(np.float32)


class NdviOperation(Operation):
    """NDVI from two named bands, written as a uint8 GeoTIFF."""

    name = "NDVI"

    def execute(
        self,
        band_paths: Mapping[str, Union[str, Path]],
        args: Sequence[str],
        output_path: Union[str, Path],
    ) -> None:
        if len(args) != 2:
            raise OperationError(
                "NDVI operation requires 2 arguments: <NIR_band_name> <RED_band_name>"
            )
        nir_name, red_name = args
        if nir_name not in band_paths or red_name not in band_paths:
            raise OperationError(
                f"required bands for NDVI ({nir_name}, {red_name}) not found"
            )

        try:
            nir_band = read_band(band_paths[nir_name])
            red_band = read_band(band_paths[red_name])
        except RasterError as exc:
            raise OperationError(f"could not read NIR or red band: {exc}") from exc

        if nir_band.data.shape != red_band.data.shape:
            raise OperationError(
                "NIR and red bands have different dimensions "
                f"({nir_band.width}x{nir_band.height} vs "
                f"{red_band.width}x{red_band.height})"
            )

        ndvi = compute_ndvi(nir_band.data, red_band.data)
        logger.info("NDVI calculation complete")

        try:
            write_output_tiff(output_path, ndvi, nir_band)
        except RasterError as exc:
            raise OperationError(str(exc)) from exc