"""Reading single raster bands and writing georeferenced 8-bit GeoTIFF output."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, TiffImagePlugin, TiffTags, UnidentifiedImageError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

MODEL_PIXEL_SCALE = 33550
MODEL_TIEPOINT = 33922
MODEL_TRANSFORMATION = 34264
GEO_KEY_DIRECTORY = 34735
GEO_DOUBLE_PARAMS = 34736
GEO_ASCII_PARAMS = 34737
GDAL_NODATA = 42113

_GEOKEY_TAGS = (GEO_KEY_DIRECTORY, GEO_DOUBLE_PARAMS, GEO_ASCII_PARAMS)

_TAG_TYPES = {
    MODEL_PIXEL_SCALE: TiffTags.DOUBLE,
    MODEL_TIEPOINT: TiffTags.DOUBLE,
    MODEL_TRANSFORMATION: TiffTags.DOUBLE,
    GEO_KEY_DIRECTORY: TiffTags.SHORT,
    GEO_DOUBLE_PARAMS: TiffTags.DOUBLE,
    GEO_ASCII_PARAMS: TiffTags.ASCII,
    GDAL_NODATA: TiffTags.ASCII,
}

OUTPUT_NODATA = 0.0

GeoTransform = tuple[float, float, float, float, float, float]


class RasterError(Exception):
    """A raster could not be read or written."""


@dataclass(eq=False)
class RasterBand:
    """The first band of a raster file, as float32, with its georeferencing."""

    data: np.ndarray
    geotransform: GeoTransform | None = None
    geokeys: dict[int, object] = field(default_factory=dict)
    nodata: float | None = None
    data_type: str | None = None

    def __post_init__(self) -> None:
        if self.data_type is None:
            self.data_type = str(self.data.dtype)

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def projection(self) -> str:
        """The coordinate system citation stored with the raster, or ''."""
        text = self.geokeys.get(GEO_ASCII_PARAMS, "")
        if not isinstance(text, str):
            return ""
        return text.rstrip("\x00").rstrip("|")


def _as_tuple(value: object) -> tuple:
    if isinstance(value, tuple):
        return value
    return (value,)


def _geotransform_from_tags(tags) -> GeoTransform | None:
    transformation = tags.get(MODEL_TRANSFORMATION)
    if transformation is not None:
        m = [float(v) for v in _as_tuple(transformation)]
        if len(m) >= 8:
            return (m[3], m[0], m[1], m[7], m[4], m[5])
    scale = tags.get(MODEL_PIXEL_SCALE)
    tiepoint = tags.get(MODEL_TIEPOINT)
    if scale is None or tiepoint is None:
        return None
    sx, sy = (float(v) for v in _as_tuple(scale)[:2])
    i, j, _, x, y, _ = (float(v) for v in _as_tuple(tiepoint)[:6])
    return (x - i * sx, sx, 0.0, y + j * sy, 0.0, -sy)


def _parse_nodata(value: object) -> float | None:
    if value is None:
        return None
    try:
        return float(str(value).strip().rstrip("\x00"))
    except ValueError:
        return None


def read_band(path: PathLike) -> RasterBand:
    """Read the first band of a raster file as a float32 array."""
    try:
        with Image.open(path) as image:
            image.load()
            pixels = np.array(image)
            tags = dict(getattr(image, "tag_v2", {}) or {})
    except (FileNotFoundError, UnidentifiedImageError, OSError, ValueError) as exc:
        raise RasterError(f"cannot read raster {path}: {exc}") from exc

    if pixels.ndim == 3:
        pixels = pixels[..., 0]
    if pixels.ndim != 2:
        raise RasterError(f"raster {path} does not hold a two-dimensional band")

    band = RasterBand(
        data=pixels.astype(np.float32),
        geotransform=_geotransform_from_tags(tags),
        geokeys={tag: tags[tag] for tag in _GEOKEY_TAGS if tag in tags},
        nodata=_parse_nodata(tags.get(GDAL_NODATA)),
        data_type=str(pixels.dtype),
    )
    logger.debug("read band %s (%dx%d)", path, band.width, band.height)
    return band


def _to_bytes(data: np.ndarray) -> np.ndarray:
    values = np.nan_to_num(data.astype(np.float64), nan=0.0, posinf=255.0, neginf=0.0)
    return np.clip(np.floor(values + 0.5), 0, 255).astype(np.uint8)


def _georef_directory(reference: RasterBand | None) -> TiffImagePlugin.ImageFileDirectory_v2:
    ifd = TiffImagePlugin.ImageFileDirectory_v2()

    def put(tag: int, value: object) -> None:
        ifd.tagtype[tag] = _TAG_TYPES[tag]
        ifd[tag] = value

    if reference is not None and reference.geotransform is not None:
        x0, sx, rx, y0, ry, sy = (float(v) for v in reference.geotransform)
        if rx == 0.0 and ry == 0.0:
            put(MODEL_PIXEL_SCALE, (sx, -sy, 0.0))
            put(MODEL_TIEPOINT, (0.0, 0.0, 0.0, x0, y0, 0.0))
        else:
            put(
                MODEL_TRANSFORMATION,
                (sx, rx, 0.0, x0, ry, sy, 0.0, y0,
                 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 1.0),
            )
    else:
        logger.warning("no geotransform on the reference raster; output lacks georeferencing")

    if reference is not None and reference.geokeys:
        for tag in _GEOKEY_TAGS:
            if tag in reference.geokeys:
                put(tag, reference.geokeys[tag])
    else:
        logger.warning("no projection on the reference raster; output lacks projection")

    put(GDAL_NODATA, f"{OUTPUT_NODATA:g}")
    return ifd


def write_output_tiff(
    output_path: PathLike, data: np.ndarray, reference: RasterBand | None
) -> Path:
    """Write data as a one-band uint8 GeoTIFF georeferenced like reference.

    Values are rounded and clamped to 0..255; NaN becomes 0, which is also
    recorded as the band's no-data value.
    """
    array = np.asarray(data)
    if array.ndim != 2:
        raise RasterError("output data must be a two-dimensional array")

    image = Image.fromarray(_to_bytes(array), mode="L")
    target = Path(output_path)
    try:
        image.save(target, format="TIFF", tiffinfo=_georef_directory(reference))
    except (OSError, ValueError) as exc:
        raise RasterError(f"cannot write output TIFF {target}: {exc}") from exc
    logger.info("processed data written to %s", target)
    return target