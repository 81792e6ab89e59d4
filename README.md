# s2ndvi

`s2ndvi` takes a zipped Sentinel-2 product, unpacks it into a temporary
directory, finds the band images under `IMG_DATA`, and runs a raster operation
on them. The built-in operation is `NDVI`, which writes a single-band 8-bit
GeoTIFF.

## Installation

```
pip install .
```

The test suite needs the `test` extra:

```
pip install ".[test]"
pytest
```

## Command line

```
s2ndvi <zip_file_path> <output_tiff_path> <operation> [operation_args...]
```

Example:

```
s2ndvi S2A_MSIL2A_example.zip output_ndvi.tif NDVI B08 B04
```

With fewer than three arguments the command prints a usage message and exits
with status 1. The operation name does not depend on case. `NDVI` takes two
arguments: the name of the near-infrared band and the name of the red band
(for example `B08 B04`). Progress, including a report on each discovered band,
is logged to standard error. The command exits with status 0 on success and 1
on failure.

### Extraction

The archive is unpacked into a new directory named `s2_extract_<timestamp>`
under the system temporary directory. The `.SAFE` root is taken from the path
of the first archive entry; if that path holds no `.SAFE/` component, it is
inferred from the archive's file name. Entries whose paths would land outside
the destination are refused.

### Band discovery

A file counts as a band when it ends in `.jp2` or `.tif`, its path contains
`IMG_DATA`, and its name has `_B` followed by a band code such as `B04`, `B08`
or `B8A`. When a band exists at more than one resolution (`R10m`, `R20m`,
`R60m` directories), the 10 m version is preferred, then 20 m, then 60 m.

### NDVI output

A pixel is written as 0 (the output's no-data value) when NIR + red is zero,
either input is NaN, or either input is negative. Other pixels get

```
raw    = (nir - red) / (nir + red - 2000)
scaled = 1 + clip(raw, 0, 1) * 250
```

The result is rounded, clamped to 0–255 and stored as an unsigned byte. The
output carries the GeoTIFF georeferencing tags (geotransform and geokeys) of
the NIR band, when that band has them, and records 0 as its no-data value.

## Library use

```python
import numpy as np
from s2ndvi.ndvi import NdviOperation, compute_ndvi
from s2ndvi.processor import S2Processor

scaled = compute_ndvi(np.array([[3000.0]]), np.array([[1000.0]]))

processor = S2Processor()
processor.register_operation(NdviOperation())
processor.process("product.zip", "ndvi.tif", "ndvi", ["B08", "B04"])
```

`S2Processor.process` raises `ExtractionError` when the archive cannot be
unpacked, and `OperationError` when no bands are found, the operation is not
registered, or the operation fails.

Modules:

- `s2ndvi.processor`: `S2Processor` (`register_operation`,
  `is_operation_registered`, `process`), `format_band_details(band_paths)` and
  the command's `main(argv=None)`.
- `s2ndvi.extract`: `create_temp_dir()`, `extract_archive(zip_path, dest_dir)`,
  which returns the extracted `.SAFE` directory, and `ExtractionError`.
- `s2ndvi.bands`: `find_band_files(extracted_dir)`,
  `band_name_from_filename(filename)` and `resolution_of(path)`.
- `s2ndvi.raster`: `RasterBand`, `read_band(path)`,
  `write_output_tiff(output_path, data, reference)` and `RasterError`.
- `s2ndvi.ndvi`: `compute_ndvi(nir, red)` and `NdviOperation`.
- `s2ndvi.operation`: the `Operation` base class, `OperationError` and
  `normalize_name(name)`. Subclass `Operation`, give it a `name`, implement
  `execute(band_paths, args, output_path)`, and register an instance with an
  `S2Processor`.

## Limitations

- Operations are not discovered from a plugin directory. The command only
  knows `NDVI`; other operations must be registered in Python code.
- Rasters are read with Pillow. Only the first band is used, georeferencing is
  read only from GeoTIFF tags, and `.jp2` files can be read only where Pillow
  has JPEG 2000 support.
- The band report shows the coordinate system citation stored in the GeoTIFF
  geokeys, not a full coordinate reference system definition.
- The temporary extraction directory is not removed after processing.