import io
import tempfile
import zipfile

import numpy as np
import pytest
from PIL import Image

from s2ndvi.extract import ExtractionError
from s2ndvi.ndvi import NdviOperation, compute_ndvi
from s2ndvi.operation import OperationError
from s2ndvi.processor import S2Processor, format_band_details, main
from s2ndvi.raster import read_band

NIR = np.array([[3000, 1500], [0, 1200]], dtype=np.uint16)
RED = np.array([[1000, 1500], [0, 400]], dtype=np.uint16)
PREFIX = "S2X_TEST.SAFE/GRANULE/L2A/IMG_DATA/R10m/"


def _tiff_bytes(array):
    buffer = io.BytesIO()
    Image.fromarray(array).save(buffer, format="TIFF")
    return buffer.getvalue()


@pytest.fixture(autouse=True)
def isolated_tempdir(tmp_path, monkeypatch):
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))


@pytest.fixture
def product(tmp_path):
    path = tmp_path / "S2X_TEST.zip"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr(PREFIX + "T31_B08_10m.tif", _tiff_bytes(NIR))
        archive.writestr(PREFIX + "T31_B04_10m.tif", _tiff_bytes(RED))
    return path


@pytest.fixture
def empty_product(tmp_path):
    path = tmp_path / "S2X_EMPTY.zip"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("S2X_EMPTY.SAFE/manifest.safe", b"<xml/>")
    return path


def test_registration_is_case_insensitive():
    processor = S2Processor()
    assert processor.is_operation_registered("ndvi") is False
    processor.register_operation(NdviOperation())
    assert processor.is_operation_registered("ndvi") is True
    assert processor.is_operation_registered("NdVi") is True
    assert list(processor.operations) == ["NDVI"]


def test_process_ndvi_writes_expected_output(product, tmp_path):
    processor = S2Processor()
    processor.register_operation(NdviOperation())
    output = tmp_path / "ndvi.tif"
    processor.process(product, output, "ndvi", ["B08", "B04"])
    result = read_band(output)
    assert result.data_type == "uint8"
    assert np.array_equal(result.data, compute_ndvi(NIR, RED))
    assert result.nodata == 0.0
    assert sorted(processor.band_paths) == ["B04", "B08"]


def test_process_unknown_operation(product, tmp_path):
    processor = S2Processor()
    processor.register_operation(NdviOperation())
    with pytest.raises(OperationError, match="ADD"):
        processor.process(product, tmp_path / "out.tif", "ADD", [])


def test_process_missing_archive(tmp_path):
    processor = S2Processor()
    with pytest.raises(ExtractionError):
        processor.process(tmp_path / "missing.zip", tmp_path / "o.tif", "NDVI", [])


def test_process_without_bands(empty_product, tmp_path):
    processor = S2Processor()
    processor.register_operation(NdviOperation())
    with pytest.raises(OperationError, match="No Sentinel-2 bands"):
        processor.process(empty_product, tmp_path / "o.tif", "NDVI", ["B08", "B04"])


def test_process_propagates_operation_error(product, tmp_path):
    processor = S2Processor()
    processor.register_operation(NdviOperation())
    with pytest.raises(OperationError, match="2 arguments"):
        processor.process(product, tmp_path / "o.tif", "NDVI", ["B08"])


def test_format_band_details(tmp_path):
    band = tmp_path / "T31_B04_10m.tif"
    band.write_bytes(_tiff_bytes(RED))
    report = format_band_details({"B04": band})
    assert "  Band: B04" in report
    assert f"    Path: {band}" in report
    assert "Dimensions: 2x2" in report
    assert "GeoTransform: Not available." in report


def test_format_band_details_unreadable(tmp_path):
    missing = tmp_path / "nothing.tif"
    report = format_band_details({"B04": missing})
    assert report == f"  [ERROR] Could not open {missing} for details."


def test_format_band_details_empty():
    assert format_band_details({}) == "No bands found to display details."


def test_main_usage_error(capsys):
    assert main(["only", "two"]) == 1
    assert "Usage:" in capsys.readouterr().err


def test_main_success(product, tmp_path):
    output = tmp_path / "main.tif"
    assert main([str(product), str(output), "NDVI", "B08", "B04"]) == 0
    assert np.array_equal(read_band(output).data, compute_ndvi(NIR, RED))


def test_main_failure(product, tmp_path):
    output = tmp_path / "main.tif"
    assert main([str(product), str(output), "SUB", "B08", "B04"]) == 1
    assert not output.exists()