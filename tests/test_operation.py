import pytest

from s2ndvi.operation import Operation, OperationError, normalize_name


class _Copy(Operation):
    name = "copy"

    def execute(self, band_paths, args, output_path):
        if not args:
            raise OperationError(f"{normalize_name(self.name)} needs a band name")
        with open(output_path, "w") as handle:
            handle.write(band_paths[args[0]])


@pytest.mark.parametrize(
    "raw, expected",
    [("ndvi", "NDVI"), ("Ndvi", "NDVI"), ("NDVI", "NDVI"), ("add_2", "ADD_2")],
)
def test_normalize_name_upper_cases(raw, expected):
    assert normalize_name(raw) == expected


def test_normalize_name_is_idempotent():
    once = normalize_name("MixedCase")
    assert normalize_name(once) == once


def test_normalize_name_leaves_non_ascii_alone():
    assert normalize_name("é") == "é"


def test_operation_is_abstract():
    with pytest.raises(TypeError):
        Operation()


def test_subclass_without_execute_is_abstract():
    class Incomplete(Operation):
        name = "half"

    with pytest.raises(TypeError):
        Incomplete()
    assert "execute" in Incomplete.__abstractmethods__
    assert normalize_name(Incomplete.name) == "HALF"


def test_concrete_subclass_runs(tmp_path):
    operation = _Copy()
    out = tmp_path / "out.txt"
    operation.execute({"B04": "red.tif"}, ["B04"], out)
    assert out.read_text() == "red.tif"
    assert normalize_name(operation.name) == "COPY"


def test_subclass_reports_failure_with_operation_error(tmp_path):
    operation = _Copy()
    out = tmp_path / "out.txt"
    with pytest.raises(OperationError, match="COPY needs a band name"):
        operation.execute({}, [], out)
    assert not out.exists()
    assert normalize_name(operation.name) == "COPY"