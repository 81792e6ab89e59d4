"""The interface every band operation implements."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Callable, ClassVar, Union

_ASCII_UPPER = str.maketrans(
    "abcdefghijklmnopqrstuvwxyz", "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
)


class OperationError(Exception):
    """An operation could not be carried out."""


def normalize_name(name: str) -> str:
    """Return the registry key for an operation name (ASCII upper case)."""
    return name.translate(_ASCII_UPPER)


class Operation(ABC):
    """A computation over named bands that writes one output raster."""

    name: ClassVar[str] = ""

    @abstractmethod
    def execute(
        self,
        band_paths: Mapping[str, Union[str, Path]],
        args: Sequence[str],
        output_path: Union[str, Path],
    ) -> None:
        """Run the operation; raise OperationError on failure."""


OperationFactory = Callable[[], Operation]