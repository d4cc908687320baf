import logging
from importlib.metadata import PackageNotFoundError, version

from malg.exceptions import (
    AllocationFailure,
    DimensionMismatch,
    IndexOutOfRange,
    InvalidDimension,
    MalgError,
    ShapeMismatch,
)
from malg.matrix import Matrix, RowView

__all__ = [
    "Matrix",
    "RowView",
    "MalgError",
    "InvalidDimension",
    "AllocationFailure",
    "ShapeMismatch",
    "DimensionMismatch",
    "IndexOutOfRange",
    "__version__",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())

try:
    __version__ = version("malg")
except PackageNotFoundError:  # editable/local
    __version__ = "0.0.0"
