"""HDF5 storage of driving parameters."""

from focused_wfs.io.hdf5 import (
    DrivingParametersReader,
    DrivingParametersWriter,
)

__all__ = [
    "DrivingParametersWriter",
    "DrivingParametersReader",
]
