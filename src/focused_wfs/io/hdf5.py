"""HDF5 storage for focused source driving parameters.

Layout:
    /metadata           attrs: created_at, package_version, focus, focus_direction
    /config             attrs: speed_of_sound, dimension, driving_function_model,
                        reference_point
    /secondary_sources  datasets: positions (N, 3), directions (N, 3), weights (N,)
    /driving            datasets: delay (N,), weight (N,), active (N,)
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import h5py
import numpy as np
from numpy.typing import ArrayLike, NDArray

from focused_wfs.core.config import WFSConfig
from focused_wfs.core.driving import DrivingParameters
from focused_wfs.geometry.arrays import SecondarySources

FORMAT_VERSION = "0.1.0"


class DrivingParametersWriter:
    """Writer for driving parameters of one focused source.

    Example:
        >>> with DrivingParametersWriter("focus.h5", conf) as writer:
        ...     writer.write(sources, params, active, focus=(0, -1, 0))
    """

    def __init__(
        self,
        filename: str | Path,
        conf: WFSConfig,
        compression: str | None = "gzip",
        compression_level: int = 4,
    ):
        """Open the output file and store the configuration.

        Args:
            filename: Output file path
            conf: Configuration the parameters were computed with
            compression: Compression algorithm ('gzip', 'lzf', None)
            compression_level: Compression level (0-9 for gzip)
        """
        self.filename = Path(filename)
        self.conf = conf
        self.file = h5py.File(filename, "w")
        self.compression = compression
        self.compression_opts = compression_level if compression == "gzip" else None

        self._write_metadata()

    def _write_metadata(self):
        meta = self.file.create_group("metadata")
        meta.attrs["created_at"] = datetime.now(timezone.utc).isoformat()
        meta.attrs["package_version"] = FORMAT_VERSION

        config_group = self.file.create_group("config")
        for key, value in self.conf.to_dict().items():
            config_group.attrs[key] = value

    def _dataset(self, group: h5py.Group, name: str, data: NDArray):
        return group.create_dataset(
            name,
            data=data,
            compression=self.compression,
            compression_opts=self.compression_opts,
        )

    def write(
        self,
        sources: SecondarySources,
        params: DrivingParameters,
        active: ArrayLike | None = None,
        focus: ArrayLike | None = None,
        focus_direction: ArrayLike | None = None,
    ):
        """Write the secondary sources and their driving parameters.

        Each file holds one focused source, so write may only be called once.

        Args:
            sources: Secondary source distribution (N entries)
            params: Driving parameters aligned with ``sources``
            active: (N,) active mask; all True if omitted
            focus: Focused source position, stored as metadata
            focus_direction: Focused source direction, stored as metadata
        """
        if "secondary_sources" in self.file:
            raise ValueError(
                f"write() may only be called once per file, {self.filename} already holds driving parameters"
            )
        if len(params) != len(sources):
            raise ValueError(
                f"params must have {len(sources)} entries to match sources, got {len(params)}"
            )
        if active is None:
            active = np.ones(len(sources), dtype=bool)
        active = np.asarray(active, dtype=bool)
        if active.shape != (len(sources),):
            raise ValueError(f"active must have shape ({len(sources)},), got {active.shape}")

        if focus is not None:
            self.file["metadata"].attrs["focus"] = list(np.asarray(focus, dtype=np.float64))
        if focus_direction is not None:
            self.file["metadata"].attrs["focus_direction"] = list(
                np.asarray(focus_direction, dtype=np.float64)
            )

        ss_group = self.file.create_group("secondary_sources")
        self._dataset(ss_group, "positions", sources.positions).attrs["units"] = "m"
        self._dataset(ss_group, "directions", sources.directions)
        self._dataset(ss_group, "weights", sources.weights).attrs["units"] = "m"

        driving_group = self.file.create_group("driving")
        self._dataset(driving_group, "delay", params.delay).attrs["units"] = "s"
        self._dataset(driving_group, "weight", params.weight)
        self._dataset(driving_group, "active", active)

    def close(self):
        """Close the HDF5 file."""
        if self.file:
            self.file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class DrivingParametersReader:
    """Reader for files written by DrivingParametersWriter.

    Example:
        >>> with DrivingParametersReader("focus.h5") as reader:
        ...     delay, weight = reader.load_driving_parameters()
        ...     conf = reader.load_config()
    """

    def __init__(self, filename: str | Path):
        self.filename = Path(filename)
        self.file = h5py.File(filename, "r")

    def _require(self, path: str) -> h5py.Dataset:
        if path not in self.file:
            group = path.rsplit("/", 1)[0]
            available = list(self.file[group].keys()) if group in self.file else []
            raise KeyError(f"'{path}' not found in {self.filename}. Available: {available}")
        return self.file[path]

    def get_metadata(self) -> dict[str, Any]:
        """Metadata and configuration attributes as plain dicts."""
        metadata = {}
        if "metadata" in self.file:
            metadata["metadata"] = dict(self.file["metadata"].attrs)
        if "config" in self.file:
            metadata["config"] = dict(self.file["config"].attrs)
        return metadata

    def load_config(self) -> WFSConfig:
        """Rebuild the WFSConfig stored in the file."""
        if "config" not in self.file:
            raise KeyError(f"No configuration stored in {self.filename}")
        attrs = self.file["config"].attrs
        return WFSConfig(
            speed_of_sound=float(attrs["speed_of_sound"]),
            dimension=str(attrs["dimension"]),
            driving_function_model=str(attrs["driving_function_model"]),
            reference_point=tuple(float(v) for v in attrs["reference_point"]),
        )

    def load_secondary_sources(self) -> SecondarySources:
        """Load the secondary source distribution."""
        return SecondarySources(
            positions=self._require("secondary_sources/positions")[:],
            directions=self._require("secondary_sources/directions")[:],
            weights=self._require("secondary_sources/weights")[:],
        )

    def load_driving_parameters(self) -> DrivingParameters:
        """Load the delay and weight arrays."""
        return DrivingParameters(
            delay=self._require("driving/delay")[:],
            weight=self._require("driving/weight")[:],
        )

    def load_active(self) -> NDArray[np.bool_]:
        """Load the active secondary source mask."""
        return self._require("driving/active")[:].astype(bool)

    def close(self):
        """Close the HDF5 file."""
        if self.file:
            self.file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
