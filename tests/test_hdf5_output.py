"""Tests for HDF5 storage of driving parameters."""

import h5py
import numpy as np
import pytest

from focused_wfs import WFSConfig, driving_parameters_for_array, linear_array
from focused_wfs.io.hdf5 import DrivingParametersReader, DrivingParametersWriter


@pytest.fixture
def computed():
    conf = WFSConfig(
        speed_of_sound=340.0,
        dimension="2.5D",
        driving_function_model="reference_line",
        reference_point=(0.0, -3.0, 0.0),
    )
    sources = linear_array(number=12, spacing=0.2)
    params, active = driving_parameters_for_array(
        sources, (0.1, -1.0, 0.0), (0.0, -1.0, 0.0), conf
    )
    return conf, sources, params, active


def test_writer_structure(tmp_path, computed):
    """Test groups, datasets and attributes written to the file."""
    conf, sources, params, active = computed
    output_path = tmp_path / "focus.h5"

    with DrivingParametersWriter(output_path, conf) as writer:
        writer.write(sources, params, active, focus=(0.1, -1.0, 0.0))

    assert output_path.exists()
    with h5py.File(output_path, "r") as f:
        assert "metadata" in f
        assert "config" in f
        assert "secondary_sources" in f
        assert "driving" in f

        assert f["config"].attrs["dimension"] == "2.5D"
        assert f["config"].attrs["driving_function_model"] == "reference_line"
        assert f["config"].attrs["speed_of_sound"] == 340.0
        np.testing.assert_allclose(f["metadata"].attrs["focus"], [0.1, -1.0, 0.0])

        assert f["secondary_sources/positions"].shape == (12, 3)
        assert f["driving/delay"].attrs["units"] == "s"
        assert f["driving/weight"].shape == (12,)


def test_reader_round_trip(tmp_path, computed):
    """Test reading back configuration, sources and driving parameters."""
    conf, sources, params, active = computed
    output_path = tmp_path / "focus.h5"

    with DrivingParametersWriter(output_path, conf, compression=None) as writer:
        writer.write(sources, params, active)

    with DrivingParametersReader(output_path) as reader:
        assert reader.load_config() == conf

        loaded = reader.load_driving_parameters()
        np.testing.assert_array_equal(loaded.delay, params.delay)
        np.testing.assert_array_equal(loaded.weight, params.weight)
        np.testing.assert_array_equal(reader.load_active(), active)

        loaded_sources = reader.load_secondary_sources()
        np.testing.assert_allclose(loaded_sources.positions, sources.positions)
        np.testing.assert_allclose(loaded_sources.weights, sources.weights)

        metadata = reader.get_metadata()
        assert "created_at" in metadata["metadata"]
        assert metadata["config"]["dimension"] == "2.5D"


def test_default_active_mask(tmp_path, computed):
    conf, sources, params, _ = computed
    output_path = tmp_path / "focus.h5"

    with DrivingParametersWriter(output_path, conf) as writer:
        writer.write(sources, params)

    with DrivingParametersReader(output_path) as reader:
        assert reader.load_active().all()


def test_writer_validates_lengths(tmp_path, computed):
    conf, sources, params, active = computed

    with DrivingParametersWriter(tmp_path / "bad.h5", conf) as writer:
        with pytest.raises(ValueError, match="params must have 6 entries"):
            writer.write(sources.subset(np.arange(6)), params)
        with pytest.raises(ValueError, match="active must have shape"):
            writer.write(sources, params, active[:3])


def test_writer_single_write(tmp_path, computed):
    """Test a second write to the same file is rejected."""
    conf, sources, params, active = computed
    output_path = tmp_path / "focus.h5"

    with DrivingParametersWriter(output_path, conf) as writer:
        writer.write(sources, params, active)
        with pytest.raises(ValueError, match="may only be called once"):
            writer.write(sources, params, active)

    with DrivingParametersReader(output_path) as reader:
        np.testing.assert_allclose(reader.load_driving_parameters().weight, params.weight)


def test_reader_missing_data(tmp_path, computed):
    """Test KeyError for files without driving data."""
    conf, _, _, _ = computed
    output_path = tmp_path / "empty.h5"

    with DrivingParametersWriter(output_path, conf):
        pass

    with DrivingParametersReader(output_path) as reader:
        assert reader.load_config() == conf
        with pytest.raises(KeyError, match="driving/delay"):
            reader.load_driving_parameters()
