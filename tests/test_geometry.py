"""
Unit tests for secondary source distributions, selection and tapering.

Tests verify:
- Array layouts (linear, circular, box) and parameter validation
- SecondarySources shape checks and direction normalization
- Focused source selection mask
- Tapering window shape and edge values
- Full array pipeline (inactive sources zeroed, weights tapered)
"""

import numpy as np
import pytest

from focused_wfs import (
    SecondarySources,
    WFSConfig,
    active_runs,
    box_array,
    circular_array,
    driving_parameters_for_array,
    focused_source_driving,
    focused_source_selection,
    linear_array,
    tapering_window,
)

# =============================================================================
# SecondarySources Tests
# =============================================================================


class TestSecondarySources:
    def test_directions_normalized(self):
        sources = SecondarySources(
            positions=[[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]],
            directions=[[0.0, -2.0, 0.0], [3.0, 4.0, 0.0]],
        )
        np.testing.assert_allclose(sources.directions, [[0.0, -1.0, 0.0], [0.6, 0.8, 0.0]])
        np.testing.assert_allclose(sources.weights, [1.0, 1.0])

    def test_single_source(self):
        sources = SecondarySources(positions=[0.0, 0.0, 0.0], directions=[0.0, 1.0, 0.0])
        assert len(sources) == 1
        assert sources.positions.shape == (1, 3)

    def test_validates_shapes(self):
        with pytest.raises(ValueError, match="positions must be Nx3"):
            SecondarySources(positions=np.zeros((3, 2)), directions=np.zeros((3, 2)))
        with pytest.raises(ValueError, match="directions must have the same shape"):
            SecondarySources(positions=np.zeros((3, 3)), directions=np.ones((2, 3)))
        with pytest.raises(ValueError, match="weights must have shape"):
            SecondarySources(
                positions=np.zeros((3, 3)), directions=np.ones((3, 3)), weights=np.ones(2)
            )

    def test_zero_direction_rejected(self):
        with pytest.raises(ValueError, match="directions must be non-zero"):
            SecondarySources(positions=np.zeros((2, 3)), directions=np.zeros((2, 3)))

    def test_subset(self):
        sources = linear_array(number=5, spacing=0.5)
        sub = sources.subset([True, False, True, False, True])
        assert len(sub) == 3
        np.testing.assert_allclose(sub.positions[:, 0], [-1.0, 0.0, 1.0])
        np.testing.assert_allclose(sub.weights, [0.5, 0.5, 0.5])


# =============================================================================
# Array Layout Tests
# =============================================================================


class TestLinearArray:
    def test_default_orientation(self):
        """Default array runs along x, centered, facing -y."""
        sources = linear_array(number=4, spacing=0.2)

        np.testing.assert_allclose(sources.positions[:, 0], [-0.3, -0.1, 0.1, 0.3])
        np.testing.assert_allclose(sources.positions[:, 1:], 0.0)
        np.testing.assert_allclose(sources.directions, np.tile([0.0, -1.0, 0.0], (4, 1)))
        np.testing.assert_allclose(sources.weights, 0.2)

    def test_center_and_orientation(self):
        sources = linear_array(number=3, spacing=1.0, center=(2.0, 1.0, 0.5), orientation=(1, 0, 0))

        np.testing.assert_allclose(sources.positions[:, 0], 2.0)
        np.testing.assert_allclose(sources.positions[:, 1], [0.0, 1.0, 2.0])
        np.testing.assert_allclose(sources.positions[:, 2], 0.5)
        np.testing.assert_allclose(sources.directions[:, 0], 1.0)

    def test_spacing(self):
        sources = linear_array(number=10, spacing=0.15, orientation=(1, 1, 0))
        gaps = np.linalg.norm(np.diff(sources.positions, axis=0), axis=1)
        np.testing.assert_allclose(gaps, 0.15)
        # Array axis perpendicular to the loudspeaker direction
        axis = sources.positions[-1] - sources.positions[0]
        np.testing.assert_allclose(axis @ sources.directions[0], 0.0, atol=1e-12)

    def test_validation(self):
        with pytest.raises(ValueError, match="number must be >= 1"):
            linear_array(number=0, spacing=0.1)
        with pytest.raises(ValueError, match="spacing must be positive"):
            linear_array(number=4, spacing=0.0)
        with pytest.raises(ValueError, match="non-zero xy component"):
            linear_array(number=4, spacing=0.1, orientation=(0, 0, 1))


class TestCircularArray:
    def test_on_circle_facing_center(self):
        sources = circular_array(number=16, radius=1.5, center=(1.0, -1.0, 0.0))

        offsets = sources.positions - np.array([1.0, -1.0, 0.0])
        np.testing.assert_allclose(np.linalg.norm(offsets, axis=1), 1.5)
        np.testing.assert_allclose(sources.directions, -offsets / 1.5, atol=1e-12)
        np.testing.assert_allclose(sources.positions[0], [2.5, -1.0, 0.0])

    def test_weights_sum_to_circumference(self):
        sources = circular_array(number=20, radius=2.0)
        np.testing.assert_allclose(np.sum(sources.weights), 2 * np.pi * 2.0)

    def test_validation(self):
        with pytest.raises(ValueError, match="radius must be positive"):
            circular_array(number=8, radius=-1.0)


class TestBoxArray:
    def test_sides_face_inward(self):
        sources = box_array(number=16, size=2.0)

        assert len(sources) == 16
        # Every loudspeaker faces the center
        to_center = -sources.positions
        assert np.all(np.sum(to_center * sources.directions, axis=1) > 0)
        # All loudspeakers on the square boundary
        np.testing.assert_allclose(np.max(np.abs(sources.positions[:, :2]), axis=1), 1.0)

    def test_counter_clockwise_order(self):
        """Neighbouring indices are neighbouring loudspeakers, across sides too."""
        sources = box_array(number=16, size=2.0)

        np.testing.assert_allclose(sources.positions[0], [-0.75, -1.0, 0.0])
        np.testing.assert_allclose(sources.positions[4], [1.0, -0.75, 0.0])
        gaps = np.linalg.norm(np.diff(sources.positions, axis=0, append=sources.positions[:1]), axis=1)
        assert np.all(gaps < 0.75)
        angles = np.unwrap(np.arctan2(sources.positions[:, 1], sources.positions[:, 0]))
        assert np.all(np.diff(angles) > 0)

    def test_validation(self):
        with pytest.raises(ValueError, match="multiple of 4"):
            box_array(number=10, size=2.0)
        with pytest.raises(ValueError, match="size must be positive"):
            box_array(number=8, size=0.0)


# =============================================================================
# Selection and Tapering Tests
# =============================================================================


class TestFocusedSourceSelection:
    def test_loudspeakers_behind_focus_active(self):
        """Focus radiating towards -y in front of a circle selects the +y half."""
        sources = circular_array(number=8, radius=1.0)
        active = focused_source_selection(sources, (0.0, 0.1, 0.0), (0.0, -1.0, 0.0))

        expected = sources.positions[:, 1] > 0.1
        np.testing.assert_array_equal(active, expected)

    def test_linear_array_fully_active(self):
        sources = linear_array(number=12, spacing=0.2)
        active = focused_source_selection(sources, (0.0, -1.0, 0.0), (0.0, -1.0, 0.0))
        assert active.all()

    def test_focus_behind_array_inactive(self):
        sources = linear_array(number=12, spacing=0.2)
        active = focused_source_selection(sources, (0.0, 1.0, 0.0), (0.0, -1.0, 0.0))
        assert not active.any()

    def test_validation(self):
        sources = linear_array(number=4, spacing=0.2)
        with pytest.raises(ValueError, match="xs must be 3D point"):
            focused_source_selection(sources, (0.0, 1.0), (0.0, -1.0, 0.0))
        with pytest.raises(ValueError, match="nxs must be 3D vector"):
            focused_source_selection(sources, (0.0, 1.0, 0.0), (0.0, -1.0))


class TestTaperingWindow:
    def test_symmetric_and_bounded(self):
        win = tapering_window(20, length=0.4)

        assert win.shape == (20,)
        np.testing.assert_allclose(win, win[::-1])
        assert np.all(win > 0)
        assert np.all(win <= 1)

    def test_flat_middle_faded_edges(self):
        win = tapering_window(50, length=0.2)

        np.testing.assert_allclose(win[10:40], 1.0)
        assert win[0] < win[1] < win[2] < 1.0

    def test_edges_increase_monotonically(self):
        win = tapering_window(30, length=1.0)
        assert np.all(np.diff(win[:15]) > 0)

    def test_disabled(self):
        np.testing.assert_array_equal(tapering_window(10, length=0.0), np.ones(10))

    def test_accepts_sources(self):
        sources = linear_array(number=12, spacing=0.2)
        np.testing.assert_array_equal(tapering_window(sources, 0.5), tapering_window(12, 0.5))

    def test_short_arrays_untapered(self):
        np.testing.assert_array_equal(tapering_window(2), np.ones(2))
        assert tapering_window(0).shape == (0,)

    def test_validation(self):
        with pytest.raises(ValueError, match="length must be in"):
            tapering_window(10, length=1.5)
        with pytest.raises(ValueError, match="number must be non-negative"):
            tapering_window(-1)


class TestActiveRuns:
    def test_open_array_runs(self):
        active = np.array([True, True, False, False, True, True, True, False])
        runs = active_runs(active)

        assert len(runs) == 2
        np.testing.assert_array_equal(runs[0], [0, 1])
        np.testing.assert_array_equal(runs[1], [4, 5, 6])

    def test_closed_array_joins_wrapping_run(self):
        active = np.array([True, True, False, False, False, True, True])

        assert len(active_runs(active)) == 2
        runs = active_runs(active, closed=True)
        assert len(runs) == 1
        np.testing.assert_array_equal(runs[0], [5, 6, 0, 1])

    def test_closed_array_fully_active_has_no_edges(self):
        assert active_runs(np.ones(8, dtype=bool), closed=True) == []
        assert len(active_runs(np.ones(8, dtype=bool))) == 1

    def test_nothing_active(self):
        assert active_runs(np.zeros(5, dtype=bool), closed=True) == []


class TestDrivingParametersForArray:
    @pytest.fixture
    def conf(self):
        return WFSConfig(dimension="2.5D", driving_function_model="reference_point",
                         reference_point=(0.0, -3.0, 0.0))

    def test_inactive_sources_zeroed(self, conf):
        sources = circular_array(number=32, radius=2.0)
        params, active = driving_parameters_for_array(
            sources, (0.0, 0.5, 0.0), (0.0, -1.0, 0.0), conf, closed=True
        )

        assert 0 < active.sum() < len(sources)
        assert np.all(params.delay[~active] == 0)
        assert np.all(params.weight[~active] == 0)
        assert np.all(params.delay[active] < 0)

    def test_matches_engine_without_taper(self, conf):
        sources = linear_array(number=16, spacing=0.25)
        xs = (0.2, -1.0, 0.0)
        params, active = driving_parameters_for_array(
            sources, xs, (0.0, -1.0, 0.0), conf, taper=0.0
        )
        direct = focused_source_driving(sources.positions, sources.directions, xs, conf)

        assert active.all()
        np.testing.assert_allclose(params.delay, direct.delay)
        np.testing.assert_allclose(params.weight, direct.weight * sources.weights)

    def test_taper_applied(self, conf):
        sources = linear_array(number=16, spacing=0.25)
        xs = (0.0, -1.0, 0.0)
        untapered, _ = driving_parameters_for_array(sources, xs, (0.0, -1.0, 0.0), conf, taper=0.0)
        tapered, _ = driving_parameters_for_array(sources, xs, (0.0, -1.0, 0.0), conf, taper=0.5)

        np.testing.assert_allclose(tapered.weight, untapered.weight * tapering_window(16, 0.5))
        assert abs(tapered.weight[0]) < abs(untapered.weight[0])

    def test_no_active_sources(self, conf):
        sources = linear_array(number=8, spacing=0.25)
        params, active = driving_parameters_for_array(
            sources, (0.0, 1.0, 0.0), (0.0, -1.0, 0.0), conf
        )
        assert not active.any()
        np.testing.assert_array_equal(params.weight, 0.0)
        assert len(params) == 8

    def test_wrapping_arc_tapered_at_its_edges(self, conf):
        """Active arc across index 0 of a circle is faded at its ends, not its middle."""
        sources = circular_array(number=16, radius=2.0)
        xs, nxs = (0.5, 0.0, 0.0), (-1.0, 0.0, 0.0)
        untapered, active = driving_parameters_for_array(
            sources, xs, nxs, conf, taper=0.0, closed=True
        )
        tapered, _ = driving_parameters_for_array(sources, xs, nxs, conf, taper=0.5, closed=True)

        arc = [13, 14, 15, 0, 1, 2, 3]
        np.testing.assert_array_equal(np.flatnonzero(active), sorted(arc))
        ratio = tapered.weight[arc] / untapered.weight[arc]
        np.testing.assert_allclose(ratio, tapering_window(7, 0.5))
        np.testing.assert_allclose(ratio[3], 1.0)
        assert ratio[0] < 1.0
        assert ratio[-1] < 1.0

    def test_partial_closed_array_is_tapered(self, conf):
        sources = circular_array(number=32, radius=2.0)
        args = (sources, (0.0, 0.5, 0.0), (0.0, -1.0, 0.0), conf)
        untapered, active = driving_parameters_for_array(*args, taper=0.0, closed=True)
        tapered, _ = driving_parameters_for_array(*args, taper=0.5, closed=True)

        assert 0 < active.sum() < len(sources)
        assert np.any(np.abs(tapered.weight[active]) < np.abs(untapered.weight[active]))

    def test_box_array_arc_tapered_across_sides(self, conf):
        sources = box_array(number=16, size=2.0)
        xs, nxs = (0.0, 0.5, 0.0), (0.0, -1.0, 0.0)
        untapered, active = driving_parameters_for_array(
            sources, xs, nxs, conf, taper=0.0, closed=True
        )
        tapered, _ = driving_parameters_for_array(sources, xs, nxs, conf, taper=1.0, closed=True)

        runs = active_runs(active, closed=True)
        assert len(runs) == 1
        run = runs[0]
        ratio = tapered.weight[run] / untapered.weight[run]
        np.testing.assert_allclose(ratio, tapering_window(len(run), 1.0))
