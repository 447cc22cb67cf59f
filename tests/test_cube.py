"""Tests for the cubical bounding volume."""

import numpy as np
import pytest

from barneshut import Body, Cube
from barneshut.spatial import DEGENERATE_AXIS_OFFSET


class TestFromPositions:
    """Tests for Cube.from_positions / Cube.from_bodies."""

    def test_empty_returns_none(self):
        """No bodies means no volume."""
        assert Cube.from_positions(np.empty((0, 3))) is None
        assert Cube.from_bodies([]) is None

    def test_width_is_max_extent(self):
        """Width is the largest per-axis extent, center the per-axis midpoint."""
        positions = np.array([[0.0, 0.0, 0.0], [4.0, 2.0, 1.0]])
        cube = Cube.from_positions(positions)
        assert cube.width == pytest.approx(4.0)
        np.testing.assert_allclose(cube.center, [2.0, 1.0, 0.5])

    def test_pad_applied_on_every_side(self):
        """Pad widens the cube by 2 * pad."""
        positions = np.array([[-1.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
        cube = Cube.from_positions(positions, pad=0.5)
        assert cube.width == pytest.approx(3.0)
        np.testing.assert_allclose(cube.center, [0.0, 0.0, 0.0])

    def test_encloses_all_bodies(self):
        """Every body lies inside the cube."""
        rng = np.random.default_rng(1)
        positions = rng.normal(size=(200, 3)) * [5.0, 1.0, 0.1]
        cube = Cube.from_positions(positions, pad=0.01)
        for p in positions:
            assert cube.contains(p)

    def test_degenerate_axis_moves_midpoint_off_plane(self):
        """Planar bodies do not sit on the dividing plane of the degenerate axis."""
        positions = np.array([[-1.0, -1.0, 0.0], [1.0, 1.0, 0.0]])
        flat = Cube.from_positions(positions)
        assert flat.center[2] == 0.0

        nudged = Cube.from_positions(positions, degenerate_axis=2)
        assert nudged.center[2] == pytest.approx(DEGENERATE_AXIS_OFFSET / 2)
        assert nudged.width == pytest.approx(2.0)

    def test_from_bodies_matches_positions(self):
        """Capability-contract entry point matches the array one."""
        bodies = [Body([0, 0, 0], 1.0), Body([2, -2, 1], 3.0)]
        a = Cube.from_bodies(bodies, pad=0.1)
        b = Cube.from_positions(np.array([[0, 0, 0], [2, -2, 1]]), pad=0.1)
        assert a == b

    def test_invalid_arguments(self):
        """Negative pad, bad axis and bad shape raise ValueError."""
        positions = np.zeros((2, 3))
        with pytest.raises(ValueError):
            Cube.from_positions(positions, pad=-1.0)
        with pytest.raises(ValueError):
            Cube.from_positions(positions, degenerate_axis=3)
        with pytest.raises(ValueError):
            Cube.from_positions(np.zeros((2, 2)))


class TestOctants:
    """Tests for octant subdivision and indexing."""

    def test_divide_into_octants(self):
        """Children have half the width and sit at the signed quarter offsets."""
        cube = Cube([0.0, 0.0, 0.0], 4.0)
        octants = cube.divide_into_octants()
        assert len(octants) == 8
        for k, child in enumerate(octants):
            assert child.width == pytest.approx(2.0)
            expected = [1.0 if k & 1 else -1.0, 1.0 if k & 2 else -1.0, 1.0 if k & 4 else -1.0]
            np.testing.assert_allclose(child.center, expected)

    def test_octant_index_sign_combinations(self):
        """A point at each sign combination maps to its 3-bit index."""
        cube = Cube([1.0, 2.0, 3.0], 2.0)
        for k in range(8):
            offset = np.array([0.5 if k & 1 else -0.5, 0.5 if k & 2 else -0.5, 0.5 if k & 4 else -0.5])
            assert cube.octant_index(cube.center + offset) == k

    def test_octant_index_matches_child_cube(self):
        """A point assigned to octant k lies in child cube k."""
        cube = Cube([0.0, 0.0, 0.0], 2.0)
        octants = cube.divide_into_octants()
        rng = np.random.default_rng(7)
        for p in rng.uniform(-1, 1, size=(50, 3)):
            assert octants[cube.octant_index(p)].contains(p)

    def test_boundary_falls_to_lower_side(self):
        """A point exactly at the center goes to octant 0."""
        cube = Cube([0.0, 0.0, 0.0], 2.0)
        assert cube.octant_index([0.0, 0.0, 0.0]) == 0
        assert cube.octant_index([0.5, 0.0, 0.0]) == 1
        assert cube.octant_index([0.0, 0.0, 0.5]) == 4


class TestCubeSerialization:
    """Tests for binary encoding of cubes."""

    def test_bytes_layout(self):
        """Encoding is 32 bytes and decodes to an equal cube."""
        cube = Cube([1.5, -2.0, 3.25], 7.0)
        data = cube.to_bytes()
        assert len(data) == 32
        assert Cube.from_bytes(data) == cube

    def test_wrong_length(self):
        """Truncated input is rejected."""
        with pytest.raises(ValueError):
            Cube.from_bytes(b"\x00" * 10)
