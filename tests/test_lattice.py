"""
Tests for lattice topologies
"""

import numpy as np
import pytest

from somengine import HexagonalLattice, LatticeType, SquareLattice, create_lattice


@pytest.mark.unit
class TestLattices:
    """Test lattice positions"""

    def test_square_lattice_is_identity(self):
        lattice = SquareLattice()
        np.testing.assert_array_equal(lattice.calculate_position(3, 2), [3.0, 2.0])

    def test_hexagonal_even_row(self):
        lattice = HexagonalLattice()
        np.testing.assert_array_almost_equal(
            lattice.calculate_position(2, 2), [2.0, 2 * np.sqrt(3) / 2]
        )

    def test_hexagonal_odd_row_is_offset(self):
        lattice = HexagonalLattice()
        np.testing.assert_array_almost_equal(
            lattice.calculate_position(1, 1), [1.5, np.sqrt(3) / 2]
        )

    def test_hexagonal_neighbors_at_unit_distance(self):
        lattice = HexagonalLattice()
        origin = lattice.calculate_position(1, 1)
        for x, y in [(0, 1), (2, 1), (1, 0), (2, 0), (1, 2), (2, 2)]:
            distance = np.linalg.norm(lattice.calculate_position(x, y) - origin)
            assert distance == pytest.approx(1.0)


@pytest.mark.unit
class TestCreateLattice:
    """Test the lattice factory"""

    def test_from_enum_and_string(self):
        assert isinstance(create_lattice(LatticeType.SQUARE), SquareLattice)
        assert isinstance(create_lattice("hexagonal"), HexagonalLattice)

    def test_unknown_lattice(self):
        with pytest.raises(ValueError):
            create_lattice("triangular")
