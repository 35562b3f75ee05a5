"""
Lattices map grid coordinates to positions in topological space
"""

from abc import ABC, abstractmethod
from typing import Union

import numpy as np

from .config import LatticeType


class Lattice(ABC):
    """Maps a grid cell (x, y) to a real-valued 2D position"""

    lattice_type: LatticeType

    @abstractmethod
    def calculate_position(self, x: int, y: int) -> np.ndarray:
        pass

    def __eq__(self, other) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class SquareLattice(Lattice):
    lattice_type = LatticeType.SQUARE

    def calculate_position(self, x: int, y: int) -> np.ndarray:
        return np.array([x, y], dtype=np.float64)


class HexagonalLattice(Lattice):
    """Every other row is shifted by half a cell and rows are compressed so
    that all six neighbors are at unit distance."""

    lattice_type = LatticeType.HEXAGONAL

    X_OFFSET = np.cos(np.pi / 3)
    Y_OFFSET = np.sin(np.pi / 3)

    def calculate_position(self, x: int, y: int) -> np.ndarray:
        return np.array(
            [x + (y % 2) * self.X_OFFSET, y * self.Y_OFFSET], dtype=np.float64
        )


def create_lattice(lattice_type: Union[LatticeType, str]) -> Lattice:
    """Build a lattice from its tag"""
    if isinstance(lattice_type, str):
        lattice_type = LatticeType(lattice_type)

    lattice_map = {
        LatticeType.SQUARE: SquareLattice,
        LatticeType.HEXAGONAL: HexagonalLattice,
    }
    if lattice_type not in lattice_map:
        raise ValueError(f"Unsupported lattice: {lattice_type}")
    return lattice_map[lattice_type]()
