"""
Model of a self-organizing map: topology, lattice distances and weights
"""

from typing import Tuple

import numpy as np
import structlog

from .lattice import Lattice
from .matrix import Matrix

logger = structlog.get_logger(__name__)


class Model:
    """
    Grid of ``width x height`` neurons laid out on a lattice.

    Neuron ``i`` sits at grid cell ``(i % width, i // width)``. Its weight
    vector is row ``i`` of ``weight_matrix`` and row/column ``i`` of
    ``distance_matrix`` holds squared lattice distances to every other
    neuron.
    """

    def __init__(
        self, width: int, height: int, lattice: Lattice, data_dimension: int = 3
    ):
        """
        Args:
            width: Number of neuron columns
            height: Number of neuron rows
            lattice: Lattice used to position the neurons
            data_dimension: Dimension of the data and therefore of the weights
        """
        if data_dimension < 1:
            raise ValueError(f"data_dimension must be positive, got {data_dimension}")

        self._data_dimension = int(data_dimension)
        self._lattice = lattice
        self._width = 0
        self._height = 0
        self._distance_matrix = Matrix(0, 0)
        self._weight_matrix = Matrix(0, self._data_dimension)
        self.set_dimensions(width, height)

    @property
    def data_dimension(self) -> int:
        return self._data_dimension

    @property
    def distance_matrix(self) -> Matrix:
        """Squared euclidean lattice distance from each neuron to each other"""
        return self._distance_matrix

    @property
    def weight_matrix(self) -> Matrix:
        """Weight vectors of all neurons as row vectors"""
        return self._weight_matrix

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def neuron_count(self) -> int:
        return self._width * self._height

    @property
    def lattice(self) -> Lattice:
        return self._lattice

    @lattice.setter
    def lattice(self, lattice: Lattice) -> None:
        """Swapping the lattice only recalculates the distance matrix"""
        self._lattice = lattice
        self._calculate_distance_matrix()

    def set_dimensions(self, width: int, height: int) -> None:
        """
        Resize the model.

        This reallocates the weight matrix, so all weights are reset to zero.
        """
        if width < 1 or height < 1:
            raise ValueError(f"Map size must be at least 1x1, got {width}x{height}")

        self._width = int(width)
        self._height = int(height)

        self._distance_matrix = Matrix(self.neuron_count, self.neuron_count)
        self._calculate_distance_matrix()

        self._weight_matrix = Matrix(self.neuron_count, self._data_dimension)

    def get_neuron_index(self, x: int, y: int) -> int:
        """Row index of the neuron at grid cell (x, y)"""
        return x + y * self._width

    def neuron_grid_position(self, neuron_index: int) -> Tuple[int, int]:
        return neuron_index % self._width, neuron_index // self._width

    def neuron_position_in_lattice(self, neuron_index: int) -> np.ndarray:
        x, y = self.neuron_grid_position(neuron_index)
        return self._lattice.calculate_position(x, y)

    def neuron_positions(self) -> np.ndarray:
        """Lattice positions of all neurons, shape (neuron_count, 2)"""
        return np.array(
            [self.neuron_position_in_lattice(i) for i in range(self.neuron_count)],
            dtype=np.float64,
        ).reshape(self.neuron_count, 2)

    def _calculate_distance_matrix(self) -> None:
        positions = self.neuron_positions()
        delta = positions[:, np.newaxis, :] - positions[np.newaxis, :, :]
        self._distance_matrix.view()[:] = np.sum(delta**2, axis=-1)

        logger.debug(
            "Distance matrix recalculated",
            width=self._width,
            height=self._height,
            lattice=type(self._lattice).__name__,
        )

    def _validate_sample(self, sample) -> np.ndarray:
        sample = np.asarray(sample, dtype=np.float64)
        if sample.shape != (self._data_dimension,):
            raise ValueError(
                f"Expected sample of dimension {self._data_dimension}, "
                f"got shape {sample.shape}"
            )
        return sample

    def squared_distances(self, sample) -> np.ndarray:
        """Squared euclidean distance from a sample to every neuron's weights"""
        sample = self._validate_sample(sample)
        return np.sum((self._weight_matrix.view() - sample) ** 2, axis=1)

    def find_best_matching_unit(self, sample) -> int:
        """
        Index of the neuron whose weights are closest to ``sample``.

        Ties go to the lowest index. Neurons with NaN weights are skipped,
        if every neuron has them neuron 0 is returned.
        """
        distances = self.squared_distances(sample)
        if np.all(np.isnan(distances)):
            return 0
        return int(np.nanargmin(distances))

    def find_best_matching_units(self, sample, k: int = 2) -> np.ndarray:
        """Indices of the ``k`` closest neurons, nearest first, ties by index"""
        if k < 1:
            raise ValueError(f"k must be at least 1, got {k}")
        distances = self.squared_distances(sample)
        return np.argsort(distances, kind="stable")[: min(k, self.neuron_count)]

    def get_weights_grid(self) -> np.ndarray:
        """Copy of the weights shaped (height, width, data_dimension)"""
        return self._weight_matrix.view().reshape(
            self._height, self._width, self._data_dimension
        ).copy()
