"""
Pytest configuration and fixtures for SOM engine tests
"""

import numpy as np
import pytest

from somengine import (
    ArrayDatasetSource,
    BootstrapDatasetSampler,
    ClusterDatasetSource,
    Dataset,
    DatasetSampler,
    HexagonalLattice,
    Model,
    SOMConfig,
    SquareLattice,
)


class FixedSampler(DatasetSampler):
    """Always returns the same sample and counts the requests"""

    def __init__(self, sample):
        super().__init__(None)
        self.sample = np.asarray(sample, dtype=np.float64)
        self.calls = 0

    def next_sample(self):
        self.calls += 1
        return self.sample


@pytest.fixture
def fixed_sampler():
    """Factory for samplers that always return one sample"""
    return FixedSampler


@pytest.fixture
def square_model():
    """4x4 square-lattice model with 2D weights"""
    return Model(4, 4, SquareLattice(), data_dimension=2)


@pytest.fixture
def hex_model():
    """5x4 hexagonal-lattice model with 3D weights"""
    return Model(5, 4, HexagonalLattice(), data_dimension=3)


@pytest.fixture
def cluster_dataset():
    """Two 3D clusters of 50 samples each"""
    return Dataset(
        [
            ClusterDatasetSource(50, [0.2, 0.2, 0.2], 0.05, seed=1),
            ClusterDatasetSource(50, [0.8, 0.7, 0.6], 0.05, seed=2),
        ]
    )


@pytest.fixture
def plane_dataset():
    """Points spread over a tilted plane in 3D"""
    rng = np.random.RandomState(42)
    a = rng.random_sample(200)
    b = rng.random_sample(200)
    samples = np.column_stack([a, b, 0.5 * a + 0.25 * b])
    return Dataset([ArrayDatasetSource(samples)])


@pytest.fixture
def bootstrap_sampler(cluster_dataset):
    return BootstrapDatasetSampler(cluster_dataset, seed=42)


@pytest.fixture
def minimal_config():
    """Small configuration for quick session tests"""
    return SOMConfig(width=4, height=3, data_dimension=3, max_iteration=50, seed=42)
