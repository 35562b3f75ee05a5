"""
Map quality metrics
"""

import numpy as np

from .model import Model

# Squared lattice distance up to which two neurons count as neighbors.
# The slack absorbs rounding in the hexagonal lattice offsets.
ADJACENCY_THRESHOLD = 1.0 + 1e-9


def _validate_samples(model: Model, samples) -> np.ndarray:
    samples = np.asarray(samples, dtype=np.float64)
    if samples.ndim != 2:
        raise ValueError(f"Samples must be 2D array, got {samples.ndim}D")
    if samples.shape[0] == 0:
        raise ValueError("Samples are empty")
    if samples.shape[1] != model.data_dimension:
        raise ValueError(
            f"Expected {model.data_dimension} features, got {samples.shape[1]}"
        )
    return samples


def _squared_distances(model: Model, samples: np.ndarray) -> np.ndarray:
    """(n_samples, neuron_count) squared distances to every neuron's weights"""
    weights = model.weight_matrix.view()
    return np.sum((samples[:, np.newaxis, :] - weights[np.newaxis, :, :]) ** 2, axis=-1)


def quantization_error(model: Model, samples) -> float:
    """Mean euclidean distance between each sample and its BMU's weights"""
    samples = _validate_samples(model, samples)
    distances = _squared_distances(model, samples)
    return float(np.mean(np.sqrt(np.nanmin(distances, axis=1))))


def topographic_error(model: Model, samples) -> float:
    """Fraction of samples whose two best matching units are not neighbors"""
    samples = _validate_samples(model, samples)
    if model.neuron_count < 2:
        return 0.0

    distances = _squared_distances(model, samples)
    order = np.argsort(distances, axis=1, kind="stable")
    first, second = order[:, 0], order[:, 1]
    lattice_distances = model.distance_matrix.view()[first, second]
    return float(np.mean(lattice_distances > ADJACENCY_THRESHOLD))
