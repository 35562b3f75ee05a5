"""
Online training of a model with decaying learning rate and neighborhood
"""

import time
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
import structlog

from . import metrics
from .callbacks import Callback
from .dataset import Dataset
from .matrix import Matrix
from .model import Model
from .observability import log_iterate_metrics, log_quality_metrics
from .sampler import DatasetSampler

logger = structlog.get_logger(__name__)


@dataclass
class DecayingValue:
    """Bounds of a value that decays over training progress"""

    start: float  # value at progress 0
    end: float  # value at progress 1

    def __post_init__(self):
        if self.start <= 0 or self.end <= 0:
            raise ValueError(
                f"Decaying value bounds must be positive, got {self.start} -> {self.end}"
            )


def exponential_decay(value: DecayingValue, t: float) -> float:
    """Interpolate exponentially from ``value.start`` (t=0) to ``value.end`` (t=1)"""
    return value.start * (value.end / value.start) ** t


def schedule_preview(
    learning_rate_bounds: DecayingValue,
    neighbor_size_bounds: DecayingValue,
    points: int = 11,
) -> List[Tuple[float, float, float]]:
    """(progress, learning_rate, neighbor_size) at evenly spaced progress values"""
    if points < 2:
        raise ValueError(f"points must be at least 2, got {points}")
    return [
        (
            float(t),
            exponential_decay(learning_rate_bounds, t),
            exponential_decay(neighbor_size_bounds, t),
        )
        for t in np.linspace(0.0, 1.0, points)
    ]


class Trainer:
    """
    Drives the online learning loop of a ``Model``.

    Each iteration draws one sample, finds its best matching unit and blends
    every neuron towards the sample, weighted by a gaussian of its squared
    lattice distance to the BMU. The trainer only counts iterations:
    ``reset`` rewinds the schedule but leaves the weights alone.
    """

    # Exponents below this give an influence under exp(-2.3) ~ 0.1 and are
    # treated as zero.
    NEIGHBORHOOD_CUTOFF = -2.3

    def __init__(
        self,
        model: Model,
        dataset_sampler: DatasetSampler,
        max_iteration: int = 10000,
        learning_rate_bounds: Optional[DecayingValue] = None,
        neighbor_size_bounds: Optional[DecayingValue] = None,
        callbacks: Optional[List[Callback]] = None,
    ):
        self.model = model
        self.dataset_sampler = dataset_sampler
        self.current_iteration = 0
        self.max_iteration = max_iteration
        self.learning_rate_bounds = learning_rate_bounds or DecayingValue(0.1, 0.001)
        self.neighbor_size_bounds = neighbor_size_bounds or DecayingValue(
            max(model.width, model.height) / 2, 0.1
        )
        self.callbacks: List[Callback] = list(callbacks or [])

    @property
    def progress(self) -> float:
        """Training progress in [0, 1]"""
        if self.max_iteration <= 0:
            return 1.0
        return min(1.0, self.current_iteration / self.max_iteration)

    @property
    def learning_rate(self) -> float:
        return exponential_decay(self.learning_rate_bounds, self.progress)

    @property
    def neighbor_size(self) -> float:
        return exponential_decay(self.neighbor_size_bounds, self.progress)

    @property
    def has_finished(self) -> bool:
        return self.current_iteration >= self.max_iteration

    def iterate(self, count: int, target_matrix: Optional[Matrix] = None) -> int:
        """
        Perform up to ``count`` training iterations.

        Args:
            count: Number of iterations, clamped to the remaining schedule
            target_matrix: Matrix receiving the updated weights. Defaults to
                the model's weight matrix. Updates are always computed from
                the model's current weights, so a separate target holds the
                next state without touching the live weights.

        Returns:
            Number of iterations performed
        """
        target = self.model.weight_matrix if target_matrix is None else target_matrix
        if target.shape != self.model.weight_matrix.shape:
            raise ValueError(
                f"Target matrix shape {target.shape} does not match "
                f"weight matrix shape {self.model.weight_matrix.shape}"
            )

        count = min(count, self.max_iteration - self.current_iteration)
        if count <= 0:
            return 0

        for callback in self.callbacks:
            callback.on_iterate_begin(self)

        start_time = time.time()
        for _ in range(count):
            self._step(target)
            self.current_iteration += 1
        duration = time.time() - start_time

        log_iterate_metrics(count, duration)
        logger.debug(
            "Iterations performed",
            steps=count,
            current_iteration=self.current_iteration,
            max_iteration=self.max_iteration,
            duration_seconds=duration,
        )

        for callback in self.callbacks:
            callback.on_iterate_end(self, count)

        if self.has_finished:
            logger.info("Training finished", iterations=self.current_iteration)
            for callback in self.callbacks:
                callback.on_training_finished(self)

        return count

    def _step(self, target: Matrix) -> None:
        sample = np.asarray(self.dataset_sampler.next_sample(), dtype=np.float64)
        if sample.shape != (self.model.data_dimension,):
            raise ValueError(
                f"Sampler returned shape {sample.shape}, "
                f"expected ({self.model.data_dimension},)"
            )

        learning_rate = self.learning_rate
        neighbor_size_sqr = self.neighbor_size**2

        bmu = self.model.find_best_matching_unit(sample)

        dist_sqr = self.model.distance_matrix.view()[bmu]
        exponent = -dist_sqr / (2 * neighbor_size_sqr)
        influence = np.where(
            exponent < self.NEIGHBORHOOD_CUTOFF, 0.0, np.exp(exponent)
        )
        lf = (1.0 - learning_rate * influence)[:, np.newaxis]

        # blend between previous weights and the sample
        weights = self.model.weight_matrix.view()
        target.view()[:] = weights * lf + sample * (1.0 - lf)

    def reset(self) -> None:
        """Rewind to iteration 0, weights and bounds are left untouched"""
        self.current_iteration = 0

    def _metric_samples(self, dataset: Optional[Dataset], max_samples: int) -> np.ndarray:
        if dataset is None:
            dataset = self.dataset_sampler.dataset
        if dataset is None:
            raise ValueError("No dataset available for computing metrics")
        return dataset.get_strided_samples(max_samples)

    def quantization_error(
        self, dataset: Optional[Dataset] = None, max_samples: int = 1000
    ) -> float:
        """Quantization error on a strided subsample of the dataset"""
        qe = metrics.quantization_error(
            self.model, self._metric_samples(dataset, max_samples)
        )
        log_quality_metrics(qe=qe)
        return qe

    def topographic_error(
        self, dataset: Optional[Dataset] = None, max_samples: int = 1000
    ) -> float:
        """Topographic error on a strided subsample of the dataset"""
        te = metrics.topographic_error(
            self.model, self._metric_samples(dataset, max_samples)
        )
        log_quality_metrics(te=te)
        return te

    def schedule_preview(self, points: int = 11) -> List[Tuple[float, float, float]]:
        """(progress, learning_rate, neighbor_size) at evenly spaced progress values"""
        return schedule_preview(
            self.learning_rate_bounds, self.neighbor_size_bounds, points
        )
