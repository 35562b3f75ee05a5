"""
Initializers populate a model's weight matrix before training
"""

from abc import ABC, abstractmethod
from typing import Optional, Union

import numpy as np
import structlog

from .config import InitStrategy
from .dataset import Dataset
from .model import Model
from .observability import log_initialization
from .pca import PCA, PCAConvergenceError

logger = structlog.get_logger(__name__)


class Initializer(ABC):
    """Used to initialize a ``Model``"""

    strategy: InitStrategy

    @abstractmethod
    def perform_initialization(self, dataset: Dataset, model: Model) -> None:
        pass


class RandomInitializer(Initializer):
    """Initializes all neuron weights uniformly in [0, 1)"""

    strategy = InitStrategy.RANDOM

    def __init__(self, seed: Optional[int] = None):
        self.rng = np.random.RandomState(seed)

    def perform_initialization(self, dataset: Dataset, model: Model) -> None:
        model.weight_matrix.view()[:] = self.rng.random_sample(
            (model.neuron_count, model.data_dimension)
        )
        log_initialization(self.strategy.value, "ok")


class PCAInitializer(Initializer):
    """
    Spreads the neurons over the plane of the two main principal components.

    Grid cell (x, y) is placed at ``((x + 0.5) / width, (y + 0.5) / height)``
    inside the bounding box of the projected data and mapped back into data
    space. If PCA cannot be computed the weights are left untouched.
    """

    strategy = InitStrategy.PCA

    def __init__(self, max_samples: int = 1000):
        self.max_samples = max_samples

    def perform_initialization(self, dataset: Dataset, model: Model) -> None:
        samples = dataset.get_strided_samples(self.max_samples)
        if samples.shape[0] == 0:
            logger.warning("PCA initialization skipped, dataset is empty")
            log_initialization(self.strategy.value, "skipped")
            return
        if samples.shape[1] != model.data_dimension:
            raise ValueError(
                f"Dataset dimension {samples.shape[1]} does not match "
                f"model dimension {model.data_dimension}"
            )

        k = min(2, model.data_dimension)
        try:
            pca = PCA(samples, k)
        except PCAConvergenceError as e:
            logger.warning(
                "PCA initialization skipped, decomposition failed", error=str(e)
            )
            log_initialization(self.strategy.value, "skipped")
            return

        weights = model.weight_matrix
        for y in range(model.height):
            for x in range(model.width):
                cell = np.array([(x + 0.5) / model.width, (y + 0.5) / model.height])
                weights.set_row(model.get_neuron_index(x, y), pca.recover(cell[:k]))

        logger.debug(
            "PCA initialization done",
            samples=samples.shape[0],
            neurons=model.neuron_count,
        )
        log_initialization(self.strategy.value, "ok")


def create_initializer(
    strategy: Union[InitStrategy, str], seed: Optional[int] = None
) -> Initializer:
    """Build an initializer from its tag"""
    if isinstance(strategy, str):
        strategy = InitStrategy(strategy)

    if strategy == InitStrategy.RANDOM:
        return RandomInitializer(seed)
    elif strategy == InitStrategy.PCA:
        return PCAInitializer()
    raise ValueError(f"Unsupported init strategy: {strategy}")
