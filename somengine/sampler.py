"""
Samplers turn a dataset into a stream of training samples
"""

from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from .dataset import Dataset


class DatasetSampler(ABC):
    """Provides a stream of samples, usually drawn from a ``Dataset``"""

    def __init__(self, dataset: Optional[Dataset]):
        self.dataset = dataset

    @abstractmethod
    def next_sample(self) -> np.ndarray:
        pass


class BootstrapDatasetSampler(DatasetSampler):
    """Draws a uniformly random sample (with replacement) on each request"""

    def __init__(self, dataset: Dataset, seed: Optional[int] = None):
        super().__init__(dataset)
        self.rng = np.random.RandomState(seed)

    def next_sample(self) -> np.ndarray:
        sample_count = self.dataset.sample_count
        if sample_count == 0:
            raise ValueError("Cannot sample from an empty dataset")
        return self.dataset.get_sample(int(self.rng.randint(sample_count)))
