"""
Dataset sources and the dataset that aggregates them
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

from .config import SourceKind


class SampleIndexError(IndexError):
    """Raised when a sample index lies outside a dataset"""


class Distribution(Enum):
    UNIFORM = "uniform"
    GAUSSIAN = "gaussian"


class RandomValueCache:
    """
    Lazily drawn random values keyed by an integer index.

    The first lookup of an index draws a value, later lookups return the
    same value for as long as the cache lives.
    """

    def __init__(self, seed: Optional[int] = None):
        self.rng = np.random.RandomState(seed)
        self._values: Dict[int, float] = {}

    def get(self, index: int, distribution: Distribution = Distribution.GAUSSIAN) -> float:
        if index not in self._values:
            self._values[index] = self._generate(distribution)
        return self._values[index]

    def _generate(self, distribution: Distribution) -> float:
        if distribution == Distribution.UNIFORM:
            return float(self.rng.random_sample())
        # Box-Muller
        u1 = 1.0 - self.rng.random_sample()
        u2 = 1.0 - self.rng.random_sample()
        return float(np.sqrt(-2.0 * np.log(u1)) * np.sin(2.0 * np.pi * u2))

    def clear(self) -> None:
        self._values.clear()

    def __len__(self) -> int:
        return len(self._values)


class DatasetSource(ABC):
    """Provides ``sample_count`` samples addressed by a local index"""

    kind: SourceKind

    def __init__(self, sample_count: int):
        if sample_count < 0:
            raise ValueError(f"sample_count must be non-negative, got {sample_count}")
        self.sample_count = int(sample_count)

    @property
    def dimension(self) -> Optional[int]:
        """Dimension of the produced samples, None if unknown"""
        return None

    @abstractmethod
    def get_sample(self, sample_index: int) -> np.ndarray:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(sample_count={self.sample_count})"


class RandomDatasetSource(DatasetSource):
    """Source whose samples are built from cached random draws"""

    def __init__(self, sample_count: int, seed: Optional[int] = None):
        super().__init__(sample_count)
        self.random_values = RandomValueCache(seed)

    def get_random_value(
        self, index: int, distribution: Distribution = Distribution.GAUSSIAN
    ) -> float:
        return self.random_values.get(index, distribution)


class ClusterDatasetSource(RandomDatasetSource):
    """Gaussian blob of samples around ``center``"""

    kind = SourceKind.CLUSTER

    def __init__(
        self,
        sample_count: int,
        center: Sequence[float],
        stddev: float,
        seed: Optional[int] = None,
    ):
        super().__init__(sample_count, seed)
        self.center = np.asarray(center, dtype=np.float64)
        if self.center.ndim != 1 or self.center.size == 0:
            raise ValueError("Cluster center must be a non-empty vector")
        if stddev < 0:
            raise ValueError(f"stddev must be non-negative, got {stddev}")
        self.stddev = float(stddev)

    @property
    def dimension(self) -> int:
        return int(self.center.size)

    def get_sample(self, sample_index: int) -> np.ndarray:
        dims = self.dimension
        noise = np.array(
            [self.get_random_value(sample_index * dims + d) for d in range(dims)]
        )
        return self.center + noise * self.stddev


class CallbackDatasetSource(DatasetSource):
    """
    Samples computed by an external callable.

    The callable receives ``(index, sample_count)`` and must return the same
    vector every time it is asked for the same index.
    """

    kind = SourceKind.CALLBACK

    def __init__(
        self,
        sample_count: int,
        callback: Callable[[int, int], Sequence[float]],
        dimension: Optional[int] = None,
    ):
        super().__init__(sample_count)
        self.callback = callback
        self._dimension = dimension

    @property
    def dimension(self) -> Optional[int]:
        return self._dimension

    def get_sample(self, sample_index: int) -> np.ndarray:
        sample = np.asarray(
            self.callback(sample_index, self.sample_count), dtype=np.float64
        )
        if self._dimension is not None and sample.shape != (self._dimension,):
            raise ValueError(
                f"Callback returned shape {sample.shape}, "
                f"expected ({self._dimension},)"
            )
        return sample


class ArrayDatasetSource(DatasetSource):
    """Fixed set of samples, e.g. loaded from a file"""

    kind = SourceKind.ARRAY

    def __init__(self, samples):
        samples = np.array(samples, dtype=np.float64)
        if samples.ndim != 2:
            raise ValueError(f"Samples must be 2D array, got {samples.ndim}D")
        if samples.shape[0] == 0:
            raise ValueError("Samples are empty")
        if not np.all(np.isfinite(samples)):
            raise ValueError("Samples contain NaN or infinite values")
        super().__init__(samples.shape[0])
        self.samples = samples

    @property
    def dimension(self) -> int:
        return int(self.samples.shape[1])

    def get_sample(self, sample_index: int) -> np.ndarray:
        return self.samples[sample_index].copy()


def sphere_source(sample_count: int, seed: Optional[int] = None) -> CallbackDatasetSource:
    """Points on the surface of a sphere of radius 0.5 around (0.5, 0.5, 0.5)"""
    cache = RandomValueCache(seed)

    def sample(index: int, total: int) -> List[float]:
        a = cache.get(index * 2, Distribution.UNIFORM) * np.pi * 2
        b = cache.get(index * 2 + 1, Distribution.UNIFORM) * np.pi * 2
        return [
            np.cos(a) * np.sin(b) * 0.5 + 0.5,
            np.cos(b) * 0.5 + 0.5,
            np.sin(a) * np.sin(b) * 0.5 + 0.5,
        ]

    return CallbackDatasetSource(sample_count, sample, dimension=3)


def spiral_source(sample_count: int, seed: Optional[int] = None) -> CallbackDatasetSource:
    """Noisy spiral in the y = 0.5 plane"""
    cache = RandomValueCache(seed)

    def sample(index: int, total: int) -> List[float]:
        t = index / total
        n1, n2, n3 = (cache.get(index * 3 + d) * 0.02 for d in range(3))
        return [
            np.cos(t * 8) * t * 0.5 + 0.5 + n1,
            0.5 + n2,
            np.sin(t * 8) * t * 0.5 + 0.5 + n3,
        ]

    return CallbackDatasetSource(sample_count, sample, dimension=3)


def source_from_dict(source_dict: Dict) -> DatasetSource:
    """Create a dataset source from a config mapping with a ``kind`` tag"""
    source_dict = dict(source_dict)
    kind = source_dict.pop("kind", None)
    if isinstance(kind, str):
        kind = SourceKind(kind)

    if kind == SourceKind.CLUSTER:
        return ClusterDatasetSource(**source_dict)
    elif kind == SourceKind.ARRAY:
        return ArrayDatasetSource(**source_dict)
    elif kind == SourceKind.CALLBACK:
        return CallbackDatasetSource(**source_dict)
    raise ValueError(f"Unknown dataset source kind: {kind}")


class Dataset:
    """
    Ordered list of sources forming one contiguous sample index space.

    Global indices are assigned in source order, so adding or removing a
    source shifts the indices of every later sample.
    """

    def __init__(self, sources: Optional[List[DatasetSource]] = None):
        self.sources: List[DatasetSource] = list(sources or [])

    @property
    def sample_count(self) -> int:
        return sum(source.sample_count for source in self.sources)

    @property
    def dimension(self) -> Optional[int]:
        """Dimension declared by the first source that knows it"""
        for source in self.sources:
            if source.dimension is not None:
                return source.dimension
        return None

    def add_source(self, source: DatasetSource) -> None:
        self.sources.append(source)

    def remove_source(self, source: DatasetSource) -> None:
        self.sources = [s for s in self.sources if s is not source]

    def get_sample(self, sample_index: int) -> np.ndarray:
        if sample_index < 0:
            raise SampleIndexError(f"Sample index {sample_index} out of bounds")

        local_index = sample_index
        for source in self.sources:
            if source.sample_count > local_index:
                return source.get_sample(local_index)
            local_index -= source.sample_count

        raise SampleIndexError(
            f"Sample index {sample_index} out of bounds for "
            f"{self.sample_count} samples"
        )

    def get_all_samples(self) -> np.ndarray:
        return self._stack([self.get_sample(i) for i in range(self.sample_count)])

    def get_strided_samples(self, max_count: int) -> np.ndarray:
        """Every n-th sample, with n chosen so at most ``max_count`` are returned"""
        if max_count < 1:
            raise ValueError(f"max_count must be at least 1, got {max_count}")
        total = self.sample_count
        stride = max(1, -(-total // max_count))
        return self._stack([self.get_sample(i) for i in range(0, total, stride)])

    def _stack(self, samples: List[np.ndarray]) -> np.ndarray:
        if not samples:
            return np.empty((0, self.dimension or 0), dtype=np.float64)
        return np.array(samples, dtype=np.float64)
