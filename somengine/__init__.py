"""
SOM Engine

Self-organizing map training engine: lattice topologies, online training
with decaying learning rate and neighborhood, composable datasets, random
and PCA initialization, and map quality metrics.
"""

from .config import SOMConfig, LatticeType, InitStrategy, SourceKind
from .matrix import Matrix
from .lattice import Lattice, SquareLattice, HexagonalLattice, create_lattice
from .model import Model
from .dataset import (
    Dataset,
    DatasetSource,
    RandomDatasetSource,
    ClusterDatasetSource,
    CallbackDatasetSource,
    ArrayDatasetSource,
    Distribution,
    RandomValueCache,
    SampleIndexError,
    sphere_source,
    spiral_source,
    source_from_dict,
)
from .sampler import DatasetSampler, BootstrapDatasetSampler
from .pca import PCA, PCAConvergenceError
from .initializer import (
    Initializer,
    RandomInitializer,
    PCAInitializer,
    create_initializer,
)
from .trainer import Trainer, DecayingValue, exponential_decay, schedule_preview
from .metrics import quantization_error, topographic_error
from .callbacks import Callback, MetricsHistoryCallback, ProgressBarCallback
from .session import SOMSession
from .observability import setup_logging, trace_operation, get_metrics

__version__ = "0.1.0"

__all__ = [
    "SOMConfig",
    "LatticeType",
    "InitStrategy",
    "SourceKind",
    "Matrix",
    "Lattice",
    "SquareLattice",
    "HexagonalLattice",
    "create_lattice",
    "Model",
    "Dataset",
    "DatasetSource",
    "RandomDatasetSource",
    "ClusterDatasetSource",
    "CallbackDatasetSource",
    "ArrayDatasetSource",
    "Distribution",
    "RandomValueCache",
    "SampleIndexError",
    "sphere_source",
    "spiral_source",
    "source_from_dict",
    "DatasetSampler",
    "BootstrapDatasetSampler",
    "PCA",
    "PCAConvergenceError",
    "Initializer",
    "RandomInitializer",
    "PCAInitializer",
    "create_initializer",
    "Trainer",
    "DecayingValue",
    "exponential_decay",
    "schedule_preview",
    "quantization_error",
    "topographic_error",
    "Callback",
    "MetricsHistoryCallback",
    "ProgressBarCallback",
    "SOMSession",
    "setup_logging",
    "trace_operation",
    "get_metrics",
]
