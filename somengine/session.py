"""
Session bundling model, dataset, initializer and trainer
"""

from datetime import datetime
from typing import Dict, List, Optional, Union

import structlog

from .callbacks import Callback
from .config import InitStrategy, LatticeType, SOMConfig
from .dataset import Dataset
from .initializer import Initializer, create_initializer
from .lattice import create_lattice
from .model import Model
from .observability import trace_operation
from .sampler import BootstrapDatasetSampler
from .trainer import DecayingValue, Trainer

logger = structlog.get_logger(__name__)


class SOMSession:
    """
    Everything a front end needs to drive one self-organizing map.

    The session owns the model, dataset, sampler, initializer and trainer
    built from a ``SOMConfig`` and keeps them consistent when the user
    resizes the map or swaps the lattice or initializer.
    """

    def __init__(self, config: SOMConfig, dataset: Optional[Dataset] = None):
        self.config = config
        self.dataset = dataset if dataset is not None else Dataset()

        self.model = Model(
            config.width,
            config.height,
            create_lattice(config.lattice),
            data_dimension=config.data_dimension,
        )
        self.initializer: Initializer = create_initializer(
            config.init_strategy, seed=config.seed
        )
        self.trainer = Trainer(
            self.model,
            BootstrapDatasetSampler(self.dataset, seed=config.seed),
            max_iteration=config.max_iteration,
            learning_rate_bounds=DecayingValue(
                config.learning_rate_start, config.learning_rate_end
            ),
            neighbor_size_bounds=DecayingValue(
                config.neighbor_size_start, config.neighbor_size_end
            ),
        )
        self.metadata = {
            "creation_time": datetime.now().isoformat(),
            "initializations": 0,
            "config": config.to_dict(),
        }

    def initialize(self) -> "SOMSession":
        """Run the current initializer on the model"""
        with trace_operation(
            "initialize", strategy=self.initializer.strategy.value
        ):
            self.initializer.perform_initialization(self.dataset, self.model)
        self.metadata["initializations"] += 1
        return self

    def train(
        self,
        iterations: Optional[int] = None,
        callbacks: Optional[List[Callback]] = None,
        chunk_size: Optional[int] = None,
    ) -> int:
        """
        Train for ``iterations`` steps, or until the schedule is finished.

        Args:
            iterations: Number of iterations, defaults to the rest of the schedule
            callbacks: Extra callbacks attached for this call only
            chunk_size: Split the run into ``iterate`` calls of this size so
                callbacks fire between chunks

        Returns:
            Number of iterations performed
        """
        if iterations is None:
            iterations = self.trainer.max_iteration - self.trainer.current_iteration
        if chunk_size is None or chunk_size < 1:
            chunk_size = max(1, iterations)

        previous_callbacks = self.trainer.callbacks
        self.trainer.callbacks = previous_callbacks + list(callbacks or [])
        try:
            with trace_operation(
                "train",
                width=self.model.width,
                height=self.model.height,
                iterations=iterations,
            ):
                performed = 0
                while performed < iterations:
                    steps = self.trainer.iterate(
                        min(chunk_size, iterations - performed)
                    )
                    if steps == 0:
                        break
                    performed += steps
                return performed
        finally:
            self.trainer.callbacks = previous_callbacks

    def step(self, count: int = 1) -> int:
        """
        Advance ``count`` iterations, computing each next state into a
        scratch matrix before committing it.

        This is the hand-off a renderer uses to animate between states.
        """
        target = self.model.weight_matrix.clone_without_data()
        performed = 0
        for _ in range(count):
            if self.trainer.iterate(1, target) == 0:
                break
            self.model.weight_matrix.copy_from(target)
            performed += 1
        return performed

    def resize(self, width: int, height: int) -> None:
        """Change the map size, which resets weights and training progress"""
        self.model.set_dimensions(width, height)
        self.config.width = width
        self.config.height = height
        self.trainer.reset()
        logger.info("Model resized", width=width, height=height)

    def set_lattice(self, lattice_type: Union[LatticeType, str]) -> None:
        lattice = create_lattice(lattice_type)
        self.model.lattice = lattice
        self.config.lattice = lattice.lattice_type

    def set_initializer(self, strategy: Union[InitStrategy, str]) -> None:
        self.initializer = create_initializer(strategy, seed=self.config.seed)
        self.config.init_strategy = self.initializer.strategy

    def reset(self) -> "SOMSession":
        """Rewind the trainer and re-initialize the weights"""
        self.trainer.reset()
        return self.initialize()

    def metrics(self) -> Dict[str, float]:
        limit = self.config.metric_sample_limit
        return {
            "qe": self.trainer.quantization_error(max_samples=limit),
            "te": self.trainer.topographic_error(max_samples=limit),
        }

    def get_info(self) -> Dict:
        """Get comprehensive information about the session"""
        return {
            "config": self.config.to_dict(),
            "metadata": self.metadata,
            "shape": (self.model.width, self.model.height),
            "neuron_count": self.model.neuron_count,
            "data_dimension": self.model.data_dimension,
            "sample_count": self.dataset.sample_count,
            "current_iteration": self.trainer.current_iteration,
            "max_iteration": self.trainer.max_iteration,
            "progress": self.trainer.progress,
            "learning_rate": self.trainer.learning_rate,
            "neighbor_size": self.trainer.neighbor_size,
            "has_finished": self.trainer.has_finished,
        }
