"""
Configuration classes and enums for the SOM engine
"""

from enum import Enum
from dataclasses import dataclass, asdict
from typing import Optional, Dict


class LatticeType(Enum):
    """Grid topologies a model can be laid out on"""

    SQUARE = "square"
    HEXAGONAL = "hexagonal"


class InitStrategy(Enum):
    """Weight initialization strategies"""

    RANDOM = "random"
    PCA = "pca"


class SourceKind(Enum):
    """Closed set of dataset source variants"""

    CLUSTER = "cluster"
    CALLBACK = "callback"
    ARRAY = "array"


@dataclass
class SOMConfig:
    """Centralized configuration for a model and its trainer"""

    # Model
    width: int = 16
    height: int = 16
    data_dimension: int = 3
    lattice: LatticeType = LatticeType.SQUARE
    init_strategy: InitStrategy = InitStrategy.PCA

    # Schedule
    max_iteration: int = 10000
    learning_rate_start: float = 0.1
    learning_rate_end: float = 0.001
    neighbor_size_start: Optional[float] = None  # Auto-calculated if None
    neighbor_size_end: float = 0.1

    # Quality metrics are computed on at most this many samples
    metric_sample_limit: int = 1000

    # Reproducibility
    seed: Optional[int] = None

    def __post_init__(self):
        """Validate sizes and fill in the default neighbor size"""
        if self.width < 1 or self.height < 1:
            raise ValueError(
                f"Map size must be at least 1x1, got {self.width}x{self.height}"
            )
        if self.data_dimension < 1:
            raise ValueError(
                f"data_dimension must be positive, got {self.data_dimension}"
            )
        if self.neighbor_size_start is None:
            self.neighbor_size_start = max(self.width, self.height) / 2
        for name in (
            "learning_rate_start",
            "learning_rate_end",
            "neighbor_size_start",
            "neighbor_size_end",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.metric_sample_limit < 1:
            raise ValueError("metric_sample_limit must be at least 1")

    def to_dict(self) -> Dict:
        """Convert config to dictionary for serialization"""
        config_dict = asdict(self)
        for key, value in config_dict.items():
            if isinstance(value, Enum):
                config_dict[key] = value.value
        return config_dict

    @classmethod
    def from_dict(cls, config_dict: Dict) -> "SOMConfig":
        """Create config from dictionary"""
        config_dict = dict(config_dict)
        enum_fields = {
            "lattice": LatticeType,
            "init_strategy": InitStrategy,
        }
        for field_name, enum_class in enum_fields.items():
            if field_name in config_dict and isinstance(config_dict[field_name], str):
                config_dict[field_name] = enum_class(config_dict[field_name])
        return cls(**config_dict)
