"""
Tests for configuration classes and enums
"""

import pytest

from somengine import InitStrategy, LatticeType, SOMConfig, SourceKind


@pytest.mark.unit
class TestEnums:
    """Test enum classes"""

    def test_lattice_type_values(self):
        assert LatticeType.SQUARE.value == "square"
        assert LatticeType.HEXAGONAL.value == "hexagonal"

    def test_init_strategy_values(self):
        assert InitStrategy.RANDOM.value == "random"
        assert InitStrategy.PCA.value == "pca"

    def test_source_kind_values(self):
        assert SourceKind("cluster") is SourceKind.CLUSTER
        assert SourceKind("callback") is SourceKind.CALLBACK
        assert SourceKind("array") is SourceKind.ARRAY


@pytest.mark.unit
class TestSOMConfig:
    """Test SOMConfig dataclass"""

    def test_default_config(self):
        config = SOMConfig()
        assert config.width == 16
        assert config.height == 16
        assert config.data_dimension == 3
        assert config.lattice == LatticeType.SQUARE
        assert config.init_strategy == InitStrategy.PCA
        assert config.max_iteration == 10000
        assert config.learning_rate_start == 0.1
        assert config.learning_rate_end == 0.001
        assert config.seed is None

    def test_auto_neighbor_size(self):
        config = SOMConfig(width=10, height=6)
        assert config.neighbor_size_start == 5.0

    def test_explicit_neighbor_size(self):
        config = SOMConfig(width=10, height=6, neighbor_size_start=2.0)
        assert config.neighbor_size_start == 2.0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"width": 0},
            {"height": -1},
            {"data_dimension": 0},
            {"learning_rate_start": 0.0},
            {"learning_rate_end": -0.1},
            {"neighbor_size_end": 0.0},
            {"metric_sample_limit": 0},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            SOMConfig(**kwargs)

    def test_to_dict(self):
        config = SOMConfig(width=5, height=4, lattice=LatticeType.HEXAGONAL, seed=42)
        config_dict = config.to_dict()

        assert isinstance(config_dict, dict)
        assert config_dict["width"] == 5
        assert config_dict["lattice"] == "hexagonal"
        assert config_dict["init_strategy"] == "pca"
        assert config_dict["neighbor_size_start"] == 2.5
        assert config_dict["seed"] == 42

    def test_from_dict(self):
        config = SOMConfig.from_dict(
            {"width": 8, "height": 3, "lattice": "hexagonal", "init_strategy": "random"}
        )
        assert config.width == 8
        assert config.lattice == LatticeType.HEXAGONAL
        assert config.init_strategy == InitStrategy.RANDOM
        assert config.neighbor_size_start == 4.0

    def test_from_dict_does_not_mutate_input(self):
        data = {"lattice": "square"}
        SOMConfig.from_dict(data)
        assert data == {"lattice": "square"}

    def test_round_trip(self):
        original = SOMConfig(
            width=7,
            height=9,
            data_dimension=2,
            lattice=LatticeType.HEXAGONAL,
            init_strategy=InitStrategy.RANDOM,
            max_iteration=500,
            seed=3,
        )
        assert SOMConfig.from_dict(original.to_dict()) == original

    def test_unknown_enum_value(self):
        with pytest.raises(ValueError):
            SOMConfig.from_dict({"lattice": "triangular"})
