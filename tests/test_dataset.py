"""
Tests for dataset sources, the dataset and the sampler
"""

import numpy as np
import pytest

from somengine import (
    ArrayDatasetSource,
    BootstrapDatasetSampler,
    CallbackDatasetSource,
    ClusterDatasetSource,
    Dataset,
    Distribution,
    RandomValueCache,
    SampleIndexError,
    SourceKind,
    source_from_dict,
    sphere_source,
    spiral_source,
)


def recording_source(count, tag):
    """Callback source returning (tag, local index) and logging calls"""
    calls = []

    def callback(index, total):
        calls.append((index, total))
        return [tag, index]

    return CallbackDatasetSource(count, callback, dimension=2), calls


@pytest.mark.unit
class TestRandomValues:
    """Test the per-index random value cache"""

    def test_same_index_same_value(self):
        cache = RandomValueCache(seed=3)
        first = cache.get(17)
        cache.get(18)
        assert cache.get(17) == first
        assert len(cache) == 2

    def test_uniform_range(self):
        cache = RandomValueCache(seed=3)
        values = [cache.get(i, Distribution.UNIFORM) for i in range(500)]
        assert all(0.0 <= v < 1.0 for v in values)

    def test_gaussian_moments(self):
        cache = RandomValueCache(seed=3)
        values = np.array([cache.get(i) for i in range(5000)])
        assert abs(values.mean()) < 0.1
        assert abs(values.std() - 1.0) < 0.1

    def test_caches_are_independent(self):
        a = RandomValueCache(seed=1)
        b = RandomValueCache(seed=2)
        assert a.get(0) != b.get(0)


@pytest.mark.unit
class TestSources:
    """Test the dataset source variants"""

    def test_cluster_sample_is_stable(self):
        source = ClusterDatasetSource(10, [0.5, 0.5, 0.5], 0.1)
        first = source.get_sample(4)
        source.get_sample(5)
        np.testing.assert_array_equal(source.get_sample(4), first)
        assert source.kind == SourceKind.CLUSTER
        assert source.dimension == 3

    def test_cluster_uses_center_and_stddev(self):
        source = ClusterDatasetSource(2000, [1.0, -2.0], 0.01, seed=0)
        samples = np.array([source.get_sample(i) for i in range(2000)])
        np.testing.assert_array_almost_equal(samples.mean(axis=0), [1.0, -2.0], decimal=2)
        assert samples.std(axis=0).max() < 0.02

    def test_cluster_zero_stddev_is_center(self):
        source = ClusterDatasetSource(3, [0.1, 0.2], 0.0)
        np.testing.assert_array_equal(source.get_sample(1), [0.1, 0.2])

    def test_callback_source_contract(self):
        source, calls = recording_source(7, 1.0)
        np.testing.assert_array_equal(source.get_sample(3), [1.0, 3.0])
        assert calls == [(3, 7)]

    def test_callback_source_checks_dimension(self):
        source = CallbackDatasetSource(2, lambda i, n: [1.0, 2.0, 3.0], dimension=2)
        with pytest.raises(ValueError, match="expected"):
            source.get_sample(0)

    def test_array_source(self):
        source = ArrayDatasetSource([[1.0, 2.0], [3.0, 4.0]])
        assert source.sample_count == 2
        np.testing.assert_array_equal(source.get_sample(1), [3.0, 4.0])

    def test_array_source_rejects_bad_data(self):
        with pytest.raises(ValueError, match="2D"):
            ArrayDatasetSource([1.0, 2.0])
        with pytest.raises(ValueError, match="empty"):
            ArrayDatasetSource(np.zeros((0, 2)))
        with pytest.raises(ValueError, match="NaN"):
            ArrayDatasetSource([[np.nan, 1.0]])

    def test_sphere_points_lie_on_sphere(self):
        source = sphere_source(50, seed=0)
        for i in range(50):
            radius = np.linalg.norm(source.get_sample(i) - 0.5)
            assert radius == pytest.approx(0.5)
        np.testing.assert_array_equal(source.get_sample(7), source.get_sample(7))

    def test_spiral_is_deterministic(self):
        source = spiral_source(100, seed=0)
        np.testing.assert_array_equal(source.get_sample(42), source.get_sample(42))
        assert source.get_sample(0).shape == (3,)

    def test_source_from_dict(self):
        source = source_from_dict(
            {"kind": "cluster", "sample_count": 5, "center": [0, 0], "stddev": 0.1}
        )
        assert isinstance(source, ClusterDatasetSource)
        assert source.sample_count == 5

        with pytest.raises(ValueError):
            source_from_dict({"kind": "mystery", "sample_count": 1})


@pytest.mark.unit
class TestDataset:
    """Test sample routing across sources"""

    def test_sample_count(self):
        first, _ = recording_source(3, 0.0)
        second, _ = recording_source(5, 1.0)
        assert Dataset([first, second]).sample_count == 8
        assert Dataset().sample_count == 0

    def test_index_routing(self):
        first, first_calls = recording_source(3, 0.0)
        second, second_calls = recording_source(5, 1.0)
        dataset = Dataset([first, second])

        for i in range(3):
            np.testing.assert_array_equal(dataset.get_sample(i), [0.0, i])
        for i in range(3, 8):
            np.testing.assert_array_equal(dataset.get_sample(i), [1.0, i - 3])

        assert [c[0] for c in first_calls] == [0, 1, 2]
        assert [c[0] for c in second_calls] == [0, 1, 2, 3, 4]

    @pytest.mark.parametrize("index", [8, 100, -1])
    def test_index_out_of_bounds(self, index):
        first, _ = recording_source(3, 0.0)
        second, _ = recording_source(5, 1.0)
        with pytest.raises(SampleIndexError, match="out of bounds"):
            Dataset([first, second]).get_sample(index)

    def test_out_of_bounds_is_index_error(self):
        with pytest.raises(IndexError):
            Dataset().get_sample(0)

    def test_add_and_remove_sources(self):
        first, _ = recording_source(3, 0.0)
        second, _ = recording_source(5, 1.0)
        dataset = Dataset([first])
        dataset.add_source(second)
        assert dataset.sample_count == 8

        dataset.remove_source(first)
        assert dataset.sample_count == 5
        np.testing.assert_array_equal(dataset.get_sample(0), [1.0, 0.0])

    def test_get_all_samples(self, cluster_dataset):
        samples = cluster_dataset.get_all_samples()
        assert samples.shape == (100, 3)
        np.testing.assert_array_equal(samples[60], cluster_dataset.get_sample(60))

    def test_get_all_samples_empty(self):
        assert Dataset().get_all_samples().shape[0] == 0

    def test_strided_samples(self, cluster_dataset):
        samples = cluster_dataset.get_strided_samples(10)
        assert samples.shape == (10, 3)
        np.testing.assert_array_equal(samples[1], cluster_dataset.get_sample(10))

        assert cluster_dataset.get_strided_samples(1000).shape == (100, 3)
        assert cluster_dataset.get_strided_samples(30).shape[0] <= 30

    def test_dimension(self, cluster_dataset):
        assert cluster_dataset.dimension == 3
        assert Dataset().dimension is None


@pytest.mark.unit
class TestBootstrapSampler:
    """Test random sampling with replacement"""

    def test_draws_samples_from_dataset(self, cluster_dataset):
        sampler = BootstrapDatasetSampler(cluster_dataset, seed=0)
        all_samples = cluster_dataset.get_all_samples()
        for _ in range(20):
            sample = sampler.next_sample()
            assert np.any(np.all(all_samples == sample, axis=1))

    def test_covers_all_sources(self):
        first, first_calls = recording_source(3, 0.0)
        second, second_calls = recording_source(5, 1.0)
        sampler = BootstrapDatasetSampler(Dataset([first, second]), seed=0)
        for _ in range(200):
            sampler.next_sample()
        assert first_calls and second_calls

    def test_seeded_sampler_is_reproducible(self, cluster_dataset):
        a = BootstrapDatasetSampler(cluster_dataset, seed=5)
        b = BootstrapDatasetSampler(cluster_dataset, seed=5)
        for _ in range(10):
            np.testing.assert_array_equal(a.next_sample(), b.next_sample())

    def test_empty_dataset(self):
        with pytest.raises(ValueError, match="empty"):
            BootstrapDatasetSampler(Dataset()).next_sample()
