"""
Tests for normalization statistics.
"""
import dataclasses
import pytest
import numpy as np

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pso_forecast.core import DegenerateNormalizationWarning
from pso_forecast.features import Normalizer, NormalizationStats, TrainingSet


class TestStandardNormalization:
    """Tests for mean/std normalization."""

    @pytest.fixture
    def training_set(self):
        X = np.array([[1.0, 10.0], [3.0, 30.0], [5.0, 20.0], [7.0, 40.0]])
        y = np.array([2.0, 4.0, 6.0, 8.0])
        return TrainingSet(X, y)

    def test_fit_statistics(self, training_set):
        stats = Normalizer('standard').fit(training_set)

        np.testing.assert_allclose(stats.input_mean, [4.0, 25.0])
        np.testing.assert_allclose(stats.input_std, training_set.X.std(axis=0))
        assert stats.output_mean == pytest.approx(5.0)
        assert stats.output_std == pytest.approx(np.std([2.0, 4.0, 6.0, 8.0]))

    def test_normalized_set_has_zero_mean_unit_std(self, training_set):
        normalizer = Normalizer('standard')
        stats = normalizer.fit(training_set)
        normalized = normalizer.transform_set(training_set, stats)

        np.testing.assert_allclose(normalized.X.mean(axis=0), 0.0, atol=1e-12)
        np.testing.assert_allclose(normalized.X.std(axis=0), 1.0)
        np.testing.assert_allclose(normalized.y.mean(), 0.0, atol=1e-12)

    def test_round_trip(self, training_set):
        stats = Normalizer().fit(training_set)
        x = np.array([2.5, 33.0])

        restored = Normalizer.inverse_transform(Normalizer.transform(x, stats), stats)
        np.testing.assert_allclose(restored, x)

        value = Normalizer.inverse_transform_output(Normalizer.transform_output(7.25, stats), stats)
        assert value == pytest.approx(7.25)

    def test_wrong_width_rejected(self, training_set):
        stats = Normalizer().fit(training_set)
        with pytest.raises(ValueError):
            Normalizer.transform(np.ones(3), stats)

    def test_zero_spread_clamped_with_warning(self):
        X = np.array([[1.0, 5.0], [2.0, 5.0], [3.0, 5.0]])
        training_set = TrainingSet(X, np.array([1.0, 2.0, 3.0]))

        with pytest.warns(DegenerateNormalizationWarning, match=r"columns \[1\];"):
            stats = Normalizer().fit(training_set)

        assert stats.input_std[1] == 1.0
        np.testing.assert_allclose(Normalizer.transform(np.array([2.0, 5.0]), stats), [0.0, 0.0])

    def test_constant_target_clamped(self):
        training_set = TrainingSet(np.array([[1.0], [2.0]]), np.array([4.0, 4.0]))

        with pytest.warns(DegenerateNormalizationWarning):
            stats = Normalizer().fit(training_set)

        assert stats.output_std == 1.0
        assert Normalizer.transform_output(4.0, stats) == 0.0

    def test_empty_set_rejected(self):
        with pytest.raises(ValueError):
            Normalizer().fit(TrainingSet(np.empty((0, 2)), np.empty(0)))


class TestStats:
    """Tests for immutability of fitted statistics."""

    def test_arrays_are_read_only(self):
        stats = NormalizationStats(np.zeros(2), np.ones(2), 0.0, 1.0)
        with pytest.raises(ValueError):
            stats.input_mean[0] = 3.0

    def test_fields_are_frozen(self):
        stats = NormalizationStats(np.zeros(2), np.ones(2), 0.0, 1.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            stats.output_mean = 2.0

    def test_stats_do_not_alias_inputs(self):
        mean = np.zeros(2)
        stats = NormalizationStats(mean, np.ones(2), 0.0, 1.0)
        mean[0] = 9.0
        assert stats.input_mean[0] == 0.0


class TestMinMaxNormalization:
    """Tests for min/range normalization."""

    def test_unit_interval(self):
        X = np.array([[0.0, -2.0], [5.0, 0.0], [10.0, 2.0]])
        training_set = TrainingSet(X, np.array([10.0, 20.0, 30.0]))
        normalizer = Normalizer('minmax')
        stats = normalizer.fit(training_set)
        normalized = normalizer.transform_set(training_set, stats)

        assert stats.method == 'minmax'
        np.testing.assert_allclose(normalized.X.min(axis=0), 0.0)
        np.testing.assert_allclose(normalized.X.max(axis=0), 1.0)
        np.testing.assert_allclose(normalized.y, [0.0, 0.5, 1.0])

    def test_unknown_method(self):
        with pytest.raises(ValueError):
            Normalizer('robust')


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
