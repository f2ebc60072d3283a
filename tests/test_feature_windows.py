"""
Tests for sliding-window sample construction.
"""
import pytest
import numpy as np

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pso_forecast.core import FeatureConfig, InsufficientDataError
from pso_forecast.data_io import Observation
from pso_forecast.features import (
    build_samples, require_samples, build_training_set, step_vector, TrainingSet
)


def make_series(category, n, start_year=2000, gdp=True):
    return [
        Observation(
            year=start_year + i,
            category=category,
            value=100.0 + 10.0 * i,
            covariates={'gdp_billions': 1000.0 + i} if gdp else {}
        )
        for i in range(n)
    ]


class TestBuildSamples:
    """Tests for per-series sample construction."""

    def test_window_size_observations_give_no_samples(self):
        series = make_series('Industrial/Electricity', 4)
        assert build_samples(series, window_size=4) == []

    def test_one_extra_observation_gives_one_sample(self):
        series = make_series('Industrial/Electricity', 5)
        samples = build_samples(series, window_size=4)

        assert len(samples) == 1
        np.testing.assert_array_equal(samples[0].input, [100.0, 110.0, 120.0, 130.0])
        np.testing.assert_array_equal(samples[0].target, [140.0])
        assert samples[0].year == 2004

    def test_sample_count(self):
        series = make_series('Industrial/Electricity', 12)
        assert len(build_samples(series, window_size=4)) == 8

    def test_input_is_step_major(self):
        series = make_series('Industrial/Electricity', 3)
        samples = build_samples(series, window_size=2, covariates=('gdp_billions',))

        np.testing.assert_array_equal(samples[0].input, [100.0, 1000.0, 110.0, 1001.0])
        np.testing.assert_array_equal(samples[0].target, [120.0])

    def test_missing_covariate_is_zero(self):
        obs = Observation(2000, 'Residential/Gas', 50.0, {'gdp_billions': float('nan')})
        np.testing.assert_array_equal(
            step_vector(obs, ('gdp_billions', 'population_millions')), [50.0, 0.0, 0.0]
        )

    def test_require_samples_raises_when_short(self):
        series = make_series('Residential/Gas', 4)
        with pytest.raises(InsufficientDataError) as excinfo:
            require_samples('Residential/Gas', series, window_size=4)

        assert excinfo.value.category == 'Residential/Gas'
        assert excinfo.value.n_observations == 4
        assert excinfo.value.required == 5


class TestBuildTrainingSet:
    """Tests for the multi-category training set."""

    @pytest.fixture
    def config(self):
        return FeatureConfig(window_size=4, covariates=('gdp_billions',))

    def test_short_categories_are_skipped(self, config):
        grouped = {
            'Industrial/Electricity': make_series('Industrial/Electricity', 10),
            'Transport/Oil': make_series('Transport/Oil', 3),
        }
        training_set = build_training_set(grouped, config)

        assert training_set.n_samples == 6
        assert training_set.n_features == config.n_features == 8
        assert set(training_set.categories) == {'Industrial/Electricity'}
        assert 'Transport/Oil' in training_set.skipped

    def test_all_short_raises(self, config):
        grouped = {'Transport/Oil': make_series('Transport/Oil', 4)}
        with pytest.raises(InsufficientDataError):
            build_training_set(grouped, config)

    def test_samples_from_every_category(self, config):
        grouped = {
            'Industrial/Electricity': make_series('Industrial/Electricity', 6),
            'Residential/Gas': make_series('Residential/Gas', 7),
        }
        training_set = build_training_set(grouped, config)

        assert training_set.n_samples == 2 + 3
        assert training_set.X.shape == (5, 8)
        assert training_set.y.shape == (5,)

    def test_split_keeps_order(self):
        X = np.arange(20, dtype=float).reshape(10, 2)
        y = np.arange(10, dtype=float)
        training_set = TrainingSet(X, y, ['a'] * 10, list(range(10)))

        train, validation = training_set.split(0.2)

        assert train.n_samples == 8
        assert validation.n_samples == 2
        np.testing.assert_array_equal(validation.y, [8.0, 9.0])

    def test_split_never_empties_either_side(self):
        training_set = TrainingSet(np.ones((2, 1)), np.array([1.0, 2.0]))
        train, validation = training_set.split(0.9)

        assert train.n_samples == 1
        assert validation.n_samples == 1


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
