"""
Tests for reporting plots.
"""
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from pso_forecast.data_io import Observation
from pso_forecast.forecasting import ForecastPoint, forecasts_to_frame
from pso_forecast.optimization import PENALTY_FITNESS
from pso_forecast.reporting import plot_optimization_history, plot_forecast


class TestPlots:
    """Smoke tests for figure generation."""

    @pytest.fixture
    def history(self):
        return {
            'iterations': [0, 1, 2, 3],
            'best_fitness': [4.0, 2.0, 1.0, 0.5],
            'mean_fitness': [PENALTY_FITNESS, 8.0, 3.0, 1.0]
        }

    def test_optimization_history(self, history, tmp_path):
        path = tmp_path / 'history.png'
        fig = plot_optimization_history(history, output_path=path, dpi=50)

        assert path.exists()
        plt.close(fig)

    def test_forecast(self, tmp_path):
        points = [
            ForecastPoint(2020 + i, 'A/B', 10.0 + i, 9.0 + i, 11.0 + i, 0.9)
            for i in range(3)
        ]
        past = [Observation(2015 + i, 'A/B', 5.0 + i) for i in range(5)]
        path = tmp_path / 'forecast.png'

        fig = plot_forecast(forecasts_to_frame(points), past, output_path=path, dpi=50)

        assert path.exists()
        assert fig.axes[0].get_title() == 'Forecast: A/B'
        plt.close(fig)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
