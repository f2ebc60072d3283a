"""
Tests for scenario adjustments.
"""
import pytest
import numpy as np

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pso_forecast.core import ConfigError
from pso_forecast.forecasting import ScenarioAdjustment, BASELINE


class TestFactors:
    """Tests for combined multipliers."""

    def test_baseline(self):
        assert BASELINE.is_baseline
        assert BASELINE.factor('Industrial/Electricity', 2030) == 1.0

    def test_factors_multiply(self):
        scenario = ScenarioAdjustment(
            category_factors={'Industrial': 1.2},
            source_factors={'Electricity': 1.1},
            yearly_factors={2030: 0.5}
        )
        assert not scenario.is_baseline
        assert scenario.factor('Industrial/Electricity', 2030) == pytest.approx(0.66)
        assert scenario.factor('Industrial/Electricity', 2031) == pytest.approx(1.32)
        assert scenario.factor('Residential/Gas', 2031) == pytest.approx(1.0)

    def test_full_key_wins_over_sector(self):
        scenario = ScenarioAdjustment(
            category_factors={'Industrial': 2.0, 'Industrial/Gas': 3.0}
        )
        assert scenario.factor('Industrial/Gas', 2025) == 3.0
        assert scenario.factor('Industrial/Oil', 2025) == 2.0

    def test_plain_category_key(self):
        scenario = ScenarioAdjustment(global_factor=0.9, category_factors={'total': 2.0})
        assert scenario.factor('total', 2025) == pytest.approx(1.8)

    def test_invalid_target(self):
        with pytest.raises(ConfigError):
            ScenarioAdjustment(apply_to='weights')


class TestWindowAdjustment:
    """Tests for input-window and prediction adjustments."""

    FIELDS = ('value', 'gdp_billions')

    def test_input_factor_scales_value_field_only(self):
        window = np.array([[10.0, 100.0], [20.0, 200.0]])
        scenario = ScenarioAdjustment(global_factor=1.5)

        adjusted = scenario.adjust_window(window, self.FIELDS, 'A/B', 2021, 2020)

        np.testing.assert_allclose(adjusted, [[15.0, 100.0], [30.0, 200.0]])
        np.testing.assert_array_equal(window, [[10.0, 100.0], [20.0, 200.0]])

    def test_growth_compounds_from_origin(self):
        window = np.ones((2, 2))
        scenario = ScenarioAdjustment(growth_rates={'gdp_billions': 10.0})

        adjusted = scenario.adjust_window(window, self.FIELDS, 'A/B', 2022, 2020)

        np.testing.assert_allclose(adjusted[:, 0], 1.0)
        np.testing.assert_allclose(adjusted[:, 1], 1.21)

    def test_growth_from_base_year(self):
        scenario = ScenarioAdjustment(growth_rates={'value': -5.0}, base_year=2019)
        multipliers = scenario.field_multipliers(self.FIELDS, 2021, 2020)
        np.testing.assert_allclose(multipliers, [0.95 ** 2, 1.0])

    def test_output_scenario_leaves_inputs(self):
        window = np.array([[10.0, 100.0]])
        scenario = ScenarioAdjustment(apply_to='outputs', global_factor=2.0)

        np.testing.assert_array_equal(scenario.adjust_window(window, self.FIELDS, 'A/B', 2021, 2020), window)
        assert scenario.adjust_prediction(5.0, 'A/B', 2021) == 10.0

    def test_input_scenario_leaves_prediction(self):
        scenario = ScenarioAdjustment(global_factor=2.0)
        assert scenario.adjust_prediction(5.0, 'A/B', 2021) == 5.0


class TestConstruction:
    """Tests for loading scenarios."""

    def test_from_growth_assumptions(self):
        scenario = ScenarioAdjustment.from_growth_assumptions(
            'high_growth', gdp_growth_rate=3.0, population_growth_rate=1.0,
            efficiency_improvement_rate=2.0, base_year=2024
        )
        assert scenario.name == 'high_growth'
        assert scenario.growth_rates == {
            'gdp_billions': 3.0, 'population_millions': 1.0, 'value': -2.0
        }
        assert scenario.base_year == 2024

    def test_load_yaml(self, tmp_path):
        path = tmp_path / 'scenario.yaml'
        path.write_text(
            "name: policy\n"
            "apply_to: outputs\n"
            "yearly_factors:\n"
            "  '2030': 0.8\n"
            "source_factors:\n"
            "  Coal: 0.5\n"
        )
        scenario = ScenarioAdjustment.load(path)

        assert scenario.name == 'policy'
        assert scenario.yearly_factors == {2030: 0.8}
        assert scenario.factor('Industrial/Coal', 2030) == pytest.approx(0.4)

    def test_dict_round_trip(self):
        scenario = ScenarioAdjustment(name='x', global_factor=1.1, yearly_factors={2025: 0.9})
        assert ScenarioAdjustment.from_dict(scenario.to_dict()) == scenario

    def test_example_scenario_file(self):
        path = Path(__file__).parent.parent / 'configs' / 'scenario_high_growth.yaml'
        scenario = ScenarioAdjustment.load(path)

        assert scenario.name == 'high_growth'
        assert scenario.growth_rates['value'] < 0


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
