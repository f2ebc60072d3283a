"""
Tests for configuration loading and validation.
"""
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pso_forecast.core import (
    Config, ConfigError, FeatureConfig, NetworkConfig, PSOConfig, SearchConfig,
    ForecastConfig, OutputConfig, create_run_directories
)


class TestDefaults:
    """Tests for default values."""

    def test_default_sections(self):
        config = Config()

        assert config.features.window_size == 4
        assert config.features.n_features == 16
        assert config.pso.inertia == 0.7
        assert config.pso.cognitive == config.pso.social == 1.5
        assert not config.pso.clamp_positions
        assert config.forecast.margin_bounds == (0.1, 0.9)
        assert config.search.mode == 'weights'

    def test_field_names(self):
        features = FeatureConfig(window_size=3, covariates=('gdp_billions',))
        assert features.field_names == ('value', 'gdp_billions')
        assert features.n_features == 6

    def test_default_yaml_matches_defaults(self):
        path = Path(__file__).parent.parent / 'configs' / 'default.yaml'
        loaded = Config.load(str(path))
        defaults = Config()

        for section in ('features', 'normalization', 'network', 'pso', 'search', 'forecast', 'output'):
            assert getattr(loaded, section) == getattr(defaults, section), section
        assert loaded.seed == defaults.seed


class TestValidation:
    """Tests for rejected values."""

    @pytest.mark.parametrize('factory', [
        lambda: FeatureConfig(window_size=0),
        lambda: NetworkConfig(hidden_sizes=()),
        lambda: NetworkConfig(hidden_sizes=(4, 4, 4)),
        lambda: NetworkConfig(hidden_activation='tanh'),
        lambda: PSOConfig(n_particles=0),
        lambda: SearchConfig(mode='grid'),
        lambda: SearchConfig(validation_fraction=1.0),
        lambda: ForecastConfig(horizon=40),
        lambda: ForecastConfig(margin_bounds=(0.9, 0.1)),
    ])
    def test_invalid_values(self, factory):
        with pytest.raises(ConfigError):
            factory()

    def test_unknown_key(self):
        with pytest.raises(ConfigError):
            Config.from_dict({'pso': {'swarm_size': 10}})

    def test_unknown_normalization(self):
        with pytest.raises(ConfigError):
            Config.from_dict({'normalization': {'method': 'robust'}})


class TestPersistence:
    """Tests for YAML round trips and run directories."""

    def test_save_load_round_trip(self, tmp_path):
        config = Config(
            features=FeatureConfig(window_size=3, covariates=('gdp_billions',)),
            network=NetworkConfig(hidden_sizes=(6, 3)),
            pso=PSOConfig(n_particles=12, max_velocity=0.5),
            seed=7,
            run_id='test_run'
        )
        path = tmp_path / 'config.yaml'
        config.save(str(path))

        loaded = Config.load(str(path))
        assert loaded == config
        assert isinstance(loaded.network.hidden_sizes, tuple)

    def test_partial_yaml_uses_defaults(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text("pso:\n  n_particles: 5\nrun_id: partial\n")

        config = Config.load(str(path))
        assert config.pso.n_particles == 5
        assert config.pso.n_iterations == 100
        assert config.run_id == 'partial'

    def test_create_run_directories(self, tmp_path):
        config = Config(output=OutputConfig(base_dir=str(tmp_path)), run_id='r1')
        dirs = create_run_directories(config)

        assert dirs['root'] == tmp_path / 'runs' / 'r1'
        for key in ('logs', 'forecasts', 'figures', 'configs_snapshot'):
            assert dirs[key].is_dir()


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
