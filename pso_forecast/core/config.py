"""
Configuration management for the PSO forecasting engine.

Every section is an immutable dataclass. Sections are loaded from and saved to
YAML; list values in the file become tuples on load.
"""
import yaml
from dataclasses import dataclass, field, asdict, fields
from typing import Dict, Any, Optional, Tuple
from pathlib import Path
from datetime import datetime

from .exceptions import ConfigError

ACTIVATIONS = ('sigmoid', 'relu', 'linear')


@dataclass(frozen=True)
class FeatureConfig:
    """Sliding-window feature configuration."""
    window_size: int = 4
    covariates: Tuple[str, ...] = (
        "gdp_billions", "population_millions", "avg_temperature_celsius"
    )

    def __post_init__(self):
        if self.window_size < 1:
            raise ConfigError(f"window_size must be >= 1, got {self.window_size}")

    @property
    def field_names(self) -> Tuple[str, ...]:
        """Per-step fields: the observed value followed by the covariates."""
        return ('value',) + tuple(self.covariates)

    @property
    def n_features(self) -> int:
        return self.window_size * len(self.field_names)


@dataclass(frozen=True)
class NormalizationConfig:
    """Normalizer configuration."""
    method: str = "standard"  # "standard" or "minmax"

    def __post_init__(self):
        if self.method not in ('standard', 'minmax'):
            raise ConfigError(f"Unknown normalization method: {self.method}")


@dataclass(frozen=True)
class NetworkConfig:
    """Feedforward network configuration."""
    hidden_sizes: Tuple[int, ...] = (8,)
    hidden_activation: str = "sigmoid"
    output_activation: str = "linear"
    init_scale: float = 0.1

    def __post_init__(self):
        if not 1 <= len(self.hidden_sizes) <= 2:
            raise ConfigError(f"Expected 1 or 2 hidden layers, got {len(self.hidden_sizes)}")
        for name in (self.hidden_activation, self.output_activation):
            if name not in ACTIVATIONS:
                raise ConfigError(f"Unknown activation: {name}")


@dataclass(frozen=True)
class PSOConfig:
    """Particle swarm configuration."""
    n_particles: int = 30
    n_iterations: int = 100
    inertia: float = 0.7
    cognitive: float = 1.5
    social: float = 1.5
    inertia_decay: float = 1.0
    init_scale: float = 0.5
    max_velocity: Optional[float] = None
    clamp_positions: bool = False
    position_limit: Optional[float] = None
    n_workers: int = 1
    log_every: int = 10

    def __post_init__(self):
        if self.n_particles < 1 or self.n_iterations < 1:
            raise ConfigError("n_particles and n_iterations must be >= 1")


@dataclass(frozen=True)
class SearchConfig:
    """Architecture search configuration."""
    mode: str = "weights"  # "weights" or "architecture"
    hidden1_init: Tuple[float, float] = (10, 100)
    hidden2_init: Tuple[float, float] = (5, 50)
    learning_rate_init: Tuple[float, float] = (0.001, 0.1)
    epochs_init: Tuple[float, float] = (100, 1000)
    hidden1_limits: Tuple[float, float] = (5, 200)
    hidden2_limits: Tuple[float, float] = (2, 100)
    learning_rate_limits: Tuple[float, float] = (0.0001, 0.5)
    epochs_limits: Tuple[float, float] = (50, 2000)
    validation_fraction: float = 0.2
    # None runs the swarm with the pso section's particle and iteration counts.
    n_particles: Optional[int] = None
    n_iterations: Optional[int] = None

    def __post_init__(self):
        if self.mode not in ('weights', 'architecture'):
            raise ConfigError(f"Unknown optimization mode: {self.mode}")
        if not 0.0 < self.validation_fraction < 1.0:
            raise ConfigError("validation_fraction must be in (0, 1)")
        for value in (self.n_particles, self.n_iterations):
            if value is not None and value < 1:
                raise ConfigError("search n_particles and n_iterations must be >= 1")

    @property
    def init_bounds(self):
        return [self.hidden1_init, self.hidden2_init,
                self.learning_rate_init, self.epochs_init]

    @property
    def limits(self):
        return [self.hidden1_limits, self.hidden2_limits,
                self.learning_rate_limits, self.epochs_limits]


@dataclass(frozen=True)
class ForecastConfig:
    """Rollout configuration."""
    horizon: int = 10
    max_horizon: int = 30
    margin_bounds: Tuple[float, float] = (0.1, 0.9)
    confidence_level: float = 0.95

    def __post_init__(self):
        low, high = self.margin_bounds
        if not 0.0 <= low <= high:
            raise ConfigError(f"Invalid margin_bounds: {self.margin_bounds}")
        if self.horizon < 1 or self.horizon > self.max_horizon:
            raise ConfigError(f"horizon must be in [1, {self.max_horizon}]")


@dataclass(frozen=True)
class OutputConfig:
    """Output configuration."""
    base_dir: str = "outputs"
    save_results: bool = True
    save_plots: bool = False
    figure_dpi: int = 150


def _default_run_id() -> str:
    return datetime.now().strftime("run_%Y%m%d_%H%M")


@dataclass(frozen=True)
class Config:
    """Main configuration container."""
    features: FeatureConfig = field(default_factory=FeatureConfig)
    normalization: NormalizationConfig = field(default_factory=NormalizationConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    pso: PSOConfig = field(default_factory=PSOConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    forecast: ForecastConfig = field(default_factory=ForecastConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    seed: int = 42
    run_id: str = field(default_factory=_default_run_id)

    @property
    def run_dir(self) -> Path:
        return Path(self.output.base_dir) / "runs" / self.run_id

    def to_dict(self) -> Dict[str, Any]:
        return _untuple(asdict(self))

    def save(self, path: Optional[str] = None):
        if path is None:
            path = self.run_dir / "configs_snapshot" / "config.yaml"
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        kwargs = {
            'features': _section(FeatureConfig, data.get('features')),
            'normalization': _section(NormalizationConfig, data.get('normalization')),
            'network': _section(NetworkConfig, data.get('network')),
            'pso': _section(PSOConfig, data.get('pso')),
            'search': _section(SearchConfig, data.get('search')),
            'forecast': _section(ForecastConfig, data.get('forecast')),
            'output': _section(OutputConfig, data.get('output')),
            'seed': data.get('seed', 42),
        }
        if data.get('run_id'):
            kwargs['run_id'] = data['run_id']
        return cls(**kwargs)

    @classmethod
    def load(cls, path: str) -> 'Config':
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data)


def _section(section_cls, values: Optional[Dict[str, Any]]):
    """Build a config section, converting YAML lists to tuples."""
    values = dict(values or {})
    known = {f.name for f in fields(section_cls)}
    unknown = set(values) - known
    if unknown:
        raise ConfigError(f"Unknown {section_cls.__name__} keys: {sorted(unknown)}")
    for key, value in values.items():
        if isinstance(value, list):
            values[key] = tuple(value)
    return section_cls(**values)


def _untuple(obj):
    if isinstance(obj, dict):
        return {k: _untuple(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_untuple(v) for v in obj]
    return obj


def create_run_directories(config: Config) -> Dict[str, Path]:
    """Create all output directories for a run."""
    run_dir = config.run_dir
    dirs = {
        'root': run_dir,
        'logs': run_dir / 'logs',
        'forecasts': run_dir / 'forecasts',
        'figures': run_dir / 'figures',
        'configs_snapshot': run_dir / 'configs_snapshot'
    }
    for d in dirs.values():
        d.mkdir(parents=True, exist_ok=True)
    return dirs
