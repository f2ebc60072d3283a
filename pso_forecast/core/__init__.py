"""
Core module for the PSO forecasting engine.
"""
from .config import (
    Config,
    FeatureConfig,
    NormalizationConfig,
    NetworkConfig,
    PSOConfig,
    SearchConfig,
    ForecastConfig,
    OutputConfig,
    create_run_directories
)
from .exceptions import (
    ForecastEngineError,
    ConfigError,
    InsufficientDataError,
    InvalidParameterVectorError,
    NonFiniteFitnessError,
    DegenerateNormalizationWarning
)
from .logging_utils import setup_logging, get_logger, LogContext, RunIdFilter
from .utils import (
    make_rng,
    hash_array,
    clamp,
    load_json,
    save_json_numpy
)

__all__ = [
    'Config', 'FeatureConfig', 'NormalizationConfig', 'NetworkConfig',
    'PSOConfig', 'SearchConfig', 'ForecastConfig', 'OutputConfig',
    'create_run_directories',
    'ForecastEngineError', 'ConfigError', 'InsufficientDataError',
    'InvalidParameterVectorError', 'NonFiniteFitnessError',
    'DegenerateNormalizationWarning',
    'setup_logging', 'get_logger', 'LogContext', 'RunIdFilter',
    'make_rng', 'hash_array', 'clamp', 'load_json', 'save_json_numpy'
]
