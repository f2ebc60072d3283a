"""
Error taxonomy for the forecasting engine.
"""
from typing import Optional


class ForecastEngineError(Exception):
    """Base class for all engine errors."""


class ConfigError(ForecastEngineError):
    """Invalid configuration value."""


class InsufficientDataError(ForecastEngineError):
    """A category has too few observations to train on or to seed a rollout."""

    def __init__(self, category: Optional[str], n_observations: int, required: int):
        self.category = category
        self.n_observations = n_observations
        self.required = required
        where = f"category '{category}'" if category is not None else "training set"
        super().__init__(
            f"Insufficient data for {where}: {n_observations} observations, "
            f"at least {required} required"
        )


class InvalidParameterVectorError(ForecastEngineError):
    """Parameter vector length (or layer shape) does not match the architecture."""

    def __init__(self, expected, actual, what: str = "parameter vector length"):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Invalid {what}: expected {expected}, got {actual}")


class NonFiniteFitnessError(ForecastEngineError):
    """Fitness evaluated to NaN or infinity. Recovered inside the PSO loop."""

    def __init__(self, value: float):
        self.value = value
        super().__init__(f"Non-finite fitness: {value}")


class DegenerateNormalizationWarning(UserWarning):
    """A feature or the target has zero spread; its scale was clamped to 1.0."""
