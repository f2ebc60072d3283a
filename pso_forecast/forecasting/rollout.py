"""
Autoregressive forecast rollout.
"""
import math
import numpy as np
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..core.config import FeatureConfig, ForecastConfig
from ..core.exceptions import InsufficientDataError, InvalidParameterVectorError
from ..core.logging_utils import get_logger
from ..core.utils import clamp
from ..data_io.observations import Observation
from ..features.normalization import NormalizationStats, Normalizer
from ..features.windows import step_vector
from ..models.network import FeedforwardNetwork
from .scenario import ScenarioAdjustment


@dataclass(frozen=True)
class ForecastPoint:
    """
    One forecast year for one category.

    ``lower_bound``/``upper_bound`` are ``predicted_value`` -/+
    ``|predicted_value| * margin``, where the margin is the model's final
    fitness clamped to the configured margin bounds. ``confidence`` is
    ``min(confidence_level, 1 - margin)``: a nominal level that drops as the
    band widens. It is not a calibrated coverage probability.
    """
    year: int
    category: str
    predicted_value: float
    lower_bound: float
    upper_bound: float
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TrainedModel:
    """Everything needed to run inference: network, parameters and fitted statistics."""
    network: FeedforwardNetwork
    parameters: np.ndarray
    stats: NormalizationStats
    fitness: float
    features: FeatureConfig
    n_training_samples: int = 0
    search: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        self.network.unpack(self.parameters)
        if self.stats.n_features != self.network.architecture.input_size:
            raise InvalidParameterVectorError(
                self.network.architecture.input_size, self.stats.n_features,
                what="normalization statistics width"
            )

    def predict(self, raw_input: np.ndarray) -> float:
        """Raw input vector -> raw predicted value, through the fitted statistics."""
        normalized = Normalizer.transform(raw_input, self.stats)
        output = self.network.forward(normalized, self.parameters)
        return float(Normalizer.inverse_transform_output(output, self.stats))

    def summary(self) -> Dict[str, Any]:
        return {
            'architecture': self.network.architecture.describe(),
            'n_params': self.network.n_params,
            'fitness': float(self.fitness),
            'window_size': self.features.window_size,
            'covariates': list(self.features.covariates),
            'n_training_samples': self.n_training_samples,
            'normalization': self.stats.method,
            'search': self.search
        }


def confidence_margin(fitness: float, bounds: Tuple[float, float] = (0.1, 0.9)) -> float:
    """Relative band half-width derived from the optimizer's final fitness."""
    low, high = bounds
    if not math.isfinite(fitness):
        return high
    return clamp(fitness, low, high)


def confidence_band(predicted: float, margin: float) -> Tuple[float, float]:
    """(lower, upper) around a prediction; ordered for negative values too."""
    half_width = abs(predicted) * margin
    return predicted - half_width, predicted + half_width


def rollout(
    model: TrainedModel,
    history: Sequence[Observation],
    horizon: int,
    scenario: Optional[ScenarioAdjustment] = None,
    config: Optional[ForecastConfig] = None
) -> List[ForecastPoint]:
    """
    Forecast ``horizon`` years after the last observation of one category.

    Each year's input is the latest window of steps, which from the second
    year on includes earlier predictions. Covariates of generated steps are
    carried forward from the most recent step. Scenario adjustments apply to
    a copy of the input window and/or to the prediction; the window keeps the
    (possibly adjusted) prediction, so output adjustments compound.

    Args:
        model: Trained model
        history: Observations of a single category
        horizon: Number of years to forecast
        scenario: Optional scenario adjustments
        config: Forecast configuration (margin bounds, confidence level)

    Returns:
        One ForecastPoint per forecast year
    """
    logger = get_logger()
    config = config or ForecastConfig()
    if not 1 <= horizon <= config.max_horizon:
        raise ValueError(f"horizon must be in [1, {config.max_horizon}], got {horizon}")

    window_size = model.features.window_size
    covariates = model.features.covariates
    field_names = model.features.field_names

    history = sorted(history, key=lambda obs: obs.year)
    category = history[-1].category if history else None
    if len(history) < window_size:
        raise InsufficientDataError(category, len(history), window_size)

    steps = [step_vector(obs, covariates) for obs in history[-window_size:]]
    origin_year = history[-1].year

    margin = confidence_margin(model.fitness, config.margin_bounds)
    confidence = min(config.confidence_level, 1.0 - margin)

    points = []
    for year in range(origin_year + 1, origin_year + horizon + 1):
        window = np.vstack(steps)
        if scenario is not None:
            window = scenario.adjust_window(window, field_names, category, year, origin_year)

        predicted = model.predict(window.ravel())
        if scenario is not None:
            predicted = scenario.adjust_prediction(predicted, category, year)

        lower, upper = confidence_band(predicted, margin)
        points.append(ForecastPoint(
            year=year,
            category=category,
            predicted_value=predicted,
            lower_bound=lower,
            upper_bound=upper,
            confidence=confidence
        ))

        next_step = steps[-1].copy()
        next_step[0] = predicted
        steps = steps[1:] + [next_step]

    logger.debug(f"Rolled out {category} to {origin_year + horizon}")
    return points
