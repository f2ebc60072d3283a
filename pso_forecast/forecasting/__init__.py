"""
Forecasting module: scenario adjustments, autoregressive rollout and the engine.
"""
from .scenario import ScenarioAdjustment, BASELINE
from .rollout import (
    ForecastPoint,
    TrainedModel,
    confidence_margin,
    confidence_band,
    rollout
)
from .engine import ForecastEngine, ForecastRun
from .export import forecasts_to_frame, save_forecast_run

__all__ = [
    'ScenarioAdjustment', 'BASELINE',
    'ForecastPoint', 'TrainedModel', 'confidence_margin', 'confidence_band', 'rollout',
    'ForecastEngine', 'ForecastRun',
    'forecasts_to_frame', 'save_forecast_run'
]
