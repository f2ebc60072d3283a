"""
End-to-end forecasting engine.

historical observations -> sliding-window samples -> normalization (fitted
once) -> PSO (weights, or architecture then backprop) -> trained model ->
per-category rollout.
"""
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..core.config import Config
from ..core.exceptions import InsufficientDataError
from ..core.logging_utils import get_logger, LogContext
from ..data_io.observations import Observation, group_by_category
from ..features.normalization import Normalizer
from ..features.windows import build_training_set
from ..models.network import NetworkArchitecture, FeedforwardNetwork
from ..optimization.model_optimizer import optimize_weights, search_architecture, train_candidate
from ..optimization.pso import PSOResult
from .rollout import ForecastPoint, TrainedModel, rollout
from .scenario import ScenarioAdjustment, BASELINE


@dataclass
class ForecastRun:
    """Result of one engine run, handed back to the caller for persistence."""
    points: List[ForecastPoint]
    model: TrainedModel
    optimization: PSOResult
    scenario: ScenarioAdjustment = BASELINE
    skipped: Dict[str, str] = field(default_factory=dict)

    def summary(self, config: Optional[Config] = None) -> Dict[str, Any]:
        summary = {
            'scenario': self.scenario.name,
            'n_points': len(self.points),
            'categories': sorted({p.category for p in self.points}),
            'skipped': dict(self.skipped),
            'model': self.model.summary(),
            'optimization': {
                'best_fitness': float(self.optimization.best_fitness),
                'n_iterations_run': self.optimization.n_iterations_run,
                'cancelled': self.optimization.cancelled
            }
        }
        if config is not None:
            summary['optimization']['pso'] = {
                'n_particles': config.pso.n_particles,
                'n_iterations': config.pso.n_iterations,
                'inertia': config.pso.inertia,
                'cognitive': config.pso.cognitive,
                'social': config.pso.social,
                'mode': config.search.mode
            }
        return summary


class ForecastEngine:
    """Trains a PSO-optimized network on historical observations and rolls it forward."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()

    def fit(
        self,
        observations: Iterable[Observation],
        stop_event: Optional[threading.Event] = None
    ) -> Tuple[TrainedModel, PSOResult, Dict[str, str]]:
        """
        Train one model over all categories.

        Returns:
            Tuple of (trained model, optimization result, skipped categories)
        """
        logger = get_logger()
        config = self.config

        grouped = group_by_category(observations)
        training_set = build_training_set(grouped, config.features)

        normalizer = Normalizer(config.normalization.method)
        stats = normalizer.fit(training_set)
        normalized = normalizer.transform_set(training_set, stats)

        search = None
        if config.search.mode == 'architecture':
            candidate, result = search_architecture(normalized, config, stop_event)
            network, params = train_candidate(candidate, normalized, config)
            search = candidate.to_dict()
        else:
            network = FeedforwardNetwork(
                NetworkArchitecture.from_config(normalized.n_features, config.network)
            )
            result = optimize_weights(network, normalized, config, stop_event)
            params = result.best_position

        model = TrainedModel(
            network=network,
            parameters=params,
            stats=stats,
            fitness=result.best_fitness,
            features=config.features,
            n_training_samples=training_set.n_samples,
            search=search
        )
        logger.info(f"Trained {network.architecture.describe()} with fitness {result.best_fitness:.6g}")
        return model, result, dict(training_set.skipped)

    def forecast(
        self,
        model: TrainedModel,
        observations: Iterable[Observation],
        horizon: Optional[int] = None,
        scenario: Optional[ScenarioAdjustment] = None,
        categories: Optional[Sequence[str]] = None
    ) -> Tuple[List[ForecastPoint], Dict[str, str]]:
        """
        Roll the model forward for each category.

        Categories without enough history are skipped with a warning.

        Returns:
            Tuple of (forecast points, skipped categories with reasons)
        """
        logger = get_logger()
        if horizon is None:
            horizon = self.config.forecast.horizon
        grouped = group_by_category(observations)

        points: List[ForecastPoint] = []
        skipped: Dict[str, str] = {}
        for category in (categories or list(grouped)):
            history = grouped.get(category)
            if not history:
                logger.warning(f"Not forecasting {category}: no observations")
                skipped[category] = "no observations"
                continue
            try:
                points.extend(rollout(model, history, horizon, scenario, self.config.forecast))
            except InsufficientDataError as e:
                logger.warning(f"Not forecasting {category}: {e}")
                skipped[category] = str(e)

        return points, skipped

    def run(
        self,
        observations: Iterable[Observation],
        horizon: Optional[int] = None,
        scenario: Optional[ScenarioAdjustment] = None,
        categories: Optional[Sequence[str]] = None,
        stop_event: Optional[threading.Event] = None
    ) -> ForecastRun:
        """Fit on the observations and forecast every (or the given) category."""
        logger = get_logger()
        observations = list(observations)
        scenario = scenario or BASELINE

        with LogContext(logger, "Forecast run", scenario=scenario.name,
                        mode=self.config.search.mode, seed=self.config.seed):
            model, result, skipped = self.fit(observations, stop_event)
            points, not_forecast = self.forecast(model, observations, horizon, scenario, categories)
            skipped.update(not_forecast)
            logger.info(f"Generated {len(points)} forecast points")

        return ForecastRun(
            points=points,
            model=model,
            optimization=result,
            scenario=scenario,
            skipped=skipped
        )
