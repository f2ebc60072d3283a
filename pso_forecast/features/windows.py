"""
Sliding-window feature builder.

Turns a chronologically sorted series of observations into supervised
(input, target) pairs. The input vector is step-major: for each of the W
steps in the window, the observed value followed by the covariates.
"""
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence, Tuple

from ..core.config import FeatureConfig
from ..core.exceptions import InsufficientDataError
from ..core.logging_utils import get_logger
from ..data_io.observations import Observation


@dataclass(frozen=True)
class TrainingSample:
    """One supervised pair built from a window of one category."""
    input: np.ndarray
    target: np.ndarray
    category: str
    year: int


@dataclass
class TrainingSet:
    """Stacked training samples sharing one feature dimensionality."""
    X: np.ndarray
    y: np.ndarray
    categories: List[str] = field(default_factory=list)
    years: List[int] = field(default_factory=list)
    skipped: Dict[str, str] = field(default_factory=dict)

    @property
    def n_samples(self) -> int:
        return len(self.y)

    @property
    def n_features(self) -> int:
        return self.X.shape[1]

    def split(self, validation_fraction: float) -> Tuple['TrainingSet', 'TrainingSet']:
        """Split by position: the first part trains, the remainder validates."""
        split_index = int(self.n_samples * (1.0 - validation_fraction))
        split_index = max(1, min(split_index, self.n_samples - 1))
        head = TrainingSet(self.X[:split_index], self.y[:split_index],
                           self.categories[:split_index], self.years[:split_index])
        tail = TrainingSet(self.X[split_index:], self.y[split_index:],
                           self.categories[split_index:], self.years[split_index:])
        return head, tail


def step_vector(obs: Observation, covariates: Sequence[str]) -> np.ndarray:
    """Fields of one time step: value, then covariates (missing -> 0.0)."""
    return np.array([obs.value] + [obs.covariate(name) for name in covariates], dtype=float)


def build_input_vector(window: Sequence[Observation], covariates: Sequence[str]) -> np.ndarray:
    """Concatenate the step vectors of a window into one input vector."""
    return np.concatenate([step_vector(obs, covariates) for obs in window])


def build_samples(
    series: Sequence[Observation],
    window_size: int,
    covariates: Sequence[str] = ()
) -> List[TrainingSample]:
    """
    Build one sample per index i >= window_size.

    Observations [i - window_size, i) form the input, observation i the
    target. A series with at most window_size observations yields no samples.
    """
    samples = []
    for i in range(window_size, len(series)):
        samples.append(TrainingSample(
            input=build_input_vector(series[i - window_size:i], covariates),
            target=np.array([series[i].value], dtype=float),
            category=series[i].category,
            year=series[i].year
        ))
    return samples


def require_samples(
    category: str,
    series: Sequence[Observation],
    window_size: int,
    covariates: Sequence[str] = ()
) -> List[TrainingSample]:
    """Like build_samples, but raise InsufficientDataError instead of returning none."""
    if len(series) < window_size + 1:
        raise InsufficientDataError(category, len(series), window_size + 1)
    return build_samples(series, window_size, covariates)


def build_training_set(
    grouped: Mapping[str, Sequence[Observation]],
    config: FeatureConfig
) -> TrainingSet:
    """
    Build the training set over all categories.

    Categories that are too short are skipped with a warning and recorded in
    ``TrainingSet.skipped``. Raises InsufficientDataError only if no category
    produced a sample.
    """
    logger = get_logger()
    samples: List[TrainingSample] = []
    skipped: Dict[str, str] = {}

    for category, series in grouped.items():
        try:
            samples.extend(require_samples(category, series, config.window_size, config.covariates))
        except InsufficientDataError as e:
            logger.warning(f"Skipping {category}: {e}")
            skipped[category] = str(e)

    if not samples:
        longest = max((len(s) for s in grouped.values()), default=0)
        raise InsufficientDataError(None, longest, config.window_size + 1)

    X = np.vstack([s.input for s in samples])
    y = np.concatenate([s.target for s in samples])
    if X.shape[1] != config.n_features:
        raise ValueError(f"Expected {config.n_features} features, built {X.shape[1]}")

    logger.info(
        f"Built {len(samples)} samples with {X.shape[1]} features "
        f"from {len(grouped) - len(skipped)} categories"
    )
    return TrainingSet(
        X=X,
        y=y,
        categories=[s.category for s in samples],
        years=[s.year for s in samples],
        skipped=skipped
    )
