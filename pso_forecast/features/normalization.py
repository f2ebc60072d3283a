"""
Feature and target normalization.

Statistics are fitted once per training run and then threaded through every
transform and inverse transform, including at forecast time.
"""
import warnings
import numpy as np
from dataclasses import dataclass
from typing import Union
from sklearn.preprocessing import StandardScaler, MinMaxScaler

from ..core.exceptions import DegenerateNormalizationWarning
from ..core.logging_utils import get_logger
from .windows import TrainingSet


def _frozen(values) -> np.ndarray:
    arr = np.array(values, dtype=float)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class NormalizationStats:
    """
    Fitted normalization statistics.

    For the standard method ``mean``/``std`` are the column mean and population
    standard deviation; for minmax they hold the column minimum and range.
    Either way ``x_norm = (x - mean) / std`` and every spread is >= a clamped 1.0
    where the data had none.
    """
    input_mean: np.ndarray
    input_std: np.ndarray
    output_mean: float
    output_std: float
    method: str = 'standard'

    def __post_init__(self):
        object.__setattr__(self, 'input_mean', _frozen(self.input_mean))
        object.__setattr__(self, 'input_std', _frozen(self.input_std))
        object.__setattr__(self, 'output_mean', float(self.output_mean))
        object.__setattr__(self, 'output_std', float(self.output_std))

    @property
    def n_features(self) -> int:
        return len(self.input_mean)

    def to_dict(self):
        return {
            'method': self.method,
            'input_mean': self.input_mean.tolist(),
            'input_std': self.input_std.tolist(),
            'output_mean': self.output_mean,
            'output_std': self.output_std
        }


class Normalizer:
    """Fits NormalizationStats and applies them."""

    def __init__(self, method: str = 'standard'):
        if method not in ('standard', 'minmax'):
            raise ValueError(f"Unknown normalization method: {method}")
        self.method = method

    def fit(self, training_set: TrainingSet) -> NormalizationStats:
        """Compute column-wise input statistics and scalar target statistics."""
        if training_set.n_samples == 0:
            raise ValueError("Cannot fit normalization on an empty training set")

        X = np.asarray(training_set.X, dtype=float)
        y = np.asarray(training_set.y, dtype=float).reshape(-1, 1)

        input_mean, input_std, input_degenerate = self._fit_columns(X)
        output_mean, output_std, output_degenerate = self._fit_columns(y)

        degenerate = np.flatnonzero(input_degenerate).tolist()
        if degenerate or output_degenerate[0]:
            message = (
                f"Zero spread in feature columns {degenerate}"
                + (" and in the target" if output_degenerate[0] else "")
                + "; scale clamped to 1.0"
            )
            get_logger().warning(message)
            warnings.warn(message, DegenerateNormalizationWarning, stacklevel=2)

        return NormalizationStats(
            input_mean=input_mean,
            input_std=input_std,
            output_mean=output_mean[0],
            output_std=output_std[0],
            method=self.method
        )

    def _fit_columns(self, data: np.ndarray):
        if self.method == 'standard':
            scaler = StandardScaler().fit(data)
            degenerate = scaler.var_ == 0
            offset, spread = scaler.mean_, scaler.scale_
        else:
            scaler = MinMaxScaler().fit(data)
            degenerate = scaler.data_range_ == 0
            offset, spread = scaler.data_min_, scaler.data_range_
        spread = np.where(degenerate, 1.0, spread)
        return offset, spread, degenerate

    @staticmethod
    def transform(vector: np.ndarray, stats: NormalizationStats) -> np.ndarray:
        """Normalize an input vector (or a 2-D batch of them)."""
        vector = np.asarray(vector, dtype=float)
        if vector.shape[-1] != stats.n_features:
            raise ValueError(
                f"Input has {vector.shape[-1]} features, statistics have {stats.n_features}"
            )
        return (vector - stats.input_mean) / stats.input_std

    @staticmethod
    def inverse_transform(vector: np.ndarray, stats: NormalizationStats) -> np.ndarray:
        return np.asarray(vector, dtype=float) * stats.input_std + stats.input_mean

    @staticmethod
    def transform_output(value: Union[float, np.ndarray], stats: NormalizationStats):
        return (value - stats.output_mean) / stats.output_std

    @staticmethod
    def inverse_transform_output(value: Union[float, np.ndarray], stats: NormalizationStats):
        return value * stats.output_std + stats.output_mean

    def transform_set(self, training_set: TrainingSet, stats: NormalizationStats) -> TrainingSet:
        """Normalized copy of a training set, using already-fitted statistics."""
        return TrainingSet(
            X=self.transform(training_set.X, stats),
            y=self.transform_output(np.asarray(training_set.y, dtype=float), stats),
            categories=list(training_set.categories),
            years=list(training_set.years),
            skipped=dict(training_set.skipped)
        )
