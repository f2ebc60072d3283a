"""
Feature module: sliding-window samples and normalization.
"""
from .windows import (
    TrainingSample,
    TrainingSet,
    step_vector,
    build_input_vector,
    build_samples,
    require_samples,
    build_training_set
)
from .normalization import NormalizationStats, Normalizer

__all__ = [
    'TrainingSample', 'TrainingSet', 'step_vector', 'build_input_vector',
    'build_samples', 'require_samples', 'build_training_set',
    'NormalizationStats', 'Normalizer'
]
