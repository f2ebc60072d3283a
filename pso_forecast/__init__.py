"""
PSO Energy Forecasting Engine
=============================

Multi-year energy demand forecasting with a feedforward network whose
weights (or architecture) are tuned by Particle Swarm Optimization:

- Sliding-window features over yearly observations per category
- Normalization fitted once and reused at inference
- Feedforward network driven by a flat parameter vector
- PSO over weights, or over hidden sizes / learning rate / epochs
- Autoregressive rollout with scenario adjustments and confidence bands

Modules:
    core: Configuration, logging, errors and utilities
    data_io: Observation records and tabular import
    features: Sliding-window samples and normalization
    models: Feedforward network and backpropagation
    optimization: Particle swarm optimization
    forecasting: Scenario adjustments, rollout and engine
    reporting: Visualization and plotting
"""

__version__ = "1.0.0"

from . import core
from . import data_io
from . import features
from . import models
from . import optimization
from . import forecasting
from . import reporting
