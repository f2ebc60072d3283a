"""
Feedforward model module.
"""
from .network import (
    ACTIVATIONS,
    NetworkArchitecture,
    FeedforwardNetwork,
    activation_derivative
)
from .training import train_backprop

__all__ = [
    'ACTIVATIONS', 'NetworkArchitecture', 'FeedforwardNetwork',
    'activation_derivative', 'train_backprop'
]
