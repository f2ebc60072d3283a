"""
Full-batch backpropagation for the feedforward network.

Used by the architecture search to briefly train a candidate network with a
given learning rate and epoch count.
"""
import numpy as np
from typing import List, Tuple

from ..core.logging_utils import get_logger
from .network import FeedforwardNetwork, activation_derivative


def train_backprop(
    network: FeedforwardNetwork,
    X: np.ndarray,
    y: np.ndarray,
    learning_rate: float,
    epochs: int,
    rng: np.random.Generator,
    init_scale: float = 0.1
) -> Tuple[np.ndarray, List[float]]:
    """
    Train with full-batch gradient descent on mean squared error.

    Args:
        network: Network to train
        X: Normalized inputs, shape (n_samples, n_features)
        y: Normalized targets, shape (n_samples,)
        learning_rate: Gradient step size
        epochs: Number of full-batch updates
        rng: Generator used for the initial weights
        init_scale: Standard deviation of the initial weights

    Returns:
        Tuple of (trained parameter vector, loss per epoch)
    """
    logger = get_logger()
    arch = network.architecture

    X = np.asarray(X, dtype=float)
    y = np.asarray(y, dtype=float).reshape(-1, 1)
    n_samples = len(y)

    layers = [(W.copy(), b.copy())
              for W, b in network.unpack(network.init_parameters(rng, init_scale))]
    losses = []

    with np.errstate(over='ignore', invalid='ignore'):
        for epoch in range(epochs):
            pre_activations, activations = network.forward_layers(X, layers)
            error = activations[-1] - y
            loss = float(np.mean(error ** 2))
            if not np.isfinite(loss):
                logger.debug(f"Backprop diverged at epoch {epoch} (lr={learning_rate:.4g})")
                break
            losses.append(loss)

            delta = (2.0 / n_samples) * error * activation_derivative(
                arch.output_activation, activations[-1], pre_activations[-1]
            )
            for idx in reversed(range(len(layers))):
                W, b = layers[idx]
                grad_W = delta.T @ activations[idx]
                grad_b = delta.sum(axis=0)
                if idx > 0:
                    delta = (delta @ W) * activation_derivative(
                        arch.hidden_activation, activations[idx], pre_activations[idx - 1]
                    )
                layers[idx] = (W - learning_rate * grad_W, b - learning_rate * grad_b)

    return network.pack(layers), losses
