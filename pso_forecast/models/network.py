"""
Feedforward network evaluated from a flat parameter vector.

Parameter layout (fixed): every weight matrix in layer order
(input->hidden1, [hidden1->hidden2], hidden->output), each flattened
row-major with shape (n_out, n_in), followed by every bias vector in the
same layer order.
"""
import numpy as np
from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence, Tuple
from scipy.special import expit

from ..core.config import NetworkConfig
from ..core.exceptions import ConfigError, InvalidParameterVectorError

Layer = Tuple[np.ndarray, np.ndarray]


def _relu(z: np.ndarray) -> np.ndarray:
    return np.maximum(z, 0.0)


def _identity(z: np.ndarray) -> np.ndarray:
    return z


ACTIVATIONS: Dict[str, Callable[[np.ndarray], np.ndarray]] = {
    'sigmoid': expit,
    'relu': _relu,
    'linear': _identity,
}


def activation_derivative(name: str, activated: np.ndarray, pre_activation: np.ndarray) -> np.ndarray:
    """Derivative of an activation, given its output and its input."""
    if name == 'sigmoid':
        return activated * (1.0 - activated)
    if name == 'relu':
        return (pre_activation > 0).astype(float)
    return np.ones_like(pre_activation)


@dataclass(frozen=True)
class NetworkArchitecture:
    """Layer sizes and activations. Fixed for the lifetime of one swarm."""
    input_size: int
    hidden_sizes: Tuple[int, ...] = (8,)
    output_size: int = 1
    hidden_activation: str = 'sigmoid'
    output_activation: str = 'linear'

    def __post_init__(self):
        object.__setattr__(self, 'hidden_sizes', tuple(int(h) for h in self.hidden_sizes))
        if self.input_size < 1 or self.output_size < 1:
            raise ConfigError("input_size and output_size must be >= 1")
        if not 1 <= len(self.hidden_sizes) <= 2:
            raise ConfigError(f"Expected 1 or 2 hidden layers, got {len(self.hidden_sizes)}")
        if any(h < 1 for h in self.hidden_sizes):
            raise ConfigError(f"Hidden layer sizes must be >= 1, got {self.hidden_sizes}")
        for name in (self.hidden_activation, self.output_activation):
            if name not in ACTIVATIONS:
                raise ConfigError(f"Unknown activation: {name}")

    @classmethod
    def from_config(cls, input_size: int, config: NetworkConfig) -> 'NetworkArchitecture':
        return cls(
            input_size=input_size,
            hidden_sizes=config.hidden_sizes,
            hidden_activation=config.hidden_activation,
            output_activation=config.output_activation
        )

    @property
    def layer_sizes(self) -> Tuple[int, ...]:
        return (self.input_size,) + self.hidden_sizes + (self.output_size,)

    @property
    def weight_shapes(self) -> List[Tuple[int, int]]:
        sizes = self.layer_sizes
        return [(n_out, n_in) for n_in, n_out in zip(sizes[:-1], sizes[1:])]

    @property
    def n_weights(self) -> int:
        return sum(r * c for r, c in self.weight_shapes)

    @property
    def n_biases(self) -> int:
        return sum(self.layer_sizes[1:])

    @property
    def n_params(self) -> int:
        return self.n_weights + self.n_biases

    def describe(self) -> str:
        return "FF-" + "-".join(str(s) for s in self.layer_sizes)


class FeedforwardNetwork:
    """
    Stateless feedforward network.

    The network holds only its architecture; every evaluation takes the flat
    parameter vector explicitly, so an optimizer can treat it as an opaque
    function of that vector.
    """

    def __init__(self, architecture: NetworkArchitecture):
        self.architecture = architecture

    @property
    def n_params(self) -> int:
        return self.architecture.n_params

    def unpack(self, params: np.ndarray) -> List[Layer]:
        """Split a flat vector into [(W1, b1), (W2, b2), ...]."""
        params = np.asarray(params, dtype=float)
        if params.ndim != 1 or params.size != self.n_params:
            raise InvalidParameterVectorError(self.n_params, params.size if params.ndim == 1 else params.shape)

        weights, offset = [], 0
        for n_out, n_in in self.architecture.weight_shapes:
            size = n_out * n_in
            weights.append(params[offset:offset + size].reshape(n_out, n_in))
            offset += size

        biases = []
        for n_out in self.architecture.layer_sizes[1:]:
            biases.append(params[offset:offset + n_out])
            offset += n_out

        return list(zip(weights, biases))

    def pack(self, layers: Sequence[Layer]) -> np.ndarray:
        """Inverse of unpack."""
        shapes = self.architecture.weight_shapes
        if len(layers) != len(shapes):
            raise InvalidParameterVectorError(len(shapes), len(layers), what="layer count")
        for (W, b), shape in zip(layers, shapes):
            if np.shape(W) != shape or np.shape(b) != (shape[0],):
                raise InvalidParameterVectorError(
                    (shape, (shape[0],)), (np.shape(W), np.shape(b)), what="layer shape"
                )
        return np.concatenate(
            [np.ravel(W) for W, _ in layers] + [np.ravel(b) for _, b in layers]
        ).astype(float)

    def _activation_name(self, layer_index: int, n_layers: int) -> str:
        if layer_index == n_layers - 1:
            return self.architecture.output_activation
        return self.architecture.hidden_activation

    def forward_layers(self, X: np.ndarray, layers: Sequence[Layer]):
        """Batch forward pass returning (pre-activations, activations) per layer."""
        pre_activations, activations = [], [X]
        a = X
        for idx, (W, b) in enumerate(layers):
            z = a @ W.T + b
            a = ACTIVATIONS[self._activation_name(idx, len(layers))](z)
            pre_activations.append(z)
            activations.append(a)
        return pre_activations, activations

    def predict(self, X: np.ndarray, params: np.ndarray) -> np.ndarray:
        """Predict a batch of inputs; returns one scalar per row."""
        X = np.atleast_2d(np.asarray(X, dtype=float))
        if X.shape[1] != self.architecture.input_size:
            raise InvalidParameterVectorError(self.architecture.input_size, X.shape[1], what="input size")
        _, activations = self.forward_layers(X, self.unpack(params))
        return activations[-1][:, 0]

    def forward(self, x: np.ndarray, params: np.ndarray) -> float:
        """Predict a single input vector."""
        return float(self.predict(np.asarray(x, dtype=float).reshape(1, -1), params)[0])

    def mse(self, params: np.ndarray, X: np.ndarray, y: np.ndarray) -> float:
        """Mean squared error of the predictions against targets."""
        with np.errstate(over='ignore', invalid='ignore'):
            residual = self.predict(X, params) - np.asarray(y, dtype=float)
            return float(np.mean(residual ** 2))

    def init_parameters(self, rng: np.random.Generator, scale: float = 0.1) -> np.ndarray:
        """Gaussian parameters around zero."""
        return rng.normal(0.0, scale, self.n_params)

    def __repr__(self):
        return f"{self.__class__.__name__}({self.architecture.describe()})"
