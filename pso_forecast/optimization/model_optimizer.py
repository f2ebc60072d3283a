"""
Fitness functions and optimization drivers for the feedforward network.

Two searches share the same PSO:

- weight search: a particle is the network's flat parameter vector and its
  fitness is the training MSE;
- architecture search: a particle is (hidden1, hidden2, learning_rate,
  epochs); its fitness is the validation MSE of a network briefly trained
  by backpropagation at that setting.
"""
import threading
import numpy as np
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Sequence, Tuple

from ..core.config import Config, NetworkConfig, SearchConfig
from ..core.logging_utils import get_logger
from ..core.utils import make_rng, hash_array
from ..features.windows import TrainingSet
from ..models.network import NetworkArchitecture, FeedforwardNetwork
from ..models.training import train_backprop
from .pso import PSO, PSOResult, Objective


def create_weight_objective(
    network: FeedforwardNetwork,
    X: np.ndarray,
    y: np.ndarray
) -> Objective:
    """
    Create the weight-search fitness: MSE of the network at a parameter vector.

    Args:
        network: Network whose parameters are searched
        X: Normalized inputs
        y: Normalized targets

    Returns:
        Objective function that takes a parameter vector and returns its MSE
    """
    X = np.asarray(X, dtype=float)
    y = np.asarray(y, dtype=float)

    def objective(position: np.ndarray) -> float:
        return network.mse(position, X, y)

    return objective


@dataclass(frozen=True)
class ArchitectureCandidate:
    """A decoded architecture-search position."""
    hidden_sizes: Tuple[int, int]
    learning_rate: float
    epochs: int

    @classmethod
    def from_position(cls, position: Sequence[float]) -> 'ArchitectureCandidate':
        return cls(
            hidden_sizes=(int(round(position[0])), int(round(position[1]))),
            learning_rate=float(position[2]),
            epochs=int(round(position[3]))
        )

    def within(self, limits: Sequence[Tuple[float, float]]) -> bool:
        values = (self.hidden_sizes[0], self.hidden_sizes[1], self.learning_rate, self.epochs)
        return all(low <= v <= high for v, (low, high) in zip(values, limits))

    def architecture(self, input_size: int, config: NetworkConfig) -> NetworkArchitecture:
        return NetworkArchitecture(
            input_size=input_size,
            hidden_sizes=self.hidden_sizes,
            hidden_activation=config.hidden_activation,
            output_activation=config.output_activation
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def create_architecture_objective(
    train: TrainingSet,
    validation: TrainingSet,
    search: SearchConfig,
    network_config: NetworkConfig,
    seed: int
) -> Objective:
    """
    Create the architecture-search fitness.

    Each evaluation derives its own generator from (seed, position), so results
    do not depend on evaluation order or on which worker runs them. Candidates
    outside the configured limits score +inf, which the swarm penalizes.
    """
    logger = get_logger()
    input_size = train.n_features

    def objective(position: np.ndarray) -> float:
        candidate = ArchitectureCandidate.from_position(position)
        if not candidate.within(search.limits):
            return float('inf')

        network = FeedforwardNetwork(candidate.architecture(input_size, network_config))
        rng = make_rng([seed, hash_array(position)])
        params, _ = train_backprop(
            network, train.X, train.y,
            learning_rate=candidate.learning_rate,
            epochs=candidate.epochs,
            rng=rng,
            init_scale=network_config.init_scale
        )
        fitness = network.mse(params, validation.X, validation.y)
        logger.debug(f"Candidate {candidate}: validation MSE = {fitness:.6g}")
        return fitness

    return objective


def optimize_weights(
    network: FeedforwardNetwork,
    training_set: TrainingSet,
    config: Config,
    stop_event: Optional[threading.Event] = None
) -> PSOResult:
    """
    Search the network's parameter vector with PSO.

    Args:
        network: Network with a fixed architecture
        training_set: Normalized training set
        config: Configuration (PSO section and seed)
        stop_event: Optional cancellation flag

    Returns:
        PSOResult whose best position is a valid parameter vector
    """
    logger = get_logger()
    logger.info(f"Optimizing weights of {network.architecture.describe()} "
                f"({network.n_params} parameters) on {training_set.n_samples} samples")

    objective = create_weight_objective(network, training_set.X, training_set.y)
    optimizer = PSO.from_config(config.pso, seed=config.seed)
    return optimizer.optimize(objective, n_dims=network.n_params, stop_event=stop_event)


def search_architecture(
    training_set: TrainingSet,
    config: Config,
    stop_event: Optional[threading.Event] = None
) -> Tuple[ArchitectureCandidate, PSOResult]:
    """
    Search hidden-layer sizes, learning rate and epochs with PSO.

    The normalized training set is split by position into train/validation
    parts; when it is too small to split, validation reuses the training part.
    """
    logger = get_logger()
    search = config.search

    if training_set.n_samples >= 2:
        train, validation = training_set.split(search.validation_fraction)
    else:
        logger.warning("Too few samples to hold out validation data; validating on training data")
        train, validation = training_set, training_set

    logger.info(f"Architecture search on {train.n_samples} train / "
                f"{validation.n_samples} validation samples")

    objective = create_architecture_objective(train, validation, search, config.network, config.seed)
    optimizer = PSO.from_config(
        config.pso,
        seed=config.seed,
        n_particles=search.n_particles or config.pso.n_particles,
        n_iterations=search.n_iterations or config.pso.n_iterations,
        max_velocity=None,
        position_limit=None
    )
    result = optimizer.optimize(
        objective,
        bounds=search.init_bounds,
        limits=search.limits,
        stop_event=stop_event
    )

    candidate = ArchitectureCandidate.from_position(result.best_position)
    logger.info(f"  Best candidate: {candidate.to_dict()}")
    return candidate, result


def train_candidate(
    candidate: ArchitectureCandidate,
    training_set: TrainingSet,
    config: Config
) -> Tuple[FeedforwardNetwork, np.ndarray]:
    """Retrain the winning candidate on the full normalized training set."""
    network = FeedforwardNetwork(candidate.architecture(training_set.n_features, config.network))
    params, losses = train_backprop(
        network, training_set.X, training_set.y,
        learning_rate=candidate.learning_rate,
        epochs=candidate.epochs,
        rng=make_rng(config.seed),
        init_scale=config.network.init_scale
    )
    if losses:
        get_logger().info(f"Retrained {network.architecture.describe()}: final loss {losses[-1]:.6g}")
    return network, params
