"""
Particle Swarm Optimization (PSO) over continuous parameter vectors.
"""
import threading
import numpy as np
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Any, List, Tuple, Callable, Optional
from dataclasses import dataclass, field

from ..core.config import PSOConfig
from ..core.exceptions import NonFiniteFitnessError
from ..core.logging_utils import get_logger
from ..core.utils import make_rng

# Fitness assigned to positions whose evaluation failed or was not finite.
PENALTY_FITNESS = float(np.finfo(float).max)

Objective = Callable[[np.ndarray], float]


@dataclass
class Particle:
    """Represents a particle in PSO."""
    position: np.ndarray
    velocity: np.ndarray
    best_position: np.ndarray = None
    best_fitness: float = float('inf')
    current_fitness: float = float('inf')

    def __post_init__(self):
        if self.best_position is None:
            self.best_position = self.position.copy()


@dataclass
class PSOResult:
    """Outcome of one swarm run."""
    best_position: np.ndarray
    best_fitness: float
    history: Dict[str, List] = field(default_factory=dict)
    n_iterations_run: int = 0
    cancelled: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'best_fitness': float(self.best_fitness),
            'n_iterations_run': self.n_iterations_run,
            'cancelled': self.cancelled,
            'history': {
                'iterations': list(self.history.get('iterations', [])),
                'best_fitness': [float(f) for f in self.history.get('best_fitness', [])],
                'mean_fitness': [float(f) for f in self.history.get('mean_fitness', [])]
            }
        }


class PSO:
    """
    Particle Swarm Optimization implementation.

    Standard PSO with inertia weight and cognitive/social parameters:

        v = w*v + c1*r1*(p_best - x) + c2*r2*(g_best - x)
        x = x + v

    with r1, r2 drawn uniformly per dimension. Positions are not clamped
    unless ``clamp_positions`` is set. Only strict improvements replace a
    personal or global best, so the first position found wins ties.
    """

    def __init__(
        self,
        n_particles: int = 30,
        n_iterations: int = 100,
        w: float = 0.7,
        c1: float = 1.5,
        c2: float = 1.5,
        w_decay: float = 1.0,
        init_scale: float = 0.5,
        max_velocity: Optional[float] = None,
        clamp_positions: bool = False,
        position_limit: Optional[float] = None,
        n_workers: int = 1,
        log_every: int = 10,
        seed: Optional[int] = 42
    ):
        """
        Initialize PSO optimizer.

        Args:
            n_particles: Number of particles
            n_iterations: Number of iterations (always run in full unless stopped)
            w: Inertia weight
            c1: Cognitive parameter
            c2: Social parameter
            w_decay: Inertia weight decay per iteration (1.0 keeps it constant)
            init_scale: Std of the Gaussian initial positions (unbounded search)
            max_velocity: Optional per-dimension velocity limit
            clamp_positions: Clip positions to the bounds (or +-position_limit)
            position_limit: Symmetric limit used when clamping an unbounded search
            n_workers: Threads used to evaluate particles within an iteration
            log_every: Log progress every this many iterations
            seed: Random seed
        """
        self.n_particles = n_particles
        self.n_iterations = n_iterations
        self.w = w
        self.c1 = c1
        self.c2 = c2
        self.w_decay = w_decay
        self.init_scale = init_scale
        self.max_velocity = max_velocity
        self.clamp_positions = clamp_positions
        self.position_limit = position_limit
        self.n_workers = n_workers
        self.log_every = max(1, log_every)
        self.seed = seed

    @classmethod
    def from_config(cls, config: PSOConfig, seed: Optional[int] = 42, **overrides) -> 'PSO':
        params = dict(
            n_particles=config.n_particles,
            n_iterations=config.n_iterations,
            w=config.inertia,
            c1=config.cognitive,
            c2=config.social,
            w_decay=config.inertia_decay,
            init_scale=config.init_scale,
            max_velocity=config.max_velocity,
            clamp_positions=config.clamp_positions,
            position_limit=config.position_limit,
            n_workers=config.n_workers,
            log_every=config.log_every,
            seed=seed
        )
        params.update(overrides)
        return cls(**params)

    def _initialize_particles(
        self,
        rng: np.random.Generator,
        n_dims: int,
        bounds: Optional[List[Tuple[float, float]]]
    ) -> List[Particle]:
        """Gaussian around zero without bounds, uniform within bounds otherwise."""
        particles = []
        for _ in range(self.n_particles):
            if bounds is None:
                position = rng.normal(0.0, self.init_scale, n_dims)
            else:
                low, high = np.array(bounds, dtype=float).T
                position = rng.uniform(low, high)
            particles.append(Particle(position=position, velocity=np.zeros(n_dims)))
        return particles

    def _clamp(self, position: np.ndarray, bounds: Optional[List[Tuple[float, float]]]) -> np.ndarray:
        if not self.clamp_positions:
            return position
        if bounds is not None:
            low, high = np.array(bounds, dtype=float).T
            return np.clip(position, low, high)
        if self.position_limit is not None:
            return np.clip(position, -self.position_limit, self.position_limit)
        return position

    def _evaluate(self, objective: Objective, position: np.ndarray) -> float:
        """Evaluate one position; numerical failures become PENALTY_FITNESS."""
        logger = get_logger()
        try:
            with np.errstate(all='ignore'):
                fitness = float(objective(position))
            if not np.isfinite(fitness):
                raise NonFiniteFitnessError(fitness)
            return fitness
        except NonFiniteFitnessError as e:
            logger.debug(f"Penalizing particle: {e}")
            return PENALTY_FITNESS
        except (ArithmeticError, ValueError) as e:
            logger.warning(f"Fitness evaluation failed, penalizing particle: {e}")
            return PENALTY_FITNESS

    def _evaluate_swarm(
        self,
        objective: Objective,
        particles: List[Particle],
        executor: Optional[ThreadPoolExecutor]
    ) -> List[float]:
        positions = [p.position for p in particles]
        if executor is None:
            return [self._evaluate(objective, pos) for pos in positions]
        return list(executor.map(lambda pos: self._evaluate(objective, pos), positions))

    def optimize(
        self,
        objective: Objective,
        n_dims: Optional[int] = None,
        bounds: Optional[List[Tuple[float, float]]] = None,
        limits: Optional[List[Tuple[float, float]]] = None,
        callback: Callable = None,
        stop_event: Optional[threading.Event] = None,
        rng: Optional[np.random.Generator] = None
    ) -> PSOResult:
        """
        Run PSO optimization.

        Args:
            objective: Function to minimize (takes position array, returns scalar)
            n_dims: Dimensionality of an unbounded search
            bounds: (min, max) per dimension; used for initialization
            limits: (min, max) per dimension used when clamping (default: bounds)
            callback: Optional callback function(iteration, best_fitness)
            stop_event: Checked between iterations; when set, the run stops early
            rng: Generator for the whole run (default: seeded from ``seed``)

        Returns:
            PSOResult with the best position, its fitness and the history
        """
        logger = get_logger()
        if bounds is not None:
            n_dims = len(bounds)
        if not n_dims:
            raise ValueError("Either n_dims or bounds must be given")

        rng = rng if rng is not None else make_rng(self.seed)
        clamp_bounds = limits if limits is not None else bounds
        logger.info(
            f"Starting PSO: {self.n_particles} particles, {self.n_iterations} iterations, "
            f"{n_dims} dimensions"
        )

        particles = self._initialize_particles(rng, n_dims, bounds)
        global_best_position = None
        global_best_fitness = float('inf')

        history = {
            'iterations': [],
            'best_fitness': [],
            'mean_fitness': []
        }

        w = self.w
        cancelled = False
        iterations_run = 0
        executor = ThreadPoolExecutor(max_workers=self.n_workers) if self.n_workers > 1 else None

        try:
            for iteration in range(self.n_iterations):
                fitness_values = self._evaluate_swarm(objective, particles, executor)

                for particle, fitness in zip(particles, fitness_values):
                    particle.current_fitness = fitness

                    if fitness < particle.best_fitness:
                        particle.best_fitness = fitness
                        particle.best_position = particle.position.copy()

                    if fitness < global_best_fitness:
                        global_best_fitness = fitness
                        global_best_position = particle.position.copy()

                for particle in particles:
                    r1 = rng.random(n_dims)
                    r2 = rng.random(n_dims)

                    cognitive = self.c1 * r1 * (particle.best_position - particle.position)
                    social = self.c2 * r2 * (global_best_position - particle.position)
                    particle.velocity = w * particle.velocity + cognitive + social

                    if self.max_velocity is not None:
                        particle.velocity = np.clip(particle.velocity, -self.max_velocity, self.max_velocity)

                    particle.position = self._clamp(particle.position + particle.velocity, clamp_bounds)

                w *= self.w_decay
                iterations_run = iteration + 1

                history['iterations'].append(iteration)
                history['best_fitness'].append(global_best_fitness)
                with np.errstate(over='ignore'):
                    history['mean_fitness'].append(float(np.mean(fitness_values)))

                if callback is not None:
                    callback(iteration, global_best_fitness)

                if iteration % self.log_every == 0 or iteration == self.n_iterations - 1:
                    logger.info(f"  Iteration {iteration}: Best fitness = {global_best_fitness:.6g}")

                if stop_event is not None and stop_event.is_set():
                    logger.warning(f"PSO cancelled after {iterations_run} iterations")
                    cancelled = True
                    break
        finally:
            if executor is not None:
                executor.shutdown(wait=True)

        logger.info(f"PSO complete. Best fitness: {global_best_fitness:.6g}")

        return PSOResult(
            best_position=global_best_position,
            best_fitness=global_best_fitness,
            history=history,
            n_iterations_run=iterations_run,
            cancelled=cancelled
        )
