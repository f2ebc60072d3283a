"""
Optimization module: particle swarm search over network weights or architecture.
"""
from .pso import PSO, PSOResult, Particle, PENALTY_FITNESS
from .model_optimizer import (
    ArchitectureCandidate,
    create_weight_objective,
    create_architecture_objective,
    optimize_weights,
    search_architecture,
    train_candidate
)

__all__ = [
    'PSO', 'PSOResult', 'Particle', 'PENALTY_FITNESS',
    'ArchitectureCandidate', 'create_weight_objective',
    'create_architecture_objective', 'optimize_weights',
    'search_architecture', 'train_candidate'
]
