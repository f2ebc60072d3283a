"""
Plots for optimization convergence and forecast bands.
"""
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from typing import Dict, List, Optional, Sequence, Tuple
from pathlib import Path

from ..data_io.observations import Observation
from ..optimization.pso import PENALTY_FITNESS

plt.rcParams['font.size'] = 12
plt.rcParams['axes.titleweight'] = 'bold'
plt.rcParams['axes.grid'] = True
plt.rcParams['grid.alpha'] = 0.3


def plot_optimization_history(
    history: Dict[str, List],
    title: str = "PSO Convergence",
    output_path: Optional[Path] = None,
    figsize: Tuple[int, int] = (12, 6),
    dpi: int = 150
) -> plt.Figure:
    """
    Plot optimization convergence history.

    Penalized iterations are left out of the mean-fitness curve.

    Args:
        history: Optimization history dict
        title: Plot title
        output_path: Path to save figure
        figsize: Figure size
        dpi: Resolution of the saved figure

    Returns:
        Matplotlib figure
    """
    fig, ax = plt.subplots(figsize=figsize)

    iterations = np.asarray(history['iterations'])
    best_fitness = np.asarray(history['best_fitness'], dtype=float)

    ax.plot(iterations, best_fitness, 'b-', linewidth=2, marker='o',
            markersize=3, label='Best Fitness')

    if history.get('mean_fitness'):
        mean_fitness = np.asarray(history['mean_fitness'], dtype=float)
        usable = np.isfinite(mean_fitness) & (mean_fitness < PENALTY_FITNESS)
        ax.plot(iterations[usable], mean_fitness[usable], 'g--', linewidth=1.5,
                alpha=0.7, label='Mean Fitness')

    ax.set_xlabel('Iteration')
    ax.set_ylabel('Fitness (MSE)')
    ax.set_yscale('log')
    ax.set_title(title)
    ax.legend()

    best_idx = int(np.argmin(best_fitness))
    ax.annotate(f'Best: {best_fitness[best_idx]:.4g}',
                xy=(iterations[best_idx], best_fitness[best_idx]),
                fontsize=10, color='red')

    plt.tight_layout()

    if output_path:
        plt.savefig(output_path, dpi=dpi, bbox_inches='tight', facecolor='white')

    return fig


def plot_forecast(
    forecasts: pd.DataFrame,
    history: Sequence[Observation] = (),
    category: Optional[str] = None,
    output_path: Optional[Path] = None,
    figsize: Tuple[int, int] = (12, 6),
    dpi: int = 150
) -> plt.Figure:
    """
    Plot historical values and the forecast with its confidence band.

    Args:
        forecasts: DataFrame from forecasts_to_frame
        history: Historical observations of the same category
        category: Category to plot (default: the first in the frame)
        output_path: Path to save figure
        figsize: Figure size
        dpi: Resolution of the saved figure

    Returns:
        Matplotlib figure
    """
    if category is None:
        category = forecasts['category'].iloc[0]
    df = forecasts[forecasts['category'] == category].sort_values('year')
    past = sorted((o for o in history if o.category == category), key=lambda o: o.year)

    fig, ax = plt.subplots(figsize=figsize)

    if past:
        ax.plot([o.year for o in past], [o.value for o in past], 'k-',
                linewidth=2, marker='o', markersize=4, label='Historical')

    ax.plot(df['year'], df['predicted_value'], 'b--', linewidth=2,
            marker='s', markersize=4, label='Forecast')
    ax.fill_between(df['year'], df['lower_bound'], df['upper_bound'],
                    alpha=0.2, color='blue', label='Confidence band')

    ax.set_xlabel('Year')
    ax.set_ylabel('Value')
    ax.set_title(f'Forecast: {category}')
    ax.legend()

    plt.tight_layout()

    if output_path:
        plt.savefig(output_path, dpi=dpi, bbox_inches='tight', facecolor='white')

    return fig
