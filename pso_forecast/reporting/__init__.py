"""
Reporting module: convergence and forecast plots.
"""
from .plots import plot_optimization_history, plot_forecast

__all__ = ['plot_optimization_history', 'plot_forecast']
