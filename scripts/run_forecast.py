#!/usr/bin/env python
"""
Run Forecast
============
Train a PSO-optimized network on historical energy data and forecast
every sector/energy-source series.

Usage:
    python scripts/run_forecast.py --data DATA_CSV [--config CONFIG_PATH]
                                   [--scenario SCENARIO_YAML] [--horizon N]
                                   [--run-id RUN_ID] [--plots]

Outputs:
    - outputs/runs/<run_id>/forecasts/forecasts.csv
    - outputs/runs/<run_id>/forecasts/summary.json
    - outputs/runs/<run_id>/forecasts/optimization_history.csv
    - outputs/runs/<run_id>/figures/*.png (with --plots)
"""
import argparse
import dataclasses
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from pso_forecast.core import (
    Config, create_run_directories, setup_logging, LogContext
)
from pso_forecast.data_io import load_observations
from pso_forecast.forecasting import (
    ForecastEngine, ScenarioAdjustment, forecasts_to_frame, save_forecast_run
)
from pso_forecast.reporting import plot_optimization_history, plot_forecast


def parse_args():
    parser = argparse.ArgumentParser(description='Forecast energy demand with a PSO-trained network')
    parser.add_argument('--data', type=str, required=True,
                       help='CSV with year, sector, energy_source, consumption_twh columns')
    parser.add_argument('--config', type=str, default=None)
    parser.add_argument('--scenario', type=str, default=None,
                       help='YAML file with scenario adjustments')
    parser.add_argument('--horizon', type=int, default=None,
                       help='Years to forecast (default: from config)')
    parser.add_argument('--categories', type=str, nargs='+', default=None,
                       help='Categories to forecast, e.g. Industrial/Electricity (default: all)')
    parser.add_argument('--run-id', type=str, default=None)
    parser.add_argument('--plots', action='store_true',
                       help='Save convergence and forecast figures')
    return parser.parse_args()


def main():
    args = parse_args()

    config = Config.load(args.config) if args.config else Config()
    if args.run_id:
        config = dataclasses.replace(config, run_id=args.run_id)

    dirs = create_run_directories(config)
    logger = setup_logging(dirs['logs'], config.run_id)
    logger.info(f"Run ID: {config.run_id}")

    with LogContext(logger, "Load data", path=args.data):
        observations = load_observations(args.data, config.features.covariates)

    scenario = ScenarioAdjustment.load(args.scenario) if args.scenario else None

    engine = ForecastEngine(config)
    run = engine.run(
        observations,
        horizon=args.horizon,
        scenario=scenario,
        categories=args.categories
    )

    if config.output.save_results:
        save_forecast_run(run, dirs['forecasts'], config)

    if args.plots or config.output.save_plots:
        with LogContext(logger, "Plots"):
            fig = plot_optimization_history(
                run.optimization.history,
                output_path=dirs['figures'] / 'optimization_history.png',
                dpi=config.output.figure_dpi
            )
            plt.close(fig)

            df = forecasts_to_frame(run.points)
            for category in df['category'].unique():
                name = category.replace('/', '_').replace(' ', '_')
                fig = plot_forecast(
                    df, observations, category,
                    output_path=dirs['figures'] / f'forecast_{name}.png',
                    dpi=config.output.figure_dpi
                )
                plt.close(fig)

    for category, reason in run.skipped.items():
        logger.warning(f"Skipped {category}: {reason}")

    logger.info(f"Forecast complete: {len(run.points)} points, "
                f"model {run.model.network.architecture.describe()}, "
                f"fitness {run.model.fitness:.6g}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
