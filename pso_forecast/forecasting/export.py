"""
Tabular export of forecast runs.
"""
import pandas as pd
from pathlib import Path
from typing import Dict, Optional, Sequence

from ..core.config import Config
from ..core.logging_utils import get_logger
from ..core.utils import save_json_numpy
from .engine import ForecastRun
from .rollout import ForecastPoint

FORECAST_COLUMNS = [
    'year', 'category', 'predicted_value', 'lower_bound', 'upper_bound', 'confidence'
]


def forecasts_to_frame(points: Sequence[ForecastPoint], scenario: Optional[str] = None) -> pd.DataFrame:
    """Forecast points as a DataFrame, sorted by category and year."""
    df = pd.DataFrame([p.to_dict() for p in points], columns=FORECAST_COLUMNS)
    if scenario is not None:
        df['scenario'] = scenario
    return df.sort_values(['category', 'year']).reset_index(drop=True)


def save_forecast_run(
    run: ForecastRun,
    output_dir: Path,
    config: Optional[Config] = None
) -> Dict[str, Path]:
    """
    Save a run's outputs.

    Writes forecasts.csv, summary.json, optimization_history.csv and, when a
    config is given, a config snapshot.

    Returns:
        Mapping of output name to written path
    """
    logger = get_logger()
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = {
        'forecasts': output_dir / 'forecasts.csv',
        'summary': output_dir / 'summary.json',
        'history': output_dir / 'optimization_history.csv'
    }

    forecasts_to_frame(run.points, run.scenario.name).to_csv(paths['forecasts'], index=False)

    summary = run.summary(config)
    summary['scenario_adjustments'] = run.scenario.to_dict()
    save_json_numpy(summary, paths['summary'])

    pd.DataFrame(run.optimization.to_dict()['history']).to_csv(paths['history'], index=False)

    if config is not None:
        paths['config'] = output_dir / 'config.yaml'
        config.save(paths['config'])

    logger.info(f"Saved forecast run to {output_dir}")
    return paths
