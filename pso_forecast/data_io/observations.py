"""
Historical observation records and their conversion from tabular data.
"""
import math
import pandas as pd
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Iterable, Mapping, Sequence, Tuple, Union

from ..core.logging_utils import get_logger

CATEGORY_SEPARATOR = "/"

# Column name aliases (for flexible mapping)
COLUMN_ALIASES: Dict[str, List[str]] = {
    "year": ["year", "Year", "YEAR"],
    "category": ["category", "Category", "category_key"],
    "sector": ["sector", "Sector", "SECTOR"],
    "energy_source": ["energy_source", "EnergySource", "Energy Source", "source", "fuel"],
    "value": ["consumption_twh", "Consumption_TWh", "consumption", "value", "demand"],
}


@dataclass(frozen=True)
class Observation:
    """One yearly observation of a category's series."""
    year: int
    category: str
    value: float
    covariates: Mapping[str, Optional[float]] = field(default_factory=dict)

    def covariate(self, name: str) -> float:
        """Covariate value, 0.0 when missing or NaN."""
        value = self.covariates.get(name)
        if value is None:
            return 0.0
        value = float(value)
        return 0.0 if math.isnan(value) else value


def make_category_key(sector: str, energy_source: str) -> str:
    """Build the category key grouping a sector/energy-source series."""
    return f"{sector}{CATEGORY_SEPARATOR}{energy_source}"


def split_category_key(category: str) -> Tuple[str, Optional[str]]:
    """Split a category key into (sector, energy_source); source is None for plain keys."""
    if CATEGORY_SEPARATOR not in category:
        return category, None
    sector, source = category.split(CATEGORY_SEPARATOR, 1)
    return sector, source


def _resolve_column(df: pd.DataFrame, logical: str) -> Optional[str]:
    for alias in COLUMN_ALIASES[logical]:
        if alias in df.columns:
            return alias
    return None


def observations_from_frame(
    df: pd.DataFrame,
    covariates: Sequence[str] = ()
) -> List[Observation]:
    """
    Convert a DataFrame of historical records to observations.

    The category comes from a ``category`` column when present, otherwise from
    ``sector`` and ``energy_source``. Covariate columns that are absent are
    simply left out of the observation.

    Args:
        df: Input DataFrame
        covariates: Names of covariate columns to carry

    Returns:
        List of observations, in frame order
    """
    logger = get_logger()

    year_col = _resolve_column(df, "year")
    value_col = _resolve_column(df, "value")
    if year_col is None or value_col is None:
        raise ValueError(
            f"Data must contain year and value columns; found {list(df.columns)}"
        )

    category_col = _resolve_column(df, "category")
    sector_col = _resolve_column(df, "sector")
    source_col = _resolve_column(df, "energy_source")
    if category_col is None and (sector_col is None or source_col is None):
        raise ValueError("Data must contain a category column or sector and energy_source columns")

    present = [c for c in covariates if c in df.columns]
    missing = [c for c in covariates if c not in df.columns]
    if missing:
        logger.warning(f"Covariate columns not found, defaulting to 0.0: {missing}")

    observations = []
    dropped = 0
    for row in df.to_dict(orient='records'):
        value = row[value_col]
        if value is None or pd.isna(value):
            dropped += 1
            continue
        if category_col is not None:
            category = str(row[category_col])
        else:
            category = make_category_key(str(row[sector_col]), str(row[source_col]))
        observations.append(Observation(
            year=int(row[year_col]),
            category=category,
            value=float(value),
            covariates={c: (None if pd.isna(row[c]) else float(row[c])) for c in present}
        ))

    if dropped:
        logger.warning(f"Dropped {dropped} rows with missing values")
    logger.info(f"Loaded {len(observations)} observations")
    return observations


def load_observations(
    path: Union[str, Path],
    covariates: Sequence[str] = ()
) -> List[Observation]:
    """Load observations from a CSV file."""
    df = pd.read_csv(path)
    return observations_from_frame(df, covariates)


def group_by_category(observations: Iterable[Observation]) -> Dict[str, List[Observation]]:
    """
    Group observations by category, sorted by year.

    Duplicate years keep the last observation seen. Gaps in the yearly
    sequence are logged but kept.
    """
    logger = get_logger()
    by_category: Dict[str, Dict[int, Observation]] = {}

    for obs in observations:
        series = by_category.setdefault(obs.category, {})
        if obs.year in series:
            logger.warning(f"Duplicate year {obs.year} for '{obs.category}', keeping last value")
        series[obs.year] = obs

    grouped = {}
    for category in sorted(by_category):
        years = sorted(by_category[category])
        gaps = [b for a, b in zip(years, years[1:]) if b - a != 1]
        if gaps:
            logger.warning(f"Non-contiguous years for '{category}' before {gaps}")
        grouped[category] = [by_category[category][y] for y in years]

    return grouped
