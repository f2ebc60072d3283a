"""
Scenario adjustments applied during the forecast rollout.

A scenario is a set of plain multiplicative coefficients owned by the
caller. Factors keyed globally, by category, by energy source and by year
multiply either the value field of the rollout inputs or the prediction;
annual growth rates (in percent) compound on individual input fields.
"""
import numpy as np
import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Union

from ..core.exceptions import ConfigError
from ..data_io.observations import split_category_key


@dataclass(frozen=True)
class ScenarioAdjustment:
    """Multiplicative scenario coefficients."""
    name: str = 'baseline'
    apply_to: str = 'inputs'  # "inputs" or "outputs"
    global_factor: float = 1.0
    category_factors: Mapping[str, float] = field(default_factory=dict)
    source_factors: Mapping[str, float] = field(default_factory=dict)
    yearly_factors: Mapping[int, float] = field(default_factory=dict)
    growth_rates: Mapping[str, float] = field(default_factory=dict)
    base_year: Optional[int] = None

    def __post_init__(self):
        if self.apply_to not in ('inputs', 'outputs'):
            raise ConfigError(f"apply_to must be 'inputs' or 'outputs', got {self.apply_to}")
        object.__setattr__(self, 'yearly_factors',
                           {int(k): float(v) for k, v in self.yearly_factors.items()})

    @property
    def is_baseline(self) -> bool:
        return (
            self.global_factor == 1.0
            and not self.category_factors
            and not self.source_factors
            and not self.yearly_factors
            and not self.growth_rates
        )

    def factor(self, category: str, year: int) -> float:
        """Combined multiplier for a category in a year."""
        sector, source = split_category_key(category)
        value = self.global_factor
        if category in self.category_factors:
            value *= self.category_factors[category]
        elif sector in self.category_factors:
            value *= self.category_factors[sector]
        if source is not None and source in self.source_factors:
            value *= self.source_factors[source]
        value *= self.yearly_factors.get(year, 1.0)
        return value

    def field_multipliers(self, field_names: Sequence[str], year: int, origin_year: int) -> np.ndarray:
        """Compounded growth multiplier per input field."""
        base = self.base_year if self.base_year is not None else origin_year
        steps = year - base
        return np.array(
            [(1.0 + self.growth_rates.get(name, 0.0) / 100.0) ** steps for name in field_names]
        )

    def adjust_window(
        self,
        window: np.ndarray,
        field_names: Sequence[str],
        category: str,
        year: int,
        origin_year: int
    ) -> np.ndarray:
        """
        Adjusted copy of a (steps x fields) input window for ``year``.

        Growth rates scale their fields across every step; when the scenario
        targets inputs, the combined factor scales the value field.
        """
        adjusted = np.array(window, dtype=float)
        if self.growth_rates:
            adjusted *= self.field_multipliers(field_names, year, origin_year)
        if self.apply_to == 'inputs':
            adjusted[:, 0] *= self.factor(category, year)
        return adjusted

    def adjust_prediction(self, value: float, category: str, year: int) -> float:
        if self.apply_to == 'outputs':
            return value * self.factor(category, year)
        return value

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'apply_to': self.apply_to,
            'global_factor': self.global_factor,
            'category_factors': dict(self.category_factors),
            'source_factors': dict(self.source_factors),
            'yearly_factors': dict(self.yearly_factors),
            'growth_rates': dict(self.growth_rates),
            'base_year': self.base_year
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ScenarioAdjustment':
        return cls(**dict(data))

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'ScenarioAdjustment':
        with open(path, 'r') as f:
            return cls.from_dict(yaml.safe_load(f) or {})

    @classmethod
    def from_growth_assumptions(
        cls,
        name: str,
        gdp_growth_rate: Optional[float] = None,
        population_growth_rate: Optional[float] = None,
        efficiency_improvement_rate: Optional[float] = None,
        base_year: Optional[int] = None
    ) -> 'ScenarioAdjustment':
        """
        Scenario from macro assumptions, all in percent per year.

        GDP and population rates grow their covariates; an efficiency
        improvement shrinks the consumption value field.
        """
        rates = {}
        if gdp_growth_rate is not None:
            rates['gdp_billions'] = gdp_growth_rate
        if population_growth_rate is not None:
            rates['population_millions'] = population_growth_rate
        if efficiency_improvement_rate is not None:
            rates['value'] = -efficiency_improvement_rate
        return cls(name=name, growth_rates=rates, base_year=base_year)


BASELINE = ScenarioAdjustment()
