"""
General utilities for the PSO forecasting engine.
"""
import numpy as np
import pandas as pd
import json
from pathlib import Path
from typing import Any, Optional, Sequence, Union
import hashlib


def make_rng(seed: Optional[Union[int, Sequence[int]]] = None) -> np.random.Generator:
    """Create an isolated random generator. Never touches numpy's global state."""
    return np.random.default_rng(seed)


def hash_array(values: np.ndarray) -> int:
    """Stable 32-bit hash of an array's contents, usable as a seed component."""
    data = np.ascontiguousarray(values, dtype=np.float64).tobytes()
    return int(hashlib.md5(data).hexdigest()[:8], 16)


def load_json(path: Union[str, Path]) -> Any:
    """Load data from JSON file."""
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def clamp(value: float, low: float, high: float) -> float:
    """Clamp a scalar into [low, high]."""
    return max(low, min(high, value))


class NumpyEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy types."""

    def default(self, obj):
        if isinstance(obj, np.integer):
            return int(obj)
        elif isinstance(obj, np.floating):
            return float(obj)
        elif isinstance(obj, np.ndarray):
            return obj.tolist()
        elif isinstance(obj, pd.DataFrame):
            return obj.to_dict(orient='records')
        elif isinstance(obj, pd.Series):
            return obj.to_dict()
        elif isinstance(obj, (set, frozenset, tuple)):
            return list(obj)
        return super().default(obj)


def save_json_numpy(data: Any, path: Union[str, Path], indent: int = 2):
    """Save data to JSON file with numpy support."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=indent, cls=NumpyEncoder)
