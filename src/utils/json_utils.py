"""JSON serialization helpers for extraction results."""

from __future__ import annotations

from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any

import numpy as np


def convert_json_types(obj: Any) -> Any:
    """Convert values json cannot encode natively.

    Intended as the ``default`` argument of ``json.dump``. Dates become ISO
    strings, paths become strings, enums their values, and numpy scalars and
    arrays their Python equivalents.

    Raises:
        TypeError: If the object has no JSON representation
    """
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")
