"""Utility helpers for formatting and display."""

import math
import numbers
from typing import Any, Dict, List

import pandas as pd


def is_numeric(value: Any) -> bool:
    """True for finite real numbers (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value)


def format_number(value: numbers.Real) -> str:
    """Shortest round-trip text; integral floats lose their '.0'."""
    if isinstance(value, numbers.Integral):
        return str(int(value))
    value = float(value)
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def format_pct(value: float, decimals: int = 1) -> str:
    """Format a percentage-point value, e.g. 3.0 → '3.0%'."""
    return f"{value:.{decimals}f}%"


def format_gbp(value: float, decimals: int = 0) -> str:
    """Format a number as pounds sterling."""
    sign = "-" if value < 0 else ""
    return f"{sign}£{abs(value):,.{decimals}f}"


def dict_list_to_df(data: List[Dict]) -> pd.DataFrame:
    """Convert a list of dicts to a DataFrame."""
    return pd.DataFrame(data)


def traffic_light(label: str) -> str:
    """Return a traffic-light emoji for a RAG label."""
    return {"Green": "🟢", "Amber": "🟡"}.get(label, "🔴")
