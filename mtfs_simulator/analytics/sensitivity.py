"""
Driver Sensitivity
==================
One-sided finite differences of the year-1 gap with respect to each
percentage driver. ``up`` is gap(+1pp) − gap(base) and ``down`` is
gap(base) − gap(−1pp); the two differ where the driver enters the
recurrence through a compounding term.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple

from mtfs_simulator.config import (
    Assumptions,
    DebtBlock,
    FundingShock,
    SENSITIVITY_STEP,
    SavingsItem,
    YearInputs,
    YearOverride,
)
from mtfs_simulator.engine.projection import compute_projections, year_one_gap


# (field, display label), in display order
DRIVERS: Tuple[Tuple[str, str], ...] = (
    ("council_tax_increase", "Council Tax %"),
    ("pay_award", "Pay Award %"),
    ("general_inflation", "General Inflation %"),
    ("social_care_growth", "Demand Growth %"),
)


@dataclass
class SensitivityEntry:
    driver: str
    up: float                        # Gap change for +step
    down: float                      # Gap change for −step


def compute_sensitivity(
    inputs: YearInputs,
    overrides: Optional[Sequence[YearOverride]],
    funding_shock: Optional[FundingShock],
    debt: Optional[DebtBlock],
    assumptions: Optional[Assumptions] = None,
    pipeline: Optional[Sequence[SavingsItem]] = None,
    step: float = SENSITIVITY_STEP,
) -> List[SensitivityEntry]:
    """Perturb each driver by ±``step`` points, all else fixed."""

    def gap_for(driver_inputs: YearInputs) -> float:
        rows = compute_projections(
            driver_inputs, overrides, funding_shock, debt, assumptions, pipeline
        )
        gap = year_one_gap(rows)
        return 0.0 if gap is None else gap

    baseline = gap_for(inputs)
    entries = []
    for key, label in DRIVERS:
        current = getattr(inputs, key)
        up_gap = gap_for(replace(inputs, **{key: current + step}))
        down_gap = gap_for(replace(inputs, **{key: current - step}))
        entries.append(SensitivityEntry(
            driver=label,
            up=up_gap - baseline,
            down=baseline - down_gap,
        ))
    return entries
