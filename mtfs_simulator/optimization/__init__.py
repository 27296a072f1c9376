"""
Break-even Solvers
==================
Implements:
  - Council tax increase that closes the year-1 gap (fixed 20-step bisection)
  - Reference root of the same problem using Brent's method (scipy.optimize)
  - Additional savings needed to close the year-1 gap

The bisection runs a fixed number of iterations with no tolerance exit,
so its answer is within (high − low) / 2**20 ≈ 4.8e-6 percentage points
of the true break-even rate. The Brent root is used to check that bound.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from scipy.optimize import brentq

from mtfs_simulator.config import (
    Assumptions,
    BISECTION_ITERATIONS,
    BREAK_EVEN_BRACKET,
    DebtBlock,
    FundingShock,
    SavingsItem,
    Scenario,
    YearInputs,
    YearOverride,
)
from mtfs_simulator.engine.projection import ProjectionRow, compute_projections, year_one_gap

logger = logging.getLogger(__name__)


@dataclass
class BreakEvenResult:
    """Solver outputs for a scenario."""
    council_tax_increase: Optional[float]          # Bisection answer (%)
    council_tax_increase_exact: Optional[float]    # Brent reference root (%)
    additional_savings: float                      # £ needed at current drivers


def _year_one_gap_at(
    rate: float,
    inputs: YearInputs,
    overrides: Optional[Sequence[YearOverride]],
    funding_shock: Optional[FundingShock],
    debt: Optional[DebtBlock],
    assumptions: Optional[Assumptions],
    pipeline: Optional[Sequence[SavingsItem]],
) -> Optional[float]:
    rows = compute_projections(
        replace(inputs, council_tax_increase=rate),
        overrides, funding_shock, debt, assumptions, pipeline,
    )
    return year_one_gap(rows)


# ═══════════════════════════════════════════════════════════════════════════════
#  Council tax break-even
# ═══════════════════════════════════════════════════════════════════════════════

def solve_council_tax_increase(
    inputs: YearInputs,
    overrides: Optional[Sequence[YearOverride]],
    funding_shock: Optional[FundingShock],
    debt: Optional[DebtBlock],
    assumptions: Optional[Assumptions] = None,
    pipeline: Optional[Sequence[SavingsItem]] = None,
) -> Optional[float]:
    """
    Smallest tested council tax increase (%) at which the year-1 gap is ≤ 0.

    Assumes the gap falls as the rate rises and that the gap at the lower
    bracket is positive. Returns None if the engine yields no rows.
    """
    low, high = BREAK_EVEN_BRACKET
    best = None
    for _ in range(BISECTION_ITERATIONS):
        mid = (low + high) / 2
        gap = _year_one_gap_at(mid, inputs, overrides, funding_shock, debt, assumptions, pipeline)
        if gap is None:
            return None
        if gap > 0:
            low = mid        # Still a shortfall
        else:
            high = mid
            best = mid
    logger.debug("Bisection break-even rate: %s (bracket %s–%s)", best, low, high)
    return best


def solve_council_tax_increase_exact(
    inputs: YearInputs,
    overrides: Optional[Sequence[YearOverride]],
    funding_shock: Optional[FundingShock],
    debt: Optional[DebtBlock],
    assumptions: Optional[Assumptions] = None,
    pipeline: Optional[Sequence[SavingsItem]] = None,
    xtol: float = 1e-12,
) -> Optional[float]:
    """
    Root of the year-1 gap in the break-even bracket via Brent's method.

    Returns None when the gap does not change sign over the bracket.
    """
    low, high = BREAK_EVEN_BRACKET

    def f(rate: float) -> float:
        gap = _year_one_gap_at(rate, inputs, overrides, funding_shock, debt, assumptions, pipeline)
        return 0.0 if gap is None else gap

    f_low, f_high = f(low), f(high)
    if f_low == 0:
        return low
    if f_high == 0:
        return high
    if f_low * f_high > 0:
        logger.debug("No sign change in year-1 gap over %s–%s%%", low, high)
        return None
    return float(brentq(f, low, high, xtol=xtol))


# ═══════════════════════════════════════════════════════════════════════════════
#  Additional savings
# ═══════════════════════════════════════════════════════════════════════════════

def solve_additional_savings(projections: Sequence[ProjectionRow]) -> float:
    """Year-1 shortfall still to be closed by savings (0 when in surplus)."""
    if not projections:
        return 0.0
    gap = projections[0].annual_gap
    return gap if gap > 0 else 0.0


def run_break_even(scenario: Scenario) -> BreakEvenResult:
    """Run all break-even solvers for a scenario."""
    args = (
        scenario.inputs,
        scenario.overrides,
        scenario.funding_shock,
        scenario.debt,
        scenario.assumptions,
        scenario.pipeline,
    )
    rows = compute_projections(*args)
    return BreakEvenResult(
        council_tax_increase=solve_council_tax_increase(*args),
        council_tax_increase_exact=solve_council_tax_increase_exact(*args),
        additional_savings=solve_additional_savings(rows),
    )
