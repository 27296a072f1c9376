"""
Derived Views over a Projection
===============================
Implements:
  - Year-1 budget waterfall (base → pressures → savings → funding → gap)
  - Proportional service breakdown with service-specific uplifts
  - Reserve exhaustion lookup and reserve trigger check
  - RAG status of the reserve buffer
  - Comparison of a scenario against the baseline run

All functions are pure views of ``ProjectionRow`` sequences; none of them
feed back into the engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from mtfs_simulator.config import (
    Assumptions,
    RAG_AMBER_RATIO,
    RAG_GREEN_RATIO,
    RESERVE_TRIGGER_RATIO,
    ServiceAdjustment,
)
from mtfs_simulator.engine.projection import ProjectionRow


@dataclass
class WaterfallStep:
    label: str
    value: float


@dataclass
class ServiceYear:
    """A service's share of one projection year (£)."""
    year: str
    service: str
    requirement: float
    gap_share: float


@dataclass
class RagStatus:
    label: str                       # Red / Amber / Green
    message: str


@dataclass
class ReserveTrigger:
    """Minimum-reserves check against a share of the year-1 requirement."""
    trigger_level: float
    breached: bool
    breach_years: List[str] = field(default_factory=list)


@dataclass
class ScenarioComparison:
    delta_year1_gap: float
    delta_year5_reserves: float
    series: List[Dict[str, float]]   # year, current_gap, base_gap


# ═══════════════════════════════════════════════════════════════════════════════
#  Waterfall
# ═══════════════════════════════════════════════════════════════════════════════

def compute_waterfall(
    rows: Sequence[ProjectionRow],
    assumptions: Optional[Assumptions] = None,
) -> List[WaterfallStep]:
    """
    Decompose the year-1 gap into its signed drivers.

    Savings and funding are negated since they offset the requirement.
    """
    if not rows:
        return []
    a = assumptions if assumptions is not None else Assumptions()
    year1 = rows[0]
    return [
        WaterfallStep("Base", a.previous_year_base),
        WaterfallStep("Pay+Infl", year1.pay_price_inflation),
        WaterfallStep("Demand", year1.demand_pressures),
        WaterfallStep("Debt", year1.debt_cost),
        WaterfallStep("Savings", -year1.planned_savings),
        WaterfallStep("Funding", -year1.total_funding),
        WaterfallStep("Gap", year1.annual_gap),
    ]


# ═══════════════════════════════════════════════════════════════════════════════
#  Service Breakdown
# ═══════════════════════════════════════════════════════════════════════════════

def compute_service_breakdown(
    rows: Sequence[ProjectionRow],
    assumptions: Optional[Assumptions] = None,
) -> Dict[str, List[ServiceYear]]:
    """Allocate each year's requirement and gap across services."""
    a = assumptions if assumptions is not None else Assumptions()
    breakdown: Dict[str, List[ServiceYear]] = {}
    for service, split in a.service_splits.items():
        adjustment = a.service_adjustments.get(service) or ServiceAdjustment()
        factor = adjustment.factor
        breakdown[service] = [
            ServiceYear(
                year=row.year,
                service=service,
                requirement=row.net_budget_requirement * split * factor,
                gap_share=row.annual_gap * split * factor,
            )
            for row in rows
        ]
    return breakdown


# ═══════════════════════════════════════════════════════════════════════════════
#  Reserves
# ═══════════════════════════════════════════════════════════════════════════════

def find_reserve_exhaustion(rows: Sequence[ProjectionRow]) -> Optional[ProjectionRow]:
    """First year whose closing reserves are zero or negative."""
    return next((row for row in rows if row.reserves_end <= 0), None)


def reserve_trigger(
    rows: Sequence[ProjectionRow],
    ratio: float = RESERVE_TRIGGER_RATIO,
) -> ReserveTrigger:
    level = rows[0].net_budget_requirement * ratio if rows else 0.0
    breaches = [row.year for row in rows if row.reserves_end < level]
    return ReserveTrigger(trigger_level=level, breached=bool(breaches), breach_years=breaches)


def rag_status(reserves: float, budget: float) -> RagStatus:
    """Traffic-light rating of reserves relative to the budget requirement."""
    if reserves <= 0:
        return RagStatus("Red", "Reserves exhausted")
    ratio = reserves / budget
    if ratio > RAG_GREEN_RATIO:
        return RagStatus("Green", "Healthy buffer")
    if ratio >= RAG_AMBER_RATIO:
        return RagStatus("Amber", "Tight headroom")
    return RagStatus("Red", "Critical")


def year_one_rag(
    rows: Sequence[ProjectionRow],
    assumptions: Optional[Assumptions] = None,
) -> RagStatus:
    """RAG status of the year-1 closing position."""
    a = assumptions if assumptions is not None else Assumptions()
    if not rows:
        return rag_status(a.current_reserves, a.previous_year_base)
    return rag_status(rows[0].reserves_end, rows[0].net_budget_requirement)


# ═══════════════════════════════════════════════════════════════════════════════
#  Scenario vs Baseline
# ═══════════════════════════════════════════════════════════════════════════════

def compare_projections(
    current: Sequence[ProjectionRow],
    baseline: Sequence[ProjectionRow],
) -> ScenarioComparison:
    def gap(rows, idx):
        return rows[idx].annual_gap if len(rows) > idx else 0.0

    def reserves(rows, idx):
        return rows[idx].reserves_end if len(rows) > idx else 0.0

    series = [
        {"year": row.year, "current_gap": row.annual_gap, "base_gap": gap(baseline, idx)}
        for idx, row in enumerate(current)
    ]
    return ScenarioComparison(
        delta_year1_gap=gap(current, 0) - gap(baseline, 0),
        delta_year5_reserves=reserves(current, 4) - reserves(baseline, 4),
        series=series,
    )
