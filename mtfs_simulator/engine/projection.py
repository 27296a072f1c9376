"""
Core Projection Engine
======================
Year-by-year recurrence of the Medium-Term Financial Strategy model.
Each year rolls the previous year's net budget requirement forward,
adds pay/price inflation, demand and debt costs, deducts savings and
compares the result with council tax and grant funding. The cumulative
gap is drawn down from the opening reserves.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional, Sequence

from mtfs_simulator.config import (
    Assumptions,
    DebtBlock,
    FundingShock,
    PROJECTION_HORIZON_YEARS,
    SavingsItem,
    Scenario,
    YearInputs,
    YearOverride,
    default_savings_pipeline,
)

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
#  Projection Row (one horizon year)
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class ProjectionRow:
    """Result of a single projection year (£)."""
    year: str                        # Display label, e.g. "Y1 (2027)"
    year_index: int
    calendar_year: int

    net_budget_requirement: float
    total_funding: float
    annual_gap: float                # Requirement − funding; positive = shortfall
    reserves_end: float

    # Requirement components
    pay_price_inflation: float = 0.0
    demand_pressures: float = 0.0
    planned_savings: float = 0.0     # Baseline savings incl. pipeline
    pipeline_savings: float = 0.0
    debt_cost: float = 0.0

    # Funding components
    council_tax_revenue: float = 0.0
    business_rates: float = 0.0
    revenue_support_grant: float = 0.0
    other_grants: float = 0.0
    shock_amount: float = 0.0

    def to_dict(self) -> Dict:
        return asdict(self)


# ═══════════════════════════════════════════════════════════════════════════════
#  Recurrence helpers
# ═══════════════════════════════════════════════════════════════════════════════

def resolve_inputs_for_year(
    inputs: YearInputs,
    overrides: Optional[Sequence[YearOverride]],
    index: int,
) -> YearInputs:
    """Effective drivers for year ``index`` after applying an enabled override."""
    override = overrides[index] if overrides and index < len(overrides) else None
    if override is None or not override.enabled:
        return inputs

    def pick(value, fallback):
        return fallback if value is None else value

    return YearInputs(
        council_tax_increase=pick(override.council_tax_increase, inputs.council_tax_increase),
        pay_award=pick(override.pay_award, inputs.pay_award),
        general_inflation=pick(override.general_inflation, inputs.general_inflation),
        social_care_growth=pick(override.social_care_growth, inputs.social_care_growth),
    )


def pipeline_savings(pipeline: Optional[Sequence[SavingsItem]], year_index: int) -> float:
    """Confidence-weighted pipeline savings landing in year ``year_index`` (0-based)."""
    year_number = year_index + 1
    total = 0.0
    for item in pipeline or []:
        if item.start_year > year_number:
            continue
        if not item.recurring and item.start_year != year_number:
            continue
        total += item.weighted_amount
    return total


def _debt_cost(debt: Optional[DebtBlock]) -> float:
    return 0.0 if debt is None else debt.annual_cost


# ═══════════════════════════════════════════════════════════════════════════════
#  Projection
# ═══════════════════════════════════════════════════════════════════════════════

def compute_projections(
    inputs: YearInputs,
    overrides: Optional[Sequence[YearOverride]],
    funding_shock: Optional[FundingShock],
    debt: Optional[DebtBlock],
    assumptions: Optional[Assumptions] = None,
    pipeline: Optional[Sequence[SavingsItem]] = None,
) -> List[ProjectionRow]:
    """
    Run the 5-year MTFS recurrence.

    Parameters
    ----------
    inputs : baseline driver set applied to every year
    overrides : per-year driver overrides (only enabled ones apply)
    funding_shock : one-off funding adjustment
    debt : debt service block (constant cost every year)
    assumptions : council starting position (defaults if omitted)
    pipeline : savings pipeline (default pipeline if omitted)

    Returns
    -------
    One ProjectionRow per horizon year.
    """
    a = assumptions if assumptions is not None else Assumptions()
    if pipeline is None:
        pipeline = default_savings_pipeline()
    growth = a.funding_growth

    rows: List[ProjectionRow] = []
    previous_base = a.previous_year_base
    cumulative_gap = 0.0
    debt_cost = _debt_cost(debt)

    for i in range(PROJECTION_HORIZON_YEARS):
        drivers = resolve_inputs_for_year(inputs, overrides, i)
        calendar_year = a.base_year + i + 1

        # ── 1. Spending requirement ─────────────────────────────────────
        pay_price_inflation = previous_base * (
            (drivers.pay_award + drivers.general_inflation) / 100
        )
        # Demand compounds from the baseline figure, exponent i
        demand_pressures = a.demand_pressures * (1 + drivers.social_care_growth / 100) ** i
        pipeline_amount = pipeline_savings(pipeline, i)
        planned_savings = a.planned_savings + pipeline_amount

        net_budget_requirement = (
            previous_base
            + pay_price_inflation
            + demand_pressures
            + debt_cost
            - planned_savings
        )

        # ── 2. Funding ──────────────────────────────────────────────────
        # Council tax compounds from year 1 (exponent i + 1), grants from year 0
        council_tax_revenue = (
            a.council_tax_yield
            * (1 + drivers.council_tax_increase / 100) ** (i + 1)
        )
        business_rates = a.business_rates * (1 + growth.business_rates / 100) ** i
        revenue_support_grant = (
            a.revenue_support_grant * (1 + growth.revenue_support_grant / 100) ** i
        )
        other_grants = a.other_grants * (1 + growth.other_grants / 100) ** i

        shock_amount = 0.0
        if funding_shock is not None and funding_shock.enabled and funding_shock.year_index == i:
            shock_amount = funding_shock.amount

        total_funding = (
            council_tax_revenue + business_rates + revenue_support_grant
            + other_grants + shock_amount
        )

        # ── 3. Gap & reserves ───────────────────────────────────────────
        annual_gap = net_budget_requirement - total_funding
        cumulative_gap += annual_gap
        reserves_end = a.current_reserves - cumulative_gap

        rows.append(ProjectionRow(
            year=f"Y{i + 1} ({calendar_year})",
            year_index=i,
            calendar_year=calendar_year,
            net_budget_requirement=net_budget_requirement,
            total_funding=total_funding,
            annual_gap=annual_gap,
            reserves_end=reserves_end,
            pay_price_inflation=pay_price_inflation,
            demand_pressures=demand_pressures,
            planned_savings=planned_savings,
            pipeline_savings=pipeline_amount,
            debt_cost=debt_cost,
            council_tax_revenue=council_tax_revenue,
            business_rates=business_rates,
            revenue_support_grant=revenue_support_grant,
            other_grants=other_grants,
            shock_amount=shock_amount,
        ))

        # The requirement, not actual spend, becomes next year's base
        previous_base = net_budget_requirement

    return rows


def year_one_gap(rows: Sequence[ProjectionRow]) -> Optional[float]:
    """Year-1 annual gap, or None for an empty projection."""
    return rows[0].annual_gap if rows else None


# ═══════════════════════════════════════════════════════════════════════════════
#  Scenario Projector
# ═══════════════════════════════════════════════════════════════════════════════

class MTFSProjector:
    """
    Projects a full Scenario over the MTFS horizon.

    Keeps the last set of rows so callers can build summaries
    without re-running the recurrence.
    """

    def __init__(self, scenario: Scenario):
        self.scenario = scenario
        self.rows: List[ProjectionRow] = []

    def project(self, inputs: Optional[YearInputs] = None) -> List[ProjectionRow]:
        """Project the scenario, optionally with a replacement driver set."""
        s = self.scenario
        self.rows = compute_projections(
            inputs if inputs is not None else s.inputs,
            s.overrides,
            s.funding_shock,
            s.debt,
            s.assumptions,
            s.pipeline,
        )
        logger.debug(
            "Projected scenario %r: year-1 gap %.0f, year-5 reserves %.0f",
            s.name, self.rows[0].annual_gap, self.rows[-1].reserves_end,
        )
        return self.rows

    def project_baseline(self) -> List[ProjectionRow]:
        """
        Reference run used for scenario comparison: baseline drivers from
        the assumptions, no overrides, no shock and the default debt block.
        """
        s = self.scenario
        return compute_projections(
            s.assumptions.baseline,
            None,
            None,
            DebtBlock(),
            s.assumptions,
            s.pipeline,
        )

    def get_projection_summary(self) -> List[Dict]:
        """Return a list of dicts summarising each year's key figures."""
        if not self.rows:
            self.project()
        summary = []
        for r in self.rows:
            summary.append({
                "Year": r.year,
                "Net Budget Requirement (£)": round(r.net_budget_requirement),
                "Total Funding (£)": round(r.total_funding),
                "Annual Gap (£)": round(r.annual_gap),
                "Reserves End (£)": round(r.reserves_end),
                "Council Tax (£)": round(r.council_tax_revenue),
                "Planned Savings (£)": round(r.planned_savings),
            })
        return summary
