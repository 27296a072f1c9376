"""Configuration, scenario model and driver presets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


# ── Model constants ──────────────────────────────────────────────────────────
PROJECTION_HORIZON_YEARS = 5     # Fixed 5-year MTFS window
RESERVE_TRIGGER_RATIO = 0.05     # Minimum reserves as share of year-1 requirement
RAG_GREEN_RATIO = 0.05           # Reserves / budget above this → Green
RAG_AMBER_RATIO = 0.01           # Reserves / budget at or above this → Amber

# ── Solver & sensitivity settings ────────────────────────────────────────────
BREAK_EVEN_BRACKET = (0.0, 5.0)  # Council tax increase search range (%)
BISECTION_ITERATIONS = 20
BISECTION_RESOLUTION = (BREAK_EVEN_BRACKET[1] - BREAK_EVEN_BRACKET[0]) / 2 ** BISECTION_ITERATIONS
SENSITIVITY_STEP = 1.0           # Percentage points

# ── Stress test settings ─────────────────────────────────────────────────────
NORMAL_EPSILON = 1e-9            # Replaces zero uniform draws before ln()
STRESS_PERCENTILES = (0.10, 0.50, 0.90)


def _get(data: Mapping[str, Any], key: str, default: Any) -> Any:
    """Read ``key`` from an imported mapping, treating null as missing."""
    value = data.get(key)
    return default if value is None else value


# ── Year drivers ─────────────────────────────────────────────────────────────
@dataclass
class YearInputs:
    """The four percentage drivers applied to one projection year."""
    council_tax_increase: float = 3.0
    pay_award: float = 4.0
    general_inflation: float = 3.0
    social_care_growth: float = 4.5

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "YearInputs":
        base = cls()
        return cls(
            council_tax_increase=_get(data, "councilTaxIncrease", base.council_tax_increase),
            pay_award=_get(data, "payAward", base.pay_award),
            general_inflation=_get(data, "generalInflation", base.general_inflation),
            social_care_growth=_get(data, "socialCareGrowth", base.social_care_growth),
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "councilTaxIncrease": self.council_tax_increase,
            "payAward": self.pay_award,
            "generalInflation": self.general_inflation,
            "socialCareGrowth": self.social_care_growth,
        }


@dataclass
class YearOverride:
    """Per-year replacement drivers; null fields fall back to the baseline."""
    enabled: bool = False
    council_tax_increase: Optional[float] = None
    pay_award: Optional[float] = None
    general_inflation: Optional[float] = None
    social_care_growth: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "YearOverride":
        return cls(
            enabled=bool(data.get("enabled", False)),
            council_tax_increase=data.get("councilTaxIncrease"),
            pay_award=data.get("payAward"),
            general_inflation=data.get("generalInflation"),
            social_care_growth=data.get("socialCareGrowth"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "councilTaxIncrease": self.council_tax_increase,
            "payAward": self.pay_award,
            "generalInflation": self.general_inflation,
            "socialCareGrowth": self.social_care_growth,
        }


# ── Funding shock & debt ─────────────────────────────────────────────────────
@dataclass
class FundingShock:
    """One-off signed adjustment to a single year's total funding."""
    enabled: bool = False
    year_index: int = 0              # 0-based projection year
    amount: float = -5_000_000.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FundingShock":
        base = cls()
        return cls(
            enabled=bool(data.get("enabled", False)),
            year_index=_get(data, "yearIndex", base.year_index),
            amount=_get(data, "amount", base.amount),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "yearIndex": self.year_index, "amount": self.amount}


@dataclass
class DebtBlock:
    """Borrowing and capital financing; principal is not amortised."""
    debt_principal: float = 120_000_000.0
    debt_interest_rate: float = 4.2          # Annual %
    annual_capital_financing: float = 6_500_000.0

    @property
    def annual_cost(self) -> float:
        """Interest on the principal plus capital financing; null fields count as 0."""
        return (
            (self.debt_principal or 0.0) * ((self.debt_interest_rate or 0.0) / 100)
            + (self.annual_capital_financing or 0.0)
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DebtBlock":
        # Imported debt blocks degrade to zero, not to the defaults
        return cls(
            debt_principal=_get(data, "debtPrincipal", 0.0),
            debt_interest_rate=_get(data, "debtInterestRate", 0.0),
            annual_capital_financing=_get(data, "annualCapitalFinancing", 0.0),
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "debtPrincipal": self.debt_principal,
            "debtInterestRate": self.debt_interest_rate,
            "annualCapitalFinancing": self.annual_capital_financing,
        }


# ── Savings pipeline ─────────────────────────────────────────────────────────
@dataclass
class SavingsItem:
    """A named savings initiative weighted by delivery confidence."""
    name: str
    amount: float
    start_year: int                  # 1-based projection year
    recurring: bool = True
    confidence: float = 1.0          # 0..1

    @property
    def weighted_amount(self) -> float:
        confidence = 1.0 if self.confidence is None else self.confidence
        return self.amount * confidence

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SavingsItem":
        return cls(
            name=str(_get(data, "name", "")),
            amount=_get(data, "amount", 0.0),
            start_year=_get(data, "startYear", 1),
            recurring=bool(data.get("recurring", False)),
            confidence=_get(data, "confidence", 1.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "amount": self.amount,
            "startYear": self.start_year,
            "recurring": self.recurring,
            "confidence": self.confidence,
        }


# ── Assumptions ──────────────────────────────────────────────────────────────
@dataclass
class FundingGrowth:
    """Annual growth rates (%) of the non-council-tax funding lines."""
    business_rates: float = 0.8
    revenue_support_grant: float = -1.8
    other_grants: float = 0.4

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FundingGrowth":
        base = cls()
        return cls(
            business_rates=_get(data, "businessRates", base.business_rates),
            revenue_support_grant=_get(data, "revenueSupportGrant", base.revenue_support_grant),
            other_grants=_get(data, "otherGrants", base.other_grants),
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "businessRates": self.business_rates,
            "revenueSupportGrant": self.revenue_support_grant,
            "otherGrants": self.other_grants,
        }


@dataclass
class ServiceAdjustment:
    """Service-specific uplift (%) applied on top of its budget share."""
    inflation_adj: float = 0.0
    demand_adj: float = 0.0

    @property
    def factor(self) -> float:
        return 1 + (self.inflation_adj + self.demand_adj) / 100

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ServiceAdjustment":
        return cls(
            inflation_adj=_get(data, "inflationAdj", 0.0),
            demand_adj=_get(data, "demandAdj", 0.0),
        )

    def to_dict(self) -> Dict[str, float]:
        return {"inflationAdj": self.inflation_adj, "demandAdj": self.demand_adj}


def _default_service_splits() -> Dict[str, float]:
    return {"Adults": 0.45, "Children": 0.30, "Housing": 0.25}


def _default_service_adjustments() -> Dict[str, ServiceAdjustment]:
    return {
        "Adults": ServiceAdjustment(0.8, 1.5),
        "Children": ServiceAdjustment(0.4, 1.0),
        "Housing": ServiceAdjustment(0.2, 0.6),
    }


@dataclass
class Assumptions:
    """Council-wide starting position for the projection (£)."""
    base_year: int = 2026
    previous_year_base: float = 200_000_000.0
    planned_savings: float = 10_000_000.0
    demand_pressures: float = 14_000_000.0
    current_reserves: float = 45_000_000.0

    # Council tax
    tax_base: float = 120_000.0              # Band D equivalent properties
    average_band_d: float = 1_850.0

    # Other funding lines
    business_rates: float = 62_000_000.0
    revenue_support_grant: float = 18_000_000.0
    other_grants: float = 26_000_000.0
    funding_growth: FundingGrowth = field(default_factory=FundingGrowth)

    # Service allocation (shares need not sum to 1)
    service_splits: Dict[str, float] = field(default_factory=_default_service_splits)
    service_adjustments: Dict[str, ServiceAdjustment] = field(
        default_factory=_default_service_adjustments
    )

    baseline: YearInputs = field(default_factory=YearInputs)

    @property
    def council_tax_yield(self) -> float:
        """Council tax raised before any increase."""
        return self.tax_base * self.average_band_d

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Assumptions":
        base = cls()
        splits = data.get("serviceSplits")
        adjustments = data.get("serviceAssumptions")
        return cls(
            base_year=int(_get(data, "baseYear", base.base_year)),
            previous_year_base=_get(data, "previousYearBase", base.previous_year_base),
            planned_savings=_get(data, "plannedSavings", base.planned_savings),
            demand_pressures=_get(data, "demandPressures", base.demand_pressures),
            current_reserves=_get(data, "currentReserves", base.current_reserves),
            tax_base=_get(data, "taxBase", base.tax_base),
            average_band_d=_get(data, "averageBandD", base.average_band_d),
            business_rates=_get(data, "businessRates", base.business_rates),
            revenue_support_grant=_get(data, "revenueSupportGrant", base.revenue_support_grant),
            other_grants=_get(data, "otherGrants", base.other_grants),
            funding_growth=FundingGrowth.from_dict(data.get("fundingGrowth") or {}),
            service_splits=dict(splits) if splits is not None else base.service_splits,
            service_adjustments=(
                {k: ServiceAdjustment.from_dict(v) for k, v in adjustments.items()}
                if adjustments is not None else base.service_adjustments
            ),
            baseline=YearInputs.from_dict(data.get("baseline") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "baseYear": self.base_year,
            "previousYearBase": self.previous_year_base,
            "plannedSavings": self.planned_savings,
            "demandPressures": self.demand_pressures,
            "currentReserves": self.current_reserves,
            "taxBase": self.tax_base,
            "averageBandD": self.average_band_d,
            "businessRates": self.business_rates,
            "revenueSupportGrant": self.revenue_support_grant,
            "otherGrants": self.other_grants,
            "fundingGrowth": self.funding_growth.to_dict(),
            "serviceSplits": dict(self.service_splits),
            "serviceAssumptions": {k: v.to_dict() for k, v in self.service_adjustments.items()},
            "baseline": self.baseline.to_dict(),
        }


# ── Stress parameters ────────────────────────────────────────────────────────
@dataclass
class StressParams:
    """Seed, path count and driver volatilities (percentage points)."""
    seed: int = 12345
    simulations: int = 200
    inflation_sigma: float = 0.8
    demand_sigma: float = 1.2
    pay_sigma: float = 0.7
    ct_sigma: float = 0.6

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StressParams":
        base = cls()
        return cls(
            seed=int(_get(data, "seed", base.seed)),
            simulations=int(_get(data, "simulations", base.simulations)),
            inflation_sigma=_get(data, "inflationSigma", base.inflation_sigma),
            demand_sigma=_get(data, "demandSigma", base.demand_sigma),
            pay_sigma=_get(data, "paySigma", base.pay_sigma),
            ct_sigma=_get(data, "ctSigma", base.ct_sigma),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seed": self.seed,
            "simulations": self.simulations,
            "inflationSigma": self.inflation_sigma,
            "demandSigma": self.demand_sigma,
            "paySigma": self.pay_sigma,
            "ctSigma": self.ct_sigma,
        }


# ── Defaults & presets ───────────────────────────────────────────────────────
def default_overrides() -> List[YearOverride]:
    return [YearOverride() for _ in range(PROJECTION_HORIZON_YEARS)]


def default_savings_pipeline() -> List[SavingsItem]:
    return [
        SavingsItem("Digital channel shift",   2_000_000.0, 1, True,  0.70),
        SavingsItem("Commissioning re-tender", 3_500_000.0, 2, True,  0.55),
        SavingsItem("Asset rationalisation",   4_000_000.0, 1, False, 0.50),
    ]


SCENARIO_PRESETS: Dict[str, YearInputs] = {
    "Base":        YearInputs(3.0, 4.0, 3.0, 4.5),
    "Optimistic":  YearInputs(5.0, 2.5, 2.0, 2.5),
    "Pessimistic": YearInputs(1.0, 6.5, 5.5, 7.0),
}


@dataclass
class Scenario:
    """Everything one projection run needs, as supplied by the caller."""
    name: str = "Base"
    inputs: YearInputs = field(default_factory=YearInputs)
    overrides: List[YearOverride] = field(default_factory=default_overrides)
    funding_shock: FundingShock = field(default_factory=FundingShock)
    debt: DebtBlock = field(default_factory=DebtBlock)
    assumptions: Assumptions = field(default_factory=Assumptions)
    pipeline: List[SavingsItem] = field(default_factory=default_savings_pipeline)
    stress: StressParams = field(default_factory=StressParams)
    governance_notes: List[str] = field(
        default_factory=lambda: [""] * PROJECTION_HORIZON_YEARS
    )

    @classmethod
    def from_preset(cls, name: str) -> "Scenario":
        """Build a default scenario using one of ``SCENARIO_PRESETS``."""
        preset = SCENARIO_PRESETS[name]
        return cls(name=name, inputs=YearInputs(**vars(preset)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scenario": self.name,
            "inputs": self.inputs.to_dict(),
            "overrides": [o.to_dict() for o in self.overrides],
            "fundingShock": self.funding_shock.to_dict(),
            "debt": self.debt.to_dict(),
            "assumptions": self.assumptions.to_dict(),
            "pipeline": [item.to_dict() for item in self.pipeline],
            "stress": self.stress.to_dict(),
            "governanceNotes": list(self.governance_notes),
        }
