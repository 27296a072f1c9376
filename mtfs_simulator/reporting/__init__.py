"""
Report Serializer
=================
Exports projection rows as CSV text, as a multi-sheet .xlsx workbook and
as a pandas DataFrame. When report metadata is supplied the workbook also
documents the scenario, assumptions, savings pipeline, overrides,
governance notes and stress settings behind the figures.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence

import pandas as pd

from mtfs_simulator.config import (
    Assumptions,
    DebtBlock,
    FundingShock,
    SavingsItem,
    Scenario,
    StressParams,
    YearInputs,
    YearOverride,
)
from mtfs_simulator.engine.projection import ProjectionRow
from mtfs_simulator.reporting.workbook import (
    Sheet,
    column_letter,
    escape_xml,
    package_parts,
    write_workbook,
)
from mtfs_simulator.utils import format_number, is_numeric


PROJECTION_HEADERS = [
    "Year",
    "Net Budget Requirement",
    "Total Funding",
    "Annual Gap",
    "Reserves End",
]

AUDIT_HEADERS = ["Timestamp", "Scenario", "Summary"]


def _row_values(row: ProjectionRow) -> List[Any]:
    return [
        row.year,
        row.net_budget_requirement,
        row.total_funding,
        row.annual_gap,
        row.reserves_end,
    ]


def _text(value: Any) -> str:
    if value is None:
        return ""
    return format_number(value) if is_numeric(value) else str(value)


# ═══════════════════════════════════════════════════════════════════════════════
#  CSV
# ═══════════════════════════════════════════════════════════════════════════════

def build_csv(rows: Sequence[ProjectionRow]) -> str:
    """Header plus one comma-joined line per year; fields are not quoted."""
    lines = [",".join(PROJECTION_HEADERS)]
    lines.extend(",".join(_text(v) for v in _row_values(row)) for row in rows)
    return "\n".join(lines)


@dataclass
class AuditEntry:
    timestamp: str
    scenario: str
    summary: str


def audit_summary(inputs: YearInputs) -> str:
    """One-line description of a driver set for the audit trail."""
    return (
        f"CT {_text(inputs.council_tax_increase)}% | "
        f"Pay {_text(inputs.pay_award)}% | "
        f"Infl {_text(inputs.general_inflation)}% | "
        f"Demand {_text(inputs.social_care_growth)}%"
    )


def build_audit_csv(entries: Sequence[AuditEntry]) -> str:
    lines = [",".join(AUDIT_HEADERS)]
    lines.extend(",".join([e.timestamp, e.scenario, e.summary]) for e in entries)
    return "\n".join(lines)


def projection_frame(rows: Sequence[ProjectionRow]) -> pd.DataFrame:
    """All row fields as a DataFrame indexed by year label."""
    return pd.DataFrame([row.to_dict() for row in rows]).set_index("year")


# ═══════════════════════════════════════════════════════════════════════════════
#  Workbook
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class ReportMetadata:
    """Context written to the workbook's supporting sheets."""
    scenario: Optional[str] = None
    timestamp: Optional[str] = None
    inputs: Optional[YearInputs] = None
    assumptions: Optional[Assumptions] = None
    funding_shock: Optional[FundingShock] = None
    debt: Optional[DebtBlock] = None
    overrides: List[YearOverride] = field(default_factory=list)
    pipeline: List[SavingsItem] = field(default_factory=list)
    stress: Optional[StressParams] = None
    governance_notes: List[str] = field(default_factory=list)

    @classmethod
    def from_scenario(cls, scenario: Scenario, timestamp: Optional[str] = None) -> "ReportMetadata":
        if timestamp is None:
            timestamp = datetime.now(timezone.utc).isoformat()
        return cls(
            scenario=scenario.name,
            timestamp=timestamp,
            inputs=scenario.inputs,
            assumptions=scenario.assumptions,
            funding_shock=scenario.funding_shock,
            debt=scenario.debt,
            overrides=list(scenario.overrides),
            pipeline=list(scenario.pipeline),
            stress=scenario.stress,
            governance_notes=list(scenario.governance_notes),
        )


def _attr(obj: Any, name: str) -> Any:
    """Attribute of an optional object; None reads as an empty cell."""
    if obj is None:
        return ""
    value = getattr(obj, name, None)
    return "" if value is None else value


def _yes_no(flag: Any) -> str:
    return "Yes" if flag else "No"


def projection_rows(rows: Sequence[ProjectionRow]) -> List[List[Any]]:
    return [list(PROJECTION_HEADERS)] + [_row_values(row) for row in rows]


def metadata_sheets(meta: ReportMetadata) -> List[Sheet]:
    """Fixed label/value layouts of the supporting sheets."""
    inputs, a, shock, debt = meta.inputs, meta.assumptions, meta.funding_shock, meta.debt

    scenario = Sheet("Scenario", [
        ["Scenario Summary"],
        ["Scenario", meta.scenario or ""],
        ["Generated", meta.timestamp or ""],
        ["Council Tax %", _attr(inputs, "council_tax_increase")],
        ["Pay Award %", _attr(inputs, "pay_award")],
        ["Inflation %", _attr(inputs, "general_inflation")],
        ["Demand %", _attr(inputs, "social_care_growth")],
    ])

    assumptions = Sheet("Assumptions", [
        ["Core Assumptions"],
        ["Previous Year Base", _attr(a, "previous_year_base")],
        ["Demand Pressures", _attr(a, "demand_pressures")],
        ["Planned Savings", _attr(a, "planned_savings")],
        ["Current Reserves", _attr(a, "current_reserves")],
        ["Tax Base", _attr(a, "tax_base")],
        ["Average Band D", _attr(a, "average_band_d")],
        ["Business Rates", _attr(a, "business_rates")],
        ["Revenue Support Grant", _attr(a, "revenue_support_grant")],
        ["Other Grants", _attr(a, "other_grants")],
        [],
        ["Funding Shock"],
        ["Enabled", _yes_no(shock is not None and shock.enabled)],
        ["Year Index", _attr(shock, "year_index")],
        ["Amount", _attr(shock, "amount")],
        [],
        ["Debt & Capital Financing"],
        ["Debt Principal", _attr(debt, "debt_principal")],
        ["Debt Interest Rate", _attr(debt, "debt_interest_rate")],
        ["Annual Capital Financing", _attr(debt, "annual_capital_financing")],
    ])

    savings = Sheet("Savings", [
        ["Savings Pipeline"],
        ["Name", "Amount", "Start Year", "Recurring", "Confidence"],
    ] + [
        [
            _attr(item, "name"),
            _attr(item, "amount"),
            _attr(item, "start_year"),
            _yes_no(item.recurring),
            _attr(item, "confidence"),
        ]
        for item in meta.pipeline
    ])

    overrides = Sheet("Overrides", [
        ["Per-Year Overrides"],
        ["Year", "Enabled", "CT %", "Pay %", "Inflation %", "Demand %"],
    ] + [
        [
            f"Y{idx + 1}",
            _yes_no(item.enabled),
            _attr(item, "council_tax_increase"),
            _attr(item, "pay_award"),
            _attr(item, "general_inflation"),
            _attr(item, "social_care_growth"),
        ]
        for idx, item in enumerate(meta.overrides)
    ])

    governance = Sheet("Governance", [["Governance Notes"]] + [
        [f"Y{idx + 1}", note or ""] for idx, note in enumerate(meta.governance_notes)
    ])

    stress = Sheet("Stress", [
        ["Stress Test"],
        ["Simulations", _attr(meta.stress, "simulations")],
        ["Seed", _attr(meta.stress, "seed")],
    ])

    return [scenario, assumptions, savings, overrides, governance, stress]


def build_sheets(rows: Sequence[ProjectionRow], meta: Optional[ReportMetadata] = None) -> List[Sheet]:
    sheets = [Sheet("Projections", projection_rows(rows))]
    if meta is not None:
        sheets.extend(metadata_sheets(meta))
    return sheets


def build_xlsx_binary(rows: Sequence[ProjectionRow], meta: Optional[ReportMetadata] = None) -> bytes:
    """Encode the projection (and optional metadata) as .xlsx bytes."""
    return write_workbook(build_sheets(rows, meta))


__all__ = [
    "AUDIT_HEADERS",
    "AuditEntry",
    "PROJECTION_HEADERS",
    "ReportMetadata",
    "Sheet",
    "audit_summary",
    "build_audit_csv",
    "build_csv",
    "build_sheets",
    "build_xlsx_binary",
    "column_letter",
    "escape_xml",
    "metadata_sheets",
    "package_parts",
    "projection_frame",
    "projection_rows",
]
