"""Analytics sub-package — views and sensitivities derived from a projection."""

from mtfs_simulator.analytics.views import (
    RagStatus,
    ReserveTrigger,
    ScenarioComparison,
    ServiceYear,
    WaterfallStep,
    compare_projections,
    compute_service_breakdown,
    compute_waterfall,
    find_reserve_exhaustion,
    rag_status,
    reserve_trigger,
    year_one_rag,
)
from mtfs_simulator.analytics.sensitivity import (
    DRIVERS,
    SensitivityEntry,
    compute_sensitivity,
)

__all__ = [
    "RagStatus",
    "ReserveTrigger",
    "ScenarioComparison",
    "ServiceYear",
    "WaterfallStep",
    "compare_projections",
    "compute_service_breakdown",
    "compute_waterfall",
    "find_reserve_exhaustion",
    "rag_status",
    "reserve_trigger",
    "year_one_rag",
    "DRIVERS",
    "SensitivityEntry",
    "compute_sensitivity",
]
