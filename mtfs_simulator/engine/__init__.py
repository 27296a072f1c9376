"""Engine sub-package — MTFS projection recurrence."""

from mtfs_simulator.engine.projection import (
    ProjectionRow,
    MTFSProjector,
    compute_projections,
    pipeline_savings,
    resolve_inputs_for_year,
    year_one_gap,
)

__all__ = [
    "ProjectionRow",
    "MTFSProjector",
    "compute_projections",
    "pipeline_savings",
    "resolve_inputs_for_year",
    "year_one_gap",
]
