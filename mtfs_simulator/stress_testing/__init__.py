"""
Monte Carlo Stress Testing Engine
==================================
Implements:
  - Seeded 32-bit pseudo-random generator with an explicit state
  - Box–Muller normal variates (cosine branch only)
  - Repeated projection runs under perturbed drivers
  - Nearest-rank P10 / P50 / P90 of the year-1 gap and year-5 reserves

Reproducibility: the same seed always yields the same draw sequence.
Each path consumes exactly 8 uniform draws, in the fixed order council
tax, pay, inflation, demand. Paths must be evaluated in order from a
single generator; do not share one generator across threads.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence

import numpy as np

from mtfs_simulator.config import (
    Assumptions,
    DebtBlock,
    FundingShock,
    NORMAL_EPSILON,
    PROJECTION_HORIZON_YEARS,
    STRESS_PERCENTILES,
    SavingsItem,
    Scenario,
    StressParams,
    YearInputs,
    YearOverride,
)
from mtfs_simulator.engine.projection import compute_projections

logger = logging.getLogger(__name__)

_MASK_32 = 0xFFFFFFFF


# ═══════════════════════════════════════════════════════════════════════════════
#  Seeded generator
# ═══════════════════════════════════════════════════════════════════════════════

class SeededGenerator:
    """
    32-bit counter-based generator (Mulberry32 mixing).

    The state advances by a fixed odd increment per draw and is passed
    through xor-shift / multiply mixing. ``next()`` returns a float in
    [0, 1) with 32 bits of resolution.
    """

    INCREMENT = 0x6D2B79F5

    def __init__(self, seed: int):
        self.seed = int(seed)
        self.state = self.seed & _MASK_32

    @staticmethod
    def _imul(a: int, b: int) -> int:
        return (a * b) & _MASK_32

    def next(self) -> float:
        self.state = (self.state + self.INCREMENT) & _MASK_32
        t = self.state
        r = self._imul(t ^ (t >> 15), 1 | t)
        r ^= (r + self._imul(r ^ (r >> 7), 61 | r)) & _MASK_32
        return ((r ^ (r >> 14)) & _MASK_32) / 4294967296

    def __call__(self) -> float:
        return self.next()


def normal(generator: SeededGenerator) -> float:
    """Standard normal variate from two uniform draws (sine branch discarded)."""
    u = generator.next() or NORMAL_EPSILON
    v = generator.next() or NORMAL_EPSILON
    return math.sqrt(-2 * math.log(u)) * math.cos(2 * math.pi * v)


def nearest_rank(sorted_values: np.ndarray, p: float) -> Optional[float]:
    """Value at index floor(p·(n−1)) of an ascending array, no interpolation."""
    n = len(sorted_values)
    if n == 0:
        return None
    return float(sorted_values[int(math.floor(p * (n - 1)))])


# ═══════════════════════════════════════════════════════════════════════════════
#  Results
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class StressTestResult:
    """Percentile summary of the stress test (£)."""
    seed: int
    n_paths: int

    p10_gap: Optional[float]
    p50_gap: Optional[float]
    p90_gap: Optional[float]
    p10_reserves: Optional[float]
    p50_reserves: Optional[float]
    p90_reserves: Optional[float]

    gap_mean: Optional[float] = None
    reserves_mean: Optional[float] = None
    reserves_exhaustion_probability: Optional[float] = None   # Share of paths with year-5 reserves ≤ 0

    # Per-path values in simulation order
    all_year1_gaps: List[float] = field(default_factory=list)
    all_year5_reserves: List[float] = field(default_factory=list)

    def summary(self) -> Dict[str, Optional[float]]:
        return {
            "p10Gap": self.p10_gap,
            "p50Gap": self.p50_gap,
            "p90Gap": self.p90_gap,
            "p10Reserves": self.p10_reserves,
            "p50Reserves": self.p50_reserves,
            "p90Reserves": self.p90_reserves,
        }


# ═══════════════════════════════════════════════════════════════════════════════
#  Monte Carlo Stress Test Engine
# ═══════════════════════════════════════════════════════════════════════════════

def perturb_inputs(inputs: YearInputs, params: StressParams, generator: SeededGenerator) -> YearInputs:
    """Draw one perturbed driver set; draw order is part of the seed contract."""
    ct = inputs.council_tax_increase + normal(generator) * params.ct_sigma
    pay = inputs.pay_award + normal(generator) * params.pay_sigma
    inflation = inputs.general_inflation + normal(generator) * params.inflation_sigma
    demand = inputs.social_care_growth + normal(generator) * params.demand_sigma
    return replace(
        inputs,
        council_tax_increase=ct,
        pay_award=pay,
        general_inflation=inflation,
        social_care_growth=demand,
    )


def compute_stress_test(
    inputs: YearInputs,
    overrides: Optional[Sequence[YearOverride]],
    funding_shock: Optional[FundingShock],
    debt: Optional[DebtBlock],
    assumptions: Optional[Assumptions],
    pipeline: Optional[Sequence[SavingsItem]],
    stress: StressParams,
) -> StressTestResult:
    """
    Run ``stress.simulations`` perturbed projections and summarise them.

    For each path:
      1. Perturb the four drivers with independent normal shocks
      2. Run the projection engine
      3. Record the year-1 gap and year-5 closing reserves
    """
    generator = SeededGenerator(stress.seed)
    n_paths = max(int(stress.simulations), 0)
    last_year = PROJECTION_HORIZON_YEARS - 1

    year1_gaps = np.zeros(n_paths)
    year5_reserves = np.zeros(n_paths)

    for path in range(n_paths):
        tweak = perturb_inputs(inputs, stress, generator)
        sim = compute_projections(tweak, overrides, funding_shock, debt, assumptions, pipeline)
        year1_gaps[path] = sim[0].annual_gap if sim else 0.0
        year5_reserves[path] = sim[last_year].reserves_end if len(sim) > last_year else 0.0

    sorted_gap = np.sort(year1_gaps)
    sorted_res = np.sort(year5_reserves)
    p10, p50, p90 = STRESS_PERCENTILES

    logger.debug("Stress test: %d paths, seed %d", n_paths, stress.seed)

    return StressTestResult(
        seed=stress.seed,
        n_paths=n_paths,
        p10_gap=nearest_rank(sorted_gap, p10),
        p50_gap=nearest_rank(sorted_gap, p50),
        p90_gap=nearest_rank(sorted_gap, p90),
        p10_reserves=nearest_rank(sorted_res, p10),
        p50_reserves=nearest_rank(sorted_res, p50),
        p90_reserves=nearest_rank(sorted_res, p90),
        gap_mean=float(np.mean(year1_gaps)) if n_paths else None,
        reserves_mean=float(np.mean(year5_reserves)) if n_paths else None,
        reserves_exhaustion_probability=(
            float(np.mean(year5_reserves <= 0)) if n_paths else None
        ),
        all_year1_gaps=year1_gaps.tolist(),
        all_year5_reserves=year5_reserves.tolist(),
    )


class MonteCarloStressEngine:
    """Stress test bound to a Scenario."""

    def __init__(self, scenario: Optional[Scenario] = None):
        self.scenario = scenario or Scenario()

    def run(self, params: Optional[StressParams] = None) -> StressTestResult:
        s = self.scenario
        return compute_stress_test(
            s.inputs,
            s.overrides,
            s.funding_shock,
            s.debt,
            s.assumptions,
            s.pipeline,
            params or s.stress,
        )

    def run_seeds(self, seeds: Sequence[int]) -> List[StressTestResult]:
        """Repeat the stress test for several seeds, all else fixed."""
        base = self.scenario.stress
        return [self.run(replace(base, seed=seed)) for seed in seeds]


def run_stress_test(scenario: Optional[Scenario] = None) -> StressTestResult:
    """Run the stress test with the scenario's own parameters."""
    return MonteCarloStressEngine(scenario).run()
