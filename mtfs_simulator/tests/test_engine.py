"""
Test Suite for the MTFS Budget Gap Simulator.
Tests the projection engine, derived views, sensitivities, solvers,
the stress test and configuration import.
"""

import json
import math
import os
import sys
from dataclasses import replace

import numpy as np
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..")))

from mtfs_simulator.config import (
    Assumptions,
    BISECTION_RESOLUTION,
    DebtBlock,
    FundingShock,
    NORMAL_EPSILON,
    SCENARIO_PRESETS,
    SavingsItem,
    Scenario,
    StressParams,
    YearOverride,
    default_overrides,
    default_savings_pipeline,
)
from mtfs_simulator.engine.projection import (
    MTFSProjector,
    compute_projections,
    pipeline_savings,
    resolve_inputs_for_year,
)
from mtfs_simulator.analytics import (
    compare_projections,
    compute_sensitivity,
    compute_service_breakdown,
    compute_waterfall,
    find_reserve_exhaustion,
    rag_status,
    reserve_trigger,
)
from mtfs_simulator.optimization import (
    run_break_even,
    solve_additional_savings,
    solve_council_tax_increase,
    solve_council_tax_increase_exact,
)
from mtfs_simulator.stress_testing import (
    MonteCarloStressEngine,
    SeededGenerator,
    compute_stress_test,
    nearest_rank,
    normal,
    perturb_inputs,
)
from mtfs_simulator.data import (
    ConfigError,
    dump_config,
    load_config,
    load_config_file,
    validate_config,
)
from mtfs_simulator.__main__ import main


def project(scenario, inputs=None):
    return compute_projections(
        inputs or scenario.inputs,
        scenario.overrides,
        scenario.funding_shock,
        scenario.debt,
        scenario.assumptions,
        scenario.pipeline,
    )


@pytest.fixture
def scenario():
    return Scenario()


@pytest.fixture
def rows(scenario):
    return project(scenario)


@pytest.fixture
def tight_scenario():
    """Smaller tax base: year-1 gap is positive at 0% and negative at 5%."""
    return Scenario(assumptions=Assumptions(tax_base=63_000))


# ═══════════════════════════════════════════════════════════════════════════════
#  Projection Engine
# ═══════════════════════════════════════════════════════════════════════════════

class TestProjection:
    def test_five_years_with_labels(self, rows):
        assert len(rows) == 5
        assert rows[0].year == "Y1 (2027)"
        assert rows[-1].year == "Y5 (2031)"
        assert [r.year_index for r in rows] == [0, 1, 2, 3, 4]

    def test_year1_requirement_golden_value(self, rows):
        # 200m + 14m pay/price + 14m demand + 11.54m debt − (10m + 1.4m + 2m) savings
        assert rows[0].net_budget_requirement == pytest.approx(226_140_000.0)

    def test_year1_requirement_matches_formula(self, scenario, rows):
        a, d = scenario.assumptions, scenario.debt
        b = scenario.inputs
        pipeline = default_savings_pipeline()
        pay_price = a.previous_year_base * ((b.pay_award + b.general_inflation) / 100)
        debt_cost = d.debt_principal * (d.debt_interest_rate / 100) + d.annual_capital_financing
        savings = (a.planned_savings
                   + pipeline[0].amount * pipeline[0].confidence
                   + pipeline[2].amount * pipeline[2].confidence)
        expected = a.previous_year_base + pay_price + a.demand_pressures + debt_cost - savings
        assert rows[0].net_budget_requirement == pytest.approx(expected)

    def test_year1_funding(self, rows):
        r = rows[0]
        assert r.council_tax_revenue == pytest.approx(120_000 * 1_850 * 1.03)
        assert r.business_rates == pytest.approx(62_000_000)
        assert r.revenue_support_grant == pytest.approx(18_000_000)
        assert r.other_grants == pytest.approx(26_000_000)
        assert r.total_funding == pytest.approx(334_660_000)
        assert r.annual_gap == pytest.approx(226_140_000 - 334_660_000)

    def test_exponents(self, rows):
        # Demand and grants compound from year 0, council tax from year 1
        assert rows[1].demand_pressures == pytest.approx(14_000_000 * 1.045)
        assert rows[2].demand_pressures == pytest.approx(14_000_000 * 1.045 ** 2)
        assert rows[2].council_tax_revenue == pytest.approx(222_000_000 * 1.03 ** 3)
        assert rows[2].revenue_support_grant == pytest.approx(18_000_000 * 0.982 ** 2)

    def test_requirement_rolls_forward(self, scenario, rows):
        b = scenario.inputs
        for prev, row in zip(rows, rows[1:]):
            expected = prev.net_budget_requirement * (b.pay_award + b.general_inflation) / 100
            assert row.pay_price_inflation == pytest.approx(expected)

    def test_reserves_drawn_by_cumulative_gap(self, scenario, rows):
        cumulative = sum(r.annual_gap for r in rows)
        expected = scenario.assumptions.current_reserves - cumulative
        assert rows[4].reserves_end == pytest.approx(expected)

    def test_debt_cost_constant(self, rows):
        for r in rows:
            assert r.debt_cost == pytest.approx(120_000_000 * 0.042 + 6_500_000)

    def test_missing_debt_and_pipeline_contribute_zero(self, scenario):
        rows = compute_projections(scenario.inputs, None, None, None, scenario.assumptions, [])
        assert rows[0].debt_cost == 0
        assert rows[0].pipeline_savings == 0
        assert rows[0].planned_savings == scenario.assumptions.planned_savings

    def test_caller_structures_not_mutated(self, scenario):
        before = dump_config(scenario)
        project(scenario)
        assert dump_config(scenario) == before


class TestPipelineAndOverrides:
    def test_pipeline_by_year(self):
        pipeline = default_savings_pipeline()
        assert pipeline_savings(pipeline, 0) == pytest.approx(1_400_000 + 2_000_000)
        assert pipeline_savings(pipeline, 1) == pytest.approx(1_400_000 + 1_925_000)
        assert pipeline_savings(pipeline, 4) == pytest.approx(1_400_000 + 1_925_000)

    def test_future_item_contributes_nothing(self):
        item = SavingsItem("Later", 1_000_000, start_year=3, recurring=True, confidence=1.0)
        assert pipeline_savings([item], 1) == 0
        assert pipeline_savings([item], 2) == pytest.approx(1_000_000)

    def test_one_off_item_only_in_start_year(self):
        item = SavingsItem("One-off", 500_000, start_year=2, recurring=False, confidence=0.8)
        assert [pipeline_savings([item], i) for i in range(5)] == pytest.approx(
            [0, 400_000, 0, 0, 0]
        )

    def test_null_fields_in_cost_blocks(self):
        assert SavingsItem("Unrated", 250_000, 1, confidence=None).weighted_amount == 250_000
        assert DebtBlock(None, 5.0, 1_000).annual_cost == 1_000
        assert DebtBlock().annual_cost == pytest.approx(120_000_000 * 0.042 + 6_500_000)

    def test_fractional_start_year_kept(self):
        item = load_config({"pipeline": [
            {"name": "Half", "amount": 1_000, "startYear": 1.5, "recurring": False},
        ]}).pipeline[0]
        assert item.start_year == 1.5
        assert [pipeline_savings([item], i) for i in range(5)] == [0, 0, 0, 0, 0]

    def test_disabled_override_ignored(self, scenario):
        overrides = default_overrides()
        overrides[0] = YearOverride(enabled=False, pay_award=10.0)
        assert resolve_inputs_for_year(scenario.inputs, overrides, 0) == scenario.inputs

    def test_enabled_override_falls_back_per_field(self, scenario):
        overrides = default_overrides()
        overrides[1] = YearOverride(enabled=True, pay_award=10.0)
        resolved = resolve_inputs_for_year(scenario.inputs, overrides, 1)
        assert resolved.pay_award == 10.0
        assert resolved.general_inflation == scenario.inputs.general_inflation

    def test_override_applies_to_one_year(self, scenario):
        overrides = default_overrides()
        overrides[1] = YearOverride(enabled=True, pay_award=10.0)
        rows = project(replace(scenario, overrides=overrides))
        base = project(scenario)
        assert rows[0].net_budget_requirement == pytest.approx(base[0].net_budget_requirement)
        assert rows[1].pay_price_inflation == pytest.approx(
            rows[0].net_budget_requirement * 13.0 / 100
        )
        assert rows[2].pay_price_inflation == pytest.approx(
            rows[1].net_budget_requirement * 7.0 / 100
        )


class TestFundingShock:
    def test_year1_shock_changes_only_year1_funding(self, scenario, rows):
        shocked = project(replace(scenario, funding_shock=FundingShock(True, 0, -10_000_000)))
        assert shocked[0].total_funding - rows[0].total_funding == pytest.approx(-10_000_000)
        assert shocked[0].net_budget_requirement == pytest.approx(rows[0].net_budget_requirement)
        for i in range(1, 5):
            assert shocked[i].total_funding == pytest.approx(rows[i].total_funding)

    def test_shock_propagates_from_its_year(self, scenario, rows):
        shocked = project(replace(scenario, funding_shock=FundingShock(True, 2, -10_000_000)))
        for i in range(2):
            assert shocked[i].total_funding == rows[i].total_funding
            assert shocked[i].reserves_end == rows[i].reserves_end
        assert shocked[2].shock_amount == -10_000_000
        assert shocked[2].annual_gap - rows[2].annual_gap == pytest.approx(10_000_000)
        for i in range(2, 5):
            assert rows[i].reserves_end - shocked[i].reserves_end == pytest.approx(10_000_000)

    def test_disabled_shock_ignored(self, scenario, rows):
        shocked = project(replace(scenario, funding_shock=FundingShock(False, 0, -10_000_000)))
        assert shocked[0].total_funding == rows[0].total_funding

    def test_fractional_year_index_never_matches(self, rows):
        shocked = load_config({"fundingShock": {"enabled": True, "yearIndex": 1.5, "amount": -1e7}})
        assert shocked.funding_shock.year_index == 1.5
        assert [r.total_funding for r in project(shocked)] == [r.total_funding for r in rows]


class TestProjector:
    def test_summary(self, scenario):
        projector = MTFSProjector(scenario)
        summary = projector.get_projection_summary()
        assert len(summary) == 5
        assert summary[0]["Year"] == "Y1 (2027)"
        assert summary[0]["Net Budget Requirement (£)"] == 226_140_000

    def test_baseline_ignores_shock_and_overrides(self, scenario):
        overrides = default_overrides()
        overrides[0] = YearOverride(enabled=True, council_tax_increase=0.0)
        s = replace(scenario, overrides=overrides, funding_shock=FundingShock(True, 0, -1e6))
        assert MTFSProjector(s).project_baseline() == project(scenario)


# ═══════════════════════════════════════════════════════════════════════════════
#  Derived Views
# ═══════════════════════════════════════════════════════════════════════════════

class TestViews:
    def test_waterfall_labels_and_total(self, scenario, rows):
        steps = compute_waterfall(rows, scenario.assumptions)
        assert [s.label for s in steps] == [
            "Base", "Pay+Infl", "Demand", "Debt", "Savings", "Funding", "Gap",
        ]
        assert sum(s.value for s in steps[:-1]) == pytest.approx(steps[-1].value)

    def test_waterfall_empty(self):
        assert compute_waterfall([]) == []

    def test_service_breakdown(self, scenario, rows):
        breakdown = compute_service_breakdown(rows, scenario.assumptions)
        assert list(breakdown) == ["Adults", "Children", "Housing"]
        adults = breakdown["Adults"]
        assert len(adults) == 5
        assert adults[0].requirement == pytest.approx(rows[0].net_budget_requirement * 0.45 * 1.023)
        assert adults[3].gap_share == pytest.approx(rows[3].annual_gap * 0.45 * 1.023)

    def test_service_without_adjustment(self, rows):
        a = Assumptions(service_splits={"Waste": 0.6}, service_adjustments={})
        waste = compute_service_breakdown(rows, a)["Waste"]
        assert waste[0].requirement == pytest.approx(rows[0].net_budget_requirement * 0.6)

    def test_no_exhaustion_by_default(self, rows):
        assert find_reserve_exhaustion(rows) is None

    def test_exhaustion_found(self, tight_scenario):
        s = replace(
            tight_scenario,
            inputs=replace(tight_scenario.inputs, council_tax_increase=0.0),
            assumptions=replace(tight_scenario.assumptions, current_reserves=0.0),
        )
        rows = project(s)
        assert find_reserve_exhaustion(rows) is rows[0]

    @pytest.mark.parametrize("reserves, label, message", [
        (0, "Red", "Reserves exhausted"),
        (10, "Green", "Healthy buffer"),
        (5, "Amber", "Tight headroom"),
        (1, "Amber", "Tight headroom"),
        (0.5, "Red", "Critical"),
    ])
    def test_rag_status(self, reserves, label, message):
        status = rag_status(reserves, 100)
        assert (status.label, status.message) == (label, message)

    def test_reserve_trigger(self, rows):
        trigger = reserve_trigger(rows)
        assert trigger.trigger_level == pytest.approx(rows[0].net_budget_requirement * 0.05)
        assert not trigger.breached

    def test_compare_projections(self, scenario, rows):
        shocked = project(replace(scenario, funding_shock=FundingShock(True, 0, -10_000_000)))
        comparison = compare_projections(shocked, rows)
        assert comparison.delta_year1_gap == pytest.approx(10_000_000)
        assert comparison.delta_year5_reserves == pytest.approx(-10_000_000)
        assert len(comparison.series) == 5


# ═══════════════════════════════════════════════════════════════════════════════
#  Sensitivity
# ═══════════════════════════════════════════════════════════════════════════════

class TestSensitivity:
    def test_drivers_in_order(self, scenario):
        entries = compute_sensitivity(
            scenario.inputs, scenario.overrides, scenario.funding_shock,
            scenario.debt, scenario.assumptions, scenario.pipeline,
        )
        assert [e.driver for e in entries] == [
            "Council Tax %", "Pay Award %", "General Inflation %", "Demand Growth %",
        ]

    def test_year1_values(self, scenario):
        ct, pay, infl, demand = compute_sensitivity(
            scenario.inputs, scenario.overrides, scenario.funding_shock,
            scenario.debt, scenario.assumptions, scenario.pipeline,
        )
        # 1pp of council tax on a 222m base
        assert ct.up == pytest.approx(-2_220_000)
        assert ct.down == pytest.approx(-2_220_000)
        # 1pp of pay or inflation on a 200m base
        assert pay.up == pytest.approx(2_000_000)
        assert infl.down == pytest.approx(2_000_000)
        # Demand compounds with exponent 0 in year 1
        assert demand.up == pytest.approx(0, abs=1e-6)
        assert demand.down == pytest.approx(0, abs=1e-6)


# ═══════════════════════════════════════════════════════════════════════════════
#  Solvers
# ═══════════════════════════════════════════════════════════════════════════════

def gap_at(scenario, rate):
    return project(scenario, replace(scenario.inputs, council_tax_increase=rate))[0].annual_gap


class TestSolvers:
    def _args(self, s):
        return (s.inputs, s.overrides, s.funding_shock, s.debt, s.assumptions, s.pipeline)

    def test_bisection_closes_gap(self, tight_scenario):
        rate = solve_council_tax_increase(*self._args(tight_scenario))
        assert 0 < rate < 5
        assert gap_at(tight_scenario, rate) <= 0
        assert gap_at(tight_scenario, rate - BISECTION_RESOLUTION) > 0

    def test_bisection_within_resolution_of_brent(self, tight_scenario):
        rate = solve_council_tax_increase(*self._args(tight_scenario))
        exact = solve_council_tax_increase_exact(*self._args(tight_scenario))
        assert exact == pytest.approx(100 * (120_140_000 / 116_550_000 - 1))
        assert abs(rate - exact) <= BISECTION_RESOLUTION

    def test_surplus_converges_to_lower_bracket(self, scenario):
        # Every midpoint already closes the gap
        rate = solve_council_tax_increase(*self._args(scenario))
        assert rate == BISECTION_RESOLUTION

    def test_exact_without_sign_change(self, scenario):
        assert solve_council_tax_increase_exact(*self._args(scenario)) is None

    def test_additional_savings(self, tight_scenario, rows):
        assert solve_additional_savings([]) == 0
        assert solve_additional_savings(rows) == 0
        s = replace(tight_scenario, inputs=replace(tight_scenario.inputs, council_tax_increase=0.0))
        assert solve_additional_savings(project(s)) == pytest.approx(3_590_000)

    def test_run_break_even(self, tight_scenario):
        result = run_break_even(tight_scenario)
        assert result.council_tax_increase is not None
        assert result.council_tax_increase_exact is not None
        assert result.additional_savings == 0


# ═══════════════════════════════════════════════════════════════════════════════
#  Stress Test
# ═══════════════════════════════════════════════════════════════════════════════

class _ZeroGenerator:
    def next(self):
        return 0.0


class TestSeededGenerator:
    def test_uniform_range(self):
        gen = SeededGenerator(12345)
        draws = [gen.next() for _ in range(5_000)]
        assert all(0.0 <= d < 1.0 for d in draws)
        assert 0.45 < np.mean(draws) < 0.55

    def test_same_seed_same_sequence(self):
        a, b = SeededGenerator(7), SeededGenerator(7)
        assert [a.next() for _ in range(100)] == [b.next() for _ in range(100)]

    def test_different_seeds_differ(self):
        a, b = SeededGenerator(7), SeededGenerator(8)
        assert [a.next() for _ in range(10)] != [b.next() for _ in range(10)]

    def test_state_advances_by_increment(self):
        gen = SeededGenerator(0xFFFFFFFF)
        gen.next()
        assert gen.state == (0xFFFFFFFF + SeededGenerator.INCREMENT) & 0xFFFFFFFF

    def test_normal_clamps_zero_draws(self):
        expected = math.sqrt(-2 * math.log(NORMAL_EPSILON)) * math.cos(2 * math.pi * NORMAL_EPSILON)
        assert normal(_ZeroGenerator()) == pytest.approx(expected)

    def test_eight_draws_per_path(self, scenario):
        gen = SeededGenerator(99)
        perturb_inputs(scenario.inputs, scenario.stress, gen)
        assert gen.state == (99 + 8 * SeededGenerator.INCREMENT) & 0xFFFFFFFF

    def test_matches_reference_sequence(self):
        gen = SeededGenerator(12345)
        assert [gen.next() for _ in range(5)] == [
            0.9797282677609473,
            0.3067522644996643,
            0.484205421525985,
            0.817934412509203,
            0.5094283693470061,
        ]
        gen = SeededGenerator(0)
        assert [gen(), gen()] == [0.26642920868471265, 0.0003297457005828619]

    def test_nearest_rank(self):
        values = np.arange(10.0)
        assert nearest_rank(values, 0.1) == 0.0
        assert nearest_rank(values, 0.5) == 4.0
        assert nearest_rank(values, 0.9) == 8.0
        assert nearest_rank(np.array([]), 0.5) is None


class TestStressTesting:
    def test_default_run(self, scenario):
        result = MonteCarloStressEngine(scenario).run()
        assert result.n_paths == 200
        assert len(result.all_year1_gaps) == 200
        assert result.p10_gap <= result.p50_gap <= result.p90_gap
        assert result.p10_reserves <= result.p50_reserves <= result.p90_reserves

    def test_default_summary_matches_reference(self, scenario):
        summary = MonteCarloStressEngine(scenario).run().summary()
        expected = {
            "p10Gap": -111_847_349.24815506,
            "p50Gap": -108_351_051.8441278,
            "p90Gap": -104_995_724.09929371,
            "p10Reserves": 278_015_288.7965243,
            "p50Reserves": 341_767_878.47417605,
            "p90Reserves": 407_357_646.0601687,
        }
        assert summary.keys() == expected.keys()
        for key, value in expected.items():
            assert summary[key] == pytest.approx(value, rel=1e-12), key

    def test_percentiles_use_nearest_rank(self, scenario):
        result = MonteCarloStressEngine(scenario).run()
        gaps = sorted(result.all_year1_gaps)
        assert result.p10_gap == gaps[19]
        assert result.p50_gap == gaps[99]
        assert result.p90_gap == gaps[179]

    def test_reproducible(self, scenario):
        first = MonteCarloStressEngine(scenario).run()
        second = MonteCarloStressEngine(scenario).run()
        assert first.summary() == second.summary()
        assert first.all_year5_reserves == second.all_year5_reserves

    def test_seed_changes_summary(self, scenario):
        summaries = [r.summary() for r in MonteCarloStressEngine(scenario).run_seeds([1, 2, 3])]
        assert summaries[0] != summaries[1]
        assert summaries[1] != summaries[2]

    def test_zero_sigma_reproduces_baseline(self, scenario, rows):
        params = StressParams(seed=5, simulations=20, inflation_sigma=0, demand_sigma=0,
                              pay_sigma=0, ct_sigma=0)
        result = MonteCarloStressEngine(scenario).run(params)
        assert result.p50_gap == pytest.approx(rows[0].annual_gap)
        assert result.p90_reserves == pytest.approx(rows[4].reserves_end)

    def test_zero_simulations(self, scenario):
        result = compute_stress_test(
            scenario.inputs, scenario.overrides, scenario.funding_shock, scenario.debt,
            scenario.assumptions, scenario.pipeline, StressParams(simulations=0),
        )
        assert result.n_paths == 0
        assert result.p50_gap is None
        assert result.reserves_exhaustion_probability is None


# ═══════════════════════════════════════════════════════════════════════════════
#  Configuration import
# ═══════════════════════════════════════════════════════════════════════════════

class TestConfig:
    @pytest.mark.parametrize("payload", [
        {}, {"inputs": {}, "assumptions": {}}, {"pipeline": []},
    ])
    def test_valid(self, payload):
        assert validate_config(payload).valid

    @pytest.mark.parametrize("payload", [
        None, "bad", 42, [], {"assumptions": 5}, {"inputs": [1, 2]}, {"inputs": "x"},
    ])
    def test_invalid(self, payload):
        assert not validate_config(payload).valid

    def test_load_rejects_invalid(self):
        with pytest.raises(ConfigError):
            load_config({"assumptions": "nope"})

    def test_assumptions_baseline_becomes_inputs(self):
        s = load_config({"assumptions": {"baseline": SCENARIO_PRESETS["Pessimistic"].to_dict()}})
        assert s.name == "Custom"
        assert s.inputs == SCENARIO_PRESETS["Pessimistic"]
        assert s.assumptions.previous_year_base == 200_000_000

    def test_explicit_inputs_win(self):
        s = load_config({
            "assumptions": {"baseline": {"payAward": 9.0}},
            "inputs": {"payAward": 1.5},
        })
        assert s.inputs.pay_award == 1.5

    def test_members_replaced(self):
        s = load_config({
            "fundingShock": {"enabled": True, "yearIndex": 3, "amount": 2_000_000},
            "debt": {"debtPrincipal": 50_000_000},
            "pipeline": [{"name": "A", "amount": 100, "startYear": 1, "recurring": True}],
            "stress": {"seed": 1, "simulations": 10},
        })
        assert s.funding_shock == FundingShock(True, 3, 2_000_000)
        assert s.debt == DebtBlock(50_000_000, 0.0, 0.0)
        assert s.pipeline == [SavingsItem("A", 100, 1, True, 1.0)]
        assert s.stress.simulations == 10

    def test_round_trip_preserves_projection(self, scenario, rows):
        loaded = load_config(json.loads(dump_config(scenario)))
        assert project(loaded) == rows

    @pytest.mark.parametrize("payload", [
        {"fundingShock": 5},
        {"pipeline": {"a": 1}},
        {"overrides": 3},
        {"stress": "x"},
        {"stress": {"seed": "abc"}},
        {"assumptions": {"fundingGrowth": [1]}},
    ])
    def test_malformed_member_raises_config_error(self, payload):
        assert validate_config(payload).valid
        with pytest.raises(ConfigError):
            load_config(payload)

    def test_cli_reports_malformed_config(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"fundingShock": 5}), encoding="utf-8")
        assert main(["--config", str(path)]) == 2
        assert capsys.readouterr().out.startswith("error:")

    def test_load_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"inputs": {"councilTaxIncrease": 4.99}}), encoding="utf-8")
        assert load_config_file(path).inputs.council_tax_increase == 4.99

    def test_load_file_bad_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config_file(path)

    def test_presets(self):
        s = Scenario.from_preset("Optimistic")
        assert s.name == "Optimistic"
        assert s.inputs.council_tax_increase == 5.0


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
