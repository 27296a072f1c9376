"""
Main entry point — project a scenario and display the summary.
Usage: python -m mtfs_simulator [--config FILE] [--xlsx OUT] [--csv OUT]
"""

import argparse
import logging
import pathlib
from dataclasses import replace

from mtfs_simulator.config import SCENARIO_PRESETS, Scenario
from mtfs_simulator.data import ConfigError, load_config_file
from mtfs_simulator.engine.projection import MTFSProjector
from mtfs_simulator.analytics import (
    compare_projections,
    compute_sensitivity,
    compute_service_breakdown,
    compute_waterfall,
    find_reserve_exhaustion,
    reserve_trigger,
    year_one_rag,
)
from mtfs_simulator.optimization import run_break_even
from mtfs_simulator.stress_testing import run_stress_test
from mtfs_simulator.reporting import ReportMetadata, build_csv, build_xlsx_binary
from mtfs_simulator.utils import dict_list_to_df, format_gbp, format_pct, traffic_light


def _section(title: str) -> None:
    print(f"\n{'─' * 40}")
    print(title)
    print(f"{'─' * 40}")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="mtfs_simulator", description=__doc__.splitlines()[1])
    parser.add_argument("--config", type=pathlib.Path, help="JSON scenario configuration")
    parser.add_argument("--preset", choices=sorted(SCENARIO_PRESETS), help="Driver preset")
    parser.add_argument("--simulations", type=int, help="Stress test paths")
    parser.add_argument("--seed", type=int, help="Stress test seed")
    parser.add_argument("--csv", type=pathlib.Path, help="Write projections as CSV")
    parser.add_argument("--xlsx", type=pathlib.Path, help="Write the .xlsx report")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def build_scenario(args: argparse.Namespace) -> Scenario:
    scenario = Scenario.from_preset(args.preset) if args.preset else Scenario()
    if args.config:
        scenario = load_config_file(args.config, base=scenario)
    stress = scenario.stress
    if args.simulations is not None:
        stress = replace(stress, simulations=args.simulations)
    if args.seed is not None:
        stress = replace(stress, seed=args.seed)
    return replace(scenario, stress=stress)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        scenario = build_scenario(args)
    except ConfigError as exc:
        print(f"error: {exc}")
        return 2

    a = scenario.assumptions
    inputs = scenario.inputs
    print("=" * 72)
    print("  MEDIUM-TERM FINANCIAL STRATEGY — BUDGET GAP SIMULATOR")
    print("=" * 72)

    # ── Drivers ──────────────────────────────────────────────────────────
    _section(f"SCENARIO: {scenario.name}")
    print(f"  Council Tax:       {format_pct(inputs.council_tax_increase):>10}")
    print(f"  Pay Award:         {format_pct(inputs.pay_award):>10}")
    print(f"  General Inflation: {format_pct(inputs.general_inflation):>10}")
    print(f"  Demand Growth:     {format_pct(inputs.social_care_growth):>10}")
    print(f"  Opening Reserves:  {format_gbp(a.current_reserves):>16}")

    # ── Projection ───────────────────────────────────────────────────────
    _section("5-YEAR PROJECTION")
    projector = MTFSProjector(scenario)
    rows = projector.project()
    print(dict_list_to_df(projector.get_projection_summary()).to_string(index=False))

    rag = year_one_rag(rows, a)
    trigger = reserve_trigger(rows)
    exhaustion = find_reserve_exhaustion(rows)
    print(f"\n  Reserves RAG:      {traffic_light(rag.label)} {rag.label} — {rag.message}")
    print(f"  Reserve trigger:   {format_gbp(trigger.trigger_level)} "
          f"({'breached' if trigger.breached else 'not breached'})")
    print(f"  Exhaustion year:   {exhaustion.year if exhaustion else 'none'}")

    comparison = compare_projections(rows, projector.project_baseline())
    print(f"  Δ Y1 gap vs base:  {format_gbp(comparison.delta_year1_gap)}")
    print(f"  Δ Y5 reserves:     {format_gbp(comparison.delta_year5_reserves)}")

    # ── Waterfall & services ─────────────────────────────────────────────
    _section("YEAR 1 WATERFALL")
    for step in compute_waterfall(rows, a):
        print(f"  {step.label:10s}: {format_gbp(step.value):>16}")

    _section("SERVICE BREAKDOWN (Year 1)")
    for service, years in compute_service_breakdown(rows, a).items():
        y1 = years[0]
        print(f"  {service:10s}: requirement {format_gbp(y1.requirement):>16} | "
              f"gap share {format_gbp(y1.gap_share):>14}")

    # ── Sensitivity & solvers ────────────────────────────────────────────
    _section("SENSITIVITY (Year 1 gap per ±1pp)")
    for entry in compute_sensitivity(
        inputs, scenario.overrides, scenario.funding_shock, scenario.debt, a, scenario.pipeline
    ):
        print(f"  {entry.driver:20s}: up {format_gbp(entry.up):>14} | down {format_gbp(entry.down):>14}")

    _section("BREAK-EVEN")
    solved = run_break_even(scenario)
    ct = solved.council_tax_increase
    exact = solved.council_tax_increase_exact
    print(f"  Council tax (bisection): {format_pct(ct, 4) if ct is not None else 'n/a':>10}")
    print(f"  Council tax (Brent):     {format_pct(exact, 4) if exact is not None else 'no root in 0–5%':>10}")
    print(f"  Additional savings:      {format_gbp(solved.additional_savings):>16}")

    # ── Stress test ──────────────────────────────────────────────────────
    _section(f"STRESS TEST ({scenario.stress.simulations} paths, seed {scenario.stress.seed})")
    stress = run_stress_test(scenario)
    if stress.n_paths:
        print(f"  Y1 gap   P10/P50/P90: {format_gbp(stress.p10_gap)} / "
              f"{format_gbp(stress.p50_gap)} / {format_gbp(stress.p90_gap)}")
        print(f"  Y5 res.  P10/P50/P90: {format_gbp(stress.p10_reserves)} / "
              f"{format_gbp(stress.p50_reserves)} / {format_gbp(stress.p90_reserves)}")
        print(f"  P(reserves exhausted by Y5): {stress.reserves_exhaustion_probability:.1%}")
    else:
        print("  No simulations requested.")

    # ── Exports ──────────────────────────────────────────────────────────
    if args.csv:
        args.csv.write_text(build_csv(rows), encoding="utf-8")
        print(f"\n  CSV written to {args.csv}")
    if args.xlsx:
        args.xlsx.write_bytes(build_xlsx_binary(rows, ReportMetadata.from_scenario(scenario)))
        print(f"  Workbook written to {args.xlsx}")

    print(f"\n{'=' * 72}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
