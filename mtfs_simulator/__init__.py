"""
Medium-Term Financial Strategy (MTFS) Budget Gap Simulator
==========================================================
Deterministic 5-year projection of a council's budget requirement,
funding, annual gap and reserves, with the analytics and exports
built on top of it.

Modules
-------
- config        : Scenario model, defaults and driver presets
- data          : Configuration import and validation
- engine        : Year-by-year projection recurrence
- analytics     : Waterfall, service breakdown, reserves views, sensitivities
- optimization  : Break-even council tax and savings solvers
- stress_testing: Seeded Monte Carlo stress test
- reporting     : CSV, DataFrame and .xlsx workbook exports
"""

__version__ = "1.0.0"
