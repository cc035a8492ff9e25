"""Core (UI-agnostic) data exploration logic.

This package contains:
- dataset snapshots (parsed rows -> pandas) and cell coercion
- numeric/categorical classification
- computed columns and missing-value imputation
- the filter/sort pipeline producing the working view
- outliers, correlation, trend/forecast and summary statistics
- chart eligibility and per-chart row shapes
- chart helpers (Altair -> Vega-Lite spec dict)
"""
