"""Core (UI-agnostic) gym dashboard logic.

This package contains:
- data loading (CSV -> pandas) and record normalization
- filter normalization and the filter engine
- workout aggregation and page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
