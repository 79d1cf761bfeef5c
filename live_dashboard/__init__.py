"""
live-sales-dashboard — Source package.

Modules:
    formatting      — currency / percentage display helpers
    config          — company profile and simulation settings (config.yaml)
    data_simulator  — historical months, seed events and live sales
    metrics         — quarterly reports and KPI summary
    event_stream    — simulation state and its transitions
    live_driver     — per-tick live sale generation, simulated clock
    dashboard       — auto-refreshing Plotly HTML dashboard
    excel_pack      — openpyxl workbook snapshot
    controls        — session wiring: pause, reset, intensity, exports
"""
