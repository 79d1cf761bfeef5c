"""
excel_pack.py — Excel snapshot of the running simulation.

Produces a 3-sheet workbook for offline review of the current session:

Sheets:
    1. Summary            — company profile and KPI snapshot
    2. Quarterly Reports  — the quarterly table with margin formatting
    3. Profit Stream      — the retained data point window + line chart
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from openpyxl import Workbook
from openpyxl.chart import LineChart, Reference
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.utils.dataframe import dataframe_to_rows

from live_dashboard.config import CompanyProfile
from live_dashboard.event_stream import StreamState, points_frame
from live_dashboard.metrics import reports_frame

logger = logging.getLogger(__name__)

DEFAULT_BRAND = {"primary": "111A2E", "accent": "00D084", "light": "E8F8F1"}

THIN = Side(style="thin")
THIN_BORDER = Border(left=THIN, right=THIN, top=THIN, bottom=THIN)


# ---------------------------------------------------------------------------
# Styling helpers
# ---------------------------------------------------------------------------

def _fill(hex_colour: str) -> PatternFill:
    return PatternFill(fill_type="solid", fgColor=hex_colour.lstrip("#"))


def _font(bold: bool = False, colour: str = "000000", size: int = 10,
          italic: bool = False) -> Font:
    return Font(name="Calibri", bold=bold, color=colour.lstrip("#"),
                size=size, italic=italic)


def _center() -> Alignment:
    return Alignment(horizontal="center", vertical="center", wrap_text=False)


def _auto_fit(ws, min_w: int = 8, max_w: int = 60) -> None:
    for col in ws.columns:
        max_len = max(
            (len(str(cell.value)) if cell.value is not None else 0 for cell in col), default=0
        )
        ws.column_dimensions[get_column_letter(col[0].column)].width = \
            min(max(max_len + 3, min_w), max_w)


def _write_header_row(ws, row: int, headers: list[str], brand: dict) -> None:
    """Write a formatted header row at the given row index."""
    for col_i, h in enumerate(headers, start=1):
        cell = ws.cell(row=row, column=col_i, value=h)
        cell.fill = _fill(brand["primary"])
        cell.font = _font(bold=True, colour="FFFFFF", size=10)
        cell.alignment = _center()
        cell.border = THIN_BORDER
    ws.row_dimensions[row].height = 20


# ---------------------------------------------------------------------------
# Sheet builders
# ---------------------------------------------------------------------------

def _sheet_summary(ws, state: StreamState, profile: CompanyProfile, brand: dict) -> None:
    """Write the profile + KPI snapshot sheet."""
    ws.sheet_properties.tabColor = brand["primary"].lstrip("#")

    ws.merge_cells("A1:B1")
    cell = ws["A1"]
    cell.value = f"{profile.name} — Live Dashboard Snapshot"
    cell.fill = _fill(brand["primary"])
    cell.font = _font(bold=True, colour="FFFFFF", size=14)
    cell.alignment = _center()
    ws.row_dimensions[1].height = 30

    ws.merge_cells("A2:B2")
    ws["A2"].value = f"Generated: {datetime.today().strftime('%Y-%m-%d %H:%M:%S')}"
    ws["A2"].font = _font(italic=True, colour="555555", size=9)
    ws["A2"].alignment = _center()

    kpis = state.kpis
    rows = [
        ("Months active", profile.months_active, "0"),
        ("Employees", profile.employees, "0"),
        ("Baseline monthly revenue", profile.base_monthly_revenue, '"$"#,##0'),
        ("Gross margin", profile.gross_margin, "0.0%"),
        ("Operating margin", profile.operating_margin, "0.0%"),
        ("Events recorded", state.tick, "0"),
        ("Cumulative revenue", kpis.revenue, '"$"#,##0'),
        ("Cumulative net profit", kpis.profit, '"$"#,##0'),
        ("Margin", kpis.margin, "0.0%"),
        ("Stream status", "Live" if state.running else "Paused", "@"),
    ]
    _write_header_row(ws, 4, ["Metric", "Value"], brand)
    for row_i, (label, value, number_format) in enumerate(rows, start=5):
        ws.cell(row=row_i, column=1, value=label).font = _font(size=9)
        c = ws.cell(row=row_i, column=2, value=value)
        c.font = _font(bold=True, size=9)
        c.number_format = number_format
        for col_i in (1, 2):
            ws.cell(row=row_i, column=col_i).border = THIN_BORDER
            ws.cell(row=row_i, column=col_i).fill = _fill(
                brand["light"] if row_i % 2 else "FFFFFF"
            )
    ws.column_dimensions["A"].width = 30
    ws.column_dimensions["B"].width = 22


def _sheet_reports(ws, state: StreamState, brand: dict) -> None:
    """Write the quarterly reports table."""
    ws.sheet_properties.tabColor = brand["accent"].lstrip("#")
    df = reports_frame(state.reports).rename(columns={
        "quarter": "Quarter",
        "period": "Period",
        "revenue": "Revenue ($)",
        "net_profit": "Net Profit ($)",
        "profit_margin": "Margin %",
        "notes": "Notes",
    })

    _write_header_row(ws, 1, list(df.columns), brand)
    ws.freeze_panes = "A2"
    for row_i, row in enumerate(dataframe_to_rows(df, index=False, header=False), start=2):
        for col_i, val in enumerate(row, start=1):
            c = ws.cell(row=row_i, column=col_i, value=val)
            c.font = _font(size=9)
            c.border = THIN_BORDER
            col_name = df.columns[col_i - 1]
            if "($)" in col_name:
                c.number_format = '"$"#,##0'
            elif "%" in col_name:
                c.number_format = "0.0%"
    _auto_fit(ws)


def _sheet_stream(ws, state: StreamState, brand: dict) -> None:
    """Write the data point window with a cumulative profit line chart."""
    ws.sheet_properties.tabColor = brand["primary"].lstrip("#")
    df = points_frame(state)[["time", "profit", "revenue"]].rename(columns={
        "time": "Time",
        "profit": "Cumulative Profit ($)",
        "revenue": "Revenue ($)",
    })

    _write_header_row(ws, 1, list(df.columns), brand)
    ws.freeze_panes = "A2"
    ws.auto_filter.ref = f"A1:{get_column_letter(len(df.columns))}1"
    for row_i, row in enumerate(dataframe_to_rows(df, index=False, header=False), start=2):
        for col_i, val in enumerate(row, start=1):
            c = ws.cell(row=row_i, column=col_i, value=val)
            c.font = _font(size=9)
            if col_i > 1:
                c.number_format = '"$"#,##0'
    _auto_fit(ws)

    if len(df) == 0:
        return
    chart = LineChart()
    chart.title = "Cumulative Net Profit (USD)"
    chart.height = 9
    chart.width = 22
    chart.legend = None
    data = Reference(ws, min_col=2, min_row=1, max_row=len(df) + 1)
    labels = Reference(ws, min_col=1, min_row=2, max_row=len(df) + 1)
    chart.add_data(data, titles_from_data=True)
    chart.set_categories(labels)
    chart.series[0].graphicalProperties.line.solidFill = brand["accent"].lstrip("#")
    chart.series[0].smooth = True
    ws.add_chart(chart, "E2")


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

def generate_excel_pack(
    state: StreamState,
    profile: CompanyProfile,
    output_path: Path,
    brand: Optional[dict] = None,
) -> Path:
    """Build the snapshot workbook and write to disk.

    Args:
        state: Current simulation state.
        profile: Company profile.
        output_path: Destination .xlsx path.
        brand: Colour palette (hex without '#'); defaults to DEFAULT_BRAND.

    Returns:
        Path to the generated .xlsx file.
    """
    brand = {**DEFAULT_BRAND, **(brand or {})}
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    wb = Workbook()
    wb.remove(wb.active)

    sheets = [
        ("Summary",           lambda ws: _sheet_summary(ws, state, profile, brand)),
        ("Quarterly Reports", lambda ws: _sheet_reports(ws, state, brand)),
        ("Profit Stream",     lambda ws: _sheet_stream(ws, state, brand)),
    ]
    for sheet_name, builder in sheets:
        ws = wb.create_sheet(sheet_name)
        builder(ws)
        logger.info("Built sheet: %s", sheet_name)

    wb.save(output_path)
    logger.info("Excel snapshot saved to %s", output_path)
    return output_path
