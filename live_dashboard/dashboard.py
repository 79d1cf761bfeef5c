"""
dashboard.py — Self-contained Plotly HTML dashboard.

Renders the current simulation state into a single HTML page that a
browser reloads every few seconds. The page is rewritten after every
state change, so it always mirrors the live stream.

Sections:
    Header KPI bar    — cumulative revenue, cumulative profit, margin
    Row 1:            — Cumulative Net Profit (line) | Live sales feed
    Row 2:            — Quarterly reports table

Rendering is read-only: nothing here mutates StreamState.
"""

import html
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import plotly.graph_objects as go

from live_dashboard.config import CompanyProfile
from live_dashboard.event_stream import StreamState
from live_dashboard.formatting import fmt_currency, fmt_pct

logger = logging.getLogger(__name__)

TEMPLATE = "plotly_dark"
PLOTLY_CDN = "https://cdn.plot.ly/plotly-2.35.2.min.js"

DEFAULT_BRAND = {
    "background": "0b1220",
    "panel":      "111a2e",
    "text":       "e6edf3",
    "muted":      "9aa6b2",
    "accent":     "00d084",
}


def _hex(h: str) -> str:
    """Ensure hex colour has # prefix."""
    return f"#{h.lstrip('#')}"


def _rgba(h: str, alpha: float) -> str:
    h = h.lstrip("#")
    return f"rgba({int(h[0:2], 16)},{int(h[2:4], 16)},{int(h[4:6], 16)},{alpha})"


def build_profit_chart(state: StreamState, brand: dict) -> go.Figure:
    """Line chart of cumulative net profit over the data point window.

    Transitions are disabled; each render carries the whole series. Points
    are plotted by position with their time labels as tick text, since many
    points can share one label.
    """
    points = list(state.data_points)
    labels = [p.time for p in points]
    step = max(1, len(points) // 10)
    fig = go.Figure(go.Scatter(
        x=list(range(len(points))),
        customdata=labels,
        y=[p.profit for p in points],
        name="Cumulative Net Profit (USD)",
        mode="lines",
        line=dict(color=_hex(brand["accent"]), width=2, shape="spline", smoothing=0.25),
        fill="tozeroy",
        fillcolor=_rgba(brand["accent"], 0.08),
        hovertemplate="%{customdata}<br>Cumulative profit: $%{y:,.0f}<extra></extra>",
    ))
    fig.update_layout(
        title=dict(text="Cumulative Net Profit (USD)",
                   font=dict(size=14, color=_hex(brand["text"]))),
        template=TEMPLATE,
        paper_bgcolor=_hex(brand["panel"]),
        plot_bgcolor=_hex(brand["panel"]),
        showlegend=False,
        hovermode="closest",
        transition=dict(duration=0),
        xaxis=dict(tickmode="array", tickvals=list(range(0, len(points), step)),
                   ticktext=labels[::step], tickfont=dict(color=_hex(brand["muted"]))),
        yaxis=dict(tickprefix="$", tickformat=",.0f", tickfont=dict(color=_hex(brand["muted"]))),
        height=380,
        margin=dict(l=60, r=20, t=50, b=40),
    )
    return fig


def build_kpi_header(
    state: StreamState,
    profile: CompanyProfile,
    brand: dict,
    intensity: Optional[float] = None,
) -> str:
    """Generate the HTML KPI banner."""
    kpis = state.kpis
    tiles = [
        ("Revenue", fmt_currency(kpis.revenue)),
        ("Net Profit", fmt_currency(kpis.profit)),
        ("Margin", fmt_pct(kpis.margin)),
    ]
    tile_html = "".join(
        f"""
        <div class="tile">
            <div class="tile-label">{label.upper()}</div>
            <div class="tile-value">{value}</div>
        </div>"""
        for label, value in tiles
    )
    status = "Live" if state.running else "Paused"
    intensity_txt = f" &nbsp;|&nbsp; Intensity {intensity:.2f}x" if intensity is not None else ""
    return f"""
    <div class="header">
        <h1>{html.escape(profile.name)}</h1>
        <p>{profile.months_active} months active &nbsp;|&nbsp; {profile.employees} employees
           &nbsp;|&nbsp; Stream: {status}{intensity_txt}</p>
        <div class="tiles">{tile_html}</div>
    </div>"""


def build_feed_html(state: StreamState) -> str:
    """Render the live feed, most recent sale first."""
    if not state.feed:
        return '<ul class="feed"><li class="empty">Waiting for live sales…</li></ul>'
    items = "".join(
        f"<li><span>{html.escape(entry.time)}</span><strong>{fmt_currency(entry.revenue)}</strong></li>"
        for entry in state.feed
    )
    return f'<ul class="feed">{items}</ul>'


def build_reports_table(state: StreamState) -> str:
    """Render one table row per quarterly report."""
    rows = "".join(
        f"""
        <tr>
            <td>{r.quarter}</td>
            <td>{r.period}</td>
            <td>{fmt_currency(r.revenue)}</td>
            <td>{fmt_currency(r.net_profit)}</td>
            <td>{r.profit_margin * 100:.1f}%</td>
            <td>{html.escape(r.notes)}</td>
        </tr>"""
        for r in state.reports
    )
    return f"""
    <table id="reportsTable">
        <thead><tr>
            <th>Quarter</th><th>Period</th><th>Revenue</th>
            <th>Net Profit</th><th>Margin</th><th>Notes</th>
        </tr></thead>
        <tbody>{rows}</tbody>
    </table>"""


def render_html(
    state: StreamState,
    profile: CompanyProfile,
    brand: Optional[dict] = None,
    refresh_seconds: int = 2,
    intensity: Optional[float] = None,
) -> str:
    """Assemble the full dashboard page.

    Args:
        state: Current simulation state.
        profile: Company profile.
        brand: Colour palette (hex without '#'); defaults to DEFAULT_BRAND.
        refresh_seconds: Browser auto-refresh period; 0 disables it.
        intensity: Current live intensity, shown in the header when given.

    Returns:
        Complete HTML document.
    """
    brand = {**DEFAULT_BRAND, **(brand or {})}
    chart_div = build_profit_chart(state, brand).to_html(
        include_plotlyjs=False, full_html=False, config={"displayModeBar": False},
    )
    refresh = (
        f'<meta http-equiv="refresh" content="{refresh_seconds}">' if refresh_seconds > 0 else ""
    )
    now = datetime.now()

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width,initial-scale=1.0">
    {refresh}
    <title>{html.escape(profile.name)} — Live Dashboard</title>
    <script src="{PLOTLY_CDN}"></script>
    <style>
        *{{box-sizing:border-box;margin:0;padding:0;}}
        body{{font-family:'Segoe UI',Arial,sans-serif;background:{_hex(brand['background'])};
              color:{_hex(brand['text'])};}}
        .header{{padding:20px 28px;}}
        .header h1{{font-size:20px;margin-bottom:3px;}}
        .header p{{color:{_hex(brand['muted'])};font-size:12px;margin-bottom:14px;}}
        .tiles{{display:flex;gap:10px;flex-wrap:wrap;}}
        .tile{{background:{_hex(brand['panel'])};border-radius:8px;padding:10px 16px;min-width:160px;}}
        .tile-label{{font-size:10px;font-weight:600;letter-spacing:.8px;color:{_hex(brand['muted'])};}}
        .tile-value{{font-size:22px;font-weight:700;margin-top:2px;color:{_hex(brand['accent'])};}}
        .grid{{display:grid;grid-template-columns:2fr 1fr;gap:14px;padding:0 18px 18px;}}
        .card{{background:{_hex(brand['panel'])};border-radius:8px;padding:8px;}}
        .full{{grid-column:1/-1;}}
        .feed{{list-style:none;max-height:370px;overflow-y:auto;font-size:12px;}}
        .feed li{{display:flex;justify-content:space-between;padding:4px 8px;
                  border-bottom:1px solid rgba(255,255,255,.05);}}
        table{{width:100%;border-collapse:collapse;font-size:12px;}}
        th,td{{text-align:left;padding:6px 8px;border-bottom:1px solid rgba(255,255,255,.06);}}
        th{{color:{_hex(brand['muted'])};font-weight:600;}}
        .footer{{text-align:center;padding:14px;color:{_hex(brand['muted'])};font-size:11px;}}
        @media(max-width:880px){{.grid{{grid-template-columns:1fr;}}}}
    </style>
</head>
<body>
    {build_kpi_header(state, profile, brand, intensity)}
    <div class="grid">
        <div class="card">{chart_div}</div>
        <div class="card"><h3 style="font-size:13px;padding:6px 8px;">Live Sales</h3>{build_feed_html(state)}</div>
        <div class="card full">{build_reports_table(state)}</div>
    </div>
    <div class="footer">
        &copy; {now.year} {html.escape(profile.name)} &nbsp;|&nbsp; Simulated data &nbsp;|&nbsp;
        Rendered {now.strftime('%Y-%m-%d %H:%M:%S')}
    </div>
</body>
</html>"""


class HtmlDashboardSink:
    """Writes the dashboard page to disk on every render call."""

    def __init__(
        self,
        output_path: Path,
        brand: Optional[dict[str, Any]] = None,
        refresh_seconds: int = 2,
    ) -> None:
        self.output_path = Path(output_path)
        self.brand = brand
        self.refresh_seconds = refresh_seconds

    def render(
        self,
        state: StreamState,
        profile: CompanyProfile,
        intensity: Optional[float] = None,
    ) -> Path:
        page = render_html(state, profile, self.brand, self.refresh_seconds, intensity)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.output_path.write_text(page, encoding="utf-8")
        logger.debug("Dashboard written to %s (%d points)", self.output_path,
                     len(state.data_points))
        return self.output_path
