"""Distribution chart: assets vs liabilities vs BNE."""

from decimal import Decimal

import plotly.graph_objects as go
from pydantic import BaseModel, ConfigDict

from bizbalance.models.finance import CalculationResult
from bizbalance.reporting.formatting import format_currency

ASSETS_COLOR = "#10b981"
LIABILITIES_COLOR = "#ef4444"
NET_COLOR = "#3b82f6"


class ChartBar(BaseModel):
    """One bar of the distribution chart."""
    model_config = ConfigDict(frozen=True)

    name: str
    value: Decimal
    fill: str


def build_chart_data(result: CalculationResult) -> list[ChartBar]:
    """
    Three bars, in display order:
    Assets (AR + B), Liabilities (AP + C), Net (BNE).
    """
    return [
        ChartBar(name="Assets", value=result.total_assets, fill=ASSETS_COLOR),
        ChartBar(name="Liabilities", value=result.total_liabilities, fill=LIABILITIES_COLOR),
        ChartBar(name="Net (BNE)", value=result.bne, fill=NET_COLOR),
    ]


def build_distribution_figure(result: CalculationResult) -> go.Figure:
    """Return a Plotly bar chart of the chart data."""
    bars = build_chart_data(result)

    fig = go.Figure(
        go.Bar(
            x=[bar.name for bar in bars],
            y=[float(bar.value) for bar in bars],
            marker_color=[bar.fill for bar in bars],
            text=[format_currency(bar.value) for bar in bars],
            hovertemplate="%{x}: %{text}<extra></extra>",
        )
    )
    fig.update_layout(
        margin=dict(l=0, r=20, t=10, b=0),
        yaxis=dict(visible=False),
        xaxis=dict(showgrid=False),
        plot_bgcolor="rgba(0,0,0,0)",
        showlegend=False,
        height=280,
    )
    return fig
