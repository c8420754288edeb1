"""Presentation helpers: currency formatting and the distribution chart."""

from bizbalance.reporting.charts import (
    ASSETS_COLOR,
    LIABILITIES_COLOR,
    NET_COLOR,
    ChartBar,
    build_chart_data,
    build_distribution_figure,
)
from bizbalance.reporting.formatting import amount_text, format_currency

__all__ = [
    "ASSETS_COLOR",
    "LIABILITIES_COLOR",
    "NET_COLOR",
    "ChartBar",
    "amount_text",
    "build_chart_data",
    "build_distribution_figure",
    "format_currency",
]
