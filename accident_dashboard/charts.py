"""
Chart selection and figure building for the dashboard.

Each segmentation type maps to one chart kind; every multi-year view is a
line chart whatever the segmentation. The chart area always shows exactly
one thing: an error banner, a notice, or the graph.
"""

import pandas as pd
import plotly.express as px
from dash import dcc, html

from .errors import NoData, NoValidData
from .normalizer import normalize_single, pivot_multi_year

# =========================================================
# 1. CHART KINDS & LABELS
# =========================================================
BAR = "bar"
PIE = "pie"
SCATTER = "scatter"
LINE = "line"

CHART_KINDS = {
    "age": BAR,
    "industry": BAR,
    "occupation": BAR,
    "accident-type": BAR,
    "event-type": BAR,
    "days-lost": BAR,
    "gender": PIE,
    "demographic": PIE,
    "severity": SCATTER,
}

DIMENSION_LABELS = {
    "age": "Age Group",
    "industry": "Industry",
    "occupation": "Occupation",
    "gender": "Gender",
    "demographic": "Demographic Group",
    "accident-type": "Accident Type",
    "event-type": "Event Type",
    "severity": "Severity Level",
    "days-lost": "Days Lost",
}

CATEGORY_LABELS = {
    "fatal": "Fatal",
    "non-fatal": "Non-fatal",
}


def chart_kind(dimension, multi_year=False):
    """Chart kind for a segmentation, or None when it is not supported."""
    if multi_year:
        return LINE
    return CHART_KINDS.get(dimension)


def dimension_label(dimension):
    return DIMENSION_LABELS.get(dimension, "Data")


# =========================================================
# 2. COMMON FIGURE STYLING
# =========================================================
COLORS = {
    "bg": "#f9f4e8",
    "card": "#ffffff",
    "primary": "#d35400",
    "accent": "#f1c40f",
    "text": "#333333",
    "muted": "#777777",
    "error": "#c0392b",
    "info": "#2980b9",
}


def style_figure(fig, legend_bottom=False):
    fig.update_layout(
        template="simple_white",
        font=dict(family="Arial", size=12, color=COLORS["text"]),
        title_font=dict(size=18, color=COLORS["primary"], family="Arial"),
        plot_bgcolor=COLORS["card"],
        paper_bgcolor=COLORS["card"],
        margin=dict(t=60, l=40, r=20, b=40),
        height=400,
    )
    if legend_bottom:
        fig.update_layout(
            legend=dict(
                orientation="h",
                yanchor="bottom",
                y=-0.35,
                xanchor="center",
                x=0.5,
                title_text="",
            )
        )
    fig.update_xaxes(showgrid=False, zeroline=False)
    fig.update_yaxes(
        showgrid=True, gridcolor="rgba(0,0,0,0.06)", zeroline=False)
    return fig


# =========================================================
# 3. FIGURES
# =========================================================


def bar_figure(points, dimension, title=None):
    df = pd.DataFrame(points, columns=["label", "value"])
    fig = px.bar(
        df,
        x="label",
        y="value",
        title=title,
        color_discrete_sequence=[COLORS["primary"]],
    )
    fig = style_figure(fig)
    fig.update_layout(
        showlegend=False,
        xaxis_title=dimension_label(dimension),
        yaxis_title="Number of Accidents",
        margin=dict(t=60, l=40, r=20, b=100),
    )
    # keep the order the API returned
    fig.update_xaxes(type="category", categoryorder="array", categoryarray=list(df["label"]))
    return fig


def pie_figure(points, dimension, title=None):
    df = pd.DataFrame(points, columns=["label", "value"])
    fig = px.pie(
        df,
        names="label",
        values="value",
        hole=0.25,
        title=title,
    )
    fig.update_traces(textposition="inside", textinfo="percent+label", sort=False)
    return style_figure(fig, legend_bottom=True)


def scatter_figure(points, dimension, title=None):
    # x follows the API order so ordinal levels read left to right
    df = pd.DataFrame(points, columns=["label", "value"])
    fig = px.scatter(
        df,
        x="label",
        y="value",
        title=title,
        color_discrete_sequence=[COLORS["primary"]],
    )
    fig.update_traces(marker=dict(size=14))
    fig = style_figure(fig)
    fig.update_layout(
        xaxis_title=dimension_label(dimension),
        yaxis_title="Number of Accidents",
    )
    fig.update_xaxes(type="category", categoryorder="array", categoryarray=list(df["label"]))
    return fig


def line_figure(pivoted, dimension, title=None):
    long_rows = [
        {"year": year, "label": label, "value": value}
        for label, values in pivoted.series_by_label.items()
        for year, value in zip(pivoted.years, values)
    ]
    df = pd.DataFrame(long_rows, columns=["year", "label", "value"])
    fig = px.line(
        df,
        x="year",
        y="value",
        color="label",
        markers=True,
        title=title,
    )
    fig.update_traces(line=dict(width=3), marker=dict(size=6))
    fig = style_figure(fig, legend_bottom=True)
    fig.update_layout(
        xaxis=dict(dtick=1, title="Year"),
        yaxis_title="Number of Accidents",
        legend_title_text=dimension_label(dimension),
        margin=dict(t=60, l=40, r=20, b=140),
    )
    return fig


FIGURE_BUILDERS = {
    BAR: bar_figure,
    PIE: pie_figure,
    SCATTER: scatter_figure,
}


def build_figure(rows, dimension, multi_year=False, title=None):
    """
    Validate and reshape API rows, then draw them.

    Raises ``NoData``/``NoValidData`` from the normalizer, and
    ``ValueError`` for a segmentation with no chart kind.
    """
    kind = chart_kind(dimension, multi_year)
    if kind is None:
        raise ValueError(f"Unsupported segmentation: {dimension}")
    if kind == LINE:
        return line_figure(pivot_multi_year(rows), dimension, title=title)
    return FIGURE_BUILDERS[kind](normalize_single(rows), dimension, title=title)


# =========================================================
# 4. RENDER STATES
# =========================================================


def notice(message, kind="info"):
    color = COLORS["error"] if kind == "error" else COLORS["info"]
    return html.Div(
        message,
        className=f"notice notice-{kind}",
        style={
            "padding": "12px 16px",
            "borderRadius": "10px",
            "border": f"1px solid {color}",
            "color": color,
            "backgroundColor": "#fdf6ec",
            "fontSize": "14px",
        },
    )


def render_chart(rows, dimension, multi_year=False, error=None, title=None):
    """Return the single component the chart area should show."""
    if error:
        return notice(error, kind="error")
    if chart_kind(dimension, multi_year) is None:
        return notice(f"Unsupported segmentation: {dimension}", kind="info")
    try:
        fig = build_figure(rows, dimension, multi_year=multi_year, title=title)
    except NoValidData:
        return notice("The data is not in the expected format", kind="error")
    except NoData:
        return notice("No data available", kind="info")
    return dcc.Graph(figure=fig, style={"height": "400px"})
