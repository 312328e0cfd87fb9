"""
The Dash single-page dashboard and the application factory.

The page lets the user pick a category, a segmentation, a year and a view
mode (one year or all years). Data comes from the accidents API through
``AccidentsClient``; the API itself is served by the same Flask server.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

from dash import Dash, Input, Output, dcc, html

from .api import register_api
from .catalog import CATEGORY_DIMENSIONS, FATAL, NON_FATAL
from .charts import (
    CATEGORY_LABELS,
    COLORS,
    dimension_label,
    notice,
    render_chart,
)
from .client import AccidentsClient
from .config import load_settings
from .dispatcher import AccidentDispatcher
from .errors import ApiError
from .store import AccidentStore

logger = logging.getLogger(__name__)

SINGLE_YEAR = "single"
MULTI_YEAR = "multi"

DEFAULT_SEGMENTS = {
    FATAL: "industry",
    NON_FATAL: "age",
}

CARD_STYLE = {
    "flex": "1",
    "minWidth": "180px",
    "borderRadius": "12px",
    "padding": "12px 16px",
}

LABEL_STYLE = {
    "fontSize": "13px",
    "color": COLORS["primary"],
    "fontWeight": "bold",
}


def segment_options(category):
    return [
        {"label": dimension_label(dimension), "value": dimension}
        for dimension in CATEGORY_DIMENSIONS.get(category, ())
    ]


def year_options(years):
    return [{"label": str(year), "value": year} for year in years]


def chart_title(accident_type, segment_type, year=None):
    title = f"{CATEGORY_LABELS.get(accident_type, accident_type)} accidents by {dimension_label(segment_type)}"
    if year is None:
        return f"{title} – All Years"
    return f"{title} – {year}"


def summary_cards(year, summary):
    return html.Div(
        style={"display": "flex", "flexWrap": "wrap", "gap": "12px"},
        children=[
            html.Div(
                style={**CARD_STYLE, "backgroundColor": "#ffeef0"},
                children=[
                    html.Div(f"Fatal Accidents {year}", style={
                             "fontSize": "11px", "color": COLORS["muted"]}),
                    html.Div(f"{summary.get('fatal', 0):,}", id="summary-fatal", style={
                             "fontSize": "22px", "fontWeight": "bold", "color": "#c0392b"}),
                ],
            ),
            html.Div(
                style={**CARD_STYLE, "backgroundColor": "#fff7e0"},
                children=[
                    html.Div(f"Non-fatal Accidents {year}", style={
                             "fontSize": "11px", "color": COLORS["muted"]}),
                    html.Div(f"{summary.get('nonFatal', 0):,}", id="summary-non-fatal", style={
                             "fontSize": "22px", "fontWeight": "bold", "color": COLORS["primary"]}),
                ],
            ),
        ],
    )


def _payload_rows(payload):
    if isinstance(payload, dict):
        return payload.get("data")
    return payload


def load_view(client, view_mode, accident_type, segment_type, year):
    """
    Fetch and render one parameter combination.

    Returns ``(chart, summary)`` where ``summary`` is None outside the
    single-year view or when loading failed.
    """
    if view_mode == MULTI_YEAR:
        try:
            payload = client.get_multi_year_data(accident_type, segment_type)
        except ApiError as e:
            logger.warning(f"Multi-year load failed: {e}")
            return render_chart(None, segment_type, multi_year=True, error=str(e)), None
        chart = render_chart(_payload_rows(payload), segment_type, multi_year=True,
                             title=chart_title(accident_type, segment_type))
        return chart, None

    if year is None:
        return notice("No data available"), None

    # chart data and summary load together; either failure fails the view
    with ThreadPoolExecutor(max_workers=2) as pool:
        chart_future = pool.submit(client.get_chart_data, accident_type, segment_type, year)
        summary_future = pool.submit(client.get_summary, year)
        try:
            payload = chart_future.result()
            summary = summary_future.result()
        except ApiError as e:
            logger.warning(f"Load of {accident_type}/{segment_type}/{year} failed: {e}")
            return render_chart(None, segment_type, error=str(e)), None

    chart = render_chart(_payload_rows(payload), segment_type,
                         title=chart_title(accident_type, segment_type, year))
    return chart, summary_cards(year, summary)


def serve_layout(client):
    years = client.get_years()
    default_year = years[0] if years else None

    return html.Div(
        style={
            "backgroundColor": COLORS["bg"],
            "minHeight": "100vh",
            "padding": "30px",
        },
        children=[
            html.Div(
                style={
                    "maxWidth": "1200px",
                    "margin": "0 auto",
                    "backgroundColor": COLORS["card"],
                    "borderRadius": "16px",
                    "padding": "24px 28px 32px 28px",
                    "boxShadow": "0 10px 30px rgba(0,0,0,0.12)",
                },
                children=[
                    # HEADER
                    html.H1(
                        "Workplace Accidents Dashboard",
                        style={
                            "margin": 0,
                            "fontFamily": "Arial",
                            "fontSize": "28px",
                            "color": COLORS["primary"],
                        },
                    ),
                    html.P(
                        "Fatal and non-fatal workplace accidents by year, segmented by age, industry, occupation and more.",
                        style={"marginTop": "6px", "color": COLORS["muted"], "fontSize": "14px"},
                    ),
                    html.Hr(style={"margin": "18px 0 16px 0", "borderColor": "#f0e1c5"}),

                    # SUMMARY (single-year view only)
                    html.Div(id="summary-panel"),

                    html.Br(),

                    # CONTROLS
                    html.Div(
                        style={"display": "flex", "flexWrap": "wrap", "gap": "16px"},
                        children=[
                            html.Div(
                                style={"flex": "1 1 180px"},
                                children=[
                                    html.Label("Accident Type", style=LABEL_STYLE),
                                    dcc.Dropdown(
                                        id="category-dropdown",
                                        options=[
                                            {"label": CATEGORY_LABELS[NON_FATAL], "value": NON_FATAL},
                                            {"label": CATEGORY_LABELS[FATAL], "value": FATAL},
                                        ],
                                        value=NON_FATAL,
                                        clearable=False,
                                    ),
                                ],
                            ),
                            html.Div(
                                style={"flex": "1 1 220px"},
                                children=[
                                    html.Label("Segmentation", style=LABEL_STYLE),
                                    dcc.Dropdown(
                                        id="segment-dropdown",
                                        options=segment_options(NON_FATAL),
                                        value=DEFAULT_SEGMENTS[NON_FATAL],
                                        clearable=False,
                                    ),
                                ],
                            ),
                            html.Div(
                                style={"flex": "1 1 140px"},
                                children=[
                                    html.Label("Year", style=LABEL_STYLE),
                                    dcc.Dropdown(
                                        id="year-dropdown",
                                        options=year_options(years),
                                        value=default_year,
                                        clearable=False,
                                    ),
                                ],
                            ),
                            html.Div(
                                style={"flex": "1 1 220px"},
                                children=[
                                    html.Label("View", style=LABEL_STYLE),
                                    dcc.RadioItems(
                                        id="view-mode",
                                        options=[
                                            {"label": "Single year", "value": SINGLE_YEAR},
                                            {"label": "All years", "value": MULTI_YEAR},
                                        ],
                                        value=SINGLE_YEAR,
                                        inline=True,
                                        inputStyle={"marginRight": "4px", "marginLeft": "10px"},
                                    ),
                                ],
                            ),
                        ],
                    ),

                    html.Br(),

                    # CHART
                    dcc.Loading(
                        id="chart-loading",
                        type="circle",
                        color=COLORS["primary"],
                        children=html.Div(id="chart-area", style={"minHeight": "400px"}),
                    ),
                ],
            ),
        ],
    )


def register_callbacks(app, client):
    @app.callback(
        Output("segment-dropdown", "options"),
        Output("segment-dropdown", "value"),
        Input("category-dropdown", "value"),
    )
    def update_segment_options(category):
        return segment_options(category), DEFAULT_SEGMENTS.get(category)

    @app.callback(
        Output("chart-area", "children"),
        Output("summary-panel", "children"),
        Output("summary-panel", "style"),
        Input("view-mode", "value"),
        Input("category-dropdown", "value"),
        Input("segment-dropdown", "value"),
        Input("year-dropdown", "value"),
    )
    def update_view(view_mode, accident_type, segment_type, year):
        chart, summary = load_view(client, view_mode, accident_type, segment_type, year)
        if summary is None:
            return chart, None, {"display": "none"}
        return chart, summary, {"display": "block"}


def create_app(settings=None, store=None, client=None):
    """
    Build the Dash app with the accidents API mounted on its server.

    ``store`` and ``client`` default to the ones described by ``settings``;
    tests pass their own.
    """
    settings = settings or load_settings()
    if store is None:
        store = AccidentStore.from_url(settings.database_url)
    if settings.create_schema:
        store.create_schema()
    if client is None:
        client = AccidentsClient(settings.resolved_api_base_url)

    app = Dash(__name__, title="Workplace Accidents Dashboard")
    register_api(app.server, AccidentDispatcher(store), settings)

    def layout():
        return serve_layout(client)

    app.layout = layout
    register_callbacks(app, client)
    return app
