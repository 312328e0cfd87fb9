import threading

from dash import dcc, html

from accident_dashboard.dashboard import (
    MULTI_YEAR,
    SINGLE_YEAR,
    load_view,
    segment_options,
    serve_layout,
)
from accident_dashboard.errors import ApiError


class FakeClient:
    def __init__(self, chart=None, summary=None, multi=None, years=(), fail=None):
        self.chart = chart if chart is not None else {"data": [{"label": "Construction", "value": 4}]}
        self.summary = summary if summary is not None else {"fatal": 2, "nonFatal": 9}
        self.multi = multi if multi is not None else {"data": [{"label": "A", "year": 2020, "value": 1}]}
        self.years = list(years)
        self.fail = fail or set()
        self.calls = []
        self.lock = threading.Lock()

    def _record(self, name):
        with self.lock:
            self.calls.append(name)
        if name in self.fail:
            raise ApiError(f"{name} failed", status_code=500)

    def get_years(self):
        return self.years

    def get_chart_data(self, accident_type, segment_type, year):
        self._record("chart")
        return self.chart

    def get_summary(self, year):
        self._record("summary")
        return self.summary

    def get_multi_year_data(self, accident_type, segment_type):
        self._record("multi")
        return self.multi


def find(component, component_id):
    if getattr(component, "id", None) == component_id:
        return component
    children = getattr(component, "children", None)
    if children is None:
        return None
    if not isinstance(children, (list, tuple)):
        children = [children]
    for child in children:
        found = find(child, component_id)
        if found is not None:
            return found
    return None


def test_single_year_view_loads_chart_and_summary():
    client = FakeClient()
    chart, summary = load_view(client, SINGLE_YEAR, "fatal", "industry", 2022)

    assert isinstance(chart, dcc.Graph)
    assert sorted(client.calls) == ["chart", "summary"]
    assert find(summary, "summary-fatal").children == "2"
    assert find(summary, "summary-non-fatal").children == "9"


def test_single_year_view_fails_when_either_request_fails():
    chart, summary = load_view(FakeClient(fail={"summary"}), SINGLE_YEAR, "fatal", "industry", 2022)

    assert chart.className == "notice notice-error"
    assert chart.children == "summary failed"
    assert summary is None


def test_multi_year_view_is_a_line_without_summary():
    client = FakeClient()
    chart, summary = load_view(client, MULTI_YEAR, "non-fatal", "gender", None)

    assert isinstance(chart, dcc.Graph)
    assert chart.figure.data[0].type == "scatter"
    assert chart.figure.data[0].mode == "lines+markers"
    assert client.calls == ["multi"]
    assert summary is None


def test_multi_year_error():
    chart, summary = load_view(FakeClient(fail={"multi"}), MULTI_YEAR, "fatal", "age", None)
    assert chart.className == "notice notice-error"


def test_empty_chart_data_is_a_notice_not_an_error():
    chart, summary = load_view(FakeClient(chart={"data": []}), SINGLE_YEAR, "fatal", "industry", 2022)

    assert chart.className == "notice notice-info"
    assert summary is not None


def test_no_year_selected():
    client = FakeClient()
    chart, summary = load_view(client, SINGLE_YEAR, "fatal", "industry", None)

    assert isinstance(chart, html.Div)
    assert client.calls == []


def test_segment_options_follow_category():
    fatal = [option["value"] for option in segment_options("fatal")]
    non_fatal = [option["value"] for option in segment_options("non-fatal")]

    assert "demographic" in fatal and "days-lost" not in fatal
    assert "days-lost" in non_fatal and "demographic" not in non_fatal


def test_layout_defaults_to_latest_year():
    layout = serve_layout(FakeClient(years=[2023, 2022]))
    year_dropdown = find(layout, "year-dropdown")

    assert year_dropdown.value == 2023
    assert [o["value"] for o in year_dropdown.options] == [2023, 2022]


def test_layout_without_years():
    layout = serve_layout(FakeClient(years=[]))
    year_dropdown = find(layout, "year-dropdown")

    assert year_dropdown.value is None
    assert year_dropdown.options == []
