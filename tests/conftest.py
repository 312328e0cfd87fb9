import pytest

from accident_dashboard.config import Settings
from accident_dashboard.dashboard import create_app
from accident_dashboard.errors import UpstreamQueryError
from accident_dashboard.store import (
    AccidentStore,
    age_groups,
    demographics,
    event_types,
    fatal_accidents,
    industries,
    non_fatal_accidents,
    occupations,
    severity_levels,
)

DIMENSION_ROWS = {
    industries: [
        {"industry_id": 1, "industry_name": "Construction"},
        {"industry_id": 2, "industry_name": "Manufacturing"},
        {"industry_id": 3, "industry_name": "Agriculture"},
    ],
    event_types: [
        {"event_id": 1, "event_name": "Falls"},
        {"event_id": 2, "event_name": "Struck by object"},
    ],
    demographics: [
        {"demographic_id": 1, "group_name": "Group A"},
        {"demographic_id": 2, "group_name": "Group B"},
    ],
    age_groups: [
        {"age_group_id": 1, "age_range": "18-24"},
        {"age_group_id": 2, "age_range": "25-34"},
        {"age_group_id": 3, "age_range": "35-44"},
    ],
    occupations: [
        {"occupation_id": 1, "occupation_name": "Laborer"},
        {"occupation_id": 2, "occupation_name": "Driver"},
    ],
    severity_levels: [
        {"severity_id": 1, "level_name": "Minor"},
        {"severity_id": 2, "level_name": "Moderate"},
        {"severity_id": 3, "level_name": "Severe"},
    ],
}


def _fatal(year, industry, event, demographic, age, occupation, gender):
    return {
        "year": year, "industry_id": industry, "event_id": event,
        "demographic_id": demographic, "age_group_id": age,
        "occupation_id": occupation, "gender": gender,
    }


def _non_fatal(year, industry, event, age, occupation, severity, gender, days_lost):
    return {
        "year": year, "industry_id": industry, "event_id": event,
        "demographic_id": 1, "age_group_id": age, "occupation_id": occupation,
        "severity_id": severity, "gender": gender, "days_lost": days_lost,
    }


FATAL_ROWS = [
    _fatal(2022, 1, 1, 1, 2, 1, "M"),
    _fatal(2022, 1, 2, 2, 1, 2, None),
    _fatal(2022, 2, 1, 1, 3, 1, "F"),
    _fatal(2021, 1, 1, 1, 2, 1, "M"),
]

NON_FATAL_ROWS = [
    _non_fatal(2022, 2, 1, 3, 1, 3, "F", 2),
    _non_fatal(2022, 2, 2, 1, 2, 1, "M", 5),
    _non_fatal(2022, 1, 1, 2, 1, 2, None, 40),
    _non_fatal(2022, 2, 1, 1, 2, 1, "M", 10),
    _non_fatal(2023, 3, 2, 2, 1, 2, "F", 20),
]


def _new_store(tmp_path, name):
    store = AccidentStore.from_url(f"sqlite:///{tmp_path / name}")
    store.create_schema()
    return store


@pytest.fixture
def empty_store(tmp_path):
    store = _new_store(tmp_path, "empty.db")
    yield store
    store.dispose()


@pytest.fixture
def store(tmp_path):
    store = _new_store(tmp_path, "accidents.db")
    with store.engine.begin() as conn:
        for table, rows in DIMENSION_ROWS.items():
            conn.execute(table.insert(), rows)
        conn.execute(fatal_accidents.insert(), FATAL_ROWS)
        conn.execute(non_fatal_accidents.insert(), NON_FATAL_ROWS)
    yield store
    store.dispose()


class FailingStore:
    def __init__(self, message="connection refused"):
        self.message = message

    def execute(self, statement, bindings=None):
        raise UpstreamQueryError(self.message)


class StubClient:
    """Stands in for the HTTP client where no dashboard page is rendered."""

    def get_years(self):
        return []


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", app_env="development")


@pytest.fixture
def api(store, settings):
    app = create_app(settings, store=store, client=StubClient())
    return app.server.test_client()


@pytest.fixture
def empty_api(empty_store, settings):
    app = create_app(settings, store=empty_store, client=StubClient())
    return app.server.test_client()
