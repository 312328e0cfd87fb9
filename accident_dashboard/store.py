"""
Access to the aggregation store.

The store is a relational database with two fact tables (fatal and
non-fatal accidents) and the dimension tables they reference. Everything
here is read-only apart from ``create_schema``, which only creates missing
tables for local use and for tests.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import (
    Column,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    create_engine,
    text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .errors import UpstreamQueryError

logger = logging.getLogger(__name__)

metadata = MetaData()

# ---- Dimension tables ----
industries = Table(
    "industries", metadata,
    Column("industry_id", Integer, primary_key=True),
    Column("industry_name", String(200), nullable=False),
)

event_types = Table(
    "event_types", metadata,
    Column("event_id", Integer, primary_key=True),
    Column("event_name", String(200), nullable=False),
)

demographics = Table(
    "demographics", metadata,
    Column("demographic_id", Integer, primary_key=True),
    Column("group_name", String(200), nullable=False),
)

age_groups = Table(
    "age_groups", metadata,
    Column("age_group_id", Integer, primary_key=True),
    Column("age_range", String(50), nullable=False),
)

occupations = Table(
    "occupations", metadata,
    Column("occupation_id", Integer, primary_key=True),
    Column("occupation_name", String(200), nullable=False),
)

severity_levels = Table(
    "severity_levels", metadata,
    Column("severity_id", Integer, primary_key=True),
    Column("level_name", String(100), nullable=False),
)

# ---- Fact tables ----
fatal_accidents = Table(
    "fatal_accidents", metadata,
    Column("accident_id", Integer, primary_key=True),
    Column("year", Integer, nullable=False, index=True),
    Column("industry_id", Integer, ForeignKey("industries.industry_id")),
    Column("event_id", Integer, ForeignKey("event_types.event_id")),
    Column("demographic_id", Integer, ForeignKey("demographics.demographic_id")),
    Column("age_group_id", Integer, ForeignKey("age_groups.age_group_id")),
    Column("occupation_id", Integer, ForeignKey("occupations.occupation_id")),
    Column("severity_id", Integer, ForeignKey("severity_levels.severity_id")),
    Column("gender", String(20)),
)

non_fatal_accidents = Table(
    "non_fatal_accidents", metadata,
    Column("accident_id", Integer, primary_key=True),
    Column("year", Integer, nullable=False, index=True),
    Column("industry_id", Integer, ForeignKey("industries.industry_id")),
    Column("event_id", Integer, ForeignKey("event_types.event_id")),
    Column("demographic_id", Integer, ForeignKey("demographics.demographic_id")),
    Column("age_group_id", Integer, ForeignKey("age_groups.age_group_id")),
    Column("occupation_id", Integer, ForeignKey("occupations.occupation_id")),
    Column("severity_id", Integer, ForeignKey("severity_levels.severity_id")),
    Column("gender", String(20)),
    Column("days_lost", Integer, nullable=False, default=0),
)


class AccidentStore:
    """
    Thin wrapper around a SQLAlchemy engine.

    The engine owns the connection pool and is shared by every request;
    each ``execute`` call checks a connection out for one statement.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    @classmethod
    def from_url(cls, database_url: str, **engine_kwargs) -> "AccidentStore":
        engine = create_engine(database_url, future=True, **engine_kwargs)
        logger.info(f"Aggregation store configured ({engine.url.get_backend_name()})")
        return cls(engine)

    def execute(self, statement: str, bindings: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """Run one read-only statement and return its rows as plain dicts."""
        try:
            with self.engine.connect() as conn:
                result = conn.execute(text(statement), dict(bindings or {}))
                return [dict(row) for row in result.mappings()]
        except SQLAlchemyError as e:
            logger.error(f"Store query failed: {e}")
            raise UpstreamQueryError(str(e)) from e

    def create_schema(self):
        metadata.create_all(self.engine)
        logger.info("Store schema created (existing tables left untouched)")

    def dispose(self):
        self.engine.dispose()
