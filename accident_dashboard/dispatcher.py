"""
Request dispatcher: validates one request, picks its catalog query, runs it
against the store and shapes the rows.

The store is injected; anything with an
``execute(statement, bindings) -> list of mappings`` method works, which is
how the tests swap in a fake.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Mapping, Optional

from .catalog import (
    CATALOG,
    FILTER_OPTION_QUERIES,
    SUMMARY_QUERY,
    SUMMARY_TYPES,
    YEARS_QUERY,
    QueryCatalog,
)
from .errors import InvalidCategory, InvalidDimension, InvalidYear, UpstreamQueryError

logger = logging.getLogger(__name__)

YEAR_GUIDANCE = "Pass the year as a query parameter, e.g. ?year=2023"
MIN_YEAR = 1
MAX_YEAR = 9999


def parse_year(raw) -> int:
    """Parse a required year parameter or raise ``InvalidYear``."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise InvalidYear("The year parameter is required and must be a number, e.g. ?year=2023",
                          received=raw, details=YEAR_GUIDANCE)
    if isinstance(raw, bool):
        raise InvalidYear("The year parameter must be a whole number, e.g. ?year=2023",
                          received=raw, details=YEAR_GUIDANCE)
    if isinstance(raw, int):
        year = raw
    else:
        try:
            year = int(str(raw).strip())
        except ValueError:
            raise InvalidYear("The year parameter must be a whole number, e.g. ?year=2023",
                              received=raw, details=YEAR_GUIDANCE) from None
    # larger values overflow the database driver's integer binding
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise InvalidYear(f"The year parameter must be between {MIN_YEAR} and {MAX_YEAR}, e.g. ?year=2023",
                          received=raw, details=YEAR_GUIDANCE)
    return year


def shape_segment(row: Mapping[str, Any]) -> Dict[str, Any]:
    segment = {"label": str(row["label"]), "value": int(row["value"] or 0)}
    if row.get("year") is not None:
        segment["year"] = int(row["year"])
    return segment


class AccidentDispatcher:
    """Entry point for every read the API serves."""

    def __init__(self, store, catalog: QueryCatalog = CATALOG, max_workers: Optional[int] = None):
        self.store = store
        self.catalog = catalog
        self.max_workers = max_workers

    def _resolve(self, category: str, dimension: str):
        categories = self.catalog.categories()
        if category not in categories:
            raise InvalidCategory("Unknown accident type", valid_options=categories, received=category)
        query = self.catalog.lookup(category, dimension)
        if query is None:
            raise InvalidDimension("Unknown segmentation for this accident type",
                                   valid_options=self.catalog.valid_dimensions(category),
                                   received=dimension)
        return query

    def get_segment(self, category: str, dimension: str, year) -> Dict[str, Any]:
        """
        Counts for one year, grouped by one dimension.

        Returns a dict with the echoed ``category``, ``dimension`` and
        ``year``, the row ``count`` and the ``rows`` themselves. Zero rows
        is a valid answer.
        """
        query = self._resolve(category, dimension)
        year = parse_year(year)

        logger.debug(f"Segment query {category}/{query.dimension} for {year}")
        rows = self.store.execute(query.statement(), query.bindings(year))
        segments = [shape_segment(row) for row in rows]
        return {
            "category": category,
            "dimension": dimension,
            "year": year,
            "count": len(segments),
            "rows": segments,
        }

    def get_multi_year(self, category: str, dimension: str) -> List[Dict[str, Any]]:
        """Counts grouped by dimension and year, across all years."""
        query = self._resolve(category, dimension)

        logger.debug(f"Multi-year query {category}/{query.dimension}")
        rows = self.store.execute(query.statement(multi_year=True), query.bindings(multi_year=True))
        return [shape_segment(row) for row in rows]

    def get_summary(self, year) -> Dict[str, int]:
        year = parse_year(year)
        rows = self.store.execute(SUMMARY_QUERY, {"year": year})

        summary = {key: 0 for key in SUMMARY_TYPES.values()}
        for row in rows:
            key = SUMMARY_TYPES.get(row["type"])
            if key is not None:
                summary[key] = int(row["count"] or 0)
        return summary

    def get_years(self) -> List[int]:
        rows = self.store.execute(YEARS_QUERY, {})
        return [int(row["year"]) for row in rows if row["year"] is not None]

    def get_filter_options(self) -> Dict[str, List[Dict[str, Any]]]:
        """
        Every dimension table as ``{value, label}`` options.

        The listings run concurrently; the call fails as a whole if any of
        them fails.
        """
        names = list(FILTER_OPTION_QUERIES)
        workers = self.max_workers or len(names)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(self.store.execute, FILTER_OPTION_QUERIES[name], {}) for name in names]
            results = [future.result() for future in futures]

        return {
            name: [{"value": row["value"], "label": row["label"]} for row in rows]
            for name, rows in zip(names, results)
        }

    def ping(self) -> bool:
        try:
            self.store.execute("SELECT 1", {})
        except UpstreamQueryError:
            return False
        return True
