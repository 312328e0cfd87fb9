"""
Catalog of the aggregation queries behind every chart.

Each (category, dimension) pair maps to one ``QueryDefinition`` holding two
statements: the single-year one, bound to ``:year``, and the year-grouped
one used by the multi-year view. Both are generated from the same
dimension description so the two views always agree on labels, joins and
ordering.

The catalog is built once at import time and exposed read-only.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, NamedTuple, Optional, Tuple

FATAL = "fatal"
NON_FATAL = "non-fatal"

FACT_TABLES = {
    FATAL: ("fatal_accidents", "f"),
    NON_FATAL: ("non_fatal_accidents", "n"),
}

# Public dimension keys, in the order the dashboard offers them
CATEGORY_DIMENSIONS = MappingProxyType({
    FATAL: ("industry", "accident-type", "demographic", "occupation",
            "age", "gender", "severity"),
    NON_FATAL: ("age", "gender", "industry", "severity", "occupation",
                "days-lost", "event-type"),
})

# Client-facing keys mapped to the store's name for the same dimension
DIMENSION_ALIASES = MappingProxyType({
    "accident-type": "event-type",
})

UNSPECIFIED_LABEL = "Unspecified"

# (upper bound in days, label); the last bucket is open-ended
DAYS_LOST_BUCKETS = (
    (3, "1-3 days"),
    (7, "4-7 days"),
    (14, "8-14 days"),
    (30, "15-30 days"),
    (None, "More than 30 days"),
)


def _days_lost_case(alias: str, ranked: bool) -> str:
    whens = []
    fallback = None
    for rank, (upper, label) in enumerate(DAYS_LOST_BUCKETS, start=1):
        result = str(rank) if ranked else f"'{label}'"
        if upper is None:
            fallback = result
        else:
            whens.append(f"WHEN {alias}.days_lost <= {upper} THEN {result}")
    return f"CASE {' '.join(whens)} ELSE {fallback} END"


class _Dimension(NamedTuple):
    """How one dimension is labelled, joined, grouped and ordered.

    ``{t}`` in any fragment is replaced by the fact table alias. An empty
    ``order_by`` means descending count.
    """
    label: str
    joins: Tuple[str, ...] = ()
    group_by: Tuple[str, ...] = ()
    order_by: str = ""
    filters: Tuple[str, ...] = ()


_INDUSTRY = _Dimension(
    label="i.industry_name",
    joins=("JOIN industries i ON {t}.industry_id = i.industry_id",),
    group_by=("i.industry_name",),
)
_EVENT_TYPE = _Dimension(
    label="e.event_name",
    joins=("JOIN event_types e ON {t}.event_id = e.event_id",),
    group_by=("e.event_name",),
)
_DEMOGRAPHIC = _Dimension(
    label="d.group_name",
    joins=("JOIN demographics d ON {t}.demographic_id = d.demographic_id",),
    group_by=("d.group_name",),
)
_OCCUPATION = _Dimension(
    label="o.occupation_name",
    joins=("JOIN occupations o ON {t}.occupation_id = o.occupation_id",),
    group_by=("o.occupation_name",),
)
_AGE = _Dimension(
    label="a.age_range",
    joins=("JOIN age_groups a ON {t}.age_group_id = a.age_group_id",),
    group_by=("a.age_range", "a.age_group_id"),
    order_by="a.age_group_id",
)

_DIMENSIONS: Dict[str, Dict[str, _Dimension]] = {
    FATAL: {
        "industry": _INDUSTRY,
        "event-type": _EVENT_TYPE,
        "demographic": _DEMOGRAPHIC,
        "occupation": _OCCUPATION,
        "age": _AGE,
        # nulls are kept and shown under a sentinel label
        "gender": _Dimension(
            label=f"CASE WHEN {{t}}.gender IS NULL THEN '{UNSPECIFIED_LABEL}' ELSE {{t}}.gender END",
            group_by=("{t}.gender",),
        ),
        # every fatal accident has the same severity
        "severity": _Dimension(label="'Fatal'"),
    },
    NON_FATAL: {
        "age": _AGE,
        "gender": _Dimension(
            label="{t}.gender",
            group_by=("{t}.gender",),
            filters=("{t}.gender IS NOT NULL",),
        ),
        "industry": _INDUSTRY,
        "severity": _Dimension(
            label="s.level_name",
            joins=("JOIN severity_levels s ON {t}.severity_id = s.severity_id",),
            group_by=("s.level_name", "s.severity_id"),
            order_by="s.severity_id",
        ),
        "occupation": _OCCUPATION,
        "days-lost": _Dimension(
            label=_days_lost_case("{t}", ranked=False),
            group_by=(_days_lost_case("{t}", ranked=False), _days_lost_case("{t}", ranked=True)),
            order_by=_days_lost_case("{t}", ranked=True),
        ),
        "event-type": _EVENT_TYPE,
    },
}


@dataclass(frozen=True)
class QueryDefinition:
    category: str
    dimension: str
    single_year: str
    multi_year: str

    def statement(self, multi_year: bool = False) -> str:
        return self.multi_year if multi_year else self.single_year

    def bindings(self, year: Optional[int] = None, multi_year: bool = False) -> Dict[str, int]:
        if multi_year:
            return {}
        return {"year": year}


def _build_statement(table: str, alias: str, dim: _Dimension, multi_year: bool) -> str:
    def fmt(fragment):
        return fragment.replace("{t}", alias)

    columns = [f"{fmt(dim.label)} AS label"]
    if multi_year:
        columns.append(f"{alias}.year AS year")
    columns.append("COUNT(*) AS value")

    where = [fmt(f) for f in dim.filters]
    if not multi_year:
        where.insert(0, f"{alias}.year = :year")

    group_by = [fmt(g) for g in dim.group_by]
    # grouping by year also keeps constant-label dimensions from returning
    # a zero-count row for years without accidents
    if multi_year or not group_by:
        group_by.append(f"{alias}.year")

    order_by = [f"{alias}.year"] if multi_year else []
    order_by.append(fmt(dim.order_by) if dim.order_by else "COUNT(*) DESC")

    lines = [f"SELECT {', '.join(columns)}", f"FROM {table} {alias}"]
    lines.extend(fmt(j) for j in dim.joins)
    if where:
        lines.append(f"WHERE {' AND '.join(where)}")
    lines.append(f"GROUP BY {', '.join(group_by)}")
    lines.append(f"ORDER BY {', '.join(order_by)}")
    return "\n".join(lines)


class QueryCatalog:
    """Immutable (category, dimension) -> ``QueryDefinition`` lookup table."""

    def __init__(self, entries: Mapping[str, Mapping[str, QueryDefinition]],
                 dimensions: Mapping[str, Tuple[str, ...]] = CATEGORY_DIMENSIONS,
                 aliases: Mapping[str, str] = DIMENSION_ALIASES):
        self._entries = MappingProxyType({
            category: MappingProxyType(dict(by_dimension))
            for category, by_dimension in entries.items()
        })
        self._dimensions = dimensions
        self._aliases = aliases

    @classmethod
    def build(cls) -> "QueryCatalog":
        entries = {}
        for category, by_dimension in _DIMENSIONS.items():
            table, alias = FACT_TABLES[category]
            entries[category] = {
                name: QueryDefinition(
                    category=category,
                    dimension=name,
                    single_year=_build_statement(table, alias, dim, multi_year=False),
                    multi_year=_build_statement(table, alias, dim, multi_year=True),
                )
                for name, dim in by_dimension.items()
            }
        return cls(entries)

    def categories(self) -> Tuple[str, ...]:
        return tuple(self._entries)

    def valid_dimensions(self, category: str) -> Tuple[str, ...]:
        return tuple(self._dimensions.get(category, ()))

    def normalize_dimension(self, dimension: Optional[str]) -> Optional[str]:
        return self._aliases.get(dimension, dimension)

    def lookup(self, category: str, dimension: str) -> Optional[QueryDefinition]:
        """
        Return the query for the pair, or None when the pair is unknown.

        Only the public keys of the category are accepted; an alias is
        resolved to the store's name after that check.
        """
        by_dimension = self._entries.get(category)
        if by_dimension is None or dimension not in self.valid_dimensions(category):
            return None
        return by_dimension.get(self.normalize_dimension(dimension))


CATALOG = QueryCatalog.build()

# ---- Fixed statements outside the dimension table ----
YEARS_QUERY = """
SELECT DISTINCT year
FROM (
    SELECT year FROM fatal_accidents
    UNION
    SELECT year FROM non_fatal_accidents
) AS years
ORDER BY year DESC"""

SUMMARY_QUERY = """
SELECT 'Fatal' AS type, COUNT(*) AS count
FROM fatal_accidents WHERE year = :year
UNION ALL
SELECT 'Non-fatal' AS type, COUNT(*) AS count
FROM non_fatal_accidents WHERE year = :year"""

SUMMARY_TYPES = MappingProxyType({
    "Fatal": "fatal",
    "Non-fatal": "nonFatal",
})

FILTER_OPTION_QUERIES = MappingProxyType({
    "industries": "SELECT industry_id AS value, industry_name AS label FROM industries ORDER BY industry_name",
    "events": "SELECT event_id AS value, event_name AS label FROM event_types ORDER BY event_name",
    "demographics": "SELECT demographic_id AS value, group_name AS label FROM demographics ORDER BY group_name",
    "ageGroups": "SELECT age_group_id AS value, age_range AS label FROM age_groups ORDER BY age_group_id",
    "occupations": "SELECT occupation_id AS value, occupation_name AS label FROM occupations ORDER BY occupation_name",
    "severities": "SELECT severity_id AS value, level_name AS label FROM severity_levels ORDER BY severity_id",
})
