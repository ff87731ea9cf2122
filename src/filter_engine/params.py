"""Request parameter extraction, pagination clamping and the free-text search clause."""

import math
import re
from typing import Any, Mapping, Optional

from filter_engine.conditions import ConditionCompiler
from filter_engine.models.filters import FilterCondition, parse_filters
from filter_engine.models.predicate import ALWAYS, Predicate, disjunction
from filter_engine.models.query import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, ListParams
from filter_engine.models.resource import ResourceDescriptor
from filter_engine.models.types import FieldType, FilterOperator

_LEADING_INT = re.compile(r"^\s*([-+]?\d+)")


def parse_int(value: Any) -> Optional[int]:
    """Lenient integer parsing: ``"3"``, ``"3abc"`` and ``3.7`` all give 3; junk gives None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value == value and abs(value) != float("inf") else None
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def clamp_page(page: Any) -> int:
    return max(1, parse_int(page) or 1)


def clamp_limit(limit: Any, default_limit: int = DEFAULT_PAGE_LIMIT, max_limit: int = MAX_PAGE_LIMIT) -> int:
    return max(1, min(max_limit, parse_int(limit) or default_limit))


def _first_int(*values: Any) -> Optional[int]:
    # Zero counts as absent, like a missing value
    for value in values:
        parsed = parse_int(value)
        if parsed:
            return parsed
    return None


def extract_params(
    body: Optional[Mapping[str, Any]] = None,
    query: Optional[Mapping[str, Any]] = None,
    default_limit: int = DEFAULT_PAGE_LIMIT,
    max_limit: int = MAX_PAGE_LIMIT,
) -> ListParams:
    """Normalize list parameters from a request body with query-string fallback.

    Malformed values never raise: page floors to 1, limit clamps to
    ``[1, max_limit]`` and an empty search is dropped.
    """
    body = body or {}
    query = query or {}

    raw_search = body.get("search", query.get("search"))
    search = raw_search.strip() if isinstance(raw_search, str) else None

    return ListParams(
        filters=parse_filters(body.get("filters")),
        search=search or None,
        page=clamp_page(_first_int(body.get("page"), query.get("page"))),
        limit=clamp_limit(_first_int(body.get("limit"), query.get("limit")), default_limit, max_limit),
        order_by=body.get("orderBy") or body.get("order_by"),
    )


def _is_numeric(text: str) -> bool:
    try:
        return math.isfinite(float(text))
    except ValueError:
        return False


def build_search_predicate(search: Optional[str], resource: ResourceDescriptor, compiler: ConditionCompiler) -> Predicate:
    """OR over the resource's search whitelist.

    Text fields use a case-insensitive ``contains``; numeric fields are matched by
    equality and only when the search text is itself numeric.
    """
    if not search or not search.strip():
        return ALWAYS
    search = search.strip()

    clauses = []
    for search_field in resource.search_fields:
        if search_field.numeric:
            if not _is_numeric(search):
                continue
            number = float(search)
            condition = FilterCondition(
                key=search_field.key,
                field_type=FieldType.INT if number.is_integer() else FieldType.FLOAT,
                operator=FilterOperator.EQ.value,
                value=int(number) if number.is_integer() else number,
            )
        else:
            condition = FilterCondition(
                key=search_field.key,
                field_type=FieldType.STRING,
                operator=FilterOperator.CONTAINS.value,
                value=search,
            )
        clauses.append(compiler.compile(condition))

    return disjunction(*clauses)
