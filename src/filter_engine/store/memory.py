"""In-memory store adapter and association lookup.

Evaluates compiled predicates directly against lists of dict records. Used by
tests and for local runs without a database. Null handling follows relational
semantics: a comparison against a missing value is false, so ``ne`` and
``notIn`` never match records where the field is null.
"""

from copy import deepcopy
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

import pytz

from filter_engine.exceptions import UnresolvedMembershipError
from filter_engine.models.predicate import (
    Always,
    And,
    Exists,
    FieldPredicate,
    MembershipMarker,
    Not,
    Or,
    Predicate,
    Related,
)
from filter_engine.models.query import OrderSpec, PaginationWindow
from filter_engine.models.types import TEXT_MATCH_OPERATORS, FilterOperator, SortDirection
from filter_engine.sort import flatten_order
from filter_engine.store.base import AssociationLookup, StoreAdapter


def _comparable(value: Any) -> Any:
    """Bring dates and naive datetimes onto aware UTC datetimes so they compare."""
    if isinstance(value, datetime):
        return value if value.tzinfo else pytz.UTC.localize(value)
    if isinstance(value, date):
        return pytz.UTC.localize(datetime(value.year, value.month, value.day))
    return value


def _text(value: Any, case_sensitive: bool) -> str:
    text = str(value)
    return text if case_sensitive else text.lower()


def _compare(operator: FilterOperator, actual: Any, expected: Any) -> bool:
    if operator == FilterOperator.IS_NULL:
        return actual is None
    if operator == FilterOperator.IS_NOT_NULL:
        return actual is not None
    if operator == FilterOperator.EQ and expected is None:
        return actual is None
    if operator == FilterOperator.NE and expected is None:
        return actual is not None
    if actual is None:
        return False

    actual = _comparable(actual)
    if operator == FilterOperator.IN:
        return actual in tuple(_comparable(v) for v in expected)
    if operator == FilterOperator.NOT_IN:
        return actual not in tuple(_comparable(v) for v in expected)

    expected = _comparable(expected)
    try:
        if operator == FilterOperator.EQ:
            return actual == expected
        if operator == FilterOperator.NE:
            return actual != expected
        if operator == FilterOperator.GT:
            return actual > expected
        if operator == FilterOperator.GTE:
            return actual >= expected
        if operator == FilterOperator.LT:
            return actual < expected
        if operator == FilterOperator.LTE:
            return actual <= expected
    except TypeError:
        return False
    raise ValueError(f"Unsupported operator for in-memory evaluation: {operator}")


def _match_text(predicate: FieldPredicate, actual: Any) -> bool:
    if actual is None:
        return False
    haystack = _text(actual, predicate.case_sensitive)
    needle = _text(predicate.value, predicate.case_sensitive)
    if predicate.operator == FilterOperator.CONTAINS:
        return needle in haystack
    if predicate.operator == FilterOperator.STARTS_WITH:
        return haystack.startswith(needle)
    return haystack.endswith(needle)


def matches(predicate: Predicate, record: Dict[str, Any]) -> bool:
    """Evaluate a compiled predicate against one record."""
    if isinstance(predicate, Always):
        return True
    if isinstance(predicate, FieldPredicate):
        actual = record.get(predicate.field)
        if predicate.operator in TEXT_MATCH_OPERATORS:
            return _match_text(predicate, actual)
        return _compare(predicate.operator, actual, predicate.value)
    if isinstance(predicate, Related):
        related = record.get(predicate.relation)
        if isinstance(related, dict):
            return matches(predicate.predicate, related)
        return False
    if isinstance(predicate, Exists):
        related = record.get(predicate.relation) or []
        return any(matches(predicate.predicate, item) for item in related if isinstance(item, dict))
    if isinstance(predicate, And):
        return all(matches(child, record) for child in predicate.children)
    if isinstance(predicate, Or):
        return any(matches(child, record) for child in predicate.children)
    if isinstance(predicate, Not):
        return not matches(predicate.child, record)
    if isinstance(predicate, MembershipMarker):
        raise UnresolvedMembershipError(f"Membership filter on '{predicate.relation}.{predicate.field}' was not resolved")
    raise TypeError(f"Unknown predicate node: {type(predicate).__name__}")


def _get_path(record: Dict[str, Any], path: str) -> Any:
    value: Any = record
    for segment in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(segment)
    return value


def sort_records(records: List[Dict[str, Any]], order_by: OrderSpec) -> List[Dict[str, Any]]:
    """Multi-key stable sort; nulls sort last ascending and first descending."""
    ordered = list(records)
    for path, direction in reversed(flatten_order(order_by)):
        present = [r for r in ordered if _get_path(r, path) is not None]
        missing = [r for r in ordered if _get_path(r, path) is None]
        reverse = direction == SortDirection.DESC
        present.sort(key=lambda r: _comparable(_get_path(r, path)), reverse=reverse)
        ordered = missing + present if reverse else present + missing
    return ordered


class InMemoryStore(StoreAdapter):
    """Store adapter over ``{record_type: [record, ...]}``."""

    def __init__(self, collections: Optional[Dict[str, List[Dict[str, Any]]]] = None) -> None:
        self.collections: Dict[str, List[Dict[str, Any]]] = collections or {}

    def add(self, record_type: str, *records: Dict[str, Any]) -> None:
        self.collections.setdefault(record_type, []).extend(records)

    async def find(
        self,
        record_type: str,
        where: Predicate,
        order_by: OrderSpec,
        window: PaginationWindow,
    ) -> Tuple[List[Dict[str, Any]], int]:
        records = self.collections.get(record_type, [])
        matched = [record for record in records if matches(where, record)]
        ordered = sort_records(matched, order_by)
        page = ordered[window.offset : window.offset + window.limit]
        return [deepcopy(record) for record in page], len(matched)


class InMemoryAssociationLookup(AssociationLookup):
    """Association lookup over in-memory ``groups`` and ``group_items`` rows.

    Group rows carry ``id`` and ``name``; item rows carry ``groupId``, ``itemType``
    and a string ``itemId``.
    """

    def __init__(self, groups: Optional[List[Dict[str, Any]]] = None, group_items: Optional[List[Dict[str, Any]]] = None) -> None:
        self.groups = groups or []
        self.group_items = group_items or []

    async def find_group_ids(self, names: Optional[Iterable[str]] = None, name_contains: Optional[str] = None) -> Set[Any]:
        wanted = set(names or [])
        fragment = name_contains.lower() if name_contains else None
        found = set()
        for group in self.groups:
            name = group.get("name") or ""
            if name in wanted or (fragment and fragment in name.lower()):
                found.add(group["id"])
        return found

    async def find_item_ids(self, group_ids: Iterable[Any], item_type: str) -> Set[Any]:
        wanted = set(group_ids)
        return {row["itemId"] for row in self.group_items if row["groupId"] in wanted and row["itemType"] == item_type}
