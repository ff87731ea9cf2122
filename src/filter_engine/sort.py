"""Sort compilation into nested, relation-aware ordering specs."""

from typing import Any, Dict, List, Tuple

from pydantic import ValidationError

from filter_engine.models.filters import SortKey
from filter_engine.models.query import OrderSpec
from filter_engine.models.types import SortDirection
from utils.logging import logger


def _direction(value: Any, default: SortDirection) -> SortDirection:
    try:
        return SortDirection(str(value).lower())
    except ValueError:
        return default


def nest_sort_key(key: str, direction: SortDirection) -> Dict[str, Any]:
    """``"assignedToUser.name"`` -> ``{"assignedToUser": {"name": "desc"}}``."""
    segments = key.split(".")
    clause: Any = direction.value
    for segment in reversed(segments):
        clause = {segment: clause}
    return clause


def _parse_sort_key(raw: Any, default_direction: SortDirection = SortDirection.ASC) -> SortKey:
    if isinstance(raw, SortKey):
        return raw
    if not isinstance(raw, dict):
        raise ValueError(f"Sort key must be an object, got {type(raw).__name__}")
    data = dict(raw)
    data["direction"] = _direction(data.get("direction"), default_direction)
    try:
        return SortKey.model_validate(data)
    except ValidationError as e:
        raise ValueError(str(e))


def build_sort_clause(order_by: Any, default_key: str = "createdAt", default_direction: Any = SortDirection.DESC) -> OrderSpec:
    """Compile a sort list (or the legacy single ``{field, direction}`` object).

    A list compiles to an ordered list of nested clauses; a legacy object
    compiles to a single nested clause. Absent, empty or unusable input
    compiles to ``{default_key: default_direction}``.
    """
    default_direction = _direction(default_direction, SortDirection.DESC)
    default_clause = nest_sort_key(default_key, default_direction)

    if not order_by:
        return default_clause

    if isinstance(order_by, (list, tuple)):
        clauses = []
        for raw in order_by:
            try:
                sort_key = _parse_sort_key(raw)
            except ValueError as e:
                logger.warning(f"Dropping malformed sort key {raw!r}: {e}")
                continue
            clauses.append(nest_sort_key(sort_key.key, sort_key.direction))
        return clauses or default_clause

    try:
        sort_key = _parse_sort_key(order_by, default_direction)
    except ValueError as e:
        logger.warning(f"Ignoring malformed sort {order_by!r}: {e}")
        return default_clause
    return nest_sort_key(sort_key.key, sort_key.direction)


def flatten_order(order_spec: OrderSpec) -> List[Tuple[str, SortDirection]]:
    """Flatten a nested order spec back into ``(dot_path, direction)`` pairs for adapters."""
    clauses = order_spec if isinstance(order_spec, list) else [order_spec]
    flattened: List[Tuple[str, SortDirection]] = []
    for clause in clauses:
        flattened.extend(_flatten(clause, []))
    return flattened


def _flatten(clause: Any, prefix: List[str]) -> List[Tuple[str, SortDirection]]:
    if not isinstance(clause, dict):
        return [(".".join(prefix), _direction(clause, SortDirection.ASC))]
    pairs = []
    for key, value in clause.items():
        pairs.extend(_flatten(value, prefix + [key]))
    return pairs
