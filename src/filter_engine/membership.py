"""Second-pass resolution of polymorphic group membership filters.

Group membership is stored as (group id, item type, item id) rows, so it cannot
be compiled into a typed relation. The compiler leaves ``MembershipMarker`` nodes
in the predicate tree; this module pulls them out, resolves them to a set of
item ids through an association lookup and intersects that set back in as an
``id`` constraint.
"""

from typing import Any, Iterable, List, Optional, Set, Tuple

from filter_engine.models.predicate import (
    ALWAYS,
    And,
    Exists,
    FieldPredicate,
    MembershipMarker,
    Not,
    Or,
    Predicate,
    Related,
    conjunction,
    disjunction,
    is_always,
    negation,
)
from filter_engine.models.types import FilterOperator
from utils.logging import logger

ID_FIELD = "id"


def extract_membership_markers(predicate: Predicate) -> Tuple[List[MembershipMarker], Predicate]:
    """Walk the tree depth-first and pull out every membership marker.

    Markers are replaced with ``ALWAYS`` in place and the surrounding structure is
    re-collapsed; all other nodes are returned untouched.
    """
    markers: List[MembershipMarker] = []
    residual = _extract(predicate, markers)
    return markers, residual


def _extract(predicate: Predicate, markers: List[MembershipMarker]) -> Predicate:
    if isinstance(predicate, MembershipMarker):
        markers.append(predicate)
        return ALWAYS
    if isinstance(predicate, And):
        return conjunction(*(_extract(child, markers) for child in predicate.children))
    if isinstance(predicate, Or):
        return disjunction(*(_extract(child, markers) for child in predicate.children))
    if isinstance(predicate, Not):
        return negation(_extract(predicate.child, markers))
    if isinstance(predicate, Related):
        inner = _extract(predicate.predicate, markers)
        return ALWAYS if is_always(inner) else Related(predicate.relation, inner)
    if isinstance(predicate, Exists):
        inner = _extract(predicate.predicate, markers)
        return ALWAYS if is_always(inner) else Exists(predicate.relation, inner)
    return predicate


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def _coerce_id(value: Any) -> Any:
    """Item ids are stored as strings in the association table; numeric ones become ints."""
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    return value


class MembershipResolver:
    """Resolves membership markers to candidate item ids via an association lookup."""

    def __init__(self, lookup) -> None:
        self.lookup = lookup

    def collect_group_ids(self, markers: Iterable[MembershipMarker]) -> Tuple[Set[Any], List[str], List[str]]:
        """Split marker constraints into direct ids, exact names and name fragments."""
        group_ids: Set[Any] = set()
        names: List[str] = []
        fragments: List[str] = []

        for marker in markers:
            if marker.field == ID_FIELD and marker.operator in (FilterOperator.EQ, FilterOperator.IN):
                group_ids.update(_coerce_id(v) for v in _as_list(marker.value))
            elif marker.field == "name" and marker.operator in (FilterOperator.EQ, FilterOperator.IN):
                names.extend(str(v) for v in _as_list(marker.value))
            elif marker.field == "name" and marker.operator == FilterOperator.CONTAINS and marker.value:
                fragments.append(str(marker.value))
            else:
                logger.debug(f"Ignoring unsupported membership constraint {marker.field} {marker.operator.value}")

        return group_ids, names, fragments

    async def resolve(self, markers: List[MembershipMarker], item_type: str) -> Set[Any]:
        """Return the deduplicated ids of ``item_type`` items in any matching group."""
        group_ids, names, fragments = self.collect_group_ids(markers)

        if names:
            group_ids.update(await self.lookup.find_group_ids(names=names))
        for fragment in fragments:
            group_ids.update(await self.lookup.find_group_ids(name_contains=fragment))

        if not group_ids:
            logger.debug("No groups matched membership filters")
            return set()

        item_ids = await self.lookup.find_item_ids(group_ids, item_type)
        resolved = {_coerce_id(item_id) for item_id in item_ids}
        logger.debug(f"Resolved {len(resolved)} {item_type} item(s) from {len(group_ids)} group(s)")
        return resolved


def _intersect(existing: FieldPredicate, ids: Set[Any]) -> Optional[FieldPredicate]:
    """Intersect an existing top-level ``id`` constraint with the resolved set."""
    if existing.field != ID_FIELD:
        return None
    if existing.operator == FilterOperator.EQ:
        if existing.value in ids:
            return existing
        return FieldPredicate(ID_FIELD, FilterOperator.IN, ())
    if existing.operator == FilterOperator.IN:
        return FieldPredicate(ID_FIELD, FilterOperator.IN, tuple(v for v in existing.value if v in ids))
    return None


def apply_membership(residual: Predicate, ids: Set[Any]) -> Predicate:
    """Constrain ``id`` to the resolved set.

    An empty set yields ``id in ()``, which matches nothing.
    """
    if isinstance(residual, FieldPredicate):
        intersected = _intersect(residual, ids)
        if intersected is not None:
            return intersected

    if isinstance(residual, And):
        children = list(residual.children)
        for index, child in enumerate(children):
            if isinstance(child, FieldPredicate):
                intersected = _intersect(child, ids)
                if intersected is not None:
                    children[index] = intersected
                    return conjunction(*children)

    return conjunction(residual, FieldPredicate(ID_FIELD, FilterOperator.IN, tuple(sorted(ids, key=lambda v: (isinstance(v, str), v)))))
