"""Backend-agnostic compiled predicate tree.

The compiler produces these nodes and storage adapters consume them. Nodes are
immutable; every resolution stage returns a rewritten tree.
"""

from dataclasses import dataclass
from typing import Any, Tuple, Union

from filter_engine.models.types import TEXT_MATCH_OPERATORS, FilterOperator


@dataclass(frozen=True)
class Always:
    """No constraint. Matches every record."""


ALWAYS = Always()


@dataclass(frozen=True)
class FieldPredicate:
    """Comparison against a field of the current record.

    ``operator`` is never ``between``; ranges compile to an ``And`` of two bounds.
    An ``in`` predicate with an empty value matches nothing.
    """

    field: str
    operator: FilterOperator
    value: Any = None
    case_sensitive: bool = True


@dataclass(frozen=True)
class Related:
    """Nested-object navigation into a to-one relation."""

    relation: str
    predicate: "Predicate"


@dataclass(frozen=True)
class Exists:
    """At least one record of a to-many relation satisfies the inner predicate."""

    relation: str
    predicate: "Predicate"


@dataclass(frozen=True)
class And:
    children: Tuple["Predicate", ...]


@dataclass(frozen=True)
class Or:
    children: Tuple["Predicate", ...]


@dataclass(frozen=True)
class Not:
    child: "Predicate"


@dataclass(frozen=True)
class MembershipMarker:
    """Placeholder for a filter on a polymorphic group association.

    Removed by the membership pass and replaced with an ``id`` constraint.
    """

    relation: str
    field: str
    operator: FilterOperator
    value: Any = None


Predicate = Union[Always, FieldPredicate, Related, Exists, And, Or, Not, MembershipMarker]


def is_always(predicate: Predicate) -> bool:
    return isinstance(predicate, Always)


def conjunction(*predicates: Predicate) -> Predicate:
    """AND-combine predicates, dropping empty ones and collapsing singletons."""
    children = tuple(p for p in predicates if not is_always(p))
    if not children:
        return ALWAYS
    if len(children) == 1:
        return children[0]
    return And(children)


def disjunction(*predicates: Predicate) -> Predicate:
    """OR-combine predicates, dropping empty ones and collapsing singletons."""
    children = tuple(p for p in predicates if not is_always(p))
    if not children:
        return ALWAYS
    if len(children) == 1:
        return children[0]
    return Or(children)


def negation(predicate: Predicate) -> Predicate:
    # NOT of no constraint stays no constraint
    if is_always(predicate):
        return ALWAYS
    return Not(predicate)


def to_dict(predicate: Predicate) -> Any:
    """Render a predicate as plain data for logging and API debugging."""
    if isinstance(predicate, Always):
        return {}
    if isinstance(predicate, FieldPredicate):
        body = {"op": predicate.operator.value, "value": _plain(predicate.value)}
        if predicate.operator in TEXT_MATCH_OPERATORS:
            body["caseSensitive"] = predicate.case_sensitive
        return {predicate.field: body}
    if isinstance(predicate, Related):
        return {predicate.relation: to_dict(predicate.predicate)}
    if isinstance(predicate, Exists):
        return {predicate.relation: {"some": to_dict(predicate.predicate)}}
    if isinstance(predicate, And):
        return {"AND": [to_dict(child) for child in predicate.children]}
    if isinstance(predicate, Or):
        return {"OR": [to_dict(child) for child in predicate.children]}
    if isinstance(predicate, Not):
        return {"NOT": to_dict(predicate.child)}
    if isinstance(predicate, MembershipMarker):
        return {"__membership": {"relation": predicate.relation, "field": predicate.field, "op": predicate.operator.value, "value": _plain(predicate.value)}}
    raise TypeError(f"Unknown predicate node: {type(predicate).__name__}")


def _plain(value: Any) -> Any:
    if isinstance(value, tuple):
        return [_plain(v) for v in value]
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value
