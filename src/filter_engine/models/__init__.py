"""Models package for the filter engine."""

from filter_engine.models.filters import (
    FilterCondition,
    FilterGroup,
    FilterNode,
    SortKey,
    parse_filters,
)
from filter_engine.models.query import (
    CompiledQuery,
    ListParams,
    ListResult,
    Pagination,
    PaginationWindow,
)
from filter_engine.models.resource import (
    Relation,
    RelationField,
    RelationKind,
    ResourceDescriptor,
    ResourceField,
    SearchField,
)

__all__ = [
    "CompiledQuery",
    "FilterCondition",
    "FilterGroup",
    "FilterNode",
    "ListParams",
    "ListResult",
    "Pagination",
    "PaginationWindow",
    "Relation",
    "RelationField",
    "RelationKind",
    "ResourceDescriptor",
    "ResourceField",
    "SearchField",
    "SortKey",
    "parse_filters",
]
