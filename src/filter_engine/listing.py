"""End-to-end list pipeline: compile, resolve membership, fetch, paginate."""

from typing import Any, Mapping, Optional

from filter_engine.conditions import ConditionCompiler
from filter_engine.dates import DateResolver
from filter_engine.membership import MembershipResolver, apply_membership, extract_membership_markers
from filter_engine.models.filters import parse_filters
from filter_engine.models.predicate import FieldPredicate, Predicate, conjunction
from filter_engine.models.query import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, CompiledQuery, ListParams, ListResult, Pagination
from filter_engine.models.resource import ResourceDescriptor
from filter_engine.models.types import FilterOperator
from filter_engine.params import build_search_predicate, clamp_limit, clamp_page, extract_params
from filter_engine.sort import build_sort_clause
from filter_engine.store.base import AssociationLookup, StoreAdapter
from filter_engine.where import WhereBuilder, merge_predicates
from utils.logging import logger

SOFT_DELETE_FIELD = "deleted"


class QueryCompiler:
    """Synchronous part of the pipeline; performs no I/O."""

    def __init__(self, resource: ResourceDescriptor, date_resolver: Optional[DateResolver] = None) -> None:
        self.resource = resource
        self.condition_compiler = ConditionCompiler(resource, date_resolver)
        self.where_builder = WhereBuilder(self.condition_compiler)

    def compile(self, params: ListParams) -> CompiledQuery:
        filter_predicate = self.where_builder.build(params.filters)
        search_predicate = build_search_predicate(params.search, self.resource, self.condition_compiler)

        # Search and filters are independent axes, always AND-ed
        where = merge_predicates(filter_predicate, search_predicate)
        markers, residual = extract_membership_markers(where)

        default_key, default_direction = self.resource.default_sort
        order_by = build_sort_clause(params.order_by, default_key, default_direction)

        return CompiledQuery(where=residual, order_by=order_by, window=params.window, markers=markers)


class ResourceLister:
    """Single list entry point for one resource.

    Membership resolution (when the filters reference groups) is one lookup
    round trip that completes before the store is queried. Store failures
    propagate unchanged.
    """

    def __init__(
        self,
        resource: ResourceDescriptor,
        store: StoreAdapter,
        lookup: Optional[AssociationLookup] = None,
        date_resolver: Optional[DateResolver] = None,
        default_limit: int = DEFAULT_PAGE_LIMIT,
        max_limit: int = MAX_PAGE_LIMIT,
    ) -> None:
        self.resource = resource
        self.store = store
        self.lookup = lookup
        self.query_compiler = QueryCompiler(resource, date_resolver)
        self.default_limit = default_limit
        self.max_limit = max_limit

    async def list(
        self,
        filters: Any = None,
        search: Optional[str] = None,
        order_by: Any = None,
        page: Any = None,
        limit: Any = None,
    ) -> ListResult:
        """List records from raw (unvalidated) parameters."""
        params = ListParams(
            filters=parse_filters(filters),
            search=(search.strip() or None) if isinstance(search, str) else None,
            page=clamp_page(page),
            limit=clamp_limit(limit, self.default_limit, self.max_limit),
            order_by=order_by,
        )
        return await self.execute(params)

    async def list_from_request(self, body: Optional[Mapping[str, Any]] = None, query: Optional[Mapping[str, Any]] = None) -> ListResult:
        """List records from a request body with query-string fallback."""
        return await self.execute(extract_params(body, query, self.default_limit, self.max_limit))

    async def execute(self, params: ListParams) -> ListResult:
        compiled = self.query_compiler.compile(params)
        where = await self.resolve_where(compiled)

        logger.info(
            f"Listing {self.resource.name}: page {compiled.window.page}, limit {compiled.window.limit}, "
            f"search={params.search!r}, membership filters={len(compiled.markers)}"
        )
        items, total = await self.store.find(self.resource.name, where, compiled.order_by, compiled.window)

        return ListResult(
            data=items,
            pagination=Pagination(page=compiled.window.page, limit=compiled.window.limit, total=total),
        )

    async def resolve_where(self, compiled: CompiledQuery) -> Predicate:
        """Run the membership pass and apply soft delete to the residual predicate."""
        where = compiled.where
        if compiled.markers:
            if self.lookup is None:
                logger.warning(f"No association lookup configured for {self.resource.name}, membership filters match nothing")
                resolved = set()
            else:
                resolved = await MembershipResolver(self.lookup).resolve(compiled.markers, self.resource.item_type)
            where = apply_membership(where, resolved)

        if self.resource.soft_delete:
            where = conjunction(where, FieldPredicate(SOFT_DELETE_FIELD, FilterOperator.EQ, False))
        return where
