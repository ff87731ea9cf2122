"""List request, compiled query and result models."""

import math
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field

from filter_engine.models.filters import FilterNode
from filter_engine.models.predicate import ALWAYS, MembershipMarker

MAX_PAGE_LIMIT = 1000
DEFAULT_PAGE_LIMIT = 20

# Nested ordering: {"assignedToUser": {"name": "desc"}}, or a list of such for multi-key sorts
OrderSpec = Union[Dict[str, Any], List[Dict[str, Any]]]


class PaginationWindow(BaseModel):
    """Page/limit window handed to the store adapter."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class Pagination(BaseModel):
    """Pagination block of a list response."""

    page: int
    limit: int
    total: int

    @computed_field
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)

    def to_dict(self) -> dict:
        return {"page": self.page, "limit": self.limit, "total": self.total, "totalPages": self.total_pages}


class ListParams(BaseModel):
    """Normalized list parameters."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    filters: Optional[FilterNode] = None
    search: Optional[str] = None
    page: int = 1
    limit: int = DEFAULT_PAGE_LIMIT
    order_by: Any = None

    @property
    def window(self) -> PaginationWindow:
        return PaginationWindow(page=self.page, limit=self.limit)


class CompiledQuery(BaseModel):
    """Output of the synchronous compile pipeline.

    ``where`` is the residual predicate with membership markers removed; ``markers``
    must be resolved (one lookup round trip) before the store is queried.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    where: Any = ALWAYS
    order_by: Any = None
    window: PaginationWindow = Field(default_factory=PaginationWindow)
    markers: List[MembershipMarker] = Field(default_factory=list)


class ListResult(BaseModel):
    """Produced surface of a list call: ``{data, pagination}``."""

    data: List[Dict[str, Any]] = Field(default_factory=list)
    pagination: Pagination

    def to_dict(self) -> dict:
        return {"data": self.data, "pagination": self.pagination.to_dict()}
