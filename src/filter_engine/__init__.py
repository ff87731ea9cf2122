"""Filter-to-query engine package."""

from filter_engine.dates import DateResolver
from filter_engine.exceptions import (
    DatabaseError,
    FilterEngineError,
    UnknownResourceError,
    UnresolvedMembershipError,
)
from filter_engine.listing import QueryCompiler, ResourceLister
from filter_engine.models import ListResult, ResourceDescriptor

__all__ = [
    # Main classes
    "DateResolver",
    "QueryCompiler",
    "ResourceLister",
    # Models
    "ListResult",
    "ResourceDescriptor",
    # Exceptions
    "DatabaseError",
    "FilterEngineError",
    "UnknownResourceError",
    "UnresolvedMembershipError",
]
