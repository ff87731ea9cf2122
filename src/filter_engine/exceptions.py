"""Custom exceptions for the filter engine."""


class FilterEngineError(Exception):
    """Base exception for filter engine errors."""

    pass


class UnknownResourceError(FilterEngineError):
    """Raised when a listable resource name is not registered."""

    pass


class UnresolvedMembershipError(FilterEngineError):
    """Raised when a membership marker reaches a store adapter without being resolved."""

    pass


class DatabaseError(FilterEngineError):
    """Raised when a store operation fails."""

    pass
