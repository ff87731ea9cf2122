"""Recursive compilation of filter trees into a single predicate."""

from typing import Any, List, Optional, Union

from filter_engine.conditions import ConditionCompiler
from filter_engine.models.filters import FilterCondition, FilterGroup, FilterNode, parse_filters
from filter_engine.models.predicate import (
    ALWAYS,
    Predicate,
    conjunction,
    disjunction,
    is_always,
    negation,
)
from filter_engine.models.types import ConditionType


class WhereBuilder:
    """Combines leaf and group nodes (and/or/not) into one predicate tree."""

    def __init__(self, condition_compiler: ConditionCompiler) -> None:
        self.condition_compiler = condition_compiler

    def build(self, filters: Union[FilterNode, List[Any], dict, None]) -> Predicate:
        """Build a predicate from a parsed node or raw payload.

        Raw payloads (dicts or the legacy flat array) are parsed first; a flat
        array is an implicit top-level ``and`` group.
        """
        if not isinstance(filters, (FilterCondition, FilterGroup)):
            filters = parse_filters(filters)
        if filters is None:
            return ALWAYS
        return self.compile(filters)

    def compile(self, node: FilterNode) -> Predicate:
        if isinstance(node, FilterCondition):
            return self.condition_compiler.compile(node)

        if not node.children:
            return ALWAYS

        # Single child: no wrapper needed
        if len(node.children) == 1:
            return self._single(node.combinator, self.compile(node.children[0]))

        clauses = [clause for clause in (self.compile(child) for child in node.children) if not is_always(clause)]
        if not clauses:
            return ALWAYS
        if len(clauses) == 1:
            return self._single(node.combinator, clauses[0])

        if node.combinator == ConditionType.OR:
            return disjunction(*clauses)
        if node.combinator == ConditionType.NOT:
            return negation(conjunction(*clauses))
        return conjunction(*clauses)

    @staticmethod
    def _single(combinator: ConditionType, clause: Predicate) -> Predicate:
        if combinator == ConditionType.NOT:
            return negation(clause)
        return clause


def merge_predicates(*predicates: Optional[Predicate]) -> Predicate:
    """AND-merge independent predicates (e.g. filters, search, soft delete)."""
    return conjunction(*(p for p in predicates if p is not None))
