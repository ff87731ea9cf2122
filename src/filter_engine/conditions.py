"""Compilation of single filter conditions into predicate fragments."""

from typing import Any, Callable, Dict, List, Optional

from filter_engine.dates import DateResolver
from filter_engine.models.filters import FilterCondition
from filter_engine.models.predicate import (
    ALWAYS,
    FieldPredicate,
    Exists,
    MembershipMarker,
    Predicate,
    Related,
    conjunction,
    is_always,
)
from filter_engine.models.resource import Relation, RelationKind, ResourceDescriptor
from filter_engine.models.types import FieldType, FilterOperator, TypeRegistry
from utils.logging import logger

DATE_FIELD_TYPES = (FieldType.DATE, FieldType.DATETIME)


class ConditionCompiler:
    """Turns one leaf condition into a backend-agnostic predicate fragment.

    The first segment of a dot-path key is looked up in the resource's relation
    table:

      - quantified relations become an ``Exists`` over the related collection,
        descending through the join table's payload side when ``join_field`` is set
      - direct relations (and undeclared segments) become ``Related`` navigation
      - the polymorphic relation becomes a ``MembershipMarker`` for the second pass

    Unsupported operators and unusable values compile to ``ALWAYS``; this method
    never raises for client input.
    """

    def __init__(self, resource: ResourceDescriptor, date_resolver: Optional[DateResolver] = None) -> None:
        self.resource = resource
        self.date_resolver = date_resolver or DateResolver()
        self._operator_map: Dict[FilterOperator, Callable[[str, FilterCondition, Any], Predicate]] = {
            FilterOperator.EQ: self._compare,
            FilterOperator.NE: self._compare,
            FilterOperator.GT: self._compare,
            FilterOperator.GTE: self._compare,
            FilterOperator.LT: self._compare,
            FilterOperator.LTE: self._compare,
            FilterOperator.IN: self._membership,
            FilterOperator.NOT_IN: self._membership,
            FilterOperator.CONTAINS: self._text_match,
            FilterOperator.STARTS_WITH: self._text_match,
            FilterOperator.ENDS_WITH: self._text_match,
            FilterOperator.BETWEEN: self._between,
            FilterOperator.IS_NULL: self._null_check,
            FilterOperator.IS_NOT_NULL: self._null_check,
        }

    def compile(self, condition: FilterCondition) -> Predicate:
        """Compile a condition against the resource's primary record."""
        try:
            operator = FilterOperator(condition.operator)
        except ValueError:
            logger.debug(f"Unsupported operator '{condition.operator}' for key '{condition.key}', no constraint applied")
            return ALWAYS

        if condition.field_type is None:
            condition = condition.model_copy(update={"field_type": self.resource.declared_type(condition.key)})
        condition = self._normalize_enum(condition)
        return self._compile_path(condition.path, self.resource.relations, condition, operator, depth=0)

    def _normalize_enum(self, condition: FilterCondition) -> FilterCondition:
        """Map enum values case-insensitively onto the declared spelling."""
        if "." in condition.key or not self.resource.has_field(condition.key):
            return condition
        enum_values = self.resource.get_field(condition.key).enum_values
        if not enum_values or condition.value is None:
            return condition

        lookup = {value.lower(): value for value in enum_values}

        def normalize(value: Any) -> Any:
            if isinstance(value, str):
                return lookup.get(value.lower(), value)
            return value

        if isinstance(condition.value, (list, tuple)):
            value = [normalize(v) for v in condition.value]
        else:
            value = normalize(condition.value)
        return condition.model_copy(update={"value": value})

    def _compile_path(
        self,
        segments: List[str],
        relations: Dict[str, Relation],
        condition: FilterCondition,
        operator: FilterOperator,
        depth: int,
    ) -> Predicate:
        if len(segments) == 1:
            return self._compile_field(segments[0], condition, operator)

        head, rest = segments[0], segments[1:]
        relation = relations.get(head)
        kind = relation.kind if relation else RelationKind.DIRECT

        if kind == RelationKind.POLYMORPHIC and depth == 0:
            return MembershipMarker(relation=head, field=".".join(rest), operator=operator, value=condition.value)

        nested_relations = relation.relations if relation else {}
        inner = self._compile_path(rest, nested_relations, condition, operator, depth + 1)
        if is_always(inner):
            return ALWAYS

        if kind == RelationKind.QUANTIFIED:
            if relation.join_field:
                inner = Related(relation.join_field, inner)
            return Exists(head, inner)
        return Related(head, inner)

    def _compile_field(self, field: str, condition: FilterCondition, operator: FilterOperator) -> Predicate:
        return self._operator_map[operator](field, condition, operator)

    def _coerce(self, condition: FilterCondition, value: Any) -> Any:
        """Convert a wire value by field type, keeping the raw value on failure."""
        if condition.field_type is None:
            return value
        type_impl = TypeRegistry.get_type(condition.field_type)
        try:
            if isinstance(value, (list, tuple)):
                return type_impl.coerce_many(list(value))
            return type_impl.coerce(value)
        except ValueError as e:
            logger.debug(f"Keeping raw value for '{condition.key}': {e}")
            return value

    def _is_date(self, condition: FilterCondition) -> bool:
        return condition.field_type in DATE_FIELD_TYPES

    def _compare(self, field: str, condition: FilterCondition, operator: FilterOperator) -> Predicate:
        value = condition.value
        if self._is_date(condition) and value is not None:
            resolved = self.date_resolver.try_resolve(value, operator)
            if resolved is None:
                logger.warning(f"Unparseable date {value!r} for '{condition.key}', no constraint applied")
                return ALWAYS
            return FieldPredicate(field, operator, resolved)

        if value is None and operator not in (FilterOperator.EQ, FilterOperator.NE):
            return ALWAYS
        return FieldPredicate(field, operator, self._coerce(condition, value) if value is not None else None)

    def _membership(self, field: str, condition: FilterCondition, operator: FilterOperator) -> Predicate:
        value = condition.value
        # Empty lists mean no constraint, not "match nothing"
        if not isinstance(value, (list, tuple)) or len(value) == 0:
            return ALWAYS
        return FieldPredicate(field, operator, tuple(self._coerce(condition, list(value))))

    def _text_match(self, field: str, condition: FilterCondition, operator: FilterOperator) -> Predicate:
        value = condition.value
        if value is None or value == "":
            return ALWAYS
        return FieldPredicate(field, operator, str(value), case_sensitive=condition.case_sensitive)

    def _between(self, field: str, condition: FilterCondition, operator: FilterOperator) -> Predicate:
        value = condition.value
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            return ALWAYS
        low, high = value

        if self._is_date(condition):
            low = self.date_resolver.try_resolve(low, FilterOperator.BETWEEN, is_range_end=False)
            high = self.date_resolver.try_resolve(high, FilterOperator.BETWEEN, is_range_end=True)
            if low is None or high is None:
                logger.warning(f"Unparseable date range {value!r} for '{condition.key}', no constraint applied")
                return ALWAYS
        else:
            if low is None or high is None:
                return ALWAYS
            low, high = self._coerce(condition, low), self._coerce(condition, high)

        return conjunction(
            FieldPredicate(field, FilterOperator.GTE, low),
            FieldPredicate(field, FilterOperator.LTE, high),
        )

    def _null_check(self, field: str, condition: FilterCondition, operator: FilterOperator) -> Predicate:
        return FieldPredicate(field, operator)
