"""Tests for compiling single filter conditions."""

from datetime import datetime

import pytest
import pytz

from filter_engine.conditions import ConditionCompiler
from filter_engine.dates import DateResolver
from filter_engine.models.filters import FilterCondition
from filter_engine.models.predicate import ALWAYS, And, Exists, FieldPredicate, MembershipMarker, Related
from filter_engine.models.resource import Relation, RelationKind, ResourceDescriptor, ResourceField
from filter_engine.models.types import FieldType, FilterOperator
from inventory.resources import RELEASE_NOTES, SERVICES, SPRINTS, TASKS

OP = FilterOperator
FIXED_NOW = datetime(2025, 3, 12, 15, 30, tzinfo=pytz.UTC)


def condition(key, operator, value=None, field_type="STRING", **extra) -> FilterCondition:
    return FilterCondition.model_validate({"key": key, "operator": operator, "value": value, "type": field_type, **extra})


def compiler_for(resource) -> ConditionCompiler:
    return ConditionCompiler(resource, DateResolver(clock=lambda: FIXED_NOW))


@pytest.fixture
def tasks() -> ConditionCompiler:
    return compiler_for(TASKS)


@pytest.fixture
def services() -> ConditionCompiler:
    return compiler_for(SERVICES)


class TestScalarFields:
    def test_equality(self, tasks):
        assert tasks.compile(condition("title", "eq", "Fix login")) == FieldPredicate("title", OP.EQ, "Fix login")

    def test_value_is_coerced_by_declared_type(self, tasks):
        assert tasks.compile(condition("reopenCount", "gte", "2", "INT")) == FieldPredicate("reopenCount", OP.GTE, 2)

    def test_uncoercible_value_is_kept(self, tasks):
        assert tasks.compile(condition("reopenCount", "eq", "abc", "INT")) == FieldPredicate("reopenCount", OP.EQ, "abc")

    def test_text_match_is_case_insensitive_by_default(self, tasks):
        predicate = tasks.compile(condition("title", "contains", "login"))

        assert predicate == FieldPredicate("title", OP.CONTAINS, "login", case_sensitive=False)

    def test_text_match_case_sensitive(self, tasks):
        predicate = tasks.compile(condition("title", "startsWith", "Fix", caseSensitive=True))

        assert predicate == FieldPredicate("title", OP.STARTS_WITH, "Fix", case_sensitive=True)

    def test_empty_text_match_is_no_constraint(self, tasks):
        assert tasks.compile(condition("title", "contains", "")) is ALWAYS

    def test_membership_list(self, tasks):
        predicate = tasks.compile(condition("sprintId", "in", ["1", 2], "INT"))

        assert predicate == FieldPredicate("sprintId", OP.IN, (1, 2))

    @pytest.mark.parametrize("operator", ["in", "notIn"])
    def test_empty_membership_list_is_no_constraint(self, tasks, operator):
        assert tasks.compile(condition("sprintId", operator, [], "INT")) is ALWAYS

    def test_numeric_between(self, tasks):
        predicate = tasks.compile(condition("estimatedHours", "between", ["1.5", 8], "FLOAT"))

        assert predicate == And(
            (
                FieldPredicate("estimatedHours", OP.GTE, 1.5),
                FieldPredicate("estimatedHours", OP.LTE, 8.0),
            )
        )

    @pytest.mark.parametrize("value", [[1], [1, None], 5, None])
    def test_between_requires_both_bounds(self, tasks, value):
        assert tasks.compile(condition("reopenCount", "between", value, "INT")) is ALWAYS

    def test_null_checks(self, tasks):
        assert tasks.compile(condition("dueDate", "isNull", field_type="DATETIME")) == FieldPredicate("dueDate", OP.IS_NULL)
        assert tasks.compile(condition("dueDate", "isNotNull", field_type="DATETIME")) == FieldPredicate("dueDate", OP.IS_NOT_NULL)

    def test_eq_null_is_kept(self, tasks):
        assert tasks.compile(condition("assignedTo", "eq", None)) == FieldPredicate("assignedTo", OP.EQ, None)

    def test_ordering_against_null_is_no_constraint(self, tasks):
        assert tasks.compile(condition("reopenCount", "gt", None, "INT")) is ALWAYS

    def test_unknown_operator_is_no_constraint(self, tasks):
        assert tasks.compile(condition("title", "like", "%login%")) is ALWAYS

    def test_operator_outside_type_catalog_still_compiles(self, tasks):
        """The catalog restricts the API surface, the compiler accepts any known operator"""
        assert tasks.compile(condition("title", "gt", "m")) == FieldPredicate("title", OP.GT, "m")


class TestEnumFields:
    def test_enum_value_is_normalized(self, tasks):
        assert tasks.compile(condition("status", "eq", "IN_PROGRESS")) == FieldPredicate("status", OP.EQ, "in_progress")

    def test_enum_list_is_normalized(self, tasks):
        predicate = tasks.compile(condition("type", "in", ["Bug", "FEATURE"]))

        assert predicate == FieldPredicate("type", OP.IN, ("bug", "feature"))

    def test_unknown_enum_value_passes_through(self, tasks):
        assert tasks.compile(condition("priority", "eq", "urgent")) == FieldPredicate("priority", OP.EQ, "urgent")


class TestUntypedConditions:
    def test_declared_type_is_used(self, services):
        assert services.compile(condition("port", "eq", 8080, None)) == FieldPredicate("port", OP.EQ, 8080)

    def test_declared_type_coerces_lists(self, services):
        assert services.compile(condition("id", "in", ["1", 2], None)) == FieldPredicate("id", OP.IN, (1, 2))

    def test_relation_field_type(self, services):
        predicate = services.compile(condition("tags.id", "eq", "1", None))

        assert predicate == Exists("tags", Related("tag", FieldPredicate("id", OP.EQ, 1)))

    def test_declared_date_type(self, tasks):
        predicate = tasks.compile(condition("dueDate", "gte", "today", None))

        assert predicate == FieldPredicate("dueDate", OP.GTE, datetime(2025, 3, 12, tzinfo=pytz.UTC))

    def test_undeclared_key_keeps_raw_value(self, services):
        assert services.compile(condition("metadata.rack", "eq", 12, None)) == Related("metadata", FieldPredicate("rack", OP.EQ, 12))


class TestDateFields:
    def test_relative_token_is_resolved(self, tasks):
        predicate = tasks.compile(condition("dueDate", "lte", "today", "DATETIME"))

        assert predicate == FieldPredicate("dueDate", OP.LTE, datetime(2025, 3, 12, 23, 59, 59, 999999, tzinfo=pytz.UTC))

    def test_date_between(self, tasks):
        predicate = tasks.compile(condition("createdAt", "between", ["2025-03-01", "2025-03-07"], "DATETIME"))

        assert predicate == And(
            (
                FieldPredicate("createdAt", OP.GTE, datetime(2025, 3, 1, tzinfo=pytz.UTC)),
                FieldPredicate("createdAt", OP.LTE, datetime(2025, 3, 7, 23, 59, 59, 999999, tzinfo=pytz.UTC)),
            )
        )

    def test_unparseable_date_is_no_constraint(self, tasks):
        assert tasks.compile(condition("dueDate", "gte", "not a date", "DATETIME")) is ALWAYS

    def test_unparseable_range_bound_is_no_constraint(self, tasks):
        assert tasks.compile(condition("dueDate", "between", ["today", "garbage"], "DATETIME")) is ALWAYS


class TestRelationPaths:
    def test_direct_relation(self, tasks):
        predicate = tasks.compile(condition("assignedToUser.name", "contains", "ali"))

        assert predicate == Related("assignedToUser", FieldPredicate("name", OP.CONTAINS, "ali", case_sensitive=False))

    def test_undeclared_segment_is_navigated_directly(self, tasks):
        predicate = tasks.compile(condition("owner.email", "eq", "a@example.com"))

        assert predicate == Related("owner", FieldPredicate("email", OP.EQ, "a@example.com"))

    def test_quantified_relation_descends_through_join_record(self, services):
        predicate = services.compile(condition("tags.name", "eq", "prod"))

        assert predicate == Exists("tags", Related("tag", FieldPredicate("name", OP.EQ, "prod")))

    def test_quantified_relation_without_join_record(self):
        predicate = compiler_for(SPRINTS).compile(condition("tasks.status", "eq", "blocked"))

        assert predicate == Exists("tasks", FieldPredicate("status", OP.EQ, "blocked"))

    def test_release_note_tasks_use_task_join(self):
        predicate = compiler_for(RELEASE_NOTES).compile(condition("tasks.title", "contains", "login"))

        assert predicate == Exists("tasks", Related("task", FieldPredicate("title", OP.CONTAINS, "login", case_sensitive=False)))

    def test_nested_relation_inside_quantifier(self, services):
        predicate = services.compile(condition("dependencies.dependencyService.name", "eq", "billing"))

        assert predicate == Exists("dependencies", Related("dependencyService", FieldPredicate("name", OP.EQ, "billing")))

    def test_quantifier_around_no_constraint_collapses(self, services):
        assert services.compile(condition("tags.name", "in", [])) is ALWAYS

    def test_polymorphic_relation_becomes_marker(self, services):
        predicate = services.compile(condition("groups.name", "eq", "Payments"))

        assert predicate == MembershipMarker(relation="groups", field="name", operator=OP.EQ, value="Payments")

    def test_polymorphic_relation_below_top_level_is_navigated(self):
        resource = ResourceDescriptor(
            name="deployments",
            item_type="deployment",
            fields=[ResourceField(key="id", type=FieldType.INT)],
            relations={
                "service": Relation(
                    name="service",
                    relations={"groups": Relation(name="groups", kind=RelationKind.POLYMORPHIC)},
                )
            },
        )
        predicate = compiler_for(resource).compile(condition("service.groups.name", "eq", "Payments"))

        assert predicate == Related("service", Related("groups", FieldPredicate("name", OP.EQ, "Payments")))
