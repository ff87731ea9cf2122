"""Wire models for filter trees and sort keys."""

from typing import Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, ValidationError

from filter_engine.models.types import ConditionType, FieldType, SortDirection
from utils.logging import logger


class FilterCondition(BaseModel):
    """Single typed comparison against one field or relation path (leaf node)."""

    key: str = Field(validation_alias=AliasChoices("key", "field"), description="Dot-path key, e.g. 'service.name' or 'tags.name'")
    # None means the compiler falls back to the type the resource declares for the key
    field_type: Optional[FieldType] = Field(default=None, validation_alias=AliasChoices("type", "field_type"), description="Declared field type")
    # Kept as a plain string: unknown operators compile to no constraint instead of failing validation
    operator: str = Field(description="Comparison operator")
    value: Any = Field(default=None, description="Scalar, [start, end] for between, list for in/notIn, absent for null checks")
    case_sensitive: bool = Field(default=False, validation_alias=AliasChoices("caseSensitive", "case_sensitive"))

    model_config = {"populate_by_name": True}

    @property
    def path(self) -> List[str]:
        return self.key.split(".")

    def to_dict(self) -> dict:
        data = {"key": self.key, "operator": self.operator}
        if self.field_type is not None:
            data["type"] = self.field_type.value
        if self.value is not None:
            data["value"] = self.value
        if self.case_sensitive:
            data["caseSensitive"] = True
        return data


class FilterGroup(BaseModel):
    """Boolean combination of conditions or nested groups (branch node)."""

    combinator: ConditionType = Field(default=ConditionType.AND, validation_alias=AliasChoices("condition", "combinator"))
    children: List[Union[FilterCondition, "FilterGroup"]] = Field(default_factory=list, validation_alias=AliasChoices("childs", "children"))

    model_config = {"populate_by_name": True}

    def to_dict(self) -> dict:
        return {"condition": self.combinator.value, "childs": [child.to_dict() for child in self.children]}


FilterNode = Union[FilterCondition, FilterGroup]


class SortKey(BaseModel):
    """One (possibly relation-qualified) sort key."""

    key: str = Field(validation_alias=AliasChoices("key", "field"))
    direction: SortDirection = SortDirection.ASC
    field_type: Optional[FieldType] = Field(default=None, validation_alias=AliasChoices("type", "field_type"))

    model_config = {"populate_by_name": True}


def is_filter_group(data: Any) -> bool:
    """Check if a raw node is a group: it carries a combinator and a child list."""
    if isinstance(data, FilterGroup):
        return True
    if not isinstance(data, dict):
        return False
    has_combinator = "condition" in data or "combinator" in data
    has_children = "childs" in data or "children" in data
    return has_combinator and has_children


def parse_filter_node(data: Any) -> Optional[FilterNode]:
    """Recursively build a filter node from raw input.

    Malformed nodes are dropped with a warning rather than failing the whole tree.
    An unknown combinator falls back to ``and``.
    """
    if isinstance(data, (FilterCondition, FilterGroup)):
        return data

    if not isinstance(data, dict):
        logger.warning(f"Dropping malformed filter node of type {type(data).__name__}")
        return None

    if is_filter_group(data):
        raw_combinator = data.get("condition", data.get("combinator"))
        try:
            combinator = ConditionType(raw_combinator)
        except ValueError:
            logger.warning(f"Unknown filter combinator {raw_combinator!r}, using 'and'")
            combinator = ConditionType.AND

        raw_children = data.get("childs", data.get("children")) or []
        if not isinstance(raw_children, list):
            raw_children = [raw_children]
        children = [child for child in (parse_filter_node(item) for item in raw_children) if child is not None]
        return FilterGroup(combinator=combinator, children=children)

    try:
        return FilterCondition.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Dropping malformed filter condition {data!r}: {e.error_count()} validation error(s)")
        return None


def parse_filters(data: Any) -> Optional[FilterNode]:
    """Parse a raw filter payload.

    Accepts the nested tree structure, a single condition, or the legacy flat
    array of conditions, which is treated as an implicit top-level ``and`` group.
    """
    if data is None:
        return None
    if isinstance(data, list):
        children = [child for child in (parse_filter_node(item) for item in data) if child is not None]
        return FilterGroup(combinator=ConditionType.AND, children=children)
    return parse_filter_node(data)
