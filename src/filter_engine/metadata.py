"""Filter metadata surface: what a client may filter, sort and group on."""

import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from filter_engine.dates import SPECIAL_DATE_LABELS
from filter_engine.models.resource import Relation, ResourceDescriptor
from filter_engine.models.types import FieldType, FilterOperator, TypeRegistry

SEARCHABLE_NAME_FRAGMENTS = ("note", "name", "description", "title", "content", "text")


def format_field_label(field_name: str) -> str:
    """``createdAt`` -> ``Created At``, ``serviceId`` -> ``Service ID``."""
    label = re.sub(r"([A-Z])", r" \1", field_name)
    label = re.sub(r"(^|\s)id$", r"\1ID", label, flags=re.IGNORECASE)
    return (label[:1].upper() + label[1:]).strip()


def is_field_searchable(field_name: str, field_type: FieldType) -> bool:
    """Text fields holding user-facing content."""
    if field_type != FieldType.STRING:
        return False
    return any(fragment in field_name.lower() for fragment in SEARCHABLE_NAME_FRAGMENTS)


def is_field_sortable(field_type: FieldType, relation_type: Optional[str] = None) -> bool:
    # Sorting across a to-many relation is ambiguous
    if relation_type == "many":
        return False
    return field_type not in (FieldType.JSON, FieldType.ARRAY)


def default_ui_config(field_type: FieldType, field_name: str, enum_values: Optional[List[str]] = None) -> Dict[str, Any]:
    """Default input hints for a filter field."""
    label = format_field_label(field_name)

    if enum_values:
        return {
            "placeholder": f"Select {label}...",
            "inputType": "select",
            "options": [{"value": value, "label": format_field_label(value)} for value in enum_values],
        }
    if field_type in (FieldType.INT, FieldType.FLOAT):
        return {"placeholder": f"Enter {label}...", "inputType": "number"}
    if field_type in (FieldType.DATE, FieldType.DATETIME):
        return {
            "placeholder": f"Select {label}...",
            "inputType": "date" if field_type == FieldType.DATE else "datetime",
            "supportsRange": True,
        }
    if field_type == FieldType.BOOLEAN:
        return {"placeholder": f"Select {label}...", "inputType": "checkbox"}
    if field_type == FieldType.ARRAY:
        return {"placeholder": f"Select {label}...", "inputType": "multiselect"}
    if "email" in field_name.lower():
        return {"placeholder": f"Enter {label}...", "inputType": "email"}
    return {"placeholder": f"Enter {label}...", "inputType": "text"}


class FieldMetadata(BaseModel):
    """Metadata for a single filterable field."""

    key: str
    label: str
    type: FieldType
    operators: List[FilterOperator]
    relation: Optional[str] = None
    relation_type: Optional[str] = Field(default=None, serialization_alias="relationType")
    searchable: bool = False
    sortable: bool = True
    groupable: bool = False
    enum_values: Optional[List[str]] = Field(default=None, serialization_alias="enumValues")
    ui: Dict[str, Any] = Field(default_factory=dict)


class RelationFieldMetadata(BaseModel):
    key: str
    label: str
    type: FieldType


class RelationMetadata(BaseModel):
    name: str
    type: str
    label: str
    model: Optional[str] = None
    fields: List[RelationFieldMetadata] = Field(default_factory=list)


class FilterMetadata(BaseModel):
    """Complete filter metadata for one resource."""

    fields: List[FieldMetadata]
    relations: List[RelationMetadata]
    default_sort: Dict[str, str] = Field(serialization_alias="defaultSort")
    supported_operators: Dict[FieldType, List[FilterOperator]] = Field(serialization_alias="supportedOperators")
    # Relative tokens accepted as date values, for the date pickers
    special_date_values: List[Dict[str, str]] = Field(default_factory=list, serialization_alias="specialDateValues")


def _relation_type(relation: Relation) -> str:
    return "many" if relation.is_many else "one"


def build_field_metadata(resource: ResourceDescriptor) -> List[FieldMetadata]:
    """Primary-record fields followed by one entry per relation field (dot-path keys)."""
    fields = [
        FieldMetadata(
            key=field.key,
            label=format_field_label(field.key),
            type=field.type,
            operators=TypeRegistry.get_operators(field.type, field.optional),
            searchable=is_field_searchable(field.key, field.type),
            sortable=is_field_sortable(field.type),
            groupable=field.groupable,
            enum_values=field.enum_values,
            ui=default_ui_config(field.type, field.key, field.enum_values),
        )
        for field in resource.fields
    ]

    for relation in resource.relations.values():
        relation_type = _relation_type(relation)
        for relation_field in relation.fields:
            key = f"{relation.name}.{relation_field.key}"
            fields.append(
                FieldMetadata(
                    key=key,
                    label=f"{format_field_label(relation.name)} {format_field_label(relation_field.key)}",
                    type=relation_field.type,
                    operators=TypeRegistry.get_operators(relation_field.type),
                    relation=relation.name,
                    relation_type=relation_type,
                    searchable=is_field_searchable(relation_field.key, relation_field.type),
                    sortable=is_field_sortable(relation_field.type, relation_type),
                    ui=default_ui_config(relation_field.type, relation_field.key),
                )
            )
    return fields


def build_relation_metadata(resource: ResourceDescriptor) -> List[RelationMetadata]:
    return [
        RelationMetadata(
            name=relation.name,
            type=_relation_type(relation),
            label=format_field_label(relation.name),
            model=relation.model,
            fields=[
                RelationFieldMetadata(key=field.key, label=format_field_label(field.key), type=field.type)
                for field in relation.fields
            ],
        )
        for relation in resource.relations.values()
    ]


def build_filter_metadata(resource: ResourceDescriptor) -> FilterMetadata:
    default_key, default_direction = resource.default_sort
    return FilterMetadata(
        fields=build_field_metadata(resource),
        relations=build_relation_metadata(resource),
        default_sort={"key": default_key, "direction": default_direction.value},
        supported_operators=TypeRegistry.get_all_supported_operators(),
        special_date_values=[{"value": value, "label": label} for value, label in SPECIAL_DATE_LABELS.items()],
    )
