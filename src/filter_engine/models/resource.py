"""Resource and relation descriptors.

Each listable record type declares its fields and a relation-descriptor table.
The condition compiler dispatches on the relation kind found in the table for
the first segment of a dot-path key.
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from filter_engine.models.types import FieldType, SortDirection


class RelationKind(str, Enum):
    """How a relation path segment is traversed."""

    DIRECT = "direct"  # to-one, nested-object navigation
    QUANTIFIED = "quantified"  # to-many, "at least one related record"
    POLYMORPHIC = "polymorphic"  # item-type/item-id association, resolved in a second pass


class RelationField(BaseModel):
    """A filterable field on a related record."""

    key: str
    type: FieldType = FieldType.STRING


class Relation(BaseModel):
    """Relation descriptor for one path segment."""

    name: str
    kind: RelationKind = RelationKind.DIRECT
    model: Optional[str] = Field(default=None, description="Related record type, for metadata")
    join_field: Optional[str] = Field(
        default=None,
        description="Payload side of the join table when it differs from the path segment (e.g. 'services' -> 'service')",
    )
    fields: List[RelationField] = Field(default_factory=list)
    relations: Dict[str, "Relation"] = Field(default_factory=dict, description="Relations reachable from the related record")

    @property
    def is_many(self) -> bool:
        return self.kind in (RelationKind.QUANTIFIED, RelationKind.POLYMORPHIC)


class ResourceField(BaseModel):
    """A filterable field on the primary record."""

    key: str
    type: FieldType
    optional: bool = False
    enum_values: Optional[List[str]] = None
    groupable: bool = False


class SearchField(BaseModel):
    """A field included in the free-text search clause."""

    key: str
    numeric: bool = Field(default=False, description="Matched by equality, only when the search text is numeric")


class ResourceDescriptor(BaseModel):
    """Everything the engine needs to know about one listable record type."""

    name: str
    item_type: str = Field(description="Discriminator used by the group association table")
    fields: List[ResourceField] = Field(default_factory=list)
    relations: Dict[str, Relation] = Field(default_factory=dict)
    search_fields: List[SearchField] = Field(default_factory=list)
    default_sort: Tuple[str, SortDirection] = ("createdAt", SortDirection.DESC)
    soft_delete: bool = True

    def get_field(self, key: str) -> ResourceField:
        for field in self.fields:
            if field.key == key:
                return field
        raise KeyError(f"Field '{key}' not declared on resource '{self.name}'")

    def has_field(self, key: str) -> bool:
        return any(field.key == key for field in self.fields)

    def get_relation(self, name: str) -> Optional[Relation]:
        return self.relations.get(name)

    def declared_type(self, key: str) -> Optional[FieldType]:
        """Type declared for a field or ``relation.field`` path, or None when undeclared."""
        segments = key.split(".")
        if len(segments) == 1:
            return self.get_field(key).type if self.has_field(key) else None

        relations = self.relations
        for segment in segments[:-2]:
            relation = relations.get(segment)
            if relation is None:
                return None
            relations = relation.relations

        relation = relations.get(segments[-2])
        if relation is None:
            return None
        for field in relation.fields:
            if field.key == segments[-1]:
                return field.type
        return None


def relation_table(*relations: Relation) -> Dict[str, Relation]:
    """Build a relation-descriptor table keyed by relation name."""
    return {relation.name: relation for relation in relations}
