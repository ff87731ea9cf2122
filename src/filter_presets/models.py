"""Filter preset model."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from filter_engine.models.filters import parse_filters


class FilterPreset(BaseModel):
    """A named filter tree saved by a user for one UI page."""

    id: str = Field(default_factory=lambda: str(uuid4()), alias="_id")
    user_id: str
    page_id: str = Field(..., min_length=1, description="UI page the preset belongs to")
    name: str = Field(..., min_length=1)
    filters: Optional[Dict[str, Any]] = Field(default=None, description="Filter tree in wire shape")
    order_by: Optional[List[Dict[str, Any]]] = None
    group_by: Optional[List[Dict[str, Any]]] = None
    is_shared: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"populate_by_name": True}

    @field_validator("filters", mode="before")
    @classmethod
    def normalize_filters(cls, value: Any) -> Optional[Dict[str, Any]]:
        """Store filters in the nested wire shape; legacy flat arrays become an ``and`` group."""
        if value is None:
            return None
        node = parse_filters(value)
        if node is None:
            raise ValueError("Filters must be a filter group, a condition or a list of conditions")
        return node.to_dict()
