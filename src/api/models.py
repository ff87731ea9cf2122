"""API request and response models."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field

from filter_presets.models import FilterPreset


class PaginationResponse(BaseModel):
    """Pagination block of a list response."""

    page: int = Field(..., description="Current page, 1-based")
    limit: int = Field(..., description="Page size")
    total: int = Field(..., description="Total matching records")
    total_pages: int = Field(..., alias="totalPages", description="ceil(total / limit)")

    model_config = {"populate_by_name": True}


class ListResponse(BaseModel):
    """Response model for resource list endpoints."""

    data: List[Dict[str, Any]] = Field(default_factory=list, description="Records on the requested page")
    pagination: PaginationResponse


class ResourceListResponse(BaseModel):
    """Names of the listable resources."""

    resources: List[str]


class FilterPresetCreate(BaseModel):
    """Request model for creating a filter preset."""

    page_id: str = Field(..., validation_alias=AliasChoices("pageId", "page_id"), description="UI page identifier")
    name: str = Field(..., description="Preset name")
    filters: Optional[Any] = Field(default=None, description="Filter tree or legacy flat array")
    order_by: Optional[List[Dict[str, Any]]] = Field(default=None, validation_alias=AliasChoices("orderBy", "order_by"))
    group_by: Optional[List[Dict[str, Any]]] = Field(default=None, validation_alias=AliasChoices("groupBy", "group_by"))
    is_shared: bool = Field(default=False, validation_alias=AliasChoices("isShared", "is_shared"))


class FilterPresetUpdate(BaseModel):
    """Request model for updating a filter preset. Only provided fields change."""

    name: Optional[str] = Field(default=None, description="New preset name")
    filters: Optional[Any] = Field(default=None, description="New filter tree")
    order_by: Optional[List[Dict[str, Any]]] = Field(default=None, validation_alias=AliasChoices("orderBy", "order_by"))
    group_by: Optional[List[Dict[str, Any]]] = Field(default=None, validation_alias=AliasChoices("groupBy", "group_by"))
    is_shared: Optional[bool] = Field(default=None, validation_alias=AliasChoices("isShared", "is_shared"))


class FilterPresetResponse(BaseModel):
    """Response model for filter preset operations."""

    id: str = Field(..., description="Preset identifier")
    user_id: str = Field(..., description="Owner identifier")
    page_id: str = Field(..., description="UI page identifier")
    name: str
    filters: Optional[Dict[str, Any]] = None
    order_by: Optional[List[Dict[str, Any]]] = None
    group_by: Optional[List[Dict[str, Any]]] = None
    is_shared: bool = False
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_preset(cls, preset: FilterPreset) -> "FilterPresetResponse":
        return cls(**preset.model_dump(exclude={"id"}), id=preset.id)


class FilterPresetListResponse(BaseModel):
    """Response model for listing filter presets."""

    presets: List[FilterPresetResponse]
