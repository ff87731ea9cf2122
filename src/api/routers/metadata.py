"""Filter metadata router."""

from typing import Any, Dict

from fastapi import APIRouter

from api.routers.listing import resolve_resource
from filter_engine.metadata import build_filter_metadata

router = APIRouter(prefix="/resources", tags=["metadata"])


@router.get("/{resource_name}/metadata")
async def get_filter_metadata(resource_name: str) -> Dict[str, Any]:
    """Filterable fields, relations, default sort and the operator catalog for a resource."""
    resource = resolve_resource(resource_name)
    return build_filter_metadata(resource).model_dump(by_alias=True, mode="json")
