"""Resource listing router: filtered, searched, sorted and paginated lists."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status

from api.dependencies import get_association_lookup, get_date_resolver, get_store
from api.models import ListResponse, ResourceListResponse
from filter_engine.dates import DateResolver
from filter_engine.exceptions import DatabaseError, UnknownResourceError
from filter_engine.listing import ResourceLister
from filter_engine.models.resource import ResourceDescriptor
from filter_engine.store.base import AssociationLookup, StoreAdapter
from inventory.resources import RESOURCES, get_resource
from settings import settings
from utils.logging import logger

router = APIRouter(prefix="/resources", tags=["resources"])


def resolve_resource(resource_name: str) -> ResourceDescriptor:
    try:
        return get_resource(resource_name)
    except UnknownResourceError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown resource: {resource_name}")


async def _list(
    resource: ResourceDescriptor,
    body: Optional[Dict[str, Any]],
    query: Dict[str, Any],
    store: StoreAdapter,
    lookup: AssociationLookup,
    date_resolver: DateResolver,
) -> Dict[str, Any]:
    lister = ResourceLister(
        resource,
        store,
        lookup=lookup,
        date_resolver=date_resolver,
        default_limit=settings.default_page_limit,
        max_limit=settings.max_page_limit,
    )
    try:
        result = await lister.list_from_request(body, query)
        return result.to_dict()
    except DatabaseError as e:
        logger.error(f"Failed to list {resource.name}: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")
    except Exception as e:
        logger.error(f"Unexpected error listing {resource.name}: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


@router.get("/", response_model=ResourceListResponse)
async def list_resources() -> ResourceListResponse:
    """Names of the listable resources."""
    return ResourceListResponse(resources=sorted(RESOURCES))


@router.post("/{resource_name}/list", response_model=ListResponse)
async def list_records(
    resource_name: str,
    request: Request,
    body: Optional[Dict[str, Any]] = Body(default=None),
    store: StoreAdapter = Depends(get_store),
    lookup: AssociationLookup = Depends(get_association_lookup),
    date_resolver: DateResolver = Depends(get_date_resolver),
) -> Dict[str, Any]:
    """List records with a filter tree (or legacy flat array), search, sort and paging in the body.

    Paging values missing from the body fall back to the query string.
    """
    resource = resolve_resource(resource_name)
    return await _list(resource, body, dict(request.query_params), store, lookup, date_resolver)


@router.get("/{resource_name}", response_model=ListResponse)
async def list_records_by_query(
    resource_name: str,
    request: Request,
    store: StoreAdapter = Depends(get_store),
    lookup: AssociationLookup = Depends(get_association_lookup),
    date_resolver: DateResolver = Depends(get_date_resolver),
) -> Dict[str, Any]:
    """List records with search and paging from the query string only."""
    resource = resolve_resource(resource_name)
    return await _list(resource, None, dict(request.query_params), store, lookup, date_resolver)
