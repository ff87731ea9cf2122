"""Filter preset router for saving and reusing filter trees."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from api.dependencies import get_preset_manager, get_user_id
from api.models import (
    FilterPresetCreate,
    FilterPresetListResponse,
    FilterPresetResponse,
    FilterPresetUpdate,
)
from filter_presets.exceptions import InvalidPresetError, PresetNameExistsError, PresetNotFoundError
from filter_presets.manager import FilterPresetManager
from utils.logging import logger

router = APIRouter(prefix="/filter-presets", tags=["filter-presets"])


@router.post("/", response_model=FilterPresetResponse, status_code=status.HTTP_201_CREATED)
async def create_preset(
    request: FilterPresetCreate,
    user_id: str = Depends(get_user_id),
    db: FilterPresetManager = Depends(get_preset_manager),
) -> FilterPresetResponse:
    """Save a filter tree for a page."""
    try:
        preset = await db.create_preset(
            user_id=user_id,
            page_id=request.page_id,
            name=request.name,
            filters=request.filters,
            order_by=request.order_by,
            group_by=request.group_by,
            is_shared=request.is_shared,
        )
        return FilterPresetResponse.from_preset(preset)
    except PresetNameExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except InvalidPresetError as e:
        logger.error(f"Failed to create filter preset: {str(e)}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Unexpected error creating filter preset: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


@router.get("/", response_model=FilterPresetListResponse)
async def list_presets(
    page_id: Optional[str] = Query(default=None, alias="pageId"),
    user_id: str = Depends(get_user_id),
    db: FilterPresetManager = Depends(get_preset_manager),
) -> FilterPresetListResponse:
    """List the caller's presets, optionally for one page."""
    try:
        presets = await db.list_presets(user_id, page_id=page_id)
        return FilterPresetListResponse(presets=[FilterPresetResponse.from_preset(preset) for preset in presets])
    except Exception as e:
        logger.error(f"Unexpected error listing filter presets: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


@router.get("/{preset_id}", response_model=FilterPresetResponse)
async def get_preset(
    preset_id: str,
    user_id: str = Depends(get_user_id),
    db: FilterPresetManager = Depends(get_preset_manager),
) -> FilterPresetResponse:
    """Get one preset."""
    try:
        preset = await db.get_preset(user_id, preset_id)
        return FilterPresetResponse.from_preset(preset)
    except PresetNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Filter preset not found")
    except Exception as e:
        logger.error(f"Unexpected error getting filter preset: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


@router.patch("/{preset_id}", response_model=FilterPresetResponse)
async def update_preset(
    preset_id: str,
    request: FilterPresetUpdate,
    user_id: str = Depends(get_user_id),
    db: FilterPresetManager = Depends(get_preset_manager),
) -> FilterPresetResponse:
    """Update the provided fields of a preset."""
    try:
        preset = await db.update_preset(user_id, preset_id, **request.model_dump(exclude_unset=True))
        return FilterPresetResponse.from_preset(preset)
    except PresetNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Filter preset not found")
    except PresetNameExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except InvalidPresetError as e:
        logger.error(f"Failed to update filter preset: {str(e)}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Unexpected error updating filter preset: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")


@router.delete("/{preset_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_preset(
    preset_id: str,
    user_id: str = Depends(get_user_id),
    db: FilterPresetManager = Depends(get_preset_manager),
) -> None:
    """Delete a preset."""
    try:
        await db.delete_preset(user_id, preset_id)
    except PresetNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Filter preset not found")
    except Exception as e:
        logger.error(f"Unexpected error deleting filter preset: {str(e)}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")
