"""Filter preset manager for MongoDB operations."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pymongo
from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pydantic import ValidationError

from filter_engine.exceptions import DatabaseError
from filter_presets.exceptions import (
    InvalidPresetError,
    PresetNameExistsError,
    PresetNotFoundError,
)
from filter_presets.models import FilterPreset
from utils.logging import logger

UPDATABLE_FIELDS = ("name", "filters", "order_by", "group_by", "is_shared")


class FilterPresetManager:
    """Manager for saved filter presets."""

    COLLECTION_PRESETS: str = "filter_presets"

    def __init__(self, mongodb_client: AsyncIOMotorClient, database_name: str) -> None:
        """Initialize manager with MongoDB client.
        Note: Use FilterPresetManager.setup() to create a properly initialized instance."""
        self.client = mongodb_client
        self._db: AsyncIOMotorDatabase = self.client.get_database(database_name)
        self._presets: AsyncIOMotorCollection = self._db.get_collection(self.COLLECTION_PRESETS)

    @classmethod
    async def setup(cls, mongodb_client: AsyncIOMotorClient, database_name: str) -> "FilterPresetManager":
        """Factory method to create and setup a FilterPresetManager instance."""
        try:
            manager = cls(mongodb_client, database_name)

            await manager._presets.create_indexes(
                [
                    # Compound index for unique preset names per user and page
                    pymongo.IndexModel([("user_id", 1), ("page_id", 1), ("name", 1)], unique=True, background=True),
                    # Index for listing a user's presets
                    pymongo.IndexModel([("user_id", 1), ("updated_at", -1)], background=True),
                    # Index for shared presets on a page
                    pymongo.IndexModel([("page_id", 1), ("is_shared", 1)], background=True),
                ]
            )

            return manager

        except Exception as e:
            raise DatabaseError(f"Failed to setup indexes: {str(e)}")

    async def create_preset(
        self,
        user_id: str,
        page_id: str,
        name: str,
        filters: Any = None,
        order_by: Optional[List[Dict[str, Any]]] = None,
        group_by: Optional[List[Dict[str, Any]]] = None,
        is_shared: bool = False,
    ) -> FilterPreset:
        """Creates a new preset for the user on a page."""
        if not page_id or not name:
            raise InvalidPresetError("page_id and name are required")

        try:
            preset = FilterPreset(
                user_id=user_id,
                page_id=page_id,
                name=name,
                filters=filters,
                order_by=order_by,
                group_by=group_by,
                is_shared=is_shared,
            )
        except ValidationError as e:
            raise InvalidPresetError(f"Invalid preset data: {str(e)}")

        try:
            logger.info(f"Creating filter preset '{name}' on page '{page_id}' for user {user_id}")
            await self._presets.insert_one(preset.model_dump(by_alias=True))
            return preset
        except Exception as e:
            if "duplicate key error" in str(e).lower():
                raise PresetNameExistsError(f"Preset '{name}' already exists on page '{page_id}'")
            raise DatabaseError(f"Failed to create preset: {str(e)}")

    async def list_presets(self, user_id: str, page_id: Optional[str] = None) -> List[FilterPreset]:
        """Lists the user's presets, most recently updated first."""
        query: Dict[str, Any] = {"user_id": user_id}
        if page_id:
            query["page_id"] = page_id

        try:
            logger.info(f"Listing filter presets for user {user_id}")
            presets = []
            cursor = self._presets.find(query).sort("updated_at", pymongo.DESCENDING)
            async for doc in cursor:
                presets.append(FilterPreset.model_validate(doc))
            return presets
        except Exception as e:
            raise DatabaseError(f"Failed to list presets: {str(e)}")

    async def get_preset(self, user_id: str, preset_id: str) -> FilterPreset:
        """Retrieves a specific preset owned by the user."""
        try:
            logger.debug(f"Getting filter preset {preset_id} for user {user_id}")
            doc = await self._presets.find_one({"_id": preset_id, "user_id": user_id})
            if not doc:
                raise PresetNotFoundError(f"Filter preset {preset_id} not found")
            return FilterPreset.model_validate(doc)
        except PresetNotFoundError:
            raise
        except Exception as e:
            raise DatabaseError(f"Failed to get preset: {str(e)}")

    async def update_preset(self, user_id: str, preset_id: str, **changes: Any) -> FilterPreset:
        """Partially updates a preset; only provided fields change."""
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise InvalidPresetError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        existing = await self.get_preset(user_id, preset_id)
        try:
            updated = FilterPreset.model_validate(
                {**existing.model_dump(by_alias=True), **changes, "updated_at": datetime.now(timezone.utc)}
            )
        except ValidationError as e:
            raise InvalidPresetError(f"Invalid preset data: {str(e)}")

        try:
            logger.info(f"Updating filter preset {preset_id} for user {user_id}")
            result = await self._presets.replace_one({"_id": preset_id, "user_id": user_id}, updated.model_dump(by_alias=True))
            if result.matched_count == 0:
                raise PresetNotFoundError(f"Filter preset {preset_id} not found")
            return updated
        except PresetNotFoundError:
            raise
        except Exception as e:
            if "duplicate key error" in str(e).lower():
                raise PresetNameExistsError(f"Preset '{updated.name}' already exists on page '{updated.page_id}'")
            raise DatabaseError(f"Failed to update preset: {str(e)}")

    async def delete_preset(self, user_id: str, preset_id: str) -> None:
        """Deletes a preset owned by the user."""
        try:
            logger.info(f"Deleting filter preset {preset_id} for user {user_id}")
            result = await self._presets.delete_one({"_id": preset_id, "user_id": user_id})
            if result.deleted_count == 0:
                raise PresetNotFoundError(f"Filter preset {preset_id} not found")
        except PresetNotFoundError:
            raise
        except Exception as e:
            raise DatabaseError(f"Failed to delete preset: {str(e)}")
