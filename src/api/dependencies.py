"""API dependencies."""

import asyncio
from typing import AsyncGenerator

from fastapi import Depends, Header, HTTPException, status
from motor.motor_asyncio import AsyncIOMotorClient

from filter_engine.dates import DateResolver
from filter_engine.store.base import AssociationLookup, StoreAdapter
from filter_engine.store.mongo import MongoAssociationLookup, MongoStore
from filter_presets.manager import FilterPresetManager
from settings import settings


async def get_database() -> AsyncGenerator[AsyncIOMotorClient, None]:
    """Get a database connection for the request."""
    client = AsyncIOMotorClient(settings.database_connection_string)
    client.get_io_loop = asyncio.get_running_loop

    try:
        yield client
    finally:
        client.close()


async def get_store(client: AsyncIOMotorClient = Depends(get_database)) -> StoreAdapter:
    """Dependency for getting the record store."""
    return MongoStore(client, settings.database_name)


async def get_association_lookup(client: AsyncIOMotorClient = Depends(get_database)) -> AssociationLookup:
    """Dependency for getting the group membership lookup."""
    return MongoAssociationLookup(client, settings.database_name)


async def get_preset_manager(client: AsyncIOMotorClient = Depends(get_database)) -> FilterPresetManager:
    """Dependency for getting the filter preset manager."""
    return await FilterPresetManager.setup(client, settings.database_name)


def get_date_resolver() -> DateResolver:
    """Dependency for getting a date resolver in the configured timezone."""
    return DateResolver(timezone_str=settings.filter_timezone)


async def get_user_id(x_user_id: str = Header(None)) -> str:
    """Caller identity, set by the authenticating proxy."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User ID is required")
    return x_user_id
