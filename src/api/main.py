"""Main FastAPI application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from motor.motor_asyncio import AsyncIOMotorClient

from api.routers import filter_presets, listing, metadata
from filter_engine.exceptions import DatabaseError
from filter_engine.store.mongo import MongoAssociationLookup, MongoStore
from inventory.resources import RESOURCES
from settings import settings
from utils.logging import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Ensure list and membership indexes exist before serving
    client = AsyncIOMotorClient(settings.database_connection_string)
    try:
        await MongoStore.setup(client, settings.database_name, record_types=RESOURCES)
        await MongoAssociationLookup.setup(client, settings.database_name)
    except DatabaseError as e:
        logger.error(f"Index setup failed, continuing without it: {str(e)}")
    yield

    # Close MongoDB connection
    client.close()


def create_app() -> FastAPI:
    """Create FastAPI application."""
    app = FastAPI(title=settings.api_title, version=settings.api_version, description=settings.api_description, lifespan=lifespan)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Allows all origins
        allow_credentials=True,
        allow_methods=["*"],  # Allows all methods
        allow_headers=["*"],  # Allows all headers
    )

    # Add routers
    app.include_router(listing.router)
    app.include_router(metadata.router)
    app.include_router(filter_presets.router)

    return app


app = create_app()
