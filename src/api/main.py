"""Main FastAPI application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routers import conversation, profile
from completion.client import CompletionClient
from database.manager import DatabaseManager
from settings import settings
from utils.logging import logger
from utils.send_guard import SendGuard


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.api_title} ({settings.environment})")
    app.state.database_manager = DatabaseManager()
    app.state.completion_client = CompletionClient()
    app.state.send_guard = SendGuard()

    yield

    # Close MongoDB connection and the shared HTTP client
    app.state.database_manager.close()
    await app.state.completion_client.close()


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
    app.include_router(conversation.router)
    app.include_router(profile.router)

    return app


app = create_app()
