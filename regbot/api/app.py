"""
FastAPI application for the registration chatbot.

AI Assistant Notes:
- create_app() builds the app; passing an orchestrator skips startup wiring
  (used by tests and the CLI)
- Without an injected orchestrator the lifespan runs migrations, builds the
  SQLite record store and initializes the OpenAI text generator
- CORS is open to all origins by default (settings.cors_allow_origins)
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from regbot.agents import OpenAITextGenerator
from regbot.api import routes
from regbot.api.handlers import (
    general_exception_handler,
    http_exception_handler,
    record_store_exception_handler,
    text_generation_exception_handler,
    validation_exception_handler,
)
from regbot.config import settings
from regbot.conversation import SessionStore
from regbot.database import DatabaseConnection, DatabaseMigrations, SQLiteRecordStore
from regbot.exceptions import RecordStoreError, TextGenerationError
from regbot.orchestrator import RegistrationOrchestrator
from regbot.utils import langfuse_client

logger = logging.getLogger(__name__)


async def build_orchestrator(db_connection: DatabaseConnection) -> RegistrationOrchestrator:
    """
    Wire the orchestrator with its production collaborators.

    Args:
        db_connection: Database connection used by the record store

    Returns:
        Ready orchestrator
    """
    DatabaseMigrations(db_connection).run_migrations()

    text_generator = OpenAITextGenerator()
    await text_generator.initialize()

    return RegistrationOrchestrator(
        session_store=SessionStore(),
        record_store=SQLiteRecordStore(db_connection, settings.registrations_table),
        text_generator=text_generator,
    )


def create_app(orchestrator: Optional[RegistrationOrchestrator] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        orchestrator: Pre-built orchestrator; built on startup when omitted

    Returns:
        Configured application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager for startup and shutdown events."""
        db_connection = None
        if orchestrator is None:
            logger.info("Starting up registration chatbot...")
            db_connection = DatabaseConnection(settings.database_path)
            app.state.orchestrator = await build_orchestrator(db_connection)
            logger.info("Registration chatbot ready")

        yield

        logger.info("Shutting down registration chatbot...")
        langfuse_client.flush()
        if db_connection is not None:
            db_connection.close_all_connections()

    app = FastAPI(
        title="Registration Chatbot API",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.orchestrator = orchestrator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept"],
    )

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RecordStoreError, record_store_exception_handler)
    app.add_exception_handler(TextGenerationError, text_generation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(routes.router)

    return app
