"""
SLA Tracker - Main Application
==============================

Support ticket tracking with priority-based SLA monitoring.

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: TicketService and DTOs
- Domain: Ticket, TicketStore, SLAPolicy, SLAAggregator
- Infrastructure: JSON file / SQL snapshot repositories
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import Engine
from sqlalchemy.exc import ArgumentError

from sla_tracker.config import Settings, get_settings
from sla_tracker.core import ConfigurationException
from sla_tracker.infrastructure.database import (
    close_database,
    create_session_factory,
    create_tables,
    init_database,
)
from sla_tracker.shared.api.middleware import install_middleware
from sla_tracker.shared.infrastructure.logging import get_logger, setup_logging
from sla_tracker.sla.application import ITicketRepository, TicketService
from sla_tracker.sla.domain import Clock, TicketStore
from sla_tracker.sla.infrastructure import (
    JSONFileTicketRepository,
    SQLAlchemyTicketRepository,
)
from sla_tracker.sla.interfaces import ticket_router

logger = get_logger(__name__)


def build_repository(settings: Settings) -> tuple[ITicketRepository, Optional[Engine]]:
    """
    Pick the snapshot repository from settings.

    Returns:
        The repository and, for the SQL backend, its engine

    Raises:
        ConfigurationException: database_url cannot be parsed
    """
    if settings.database_url:
        try:
            engine = init_database(settings.database_url, echo=settings.debug)
        except ArgumentError as e:
            raise ConfigurationException(f"Invalid database_url: {e}")
        return SQLAlchemyTicketRepository(create_session_factory(engine)), engine
    return JSONFileTicketRepository(settings.storage_path), None


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[ITicketRepository] = None,
    clock: Optional[Clock] = None,
    configure_logging: bool = True,
) -> FastAPI:
    """
    Build an application with its own ticket store.

    Args:
        settings: Defaults to the cached environment settings
        repository: Overrides the repository chosen from settings
        clock: Current-instant source for the store (UTC wall time by default)
        configure_logging: Install the JSON log handler on startup
    """
    settings = settings or get_settings()
    engine = None
    if repository is None:
        repository, engine = build_repository(settings)

    service = TicketService(TicketStore(clock=clock), repository)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        """
        STARTUP: logging, schema (SQL backend), snapshot load.
        SHUTDOWN: dispose database connections.
        """
        if configure_logging:
            setup_logging(settings.log_level, settings.environment)
        logger.info("Starting SLA Tracker", extra={
            "version": settings.app_version,
            "environment": settings.environment,
            "backend": "sql" if engine is not None else type(repository).__name__,
        })

        if engine is not None:
            create_tables(engine)
        service.load()

        yield

        logger.info("Shutting down SLA Tracker")
        if engine is not None:
            close_database(engine)

    app = FastAPI(
        title="SLA Tracker API",
        description="""
        Ticket lifecycle tracking with priority-based SLA deadlines.

        - `POST /tickets` - open a ticket
        - `PATCH /tickets/{id}/status` - move it through open / in_progress / resolved
        - `GET /dashboard` - filtered tickets plus KPIs
        """,
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.ticket_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_middleware(app)
    app.include_router(ticket_router)

    @app.get("/health", tags=["Health"])
    def health_check(request: Request):
        """Health check endpoint for load balancers and orchestrators."""
        service: TicketService = request.app.state.ticket_service
        return {
            "status": "healthy",
            "version": settings.app_version,
            "environment": settings.environment,
            "checks": {
                "ticket_store": f"loaded ({len(service.store)} tickets)",
                "storage": "sql" if engine is not None else type(repository).__name__,
            },
        }

    @app.get("/", tags=["Root"])
    def root():
        """Root endpoint with API information."""
        return {
            "service": "SLA Tracker",
            "version": settings.app_version,
            "docs": "/docs",
            "health": "/health",
            "endpoints": [
                "POST /tickets - Create ticket",
                "GET /tickets - List tickets",
                "GET /tickets/{id} - Get ticket",
                "PATCH /tickets/{id}/status - Change status",
                "DELETE /tickets/{id} - Delete ticket",
                "GET /dashboard - Tickets and KPIs",
            ],
        }

    return app


def main() -> None:
    """Development entry point."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "sla_tracker.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info",
    )


if __name__ == "__main__":
    main()
