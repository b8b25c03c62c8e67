import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from workforce_auth.core.config import settings
from workforce_auth.core.database import (
    close_database_connection,
    create_database_engine,
    create_sessionmaker,
)
from workforce_auth.exceptions import ServiceUnavailableError
from workforce_auth.services.audit_service import AuditService
from workforce_auth.services.bootstrap_service import BootstrapService
from workforce_auth.services.session_service import SessionService

logger = logging.getLogger(__name__)


# ============================================================================
# Background Session Sweep
# ============================================================================
async def sweep_expired_sessions(
    sessionmaker: async_sessionmaker[AsyncSession],
    audit_service: AuditService,
) -> int:
    """Delete expired sessions once, in a dedicated database session."""
    async with sessionmaker() as session:
        return await SessionService(session, audit_service).sweep_expired()


async def _sweep_loop(
    sessionmaker: async_sessionmaker[AsyncSession],
    audit_service: AuditService,
    interval: int,
) -> None:
    """Periodically delete expired sessions until cancelled."""
    while True:
        try:
            await asyncio.sleep(interval)
            await sweep_expired_sessions(sessionmaker, audit_service)
        except asyncio.CancelledError:
            break
        except Exception:
            logger.exception("Error in session sweep loop")


def start_session_sweeper(app: FastAPI) -> None:
    """Start the sweep task unless the interval is 0."""
    interval = settings.session_sweep_interval_seconds
    if interval <= 0 or getattr(app.state, "sweeper_task", None) is not None:
        return
    app.state.sweeper_task = asyncio.create_task(
        _sweep_loop(app.state.sessionmaker, AuditService(app.state.sessionmaker), interval)
    )
    logger.info(f"Session sweeper started (interval={interval}s)")


async def stop_session_sweeper(app: FastAPI) -> None:
    """Cancel the sweep task and wait for it to finish."""
    task = getattr(app.state, "sweeper_task", None)
    if task is None:
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
    app.state.sweeper_task = None


# ============================================================================
# Lifespan Context Manager
# ============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):  # type: ignore
    """
    Lifespan context manager for startup and shutdown events.

    Handles:
    - Database engine creation and storage in app.state
    - Session factory creation
    - Super administrator seeding
    - Periodic sweep of expired sessions
    - Resource cleanup on shutdown
    """
    logger.info(f"Starting {settings.app_name} v{settings.version}")
    logger.info(f"Environment: {settings.environment}")

    # Create database engine
    engine = create_database_engine()

    # Create sessionmaker and store in app state
    app.state.sessionmaker = create_sessionmaker(engine)
    app.state.sweeper_task = None

    logger.info("Sessionmaker created successfully")

    if settings.bootstrap_on_startup:
        try:
            async with app.state.sessionmaker() as session:
                await BootstrapService(
                    session, AuditService(app.state.sessionmaker)
                ).ensure_super_admin()
        except ServiceUnavailableError:
            # Readiness reports the database; seeding retries on first allow-listed login
            logger.error("Super admin seeding skipped: database unavailable")

    start_session_sweeper(app)

    yield

    # Cleanup on shutdown
    logger.info("Shutting down application")
    await stop_session_sweeper(app)
    await close_database_connection(engine)
    app.state.sessionmaker = None
