"""
Event handlers for application lifecycle events.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from fieldops.core.config import settings
from fieldops.services.event_bus.bus import get_event_bus
from fieldops.services.event_bus.events import EventType

logger = logging.getLogger("fieldops")


async def startup_event_handler() -> None:
    """
    Handle application startup.

    Initialize the database connection, the event bus and its subscribers.
    """
    logger.info(f"Starting {settings.PROJECT_NAME}")

    try:
        from fieldops.db.session import initialize_database
        await initialize_database()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        # Don't raise error to allow startup to continue

    try:
        event_bus = get_event_bus()
        await event_bus.initialize()
        logger.info("Event bus initialized successfully")
        await event_bus.publish(EventType.SYSTEM_STARTUP, {"version": settings.VERSION})
    except Exception as e:
        logger.error(f"Error initializing event bus: {e}")

    try:
        from fieldops.services.notifications.portal import initialize_portal_invites
        await initialize_portal_invites()
    except Exception as e:
        logger.error(f"Error initializing portal invites: {e}")

    logger.info(f"{settings.PROJECT_NAME} v{settings.VERSION} startup complete")


async def shutdown_event_handler() -> None:
    """
    Handle application shutdown.

    Clean up resources and close connections properly.
    """
    logger.info(f"Shutting down {settings.PROJECT_NAME}")

    event_bus = get_event_bus()
    try:
        await event_bus.publish(EventType.SYSTEM_SHUTDOWN, {
            "reason": "Application shutdown",
            "graceful": True
        })
    except Exception as e:
        logger.error(f"Error publishing shutdown event: {e}")

    try:
        from fieldops.services.notifications.portal import shutdown_portal_invites
        await shutdown_portal_invites()
    except Exception as e:
        logger.error(f"Error shutting down portal invites: {e}")

    await event_bus.shutdown()

    try:
        from fieldops.db.session import close_database_connections
        await close_database_connections()
    except Exception as e:
        logger.error(f"Error closing database connections: {e}")

    logger.info("Application shutdown complete")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Run startup before the first request and shutdown after the last."""
    await startup_event_handler()
    try:
        yield
    finally:
        await shutdown_event_handler()
