"""
Event type definitions for the event bus.
"""
from enum import Enum
from typing import Any, Dict, Optional
from datetime import datetime, timezone


class EventType(str, Enum):
    """Event types for the event bus."""

    # System events
    SYSTEM_STARTUP = "system:startup"
    SYSTEM_SHUTDOWN = "system:shutdown"

    # Import events
    IMPORT_PROGRESS = "import:progress"
    IMPORT_COMPLETED = "import:completed"

    # Record events
    CLIENT_IMPORTED = "client:imported"


class Event:
    """
    Base event class.

    Contains common event data and helper methods.
    """

    def __init__(
        self,
        event_type: EventType,
        data: Dict[str, Any],
        timestamp: Optional[datetime] = None
    ):
        self.event_type = event_type
        self.data = data
        self.timestamp = timestamp or datetime.now(timezone.utc)


class ClientImportedEvent(Event):
    """
    A client was created by a CSV import.

    Carries what a portal invitation needs.
    """

    def __init__(
        self,
        tenant_id: str,
        client_id: str,
        email: str,
        name: str,
        timestamp: Optional[datetime] = None
    ):
        data = {
            "tenant_id": tenant_id,
            "client_id": client_id,
            "email": email,
            "name": name,
        }
        super().__init__(EventType.CLIENT_IMPORTED, data, timestamp)
