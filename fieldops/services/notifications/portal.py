"""
Customer portal invitations for imported clients.

The import executor only hands off: PortalInviteNotifier publishes a
``client:imported`` event, and PortalInviteService, subscribed at startup,
asks the portal to send the invitation.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from fieldops.core.config import settings
from fieldops.schemas.client import ClientCreate
from fieldops.services.event_bus.bus import EventBus, get_event_bus
from fieldops.services.event_bus.events import ClientImportedEvent, EventType

logger = logging.getLogger("fieldops.notifications.portal")

SUBSCRIBER_ID = "portal-invites"


class PortalInviteNotifier:
    """Notifier passed to the import executor for one tenant."""

    def __init__(self, tenant_id: str, event_bus: Optional[EventBus] = None):
        self.tenant_id = tenant_id
        self.event_bus = event_bus or get_event_bus()

    async def client_imported(self, client_id: str, record: ClientCreate) -> None:
        if not record.email:
            return
        event = ClientImportedEvent(
            tenant_id=self.tenant_id,
            client_id=client_id,
            email=record.email,
            name=record.name,
        )
        await self.event_bus.publish(
            EventType.CLIENT_IMPORTED,
            {**event.data, "timestamp": event.timestamp.isoformat()},
        )


class PortalInviteService:
    """
    Sends portal invitations for ``client:imported`` events.

    Without a configured PORTAL_INVITE_URL invitations are only logged.
    Delivery failures are logged and never raised.
    """

    def __init__(
        self,
        invite_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.invite_url = invite_url if invite_url is not None else settings.PORTAL_INVITE_URL
        self.timeout = timeout or settings.PORTAL_INVITE_TIMEOUT
        self._transport = transport
        self.sent = 0
        self.failed = 0

    async def handle_client_imported(self, data: Dict[str, Any]) -> bool:
        """
        Event bus callback.

        Args:
            data: ``client:imported`` event data

        Returns:
            bool: True if the portal accepted the invitation
        """
        email = data.get("email")
        if not email:
            return False

        if not self.invite_url:
            logger.info(f"Portal invites not configured, skipping invite for client {data.get('client_id')}")
            return False

        payload = {
            "tenant_id": data.get("tenant_id"),
            "client_id": data.get("client_id"),
            "email": email,
            "name": data.get("name"),
        }

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(self.invite_url, json=payload, timeout=self.timeout)
                response.raise_for_status()
        except httpx.HTTPError as e:
            self.failed += 1
            logger.warning(f"Portal invite for client {data.get('client_id')} failed: {e}")
            return False

        self.sent += 1
        logger.info(f"Portal invite sent for client {data.get('client_id')}")
        return True


_service: Optional[PortalInviteService] = None


async def initialize_portal_invites(event_bus: Optional[EventBus] = None) -> Optional[PortalInviteService]:
    """Subscribe the invite service to the event bus. Called at startup."""
    global _service

    if not settings.PORTAL_INVITES_ENABLED:
        logger.info("Portal invites disabled")
        return None

    bus = event_bus or get_event_bus()
    _service = PortalInviteService()
    await bus.subscribe(EventType.CLIENT_IMPORTED, _service.handle_client_imported, SUBSCRIBER_ID)
    logger.info("Portal invite service initialized")
    return _service


async def shutdown_portal_invites(event_bus: Optional[EventBus] = None) -> None:
    global _service

    bus = event_bus or get_event_bus()
    await bus.unsubscribe(EventType.CLIENT_IMPORTED, SUBSCRIBER_ID)
    _service = None
    logger.info("Portal invite service shut down")
