"""
Dependencies for API endpoints.
"""
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from fieldops.core.config import settings
from fieldops.core.exceptions import TenantRequiredError
from fieldops.db.repositories.records import TenantRecordStore
from fieldops.db.session import get_db
from fieldops.services.notifications.portal import PortalInviteNotifier


async def get_tenant_id(
    tenant_id: Optional[str] = Header(None, alias=settings.TENANT_HEADER),
) -> str:
    """
    Tenant the request acts for.

    Raises:
        TenantRequiredError: If the tenant header is missing or blank
    """
    if not tenant_id or not tenant_id.strip():
        raise TenantRequiredError()
    return tenant_id.strip()


async def get_record_store(
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_db),
) -> TenantRecordStore:
    """Record store bound to the request's tenant."""
    return TenantRecordStore(session, tenant_id)


async def get_notifier(tenant_id: str = Depends(get_tenant_id)) -> PortalInviteNotifier:
    return PortalInviteNotifier(tenant_id)
