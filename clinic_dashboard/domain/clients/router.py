"""Client router - Airtable client list and chat-log sync"""

import logging

from fastapi import APIRouter, Depends

from ...auth import require_session
from ...dependencies import get_airtable_service, get_supabase_service
from ...services.airtable_service import AirtableService
from ...services.supabase_service import SupabaseService
from .schemas import ClientListResponse, SyncPreviewResponse, SyncResponse
from .service import ClientService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Clients"], dependencies=[Depends(require_session)])


def get_client_service(
    airtable: AirtableService = Depends(get_airtable_service),
    supabase: SupabaseService = Depends(get_supabase_service),
) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(airtable, supabase)


@router.get("/clients", response_model=ClientListResponse)
async def list_clients(service: ClientService = Depends(get_client_service)):
    """Client records, most recently updated first, with summary stats"""
    return await service.list_clients()


@router.get("/sync-supabase-airtable", response_model=SyncPreviewResponse)
async def preview_sync(service: ClientService = Depends(get_client_service)):
    return await service.preview_sync()


@router.post("/sync-supabase-airtable", response_model=SyncResponse)
async def run_sync(service: ClientService = Depends(get_client_service)):
    """Write one client record per conversation that consulted a service"""
    logger.info("🔄 Airtable sync requested")
    return await service.sync()
