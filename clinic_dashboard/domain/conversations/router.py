"""Conversation router - WhatsApp chat log endpoints"""

import logging

from fastapi import APIRouter, Depends

from ...auth import require_session
from ...dependencies import get_supabase_service
from ...services.supabase_service import SupabaseService
from .schemas import ConversationListResponse, MessageStatsResponse, SessionMessagesResponse
from .service import ConversationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Conversations"], dependencies=[Depends(require_session)])


def get_conversation_service(
    supabase: SupabaseService = Depends(get_supabase_service),
) -> ConversationService:
    """Dependency injection for ConversationService"""
    return ConversationService(supabase)


@router.get("/conversations", response_model=ConversationListResponse)
async def list_conversations(service: ConversationService = Depends(get_conversation_service)):
    """Conversations folded from the chat log, most active first (top 100)"""
    return await service.list_conversations()


@router.get("/conversations/{session_id}", response_model=SessionMessagesResponse)
async def get_conversation_messages(
    session_id: str, service: ConversationService = Depends(get_conversation_service)
):
    """Transcript of one WhatsApp session"""
    return await service.get_session_messages(session_id)


@router.get("/supabase-messages", response_model=MessageStatsResponse)
async def get_message_stats(service: ConversationService = Depends(get_conversation_service)):
    """Message and session totals over the whole chat log"""
    return await service.get_message_stats()
