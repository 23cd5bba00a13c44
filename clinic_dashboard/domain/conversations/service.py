"""Conversation service - chat log views"""

import logging
from datetime import datetime, timezone

from ...errors import degraded_sources
from ...services.supabase_service import SupabaseService
from .aggregator import aggregate, build_conversations
from .filters import is_excluded
from .schemas import (
    ConversationListResponse,
    MessageStatsResponse,
    SessionMessage,
    SessionMessagesResponse,
)

logger = logging.getLogger(__name__)

CONVERSATION_LIST_LIMIT = 100


class ConversationService:
    """Service layer for conversation views"""

    def __init__(self, supabase: SupabaseService):
        self.supabase = supabase

    async def list_conversations(self) -> ConversationListResponse:
        """Most active conversations first"""
        result = await self.supabase.fetch_all_messages()
        conversations = build_conversations(result.data)
        conversations.sort(key=lambda c: c.messageCount, reverse=True)

        return ConversationListResponse(
            conversations=conversations[:CONVERSATION_LIST_LIMIT],
            total=len(conversations),
            lastUpdated=datetime.now(timezone.utc).isoformat(),
            degradedSources=degraded_sources(result),
        )

    async def get_session_messages(self, session_id: str) -> SessionMessagesResponse:
        """Full transcript of one session; the test account's transcript is never exposed"""
        result = await self.supabase.fetch_session_messages(session_id)

        conversation = aggregate(result.data).get(session_id)
        if is_excluded(conversation.displayName if conversation else "", session_id):
            logger.info(f"Transcript requested for excluded session {session_id}")
            return SessionMessagesResponse(sessionId=session_id, messages=[], totalMessages=0)

        messages = [SessionMessage(id=m.id, type=m.role, content=m.text) for m in result.data]

        return SessionMessagesResponse(
            sessionId=session_id,
            messages=messages,
            totalMessages=len(messages),
            degradedSources=degraded_sources(result),
        )

    async def get_message_stats(self) -> MessageStatsResponse:
        """Raw message totals over the chat log, test account excluded"""
        result = await self.supabase.fetch_all_messages()
        included = {c.sessionId for c in build_conversations(result.data)}
        messages = [m for m in result.data if m.sessionId in included]

        human = sum(1 for m in messages if m.role == "human")
        ai = sum(1 for m in messages if m.role == "ai")
        sessions = len(included)
        average = f"{len(messages) / sessions:.1f}" if sessions else "0"

        return MessageStatsResponse(
            totalMessages=len(messages),
            humanMessages=human,
            aiMessages=ai,
            uniqueConversations=sessions,
            avgMessagesPerConversation=average,
            lastUpdated=datetime.now(timezone.utc).isoformat(),
            degradedSources=degraded_sources(result),
        )
