"""Conversation domain schemas - chat log records and derived conversations"""

from typing import Any, Optional

from pydantic import BaseModel, Field

UNKNOWN_NAME = "Unknown"


class RawMessage(BaseModel):
    """One stored chat message, as written by the WhatsApp agent"""

    id: int = 0
    sessionId: str = ""
    role: str = "human"
    text: str = ""

    model_config = {"frozen": True}

    @classmethod
    def from_supabase(cls, row: dict[str, Any]) -> "RawMessage":
        """Map an n8n_chat_histories row; malformed fields fall back to empty values"""
        message = row.get("message")
        if not isinstance(message, dict):
            message = {}

        content = message.get("content")
        role = message.get("type")

        try:
            message_id = int(row.get("id") or 0)
        except (TypeError, ValueError):
            message_id = 0

        session_id = row.get("session_id")

        return cls(
            id=message_id,
            sessionId=session_id if isinstance(session_id, str) else "",
            role=role if isinstance(role, str) and role else "human",
            text=content if isinstance(content, str) else "",
        )


class Conversation(BaseModel):
    """One chat session folded from its messages; rebuilt on every request"""

    sessionId: str
    phoneNumber: str
    displayName: str = UNKNOWN_NAME
    servicesConsulted: list[str] = Field(default_factory=list)
    linkSent: bool = False
    messageCount: int = 0
    lastMessage: str = ""
    lastMessageDate: Optional[str] = None


class ConversationListResponse(BaseModel):
    conversations: list[Conversation]
    total: int
    lastUpdated: str
    degradedSources: list[str] = Field(default_factory=list)


class SessionMessage(BaseModel):
    id: int
    type: str
    content: str


class SessionMessagesResponse(BaseModel):
    sessionId: str
    messages: list[SessionMessage]
    totalMessages: int
    degradedSources: list[str] = Field(default_factory=list)


class MessageStatsResponse(BaseModel):
    totalMessages: int
    humanMessages: int
    aiMessages: int
    uniqueConversations: int
    avgMessagesPerConversation: str
    lastUpdated: str
    degradedSources: list[str] = Field(default_factory=list)
