"""
Folding of the raw chat log into one Conversation per session.

Messages are processed in store order (ascending id). Human messages feed
the name, date, service and last-message fields; assistant messages only
feed the link-sent flag. Every message counts toward messageCount.
"""

from collections.abc import Iterable

from ...config import SCHEDULING_LINK_MARKER
from .classifier import detect_services, has_scheduling_link
from .filters import exclude_test_data
from .identity import extract_contact_date, extract_display_name, extract_phone_number
from .schemas import UNKNOWN_NAME, Conversation, RawMessage

LAST_MESSAGE_MIN_LENGTH = 10
LAST_MESSAGE_MAX_LENGTH = 100


def _preview(text: str) -> str:
    if len(text) > LAST_MESSAGE_MAX_LENGTH:
        return text[:LAST_MESSAGE_MAX_LENGTH] + "..."
    return text


def _fold_human(conversation: Conversation, text: str) -> None:
    name = extract_display_name(text)
    if name != UNKNOWN_NAME:
        conversation.displayName = name

    contact_date = extract_contact_date(text)
    if contact_date:
        conversation.lastMessageDate = contact_date

    for service in detect_services(text):
        if service not in conversation.servicesConsulted:
            conversation.servicesConsulted.append(service)

    if len(text) > LAST_MESSAGE_MIN_LENGTH:
        conversation.lastMessage = _preview(text)


def aggregate(messages: Iterable[RawMessage], marker: str = SCHEDULING_LINK_MARKER) -> dict[str, Conversation]:
    """Build a session_id -> Conversation map; input is never modified"""
    conversations: dict[str, Conversation] = {}

    for message in messages:
        conversation = conversations.get(message.sessionId)
        if conversation is None:
            conversation = Conversation(
                sessionId=message.sessionId,
                phoneNumber=extract_phone_number(message.sessionId),
            )
            conversations[message.sessionId] = conversation

        conversation.messageCount += 1
        text = message.text or ""

        if message.role == "human":
            _fold_human(conversation, text)
        elif message.role == "ai":
            if has_scheduling_link(text, marker):
                conversation.linkSent = True

    return conversations


def build_conversations(messages: Iterable[RawMessage], marker: str = SCHEDULING_LINK_MARKER) -> list[Conversation]:
    """Aggregate then drop the test account; the list every endpoint starts from"""
    return exclude_test_data(aggregate(messages, marker).values())
