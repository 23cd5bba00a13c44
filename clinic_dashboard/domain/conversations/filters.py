"""Exclusion of the internal test account from every dashboard figure"""

from collections.abc import Iterable

from .schemas import Conversation

TEST_ACCOUNT_NAME = "eric henoc"
TEST_ACCOUNT_PHONE = "14078729969"


def is_excluded(display_name: str, session_id: str) -> bool:
    """True for the internal test account, matched by name or by phone prefix"""
    lowered = (display_name or "").lower()
    if TEST_ACCOUNT_NAME in lowered:
        return True
    if all(part in lowered for part in TEST_ACCOUNT_NAME.split()):
        return True
    return (session_id or "").startswith(TEST_ACCOUNT_PHONE)


def exclude_test_data(conversations: Iterable[Conversation]) -> list[Conversation]:
    return [c for c in conversations if not is_excluded(c.displayName, c.sessionId)]
