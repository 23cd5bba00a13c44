"""
Identity extraction from WhatsApp session ids and message bodies.

The agent prefixes each human message with a small header, e.g.::

    Fecha: 2025-11-03
    Nombre: Ana Lopez
    Teléfono: 18093503832@s.whatsapp.net
    <message text>

Older sessions used ``nombre de usuario:`` instead of ``Nombre:``. The header
sometimes carries the phone number where the name should be, so a value that
looks like a phone number is treated as no name at all.
"""

import re
from typing import Optional

from .schemas import UNKNOWN_NAME

SESSION_PHONE_PATTERN = re.compile(r"^(\d+)@")

# Current header: the value ends at a line break or at the phone label
NAME_LABEL_PATTERN = re.compile(
    r"\b(?:nombre|name):[ \t]*(.+?)(?:\s*\n|\s*tel[eé]fono:|\s*phone:|$)", re.IGNORECASE
)
# Legacy header
USER_NAME_LABEL_PATTERN = re.compile(r"\b(?:nombre de usuario|user ?name):[ \t]*(.+?)(?:\n|$)", re.IGNORECASE)

DATE_LABEL_PATTERN = re.compile(r"fecha:[ \t]*(.+?)(?:\n|nombre:|$)", re.IGNORECASE)
LEGACY_DATE_LABEL_PATTERN = re.compile(r"today:[ \t]*(.+?)(?:\n|nombre|$)", re.IGNORECASE)

PHONE_LIKE_PATTERNS = (re.compile(r"^\d+@"), re.compile(r"^\d{10,}"))


def extract_phone_number(session_id: str) -> str:
    """Leading digits before the first "@", or the session id unchanged"""
    match = SESSION_PHONE_PATTERN.match(session_id or "")
    if match:
        return match.group(1)
    return session_id


def _is_usable_name(candidate: str) -> bool:
    if not candidate:
        return False
    return not any(pattern.match(candidate) for pattern in PHONE_LIKE_PATTERNS)


def extract_display_name(text: str) -> str:
    """Name from the message header, or UNKNOWN_NAME"""
    if not text:
        return UNKNOWN_NAME

    for pattern in (NAME_LABEL_PATTERN, USER_NAME_LABEL_PATTERN):
        match = pattern.search(text)
        if match:
            name = match.group(1).strip()
            if _is_usable_name(name):
                return name

    return UNKNOWN_NAME


def extract_contact_date(text: str) -> Optional[str]:
    """Date label from the message header, if present"""
    if not text:
        return None

    for pattern in (DATE_LABEL_PATTERN, LEGACY_DATE_LABEL_PATTERN):
        match = pattern.search(text)
        if match:
            value = match.group(1).strip()
            if value:
                return value

    return None
