"""Shared normalization utilities"""

import math
import re
from datetime import datetime, timezone
from typing import Optional

WHATSAPP_SUFFIXES = ("@s.whatsapp.net", "@lid")


def normalize_phone(phone: Optional[str]) -> str:
    """
    Normalize a phone number the way client records are keyed.

    Args:
        phone: Phone number, possibly a WhatsApp JID like "18093503832@s.whatsapp.net"

    Returns:
        Digits only, or an empty string when nothing usable remains
    """
    if not phone:
        return ""

    phone = phone.strip()
    for suffix in WHATSAPP_SUFFIXES:
        if phone.endswith(suffix):
            phone = phone[: -len(suffix)]
            break

    return re.sub(r"\D", "", phone)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp from a provider; naive values are taken as UTC"""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_percentage(numerator: int, denominator: int) -> str:
    """One-decimal percentage string, "0" when the denominator is zero"""
    if denominator <= 0:
        return "0"
    return f"{numerator / denominator * 100:.1f}"


def rounded_percentage(numerator: int, denominator: int) -> int:
    """Whole-number percentage rounded half up, 0 when the denominator is zero"""
    if denominator <= 0:
        return 0
    return math.floor(numerator * 100 / denominator + 0.5)
