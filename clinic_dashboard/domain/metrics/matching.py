"""
Fuzzy correlation of chat names with booking attendee names.

Chat users type their own names ("Mari", "maria garcia", "María García López")
while Cal.com stores whatever the attendee entered, so an exact comparison
misses most real matches. The rules below favor recall: two different people
sharing a first name will match, and counts built on this are estimates.
"""

import re
import unicodedata
from collections.abc import Iterable

# Default names that must never match anything
PLACEHOLDER_NAMES = frozenset({"unknown", "desconocido", "cliente whatsapp"})

MIN_PARTIAL_LENGTH = 3


def normalize_name(name: str) -> str:
    """Lowercase, strip accents and punctuation, collapse whitespace"""
    if not name:
        return ""
    decomposed = unicodedata.normalize("NFD", name.lower())
    without_accents = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    cleaned = re.sub(r"[^a-z0-9\s]", "", without_accents)
    return " ".join(cleaned.split())


def _contains_words(haystack: str, needle: str) -> bool:
    return f" {needle} " in f" {haystack} "


def names_match(name1: str, name2: str) -> bool:
    """Whether two free-form names plausibly belong to the same person"""
    n1 = normalize_name(name1)
    n2 = normalize_name(name2)

    if not n1 or not n2 or n1 in PLACEHOLDER_NAMES or n2 in PLACEHOLDER_NAMES:
        return False

    if n1 == n2:
        return True

    # Partial names, compared on whole words so "jose" does not match "joseph"
    if len(n1) > MIN_PARTIAL_LENGTH and _contains_words(n2, n1):
        return True
    if len(n2) > MIN_PARTIAL_LENGTH and _contains_words(n1, n2):
        return True

    first1 = n1.split(" ")[0]
    first2 = n2.split(" ")[0]
    return len(first1) > MIN_PARTIAL_LENGTH and first1 == first2


def has_booking(conversation_name: str, attendee_names: Iterable[str]) -> bool:
    return any(names_match(conversation_name, attendee) for attendee in attendee_names)
