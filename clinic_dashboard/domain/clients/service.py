"""Client service - Airtable client list and the chat-log sync"""

import asyncio
import logging
from collections import Counter
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from ...errors import FetchResult, degraded_sources
from ...services.airtable_service import AirtableService
from ...services.supabase_service import SupabaseService
from ...shared.validators import normalize_phone, parse_iso_datetime, rounded_percentage
from ..conversations.aggregator import build_conversations
from ..conversations.filters import is_excluded
from ..conversations.schemas import UNKNOWN_NAME, Conversation, RawMessage
from .schemas import (
    DEFAULT_SERVICE,
    LINK_SENT_FIELD,
    NAME_FIELD,
    PHONE_FIELD,
    SERVICES_FIELD,
    WHATSAPP_CLIENT_NAME,
    AirtableClientRecord,
    ClientListResponse,
    ClientStats,
    ServiceCount,
    ServiceStat,
    SyncCounts,
    SyncPreviewResponse,
    SyncResponse,
)

logger = logging.getLogger(__name__)

TOP_CLIENT_SERVICES = 5
SYNC_THROTTLE_EVERY = 5
SYNC_THROTTLE_SECONDS = 0.2


def _recency_key(record: AirtableClientRecord) -> str:
    return record.lastUpdate or record.firstContact or ""


def _contacted_since(record: AirtableClientRecord, since: datetime) -> bool:
    contact = parse_iso_datetime(record.firstContact)
    return contact is not None and contact >= since


def build_client_stats(records: Sequence[AirtableClientRecord], now: datetime) -> ClientStats:
    with_link = sum(1 for r in records if r.linkSent)
    service_counts = Counter(service for r in records for service in r.services)

    return ClientStats(
        total=len(records),
        newThisWeek=sum(1 for r in records if _contacted_since(r, now - timedelta(days=7))),
        newToday=sum(1 for r in records if _contacted_since(r, now - timedelta(days=1))),
        withLinkSent=with_link,
        linkSentPercentage=rounded_percentage(with_link, len(records)),
        topServices=[
            ServiceCount(service=service, count=count)
            for service, count in service_counts.most_common(TOP_CLIENT_SERVICES)
        ],
    )


def build_service_stats(conversations: Sequence[Conversation]) -> list[ServiceStat]:
    """Consultations and links sent per service label, most consulted first"""
    stats: dict[str, ServiceStat] = {}
    for conversation in conversations:
        for service in conversation.servicesConsulted:
            stat = stats.setdefault(service, ServiceStat(service=service, consultations=0, linksSent=0))
            stat.consultations += 1
            if conversation.linkSent:
                stat.linksSent += 1
    return sorted(stats.values(), key=lambda s: s.consultations, reverse=True)


def client_fields(conversation: Conversation) -> dict[str, Any]:
    """Airtable fields written for one conversation"""
    name = conversation.displayName
    return {
        NAME_FIELD: name if name != UNKNOWN_NAME else WHATSAPP_CLIENT_NAME,
        PHONE_FIELD: conversation.phoneNumber,
        SERVICES_FIELD: ", ".join(conversation.servicesConsulted) or DEFAULT_SERVICE,
        LINK_SENT_FIELD: conversation.linkSent,
    }


class ClientService:
    """Service layer for the client table"""

    def __init__(
        self,
        airtable: AirtableService,
        supabase: Optional[SupabaseService] = None,
        throttle_seconds: float = SYNC_THROTTLE_SECONDS,
    ):
        self.airtable = airtable
        self.supabase = supabase
        self.throttle_seconds = throttle_seconds

    async def list_clients(self, now: Optional[datetime] = None) -> ClientListResponse:
        now = now or datetime.now(timezone.utc)
        result = await self.airtable.fetch_all_records()
        records = [r for r in result.data if not is_excluded(r.name, r.phone_key)]
        records.sort(key=_recency_key, reverse=True)

        return ClientListResponse(
            clients=records,
            stats=build_client_stats(records, now),
            lastUpdated=now.isoformat(),
            degradedSources=degraded_sources(result),
        )

    async def _fold_chat_log(self) -> tuple[FetchResult[RawMessage], list[Conversation]]:
        result = await self.supabase.fetch_all_messages()
        return result, build_conversations(result.data)

    @staticmethod
    def _preview_fields(
        messages: Sequence[RawMessage], conversations: Sequence[Conversation]
    ) -> dict[str, Any]:
        included = {c.sessionId for c in conversations}
        return {
            "totalMessages": sum(1 for m in messages if m.sessionId in included),
            "totalConversations": len(conversations),
            "conversationsWithCalLink": sum(1 for c in conversations if c.linkSent),
            "conversationsWithServices": sum(1 for c in conversations if c.servicesConsulted),
            "serviceStats": build_service_stats(conversations),
            "lastUpdated": datetime.now(timezone.utc).isoformat(),
        }

    async def preview_sync(self) -> SyncPreviewResponse:
        """What a sync would write, without touching Airtable"""
        result, conversations = await self._fold_chat_log()
        return SyncPreviewResponse(
            **self._preview_fields(result.data, conversations),
            degradedSources=degraded_sources(result),
        )

    async def sync(self) -> SyncResponse:
        """
        Upsert one Airtable record per conversation that consulted a service.

        Existing records are matched by normalized phone number. Writes pause
        briefly after every fifth upsert to stay under Airtable's rate limit.
        """
        existing = await self.airtable.fetch_all_records()
        result, conversations = await self._fold_chat_log()

        records_by_phone = {r.phone_key: r for r in existing.data if r.phone_key}

        to_sync = [c for c in conversations if c.servicesConsulted]
        counts = SyncCounts(total=len(to_sync))

        if not existing.ok or not result.ok:
            # Upserts need the whole Airtable table and the whole chat log
            logger.warning("⚠️ Airtable sync skipped: source data incomplete")
            counts.errors = counts.total
            return SyncResponse(
                sync=counts,
                **self._preview_fields(result.data, conversations),
                degradedSources=degraded_sources(result, existing),
            )

        logger.info(f"🔄 Syncing {len(to_sync)} conversations to Airtable")

        for index, conversation in enumerate(to_sync):
            fields = client_fields(conversation)
            record = records_by_phone.get(normalize_phone(conversation.phoneNumber))

            if record is not None:
                ok = await self.airtable.update_record(record.id, fields)
                if ok:
                    counts.updated += 1
            else:
                ok = await self.airtable.create_record(fields)
                if ok:
                    counts.created += 1
            if not ok:
                counts.errors += 1

            if index % SYNC_THROTTLE_EVERY == SYNC_THROTTLE_EVERY - 1:
                await asyncio.sleep(self.throttle_seconds)

        logger.info(
            f"✅ Airtable sync done: {counts.created} created, {counts.updated} updated, {counts.errors} errors"
        )
        return SyncResponse(
            sync=counts,
            **self._preview_fields(result.data, conversations),
            degradedSources=degraded_sources(result, existing),
        )
