"""Service metrics - joins chat conversations and bookings per service label"""

import asyncio
import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from ...errors import degraded_sources
from ...services.calcom_service import CalcomService
from ...services.supabase_service import SupabaseService
from ...shared.validators import rounded_percentage
from ..bookings.schemas import Booking
from ..conversations.aggregator import build_conversations
from ..conversations.schemas import UNKNOWN_NAME, Conversation
from .matching import has_booking, normalize_name
from .schemas import CalcomStats, ServiceMetric, ServiceMetricsResponse, ServiceTotals

logger = logging.getLogger(__name__)

TOP_SERVICES = 15


def conversion_rate(bookings_confirmed: int, links_sent: int) -> int:
    """Rounded percentage of links that turned into bookings, 0 without links"""
    return rounded_percentage(bookings_confirmed, links_sent)


def build_service_metrics(
    conversations: Sequence[Conversation], attendee_names: Sequence[str]
) -> list[ServiceMetric]:
    """
    One row per service label, sorted by consultations (highest first).

    Each conversation mentioning a service counts as one consultation, and as
    one link sent when the assistant shared the scheduling link. Confirmed
    bookings count distinct normalized client names that match a booking
    attendee, so near-duplicate names of one client count once.
    """
    rows: dict[str, ServiceMetric] = {}
    names_by_service: dict[str, list[str]] = {}

    for conversation in conversations:
        for service in conversation.servicesConsulted:
            row = rows.get(service)
            if row is None:
                row = rows[service] = ServiceMetric(service=service)
                names_by_service[service] = []

            row.consultations += 1
            if conversation.linkSent:
                row.linksSent += 1
            names_by_service[service].append(conversation.displayName)

    for service, row in rows.items():
        listed: set[str] = set()
        booked: set[str] = set()
        for name in names_by_service[service]:
            normalized = normalize_name(name)
            if name != UNKNOWN_NAME and normalized and normalized not in listed:
                row.clients.append(name)
                listed.add(normalized)
            if normalized not in booked and has_booking(name, attendee_names):
                row.bookingsConfirmed += 1
                booked.add(normalized)

        row.conversionRate = conversion_rate(row.bookingsConfirmed, row.linksSent)

    # sorted() is stable, so ties keep first-seen order
    return sorted(rows.values(), key=lambda r: r.consultations, reverse=True)


def build_totals(
    services: Sequence[ServiceMetric], conversations: Sequence[Conversation], bookings: Sequence[Booking]
) -> ServiceTotals:
    """Totals over the full, untruncated service list"""
    return ServiceTotals(
        totalConsultations=sum(s.consultations for s in services),
        totalLinksSent=sum(s.linksSent for s in services),
        totalBookings=sum(s.bookingsConfirmed for s in services),
        uniqueServices=len(services),
        totalConversations=len(conversations),
        conversationsWithCalLink=sum(1 for c in conversations if c.linkSent),
        totalCalcomBookings=len(bookings),
    )


class ServiceMetricsService:
    """Builds the service metrics view for one request"""

    def __init__(self, supabase: SupabaseService, calcom: CalcomService):
        self.supabase = supabase
        self.calcom = calcom

    async def get_service_metrics(self) -> ServiceMetricsResponse:
        messages_result, bookings_result = await asyncio.gather(
            self.supabase.fetch_all_messages(), self.calcom.fetch_bookings()
        )

        conversations = build_conversations(messages_result.data)
        bookings = bookings_result.data
        attendee_names = [b.attendeeName for b in bookings if b.attendeeName]

        services = build_service_metrics(conversations, attendee_names)
        totals = build_totals(services, conversations, bookings)

        logger.info(
            f"📊 Service metrics: {len(conversations)} conversations, {len(services)} services, "
            f"{totals.totalBookings} matched of {len(bookings)} bookings"
        )

        return ServiceMetricsResponse(
            services=services[:TOP_SERVICES],
            totals=totals,
            calcomStats=CalcomStats(
                totalBookings=len(bookings),
                matchedBookings=totals.totalBookings,
                overallConversionRate=conversion_rate(len(bookings), totals.conversationsWithCalLink),
            ),
            lastUpdated=datetime.now(timezone.utc).isoformat(),
            degradedSources=degraded_sources(messages_result, bookings_result),
        )
