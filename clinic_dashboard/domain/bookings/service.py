"""Booking service - Cal.com booking views and dashboard writes"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import HTTPException

from ...errors import FetchResult, degraded_sources
from ...services.airtable_service import AirtableService
from ...services.calcom_service import CalcomService
from ...shared.validators import format_percentage, parse_iso_datetime
from ..clients.schemas import AirtableClientRecord
from ..conversations.filters import is_excluded
from .schemas import (
    Booking,
    BookingListResponse,
    BookingStatsResponse,
    BookingWriteResponse,
    CancelBookingRequest,
    CreateBookingRequest,
    EventType,
    EventTypeListResponse,
    RecentBooking,
    RescheduleBookingRequest,
    SlotsResponse,
)

logger = logging.getLogger(__name__)

RECENT_UPCOMING_LIMIT = 5


def _local_zone(name: str):
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:
        logger.warning(f"Unknown time zone {name}, using UTC")
        return timezone.utc


def _start_sort_key(booking: Booking) -> datetime:
    return parse_iso_datetime(booking.startTime) or datetime.min.replace(tzinfo=timezone.utc)


class BookingService:
    """Service layer for booking reads and pass-through writes"""

    def __init__(self, calcom: CalcomService, airtable: Optional[AirtableService] = None):
        self.calcom = calcom
        self.airtable = airtable

    async def _fetch_client_records(self) -> FetchResult[AirtableClientRecord]:
        # Airtable only feeds the chat/link counters on the stats page
        if self.airtable is None or not self.airtable.configured:
            return FetchResult.failure("Airtable", "not configured")
        result = await self.airtable.fetch_all_records()
        kept = [r for r in result.data if not is_excluded(r.name, r.phone_key)]
        return FetchResult(data=kept, error=result.error)

    async def get_stats(self) -> BookingStatsResponse:
        results = await asyncio.gather(
            self.calcom.get_bookings_by_status(), self._fetch_client_records(), return_exceptions=True
        )
        for outcome in results:
            if isinstance(outcome, BaseException):
                raise outcome
        by_status, records_result = results

        upcoming = by_status["upcoming"].data
        past = by_status["past"].data
        cancelled = by_status["cancelled"].data

        rescheduled = sum(1 for b in cancelled if b.rescheduled)
        pure_cancelled = len(cancelled) - rescheduled
        confirmed = len(upcoming) + len(past)

        records = records_result.data
        links_sent = sum(1 for r in records if r.linkSent)

        zone = _local_zone(self.calcom.time_zone)
        recent = []
        for booking in upcoming[:RECENT_UPCOMING_LIMIT]:
            start = parse_iso_datetime(booking.startTime)
            local = start.astimezone(zone) if start else None
            recent.append(
                RecentBooking(
                    date=local.strftime("%Y-%m-%d") if local else "",
                    time=local.strftime("%H:%M") if local else "",
                    attendee=booking.attendeeName or "Sin nombre",
                    status="Reagendado" if booking.rescheduled else "Confirmado",
                )
            )

        return BookingStatsResponse(
            totalChats=len(records),
            linksSent=links_sent,
            confirmedBookings=confirmed,
            upcomingBookings=len(upcoming),
            pastBookings=len(past),
            cancelledBookings=pure_cancelled,
            rescheduledBookings=rescheduled,
            bookingRate=f"{format_percentage(confirmed, links_sent)}%",
            cancelRate=f"{format_percentage(pure_cancelled, confirmed + len(cancelled))}%",
            recentUpcoming=recent,
            lastUpdated=datetime.now(timezone.utc).isoformat(),
            degradedSources=degraded_sources(*by_status.values(), records_result),
        )

    async def list_bookings(self) -> BookingListResponse:
        """Every booking tagged with its status, newest start time first"""
        by_status = await self.calcom.get_bookings_by_status()
        bookings = [b for result in by_status.values() for b in result.data]
        bookings.sort(key=_start_sort_key, reverse=True)
        return BookingListResponse(bookings=bookings, degradedSources=degraded_sources(*by_status.values()))

    async def list_event_types(self) -> EventTypeListResponse:
        event_types = await self.calcom.list_event_types()
        visible = [
            EventType(
                id=et["id"],
                title=et.get("title") or "",
                slug=et.get("slug") or "",
                length=et.get("length"),
                description=et.get("description"),
            )
            for et in event_types
            if not et.get("hidden") and et.get("id") is not None
        ]
        return EventTypeListResponse(eventTypes=visible)

    async def _resolve_event_type(self, event_type_id: Optional[int]) -> int:
        if event_type_id:
            return event_type_id

        resolved = await self.calcom.first_visible_event_type_id()
        if not resolved:
            raise HTTPException(status_code=400, detail="No active event type found")
        return resolved

    async def get_slots(self, start_time: str, end_time: str, event_type_id: Optional[int]) -> SlotsResponse:
        if not start_time or not end_time:
            raise HTTPException(status_code=400, detail="startTime and endTime are required")

        resolved = await self._resolve_event_type(event_type_id)
        slots = await self.calcom.get_available_slots(resolved, start_time, end_time)
        return SlotsResponse(slots=slots, eventTypeId=resolved)

    async def create_booking(self, data: CreateBookingRequest) -> BookingWriteResponse:
        event_type_id = await self._resolve_event_type(data.eventTypeId)
        booking: dict[str, Any] = await self.calcom.create_booking(data, event_type_id)
        return BookingWriteResponse(message="Booking created", booking=booking)

    async def cancel_booking(self, booking_id: int, data: CancelBookingRequest) -> BookingWriteResponse:
        await self.calcom.cancel_booking(booking_id, data.reason)
        return BookingWriteResponse(message="Booking cancelled")

    async def reschedule_booking(self, booking_id: int, data: RescheduleBookingRequest) -> BookingWriteResponse:
        booking = await self.calcom.reschedule_booking(booking_id, data.startTime, data.reason)
        return BookingWriteResponse(message="Booking rescheduled", booking=booking)
