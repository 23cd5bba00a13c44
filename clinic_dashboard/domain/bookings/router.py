"""Booking router - Cal.com booking views, stats and dashboard writes"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...auth import require_session
from ...dependencies import get_airtable_service, get_calcom_service
from ...services.airtable_service import AirtableService
from ...services.calcom_service import CalcomService
from .schemas import (
    BookingListResponse,
    BookingStatsResponse,
    BookingWriteResponse,
    CancelBookingRequest,
    CreateBookingRequest,
    EventTypeListResponse,
    RescheduleBookingRequest,
    SlotsResponse,
)
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Bookings"], dependencies=[Depends(require_session)])


def get_booking_service(
    calcom: CalcomService = Depends(get_calcom_service),
    airtable: AirtableService = Depends(get_airtable_service),
) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(calcom, airtable)


@router.get("/stats", response_model=BookingStatsResponse)
async def get_booking_stats(service: BookingService = Depends(get_booking_service)):
    """Booking counters, booking/cancel rates and the next upcoming appointments"""
    return await service.get_stats()


@router.get("/bookings", response_model=BookingListResponse)
async def list_bookings(service: BookingService = Depends(get_booking_service)):
    return await service.list_bookings()


@router.get("/bookings/event-types", response_model=EventTypeListResponse)
async def list_event_types(service: BookingService = Depends(get_booking_service)):
    """Visible Cal.com event types"""
    return await service.list_event_types()


@router.get("/bookings/slots", response_model=SlotsResponse)
async def get_available_slots(
    startTime: str = Query(""),
    endTime: str = Query(""),
    eventTypeId: Optional[int] = Query(None),
    service: BookingService = Depends(get_booking_service),
):
    return await service.get_slots(startTime, endTime, eventTypeId)


@router.post("/bookings/create", response_model=BookingWriteResponse)
async def create_booking(data: CreateBookingRequest, service: BookingService = Depends(get_booking_service)):
    """Book an appointment from the dashboard form"""
    logger.info(f"📝 Booking requested for {data.full_name}")
    return await service.create_booking(data)


@router.post("/bookings/{booking_id}/cancel", response_model=BookingWriteResponse)
async def cancel_booking(
    booking_id: int,
    data: Optional[CancelBookingRequest] = None,
    service: BookingService = Depends(get_booking_service),
):
    return await service.cancel_booking(booking_id, data or CancelBookingRequest())


@router.patch("/bookings/{booking_id}/reschedule", response_model=BookingWriteResponse)
async def reschedule_booking(
    booking_id: int,
    data: RescheduleBookingRequest,
    service: BookingService = Depends(get_booking_service),
):
    return await service.reschedule_booking(booking_id, data)
