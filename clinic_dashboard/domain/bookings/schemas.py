"""Booking domain schemas - Cal.com bookings and pass-through write requests"""

from typing import Any, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

BOOKING_STATUSES = ("upcoming", "past", "cancelled")


class Booking(BaseModel):
    """A Cal.com booking; only attendeeName takes part in chat correlation"""

    id: Optional[int] = None
    uid: Optional[str] = None
    title: str = ""
    status: str = ""
    bookingStatus: str = ""
    rescheduled: bool = False
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    attendeeName: str = ""
    attendeeEmail: str = ""

    @classmethod
    def from_calcom(cls, payload: dict[str, Any], booking_status: str = "") -> "Booking":
        attendees = payload.get("attendees")
        attendee = attendees[0] if isinstance(attendees, list) and attendees else {}
        if not isinstance(attendee, dict):
            attendee = {}

        booking_id = payload.get("id")
        return cls(
            id=booking_id if isinstance(booking_id, int) else None,
            uid=payload.get("uid") or None,
            title=payload.get("title") or "",
            status=payload.get("status") or "",
            bookingStatus=booking_status,
            rescheduled=payload.get("rescheduled") is True,
            startTime=payload.get("startTime") or None,
            endTime=payload.get("endTime") or None,
            attendeeName=attendee.get("name") or "",
            attendeeEmail=attendee.get("email") or "",
        )


class BookingListResponse(BaseModel):
    bookings: list[Booking]
    degradedSources: list[str] = Field(default_factory=list)


class EventType(BaseModel):
    id: int
    title: str = ""
    slug: str = ""
    length: Optional[int] = None
    description: Optional[str] = None


class EventTypeListResponse(BaseModel):
    eventTypes: list[EventType]


class SlotsResponse(BaseModel):
    slots: dict[str, Any]
    eventTypeId: int


class CreateBookingRequest(BaseModel):
    """Booking form fields; everything except startTime identifies the attendee"""

    name: str
    lastName: str
    email: EmailStr
    phone: str
    dateOfBirth: str
    hasInsurance: str
    address: str
    startTime: str
    services: Optional[str] = None
    notes: Optional[str] = None
    eventTypeId: Optional[int] = None

    @field_validator("name", "lastName", "phone", "dateOfBirth", "hasInsurance", "address", "startTime")
    @classmethod
    def require_value(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("field is required")
        return v.strip()

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.lastName}"

    def compiled_notes(self) -> str:
        """Free-text notes blob carrying the fields Cal.com has no column for"""
        lines = [
            self.notes or "",
            f"Fecha de Nacimiento: {self.dateOfBirth}",
            f"Seguro Médico: {self.hasInsurance}",
            f"Dirección: {self.address}",
            f"Servicios: {self.services}" if self.services else "",
        ]
        return "\n".join(line for line in lines if line)


class CancelBookingRequest(BaseModel):
    reason: Optional[str] = None


class RescheduleBookingRequest(BaseModel):
    startTime: str
    reason: Optional[str] = None

    @field_validator("startTime")
    @classmethod
    def require_start_time(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("startTime is required")
        return v.strip()


class BookingWriteResponse(BaseModel):
    success: bool = True
    message: str
    booking: Optional[dict[str, Any]] = None


class RecentBooking(BaseModel):
    date: str
    time: str
    attendee: str
    status: str


class BookingStatsResponse(BaseModel):
    totalChats: int
    linksSent: int
    confirmedBookings: int
    upcomingBookings: int
    pastBookings: int
    cancelledBookings: int
    rescheduledBookings: int
    bookingRate: str
    cancelRate: str
    recentUpcoming: list[RecentBooking]
    lastUpdated: str
    degradedSources: list[str] = Field(default_factory=list)
