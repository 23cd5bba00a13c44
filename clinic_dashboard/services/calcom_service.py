import asyncio
import logging
from typing import Any, Optional

import httpx

from .. import config
from ..domain.bookings.schemas import BOOKING_STATUSES, Booking, CreateBookingRequest
from ..errors import ConfigurationMissing, FetchResult, UpstreamRequestError

logger = logging.getLogger(__name__)

PROVIDER = "Cal.com"


class CalcomService:
    """Service for interacting with the Cal.com v1 API"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        time_zone: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else config.CALCOM_API_KEY
        self.base_url = (base_url or config.CALCOM_BASE_URL).rstrip("/")
        self.time_zone = time_zone or config.CALCOM_TIME_ZONE
        self.transport = transport

    def _require_config(self) -> None:
        if not self.api_key:
            logger.error("CALCOM_API_KEY not configured in environment variables")
            raise ConfigurationMissing(PROVIDER)

    def _client(self) -> httpx.AsyncClient:
        # Cal.com v1 authenticates with an apiKey query parameter
        return httpx.AsyncClient(
            base_url=self.base_url,
            params={"apiKey": self.api_key},
            headers={"Content-Type": "application/json"},
            timeout=config.HTTP_TIMEOUT_SECONDS,
            transport=self.transport,
        )

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Send a request whose failure the caller reports to the user"""
        async with self._client() as client:
            try:
                return await client.request(method, url, **kwargs)
            except httpx.HTTPError as e:
                logger.error(f"❌ Cal.com unreachable for {method} {url}: {e}")
                raise UpstreamRequestError(PROVIDER, 502, "Cal.com unreachable", str(e)) from e

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_bookings(self, status: str) -> FetchResult[Booking]:
        """Bookings with one Cal.com status (upcoming, past or cancelled)"""
        self._require_config()

        async with self._client() as client:
            try:
                response = await client.get("/bookings", params={"status": status})
            except httpx.HTTPError as e:
                return FetchResult.failure(PROVIDER, f"request error for {status} bookings: {e}")

        if response.status_code != 200:
            return FetchResult.failure(
                PROVIDER, f"{status} bookings: {response.text[:200]}", status_code=response.status_code
            )

        try:
            payload = response.json()
        except ValueError:
            return FetchResult.failure(PROVIDER, f"{status} bookings: invalid JSON")

        raw_bookings = payload.get("bookings") if isinstance(payload, dict) else None
        bookings = [
            Booking.from_calcom(b, booking_status=status)
            for b in raw_bookings or []
            if isinstance(b, dict)
        ]
        logger.debug(f"📅 Fetched {len(bookings)} {status} bookings")
        return FetchResult.success(bookings)

    async def get_bookings_by_status(
        self, statuses: tuple[str, ...] = BOOKING_STATUSES
    ) -> dict[str, FetchResult[Booking]]:
        """One concurrent request per status"""
        self._require_config()
        results = await asyncio.gather(*(self.get_bookings(status) for status in statuses))
        return dict(zip(statuses, results))

    async def fetch_bookings(self) -> FetchResult[Booking]:
        """Upcoming and past bookings, the set chat conversations are matched against"""
        by_status = await self.get_bookings_by_status(("upcoming", "past"))
        bookings = [b for result in by_status.values() for b in result.data]
        for result in by_status.values():
            if not result.ok:
                return FetchResult(data=bookings, error=result.error)
        return FetchResult.success(bookings)

    async def list_event_types(self) -> list[dict[str, Any]]:
        """All event types; raises UpstreamRequestError when Cal.com refuses"""
        self._require_config()

        response = await self._request("GET", "/event-types")

        if response.status_code != 200:
            logger.error(f"❌ Cal.com event types error: {response.status_code} {response.text[:200]}")
            raise UpstreamRequestError(
                PROVIDER, response.status_code, "Error fetching event types", response.text
            )

        return response.json().get("event_types") or []

    async def first_visible_event_type_id(self) -> Optional[int]:
        """Id of the first event type that is not hidden, if any"""
        try:
            event_types = await self.list_event_types()
        except UpstreamRequestError:
            return None

        for event_type in event_types:
            if not event_type.get("hidden"):
                return event_type.get("id")
        return None

    async def get_available_slots(self, event_type_id: int, start_time: str, end_time: str) -> dict[str, Any]:
        self._require_config()

        response = await self._request(
            "GET",
            "/slots/available",
            params={"eventTypeId": event_type_id, "startTime": start_time, "endTime": end_time},
        )

        if response.status_code != 200:
            logger.error(f"❌ Cal.com slots error: {response.status_code} {response.text[:200]}")
            raise UpstreamRequestError(
                PROVIDER, response.status_code, "Error fetching available slots", response.text
            )

        return response.json().get("slots") or {}

    # ------------------------------------------------------------------
    # Writes (pass-through)
    # ------------------------------------------------------------------

    async def create_booking(self, data: CreateBookingRequest, event_type_id: int) -> dict[str, Any]:
        """Create a booking from the dashboard form"""
        self._require_config()

        extra_fields = {
            "lastName": data.lastName,
            "dateOfBirth": data.dateOfBirth,
            "hasInsurance": data.hasInsurance,
            "address": data.address,
            "services": data.services or "",
        }
        payload = {
            "eventTypeId": event_type_id,
            "start": data.startTime,
            "responses": {
                "name": data.full_name,
                "email": data.email,
                "phone": data.phone,
                "notes": data.compiled_notes(),
                **extra_fields,
            },
            "timeZone": self.time_zone,
            "language": "es",
            "metadata": {"source": "dashboard", **extra_fields},
        }

        logger.info(f"📅 Creating Cal.com booking for event type {event_type_id} at {data.startTime}")
        response = await self._request("POST", "/bookings", json=payload)

        if response.status_code not in (200, 201):
            logger.error(f"❌ Cal.com create booking error: {response.status_code} {response.text[:200]}")
            raise UpstreamRequestError(PROVIDER, response.status_code, "Error creating booking", response.text)

        return response.json()

    async def cancel_booking(self, booking_id: int, reason: Optional[str] = None) -> None:
        self._require_config()

        logger.info(f"🗑️ Cancelling Cal.com booking {booking_id}")
        response = await self._request(
            "DELETE",
            f"/bookings/{booking_id}/cancel",
            json={"cancellationReason": reason or "Cancelado desde el dashboard"},
        )

        if response.status_code not in (200, 204):
            logger.error(f"❌ Cal.com cancel error for {booking_id}: {response.status_code} {response.text[:200]}")
            raise UpstreamRequestError(PROVIDER, response.status_code, "Error cancelling booking", response.text)

        logger.info(f"✅ Cancelled Cal.com booking {booking_id}")

    async def reschedule_booking(
        self, booking_id: int, start_time: str, reason: Optional[str] = None
    ) -> dict[str, Any]:
        self._require_config()

        logger.info(f"🔄 Rescheduling Cal.com booking {booking_id} to {start_time}")
        response = await self._request(
            "PATCH",
            f"/bookings/{booking_id}",
            json={"startTime": start_time, "rescheduledReason": reason or "Reagendado desde el dashboard"},
        )

        if response.status_code != 200:
            logger.error(
                f"❌ Cal.com reschedule error for {booking_id}: {response.status_code} {response.text[:200]}"
            )
            raise UpstreamRequestError(PROVIDER, response.status_code, "Error rescheduling booking", response.text)

        return response.json().get("booking") or {}
