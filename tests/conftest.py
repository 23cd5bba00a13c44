import httpx
import pytest

from clinic_dashboard.services.airtable_service import AirtableService
from clinic_dashboard.services.calcom_service import CalcomService
from clinic_dashboard.services.n8n_service import N8nService
from clinic_dashboard.services.supabase_service import SupabaseService

SCHEDULING_LINK = "Agenda aquí: https://cal.com/clinica/consulta"


def chat_row(message_id, session_id, role, content):
    return {"id": message_id, "session_id": session_id, "message": {"type": role, "content": content}}


def calcom_booking(booking_id, attendee_name, start_time="2025-11-10T15:00:00Z", rescheduled=False):
    return {
        "id": booking_id,
        "uid": f"uid-{booking_id}",
        "title": "Consulta",
        "status": "ACCEPTED",
        "rescheduled": rescheduled,
        "startTime": start_time,
        "endTime": start_time,
        "attendees": [{"name": attendee_name, "email": f"{booking_id}@example.com"}],
    }


def airtable_record(record_id, name, phone, services="", link_sent=False, first_contact=None, last_update=None):
    fields = {"Nombre": name, "Teléfono": phone, "Servicio_Consultado": services, "Enlace_Cita_Enviado": link_sent}
    if first_contact:
        fields["Fecha primer contacto\t"] = first_contact
    if last_update:
        fields["Última actualización"] = last_update
    return {"id": record_id, "fields": fields}


@pytest.fixture
def sample_rows():
    """Session A books Botox after getting the link; session B asks about tirzepatide"""
    return [
        chat_row(1, "18095550001@s.whatsapp.net", "human", "Nombre: Ana Lopez\nTeléfono: 18095550001\nBotox por favor"),
        chat_row(2, "18095550001@s.whatsapp.net", "ai", SCHEDULING_LINK),
        chat_row(3, "18095550002@s.whatsapp.net", "human", "Hola, me interesa el tirzepatide"),
        chat_row(4, "18095550002@s.whatsapp.net", "ai", "Claro, te cuento sobre el tratamiento"),
    ]


@pytest.fixture
def test_account_rows():
    return [
        chat_row(10, "14078729969@s.whatsapp.net", "human", "Nombre: Eric Henoc\nQuiero botox"),
        chat_row(11, "14078729969@s.whatsapp.net", "ai", SCHEDULING_LINK),
    ]


@pytest.fixture
def supabase_factory():
    """Build a SupabaseService whose table holds the given rows"""

    def _make(rows, page_size=1000, fail_at_offset=None, requests=None):
        def handler(request: httpx.Request) -> httpx.Response:
            if requests is not None:
                requests.append(request)
            params = request.url.params
            offset = int(params.get("offset", 0))
            if fail_at_offset is not None and offset == fail_at_offset:
                return httpx.Response(500, text="upstream exploded")

            selected = rows
            session = params.get("session_id")
            if session:
                selected = [r for r in rows if r["session_id"] == session.removeprefix("eq.")]
            limit = int(params.get("limit", len(selected) or 1))
            return httpx.Response(200, json=selected[offset : offset + limit])

        return SupabaseService(
            url="https://clinic.supabase.co",
            api_key="anon-key",
            table="n8n_chat_histories",
            page_size=page_size,
            transport=httpx.MockTransport(handler),
        )

    return _make


@pytest.fixture
def calcom_factory():
    """Build a CalcomService serving bookings keyed by status, plus optional write handlers"""

    def _make(bookings_by_status=None, event_types=None, slots=None, write_handler=None, failing_statuses=()):
        bookings_by_status = bookings_by_status or {}

        def handler(request: httpx.Request) -> httpx.Response:
            path = request.url.path
            if request.method == "GET" and path.endswith("/bookings"):
                status = request.url.params.get("status")
                if status in failing_statuses:
                    return httpx.Response(503, text="maintenance")
                return httpx.Response(200, json={"bookings": bookings_by_status.get(status, [])})
            if request.method == "GET" and path.endswith("/event-types"):
                return httpx.Response(200, json={"event_types": event_types or []})
            if request.method == "GET" and path.endswith("/slots/available"):
                return httpx.Response(200, json={"slots": slots or {}})
            if write_handler is not None:
                return write_handler(request)
            return httpx.Response(404, json={"message": "not found"})

        return CalcomService(
            api_key="cal-key",
            base_url="https://api.cal.com/v1",
            time_zone="America/New_York",
            transport=httpx.MockTransport(handler),
        )

    return _make


@pytest.fixture
def airtable_factory():
    """Build an AirtableService over an in-memory table; writes are recorded"""

    def _make(records=None, writes=None, write_status=200, read_status=200, reads=None):
        records = records or []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                if reads is not None:
                    reads.append(request)
                if read_status != 200:
                    return httpx.Response(read_status, text="service unavailable")
                return httpx.Response(200, json={"records": records})
            if writes is not None:
                writes.append(request)
            return httpx.Response(write_status, json={"id": "recNEW", "fields": {}})

        return AirtableService(
            api_key="airtable-key",
            base_id="appClinic",
            table_name="Datos de Clientes",
            transport=httpx.MockTransport(handler),
        )

    return _make


@pytest.fixture
def n8n_factory():
    def _make(executions, status_code=200):
        def handler(request: httpx.Request) -> httpx.Response:
            if status_code != 200:
                return httpx.Response(status_code, text="unauthorized")
            return httpx.Response(200, json={"data": executions})

        return N8nService(
            api_url="https://n8n.clinic.test",
            api_key="n8n-key",
            workflow_id="wf-1",
            transport=httpx.MockTransport(handler),
        )

    return _make


@pytest.fixture
def make_chat_row():
    return chat_row


@pytest.fixture
def make_booking():
    return calcom_booking


@pytest.fixture
def make_airtable_record():
    return airtable_record
