import json

import httpx
import pytest

from clinic_dashboard.domain.clients.schemas import AirtableClientRecord
from clinic_dashboard.errors import ConfigurationMissing
from clinic_dashboard.services.airtable_service import AirtableService


def paged_transport(pages, requests):
    """Serve pages in order, chaining them with offset cursors"""

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        index = int(request.url.params.get("offset", "0"))
        page = pages[index]
        if isinstance(page, int):
            return httpx.Response(page, text="rate limited")
        body = {"records": page}
        if index + 1 < len(pages):
            body["offset"] = str(index + 1)
        return httpx.Response(200, json=body)

    return httpx.MockTransport(handler)


def service_with(transport):
    return AirtableService(api_key="key", base_id="appClinic", table_name="Datos de Clientes", transport=transport)


async def test_fetch_all_records_follows_cursor(make_airtable_record):
    pages = [
        [make_airtable_record("rec1", "Ana Lopez", "18095550001@s.whatsapp.net", "Botox, Rellenos", True)],
        [make_airtable_record("rec2", "Pedro Gomez", "1 (809) 555-0002")],
    ]
    requests = []

    result = await service_with(paged_transport(pages, requests)).fetch_all_records()

    assert result.ok
    assert [r.id for r in result.data] == ["rec1", "rec2"]
    assert len(requests) == 2
    assert requests[0].url.params["pageSize"] == "100"
    assert "offset" not in requests[0].url.params
    assert requests[1].url.params["offset"] == "1"
    assert requests[0].headers["authorization"] == "Bearer key"

    ana, pedro = result.data
    assert ana.services == ["Botox", "Rellenos"]
    assert ana.linkSent is True
    assert ana.phone_key == "18095550001"
    assert pedro.phone_key == "18095550002"
    assert pedro.linkSent is False


async def test_failed_page_keeps_earlier_records(make_airtable_record):
    pages = [[make_airtable_record("rec1", "Ana", "1")], 429]

    result = await service_with(paged_transport(pages, [])).fetch_all_records()

    assert [r.id for r in result.data] == ["rec1"]
    assert result.error.provider == "Airtable"
    assert result.error.status_code == 429


def test_record_mapping_defaults():
    record = AirtableClientRecord.from_airtable(
        {"id": "rec9", "fields": {"Fecha primer contacto": "2025-11-01", "Servicio_Consultado": " , Botox ,"}}
    )
    assert record.name == "Desconocido"
    assert record.phone == ""
    assert record.services == ["Botox"]
    assert record.firstContact == "2025-11-01"
    assert record.lastUpdate is None
    assert record.linkSent is False


async def test_create_and_update_record_send_fields():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"id": "recX"})

    service = service_with(httpx.MockTransport(handler))

    assert await service.create_record({"Nombre": "Ana"})
    assert await service.update_record("recX", {"Nombre": "Ana Lopez"})

    created, updated = requests
    assert created.method == "POST"
    assert json.loads(created.content) == {"fields": {"Nombre": "Ana"}}
    assert updated.method == "PATCH"
    assert updated.url.path.endswith("/recX")
    assert json.loads(updated.content) == {"fields": {"Nombre": "Ana Lopez"}}


async def test_rejected_write_returns_false():
    service = service_with(httpx.MockTransport(lambda request: httpx.Response(422, text="INVALID_VALUE")))
    assert await service.create_record({"Nombre": "Ana"}) is False


async def test_missing_configuration():
    service = AirtableService(api_key="", base_id="")
    assert not service.configured
    with pytest.raises(ConfigurationMissing):
        await service.fetch_all_records()
