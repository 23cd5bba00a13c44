import pytest

from clinic_dashboard.errors import ConfigurationMissing
from clinic_dashboard.services.supabase_service import SupabaseService


async def test_fetch_all_messages_pages_until_short_page(supabase_factory, make_chat_row):
    rows = [make_chat_row(i, "18095550001@s.whatsapp.net", "human", f"mensaje {i}") for i in range(1, 6)]
    requests = []

    result = await supabase_factory(rows, page_size=2, requests=requests).fetch_all_messages()

    assert result.ok
    assert [m.id for m in result.data] == [1, 2, 3, 4, 5]
    assert [r.url.params["offset"] for r in requests] == ["0", "2", "4"]
    first = requests[0]
    assert first.url.path == "/rest/v1/n8n_chat_histories"
    assert first.url.params["order"] == "id.asc"
    assert first.url.params["limit"] == "2"
    assert first.headers["apikey"] == "anon-key"
    assert first.headers["authorization"] == "Bearer anon-key"


async def test_fetch_all_messages_exact_multiple_needs_an_empty_page(supabase_factory, make_chat_row):
    rows = [make_chat_row(i, "s", "human", "x") for i in range(1, 5)]
    requests = []

    result = await supabase_factory(rows, page_size=2, requests=requests).fetch_all_messages()

    assert len(result.data) == 4
    assert len(requests) == 3


async def test_failed_page_keeps_partial_data(supabase_factory, make_chat_row):
    rows = [make_chat_row(i, "s", "human", "x") for i in range(1, 6)]

    result = await supabase_factory(rows, page_size=2, fail_at_offset=2).fetch_all_messages()

    assert not result.ok
    assert [m.id for m in result.data] == [1, 2]
    assert result.error.provider == "Supabase"
    assert result.error.status_code == 500


async def test_fetch_session_messages_filters_by_session(supabase_factory, sample_rows):
    requests = []
    service = supabase_factory(sample_rows, requests=requests)

    result = await service.fetch_session_messages("18095550002@s.whatsapp.net")

    assert [m.id for m in result.data] == [3, 4]
    assert requests[0].url.params["session_id"] == "eq.18095550002@s.whatsapp.net"


async def test_missing_configuration_raises_before_any_request():
    service = SupabaseService(url="", api_key="")
    with pytest.raises(ConfigurationMissing) as exc_info:
        await service.fetch_all_messages()
    assert str(exc_info.value) == "Supabase not configured"
