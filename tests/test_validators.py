from datetime import datetime, timezone

from clinic_dashboard.errors import FetchResult, degraded_sources
from clinic_dashboard.shared.validators import (
    format_percentage,
    normalize_phone,
    parse_iso_datetime,
    rounded_percentage,
)


def test_normalize_phone():
    assert normalize_phone("18093503832@s.whatsapp.net") == "18093503832"
    assert normalize_phone("18093503832@lid") == "18093503832"
    assert normalize_phone("+1 (809) 350-3832") == "18093503832"
    assert normalize_phone("") == ""
    assert normalize_phone(None) == ""


def test_parse_iso_datetime():
    assert parse_iso_datetime("2025-11-10T15:00:00Z") == datetime(2025, 11, 10, 15, tzinfo=timezone.utc)
    assert parse_iso_datetime("2025-11-10T15:00:00") == datetime(2025, 11, 10, 15, tzinfo=timezone.utc)
    assert parse_iso_datetime("10/11/2025") is None
    assert parse_iso_datetime(None) is None


def test_percentages():
    assert format_percentage(1, 3) == "33.3"
    assert format_percentage(5, 0) == "0"
    assert rounded_percentage(1, 8) == 13
    assert rounded_percentage(1, 0) == 0


def test_degraded_sources_lists_each_failed_provider_once():
    ok = FetchResult.success([1])
    failed = FetchResult.failure("Cal.com", "timeout", partial=[2])
    also_failed = FetchResult.failure("Cal.com", "HTTP 503", status_code=503)
    airtable = FetchResult.failure("Airtable", "not configured")

    assert failed.data == [2]
    assert degraded_sources(ok, failed, also_failed, airtable) == ["Airtable", "Cal.com"]
    assert degraded_sources(ok) == []
