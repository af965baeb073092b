"""Report source client tests (httpx.MockTransport, no network)."""

import asyncio
import json
from datetime import date

import httpx
import pytest

from cache import report_cache
from models import Bounds, ReportCategory, ReportFilters
from reports_client import build_report_params, fetch_verified_reports

REPORTS = [
    {"id": 1, "latitude": -6.2088, "longitude": 106.8456, "jenis_kejahatan": "pencurian"},
    {"id": 2, "latitude": None, "longitude": 106.8, "jenis_kejahatan": "narkoba"},
]


@pytest.fixture(autouse=True)
def _clear_cache():
    report_cache.clear()
    yield
    report_cache.clear()


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _fetch(handler, filters=None):
    async def run():
        async with _client(handler) as http:
            return await fetch_verified_reports(filters, http=http)
    return asyncio.run(run())


def test_params_default_to_verified_only():
    assert build_report_params(ReportFilters()) == {"status": "verified"}


def test_params_full_filters():
    filters = ReportFilters(
        category=ReportCategory.perampokan,
        startDate=date(2024, 1, 1),
        endDate=date(2024, 1, 31),
        bounds=Bounds(minLat=-6.4, minLng=106.6, maxLat=-6.0, maxLng=107.0),
        limit=500,
        offset=100,
    )
    params = build_report_params(filters)
    assert params["status"] == "verified"
    assert params["jenis_kejahatan"] == "perampokan"
    assert params["startDate"] == "2024-01-01"
    assert params["endDate"] == "2024-01-31"
    assert json.loads(params["bounds"]) == {
        "minLat": -6.4, "minLng": 106.6, "maxLat": -6.0, "maxLng": 107.0,
    }
    assert params["limit"] == "500"
    assert params["offset"] == "100"


def test_fetch_returns_reports_and_sends_query():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=REPORTS)

    reports = _fetch(handler, ReportFilters(category=ReportCategory.pencurian))
    assert reports == REPORTS
    assert seen[0].url.path.endswith("/reports")
    assert seen[0].url.params["status"] == "verified"
    assert seen[0].url.params["jenis_kejahatan"] == "pencurian"


def test_fetch_uses_cache():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=REPORTS)

    _fetch(handler)
    _fetch(handler)
    assert len(calls) == 1


def test_fetch_drops_non_dict_items():
    reports = _fetch(lambda r: httpx.Response(200, json=[REPORTS[0], "junk", 3]))
    assert reports == [REPORTS[0]]


@pytest.mark.parametrize("response", [
    httpx.Response(500, json={"error": "Gagal mengambil data laporan"}),
    httpx.Response(200, json={"error": "not a list"}),
    httpx.Response(200, content=b"<html>"),
])
def test_fetch_degrades_to_empty(response):
    assert _fetch(lambda r: response) == []


def test_fetch_transport_error_is_empty():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    assert _fetch(handler) == []


def test_failed_fetch_not_cached():
    _fetch(lambda r: httpx.Response(503))
    assert len(report_cache) == 0
