"""Crime Report Heatmap — Report source client.

Fetches verified incident reports from the reporting platform's REST API
(``GET {REPORT_API_URL}/reports``). Only reports with status ``verified`` are
ever requested: those are the ones the public map shows.

Failures never propagate: the heatmap should degrade to an empty layer rather
than a 500 when the report source is down.
"""

import json
import logging
from typing import Optional

import httpx

from config import REPORT_API_URL, REPORT_API_TIMEOUT
from cache import report_cache
from models import ReportFilters

logger = logging.getLogger("crimewatch.reports")

# Shared async HTTP client
client = httpx.AsyncClient(timeout=REPORT_API_TIMEOUT)


def build_report_params(filters: ReportFilters) -> dict[str, str]:
    """Translate filters into the report API's query parameters."""
    params = {"status": "verified"}
    if filters.category:
        params["jenis_kejahatan"] = filters.category.value
    if filters.startDate:
        params["startDate"] = filters.startDate.isoformat()
    if filters.endDate:
        params["endDate"] = filters.endDate.isoformat()
    if filters.bounds:
        params["bounds"] = json.dumps(filters.bounds.model_dump())
    if filters.limit:
        params["limit"] = str(filters.limit)
    if filters.offset:
        params["offset"] = str(filters.offset)
    return params


async def fetch_verified_reports(filters: Optional[ReportFilters] = None,
                                 http: Optional[httpx.AsyncClient] = None) -> list[dict]:
    """Fetch verified reports matching ``filters``.

    Returns the raw report dicts (``latitude``, ``longitude``, ``jenis_kejahatan``,
    ...). Entries are not validated here; the heatmap engine drops bad ones.
    Returns [] on any transport or API failure.
    """
    filters = filters or ReportFilters()
    cache_key = f"reports:{filters.cache_key()}"
    cached = report_cache.get(cache_key)
    if cached is not None:
        logger.info(f"Report cache hit ({len(cached)} reports)")
        return cached

    http = http or client
    try:
        r = await http.get(f"{REPORT_API_URL}/reports", params=build_report_params(filters))
        if r.status_code != 200:
            logger.warning(f"Report API returned {r.status_code}")
            return []
        data = r.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Report fetch error: {e}")
        return []

    if not isinstance(data, list):
        logger.warning(f"Report API returned {type(data).__name__}, expected a list")
        return []

    reports = [item for item in data if isinstance(item, dict)]
    report_cache.set(cache_key, reports)
    logger.info(f"Report API: {len(reports)} verified reports")
    return reports
