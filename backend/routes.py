"""Crime Report Heatmap — FastAPI Routes"""

import asyncio
import logging
import threading
from datetime import date
from typing import Optional

from cachetools import LRUCache
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from config import (
    API_VERSION, CORS_ORIGINS,
    CLUSTER_RADIUS_KM, MAX_CLUSTER_RADIUS_KM, GRID_SIZE_DEG, HEATMAP_CACHE_SIZE,
)
from models import (
    Bounds, ReportCategory, ReportFilters,
    HeatmapRequest, HeatmapLayer, RenderConfig, LegendEntry,
)
from heatmap import (
    build_legend, layer_from_coordinates, recommend_render_config, valid_coordinates,
)
from reports_client import fetch_verified_reports

logger = logging.getLogger("crimewatch")


# ─────────────────────────── App Setup ──────────────────────────

app = FastAPI(title="Crime Report Heatmap API", version=API_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Identical point sets give identical layers, so memoise by coordinates
_LAYER_CACHE = LRUCache(maxsize=HEATMAP_CACHE_SIZE)
_LAYER_CACHE_LOCK = threading.Lock()


def _layer_for(points: list, cluster_radius_km: float) -> HeatmapLayer:
    coords = valid_coordinates(points)
    key = (tuple(coords), len(points), cluster_radius_km, GRID_SIZE_DEG)
    with _LAYER_CACHE_LOCK:
        cached = _LAYER_CACHE.get(key)
    if cached is not None:
        return cached

    layer = layer_from_coordinates(coords, len(points), cluster_radius_km, GRID_SIZE_DEG)
    with _LAYER_CACHE_LOCK:
        _LAYER_CACHE[key] = layer
    return layer


async def _compute_layer(points: list, cluster_radius_km: Optional[float]) -> HeatmapLayer:
    radius = cluster_radius_km or CLUSTER_RADIUS_KM
    # CPU-bound; keep it off the event loop for large report sets
    layer = await asyncio.to_thread(_layer_for, points, radius)
    if layer.discarded:
        logger.info(f"Heatmap: discarded {layer.discarded}/{layer.total} reports with invalid coordinates")
    return layer


# ─────────────────────────── Heatmap ────────────────────────────

@app.get("/api/heatmap", response_model=HeatmapLayer)
async def get_heatmap(
    category: Optional[ReportCategory] = None,
    startDate: Optional[date] = None,
    endDate: Optional[date] = None,
    minLat: Optional[float] = Query(None, ge=-90, le=90),
    minLng: Optional[float] = Query(None, ge=-180, le=180),
    maxLat: Optional[float] = Query(None, ge=-90, le=90),
    maxLng: Optional[float] = Query(None, ge=-180, le=180),
    limit: Optional[int] = Query(None, ge=1),
    offset: Optional[int] = Query(None, ge=0),
    clusterRadiusKm: Optional[float] = Query(
        None, gt=0, le=MAX_CLUSTER_RADIUS_KM, allow_inf_nan=False,
    ),
):
    """Heat layer built from verified reports matching the filters."""
    corners = (minLat, minLng, maxLat, maxLng)
    bounds = None
    if any(c is not None for c in corners):
        if any(c is None for c in corners):
            raise HTTPException(
                status_code=400,
                detail="Provide all of 'minLat', 'minLng', 'maxLat', 'maxLng' or none",
            )
        bounds = Bounds(minLat=minLat, minLng=minLng, maxLat=maxLat, maxLng=maxLng)

    filters = ReportFilters(
        category=category,
        startDate=startDate,
        endDate=endDate,
        bounds=bounds,
        limit=limit,
        offset=offset,
    )
    reports = await fetch_verified_reports(filters)
    logger.info(f"Heatmap request: {len(reports)} verified reports "
                f"(category={category.value if category else 'all'})")
    return await _compute_layer(reports, clusterRadiusKm)


@app.post("/api/heatmap", response_model=HeatmapLayer)
async def post_heatmap(req: HeatmapRequest):
    """Heat layer for caller-supplied report points."""
    return await _compute_layer(req.points, req.clusterRadiusKm)


@app.get("/api/heatmap/config", response_model=RenderConfig)
async def get_render_config(count: int = Query(..., ge=0)):
    """Render parameters for a dataset of ``count`` points."""
    return recommend_render_config(count)


@app.get("/api/heatmap/legend", response_model=list[LegendEntry])
async def get_legend():
    return build_legend()


# ─────────────────────────── Utility Endpoints ──────────────────

@app.get("/api/health")
async def health():
    return {"status": "ok", "version": API_VERSION}
