"""Crime Report Heatmap — Density-based heatmap intensity engine.

Turns a list of report points into [lat, lng, weight] triples for a heat
layer. Weight reflects *local density*: every point counts the reports within
``cluster_radius_km`` of itself, the count is square-root compressed, then
min-max normalised with a gamma of 0.85 and clamped to [0.05, 1.0].

Neighbour search is bucketed on a fixed lat/lng grid so each point only looks
at the cells around its own instead of the whole dataset. With the default
0.01 deg grid and 0.5 km radius that is the 3x3 block around the point; a
radius wider than one cell widens the block (see ``search_ring``).

Everything here is pure: no I/O, no logging, no module state. Dirty input
(missing, non-numeric, NaN or out-of-range coordinates) is dropped silently.
"""

import math
from collections import defaultdict
from collections.abc import Mapping
from numbers import Real

import numpy as np

from config import (
    EARTH_RADIUS_KM, KM_PER_DEGREE_LAT,
    GAMMA, MIN_WEIGHT, MAX_WEIGHT, UNIFORM_WEIGHT,
    RENDER_TIERS, DEFAULT_RADIUS, DEFAULT_BLUR, MAX_ZOOM, MIN_OPACITY,
    HEAT_GRADIENT, LEGEND_BANDS,
    GRID_SIZE_DEG, CLUSTER_RADIUS_KM,
)
from models import RenderConfig, LegendEntry, HeatmapLayer

GridKey = tuple[int, int]


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres (Haversine formula)."""
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (math.sin(dlat / 2) ** 2
         + math.cos(math.radians(lat1))
         * math.cos(math.radians(lat2))
         * math.sin(dlon / 2) ** 2)
    # Clamp `a` to [0, 1] to guard against floating-point overshoot
    a = max(0.0, min(1.0, a))
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))


# ─────────────────────────── Input validation ───────────────────

def _coord(point, name: str):
    if isinstance(point, Mapping):
        return point.get(name)
    return getattr(point, name, None)


def _valid_coord(value, limit: float) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    # range check first: isfinite() overflows on huge ints, and NaN fails the comparison
    return -limit <= value <= limit and math.isfinite(value)


def is_valid_point(point) -> bool:
    """True when the point has finite, in-range numeric latitude and longitude."""
    return (_valid_coord(_coord(point, "latitude"), 90.0)
            and _valid_coord(_coord(point, "longitude"), 180.0))


def filter_valid_points(points) -> list:
    """Drop invalid points, keeping the relative order of the rest."""
    if not points:
        return []
    return [p for p in points if is_valid_point(p)]


def valid_coordinates(points) -> list[tuple[float, float]]:
    return [
        (float(_coord(p, "latitude")), float(_coord(p, "longitude")))
        for p in filter_valid_points(points)
    ]


# ─────────────────────────── Spatial bucketing ──────────────────

def grid_key(lat: float, lon: float, grid_size: float) -> GridKey:
    return math.floor(lat / grid_size), math.floor(lon / grid_size)


def build_grid(coords: list[tuple[float, float]],
               grid_size: float) -> dict[GridKey, list[tuple[float, float]]]:
    """Bucket (lat, lon) pairs into grid cells of ``grid_size`` degrees."""
    grid: dict[GridKey, list[tuple[float, float]]] = defaultdict(list)
    for lat, lon in coords:
        grid[grid_key(lat, lon, grid_size)].append((lat, lon))
    return grid


def search_ring(cluster_radius_km: float, grid_size: float) -> int:
    """Cell rings to scan around a point's own cell so the radius is covered.

    1 means the 3x3 block. Measured against the north-south cell span, so at
    high latitudes, where cells are narrower east-west, points near the
    east/west edge of the radius can still be missed. That undercount is
    accepted for speed.
    """
    return max(1, math.ceil(cluster_radius_km / (grid_size * KM_PER_DEGREE_LAT)))


def _neighbor_counts(coords: list[tuple[float, float]],
                     cluster_radius_km: float, grid_size: float) -> list[int]:
    grid = build_grid(coords, grid_size)
    ring = search_ring(cluster_radius_km, grid_size)
    # Wide windows are mostly empty cells: walk the occupied ones instead
    scan_occupied = (2 * ring + 1) ** 2 > len(grid)
    offsets = range(-ring, ring + 1)

    counts = []
    for lat, lon in coords:
        row, col = grid_key(lat, lon, grid_size)
        if scan_occupied:
            cells = [cell for (r, c), cell in grid.items()
                     if abs(r - row) <= ring and abs(c - col) <= ring]
        else:
            cells = [grid[key] for key in
                     ((row + i, col + j) for i in offsets for j in offsets)
                     if key in grid]
        nearby = 0
        for cell in cells:
            for other_lat, other_lon in cell:
                if haversine_km(lat, lon, other_lat, other_lon) <= cluster_radius_km:
                    nearby += 1
        counts.append(nearby)
    return counts


# ─────────────────────────── Normalisation ──────────────────────

def normalize_weights(raw: np.ndarray) -> np.ndarray:
    """Min-max normalise with gamma correction, clamped to [MIN_WEIGHT, MAX_WEIGHT].

    A flat distribution (max == min, including a single point) maps every
    point to UNIFORM_WEIGHT.
    """
    if raw.size == 0:
        return raw
    lo, hi = float(raw.min()), float(raw.max())
    if hi > lo:
        weights = np.power((raw - lo) / (hi - lo), GAMMA)
    else:
        weights = np.full(raw.shape, UNIFORM_WEIGHT)
    return np.clip(weights, MIN_WEIGHT, MAX_WEIGHT)


def _check_parameters(cluster_radius_km: float, grid_size: float):
    for name, value in (("cluster_radius_km", cluster_radius_km), ("grid_size", grid_size)):
        if not math.isfinite(value) or value <= 0:
            raise ValueError(f"{name} must be positive and finite, got {value}")


def compute_heatmap(points, cluster_radius_km: float = CLUSTER_RADIUS_KM,
                    grid_size: float = GRID_SIZE_DEG) -> list[list[float]]:
    """Build density-weighted heat triples from raw report points.

    Returns one [lat, lng, weight] per valid input point, in input order.
    Raises ValueError only for a non-positive or non-finite radius or grid size.
    """
    _check_parameters(cluster_radius_km, grid_size)
    return heat_from_coordinates(valid_coordinates(points), cluster_radius_km, grid_size)


def heat_from_coordinates(coords: list[tuple[float, float]],
                          cluster_radius_km: float = CLUSTER_RADIUS_KM,
                          grid_size: float = GRID_SIZE_DEG) -> list[list[float]]:
    """Same as ``compute_heatmap`` for (lat, lon) pairs already validated."""
    _check_parameters(cluster_radius_km, grid_size)
    if not coords:
        return []

    counts = np.asarray(_neighbor_counts(coords, cluster_radius_km, grid_size), dtype=np.float64)
    # sqrt compresses dense hotspots; floor of 1 keeps isolated reports visible
    raw = np.maximum(1.0, np.sqrt(counts))
    weights = normalize_weights(raw)

    return [[lat, lon, float(w)] for (lat, lon), w in zip(coords, weights)]


# ─────────────────────────── Render tuning ──────────────────────

def recommend_render_config(point_count: int) -> RenderConfig:
    """Pick kernel radius/blur for the dataset size.

    Dense sets get wider kernels so overlapping clusters smooth out; sparse
    sets keep tight kernels so single incidents stay distinct.
    """
    radius, blur = DEFAULT_RADIUS, DEFAULT_BLUR
    for threshold, tier_radius, tier_blur in RENDER_TIERS:
        if point_count > threshold:
            radius, blur = tier_radius, tier_blur
            break
    return RenderConfig(
        radius=radius,
        blur=blur,
        maxZoom=MAX_ZOOM,
        max=MAX_WEIGHT,
        minOpacity=MIN_OPACITY,
        gradient=dict(HEAT_GRADIENT),
    )


def build_legend() -> list[LegendEntry]:
    return [
        LegendEntry(stop=stop, color=HEAT_GRADIENT[stop], label=label)
        for stop, label in LEGEND_BANDS
    ]


def build_heatmap_layer(points, cluster_radius_km: float = CLUSTER_RADIUS_KM,
                        grid_size: float = GRID_SIZE_DEG) -> HeatmapLayer:
    """Heat triples plus the render config and legend to draw them with."""
    points = points or []
    return layer_from_coordinates(valid_coordinates(points), len(points),
                                  cluster_radius_km, grid_size)


def layer_from_coordinates(coords: list[tuple[float, float]], total: int,
                           cluster_radius_km: float = CLUSTER_RADIUS_KM,
                           grid_size: float = GRID_SIZE_DEG) -> HeatmapLayer:
    """Layer for pre-validated coordinates out of ``total`` submitted points."""
    heat = heat_from_coordinates(coords, cluster_radius_km, grid_size)
    return HeatmapLayer(
        points=heat,
        config=recommend_render_config(len(heat)),
        legend=build_legend(),
        total=total,
        discarded=total - len(heat),
    )
