"""Crime Report Heatmap — Pydantic Models"""

from datetime import date
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field

from config import MAX_CLUSTER_RADIUS_KM


class ReportCategory(str, Enum):
    pencurian = "pencurian"    # theft
    perampokan = "perampokan"  # robbery
    kekerasan = "kekerasan"    # violence
    narkoba = "narkoba"        # drugs
    lainnya = "lainnya"        # other


class Bounds(BaseModel):
    minLat: float = Field(ge=-90, le=90)
    minLng: float = Field(ge=-180, le=180)
    maxLat: float = Field(ge=-90, le=90)
    maxLng: float = Field(ge=-180, le=180)


class ReportFilters(BaseModel):
    category: Optional[ReportCategory] = None
    startDate: Optional[date] = None
    endDate: Optional[date] = None
    bounds: Optional[Bounds] = None
    limit: Optional[int] = Field(default=None, ge=1)
    offset: Optional[int] = Field(default=None, ge=0)

    def cache_key(self) -> str:
        return self.model_dump_json(exclude_none=True)


class RenderConfig(BaseModel):
    radius: int
    blur: int
    maxZoom: int = 18
    max: float = 1.0  # heat-layer option name, kept for renderer compatibility
    minOpacity: float = 0.4
    gradient: dict[str, str]  # "0.0".."1.0" → colour


class LegendEntry(BaseModel):
    stop: str
    color: str
    label: str


class HeatmapRequest(BaseModel):
    # Raw report dicts; malformed entries are dropped by the engine, not rejected here
    points: list[Any] = []
    clusterRadiusKm: Optional[float] = Field(
        default=None, gt=0, le=MAX_CLUSTER_RADIUS_KM, allow_inf_nan=False,
    )


class HeatmapLayer(BaseModel):
    points: list[list[float]]  # [[lat, lng, weight], ...]
    config: RenderConfig
    legend: list[LegendEntry] = []
    total: int = 0
    discarded: int = 0
