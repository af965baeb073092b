"""Crime Report Heatmap — Configuration & Constants"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root (one level up from backend/)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path)

# ── Report source ──
REPORT_API_URL = os.environ.get("REPORT_API_URL", "http://localhost:5000/api").rstrip("/")
REPORT_API_TIMEOUT = float(os.environ.get("REPORT_API_TIMEOUT", "15.0"))
REPORT_CACHE_TTL = int(os.environ.get("REPORT_CACHE_TTL", "60"))

# ── Server ──
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "8000"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
API_VERSION = "1.0.0"

# ── Heatmap engine ──
# 0.01 deg ≈ 1.1 km; keep it at least 2x the cluster radius so the 3x3 block suffices
GRID_SIZE_DEG = float(os.environ.get("HEATMAP_GRID_SIZE_DEG", "0.01"))
CLUSTER_RADIUS_KM = float(os.environ.get("HEATMAP_CLUSTER_RADIUS_KM", "0.5"))
# Upper bound for caller-chosen radii at the API
MAX_CLUSTER_RADIUS_KM = float(os.environ.get("HEATMAP_MAX_CLUSTER_RADIUS_KM", "50.0"))
HEATMAP_CACHE_SIZE = int(os.environ.get("HEATMAP_CACHE_SIZE", "64"))

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE_LAT = 111.195  # 2πR / 360 with R = 6371 km

GAMMA = 0.85
MIN_WEIGHT = 0.05
MAX_WEIGHT = 1.0
UNIFORM_WEIGHT = 0.5

# (min point count exclusive, radius, blur) — first match wins
RENDER_TIERS = [
    (100, 80, 35),
    (50, 60, 28),
]
DEFAULT_RADIUS = 50
DEFAULT_BLUR = 25
MAX_ZOOM = 18
MIN_OPACITY = 0.4

# Heat-layer gradient: fractional intensity → colour. Renderers key on these exact strings.
HEAT_GRADIENT = {
    "0.0": "blue",
    "0.15": "cyan",
    "0.3": "lime",
    "0.5": "yellow",
    "0.7": "orange",
    "0.85": "red",
    "1.0": "darkred",
}

# Map legend bands, highest intensity first
LEGEND_BANDS = [
    ("0.85", "Very high"),
    ("0.7", "High"),
    ("0.5", "Medium"),
    ("0.3", "Low-medium"),
    ("0.15", "Low"),
    ("0.0", "Very low"),
]

# Allowed browser origins for local development
CORS_ORIGINS = [
    f"http://localhost:{p}" for p in range(3000, 3010)
] + [
    f"http://localhost:{p}" for p in range(5173, 5180)
] + [
    f"http://127.0.0.1:{p}" for p in range(3000, 3010)
] + [
    f"http://127.0.0.1:{p}" for p in range(5173, 5180)
]
