"""
Crime Report Heatmap Backend — FastAPI
Modular entry point. All logic is split across:
  config.py, models.py, heatmap.py, reports_client.py, cache.py, routes.py
"""

import logging

from config import LOG_LEVEL, HOST, PORT

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

from routes import app  # noqa: E402,F401

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT)
