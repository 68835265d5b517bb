"""Runtime settings for inspection report rendering, read from the environment."""
from __future__ import annotations

import os
from pathlib import Path


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# A4 width in CSS pixels at 96 DPI
REPORT_VIEWPORT_WIDTH = max(320, _env_int("REPORT_VIEWPORT_WIDTH", 794))
REPORT_VIEWPORT_HEIGHT = max(320, _env_int("REPORT_VIEWPORT_HEIGHT", 1123))
REPORT_DEVICE_SCALE = max(0.5, _env_float("REPORT_DEVICE_SCALE", 1.5))
# Fallback settle delay, used only when the readiness check times out
REPORT_SETTLE_MS = max(0, _env_int("REPORT_SETTLE_MS", 500))
REPORT_READY_TIMEOUT_MS = max(100, _env_int("REPORT_READY_TIMEOUT_MS", 10000))

IMAGE_FETCH_TIMEOUT_S = max(1.0, _env_float("IMAGE_FETCH_TIMEOUT_S", 15.0))
# Upper bound on simultaneous photo downloads per report
IMAGE_FETCH_CONCURRENCY = max(1, _env_int("IMAGE_FETCH_CONCURRENCY", 6))

REPORT_FILENAME_PREFIX = (os.getenv("REPORT_FILENAME_PREFIX") or "").strip() or "Laudo_ReviuCar"
REPORTS_DIR = Path(
    (os.getenv("REPORTS_DIR") or "").strip() or Path(__file__).resolve().parent / "reports"
)

CHROMIUM_ARGS = [
    a.strip() for a in (os.getenv("CHROMIUM_ARGS") or "--no-sandbox").split(",") if a.strip()
]

COMPANY_NAME = "ReviuCar"
ANALYST_NAME = "IA ReviuCar"
