from __future__ import annotations

import logging
import os
import re
import time
import unicodedata
import uuid
from urllib.parse import quote
from pathlib import Path

from dotenv import load_dotenv

# Load .env from backend directory before config reads the environment
load_dotenv(Path(__file__).resolve().parent / ".env")

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

import config
from engine.valuation import compute_offer_price, express_evaluation
from models import InspectionReportRequest, ValuationRequest, ValuationResponse
from reporting.pipeline import RenderError, build_report_preview_html, generate_report

# Version for /health (Render sets RENDER_GIT_COMMIT)
VERSION = (os.environ.get("RENDER_GIT_COMMIT") or "").strip() or "unknown"

_LOG = logging.getLogger("uvicorn.error")

app = FastAPI(title="Vehicle Inspection Report Backend", version="0.1.0")

# CORS: use ALLOWED_ORIGINS env (comma-separated) if set, else default
_origins_env = os.environ.get("ALLOWED_ORIGINS", "").strip()
if _origins_env:
    ALLOWED_ORIGINS = [o.strip() for o in _origins_env.split(",") if o.strip()]
else:
    ALLOWED_ORIGINS = [
        "https://www.reviucar.com.br",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ]
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Request-Id", "X-Report-Protocol", "X-Risk-Tier"],
)


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        _LOG.info(
            "request_id=%s method=%s path=%s status=%s duration_ms=%.0f",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        response.headers["X-Request-Id"] = request_id
        return response


app.add_middleware(RequestLogMiddleware)


def _content_disposition(filename: str) -> str:
    """
    Attachment header safe for latin-1 transport: an ASCII-only fallback name
    plus the exact UTF-8 name in filename* (RFC 6266).
    """
    ascii_name = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    ascii_name = re.sub(r"[^\w.-]", "", ascii_name) or "report.pdf"
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename, safe='')}"


@app.on_event("startup")
def startup_log() -> None:
    _LOG.info(
        "Inspection report backend starting version=%s viewport=%spx scale=%.2f",
        VERSION,
        config.REPORT_VIEWPORT_WIDTH,
        config.REPORT_DEVICE_SCALE,
    )


@app.get("/health")
def health():
    return {"status": "ok", "version": VERSION}


@app.get("/health/pdf")
def health_pdf():
    """
    Runtime check for Playwright dependencies.
    Returns 200 only when Chromium can launch successfully.
    """
    try:
        from playwright.sync_api import sync_playwright
    except Exception:
        raise HTTPException(status_code=503, detail="Playwright is not installed.")

    try:
        with sync_playwright() as p:
            browser = p.chromium.launch(args=config.CHROMIUM_ARGS)
            page = browser.new_page()
            page.set_content("<html><body>ok</body></html>")
            browser.close()
    except Exception as e:
        msg = str(e)
        if len(msg) > 500:
            msg = msg[:500]
        raise HTTPException(
            status_code=503,
            detail=f"Playwright runtime unavailable: {msg}",
        ) from e

    return {"status": "ok", "pdf_runtime": "ready"}


@app.post("/valuation", response_model=ValuationResponse)
def valuation(req: ValuationRequest) -> ValuationResponse:
    """Express offer price for a FIPE reference price."""
    offer = (
        compute_offer_price(req.reference_price, req.odometer)
        if req.odometer is not None
        else compute_offer_price(req.reference_price)
    )
    return ValuationResponse(
        reference_price=req.reference_price,
        offer_price=offer,
        express_evaluation=express_evaluation(req.model, req.year, req.reference_price, req.odometer),
    )


@app.post("/inspection-report")
async def build_inspection_report(req: InspectionReportRequest) -> Response:
    """
    Render the inspection report PDF. Returns it as an attachment with the
    deterministic report filename. Rendering failures map to 503.
    """
    try:
        artifact = await generate_report(
            req.vehicle,
            req.components,
            req.synthesis,
            req.image_urls,
            req.odometer,
        )
    except RenderError as e:
        _LOG.warning("REPORT_ERR plate=%s err=%s", req.vehicle.plate, e.__cause__ or e)
        raise HTTPException(
            status_code=503,
            detail="Error generating PDF. Check your connection and try again.",
        ) from e

    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={
            "Content-Disposition": _content_disposition(artifact.filename),
            "X-Report-Protocol": artifact.protocol,
            "X-Risk-Tier": artifact.risk_tier.value if artifact.risk_tier else "",
        },
    )


@app.post("/inspection-report/preview", response_class=HTMLResponse)
async def preview_inspection_report(req: InspectionReportRequest) -> HTMLResponse:
    """Return the report as HTML (no Playwright required). Same request body as POST /inspection-report."""
    html_str = await build_report_preview_html(
        req.vehicle,
        req.components,
        req.synthesis,
        req.image_urls,
        req.odometer,
    )
    return HTMLResponse(html_str)
