"""
End-to-end inspection report generation.

resolve images -> build document -> HTML -> raster surface -> pages -> PDF.
One call owns every intermediate object; nothing is cached between calls.
"""
from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Optional, Sequence

import httpx

import config
from models import ComponentFinding, Synthesis, VehicleRecord
from services.image_resolver import resolve_images

from .assembler import ArtifactSink, ReportArtifact, assemble_pdf, report_filename
from .paginator import A4_PORTRAIT_MM, paginate_surface
from .report_builder import build_report_html
from .report_data import build_report_document
from .surface import PlaywrightSurfaceRenderer, SurfaceRenderer

logger = logging.getLogger(__name__)


class RenderError(RuntimeError):
    """Rendering, pagination or PDF assembly failed; no artifact was produced."""


async def build_report_preview_html(
    vehicle: VehicleRecord,
    findings: Sequence[ComponentFinding],
    synthesis: Synthesis,
    image_urls: Sequence[str] = (),
    odometer: Optional[int] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
    now: Optional[datetime] = None,
) -> str:
    """Report HTML without rasterizing (no browser required)."""
    images = await resolve_images(list(image_urls), client=client)
    document = build_report_document(vehicle, findings, synthesis, images, odometer, issued_at=now)
    return build_report_html(document)


async def generate_report(
    vehicle: VehicleRecord,
    findings: Sequence[ComponentFinding],
    synthesis: Synthesis,
    image_urls: Sequence[str] = (),
    odometer: Optional[int] = None,
    *,
    renderer: Optional[SurfaceRenderer] = None,
    sink: Optional[ArtifactSink] = None,
    client: Optional[httpx.AsyncClient] = None,
    now: Optional[datetime] = None,
) -> ReportArtifact:
    """
    Render one inspection report to a multi-page PDF artifact.

    Raises RenderError when the surface, pagination or PDF step fails.
    Errors raised by sink.save propagate unchanged.
    """
    start = time.perf_counter()
    now = now or datetime.now()
    renderer = renderer or PlaywrightSurfaceRenderer()

    images = await resolve_images(list(image_urls), client=client)
    document = build_report_document(vehicle, findings, synthesis, images, odometer, issued_at=now)
    html_str = build_report_html(document, config.REPORT_VIEWPORT_WIDTH)

    try:
        surface = await renderer.rasterize(html_str, config.REPORT_VIEWPORT_WIDTH)
        pages = paginate_surface(surface, A4_PORTRAIT_MM)
        pdf_bytes = assemble_pdf(pages, title=document.title)
    except Exception as e:
        logger.warning("[report] render failed protocol=%s error=%s", document.protocol, e)
        raise RenderError("Failed to generate the inspection report PDF.") from e

    artifact = ReportArtifact(
        filename=report_filename(vehicle, now.date()),
        content=pdf_bytes,
        page_count=len(pages),
        protocol=document.protocol,
        risk_tier=document.risk_tier,
        offer_price=document.offer_price,
    )
    logger.info(
        "[report] generated filename=%s pages=%d images=%d duration_ms=%.0f",
        artifact.filename,
        artifact.page_count,
        sum(1 for i in images if i),
        (time.perf_counter() - start) * 1000,
    )

    if sink is not None:
        sink.save(artifact.content, artifact.filename)
    return artifact
