"""
Assemble page images into a PDF and name it.

ReportLab draws from the bottom-left corner in points; page placements are
top-left offsets in mm, so each draw converts both.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date
from io import BytesIO
from pathlib import Path
from typing import Optional, Protocol, Sequence

from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

import config
from models import RiskTier, VehicleRecord

from .format_utils import format_file_date
from .paginator import PageImage

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class ReportArtifact:
    filename: str
    content: bytes
    page_count: int
    protocol: str = ""
    risk_tier: Optional[RiskTier] = None
    offer_price: str = ""

    media_type = "application/pdf"


class ArtifactSink(Protocol):
    def save(self, content: bytes, filename: str):
        ...


class DirectorySink:
    """Writes artifacts into a directory on disk, creating it on first use."""

    def __init__(self, directory: Path | str | None = None) -> None:
        self.directory = Path(directory) if directory is not None else config.REPORTS_DIR

    def save(self, content: bytes, filename: str) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / Path(filename).name
        path.write_bytes(content)
        logger.info("[assembler] saved path=%s bytes=%d", path, len(content))
        return path


def report_filename(
    vehicle: VehicleRecord,
    on: Optional[date] = None,
    prefix: Optional[str] = None,
    extension: str = ".pdf",
) -> str:
    """{prefix}_{brand}_{model}_{year}_{DD-MM-YYYY}{extension}, whitespace collapsed to '_'."""
    on = on or date.today()
    prefix = prefix or config.REPORT_FILENAME_PREFIX
    vehicle_info = _WHITESPACE.sub("_", f"{vehicle.brand}_{vehicle.model}_{vehicle.year}".strip())
    return f"{prefix}_{vehicle_info}_{format_file_date(on)}{extension}"


def assemble_pdf(pages: Sequence[PageImage], title: str = "") -> bytes:
    """
    Draw every page image onto its own PDF page.

    The raster is the same object on every page; ReportLab embeds it once and
    references it from each page.
    """
    if not pages:
        raise ValueError("at least one page is required")

    first = pages[0]
    page_w = first.page_width * mm
    page_h = first.page_height * mm
    image = ImageReader(BytesIO(first.raster))

    buf = BytesIO()
    pdf = canvas.Canvas(buf, pagesize=(page_w, page_h))
    if title:
        pdf.setTitle(title)
    for i, page in enumerate(pages):
        if i > 0:
            pdf.showPage()
        draw_w = page.draw_width * mm
        draw_h = page.draw_height * mm
        # top of image sits at placement.offset below the page top
        y = page_h - (page.placement.offset * mm) - draw_h
        pdf.drawImage(image, 0, y, width=draw_w, height=draw_h)
    pdf.showPage()
    pdf.save()
    return buf.getvalue()
