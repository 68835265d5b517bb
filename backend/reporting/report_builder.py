"""
Serialize a ReportDocument into the HTML the rendering surface rasterizes.
All text is escaped here; blocks never carry pre-built markup.
"""
from __future__ import annotations

import html
from pathlib import Path

import config

from .document import (
    SECTION_FOOTER,
    SECTION_HEADER,
    Block,
    ImageGalleryBlock,
    ItemListBlock,
    KeyValueBlock,
    ParagraphBlock,
    ReportDocument,
    RiskBannerBlock,
    Section,
)

# Template path relative to this file
_TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
_REPORT_HTML = (_TEMPLATE_DIR / "inspection_report.html").read_text(encoding="utf-8")


def _escape(s: str) -> str:
    return html.escape(str(s), quote=True)


def _build_key_value_grid(block: KeyValueBlock) -> str:
    items = "".join(
        f'<div class="kv-item"><span class="kv-label">{_escape(k)}:</span>{_escape(v)}</div>'
        for k, v in block.rows
    )
    return f'<div class="kv-grid cols-{block.columns}">{items}</div>'


def _build_paragraphs(block: ParagraphBlock) -> str:
    heading = f"<p><strong>{_escape(block.heading)}</strong></p>" if block.heading else ""
    return heading + "".join(f"<p>{_escape(p)}</p>" for p in block.paragraphs)


def _build_risk_banner(block: RiskBannerBlock) -> str:
    return f'<div class="risk risk-{block.tier.value.lower()}">{_escape(block.label)}</div>'


def _build_gallery(block: ImageGalleryBlock) -> str:
    cells = "".join(
        f'<div><img src="{_escape(img.src)}" alt="{_escape(img.caption)}" />'
        f'<div class="caption">{_escape(img.caption)}</div></div>'
        for img in block.images
    )
    note = f'<p class="overflow-note">{_escape(block.overflow_note)}</p>' if block.overflow_note else ""
    return f'<div class="gallery">{cells}</div>{note}'


def _build_item_list(block: ItemListBlock) -> str:
    parts = []
    for group in block.groups:
        if group.heading:
            parts.append(f"<h3>{_escape(group.heading)}</h3>")
        parts.append("<ul>" + "".join(f"<li>{_escape(item)}</li>" for item in group.items) + "</ul>")
    return "".join(parts)


def build_block_html(block: Block) -> str:
    if isinstance(block, KeyValueBlock):
        return _build_key_value_grid(block)
    if isinstance(block, ParagraphBlock):
        return _build_paragraphs(block)
    if isinstance(block, RiskBannerBlock):
        return _build_risk_banner(block)
    if isinstance(block, ImageGalleryBlock):
        return _build_gallery(block)
    if isinstance(block, ItemListBlock):
        return _build_item_list(block)
    raise TypeError(f"Unsupported block type: {type(block).__name__}")


def _build_header(section: Section) -> str:
    info = ""
    if isinstance(section.block, KeyValueBlock):
        info = "".join(
            f"<span><strong>{_escape(k)}:</strong> {_escape(v)}</span>" for k, v in section.block.rows
        )
    return f"""<div class="header section-{section.key}">
      <div class="logo">{_escape(config.COMPANY_NAME.upper())}<small>Intelligent Evaluation</small></div>
      <h1 class="document-title">{_escape(section.title)}</h1>
      <div class="document-info">{info}</div>
    </div>"""


def _build_footer(section: Section) -> str:
    return f'<div class="footer section-{section.key}">{build_block_html(section.block)}</div>'


def build_section_html(section: Section) -> str:
    if section.key == SECTION_HEADER:
        return _build_header(section)
    if section.key == SECTION_FOOTER:
        return _build_footer(section)
    body = build_block_html(section.block)
    if not isinstance(section.block, RiskBannerBlock):
        body = f'<div class="box">{body}</div>'
    icon = f"{_escape(section.icon)} " if section.icon else ""
    return f"""<div class="section section-{section.key}">
      <div class="title">{icon}{_escape(section.title)}</div>
      {body}
    </div>"""


def build_report_html(document: ReportDocument, viewport_width: int | None = None) -> str:
    """Produce the full HTML string for one inspection report at a fixed CSS width."""
    width = viewport_width or config.REPORT_VIEWPORT_WIDTH
    sections_html = "\n".join(build_section_html(s) for s in document.sections)
    return (
        _REPORT_HTML.replace("__REPORT_TITLE__", _escape(document.title))
        .replace("__VIEWPORT_WIDTH__", str(int(width)))
        .replace("__SECTIONS_HTML__", sections_html)
    )
