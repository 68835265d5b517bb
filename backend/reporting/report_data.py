"""
Build the structured inspection report from vehicle + findings + synthesis.
Section order is fixed; optional data only adds or removes rows, never reorders.
"""
from __future__ import annotations

import time
from datetime import datetime
from typing import Optional, Sequence

import config
from engine.valuation import compute_offer_price
from models import ComponentFinding, RiskTier, Synthesis, VehicleRecord

from .document import (
    SECTION_CONCLUSION,
    SECTION_FOOTER,
    SECTION_HEADER,
    SECTION_IMAGES,
    SECTION_OBSERVATIONS,
    SECTION_RISK,
    SECTION_TECHNICAL,
    SECTION_VEHICLE,
    GalleryImage,
    ImageGalleryBlock,
    ItemGroup,
    ItemListBlock,
    KeyValueBlock,
    ParagraphBlock,
    ReportDocument,
    RiskBannerBlock,
    Section,
)
from .format_utils import format_date, format_km

REPORT_TITLE = "Vehicle Technical Inspection Report"
MAX_GALLERY_IMAGES = 6

_LOW_RISK_CONCLUSIONS = {
    "no collision evidence",
    "cosmetic repair",
    "veículo sem indícios de colisão",
    "reparo estético",
}
_HIGH_RISK_CONCLUSIONS = {
    "significant impact",
    "structure compromised",
    "batida significativa",
    "estrutura comprometida",
}

DISCLOSURE_LINES = (
    "This technical report was generated from images and/or a description of the vehicle.",
    f"Report automated by {config.ANALYST_NAME} following the standard technical protocol.",
)
FOOTER_LINES = (
    f"{config.COMPANY_NAME} – Intelligent Vehicle Evaluation",
    "www.reviucar.com.br  |  contato@reviucar.com",
)


def risk_tier_for(final_conclusion: str) -> RiskTier:
    """Unknown conclusions fall back to MEDIUM."""
    key = " ".join(str(final_conclusion or "").split()).casefold()
    if key in _LOW_RISK_CONCLUSIONS:
        return RiskTier.LOW
    if key in _HIGH_RISK_CONCLUSIONS:
        return RiskTier.HIGH
    return RiskTier.MEDIUM


def protocol_number(now_ms: Optional[int] = None) -> str:
    """RVC- plus the last 6 digits of the millisecond clock. Best-effort unique only."""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    return f"RVC-{str(now_ms)[-6:]}"


def remaining_images_note(count: int) -> Optional[str]:
    if count <= 0:
        return None
    if count == 1:
        return "and 1 more analyzed image…"
    return f"and {count} more analyzed images…"


def _vehicle_rows(
    vehicle: VehicleRecord, offer_price: str, odometer: Optional[int]
) -> tuple[tuple[str, str], ...]:
    rows: list[tuple[str, str]] = [
        ("Model", vehicle.model),
        ("Brand", vehicle.brand),
        ("Model year", str(vehicle.year)),
    ]
    if vehicle.color:
        rows.append(("Color", vehicle.color))
    if vehicle.fuel_type:
        rows.append(("Fuel", vehicle.fuel_type))
    if vehicle.chassis:
        rows.append(("Chassis", vehicle.chassis))
    if vehicle.municipality and vehicle.state:
        rows.append(("Municipality/State", f"{vehicle.municipality}/{vehicle.state}"))
    if vehicle.legal_status:
        rows.append(("Status", vehicle.legal_status))
    if vehicle.plate:
        rows.append(("Plate", vehicle.plate))
    rows.append(("FIPE value", vehicle.reference_price))
    rows.append(("FIPE code", vehicle.reference_price_code))
    if odometer is not None:
        rows.append(("Mileage", format_km(odometer)))
    rows.append(("Express offer", offer_price))
    return tuple(rows)


def _gallery_block(images: Sequence[Optional[str]]) -> Optional[ImageGalleryBlock]:
    available = [img for img in images if img]
    if not available:
        return None
    shown = tuple(
        GalleryImage(src=src, caption=f"Image {i}")
        for i, src in enumerate(available[:MAX_GALLERY_IMAGES], start=1)
    )
    return ImageGalleryBlock(
        images=shown,
        overflow_note=remaining_images_note(len(available) - MAX_GALLERY_IMAGES),
    )


def _technical_rows(synthesis: Synthesis) -> tuple[tuple[str, str], ...]:
    return (
        ("Repaint detected in", synthesis.repaint_locations or "—"),
        ("Visible body filler in", synthesis.filler_locations or "—"),
        ("Alignment compromised", synthesis.alignment_status or "—"),
        ("Glass/lamps replaced", synthesis.glass_replacement_status or "—"),
        ("Lower structure", synthesis.lower_structure_status or "—"),
        ("Structural integrity", "Preserved" if synthesis.structure_ok else "Compromised"),
    )


def _observation_groups(
    findings: Sequence[ComponentFinding], synthesis: Synthesis
) -> tuple[ItemGroup, ...]:
    groups: list[ItemGroup] = []
    if findings:
        groups.append(
            ItemGroup(
                heading="Analyzed components",
                items=tuple(f"{f.name}: {f.condition} - {f.conclusion}" for f in findings),
            )
        )
    if synthesis.pending_maintenance:
        groups.append(ItemGroup(heading="Pending maintenance", items=tuple(synthesis.pending_maintenance)))
    groups.append(ItemGroup(items=DISCLOSURE_LINES))
    return tuple(groups)


def build_report_document(
    vehicle: VehicleRecord,
    findings: Sequence[ComponentFinding],
    synthesis: Synthesis,
    images: Sequence[Optional[str]] = (),
    odometer: Optional[int] = None,
    *,
    issued_at: Optional[datetime] = None,
) -> ReportDocument:
    """
    Map one inspection result into a ReportDocument.

    images are already-resolved sources (data URIs or URLs); None entries are
    images that failed to resolve and are skipped.
    """
    issued_at = issued_at or datetime.now()
    protocol = protocol_number(int(issued_at.timestamp() * 1000))
    offer_price = (
        compute_offer_price(vehicle.reference_price, odometer)
        if odometer is not None
        else compute_offer_price(vehicle.reference_price)
    )
    tier = risk_tier_for(synthesis.final_conclusion)

    sections: list[Section] = [
        Section(
            key=SECTION_HEADER,
            title=REPORT_TITLE,
            icon="logo",
            block=KeyValueBlock(
                rows=(
                    ("Date", format_date(issued_at)),
                    ("Analyst", config.ANALYST_NAME),
                    ("Protocol", protocol),
                ),
                columns=3,
            ),
        ),
        Section(
            key=SECTION_VEHICLE,
            title="Evaluated Vehicle",
            icon="🚗",
            block=KeyValueBlock(rows=_vehicle_rows(vehicle, offer_price, odometer)),
        ),
    ]
    gallery = _gallery_block(images)
    if gallery is not None:
        sections.append(Section(key=SECTION_IMAGES, title="Vehicle Images", icon="📸", block=gallery))
    sections.extend(
        [
            Section(
                key=SECTION_TECHNICAL,
                title="Technical Results",
                icon="🔍",
                block=KeyValueBlock(rows=_technical_rows(synthesis), columns=1),
            ),
            Section(
                key=SECTION_CONCLUSION,
                title="Technical Conclusion",
                icon="🧾",
                block=ParagraphBlock(
                    heading="Analysis summary:",
                    paragraphs=(synthesis.summary or "—",),
                ),
            ),
            Section(
                key=SECTION_RISK,
                title="Risk Classification",
                icon="⚠️",
                block=RiskBannerBlock(tier=tier, label=f"RISK CLASSIFICATION: {tier.value}"),
            ),
            Section(
                key=SECTION_OBSERVATIONS,
                title="Final Observations",
                icon="📎",
                block=ItemListBlock(groups=_observation_groups(findings, synthesis)),
            ),
            Section(
                key=SECTION_FOOTER,
                title=config.COMPANY_NAME,
                icon="",
                block=ParagraphBlock(paragraphs=FOOTER_LINES),
            ),
        ]
    )

    return ReportDocument(
        title=REPORT_TITLE,
        protocol=protocol,
        issued_at=issued_at,
        risk_tier=tier,
        offer_price=offer_price,
        sections=tuple(sections),
    )
