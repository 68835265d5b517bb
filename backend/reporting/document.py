"""
Structured inspection report, independent of how it is drawn.

A ReportDocument is an ordered tuple of Sections; each Section carries exactly
one typed block. The HTML serializer in report_builder walks this structure.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

from models import RiskTier

SECTION_HEADER = "header"
SECTION_VEHICLE = "vehicle"
SECTION_IMAGES = "images"
SECTION_TECHNICAL = "technical"
SECTION_CONCLUSION = "conclusion"
SECTION_RISK = "risk"
SECTION_OBSERVATIONS = "observations"
SECTION_FOOTER = "footer"

# Canonical order; the images section is the only one that may be absent.
SECTION_ORDER: tuple[str, ...] = (
    SECTION_HEADER,
    SECTION_VEHICLE,
    SECTION_IMAGES,
    SECTION_TECHNICAL,
    SECTION_CONCLUSION,
    SECTION_RISK,
    SECTION_OBSERVATIONS,
    SECTION_FOOTER,
)


@dataclass(frozen=True)
class KeyValueBlock:
    rows: tuple[tuple[str, str], ...]
    columns: int = 2


@dataclass(frozen=True)
class ParagraphBlock:
    paragraphs: tuple[str, ...]
    heading: Optional[str] = None


@dataclass(frozen=True)
class RiskBannerBlock:
    tier: RiskTier
    label: str


@dataclass(frozen=True)
class GalleryImage:
    src: str
    caption: str


@dataclass(frozen=True)
class ImageGalleryBlock:
    images: tuple[GalleryImage, ...]
    overflow_note: Optional[str] = None


@dataclass(frozen=True)
class ItemGroup:
    items: tuple[str, ...]
    heading: Optional[str] = None


@dataclass(frozen=True)
class ItemListBlock:
    groups: tuple[ItemGroup, ...]


Block = Union[KeyValueBlock, ParagraphBlock, RiskBannerBlock, ImageGalleryBlock, ItemListBlock]


@dataclass(frozen=True)
class Section:
    key: str
    title: str
    icon: str
    block: Block


@dataclass(frozen=True)
class ReportDocument:
    title: str
    protocol: str
    issued_at: datetime
    risk_tier: RiskTier
    offer_price: str
    sections: tuple[Section, ...] = field(default_factory=tuple)

    def section(self, key: str) -> Optional[Section]:
        for s in self.sections:
            if s.key == key:
                return s
        return None

    @property
    def section_keys(self) -> list[str]:
        return [s.key for s in self.sections]
