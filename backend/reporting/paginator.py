"""
Place one tall raster surface onto fixed-size pages.

Every page shows the same full image, shifted upward by a negative offset so
the next unseen band lands in the page window. Offsets are in the page's
physical unit (mm by default), measured from the top edge. The last page's
unused area stays blank.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

from .surface import RasterSurface

A4_PORTRAIT_MM = (210.0, 297.0)

# Float residue below this is treated as no remaining content
_EPSILON = 1e-6


@dataclass(frozen=True)
class PagePlacement:
    index: int
    offset: float


@dataclass(frozen=True)
class PageImage:
    """One page: the shared raster, its pixel height, and where it sits on the page."""
    raster: bytes
    pixel_height: int
    placement: PagePlacement
    draw_width: float
    draw_height: float
    page_width: float
    page_height: float


def scaled_height(surface_width: float, surface_height: float, page_width: float) -> float:
    return surface_height * (page_width / surface_width)


def expected_page_count(
    surface_width: float, surface_height: float, page_width: float, page_height: float
) -> int:
    h = scaled_height(surface_width, surface_height, page_width)
    return max(1, math.ceil(h / page_height - _EPSILON))


def paginate(
    surface_width: float,
    surface_height: float,
    page_width: float,
    page_height: float,
) -> list[PagePlacement]:
    """
    Page placements for a surface of surface_width x surface_height pixels
    drawn at page_width across pages of page_height.

    >>> [p.offset for p in paginate(1000, 3000, 1000, 1200)]
    [0.0, -1200.0, -2400.0]
    """
    if surface_width <= 0 or surface_height <= 0:
        raise ValueError("surface dimensions must be positive")
    if page_width <= 0 or page_height <= 0:
        raise ValueError("page dimensions must be positive")

    image_height = scaled_height(surface_width, surface_height, page_width)
    placements = [PagePlacement(index=0, offset=0.0)]
    if image_height <= page_height + _EPSILON:
        return placements

    height_left = image_height - page_height
    while height_left > _EPSILON:
        placements.append(PagePlacement(index=len(placements), offset=height_left - image_height))
        height_left -= page_height
    return placements


def paginate_surface(
    surface: RasterSurface,
    page_size: tuple[float, float] = A4_PORTRAIT_MM,
) -> list[PageImage]:
    page_width, page_height = page_size
    image_height = scaled_height(surface.width, surface.height, page_width)
    return [
        PageImage(
            raster=surface.png,
            pixel_height=surface.height,
            placement=placement,
            draw_width=page_width,
            draw_height=image_height,
            page_width=page_width,
            page_height=page_height,
        )
        for placement in paginate(surface.width, surface.height, page_width, page_height)
    ]
