"""
Rasterize report HTML into one continuous PNG surface.

The surface has a fixed CSS width (A4 at 96 DPI by default) and whatever
height the content needs. Chromium is driven through async Playwright and is
always closed before returning, including on errors.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Protocol

from PIL import Image

import config

logger = logging.getLogger(__name__)

# document.fonts plus every <img> decoded; the explicit readiness signal
_READY_CHECK_JS = (
    "() => document.fonts.status === 'loaded'"
    " && Array.from(document.images).every((img) => img.complete)"
)


@dataclass(frozen=True)
class RasterSurface:
    png: bytes
    width: int
    height: int

    @classmethod
    def from_png(cls, png: bytes) -> "RasterSurface":
        with Image.open(BytesIO(png)) as img:
            width, height = img.size
        return cls(png=png, width=width, height=height)


class SurfaceRenderer(Protocol):
    async def rasterize(self, html: str, width: int) -> RasterSurface:
        ...


class PlaywrightSurfaceRenderer:
    """Headless Chromium renderer: set_content, wait until ready, full-page screenshot."""

    def __init__(
        self,
        device_scale_factor: float | None = None,
        ready_timeout_ms: int | None = None,
        settle_ms: int | None = None,
        launch_args: list[str] | None = None,
    ) -> None:
        self.device_scale_factor = device_scale_factor or config.REPORT_DEVICE_SCALE
        self.ready_timeout_ms = ready_timeout_ms if ready_timeout_ms is not None else config.REPORT_READY_TIMEOUT_MS
        self.settle_ms = settle_ms if settle_ms is not None else config.REPORT_SETTLE_MS
        self.launch_args = launch_args if launch_args is not None else list(config.CHROMIUM_ARGS)

    async def _wait_until_ready(self, page) -> None:
        from playwright.async_api import TimeoutError as PlaywrightTimeoutError

        try:
            await page.wait_for_function(_READY_CHECK_JS, timeout=self.ready_timeout_ms)
        except PlaywrightTimeoutError:
            # Fixed delay is a known source of flakiness; only used when the signal never arrives
            logger.warning(
                "[surface] readiness signal timed out after %dms; settling %dms",
                self.ready_timeout_ms,
                self.settle_ms,
            )
            await page.wait_for_timeout(self.settle_ms)

    async def rasterize(self, html: str, width: int) -> RasterSurface:
        from playwright.async_api import async_playwright

        async with async_playwright() as p:
            browser = await p.chromium.launch(args=self.launch_args)
            try:
                page = await browser.new_page(
                    viewport={"width": int(width), "height": config.REPORT_VIEWPORT_HEIGHT},
                    device_scale_factor=self.device_scale_factor,
                )
                await page.set_content(html, wait_until="load")
                await self._wait_until_ready(page)
                png = await page.screenshot(full_page=True, type="png")
            finally:
                await browser.close()

        surface = RasterSurface.from_png(png)
        logger.info(
            "[surface] rasterized width=%d height=%d scale=%.2f bytes=%d",
            surface.width,
            surface.height,
            self.device_scale_factor,
            len(png),
        )
        return surface
