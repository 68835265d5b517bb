"""Tests for the Playwright surface renderer, with the browser replaced by fakes."""
import asyncio
from io import BytesIO

import pytest
from PIL import Image
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from reporting.surface import PlaywrightSurfaceRenderer


def _png(width: int, height: int) -> bytes:
    buf = BytesIO()
    Image.new("RGB", (width, height), "white").save(buf, format="PNG")
    return buf.getvalue()


class FakePage:
    def __init__(self, ready: bool = True, screenshot_error: Exception | None = None):
        self.ready = ready
        self.screenshot_error = screenshot_error
        self.content = None
        self.waited_ms = None

    async def set_content(self, html, wait_until=None):
        self.content = html

    async def wait_for_function(self, expression, timeout=None):
        if not self.ready:
            raise PlaywrightTimeoutError("not ready")

    async def wait_for_timeout(self, ms):
        self.waited_ms = ms

    async def screenshot(self, full_page=False, type="png"):
        if self.screenshot_error is not None:
            raise self.screenshot_error
        return _png(1191, 2400)


class FakeBrowser:
    def __init__(self, page: FakePage):
        self.page = page
        self.closed = False
        self.page_kwargs = None

    async def new_page(self, **kwargs):
        self.page_kwargs = kwargs
        return self.page

    async def close(self):
        self.closed = True


def _install(monkeypatch, page: FakePage) -> FakeBrowser:
    browser = FakeBrowser(page)

    class _Chromium:
        async def launch(self, args=None):
            return browser

    class _Playwright:
        chromium = _Chromium()

        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc):
            return False

    monkeypatch.setattr("playwright.async_api.async_playwright", lambda: _Playwright())
    return browser


def test_rasterize_returns_surface_with_png_size(monkeypatch):
    page = FakePage()
    browser = _install(monkeypatch, page)
    renderer = PlaywrightSurfaceRenderer(device_scale_factor=1.5, settle_ms=500)

    surface = asyncio.run(renderer.rasterize("<html>report</html>", 794))

    assert (surface.width, surface.height) == (1191, 2400)
    assert page.content == "<html>report</html>"
    assert browser.page_kwargs["viewport"]["width"] == 794
    assert browser.page_kwargs["device_scale_factor"] == 1.5
    assert page.waited_ms is None
    assert browser.closed is True


def test_rasterize_falls_back_to_settle_delay(monkeypatch):
    page = FakePage(ready=False)
    _install(monkeypatch, page)
    renderer = PlaywrightSurfaceRenderer(ready_timeout_ms=100, settle_ms=250)

    asyncio.run(renderer.rasterize("<html></html>", 794))

    assert page.waited_ms == 250


def test_browser_closed_when_screenshot_fails(monkeypatch):
    page = FakePage(screenshot_error=RuntimeError("target crashed"))
    browser = _install(monkeypatch, page)

    with pytest.raises(RuntimeError, match="target crashed"):
        asyncio.run(PlaywrightSurfaceRenderer().rasterize("<html></html>", 794))
    assert browser.closed is True
