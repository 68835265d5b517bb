"""
Resolve vehicle photo URLs into inline data URIs for the report surface.

Fetches run concurrently and settle independently: a failed image becomes
None and never aborts the others or the report.
"""
from __future__ import annotations

import asyncio
import base64
import logging
import mimetypes
from typing import Optional, Sequence

import httpx

import config

logger = logging.getLogger(__name__)

_DEFAULT_MIME = "image/jpeg"


def _mime_type(response: httpx.Response, url: str) -> str:
    content_type = (response.headers.get("content-type") or "").split(";")[0].strip().lower()
    if content_type.startswith("image/"):
        return content_type
    guessed, _ = mimetypes.guess_type(url)
    return guessed if guessed and guessed.startswith("image/") else _DEFAULT_MIME


def to_data_uri(content: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(content).decode('ascii')}"


async def resolve_image(client: httpx.AsyncClient, url: str) -> Optional[str]:
    """Fetch one image; return a data URI or None on any failure."""
    url = (url or "").strip()
    if not url:
        return None
    if url.startswith("data:"):
        return url
    try:
        resp = await client.get(url)
    except httpx.HTTPError as exc:
        logger.warning("[images] fetch failed url=%s error=%s", url, exc)
        return None
    if resp.status_code != 200:
        logger.warning("[images] fetch returned status=%s url=%s", resp.status_code, url)
        return None
    if not resp.content:
        logger.warning("[images] empty body url=%s", url)
        return None
    return to_data_uri(resp.content, _mime_type(resp, url))


async def resolve_images(
    urls: Sequence[str],
    client: Optional[httpx.AsyncClient] = None,
    max_concurrency: Optional[int] = None,
) -> list[Optional[str]]:
    """
    Resolve all URLs concurrently, preserving order. At most max_concurrency
    fetches (IMAGE_FETCH_CONCURRENCY by default) are in flight at once.

    Results are all-settled: unexpected exceptions from a single fetch are
    logged and mapped to None.
    """
    if not urls:
        return []

    limit = asyncio.Semaphore(max_concurrency or config.IMAGE_FETCH_CONCURRENCY)

    async def _bounded(c: httpx.AsyncClient, url: str) -> Optional[str]:
        async with limit:
            return await resolve_image(c, url)

    async def _gather(c: httpx.AsyncClient) -> list:
        return await asyncio.gather(*(_bounded(c, u) for u in urls), return_exceptions=True)

    if client is not None:
        results = await _gather(client)
    else:
        async with httpx.AsyncClient(timeout=config.IMAGE_FETCH_TIMEOUT_S, follow_redirects=True) as c:
            results = await _gather(c)

    resolved: list[Optional[str]] = []
    for url, result in zip(urls, results):
        if isinstance(result, BaseException):
            logger.warning("[images] resolve raised url=%s error=%s", url, result)
            resolved.append(None)
        else:
            resolved.append(result)
    logger.info(
        "[images] resolved %d/%d images",
        sum(1 for r in resolved if r),
        len(urls),
    )
    return resolved
