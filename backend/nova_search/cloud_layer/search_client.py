"""
Web-search augmentation against the search provider.

One basic-depth call per request: a few result snippets plus image URLs,
no provider-generated answer. Failures raise SearchAugmentationError and are
dropped by the orchestrator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List
from urllib.parse import urlparse

import httpx

from ..config import Settings
from ..errors import SearchAugmentationError
from ..schemas.dtos import Source

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchAugmentation:
    sources: List[Source] = field(default_factory=list)
    images: List[str] = field(default_factory=list)


def _domain_of(url: str) -> str:
    try:
        return urlparse(url).hostname or ""
    except ValueError:
        return ""


def _image_url(item) -> str | None:
    # include_image_descriptions switches items from strings to objects
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        return item.get("url")
    return None


def _to_sources(results: list) -> List[Source]:
    sources: List[Source] = []
    for it in results:
        url = it.get("url") if isinstance(it, dict) else None
        if not url:
            continue
        sources.append(
            Source(
                title=it.get("title") or url,
                url=url,
                snippet=it.get("content") or "",
                domain=_domain_of(url),
            )
        )
    return sources


async def search_web(
    client: httpx.AsyncClient,
    settings: Settings,
    *,
    query: str,
    api_key: str,
) -> SearchAugmentation:
    payload = {
        "api_key": api_key,
        "query": query,
        "search_depth": "basic",
        "include_images": True,
        "include_answer": False,
        "max_results": settings.search_max_results,
    }
    try:
        r = await client.post(settings.search_url, json=payload)
    except httpx.HTTPError as exc:
        raise SearchAugmentationError(f"Search request failed: {exc!r}") from exc

    if r.status_code >= 400:
        raise SearchAugmentationError(f"Search provider error {r.status_code}: {r.text}")

    try:
        data = r.json()
    except ValueError as exc:
        raise SearchAugmentationError("Search provider returned invalid JSON") from exc

    sources = _to_sources(data.get("results") or [])[: settings.search_max_results]
    images = [u for u in (_image_url(i) for i in data.get("images") or []) if u]
    logger.debug("Search augmentation: %d sources, %d images", len(sources), len(images))
    return SearchAugmentation(sources=sources, images=images)
