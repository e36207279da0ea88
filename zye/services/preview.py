"""
Social Preview Pages

Crawlers of social platforms do not follow redirects for metadata, so they
get an HTML page carrying Open Graph / Twitter Card tags instead. The same
page forwards real browsers to the destination with a small script that
re-runs the crawler check client-side.

Metadata comes from the link's custom `meta` when any field is set;
otherwise it is scraped from the destination page. Scraping never fails the
request: any fetch problem falls back to a generic title.
"""

import asyncio
import html
import json
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Sequence

import httpx

from zye.api.schemas import LinkMeta
from zye.core.exceptions import PreviewFetchError
from zye.core.setting import settings
from zye.services.bot_classifier import CRAWLER_PATTERN
from zye.services.templates import TemplateRenderer

logger = logging.getLogger(__name__)

FALLBACK_TITLE = "查看連結內容"
REDIRECTING_TITLE = "正在重新導向..."

TITLE_PROPERTIES = ("og:title", "twitter:title")
DESCRIPTION_PROPERTIES = ("og:description", "twitter:description", "description")
IMAGE_PROPERTIES = ("og:image", "twitter:image")

# Metadata lives in <head>; stop reading large pages after this many bytes
MAX_FETCH_BYTES = 512 * 1024

TITLE_TAG_PATTERN = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)

_QUOTED_VALUE = r"""(?:"([^"]*)"|'([^']*)')"""


@lru_cache(maxsize=None)
def _meta_patterns(prop: str) -> tuple[re.Pattern, re.Pattern]:
    key = rf"""\b(?:property|name)\s*=\s*["']{re.escape(prop)}["']"""
    content = rf"\bcontent\s*=\s*{_QUOTED_VALUE}"
    return (
        re.compile(rf"<meta\b[^>]*?{key}[^>]*?{content}", re.IGNORECASE),
        re.compile(rf"<meta\b[^>]*?{content}[^>]*?{key}", re.IGNORECASE),
    )


def get_meta_content(document: str, props: Sequence[str]) -> Optional[str]:
    """
    Find the first non-blank `content` of a <meta> tag named by `props`.

    Properties are tried in order; `property=` and `name=` are both accepted
    and may come before or after `content=`.
    """
    for prop in props:
        for pattern in _meta_patterns(prop):
            match = pattern.search(document)
            if not match:
                continue
            value = match.group(1) if match.group(1) is not None else match.group(2)
            if value.strip():
                return value
    return None


def get_title_tag(document: str) -> Optional[str]:
    match = TITLE_TAG_PATTERN.search(document)
    if match and match.group(1).strip():
        return match.group(1)
    return None


@dataclass
class PreviewMetadata:
    title: str
    description: str = ""
    image: Optional[str] = None

    @classmethod
    def fallback(cls) -> "PreviewMetadata":
        return cls(title=FALLBACK_TITLE)


def extract_metadata(document: str) -> PreviewMetadata:
    """Pull title/description/image out of an HTML document."""
    title = get_meta_content(document, TITLE_PROPERTIES) or get_title_tag(document) or FALLBACK_TITLE
    description = get_meta_content(document, DESCRIPTION_PROPERTIES) or ""
    image = get_meta_content(document, IMAGE_PROPERTIES)

    return PreviewMetadata(
        title=html.unescape(title.strip()),
        description=html.unescape(description.strip()),
        image=html.unescape(image.strip()) if image else None,
    )


def _script_string(value: str) -> str:
    """Encode a value as a JS string literal that is safe inside <script>."""
    return (
        json.dumps(value)
        .replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
    )


class PreviewGenerator:
    """
    Builds crawler preview pages.

    One short-lived httpx client is opened per fetch; `transport` lets tests
    plug in an httpx.MockTransport.
    """

    def __init__(
        self,
        renderer: TemplateRenderer,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        cache_ttl: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.renderer = renderer
        self.base_url = (base_url or settings.BASE_URL).rstrip("/")
        self.timeout = settings.PREVIEW_FETCH_TIMEOUT if timeout is None else timeout
        self.user_agent = user_agent or settings.PREVIEW_USER_AGENT
        self.cache_ttl = settings.PREVIEW_CACHE_TTL if cache_ttl is None else cache_ttl
        self.transport = transport

    async def generate(self, destination_url: str, stored_meta: Optional[LinkMeta], code: str) -> str:
        """
        Produce the preview document for a link.

        Args:
            destination_url: Where the link points
            stored_meta: Custom metadata from the link record, if any
            code: Short code, used for og:url

        Returns:
            Complete HTML document
        """
        if stored_meta is not None and stored_meta.has_custom_values():
            metadata = PreviewMetadata(
                title=stored_meta.title or REDIRECTING_TITLE,
                description=stored_meta.description or "",
                image=stored_meta.image or None,
            )
        else:
            metadata = await self.fetch_metadata(destination_url)

        return self.render(destination_url, metadata, code)

    async def fetch_metadata(self, url: str) -> PreviewMetadata:
        """Scrape metadata from the destination, falling back on any failure."""
        try:
            # httpx timeouts bound each read; this bounds the whole fetch
            document = await asyncio.wait_for(self._fetch_document(url), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.info(f"Preview metadata fetch timed out for {url}")
            return PreviewMetadata.fallback()
        except (httpx.HTTPError, httpx.InvalidURL, PreviewFetchError, LookupError) as e:
            logger.info(f"Preview metadata fetch failed for {url}: {e}")
            return PreviewMetadata.fallback()

        return extract_metadata(document)

    async def _fetch_document(self, url: str) -> str:
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
            "Cache-Control": f"max-age={self.cache_ttl}",
        }
        async with httpx.AsyncClient(
            transport=self.transport,
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
        ) as client:
            async with client.stream("GET", url, headers=headers) as response:
                if not response.is_success:
                    raise PreviewFetchError(url, f"HTTP {response.status_code}")

                chunks = []
                received = 0
                async for chunk in response.aiter_bytes():
                    chunks.append(chunk)
                    received += len(chunk)
                    if received >= MAX_FETCH_BYTES:
                        break

                return b"".join(chunks).decode(response.charset_encoding or "utf-8", errors="replace")

    def render(self, destination_url: str, metadata: PreviewMetadata, code: str) -> str:
        short_url = f"{self.base_url}/{code}"
        image = html.escape(metadata.image) if metadata.image else ""

        return self.renderer.render(
            "preview",
            {
                "page_title": html.escape(metadata.title),
                "short_url": html.escape(short_url),
                "title": html.escape(metadata.title),
                "description": html.escape(metadata.description),
                "og_image": f'<meta property="og:image" content="{image}">' if image else "",
                "twitter_image": f'<meta name="twitter:image" content="{image}">' if image else "",
                "destination_href": html.escape(destination_url),
                "destination_js": _script_string(destination_url),
                "crawler_pattern": _script_string(CRAWLER_PATTERN.pattern),
            },
        )
