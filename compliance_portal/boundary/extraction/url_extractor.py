"""
URL extractor.

Fetches a page with httpx and reduces HTML to readable text with
BeautifulSoup. Responses served as PDF are handed to the PDF extractor
instead. Every request, redirects included, must target a public http(s)
host; loopback, private, link-local and other special-purpose addresses
are refused before anything is sent.

Dependencies: httpx, beautifulsoup4
System role: First stage of document ingestion pipeline (scraped URLs)
"""

import ipaddress
import logging
import re
import socket
from collections.abc import Callable
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup, Comment
from fastapi.concurrency import run_in_threadpool

from compliance_portal.boundary.extraction.base import TextExtractor
from compliance_portal.core.document_processing.models import (
    ExtractionResult,
    IngestionSource,
    join_pages,
)
from compliance_portal.core.exceptions import ExtractionError

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = {"http", "https"}
MAX_REDIRECTS = 5

_DROP_TAGS = ["script", "style", "noscript", "svg", "head", "template", "nav", "footer"]
_BLOCK_TAGS = [
    "p", "div", "section", "article", "main", "li", "tr", "table", "ul", "ol",
    "blockquote", "h1", "h2", "h3", "h4", "h5", "h6", "pre",
]
_SPACES = re.compile(r"[ \t\f\v\xa0]+")
_BLANK_RUNS = re.compile(r"\n{3,}")


def html_to_text(markup: str) -> str:
    """
    Reduce an HTML document to plain text, keeping block boundaries.

    Scripts, styles and page chrome are dropped. When the page has a
    ``<main>`` or ``<article>`` element only that element is kept.

    Args:
        markup: HTML document

    Returns:
        str: Text with single spaces inside lines and at most one blank line
            between blocks
    """
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup(_DROP_TAGS):
        tag.decompose()
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()

    root = soup.find("main") or soup.find("article") or soup
    for br in root.find_all("br"):
        br.replace_with("\n")
    for block in root.find_all(_BLOCK_TAGS):
        block.insert_after("\n\n")

    lines = [_SPACES.sub(" ", line).strip() for line in root.get_text().split("\n")]
    return _BLANK_RUNS.sub("\n\n", "\n".join(lines)).strip()


def html_title(markup: str) -> str | None:
    soup = BeautifulSoup(markup, "html.parser")
    if soup.title is None:
        return None
    title = _SPACES.sub(" ", soup.title.get_text()).strip()
    return title or None


def resolve_host(host: str) -> list[str]:
    """All addresses ``host`` resolves to (blocking DNS lookup)."""
    return [info[4][0] for info in socket.getaddrinfo(host, None)]


def is_forbidden_ip(ip: ipaddress.IPv4Address | ipaddress.IPv6Address) -> bool:
    return (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_multicast
        or ip.is_reserved
        or ip.is_unspecified
    )


class UrlExtractor:
    """Fetch a URL and extract its text."""

    method = "url"

    def __init__(
        self,
        pdf_extractor: TextExtractor,
        timeout: float = 30.0,
        max_chars: int = 500_000,
        transport: httpx.AsyncBaseTransport | None = None,
        resolver: Callable[[str], list[str]] = resolve_host,
    ) -> None:
        """
        Initialize URL extractor.

        Args:
            pdf_extractor: Extractor used when the response is a PDF
            timeout: Request timeout in seconds
            max_chars: Extracted text is truncated to this length
            transport: Optional httpx transport (tests use MockTransport)
            resolver: Maps a hostname to its IP addresses
        """
        self._pdf_extractor = pdf_extractor
        self._timeout = timeout
        self._max_chars = max_chars
        self._transport = transport
        self._resolver = resolver

    async def check_url(self, url: str) -> None:
        """
        Refuse URLs that are not public http(s) targets.

        Raises:
            ExtractionError: Bad scheme, missing host, or a host that is or
                resolves to a non-public address
        """
        parsed = urlparse(url)
        if parsed.scheme not in ALLOWED_SCHEMES:
            raise ExtractionError(
                f"Only http/https URLs are allowed, got '{parsed.scheme or 'none'}'",
                source_type="url",
            )
        host = (parsed.hostname or "").lower()
        if not host:
            raise ExtractionError("URL has no host", source_type="url")
        if host == "localhost" or host.endswith((".localhost", ".local")):
            raise ExtractionError(f"Blocked host: {host}", source_type="url")

        try:
            addresses = [ipaddress.ip_address(host)]
        except ValueError:
            try:
                resolved = await run_in_threadpool(self._resolver, host)
            except OSError as e:
                raise ExtractionError(f"Could not resolve host: {host}", source_type="url") from e
            addresses = [ipaddress.ip_address(address.split("%", 1)[0]) for address in resolved]

        if not addresses or any(is_forbidden_ip(ip) for ip in addresses):
            raise ExtractionError(f"Blocked host: {host}", source_type="url")

    async def _check_request(self, request: httpx.Request) -> None:
        await self.check_url(str(request.url))

    async def extract(self, source: IngestionSource) -> ExtractionResult:
        if not source.url:
            raise ExtractionError("URL source has no url", source_type="url")

        logger.info(f"{__name__}:extract - START", extra={"url": source.url})
        await self.check_url(source.url)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                max_redirects=MAX_REDIRECTS,
                transport=self._transport,
                event_hooks={"request": [self._check_request]},
            ) as client:
                response = await client.get(source.url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise ExtractionError(
                f"Failed to fetch {source.url}: {e}",
                source_type="url",
            ) from e

        content_type = response.headers.get("content-type", "").lower()
        if "application/pdf" in content_type or source.url.lower().endswith(".pdf"):
            return await self._pdf_extractor.extract(
                IngestionSource(
                    file_bytes=response.content,
                    filename=source.url.rsplit("/", 1)[-1] or "document.pdf",
                    content_type="application/pdf",
                )
            )

        markup = response.text
        is_html = "html" in content_type or "<html" in markup[:1000].lower()
        text = html_to_text(markup) if is_html else markup
        if len(text) > self._max_chars:
            logger.warning(
                f"{__name__}:extract - Truncating {len(text)} chars to {self._max_chars}",
                extra={"url": source.url},
            )
            text = text[:self._max_chars]

        result = join_pages([text], self.method, title=html_title(markup) if is_html else None)
        logger.info(f"{__name__}:extract - SUCCESS", extra={"url": source.url, "chars": len(text)})
        return result
