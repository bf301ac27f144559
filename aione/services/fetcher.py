"""Fetch raw page HTML through an ordered list of public CORS proxies."""

import logging
import re
from typing import Optional, Sequence
from urllib.parse import quote, urlparse

import httpx

from aione.errors import FetchFailure, InvalidURL

logger = logging.getLogger(__name__)

MAX_CONTENT_SIZE = 5 * 1024 * 1024  # 5 MB read from the proxy, the rest is dropped
TIMEOUT = 15  # seconds
ALLOWED_SCHEMES = {"http", "https"}
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")


def normalize_url(url: str) -> str:
    """Return *url* stripped of whitespace, with ``https://`` prepended when it has no scheme."""
    url = url.strip()
    if url and not _SCHEME_RE.match(url):
        url = f"https://{url}"
    return url


def validate_url(url: str) -> None:
    """Raise InvalidURL unless *url* is a well-formed absolute http(s) URL."""
    if not url:
        raise InvalidURL("URL must not be empty.")

    parsed = urlparse(url)

    if parsed.scheme not in ALLOWED_SCHEMES:
        raise InvalidURL(f"Scheme '{parsed.scheme}' is not allowed. Use http or https.")

    hostname = parsed.hostname
    if not hostname or " " in url:
        raise InvalidURL(f"'{url}' is not a valid URL.")


def build_proxy_url(template: str, target: str) -> str:
    """Fill a ``...{url}`` proxy template with the percent-encoded *target*."""
    return template.format(url=quote(target, safe=""))


async def _read_body(client: httpx.AsyncClient, proxy_url: str) -> str:
    async with client.stream("GET", proxy_url) as response:
        response.raise_for_status()

        chunks = []
        total = 0
        async for chunk in response.aiter_bytes():
            remaining = MAX_CONTENT_SIZE - total
            if len(chunk) >= remaining:
                chunks.append(chunk[:remaining])
                logger.info("Body of %s truncated at %d bytes", proxy_url, MAX_CONTENT_SIZE)
                break
            chunks.append(chunk)
            total += len(chunk)

        return b"".join(chunks).decode(errors="replace")


async def fetch_via_proxies(
    url: str,
    proxies: Sequence[str],
    *,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = TIMEOUT,
) -> str:
    """Fetch *url* through each proxy in *proxies* in turn and return the first body.

    Proxies are tried sequentially; a transport error or a non-2xx status moves
    on to the next one.

    Raises:
        InvalidURL: if *url* is not an absolute http(s) URL.
        FetchFailure: if every proxy failed (or none is configured).
    """
    validate_url(url)
    if not proxies:
        raise FetchFailure("No proxy endpoints are configured.")

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(follow_redirects=True, timeout=timeout)

    try:
        for index, template in enumerate(proxies, start=1):
            proxy_url = build_proxy_url(template, url)
            try:
                html = await _read_body(client, proxy_url)
            except httpx.HTTPStatusError as exc:
                logger.warning(
                    "Proxy %d/%d returned HTTP %d for %s",
                    index, len(proxies), exc.response.status_code, url,
                )
                continue
            except httpx.HTTPError as exc:
                logger.warning("Proxy %d/%d failed for %s – %s", index, len(proxies), url, exc)
                continue

            logger.info("Fetched %s via proxy %d/%d (%d chars)", url, index, len(proxies), len(html))
            return html
    finally:
        if owns_client:
            await client.aclose()

    raise FetchFailure(f"Could not fetch {url}: all {len(proxies)} proxies failed.")
