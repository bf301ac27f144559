"""Turn a page's HTML into a flat, capped list of selectable elements.

Each element kind gets its own independent pass over the document and is
capped to a small count, so the output never grows with page size:

======== =========== ========= ============ =====
tag      type        id        name         cap
======== =========== ========= ============ =====
title    title       title     Page Title   1
h1       heading     h1-N      Heading N    3
h2       subheading  h2-N      Subheading N 3
p        paragraph   p-N       Paragraph N  5
a[href]  link        link-N    Link N       10
img[src] image       img-N     Image N      5
======== =========== ========= ============ =====

Output order follows the table (not document order) and the first element is
pre-selected.
"""

import logging
import re
from typing import Callable, List, Optional, Sequence, Tuple
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup, Tag

from aione.errors import NoElements
from aione.models.element import Element, ElementType, ExtractionResult
from aione.services.fetcher import fetch_via_proxies, normalize_url

logger = logging.getLogger(__name__)

SAMPLE_MAX_LEN = 100
RAW_HTML_STORE_LIMIT = 100_000

_WHITESPACE_RE = re.compile(r"\s+")

_SKIP_HREF_PREFIXES = ("#", "javascript:", "mailto:", "tel:")


def _clean_text(node: Tag) -> str:
    """Return the tag-stripped, whitespace-collapsed text of *node*."""
    return _WHITESPACE_RE.sub(" ", node.get_text(" ", strip=True)).strip()


def _truncate(text: str, limit: int = SAMPLE_MAX_LEN) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


def _text_samples(soup: BeautifulSoup, tag_name: str, limit: int) -> List[str]:
    samples: List[str] = []
    for node in soup.find_all(tag_name):
        text = _clean_text(node)
        if text:
            samples.append(_truncate(text))
        if len(samples) >= limit:
            break
    return samples


def _link_samples(soup: BeautifulSoup, base_url: str, limit: int) -> List[str]:
    samples: List[str] = []
    for a in soup.find_all("a", href=True):
        href = str(a["href"]).strip()
        if not href or href.startswith(_SKIP_HREF_PREFIXES):
            continue
        abs_url = urljoin(base_url, href)
        text = _clean_text(a)
        samples.append(_truncate(f"{text} ({abs_url})" if text else abs_url))
        if len(samples) >= limit:
            break
    return samples


def _image_samples(soup: BeautifulSoup, base_url: str, limit: int) -> List[str]:
    samples: List[str] = []
    for img in soup.find_all("img"):
        src = str(img.get("src") or "").strip()
        if not src:
            continue
        samples.append(urljoin(base_url, src))
        if len(samples) >= limit:
            break
    return samples


# (type, id prefix, name prefix, cap, sampler) in output order
_Sampler = Callable[[BeautifulSoup, str, int], List[str]]
_PASSES: Sequence[Tuple[ElementType, str, str, int, _Sampler]] = (
    ("title", "title", "Page Title", 1, lambda soup, _base, n: _text_samples(soup, "title", n)),
    ("heading", "h1", "Heading", 3, lambda soup, _base, n: _text_samples(soup, "h1", n)),
    ("subheading", "h2", "Subheading", 3, lambda soup, _base, n: _text_samples(soup, "h2", n)),
    ("paragraph", "p", "Paragraph", 5, lambda soup, _base, n: _text_samples(soup, "p", n)),
    ("link", "link", "Link", 10, _link_samples),
    ("image", "img", "Image", 5, _image_samples),
)


def extract_elements(html: str, base_url: str) -> List[Element]:
    """Return the capped, type-ordered element list for *html*.

    Relative link and image URLs are resolved against *base_url*.
    """
    soup = BeautifulSoup(html, "lxml")
    elements: List[Element] = []

    for element_type, id_prefix, name_prefix, cap, sampler in _PASSES:
        samples = sampler(soup, base_url, cap)
        for index, sample in enumerate(samples, start=1):
            if element_type == "title":
                element_id, name = id_prefix, name_prefix
            else:
                element_id, name = f"{id_prefix}-{index}", f"{name_prefix} {index}"
            elements.append(Element(id=element_id, type=element_type, name=name, sample=sample))

    if elements:
        elements[0].selected = True
    return elements


async def extract(
    url: str,
    proxies: Sequence[str],
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> ExtractionResult:
    """Fetch *url* through *proxies* and return its selectable elements.

    Raises:
        InvalidURL: if *url* is not a well-formed absolute URL after normalisation.
        FetchFailure: if every proxy failed.
        NoElements: if the page yielded no candidate elements.
    """
    url = normalize_url(url)
    html = await fetch_via_proxies(url, proxies, client=client)

    elements = extract_elements(html, url)
    if not elements:
        logger.warning("No elements found on %s", url)
        raise NoElements(f"No extractable elements were found on {url}.")

    logger.info("Extracted %d elements from %s", len(elements), url)
    return ExtractionResult(url=url, elements=elements, raw_html=html[:RAW_HTML_STORE_LIMIT])
