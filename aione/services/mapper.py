"""Resolve a selection of element ids into a flat ``name -> sample`` mapping."""

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional
from urllib.parse import urlparse

from aione.errors import EmptySelection
from aione.models.element import ExtractionResult

logger = logging.getLogger(__name__)

META_SOURCE_URL = "Source URL"
META_EXTRACTION_DATE = "Extraction Date"
META_DOMAIN = "Domain"


def extract_selected(
    result: ExtractionResult,
    ids: Iterable[str],
    now: Optional[datetime] = None,
) -> Dict[str, str]:
    """Return the samples of the selected elements keyed by display name.

    Elements are visited in extraction order. Ids that match no element are
    ignored. When two selected elements share a name, the first one wins.
    The ``Source URL``, ``Extraction Date`` and ``Domain`` metadata keys are
    appended after the element fields.

    Raises:
        EmptySelection: if *ids* is empty.
    """
    selected = set(ids)
    if not selected:
        raise EmptySelection("Select at least one element to extract.")

    data: Dict[str, str] = {}
    for element in result.elements:
        if element.id not in selected:
            continue
        if element.name in data:
            logger.warning(
                "Duplicate element name %r (id %s) – keeping the first value", element.name, element.id
            )
            continue
        data[element.name] = element.sample

    unknown = selected - {element.id for element in result.elements}
    if unknown:
        logger.info("Ignoring unknown element ids for %s: %s", result.url, sorted(unknown))

    now = now or datetime.now(timezone.utc)
    data[META_SOURCE_URL] = result.url
    data[META_EXTRACTION_DATE] = now.isoformat()
    data[META_DOMAIN] = urlparse(result.url).netloc
    return data
