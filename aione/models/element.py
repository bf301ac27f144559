from typing import List, Literal

from pydantic import BaseModel

ElementType = Literal["title", "heading", "subheading", "paragraph", "link", "image"]


class Element(BaseModel):
    """One HTML fragment offered to the user for selection."""

    id: str  # unique within one extraction, e.g. "h1-2"
    type: ElementType
    name: str  # display label, e.g. "Heading 2"
    sample: str  # truncated text, or the absolute URL for images
    selected: bool = False


class ExtractionResult(BaseModel):
    url: str
    elements: List[Element]
    raw_html: str = ""
