from typing import Dict, List

from pydantic import BaseModel

from aione.models.element import Element


class ScrapeResponse(BaseModel):
    url: str
    elements: List[Element]
    element_count: int


class ExtractResponse(BaseModel):
    url: str
    data: Dict[str, str]
