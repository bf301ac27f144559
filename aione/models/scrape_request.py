from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field


class ScrapeRequest(BaseModel):
    url: str = Field(
        min_length=1,
        description="Page to analyse. ``https://`` is assumed when no scheme is given.",
        examples=["example.com"],
    )


class ExtractRequest(BaseModel):
    url: str = Field(min_length=1, description="URL of a page previously sent to /scrape.")
    element_ids: List[str] = Field(
        default_factory=list,
        description="Ids of the elements to extract, as returned by /scrape.",
    )


class ExportRequest(BaseModel):
    data: Dict[str, Any]
    format: Literal["json", "csv"] = "json"
