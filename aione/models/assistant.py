from pydantic import BaseModel, Field


class AskRequest(BaseModel):
    query: str = Field(min_length=1)


class AskResponse(BaseModel):
    answer: str
    fallback: bool
    """True when the answer comes from the canned tips table."""
