from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PdfContent(BaseModel):
    name: str
    size: int = 0
    content: str


class TrainingData(BaseModel):
    csv_content: str = ""
    pdf_contents: List[PdfContent] = Field(default_factory=list)


class ChatSession(BaseModel):
    """Uploaded training files for one chatbot, keyed by an opaque id."""

    id: str
    name: str
    data: TrainingData
    created_at: datetime = Field(default_factory=_utcnow)


class ChatbotModel(BaseModel):
    """The record produced by the fine-tune step.

    Nothing is trained: the record only ties a display name and tone to the
    uploaded training data so later prompts can embed it as context.
    """

    id: str
    name: str
    model_name: str
    personalized: bool = False
    data_id: str
    training_data: TrainingData
    created_at: datetime = Field(default_factory=_utcnow)


class Message(BaseModel):
    role: Literal["user", "bot"]
    content: str
    timestamp: datetime = Field(default_factory=_utcnow)


# ---------------------------------------------------------------------------
# Request / response bodies
# ---------------------------------------------------------------------------

class UploadResponse(BaseModel):
    data_id: str
    name: str
    csv_loaded: bool
    pdf_files: List[str]


class TrainRequest(BaseModel):
    data_id: str = Field(min_length=1)
    model_name: str = Field(min_length=1)
    personalized: bool = False


class TrainResponse(BaseModel):
    model_id: str
    name: str
    personalized: bool


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)


class EmbedResponse(BaseModel):
    model_id: str
    embed_code: str
    filename: Optional[str] = "chatbot-embed.html"
