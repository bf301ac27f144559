"""Chatbot builder endpoints: upload training files, train, chat and embed."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import Response

from aione.dependencies import Services, get_services
from aione.errors import InvalidInput, SessionNotFound
from aione.models.chatbot import (
    ChatRequest,
    EmbedResponse,
    Message,
    TrainRequest,
    TrainResponse,
    UploadResponse,
)
from aione.services.chatbot import EMBED_FILENAME

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chatbot", tags=["Chatbot builder"])


@router.post("/upload", response_model=UploadResponse, summary="Upload chatbot training files")
async def upload(
    name: str = Form(...),
    csv_file: Optional[UploadFile] = File(None),
    pdf_files: Optional[List[UploadFile]] = File(None),
    services: Services = Depends(get_services),
) -> UploadResponse:
    """Store one optional CSV file and any number of PDFs under a new data id."""
    csv_payload = None
    if csv_file is not None and csv_file.filename:
        csv_payload = (csv_file.filename, await csv_file.read())

    pdf_payloads = []
    for pdf in pdf_files or []:
        if pdf.filename:
            pdf_payloads.append((pdf.filename, await pdf.read()))

    try:
        session = services.chatbot.upload(name, csv_payload, pdf_payloads)
    except InvalidInput as exc:
        logger.warning("Rejected chatbot upload: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc))

    return UploadResponse(
        data_id=session.id,
        name=session.name,
        csv_loaded=bool(csv_payload),
        pdf_files=[pdf.name for pdf in session.data.pdf_contents],
    )


@router.post("/train", response_model=TrainResponse, summary="Create a chatbot model from uploaded data")
async def train(body: TrainRequest, services: Services = Depends(get_services)) -> TrainResponse:
    try:
        model = await services.chatbot.fine_tune(body.data_id, body.model_name, body.personalized)
    except SessionNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except InvalidInput as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    return TrainResponse(model_id=model.id, name=model.name, personalized=model.personalized)


@router.post("/{model_id}/chat", response_model=Message, summary="Send a message to a chatbot")
async def chat(model_id: str, body: ChatRequest, services: Services = Depends(get_services)) -> Message:
    try:
        return await services.chatbot.respond(model_id, body.message)
    except SessionNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/{model_id}/messages", response_model=List[Message], summary="Chat transcript")
async def messages(model_id: str, services: Services = Depends(get_services)) -> List[Message]:
    try:
        return services.chatbot.messages(model_id)
    except SessionNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get(
    "/{model_id}/embed",
    response_model=EmbedResponse,
    summary="Embed snippet for a chatbot",
    description="Pass `?download=true` to receive the snippet as `chatbot-embed.html`.",
)
async def embed(
    model_id: str,
    download: bool = Query(default=False),
    services: Services = Depends(get_services),
) -> EmbedResponse | Response:
    try:
        code = services.chatbot.embed_code(model_id)
    except SessionNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))

    if download:
        return Response(
            content=code,
            media_type="text/html",
            headers={"Content-Disposition": f'attachment; filename="{EMBED_FILENAME}"'},
        )
    return EmbedResponse(model_id=model_id, embed_code=code, filename=EMBED_FILENAME)
