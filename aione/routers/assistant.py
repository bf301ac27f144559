import logging

from fastapi import APIRouter, Depends

from aione.dependencies import Services, get_services
from aione.models.assistant import AskRequest, AskResponse
from aione.services.gateway import Success, fallback_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assistant", tags=["Assistant"])


@router.post("/ask", response_model=AskResponse, summary="Ask the platform assistant for help")
async def ask(body: AskRequest, services: Services = Depends(get_services)) -> AskResponse:
    """Answer *query* with Gemini, or with canned tips when Gemini is unavailable."""
    outcome = await services.gateway.generate(body.query)
    if isinstance(outcome, Success):
        return AskResponse(answer=outcome.text, fallback=False)
    return AskResponse(answer=fallback_response(body.query), fallback=True)
