"""Service wiring: everything is built once from a :class:`Settings` object.

The application stores the result on ``app.state.services``; routers receive
it through :func:`get_services`.
"""

from typing import NamedTuple, Optional

import httpx
from fastapi import Request

from aione.config import Settings
from aione.services.auth import AuthService
from aione.services.chatbot import ChatbotService
from aione.services.gateway import GeminiGateway
from aione.services.storage import KeyValueStore, create_store


class Services(NamedTuple):
    settings: Settings
    store: KeyValueStore
    gateway: GeminiGateway
    chatbot: ChatbotService
    auth: AuthService
    http_client: Optional[httpx.AsyncClient] = None
    """Shared client for proxy fetches; ``None`` opens one per request."""


def build_services(
    settings: Settings,
    *,
    store: Optional[KeyValueStore] = None,
    gateway: Optional[GeminiGateway] = None,
    auth: Optional[AuthService] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> Services:
    store = store if store is not None else create_store(settings.storage_dir)
    gateway = gateway if gateway is not None else GeminiGateway(settings)
    return Services(
        settings=settings,
        store=store,
        gateway=gateway,
        chatbot=ChatbotService(store, gateway),
        auth=auth if auth is not None else AuthService(settings),
        http_client=http_client,
    )


def get_services(request: Request) -> Services:
    return request.app.state.services
