"""Gateway to the Gemini ``generateContent`` endpoint with fixed-delay retries.

A generation is a two-state flow: :meth:`GeminiGateway.generate` keeps
attempting until it either has text (:class:`Success`) or has used up its
attempts (:class:`Exhausted`). :meth:`GeminiGateway.complete` turns an
``Exhausted`` outcome into a canned tips string, so it never fails.
"""

import asyncio
import logging
import textwrap
from typing import Any, Awaitable, Callable, Dict, NamedTuple, Optional, Union

import httpx

from aione.config import Settings
from aione.errors import TransportFailure

logger = logging.getLogger(__name__)

SCRAPING_TIPS = textwrap.dedent(
    """
    When scraping websites, focus on sites with clear, structured content for best results. Look for:

    1. Static text elements like headers, paragraphs, and lists
    2. Tables with consistent formatting
    3. Product information with clear attributes
    4. Article content with defined sections

    For optimal results, select specific elements rather than trying to extract everything at once. This gives you more control over the data format and reduces errors.

    Try these example websites for practice:
    - Wikipedia.org (articles)
    - News.ycombinator.com (headlines)
    - Github.com (repositories)
    """
).strip()

CHATBOT_TIPS = textwrap.dedent(
    """
    For creating effective chatbots, your training data should be:

    1. Relevant - Focus on your specific industry or use case
    2. Diverse - Include different ways people might ask the same questions
    3. Structured - Organize data logically with clear categories
    4. Accurate - Ensure all information is correct and up-to-date

    Both CSV files (for structured data like FAQs or product info) and PDFs (for detailed knowledge like manuals or policies) help create a well-rounded chatbot that can handle various queries effectively.
    """
).strip()

GENERIC_TIPS = textwrap.dedent(
    """
    I'm your AI assistant for this platform. Here are some tips for getting started:

    1. For web scraping, start with simpler websites and clearly defined data elements
    2. When building chatbots, quality training data is more important than quantity
    3. Use the platform's features systematically - analyze first, then extract or train
    4. Review results and provide feedback to continuously improve performance

    Is there something specific about either module that you'd like to know more about?
    """
).strip()


def fallback_response(prompt: str) -> str:
    """Pick the canned tips string for *prompt* by keyword."""
    lowered = prompt.lower()
    if "web" in lowered or "scrap" in lowered:
        return SCRAPING_TIPS
    if "chat" in lowered or "bot" in lowered:
        return CHATBOT_TIPS
    return GENERIC_TIPS


class Success(NamedTuple):
    text: str
    attempts: int


class Exhausted(NamedTuple):
    attempts: int
    last_error: str


GenerationOutcome = Union[Success, Exhausted]


def _candidate_text(body: Any) -> str:
    """Return ``candidates[0].content.parts[0].text`` or raise TransportFailure."""
    try:
        text = body["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        raise TransportFailure("Response is missing candidates[0].content.parts[0].text.")
    if not isinstance(text, str):
        raise TransportFailure("Candidate text is not a string.")
    return text


class GeminiGateway:
    """Calls the generative-language API with the settings it was built with."""

    def __init__(
        self,
        settings: Settings,
        *,
        client: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.settings = settings
        self._client = client
        self._sleep = sleep

    @property
    def configured(self) -> bool:
        return bool(self.settings.gemini_api_key)

    @property
    def endpoint(self) -> str:
        base = self.settings.gemini_endpoint.rstrip("/")
        return f"{base}/models/{self.settings.gemini_model}:generateContent"

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.settings.temperature,
                "topK": self.settings.top_k,
                "topP": self.settings.top_p,
                "maxOutputTokens": self.settings.max_output_tokens,
            },
        }

    async def _attempt(self, client: httpx.AsyncClient, prompt: str) -> str:
        response = await client.post(
            self.endpoint,
            json=self.build_payload(prompt),
            headers={"x-goog-api-key": self.settings.gemini_api_key},
        )
        if not response.is_success:
            raise TransportFailure(f"Gemini returned HTTP {response.status_code}: {response.text[:200]}")
        return _candidate_text(response.json())

    async def generate(self, prompt: str, max_retries: Optional[int] = None) -> GenerationOutcome:
        """Try *prompt* up to ``max_retries + 1`` times with a fixed delay between attempts."""
        if max_retries is None:
            max_retries = self.settings.gateway_max_retries
        total = max(0, max_retries) + 1

        if not self.configured:
            logger.warning("Gemini API key is not configured – skipping generation")
            return Exhausted(attempts=0, last_error="Gemini API key is not configured.")

        client = self._client or httpx.AsyncClient(timeout=self.settings.http_timeout)
        last_error = ""
        try:
            for attempt in range(1, total + 1):
                try:
                    text = await self._attempt(client, prompt)
                except (httpx.HTTPError, TransportFailure, ValueError) as exc:
                    last_error = str(exc) or exc.__class__.__name__
                    logger.warning("Gemini attempt %d/%d failed: %s", attempt, total, last_error)
                    if attempt < total:
                        await self._sleep(self.settings.retry_delay)
                    continue

                logger.info("Gemini attempt %d/%d succeeded (%d chars)", attempt, total, len(text))
                return Success(text=text, attempts=attempt)
        finally:
            if self._client is None:
                await client.aclose()

        logger.error("Gemini generation exhausted after %d attempts: %s", total, last_error)
        return Exhausted(attempts=total, last_error=last_error)

    async def complete(self, prompt: str, max_retries: Optional[int] = None) -> str:
        """Return generated text, or the canned tips for *prompt* when every attempt failed."""
        outcome = await self.generate(prompt, max_retries)
        if isinstance(outcome, Success):
            return outcome.text
        logger.info("Using fallback response after %d attempts", outcome.attempts)
        return fallback_response(prompt)
