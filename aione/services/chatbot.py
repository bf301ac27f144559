"""Chatbot builder: upload training files, create a model record, chat, embed.

Training data and model records live in the injected :class:`KeyValueStore`;
chat transcripts always stay in process memory.
"""

import json
import logging
import random
import secrets
import string
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from aione.errors import EmptyName, NoFiles, SessionNotFound
from aione.models.chatbot import ChatbotModel, ChatSession, Message, PdfContent, TrainingData
from aione.services.documents import read_csv_text, read_pdf
from aione.services.gateway import GeminiGateway, Success
from aione.services.storage import KeyValueStore, MemoryStore, make_key

logger = logging.getLogger(__name__)

CSV_CONTEXT_LINES = 5
PDF_CONTEXT_DOCS = 3
TEST_PROMPT_SAMPLE = 200

EMBED_FILENAME = "chatbot-embed.html"
WIDGET_SCRIPT_URL = "https://cdn.aione-platform.com/chatbot-widget.js"

_ID_ALPHABET = string.ascii_lowercase + string.digits

DEFAULT_REPLIES = (
    "I understand you're asking about that. Based on the data I've been trained on, I can tell you "
    "that our company specializes in providing high-quality solutions tailored to our customers' needs.",
    "That's a great question. According to my training, our team is dedicated to delivering "
    "exceptional service and innovative solutions in our field.",
    "Based on the information I have, I'd recommend exploring our website's documentation section "
    "for more detailed information on that topic.",
    "I'm trained to provide information about our company's offerings. From what I understand, we "
    "pride ourselves on customer satisfaction and quality service in that area.",
)

# (keywords, reply) checked in order
_CANNED_REPLIES: Sequence[Tuple[Tuple[str, ...], str]] = (
    (("hello", "hi"), "Hello! How can I assist you today?"),
    (
        ("help",),
        "I'm here to help! You can ask me questions about our products, services, or company information.",
    ),
    (
        ("product", "service"),
        "We offer a range of products and services designed to meet your needs. Our most popular "
        "options include our Premium Plan, Standard Service, and Custom Solutions. Would you like more "
        "specific information about any of these?",
    ),
    (
        ("price", "cost"),
        "Our pricing is competitive and flexible. The Basic plan starts at $10/month, while our Premium "
        "offering is $25/month. We also offer custom enterprise solutions - I'd be happy to connect you "
        "with a sales representative for more details.",
    ),
    (
        ("contact", "support"),
        "You can reach our support team at support@example.com or call us at (555) 123-4567 during "
        "business hours (9 AM - 5 PM ET, Monday through Friday).",
    ),
)


def _random_suffix(length: int = 8) -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def simple_response(message: str) -> str:
    """Canned reply used when the generative API cannot answer."""
    lowered = message.lower()
    for keywords, reply in _CANNED_REPLIES:
        if any(keyword in lowered for keyword in keywords):
            return reply
    return random.choice(DEFAULT_REPLIES)


def build_training_context(data: TrainingData) -> str:
    """Return the first CSV lines and the first PDF summaries as one text block."""
    context = ""
    if data.csv_content:
        lines = data.csv_content.split("\n")[:CSV_CONTEXT_LINES]
        context += "CSV Data: " + "\n".join(lines) + "\n\n"
    if data.pdf_contents:
        context += "PDF Documents:\n"
        for pdf in data.pdf_contents[:PDF_CONTEXT_DOCS]:
            context += f"- {pdf.name}: {pdf.content}\n"
    return context


def build_chat_prompt(model: ChatbotModel, message: str) -> str:
    """Wrap *message* in the instruction template for *model*."""
    context = build_training_context(model.training_data) or "General customer service information"
    personality = (
        "friendly, conversational, and personalized" if model.personalized else "professional and factual"
    )
    tone = "Adopt a friendly and conversational tone" if model.personalized else "Keep a professional tone"
    return (
        f"You are a helpful AI assistant named {model.name or 'Assistant'}.\n"
        f"You were trained on the following data:\n"
        f"{context}\n"
        f"Your personality is {personality}.\n\n"
        f"When responding to user queries, you should:\n"
        f"1. Use the training data provided above to inform your responses\n"
        f"2. If you don't know something, acknowledge that rather than making up information\n"
        f"3. Keep your responses concise but thorough\n"
        f"4. {tone}\n\n"
        f"Please respond to this user message in a helpful way:\n"
        f'"{message}"'
    )


def build_test_prompt(name: str, data: TrainingData) -> str:
    csv_sample = data.csv_content[:TEST_PROMPT_SAMPLE] or "No CSV data provided"
    pdf_sample = (
        data.pdf_contents[0].content[:TEST_PROMPT_SAMPLE] if data.pdf_contents else "No PDF data provided"
    )
    return (
        f"You are a helpful AI assistant named {name}.\n"
        f"You specialize in answering questions based on the following training data:\n"
        f"Sample of CSV data: {csv_sample}\n"
        f"Sample of PDF data: {pdf_sample}\n\n"
        f'Please respond to this test message with a short confirmation: '
        f'"I am ready to assist with questions about {name}."'
    )


def _js_string(value: str) -> str:
    """Quote *value* as a JS string literal that cannot close the surrounding <script>."""
    return json.dumps(value, ensure_ascii=False).replace("</", "<\\/")


def render_embed_code(model_id: str, name: Optional[str]) -> str:
    display_name = name or "AI Assistant"
    welcome = f"Hello! I'm {name or 'an AI Assistant'}. How can I help you today?"
    return "\n".join(
        [
            "<!-- AI Chatbot Widget -->",
            "<script>",
            "  window.AIChatbotConfig = {",
            f"    modelId: {_js_string(model_id)},",
            '    position: "bottom-right",',
            '    primaryColor: "#3B82F6",',
            f"    welcomeMessage: {_js_string(welcome)},",
            f"    title: {_js_string(display_name)}",
            "  };",
            "</script>",
            f'<script src="{WIDGET_SCRIPT_URL}" async></script>',
            "<!-- End AI Chatbot Widget -->",
        ]
    )


class ChatbotService:
    def __init__(
        self,
        store: KeyValueStore,
        gateway: GeminiGateway,
        transcripts: Optional[KeyValueStore] = None,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.transcripts = transcripts or MemoryStore()

    # -- training data -----------------------------------------------------

    def upload(
        self,
        name: str,
        csv_file: Optional[Tuple[str, bytes]] = None,
        pdf_files: Sequence[Tuple[str, bytes]] = (),
    ) -> ChatSession:
        """Store the uploaded files as a new :class:`ChatSession`.

        Files are ``(filename, content)`` pairs.

        Raises:
            EmptyName: if *name* is blank.
            NoFiles: if neither a CSV nor any PDF was provided.
        """
        name = name.strip()
        if not name:
            raise EmptyName("Please enter a name for your chatbot.")
        if csv_file is None and not pdf_files:
            raise NoFiles("No training data provided.")

        data = TrainingData()
        if csv_file is not None:
            csv_name, csv_bytes = csv_file
            data.csv_content = read_csv_text(csv_bytes)
            logger.info("Processed CSV file: %s (%d KB)", csv_name, round(len(csv_bytes) / 1024))

        pdfs: List[PdfContent] = [read_pdf(pdf_name, pdf_bytes) for pdf_name, pdf_bytes in pdf_files]
        data.pdf_contents = pdfs

        session = ChatSession(id=f"data_{_random_suffix()}", name=name, data=data)
        self.store.set(make_key("chatbot", "data", session.id), session.model_dump(mode="json"))
        logger.info("Created training data %s for chatbot %r", session.id, name)
        return session

    def get_session(self, data_id: str) -> ChatSession:
        raw = self.store.get(make_key("chatbot", "data", data_id))
        if raw is None:
            raise SessionNotFound(f"Training data {data_id} not found.")
        return ChatSession.model_validate(raw)

    # -- model records -----------------------------------------------------

    async def fine_tune(self, data_id: str, model_name: str, personalized: bool = False) -> ChatbotModel:
        """Create a model record bound to the training data *data_id*.

        A readiness prompt is sent through the gateway; its outcome is only
        logged and never blocks model creation.
        """
        session = self.get_session(data_id)
        model_name = model_name.strip()
        if not model_name:
            raise EmptyName("Please enter a model name.")

        slug = "_".join(model_name.split()).lower()
        model = ChatbotModel(
            id=f"{slug}_{_random_suffix()}",
            name=session.name or model_name,
            model_name=model_name,
            personalized=personalized,
            data_id=data_id,
            training_data=session.data,
        )
        self.store.set(make_key("chatbot", "model", model.id), model.model_dump(mode="json"))
        logger.info("Created model %s (personalized=%s)", model.id, personalized)

        outcome = await self.gateway.generate(build_test_prompt(model.name, session.data))
        if isinstance(outcome, Success):
            logger.info("Readiness check for %s succeeded", model.id)
        else:
            logger.warning("Readiness check for %s failed, model kept: %s", model.id, outcome.last_error)
        return model

    def get_model(self, model_id: str) -> ChatbotModel:
        raw = self.store.get(make_key("chatbot", "model", model_id))
        if raw is None:
            raise SessionNotFound(f"Model {model_id} not found.")
        return ChatbotModel.model_validate(raw)

    # -- chat --------------------------------------------------------------

    def messages(self, model_id: str) -> List[Message]:
        self.get_model(model_id)
        raw = self.transcripts.get(make_key("chatbot", "messages", model_id)) or {"messages": []}
        return [Message.model_validate(m) for m in raw["messages"]]

    def _append(self, model_id: str, *messages: Message) -> None:
        key = make_key("chatbot", "messages", model_id)
        raw = self.transcripts.get(key) or {"messages": []}
        raw["messages"].extend(m.model_dump(mode="json") for m in messages)
        self.transcripts.set(key, raw)

    async def respond(self, model_id: str, message: str) -> Message:
        """Answer *message* as the chatbot *model_id* and record both turns."""
        model = self.get_model(model_id)
        user_message = Message(role="user", content=message)

        outcome = await self.gateway.generate(build_chat_prompt(model, message))
        if isinstance(outcome, Success) and outcome.text.strip():
            reply = outcome.text
        else:
            reply = simple_response(message)
            logger.info("Using fallback reply for model %s", model_id)

        bot_message = Message(role="bot", content=reply, timestamp=datetime.now(timezone.utc))
        self._append(model_id, user_message, bot_message)
        return bot_message

    def embed_code(self, model_id: str) -> str:
        model = self.get_model(model_id)
        return render_embed_code(model_id, model.name)
