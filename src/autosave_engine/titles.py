"""AI title generation through an Azure OpenAI chat deployment."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from agent_framework.azure import AzureOpenAIChatClient
from azure.identity import DefaultAzureCredential

from autosave_engine.errors import TitleGenerationError

if TYPE_CHECKING:
    from autosave_engine.config import OpenAIConfig

logger = logging.getLogger(__name__)

_TITLE_INSTRUCTIONS = (
    "Write a concise, descriptive title (at most eight words) for the note below. "
    "Reply with the title only, without quotes or punctuation at the end."
)
_MAX_EXCERPT_CHARS = 2000
_MAX_TITLE_CHARS = 80


def create_chat_client(config: OpenAIConfig) -> AzureOpenAIChatClient:
    """Create an AzureOpenAIChatClient for the configured deployment.

    Uses the API key when one is configured, otherwise DefaultAzureCredential
    (Azure CLI locally, managed identity when deployed).
    """
    logger.info(
        "Chat client created — endpoint=%s deployment=%s",
        config.endpoint,
        config.deployment,
    )
    if config.api_key:
        return AzureOpenAIChatClient(
            endpoint=config.endpoint,
            deployment_name=config.deployment,
            api_key=config.api_key,
        )
    return AzureOpenAIChatClient(
        endpoint=config.endpoint,
        deployment_name=config.deployment,
        credential=DefaultAzureCredential(),
    )


def _clean_title(raw: str) -> str:
    lines = [line.strip() for line in raw.strip().splitlines() if line.strip()]
    if not lines:
        return ""
    title = lines[0].strip("\"'“”# ").rstrip(".")
    return title[:_MAX_TITLE_CHARS].strip()


class ChatTitleGenerator:
    """Generate note titles with a chat completion."""

    def __init__(self, client: Any) -> None:
        self._client = client

    async def generate_title(self, plain_text: str) -> str:
        """Return a short title for ``plain_text`` or raise ``TitleGenerationError``."""
        excerpt = plain_text.strip()[:_MAX_EXCERPT_CHARS]
        if not excerpt:
            raise TitleGenerationError("Cannot generate a title for empty text")
        try:
            response = await self._client.get_response(f"{_TITLE_INSTRUCTIONS}\n\n{excerpt}")
        except Exception as exc:
            raise TitleGenerationError(f"Title generation failed: {exc}") from exc

        title = _clean_title(getattr(response, "text", None) or "")
        if not title:
            raise TitleGenerationError("Title generation returned an empty response")
        logger.debug("Title generated — %r", title)
        return title
