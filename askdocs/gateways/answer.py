"""Answer gateway - chat completion grounded in retrieved document context.

Security: Reads the API key from settings only, never hardcoded.
"""

import logging
from typing import Protocol

from openai import AsyncAzureOpenAI

from askdocs.config import Settings, require_setting
from askdocs.errors import BackendError
from askdocs.utils.metrics import track_gateway_call

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an AI assistant. Use the provided document context to answer the user's question."
)

# Fixed generation parameters
TEMPERATURE = 0.7
TOP_P = 0.95
FREQUENCY_PENALTY = 0.0
PRESENCE_PENALTY = 0.0
MAX_OUTPUT_TOKENS = 800


class AnswerGateway(Protocol):
    """Protocol for answer generation backends."""

    async def ask(self, context: str, question: str) -> str:
        """Generate an answer to ``question`` grounded in ``context``.

        Args:
            context: Concatenated document chunks (caller joins them)
            question: User question

        Returns:
            Generated answer text

        Raises:
            BackendError: If the model call fails or returns nothing
        """
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...


class AzureOpenAIAnswerGateway:
    """Azure OpenAI-backed answer gateway."""

    def __init__(
        self,
        client: AsyncAzureOpenAI,
        deployment: str = "gpt-4o",
        context_char_limit: int = 6000,
    ) -> None:
        """Initialize gateway.

        Args:
            client: Async Azure OpenAI client (injected for testing)
            deployment: Chat model deployment name
            context_char_limit: Hard cap on context characters sent to the model
        """
        self.client = client
        self.deployment = deployment
        self.context_char_limit = context_char_limit

    @staticmethod
    def validate_settings(settings: Settings) -> tuple[str, str]:
        """Return (endpoint, api key).

        Raises:
            ConfigurationError: If endpoint or API key is absent
        """
        endpoint = require_setting(
            settings.azure_openai_endpoint, "Azure OpenAI endpoint is not configured."
        )
        api_key = require_setting(
            settings.azure_openai_api_key, "Azure OpenAI API key is not configured."
        )
        return endpoint, api_key

    @classmethod
    def from_settings(cls, settings: Settings) -> "AzureOpenAIAnswerGateway":
        """Build gateway from settings."""
        endpoint, api_key = cls.validate_settings(settings)
        client = AsyncAzureOpenAI(
            azure_endpoint=endpoint,
            api_key=api_key,
            api_version=settings.azure_openai_api_version,
        )
        return cls(
            client,
            deployment=settings.azure_openai_deployment,
            context_char_limit=settings.context_char_limit,
        )

    def truncate_context(self, context: str) -> str:
        """Cut context to the configured character limit."""
        if len(context) > self.context_char_limit:
            logger.warning(
                f"Context too large ({len(context)} chars), "
                f"truncating to {self.context_char_limit}"
            )
            return context[: self.context_char_limit]
        return context

    def build_messages(self, context: str, question: str) -> list[dict[str, str]]:
        """Build the system/context/question message sequence."""
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": f"Document Content:\n{context}"},
            {"role": "user", "content": question},
        ]

    async def ask(self, context: str, question: str) -> str:
        messages = self.build_messages(self.truncate_context(context), question)

        with track_gateway_call("answer", "chat_completion", deployment=self.deployment):
            try:
                response = await self.client.chat.completions.create(
                    model=self.deployment,
                    messages=messages,
                    temperature=TEMPERATURE,
                    top_p=TOP_P,
                    frequency_penalty=FREQUENCY_PENALTY,
                    presence_penalty=PRESENCE_PENALTY,
                    max_tokens=MAX_OUTPUT_TOKENS,
                )
            except Exception as e:
                logger.error(f"Azure OpenAI call failed: {e}")
                raise BackendError(f"An error occurred: {e}") from e

        answer = ""
        if response.choices:
            answer = response.choices[0].message.content or ""

        if not answer.strip():
            logger.warning("Azure OpenAI returned empty response")
            raise BackendError("No response received.")

        return answer

    async def close(self) -> None:
        await self.client.close()
