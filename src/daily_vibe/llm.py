"""LLM provider clients for summarization."""

import logging
import os
from typing import Protocol

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from .config import LLMConfig
from .prompts import DAILY_PROMPT, KNOWLEDGE_PROMPT

logger = logging.getLogger("daily_vibe.llm")


class LLMClient(Protocol):
    async def summarize_daily(self, text: str, date: str) -> str: ...

    async def extract_knowledge(self, text: str, date: str) -> str: ...


class PromptLLMClient:
    """Shared prompt handling; subclasses only know how to complete a prompt."""

    default_model = ""

    def __init__(self, config: LLMConfig):
        self.model = config.model or self.default_model

    async def complete(self, prompt: str) -> str:
        raise NotImplementedError

    async def summarize_daily(self, text: str, date: str) -> str:
        return await self.complete(DAILY_PROMPT.format(sessions=text, date=date))

    async def extract_knowledge(self, text: str, date: str) -> str:
        return await self.complete(KNOWLEDGE_PROMPT.format(sessions=text, date=date))


class OpenAILLMClient(PromptLLMClient):
    default_model = "gpt-4o-mini"

    def __init__(self, config: LLMConfig):
        super().__init__(config)
        self.client = AsyncOpenAI(
            api_key=config.api_key or os.environ.get("OPENAI_API_KEY"),
            base_url=config.base_url,
        )

    async def complete(self, prompt: str) -> str:
        logger.info("Requesting %s (%d chars)", self.model, len(prompt))
        completion = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
        )
        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""


class GenericOpenAIClient(OpenAILLMClient):
    """Any OpenAI-compatible endpoint, usually configured with ``base_url``."""

    default_model = "gpt-3.5-turbo"


class AnthropicLLMClient(PromptLLMClient):
    default_model = "claude-3-haiku-20240307"
    max_tokens = 4096

    def __init__(self, config: LLMConfig):
        super().__init__(config)
        self.client = AsyncAnthropic(api_key=config.api_key or os.environ.get("ANTHROPIC_API_KEY"))

    async def complete(self, prompt: str) -> str:
        logger.info("Requesting %s (%d chars)", self.model, len(prompt))
        response = await self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        if not response.content or response.content[0].type != "text":
            return ""
        return response.content[0].text


CLIENTS: dict[str, type[PromptLLMClient]] = {
    "openai": OpenAILLMClient,
    "anthropic": AnthropicLLMClient,
    "generic": GenericOpenAIClient,
}


def create_llm_client(config: LLMConfig) -> LLMClient:
    try:
        client_class = CLIENTS[config.provider]
    except KeyError:
        raise ValueError(f"Unsupported LLM provider: {config.provider}") from None
    return client_class(config)
