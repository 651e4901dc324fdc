"""LLM provider configuration and the completion requester."""

from functools import lru_cache
from typing import Any, Protocol

import openai
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from quickmap.core.config import get_settings
from quickmap.core.errors import CompletionRequestError
from quickmap.core.logging import get_logger

logger = get_logger(__name__)

JSON_RESPONSE_FORMAT = {"type": "json_object"}


@lru_cache
def get_llm() -> ChatOpenAI:
    """Get configured LLM instance.

    The request timeout bounds how long a roadmap generation can wait.
    """
    settings = get_settings()

    kwargs: dict = {
        "model": settings.OPENAI_MODEL,
        "temperature": settings.OPENAI_TEMPERATURE,
        "max_tokens": settings.OPENAI_MAX_TOKENS,
        "timeout": settings.OPENAI_TIMEOUT_SECONDS,
        "max_retries": 0,
    }

    if settings.OPENAI_API_KEY:
        kwargs["api_key"] = settings.OPENAI_API_KEY
    if settings.OPENAI_API_BASE_URL:
        kwargs["base_url"] = settings.OPENAI_API_BASE_URL

    logger.info(
        "Initializing LLM",
        model=settings.OPENAI_MODEL,
        timeout=settings.OPENAI_TIMEOUT_SECONDS,
    )
    return ChatOpenAI(**kwargs)


class CompletionRequester(Protocol):
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        json_response: bool = True,
    ) -> str | list[Any]: ...


class OpenAICompletionRequester:
    """Sends one system + user prompt pair and returns the raw message content."""

    def __init__(self, llm: ChatOpenAI) -> None:
        self.llm = llm

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        json_response: bool = True,
    ) -> str | list[Any]:
        runnable = self.llm
        if json_response:
            runnable = self.llm.bind(response_format=JSON_RESPONSE_FORMAT)
        try:
            message = await runnable.ainvoke(
                [SystemMessage(content=system_prompt), HumanMessage(content=user_prompt)]
            )
        except openai.APITimeoutError:
            logger.error("Completion request timed out")
            raise CompletionRequestError("Language model request timed out") from None
        except openai.OpenAIError as exc:
            logger.error("Completion request failed", error=str(exc))
            raise CompletionRequestError(str(exc) or "Language model request failed") from exc

        logger.info(
            "Completion received",
            model=getattr(self.llm, "model_name", None),
            usage=getattr(message, "usage_metadata", None),
        )
        return message.content


def get_completion_requester() -> CompletionRequester:
    """Completion requester dependency."""
    return OpenAICompletionRequester(get_llm())
