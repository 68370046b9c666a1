"""
Chat model factory.

Builds Gemini chat models by ID. Client-side retries are disabled because the
generator owns the fallback chain and per-attempt deadline.

Dependencies: langchain_google_genai
System role: Model construction for the resilient generator
"""

from functools import lru_cache

from langchain_core.language_models import BaseChatModel
from langchain_google_genai import ChatGoogleGenerativeAI

from askdocs.configs.generation import GenerationSettings


def make_chat_model_factory(settings: GenerationSettings):
    """
    Create a cached model_id -> chat model factory.

    Args:
        settings: Temperature and request timeout

    Returns:
        Callable[[str], BaseChatModel]: Factory returning one instance per model ID
    """

    @lru_cache(maxsize=None)
    def factory(model_id: str) -> BaseChatModel:
        return ChatGoogleGenerativeAI(
            model=model_id,
            temperature=settings.temperature,
            max_retries=0,
            timeout=settings.request_timeout_seconds,
        )

    return factory
