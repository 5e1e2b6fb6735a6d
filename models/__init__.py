"""LLM provider abstraction for ideaforge.

Provides a uniform interface for the structuring engine across providers:
- OpenAILLM: OpenAI (default)
- MistralLLM: Mistral AI

Usage:
    from models import create_llm

    llm = create_llm("openai")
    structure = llm.structure_project(documents, "My Startup")
    summary = llm.summarize_folder(documents, "My Startup")
"""

from .base import (
    LLM,
    LLMError,
    MalformedStructuringError,
    ExtractedDocument,
    ProjectStructure,
    SECTION_FIELDS,
    extract_json_object,
)
from .mistral import MistralLLM
from .openai import OpenAILLM


def create_llm(provider: str = "openai") -> LLM:
    """Create an LLM instance for the specified provider.

    Args:
        provider: LLM provider name ("openai" or "mistral")

    Returns:
        LLM instance for the specified provider

    Raises:
        ValueError: If provider is not recognized
    """
    provider = provider.lower()

    if provider == "openai":
        return OpenAILLM()
    elif provider == "mistral":
        return MistralLLM()
    else:
        raise ValueError(
            f"Unknown LLM provider: {provider}. "
            "Must be 'openai' or 'mistral'"
        )


__all__ = [
    'LLM',
    'LLMError',
    'MalformedStructuringError',
    'ExtractedDocument',
    'ProjectStructure',
    'SECTION_FIELDS',
    'extract_json_object',
    'MistralLLM',
    'OpenAILLM',
    'create_llm',
]
