"""Mistral AI LLM provider.

Uses the Mistral AI chat API for project structuring and multimodal
folder summaries.
"""

import os
from typing import List

from mistralai import Mistral

from .base import (
    LLM, LLMError, ExtractedDocument, ProjectStructure,
)


def _content_text(content) -> str:
    """Flatten a Mistral message content (string or chunk list) to text."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    parts = []
    for chunk in content:
        text = getattr(chunk, 'text', None)
        if text is None and isinstance(chunk, dict):
            text = chunk.get('text')
        if text:
            parts.append(text)
    return "".join(parts)


class MistralLLM(LLM):
    """Mistral AI implementation of the structuring engine.

    Uses:
    - mistral-small-latest for JSON project structuring
    - mistral-medium-latest (vision) for single-shot folder summaries
    """

    STRUCTURING_MODEL = "mistral-small-latest"
    SUMMARY_MODEL = "mistral-medium-latest"

    def __init__(self, client=None) -> None:
        """Initialize Mistral client.

        Raises:
            KeyError: If MISTRAL_API_KEY environment variable is not set
        """
        if client is None:
            api_key = os.environ["MISTRAL_API_KEY"]
            client = Mistral(api_key=api_key)
        self.client = client

    @property
    def name(self) -> str:
        return "mistral"

    def structure_project(self, documents: List[ExtractedDocument],
                          folder_name: str) -> ProjectStructure:
        """Ask the model for the project structure as a JSON object."""
        messages = self._build_structuring_messages(documents, folder_name)

        try:
            response = self.client.chat.complete(
                model=self.STRUCTURING_MODEL,
                messages=messages,
                temperature=0.7,
                max_tokens=4000,
                response_format={"type": "json_object"},
            )
            response_text = _content_text(response.choices[0].message.content)
        except Exception as e:
            raise LLMError(f"Mistral API error: {e}")

        return self._parse_structuring_response(response_text)

    def summarize_folder(self, documents: List[ExtractedDocument],
                         folder_name: str) -> str:
        """Send text and inline images in one request and return the prose reply."""
        prompt, images = self._build_summary_parts(documents, folder_name)

        content = [{"type": "text", "text": prompt}]
        for mime_type, data in images:
            content.append({
                "type": "image_url",
                "image_url": f"data:{mime_type};base64,{data}",
            })

        try:
            response = self.client.chat.complete(
                model=self.SUMMARY_MODEL,
                messages=[{"role": "user", "content": content}],
                temperature=0.3,
                max_tokens=4000,
            )
            response_text = _content_text(response.choices[0].message.content)
        except Exception as e:
            raise LLMError(f"Mistral API error: {e}")

        if not response_text.strip():
            raise LLMError("Mistral returned an empty folder summary")
        return response_text.strip()
