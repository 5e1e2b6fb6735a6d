"""OpenAI LLM provider.

Uses the OpenAI chat completions API for project structuring and
multimodal folder summaries.
"""

from typing import List

from openai import OpenAI

from .base import (
    LLM, LLMError, ExtractedDocument, ProjectStructure,
)


class OpenAILLM(LLM):
    """OpenAI implementation of the structuring engine.

    Uses:
    - gpt-4o-mini for JSON project structuring
    - gpt-4.1 (larger context, vision) for single-shot folder summaries
    """

    STRUCTURING_MODEL = "gpt-4o-mini"
    SUMMARY_MODEL = "gpt-4.1"

    def __init__(self, client=None) -> None:
        """Initialize OpenAI client.

        Uses OPENAI_API_KEY environment variable automatically.
        """
        self.client = client or OpenAI()

    @property
    def name(self) -> str:
        return "openai"

    def structure_project(self, documents: List[ExtractedDocument],
                          folder_name: str) -> ProjectStructure:
        """Ask the model for the project structure as a JSON object."""
        messages = self._build_structuring_messages(documents, folder_name)

        try:
            response = self.client.chat.completions.create(
                model=self.STRUCTURING_MODEL,
                messages=messages,
                temperature=0.7,
                max_tokens=4000,
                response_format={"type": "json_object"},
            )
            response_text = response.choices[0].message.content
        except Exception as e:
            raise LLMError(f"OpenAI API error: {e}")

        return self._parse_structuring_response(response_text)

    def summarize_folder(self, documents: List[ExtractedDocument],
                         folder_name: str) -> str:
        """Send text and inline images in one request and return the prose reply."""
        prompt, images = self._build_summary_parts(documents, folder_name)

        content = [{"type": "text", "text": prompt}]
        for mime_type, data in images:
            content.append({
                "type": "image_url",
                "image_url": {"url": f"data:{mime_type};base64,{data}"},
            })

        try:
            response = self.client.chat.completions.create(
                model=self.SUMMARY_MODEL,
                messages=[{"role": "user", "content": content}],
                temperature=0.3,
                max_tokens=4000,
            )
            response_text = response.choices[0].message.content
        except Exception as e:
            raise LLMError(f"OpenAI API error: {e}")

        if not response_text or not response_text.strip():
            raise LLMError("OpenAI returned an empty folder summary")
        return response_text.strip()
