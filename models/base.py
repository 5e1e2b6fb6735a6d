"""Base classes for LLM providers.

This module defines the abstract interface that all LLM backends implement,
the data passed to and returned from them, and the prompt templates and
response parsing they share.
"""

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from storage.base import RemoteFile


class LLMError(Exception):
    """Base exception for LLM operations."""
    pass


class MalformedStructuringError(LLMError):
    """The model's reply could not be parsed into a project structure."""
    pass


# Characters of each document embedded in the structuring prompt
STRUCTURING_CHARS_PER_FILE = 2000

# Characters of each document embedded in the folder summary prompt
SUMMARY_CHARS_PER_FILE = 10000

# Cap on the combined document text sent for a folder summary
SUMMARY_MAX_TOTAL_CHARS = 50000

# Framework sections and the sub-fields each one carries
SECTION_FIELDS: Dict[str, Tuple[str, ...]] = {
    'concept': ('idea', 'problem', 'solution', 'value'),
    'market': ('target', 'size', 'trends', 'competitors'),
    'model': ('revenue', 'costs', 'channels', 'resources'),
    'action': ('milestones', 'timeline', 'tasks', 'metrics'),
    'resourcesPlan': ('team', 'tools', 'budget', 'partners'),
}

CATEGORIES = ('startup', 'product', 'service', 'research', 'other')


STRUCTURING_SYSTEM_PROMPT = """You are an expert business project analyst. Your task is to analyze a collection of documents from a folder and organize them into a project following this 5-step framework:

1. CONCEPT: main idea, problem it solves, proposed solution, value proposition
2. MARKET: target audience, market size, trends, competitors
3. MODEL (business model): revenue streams, cost structure, distribution channels, key resources
4. ACTION (action plan): main milestones, timeline, priority tasks, success metrics
5. RESOURCES: team needed, tools and technology, budget, partners/collaborators

When the documents do not contain the information for a field, make a reasonable assumption from the available context and say in that field that it is an assumption. Use an empty string only when nothing sensible can be said.

You MUST respond ONLY with a valid JSON object with exactly this structure:

{
  "title": "Project title",
  "description": "Short project description",
  "category": "startup|product|service|research|other",
  "tags": ["tag1", "tag2", "tag3"],
  "concept": {
    "idea": "Main idea",
    "problem": "Problem identified",
    "solution": "Proposed solution",
    "value": "Value proposition"
  },
  "market": {
    "target": "Target audience",
    "size": "Market size",
    "trends": "Relevant trends",
    "competitors": "Main competitors"
  },
  "model": {
    "revenue": "Revenue streams",
    "costs": "Cost structure",
    "channels": "Distribution channels",
    "resources": "Key resources"
  },
  "action": {
    "milestones": "Main milestones",
    "timeline": "Estimated timeline",
    "tasks": "Priority tasks",
    "metrics": "Success metrics"
  },
  "resourcesPlan": {
    "team": "Team needed",
    "tools": "Tools and technology",
    "budget": "Estimated budget",
    "partners": "Partners/collaborators"
  },
  "extractedNotes": [
    {"title": "Note title", "content": "Relevant content extracted from the documents"}
  ],
  "extractedLinks": [
    {"url": "https://example.com", "title": "Link title", "description": "Description"}
  ]
}

Do not write any text before or after the JSON object."""


STRUCTURING_USER_PROMPT = """Analyze the following documents from the Drive folder "{folder_name}" and generate a complete project structure:

{documents}

Remember: respond ONLY with the JSON object, with no additional text."""


SUMMARY_PROMPT = """You are an experienced business consultant. The following material comes from the Drive folder "{folder_name}": text extracted from its documents, followed by any images it contains.

Write a clear description of the project this folder represents: what it is, the problem it addresses, who it is for, how it could make money, its current state and the most important next steps. Mention anything notable you see in the images. Answer in plain prose, not JSON.

{documents}"""


def _as_text(value: Any) -> str:
    """Coerce a JSON value into a display string ('' for missing values)."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (list, tuple)):
        return ", ".join(_as_text(v) for v in value if _as_text(v))
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


@dataclass
class ExtractedDocument:
    """Content pulled from one remote file for a single ingestion run.

    Attributes:
        source_file: The file the content came from
        content: Extracted text, or base64 data when is_binary is set
        is_binary: True for inline images (base64 content)
        truncation_length: Characters of content embedded in a prompt
    """
    source_file: RemoteFile
    content: str
    is_binary: bool = False
    truncation_length: int = STRUCTURING_CHARS_PER_FILE

    @property
    def name(self) -> str:
        return self.source_file.name

    @property
    def path(self) -> str:
        return self.source_file.path or self.source_file.name

    @property
    def mime_type(self) -> str:
        return self.source_file.mime_type

    def prompt_text(self) -> str:
        """Content cut to truncation_length, with an ellipsis when cut."""
        if len(self.content) > self.truncation_length:
            return self.content[:self.truncation_length] + "..."
        return self.content


@dataclass
class ProjectStructure:
    """The structured project an LLM derives from a folder's documents.

    Sections map sub-field names (see SECTION_FIELDS) to text. Instances
    built with from_dict always carry every key; missing values are ''.
    """
    title: str = ""
    description: str = ""
    category: str = "other"
    tags: List[str] = field(default_factory=list)
    concept: Dict[str, str] = field(default_factory=dict)
    market: Dict[str, str] = field(default_factory=dict)
    model: Dict[str, str] = field(default_factory=dict)
    action: Dict[str, str] = field(default_factory=dict)
    resources_plan: Dict[str, str] = field(default_factory=dict)
    extracted_notes: List[Dict[str, str]] = field(default_factory=list)
    extracted_links: List[Dict[str, str]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectStructure":
        """Normalize a decoded JSON object into a complete structure."""
        if not isinstance(data, dict):
            raise MalformedStructuringError(
                f"Expected a JSON object, got {type(data).__name__}"
            )

        sections = {}
        for key, sub_fields in SECTION_FIELDS.items():
            raw = data.get(key)
            if not isinstance(raw, dict):
                # A bare string section is kept as its first sub-field
                raw = {sub_fields[0]: raw} if raw else {}
            sections[key] = {name: _as_text(raw.get(name)) for name in sub_fields}

        tags = data.get('tags')
        if isinstance(tags, str):
            tags = [t for t in (s.strip() for s in tags.split(',')) if t]
        elif not isinstance(tags, list):
            tags = []
        tags = [_as_text(t) for t in tags if _as_text(t)]

        notes = []
        for note in _as_list(data.get('extractedNotes')):
            if isinstance(note, dict):
                notes.append({
                    'title': _as_text(note.get('title')),
                    'content': _as_text(note.get('content')),
                })

        links = []
        for link in _as_list(data.get('extractedLinks')):
            if isinstance(link, dict):
                links.append({
                    'url': _as_text(link.get('url')),
                    'title': _as_text(link.get('title')),
                    'description': _as_text(link.get('description')),
                })

        category = _as_text(data.get('category')).lower()
        if category not in CATEGORIES:
            category = "other"

        return cls(
            title=_as_text(data.get('title')),
            description=_as_text(data.get('description')),
            category=category,
            tags=tags,
            concept=sections['concept'],
            market=sections['market'],
            model=sections['model'],
            action=sections['action'],
            resources_plan=sections['resourcesPlan'],
            extracted_notes=notes,
            extracted_links=links,
        )

    def section(self, key: str) -> Dict[str, str]:
        """Return a section by its JSON key ('resourcesPlan' included)."""
        if key == 'resourcesPlan':
            return self.resources_plan
        return getattr(self, key)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the JSON contract's keys."""
        result: Dict[str, Any] = {
            'title': self.title,
            'description': self.description,
            'category': self.category,
            'tags': list(self.tags),
        }
        for key, sub_fields in SECTION_FIELDS.items():
            values = self.section(key)
            result[key] = {name: values.get(name, "") for name in sub_fields}
        result['extractedNotes'] = [dict(n) for n in self.extracted_notes]
        result['extractedLinks'] = [dict(l) for l in self.extracted_links]
        return result


_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


def extract_json_object(text: str) -> Dict[str, Any]:
    """Pull the JSON object out of a model reply.

    Tries the contents of fenced code blocks first, then the whole reply.
    Each candidate is parsed as-is, then scanned with a real JSON decoder
    from every '{' so braces inside string values don't confuse it.

    Raises:
        MalformedStructuringError: If no JSON object can be decoded
    """
    text = text or ""
    candidates = [m.group(1).strip() for m in _FENCE_RE.finditer(text)]
    candidates.append(text.strip())

    decoder = json.JSONDecoder()
    for candidate in candidates:
        try:
            data = json.loads(candidate)
            if isinstance(data, dict):
                return data
        except ValueError:
            pass

        start = candidate.find('{')
        while start != -1:
            try:
                data, _ = decoder.raw_decode(candidate, start)
                if isinstance(data, dict):
                    return data
            except ValueError:
                pass
            start = candidate.find('{', start + 1)

    preview = text.strip().replace('\n', ' ')[:120]
    raise MalformedStructuringError(
        f"Could not extract a JSON object from the model response: {preview!r}"
    )


class LLM(ABC):
    """Abstract base class for LLM providers.

    All LLM providers (OpenAI, Mistral) implement this interface for the
    two ingestion strategies: structured JSON and free-text summary.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name (e.g., 'openai', 'mistral')."""
        pass

    @abstractmethod
    def structure_project(self, documents: List[ExtractedDocument],
                          folder_name: str) -> ProjectStructure:
        """Turn extracted documents into a ProjectStructure.

        Makes one non-streaming completion call.

        Raises:
            MalformedStructuringError: If the reply holds no JSON object
            LLMError: If the provider call fails
        """
        pass

    @abstractmethod
    def summarize_folder(self, documents: List[ExtractedDocument],
                         folder_name: str) -> str:
        """Describe a folder in free text from its documents and images.

        Raises:
            LLMError: If the provider call fails or returns nothing
        """
        pass

    # =========================================================================
    # Helper methods (shared by all implementations)
    # =========================================================================

    def _build_structuring_messages(self, documents: List[ExtractedDocument],
                                    folder_name: str) -> List[Dict[str, str]]:
        """Build the system + user messages for structure_project()."""
        sections = []
        for doc in documents:
            if doc.is_binary:
                continue
            sections.append(
                f"### {doc.name} ({doc.path})\n"
                f"Type: {doc.mime_type}\n"
                f"Content:\n{doc.prompt_text()}"
            )
        user_prompt = STRUCTURING_USER_PROMPT.format(
            folder_name=folder_name,
            documents="\n\n".join(sections),
        )
        return [
            {"role": "system", "content": STRUCTURING_SYSTEM_PROMPT},
            {"role": "user", "content": user_prompt},
        ]

    def _build_summary_parts(self, documents: List[ExtractedDocument],
                             folder_name: str) -> Tuple[str, List[Tuple[str, str]]]:
        """Build the text prompt and the (mime_type, base64) image list."""
        text_sections = []
        images = []
        for doc in documents:
            if doc.is_binary:
                images.append((doc.mime_type, doc.content))
            else:
                text_sections.append(f"--- {doc.name} ---\n{doc.prompt_text()}")

        combined = "\n\n".join(text_sections)[:SUMMARY_MAX_TOTAL_CHARS]
        prompt = SUMMARY_PROMPT.format(folder_name=folder_name, documents=combined)
        return prompt, images

    def _parse_structuring_response(self, response: Optional[str]) -> ProjectStructure:
        """Parse a model reply into a normalized ProjectStructure."""
        return ProjectStructure.from_dict(extract_json_object(response or ""))
