"""Folder ingestion pipeline.

One entry point for both ways of turning a folder into a project:

- structured: list → prioritize → cap → extract text → LLM JSON structure.
  The structure is returned as a preview and persisted by a later commit().
- summary: list (best effort) → cap → extract text and images → multimodal
  LLM free-text description → minimal project, all in one call.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ideaforge import IdeaForge
from models import LLM, ExtractedDocument, ProjectStructure
from models.base import STRUCTURING_CHARS_PER_FILE, SUMMARY_CHARS_PER_FILE
from storage import StorageDriver, StorageError, AuthRequiredError, RemoteFile
from .extractor import extract_all
from .lister import list_all_files
from .materializer import materialize, materialize_summary
from .prioritizer import prioritize
from .project_store import ProjectStore

STRUCTURED = "structured"
SUMMARY = "summary"
STRATEGIES = (STRUCTURED, SUMMARY)

DEFAULT_FOLDER_NAME = "Project"


class PipelineError(Exception):
    """Base exception for ingestion runs."""
    pass


class EmptyResultError(PipelineError):
    """No content could be extracted from the folder."""
    pass


@dataclass
class IngestionResult:
    """Outcome of one ingestion run.

    Attributes:
        strategy: STRUCTURED or SUMMARY
        folder_name: Name used for the folder in prompts and project titles
        total_files: Files found in the folder tree
        documents: Documents that were extracted and sent to the model
        structure: Project structure (structured strategy)
        summary: Free-text description (summary strategy)
        project: Persisted project, when the run materialized one
    """
    strategy: str
    folder_name: str
    total_files: int
    documents: List[ExtractedDocument] = field(default_factory=list)
    structure: Optional[ProjectStructure] = None
    summary: Optional[str] = None
    project: Optional[Dict] = None

    def stats(self) -> Dict:
        return {
            'sourceFolderName': self.folder_name,
            'totalFilesProcessed': len(self.documents),
            'totalFilesInFolder': self.total_files,
            'filesExtracted': [doc.path for doc in self.documents],
        }


class IngestionPipeline:
    """Runs folder ingestion against one store, one model and one project store."""

    def __init__(self, driver: StorageDriver, llm: LLM,
                 store: Optional[ProjectStore] = None,
                 max_files: Optional[int] = None) -> None:
        self.driver = driver
        self.llm = llm
        self.store = store
        self.max_files = max_files if max_files is not None else IdeaForge.max_files

    def _folder_name(self, folder_id: str) -> str:
        """Look up a folder's display name, falling back to a generic one."""
        try:
            return self.driver.get_item(folder_id).name or DEFAULT_FOLDER_NAME
        except AuthRequiredError:
            raise
        except StorageError as e:
            IdeaForge.log(f"Warning: could not read folder name: {e}")
            return DEFAULT_FOLDER_NAME

    def select_files(self, folder_id: str, strategy: str) -> Tuple[List[RemoteFile], int]:
        """List a folder and pick the files to extract.

        Returns:
            Tuple of (selected files, number of files found in the tree)
        """
        files = list_all_files(self.driver, folder_id, best_effort=(strategy == SUMMARY))
        IdeaForge.log(f"Found {len(files)} file(s) in folder")

        candidates = prioritize(files) if strategy == STRUCTURED else files
        selected = candidates[:self.max_files]
        if len(candidates) > len(selected):
            IdeaForge.log(f"Using the first {len(selected)} of {len(candidates)} candidate files")
        return selected, len(files)

    def run(self, folder_id: str, folder_name: Optional[str] = None,
            strategy: str = STRUCTURED, owner_id: Optional[str] = None) -> IngestionResult:
        """Ingest a folder.

        Args:
            folder_id: Folder to ingest
            folder_name: Display name (looked up when omitted)
            strategy: STRUCTURED or SUMMARY
            owner_id: When set (and a store is configured), persist the result

        Raises:
            ValueError: Unknown strategy
            AuthRequiredError: The store needs re-authentication
            EmptyResultError: Nothing could be extracted
            MalformedStructuringError: The model reply wasn't a JSON object
            StorageError, LLMError: Upstream provider failures
        """
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown strategy: {strategy}. Must be one of {STRATEGIES}")

        folder_name = folder_name or self._folder_name(folder_id)
        selected, total = self.select_files(folder_id, strategy)
        if total == 0:
            raise EmptyResultError(f"The folder '{folder_name}' is empty")

        documents = extract_all(
            self.driver, selected,
            include_images=(strategy == SUMMARY),
            max_chars=(SUMMARY_CHARS_PER_FILE if strategy == SUMMARY
                       else STRUCTURING_CHARS_PER_FILE),
        )
        if not documents:
            raise EmptyResultError(
                "Could not extract content from any file. Make sure the folder "
                "contains Google Docs, Sheets, Slides, PDFs or text files."
            )

        result = IngestionResult(
            strategy=strategy,
            folder_name=folder_name,
            total_files=total,
            documents=documents,
        )

        IdeaForge.log(f"Analyzing {len(documents)} document(s) with {self.llm.name}")
        if strategy == STRUCTURED:
            structure = self.llm.structure_project(documents, folder_name)
            if not structure.title:
                structure.title = folder_name
            result.structure = structure
            if owner_id is not None:
                result.project = self.commit(structure, owner_id, source_folder=folder_name)
        else:
            result.summary = self.llm.summarize_folder(documents, folder_name)
            if owner_id is not None:
                result.project = materialize_summary(
                    folder_name, result.summary, documents, owner_id, self._require_store()
                )

        return result

    def preview(self, folder_id: str, folder_name: Optional[str] = None) -> IngestionResult:
        """Structure a folder without persisting anything."""
        return self.run(folder_id, folder_name, strategy=STRUCTURED)

    def commit(self, structure: ProjectStructure, owner_id: str,
               source_folder: Optional[str] = None) -> Dict:
        """Persist a previewed structure."""
        return materialize(structure, owner_id, self._require_store(),
                           source_folder=source_folder)

    def analyze(self, folder_id: str, folder_name: Optional[str] = None,
                owner_id: Optional[str] = None) -> IngestionResult:
        """Single-shot summary, persisted when owner_id is given."""
        return self.run(folder_id, folder_name, strategy=SUMMARY, owner_id=owner_id)

    def _require_store(self) -> ProjectStore:
        if self.store is None:
            raise PipelineError("No project store configured")
        return self.store
