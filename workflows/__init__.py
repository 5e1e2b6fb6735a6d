"""Workflow layer for ideaforge.

Contains the folder ingestion pipeline and its stages:
- Listing: Recursive, bounded crawl of a folder tree
- Prioritization: Rank files by how likely they describe the business
- Extraction: Export or download file content
- Materialization: Persist a structured project with notes and links
"""

from .lister import FolderStats, list_children, list_all_files, build_folder_tree
from .prioritizer import HIGH, MEDIUM, LOW, is_excluded, classify, prioritize
from .extractor import extract, extract_all, pdf_to_text
from .project_store import ProjectStore, ProjectStoreError
from .materializer import framework_fields, materialize, materialize_summary
from .pipeline import (
    STRUCTURED,
    SUMMARY,
    STRATEGIES,
    PipelineError,
    EmptyResultError,
    IngestionResult,
    IngestionPipeline,
)


__all__ = [
    # Listing
    'FolderStats',
    'list_children',
    'list_all_files',
    'build_folder_tree',

    # Prioritization
    'HIGH',
    'MEDIUM',
    'LOW',
    'is_excluded',
    'classify',
    'prioritize',

    # Extraction
    'extract',
    'extract_all',
    'pdf_to_text',

    # Persistence
    'ProjectStore',
    'ProjectStoreError',
    'framework_fields',
    'materialize',
    'materialize_summary',

    # Pipeline
    'STRUCTURED',
    'SUMMARY',
    'STRATEGIES',
    'PipelineError',
    'EmptyResultError',
    'IngestionResult',
    'IngestionPipeline',
]
