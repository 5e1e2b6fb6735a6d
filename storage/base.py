"""Base classes for storage drivers.

This module defines the read-only interface that the ingestion pipeline
consumes from a remote hierarchical file store (Google Drive, or a local
directory standing in for one).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


FOLDER_MIME_TYPE = 'application/vnd.google-apps.folder'
GOOGLE_DOC_MIME_TYPE = 'application/vnd.google-apps.document'
GOOGLE_SHEET_MIME_TYPE = 'application/vnd.google-apps.spreadsheet'
GOOGLE_SLIDES_MIME_TYPE = 'application/vnd.google-apps.presentation'
PDF_MIME_TYPE = 'application/pdf'

# Maximum page size accepted by the Drive files.list endpoint
MAX_PAGE_SIZE = 1000


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class AuthRequiredError(StorageError):
    """The store rejected our credentials; the user must sign in again."""
    pass


@dataclass
class RemoteFile:
    """An entry (file or folder) in the remote store.

    Attributes:
        id: Backend-specific identifier (e.g., Google Drive file ID)
        name: Filename only (no directory)
        mime_type: MIME type; folders use FOLDER_MIME_TYPE
        path: Path relative to the folder the crawl started from
        size: File size in bytes (optional)
        modified_time: RFC 3339 modification timestamp (optional)
        web_view_link: Browser URL for the file (optional)
    """
    id: str
    name: str
    mime_type: str
    path: str = ""
    size: Optional[int] = None
    modified_time: Optional[str] = None
    web_view_link: Optional[str] = None

    @property
    def is_folder(self) -> bool:
        return self.mime_type == FOLDER_MIME_TYPE

    @property
    def parent_path(self) -> str:
        """Relative path of the containing folder ('' for the crawl root)."""
        path = self.path or self.name
        return path.rsplit('/', 1)[0] if '/' in path else ""

    def to_dict(self) -> Dict:
        """Serialize with the camelCase keys the web client expects."""
        return {
            'id': self.id,
            'name': self.name,
            'mimeType': self.mime_type,
            'path': self.path or self.name,
            'size': self.size,
            'modifiedTime': self.modified_time,
            'webViewLink': self.web_view_link,
        }


class StorageDriver(ABC):
    """Abstract base class for remote file stores.

    Drivers are read-only from the pipeline's point of view. Every method may
    raise AuthRequiredError when credentials are missing or expired and
    StorageError for any other failure.
    """

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable name for this storage (e.g., 'Google Drive')."""
        pass

    @property
    def root_folder_id(self) -> str:
        """Identifier used when the caller does not name a folder."""
        return "root"

    @abstractmethod
    def get_item(self, item_id: str) -> RemoteFile:
        """Fetch metadata for a single file or folder.

        Raises:
            StorageError: If the item doesn't exist or can't be accessed
        """
        pass

    @abstractmethod
    def list_children(self, folder_id: str, page_token: Optional[str] = None,
                      page_size: int = 100, base_path: str = "",
                      name_contains: Optional[str] = None,
                      mime_type: Optional[str] = None
                      ) -> Tuple[List[RemoteFile], Optional[str]]:
        """List one page of a folder's direct children.

        Args:
            folder_id: Folder to list
            page_token: Continuation token from a previous page (None = first)
            page_size: Maximum entries per page
            base_path: Relative path of the folder, prefixed onto child paths
            name_contains: Only return entries whose name contains this text
            mime_type: Only return entries with this MIME type

        Returns:
            Tuple of (entries, next_page_token); next_page_token is None on
            the last page.
        """
        pass

    @abstractmethod
    def export_text(self, file_id: str, export_mime_type: str) -> str:
        """Export a native document to a text format (text/plain, text/csv)."""
        pass

    @abstractmethod
    def download_bytes(self, file_id: str) -> bytes:
        """Download the raw content of a file."""
        pass
