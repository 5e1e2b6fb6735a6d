"""Local filesystem storage driver.

Exposes a local directory through the same contract as Google Drive so that
folders can be ingested from disk. Item IDs are paths relative to the root
directory; the root itself has the ID ''.
"""

import mimetypes
import os
from typing import List, Optional, Tuple

from .base import (
    StorageDriver, StorageError, RemoteFile,
    FOLDER_MIME_TYPE,
)


class LocalDriver(StorageDriver):
    """Storage driver for local filesystem.

    All IDs are relative to the root_path provided at construction.
    """

    def __init__(self, root_path: str) -> None:
        """Initialize local storage driver.

        Args:
            root_path: Path to the root directory

        Raises:
            StorageError: If root_path doesn't exist
        """
        self.root_path = os.path.abspath(root_path)
        if not os.path.exists(self.root_path):
            raise StorageError(f"Directory does not exist: {self.root_path}")
        if not os.path.isdir(self.root_path):
            raise StorageError(f"Not a directory: {self.root_path}")

    @property
    def display_name(self) -> str:
        return f"{self.root_path} (local)"

    @property
    def root_folder_id(self) -> str:
        return ""

    def _full_path(self, item_id: str) -> str:
        """Convert an item ID to an absolute path inside the root."""
        if not item_id:
            return self.root_path
        full_path = os.path.abspath(os.path.join(self.root_path, item_id))
        if full_path != self.root_path and not full_path.startswith(self.root_path + os.sep):
            raise StorageError(f"Path escapes storage root: {item_id}")
        return full_path

    def _to_remote_file(self, full_path: str, base_path: str = "") -> RemoteFile:
        name = os.path.basename(full_path) or os.path.basename(self.root_path)
        rel_id = os.path.relpath(full_path, self.root_path)
        if rel_id == ".":
            rel_id = ""

        if os.path.isdir(full_path):
            mime_type = FOLDER_MIME_TYPE
            size = None
        else:
            mime_type = mimetypes.guess_type(name)[0] or 'application/octet-stream'
            try:
                size = os.path.getsize(full_path)
            except OSError:
                size = None

        return RemoteFile(
            id=rel_id.replace(os.sep, '/'),
            name=name,
            mime_type=mime_type,
            path=f"{base_path}/{name}" if base_path else name,
            size=size,
        )

    def get_item(self, item_id: str) -> RemoteFile:
        full_path = self._full_path(item_id)
        if not os.path.exists(full_path):
            raise StorageError(f"Item not found: {item_id}")
        return self._to_remote_file(full_path)

    def list_children(self, folder_id: str, page_token: Optional[str] = None,
                      page_size: int = 100, base_path: str = "",
                      name_contains: Optional[str] = None,
                      mime_type: Optional[str] = None
                      ) -> Tuple[List[RemoteFile], Optional[str]]:
        """List one page of a directory, folders first then by name."""
        full_path = self._full_path(folder_id)
        if not os.path.isdir(full_path):
            raise StorageError(f"Folder not found: {folder_id}")

        try:
            offset = int(page_token) if page_token else 0
        except ValueError:
            raise StorageError(f"Invalid page token: {page_token}")

        try:
            names = os.listdir(full_path)
        except OSError as e:
            raise StorageError(f"Failed to list {folder_id or '/'}: {e}")

        entries = [self._to_remote_file(os.path.join(full_path, n), base_path) for n in names]
        if name_contains:
            needle = name_contains.lower()
            entries = [e for e in entries if needle in e.name.lower()]
        if mime_type:
            entries = [e for e in entries if e.mime_type == mime_type]
        entries.sort(key=lambda e: (not e.is_folder, e.name.lower()))

        page = entries[offset:offset + page_size]
        next_offset = offset + page_size
        next_token = str(next_offset) if next_offset < len(entries) else None
        return page, next_token

    def export_text(self, file_id: str, export_mime_type: str) -> str:
        """Local files have no native document formats to export."""
        raise StorageError(f"Export is not supported for local files: {file_id}")

    def download_bytes(self, file_id: str) -> bytes:
        full_path = self._full_path(file_id)
        if not os.path.isfile(full_path):
            raise StorageError(f"File not found: {file_id}")
        try:
            with open(full_path, 'rb') as f:
                return f.read()
        except OSError as e:
            raise StorageError(f"Failed to read file {file_id}: {e}")
