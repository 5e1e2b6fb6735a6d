"""Storage driver abstraction for ideaforge.

Provides a uniform, read-only interface over the stores folders are ingested
from:
- GDriveDriver: Google Drive (user access token or service account)
- LocalDriver: Local filesystem

Usage:
    from storage import open_folder

    driver, folder_id = open_folder("local:/path/to/folder")
    driver, folder_id = open_folder("gdrive:folder_id")
"""

from typing import Tuple

from .base import (
    StorageDriver,
    StorageError,
    AuthRequiredError,
    RemoteFile,
    FOLDER_MIME_TYPE,
    GOOGLE_DOC_MIME_TYPE,
    GOOGLE_SHEET_MIME_TYPE,
    GOOGLE_SLIDES_MIME_TYPE,
    PDF_MIME_TYPE,
)
from .local import LocalDriver
from .gdrive import GDriveDriver


def parse_storage_uri(uri: str) -> tuple:
    """Parse a storage URI into (type, value) tuple.

    Args:
        uri: Storage URI (e.g., 'gdrive:abc123', 'local:/path')

    Returns:
        Tuple of (storage_type, value) where storage_type is 'gdrive' or 'local'

    Raises:
        ValueError: If URI format is invalid
    """
    if uri.startswith("gdrive:"):
        return ("gdrive", uri[7:])
    elif uri.startswith("local:"):
        return ("local", uri[6:])
    else:
        raise ValueError(
            f"Invalid storage URI: {uri}. "
            "Must start with 'gdrive:' or 'local:'"
        )


def open_folder(uri: str,
                service_account_file: str = "service_account_key.json"
                ) -> Tuple[StorageDriver, str]:
    """Create a storage driver for a folder URI.

    Args:
        uri: 'gdrive:<folder_id>' or 'local:<path>'
        service_account_file: Credentials used for 'gdrive:' URIs

    Returns:
        Tuple of (driver, folder_id) where folder_id is the ID to crawl

    Raises:
        ValueError: If URI format is invalid
        StorageError: If the backend can't be initialized
    """
    storage_type, value = parse_storage_uri(uri)
    if storage_type == "gdrive":
        driver = GDriveDriver.from_service_account(service_account_file)
        return driver, value or driver.root_folder_id
    driver = LocalDriver(value)
    return driver, driver.root_folder_id


__all__ = [
    'StorageDriver',
    'StorageError',
    'AuthRequiredError',
    'RemoteFile',
    'FOLDER_MIME_TYPE',
    'GOOGLE_DOC_MIME_TYPE',
    'GOOGLE_SHEET_MIME_TYPE',
    'GOOGLE_SLIDES_MIME_TYPE',
    'PDF_MIME_TYPE',
    'LocalDriver',
    'GDriveDriver',
    'parse_storage_uri',
    'open_folder',
]
