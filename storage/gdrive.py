"""Google Drive storage driver."""

from typing import Dict, List, Optional, Tuple
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseDownload
import io

from ideaforge import IdeaForge
from .base import (
    StorageDriver, StorageError, AuthRequiredError, RemoteFile,
    MAX_PAGE_SIZE,
)
from utils.retry import (
    retry_on_transient_error,
    is_transient_network_error,
    TRANSIENT_HTTP_STATUS_CODES,
)


SCOPES = ['https://www.googleapis.com/auth/drive.readonly']

FILE_FIELDS = "id, name, mimeType, size, modifiedTime, webViewLink"


# ---------------------------------------------------------------------------
# Google Drive Retry Configuration
# ---------------------------------------------------------------------------

def _is_retryable_gdrive_error(exc: Exception) -> bool:
    """Determine if a Google Drive API error should be retried."""
    if isinstance(exc, HttpError):
        return exc.resp.status in TRANSIENT_HTTP_STATUS_CODES
    return is_transient_network_error(exc)


def _log_retry(exc: Exception, attempt: int, delay: float) -> None:
    """Log when a retry is about to happen."""
    if isinstance(exc, HttpError):
        error_desc = f"HTTP {exc.resp.status}"
    else:
        error_desc = type(exc).__name__
    IdeaForge.log(f"  [Retry] {error_desc} on attempt {attempt}, retrying in {delay:.1f}s...")


def _translate_error(exc: Exception, action: str) -> StorageError:
    """Map a Drive client exception onto the storage error taxonomy."""
    if isinstance(exc, HttpError):
        status = exc.resp.status
        if status == 401:
            return AuthRequiredError(
                f"Google Drive rejected the access token while {action}; sign in again"
            )
        return StorageError(f"Google Drive returned HTTP {status} while {action}")
    return StorageError(f"Google Drive request failed while {action}: {exc}")


_drive_retry = retry_on_transient_error(
    is_retryable=_is_retryable_gdrive_error,
    max_retries=5,
    base_delay=1.0,
    max_delay=60.0,
    on_retry=_log_retry,
)


def _execute_with_retry(request, action: str):
    """Execute a Drive request, retrying transient failures."""
    @_drive_retry
    def execute():
        return request.execute()

    try:
        return execute()
    except Exception as e:
        raise _translate_error(e, action) from e


def _download_with_retry(request, destination, action: str) -> None:
    """Stream a media download into `destination`, retrying each chunk."""
    downloader = MediaIoBaseDownload(destination, request)
    done = False

    @_drive_retry
    def download_next_chunk():
        return downloader.next_chunk()

    try:
        while not done:
            status, done = download_next_chunk()
    except Exception as e:
        raise _translate_error(e, action) from e


def _escape_query_value(value: str) -> str:
    """Escape a value for use in Google Drive API query strings."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def _to_remote_file(item: Dict, base_path: str = "") -> RemoteFile:
    """Convert a Drive API file resource into a RemoteFile."""
    path = f"{base_path}/{item['name']}" if base_path else item['name']
    return RemoteFile(
        id=item['id'],
        name=item['name'],
        mime_type=item.get('mimeType', ''),
        path=path,
        size=int(item['size']) if item.get('size') else None,
        modified_time=item.get('modifiedTime'),
        web_view_link=item.get('webViewLink'),
    )


class GDriveDriver(StorageDriver):
    """Storage driver for Google Drive (Drive API v3).

    The web API authenticates with the signed-in user's OAuth access token;
    the CLI can use a service account instead.
    """

    def __init__(self, credentials=None, service=None) -> None:
        """Initialize Google Drive storage driver.

        Args:
            credentials: google-auth credentials used to build the service
            service: Prebuilt Drive service (takes precedence over credentials)

        Raises:
            StorageError: If the Drive client can't be built
        """
        if service is not None:
            self.service = service
            return
        if credentials is None:
            raise AuthRequiredError("No Google Drive credentials available")
        try:
            self.service = build('drive', 'v3', credentials=credentials,
                                 cache_discovery=False)
        except Exception as e:
            raise StorageError(f"Failed to initialize Google Drive: {e}")

    @classmethod
    def from_access_token(cls, access_token: Optional[str]) -> "GDriveDriver":
        """Build a driver from a user's OAuth bearer token."""
        if not access_token:
            raise AuthRequiredError("Connect your Google account to access Drive")
        return cls(credentials=Credentials(token=access_token))

    @classmethod
    def from_service_account(cls, service_account_file: str) -> "GDriveDriver":
        """Build a driver from a service account key file."""
        try:
            creds = service_account.Credentials.from_service_account_file(
                service_account_file, scopes=SCOPES
            )
        except Exception as e:
            raise AuthRequiredError(f"Failed to load service account credentials: {e}")
        return cls(credentials=creds)

    @property
    def display_name(self) -> str:
        return "Google Drive"

    def get_item(self, item_id: str) -> RemoteFile:
        """Fetch metadata for a file or folder."""
        item = _execute_with_retry(self.service.files().get(
            fileId=item_id,
            fields=FILE_FIELDS,
            supportsAllDrives=True,
        ), f"reading {item_id}")
        return _to_remote_file(item)

    def list_children(self, folder_id: str, page_token: Optional[str] = None,
                      page_size: int = 100, base_path: str = "",
                      name_contains: Optional[str] = None,
                      mime_type: Optional[str] = None
                      ) -> Tuple[List[RemoteFile], Optional[str]]:
        """List one page of a folder's children."""
        q = f"'{_escape_query_value(folder_id)}' in parents and trashed=false"
        if name_contains:
            q += f" and name contains '{_escape_query_value(name_contains)}'"
        if mime_type:
            q += f" and mimeType='{_escape_query_value(mime_type)}'"

        response = _execute_with_retry(self.service.files().list(
            q=q,
            pageSize=min(page_size, MAX_PAGE_SIZE),
            fields=f"nextPageToken, files({FILE_FIELDS})",
            orderBy="folder,name",
            pageToken=page_token,
            supportsAllDrives=True,
            includeItemsFromAllDrives=True,
        ), f"listing folder {folder_id}")

        items = [_to_remote_file(item, base_path) for item in response.get('files', [])]
        return items, response.get('nextPageToken') or None

    def export_text(self, file_id: str, export_mime_type: str) -> str:
        """Export a Google Docs/Sheets/Slides file as text."""
        data = _execute_with_retry(self.service.files().export(
            fileId=file_id,
            mimeType=export_mime_type,
        ), f"exporting {file_id}")
        if isinstance(data, bytes):
            return data.decode('utf-8', errors='replace')
        return data or ""

    def download_bytes(self, file_id: str) -> bytes:
        """Download a file's raw content."""
        request = self.service.files().get_media(fileId=file_id, supportsAllDrives=True)
        buffer = io.BytesIO()
        _download_with_retry(request, buffer, f"downloading {file_id}")
        return buffer.getvalue()
