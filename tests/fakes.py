"""In-memory stand-ins for the storage driver and the LLM provider."""

import copy
from typing import Dict, List, Optional, Tuple

from models import LLM, ExtractedDocument, ProjectStructure
from storage import (
    StorageDriver, StorageError, AuthRequiredError, RemoteFile,
    FOLDER_MIME_TYPE,
)

SAMPLE_STRUCTURE = {
    "title": "Solar Kiosk",
    "description": "Pay-as-you-go solar charging kiosks for rural markets",
    "category": "startup",
    "tags": ["energy", "solar", "rural"],
    "concept": {
        "idea": "Solar charging kiosks run by local agents",
        "problem": "No reliable power for phone charging",
        "solution": "Kiosks with battery banks and mobile payments",
        "value": "Cheaper and closer than diesel generators",
    },
    "market": {
        "target": "Rural households with mobile phones",
        "size": "40 million people in the region",
        "trends": "Falling panel prices",
        "competitors": "Diesel charging stalls",
    },
    "model": {
        "revenue": "Per-charge fees",
        "costs": "Hardware and agent commissions",
        "channels": "Village agents",
        "resources": "Kiosk fleet",
    },
    "action": {
        "milestones": "Pilot with 10 kiosks",
        "timeline": "Six months",
        "tasks": "Select pilot villages",
        "metrics": "Charges per kiosk per day",
    },
    "resourcesPlan": {
        "team": "Two field engineers",
        "tools": "Mobile money API",
        "budget": "50k USD",
        "partners": "Local cooperatives",
    },
    "extractedNotes": [
        {"title": "Pilot findings", "content": "Demand peaks on market days"},
    ],
    "extractedLinks": [
        {"url": "https://example.com/report", "title": "Market report", "description": "Energy access data"},
    ],
}


class FakeDriver(StorageDriver):
    """Folder tree held in dictionaries.

    The root folder has the ID 'root'. Folders listed in `failing` raise
    StorageError, those in `auth_failing` raise AuthRequiredError.
    """

    def __init__(self, max_page_size: Optional[int] = None) -> None:
        self.items: Dict[str, RemoteFile] = {
            'root': RemoteFile(id='root', name='My Drive', mime_type=FOLDER_MIME_TYPE)
        }
        self.children: Dict[str, List[str]] = {'root': []}
        self.contents: Dict[str, bytes] = {}
        self.max_page_size = max_page_size
        self.failing = set()
        self.auth_failing = set()
        self.list_calls: List[str] = []
        self.download_calls: List[str] = []

    @property
    def display_name(self) -> str:
        return "Fake Drive"

    def add_folder(self, folder_id: str, name: str, parent_id: str = 'root') -> str:
        self.items[folder_id] = RemoteFile(id=folder_id, name=name, mime_type=FOLDER_MIME_TYPE)
        self.children[folder_id] = []
        self.children[parent_id].append(folder_id)
        return folder_id

    def add_file(self, file_id: str, name: str, mime_type: str = 'text/plain',
                 content=b"", parent_id: str = 'root', size: Optional[int] = None) -> str:
        if isinstance(content, str):
            content = content.encode('utf-8')
        self.items[file_id] = RemoteFile(
            id=file_id, name=name, mime_type=mime_type,
            size=size if size is not None else len(content),
        )
        self.contents[file_id] = content
        self.children[parent_id].append(file_id)
        return file_id

    def get_item(self, item_id: str) -> RemoteFile:
        if item_id in self.auth_failing:
            raise AuthRequiredError("token expired")
        if item_id not in self.items:
            raise StorageError(f"Item not found: {item_id}")
        return copy.copy(self.items[item_id])

    def list_children(self, folder_id: str, page_token: Optional[str] = None,
                      page_size: int = 100, base_path: str = "",
                      name_contains: Optional[str] = None,
                      mime_type: Optional[str] = None
                      ) -> Tuple[List[RemoteFile], Optional[str]]:
        self.list_calls.append(folder_id)
        if folder_id in self.auth_failing:
            raise AuthRequiredError("token expired")
        if folder_id in self.failing:
            raise StorageError(f"HTTP 500 listing {folder_id}")
        if folder_id not in self.children:
            raise StorageError(f"Folder not found: {folder_id}")

        entries = []
        for child_id in self.children[folder_id]:
            item = copy.copy(self.items[child_id])
            item.path = f"{base_path}/{item.name}" if base_path else item.name
            if name_contains and name_contains.lower() not in item.name.lower():
                continue
            if mime_type and item.mime_type != mime_type:
                continue
            entries.append(item)

        if self.max_page_size:
            page_size = min(page_size, self.max_page_size)
        offset = int(page_token) if page_token else 0
        page = entries[offset:offset + page_size]
        next_offset = offset + page_size
        return page, (str(next_offset) if next_offset < len(entries) else None)

    def export_text(self, file_id: str, export_mime_type: str) -> str:
        if file_id in self.auth_failing:
            raise AuthRequiredError("token expired")
        if file_id in self.failing:
            raise StorageError(f"HTTP 500 exporting {file_id}")
        return self.contents[file_id].decode('utf-8')

    def download_bytes(self, file_id: str) -> bytes:
        self.download_calls.append(file_id)
        if file_id in self.auth_failing:
            raise AuthRequiredError("token expired")
        if file_id in self.failing:
            raise StorageError(f"HTTP 500 downloading {file_id}")
        return self.contents[file_id]


class FakeLLM(LLM):
    """Records calls and replays canned answers."""

    def __init__(self, structure: Optional[Dict] = None, summary: str = "A solar kiosk business.",
                 error: Optional[Exception] = None) -> None:
        self.structure = structure if structure is not None else copy.deepcopy(SAMPLE_STRUCTURE)
        self.summary = summary
        self.error = error
        self.structure_calls: List[Tuple[List[ExtractedDocument], str]] = []
        self.summary_calls: List[Tuple[List[ExtractedDocument], str]] = []

    @property
    def name(self) -> str:
        return "fake"

    def structure_project(self, documents, folder_name):
        self.structure_calls.append((list(documents), folder_name))
        if self.error:
            raise self.error
        return ProjectStructure.from_dict(copy.deepcopy(self.structure))

    def summarize_folder(self, documents, folder_name):
        self.summary_calls.append((list(documents), folder_name))
        if self.error:
            raise self.error
        return self.summary
