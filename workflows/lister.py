"""Recursive folder listing.

Walks a folder hierarchy with an explicit worklist, following continuation
tokens at every level. Depth and wall-clock bounds keep pathological trees
from stalling a request.
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from ideaforge import IdeaForge
from storage import StorageDriver, StorageError, AuthRequiredError, RemoteFile

DEFAULT_MAX_DEPTH = 20
DEFAULT_TIME_BUDGET = 90.0
PAGE_SIZE = 100


@dataclass
class FolderStats:
    """File counts by type for a folder tree."""
    total_files: int = 0
    total_folders: int = 0
    documents: int = 0
    spreadsheets: int = 0
    presentations: int = 0
    images: int = 0
    pdfs: int = 0
    other: int = 0

    def count(self, item: RemoteFile) -> None:
        if item.is_folder:
            self.total_folders += 1
            return
        self.total_files += 1
        mime_type = item.mime_type or ""
        if "document" in mime_type:
            self.documents += 1
        elif "spreadsheet" in mime_type:
            self.spreadsheets += 1
        elif "presentation" in mime_type:
            self.presentations += 1
        elif mime_type.startswith("image/"):
            self.images += 1
        elif mime_type == "application/pdf":
            self.pdfs += 1
        else:
            self.other += 1

    def to_dict(self) -> Dict[str, int]:
        return {
            'totalFiles': self.total_files,
            'totalFolders': self.total_folders,
            'documents': self.documents,
            'spreadsheets': self.spreadsheets,
            'presentations': self.presentations,
            'images': self.images,
            'pdfs': self.pdfs,
            'other': self.other,
        }


def list_children(driver: StorageDriver, folder_id: str,
                  base_path: str = "") -> List[RemoteFile]:
    """Return every direct child of a folder, across all pages."""
    items: List[RemoteFile] = []
    page_token = None

    while True:
        page, page_token = driver.list_children(
            folder_id, page_token=page_token, page_size=PAGE_SIZE, base_path=base_path
        )
        items.extend(page)
        if not page_token:
            break

    return items


def _deadline(time_budget: Optional[float],
              clock: Callable[[], float]) -> Optional[float]:
    return clock() + time_budget if time_budget else None


def list_all_files(driver: StorageDriver, folder_id: str,
                   best_effort: bool = False,
                   max_depth: int = DEFAULT_MAX_DEPTH,
                   time_budget: Optional[float] = DEFAULT_TIME_BUDGET,
                   clock: Callable[[], float] = time.monotonic) -> List[RemoteFile]:
    """List every leaf file below a folder.

    Args:
        driver: Store to crawl
        folder_id: Root folder of the crawl
        best_effort: Skip subfolders that fail to list instead of failing
        max_depth: Subfolders deeper than this are skipped
        time_budget: Seconds after which the crawl stops early (None = no limit)
        clock: Monotonic clock, replaceable in tests

    Returns:
        Files (never folders), each listed once, with paths relative to the root

    Raises:
        AuthRequiredError: On any authentication failure
        StorageError: If the root folder can't be listed, or any folder when
                      best_effort is False
    """
    deadline = _deadline(time_budget, clock)
    results: List[RemoteFile] = []
    seen_files = set()
    seen_folders = {folder_id}
    stack: List[Tuple[str, str, int]] = [(folder_id, "", 0)]

    while stack:
        if deadline is not None and clock() > deadline:
            IdeaForge.log(f"Warning: folder crawl stopped after {time_budget:.0f}s, "
                          f"{len(stack)} folder(s) not listed")
            break

        current_id, base_path, depth = stack.pop()
        try:
            children = list_children(driver, current_id, base_path)
        except AuthRequiredError:
            raise
        except StorageError as e:
            if not best_effort or depth == 0:
                raise
            IdeaForge.log(f"Skipping folder {base_path}: {e}")
            continue

        subfolders = []
        for item in children:
            if item.is_folder:
                if item.id in seen_folders:
                    continue
                seen_folders.add(item.id)
                if depth + 1 > max_depth:
                    IdeaForge.log(f"Skipping folder {item.path}: deeper than {max_depth} levels")
                    continue
                subfolders.append((item.id, item.path, depth + 1))
            elif item.id not in seen_files:
                seen_files.add(item.id)
                results.append(item)

        # Reversed so the first subfolder is crawled next
        stack.extend(reversed(subfolders))

    return results


def build_folder_tree(driver: StorageDriver, folder_id: str,
                      max_depth: int = DEFAULT_MAX_DEPTH,
                      time_budget: Optional[float] = DEFAULT_TIME_BUDGET,
                      clock: Callable[[], float] = time.monotonic
                      ) -> Tuple[List[Dict], FolderStats]:
    """Return a folder's full tree for display, plus counts by type.

    Every entry is a RemoteFile.to_dict(); folders carry a 'children' list.
    Subfolders that fail to list are shown empty.

    Raises:
        AuthRequiredError: On any authentication failure
        StorageError: If the root folder can't be listed
    """
    deadline = _deadline(time_budget, clock)
    stats = FolderStats()
    tree: List[Dict] = []
    seen_folders = {folder_id}
    stack: List[Tuple[str, str, int, List[Dict]]] = [(folder_id, "", 0, tree)]

    while stack:
        if deadline is not None and clock() > deadline:
            IdeaForge.log(f"Warning: folder tree truncated after {time_budget:.0f}s")
            break

        current_id, base_path, depth, target = stack.pop()
        try:
            children = list_children(driver, current_id, base_path)
        except AuthRequiredError:
            raise
        except StorageError as e:
            if depth == 0:
                raise
            IdeaForge.log(f"Skipping folder {base_path}: {e}")
            continue

        subfolders = []
        for item in children:
            node = item.to_dict()
            stats.count(item)
            if item.is_folder:
                node['children'] = []
                if item.id not in seen_folders and depth + 1 <= max_depth:
                    seen_folders.add(item.id)
                    subfolders.append((item.id, item.path, depth + 1, node['children']))
            target.append(node)

        stack.extend(reversed(subfolders))

    return tree, stats
