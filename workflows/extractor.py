"""Content extraction from remote files.

Native Google documents are exported to text, PDFs and text files are
downloaded and decoded, and images are optionally inlined as base64 for
multimodal prompts. A file that can't be extracted is skipped, never fatal.
"""

import base64
import io
from typing import List, Optional

import pypdf
from pypdf.errors import PyPdfError

from ideaforge import IdeaForge
from models import ExtractedDocument
from models.base import STRUCTURING_CHARS_PER_FILE
from storage import (
    StorageDriver, StorageError, AuthRequiredError, RemoteFile,
    GOOGLE_DOC_MIME_TYPE, GOOGLE_SHEET_MIME_TYPE, GOOGLE_SLIDES_MIME_TYPE,
    PDF_MIME_TYPE,
)

# Export format for each native Google format
EXPORT_FORMATS = {
    GOOGLE_DOC_MIME_TYPE: 'text/plain',
    GOOGLE_SHEET_MIME_TYPE: 'text/csv',
    GOOGLE_SLIDES_MIME_TYPE: 'text/plain',
}

# Images larger than this are not inlined into prompts
MAX_IMAGE_BYTES = 10 * 1024 * 1024


def pdf_to_text(data: bytes) -> str:
    """Extract the text layer of a PDF."""
    reader = pypdf.PdfReader(io.BytesIO(data))
    text = ""
    for page in reader.pages:
        page_text = page.extract_text()
        if page_text:
            text += page_text + "\n"
    return text


def extract(driver: StorageDriver, file: RemoteFile,
            include_images: bool = False,
            max_chars: int = STRUCTURING_CHARS_PER_FILE) -> Optional[ExtractedDocument]:
    """Extract one file's content.

    Args:
        driver: Store the file lives in
        file: File to extract
        include_images: Inline images as base64 (multimodal prompts only)
        max_chars: Characters of text embedded when the document is prompted

    Returns:
        ExtractedDocument, or None for unsupported types, empty content and
        failed requests

    Raises:
        AuthRequiredError: If the store rejects the credentials
    """
    mime_type = file.mime_type or ""
    is_binary = False

    try:
        if mime_type in EXPORT_FORMATS:
            content = driver.export_text(file.id, EXPORT_FORMATS[mime_type])
        elif mime_type == PDF_MIME_TYPE:
            content = pdf_to_text(driver.download_bytes(file.id))
        elif mime_type.startswith('text/'):
            content = driver.download_bytes(file.id).decode('utf-8', errors='replace')
        elif mime_type.startswith('image/') and include_images:
            if file.size and file.size > MAX_IMAGE_BYTES:
                IdeaForge.log(f"Skipping {file.path or file.name}: image larger than "
                              f"{MAX_IMAGE_BYTES // (1024 * 1024)}MB")
                return None
            content = base64.b64encode(driver.download_bytes(file.id)).decode('ascii')
            is_binary = True
        else:
            return None
    except AuthRequiredError:
        raise
    except StorageError as e:
        IdeaForge.log(f"Skipping {file.path or file.name}: {e}")
        return None
    except (PyPdfError, ValueError) as e:
        IdeaForge.log(f"Skipping {file.path or file.name}: unreadable PDF ({e})")
        return None

    if not content or not content.strip():
        IdeaForge.log(f"Skipping {file.path or file.name}: no text content")
        return None

    return ExtractedDocument(
        source_file=file,
        content=content,
        is_binary=is_binary,
        truncation_length=max_chars,
    )


def extract_all(driver: StorageDriver, files: List[RemoteFile],
                include_images: bool = False,
                max_chars: int = STRUCTURING_CHARS_PER_FILE) -> List[ExtractedDocument]:
    """Extract files one at a time, keeping input order and dropping failures."""
    documents = []
    total = len(files)

    for i, file in enumerate(files, 1):
        IdeaForge.log(f"[{i}/{total}] Extracting {file.path or file.name}")
        document = extract(driver, file, include_images=include_images, max_chars=max_chars)
        if document is not None:
            documents.append(document)

    return documents
