from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ideaforge import IdeaForge
from models import LLM, ProjectStructure
from storage import StorageDriver
from workflows import (
    IngestionPipeline,
    ProjectStore,
    build_folder_tree,
    materialize,
)
from api.deps import get_current_user, get_drive, get_llm, get_store

router = APIRouter()

BROWSE_PAGE_SIZE = 20


class ImportRequest(BaseModel):
    folderId: Optional[str] = None
    folderName: Optional[str] = None


class CommitRequest(BaseModel):
    projectStructure: Optional[Dict[str, Any]] = None
    folderName: Optional[str] = None


class AnalyzeRequest(BaseModel):
    folderId: Optional[str] = None
    folderName: Optional[str] = None
    createProject: bool = True


@router.get("/files")
def browse_folder(
    parent_id: Optional[str] = Query(None, alias="parentId"),
    query: Optional[str] = None,
    mime_type: Optional[str] = Query(None, alias="mimeType"),
    page_token: Optional[str] = Query(None, alias="pageToken"),
    current_user: str = Depends(get_current_user),
    driver: StorageDriver = Depends(get_drive),
) -> Any:
    files, next_page_token = driver.list_children(
        parent_id or driver.root_folder_id,
        page_token=page_token or None,
        page_size=BROWSE_PAGE_SIZE,
        name_contains=query or None,
        mime_type=mime_type or None,
    )
    return {
        'files': [f.to_dict() for f in files],
        'nextPageToken': next_page_token,
    }


@router.get("/folder")
def read_folder_tree(
    folder_id: Optional[str] = Query(None, alias="folderId"),
    current_user: str = Depends(get_current_user),
    driver: StorageDriver = Depends(get_drive),
) -> Any:
    tree, stats = build_folder_tree(driver, folder_id or driver.root_folder_id)
    return {'files': tree, 'stats': stats.to_dict()}


@router.post("/import")
def preview_import(
    request: ImportRequest,
    current_user: str = Depends(get_current_user),
    driver: StorageDriver = Depends(get_drive),
    llm: LLM = Depends(get_llm),
) -> Any:
    if not request.folderId:
        raise HTTPException(status_code=400, detail="folderId is required")

    pipeline = IngestionPipeline(driver, llm, max_files=IdeaForge.max_files)
    result = pipeline.preview(request.folderId, request.folderName)
    return {
        'success': True,
        'projectStructure': result.structure.to_dict(),
        'stats': result.stats(),
    }


@router.put("/import")
def commit_import(
    request: CommitRequest,
    current_user: str = Depends(get_current_user),
    store: ProjectStore = Depends(get_store),
) -> Any:
    if not request.projectStructure:
        raise HTTPException(status_code=400, detail="projectStructure is required")

    structure = ProjectStructure.from_dict(request.projectStructure)
    project = materialize(structure, current_user, store, source_folder=request.folderName)
    return {'success': True, 'project': project}


@router.post("/analyze-folder")
def analyze_folder(
    request: AnalyzeRequest,
    current_user: str = Depends(get_current_user),
    driver: StorageDriver = Depends(get_drive),
    llm: LLM = Depends(get_llm),
    store: ProjectStore = Depends(get_store),
) -> Any:
    if not request.folderId:
        raise HTTPException(status_code=400, detail="folderId is required")

    pipeline = IngestionPipeline(driver, llm, store=store, max_files=IdeaForge.max_files)
    result = pipeline.analyze(
        request.folderId,
        request.folderName,
        owner_id=current_user if request.createProject else None,
    )
    stats = result.stats()
    stats['filesAnalyzed'] = len(result.documents)
    return {
        'success': True,
        'analysis': result.summary,
        'project': result.project,
        'stats': stats,
    }
