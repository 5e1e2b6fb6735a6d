from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from workflows import ProjectStore
from api.deps import get_current_user, get_store

router = APIRouter()


@router.get("/")
def read_projects(
    current_user: str = Depends(get_current_user),
    store: ProjectStore = Depends(get_store),
) -> Any:
    return store.list_projects(current_user)


@router.get("/{id}")
def read_project(
    id: str,
    current_user: str = Depends(get_current_user),
    store: ProjectStore = Depends(get_store),
) -> Any:
    project = store.get_project(id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    if project['user_id'] != current_user:
        raise HTTPException(status_code=403, detail="Not enough permissions")
    project['notes'] = store.list_notes(id)
    project['links'] = store.list_links(id)
    return project
