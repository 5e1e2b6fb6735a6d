"""Request-scoped dependencies.

The user and the Google token are read from headers on every request; nothing
about the caller is cached between requests.
"""

from typing import Optional

from fastapi import Header, HTTPException
from openai import OpenAIError

from ideaforge import IdeaForge
from models import LLM, LLMError, create_llm
from storage import GDriveDriver, StorageDriver
from workflows import ProjectStore


def get_current_user(x_user_id: Optional[str] = Header(None)) -> str:
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Not authenticated")
    return x_user_id.strip()


def get_drive(x_google_access_token: Optional[str] = Header(None)) -> StorageDriver:
    """Drive client for the caller's token.

    Raises AuthRequiredError (401 with needsGoogleAuth) when the header is
    missing.
    """
    return GDriveDriver.from_access_token(x_google_access_token)


def get_llm() -> LLM:
    try:
        return create_llm(IdeaForge.llm_provider_name)
    except (KeyError, ValueError, OpenAIError) as e:
        raise LLMError(f"LLM provider '{IdeaForge.llm_provider_name}' is not configured: {e}")


def get_store() -> ProjectStore:
    return IdeaForge.init_db()
