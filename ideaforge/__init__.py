"""IdeaForge - Application state and configuration."""

import os
from typing import Callable, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    import argparse
    from workflows.project_store import ProjectStore

__version__ = "0.1.0"

DEFAULT_DB_PATH = os.path.join(os.path.expanduser("~"), ".ideaforge", "projects.db")


class IdeaForge:
    """Central configuration and state for IdeaForge."""

    # Config options (CLI args / environment)
    llm_provider_name: str = "openai"
    max_files: int = 50
    db_path: str = DEFAULT_DB_PATH
    service_account_file: str = "service_account_key.json"
    default_user: str = "local"
    configured: bool = False

    # Global resources
    db: Optional["ProjectStore"] = None

    # Log sink (None = print to stdout)
    _sink: Optional[Callable[[str], None]] = None

    @classmethod
    def configure(cls, args: Optional["argparse.Namespace"] = None) -> None:
        """Initialize configuration from the environment and parsed CLI args."""
        cls.llm_provider_name = os.environ.get('LLM_PROVIDER', 'openai')
        cls.max_files = int(os.environ.get('IDEAFORGE_MAX_FILES', '50'))
        cls.db_path = os.environ.get('IDEAFORGE_DB', DEFAULT_DB_PATH)
        cls.service_account_file = os.environ.get(
            'GOOGLE_SERVICE_ACCOUNT_FILE', 'service_account_key.json'
        )
        cls.default_user = os.environ.get('IDEAFORGE_USER', 'local')

        if args is not None:
            if getattr(args, 'provider', None):
                cls.llm_provider_name = args.provider
            if getattr(args, 'max_files', None):
                cls.max_files = args.max_files
            if getattr(args, 'db', None):
                cls.db_path = args.db
            if getattr(args, 'user', None):
                cls.default_user = args.user

        cls.configured = True

    @classmethod
    def init_db(cls) -> "ProjectStore":
        """Open the project store (idempotent)."""
        from workflows.project_store import ProjectStore
        if cls.db is None:
            cls.db = ProjectStore(cls.db_path)
        return cls.db

    @classmethod
    def close(cls) -> None:
        """Cleanup resources."""
        if cls.db:
            cls.db.close()
            cls.db = None

    @classmethod
    def set_sink(cls, sink: Optional[Callable[[str], None]]) -> None:
        """Route log output somewhere other than stdout (e.g. a logger)."""
        cls._sink = sink

    @classmethod
    def log(cls, message: str) -> None:
        """Write a progress or warning line."""
        if cls._sink is not None:
            cls._sink(message)
        else:
            print(message)
