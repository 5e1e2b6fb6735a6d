#!/usr/bin/env python3
"""IdeaForge - Turn a folder of documents into a structured project."""

import argparse
import json
import sys

from ideaforge import IdeaForge, __version__
from models import LLMError, ProjectStructure, create_llm
from storage import StorageError, AuthRequiredError, open_folder
from workflows import (
    IngestionPipeline,
    PipelineError,
    ProjectStoreError,
    build_folder_tree,
    materialize,
)


def print_tree(nodes: list, indent: int = 0) -> None:
    """Print a folder tree from build_folder_tree()."""
    for node in nodes:
        marker = "/" if 'children' in node else ""
        IdeaForge.log(f"{'  ' * indent}{node['name']}{marker}")
        if node.get('children'):
            print_tree(node['children'], indent + 1)


def run_tree(uri: str) -> None:
    driver, folder_id = open_folder(uri, IdeaForge.service_account_file)
    IdeaForge.log(f"Source: {driver.display_name}")
    tree, stats = build_folder_tree(driver, folder_id)
    print_tree(tree)
    IdeaForge.log("")
    for key, value in stats.to_dict().items():
        IdeaForge.log(f"{key}: {value}")


def run_preview(uri: str, name: str = None, out: str = None) -> None:
    """Structure a folder and print or save the result without persisting it."""
    driver, folder_id = open_folder(uri, IdeaForge.service_account_file)
    IdeaForge.log(f"Source: {driver.display_name}")
    IdeaForge.log(f"Using LLM provider: {IdeaForge.llm_provider_name}")

    pipeline = IngestionPipeline(driver, create_llm(IdeaForge.llm_provider_name))
    result = pipeline.preview(folder_id, name)
    payload = {
        'projectStructure': result.structure.to_dict(),
        'stats': result.stats(),
    }
    output = json.dumps(payload, indent=2, ensure_ascii=False)

    if out:
        with open(out, 'w', encoding='utf-8') as f:
            f.write(output)
        IdeaForge.log(f"Preview written to {out}")
        IdeaForge.log(f"Commit it with: --commit {out}")
    else:
        print(output)


def run_commit(path: str) -> None:
    """Persist a preview file written by --preview --out."""
    with open(path, encoding='utf-8') as f:
        payload = json.load(f)

    if not isinstance(payload, dict):
        raise ValueError(f"{path} does not contain a project structure")

    data = payload.get('projectStructure', payload)
    folder_name = payload.get('stats', {}).get('sourceFolderName')
    structure = ProjectStructure.from_dict(data)

    store = IdeaForge.init_db()
    project = materialize(structure, IdeaForge.default_user, store, source_folder=folder_name)
    IdeaForge.log(f"Notes: {len(project['notes'])}, links: {len(project['links'])}")
    IdeaForge.close()


def run_analyze(uri: str, name: str = None) -> None:
    """Summarize a folder with the multimodal model and persist the project."""
    driver, folder_id = open_folder(uri, IdeaForge.service_account_file)
    IdeaForge.log(f"Source: {driver.display_name}")
    IdeaForge.log(f"Using LLM provider: {IdeaForge.llm_provider_name}")

    store = IdeaForge.init_db()
    pipeline = IngestionPipeline(driver, create_llm(IdeaForge.llm_provider_name), store=store)
    result = pipeline.analyze(folder_id, name, owner_id=IdeaForge.default_user)
    IdeaForge.close()

    print(result.summary)
    IdeaForge.log(f"\nFiles analyzed: {len(result.documents)} of {result.total_files}")


def run_server(host: str, port: int) -> None:
    import uvicorn
    from api.main import app

    uvicorn.run(app, host=host, port=port)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Import a document folder as a structured project")
    parser.add_argument("folder", nargs="?",
                        help="Folder URI (e.g., gdrive:folder_id or local:path)")
    parser.add_argument("--tree", action="store_true",
                        help="Print the folder tree and file statistics")
    parser.add_argument("--preview", action="store_true",
                        help="Structure the folder with the LLM without saving")
    parser.add_argument("--out", type=str,
                        help="Write the preview to a JSON file (use with --preview)")
    parser.add_argument("--commit", type=str, metavar="FILE",
                        help="Save a preview file as a project")
    parser.add_argument("--analyze", action="store_true",
                        help="Summarize the folder (text and images) and save a project")
    parser.add_argument("--name", type=str,
                        help="Folder display name (defaults to the folder's own name)")
    parser.add_argument("--serve", action="store_true",
                        help="Run the HTTP API")
    parser.add_argument("--host", type=str, default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--provider", type=str, choices=["openai", "mistral"],
                        help="LLM provider (overrides LLM_PROVIDER)")
    parser.add_argument("--max-files", type=int,
                        help="Maximum number of files to extract (overrides IDEAFORGE_MAX_FILES)")
    parser.add_argument("--db", type=str,
                        help="Project database path (overrides IDEAFORGE_DB)")
    parser.add_argument("--user", type=str,
                        help="Owner of created projects (overrides IDEAFORGE_USER)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)

    IdeaForge.configure(args)

    if args.serve:
        run_server(args.host, args.port)
        return 0

    if args.commit:
        try:
            run_commit(args.commit)
        except (OSError, ValueError, LLMError, ProjectStoreError) as e:
            print(f"Error: {e}")
            return 1
        return 0

    if not args.folder:
        print("Error: folder not specified")
        print("Example: main.py --preview gdrive:abc123 or main.py --tree local:./docs")
        return 1

    try:
        if args.tree:
            run_tree(args.folder)
        elif args.analyze:
            run_analyze(args.folder, args.name)
        else:
            run_preview(args.folder, args.name, args.out)
    except AuthRequiredError as e:
        print(f"Error: {e}")
        print("Check GOOGLE_SERVICE_ACCOUNT_FILE and share the folder with the service account")
        return 1
    except (StorageError, LLMError, PipelineError, ProjectStoreError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
