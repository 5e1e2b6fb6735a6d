"""Tests for the command line interface."""

import json
import os

import pytest

import main as cli
from fakes import FakeLLM
from ideaforge import IdeaForge
from workflows import ProjectStore


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, temp_dir):
    """Keep CLI configuration changes out of other tests."""
    for attr in ('llm_provider_name', 'max_files', 'db_path', 'service_account_file',
                 'default_user', 'configured', 'db'):
        monkeypatch.setattr(IdeaForge, attr, getattr(IdeaForge, attr))
    monkeypatch.setenv('IDEAFORGE_DB', os.path.join(temp_dir, 'cli.db'))
    monkeypatch.setattr(cli, 'create_llm', lambda provider: FakeLLM())
    yield
    IdeaForge.close()


@pytest.fixture
def folder(temp_dir):
    path = os.path.join(temp_dir, "Kiosk")
    os.makedirs(os.path.join(path, "research"))
    with open(os.path.join(path, "notes.txt"), "w") as f:
        f.write("Solar kiosks for villages")
    with open(os.path.join(path, "research", "interviews.txt"), "w") as f:
        f.write("Farmers pay for charging")
    return path


def test_tree(folder, quiet_log):
    assert cli.main(["--tree", f"local:{folder}"]) == 0
    assert "research/" in quiet_log
    assert "  interviews.txt" in quiet_log
    assert "totalFiles: 2" in quiet_log


def test_preview_prints_structure(folder, capsys):
    assert cli.main(["--preview", f"local:{folder}"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload['projectStructure']['title'] == "Solar Kiosk"
    assert payload['stats']['sourceFolderName'] == "Kiosk"
    assert payload['stats']['totalFilesProcessed'] == 2


def test_preview_then_commit(folder, temp_dir):
    out = os.path.join(temp_dir, "preview.json")
    assert cli.main(["--preview", f"local:{folder}", "--out", out]) == 0
    assert cli.main(["--commit", out, "--user", "alice"]) == 0

    store = ProjectStore(os.path.join(temp_dir, 'cli.db'))
    projects = store.list_projects("alice")
    assert [p['title'] for p in projects] == ["Solar Kiosk"]
    assert projects[0]['source_folder'] == "Kiosk"
    store.close()


def test_analyze(folder, temp_dir, capsys):
    db_path = os.path.join(temp_dir, "other.db")
    assert cli.main(["--analyze", f"local:{folder}", "--db", db_path]) == 0
    assert "A solar kiosk business." in capsys.readouterr().out

    store = ProjectStore(db_path)
    assert [p['title'] for p in store.list_projects("local")] == ["Kiosk"]
    store.close()


def test_missing_folder(capsys):
    assert cli.main(["--preview"]) == 1
    assert "folder not specified" in capsys.readouterr().out


def test_bad_uri(capsys):
    assert cli.main(["--preview", "s3:bucket"]) == 1
    assert "Invalid storage URI" in capsys.readouterr().out


def test_missing_service_account(monkeypatch, capsys):
    monkeypatch.setenv('GOOGLE_SERVICE_ACCOUNT_FILE', '/nonexistent/key.json')
    assert cli.main(["--tree", "gdrive:abc123"]) == 1
    assert "service account" in capsys.readouterr().out


def test_commit_rejects_invalid_file(temp_dir, capsys):
    path = os.path.join(temp_dir, "bad.json")
    with open(path, "w") as f:
        json.dump(["not", "a", "structure"], f)
    assert cli.main(["--commit", path]) == 1
    assert "Error" in capsys.readouterr().out
