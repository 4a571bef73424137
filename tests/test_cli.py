"""
OAI CLI tests.

Unit tests drive ``main()`` against a fake transport. The smoke test at the
bottom runs the real CLI against the live API and is skipped unless
OPENAI_API_KEY is set (directly or through .env).

Run with: python -m pytest tests/test_cli.py -v
"""

import json
import os
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path

import pytest

from oai_cli import cli
from oai_cli.sdk import OpenAIClient
from tests.fakes import FakeOpener, FakeResponse

API_KEY = os.environ.get("OPENAI_API_KEY")
CLI_TIMEOUT = 60  # Timeout in seconds for CLI commands


@pytest.fixture
def fake_api(clean_env, monkeypatch):
    """Route every CLI-built client through a fake transport."""
    opener = FakeOpener()

    def build(organization_id=None):
        return OpenAIClient(api_key="sk-test", organization_id=organization_id, opener=opener)

    monkeypatch.setattr(cli, "OpenAIClient", build)
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)
    return opener


def run_main(capsys, *argv: str) -> tuple[int, str, str]:
    """Invoke the CLI in-process and return (exit code, stdout, stderr)."""
    code = 0
    try:
        cli.main(list(argv))
    except SystemExit as e:
        code = e.code or 0
    captured = capsys.readouterr()
    return code, captured.out, captured.err


# =============================================================================
# Unit tests
# =============================================================================


def test_models_list_outputs_json(fake_api, capsys):
    fake_api.queue(FakeResponse(200, {"data": [{"id": "ada", "owned_by": "openai", "created": 1}]}))

    code, out, _ = run_main(capsys, "models", "list")

    assert code == 0
    assert json.loads(out) == {"data": [{"id": "ada", "owned_by": "openai", "created": 1}]}


def test_organization_flag_sets_header(fake_api, capsys):
    fake_api.queue(FakeResponse(200, {"data": []}))

    run_main(capsys, "--org", "org-42", "files", "list")

    assert fake_api.last_request.get_header("Openai-organization") == "org-42"


def test_api_error_is_reported_as_json(fake_api, capsys):
    fake_api.queue(
        FakeResponse(404, {"error": {"message": "No such File object: file-x", "type": "invalid_request_error", "param": "id", "code": None}})
    )

    code, out, _ = run_main(capsys, "files", "get", "file-x")

    assert code == 1
    error = json.loads(out)
    assert error["status"] == 404
    assert error["error"] == "Message: No such File object: file-x | Type: invalid_request_error | Code:  | Param: id"


def test_missing_upload_file_is_reported(fake_api, capsys):
    code, out, _ = run_main(capsys, "files", "upload", "/no/such/file.jsonl")

    assert code == 1
    assert json.loads(out)["details"]["type"] == "FileNotFoundError"
    assert fake_api.requests == []


def test_timeout_is_reported(fake_api, capsys):
    fake_api.queue(TimeoutError("timed out"))

    code, out, _ = run_main(capsys, "fine_tunes", "list")

    assert code == 1
    assert json.loads(out)["error"] == "request timeout"


def test_files_download_to_path(fake_api, capsys, tmp_path):
    fake_api.queue(FakeResponse(200, b"a,b\n1,2\n"))
    target = tmp_path / "results.csv"

    code, _, err = run_main(capsys, "files", "download", "file-abc", "-o", str(target))

    assert code == 0
    assert target.read_bytes() == b"a,b\n1,2\n"
    assert "file-abc" in err


def test_fine_tunes_create_sends_only_given_options(fake_api, capsys):
    fake_api.queue(FakeResponse(200, {"id": "ft-1", "status": "pending"}))

    code, out, _ = run_main(capsys, "fine_tunes", "create", "-t", "file-abc", "--n-epochs", "2")

    assert code == 0
    assert json.loads(out)["id"] == "ft-1"
    assert json.loads(fake_api.last_request.data) == {"training_file": "file-abc", "n_epochs": 2}


def test_images_variation_uploads_file(fake_api, capsys, tmp_path):
    image = tmp_path / "cat.png"
    image.write_bytes(b"meow")
    fake_api.queue(FakeResponse(200, {"data": [{"url": "https://img.test/cat.png"}]}))

    code, out, _ = run_main(capsys, "images", "variation", str(image), "-n", "1")

    assert code == 0
    assert json.loads(out) == {"data": [{"url": "https://img.test/cat.png"}]}
    assert b'filename="cat.png"' in fake_api.last_request.data


def test_missing_api_key_is_reported(clean_env, monkeypatch, capsys):
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)

    code, out, _ = run_main(capsys, "models", "list")

    assert code == 1
    assert "OPENAI_API_KEY" in json.loads(out)["error"]


def test_no_command_prints_help(capsys):
    code, out, _ = run_main(capsys)
    assert code == 0
    assert "usage" in out.lower()


# =============================================================================
# Live smoke test
# =============================================================================


@dataclass
class CLITestResult:
    """Track result of a single CLI invocation."""

    args: list[str]
    exit_code: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.exit_code == 0


def run_cli(*args: str, timeout: int = CLI_TIMEOUT) -> CLITestResult:
    """Run the CLI in a subprocess and return a CLITestResult."""
    cmd = [sys.executable, "-m", "oai_cli.cli"] + list(args)
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            env=os.environ.copy(),
            timeout=timeout,
            cwd=Path(__file__).resolve().parent.parent,
        )
    except subprocess.TimeoutExpired:
        return CLITestResult(list(args), -1, "", f"Command timed out after {timeout} seconds")
    return CLITestResult(list(args), result.returncode, result.stdout, result.stderr)


@pytest.fixture(scope="session")
def require_credentials():
    """Skip test if credentials not available."""
    if not API_KEY:
        pytest.skip("OPENAI_API_KEY required")
    return True


def test_live_models_list(require_credentials):
    result = run_cli("models", "list")
    assert result.success, result.stdout + result.stderr
    assert isinstance(json.loads(result.stdout)["data"], list)
