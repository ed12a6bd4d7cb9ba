"""Tests for the command line interface."""

import importlib.util
import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]

HERO_LAYOUT = {
    "index": 0,
    "layout_type": "Section",
    "layout_requirements": "Hero",
    "basic_elements": [{"element_type": "Heading", "element_requirements": "Title"}],
}


def run_cli(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, ".", *args],
        capture_output=True,
        text=True,
        cwd=ROOT,
        timeout=60,
    )


@pytest.fixture
def cli():
    """The root CLI module, loaded in-process."""
    spec = importlib.util.spec_from_file_location("pagecraft_cli", ROOT / "__main__.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestCommands:
    """Tests for CLI commands run as a subprocess."""

    @pytest.mark.unit
    def test_help_lists_commands(self):
        result = run_cli("--help")
        assert result.returncode == 0
        for command in ("generate", "models", "env", "mcp"):
            assert command in result.stdout

    @pytest.mark.unit
    def test_generate_accepts_flags(self):
        result = run_cli("generate", "--help")
        for flag in ("--image", "--model", "--output", "--concurrent"):
            assert flag in result.stdout

    @pytest.mark.unit
    def test_models(self):
        result = run_cli("models")
        assert result.returncode == 0
        assert "claude-sonnet-4-5" in result.stdout
        assert "gpt-4.1-mini" in result.stdout

    @pytest.mark.unit
    def test_env_hides_api_keys(self):
        result = subprocess.run(
            [sys.executable, ".", "env", "--category", "llm"],
            capture_output=True,
            text=True,
            cwd=ROOT,
            timeout=60,
            env={**os.environ, "ANTHROPIC_API_KEY": "sk-ant-secret"},
        )
        assert result.returncode == 0
        assert "ANTHROPIC_API_KEY" in result.stdout
        assert "sk-ant-secret" not in result.stdout


class TestGenerate:
    """Tests for the generate command run in-process."""

    @pytest.mark.unit
    def test_writes_definition(self, cli, monkeypatch, scripted_backend, tmp_path):
        scripted_backend.with_design([HERO_LAYOUT])
        monkeypatch.setattr(cli, "create_llm_backend", lambda model: scripted_backend)
        output = tmp_path / "page.json"

        code = cli.main(
            [
                "generate",
                "Hero page",
                "--image",
                "https://example.com/a.png",
                "--model",
                "claude-sonnet-4-5",
                "-o",
                str(output),
            ]
        )

        assert code == 0
        definition = json.loads(output.read_text())
        assert list(definition)[0] == "ROOT"
        assert len(definition) == 3
        design_request = scripted_backend.requests[0]
        assert "Image 1: https://example.com/a.png" in design_request.user.text

    @pytest.mark.unit
    def test_unknown_model(self, cli):
        assert cli.main(["generate", "Hero page", "--model", "not-a-model"]) == 1

    @pytest.mark.unit
    def test_generation_failure_exit_code(self, cli, monkeypatch, scripted_backend):
        scripted_backend.replies.append("No tool call here.")
        monkeypatch.setattr(cli, "create_llm_backend", lambda model: scripted_backend)

        assert cli.main(["generate", "Hero page", "--model", "gpt-4.1-mini"]) == 1
