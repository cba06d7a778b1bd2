import sys

import pytest
import typer
from typer.testing import CliRunner

from figma_fetch import __main__ as entry_point
from figma_fetch import __version__
from figma_fetch.cli import app as cli_app
from figma_fetch.exceptions import LocatorError
from figma_fetch.media.downloader import Downloader

from .conftest import NODE_URL, FakeResponse, FakeSession

runner = CliRunner()


class FakeAPIClient:
    """Replaces FigmaAPIClient in the CLI; records how it was built and used."""

    instances = []
    image_url = "https://cdn.example/render/1-2.png"
    error = None

    def __init__(self, access_token, base_url=None, timeout=None):
        self.access_token = access_token
        self.requested = []
        FakeAPIClient.instances.append(self)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None

    async def fetch_image_url(self, node_ref):
        self.requested.append(node_ref)
        if self.error:
            raise self.error
        return self.image_url


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setattr(cli_app, "CONFIG_FILE", tmp_path / "config" / "config.ini")
    FakeAPIClient.instances = []
    FakeAPIClient.error = None


@pytest.fixture
def fake_network(monkeypatch):
    session = FakeSession(FakeResponse(body=b"png-bytes"))
    monkeypatch.setattr(cli_app, "FigmaAPIClient", FakeAPIClient)
    monkeypatch.setattr(cli_app, "Downloader", lambda: Downloader(session=session))
    return session


def test_version():
    result = runner.invoke(cli_app.app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_check_url_shows_ids():
    result = runner.invoke(cli_app.app, ["check-url", NODE_URL])
    assert result.exit_code == 0
    assert "ABC123" in result.output
    assert "1:2" in result.output


def test_check_url_rejects_invalid_url():
    result = runner.invoke(cli_app.app, ["check-url", "https://www.figma.com/design/ABC"])
    assert result.exit_code == 1
    assert "Invalid Figma node URL" in result.output


def test_fetch_without_token_fails_before_any_stage(monkeypatch, fake_network, tmp_path):
    monkeypatch.delenv("FIGMA_PERSONAL_ACCESS_TOKEN", raising=False)

    result = runner.invoke(cli_app.app, ["fetch", NODE_URL, "-o", str(tmp_path), "--yes"])

    assert result.exit_code == 1
    assert "FIGMA_PERSONAL_ACCESS_TOKEN" in result.output
    assert FakeAPIClient.instances == []
    assert fake_network.calls == []


def test_fetch_saves_image(token_env, fake_network, tmp_path):
    out_dir = tmp_path / "images"

    result = runner.invoke(cli_app.app, ["fetch", NODE_URL, "-o", str(out_dir), "--yes"])

    assert result.exit_code == 0, result.output
    assert (out_dir / "1-2.png").read_bytes() == b"png-bytes"
    assert "Saved image to" in result.output
    assert FakeAPIClient.instances[0].access_token == token_env


def test_fetch_declined_does_nothing(token_env, fake_network, tmp_path):
    result = runner.invoke(cli_app.app, ["fetch", NODE_URL, "-o", str(tmp_path), "--no"])

    assert result.exit_code == 0
    assert FakeAPIClient.instances == []
    assert list(tmp_path.iterdir()) == []


def test_fetch_prompts_until_url_is_valid(token_env, fake_network, tmp_path):
    out_dir = tmp_path / "prompted"
    answers = "\n".join(["not-a-url", NODE_URL, str(out_dir), "y"]) + "\n"

    result = runner.invoke(cli_app.app, ["fetch"], input=answers)

    assert result.exit_code == 0, result.output
    assert "Please provide a valid Figma node URL" in result.output
    assert (out_dir / "1-2.png").exists()


def test_fetch_interactive_confirm_defaults_to_no(token_env, fake_network, tmp_path):
    result = runner.invoke(
        cli_app.app, ["fetch", NODE_URL, "-o", str(tmp_path)], input="\n"
    )

    assert result.exit_code == 0
    assert FakeAPIClient.instances == []


def test_fetch_reports_failed_stage(token_env, fake_network, tmp_path):
    FakeAPIClient.error = LocatorError("render failed: boom")

    result = runner.invoke(cli_app.app, ["fetch", NODE_URL, "-o", str(tmp_path), "--yes"])

    assert result.exit_code == 1
    assert "Error getting image from Figma node" in result.output
    assert fake_network.calls == []
    assert list(tmp_path.iterdir()) == []


def test_init_writes_config(tmp_path):
    result = runner.invoke(cli_app.app, ["init", "-o", "renders"])

    assert result.exit_code == 0
    assert "output_dir = renders" in cli_app.CONFIG_FILE.read_text(encoding="utf-8")


def test_fetch_reprompts_for_blank_output_dir(token_env, fake_network, tmp_path):
    out_dir = tmp_path / "after-blank"
    answers = "\n".join(["   ", str(out_dir), "y"]) + "\n"

    result = runner.invoke(cli_app.app, ["fetch", NODE_URL], input=answers)

    assert result.exit_code == 0, result.output
    assert "Output directory cannot be empty." in result.output
    assert (out_dir / "1-2.png").exists()


def run_entry_point(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["figma-fetch", *args])
    with pytest.raises(SystemExit) as info:
        entry_point.main()
    return info.value.code


def test_ctrl_c_at_prompt_cancels_cleanly(monkeypatch, capsys, token_env, fake_network):
    def interrupt(*args, **kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(typer, "prompt", interrupt)

    exit_code = run_entry_point(monkeypatch, "fetch")

    assert exit_code == 0
    assert "Operation cancelled." in capsys.readouterr().out
    assert FakeAPIClient.instances == []


def test_entry_point_exit_codes(monkeypatch, capsys, tmp_path):
    assert run_entry_point(monkeypatch, "--version") == 0
    assert __version__ in capsys.readouterr().out

    assert run_entry_point(monkeypatch, "check-url", "https://www.figma.com/design/ABC") == 1
    assert run_entry_point(monkeypatch, "no-such-command") == 2


def test_entry_point_reports_missing_token(monkeypatch, capsys, fake_network):
    monkeypatch.delenv("FIGMA_PERSONAL_ACCESS_TOKEN", raising=False)

    assert run_entry_point(monkeypatch, "fetch", NODE_URL, "--yes") == 1
    assert "FIGMA_PERSONAL_ACCESS_TOKEN" in capsys.readouterr().out
