"""Tests for the command line interface."""

import logging
from unittest.mock import MagicMock

import pytest

from hookrunner import main as cli
from hookrunner.config import ServerConfig
from hookrunner.git import GitBackend, MemoryVersionControl, Reference, RepositoryPath


HOOK_URL = "https://hooks.example.com/webhook/github"


@pytest.fixture(autouse=True)
def isolated(monkeypatch):
    """Keep the host environment and logging setup out of CLI runs."""
    for name in ("HR_GITHUB_API_URL", "HR_WEBHOOK_SECRET", "HR_WORKING_DIR", "HR_REPO_MAPPING", "HR_BIND_IP"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)


@pytest.fixture
def github_client(monkeypatch):
    client_class = MagicMock()
    client = client_class.return_value
    client.__enter__.return_value = client
    client.try_register_webhook.return_value = 1234
    monkeypatch.setattr(cli, "GitHubClient", client_class)
    return client_class


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def test_parse_synchronize_arguments():
    args = cli.parse_args([
        "synchronize",
        "--repository", "acme/widgets",
        "--ref", "refs/tags/v1.0",
        "--backend", "GitLab",
    ])

    assert args.command == "synchronize"
    assert args.repository == RepositoryPath("acme", "widgets")
    assert args.ref == Reference.tag("v1.0")
    assert args.backend == GitBackend.gitlab()


def test_parse_serve_bind_ip():
    args = cli.parse_args(["--log-level", "debug", "serve", "--bind-ip", "127.0.0.1:8080"])

    assert args.log_level == "DEBUG"
    assert args.bind_ip == ServerConfig("127.0.0.1", 8080)


@pytest.mark.parametrize(
    "argv",
    [
        ["synchronize", "--repository", "widgets", "--ref", "refs/branches/main"],
        ["synchronize", "--repository", "acme/widgets", "--ref", "refs/heads/main"],
        ["synchronize", "--repository", "acme/widgets", "--ref", "refs/branches/main", "--backend", "svn"],
        ["serve", "--bind-ip", "localhost"],
        ["install", "--repository", "acme/widgets", "--url", HOOK_URL],
        ["install", "--repository", "acme/widgets", "--url", HOOK_URL, "--token", "t", "--backend", "gitlab"],
        [],
    ],
)
def test_invalid_arguments_exit_with_usage_error(argv, capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.parse_args(argv)

    assert exc_info.value.code == 2


def test_cli_options_override_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("HR_WEBHOOK_SECRET", "from-env")
    monkeypatch.setenv("HR_BIND_IP", "10.0.0.1:4000")

    args = cli.parse_args(["--working-dir", str(tmp_path), "--webhook-secret", "from-cli", "serve"])
    config, server_config = cli.resolve_config(args)

    assert config.webhook_secret == "from-cli"
    assert config.working_dir == tmp_path
    assert server_config.bind_ip == "10.0.0.1:4000"


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def test_install_prints_webhook_id(github_client, capsys):
    cli.main([
        "--github-api-url", "https://github.example.com/api/v3",
        "install",
        "--repository", "acme/widgets",
        "--url", HOOK_URL,
        "--token", "ghp_token",
        "--username", "octocat",
    ])

    github_client.assert_called_once_with(
        "ghp_token", "octocat", api_url="https://github.example.com/api/v3"
    )
    github_client.return_value.try_register_webhook.assert_called_once_with("acme", "widgets", HOOK_URL)
    assert capsys.readouterr().out.strip() == "1234"


def test_uninstall_passes_owner_and_name(github_client):
    cli.main([
        "uninstall",
        "--repository", "acme/widgets",
        "--url", HOOK_URL,
        "--token", "ghp_token",
    ])

    github_client.return_value.try_unregister_webhook.assert_called_once_with(
        "acme", "widgets", HOOK_URL
    )


def test_registry_error_exits_with_status_1(github_client, capsys):
    from hookrunner.github.client import BadStatusCode

    github_client.return_value.try_register_webhook.side_effect = BadStatusCode(404, "Not Found")

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["install", "--repository", "acme/widgets", "--url", HOOK_URL, "--token", "t"])

    assert exc_info.value.code == 1
    assert capsys.readouterr().err.startswith("error: ")


def test_synchronize_clones_into_working_dir(monkeypatch, tmp_path):
    vcs = MemoryVersionControl()
    monkeypatch.setattr(cli, "GitExecutable", lambda: vcs)

    cli.main([
        "--working-dir", str(tmp_path),
        "synchronize",
        "--repository", "acme/widgets",
        "--ref", "refs/branches/main",
    ])

    assert vcs.operations == ["clone"]
    assert vcs.calls[0].args == (tmp_path, "main", "https://github.com/acme/widgets", "widgets")


def test_missing_working_dir_exits_with_status_1(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main([
            "--working-dir", str(tmp_path / "absent"),
            "synchronize",
            "--repository", "acme/widgets",
            "--ref", "refs/branches/main",
        ])

    assert exc_info.value.code == 1
    assert "Missing working directory" in capsys.readouterr().err


def test_git_failure_exits_with_status_1(monkeypatch, tmp_path, capsys):
    vcs = MemoryVersionControl()
    vcs.fail("clone", "repository not found")
    monkeypatch.setattr(cli, "GitExecutable", lambda: vcs)

    with pytest.raises(SystemExit) as exc_info:
        cli.main([
            "--working-dir", str(tmp_path),
            "synchronize",
            "--repository", "acme/widgets",
            "--ref", "refs/branches/main",
        ])

    assert exc_info.value.code == 1
    assert capsys.readouterr().err.strip() == "error: Error while executing git: repository not found"


def test_resolved_configuration_is_logged_masked(monkeypatch, tmp_path, caplog):
    monkeypatch.setattr(cli, "GitExecutable", lambda: MemoryVersionControl())
    caplog.set_level(logging.DEBUG, logger="hookrunner.main")

    cli.main([
        "--working-dir", str(tmp_path),
        "--webhook-secret", "It's a Secret to Everybody",
        "synchronize",
        "--repository", "acme/widgets",
        "--ref", "refs/branches/main",
    ])

    assert "Resolved configuration" in caplog.text
    assert "It's****body" in caplog.text
    assert "It's a Secret to Everybody" not in caplog.text
