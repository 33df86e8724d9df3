"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest

from hookrunner.config import (
    Config,
    ConfigError,
    MalformedBindAddress,
    MalformedRepoMapping,
    MissingWorkingDirectory,
    ServerConfig,
    load_config,
    parse_bind_address,
    parse_repo_mapping,
)


def write_yaml(path: Path, text: str) -> Path:
    path.write_text(text)
    return path


def test_defaults_without_file_or_environment():
    config, server_config = load_config(environ={})

    assert config.github_api_url == "https://api.github.com"
    assert config.webhook_secret is None
    assert config.working_dir is None
    assert config.repo_mapping == {}
    assert not config.signature_verification_enabled
    assert server_config == ServerConfig("0.0.0.0", 3000)


def test_missing_config_file_uses_defaults(tmp_path):
    config, _ = load_config(tmp_path / "absent.yaml", environ={})
    assert config == Config()


def test_yaml_file_is_loaded(tmp_path):
    config_file = write_yaml(
        tmp_path / "hookrunner.yaml",
        "\n".join([
            "webhook_secret: s3cret",
            f"working_dir: {tmp_path}",
            "bind_ip: 127.0.0.1:8080",
            "log_level: debug",
            "repo_mapping:",
            "  acme/widgets: /srv/widgets",
        ]),
    )

    config, server_config = load_config(config_file, environ={})

    assert config.webhook_secret == "s3cret"
    assert config.working_dir == tmp_path
    assert config.log_level == "DEBUG"
    assert config.repo_mapping == {"acme/widgets": Path("/srv/widgets")}
    assert server_config.bind_ip == "127.0.0.1:8080"


def test_environment_overrides_file(tmp_path):
    config_file = write_yaml(
        tmp_path / "hookrunner.yaml",
        "webhook_secret: from-file\ngithub_api_url: https://file.example.com\n",
    )
    environ = {
        "HR_WEBHOOK_SECRET": "from-env",
        "HR_REPO_MAPPING": "acme/widgets=./widgets,acme/gears=/opt/gears",
        "HR_BIND_IP": "10.0.0.1:4000",
        "HR_LOG_FORMAT": "",
    }

    config, server_config = load_config(config_file, environ=environ)

    assert config.webhook_secret == "from-env"
    assert config.github_api_url == "https://file.example.com"
    assert config.repo_mapping == {
        "acme/widgets": Path("./widgets"),
        "acme/gears": Path("/opt/gears"),
    }
    assert config.log_format == "text"
    assert server_config == ServerConfig("10.0.0.1", 4000)


def test_invalid_environment_bind_ip_keeps_previous_value(tmp_path):
    config_file = write_yaml(tmp_path / "hookrunner.yaml", "bind_ip: 127.0.0.1:8080\n")

    _, server_config = load_config(config_file, environ={"HR_BIND_IP": "not-an-address"})

    assert server_config.bind_ip == "127.0.0.1:8080"


def test_unknown_keys_are_ignored(tmp_path):
    config_file = write_yaml(tmp_path / "hookrunner.yaml", "colour: blue\nlog_file: out.log\n")

    config, _ = load_config(config_file, environ={})

    assert config.log_file == "out.log"
    assert not hasattr(config, "colour")


def test_non_mapping_file_is_rejected(tmp_path):
    config_file = write_yaml(tmp_path / "hookrunner.yaml", "- a\n- b\n")
    with pytest.raises(ConfigError):
        load_config(config_file, environ={})


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------


def test_parse_repo_mapping_empty():
    assert parse_repo_mapping("") == {}
    assert parse_repo_mapping("   ") == {}


@pytest.mark.parametrize(
    "value",
    ["acme/widgets", "acme/widgets=", "acme=./widgets", "a/b/c=./x"],
)
def test_parse_repo_mapping_rejects_malformed(value):
    with pytest.raises(MalformedRepoMapping):
        parse_repo_mapping(value)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("0.0.0.0:3000", ("0.0.0.0", 3000)),
        ("localhost:80", ("localhost", 80)),
        ("[::1]:3000", ("::1", 3000)),
    ],
)
def test_parse_bind_address(value, expected):
    assert parse_bind_address(value) == expected


@pytest.mark.parametrize("value", ["3000", ":3000", "host:", "host:http", "host:70000"])
def test_parse_bind_address_rejects_malformed(value):
    with pytest.raises(MalformedBindAddress):
        parse_bind_address(value)


# ---------------------------------------------------------------------------
# Config object
# ---------------------------------------------------------------------------


def test_with_overrides_skips_none(tmp_path):
    config = Config(webhook_secret="keep")

    updated = config.with_overrides(
        webhook_secret=None,
        working_dir=str(tmp_path),
        repo_mapping="acme/widgets=/srv/widgets",
    )

    assert updated.webhook_secret == "keep"
    assert updated.working_dir == tmp_path
    assert updated.repo_mapping == {"acme/widgets": Path("/srv/widgets")}
    assert config.working_dir is None


def test_validate_missing_working_dir(tmp_path):
    with pytest.raises(MissingWorkingDirectory):
        Config(working_dir=tmp_path / "absent").validate()


def test_resolve_working_dir_defaults_to_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert Config().resolve_working_dir() == tmp_path
    assert Config(working_dir=Path("/srv")).resolve_working_dir() == Path("/srv")
