"""Shared fixtures for the hookrunner test suite.

Provides:
- Sample ping/push payloads (raw bytes, as GitHub sends them)
- A Config rooted in a temporary working directory
- A RepoSynchronizer backed by the in-memory version control provider
- Helpers to build signed GitHub delivery headers
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import pytest

from hookrunner.config import Config
from hookrunner.git import MemoryVersionControl, RepoSynchronizer
from hookrunner.github.middleware import compute_signature


FIXTURES_DIR = Path(__file__).parent / "fixtures"

SECRET = "It's a Secret to Everybody"


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------


def load_fixture(name: str) -> Dict[str, Any]:
    return json.loads((FIXTURES_DIR / name).read_text())


def to_body(payload: Dict[str, Any]) -> bytes:
    return json.dumps(payload).encode("utf-8")


@pytest.fixture
def ping_payload() -> Dict[str, Any]:
    return load_fixture("ping_sample.json")


@pytest.fixture
def push_payload() -> Dict[str, Any]:
    return load_fixture("push_sample.json")


# ---------------------------------------------------------------------------
# Headers
# ---------------------------------------------------------------------------


def github_headers(
    event: Optional[str],
    body: bytes = b"",
    secret: Optional[str] = None,
    user_agent: str = "GitHub-Hookshot/044aadd",
) -> Dict[str, str]:
    """Headers of a GitHub delivery, signed when a secret is given."""
    headers = {
        "User-Agent": user_agent,
        "Content-Type": "application/json",
        "X-GitHub-Delivery": "72d3162e-cc78-11e3-81ab-4c9367dc0958",
    }
    if event is not None:
        headers["X-GitHub-Event"] = event
    if secret is not None:
        headers["X-Hub-Signature-256"] = f"sha256={compute_signature(secret, body)}"
    return headers


# ---------------------------------------------------------------------------
# Synchronization
# ---------------------------------------------------------------------------


@pytest.fixture
def working_dir(tmp_path: Path) -> Path:
    path = tmp_path / "checkouts"
    path.mkdir()
    return path


@pytest.fixture
def config(working_dir: Path) -> Config:
    return Config(working_dir=working_dir)


@pytest.fixture
def memory_vcs() -> MemoryVersionControl:
    return MemoryVersionControl()


@pytest.fixture
def synchronizer(config: Config, memory_vcs: MemoryVersionControl) -> RepoSynchronizer:
    return RepoSynchronizer(config, memory_vcs)
