"""Tests for the clone-or-update decision."""

import asyncio
from pathlib import Path

import pytest

from hookrunner.config import Config
from hookrunner.git import (
    GitBackend,
    GitExecutionError,
    MemoryVersionControl,
    Reference,
    RepoSynchronizer,
    RepositoryPath,
    SyncAction,
)


WIDGETS = RepositoryPath("acme", "widgets")


async def test_clone_when_target_is_absent(synchronizer, memory_vcs, working_dir):
    action = await synchronizer.synchronize(WIDGETS, Reference.branch("main"), GitBackend.github())

    assert action is SyncAction.CLONED
    assert memory_vcs.operations == ["clone"]
    assert memory_vcs.calls[0].args == (
        working_dir,
        "main",
        "https://github.com/acme/widgets",
        "widgets",
    )


async def test_update_when_target_exists(synchronizer, memory_vcs, working_dir):
    target = working_dir / "widgets"
    target.mkdir()

    action = await synchronizer.synchronize(WIDGETS, Reference.tag("v1.0"), GitBackend.github())

    assert action is SyncAction.UPDATED
    assert memory_vcs.operations == ["fetch", "checkout", "pull"]
    assert memory_vcs.calls_to("checkout")[0].args == (target, "v1.0")


async def test_failure_aborts_remaining_steps(synchronizer, memory_vcs, working_dir):
    (working_dir / "widgets").mkdir()
    memory_vcs.fail("checkout", "pathspec 'nope' did not match")

    with pytest.raises(GitExecutionError):
        await synchronizer.synchronize(WIDGETS, Reference.branch("nope"), GitBackend.github())

    assert memory_vcs.operations == ["fetch", "checkout"]


async def test_mapping_overrides_working_dir(tmp_path, memory_vcs):
    mapped = tmp_path / "deploy" / "site"
    config = Config(working_dir=tmp_path, repo_mapping={"acme/widgets": mapped})
    synchronizer = RepoSynchronizer(config, memory_vcs)

    assert synchronizer.resolve_target_dir(WIDGETS) == mapped
    assert synchronizer.resolve_target_dir(RepositoryPath("acme", "gears")) == tmp_path / "gears"

    await synchronizer.synchronize(WIDGETS, Reference.branch("main"), GitBackend.gitlab())

    assert memory_vcs.calls[0].args == (
        tmp_path / "deploy",
        "main",
        "https://gitlab.com/acme/widgets",
        "site",
    )


async def test_working_dir_defaults_to_cwd(tmp_path, monkeypatch, memory_vcs):
    monkeypatch.chdir(tmp_path)
    synchronizer = RepoSynchronizer(Config(), memory_vcs)

    assert synchronizer.resolve_target_dir(WIDGETS) == tmp_path / "widgets"


class SlowVersionControl(MemoryVersionControl):
    """Records overlapping operations on the same working copy."""

    def __init__(self):
        super().__init__()
        self.active = 0
        self.max_active = 0

    async def clone(self, parent_dir, reference, remote_url, target_name):
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        await asyncio.sleep(0.01)
        # Leave the clone on disk so later deliveries update it
        (Path(parent_dir) / target_name).mkdir()
        self.active -= 1
        return self._record("clone", parent_dir, reference, remote_url, target_name)

    async def fetch(self, working_dir):
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        await asyncio.sleep(0.01)
        self.active -= 1
        return self._record("fetch", working_dir)


async def test_concurrent_deliveries_for_same_directory_are_serialized(config):
    vcs = SlowVersionControl()
    synchronizer = RepoSynchronizer(config, vcs)

    actions = await asyncio.gather(*[
        synchronizer.synchronize(WIDGETS, Reference.branch("main"), GitBackend.github())
        for _ in range(3)
    ])

    assert actions == [SyncAction.CLONED, SyncAction.UPDATED, SyncAction.UPDATED]
    assert vcs.operations.count("clone") == 1
    assert vcs.max_active == 1
