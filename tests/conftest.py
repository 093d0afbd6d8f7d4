"""Test configuration and fixtures."""

import logging
from pathlib import Path
from typing import Generator, Optional

import pytest
from git import Actor, Repo

from git_env_branches.logging_config import PACKAGE_LOGGER
from git_env_branches.models import CommitInfo, EnvironmentBranchData, RemoteBranch, RepoContext


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Drop handlers the CLI attached, their streams close with the test runner."""
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def test_env(tmp_path: Path) -> Generator[tuple[Path, Path], None, None]:
    """Create a local repository with a bare origin and environment branches main and DEV.

    Branches on origin:
        main, DEV                 environment branches
        feature/both              merged into main and DEV
        feature/dev-only          merged into DEV only
        feature/none              merged into neither
    Local only:
        local/orphan              never pushed

    Returns:
        Tuple of (local_repo_path, remote_repo_path)
    """
    remote_path = tmp_path / "remote"
    local_path = tmp_path / "local"
    remote_path.mkdir()
    local_path.mkdir()

    Repo.init(remote_path, bare=True)
    local_repo = Repo.init(local_path)

    author = Actor("Test User", "test@example.com")
    local_repo.config_writer().set_value("user", "name", author.name).release()
    local_repo.config_writer().set_value("user", "email", author.email).release()

    readme = local_path / "README.md"
    readme.write_text("# Test Repository")
    local_repo.index.add(["README.md"])
    local_repo.index.commit("Initial commit", author=author)
    local_repo.git.branch("-M", "main")

    origin = local_repo.create_remote("origin", url=str(remote_path))
    origin.push("main")
    local_repo.heads.main.set_tracking_branch(origin.refs.main)

    dev = local_repo.create_head("DEV", "main")
    origin.push("DEV")
    dev.set_tracking_branch(origin.refs.DEV)

    def create_branch(name: str, merge_into: Optional[list[str]] = None, push: bool = True) -> None:
        """Create a branch off main with one commit, optionally merging it into environment branches."""
        local_repo.heads.main.checkout()
        branch = local_repo.create_head(name)
        branch.checkout()

        file_name = f"{name.replace('/', '_')}.txt"
        (local_path / file_name).write_text(f"{name} content")
        local_repo.index.add([file_name])
        local_repo.index.commit(f"Add {name}", author=author)

        if push:
            origin.push(name)
            branch.set_tracking_branch(origin.refs[name])

        for target in merge_into or []:
            local_repo.heads[target].checkout()
            local_repo.git.merge(name, "--no-ff", "--no-edit")
            origin.push(target)

    create_branch("feature/both", merge_into=["main", "DEV"])
    create_branch("feature/dev-only", merge_into=["DEV"])
    create_branch("feature/none")
    create_branch("local/orphan", push=False)

    local_repo.heads.main.checkout()

    yield local_path, remote_path

    local_repo.close()


@pytest.fixture
def test_repo(test_env: tuple[Path, Path]) -> Path:
    local_path, _ = test_env
    return local_path


class FakeRepo:
    """In-memory stand-in for GitRepo, used where real git adds nothing."""

    def __init__(
        self,
        remote_branches: list[str],
        merged: dict[str, set[str]],
        local_branches: Optional[list[str]] = None,
        current: str = "",
    ) -> None:
        self.context = RepoContext()
        self.remote_branches = [RemoteBranch(name=name, commit=f"sha-{index}") for index, name in enumerate(remote_branches)]
        self.merged = merged
        self.local_branches = local_branches or []
        self.current = current
        self.deleted: list[list[str]] = []

    def list_remote_branches(self) -> list[RemoteBranch]:
        return list(self.remote_branches)

    def list_local_branches(self) -> list[str]:
        return list(self.local_branches)

    def get_current_branch_name(self) -> str:
        return self.current

    def environment_branch_data(self, ref: str) -> EnvironmentBranchData:
        merged = self.merged.get(ref, set())
        names = {branch.name for branch in self.remote_branches}
        return EnvironmentBranchData(merged=set(merged), unmerged=names - merged)

    def last_commit_info(self, commit: str) -> CommitInfo:
        return CommitInfo(commit=commit, date="2024-03-01", author="Dev Eloper")

    def files_touched(self, ref: str) -> list[str]:
        return [f"{ref}.txt"]

    def delete_branches(self, branch_names: list[str]) -> list[str]:
        self.deleted.append(list(branch_names))
        return list(branch_names)


@pytest.fixture
def scenario_repo() -> FakeRepo:
    """Environment branches DEV and master with one fully merged and one never merged feature."""
    return FakeRepo(
        remote_branches=["origin/DEV", "origin/master", "origin/feat/a", "origin/feat/b"],
        merged={
            "DEV": {"origin/DEV", "origin/feat/a"},
            "master": {"origin/master", "origin/feat/a"},
        },
        local_branches=["master", "feat/a", "scratch"],
        current="master",
    )
