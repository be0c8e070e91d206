"""Pytest configuration and fixtures for gitslice tests."""

import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Generator

import pytest


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp(prefix="gitslice_test_"))
    try:
        yield temp_path
    finally:
        if temp_path.exists():
            shutil.rmtree(temp_path, ignore_errors=True)


class GitRepoHelper:
    """Helper class for git repository operations in tests."""

    def __init__(self, repo_path: Path):
        self.repo_path = repo_path
        self.env = os.environ.copy()
        self.env.update({
            "GIT_AUTHOR_NAME": "Test User",
            "GIT_AUTHOR_EMAIL": "test@example.com",
            "GIT_COMMITTER_NAME": "Test User",
            "GIT_COMMITTER_EMAIL": "test@example.com",
        })

    def run_git(self, args: list[str]) -> subprocess.CompletedProcess:
        """Run git command in the repository."""
        return subprocess.run(
            ["git"] + args,
            cwd=self.repo_path,
            env=self.env,
            check=True,
            capture_output=True,
            text=True,
        )

    def create_file(self, path: str, content: str) -> None:
        """Create a file with content."""
        file_path = self.repo_path / path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content)

    def write_bytes(self, path: str, data: bytes) -> None:
        """Create a file with exact bytes, bypassing newline translation."""
        file_path = self.repo_path / path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(data)

    def modify_file(self, path: str, content: str) -> None:
        """Modify an existing file."""
        self.create_file(path, content)

    def delete_file(self, path: str) -> None:
        """Delete a file."""
        file_path = self.repo_path / path
        if file_path.exists():
            file_path.unlink()

    def add_and_commit(self, message: str) -> str:
        """Stage everything and create a commit, return commit SHA."""
        self.run_git(["add", "-A"])
        self.run_git(["commit", "-m", message])
        return self.get_current_sha()

    def get_current_sha(self) -> str:
        """Get current commit SHA."""
        result = self.run_git(["rev-parse", "HEAD"])
        return result.stdout.strip()

    def checkout(self, branch: str, create: bool = False) -> None:
        """Switch to a branch, optionally creating it."""
        self.run_git(["checkout", "-b", branch] if create else ["checkout", branch])


@pytest.fixture
def git_repo(temp_dir: Path) -> Generator[Path, None, None]:
    """Create a temporary git repository on branch main with one commit."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()

    helper = GitRepoHelper(repo_path)
    helper.run_git(["init"])
    helper.run_git(["config", "user.name", "Test User"])
    helper.run_git(["config", "user.email", "test@example.com"])
    helper.run_git(["symbolic-ref", "HEAD", "refs/heads/main"])

    helper.create_file("README.md", "# Test Repository\n")
    helper.add_and_commit("Initial commit")

    yield repo_path


@pytest.fixture
def git_helper(git_repo: Path) -> GitRepoHelper:
    """Create a git repository helper."""
    return GitRepoHelper(git_repo)
