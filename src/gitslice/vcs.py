"""Version control system operations for gitslice."""

import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from .config import SliceConfig
from .errors import (
    FileRetrievalError,
    GitVersionUnsupportedError,
    InvalidRangeError,
    MergeConflictError,
    RangeResolutionError,
    RepositoryNotFoundError,
)

logger = logging.getLogger(__name__)

MINIMUM_GIT_VERSION = (2, 30)
CONFLICT_MARKER = "<<<<<<< "


@dataclass(frozen=True)
class RevisionRange:
    """A resolved pair of revisions to diff.

    ``identifier`` is what the document reports: the commit as given, or
    ``source..target`` for branch comparisons.
    """

    before: str
    after: str
    identifier: str

    @property
    def spec(self) -> str:
        return f"{self.before}..{self.after}"


def parse_branch_range(branch_range: str) -> Tuple[str, str]:
    """Split ``source..target`` into its two branch names."""
    if ".." not in branch_range:
        raise InvalidRangeError(branch_range)
    source, _, target = branch_range.partition("..")
    if not source or not target or target.startswith("."):
        raise InvalidRangeError(branch_range)
    return source, target


def _decode(output: bytes) -> str:
    return output.decode("utf-8", errors="replace")


def minimum_git_version() -> str:
    return ".".join(str(part) for part in MINIMUM_GIT_VERSION)


def detect_git_version() -> str:
    """Return the installed git version, or raise if it is missing or too old."""
    required = minimum_git_version()
    try:
        result = subprocess.run(
            ["git", "--version"],
            capture_output=True,
            text=True,
            check=True,
            timeout=10,
        )
    except (OSError, subprocess.CalledProcessError, subprocess.TimeoutExpired) as e:
        raise GitVersionUnsupportedError("unavailable", required) from e

    # Extract version number from "git version 2.34.1"
    match = re.search(r"git version (\d+)\.(\d+)(?:\.\d+)?", result.stdout.strip())
    if not match:
        raise GitVersionUnsupportedError("unknown", required)

    version = (int(match.group(1)), int(match.group(2)))
    version_str = match.group(0).split()[-1]
    if version < MINIMUM_GIT_VERSION:
        raise GitVersionUnsupportedError(version_str, required)
    return version_str


class GitRepository:
    """Git operations against a local working copy."""

    def __init__(self, config: SliceConfig):
        """Initialize with configuration."""
        self.config = config
        self.workdir = Path(config.repo_path).resolve()
        self._git_version: Optional[str] = None

    def __enter__(self) -> "GitRepository":
        """Context manager entry."""
        self.validate_git_version()
        self.ensure_repository()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        logger.debug("Leaving repository", extra={"repo_path": str(self.workdir)})

    def _run_git(
        self,
        args: List[str],
        check: bool = True,
    ) -> subprocess.CompletedProcess:
        """Run git command with proper environment and error handling."""
        # Enforce deterministic git behavior across platforms
        cmd = [
            "git",
            "-c",
            "core.autocrlf=false",
            "-c",
            "color.ui=false",
            "-c",
            "core.quotepath=false",
        ] + args
        logger.debug("Running git", extra={"git_args": args})
        # Bytes mode: text mode would translate \r\n and lone \r in file content
        result = subprocess.run(
            cmd,
            cwd=self.workdir,
            env=self.config.git_env,
            timeout=self.config.git_timeout,
            check=False,
            capture_output=True,
        )
        result.stdout = _decode(result.stdout)
        result.stderr = _decode(result.stderr)
        if check and result.returncode != 0:
            raise subprocess.CalledProcessError(
                result.returncode, cmd, output=result.stdout, stderr=result.stderr
            )
        return result

    def validate_git_version(self) -> str:
        """Validate Git version meets minimum requirements."""
        if not self._git_version:
            self._git_version = detect_git_version()
        return self._git_version

    def ensure_repository(self) -> None:
        """Fail fast when the working directory is not a git work tree."""
        if not self.workdir.is_dir():
            raise RepositoryNotFoundError(str(self.workdir), "directory does not exist")
        try:
            result = self._run_git(["rev-parse", "--is-inside-work-tree"])
        except subprocess.CalledProcessError as e:
            raise RepositoryNotFoundError(str(self.workdir), (e.stderr or str(e)).strip()) from e
        if result.stdout.strip() != "true":
            raise RepositoryNotFoundError(str(self.workdir), "not inside a work tree")

    def _verify_revision(self, revision: str, revision_range: str) -> str:
        try:
            result = self._run_git(["rev-parse", "--verify", "--quiet", f"{revision}^{{commit}}"])
        except subprocess.CalledProcessError as e:
            raise RangeResolutionError(revision_range, f"unknown revision {revision}") from e
        return result.stdout.strip()

    def resolve_commit_range(self, commit: str) -> RevisionRange:
        """Resolve a single commit into the range against its first parent."""
        self._verify_revision(commit, commit)
        self._verify_revision(f"{commit}^", commit)
        return RevisionRange(before=f"{commit}^", after=commit, identifier=commit)

    def resolve_branch_range(self, source: str, target: str) -> RevisionRange:
        """Resolve ``source..target`` and refuse branches that would conflict."""
        identifier = f"{source}..{target}"
        self._verify_revision(source, identifier)
        self._verify_revision(target, identifier)

        try:
            result = self._run_git(["merge-base", source, target])
        except subprocess.CalledProcessError as e:
            raise RangeResolutionError(identifier, "no common ancestor") from e
        merge_base = result.stdout.strip()

        self._check_merge_conflicts(merge_base, source, target)
        return RevisionRange(before=source, after=target, identifier=identifier)

    def _check_merge_conflicts(self, merge_base: str, source: str, target: str) -> None:
        try:
            result = self._run_git(["merge-tree", merge_base, source, target])
        except subprocess.CalledProcessError as e:
            logger.warning(
                "merge-tree check failed; continuing without conflict detection",
                extra={"source": source, "target": target, "stderr": e.stderr},
            )
            return

        if CONFLICT_MARKER in result.stdout:
            raise MergeConflictError(source, target)

    def list_changed_files(self, revision_range: RevisionRange) -> List[str]:
        """List changed paths in the order git reports them."""
        # -z: paths with quotes, backslashes or control characters come back unquoted
        try:
            result = self._run_git(
                ["diff", "--name-only", "-z", "--no-renames", revision_range.spec]
            )
        except subprocess.CalledProcessError as e:
            raise RangeResolutionError(
                revision_range.identifier, (e.stderr or str(e)).strip()
            ) from e

        return [path for path in result.stdout.split("\0") if path]

    def file_content_at_revision(self, revision: str, path: str) -> str:
        """Return the file text at ``revision``, or "" if it does not exist there."""
        try:
            result = self._run_git(["show", f"{revision}:{path}"])
        except subprocess.CalledProcessError:
            logger.debug(
                "File not readable at revision",
                extra={"revision": revision, "path": path},
            )
            return ""
        return result.stdout

    def raw_unified_diff(self, revision_range: RevisionRange, path: str) -> str:
        """Return the unified diff text for a single path."""
        try:
            result = self._run_git(
                [
                    "diff",
                    "--no-color",
                    "--no-ext-diff",
                    "--no-renames",
                    revision_range.before,
                    revision_range.after,
                    "--",
                    path,
                ]
            )
        except subprocess.CalledProcessError as e:
            raise FileRetrievalError(path, (e.stderr or str(e)).strip()) from e
        except subprocess.TimeoutExpired as e:
            raise FileRetrievalError(path, f"git diff timed out after {e.timeout}s") from e
        return result.stdout
