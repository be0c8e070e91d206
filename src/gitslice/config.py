"""Configuration management for gitslice."""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .settings import get_default_max_workers, get_default_output_path


@dataclass(frozen=True)
class SliceConfig:
    """Configuration for a single slice run."""

    # Repository location
    repo_path: str = "."

    # Exactly one of these selects the change set
    commit: Optional[str] = None
    branch_range: Optional[str] = None

    # Output options
    output_path: str = field(default_factory=get_default_output_path)
    split_cdata: bool = False

    # Parsing options
    strict_hunk_headers: bool = False

    # Execution options
    max_workers: int = field(default_factory=get_default_max_workers)
    git_timeout: int = 120  # seconds

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if bool(self.commit) == bool(self.branch_range):
            raise ValueError("exactly one of commit or branch_range is required")
        if self.max_workers <= 0:
            raise ValueError("max_workers must be positive")
        if self.git_timeout <= 0:
            raise ValueError("git_timeout must be positive")

    @property
    def mode(self) -> str:
        """Return "commit" or "branch" depending on the selected change set."""
        return "commit" if self.commit else "branch"

    @property
    def git_env(self) -> Dict[str, str]:
        """Get Git environment variables for deterministic output."""
        env = os.environ.copy()

        # Use platform-appropriate null device
        null_device = "NUL" if os.name == "nt" else "/dev/null"

        env.update(
            {
                "LC_ALL": "C",
                "GIT_CONFIG_GLOBAL": null_device,
                "GIT_CONFIG_SYSTEM": null_device,
                "GIT_TERMINAL_PROMPT": "0",
                "GIT_PAGER": "cat",
            }
        )
        return env

    def to_log_dict(self) -> Dict[str, Any]:
        """Return the settings worth attaching to run-level log records."""
        return {
            "repo_path": self.repo_path,
            "mode": self.mode,
            "revision": self.commit or self.branch_range,
            "output_path": self.output_path,
            "max_workers": self.max_workers,
        }
