"""Change set collection: resolve a range, fetch every file, build the document."""

import logging
import subprocess
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from .config import SliceConfig
from .diffpack import DiffParser, FileChangeSet, group_modifications
from .errors import GitSliceError
from .serialize import Document, XmlDocumentSerializer
from .vcs import GitRepository, RevisionRange, parse_branch_range

logger = logging.getLogger(__name__)

# Failures confined to a single file; anything else aborts the run.
PER_FILE_ERRORS = (GitSliceError, OSError, UnicodeError, subprocess.SubprocessError)


class SliceBuilder:
    """Builds a Document for a commit or a branch comparison."""

    def __init__(self, config: SliceConfig, repository: Optional[GitRepository] = None):
        """Initialize with configuration and an optional pre-built repository."""
        self.config = config
        self.repository = repository or GitRepository(config)
        self.parser = DiffParser(strict=config.strict_hunk_headers)

    def build_commit_document(self, commit: str) -> Document:
        """Collect every file changed by ``commit``."""
        revision_range = self.repository.resolve_commit_range(commit)
        return self._build(revision_range)

    def build_branch_document(self, source: str, target: str) -> Document:
        """Collect every file that differs between ``source`` and ``target``."""
        revision_range = self.repository.resolve_branch_range(source, target)
        return self._build(revision_range)

    def build(self) -> Document:
        """Build the document selected by the configuration."""
        if self.config.commit:
            return self.build_commit_document(self.config.commit)
        source, target = parse_branch_range(self.config.branch_range)
        return self.build_branch_document(source, target)

    def _build(self, revision_range: RevisionRange) -> Document:
        paths = self.repository.list_changed_files(revision_range)
        if not paths:
            logger.info("No files changed", extra={"range": revision_range.identifier})

        files = self.collect_files(revision_range, paths)
        failed = sum(1 for f in files if f.failed)
        logger.info(
            "Collected change set",
            extra={"range": revision_range.identifier, "files": len(files), "failed": failed},
        )
        return Document(identifier=revision_range.identifier, files=files)

    def collect_files(
        self, revision_range: RevisionRange, paths: Sequence[str]
    ) -> List[FileChangeSet]:
        """Fetch and parse all paths concurrently, keeping the input order."""
        slots: List[Optional[FileChangeSet]] = [None] * len(paths)
        if not paths:
            return []

        workers = min(self.config.max_workers, len(paths))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="gitslice") as pool:
            futures = {
                pool.submit(self.collect_file, revision_range, path): index
                for index, path in enumerate(paths)
            }
            for future, index in futures.items():
                slots[index] = future.result()

        return [slot for slot in slots if slot is not None]

    def collect_file(self, revision_range: RevisionRange, path: str) -> FileChangeSet:
        """Fetch content and diff for one path; failures yield a placeholder."""
        try:
            content = self.repository.file_content_at_revision(revision_range.after, path)
            diff_text = self.repository.raw_unified_diff(revision_range, path)
            parsed = self.parser.parse(diff_text)
        except PER_FILE_ERRORS as exc:
            logger.error(
                "Error processing file",
                extra={"path": path, "error": str(exc), "type": type(exc).__name__},
            )
            return FileChangeSet(path=path, error=str(exc))

        if not parsed.reliable:
            logger.warning(
                "Line numbers may be unreliable",
                extra={"path": path, "malformed_headers": len(parsed.diagnostics)},
            )
        return FileChangeSet(
            path=path,
            content=content,
            changes=group_modifications(parsed.changes),
        )


def build_document(config: SliceConfig, repository: Optional[GitRepository] = None) -> Document:
    """Build the configured document, opening the repository if none is given."""
    logger.info("Building document", extra=config.to_log_dict())
    if repository is not None:
        return SliceBuilder(config, repository).build()
    with GitRepository(config) as repo:
        return SliceBuilder(config, repo).build()


def create_slice(config: SliceConfig, repository: Optional[GitRepository] = None) -> str:
    """Build the configured document, write it and return the output path."""
    document = build_document(config, repository)
    serializer = XmlDocumentSerializer(split_cdata=config.split_cdata)
    return serializer.write(document, config.output_path)


def render_slice(config: SliceConfig, repository: Optional[GitRepository] = None) -> str:
    """Build the configured document and return it as XML text."""
    document = build_document(config, repository)
    return XmlDocumentSerializer(split_cdata=config.split_cdata).render(document)
