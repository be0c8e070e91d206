"""Unified diff parsing and change classification for gitslice."""

import enum
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from .errors import MalformedHunkHeaderError

logger = logging.getLogger(__name__)

HUNK_HEADER_PATTERN = re.compile(r"^@@ -(\d+)(?:,\d+)? \+(\d+)(?:,\d+)? @@")


class ChangeKind(str, enum.Enum):
    """Kind of a single changed line."""

    ADDITION = "addition"
    DELETION = "deletion"


@dataclass(frozen=True)
class ChangeRecord:
    """A single added or deleted line.

    ``line`` is 1-based in new-file space for additions and in original-file
    space for deletions.
    """

    kind: ChangeKind
    line: int
    text: str


@dataclass(frozen=True)
class ModificationRecord:
    """A deletion paired with the addition that immediately follows it."""

    original_line: int
    new_line: int
    before: str
    after: str


Change = Union[ChangeRecord, ModificationRecord]


@dataclass
class FileChangeSet:
    """Full content and ordered changes of one file."""

    path: str
    content: str = ""
    changes: List[Change] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def parse_hunk_header(line: str) -> Optional[Tuple[int, int]]:
    """Return ``(original_start, new_start)`` from a hunk header, or None."""
    match = HUNK_HEADER_PATTERN.match(line)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


class ParserMode(enum.Enum):
    PREAMBLE = "preamble"
    IN_HUNK = "in_hunk"


@dataclass(frozen=True)
class ParserState:
    """Parser position: current mode plus both line counters."""

    mode: ParserMode = ParserMode.PREAMBLE
    original_line: int = 0
    new_line: int = 0


@dataclass(frozen=True)
class MalformedHunkHeader:
    """Diagnostic for a ``@@`` line that could not be parsed."""

    line_index: int
    header: str


@dataclass(frozen=True)
class StepResult:
    state: ParserState
    record: Optional[ChangeRecord] = None
    malformed_header: Optional[str] = None


def advance(state: ParserState, line: str) -> StepResult:
    """Apply one diff line to ``state``.

    Hunk headers reseed both counters and enter ``IN_HUNK``; a malformed
    header still enters ``IN_HUNK`` but keeps the previous counters. Inside a
    hunk, ``+`` and ``-`` lines emit a record at the current counter of their
    side, a context line advances both counters, and anything else is
    ignored.
    """
    if line.startswith("@@"):
        header = parse_hunk_header(line)
        if header is None:
            return StepResult(
                state=ParserState(ParserMode.IN_HUNK, state.original_line, state.new_line),
                malformed_header=line,
            )
        original_start, new_start = header
        return StepResult(state=ParserState(ParserMode.IN_HUNK, original_start, new_start))

    # "diff", "index", "---" and "+++" metadata before the first hunk
    if state.mode is ParserMode.PREAMBLE:
        return StepResult(state=state)

    # Inside a hunk "---" and "+++" are ordinary deleted/added lines
    if line.startswith("+"):
        record = ChangeRecord(ChangeKind.ADDITION, state.new_line, line[1:])
        return StepResult(
            state=ParserState(state.mode, state.original_line, state.new_line + 1),
            record=record,
        )
    if line.startswith("-"):
        record = ChangeRecord(ChangeKind.DELETION, state.original_line, line[1:])
        return StepResult(
            state=ParserState(state.mode, state.original_line + 1, state.new_line),
            record=record,
        )
    if line.startswith(" "):
        return StepResult(
            state=ParserState(state.mode, state.original_line + 1, state.new_line + 1)
        )

    # "\ No newline at end of file" and similar markers
    return StepResult(state=state)


@dataclass
class ParsedDiff:
    """Result of parsing one file's diff text."""

    changes: List[ChangeRecord] = field(default_factory=list)
    diagnostics: List[MalformedHunkHeader] = field(default_factory=list)

    @property
    def reliable(self) -> bool:
        """False when a malformed header may have skewed line numbers."""
        return not self.diagnostics


class DiffParser:
    """Walks unified diff text and emits line-level change records."""

    def __init__(self, strict: bool = False):
        """Initialize parser; ``strict`` turns malformed headers into errors."""
        self.strict = strict

    def parse(self, diff_text: str) -> ParsedDiff:
        """Parse diff text into an ordered list of change records."""
        result = ParsedDiff()
        state = ParserState()

        for index, line in enumerate(diff_text.split("\n")):
            step = advance(state, line)
            if step.malformed_header is not None:
                self._report_malformed(step.malformed_header, index, step.state)
                result.diagnostics.append(
                    MalformedHunkHeader(line_index=index, header=step.malformed_header)
                )
            if step.record is not None:
                result.changes.append(step.record)
            state = step.state

        logger.debug(
            "Parsed unified diff",
            extra={"changes": len(result.changes), "malformed_headers": len(result.diagnostics)},
        )
        return result

    def _report_malformed(self, header: str, index: int, state: ParserState) -> None:
        if self.strict:
            raise MalformedHunkHeaderError(header, index)
        logger.warning(
            "Malformed hunk header; keeping previous line counters",
            extra={
                "header": header,
                "line_index": index,
                "original_line": state.original_line,
                "new_line": state.new_line,
            },
        )


def group_modifications(changes: Sequence[Change]) -> List[Change]:
    """Merge each deletion that is directly followed by an addition.

    Only strictly adjacent pairs merge: ``D1 D2 A1 A2`` becomes
    ``D1, M(D2, A1), A2``.
    """
    grouped: List[Change] = []
    index = 0
    while index < len(changes):
        current = changes[index]
        following = changes[index + 1] if index + 1 < len(changes) else None
        if (
            isinstance(current, ChangeRecord)
            and current.kind is ChangeKind.DELETION
            and isinstance(following, ChangeRecord)
            and following.kind is ChangeKind.ADDITION
        ):
            grouped.append(
                ModificationRecord(
                    original_line=current.line,
                    new_line=following.line,
                    before=current.text,
                    after=following.text,
                )
            )
            index += 2
        else:
            grouped.append(current)
            index += 1
    return grouped
