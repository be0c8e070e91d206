"""XML document serialization for gitslice."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence
from xml.sax.saxutils import escape

from .diffpack import (
    Change,
    ChangeKind,
    ChangeRecord,
    FileChangeSet,
    ModificationRecord,
    group_modifications,
)
from .errors import OutputWriteError

logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'
CDATA_END = "]]>"

_ATTRIBUTE_ENTITIES = {'"': "&quot;", "'": "&apos;"}


def escape_xml(text: str) -> str:
    """Escape ``& < > " '`` with their five predefined XML entities."""
    return escape(text, _ATTRIBUTE_ENTITIES)


@dataclass
class Document:
    """A change set identifier plus the per-file change sets."""

    identifier: str
    files: List[FileChangeSet] = field(default_factory=list)


class XmlDocumentSerializer:
    """Renders a Document into the codebase XML format.

    File content is embedded verbatim inside CDATA. With ``split_cdata``
    enabled, every ``]]>`` in the content is split across two adjacent CDATA
    sections so the result stays well-formed; this changes output bytes for
    such files, so it is off by default.
    """

    def __init__(self, split_cdata: bool = False):
        """Initialize serializer."""
        self.split_cdata = split_cdata

    def render(self, document: Document) -> str:
        """Render the whole document to a string."""
        logger.debug(
            "Rendering document",
            extra={"identifier": document.identifier, "files": len(document.files)},
        )
        parts = [XML_DECLARATION, f'<codebase commit="{escape_xml(document.identifier)}">\n']
        for file in document.files:
            parts.extend(self._render_file(file))
        parts.append("</codebase>")
        return "".join(parts)

    def write(self, document: Document, output_path: str) -> str:
        """Render the document and write it as UTF-8 to ``output_path``."""
        xml = self.render(document)
        try:
            Path(output_path).write_text(xml, encoding="utf-8")
        except OSError as exc:
            raise OutputWriteError(output_path, str(exc)) from exc
        logger.info("Wrote document", extra={"output_path": output_path, "bytes": len(xml)})
        return output_path

    def _render_file(self, file: FileChangeSet) -> List[str]:
        parts = [
            f'  <file path="{escape_xml(file.path)}">\n',
            f"    <content>{self._cdata(file.content)}</content>\n",
            "    <changes>\n",
        ]
        for change in self._grouped(file.changes):
            parts.append(self._render_change(change))
        parts.append("    </changes>\n")
        parts.append("  </file>\n")
        return parts

    def _grouped(self, changes: Sequence[Change]) -> List[Change]:
        # Grouping a sequence twice is a no-op, so already grouped input passes through.
        return group_modifications(changes)

    def _render_change(self, change: Change) -> str:
        if isinstance(change, ModificationRecord):
            return (
                f'      <modification original-line="{change.original_line}" '
                f'new-line="{change.new_line}">\n'
                f"        <before>{escape_xml(change.before)}</before>\n"
                f"        <after>{escape_xml(change.after)}</after>\n"
                "      </modification>\n"
            )
        if isinstance(change, ChangeRecord):
            tag = "addition" if change.kind is ChangeKind.ADDITION else "deletion"
            return f'      <{tag} line="{change.line}">{escape_xml(change.text)}</{tag}>\n'
        raise TypeError(f"Unsupported change entry: {type(change).__name__}")

    def _cdata(self, content: str) -> str:
        if self.split_cdata and CDATA_END in content:
            content = content.replace(CDATA_END, "]]" + CDATA_END + "<![CDATA[" + ">")
        return f"<![CDATA[{content}]]>"
