"""Tests for XML serialization."""

import xml.etree.ElementTree as ET

import pytest

from gitslice.diffpack import ChangeKind, ChangeRecord, FileChangeSet, ModificationRecord
from gitslice.errors import OutputWriteError
from gitslice.serialize import Document, XmlDocumentSerializer, escape_xml


class TestEscapeXml:
    """Test five-entity escaping."""

    def test_each_entity(self):
        assert escape_xml("&") == "&amp;"
        assert escape_xml("<") == "&lt;"
        assert escape_xml(">") == "&gt;"
        assert escape_xml('"') == "&quot;"
        assert escape_xml("'") == "&apos;"

    def test_ampersand_escaped_once(self):
        assert escape_xml("a < b && b > c") == "a &lt; b &amp;&amp; b &gt; c"
        assert escape_xml("&amp;") == "&amp;amp;"

    def test_plain_text_unchanged(self):
        assert escape_xml("plain text 123") == "plain text 123"


class TestXmlDocumentSerializer:
    """Test XmlDocumentSerializer class."""

    def test_empty_document(self):
        xml = XmlDocumentSerializer().render(Document(identifier="abc123"))

        assert xml == (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<codebase commit="abc123">\n'
            "</codebase>"
        )
        root = ET.fromstring(xml.encode("utf-8"))
        assert root.tag == "codebase"
        assert root.get("commit") == "abc123"
        assert root.findall("file") == []

    def test_full_layout(self):
        document = Document(
            identifier="abc123",
            files=[
                FileChangeSet(
                    path="src/utils/helper.js",
                    content="function helper() { return true; }",
                    changes=[
                        ChangeRecord(ChangeKind.ADDITION, 10, "const newFunction = () => {};"),
                        ChangeRecord(ChangeKind.DELETION, 12, "old();"),
                        ModificationRecord(
                            original_line=20, new_line=21, before="x = 1", after="x = 2"
                        ),
                    ],
                )
            ],
        )

        xml = XmlDocumentSerializer().render(document)

        assert xml == (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<codebase commit="abc123">\n'
            '  <file path="src/utils/helper.js">\n'
            "    <content><![CDATA[function helper() { return true; }]]></content>\n"
            "    <changes>\n"
            '      <addition line="10">const newFunction = () =&gt; {};</addition>\n'
            '      <deletion line="12">old();</deletion>\n'
            '      <modification original-line="20" new-line="21">\n'
            "        <before>x = 1</before>\n"
            "        <after>x = 2</after>\n"
            "      </modification>\n"
            "    </changes>\n"
            "  </file>\n"
            "</codebase>"
        )

    def test_raw_records_are_grouped(self):
        document = Document(
            identifier="abc123",
            files=[
                FileChangeSet(
                    path="src/index.js",
                    content='console.log("Hello World");',
                    changes=[
                        ChangeRecord(ChangeKind.DELETION, 20, "const x = 1;"),
                        ChangeRecord(ChangeKind.ADDITION, 20, "const x = 2;"),
                    ],
                )
            ],
        )

        xml = XmlDocumentSerializer().render(document)

        assert '<modification original-line="20" new-line="20">' in xml
        assert "<before>const x = 1;</before>" in xml
        assert "<after>const x = 2;</after>" in xml
        assert "<deletion" not in xml
        assert "<addition" not in xml

    def test_content_is_verbatim_in_cdata(self):
        content = "function Component() { return <div>&copy; 2023</div>; }\n'\"\r\n"
        document = Document(
            identifier="abc123",
            files=[FileChangeSet(path="src/component.jsx", content=content)],
        )

        xml = XmlDocumentSerializer().render(document)

        assert f"<content><![CDATA[{content}]]></content>" in xml

    def test_change_payloads_are_escaped(self):
        document = Document(
            identifier="abc123",
            files=[
                FileChangeSet(
                    path="a.py",
                    content="",
                    changes=[
                        ChangeRecord(ChangeKind.ADDITION, 5, "const x = a < b && b > c;"),
                        ModificationRecord(1, 1, "s = '<tag>'", 's = "&"'),
                    ],
                )
            ],
        )

        xml = XmlDocumentSerializer().render(document)

        assert '<addition line="5">const x = a &lt; b &amp;&amp; b &gt; c;</addition>' in xml
        assert "<before>s = &apos;&lt;tag&gt;&apos;</before>" in xml
        assert "<after>s = &quot;&amp;&quot;</after>" in xml

    def test_identifier_and_path_are_attribute_escaped(self):
        document = Document(
            identifier='main..feature/"x"',
            files=[FileChangeSet(path="dir/<odd> & 'name'.txt")],
        )

        xml = XmlDocumentSerializer().render(document)

        assert '<codebase commit="main..feature/&quot;x&quot;">' in xml
        assert '<file path="dir/&lt;odd&gt; &amp; &apos;name&apos;.txt">' in xml
        root = ET.fromstring(xml.encode("utf-8"))
        assert root.find("file").get("path") == "dir/<odd> & 'name'.txt"

    def test_file_and_change_order_is_preserved(self):
        files = [
            FileChangeSet(path=name, changes=[ChangeRecord(ChangeKind.ADDITION, line, name)])
            for name, line in (("z.txt", 9), ("a.txt", 1), ("m.txt", 5))
        ]

        xml = XmlDocumentSerializer().render(Document(identifier="abc", files=files))

        root = ET.fromstring(xml.encode("utf-8"))
        assert [f.get("path") for f in root.findall("file")] == ["z.txt", "a.txt", "m.txt"]

    def test_failed_file_renders_empty_placeholder(self):
        document = Document(
            identifier="abc",
            files=[FileChangeSet(path="gone.txt", error="boom")],
        )

        xml = XmlDocumentSerializer().render(document)

        assert (
            '  <file path="gone.txt">\n'
            "    <content><![CDATA[]]></content>\n"
            "    <changes>\n"
            "    </changes>\n"
            "  </file>\n"
        ) in xml

    def test_cdata_terminator_is_emitted_verbatim_by_default(self):
        document = Document(identifier="abc", files=[FileChangeSet(path="x", content="a]]>b")])

        xml = XmlDocumentSerializer().render(document)

        assert "<content><![CDATA[a]]>b]]></content>" in xml
        with pytest.raises(ET.ParseError):
            ET.fromstring(xml.encode("utf-8"))

    def test_split_cdata_keeps_document_well_formed(self):
        content = "x = arr[arr[0]]>1 and y]]>z"
        document = Document(identifier="abc", files=[FileChangeSet(path="x", content=content)])

        xml = XmlDocumentSerializer(split_cdata=True).render(document)

        root = ET.fromstring(xml.encode("utf-8"))
        assert root.find("file/content").text == content

    def test_split_cdata_leaves_ordinary_content_alone(self):
        document = Document(identifier="abc", files=[FileChangeSet(path="x", content="plain")])

        assert XmlDocumentSerializer(split_cdata=True).render(document) == (
            XmlDocumentSerializer().render(document)
        )

    def test_write(self, temp_dir):
        output = temp_dir / "out.xml"
        document = Document(identifier="abc", files=[FileChangeSet(path="é.txt", content="ü")])

        result = XmlDocumentSerializer().write(document, str(output))

        assert result == str(output)
        assert output.read_text(encoding="utf-8") == XmlDocumentSerializer().render(document)

    def test_write_failure(self, temp_dir):
        output = temp_dir / "missing_dir" / "out.xml"

        with pytest.raises(OutputWriteError) as exc_info:
            XmlDocumentSerializer().write(Document(identifier="abc"), str(output))
        assert exc_info.value.code == "OUTPUT_WRITE_FAILED"
