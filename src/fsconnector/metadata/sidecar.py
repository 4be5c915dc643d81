"""Sidecar metadata files stored next to written documents.

Two renderings are supported, both readable by ``java.util.Properties``:
the line based ``key=value`` format and the XML properties document.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping

from fsconnector.metadata.codec import encode_metadata
from fsconnector.models import Metadata

LOGGER = logging.getLogger(__name__)

SIDECAR_SUFFIX = ".metadata.properties."
COMMENT = "---No Comment---"
XML_DOCTYPE = '<!DOCTYPE properties SYSTEM "http://java.sun.com/dtd/properties.dtd">'


def sidecar_name(
    file_name: str,
    *,
    as_xml: bool,
    is_latest: bool = True,
    version_label: str = "",
    rendition_label: str = "",
) -> str:
    name = file_name + SIDECAR_SUFFIX + ("xml" if as_xml else "properties")
    if not is_latest:
        name += f".v{version_label}"
    if rendition_label.strip():
        name += f".r{rendition_label}"
    return name


def sidecar_path(
    file: Path,
    *,
    as_xml: bool,
    is_latest: bool = True,
    version_label: str = "",
    rendition_label: str = "",
) -> Path:
    return file.with_name(
        sidecar_name(
            file.name,
            as_xml=as_xml,
            is_latest=is_latest,
            version_label=version_label,
            rendition_label=rendition_label,
        )
    )


def _escape_property(text: str, *, is_key: bool) -> str:
    out = []
    for index, char in enumerate(text):
        if char == "\\":
            out.append("\\\\")
        elif char == " " and (is_key or index == 0):
            out.append("\\ ")
        elif char == "\t":
            out.append("\\t")
        elif char == "\n":
            out.append("\\n")
        elif char == "\r":
            out.append("\\r")
        elif char == "\f":
            out.append("\\f")
        elif char in "=:#!":
            out.append("\\" + char)
        elif ord(char) < 0x20 or ord(char) > 0x7E:
            out.append(f"\\u{ord(char):04X}" if ord(char) <= 0xFFFF else _surrogates(char))
        else:
            out.append(char)
    return "".join(out)


def _surrogates(char: str) -> str:
    code = ord(char) - 0x10000
    high, low = 0xD800 + (code >> 10), 0xDC00 + (code & 0x3FF)
    return f"\\u{high:04X}\\u{low:04X}"


def render_properties(values: Mapping[str, str], *, now: datetime | None = None) -> str:
    """Render values in the ``java.util.Properties.store`` text format."""
    stamp = (now or datetime.now(timezone.utc)).strftime("%a %b %d %H:%M:%S %Z %Y")
    lines = [f"#{COMMENT}", f"#{stamp}"]
    for key in sorted(values):
        lines.append(
            f"{_escape_property(key, is_key=True)}={_escape_property(values[key], is_key=False)}"
        )
    return "\n".join(lines) + "\n"


def render_xml(values: Mapping[str, str]) -> str:
    """Render values in the ``java.util.Properties.storeToXML`` format."""
    root = ET.Element("properties")
    ET.SubElement(root, "comment").text = COMMENT
    for key in sorted(values):
        ET.SubElement(root, "entry", key=key).text = values[key]
    ET.indent(root, space="")
    body = ET.tostring(root, encoding="unicode")
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="no"?>\n'
        f"{XML_DOCTYPE}\n{body}\n"
    )


def write_sidecar(file: Path, metadata: Metadata, *, as_xml: bool) -> Path:
    """Encode ``metadata`` and write it beside ``file``."""
    target = sidecar_path(file, as_xml=as_xml)
    values = encode_metadata(metadata)
    content = render_xml(values) if as_xml else render_properties(values)
    target.write_text(content, encoding="utf-8")
    LOGGER.debug("Wrote %d metadata entries to %s", len(values), target)
    return target
