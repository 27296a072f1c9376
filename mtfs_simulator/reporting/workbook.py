"""
Spreadsheet Workbook Writer
===========================
Builds a minimal SpreadsheetML (.xlsx) package as a zip archive:

    [Content_Types].xml
    _rels/.rels
    xl/workbook.xml
    xl/_rels/workbook.xml.rels
    xl/worksheets/sheet1.xml … sheetN.xml

Numbers are written as raw ``<v>`` values, everything else as inline
strings. No shared strings, styles or document properties are emitted.
Archive members carry a fixed timestamp so equal input gives equal bytes.
"""

from __future__ import annotations

import io
import zipfile
from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple

from mtfs_simulator.utils import format_number, is_numeric


XML_HEADER = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'

NS_MAIN = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
NS_REL = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
NS_PKG_REL = "http://schemas.openxmlformats.org/package/2006/relationships"
NS_CONTENT_TYPES = "http://schemas.openxmlformats.org/package/2006/content-types"

REL_OFFICE_DOCUMENT = NS_REL + "/officeDocument"
REL_WORKSHEET = NS_REL + "/worksheet"

CT_RELATIONSHIPS = "application/vnd.openxmlformats-package.relationships+xml"
CT_XML = "application/xml"
CT_WORKBOOK = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet.main+xml"
CT_WORKSHEET = "application/vnd.openxmlformats-officedocument.spreadsheetml.worksheet+xml"

PART_CONTENT_TYPES = "[Content_Types].xml"
PART_ROOT_RELS = "_rels/.rels"
PART_WORKBOOK = "xl/workbook.xml"
PART_WORKBOOK_RELS = "xl/_rels/workbook.xml.rels"

ZIP_TIMESTAMP = (1980, 1, 1, 0, 0, 0)   # Earliest date a zip header can hold


@dataclass
class Sheet:
    name: str
    rows: List[List[Any]]


# ── Cell encoding ────────────────────────────────────────────────────────────

def escape_xml(value: Any) -> str:
    """Escape the five XML special characters."""
    return (
        str(value)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def column_letter(index: int) -> str:
    """0-based column index → A, B, …, Z, AA, AB, … (bijective base 26)."""
    letters = ""
    n = index + 1
    while n > 0:
        rem = (n - 1) % 26
        letters = chr(65 + rem) + letters
        n = (n - 1) // 26
    return letters


def cell_reference(row_index: int, col_index: int) -> str:
    return f"{column_letter(col_index)}{row_index + 1}"


def _cell_xml(ref: str, value: Any) -> str:
    if is_numeric(value):
        return f'<c r="{ref}"><v>{format_number(value)}</v></c>'
    text = "" if value is None else value
    return f'<c r="{ref}" t="inlineStr"><is><t>{escape_xml(text)}</t></is></c>'


def build_sheet_xml(rows: Sequence[Sequence[Any]]) -> str:
    body = []
    for row_index, row in enumerate(rows):
        cells = "".join(
            _cell_xml(cell_reference(row_index, col_index), value)
            for col_index, value in enumerate(row)
        )
        body.append(f'<row r="{row_index + 1}">{cells}</row>')
    return (
        XML_HEADER
        + f'<worksheet xmlns="{NS_MAIN}">'
        + f"<sheetData>{''.join(body)}</sheetData></worksheet>"
    )


# ── Package parts ────────────────────────────────────────────────────────────

def worksheet_part(index: int) -> str:
    """Archive path of the 0-based ``index``-th worksheet."""
    return f"xl/worksheets/sheet{index + 1}.xml"


def _workbook_xml(sheets: Sequence[Sheet]) -> str:
    entries = "".join(
        f'<sheet name="{escape_xml(sheet.name)}" sheetId="{i + 1}" r:id="rId{i + 1}"/>'
        for i, sheet in enumerate(sheets)
    )
    return (
        XML_HEADER
        + f'<workbook xmlns="{NS_MAIN}" xmlns:r="{NS_REL}">'
        + f"<sheets>{entries}</sheets></workbook>"
    )


def _root_rels_xml() -> str:
    return (
        XML_HEADER
        + f'<Relationships xmlns="{NS_PKG_REL}">'
        + f'<Relationship Id="rId1" Type="{REL_OFFICE_DOCUMENT}" Target="{PART_WORKBOOK}"/>'
        + "</Relationships>"
    )


def _workbook_rels_xml(sheets: Sequence[Sheet]) -> str:
    entries = "".join(
        f'<Relationship Id="rId{i + 1}" Type="{REL_WORKSHEET}" '
        f'Target="worksheets/sheet{i + 1}.xml"/>'
        for i in range(len(sheets))
    )
    return XML_HEADER + f'<Relationships xmlns="{NS_PKG_REL}">' + entries + "</Relationships>"


def _content_types_xml(sheets: Sequence[Sheet]) -> str:
    overrides = "".join(
        f'<Override PartName="/{worksheet_part(i)}" ContentType="{CT_WORKSHEET}"/>'
        for i in range(len(sheets))
    )
    return (
        XML_HEADER
        + f'<Types xmlns="{NS_CONTENT_TYPES}">'
        + f'<Default Extension="rels" ContentType="{CT_RELATIONSHIPS}"/>'
        + f'<Default Extension="xml" ContentType="{CT_XML}"/>'
        + f'<Override PartName="/{PART_WORKBOOK}" ContentType="{CT_WORKBOOK}"/>'
        + overrides
        + "</Types>"
    )


def package_parts(sheets: Sequence[Sheet]) -> List[Tuple[str, str]]:
    """(archive path, XML text) for every part, in archive order."""
    parts = [
        (PART_CONTENT_TYPES, _content_types_xml(sheets)),
        (PART_ROOT_RELS, _root_rels_xml()),
        (PART_WORKBOOK, _workbook_xml(sheets)),
        (PART_WORKBOOK_RELS, _workbook_rels_xml(sheets)),
    ]
    for i, sheet in enumerate(sheets):
        parts.append((worksheet_part(i), build_sheet_xml(sheet.rows)))
    return parts


def write_workbook(sheets: Sequence[Sheet]) -> bytes:
    """Zip the package parts into .xlsx bytes."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, xml in package_parts(sheets):
            info = zipfile.ZipInfo(name, date_time=ZIP_TIMESTAMP)
            info.compress_type = zipfile.ZIP_DEFLATED
            archive.writestr(info, xml.encode("utf-8"))
    return buffer.getvalue()
