from __future__ import annotations

import io
import os
import tempfile
import zipfile
from pathlib import Path
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

from site_checklist.encoder import EncodedSheet
from site_checklist.errors import UnreadableSheetError
from site_checklist.shared import HEADER_ROW

MODERN_WORKBOOK_FORMATS = {".xlsx", ".xlsm"}
LEGACY_WORKBOOK_FORMATS = {".xls"}
SUPPORTED_FORMATS = MODERN_WORKBOOK_FORMATS | LEGACY_WORKBOOK_FORMATS


def is_encrypted_ooxml(data: bytes) -> bool:
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            names = set(archive.namelist())
    except zipfile.BadZipFile:
        return False
    return {"EncryptedPackage", "EncryptionInfo"}.issubset(names)


def _blank_none(values: Any) -> list:
    return ["" if value is None else value for value in values]


def _read_ooxml_cells(data: bytes, sheet_name: str | None) -> tuple[str, list[list]]:
    if is_encrypted_ooxml(data):
        raise UnreadableSheetError("Password-protected / encrypted OOXML workbooks are not supported")
    try:
        workbook = load_workbook(io.BytesIO(data), data_only=True)
    except Exception as exc:
        raise UnreadableSheetError(f"Could not read workbook: {exc}") from exc
    try:
        if sheet_name is not None and sheet_name not in workbook.sheetnames:
            raise UnreadableSheetError(f"Sheet '{sheet_name}' not found. Available: {workbook.sheetnames}")
        sheet = workbook[sheet_name] if sheet_name is not None else workbook.worksheets[0]
        rows = [
            _blank_none(values)
            for values in sheet.iter_rows(
                min_row=1, max_row=sheet.max_row, max_col=sheet.max_column, values_only=True
            )
        ]
        return sheet.title, rows
    finally:
        workbook.close()


def _read_xls_cells(data: bytes, sheet_name: str | None) -> tuple[str, list[list]]:
    try:
        import xlrd
    except ImportError:
        raise ImportError(".xls files require xlrd — run: pip install xlrd")
    try:
        book = xlrd.open_workbook(file_contents=data)
    except Exception as exc:
        raise UnreadableSheetError(f"Could not read workbook: {exc}") from exc
    if sheet_name is not None and sheet_name not in book.sheet_names():
        raise UnreadableSheetError(f"Sheet '{sheet_name}' not found. Available: {book.sheet_names()}")
    sheet = book.sheet_by_name(sheet_name) if sheet_name is not None else book.sheet_by_index(0)
    return sheet.name, [_blank_none(sheet.row_values(idx)) for idx in range(sheet.nrows)]


def read_sheet(data: bytes, *, suffix: str = ".xlsx", sheet_name: str | None = None) -> tuple[str, list[list]]:
    """Return ``(sheet_title, cells)`` for one sheet, every row starting at column A.

    Cells hidden under a merge come back blank; the decoder fills them in.
    """
    suffix = suffix.lower()
    if suffix not in SUPPORTED_FORMATS:
        raise UnreadableSheetError(
            f"Unsupported file type '{suffix or '[missing extension]'}'. "
            f"Supported: {', '.join(sorted(SUPPORTED_FORMATS))}"
        )
    if suffix in LEGACY_WORKBOOK_FORMATS:
        return _read_xls_cells(data, sheet_name)
    return _read_ooxml_cells(data, sheet_name)


def read_cells(data: bytes, *, suffix: str = ".xlsx", sheet_name: str | None = None) -> list[list]:
    return read_sheet(data, suffix=suffix, sheet_name=sheet_name)[1]


def load_sheet(path: Path, sheet_name: str | None = None) -> tuple[str, list[list]]:
    path = Path(path)
    return read_sheet(path.read_bytes(), suffix=path.suffix, sheet_name=sheet_name)


def build_workbook(encoded: EncodedSheet) -> Workbook:
    wb = Workbook()
    ws = wb.active
    ws.title = encoded.sheet_title
    for row in encoded.cells:
        ws.append(row)

    for cell in ws[HEADER_ROW + 1]:
        cell.font = Font(bold=True)
        cell.alignment = Alignment(horizontal="center", vertical="center")

    for merge in encoded.merges:
        ws.merge_cells(
            start_row=merge.first_row + 1,
            start_column=merge.first_col + 1,
            end_row=merge.last_row + 1,
            end_column=merge.last_col + 1,
        )
        ws.cell(row=merge.first_row + 1, column=merge.first_col + 1).alignment = Alignment(vertical="center")

    for i, width in enumerate(encoded.column_widths, start=1):
        ws.column_dimensions[get_column_letter(i)].width = width
    ws.print_area = encoded.print_area.ref
    return wb


def encoded_to_bytes(encoded: EncodedSheet) -> bytes:
    buffer = io.BytesIO()
    build_workbook(encoded).save(buffer)
    return buffer.getvalue()


def save_workbook(path: Path, encoded: EncodedSheet) -> Path:
    """Write atomically: a failed save leaves any existing file untouched."""
    output_path = Path(path)
    workbook = build_workbook(encoded)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{output_path.stem}.", suffix=output_path.suffix, dir=str(output_path.parent))
    os.close(fd)
    temp_path = Path(tmp_name)
    try:
        workbook.save(temp_path)
        os.replace(temp_path, output_path)
    finally:
        if temp_path.exists():
            temp_path.unlink()
    return output_path
