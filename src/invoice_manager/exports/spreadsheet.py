"""XLSX rendering of export records with openpyxl."""

from __future__ import annotations

import io
from decimal import Decimal

from openpyxl import Workbook  # type: ignore[import-untyped]
from openpyxl.styles import Font  # type: ignore[import-untyped]

from invoice_manager.services.exports import ExportRecord, ExportRow

MONEY_FORMAT = "#,##0.00"
BOLD = Font(bold=True)


def render_xlsx(record: ExportRecord) -> bytes:
    """Render ``record`` as a workbook with a details sheet and an items sheet.

    Money cells keep full precision; the number format displays two decimals.
    """
    workbook = Workbook()

    details = workbook.active
    details.title = f"{record.kind.label} Details"
    details.append(["Field", "Value"])
    for cell in details[1]:
        cell.font = BOLD
    for label, value in record.metadata:
        details.append([label, value])
        if isinstance(value, Decimal):
            details.cell(row=details.max_row, column=2).number_format = MONEY_FORMAT
    details.column_dimensions["A"].width = 18
    details.column_dimensions["B"].width = 40

    items = workbook.create_sheet("Line Items")
    items.append(list(ExportRow.HEADERS))
    for cell in items[1]:
        cell.font = BOLD
    for row in record.items:
        items.append(list(row.values()))
        for column in (4, 5, 6):
            items.cell(row=items.max_row, column=column).number_format = MONEY_FORMAT
    for letter, width in zip("ABCDEF", (36, 40, 10, 14, 14, 14), strict=True):
        items.column_dimensions[letter].width = width

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


__all__ = ["render_xlsx"]
