from collections.abc import Callable
from typing import Literal

from invoice_manager.exports.pdf import render_pdf
from invoice_manager.exports.spreadsheet import render_xlsx
from invoice_manager.services.exports import ExportRecord

ExportFormat = Literal["pdf", "xlsx"]

RENDERERS: dict[str, Callable[[ExportRecord], bytes]] = {
    "pdf": render_pdf,
    "xlsx": render_xlsx,
}

MEDIA_TYPES: dict[str, str] = {
    "pdf": "application/pdf",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def render(record: ExportRecord, export_format: str) -> bytes:
    """Render ``record`` in the given format ("pdf" or "xlsx")."""
    try:
        renderer = RENDERERS[export_format]
    except KeyError:
        raise ValueError(f"Unsupported export format: {export_format}") from None
    return renderer(record)


__all__ = [
    "MEDIA_TYPES",
    "RENDERERS",
    "ExportFormat",
    "render",
    "render_pdf",
    "render_xlsx",
]
