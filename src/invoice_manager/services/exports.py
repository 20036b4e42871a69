"""Flatten computed documents into the record consumed by export renderers."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from invoice_manager.domain.documents import Document, LineItem
from invoice_manager.domain.value_objects import DocumentKind

MetadataValue = str | Decimal


@dataclass(frozen=True)
class ExportRow:
    product_name: str
    description: str
    quantity: Decimal
    unit_price: Decimal
    tax_amount: Decimal
    line_total: Decimal

    HEADERS = (
        "Product Name",
        "Description",
        "Quantity",
        "Unit Price",
        "Tax Amount",
        "Line Total",
    )

    def values(self) -> tuple[str, str, Decimal, Decimal, Decimal, Decimal]:
        return (
            self.product_name,
            self.description,
            self.quantity,
            self.unit_price,
            self.tax_amount,
            self.line_total,
        )


@dataclass(frozen=True)
class ExportRecord:
    """A document as ordered label/value pairs plus an item table.

    Money values stay unrounded Decimals; renderers format them.
    """

    kind: DocumentKind
    document_number: str
    metadata: list[tuple[str, MetadataValue]] = field(default_factory=list)
    items: list[ExportRow] = field(default_factory=list)

    def get(self, label: str, default: MetadataValue = "") -> MetadataValue:
        for key, value in self.metadata:
            if key == label:
                return value
        return default

    @property
    def title(self) -> str:
        return self.kind.label.upper()

    def filename(self, extension: str) -> str:
        return f"{self.kind.value}-{self.document_number}.{extension.lstrip('.')}"


def _text(value: object | None) -> str:
    if value is None:
        return ""
    return str(value)


def _to_row(item: LineItem) -> ExportRow:
    return ExportRow(
        product_name=item.product_name,
        description=_text(item.description),
        quantity=item.quantity,
        unit_price=item.unit_price,
        tax_amount=item.tax_amount,
        line_total=item.line_total,
    )


def to_export_model(document: Document) -> ExportRecord:
    """Reshape a computed document for the PDF and spreadsheet renderers."""
    label = document.kind.label
    metadata: list[tuple[str, MetadataValue]] = [
        (f"{label} Number", document.document_number),
        ("Issue Date", document.issue_date.isoformat()),
    ]
    if document.kind == DocumentKind.INVOICE:
        metadata += [
            ("Due Date", document.due_date.isoformat() if document.due_date else ""),
            ("Status", document.status.value if document.status else ""),
        ]
    else:
        metadata.append(
            (
                "Payment Method",
                document.payment_method.value if document.payment_method else "",
            )
        )
    metadata += [
        ("Issuer Name", document.issuer_name),
        ("Issuer Address", _text(document.issuer_address)),
    ]
    if document.kind == DocumentKind.INVOICE:
        metadata += [
            ("Issuer Tax ID", _text(document.issuer_tax_id)),
            ("Client Name", _text(document.client_name)),
            ("Client Address", _text(document.client_address)),
            ("Client Tax ID", _text(document.client_tax_id)),
        ]
    metadata += [
        ("Subtotal", document.subtotal),
        ("Total Tax", document.total_tax),
        ("Total", document.total),
        ("Notes", _text(document.notes)),
    ]

    return ExportRecord(
        kind=document.kind,
        document_number=document.document_number,
        metadata=metadata,
        items=[_to_row(item) for item in document.items],
    )


__all__ = ["ExportRecord", "ExportRow", "to_export_model"]
