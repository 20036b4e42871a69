from invoice_manager.domain.documents import Document, LineItem
from invoice_manager.domain.products import Product, ProductTax
from invoice_manager.domain.taxes import TaxLine, compute_tax_amount
from invoice_manager.domain.value_objects import (
    DocumentKind,
    InvoiceStatus,
    PaymentMethod,
)

__all__ = [
    "Document",
    "DocumentKind",
    "InvoiceStatus",
    "LineItem",
    "PaymentMethod",
    "Product",
    "ProductTax",
    "TaxLine",
    "compute_tax_amount",
]
