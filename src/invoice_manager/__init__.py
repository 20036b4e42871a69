from invoice_manager.domain import (
    Document,
    DocumentKind,
    InvoiceStatus,
    LineItem,
    PaymentMethod,
    Product,
    ProductTax,
    TaxLine,
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
]

__version__ = "0.1.0"
