from invoice_manager.repositories.interfaces import (
    DocumentRepository,
    ProductRepository,
)
from invoice_manager.repositories.sqlite import (
    SQLiteDatabase,
    SQLiteDocumentRepository,
    SQLiteProductRepository,
)

__all__ = [
    "DocumentRepository",
    "ProductRepository",
    "SQLiteDatabase",
    "SQLiteDocumentRepository",
    "SQLiteProductRepository",
]
