from abc import ABC, abstractmethod
from collections.abc import Iterable
from uuid import UUID

from invoice_manager.domain.documents import Document
from invoice_manager.domain.products import Product
from invoice_manager.domain.value_objects import DocumentKind


class ProductRepository(ABC):
    """Catalog storage; a product row owns its tax rows."""

    @abstractmethod
    def add(self, product: Product) -> None:
        pass

    @abstractmethod
    def get(self, product_id: UUID) -> Product | None:
        pass

    @abstractmethod
    def list_all(self) -> Iterable[Product]:
        """All products ordered by name."""

    @abstractmethod
    def update(self, product: Product) -> None:
        """Overwrite name, description, default price and the full tax set."""

    @abstractmethod
    def delete(self, product_id: UUID) -> None:
        """Remove a product; items that referenced it keep their snapshot."""


class DocumentRepository(ABC):
    """Storage for one kind of document with its items and tax lines.

    ``add``, ``replace`` and ``delete`` each run as a single transaction.
    """

    kind: DocumentKind

    @abstractmethod
    def add(self, document: Document) -> None:
        pass

    @abstractmethod
    def get(self, document_id: UUID) -> Document | None:
        pass

    @abstractmethod
    def get_by_number(self, document_number: str) -> Document | None:
        """Look up by the exact, already trimmed document number."""

    @abstractmethod
    def list_all(self) -> Iterable[Document]:
        """All documents, oldest first by creation time."""

    @abstractmethod
    def replace(self, document: Document) -> None:
        """Overwrite a document's header and its entire item set."""

    @abstractmethod
    def delete(self, document_id: UUID) -> None:
        pass

    @abstractmethod
    def get_last_number(self) -> str | None:
        """Return the number of the most recently created document."""
