"""Invoice and receipt lifecycle: create, update, delete and lookups."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

from invoice_manager.domain.documents import Document, LineItem
from invoice_manager.domain.value_objects import DocumentKind, InvoiceStatus
from invoice_manager.exceptions import (
    DocumentNotFoundError,
    DuplicateDocumentNumberError,
    EmptyDocumentError,
    MissingFieldError,
    UnknownProductError,
    ValidationError,
)
from invoice_manager.logging_config import get_logger
from invoice_manager.repositories.interfaces import DocumentRepository, ProductRepository
from invoice_manager.services.calculator import calculate_document
from invoice_manager.services.interfaces import DocumentService
from invoice_manager.services.numbering import next_number

logger = get_logger(__name__)


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _rekeyed(item: LineItem) -> LineItem:
    return replace(
        item,
        id=uuid4(),
        taxes=[replace(tax, id=uuid4()) for tax in item.taxes],
    )


class DocumentServiceImpl(DocumentService):
    """Lifecycle manager for one document kind.

    Validation and calculation run before the storage transaction is opened;
    the repository writes the document, its items and their tax lines as one
    unit. Totals supplied by the caller are ignored and recomputed, and every
    written item and tax line gets a fresh id.
    """

    def __init__(
        self,
        document_repo: DocumentRepository,
        product_repo: ProductRepository,
        prefix: str,
    ) -> None:
        self._document_repo = document_repo
        self._product_repo = product_repo
        self.kind = document_repo.kind
        self.prefix = prefix

    def create(self, document: Document) -> Document:
        computed = self._prepare(document)
        try:
            self._document_repo.add(computed)
        except DuplicateDocumentNumberError:
            logger.warning(
                "document_number_conflict",
                kind=self.kind.value,
                document_number=computed.document_number,
            )
            raise

        logger.info(
            "document_created",
            kind=self.kind.value,
            document_id=computed.id,
            document_number=computed.document_number,
            item_count=computed.item_count,
            total=computed.total,
        )
        return computed

    def update(self, document_id: UUID, document: Document) -> Document:
        existing = self._document_repo.get(document_id)
        if existing is None:
            raise DocumentNotFoundError(self.kind.value, document_id)

        computed = self._prepare(
            replace(document, id=document_id, created_at=existing.created_at)
        )
        computed.updated_at = datetime.now(UTC)
        try:
            self._document_repo.replace(computed)
        except DuplicateDocumentNumberError:
            logger.warning(
                "document_number_conflict",
                kind=self.kind.value,
                document_number=computed.document_number,
            )
            raise

        logger.info(
            "document_updated",
            kind=self.kind.value,
            document_id=document_id,
            document_number=computed.document_number,
            previous_item_count=existing.item_count,
            item_count=computed.item_count,
            total=computed.total,
        )
        return computed

    def delete(self, document_id: UUID) -> None:
        existing = self._document_repo.get(document_id)
        if existing is None:
            raise DocumentNotFoundError(self.kind.value, document_id)

        self._document_repo.delete(document_id)
        logger.info(
            "document_deleted",
            kind=self.kind.value,
            document_id=document_id,
            document_number=existing.document_number,
        )

    def get_by_id(self, document_id: UUID) -> Document | None:
        return self._document_repo.get(document_id)

    def get_by_number(self, document_number: str) -> Document | None:
        return self._document_repo.get_by_number(document_number)

    def list(self) -> list[Document]:
        return list(self._document_repo.list_all())

    def next_number(self) -> str:
        return next_number(self.prefix, self._document_repo.get_last_number())

    def set_status(self, document_id: UUID, status: InvoiceStatus) -> Document:
        """Set an invoice's status; transitions are chosen by the caller."""
        if self.kind != DocumentKind.INVOICE:
            raise ValidationError(
                "Only invoices carry a status",
                context={"kind": self.kind.value},
            )
        document = self._document_repo.get(document_id)
        if document is None:
            raise DocumentNotFoundError(self.kind.value, document_id)

        previous = document.status
        document.mark_status(status)
        self._document_repo.replace(document)
        logger.info(
            "invoice_status_changed",
            document_id=document_id,
            document_number=document.document_number,
            from_status=previous.value if previous else None,
            to_status=document.status.value if document.status else None,
        )
        return document

    def _prepare(self, document: Document) -> Document:
        if document.kind != self.kind:
            raise ValidationError(
                f"Expected a {self.kind.value}, got a {document.kind.value}",
                context={"expected": self.kind.value, "actual": document.kind.value},
            )
        self._validate(document)
        return calculate_document(
            replace(
                document,
                document_number=document.document_number.strip(),
                items=[_rekeyed(item) for item in document.items],
            )
        )

    def _validate(self, document: Document) -> None:
        if _is_blank(document.document_number):
            raise MissingFieldError("document_number")
        if _is_blank(document.issuer_name):
            raise MissingFieldError("issuer_name")
        if self.kind == DocumentKind.INVOICE and _is_blank(document.client_name):
            raise MissingFieldError("client_name")
        if not document.items:
            raise EmptyDocumentError(self.kind.value)
        for item in document.items:
            if _is_blank(item.product_name):
                raise MissingFieldError("product_name")
        self._check_product_references(document.items)

    def _check_product_references(self, items: list[LineItem]) -> None:
        known: set[UUID] = set()
        for item in items:
            if item.product_id is None or item.product_id in known:
                continue
            if self._product_repo.get(item.product_id) is None:
                raise UnknownProductError(item.product_id, item.product_name)
            known.add(item.product_id)


__all__ = ["DocumentServiceImpl"]
