"""SQLite implementations of repository interfaces."""

from __future__ import annotations

import contextlib
import sqlite3
import threading
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any
from uuid import UUID

from invoice_manager.domain.documents import Document, LineItem
from invoice_manager.domain.products import Product, ProductTax
from invoice_manager.domain.taxes import TaxLine
from invoice_manager.domain.value_objects import (
    DocumentKind,
    InvoiceStatus,
    PaymentMethod,
)
from invoice_manager.exceptions import DuplicateDocumentNumberError, PersistenceError
from invoice_manager.logging_config import get_logger
from invoice_manager.repositories.interfaces import (
    DocumentRepository,
    ProductRepository,
)

logger = get_logger(__name__)


class SQLiteDatabase:
    """SQLite database connection manager.

    One connection is shared by all repositories. Access is serialized by a
    re-entrant lock so a reader never observes a half-written transaction.
    """

    def __init__(
        self, path: str | Path = ":memory:", check_same_thread: bool = True
    ) -> None:
        self._path = str(path)
        self._check_same_thread = check_same_thread
        self._connection: sqlite3.Connection | None = None
        self._lock = threading.RLock()

    @property
    def path(self) -> str:
        return self._path

    def get_connection(self) -> sqlite3.Connection:
        """Get or create the database connection."""
        if self._connection is None:
            self._connection = sqlite3.connect(
                self._path, check_same_thread=self._check_same_thread
            )
            self._connection.row_factory = sqlite3.Row
            # Cascades depend on this
            self._connection.execute("PRAGMA foreign_keys = ON")
        return self._connection

    @contextlib.contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Hold the database lock for a sequence of reads."""
        with self._lock:
            yield self.get_connection()

    @contextlib.contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Run the enclosed statements as one transaction.

        Commits on success and rolls back on any exception.
        """
        with self._lock:
            conn = self.get_connection()
            try:
                yield conn
            except BaseException:
                conn.rollback()
                raise
            else:
                conn.commit()

    def initialize(self) -> None:
        """Create all database tables."""
        conn = self.get_connection()
        conn.executescript(
            """
            -- Product catalog
            CREATE TABLE IF NOT EXISTS products (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                description TEXT,
                default_price TEXT NOT NULL DEFAULT '0',
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS product_taxes (
                id TEXT PRIMARY KEY,
                product_id TEXT NOT NULL,
                position INTEGER NOT NULL,
                tax_name TEXT NOT NULL,
                tax_rate TEXT NOT NULL,
                is_default INTEGER NOT NULL DEFAULT 0,
                FOREIGN KEY (product_id) REFERENCES products(id) ON DELETE CASCADE
            );

            -- Invoices (B2B)
            CREATE TABLE IF NOT EXISTS invoices (
                id TEXT PRIMARY KEY,
                invoice_number TEXT NOT NULL UNIQUE,
                issuer_name TEXT NOT NULL,
                issuer_address TEXT,
                issuer_tax_id TEXT,
                client_name TEXT NOT NULL,
                client_address TEXT,
                client_tax_id TEXT,
                issue_date TEXT NOT NULL,
                due_date TEXT,
                status TEXT NOT NULL DEFAULT 'draft'
                    CHECK (status IN ('draft', 'sent', 'paid', 'overdue')),
                notes TEXT,
                subtotal TEXT NOT NULL DEFAULT '0',
                total_tax TEXT NOT NULL DEFAULT '0',
                total TEXT NOT NULL DEFAULT '0',
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS invoice_items (
                id TEXT PRIMARY KEY,
                invoice_id TEXT NOT NULL,
                product_id TEXT,
                position INTEGER NOT NULL,
                product_name TEXT NOT NULL,
                description TEXT,
                quantity TEXT NOT NULL,
                unit_price TEXT NOT NULL,
                line_total TEXT NOT NULL DEFAULT '0',
                FOREIGN KEY (invoice_id) REFERENCES invoices(id) ON DELETE CASCADE,
                FOREIGN KEY (product_id) REFERENCES products(id) ON DELETE SET NULL
            );

            CREATE TABLE IF NOT EXISTS invoice_item_taxes (
                id TEXT PRIMARY KEY,
                invoice_item_id TEXT NOT NULL,
                position INTEGER NOT NULL,
                tax_name TEXT NOT NULL,
                tax_rate TEXT NOT NULL,
                tax_amount TEXT NOT NULL,
                FOREIGN KEY (invoice_item_id) REFERENCES invoice_items(id) ON DELETE CASCADE
            );

            -- Receipts (B2C)
            CREATE TABLE IF NOT EXISTS receipts (
                id TEXT PRIMARY KEY,
                receipt_number TEXT NOT NULL UNIQUE,
                issuer_name TEXT NOT NULL,
                issuer_address TEXT,
                issue_date TEXT NOT NULL,
                payment_method TEXT NOT NULL DEFAULT 'cash'
                    CHECK (payment_method IN ('cash', 'card', 'transfer', 'check')),
                notes TEXT,
                subtotal TEXT NOT NULL DEFAULT '0',
                total_tax TEXT NOT NULL DEFAULT '0',
                total TEXT NOT NULL DEFAULT '0',
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS receipt_items (
                id TEXT PRIMARY KEY,
                receipt_id TEXT NOT NULL,
                product_id TEXT,
                position INTEGER NOT NULL,
                product_name TEXT NOT NULL,
                description TEXT,
                quantity TEXT NOT NULL,
                unit_price TEXT NOT NULL,
                line_total TEXT NOT NULL DEFAULT '0',
                FOREIGN KEY (receipt_id) REFERENCES receipts(id) ON DELETE CASCADE,
                FOREIGN KEY (product_id) REFERENCES products(id) ON DELETE SET NULL
            );

            CREATE TABLE IF NOT EXISTS receipt_item_taxes (
                id TEXT PRIMARY KEY,
                receipt_item_id TEXT NOT NULL,
                position INTEGER NOT NULL,
                tax_name TEXT NOT NULL,
                tax_rate TEXT NOT NULL,
                tax_amount TEXT NOT NULL,
                FOREIGN KEY (receipt_item_id) REFERENCES receipt_items(id) ON DELETE CASCADE
            );

            -- Indexes for common queries
            CREATE INDEX IF NOT EXISTS idx_products_name ON products(name);
            CREATE INDEX IF NOT EXISTS idx_product_taxes_product_id ON product_taxes(product_id);
            CREATE INDEX IF NOT EXISTS idx_invoices_created_at ON invoices(created_at);
            CREATE INDEX IF NOT EXISTS idx_invoices_issue_date ON invoices(issue_date);
            CREATE INDEX IF NOT EXISTS idx_invoice_items_invoice_id ON invoice_items(invoice_id);
            CREATE INDEX IF NOT EXISTS idx_invoice_items_product_id ON invoice_items(product_id);
            CREATE INDEX IF NOT EXISTS idx_invoice_item_taxes_item_id ON invoice_item_taxes(invoice_item_id);
            CREATE INDEX IF NOT EXISTS idx_receipts_created_at ON receipts(created_at);
            CREATE INDEX IF NOT EXISTS idx_receipts_issue_date ON receipts(issue_date);
            CREATE INDEX IF NOT EXISTS idx_receipt_items_receipt_id ON receipt_items(receipt_id);
            CREATE INDEX IF NOT EXISTS idx_receipt_items_product_id ON receipt_items(product_id);
            CREATE INDEX IF NOT EXISTS idx_receipt_item_taxes_item_id ON receipt_item_taxes(receipt_item_id);
            """
        )
        conn.commit()

    def count_rows(self, table: str) -> int:
        """Count rows in one of the known tables."""
        if table not in _KNOWN_TABLES:
            raise ValueError(f"Unknown table: {table}")
        with self.connection() as conn:
            row = conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()
        return int(row[0])

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None


@dataclass(frozen=True)
class _DocumentTables:
    documents: str
    number_column: str
    items: str
    item_parent: str
    taxes: str
    tax_parent: str
    header_columns: tuple[str, ...]


_TABLES: dict[DocumentKind, _DocumentTables] = {
    DocumentKind.INVOICE: _DocumentTables(
        documents="invoices",
        number_column="invoice_number",
        items="invoice_items",
        item_parent="invoice_id",
        taxes="invoice_item_taxes",
        tax_parent="invoice_item_id",
        header_columns=(
            "issuer_name",
            "issuer_address",
            "issuer_tax_id",
            "client_name",
            "client_address",
            "client_tax_id",
            "issue_date",
            "due_date",
            "status",
            "notes",
            "subtotal",
            "total_tax",
            "total",
            "updated_at",
        ),
    ),
    DocumentKind.RECEIPT: _DocumentTables(
        documents="receipts",
        number_column="receipt_number",
        items="receipt_items",
        item_parent="receipt_id",
        taxes="receipt_item_taxes",
        tax_parent="receipt_item_id",
        header_columns=(
            "issuer_name",
            "issuer_address",
            "issue_date",
            "payment_method",
            "notes",
            "subtotal",
            "total_tax",
            "total",
            "updated_at",
        ),
    ),
}

_KNOWN_TABLES = {"products", "product_taxes"} | {
    name
    for tables in _TABLES.values()
    for name in (tables.documents, tables.items, tables.taxes)
}


class SQLiteProductRepository(ProductRepository):
    """SQLite implementation of ProductRepository."""

    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, product: Product) -> None:
        with self._writing("add_product") as conn:
            conn.execute(
                """
                INSERT INTO products (id, name, description, default_price, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    str(product.id),
                    product.name,
                    product.description,
                    str(product.default_price),
                    product.created_at.isoformat(),
                    product.updated_at.isoformat(),
                ),
            )
            self._insert_taxes(conn, product)

    def get(self, product_id: UUID) -> Product | None:
        with self._db.connection() as conn:
            row = conn.execute(
                "SELECT * FROM products WHERE id = ?", (str(product_id),)
            ).fetchone()
            if row is None:
                return None
            return self._row_to_product(conn, row)

    def list_all(self) -> Iterable[Product]:
        with self._db.connection() as conn:
            rows = conn.execute(
                "SELECT * FROM products ORDER BY name, created_at"
            ).fetchall()
            return [self._row_to_product(conn, row) for row in rows]

    def update(self, product: Product) -> None:
        with self._writing("update_product") as conn:
            conn.execute(
                """
                UPDATE products SET
                    name = ?,
                    description = ?,
                    default_price = ?,
                    updated_at = ?
                WHERE id = ?
                """,
                (
                    product.name,
                    product.description,
                    str(product.default_price),
                    product.updated_at.isoformat(),
                    str(product.id),
                ),
            )
            conn.execute(
                "DELETE FROM product_taxes WHERE product_id = ?", (str(product.id),)
            )
            self._insert_taxes(conn, product)

    def delete(self, product_id: UUID) -> None:
        # Product taxes deleted via CASCADE, line items keep their snapshot
        with self._writing("delete_product") as conn:
            conn.execute("DELETE FROM products WHERE id = ?", (str(product_id),))

    @contextlib.contextmanager
    def _writing(self, operation: str) -> Iterator[sqlite3.Connection]:
        try:
            with self._db.transaction() as conn:
                yield conn
        except sqlite3.Error as exc:
            logger.error("product_write_failed", operation=operation, error=str(exc))
            raise PersistenceError(operation, str(exc)) from exc

    def _insert_taxes(self, conn: sqlite3.Connection, product: Product) -> None:
        for position, tax in enumerate(product.taxes):
            conn.execute(
                """
                INSERT INTO product_taxes (id, product_id, position, tax_name, tax_rate, is_default)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    str(tax.id),
                    str(product.id),
                    position,
                    tax.tax_name,
                    str(tax.tax_rate),
                    1 if tax.is_default else 0,
                ),
            )

    def _row_to_product(self, conn: sqlite3.Connection, row: sqlite3.Row) -> Product:
        tax_rows = conn.execute(
            "SELECT * FROM product_taxes WHERE product_id = ? ORDER BY position",
            (row["id"],),
        ).fetchall()
        product = Product(
            name=row["name"],
            default_price=Decimal(row["default_price"]),
            description=row["description"],
            taxes=[
                ProductTax(
                    tax_name=tax_row["tax_name"],
                    tax_rate=Decimal(tax_row["tax_rate"]),
                    is_default=bool(tax_row["is_default"]),
                    id=UUID(tax_row["id"]),
                )
                for tax_row in tax_rows
            ],
            id=UUID(row["id"]),
        )
        product.created_at = datetime.fromisoformat(row["created_at"])
        product.updated_at = datetime.fromisoformat(row["updated_at"])
        return product


class SQLiteDocumentRepository(DocumentRepository):
    """SQLite implementation of DocumentRepository for one document kind."""

    def __init__(self, database: SQLiteDatabase, kind: DocumentKind) -> None:
        self._db = database
        self.kind = DocumentKind(kind)
        self._tables = _TABLES[self.kind]

    def add(self, document: Document) -> None:
        tables = self._tables
        columns = ("id", tables.number_column, *tables.header_columns, "created_at")
        values = self._header_values(document)
        with self._writing("add", document.document_number) as conn:
            conn.execute(
                f"""
                INSERT INTO {tables.documents} ({", ".join(columns)})
                VALUES ({", ".join("?" for _ in columns)})
                """,
                (
                    str(document.id),
                    document.document_number,
                    *(values[column] for column in tables.header_columns),
                    document.created_at.isoformat(),
                ),
            )
            self._insert_items(conn, document)

    def get(self, document_id: UUID) -> Document | None:
        with self._db.connection() as conn:
            row = conn.execute(
                f"SELECT * FROM {self._tables.documents} WHERE id = ?",
                (str(document_id),),
            ).fetchone()
            if row is None:
                return None
            return self._row_to_document(conn, row)

    def get_by_number(self, document_number: str) -> Document | None:
        tables = self._tables
        with self._db.connection() as conn:
            row = conn.execute(
                f"SELECT * FROM {tables.documents} WHERE {tables.number_column} = ?",
                (document_number,),
            ).fetchone()
            if row is None:
                return None
            return self._row_to_document(conn, row)

    def list_all(self) -> Iterable[Document]:
        with self._db.connection() as conn:
            rows = conn.execute(
                f"SELECT * FROM {self._tables.documents} ORDER BY created_at, rowid"
            ).fetchall()
            return [self._row_to_document(conn, row) for row in rows]

    def replace(self, document: Document) -> None:
        tables = self._tables
        assignments = ", ".join(
            f"{column} = ?" for column in (tables.number_column, *tables.header_columns)
        )
        values = self._header_values(document)
        with self._writing("replace", document.document_number) as conn:
            conn.execute(
                f"UPDATE {tables.documents} SET {assignments} WHERE id = ?",
                (
                    document.document_number,
                    *(values[column] for column in tables.header_columns),
                    str(document.id),
                ),
            )
            # Tax lines of the old items go with them via CASCADE
            conn.execute(
                f"DELETE FROM {tables.items} WHERE {tables.item_parent} = ?",
                (str(document.id),),
            )
            self._insert_items(conn, document)

    def delete(self, document_id: UUID) -> None:
        # Items and their tax lines deleted via CASCADE
        with self._writing("delete") as conn:
            conn.execute(
                f"DELETE FROM {self._tables.documents} WHERE id = ?",
                (str(document_id),),
            )

    def get_last_number(self) -> str | None:
        tables = self._tables
        with self._db.connection() as conn:
            row = conn.execute(
                f"""
                SELECT {tables.number_column} FROM {tables.documents}
                ORDER BY created_at DESC, rowid DESC
                LIMIT 1
                """
            ).fetchone()
        if row is None:
            return None
        return str(row[0])

    @contextlib.contextmanager
    def _writing(
        self, operation: str, document_number: str | None = None
    ) -> Iterator[sqlite3.Connection]:
        """Open a transaction and translate storage failures."""
        tables = self._tables
        try:
            with self._db.transaction() as conn:
                yield conn
        except sqlite3.IntegrityError as exc:
            unique_column = f"{tables.documents}.{tables.number_column}"
            if document_number is not None and unique_column in str(exc):
                raise DuplicateDocumentNumberError(
                    self.kind.value, document_number
                ) from exc
            logger.error(
                "document_write_failed",
                kind=self.kind.value,
                operation=operation,
                error=str(exc),
            )
            raise PersistenceError(f"{operation}_{self.kind.value}", str(exc)) from exc
        except sqlite3.Error as exc:
            logger.error(
                "document_write_failed",
                kind=self.kind.value,
                operation=operation,
                error=str(exc),
            )
            raise PersistenceError(f"{operation}_{self.kind.value}", str(exc)) from exc

    def _header_values(self, document: Document) -> dict[str, Any]:
        return {
            "issuer_name": document.issuer_name,
            "issuer_address": document.issuer_address,
            "issuer_tax_id": document.issuer_tax_id,
            "client_name": document.client_name,
            "client_address": document.client_address,
            "client_tax_id": document.client_tax_id,
            "issue_date": document.issue_date.isoformat(),
            "due_date": document.due_date.isoformat() if document.due_date else None,
            "status": document.status.value if document.status else None,
            "payment_method": document.payment_method.value
            if document.payment_method
            else None,
            "notes": document.notes,
            "subtotal": str(document.subtotal),
            "total_tax": str(document.total_tax),
            "total": str(document.total),
            "updated_at": document.updated_at.isoformat(),
        }

    def _insert_items(self, conn: sqlite3.Connection, document: Document) -> None:
        tables = self._tables
        for position, item in enumerate(document.items):
            conn.execute(
                f"""
                INSERT INTO {tables.items} (id, {tables.item_parent}, product_id, position,
                                            product_name, description, quantity, unit_price,
                                            line_total)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(item.id),
                    str(document.id),
                    str(item.product_id) if item.product_id else None,
                    position,
                    item.product_name,
                    item.description,
                    str(item.quantity),
                    str(item.unit_price),
                    str(item.line_total),
                ),
            )
            for tax_position, tax in enumerate(item.taxes):
                conn.execute(
                    f"""
                    INSERT INTO {tables.taxes} (id, {tables.tax_parent}, position,
                                                tax_name, tax_rate, tax_amount)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        str(tax.id),
                        str(item.id),
                        tax_position,
                        tax.tax_name,
                        str(tax.tax_rate),
                        str(tax.tax_amount),
                    ),
                )

    def _row_to_document(self, conn: sqlite3.Connection, row: sqlite3.Row) -> Document:
        tables = self._tables
        row_keys = row.keys()
        item_rows = conn.execute(
            f"SELECT * FROM {tables.items} WHERE {tables.item_parent} = ? ORDER BY position",
            (row["id"],),
        ).fetchall()
        items = [self._row_to_item(conn, item_row) for item_row in item_rows]

        document = Document(
            kind=self.kind,
            document_number=row[tables.number_column],
            issuer_name=row["issuer_name"],
            issue_date=date.fromisoformat(row["issue_date"]),
            items=items,
            id=UUID(row["id"]),
            issuer_address=row["issuer_address"],
            issuer_tax_id=row["issuer_tax_id"] if "issuer_tax_id" in row_keys else None,
            client_name=row["client_name"] if "client_name" in row_keys else None,
            client_address=row["client_address"]
            if "client_address" in row_keys
            else None,
            client_tax_id=row["client_tax_id"] if "client_tax_id" in row_keys else None,
            due_date=date.fromisoformat(row["due_date"])
            if "due_date" in row_keys and row["due_date"]
            else None,
            status=InvoiceStatus(row["status"]) if "status" in row_keys else None,
            payment_method=PaymentMethod(row["payment_method"])
            if "payment_method" in row_keys
            else None,
            notes=row["notes"],
            subtotal=Decimal(row["subtotal"]),
            total_tax=Decimal(row["total_tax"]),
            total=Decimal(row["total"]),
        )
        document.created_at = datetime.fromisoformat(row["created_at"])
        document.updated_at = datetime.fromisoformat(row["updated_at"])
        return document

    def _row_to_item(self, conn: sqlite3.Connection, row: sqlite3.Row) -> LineItem:
        tax_rows = conn.execute(
            f"SELECT * FROM {self._tables.taxes} WHERE {self._tables.tax_parent} = ? "
            "ORDER BY position",
            (row["id"],),
        ).fetchall()
        return LineItem(
            product_name=row["product_name"],
            quantity=Decimal(row["quantity"]),
            unit_price=Decimal(row["unit_price"]),
            taxes=[
                TaxLine(
                    tax_name=tax_row["tax_name"],
                    tax_rate=Decimal(tax_row["tax_rate"]),
                    tax_amount=Decimal(tax_row["tax_amount"]),
                    id=UUID(tax_row["id"]),
                )
                for tax_row in tax_rows
            ],
            id=UUID(row["id"]),
            product_id=UUID(row["product_id"]) if row["product_id"] else None,
            description=row["description"],
            line_total=Decimal(row["line_total"]),
        )
