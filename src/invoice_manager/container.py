"""Dependency injection container for Invoice Manager.

Provides lazy, cached access to the database, repositories and services.

Usage:
    from invoice_manager.container import get_container

    container = get_container()
    invoices = container.invoice_service.list()
"""

from functools import cached_property, lru_cache
from typing import TYPE_CHECKING

from invoice_manager.config import Settings, get_settings
from invoice_manager.domain.value_objects import DocumentKind
from invoice_manager.logging_config import get_logger
from invoice_manager.repositories.sqlite import (
    SQLiteDatabase,
    SQLiteDocumentRepository,
    SQLiteProductRepository,
)

if TYPE_CHECKING:
    from invoice_manager.services.analytics import AnalyticsServiceImpl
    from invoice_manager.services.demo_data import SeedService
    from invoice_manager.services.documents import DocumentServiceImpl
    from invoice_manager.services.products import ProductServiceImpl
    from invoice_manager.services.scheduler import ReseedScheduler

logger = get_logger(__name__)


class Container:
    """Dependency injection container.

    Services are instantiated on first access and cached for reuse. Tests
    pass their own settings or an already-initialized database:

        container = Container(database=SQLiteDatabase(":memory:"))
    """

    def __init__(
        self,
        settings: Settings | None = None,
        database: SQLiteDatabase | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._database = database
        logger.debug(
            "container_created",
            environment=self._settings.environment.value,
            sqlite_path=str(self._settings.sqlite_path),
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    @cached_property
    def database(self) -> SQLiteDatabase:
        """The SQLite database, created and initialized on first access."""
        if self._database is None:
            db_path = str(self._settings.sqlite_path)
            logger.info("initializing_sqlite_database", path=db_path)
            # Shared by the API's worker threads and the reseed scheduler
            self._database = SQLiteDatabase(db_path, check_same_thread=False)
        self._database.initialize()
        return self._database

    @cached_property
    def product_repository(self) -> SQLiteProductRepository:
        return SQLiteProductRepository(self.database)

    @cached_property
    def invoice_repository(self) -> SQLiteDocumentRepository:
        return SQLiteDocumentRepository(self.database, DocumentKind.INVOICE)

    @cached_property
    def receipt_repository(self) -> SQLiteDocumentRepository:
        return SQLiteDocumentRepository(self.database, DocumentKind.RECEIPT)

    @cached_property
    def product_service(self) -> "ProductServiceImpl":
        from invoice_manager.services.products import ProductServiceImpl

        return ProductServiceImpl(self.product_repository)

    @cached_property
    def invoice_service(self) -> "DocumentServiceImpl":
        from invoice_manager.services.documents import DocumentServiceImpl

        return DocumentServiceImpl(
            self.invoice_repository,
            self.product_repository,
            prefix=self._settings.prefix_for(DocumentKind.INVOICE),
        )

    @cached_property
    def receipt_service(self) -> "DocumentServiceImpl":
        from invoice_manager.services.documents import DocumentServiceImpl

        return DocumentServiceImpl(
            self.receipt_repository,
            self.product_repository,
            prefix=self._settings.prefix_for(DocumentKind.RECEIPT),
        )

    @cached_property
    def analytics_service(self) -> "AnalyticsServiceImpl":
        from invoice_manager.services.analytics import AnalyticsServiceImpl

        return AnalyticsServiceImpl(self.invoice_repository, self.receipt_repository)

    @cached_property
    def seed_service(self) -> "SeedService":
        from invoice_manager.services.demo_data import SeedService

        return SeedService(
            self.product_service, self.invoice_service, self.receipt_service
        )

    @cached_property
    def scheduler(self) -> "ReseedScheduler":
        from invoice_manager.services.scheduler import ReseedScheduler

        settings = self._settings
        return ReseedScheduler(
            seed_fn=lambda: self.seed_service.seed(
                products=settings.seed_products,
                invoices=settings.seed_invoices,
                receipts=settings.seed_receipts,
            ),
            interval_seconds=settings.seed_interval_seconds,
            max_retries=settings.seed_max_retries,
            retry_delay_seconds=settings.seed_retry_delay_seconds,
        )

    def document_service(self, kind: DocumentKind) -> "DocumentServiceImpl":
        if DocumentKind(kind) == DocumentKind.INVOICE:
            return self.invoice_service
        return self.receipt_service

    def close(self) -> None:
        """Stop background work and close the database."""
        if "scheduler" in self.__dict__ and self.scheduler.is_running:
            self.scheduler.stop()
        if self._database is not None:
            logger.info("closing_database_connection")
            self._database.close()

    def __enter__(self) -> "Container":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


@lru_cache
def get_container() -> Container:
    """Get the global container singleton."""
    return Container()


def reset_container() -> None:
    """Close and forget the global container."""
    if get_container.cache_info().currsize:
        get_container().close()
    get_container.cache_clear()
