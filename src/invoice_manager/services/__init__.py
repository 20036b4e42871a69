from invoice_manager.services.analytics import AnalyticsServiceImpl
from invoice_manager.services.calculator import (
    aggregate_document,
    calculate_document,
    calculate_line_item,
)
from invoice_manager.services.demo_data import (
    DemoDataGenerator,
    SeedResult,
    SeedService,
)
from invoice_manager.services.documents import DocumentServiceImpl
from invoice_manager.services.exports import ExportRecord, ExportRow, to_export_model
from invoice_manager.services.interfaces import (
    AnalyticsService,
    DocumentService,
    DocumentTotals,
    ProductService,
    RevenueSummary,
)
from invoice_manager.services.numbering import next_number
from invoice_manager.services.products import ProductServiceImpl
from invoice_manager.services.scheduler import ReseedScheduler, SchedulerStatus

__all__ = [
    "AnalyticsService",
    "AnalyticsServiceImpl",
    "DemoDataGenerator",
    "DocumentService",
    "DocumentServiceImpl",
    "DocumentTotals",
    "ExportRecord",
    "ExportRow",
    "ProductService",
    "ProductServiceImpl",
    "ReseedScheduler",
    "RevenueSummary",
    "SchedulerStatus",
    "SeedResult",
    "SeedService",
    "aggregate_document",
    "calculate_document",
    "calculate_line_item",
    "next_number",
    "to_export_model",
]
