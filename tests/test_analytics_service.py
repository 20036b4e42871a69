"""Tests for revenue analytics."""

from datetime import date
from decimal import Decimal

import pytest

from invoice_manager.domain.value_objects import InvoiceStatus
from invoice_manager.exceptions import ValidationError
from invoice_manager.repositories.sqlite import SQLiteDocumentRepository
from invoice_manager.services.analytics import AnalyticsServiceImpl
from invoice_manager.services.documents import DocumentServiceImpl


@pytest.fixture
def analytics_service(
    invoice_repo: SQLiteDocumentRepository, receipt_repo: SQLiteDocumentRepository
) -> AnalyticsServiceImpl:
    return AnalyticsServiceImpl(invoice_repo, receipt_repo)


@pytest.fixture
def populated(
    invoice_service: DocumentServiceImpl,
    receipt_service: DocumentServiceImpl,
    make_invoice,
    make_receipt,
    make_item,
) -> None:
    # 240 total, 40 tax
    invoice_service.create(make_invoice(number="INV-001", issue_date=date(2025, 1, 10)))
    paid = invoice_service.create(
        make_invoice(
            number="INV-002",
            issue_date=date(2025, 2, 5),
            items=[make_item("1", "50", [])],
        )
    )
    invoice_service.set_status(paid.id, InvoiceStatus.PAID)
    # 12 total, 2 tax
    receipt_service.create(
        make_receipt(
            number="RCP-001",
            issue_date=date(2025, 2, 20),
            items=[make_item("1", "10")],
        )
    )


class TestSummary:
    def test_empty_database(self, analytics_service: AnalyticsServiceImpl) -> None:
        summary = analytics_service.summary()

        assert summary.total_revenue == Decimal("0")
        assert summary.document_count == 0
        assert summary.revenue_by_month == {}
        assert summary.invoice_status_counts == {
            "draft": 0,
            "sent": 0,
            "paid": 0,
            "overdue": 0,
        }

    @pytest.mark.usefixtures("populated")
    def test_totals(self, analytics_service: AnalyticsServiceImpl) -> None:
        summary = analytics_service.summary()

        assert summary.invoice_revenue == Decimal("290")
        assert summary.receipt_revenue == Decimal("12")
        assert summary.total_revenue == Decimal("302")
        assert summary.total_tax == Decimal("42")
        assert summary.net_revenue == Decimal("260")
        assert summary.invoice_count == 2
        assert summary.receipt_count == 1
        assert summary.invoice_status_counts["draft"] == 1
        assert summary.invoice_status_counts["paid"] == 1

    @pytest.mark.usefixtures("populated")
    def test_revenue_by_month(self, analytics_service: AnalyticsServiceImpl) -> None:
        summary = analytics_service.summary()

        assert summary.revenue_by_month == {
            "2025-01": Decimal("240"),
            "2025-02": Decimal("62"),
        }
        assert list(summary.revenue_by_month) == ["2025-01", "2025-02"]

    @pytest.mark.usefixtures("populated")
    def test_date_window_is_inclusive(
        self, analytics_service: AnalyticsServiceImpl
    ) -> None:
        summary = analytics_service.summary(date(2025, 2, 5), date(2025, 2, 20))

        assert summary.invoice_count == 1
        assert summary.receipt_count == 1
        assert summary.total_revenue == Decimal("62")

    @pytest.mark.usefixtures("populated")
    def test_open_ended_window(self, analytics_service: AnalyticsServiceImpl) -> None:
        summary = analytics_service.summary(start_date=date(2025, 2, 1))

        assert summary.document_count == 2

    def test_rejects_inverted_window(
        self, analytics_service: AnalyticsServiceImpl
    ) -> None:
        with pytest.raises(ValidationError):
            analytics_service.summary(date(2025, 3, 1), date(2025, 1, 1))
