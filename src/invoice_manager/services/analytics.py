"""Revenue analytics over issued invoices and receipts."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from invoice_manager.domain.documents import Document
from invoice_manager.domain.value_objects import InvoiceStatus
from invoice_manager.exceptions import ValidationError
from invoice_manager.repositories.interfaces import DocumentRepository
from invoice_manager.services.interfaces import AnalyticsService, RevenueSummary


class AnalyticsServiceImpl(AnalyticsService):
    """Summarizes document totals by issue date.

    Revenue figures are document totals (tax included); net revenue removes
    the tax. Amounts are not rounded.
    """

    def __init__(
        self,
        invoice_repo: DocumentRepository,
        receipt_repo: DocumentRepository,
    ) -> None:
        self._invoice_repo = invoice_repo
        self._receipt_repo = receipt_repo

    def summary(
        self, start_date: date | None = None, end_date: date | None = None
    ) -> RevenueSummary:
        if start_date and end_date and start_date > end_date:
            raise ValidationError(
                "start_date must not be after end_date",
                context={"start_date": str(start_date), "end_date": str(end_date)},
            )

        result = RevenueSummary(
            start_date=start_date,
            end_date=end_date,
            invoice_status_counts={status.value: 0 for status in InvoiceStatus},
        )
        by_month: dict[str, list[Decimal]] = {}

        for invoice in self._invoice_repo.list_all():
            if not self._in_window(invoice, start_date, end_date):
                continue
            result.invoice_count += 1
            result.invoice_revenue += invoice.total
            result.total_tax += invoice.total_tax
            if invoice.status is not None:
                result.invoice_status_counts[invoice.status.value] += 1
            by_month.setdefault(_month_key(invoice.issue_date), []).append(
                invoice.total
            )

        for receipt in self._receipt_repo.list_all():
            if not self._in_window(receipt, start_date, end_date):
                continue
            result.receipt_count += 1
            result.receipt_revenue += receipt.total
            result.total_tax += receipt.total_tax
            by_month.setdefault(_month_key(receipt.issue_date), []).append(
                receipt.total
            )

        result.revenue_by_month = {
            month: sum(amounts, Decimal("0"))
            for month, amounts in sorted(by_month.items())
        }
        return result

    @staticmethod
    def _in_window(
        document: Document, start_date: date | None, end_date: date | None
    ) -> bool:
        if start_date and document.issue_date < start_date:
            return False
        if end_date and document.issue_date > end_date:
            return False
        return True


def _month_key(day: date) -> str:
    return day.strftime("%Y-%m")


__all__ = ["AnalyticsServiceImpl"]
