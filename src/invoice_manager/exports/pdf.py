"""PDF rendering of export records with reportlab."""

from __future__ import annotations

import io
from decimal import Decimal

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from invoice_manager.domain.value_objects import decimal_to_str, round_money
from invoice_manager.services.exports import ExportRecord

W, H = A4
MARGIN = 50
CONTENT_W = W - 2 * MARGIN
BOTTOM = 80

INK = HexColor("#1F2937")
MUTED = HexColor("#6B7280")
RULE = HexColor("#D1D5DB")

# Column x positions: name, qty, unit price, tax, total (numbers right-aligned)
COLUMNS = (MARGIN, MARGIN + 280, MARGIN + 350, MARGIN + 420, W - MARGIN)


def format_money(value: Decimal | str) -> str:
    if isinstance(value, Decimal):
        return f"{round_money(value):,.2f}"
    return value


class PDFRenderer:
    """Draws one document onto A4 pages."""

    def __init__(self, record: ExportRecord) -> None:
        self.record = record
        self.buffer = io.BytesIO()
        self.c = canvas.Canvas(self.buffer, pagesize=A4)
        self.c.setTitle(f"{record.kind.label} {record.document_number}")
        self.y = H - MARGIN

    def draw_text(
        self,
        text: str,
        x: float,
        y: float,
        font: str = "Helvetica",
        size: int = 10,
        align: str = "left",
        max_width: float | None = None,
    ) -> None:
        self.c.setFont(font, size)
        if max_width:
            while self.c.stringWidth(text, font, size) > max_width and len(text) > 3:
                text = text[:-4] + "..."
        if align == "right":
            self.c.drawRightString(x, y, text)
        else:
            self.c.drawString(x, y, text)

    def rule(self) -> None:
        self.c.saveState()
        self.c.setStrokeColor(RULE)
        self.c.setLineWidth(0.5)
        self.c.line(MARGIN, self.y, W - MARGIN, self.y)
        self.c.restoreState()

    def ensure_space(self, needed: float) -> None:
        if self.y - needed < BOTTOM:
            self.c.showPage()
            self.y = H - MARGIN
            self.draw_table_header()

    def draw_header(self) -> None:
        record = self.record
        self.c.setFillColor(INK)
        self.draw_text(record.title, MARGIN, self.y, font="Helvetica-Bold", size=22)
        self.draw_text(
            f"#{record.document_number}",
            W - MARGIN,
            self.y,
            font="Helvetica-Bold",
            size=12,
            align="right",
        )
        self.y -= 30

        for label in ("Issue Date", "Due Date", "Status", "Payment Method"):
            value = str(record.get(label, ""))
            if value:
                self.draw_text(f"{label}: {value}", MARGIN, self.y, size=10)
                self.y -= 14
        self.y -= 10

    def draw_parties(self) -> None:
        record = self.record
        top = self.y
        self.draw_text("From", MARGIN, top, font="Helvetica-Bold", size=11)
        lines = [record.get("Issuer Name"), record.get("Issuer Address")]
        lines.append(
            f"Tax ID: {record.get('Issuer Tax ID')}" if record.get("Issuer Tax ID") else ""
        )
        self._draw_block(MARGIN, top - 16, lines)

        if record.get("Client Name"):
            x = MARGIN + CONTENT_W / 2
            self.draw_text("Bill To", x, top, font="Helvetica-Bold", size=11)
            client = [record.get("Client Name"), record.get("Client Address")]
            client.append(
                f"Tax ID: {record.get('Client Tax ID')}"
                if record.get("Client Tax ID")
                else ""
            )
            self._draw_block(x, top - 16, client)

        self.y = top - 16 - 3 * 14 - 16

    def _draw_block(self, x: float, y: float, lines: list) -> None:
        for line in lines:
            if line:
                self.draw_text(str(line), x, y, max_width=CONTENT_W / 2 - 10)
            y -= 14

    def draw_table_header(self) -> None:
        self.c.setFillColor(INK)
        name_x, qty_x, price_x, tax_x, total_x = COLUMNS
        font = "Helvetica-Bold"
        self.draw_text("Item", name_x, self.y, font=font)
        self.draw_text("Qty", qty_x, self.y, font=font, align="right")
        self.draw_text("Unit Price", price_x, self.y, font=font, align="right")
        self.draw_text("Tax", tax_x, self.y, font=font, align="right")
        self.draw_text("Line Total", total_x, self.y, font=font, align="right")
        self.y -= 8
        self.rule()
        self.y -= 16

    def draw_items(self) -> None:
        name_x, qty_x, price_x, tax_x, total_x = COLUMNS
        self.draw_table_header()
        for row in self.record.items:
            self.ensure_space(30)
            self.c.setFillColor(INK)
            self.draw_text(row.product_name, name_x, self.y, max_width=qty_x - name_x - 40)
            self.draw_text(decimal_to_str(row.quantity), qty_x, self.y, align="right")
            self.draw_text(format_money(row.unit_price), price_x, self.y, align="right")
            self.draw_text(format_money(row.tax_amount), tax_x, self.y, align="right")
            self.draw_text(format_money(row.line_total), total_x, self.y, align="right")
            if row.description:
                self.y -= 12
                self.c.setFillColor(MUTED)
                self.draw_text(
                    row.description,
                    name_x + 8,
                    self.y,
                    size=8,
                    max_width=qty_x - name_x - 48,
                )
            self.y -= 18

    def draw_totals(self) -> None:
        self.ensure_space(80)
        self.rule()
        self.y -= 18
        self.c.setFillColor(INK)
        label_x = COLUMNS[3]
        for label in ("Subtotal", "Total Tax", "Total"):
            font = "Helvetica-Bold" if label == "Total" else "Helvetica"
            self.draw_text(label, label_x - 60, self.y, font=font)
            self.draw_text(
                format_money(self.record.get(label, Decimal("0"))),
                W - MARGIN,
                self.y,
                font=font,
                align="right",
            )
            self.y -= 16

    def draw_notes(self) -> None:
        notes = str(self.record.get("Notes", ""))
        if not notes:
            return
        self.ensure_space(40)
        self.y -= 10
        self.c.setFillColor(MUTED)
        self.draw_text("Notes", MARGIN, self.y, font="Helvetica-Bold")
        self.y -= 14
        self.draw_text(notes, MARGIN, self.y, size=9, max_width=CONTENT_W)

    def render(self) -> bytes:
        self.draw_header()
        self.draw_parties()
        self.draw_items()
        self.draw_totals()
        self.draw_notes()
        self.c.showPage()
        self.c.save()
        return self.buffer.getvalue()


def render_pdf(record: ExportRecord) -> bytes:
    """Render ``record`` as a PDF document and return its bytes."""
    return PDFRenderer(record).render()


__all__ = ["render_pdf", "format_money"]
