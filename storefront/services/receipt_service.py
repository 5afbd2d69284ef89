# storefront/services/receipt_service.py
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import List

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from storefront.domain.session import CartLine
from storefront.utils.settings import RECEIPTS_DIR, SHOP_NAME
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

MARGIN = 50


def money(value) -> str:
    return f"${Decimal(str(value)).quantize(Decimal('0.01'))}"


@dataclass
class ReceiptData:
    order_id: int
    order_date: datetime
    items: List[CartLine]
    total: Decimal
    payment_method: str
    customer_name: str
    customer_email: str


def receipt_path(order_id: int, directory: Path | None = None) -> Path:
    return Path(directory or RECEIPTS_DIR) / f"receipt-{order_id}.pdf"


def receipt_download_path(order_id: int) -> str:
    return f"/receipts/{order_id}"


def build_receipt_lines(data: ReceiptData) -> List[str]:
    """Tekstowa wersja paragonu, ta sama kolejnosc co w PDF."""
    lines = [
        SHOP_NAME,
        f"Date: {data.order_date:%Y-%m-%d %H:%M:%S}",
        "Official Receipt",
        f"Receipt #: {data.order_id}",
        f"Customer: {data.customer_name}",
        f"Email: {data.customer_email}",
        f"Payment Method: {data.payment_method}",
        "Item | Qty | Unit Price | Total",
    ]
    for item in data.items:
        lines.append(
            f"{item.product_name} | {item.quantity} | {money(item.price)} | {money(item.line_total)}"
        )
    lines.append(f"TOTAL PAID: {money(data.total)}")
    lines.append("Thank you for shopping with us!")
    return lines


class ReceiptService:
    def __init__(self, directory: Path | None = None):
        self.directory = Path(directory or RECEIPTS_DIR)

    def path_for(self, order_id: int) -> Path:
        return receipt_path(order_id, self.directory)

    def generate(self, data: ReceiptData) -> Path:
        path = self.path_for(data.order_id)
        path.parent.mkdir(parents=True, exist_ok=True)

        width, height = A4
        pdf = canvas.Canvas(str(path), pagesize=A4)
        pdf.setTitle(f"Receipt {data.order_id}")
        y = height - MARGIN

        # naglowek
        pdf.setFont("Helvetica-Bold", 26)
        pdf.drawCentredString(width / 2, y, SHOP_NAME)
        y -= 22
        pdf.setFont("Helvetica", 12)
        pdf.setFillColor(colors.HexColor("#666666"))
        pdf.drawCentredString(width / 2, y, f"Date: {data.order_date:%Y-%m-%d %H:%M:%S}")
        y -= 16
        pdf.drawCentredString(width / 2, y, "Official Receipt")
        pdf.setFillColor(colors.black)
        y -= 14
        y = self._divider(pdf, y, width, "#333333", 1)

        for label in (
            f"Receipt #: {data.order_id}",
            f"Customer: {data.customer_name}",
            f"Email: {data.customer_email}",
            f"Payment Method: {data.payment_method}",
        ):
            pdf.drawString(MARGIN, y, label)
            y -= 16
        y = self._divider(pdf, y, width, "#333333", 1)

        # tabela pozycji
        pdf.setFont("Helvetica-Bold", 12)
        self._row(pdf, y, "Item", "Qty", "Unit Price", "Total")
        y -= 10
        y = self._divider(pdf, y, width, "#dddddd", 0.5)

        pdf.setFont("Helvetica", 12)
        for item in data.items:
            if y < MARGIN + 80:
                pdf.showPage()
                pdf.setFont("Helvetica", 12)
                y = height - MARGIN
            self._row(
                pdf,
                y,
                item.product_name[:32],
                str(item.quantity),
                money(item.price),
                money(item.line_total),
            )
            y -= 18

        y = self._divider(pdf, y + 4, width, "#333333", 1)

        pdf.setFont("Helvetica-Bold", 12)
        pdf.setFillColor(colors.HexColor("#1e7e34"))
        pdf.drawRightString(390, y, "TOTAL PAID:")
        pdf.drawRightString(width - MARGIN, y, money(data.total))
        pdf.setFillColor(colors.black)
        y -= 30
        y = self._divider(pdf, y, width, "#dddddd", 0.5)

        pdf.setFont("Helvetica-Oblique", 12)
        pdf.setFillColor(colors.HexColor("#1e7e34"))
        pdf.drawCentredString(width / 2, y, "Thank you for shopping with us!")

        pdf.showPage()
        pdf.save()

        logger.info(f"Receipt for order {data.order_id} written to {path}")
        return path

    @staticmethod
    def _divider(pdf, y, width, color, line_width):
        pdf.setStrokeColor(colors.HexColor(color))
        pdf.setLineWidth(line_width)
        pdf.line(MARGIN, y, width - MARGIN, y)
        return y - 18

    @staticmethod
    def _row(pdf, y, item, qty, unit_price, total):
        pdf.drawString(MARGIN, y, item)
        pdf.drawCentredString(275, y, qty)
        pdf.drawRightString(390, y, unit_price)
        pdf.drawRightString(A4[0] - MARGIN, y, total)
