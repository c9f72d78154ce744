# fulfillment/services/invoice_renderer.py
import tempfile
from pathlib import Path

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from fulfillment.utils.settings import INVOICE_DIR, STORE_NAME

LEFT = 40
RIGHT = A4[0] - 40
LINE = 14


def _money(value) -> str:
    return f"Rs. {float(value or 0):,.2f}"


def invoice_filename(order_id: int) -> str:
    return f"Invoice_{order_id}.pdf"


class InvoiceRenderer:
    """
    Renderuje PDF faktury. Podsumowanie finansowe brane wprost z zamowienia
    (zamrozona kopia), nic nie jest przeliczane.
    invariant=1 - ten sam order daje identyczne bajty.
    """

    def __init__(self, output_dir: str | Path | None = None):
        self.output_dir = Path(output_dir or INVOICE_DIR)

    def render(self, order, items, user, address: dict | None) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        # osobny plik na kazda probe, klucz w storage zostaje staly
        with tempfile.NamedTemporaryFile(
            dir=self.output_dir, prefix=f"Invoice_{order.id}_", suffix=".pdf", delete=False
        ) as tmp:
            path = Path(tmp.name)
        address = address or {}

        pdf = canvas.Canvas(str(path), pagesize=A4, invariant=1)
        pdf.setTitle(f"Invoice {order.id}")
        y = A4[1] - 50

        # header
        pdf.setFont("Helvetica-Bold", 20)
        pdf.drawString(LEFT, y, STORE_NAME)
        pdf.setFont("Helvetica", 10)
        pdf.drawRightString(RIGHT, y, f"Invoice ID: INV-{order.id}")
        y -= LINE
        created = order.created_at.strftime("%d/%m/%Y") if order.created_at else ""
        pdf.drawRightString(RIGHT, y, f"Date: {created}")
        y -= LINE
        pdf.drawRightString(RIGHT, y, f"Payment Mode: {order.payment_mode}")
        y -= LINE
        pdf.drawRightString(RIGHT, y, f"Payment Status: {order.payment_status}")
        y -= 2 * LINE

        # billing
        pdf.setFont("Helvetica-Bold", 12)
        pdf.drawString(LEFT, y, "Billing & Shipping Details")
        y -= LINE
        pdf.setFont("Helvetica", 10)
        customer = address.get("name") or (user.name if user else "Customer")
        lines = [
            customer,
            address.get("address") or "",
            f"{address.get('city') or ''}, {address.get('state') or ''} - {address.get('pincode') or ''}",
            address.get("country") or "India",
            f"Phone: {address.get('phone') or 'N/A'}",
            f"Email: {address.get('email') or (user.email if user else None) or 'N/A'}",
        ]
        for text in lines:
            pdf.drawString(LEFT, y, text)
            y -= LINE
        y -= LINE

        # items
        pdf.setFont("Helvetica-Bold", 10)
        pdf.drawString(LEFT, y, "#")
        pdf.drawString(LEFT + 30, y, "Item")
        pdf.drawString(330, y, "Size")
        pdf.drawString(390, y, "Qty")
        pdf.drawRightString(RIGHT, y, "Price")
        y -= 4
        pdf.line(LEFT, y, RIGHT, y)
        y -= LINE
        pdf.setFont("Helvetica", 10)
        for index, item in enumerate(items, start=1):
            if y < 120:
                pdf.showPage()
                pdf.setFont("Helvetica", 10)
                y = A4[1] - 50
            size = item.stock_record.size if item.stock_record else "Default"
            pdf.drawString(LEFT, y, str(index))
            pdf.drawString(LEFT + 30, y, f"Variant {item.variant_id}")
            pdf.drawString(330, y, size)
            pdf.drawString(390, y, str(item.quantity))
            pdf.drawRightString(RIGHT, y, _money(item.price))
            y -= LINE
        y -= LINE

        # summary
        summary = [
            ("Subtotal", _money(order.total_price)),
            ("Discount", f"-{_money(order.discount_price)}"),
            ("Tax", _money(order.tax)),
            ("Delivery", _money(order.delivery_charge)),
            ("Handling", _money(order.handling_charge)),
        ]
        for label, value in summary:
            pdf.drawRightString(RIGHT, y, f"{label}: {value}")
            y -= LINE
        pdf.setFont("Helvetica-Bold", 12)
        pdf.drawRightString(RIGHT, y, f"Total Payable: {_money(order.total_payable_amount)}")
        y -= 3 * LINE

        pdf.setFont("Helvetica", 8)
        pdf.drawCentredString(A4[0] / 2, y, "This is a system generated invoice. No signature required.")

        pdf.save()
        return path
