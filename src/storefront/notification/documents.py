"""Invoice and refund-notice documents attached to customer emails.

Builders turn payment/refund facts into a ``DocumentModel``; a
``DocumentRenderer`` turns the model into bytes. The default renderer writes a
small single-font PDF with the standard Helvetica faces, so no font files or
third-party PDF toolkit are involved.
"""

import io
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field

from storefront.notification.channel.email_port import Attachment

INVOICE = "invoice"
REFUND_NOTICE = "refund_notice"


def document_number(prefix: str, record_id) -> str:
    """``INV-1A2B3C4D`` style numbers: prefix plus the last 8 characters of the id."""
    return f"{prefix}-{str(record_id)[-8:].upper()}"


@dataclass
class DocumentModel:
    kind: str
    number: str
    title: str
    issued_at: str
    recipient: str
    rows: list[list[str]] = field(default_factory=list)
    total_label: str = "Total"
    total: str = "0.00"
    note: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "DocumentModel":
        return cls(**data)

    @property
    def filename(self) -> str:
        return f"{self.number}.pdf"


def invoice_for_payment(payment_id, customer_name, amount, currency, issued_at, order: dict) -> DocumentModel:
    rows = [
        ["Product", str(order.get("product_name") or order.get("product_id") or "-")],
        ["Size", str(order.get("size") or "-")],
        ["Quantity", str(order.get("quantity") or 1)],
        ["Ship to", str(order.get("customer_address") or "-")],
    ]
    if order.get("promotion_discount"):
        rows.append(["Promotion discount", f"-{float(order['promotion_discount']):.2f}"])
    if order.get("loyalty_discount"):
        rows.append(["Loyalty discount", f"-{float(order['loyalty_discount']):.2f}"])
    rows.append(["Payment", str(payment_id)])

    return DocumentModel(
        kind=INVOICE,
        number=document_number("INV", payment_id),
        title="Invoice",
        issued_at=str(issued_at),
        recipient=customer_name,
        rows=rows,
        total_label=f"Amount paid ({currency.upper()})",
        total=f"{amount:.2f}",
    )


def refund_notice(refund_request_id, payment_id, customer_name, amount, currency, issued_at, approved, note):
    return DocumentModel(
        kind=REFUND_NOTICE,
        number=document_number("REF", refund_request_id),
        title="Refund Approved" if approved else "Refund Rejected",
        issued_at=str(issued_at),
        recipient=customer_name,
        rows=[
            ["Refund request", str(refund_request_id)],
            ["Payment", str(payment_id)],
            ["Decision", "Approved" if approved else "Rejected"],
        ],
        total_label=f"Refunded ({currency.upper()})",
        total=f"{amount:.2f}" if approved else "0.00",
        note=note,
    )


class DocumentRenderer(ABC):
    @abstractmethod
    def render(self, document: DocumentModel) -> Attachment:
        """Render a document model into an email attachment."""
        ...


def _pdf_str(value) -> str:
    text = str(value) if value is not None else ""
    text = text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
    safe = "".join(c if 32 <= ord(c) < 127 else "?" for c in text)
    return f"({safe})"


class _PdfPage:
    """Collects text operations for one A4 page."""

    WIDTH = 595
    HEIGHT = 842
    LEFT = 50
    VALUE_X = 220
    TOP = 790
    LINE = 18

    def __init__(self):
        self.ops: list[str] = []
        self.y = self.TOP

    def text(self, value, x=None, bold=False, size=10):
        font = "/F2" if bold else "/F1"
        self.ops.append(f"BT {font} {size} Tf {x or self.LEFT} {self.y} Td {_pdf_str(value)} Tj ET")

    def rule(self):
        self.ops.append(f"{self.LEFT} {self.y} m {self.WIDTH - self.LEFT} {self.y} l S")

    def advance(self, lines=1):
        self.y -= self.LINE * lines


class PdfDocumentRenderer(DocumentRenderer):
    """Writes a one-page PDF 1.4 file."""

    def _page_content(self, document: DocumentModel) -> str:
        page = _PdfPage()
        page.text(f"{document.title} {document.number}", bold=True, size=16)
        page.advance()
        page.rule()
        page.advance()
        page.text("Issued to", bold=True)
        page.text(document.recipient, x=page.VALUE_X)
        page.advance()
        page.text("Date", bold=True)
        page.text(document.issued_at, x=page.VALUE_X)
        page.advance(2)
        for label, value in document.rows:
            page.text(label, bold=True)
            page.text(value, x=page.VALUE_X)
            page.advance()
        page.rule()
        page.advance()
        page.text(document.total_label, bold=True, size=12)
        page.text(document.total, x=page.VALUE_X, bold=True, size=12)
        if document.note:
            page.advance(2)
            page.text(document.note)
        return "\n".join(page.ops)

    def render(self, document: DocumentModel) -> Attachment:
        content = self._page_content(document)
        objects = [
            "<< /Type /Catalog /Pages 2 0 R >>",
            "<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
            (
                f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 {_PdfPage.WIDTH} {_PdfPage.HEIGHT}] "
                "/Contents 4 0 R /Resources << /Font << /F1 5 0 R /F2 6 0 R >> >> >>"
            ),
            f"<< /Length {len(content.encode('latin-1'))} >>\nstream\n{content}\nendstream",
            "<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
            "<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica-Bold >>",
        ]

        out = io.BytesIO()
        out.write(b"%PDF-1.4\n")
        offsets = []
        for number, body in enumerate(objects, start=1):
            offsets.append(out.tell())
            out.write(f"{number} 0 obj\n{body}\nendobj\n".encode("latin-1"))

        xref_offset = out.tell()
        out.write(f"xref\n0 {len(objects) + 1}\n".encode("latin-1"))
        out.write(b"0000000000 65535 f \n")
        for offset in offsets:
            out.write(f"{offset:010d} 00000 n \n".encode("latin-1"))
        out.write(
            f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref_offset}\n%%EOF\n".encode("latin-1")
        )
        return Attachment(filename=document.filename, content=out.getvalue())


_renderer: DocumentRenderer | None = None


def get_renderer() -> DocumentRenderer:
    global _renderer
    if _renderer is None:
        _renderer = PdfDocumentRenderer()
    return _renderer


def set_renderer(renderer: DocumentRenderer) -> None:
    global _renderer
    _renderer = renderer


def reset_renderer() -> None:
    global _renderer
    _renderer = None
