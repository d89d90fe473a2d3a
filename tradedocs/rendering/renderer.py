import io
from datetime import date

from reportlab.lib import colors
from reportlab.pdfgen import canvas

from tradedocs.database.models import Client
from tradedocs.normalization.models import BolData, Container
from tradedocs.rendering.layout import PAGE_HEIGHT, PAGE_WIDTH, FieldPlacement
from tradedocs.rendering.models import CertificateIssuer

REGULAR_FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"
ROW_HEIGHT = 14.0
BOTTOM_MARGIN = 50.0
GRID_STEP = 50
TABLE_COLUMNS: tuple[tuple[str, float], ...] = (
    ("Container", 0),
    ("Seal", 90),
    ("Product", 170),
    ("Liters", 330),
    ("Gallons", 400),
    ("Kg", 470),
)


def render_packing_list(
    bol: BolData,
    client: Client,
    layout: dict[str, FieldPlacement],
    document_number: str | None = None,
    debug: bool = False,
) -> bytes:
    """Render a packing list PDF from BOL data and the consignee client."""
    number = document_number or f"{bol.bol_number or ''}-PL"
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=(PAGE_WIDTH, PAGE_HEIGHT))
    pdf.setTitle(f"Packing List {number}")

    if debug:
        _draw_grid(pdf)

    values = {
        "title": "PACKING LIST",
        "documentNumber": f"Document No: {number}",
        "documentDate": f"Date: {bol.date_of_issue.value if bol.date_of_issue else ''}",
        "consigneeName": client.name,
        "consigneeRif": f"RIF: {client.rif}",
        "consigneeAddress": client.address,
        "bolNumber": f"B/L No: {bol.bol_number or ''}",
        "bookingNumber": f"Booking: {bol.booking_number or ''}",
        "carrierReference": f"Carrier Ref: {bol.carrier_reference or ''}",
        "vessel": f"Vessel: {bol.vessel or ''}",
        "voyage": f"Voyage: {bol.voyage or ''}",
        "portOfLoading": f"Port of Loading: {bol.port_of_loading or ''}",
        "portOfDischarge": f"Port of Discharge: {bol.port_of_discharge or ''}",
    }
    for name, text in values.items():
        placement = layout[name]
        font = BOLD_FONT if name == "title" else REGULAR_FONT
        pdf.setFont(font, placement.font_size)
        pdf.drawString(placement.x, placement.y, text)

    _draw_containers(pdf, bol.containers, layout["containersTable"], debug)

    if debug:
        _draw_markers(pdf, layout)
    pdf.save()
    return buffer.getvalue()


def render_certificate_of_origin(
    bol: BolData,
    client: Client,
    layout: dict[str, FieldPlacement],
    issuer: CertificateIssuer,
    document_number: str | None = None,
    debug: bool = False,
) -> bytes:
    """Render a one-page certificate of origin for the goods of a BOL.

    The document date is the BOL date of issue, or today when the BOL has none.
    """
    number = document_number or f"{bol.bol_number or ''}-COO"
    issued = bol.date_of_issue.value if bol.date_of_issue else date.today().isoformat()
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=(PAGE_WIDTH, PAGE_HEIGHT))
    pdf.setTitle(f"Certificate of Origin {number}")

    if debug:
        _draw_grid(pdf)

    blocks: dict[str, tuple[str, list[str]]] = {
        "title": ("CERTIFICATE OF ORIGIN", []),
        "documentNumber": (f"Certificate No: {number}", []),
        "documentDate": (f"Date: {issued}", []),
        "buyer": (
            "BUYER:",
            [line for line in (client.name, client.address, f"RIF: {client.rif}") if line],
        ),
        "booking": (
            "MARITIME BOOKING:",
            [
                f"Bill of Lading No: {bol.bol_number or 'N/A'}",
                f"Booking No: {bol.booking_number or 'N/A'}",
                f"Vessel: {bol.vessel or 'N/A'}",
            ],
        ),
        "containers": (
            "CONTAINER:",
            [c.number for c in bol.containers if c.number] or ["N/A"],
        ),
        "products": ("PRODUCT:", _product_lines(bol.containers) or ["N/A"]),
        "ports": (
            "PORTS:",
            [
                f"Port of Loading: {bol.port_of_loading or 'N/A'}",
                f"Port of Discharge: {bol.port_of_discharge or 'N/A'}",
            ],
        ),
        "declaration": (
            f"{issuer.origin_country} ORIGIN",
            [
                "We hereby certify that the goods described above originate "
                f"in {issuer.origin_country}."
            ],
        ),
        "exporter": ("EXPORTER:", [line for line in (issuer.name, issuer.address) if line]),
    }
    for name, (heading, lines) in blocks.items():
        placement = layout[name]
        pdf.setFont(BOLD_FONT, placement.font_size)
        pdf.drawString(placement.x, placement.y, heading)
        pdf.setFont(REGULAR_FONT, placement.font_size)
        for offset, line in enumerate(lines, start=1):
            pdf.drawString(placement.x, placement.y - offset * (placement.font_size + 4), line)

    if debug:
        _draw_markers(pdf, layout)
    pdf.save()
    return buffer.getvalue()


def _product_lines(containers: list[Container]) -> list[str]:
    """One line per product with its total volume across containers."""
    totals: dict[str, float | None] = {}
    for container in containers:
        name = container.product.name
        if not name:
            continue
        liters = container.quantity.liters
        if name not in totals:
            totals[name] = liters
        elif liters is not None:
            totals[name] = (totals[name] or 0.0) + liters
    return [
        name if liters is None else f"{name} - {_quantity(liters)} L"
        for name, liters in totals.items()
    ]


def _draw_containers(
    pdf: canvas.Canvas,
    containers: list[Container],
    placement: FieldPlacement,
    debug: bool,
) -> None:
    y = placement.y
    _draw_header(pdf, placement.x, y, placement.font_size)
    y -= ROW_HEIGHT
    pdf.setFont(REGULAR_FONT, placement.font_size)
    for container in containers:
        if y < BOTTOM_MARGIN:
            pdf.showPage()
            if debug:
                _draw_grid(pdf)
            y = PAGE_HEIGHT - BOTTOM_MARGIN
            _draw_header(pdf, placement.x, y, placement.font_size)
            y -= ROW_HEIGHT
            pdf.setFont(REGULAR_FONT, placement.font_size)
        cells = (
            container.number or "",
            container.seal_number or "",
            container.product.name or "",
            _quantity(container.quantity.liters),
            _quantity(container.quantity.gallons),
            _quantity(container.quantity.kilograms),
        )
        for (_, offset), text in zip(TABLE_COLUMNS, cells):
            pdf.drawString(placement.x + offset, y, text)
        y -= ROW_HEIGHT


def _draw_header(pdf: canvas.Canvas, x: float, y: float, font_size: float) -> None:
    pdf.setFont(BOLD_FONT, font_size)
    for title, offset in TABLE_COLUMNS:
        pdf.drawString(x + offset, y, title)


def _quantity(value: float | None) -> str:
    return "-" if value is None else f"{value:,.2f}"


def _draw_grid(pdf: canvas.Canvas) -> None:
    pdf.saveState()
    pdf.setStrokeColor(colors.lightgrey)
    pdf.setFillColor(colors.grey)
    pdf.setLineWidth(0.25)
    pdf.setFont(REGULAR_FONT, 5)
    for x in range(0, int(PAGE_WIDTH) + 1, GRID_STEP):
        pdf.line(x, 0, x, PAGE_HEIGHT)
        pdf.drawString(x + 1, 2, str(x))
    for y in range(0, int(PAGE_HEIGHT) + 1, GRID_STEP):
        pdf.line(0, y, PAGE_WIDTH, y)
        pdf.drawString(2, y + 1, str(y))
    pdf.restoreState()


def _draw_markers(pdf: canvas.Canvas, layout: dict[str, FieldPlacement]) -> None:
    pdf.saveState()
    pdf.setStrokeColor(colors.red)
    pdf.setFillColor(colors.red)
    pdf.setFont(REGULAR_FONT, 5)
    for name, placement in layout.items():
        pdf.line(placement.x - 3, placement.y, placement.x + 3, placement.y)
        pdf.line(placement.x, placement.y - 3, placement.x, placement.y + 3)
        pdf.drawString(
            placement.x + 4,
            placement.y + 4,
            f"{name} ({placement.x:g}, {placement.y:g})",
        )
    pdf.restoreState()
