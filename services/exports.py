from xml.sax.saxutils import escape

from core.imports import BytesIO, datetime
import pandas as pd
from docx import Document
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from services.pricing import as_float, order_total

COLUMNS = ["Order", "Date", "Customer", "Phone", "Address", "Status", "Source", "Items", "Total"]

FORMATS = {
    "csv": ("text/csv", "csv"),
    "excel": ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", "xlsx"),
    "pdf": ("application/pdf", "pdf"),
    "word": ("application/vnd.openxmlformats-officedocument.wordprocessingml.document", "docx"),
}


class UnsupportedFormat(ValueError):
    pass


def items_summary(order):
    parts = []
    for item in order.order_items:
        name = item.product_name_fr
        if item.color_name_fr:
            name = f"{name} ({item.color_name_fr})"
        parts.append(f"{name} x{item.quantity}")
    return ", ".join(parts)


def order_rows(orders):
    rows = []
    for order in orders:
        rows.append({
            "Order": order.id,
            "Date": order.order_date.strftime("%Y-%m-%d %H:%M") if order.order_date else "",
            "Customer": order.name,
            "Phone": order.phone,
            "Address": order.address,
            "Status": order.status,
            "Source": order.order_source,
            "Items": items_summary(order),
            "Total": as_float(order_total(order.order_items)),
        })
    return rows


def _to_csv(rows):
    buffer = BytesIO()
    pd.DataFrame(rows, columns=COLUMNS).to_csv(buffer, index=False, encoding="utf-8-sig")
    return buffer


def _to_excel(rows):
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        pd.DataFrame(rows, columns=COLUMNS).to_excel(writer, index=False, sheet_name="Orders")
    return buffer


def _to_pdf(rows, title):
    buffer = BytesIO()
    styles = getSampleStyleSheet()
    cell = styles["BodyText"]
    cell.fontSize = 8

    data = [COLUMNS]
    for row in rows:
        data.append([Paragraph(escape(str(row[col])), cell) for col in COLUMNS])

    table = Table(data, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#444444")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTSIZE", (0, 0), (-1, 0), 9),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]))

    doc = SimpleDocTemplate(buffer, pagesize=landscape(A4), title=title)
    doc.build([Paragraph(title, styles["Title"]), Spacer(1, 12), table])
    return buffer


def _to_word(rows, title):
    document = Document()
    document.add_heading(title, level=1)

    table = document.add_table(rows=1, cols=len(COLUMNS))
    table.style = "Table Grid"
    for cell, col in zip(table.rows[0].cells, COLUMNS):
        cell.text = col
    for row in rows:
        cells = table.add_row().cells
        for cell, col in zip(cells, COLUMNS):
            cell.text = str(row[col])

    buffer = BytesIO()
    document.save(buffer)
    return buffer


def export_orders(orders, fmt, now=None):
    """Render ``orders`` in ``fmt``; returns (buffer, mimetype, filename)."""
    if fmt not in FORMATS:
        raise UnsupportedFormat(f"Unsupported export format: {fmt}")

    now = now or datetime.now()
    rows = order_rows(orders)
    title = f"Orders - {now.strftime('%Y-%m-%d %H:%M')}"

    if fmt == "csv":
        buffer = _to_csv(rows)
    elif fmt == "excel":
        buffer = _to_excel(rows)
    elif fmt == "pdf":
        buffer = _to_pdf(rows, title)
    else:
        buffer = _to_word(rows, title)

    buffer.seek(0)
    mimetype, ext = FORMATS[fmt]
    return buffer, mimetype, f"orders_{now.strftime('%Y%m%d_%H%M%S')}.{ext}"
