"""
PDF generator for rent receipts (quittances de loyer) using ReportLab.
Reference: art. 21 loi n°89-462: rent and charges must be shown separately.
"""
import io
from datetime import date

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import cm
from reportlab.platypus import (
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)


HEADER_COLOR = colors.HexColor("#1f4e79")
LIGHT_GRAY = colors.HexColor("#f5f5f5")
DARK_GRAY = colors.HexColor("#333333")

MONTHS_FR = [
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
]


def _styles():
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(
        name="ReceiptTitle",
        fontSize=14,
        fontName="Helvetica-Bold",
        textColor=HEADER_COLOR,
        spaceAfter=6,
    ))
    styles.add(ParagraphStyle(
        name="SectionTitle",
        fontSize=10,
        fontName="Helvetica-Bold",
        textColor=HEADER_COLOR,
        spaceBefore=8,
        spaceAfter=4,
    ))
    styles.add(ParagraphStyle(
        name="FieldLabel",
        fontSize=8,
        fontName="Helvetica",
        textColor=DARK_GRAY,
    ))
    styles.add(ParagraphStyle(
        name="Disclaimer",
        fontSize=7,
        fontName="Helvetica-Oblique",
        textColor=colors.gray,
    ))
    return styles


def period_label(period: str) -> str:
    """'2026-03' → 'mars 2026'."""
    year, month = period.split("-")
    return f"{MONTHS_FR[int(month) - 1]} {year}"


def _eur(value) -> str:
    return f"{float(value):,.2f} €".replace(",", " ")


def _header_table(period: str, styles) -> Table:
    data = [
        [
            Paragraph("<b>QUITTANCE DE LOYER</b>", styles["ReceiptTitle"]),
            Paragraph(f"Période : {period_label(period)}", styles["FieldLabel"]),
        ]
    ]
    t = Table(data, colWidths=[10 * cm, 7 * cm])
    t.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_COLOR),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 12),
        ("TOPPADDING", (0, 0), (-1, 0), 8),
        ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
        ("LEFTPADDING", (0, 0), (-1, 0), 6),
    ]))
    return t


def _kv_table(rows: list[tuple[str, str]], styles) -> Table:
    """Render a list of (label, value) pairs as a two-column table."""
    data = [[Paragraph(k, styles["FieldLabel"]), Paragraph(str(v), styles["FieldLabel"])]
            for k, v in rows]
    t = Table(data, colWidths=[10 * cm, 7 * cm])
    t.setStyle(TableStyle([
        ("GRID", (0, 0), (-1, -1), 0.5, colors.lightgrey),
        ("ROWBACKGROUNDS", (0, 0), (-1, -1), [colors.white, LIGHT_GRAY]),
        ("TOPPADDING", (0, 0), (-1, -1), 3),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ("LEFTPADDING", (0, 0), (-1, -1), 4),
    ]))
    return t


def generate_receipt_pdf(data: dict) -> bytes:
    """
    data keys: owner_name, owner_address, tenant_name, property_address,
    postal_code, city, period (YYYY-MM), rent_amount, charges_amount,
    total_amount, paid_at (date).
    """
    buf = io.BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=A4, rightMargin=2 * cm, leftMargin=2 * cm,
                            topMargin=2 * cm, bottomMargin=2 * cm)
    styles = _styles()
    paid_at: date = data["paid_at"]
    location = " ".join(p for p in (data.get("postal_code"), data.get("city")) if p)
    story = [
        _header_table(data["period"], styles),
        Spacer(1, 0.4 * cm),
        Paragraph("BAILLEUR", styles["SectionTitle"]),
        _kv_table([
            ("Nom", data["owner_name"]),
            ("Adresse", data.get("owner_address") or "Non renseignée"),
        ], styles),
        Paragraph("LOCATAIRE", styles["SectionTitle"]),
        _kv_table([
            ("Nom", data["tenant_name"]),
            ("Logement loué", f"{data.get('property_address') or ''} {location}".strip()),
        ], styles),
        Paragraph("DÉTAIL DU RÈGLEMENT", styles["SectionTitle"]),
        _kv_table([
            ("Loyer hors charges", _eur(data["rent_amount"])),
            ("Provision pour charges", _eur(data["charges_amount"])),
            ("<b>Total réglé</b>", f"<b>{_eur(data['total_amount'])}</b>"),
            ("Date du paiement", paid_at.strftime("%d/%m/%Y")),
        ], styles),
        Spacer(1, 0.5 * cm),
        Paragraph(
            f"Je soussigné(e) {data['owner_name']}, bailleur, déclare avoir reçu de "
            f"{data['tenant_name']} la somme de {_eur(data['total_amount'])} au titre du loyer "
            f"et des charges pour la période de {period_label(data['period'])}, et lui en donne quittance, "
            "sous réserve de tous mes droits.",
            styles["FieldLabel"],
        ),
        Spacer(1, 0.5 * cm),
        Paragraph(
            "La quittance annule tous les reçus qui auraient pu être établis précédemment "
            "en cas de paiement partiel du montant ci-dessus.",
            styles["Disclaimer"],
        ),
    ]
    doc.build(story)
    return buf.getvalue()
