# backend/services/invoice.py
import logging
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from services.errors import ValidationError

logger = logging.getLogger(__name__)

INVOICE_TYPES = ('internal', 'client')

ACCENT = colors.HexColor('#3498db')


def _money(currency, value):
    return f"{currency}{float(value or 0):.2f}"


def _styles():
    styles = getSampleStyleSheet()
    return {
        'title': ParagraphStyle(
            'InvoiceTitle',
            parent=styles['Heading1'],
            fontSize=20,
            leading=26,
            alignment=1,  # Center alignment
            textColor=ACCENT,
            spaceAfter=6
        ),
        'subtitle': ParagraphStyle(
            'InvoiceSubtitle',
            parent=styles['Heading2'],
            fontSize=13,
            alignment=1,
            spaceAfter=18
        ),
        'section': ParagraphStyle(
            'SectionTitle',
            parent=styles['Heading2'],
            fontSize=13,
            leading=17,
            spaceBefore=12,
            spaceAfter=6,
            textColor=ACCENT
        ),
        'normal': ParagraphStyle(
            'InvoiceNormal',
            parent=styles['Normal'],
            fontSize=10,
            leading=14,
            spaceAfter=3
        ),
    }


def _table(rows, col_widths, total_rows=0):
    table = Table(rows, colWidths=col_widths)
    style = [
        ('BACKGROUND', (0, 0), (-1, 0), ACCENT),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('ALIGN', (1, 0), (-1, -1), 'RIGHT'),
        ('LINEBELOW', (0, 0), (-1, -1), 0.25, colors.lightgrey),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
        ('TOPPADDING', (0, 0), (-1, -1), 6),
    ]
    if total_rows:
        style.extend([
            ('FONTNAME', (0, -total_rows), (-1, -1), 'Helvetica-Bold'),
            ('BACKGROUND', (0, -total_rows), (-1, -1), colors.HexColor('#f0f7ff')),
            ('LINEABOVE', (0, -total_rows), (-1, -total_rows), 1, ACCENT),
        ])
    table.setStyle(TableStyle(style))
    return table


def _header(elements, styles, quote, company_name, label):
    elements.append(Paragraph(f"{escape(company_name)} - {label}", styles['title']))
    elements.append(Paragraph(escape(quote.get('title') or ''), styles['subtitle']))

    details = [
        f"<b>Quote Number:</b> {escape(str(quote.get('quote_number') or ''))}",
        f"<b>Customer:</b> {escape(quote.get('customer_name') or '')}",
        f"<b>Date:</b> {escape(str(quote.get('date') or ''))}",
    ]
    if quote.get('quantity') and quote['quantity'] != 1:
        details.append(f"<b>Quantity:</b> {quote['quantity']}")
    if quote.get('notes'):
        details.append(f"<b>Notes:</b> {escape(quote['notes'])}")
    for line in details:
        elements.append(Paragraph(line, styles['normal']))
    elements.append(Spacer(1, 0.2 * inch))


def _summary_rows(currency, quote, breakdown):
    rows = [
        ['Subtotal', _money(currency, breakdown['subtotal'])],
        [f"Markup ({quote.get('markup_percent') or 0:g}%)", _money(currency, breakdown['markup_amount'])],
    ]
    if breakdown['discount_amount']:
        rows.append([f"Discount ({quote.get('discount_percent') or 0:g}%)",
                     f"-{_money(currency, breakdown['discount_amount'])}"])
    if breakdown['tax_amount']:
        rows.append([f"Tax ({quote.get('tax_rate') or 0:g}%)", _money(currency, breakdown['tax_amount'])])
    rows.append(['Total', _money(currency, breakdown['final_total'])])
    return rows


def _internal_elements(elements, styles, quote, breakdown, currency):
    elements.append(Paragraph("Filament Usage", styles['section']))
    rows = [['Material', 'Weight (g)', 'Price per gram', 'Cost']]
    for line in quote['filaments']:
        rows.append([
            line['filament_name'],
            f"{line['grams_used']:g}",
            f"{currency}{line['filament_price_per_gram']:.4f}",
            _money(currency, line['total_cost']),
        ])
    rows.append(['Total Filament Cost', '', '', _money(currency, breakdown['filament_total'])])
    elements.append(_table(rows, [200, 80, 90, 80], total_rows=1))

    if quote['hardware']:
        elements.append(Paragraph("Hardware", styles['section']))
        rows = [['Item', 'Quantity', 'Unit Price', 'Cost']]
        for line in quote['hardware']:
            rows.append([
                line['hardware_name'],
                str(line['quantity']),
                _money(currency, line['unit_price']),
                _money(currency, line['total_cost']),
            ])
        rows.append(['Total Hardware Cost', '', '', _money(currency, breakdown['hardware_total'])])
        elements.append(_table(rows, [200, 80, 90, 80], total_rows=1))

    print_setup = quote.get('print_setup')
    if print_setup:
        elements.append(Paragraph("Print Setup", styles['section']))
        rows = [
            ['Printer', 'Print Time (h)', 'Power Cost', 'Depreciation'],
            [
                print_setup['printer_name'],
                f"{print_setup['print_time'] / 60:.2f}",
                _money(currency, print_setup['power_cost']),
                _money(currency, print_setup['depreciation_cost']),
            ],
        ]
        elements.append(_table(rows, [200, 80, 90, 80]))

    labour = quote.get('labour')
    if labour:
        elements.append(Paragraph("Labour", styles['section']))
        rows = [
            ['Task', 'Time (min)'],
            ['Design', f"{labour['design_minutes']:g}"],
            ['Preparation', f"{labour['preparation_minutes']:g}"],
            ['Post Processing', f"{labour['post_processing_minutes']:g}"],
            ['Other', f"{labour['other_minutes']:g}"],
            ['Labour Rate', f"{_money(currency, labour['labour_rate_per_hour'])} per hour"],
            ['Total Labour Cost', _money(currency, labour['total_cost'])],
        ]
        elements.append(_table(rows, [290, 160], total_rows=1))

    elements.append(Paragraph("Cost Summary", styles['section']))
    rows = [
        ['Item', 'Amount'],
        ['Filament', _money(currency, breakdown['filament_total'])],
        ['Hardware', _money(currency, breakdown['hardware_total'])],
        ['Power', _money(currency, breakdown['power_cost'])],
        ['Depreciation', _money(currency, breakdown['depreciation_cost'])],
        ['Labour', _money(currency, breakdown['labour_cost'])],
    ]
    summary = _summary_rows(currency, quote, breakdown)
    elements.append(_table(rows + summary, [290, 160], total_rows=1))


def _client_elements(elements, styles, quote, breakdown, currency):
    elements.append(Paragraph("Items", styles['section']))
    rows = [['Description', 'Details']]

    materials = ', '.join(
        f"{line['filament_name']} ({line['grams_used']:g} g)" for line in quote['filaments']
    )
    if materials or quote.get('print_setup'):
        rows.append(['3D Printing', materials or '-'])
    if quote.get('labour'):
        rows.append(['Design & Handling', ''])
    for line in quote['hardware']:
        rows.append([line['hardware_name'], f"x {line['quantity']}"])
    elements.append(_table(rows, [250, 200]))

    elements.append(Spacer(1, 0.2 * inch))
    rows = [['', 'Amount'], ['Price', _money(currency, breakdown['after_markup'])]]
    if breakdown['discount_amount']:
        rows.append([f"Discount ({quote.get('discount_percent') or 0:g}%)",
                     f"-{_money(currency, breakdown['discount_amount'])}"])
    if breakdown['tax_amount']:
        rows.append([f"Tax ({quote.get('tax_rate') or 0:g}%)", _money(currency, breakdown['tax_amount'])])
    rows.append(['Total', _money(currency, breakdown['final_total'])])
    elements.append(_table(rows, [290, 160], total_rows=1))


def render_invoice(quote, invoice_type, currency='£', company_name='Prints Inc'):
    """
    Render a resolved quote as a PDF invoice.

    Args:
        quote (dict): output of quote_store.get_quote(), including 'breakdown'
        invoice_type (str): 'internal' for the full cost breakdown, 'client' for the customer copy
        currency (str): symbol prefixed to every amount
        company_name (str): shown in the document title

    Returns:
        bytes: the PDF document
    """
    if invoice_type not in INVOICE_TYPES:
        raise ValidationError('Invalid invoice type. Must be "internal" or "client"', field='type')

    breakdown = quote['breakdown']
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=54,
        leftMargin=54,
        topMargin=54,
        bottomMargin=54,
        title=f"Invoice {quote.get('quote_number')}"
    )

    styles = _styles()
    elements = []
    if invoice_type == 'internal':
        _header(elements, styles, quote, company_name, 'Internal Invoice')
        _internal_elements(elements, styles, quote, breakdown, currency)
    else:
        _header(elements, styles, quote, company_name, 'Invoice')
        _client_elements(elements, styles, quote, breakdown, currency)

    elements.append(Spacer(1, 0.3 * inch))
    elements.append(Paragraph(f"This invoice was generated by {escape(company_name)}", styles['normal']))

    doc.build(elements)
    logger.info(f"Rendered {invoice_type} invoice for quote {quote.get('quote_number')}")
    return buffer.getvalue()
