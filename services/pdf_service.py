import calendar
import logging
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from config import COMPANY_NAME

logger = logging.getLogger(__name__)

_ONES = ["", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
         "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
         "Seventeen", "Eighteen", "Nineteen"]
_TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]


def _below_thousand(n):
    words = []
    if n >= 100:
        words.append(f"{_ONES[n // 100]} Hundred")
        n %= 100
    if n >= 20:
        words.append(_TENS[n // 10] + (f" {_ONES[n % 10]}" if n % 10 else ""))
    elif n > 0:
        words.append(_ONES[n])
    return " ".join(words)


def number_to_words(num):
    """Whole rupees in words, Indian grouping (crore, lakh, thousand)"""
    num = int(round(num))
    if num == 0:
        return "Zero"
    if num < 0:
        return "Minus " + number_to_words(-num)

    parts = []
    for divisor, label in ((10000000, "Crore"), (100000, "Lakh"), (1000, "Thousand")):
        chunk = num // divisor
        if chunk:
            # Crores can exceed 99, so spell the chunk recursively
            spelled = number_to_words(chunk) if chunk >= 1000 else _below_thousand(chunk)
            parts.append(f"{spelled} {label}")
        num %= divisor
    if num:
        parts.append(_below_thousand(num))
    return " ".join(parts)


def format_inr(amount):
    """12,34,567.89 style grouping"""
    negative = amount < 0
    whole, fraction = f"{abs(amount):.2f}".split(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    return f"{'-' if negative else ''}{whole}.{fraction}"


def generate_payslip_pdf(record, employee) -> BytesIO:
    """
    Render a payslip for one PayrollRecord.

    Args:
        record: PayrollRecord to print
        employee: Employee the record belongs to (name, department, designation)

    Returns:
        BytesIO positioned at the start of the PDF document
    """
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=12 * mm,
        rightMargin=12 * mm,
        topMargin=12 * mm,
        bottomMargin=12 * mm,
        title=f"Payslip {employee.employee_id} {record.month:02d}-{record.year}"
    )

    styles = getSampleStyleSheet()
    company_style = ParagraphStyle(
        'CompanyStyle',
        parent=styles['Normal'],
        fontSize=14,
        spaceAfter=3,
        alignment=1,  # Center
        fontName='Helvetica-Bold'
    )
    header_style = ParagraphStyle(
        'PayslipHeaderStyle',
        parent=styles['Normal'],
        fontSize=10,
        spaceAfter=8,
        alignment=1,
        fontName='Helvetica-Bold'
    )
    net_style = ParagraphStyle(
        'NetSalaryStyle',
        parent=styles['Normal'],
        fontSize=11,
        spaceBefore=8,
        alignment=1,
        fontName='Helvetica-Bold'
    )
    words_style = ParagraphStyle(
        'WordsStyle',
        parent=styles['Normal'],
        fontSize=8,
        spaceBefore=2,
        alignment=1,
        fontName='Helvetica-Oblique'
    )

    period = f"{calendar.month_name[record.month]} {record.year}"
    story = [
        Paragraph(COMPANY_NAME, company_style),
        Paragraph(f"Payslip for {period}", header_style),
    ]

    info = Table([
        ["Employee ID", employee.employee_id, "Name", employee.full_name],
        ["Department", employee.department or "-", "Designation", employee.designation or "-"],
        ["Days in Month", str(record.total_days), "Payable Days", f"{record.payable_days:g}"],
        ["Status", record.status, "Gross Wage", format_inr(record.gross_wage)],
    ], colWidths=[32 * mm, 55 * mm, 32 * mm, 55 * mm])
    info.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (-1, -1), 'Helvetica'),
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTNAME', (2, 0), (2, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
    ]))
    story.extend([info, Spacer(1, 6 * mm)])

    earnings = [
        ("Basic", record.basic),
        ("HRA", record.hra),
        ("Standard Allowance", record.standard_allowance),
        ("Performance Bonus", record.performance_bonus),
        ("Leave Travel Allowance", record.lta),
        ("Fixed Allowance", record.fixed_allowance),
    ]
    deductions = [
        ("Provident Fund", record.pf),
        ("Professional Tax", record.professional_tax),
    ]

    rows = [["Earnings", "Amount", "Deductions", "Amount"]]
    for i, (label, amount) in enumerate(earnings):
        d_label, d_amount = deductions[i] if i < len(deductions) else ("", None)
        rows.append([label, format_inr(amount), d_label, format_inr(d_amount) if d_amount is not None else ""])
    rows.append(["Total Earnings", format_inr(record.gross_earnings),
                 "Total Deductions", format_inr(record.total_deductions)])

    breakdown = Table(rows, colWidths=[50 * mm, 37 * mm, 50 * mm, 37 * mm])
    breakdown.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
        ('FONTNAME', (0, 1), (-1, -2), 'Helvetica'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('BACKGROUND', (0, 0), (-1, 0), colors.lightgrey),
        ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
        ('ALIGN', (3, 0), (3, -1), 'RIGHT'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
    ]))
    story.append(breakdown)

    story.append(Paragraph(f"Net Salary: Rs. {format_inr(record.net_salary)}", net_style))
    story.append(Paragraph(f"Rupees {number_to_words(record.net_salary)} Only", words_style))

    doc.build(story)
    buffer.seek(0)
    logger.info(f"Payslip generated for {employee.employee_id} {record.month:02d}/{record.year}")
    return buffer
