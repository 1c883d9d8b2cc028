import calendar
import logging
from io import BytesIO

import pandas as pd

from models.employee import Employee
from services.salary_service import SalaryService

logger = logging.getLogger(__name__)

REGISTER_COLUMNS = [
    'Employee ID', 'Employee Name', 'Department', 'Total Days', 'Payable Days',
    'Gross Wage', 'Basic', 'HRA', 'Standard Allowance', 'Performance Bonus',
    'LTA', 'Fixed Allowance', 'Total Earnings', 'PF', 'Professional Tax',
    'Total Deductions', 'Net Salary', 'Status',
]


def build_payroll_register(month, year) -> pd.DataFrame:
    """One row per processed payroll record for the month"""
    records = SalaryService.list_payrolls(month, year)
    employees = {
        e.employee_id: e
        for e in Employee.query.filter(Employee.employee_id.in_([r.employee_id for r in records])).all()
    } if records else {}

    rows = []
    for r in records:
        emp = employees.get(r.employee_id)
        rows.append({
            'Employee ID': r.employee_id,
            'Employee Name': emp.full_name if emp else '',
            'Department': (emp.department if emp else None) or '',
            'Total Days': r.total_days,
            'Payable Days': r.payable_days,
            'Gross Wage': r.gross_wage,
            'Basic': r.basic,
            'HRA': r.hra,
            'Standard Allowance': r.standard_allowance,
            'Performance Bonus': r.performance_bonus,
            'LTA': r.lta,
            'Fixed Allowance': r.fixed_allowance,
            'Total Earnings': r.gross_earnings,
            'PF': r.pf,
            'Professional Tax': r.professional_tax,
            'Total Deductions': r.total_deductions,
            'Net Salary': r.net_salary,
            'Status': r.status,
        })
    return pd.DataFrame(rows, columns=REGISTER_COLUMNS)


def export_payroll_register(month, year):
    """
    Payroll register for a month as an .xlsx workbook.

    Returns (BytesIO, filename).
    """
    df = build_payroll_register(month, year)

    output = BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        df.to_excel(writer, index=False, sheet_name='Payroll')
        worksheet = writer.sheets['Payroll']

        # Auto-adjust column widths
        for idx, column in enumerate(df.columns, 1):
            if len(df) > 0:
                column_length = max(df[column].astype(str).map(len).max(), len(str(column)))
            else:
                column_length = len(str(column))
            col_letter = worksheet.cell(1, idx).column_letter
            worksheet.column_dimensions[col_letter].width = min(column_length + 2, 24)

    output.seek(0)
    filename = f"payroll_register_{calendar.month_name[int(month)]}_{year}.xlsx"
    logger.info(f"Payroll register exported for {int(month):02d}/{year}: {len(df)} rows")
    return output, filename
