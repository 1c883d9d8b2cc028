from models import db
from models.employee import Employee
from models.payroll import PayrollRecord
from services.attendance_service import AttendanceService
from datetime import datetime
from sqlalchemy.exc import IntegrityError
from utils.attendance_helpers import month_range, days_in_month, validate_period
from utils.constants import DEFAULT_POLICY, EARNING_COMPONENTS, PayrollStatus, PAYROLL_STATUS_TRANSITIONS
from utils.exceptions import (
    DuplicatePayrollError,
    EmployeeNotFoundError,
    InvalidStatusTransitionError,
    InvalidWageError,
    PayrollNotFoundError,
    ValidationError,
)
from utils.validators import coerce_wage
import logging

logger = logging.getLogger(__name__)


def _money(value):
    return round(value, 2)


class SalaryService:

    @staticmethod
    def _standard_components(wage, policy):
        """Unrounded monthly earnings and PF for a gross wage"""
        basic = wage * policy.basic_rate
        hra = basic * policy.hra_rate
        standard_allowance = policy.standard_allowance
        performance_bonus = basic * policy.performance_bonus_rate
        lta = basic * policy.lta_rate

        # Balancing figure, clamped so low wages never produce a negative line
        allocated = basic + hra + standard_allowance + performance_bonus + lta
        fixed_allowance = max(0.0, wage - allocated)

        components = {
            'basic': basic,
            'hra': hra,
            'standard_allowance': standard_allowance,
            'performance_bonus': performance_bonus,
            'lta': lta,
            'fixed_allowance': fixed_allowance,
        }
        return components, basic * policy.pf_rate

    @staticmethod
    def calculate_salary_structure(gross_wage, policy=DEFAULT_POLICY):
        """
        Fixed monthly salary structure derived from a gross wage.

        Earnings are payslip line items only: net salary is gross wage minus
        deductions, not the sum of the (possibly clamped) components.
        Figures are rounded to 2 decimals on output.

        Raises InvalidWageError for a missing, non-numeric or non-positive wage.
        """
        wage = coerce_wage(gross_wage)
        components, pf = SalaryService._standard_components(wage, policy)

        professional_tax = policy.professional_tax
        total_deductions = pf + professional_tax
        net_salary = wage - total_deductions

        return {
            'gross_wage': _money(wage),
            'components': {name: _money(components[name]) for name in EARNING_COMPONENTS},
            'deductions': {
                'pf': _money(pf),
                'professional_tax': _money(professional_tax),
                'total_deductions': _money(total_deductions)
            },
            'net_salary': _money(net_salary)
        }

    @staticmethod
    def compute_monthly_payroll(gross_wage, payable_days, total_days, policy=DEFAULT_POLICY):
        """
        Pro-rate the standard structure by payable days.

        PF is recomputed from the pro-rated basic; professional tax is never
        pro-rated. Net pay here is the sum of pro-rated earnings minus
        deductions.
        """
        wage = coerce_wage(gross_wage)
        try:
            total_days = int(total_days)
            payable_days = float(payable_days)
        except (TypeError, ValueError):
            raise ValidationError("Payable days and total days must be numbers")
        if total_days <= 0:
            raise ValidationError("Total days in month must be positive")
        if not 0 <= payable_days <= total_days:
            raise ValidationError(f"Payable days must be between 0 and {total_days}")

        components, _ = SalaryService._standard_components(wage, policy)
        factor = payable_days / total_days

        earnings = {name: components[name] * factor for name in EARNING_COMPONENTS}
        gross_earnings = sum(earnings.values())

        pf = earnings['basic'] * policy.pf_rate
        professional_tax = policy.professional_tax
        total_deductions = pf + professional_tax
        net_salary = gross_earnings - total_deductions

        return {
            'gross_wage': _money(wage),
            'total_days': total_days,
            'payable_days': payable_days,
            'proration_factor': round(factor, 4),
            'earnings': {name: _money(earnings[name]) for name in EARNING_COMPONENTS},
            'gross_earnings': _money(gross_earnings),
            'deductions': {
                'pf': _money(pf),
                'professional_tax': _money(professional_tax),
                'total_deductions': _money(total_deductions)
            },
            'net_salary': _money(net_salary)
        }

    @staticmethod
    def _existing_payroll(employee_id, month, year):
        return PayrollRecord.query.filter_by(employee_id=employee_id, month=month, year=year).first()

    @staticmethod
    def process_payroll(employee_id, month, year, processed_by=None, policy=DEFAULT_POLICY):
        """
        Compute and store one employee's payroll for a month.

        Raises DuplicatePayrollError when the period was already processed,
        including when a concurrent run wins the insert.
        """
        month, year = validate_period(month, year)

        employee = Employee.query.filter_by(employee_id=employee_id).first()
        if not employee:
            raise EmployeeNotFoundError(f"Employee {employee_id} not found")

        if SalaryService._existing_payroll(employee_id, month, year):
            raise DuplicatePayrollError(f"Payroll for {employee_id} {month:02d}/{year} already exists")

        total_days = days_in_month(year, month)
        first_day, last_day = month_range(year, month)
        records = AttendanceService.get_attendance_for_period(employee_id, first_day, last_day)
        payable_days = AttendanceService.calculate_payable_days(records, policy)

        result = SalaryService.compute_monthly_payroll(employee.gross_wage, payable_days, total_days, policy)
        earnings = result['earnings']
        deductions = result['deductions']

        record = PayrollRecord(
            employee_id=employee_id,
            month=month,
            year=year,
            total_days=total_days,
            payable_days=payable_days,
            gross_wage=result['gross_wage'],
            basic=earnings['basic'],
            hra=earnings['hra'],
            standard_allowance=earnings['standard_allowance'],
            performance_bonus=earnings['performance_bonus'],
            lta=earnings['lta'],
            fixed_allowance=earnings['fixed_allowance'],
            gross_earnings=result['gross_earnings'],
            pf=deductions['pf'],
            professional_tax=deductions['professional_tax'],
            total_deductions=deductions['total_deductions'],
            net_salary=result['net_salary'],
            status=PayrollStatus.PROCESSED.value,
            processed_by=processed_by
        )
        db.session.add(record)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise DuplicatePayrollError(f"Payroll for {employee_id} {month:02d}/{year} already exists")

        logger.info(
            f"Payroll processed for {employee_id} {month:02d}/{year}: "
            f"{payable_days}/{total_days} days, net {record.net_salary}"
        )
        return record

    @staticmethod
    def run_monthly_payroll(month, year, processed_by=None, policy=DEFAULT_POLICY):
        """Process every active employee for a month, collecting per-employee outcomes"""
        month, year = validate_period(month, year)

        employees = Employee.query.filter_by(employment_status='Active').order_by(Employee.employee_id).all()

        processed, skipped, failed = [], [], []
        for employee in employees:
            try:
                record = SalaryService.process_payroll(employee.employee_id, month, year, processed_by, policy)
                processed.append(record.to_dict())
            except DuplicatePayrollError:
                skipped.append(employee.employee_id)
            except InvalidWageError as e:
                failed.append({'employee_id': employee.employee_id, 'message': e.message})

        if skipped:
            logger.warning(f"Payroll run {month:02d}/{year}: {len(skipped)} employees already processed")
        logger.info(
            f"Payroll run {month:02d}/{year} finished: "
            f"{len(processed)} processed, {len(skipped)} skipped, {len(failed)} failed"
        )
        return {
            'month': month,
            'year': year,
            'processed': processed,
            'skipped': skipped,
            'failed': failed
        }

    @staticmethod
    def get_payroll(record_id):
        record = db.session.get(PayrollRecord, record_id)
        if not record:
            raise PayrollNotFoundError(f"Payroll record {record_id} not found")
        return record

    @staticmethod
    def update_payroll_status(record_id, new_status, actor=None):
        try:
            target = PayrollStatus(new_status)
        except ValueError:
            raise ValidationError(f"Invalid status provided: {new_status}")

        record = SalaryService.get_payroll(record_id)
        current = PayrollStatus(record.status)
        if target not in PAYROLL_STATUS_TRANSITIONS[current]:
            raise InvalidStatusTransitionError(
                f"Cannot move payroll from {current.value} to {target.value}"
            )

        record.status = target.value
        record.updated_by = actor
        if target == PayrollStatus.PAID:
            record.payment_date = datetime.now()
        db.session.commit()

        logger.info(f"Payroll {record_id} status {current.value} -> {target.value} by {actor}")
        return record

    @staticmethod
    def list_payrolls(month=None, year=None):
        query = PayrollRecord.query
        if month is not None and year is None:
            raise ValidationError("Year is required when filtering by month")
        if month is not None:
            month, year = validate_period(month, year)
            query = query.filter_by(month=month, year=year)
        elif year is not None:
            _, year = validate_period(1, year)
            query = query.filter_by(year=year)
        return query.order_by(
            PayrollRecord.year.desc(),
            PayrollRecord.month.desc(),
            PayrollRecord.employee_id.asc()
        ).all()

    @staticmethod
    def get_employee_payrolls(employee_id):
        return PayrollRecord.query.filter_by(employee_id=employee_id).order_by(
            PayrollRecord.year.desc(),
            PayrollRecord.month.desc()
        ).all()
