from models import db
from models.attendance import Attendance
from models.employee import Employee
from datetime import datetime, timedelta
from sqlalchemy.exc import IntegrityError
from utils.attendance_helpers import (
    parse_date,
    parse_datetime,
    to_naive_local,
    month_range,
    validate_period,
    days_in_month,
)
from utils.constants import AttendanceStatus, DEFAULT_POLICY
from utils.exceptions import (
    AttendanceConflictError,
    AttendanceNotFoundError,
    EmployeeNotFoundError,
    InvalidAttendanceStatusError,
)
import logging

logger = logging.getLogger(__name__)

# 'Half Day', 'HalfDay', 'HALF_DAY' and 'half day' all name the same status
_STATUS_LOOKUP = {s.value.replace(' ', '').lower(): s for s in AttendanceStatus}


def parse_attendance_status(value):
    """Map a stored or submitted status onto AttendanceStatus; None stays None"""
    if value is None or isinstance(value, AttendanceStatus):
        return value
    key = str(value).replace(' ', '').replace('_', '').lower()
    if not key:
        return None
    try:
        return _STATUS_LOOKUP[key]
    except KeyError:
        raise InvalidAttendanceStatusError(f"Unknown attendance status: {value}")


def _record_status(record):
    if record is None or isinstance(record, str):
        return parse_attendance_status(record)
    if isinstance(record, dict):
        value = record.get('status')
        if value is None:
            value = record.get('attendance_status')
        return parse_attendance_status(value)
    value = getattr(record, 'attendance_status', None)
    if value is None:
        value = getattr(record, 'status', None)
    return parse_attendance_status(value)


class AttendanceService:

    @staticmethod
    def calculate_work_hours(check_in_time, check_out_time):
        """
        Hours between check-in and check-out, rounded to 2 decimals.
        Missing timestamps give 0; a check-out before check-in is not rejected
        and gives a negative figure.
        """
        check_in_time = parse_datetime(check_in_time)
        check_out_time = parse_datetime(check_out_time)
        if not check_in_time or not check_out_time:
            return 0
        if (check_in_time.tzinfo is None) != (check_out_time.tzinfo is None):
            check_in_time = to_naive_local(check_in_time)
            check_out_time = to_naive_local(check_out_time)

        time_diff = check_out_time - check_in_time
        return round(time_diff.total_seconds() / 3600, 2)

    @staticmethod
    def determine_attendance_status(work_hours, policy=DEFAULT_POLICY):
        """Classify a day from its hours: full day, half day or absent"""
        if work_hours is None:
            return AttendanceStatus.ABSENT
        if work_hours >= policy.full_day_hours:
            return AttendanceStatus.PRESENT
        if work_hours >= policy.half_day_hours:
            return AttendanceStatus.HALF_DAY
        return AttendanceStatus.ABSENT

    @staticmethod
    def calculate_payable_days(records, policy=DEFAULT_POLICY):
        """
        Sum the payable-day weight of every record in a period.

        Records can be Attendance rows, dicts with a 'status' or
        'attendance_status' key, or plain status values. Unset statuses count
        zero; unknown ones raise InvalidAttendanceStatusError.
        """
        total = 0.0
        for record in records:
            status = _record_status(record)
            if status is None:
                continue
            total += policy.day_weight(status)
        return total

    @staticmethod
    def _get_employee(employee_id):
        employee = Employee.query.filter_by(employee_id=employee_id).first()
        if not employee:
            raise EmployeeNotFoundError(f"Employee {employee_id} not found")
        return employee

    @staticmethod
    def _find_day(employee_id, attendance_date):
        return Attendance.query.filter_by(
            employee_id=employee_id,
            attendance_date=attendance_date
        ).first()

    @staticmethod
    def check_in(employee_id, at=None):
        """Open today's attendance record for an employee"""
        at = to_naive_local(parse_datetime(at)) or datetime.now()
        AttendanceService._get_employee(employee_id)

        if AttendanceService._find_day(employee_id, at.date()):
            raise AttendanceConflictError("Attendance already recorded for this date")

        record = Attendance(
            employee_id=employee_id,
            attendance_date=at.date(),
            check_in_time=at,
            work_hours=0.0,
            marked_by='employee'
        )
        db.session.add(record)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise AttendanceConflictError("Attendance already recorded for this date")

        logger.info(f"Check-in recorded for {employee_id} at {at.isoformat()}")
        return record

    @staticmethod
    def check_out(employee_id, at=None, policy=DEFAULT_POLICY):
        """Close today's record: set check-out time, hours and status"""
        at = to_naive_local(parse_datetime(at)) or datetime.now()

        record = AttendanceService._find_day(employee_id, at.date())
        if not record:
            # Night shift: close the day that was opened before midnight
            previous = AttendanceService._find_day(employee_id, at.date() - timedelta(days=1))
            if previous and previous.check_in_time and not previous.is_closed:
                record = previous
        if not record or not record.check_in_time:
            raise AttendanceNotFoundError("No check-in found for this date")
        if record.is_closed:
            raise AttendanceConflictError("Attendance for this date is already closed")

        work_hours = AttendanceService.calculate_work_hours(record.check_in_time, at)
        status = AttendanceService.determine_attendance_status(work_hours, policy)

        record.check_out_time = at
        record.work_hours = work_hours
        record.attendance_status = status.value
        db.session.commit()

        logger.info(f"Check-out recorded for {employee_id}: {work_hours}h, {status.value}")
        return record

    @staticmethod
    def mark_attendance(employee_id, attendance_date, attendance_status, marked_by=None, remarks=None):
        """HR marks a day with an explicit status (on duty, paid leave, holiday...)"""
        attendance_date = parse_date(attendance_date)
        status = parse_attendance_status(attendance_status)
        if status is None:
            raise InvalidAttendanceStatusError("Attendance status is required")
        AttendanceService._get_employee(employee_id)

        if AttendanceService._find_day(employee_id, attendance_date):
            raise AttendanceConflictError("Attendance already recorded for this date")

        record = Attendance(
            employee_id=employee_id,
            attendance_date=attendance_date,
            attendance_status=status.value,
            work_hours=0.0,
            remarks=remarks,
            marked_by=marked_by or 'admin'
        )
        db.session.add(record)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise AttendanceConflictError("Attendance already recorded for this date")

        logger.info(f"Attendance marked for {employee_id} on {attendance_date}: {status.value}")
        return record

    @staticmethod
    def get_attendance_for_period(employee_id, start_date, end_date):
        return Attendance.query.filter(
            Attendance.employee_id == employee_id,
            Attendance.attendance_date >= start_date,
            Attendance.attendance_date <= end_date
        ).order_by(Attendance.attendance_date.asc()).all()

    @staticmethod
    def get_monthly_summary(employee_id, month, year, policy=DEFAULT_POLICY):
        """Per-status counts, hours and payable days for one employee-month"""
        month, year = validate_period(month, year)
        AttendanceService._get_employee(employee_id)

        start, end = month_range(year, month)
        records = AttendanceService.get_attendance_for_period(employee_id, start, end)

        counts = {s.value: 0 for s in AttendanceStatus}
        unmarked = 0
        total_hours = 0.0
        for record in records:
            status = _record_status(record)
            if status is None:
                unmarked += 1
            else:
                counts[status.value] += 1
            total_hours += record.work_hours or 0.0

        return {
            'employee_id': employee_id,
            'month': month,
            'year': year,
            'total_days': days_in_month(year, month),
            'recorded_days': len(records),
            'status_counts': counts,
            'unmarked_days': unmarked,
            'total_work_hours': round(total_hours, 2),
            'payable_days': AttendanceService.calculate_payable_days(records, policy)
        }
