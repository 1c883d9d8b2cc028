from datetime import date, datetime
from types import SimpleNamespace

import pytest

from models.attendance import Attendance
from services.attendance_service import AttendanceService, parse_attendance_status
from utils.constants import AttendanceStatus
from utils.exceptions import (
    AttendanceConflictError,
    AttendanceNotFoundError,
    EmployeeNotFoundError,
    InvalidAttendanceStatusError,
)


class TestCalculateWorkHours:

    def test_full_day(self):
        assert AttendanceService.calculate_work_hours(
            datetime(2026, 1, 5, 9, 0), datetime(2026, 1, 5, 17, 0)
        ) == 8.0

    def test_rounds_to_two_decimals(self):
        # 20 minutes
        assert AttendanceService.calculate_work_hours(
            datetime(2026, 1, 5, 9, 0), datetime(2026, 1, 5, 9, 20)
        ) == 0.33

    def test_missing_timestamp_is_zero(self):
        assert AttendanceService.calculate_work_hours(None, datetime(2026, 1, 5, 17, 0)) == 0
        assert AttendanceService.calculate_work_hours(datetime(2026, 1, 5, 9, 0), None) == 0
        assert AttendanceService.calculate_work_hours(None, None) == 0

    def test_check_out_before_check_in_is_negative(self):
        assert AttendanceService.calculate_work_hours(
            datetime(2026, 1, 5, 17, 0), datetime(2026, 1, 5, 9, 0)
        ) == -8.0

    def test_iso_strings(self):
        assert AttendanceService.calculate_work_hours(
            "2026-01-05T09:00:00Z", "2026-01-05T13:30:00Z"
        ) == 4.5


class TestDetermineAttendanceStatus:

    @pytest.mark.parametrize("hours,expected", [
        (8.0, AttendanceStatus.PRESENT),
        (10.25, AttendanceStatus.PRESENT),
        (7.99, AttendanceStatus.HALF_DAY),
        (4.0, AttendanceStatus.HALF_DAY),
        (3.99, AttendanceStatus.ABSENT),
        (0, AttendanceStatus.ABSENT),
        (-2.5, AttendanceStatus.ABSENT),
        (None, AttendanceStatus.ABSENT),
    ])
    def test_thresholds(self, hours, expected):
        assert AttendanceService.determine_attendance_status(hours) == expected

    def test_status_values_match_stored_strings(self):
        assert AttendanceService.determine_attendance_status(8.0) == 'Present'
        assert AttendanceService.determine_attendance_status(5) == 'Half Day'


class TestCalculatePayableDays:

    def test_mixed_statuses(self):
        records = [
            {'status': 'Present'},
            {'status': 'HalfDay'},
            {'status': 'Absent'},
            {'status': 'PaidLeave'},
        ]
        assert AttendanceService.calculate_payable_days(records) == 2.5

    def test_on_duty_and_holiday(self):
        records = [{'status': 'On Duty'}, {'status': 'Holiday'}, {'status': 'Half Day'}]
        assert AttendanceService.calculate_payable_days(records) == 1.5

    def test_unset_status_counts_zero(self):
        records = [{'status': None}, {'attendance_status': None}, {}, None, '']
        assert AttendanceService.calculate_payable_days(records) == 0

    def test_accepts_rows_and_plain_values(self):
        records = [
            SimpleNamespace(attendance_status='Present'),
            AttendanceStatus.PAID_LEAVE,
            'Half Day',
            {'attendance_status': 'On Duty'},
        ]
        assert AttendanceService.calculate_payable_days(records) == 3.5

    def test_order_independent(self):
        records = [{'status': s} for s in ['Present', 'Half Day', 'Absent', 'Paid Leave', 'On Duty']]
        assert AttendanceService.calculate_payable_days(records) == \
            AttendanceService.calculate_payable_days(list(reversed(records)))

    def test_empty_period(self):
        assert AttendanceService.calculate_payable_days([]) == 0

    def test_unknown_status_is_rejected(self):
        with pytest.raises(InvalidAttendanceStatusError):
            AttendanceService.calculate_payable_days([{'status': 'Present'}, {'status': 'Sabbatical'}])

    def test_status_aliases(self):
        assert parse_attendance_status('HALF_DAY') == AttendanceStatus.HALF_DAY
        assert parse_attendance_status('paid leave') == AttendanceStatus.PAID_LEAVE
        assert parse_attendance_status('OnDuty') == AttendanceStatus.ON_DUTY


class TestCheckInCheckOut:

    def test_full_lifecycle(self, make_employee):
        make_employee("EMP20260001")

        record = AttendanceService.check_in("EMP20260001", at=datetime(2026, 1, 5, 9, 0))
        assert record.attendance_date == date(2026, 1, 5)
        assert record.attendance_status is None

        record = AttendanceService.check_out("EMP20260001", at=datetime(2026, 1, 5, 17, 30))
        assert record.work_hours == 8.5
        assert record.attendance_status == 'Present'

    def test_short_day_is_half_day(self, make_employee):
        make_employee("EMP20260001")
        AttendanceService.check_in("EMP20260001", at=datetime(2026, 1, 6, 9, 0))
        record = AttendanceService.check_out("EMP20260001", at=datetime(2026, 1, 6, 14, 0))
        assert record.attendance_status == 'Half Day'

    def test_second_check_in_conflicts(self, make_employee):
        make_employee("EMP20260001")
        AttendanceService.check_in("EMP20260001", at=datetime(2026, 1, 5, 9, 0))
        with pytest.raises(AttendanceConflictError) as exc:
            AttendanceService.check_in("EMP20260001", at=datetime(2026, 1, 5, 10, 0))
        assert exc.value.retryable

    def test_check_out_without_check_in(self, make_employee):
        make_employee("EMP20260001")
        with pytest.raises(AttendanceNotFoundError):
            AttendanceService.check_out("EMP20260001", at=datetime(2026, 1, 5, 17, 0))

    def test_closed_day_is_immutable(self, make_employee):
        make_employee("EMP20260001")
        AttendanceService.check_in("EMP20260001", at=datetime(2026, 1, 5, 9, 0))
        AttendanceService.check_out("EMP20260001", at=datetime(2026, 1, 5, 17, 0))
        with pytest.raises(AttendanceConflictError):
            AttendanceService.check_out("EMP20260001", at=datetime(2026, 1, 5, 19, 0))

    def test_night_shift_closes_previous_day(self, make_employee):
        make_employee("EMP20260001")
        AttendanceService.check_in("EMP20260001", at=datetime(2026, 1, 5, 22, 0))
        record = AttendanceService.check_out("EMP20260001", at=datetime(2026, 1, 6, 6, 30))
        assert record.attendance_date == date(2026, 1, 5)
        assert record.work_hours == 8.5
        assert record.attendance_status == 'Present'

    def test_closed_previous_day_is_not_reopened(self, make_employee):
        make_employee("EMP20260001")
        AttendanceService.check_in("EMP20260001", at=datetime(2026, 1, 5, 9, 0))
        AttendanceService.check_out("EMP20260001", at=datetime(2026, 1, 5, 17, 0))
        with pytest.raises(AttendanceNotFoundError):
            AttendanceService.check_out("EMP20260001", at=datetime(2026, 1, 6, 8, 0))

    def test_concurrent_check_in_becomes_conflict(self, make_employee, monkeypatch):
        make_employee("EMP20260001")
        AttendanceService.check_in("EMP20260001", at=datetime(2026, 1, 5, 9, 0))
        monkeypatch.setattr(AttendanceService, "_find_day", staticmethod(lambda *args: None))

        with pytest.raises(AttendanceConflictError) as exc:
            AttendanceService.check_in("EMP20260001", at=datetime(2026, 1, 5, 9, 1))
        assert exc.value.retryable
        assert Attendance.query.filter_by(employee_id="EMP20260001").count() == 1

    def test_unknown_employee(self, app):
        with pytest.raises(EmployeeNotFoundError):
            AttendanceService.check_in("EMP20269999", at=datetime(2026, 1, 5, 9, 0))


class TestMarkAndSummary:

    def test_mark_attendance(self, make_employee):
        make_employee("EMP20260001")
        record = AttendanceService.mark_attendance("EMP20260001", "2026-01-07", "Paid Leave", marked_by="ADM20260001")
        assert record.attendance_status == 'Paid Leave'
        assert record.marked_by == "ADM20260001"

        with pytest.raises(AttendanceConflictError):
            AttendanceService.mark_attendance("EMP20260001", "2026-01-07", "On Duty")

    def test_concurrent_mark_becomes_conflict(self, make_employee, monkeypatch):
        make_employee("EMP20260001")
        AttendanceService.mark_attendance("EMP20260001", "2026-01-07", "Present")
        monkeypatch.setattr(AttendanceService, "_find_day", staticmethod(lambda *args: None))

        with pytest.raises(AttendanceConflictError):
            AttendanceService.mark_attendance("EMP20260001", "2026-01-07", "Holiday")
        assert Attendance.query.filter_by(employee_id="EMP20260001").count() == 1

    def test_mark_requires_known_status(self, make_employee):
        make_employee("EMP20260001")
        with pytest.raises(InvalidAttendanceStatusError):
            AttendanceService.mark_attendance("EMP20260001", "2026-01-07", "Late")
        with pytest.raises(InvalidAttendanceStatusError):
            AttendanceService.mark_attendance("EMP20260001", "2026-01-07", None)

    def test_monthly_summary(self, make_employee, db):
        make_employee("EMP20260001")
        AttendanceService.check_in("EMP20260001", at=datetime(2026, 2, 2, 9, 0))
        AttendanceService.check_out("EMP20260001", at=datetime(2026, 2, 2, 17, 0))
        AttendanceService.mark_attendance("EMP20260001", "2026-02-03", "Half Day")
        AttendanceService.mark_attendance("EMP20260001", "2026-02-04", "Holiday")
        AttendanceService.check_in("EMP20260001", at=datetime(2026, 2, 5, 9, 0))
        # Outside the month
        AttendanceService.mark_attendance("EMP20260001", "2026-03-01", "Present")

        summary = AttendanceService.get_monthly_summary("EMP20260001", 2, 2026)
        assert summary['total_days'] == 28
        assert summary['recorded_days'] == 4
        assert summary['unmarked_days'] == 1
        assert summary['status_counts']['Present'] == 1
        assert summary['status_counts']['Holiday'] == 1
        assert summary['total_work_hours'] == 8.0
        assert summary['payable_days'] == 1.5

    def test_period_query_is_ordered(self, make_employee):
        make_employee("EMP20260001")
        AttendanceService.mark_attendance("EMP20260001", "2026-01-09", "Present")
        AttendanceService.mark_attendance("EMP20260001", "2026-01-02", "Present")
        rows = AttendanceService.get_attendance_for_period("EMP20260001", date(2026, 1, 1), date(2026, 1, 31))
        assert [r.attendance_date.day for r in rows] == [2, 9]
        assert all(isinstance(r, Attendance) for r in rows)
