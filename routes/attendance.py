from flask import Blueprint, request, jsonify
from datetime import date
from services.attendance_service import AttendanceService
from routes.auth import token_required, roles_required, error_response, server_error
from utils.attendance_helpers import month_range, validate_period
from utils.exceptions import HRMSError

attendance_bp = Blueprint("attendance", __name__)


def _own_employee_id(current_user):
    if not current_user.employee_id:
        return None, (jsonify({
            "success": False,
            "message": "No employee record found for this user"
        }), 404)
    return current_user.employee_id, None


@attendance_bp.route("/check-in", methods=["POST"])
@token_required
def check_in(current_user):
    """Open today's attendance for the logged-in employee"""
    employee_id, err = _own_employee_id(current_user)
    if err:
        return err
    try:
        record = AttendanceService.check_in(employee_id)
        return jsonify({"success": True, "message": "Checked in", "data": record.to_dict()}), 201
    except HRMSError as e:
        return error_response(e)
    except Exception:
        return server_error("Error recording check-in")


@attendance_bp.route("/check-out", methods=["POST"])
@token_required
def check_out(current_user):
    """Close today's attendance; hours and status are derived here"""
    employee_id, err = _own_employee_id(current_user)
    if err:
        return err
    try:
        record = AttendanceService.check_out(employee_id)
        return jsonify({"success": True, "message": "Checked out", "data": record.to_dict()}), 200
    except HRMSError as e:
        return error_response(e)
    except Exception:
        return server_error("Error recording check-out")


@attendance_bp.route("/mark", methods=["POST"])
@token_required
@roles_required('admin', 'hr')
def mark_attendance(current_user):
    """
    Mark a day for an employee with an explicit status

    Expected JSON payload:
    {
        "employee_id": "EMP20260001",
        "attendance_date": "2026-01-15",
        "attendance_status": "Paid Leave",   # Present, Absent, Half Day, On Duty, Paid Leave, Holiday
        "remarks": "Approved leave"
    }
    """
    data = request.get_json(silent=True)
    if not data:
        return jsonify({"success": False, "message": "No data provided"}), 400

    employee_id = data.get('employee_id')
    if not employee_id:
        return jsonify({"success": False, "message": "Employee ID is required"}), 400

    try:
        record = AttendanceService.mark_attendance(
            employee_id=employee_id,
            attendance_date=data.get('attendance_date', date.today().isoformat()),
            attendance_status=data.get('attendance_status'),
            marked_by=current_user.login_id,
            remarks=data.get('remarks')
        )
        return jsonify({"success": True, "message": "Attendance marked successfully", "data": record.to_dict()}), 201
    except HRMSError as e:
        return error_response(e)
    except Exception:
        return server_error("Error marking attendance")


def _period_args():
    today = date.today()
    return validate_period(
        request.args.get('month', today.month),
        request.args.get('year', today.year)
    )


@attendance_bp.route("/employee/<employee_id>", methods=["GET"])
@token_required
def get_employee_attendance(current_user, employee_id):
    """Attendance rows for one month (?month=1&year=2026, defaults to current month)"""
    if not current_user.can_access_employee(employee_id):
        return jsonify({"success": False, "message": "Access denied"}), 403
    try:
        month, year = _period_args()
        start, end = month_range(year, month)
        records = AttendanceService.get_attendance_for_period(employee_id, start, end)
        return jsonify({
            "success": True,
            "data": [r.to_dict() for r in records],
            "count": len(records)
        }), 200
    except HRMSError as e:
        return error_response(e)


@attendance_bp.route("/summary/<employee_id>", methods=["GET"])
@token_required
def get_monthly_summary(current_user, employee_id):
    if not current_user.can_access_employee(employee_id):
        return jsonify({"success": False, "message": "Access denied"}), 403
    try:
        month, year = _period_args()
        summary = AttendanceService.get_monthly_summary(employee_id, month, year)
        return jsonify({"success": True, "data": summary}), 200
    except HRMSError as e:
        return error_response(e)
