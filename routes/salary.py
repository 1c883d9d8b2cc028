from flask import Blueprint, request, jsonify
from services.salary_service import SalaryService
from services.employee_service import get_employee_by_id
from routes.auth import token_required, error_response
from utils.exceptions import HRMSError

salary_bp = Blueprint("salary", __name__)


@salary_bp.route("/structure", methods=["GET"])
@token_required
def preview_structure(current_user):
    """Salary structure for an arbitrary wage: /api/salary/structure?wage=50000"""
    try:
        structure = SalaryService.calculate_salary_structure(request.args.get('wage'))
        return jsonify({"success": True, "data": structure}), 200
    except HRMSError as e:
        return error_response(e)


@salary_bp.route("/structure/<employee_id>", methods=["GET"])
@token_required
def employee_structure(current_user, employee_id):
    """Standard monthly structure from the employee's stored gross wage"""
    if not current_user.can_access_employee(employee_id, roles=('admin', 'hr')):
        return jsonify({"success": False, "message": "Access denied"}), 403
    try:
        employee = get_employee_by_id(employee_id)
        structure = SalaryService.calculate_salary_structure(employee.gross_wage)
        return jsonify({
            "success": True,
            "data": {"employee_id": employee.employee_id, "name": employee.full_name, **structure}
        }), 200
    except HRMSError as e:
        return error_response(e)
