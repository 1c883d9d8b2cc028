from flask import Blueprint, request, jsonify
from services.employee_service import (
    create_employee,
    create_admin_user,
    get_employee_by_id,
    get_all_employees,
    update_gross_wage,
)
from routes.auth import token_required, roles_required, error_response, server_error
from utils.exceptions import HRMSError
from utils.validators import validate_employee_data, validate_admin_data

employees_bp = Blueprint("employees", __name__)


@employees_bp.route("/", methods=["POST"])
@token_required
@roles_required('admin', 'hr')
def register_employee(current_user):
    """
    Create an employee and its login account

    Example JSON:
    {
      "first_name": "Aman",
      "last_name": "Sharma",
      "email": "aman.sharma@company.com",
      "department": "Engineering",
      "designation": "Software Engineer",
      "hire_date": "2026-01-05",
      "gross_wage": 50000
    }

    The response carries the generated employee id and a temporary password.
    """
    payload = request.get_json(silent=True) or {}

    errors = validate_employee_data(payload)
    if errors:
        return jsonify({"success": False, "message": "; ".join(errors), "errors": errors}), 400

    try:
        emp, temp_password = create_employee(payload, created_by=current_user.login_id)
        return jsonify({
            "success": True,
            "message": "Employee registered successfully",
            "data": {
                **emp.to_dict(),
                "login_id": emp.employee_id,
                "temporary_password": temp_password
            }
        }), 201
    except HRMSError as e:
        return error_response(e)
    except Exception:
        return server_error("Error registering employee")


@employees_bp.route("/", methods=["GET"])
@token_required
@roles_required('admin', 'hr', 'manager')
def list_employees(current_user):
    page = request.args.get('page', 1, type=int)
    per_page = min(request.args.get('per_page', 20, type=int), 100)
    department = request.args.get('department')

    pagination = get_all_employees(page=page, per_page=per_page, department=department)
    return jsonify({
        "success": True,
        "data": [e.to_dict() for e in pagination.items],
        "pagination": {
            "page": pagination.page,
            "per_page": pagination.per_page,
            "total": pagination.total,
            "pages": pagination.pages
        }
    }), 200


@employees_bp.route("/<employee_id>", methods=["GET"])
@token_required
@roles_required('admin', 'hr', 'manager')
def get_employee(current_user, employee_id):
    try:
        return jsonify({"success": True, "data": get_employee_by_id(employee_id).to_dict()}), 200
    except HRMSError as e:
        return error_response(e)


@employees_bp.route("/<employee_id>/wage", methods=["PUT"])
@token_required
@roles_required('admin', 'hr')
def set_gross_wage(current_user, employee_id):
    """{"gross_wage": 52000}"""
    data = request.get_json(silent=True) or {}
    try:
        emp = update_gross_wage(employee_id, data.get('gross_wage'), updated_by=current_user.login_id)
        return jsonify({"success": True, "message": "Gross wage updated", "data": emp.to_dict()}), 200
    except HRMSError as e:
        return error_response(e)
    except Exception:
        return server_error("Error updating gross wage")


@employees_bp.route("/admins", methods=["POST"])
@token_required
@roles_required('admin')
def register_admin(current_user):
    """{"name": "...", "email": "...", "role": "hr"}"""
    payload = request.get_json(silent=True) or {}

    errors = validate_admin_data(payload)
    if errors:
        return jsonify({"success": False, "message": "; ".join(errors), "errors": errors}), 400

    try:
        user, temp_password = create_admin_user(payload, created_by=current_user.login_id)
        data = user.to_dict()
        if temp_password:
            data["temporary_password"] = temp_password
        return jsonify({"success": True, "message": "Account created", "data": data}), 201
    except HRMSError as e:
        return error_response(e)
    except Exception:
        return server_error("Error creating account")
