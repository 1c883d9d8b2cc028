from flask import Blueprint, request, jsonify, send_file
from services.salary_service import SalaryService
from services.employee_service import get_employee_by_id
from services.pdf_service import generate_payslip_pdf
from services.export_service import export_payroll_register
from routes.auth import token_required, roles_required, error_response, server_error
from utils.attendance_helpers import validate_period
from utils.exceptions import HRMSError

payroll_bp = Blueprint('payroll', __name__)


@payroll_bp.route('/process', methods=['POST'])
@token_required
@roles_required('admin', 'hr')
def process_payroll(current_user):
    """
    Process one employee's payroll for a month

    {"employee_id": "EMP20260001", "month": 1, "year": 2026}

    409 with "retryable": true when the period is already processed.
    """
    data = request.get_json(silent=True) or {}
    employee_id = data.get('employee_id')
    if not employee_id or data.get('month') is None or data.get('year') is None:
        return jsonify({'success': False, 'message': 'employee_id, month and year are required'}), 400

    try:
        record = SalaryService.process_payroll(
            employee_id, data['month'], data['year'], processed_by=current_user.login_id
        )
        return jsonify({'success': True, 'message': 'Payroll processed', 'data': record.to_dict()}), 201
    except HRMSError as e:
        return error_response(e)
    except Exception:
        return server_error('Failed to process payroll')


@payroll_bp.route('/run', methods=['POST'])
@token_required
@roles_required('admin', 'hr')
def run_payroll(current_user):
    """Process every active employee: {"month": 1, "year": 2026}"""
    data = request.get_json(silent=True) or {}
    try:
        result = SalaryService.run_monthly_payroll(
            data.get('month'), data.get('year'), processed_by=current_user.login_id
        )
        return jsonify({'success': True, 'data': result}), 200
    except HRMSError as e:
        return error_response(e)
    except Exception:
        return server_error('Failed to run payroll')


@payroll_bp.route('/', methods=['GET'])
@token_required
@roles_required('admin', 'hr', 'manager')
def list_payrolls(current_user):
    try:
        records = SalaryService.list_payrolls(request.args.get('month'), request.args.get('year'))
        return jsonify({'success': True, 'count': len(records), 'data': [r.to_dict() for r in records]}), 200
    except HRMSError as e:
        return error_response(e)


@payroll_bp.route('/employee/<employee_id>', methods=['GET'])
@token_required
def employee_payrolls(current_user, employee_id):
    if not current_user.can_access_employee(employee_id):
        return jsonify({'success': False, 'message': 'Access denied'}), 403
    records = SalaryService.get_employee_payrolls(employee_id)
    return jsonify({'success': True, 'count': len(records), 'data': [r.to_dict() for r in records]}), 200


@payroll_bp.route('/<int:record_id>/status', methods=['PUT'])
@token_required
@roles_required('admin', 'hr')
def update_status(current_user, record_id):
    """{"status": "Paid"} or {"status": "Held"}"""
    data = request.get_json(silent=True) or {}
    try:
        record = SalaryService.update_payroll_status(record_id, data.get('status'), actor=current_user.login_id)
        return jsonify({'success': True, 'data': record.to_dict()}), 200
    except HRMSError as e:
        return error_response(e)
    except Exception:
        return server_error('Failed to update payment status')


@payroll_bp.route('/<int:record_id>/payslip', methods=['GET'])
@token_required
def download_payslip(current_user, record_id):
    try:
        record = SalaryService.get_payroll(record_id)
        if not current_user.can_access_employee(record.employee_id, roles=('admin', 'hr')):
            return jsonify({'success': False, 'message': 'Access denied'}), 403

        employee = get_employee_by_id(record.employee_id)
        pdf = generate_payslip_pdf(record, employee)
        return send_file(
            pdf,
            mimetype='application/pdf',
            as_attachment=True,
            download_name=f"payslip_{record.employee_id}_{record.year}_{record.month:02d}.pdf"
        )
    except HRMSError as e:
        return error_response(e)
    except Exception:
        return server_error('Failed to generate payslip')


@payroll_bp.route('/register', methods=['GET'])
@token_required
@roles_required('admin', 'hr')
def download_register(current_user):
    """Excel payroll register: /api/payroll/register?month=1&year=2026"""
    try:
        month, year = validate_period(request.args.get('month'), request.args.get('year'))
        output, filename = export_payroll_register(month, year)
        return send_file(
            output,
            mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
            as_attachment=True,
            download_name=filename
        )
    except HRMSError as e:
        return error_response(e)
    except Exception:
        return server_error('Failed to export payroll register')
