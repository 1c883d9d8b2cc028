from flask import Blueprint, request, jsonify, current_app
from models import db
from models.user import User
from datetime import datetime, timedelta, timezone
from utils.exceptions import HRMSError
import jwt
import logging
from functools import wraps

auth_bp = Blueprint("auth", __name__)
logger = logging.getLogger(__name__)

MAX_LOGIN_ATTEMPTS = 5
LOCKOUT_MINUTES = 30


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def error_response(error: HRMSError):
    """JSON envelope for a domain error, with its HTTP status"""
    return jsonify(error.to_dict()), error.status_code


def server_error(message):
    """Roll back and report an unexpected failure"""
    db.session.rollback()
    logger.exception(message)
    return jsonify({"success": False, "message": message}), 500


def generate_token(user):
    """Generate JWT token for user"""
    payload = {
        'user_id': user.id,
        'login_id': user.login_id,
        'employee_id': user.employee_id,
        'role': user.role,
        'exp': datetime.now(timezone.utc) + timedelta(days=current_app.config['TOKEN_EXPIRY_DAYS'])
    }
    return jwt.encode(payload, current_app.config['SECRET_KEY'], algorithm='HS256')


def token_required(f):
    """Decorator to require valid JWT token"""
    @wraps(f)
    def decorated(*args, **kwargs):
        token = request.headers.get('Authorization')

        if not token:
            return jsonify({'success': False, 'message': 'Token is missing'}), 401

        try:
            if token.startswith('Bearer '):
                token = token[7:]

            data = jwt.decode(token, current_app.config['SECRET_KEY'], algorithms=['HS256'])
            current_user = db.session.get(User, data['user_id'])

            if not current_user or not current_user.is_active:
                return jsonify({'success': False, 'message': 'Invalid token'}), 401

        except jwt.ExpiredSignatureError:
            return jsonify({'success': False, 'message': 'Token has expired'}), 401
        except jwt.InvalidTokenError:
            return jsonify({'success': False, 'message': 'Invalid token'}), 401

        return f(current_user, *args, **kwargs)
    return decorated


def roles_required(*roles):
    """Decorator (under token_required) restricting an endpoint to the given roles"""
    def decorator(f):
        @wraps(f)
        def decorated(current_user, *args, **kwargs):
            if current_user.role not in roles:
                return jsonify({
                    'success': False,
                    'message': f'Access denied. Required role: {", ".join(roles)}'
                }), 403
            return f(current_user, *args, **kwargs)
        return decorated
    return decorator


@auth_bp.route("/login", methods=["POST"])
def login():
    """
    Login with email or login id (EMP20260001 / ADM20260001)

    {"login": "EMP20260001", "password": "..."}
    """
    data = request.get_json(silent=True)
    if not data:
        return jsonify({"success": False, "message": "No data provided"}), 400

    login_value = (data.get('login') or data.get('email') or data.get('login_id') or '').strip()
    password = data.get('password')
    if not login_value or not password:
        return jsonify({"success": False, "message": "Login and password are required"}), 400

    try:
        user = User.query.filter(
            (User.email == login_value) | (User.login_id == login_value)
        ).first()

        if not user:
            return jsonify({"success": False, "message": "Invalid credentials"}), 401

        now = _utcnow()
        if user.locked_until and user.locked_until > now:
            return jsonify({
                "success": False,
                "message": "Account is temporarily locked. Please try again later."
            }), 401

        if not user.check_password(password):
            user.login_attempts = (user.login_attempts or 0) + 1
            if user.login_attempts >= MAX_LOGIN_ATTEMPTS:
                user.locked_until = now + timedelta(minutes=LOCKOUT_MINUTES)
                logger.warning(f"Account {user.login_id} locked after {user.login_attempts} failed logins")
            db.session.commit()
            return jsonify({"success": False, "message": "Invalid credentials"}), 401

        if not user.is_active:
            return jsonify({"success": False, "message": "Account is deactivated"}), 401

        user.login_attempts = 0
        user.locked_until = None
        user.last_login = now
        db.session.commit()

        return jsonify({
            "success": True,
            "message": "Login successful",
            "data": {
                "token": generate_token(user),
                "user": user.to_dict(),
                "employee": user.employee.to_dict() if user.employee else None
            }
        }), 200

    except Exception:
        return server_error("Login failed")


@auth_bp.route("/me", methods=["GET"])
@token_required
def me(current_user):
    return jsonify({
        "success": True,
        "data": {
            "user": current_user.to_dict(),
            "employee": current_user.employee.to_dict() if current_user.employee else None
        }
    }), 200


@auth_bp.route("/change-password", methods=["POST"])
@token_required
def change_password(current_user):
    """Replace the temporary password issued at account creation"""
    data = request.get_json(silent=True) or {}
    current_password = data.get('current_password')
    new_password = data.get('new_password')

    if not current_password or not new_password:
        return jsonify({"success": False, "message": "Current and new password are required"}), 400
    if len(new_password) < 8:
        return jsonify({"success": False, "message": "New password must be at least 8 characters"}), 400
    if not current_user.check_password(current_password):
        return jsonify({"success": False, "message": "Current password is incorrect"}), 401

    current_user.set_password(new_password)
    current_user.must_change_password = False
    db.session.commit()
    logger.info(f"Password changed for {current_user.login_id}")
    return jsonify({"success": True, "message": "Password updated"}), 200
