import math
import re
from decimal import Decimal, InvalidOperation
from utils.constants import EMPLOYMENT_STATUSES, STAFF_ROLES
from utils.exceptions import InvalidWageError

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def coerce_wage(value):
    """Return the wage as a float, raising InvalidWageError unless finite and positive"""
    if value is None or isinstance(value, bool):
        raise InvalidWageError()
    try:
        if isinstance(value, str):
            wage = float(Decimal(value.strip()))
        else:
            wage = float(value)
    except (TypeError, ValueError, InvalidOperation):
        raise InvalidWageError()

    if math.isnan(wage) or math.isinf(wage) or wage <= 0:
        raise InvalidWageError()
    return wage


def validate_employee_data(data):
    """Validate employee registration data

    Returns a list of error messages, empty when the payload is acceptable.
    """
    errors = []

    required_fields = ['first_name', 'last_name', 'email']
    for field in required_fields:
        if not data.get(field):
            errors.append(f'{field} is required')

    if data.get('email') and not EMAIL_RE.match(data['email']):
        errors.append('email is not a valid address')

    # Wage is optional at registration, HR can set it later
    if data.get('gross_wage') not in (None, ''):
        try:
            coerce_wage(data['gross_wage'])
        except InvalidWageError:
            errors.append('gross_wage must be a positive number')

    if data.get('employment_status') and data['employment_status'] not in EMPLOYMENT_STATUSES:
        errors.append(f"employment_status must be one of: {', '.join(EMPLOYMENT_STATUSES)}")

    if data.get('first_name') and len(data['first_name']) > 100:
        errors.append('first_name must be less than 100 characters')

    if data.get('last_name') and len(data['last_name']) > 100:
        errors.append('last_name must be less than 100 characters')

    return errors


def validate_admin_data(data):
    errors = []
    for field in ('name', 'email'):
        if not data.get(field):
            errors.append(f'{field} is required')
    if data.get('email') and not EMAIL_RE.match(data['email']):
        errors.append('email is not a valid address')
    if data.get('role', 'admin') not in STAFF_ROLES:
        errors.append(f"role must be one of: {', '.join(STAFF_ROLES)}")
    return errors
