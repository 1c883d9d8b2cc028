import re
import secrets
import string
import logging
from datetime import date
from sqlalchemy.exc import IntegrityError
from models import db
from models.employee import Employee
from models.user import User
from config import ID_CONFLICT_RETRIES
from utils.attendance_helpers import parse_date
from utils.constants import (
    ADMIN_ID_PREFIX,
    EMPLOYEE_ID_PREFIX,
    EMPLOYMENT_STATUSES,
    ID_SEQUENCE_DIGITS,
    ID_YEAR_DIGITS,
    STAFF_ROLES,
)
from utils.exceptions import (
    EmployeeNotFoundError,
    IdConflictError,
    IdSequenceExhaustedError,
    MalformedIdError,
    ValidationError,
)
from utils.validators import coerce_wage

logger = logging.getLogger(__name__)

TEMP_PASSWORD_CHARS = string.ascii_letters + string.digits + "!@#$"


def generate_next_id(last_id, prefix=EMPLOYEE_ID_PREFIX, year=None):
    """
    Next PREFIX + YYYY + NNNN identifier after ``last_id``.

    The sequence restarts at 1 when ``last_id`` belongs to an earlier year.
    Raises MalformedIdError when ``last_id`` does not follow the layout and
    IdSequenceExhaustedError once a year passes 9999 ids.
    """
    if not prefix:
        raise ValidationError("Identifier prefix is required")
    year = str(year or date.today().year)

    if not last_id:
        return f"{prefix}{year}{1:0{ID_SEQUENCE_DIGITS}d}"

    pattern = rf"^{re.escape(prefix)}(\d{{{ID_YEAR_DIGITS}}})(\d{{{ID_SEQUENCE_DIGITS}}})$"
    match = re.match(pattern, last_id)
    if not match:
        raise MalformedIdError(f"Malformed identifier {last_id!r} for prefix {prefix}")

    id_year, id_sequence = match.groups()
    next_sequence = int(id_sequence) + 1 if id_year == year else 1

    if next_sequence >= 10 ** ID_SEQUENCE_DIGITS:
        raise IdSequenceExhaustedError(f"All {prefix} identifiers for {year} have been issued")

    return f"{prefix}{year}{next_sequence:0{ID_SEQUENCE_DIGITS}d}"


def last_issued_id(prefix=EMPLOYEE_ID_PREFIX):
    """Highest identifier issued so far for a prefix, or None"""
    column = Employee.employee_id if prefix == EMPLOYEE_ID_PREFIX else User.login_id
    # Fixed-width ids, so string order is issue order
    row = db.session.query(column).filter(column.like(f"{prefix}%")).order_by(column.desc()).first()
    return row[0] if row else None


def generate_temp_password(length=8):
    return "".join(secrets.choice(TEMP_PASSWORD_CHARS) for _ in range(length))


def _identifier_keys(records):
    keys = []
    for record in records:
        if isinstance(record, Employee):
            keys.append((Employee.employee_id, record.employee_id))
        elif isinstance(record, User):
            keys.append((User.login_id, record.login_id))
    return keys


def save_with_new_id(*records):
    """
    Commit freshly identified records.

    The unique keys on employee_id / login_id reject a second writer that
    computed the same id; that rejection surfaces as IdConflictError. Any
    other integrity failure is re-raised unchanged.
    """
    keys = _identifier_keys(records)
    for record in records:
        db.session.add(record)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        taken = [value for column, value in keys
                 if db.session.query(column).filter(column == value).first()]
        if taken:
            raise IdConflictError(f"Identifier already issued: {', '.join(taken)}")
        raise


def _allocate_and_save(prefix, build_records, retries=None):
    """Read last id -> compute next -> write, re-reading after a collision"""
    attempts = max(1, ID_CONFLICT_RETRIES if retries is None else retries)
    for attempt in range(1, attempts + 1):
        new_id = generate_next_id(last_issued_id(prefix), prefix)
        records = build_records(new_id)
        try:
            save_with_new_id(*records)
            return records
        except IdConflictError:
            if attempt == attempts:
                raise
            logger.warning(f"Id {new_id} taken by a concurrent request, retrying ({attempt}/{attempts})")


def _check_unique_email(email):
    if User.query.filter_by(email=email).first() or Employee.query.filter_by(email=email).first():
        raise ValidationError(f"Email {email} is already registered")


def create_employee(payload: dict, created_by=None, retries=None):
    """
    Create an employee together with its login account.

    Returns (employee, temp_password); delivering the password is left to
    the caller.
    """
    employment_status = payload.get("employment_status") or "Active"
    if employment_status not in EMPLOYMENT_STATUSES:
        raise ValidationError(f"employment_status must be one of: {', '.join(EMPLOYMENT_STATUSES)}")

    email = payload.get("email")
    _check_unique_email(email)

    gross_wage = payload.get("gross_wage")
    if gross_wage in (None, ""):
        gross_wage = None
    else:
        gross_wage = coerce_wage(gross_wage)

    hire_date = parse_date(payload.get("hire_date") or payload.get("date_of_joining"))
    temp_password = generate_temp_password()

    def build(new_id):
        emp = Employee(
            employee_id=new_id,
            first_name=payload.get("first_name", ""),
            last_name=payload.get("last_name", ""),
            email=email,
            phone_number=payload.get("phone_number"),
            department=payload.get("department"),
            designation=payload.get("designation"),
            hire_date=hire_date,
            employment_status=employment_status,
            gross_wage=gross_wage,
            created_by=created_by
        )
        user = User(
            login_id=new_id,
            employee_id=new_id,
            email=email,
            name=f"{emp.first_name} {emp.last_name}".strip(),
            role="employee",
            must_change_password=True,
            created_by=created_by
        )
        user.set_password(temp_password)
        return emp, user

    emp, _ = _allocate_and_save(EMPLOYEE_ID_PREFIX, build, retries)
    logger.info(f"Employee {emp.employee_id} created by {created_by}; temporary credentials issued")
    return emp, temp_password


def create_admin_user(payload: dict, created_by=None, retries=None):
    """Create an admin/hr/manager account with an ADM identifier"""
    role = payload.get("role") or "admin"
    if role not in STAFF_ROLES:
        raise ValidationError(f"role must be one of: {', '.join(STAFF_ROLES)}")

    email = payload.get("email")
    _check_unique_email(email)
    temp_password = generate_temp_password()

    def build(new_id):
        user = User(
            login_id=new_id,
            email=email,
            name=payload.get("name"),
            role=role,
            must_change_password=not payload.get("password"),
            created_by=created_by
        )
        user.set_password(payload.get("password") or temp_password)
        return (user,)

    user, = _allocate_and_save(ADMIN_ID_PREFIX, build, retries)
    logger.info(f"{user.role} account {user.login_id} created by {created_by}")
    return user, (None if payload.get("password") else temp_password)


def get_employee_by_id(employee_id):
    emp = Employee.query.filter_by(employee_id=employee_id).first()
    if not emp:
        raise EmployeeNotFoundError(f"Employee {employee_id} not found")
    return emp


def get_all_employees(page=1, per_page=20, department=None):
    query = Employee.query
    if department:
        query = query.filter_by(department=department)
    return query.order_by(Employee.employee_id.asc()).paginate(page=page, per_page=per_page, error_out=False)


def update_gross_wage(employee_id, gross_wage, updated_by=None):
    """Explicit HR update of an employee's monthly gross wage"""
    wage = coerce_wage(gross_wage)
    emp = get_employee_by_id(employee_id)
    previous = emp.gross_wage
    emp.gross_wage = wage
    emp.updated_by = updated_by
    db.session.commit()
    logger.info(f"Gross wage for {employee_id} changed from {previous} to {wage} by {updated_by}")
    return emp
