from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from models.employee import Employee
from models.user import User
from services import employee_service
from services.employee_service import (
    create_admin_user,
    create_employee,
    generate_next_id,
    generate_temp_password,
    get_all_employees,
    last_issued_id,
    save_with_new_id,
    update_gross_wage,
)
from utils.exceptions import (
    EmployeeNotFoundError,
    IdConflictError,
    IdSequenceExhaustedError,
    InvalidWageError,
    MalformedIdError,
    ValidationError,
)

THIS_YEAR = date.today().year


class TestGenerateNextId:

    @pytest.mark.parametrize("last_id,expected", [
        (None, "EMP20260001"),
        ("", "EMP20260001"),
        ("EMP20260001", "EMP20260002"),
        ("EMP20260042", "EMP20260043"),
        ("EMP20260999", "EMP20261000"),
        ("EMP20259999", "EMP20260001"),
        ("EMP20250417", "EMP20260001"),
    ])
    def test_sequence(self, last_id, expected):
        assert generate_next_id(last_id, year=2026) == expected

    def test_defaults_to_current_year(self):
        assert generate_next_id(None) == f"EMP{THIS_YEAR}0001"

    def test_admin_prefix(self):
        assert generate_next_id("ADM20260007", prefix="ADM", year=2026) == "ADM20260008"
        assert generate_next_id(None, prefix="ADM", year=2026) == "ADM20260001"

    @pytest.mark.parametrize("last_id", [
        "EMP2026001",
        "EMP202600011",
        "EMPABCD0001",
        "ADM20260001",
        "emp20260001",
        "EMP2026-001",
    ])
    def test_malformed(self, last_id):
        with pytest.raises(MalformedIdError):
            generate_next_id(last_id, year=2026)

    def test_exhausted_year(self):
        with pytest.raises(IdSequenceExhaustedError) as exc:
            generate_next_id("EMP20269999", year=2026)
        assert not exc.value.retryable

    def test_exhausted_only_within_year(self):
        assert generate_next_id("EMP20259999", year=2026) == "EMP20260001"

    def test_pure(self):
        assert generate_next_id("EMP20260005", year=2026) == generate_next_id("EMP20260005", year=2026)

    def test_temp_password(self):
        first, second = generate_temp_password(), generate_temp_password()
        assert len(first) == 8
        assert len(generate_temp_password(12)) == 12
        assert first != second


def _payload(**overrides):
    payload = {
        "first_name": "Asha",
        "last_name": "Rao",
        "email": "asha@example.com",
        "department": "Finance",
        "gross_wage": "42000",
    }
    payload.update(overrides)
    return payload


class TestCreateEmployee:

    def test_creates_employee_and_login(self, app):
        emp, temp_password = create_employee(_payload(), created_by="ADM20260001")

        assert emp.employee_id == f"EMP{THIS_YEAR}0001"
        assert emp.gross_wage == 42000.0
        assert emp.created_by == "ADM20260001"

        user = User.query.filter_by(login_id=emp.employee_id).one()
        assert user.employee_id == emp.employee_id
        assert user.role == "employee"
        assert user.must_change_password
        assert user.check_password(temp_password)

    def test_ids_follow_the_last_issued(self, app):
        first, _ = create_employee(_payload())
        second, _ = create_employee(_payload(email="ravi@example.com", first_name="Ravi"))
        assert first.employee_id == f"EMP{THIS_YEAR}0001"
        assert second.employee_id == f"EMP{THIS_YEAR}0002"
        assert last_issued_id("EMP") == second.employee_id

    def test_wage_is_optional(self, app):
        emp, _ = create_employee(_payload(gross_wage=None))
        assert emp.gross_wage is None

    def test_invalid_wage(self, app):
        with pytest.raises(InvalidWageError):
            create_employee(_payload(gross_wage="-100"))
        assert Employee.query.count() == 0

    def test_duplicate_email(self, app):
        create_employee(_payload())
        with pytest.raises(ValidationError):
            create_employee(_payload(first_name="Other"))

    def test_unknown_employment_status_is_a_validation_error(self, app, caplog):
        with pytest.raises(ValidationError) as exc:
            create_employee(_payload(employment_status="Terminated"))
        assert not isinstance(exc.value, IdConflictError)
        assert exc.value.status_code == 400
        assert not exc.value.retryable
        assert Employee.query.count() == 0
        assert "retrying" not in caplog.text

    def test_admin_prefix_does_not_consume_employee_ids(self, app):
        create_admin_user({"name": "HR", "email": "hr@example.com", "role": "hr"})
        emp, _ = create_employee(_payload())
        assert emp.employee_id == f"EMP{THIS_YEAR}0001"


class TestIdCollisions:

    def test_second_writer_with_same_id_is_rejected(self, db):
        save_with_new_id(Employee(employee_id="EMP20260001", first_name="A", last_name="One",
                                  email="a@example.com"))
        with pytest.raises(IdConflictError) as exc:
            save_with_new_id(Employee(employee_id="EMP20260001", first_name="B", last_name="Two",
                                      email="b@example.com"))
        assert exc.value.retryable
        assert exc.value.status_code == 409
        assert Employee.query.count() == 1

    def test_retries_after_a_stale_read(self, make_employee, monkeypatch):
        make_employee(f"EMP{THIS_YEAR}0001")
        real_last_issued = employee_service.last_issued_id
        calls = []

        def stale_then_fresh(prefix):
            calls.append(prefix)
            # First read misses the row a concurrent request just committed
            return None if len(calls) == 1 else real_last_issued(prefix)

        monkeypatch.setattr(employee_service, "last_issued_id", stale_then_fresh)

        emp, _ = create_employee(_payload())
        assert emp.employee_id == f"EMP{THIS_YEAR}0002"
        assert len(calls) == 2

    def test_other_integrity_failures_are_not_id_conflicts(self, db):
        with pytest.raises(IntegrityError) as exc:
            save_with_new_id(Employee(employee_id="EMP20260001", first_name="A", last_name="One",
                                      email="a@example.com", employment_status="Terminated"))
        assert not isinstance(exc.value, IdConflictError)
        assert Employee.query.count() == 0

    def test_duplicate_email_under_a_fresh_id(self, make_employee):
        make_employee("EMP20260001", email="taken@example.com")
        with pytest.raises(IntegrityError):
            save_with_new_id(Employee(employee_id="EMP20260002", first_name="B", last_name="Two",
                                      email="taken@example.com"))
        assert Employee.query.count() == 1

    def test_zero_retries_means_a_single_attempt(self, make_employee, monkeypatch):
        make_employee(f"EMP{THIS_YEAR}0001")
        calls = []

        def stale(prefix):
            calls.append(prefix)
            return None

        monkeypatch.setattr(employee_service, "last_issued_id", stale)
        with pytest.raises(IdConflictError):
            create_employee(_payload(), retries=0)
        assert len(calls) == 1

    def test_gives_up_after_retries(self, make_employee, monkeypatch):
        make_employee(f"EMP{THIS_YEAR}0001")
        monkeypatch.setattr(employee_service, "last_issued_id", lambda prefix: None)

        with pytest.raises(IdConflictError):
            create_employee(_payload(), retries=2)
        assert Employee.query.count() == 1


class TestAdminAccounts:

    def test_unknown_role(self, app):
        with pytest.raises(ValidationError):
            create_admin_user({"name": "Boss", "email": "boss@example.com", "role": "employee"})
        assert User.query.count() == 0

    def test_generated_password(self, app):
        user, temp_password = create_admin_user({"name": "Master Admin", "email": "root@example.com"})
        assert user.login_id == f"ADM{THIS_YEAR}0001"
        assert user.role == "admin"
        assert user.employee_id is None
        assert user.must_change_password
        assert user.check_password(temp_password)

    def test_explicit_password(self, app):
        user, temp_password = create_admin_user(
            {"name": "Payroll Lead", "email": "lead@example.com", "role": "hr", "password": "s3cret!"}
        )
        assert temp_password is None
        assert not user.must_change_password
        assert user.check_password("s3cret!")

    def test_sequence(self, app):
        create_admin_user({"name": "One", "email": "one@example.com"})
        second, _ = create_admin_user({"name": "Two", "email": "two@example.com"})
        assert second.login_id == f"ADM{THIS_YEAR}0002"


class TestEmployeeQueries:

    def test_update_gross_wage(self, make_employee):
        make_employee("EMP20260001", gross_wage=30000)
        emp = update_gross_wage("EMP20260001", 36000, updated_by="ADM20260001")
        assert emp.gross_wage == 36000.0
        assert emp.updated_by == "ADM20260001"

    @pytest.mark.parametrize("wage", [0, -5, "abc", None])
    def test_update_rejects_bad_wage(self, make_employee, wage):
        make_employee("EMP20260001", gross_wage=30000)
        with pytest.raises(InvalidWageError):
            update_gross_wage("EMP20260001", wage)
        assert Employee.query.filter_by(employee_id="EMP20260001").one().gross_wage == 30000

    def test_update_unknown_employee(self, app):
        with pytest.raises(EmployeeNotFoundError):
            update_gross_wage("EMP20269999", 30000)

    def test_pagination_and_filter(self, make_employee):
        make_employee("EMP20260001", department="Finance")
        make_employee("EMP20260002", department="Engineering")
        make_employee("EMP20260003", department="Finance")

        page = get_all_employees(page=1, per_page=2)
        assert page.total == 3
        assert [e.employee_id for e in page.items] == ["EMP20260001", "EMP20260002"]

        finance = get_all_employees(department="Finance")
        assert [e.employee_id for e in finance.items] == ["EMP20260001", "EMP20260003"]
