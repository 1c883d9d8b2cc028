import os

# Must be set before config/app are imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["CREATE_APP_ON_IMPORT"] = "0"

import pytest

from app import create_app
from models import db as _db
from models.employee import Employee
from models.user import User
from routes.auth import generate_token


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'test.db'}",
        "SECRET_KEY": "test-secret",
        "TOKEN_EXPIRY_DAYS": 1,
    })
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_employee(db):
    def _make(employee_id="EMP20260001", gross_wage=50000.0, password="secret123", **fields):
        email = fields.pop("email", f"{employee_id.lower()}@example.com")
        emp = Employee(
            employee_id=employee_id,
            first_name=fields.pop("first_name", "Test"),
            last_name=fields.pop("last_name", employee_id),
            email=email,
            department=fields.pop("department", "Engineering"),
            designation=fields.pop("designation", "Engineer"),
            gross_wage=gross_wage,
            **fields
        )
        user = User(
            login_id=employee_id,
            employee_id=employee_id,
            email=email,
            name=f"{emp.first_name} {emp.last_name}",
            role="employee",
        )
        user.set_password(password)
        db.session.add_all([emp, user])
        db.session.commit()
        return emp
    return _make


@pytest.fixture
def admin_user(db):
    user = User(login_id="ADM20260001", email="admin@example.com", name="Admin", role="admin")
    user.set_password("admin-pass")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def auth_headers(app):
    def _headers(user):
        return {"Authorization": f"Bearer {generate_token(user)}"}
    return _headers
