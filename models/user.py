from models import db
from sqlalchemy.sql import func
from werkzeug.security import generate_password_hash, check_password_hash
from utils.constants import ROLES
import uuid

class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(50), primary_key=True, default=lambda: str(uuid.uuid4()))
    # ADM... for admin accounts, the employee id for employee accounts
    login_id = db.Column(db.String(20), unique=True, nullable=False, index=True)
    employee_id = db.Column(db.String(20), db.ForeignKey("employees.employee_id"), nullable=True)

    # Authentication fields
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    must_change_password = db.Column(db.Boolean, default=False)

    # User details
    name = db.Column(db.String(200), nullable=False)
    role = db.Column(db.String(20),
                    db.CheckConstraint("role IN (%s)" % ", ".join(f"'{r}'" for r in ROLES)),
                    nullable=False, default='employee')
    is_active = db.Column(db.Boolean, default=True)

    # Login tracking
    last_login = db.Column(db.DateTime)
    login_attempts = db.Column(db.Integer, default=0)
    locked_until = db.Column(db.DateTime)

    # Audit fields
    created_date = db.Column(db.DateTime, server_default=func.now())
    created_by = db.Column(db.String(100))

    # Relationships
    employee = db.relationship("Employee", backref="user_account", foreign_keys=[employee_id])

    def set_password(self, password):
        """Set password hash"""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Check password against hash"""
        return check_password_hash(self.password_hash, password)

    def can_access_employee(self, employee_id, roles=('admin', 'hr', 'manager')):
        """Staff roles see everyone, employees only see themselves"""
        return self.role in roles or (employee_id is not None and self.employee_id == employee_id)

    def to_dict(self):
        """Convert user to dictionary for API responses"""
        return {
            'id': self.id,
            'login_id': self.login_id,
            'employee_id': self.employee_id,
            'email': self.email,
            'name': self.name,
            'role': self.role,
            'is_active': self.is_active,
            'must_change_password': self.must_change_password,
            'last_login': self.last_login.isoformat() if self.last_login else None,
            'created_date': self.created_date.isoformat() if self.created_date else None
        }

    def __repr__(self):
        return f"<User {self.login_id} - {self.role}>"
