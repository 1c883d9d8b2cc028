from models import db
from sqlalchemy.sql import func
from utils.constants import EMPLOYMENT_STATUSES

class Employee(db.Model):
    __tablename__ = "employees"

    id = db.Column(db.Integer, primary_key=True)
    # Unique key closes the read-last-id / write-next-id race
    employee_id = db.Column(db.String(20), unique=True, nullable=False, index=True)

    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), unique=True)
    phone_number = db.Column(db.String(20))

    # Employment Information
    department = db.Column(db.String(100))
    designation = db.Column(db.String(100))
    hire_date = db.Column(db.Date)
    employment_status = db.Column(
        db.String(20),
        db.CheckConstraint(
            "employment_status IN (%s)" % ", ".join(f"'{s}'" for s in EMPLOYMENT_STATUSES)
        ),
        default='Active'
    )

    # Monthly gross wage, the only input to the salary structure
    gross_wage = db.Column(db.Float)

    # Audit fields
    created_date = db.Column(db.Date, server_default=func.current_date())
    created_by = db.Column(db.String(100))
    updated_date = db.Column(db.Date, onupdate=func.current_date())
    updated_by = db.Column(db.String(100))

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self):
        return {
            'employee_id': self.employee_id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'email': self.email,
            'phone_number': self.phone_number,
            'department': self.department,
            'designation': self.designation,
            'hire_date': self.hire_date.isoformat() if self.hire_date else None,
            'employment_status': self.employment_status,
            'gross_wage': self.gross_wage,
            'created_date': self.created_date.isoformat() if self.created_date else None,
            'created_by': self.created_by
        }

    def __repr__(self):
        return f"<Employee {self.employee_id} - {self.first_name} {self.last_name}>"
