from models import db
from sqlalchemy.sql import func
from utils.constants import PayrollStatus

_STATUS_VALUES = ", ".join(f"'{s.value}'" for s in PayrollStatus)

class PayrollRecord(db.Model):
    __tablename__ = "payroll_records"
    __table_args__ = (
        db.UniqueConstraint("employee_id", "month", "year", name="uq_payroll_employee_period"),
        db.CheckConstraint("month BETWEEN 1 AND 12", name="ck_payroll_month"),
    )

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.String(20), db.ForeignKey("employees.employee_id"), nullable=False, index=True)
    month = db.Column(db.Integer, nullable=False)
    year = db.Column(db.Integer, nullable=False)

    total_days = db.Column(db.Integer, nullable=False)
    payable_days = db.Column(db.Float, nullable=False)
    gross_wage = db.Column(db.Float, nullable=False)

    # Earnings (pro-rated)
    basic = db.Column(db.Float, nullable=False)
    hra = db.Column(db.Float, nullable=False)
    standard_allowance = db.Column(db.Float, nullable=False)
    performance_bonus = db.Column(db.Float, nullable=False)
    lta = db.Column(db.Float, nullable=False)
    fixed_allowance = db.Column(db.Float, nullable=False)
    gross_earnings = db.Column(db.Float, nullable=False)

    # Deductions
    pf = db.Column(db.Float, nullable=False)
    professional_tax = db.Column(db.Float, nullable=False)
    total_deductions = db.Column(db.Float, nullable=False)

    net_salary = db.Column(db.Float, nullable=False)
    status = db.Column(db.String(20),
                       db.CheckConstraint(f"status IN ({_STATUS_VALUES})"),
                       nullable=False, default=PayrollStatus.PROCESSED.value)
    payment_date = db.Column(db.DateTime)

    processed_by = db.Column(db.String(100))
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), onupdate=func.now())
    updated_by = db.Column(db.String(100))

    employee = db.relationship("Employee", backref="payroll_records")

    def to_dict(self):
        return {
            'id': self.id,
            'employee_id': self.employee_id,
            'month': self.month,
            'year': self.year,
            'total_days': self.total_days,
            'payable_days': self.payable_days,
            'gross_wage': self.gross_wage,
            'earnings': {
                'basic': self.basic,
                'hra': self.hra,
                'standard_allowance': self.standard_allowance,
                'performance_bonus': self.performance_bonus,
                'lta': self.lta,
                'fixed_allowance': self.fixed_allowance,
                'total': self.gross_earnings
            },
            'deductions': {
                'pf': self.pf,
                'professional_tax': self.professional_tax,
                'total': self.total_deductions
            },
            'net_salary': self.net_salary,
            'status': self.status,
            'payment_date': self.payment_date.isoformat() if self.payment_date else None,
            'processed_by': self.processed_by
        }

    def __repr__(self):
        return f"<PayrollRecord {self.employee_id} {self.month:02d}/{self.year} - {self.status}>"
