from models import db
from sqlalchemy.sql import func
from utils.constants import AttendanceStatus
import uuid

_STATUS_VALUES = ", ".join(f"'{s.value}'" for s in AttendanceStatus)

class Attendance(db.Model):
    __tablename__ = "attendance"
    __table_args__ = (
        db.UniqueConstraint("employee_id", "attendance_date", name="uq_attendance_employee_date"),
    )

    attendance_id = db.Column(db.String(50), primary_key=True, default=lambda: str(uuid.uuid4()))
    employee_id = db.Column(db.String(20), db.ForeignKey("employees.employee_id"), nullable=False)
    attendance_date = db.Column(db.Date, nullable=False)
    check_in_time = db.Column(db.DateTime)
    check_out_time = db.Column(db.DateTime)
    work_hours = db.Column(db.Float, default=0.0)
    # NULL while the day is open (checked in, not yet checked out)
    attendance_status = db.Column(db.String(20),
                                  db.CheckConstraint(f"attendance_status IN ({_STATUS_VALUES})"),
                                  nullable=True)

    remarks = db.Column(db.Text)
    marked_by = db.Column(db.String(100), default='employee')

    # Audit fields
    created_date = db.Column(db.DateTime, server_default=func.now())
    updated_date = db.Column(db.DateTime, onupdate=func.now())

    # Relationship
    employee = db.relationship("Employee", backref="attendance_records")

    @property
    def is_closed(self):
        return self.attendance_status is not None

    def to_dict(self):
        """Convert attendance record to dictionary"""
        return {
            'attendance_id': self.attendance_id,
            'employee_id': self.employee_id,
            'attendance_date': self.attendance_date.isoformat() if self.attendance_date else None,
            'check_in_time': self.check_in_time.isoformat() if self.check_in_time else None,
            'check_out_time': self.check_out_time.isoformat() if self.check_out_time else None,
            'work_hours': self.work_hours,
            'attendance_status': self.attendance_status,
            'remarks': self.remarks,
            'marked_by': self.marked_by
        }

    def __repr__(self):
        return f"<Attendance {self.attendance_id} - {self.employee_id} - {self.attendance_date}>"
