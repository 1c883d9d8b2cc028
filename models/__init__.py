from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

# Import all models to ensure they are registered with SQLAlchemy
from models.employee import Employee
from models.user import User
from models.attendance import Attendance
from models.payroll import PayrollRecord
