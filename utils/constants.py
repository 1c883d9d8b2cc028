from dataclasses import dataclass
from enum import Enum


class AttendanceStatus(str, Enum):
    """Daily attendance status stored on each attendance row."""

    PRESENT = "Present"
    ABSENT = "Absent"
    HALF_DAY = "Half Day"
    ON_DUTY = "On Duty"
    PAID_LEAVE = "Paid Leave"
    HOLIDAY = "Holiday"


class PayrollStatus(str, Enum):
    PROCESSED = "Processed"
    PAID = "Paid"
    HELD = "Held"


# Allowed payroll status moves; Paid is terminal
PAYROLL_STATUS_TRANSITIONS = {
    PayrollStatus.PROCESSED: {PayrollStatus.PAID, PayrollStatus.HELD},
    PayrollStatus.HELD: {PayrollStatus.PAID},
    PayrollStatus.PAID: set(),
}

ROLES = ['admin', 'hr', 'manager', 'employee']

# Roles an ADM account may hold
STAFF_ROLES = ['admin', 'hr', 'manager']

EMPLOYMENT_STATUSES = ['Active', 'Inactive']

EMPLOYEE_ID_PREFIX = 'EMP'
ADMIN_ID_PREFIX = 'ADM'
ID_YEAR_DIGITS = 4
ID_SEQUENCE_DIGITS = 4


@dataclass(frozen=True)
class PayrollPolicy:
    """Statutory salary structure and attendance thresholds.

    All rates are fractions of the figure named in the field. Amounts are in
    the wage currency.
    """

    basic_rate: float = 0.50            # of gross wage
    hra_rate: float = 0.50              # of basic
    standard_allowance: float = 4167.0
    performance_bonus_rate: float = 0.0833  # of basic
    lta_rate: float = 0.0833            # of basic
    pf_rate: float = 0.12               # of basic
    professional_tax: float = 200.0

    full_day_hours: float = 8.0
    half_day_hours: float = 4.0

    # Weight of each status towards payable days; anything missing counts 0
    payable_day_weights: tuple = (
        (AttendanceStatus.PRESENT, 1.0),
        (AttendanceStatus.ON_DUTY, 1.0),
        (AttendanceStatus.PAID_LEAVE, 1.0),
        (AttendanceStatus.HALF_DAY, 0.5),
    )

    def day_weight(self, status):
        for known, weight in self.payable_day_weights:
            if known == status:
                return weight
        return 0.0


DEFAULT_POLICY = PayrollPolicy()

EARNING_COMPONENTS = [
    'basic',
    'hra',
    'standard_allowance',
    'performance_bonus',
    'lta',
    'fixed_allowance',
]
