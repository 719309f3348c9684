"""
utils.py
Dates, payment status, validation, exports, sample data.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
import pandas as pd

from models import STATUS_PAID, STATUS_PENDING, Student, HallCollection

STUDENT_COLUMNS = [
    "id", "name", "cabin", "hall", "phone", "fee_paid", "fee_due", "status",
    "join_date", "left_date", "monthly_fee", "last_fee_calculated_date",
]
FEE_REPORT_COLUMNS = [
    "hall", "total_students", "fees_collected", "fees_pending", "total_fee_amount", "collection_rate",
]


def today_iso() -> str:
    return date.today().isoformat()


def parse_iso(d: str) -> date:
    return date.fromisoformat(d)


def to_iso(value) -> str | None:
    """
    Normalise a date input (date, datetime or 'YYYY-MM-DD') to an ISO string.
    Empty values give None; anything unparsable raises ValueError.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return parse_iso(str(value).strip()).isoformat()


def add_months(start: date, months: int) -> date:
    """
    Add (or subtract) months while keeping day in valid range
    (e.g., Jan 31 + 1 month => Feb 28/29, Mar 31 - 1 month => Feb 28/29).
    """
    y = start.year + (start.month - 1 + months) // 12
    m = (start.month - 1 + months) % 12 + 1
    # last day of target month
    if m == 12:
        next_month = date(y + 1, 1, 1)
    else:
        next_month = date(y, m + 1, 1)
    last_day = next_month - timedelta(days=1)
    day = min(start.day, last_day.day)
    return date(y, m, day)


def roll_months(start: date, months: int) -> date:
    """
    Shift by months, rolling a day past the end of the target month into the
    next one (e.g., Mar 31 - 1 month => Mar 2, Jan 31 + 1 month => Mar 2 in
    a leap year). Billing cycles are measured this way.
    """
    y = start.year + (start.month - 1 + months) // 12
    m = (start.month - 1 + months) % 12 + 1
    return date(y, m, 1) + timedelta(days=start.day - 1)


def derive_status(fee_due: int) -> str:
    return STATUS_PAID if fee_due == 0 else STATUS_PENDING


def parse_amount(value) -> int:
    """
    Whole currency units. Empty values count as zero.
    Raises ValueError for fractions, negatives and non-numeric text.
    """
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise ValueError(value)
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(value)
        amount = int(value)
    else:
        amount = int(str(value).strip())
    if amount < 0:
        raise ValueError(value)
    return amount


def _text_error(value, label: str) -> str | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return f"{label} is required."
    if not isinstance(value, str):
        return f"{label} must be text."
    return None


def validate_student_inputs(
    name, cabin, hall, phone, fee_paid=0, fee_due=0, monthly_fee=0, join_date=None, left_date=None
) -> dict[str, str]:
    errors: dict[str, str] = {}
    for field, value, label in (
        ("name", name, "Student name"),
        ("cabin", cabin, "Cabin number"),
        ("hall", hall, "Study hall"),
        ("phone", phone, "Phone number"),
    ):
        message = _text_error(value, label)
        if message:
            errors[field] = message
    for field, value in (("fee_paid", fee_paid), ("fee_due", fee_due), ("monthly_fee", monthly_fee)):
        try:
            parse_amount(value)
        except ValueError:
            errors[field] = f"{field} must be a non-negative whole number."
    for field, value in (("join_date", join_date), ("left_date", left_date)):
        try:
            to_iso(value)
        except ValueError:
            errors[field] = f"{field} must be a valid ISO date (YYYY-MM-DD)."
    return errors


def validate_hall_inputs(name, capacity, location) -> dict[str, str]:
    errors: dict[str, str] = {}
    for field, value, label in (("name", name, "Hall name"), ("location", location, "Location")):
        message = _text_error(value, label)
        if message:
            errors[field] = message
    try:
        if int(str(capacity).strip()) <= 0:
            errors["capacity"] = "Capacity must be a positive whole number."
    except ValueError:
        errors["capacity"] = "Capacity must be a positive whole number."
    return errors


def students_to_csv_bytes(students: list[Student]) -> bytes:
    df = pd.DataFrame([{c: getattr(s, c) for c in STUDENT_COLUMNS} for s in students], columns=STUDENT_COLUMNS)
    return df.to_csv(index=False).encode("utf-8")


def fee_report_to_frame(rows: list[HallCollection]) -> pd.DataFrame:
    df = pd.DataFrame(
        [
            {
                "hall": r.hall,
                "total_students": r.total_students,
                "fees_collected": r.fees_collected,
                "fees_pending": r.fees_pending,
                "total_fee_amount": r.total_fee_amount,
                "collection_rate": r.collection_rate_label,
            }
            for r in rows
        ],
        columns=FEE_REPORT_COLUMNS,
    )
    return df


def fee_report_to_csv_bytes(rows: list[HallCollection]) -> bytes:
    return fee_report_to_frame(rows).to_csv(index=False).encode("utf-8")


def insert_sample_data(store) -> None:
    """
    Insert 2 halls (unless they exist) and 3 students
    (adds new students each run).
    """
    import halls
    import students

    today = date.today()

    existing = {h.name for h in halls.list_halls(store)}
    for name, capacity, location in (("Hall A", 40, "Ground floor"), ("Hall B", 25, "First floor")):
        if name not in existing:
            halls.create_hall(store, name, capacity, location, description="Sample hall")

    # Student 1: fully paid, never accrued
    students.create_student(
        store, "Ravi Kumar", "A-01", "Hall A", "9000000001",
        fee_paid=1500, fee_due=0, monthly_fee=1500, join_date=today.isoformat(),
    )
    # Student 2: owes one month, joined last month
    students.create_student(
        store, "Sneha Patil", "A-02", "Hall A", "9000000002",
        fee_paid=0, fee_due=1200, monthly_fee=1200, join_date=add_months(today, -1).isoformat(),
    )
    # Student 3: left the hall two weeks ago
    sid = students.create_student(
        store, "Arjun Mehta", "B-01", "Hall B", "9000000003",
        fee_paid=2000, fee_due=500, monthly_fee=1000, join_date=add_months(today, -3).isoformat(),
    )
    students.mark_left(store, sid, today - timedelta(days=14))
