"""
students.py
Student records: create/update/delete, lookups, leave and reactivate.
"""

from __future__ import annotations

import logging
from datetime import date

import utils
from db import Database
from errors import NotFound, ValidationError
from models import Student

logger = logging.getLogger(__name__)


def get_student(store: Database, student_id: int) -> Student:
    row = store.fetch_one("SELECT * FROM students WHERE id = ?", (student_id,))
    if not row:
        raise NotFound("Student", student_id)
    return Student.from_row(row)


def list_students(store: Database) -> list[Student]:
    rows = store.fetch_all("SELECT * FROM students ORDER BY created_at DESC, id DESC")
    return [Student.from_row(r) for r in rows]


def recent_students(store: Database, limit: int = 5) -> list[Student]:
    rows = store.fetch_all("SELECT * FROM students ORDER BY created_at DESC, id DESC LIMIT ?", (limit,))
    return [Student.from_row(r) for r in rows]


def create_student(
    store: Database,
    name: str,
    cabin: str,
    hall: str,
    phone: str,
    fee_paid=0,
    fee_due=0,
    monthly_fee=0,
    join_date=None,
) -> int:
    errors = utils.validate_student_inputs(name, cabin, hall, phone, fee_paid, fee_due, monthly_fee, join_date)
    if errors:
        raise ValidationError(errors)

    paid = utils.parse_amount(fee_paid)
    due = utils.parse_amount(fee_due)
    monthly = utils.parse_amount(monthly_fee)
    joined = utils.to_iso(join_date) or utils.today_iso()
    status = utils.derive_status(due)

    student_id = store.execute(
        """
        INSERT INTO students(name, cabin, hall, phone, fee_paid, fee_due, status, join_date, monthly_fee)
        VALUES(?,?,?,?,?,?,?,?,?)
        """,
        (name.strip(), cabin.strip(), hall.strip(), phone.strip(), paid, due, status, joined, monthly),
    )
    logger.info("Student %s added to %s (cabin %s), status %s", student_id, hall.strip(), cabin.strip(), status)
    return student_id


def update_student(
    store: Database,
    student_id: int,
    name: str,
    cabin: str,
    hall: str,
    phone: str,
    fee_paid,
    fee_due,
    monthly_fee=0,
    join_date=None,
    left_date=None,
) -> None:
    """
    Replace the editable fields of a student. fee_paid and fee_due must be
    given; join_date=None keeps the stored join date and left_date=None
    marks the student active. Status follows the new fee_due.
    """
    errors = utils.validate_student_inputs(
        name, cabin, hall, phone, fee_paid, fee_due, monthly_fee, join_date, left_date
    )
    if fee_paid is None:
        errors["fee_paid"] = "fee_paid is required."
    if fee_due is None:
        errors["fee_due"] = "fee_due is required."
    if errors:
        raise ValidationError(errors)

    due = utils.parse_amount(fee_due)
    status = utils.derive_status(due)
    changed = store.execute_rowcount(
        """
        UPDATE students
        SET name=?, cabin=?, hall=?, phone=?, fee_paid=?, fee_due=?,
            status=?, monthly_fee=?, join_date=COALESCE(?, join_date), left_date=?
        WHERE id=?
        """,
        (
            name.strip(), cabin.strip(), hall.strip(), phone.strip(),
            utils.parse_amount(fee_paid), due, status, utils.parse_amount(monthly_fee),
            utils.to_iso(join_date), utils.to_iso(left_date), student_id,
        ),
    )
    if changed == 0:
        raise NotFound("Student", student_id)
    logger.info("Student %s updated, status %s", student_id, status)


def delete_student(store: Database, student_id: int) -> None:
    changed = store.execute_rowcount("DELETE FROM students WHERE id = ?", (student_id,))
    if changed == 0:
        raise NotFound("Student", student_id)
    logger.info("Student %s deleted", student_id)


# ---------- Lifecycle ----------

def mark_left(store: Database, student_id: int, left_date: date | str | None = None) -> str:
    """
    Mark a student as departed (today unless a date is given).
    Fees and status are untouched; accrual skips the student from now on.
    """
    try:
        left = utils.to_iso(left_date) or utils.today_iso()
    except ValueError:
        raise ValidationError({"left_date": "left_date must be a valid ISO date (YYYY-MM-DD)."})

    changed = store.execute_rowcount("UPDATE students SET left_date = ? WHERE id = ?", (left, student_id))
    if changed == 0:
        raise NotFound("Student", student_id)
    logger.info("Student %s marked as left on %s", student_id, left)
    return left


def reactivate(store: Database, student_id: int) -> None:
    # last_fee_calculated_date is kept, so the departed interval is not back-billed
    changed = store.execute_rowcount("UPDATE students SET left_date = NULL WHERE id = ?", (student_id,))
    if changed == 0:
        raise NotFound("Student", student_id)
    logger.info("Student %s reactivated", student_id)
